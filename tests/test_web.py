from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from fintrack.config import Config
from fintrack.web.server import create_app

from fakes import FakeBackend


def _client(cfg: Config, backend: FakeBackend, **kwargs) -> TestClient:
    app = create_app(cfg, session_factory=backend.session)
    return TestClient(app, follow_redirects=False, **kwargs)


@pytest.fixture
def authed(cfg: Config, backend: FakeBackend) -> TestClient:
    backend.add_user()
    token = backend.issue_token("alice@example.com")
    return _client(cfg, backend, cookies={"token": token})


def test_health(cfg: Config, backend: FakeBackend) -> None:
    assert _client(cfg, backend).get("/health").json() == {"status": "ok"}


def test_root_redirects_by_cookie(cfg: Config, backend: FakeBackend) -> None:
    assert _client(cfg, backend).get("/").headers["location"] == "/login"
    assert _client(cfg, backend, cookies={"token": "t"}).get("/").headers["location"] == "/dashboard"


def test_login_sets_session_cookie(cfg: Config, backend: FakeBackend) -> None:
    backend.add_user()
    client = _client(cfg, backend)

    r = client.post("/login", json={"email": "alice@example.com", "password": "secret123"})

    assert r.status_code == 200
    assert r.json()["redirect"] == "/dashboard"
    assert r.json()["user"]["name"] == "Alice"
    token = r.cookies.get("token")
    assert token in backend.tokens


def test_login_failure_reports_error_without_cookie(cfg: Config, backend: FakeBackend) -> None:
    backend.add_user()
    client = _client(cfg, backend)

    r = client.post("/login", json={"email": "alice@example.com", "password": "nope"})

    assert r.status_code == 401
    assert r.json() == {"error": "Invalid email or password"}
    assert "token" not in r.cookies


def test_register_then_dashboard(cfg: Config, backend: FakeBackend) -> None:
    client = _client(cfg, backend)

    r = client.post("/register", json={"name": "Bob", "email": "bob@example.com", "password": "hunter22"})
    assert r.status_code == 200

    d = client.get("/dashboard")
    assert d.status_code == 200
    assert d.json()["user"]["email"] == "bob@example.com"


def test_auth_pages_redirect_when_cookie_present(authed: TestClient) -> None:
    r = authed.get("/register")
    assert r.status_code == 307
    assert r.headers["location"] == "/dashboard"


def test_protected_page_without_cookie_redirects_to_login(cfg: Config, backend: FakeBackend) -> None:
    r = _client(cfg, backend).get("/dashboard/categories")
    assert r.status_code == 307
    assert r.headers["location"] == "/login"


def test_dashboard_view_model(authed: TestClient, backend: FakeBackend) -> None:
    food = backend.add_category("Food", "expense", total="40")
    pay = backend.add_category("Salary", "income", total="105")
    backend.add_transaction("100", "income", pay["id"])
    backend.add_transaction("40", "expense", food["id"])
    backend.add_transaction("5", "income", pay["id"])

    body = authed.get("/dashboard").json()

    assert body["user"]["name"] == "Alice"
    assert float(body["stats"]["totalIncome"]) == 105
    assert float(body["stats"]["balance"]) == 65
    assert body["distribution"]["expense"] == [{"name": "Food", "value": "40"}]


def test_stale_cookie_is_caught_at_data_layer(cfg: Config, backend: FakeBackend) -> None:
    client = _client(cfg, backend, cookies={"token": "expired"})

    r = client.get("/dashboard/transactions")

    assert r.status_code == 303
    assert r.headers["location"] == "/login"
    assert 'token=""' in r.headers["set-cookie"] or "Max-Age=0" in r.headers["set-cookie"]


def test_stale_cookie_on_dashboard_redirects(cfg: Config, backend: FakeBackend) -> None:
    r = _client(cfg, backend, cookies={"token": "expired"}).get("/dashboard")

    assert r.status_code == 303
    assert r.headers["location"] == "/login"


def test_transactions_page_filters_and_searches(authed: TestClient, backend: FakeBackend) -> None:
    food = backend.add_category("Food", "expense")
    pay = backend.add_category("Salary", "income")
    backend.add_transaction("12.50", "expense", food["id"], note="Lunch")
    backend.add_transaction("60", "expense", food["id"], note="Cinema")
    backend.add_transaction("3000", "income", pay["id"], note="March pay")

    body = authed.get("/dashboard/transactions", params={"type": "expense", "q": "lunch"}).json()

    assert [t["note"] for t in body["transactions"]] == ["Lunch"]
    assert body["transactions"][0]["categoryName"] == "Food"
    assert body["summary"]["totalExpense"] == "12.50"


def test_transactions_page_rejects_unknown_type(authed: TestClient) -> None:
    assert authed.get("/dashboard/transactions", params={"type": "gift"}).status_code == 400


def test_create_update_delete_transaction(authed: TestClient, backend: FakeBackend) -> None:
    food = backend.add_category("Food", "expense")

    r = authed.post(
        "/dashboard/transactions",
        json={"amount": 9.99, "type": "expense", "date": "2025-03-03", "categoryId": food["id"], "note": "snack"},
    )
    assert r.status_code == 201
    tid = r.json()["transaction"]["id"]

    r = authed.put(f"/dashboard/transactions/{tid}", json={"note": "coffee"})
    assert r.json()["transaction"]["note"] == "coffee"

    assert authed.delete(f"/dashboard/transactions/{tid}").json() == {"ok": True}
    assert backend.transactions == []


def test_duplicate_category_is_conflict(authed: TestClient, backend: FakeBackend) -> None:
    backend.add_category("Salary", "income")

    r = authed.post("/dashboard/categories", json={"name": "salary", "type": "expense"})

    assert r.status_code == 409
    assert r.json() == {"error": "Category already exists"}
    assert len(backend.categories) == 1


def test_categories_page_splits_by_type(authed: TestClient, backend: FakeBackend) -> None:
    backend.add_category("Food", "expense")
    backend.add_category("Salary", "income")

    body = authed.get("/dashboard/categories").json()

    assert [c["name"] for c in body["expense"]] == ["Food"]
    assert [c["name"] for c in body["income"]] == ["Salary"]


def test_blank_category_is_bad_request(authed: TestClient) -> None:
    r = authed.post("/dashboard/categories", json={"name": " ", "type": "expense"})
    assert r.status_code == 400


def test_ai_suggestions(authed: TestClient) -> None:
    r = authed.post("/dashboard/aifeatures", json={"period": "2025-03"})

    assert r.status_code == 200
    assert r.json() == {"period": "March 2025", "suggestions": "## Tips for March 2025"}


def test_backend_down_is_service_unavailable(authed: TestClient, backend: FakeBackend) -> None:
    backend.down = True

    r = authed.get("/dashboard/categories")

    assert r.status_code == 503
    assert "Unable to connect" in r.json()["error"]


def test_logout_clears_cookie_even_if_backend_fails(authed: TestClient, backend: FakeBackend) -> None:
    backend.logout_fails = True

    r = authed.post("/logout")

    assert r.status_code == 200
    assert r.json() == {"redirect": "/login"}
    assert "token=" in r.headers["set-cookie"]


def test_dashboard_outage_keeps_session_cookie(authed: TestClient, backend: FakeBackend) -> None:
    backend.down = True

    r = authed.get("/dashboard")

    assert r.status_code == 503
    assert "Unable to connect" in r.json()["error"]
    assert "set-cookie" not in r.headers


@pytest.mark.parametrize("amount", ["NaN", "Infinity", "-Infinity", 0, -3])
def test_transaction_amount_must_be_finite_and_positive(authed: TestClient, backend: FakeBackend, amount) -> None:
    food = backend.add_category("Food", "expense")

    r = authed.post(
        "/dashboard/transactions",
        json={"amount": amount, "type": "expense", "date": "2025-03-03", "categoryId": food["id"]},
    )

    assert r.status_code == 422
    assert backend.transactions == []
