from __future__ import annotations

import asyncio
from typing import Any, Callable, Dict, List, Optional

import requests
from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse
from pydantic import BaseModel, Field

from fintrack import __version__
from fintrack.api.client import ApiError, NetworkError, UnauthorizedError
from fintrack.app import ClientApp
from fintrack.auth import LoginCredentials, RegisterCredentials
from fintrack.compute.stats import aggregate_stats, category_distribution, category_name, search_transactions
from fintrack.config import Config, load_config
from fintrack.models import EXPENSE, INCOME
from fintrack.web.guard import RouteGuardMiddleware, is_matched


def _debug(msg: str) -> None:
    print(f"[web] {msg}")


SessionFactory = Callable[[], requests.Session]


# -----------------------------
# Request bodies
# -----------------------------


class LoginRequest(BaseModel):
    email: str
    password: str


class RegisterRequest(BaseModel):
    name: str
    email: str
    password: str


class CategoryRequest(BaseModel):
    name: str
    type: str = EXPENSE  # expense|income


class TransactionRequest(BaseModel):
    amount: float = Field(gt=0, allow_inf_nan=False)
    type: str
    date: str
    categoryId: int
    note: str = ""


class TransactionUpdateRequest(BaseModel):
    amount: Optional[float] = Field(None, gt=0, allow_inf_nan=False)
    type: Optional[str] = None
    date: Optional[str] = None
    categoryId: Optional[int] = None
    note: Optional[str] = None


class SuggestionRequest(BaseModel):
    period: str


# -----------------------------
# Helpers
# -----------------------------


def _set_session_cookie(response: Any, cfg: Config, token: str) -> None:
    response.set_cookie(
        key=cfg.AUTH_COOKIE_NAME,
        value=token,
        httponly=True,
        samesite="lax",
        path="/",
    )


def _session_expired(cfg: Config) -> RedirectResponse:
    """Data-layer fallback for a cookie the guard admitted but the backend rejected."""
    response = RedirectResponse(cfg.LOGIN_PATH, status_code=303)
    response.delete_cookie(key=cfg.AUTH_COOKIE_NAME, path="/")
    return response


def _bad_request(e: ValueError) -> HTTPException:
    return HTTPException(status_code=400, detail=str(e))


def create_app(cfg: Optional[Config] = None, *, session_factory: Optional[SessionFactory] = None) -> FastAPI:
    cfg = cfg or load_config()
    app = FastAPI(title="Finance Tracker Web", version=__version__)
    app.state.cfg = cfg
    app.state.session_factory = session_factory or requests.Session

    app.add_middleware(RouteGuardMiddleware, cfg=cfg)

    # CORS is only needed when the pages are consumed from another origin in development.
    _cors_origins = [o.strip() for o in (cfg.CORS_ALLOW_ORIGINS or "").split(",") if o.strip()]
    if _cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=_cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    def get_client(request: Request) -> ClientApp:
        """One client per browser request, carrying that browser's session cookie."""
        token = request.cookies.get(cfg.AUTH_COOKIE_NAME)
        return ClientApp(
            cfg,
            session=app.state.session_factory(),
            cookies={cfg.AUTH_COOKIE_NAME: token} if token else None,
        )

    # -----------------------------
    # Error mapping
    # -----------------------------

    @app.exception_handler(UnauthorizedError)
    async def _on_unauthorized(request: Request, exc: UnauthorizedError):
        if is_matched(request.url.path, cfg):
            _debug(f"session rejected by backend on {request.url.path}; redirecting to login")
            return _session_expired(cfg)
        return JSONResponse({"error": exc.message}, status_code=401)

    @app.exception_handler(NetworkError)
    async def _on_network_error(request: Request, exc: NetworkError):
        return JSONResponse({"error": exc.message}, status_code=503)

    @app.exception_handler(ApiError)
    async def _on_api_error(request: Request, exc: ApiError):
        status = exc.status if exc.status and exc.status >= 400 else 502
        return JSONResponse({"error": exc.message}, status_code=status)

    # -----------------------------
    # Health + landing
    # -----------------------------

    @app.get("/health")
    def health() -> Dict[str, Any]:
        return {"status": "ok"}

    @app.get("/")
    def home(request: Request) -> RedirectResponse:
        if request.cookies.get(cfg.AUTH_COOKIE_NAME):
            return RedirectResponse(cfg.DASHBOARD_PATH, status_code=307)
        return RedirectResponse(cfg.LOGIN_PATH, status_code=307)

    # -----------------------------
    # Auth pages
    # -----------------------------

    @app.get(cfg.LOGIN_PATH)
    def login_page() -> Dict[str, Any]:
        return {"page": "login", "fields": ["email", "password"], "register": cfg.REGISTER_PATH}

    @app.get(cfg.REGISTER_PATH)
    def register_page() -> Dict[str, Any]:
        return {"page": "register", "fields": ["name", "email", "password"], "login": cfg.LOGIN_PATH}

    @app.post(cfg.LOGIN_PATH)
    async def login(payload: LoginRequest, client: ClientApp = Depends(get_client)):
        state = await client.store.login(LoginCredentials(email=payload.email, password=payload.password))
        if not state.is_authenticated or state.user is None:
            return JSONResponse({"error": state.error}, status_code=401)

        response = JSONResponse({"user": state.user.to_dict(), "redirect": cfg.DASHBOARD_PATH})
        token = client.api.credential()
        if token:
            _set_session_cookie(response, cfg, token)
        return response

    @app.post(cfg.REGISTER_PATH)
    async def register(payload: RegisterRequest, client: ClientApp = Depends(get_client)):
        state = await client.store.register(
            RegisterCredentials(name=payload.name, email=payload.email, password=payload.password)
        )
        if not state.is_authenticated or state.user is None:
            return JSONResponse({"error": state.error}, status_code=400)

        response = JSONResponse({"user": state.user.to_dict(), "redirect": cfg.DASHBOARD_PATH})
        token = client.api.credential()
        if token:
            _set_session_cookie(response, cfg, token)
        return response

    @app.post("/logout")
    async def logout(client: ClientApp = Depends(get_client)):
        await client.store.logout()
        response = JSONResponse({"redirect": cfg.LOGIN_PATH})
        response.delete_cookie(key=cfg.AUTH_COOKIE_NAME, path="/")
        return response

    # -----------------------------
    # Dashboard
    # -----------------------------

    @app.get(cfg.DASHBOARD_PATH)
    async def dashboard(client: ClientApp = Depends(get_client)):
        # Only a rejected session ends it here; NetworkError/ApiError go to the handlers
        # above and leave the cookie alone.
        try:
            user = await asyncio.to_thread(client.auth.me)
        except UnauthorizedError:
            return _session_expired(cfg)
        client.store.set_credentials(user)

        stats = await asyncio.to_thread(client.transactions.stats)
        categories = await asyncio.to_thread(client.categories.list)
        dist = category_distribution(categories)
        return {
            "user": user.to_dict(),
            "stats": stats.to_dict(),
            "distribution": {
                kind: [{"name": name, "value": str(total)} for name, total in pairs]
                for kind, pairs in dist.items()
            },
        }

    # -----------------------------
    # Transactions
    # -----------------------------

    @app.get(f"{cfg.DASHBOARD_PATH}/transactions")
    def transactions_page(
        type: str = Query("all"),
        q: str = Query(""),
        start_date: Optional[str] = Query(None, alias="startDate"),
        end_date: Optional[str] = Query(None, alias="endDate"),
        client: ClientApp = Depends(get_client),
    ) -> Dict[str, Any]:
        kind = (type or "all").strip().lower()
        if kind not in ("all", INCOME, EXPENSE):
            raise HTTPException(status_code=400, detail="invalid_type")

        rows = client.transactions.list(
            type=None if kind == "all" else kind,
            start_date=start_date,
            end_date=end_date,
        )
        categories = client.categories.list()
        found = search_transactions(rows, q, categories=categories, type=kind)

        items: List[Dict[str, Any]] = []
        for t in found:
            d = t.to_dict()
            d["categoryName"] = category_name(t.category_id, categories)
            items.append(d)

        return {
            "type": kind,
            "q": q,
            "transactions": items,
            "summary": aggregate_stats(found).to_dict(),
        }

    @app.post(f"{cfg.DASHBOARD_PATH}/transactions", status_code=201)
    def create_transaction(payload: TransactionRequest, client: ClientApp = Depends(get_client)) -> Dict[str, Any]:
        try:
            t = client.transactions.create(
                amount=payload.amount,
                type=payload.type,
                date=payload.date,
                category_id=payload.categoryId,
                note=payload.note,
            )
        except ValueError as e:
            raise _bad_request(e)
        return {"transaction": t.to_dict()}

    @app.put(f"{cfg.DASHBOARD_PATH}/transactions/{{transaction_id}}")
    def update_transaction(
        transaction_id: int,
        payload: TransactionUpdateRequest,
        client: ClientApp = Depends(get_client),
    ) -> Dict[str, Any]:
        try:
            t = client.transactions.update(
                transaction_id,
                amount=payload.amount,
                type=payload.type,
                date=payload.date,
                note=payload.note,
                category_id=payload.categoryId,
            )
        except ValueError as e:
            raise _bad_request(e)
        return {"transaction": t.to_dict()}

    @app.delete(f"{cfg.DASHBOARD_PATH}/transactions/{{transaction_id}}")
    def delete_transaction(transaction_id: int, client: ClientApp = Depends(get_client)) -> Dict[str, Any]:
        client.transactions.delete(transaction_id)
        return {"ok": True}

    # -----------------------------
    # Categories
    # -----------------------------

    @app.get(f"{cfg.DASHBOARD_PATH}/categories")
    def categories_page(client: ClientApp = Depends(get_client)) -> Dict[str, Any]:
        categories = client.categories.list()
        return {
            EXPENSE: [c.to_dict() for c in categories if c.type == EXPENSE],
            INCOME: [c.to_dict() for c in categories if c.type == INCOME],
        }

    @app.post(f"{cfg.DASHBOARD_PATH}/categories", status_code=201)
    def create_category(payload: CategoryRequest, client: ClientApp = Depends(get_client)) -> Dict[str, Any]:
        known = client.categories.list()
        try:
            c = client.categories.create(payload.name, payload.type, known=known)
        except ValueError as e:
            raise _bad_request(e)
        return {"category": c.to_dict()}

    @app.put(f"{cfg.DASHBOARD_PATH}/categories/{{category_id}}")
    def update_category(
        category_id: int,
        payload: CategoryRequest,
        client: ClientApp = Depends(get_client),
    ) -> Dict[str, Any]:
        try:
            c = client.categories.update(category_id, payload.name, payload.type)
        except ValueError as e:
            raise _bad_request(e)
        return {"category": c.to_dict()}

    @app.delete(f"{cfg.DASHBOARD_PATH}/categories/{{category_id}}")
    def delete_category(category_id: int, client: ClientApp = Depends(get_client)) -> Dict[str, Any]:
        return {"message": client.categories.delete(category_id)}

    # -----------------------------
    # AI features
    # -----------------------------

    @app.get(f"{cfg.DASHBOARD_PATH}/aifeatures")
    def aifeatures_page() -> Dict[str, Any]:
        return {"page": "aifeatures", "fields": ["period"]}

    @app.post(f"{cfg.DASHBOARD_PATH}/aifeatures")
    def ai_suggestions(payload: SuggestionRequest, client: ClientApp = Depends(get_client)) -> Dict[str, Any]:
        try:
            s = client.ai.get_suggestions(payload.period)
        except ValueError as e:
            raise _bad_request(e)
        return {"period": s.period, "suggestions": s.suggestions}

    return app


app = create_app()
