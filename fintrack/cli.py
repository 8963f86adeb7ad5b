"""Command-line front end for the finance tracker.

Usage:
  fintrack login --email alice@example.com --password '...'
  fintrack whoami
  fintrack categories add --name Groceries --type expense
  fintrack transactions add --amount 12.50 --type expense --category 3 --note lunch
  fintrack transactions list --type expense --search lunch
  fintrack stats
  fintrack suggest --period 2025-03
  fintrack logout

The backend session cookie is kept in FINTRACK_COOKIE_JAR between runs.
"""

from __future__ import annotations

import argparse
import asyncio
import os
import sys
from http.cookiejar import LWPCookieJar
from typing import List, Optional

from fintrack.api.client import ApiError
from fintrack.app import ClientApp
from fintrack.auth import LoginCredentials, RegisterCredentials
from fintrack.compute.stats import aggregate_stats, category_name, search_transactions
from fintrack.config import Config, load_config
from fintrack.util.time import today_iso


def _load_jar(path: str) -> LWPCookieJar:
    jar = LWPCookieJar(path)
    if os.path.exists(path):
        # Session cookies carry no expiry; keep them anyway.
        jar.load(ignore_discard=True, ignore_expires=True)
    return jar


def _save_jar(jar: LWPCookieJar) -> None:
    jar.save(ignore_discard=True, ignore_expires=True)


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="fintrack")
    sub = ap.add_subparsers(dest="command", required=True)

    p = sub.add_parser("login")
    p.add_argument("--email", required=True)
    p.add_argument("--password", required=True)

    p = sub.add_parser("register")
    p.add_argument("--name", required=True)
    p.add_argument("--email", required=True)
    p.add_argument("--password", required=True)

    sub.add_parser("logout")
    sub.add_parser("whoami")

    p = sub.add_parser("categories")
    csub = p.add_subparsers(dest="action", required=True)
    csub.add_parser("list")
    c = csub.add_parser("add")
    c.add_argument("--name", required=True)
    c.add_argument("--type", choices=["expense", "income"], default="expense")
    c = csub.add_parser("rename")
    c.add_argument("id", type=int)
    c.add_argument("--name", required=True)
    c.add_argument("--type", choices=["expense", "income"], required=True)
    c = csub.add_parser("delete")
    c.add_argument("id", type=int)

    p = sub.add_parser("transactions")
    tsub = p.add_subparsers(dest="action", required=True)
    t = tsub.add_parser("list")
    t.add_argument("--type", choices=["all", "expense", "income"], default="all")
    t.add_argument("--search", default="")
    t.add_argument("--start-date")
    t.add_argument("--end-date")
    t = tsub.add_parser("add")
    t.add_argument("--amount", required=True)
    t.add_argument("--type", choices=["expense", "income"], required=True)
    t.add_argument("--category", type=int, required=True)
    t.add_argument("--date", default=None, help="YYYY-MM-DD (default: today)")
    t.add_argument("--note", default="")
    t = tsub.add_parser("update")
    t.add_argument("id", type=int)
    t.add_argument("--amount")
    t.add_argument("--type", choices=["expense", "income"])
    t.add_argument("--category", type=int)
    t.add_argument("--date")
    t.add_argument("--note")
    t = tsub.add_parser("delete")
    t.add_argument("id", type=int)

    p = sub.add_parser("stats")
    p.add_argument("--start-date")
    p.add_argument("--end-date")

    p = sub.add_parser("suggest")
    p.add_argument("--period", required=True, help="YYYY-MM or 'March 2025'")

    return ap


async def _auth_command(client: ClientApp, args: argparse.Namespace) -> int:
    store = client.store
    if args.command == "login":
        state = await store.login(LoginCredentials(email=args.email, password=args.password))
    elif args.command == "register":
        state = await store.register(RegisterCredentials(name=args.name, email=args.email, password=args.password))
    else:
        await store.logout()
        client.api.clear_credentials()
        print("Logged out.")
        return 0

    if not state.is_authenticated or state.user is None:
        print(state.error or "Authentication failed", file=sys.stderr)
        return 1
    print(f"Logged in as {state.user.name} <{state.user.email}>")
    return 0


def _run_command(client: ClientApp, args: argparse.Namespace) -> int:
    if args.command == "whoami":
        user = client.store.state.user
        if user is None:
            print("Not logged in.", file=sys.stderr)
            return 1
        print(f"{user.name} <{user.email}> (id={user.id})")
        return 0

    if args.command == "categories":
        svc = client.categories
        if args.action == "list":
            for c in svc.list():
                print(f"{c.id:>5}  {c.type:<8}  {c.name:<30}  {c.total_amount}")
        elif args.action == "add":
            c = svc.create(args.name, args.type, known=svc.list())
            print(f"Created category {c.id}: {c.name} ({c.type})")
        elif args.action == "rename":
            c = svc.update(args.id, args.name, args.type)
            print(f"Updated category {c.id}: {c.name} ({c.type})")
        else:
            print(svc.delete(args.id) or f"Deleted category {args.id}")
        return 0

    if args.command == "transactions":
        svc = client.transactions
        if args.action == "list":
            kind = None if args.type == "all" else args.type
            rows = svc.list(type=kind, start_date=args.start_date, end_date=args.end_date)
            categories = client.categories.list()
            found = search_transactions(rows, args.search, categories=categories, type=args.type)
            for t in found:
                print(
                    f"{t.id:>5}  {t.date[:10]}  {t.type:<8}  {t.amount:>12}  "
                    f"{category_name(t.category_id, categories):<20}  {t.note}"
                )
            s = aggregate_stats(found)
            print(f"income={s.total_income} expense={s.total_expense} balance={s.balance}")
        elif args.action == "add":
            t = svc.create(
                amount=args.amount,
                type=args.type,
                date=args.date or today_iso(),
                category_id=args.category,
                note=args.note,
            )
            print(f"Created transaction {t.id}")
        elif args.action == "update":
            t = svc.update(
                args.id,
                amount=args.amount,
                type=args.type,
                date=args.date,
                note=args.note,
                category_id=args.category,
            )
            print(f"Updated transaction {t.id}")
        else:
            svc.delete(args.id)
            print(f"Deleted transaction {args.id}")
        return 0

    if args.command == "stats":
        s = client.transactions.stats(start_date=args.start_date, end_date=args.end_date)
        print(f"Total income:  {s.total_income} ({s.income_count})")
        print(f"Total expense: {s.total_expense} ({s.expense_count})")
        print(f"Balance:       {s.balance}")
        return 0

    if args.command == "suggest":
        s = client.ai.get_suggestions(args.period)
        print(f"AI Analysis for {s.period}\n")
        print(s.suggestions)
        return 0

    raise ValueError(f"unknown command: {args.command}")


async def run(args: argparse.Namespace, cfg: Config, client: Optional[ClientApp] = None) -> int:
    if client is None:
        client = ClientApp(
            cfg,
            cookies=_load_jar(cfg.COOKIE_JAR_PATH),
            on_loading=lambda: print("Loading...", file=sys.stderr),
        )

    try:
        if args.command in ("login", "register", "logout"):
            return await _auth_command(client, args)

        state = await client.bootstrap.restore()
        if not state.is_authenticated:
            print("Not logged in.", file=sys.stderr)
            return 1

        try:
            return await asyncio.to_thread(_run_command, client, args)
        except (ApiError, ValueError) as e:
            print(getattr(e, "message", None) or str(e), file=sys.stderr)
            return 1
    finally:
        jar = client.api.session.cookies
        if isinstance(jar, LWPCookieJar):
            _save_jar(jar)


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    cfg = load_config()
    raise SystemExit(asyncio.run(run(args, cfg)))


if __name__ == "__main__":
    main()
