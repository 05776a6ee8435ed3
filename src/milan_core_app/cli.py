from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from pathlib import Path
from time import perf_counter
from typing import Any, Sequence

from milan_client_sdk import ConfigError, load_config, reconcile_or_none
from milan_client_sdk.exceptions import ApiError

from .bootstrap import CoreApp
from .services.errors import ServiceError
from .ui.formatting import render_reconciliation

logger = logging.getLogger(__name__)


def _print(payload: Any) -> None:
    print(json.dumps(payload, indent=2, default=str))


def _day(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"expected YYYY-MM-DD, got {value!r}") from exc


def _amount(value: str) -> Decimal:
    try:
        return Decimal(value.replace(",", "").strip())
    except InvalidOperation as exc:
        raise argparse.ArgumentTypeError(f"expected an amount, got {value!r}") from exc


def _moment(value: str) -> datetime:
    try:
        return datetime.fromisoformat(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"expected YYYY-MM-DDTHH:MM, got {value!r}") from exc


def cmd_login(app: CoreApp, args: argparse.Namespace) -> int:
    if not app.login(args.username, args.password):
        _print({"error": "LOGIN_FAILED", "message": app.state.error_message})
        return 1
    user = app.state.session.user
    _print({"user": user.model_dump(mode="json") if user else None, "register_open": app.state.register_open})
    return 0


def cmd_logout(app: CoreApp, args: argparse.Namespace) -> int:
    app.logout()
    _print({"status": app.state.status_message})
    return 0


def cmd_summary(app: CoreApp, args: argparse.Namespace) -> int:
    summary = app.cash_closing_service.load_summary(args.date)
    _print({"date": args.date.isoformat(), "summary": summary.model_dump(mode="json", by_alias=True) if summary else None})
    return 0


def cmd_reconcile(app: CoreApp, args: argparse.Namespace) -> int:
    summary = app.cash_closing_service.load_summary(args.date)
    figures = reconcile_or_none(
        args.opening,
        summary,
        args.counted,
        tolerance=app.config.variance_tolerance,
        review_threshold=app.config.review_threshold,
    )
    if figures is None:
        _print({"date": args.date.isoformat(), "status": "no_data"})
        return 0
    _print({"date": args.date.isoformat(), "reconciliation": render_reconciliation(figures)})
    return 0


def cmd_close(app: CoreApp, args: argparse.Namespace) -> int:
    app.start()
    view = app.cash_closing_view(args.date, today=date.today())
    view.open()
    if args.opening is not None:
        view.set_opening_cash(args.opening)
    view.set_closing_cash(args.counted)
    view.set_notes(args.notes or "")
    started = perf_counter()
    result = view.submit()
    app.emit_result("cash_closing", "create", success=result["ok"], started=started, trace_id=result.get("trace_id"))
    if view.last_submission is not None:
        app.record_closing(view.last_submission)
    _print(result)
    return 0 if result["ok"] else 1


def cmd_history(app: CoreApp, args: argparse.Namespace) -> int:
    now = args.at or datetime.now()
    try:
        today = app.cash_closing_service.load_summary(now.date())
    except ServiceError as exc:
        logger.warning("history_today_summary_unavailable", extra={"error": exc.message})
        today = None
    view = app.closing_history_view()
    ok = view.load(
        now=now,
        date_from=args.date_from,
        date_to=args.date_to,
        current_sales=today.total_sales if today else 0,
    )
    _print(view.render())
    return 0 if ok else 1


def cmd_report(app: CoreApp, args: argparse.Namespace) -> int:
    path = app.cash_closing_service.download_report(args.date, Path(args.out))
    _print({"date": args.date.isoformat(), "path": str(path)})
    return 0


def cmd_session_active(app: CoreApp, args: argparse.Namespace) -> int:
    view = app.cash_session_view()
    ok = view.load()
    _print(view.render())
    return 0 if ok else 1


def cmd_session_open(app: CoreApp, args: argparse.Namespace) -> int:
    view = app.cash_session_view()
    view.load()
    result = view.open(args.opening, args.notes)
    _print(result)
    return 0 if result["ok"] else 1


def cmd_session_close(app: CoreApp, args: argparse.Namespace) -> int:
    view = app.cash_session_view()
    view.load()
    result = view.close(args.counted, args.notes)
    _print(result)
    return 0 if result["ok"] else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="milan-cash", description="Milan Fragancias cash closing CLI")
    parser.add_argument("--env-file", default=None)
    parser.add_argument("--verbose", action="store_true")
    subparsers = parser.add_subparsers(dest="command", required=True)

    login_parser = subparsers.add_parser("login")
    login_parser.add_argument("--username", required=True)
    login_parser.add_argument("--password", required=True)
    login_parser.set_defaults(func=cmd_login)

    logout_parser = subparsers.add_parser("logout")
    logout_parser.set_defaults(func=cmd_logout)

    summary_parser = subparsers.add_parser("summary")
    summary_parser.add_argument("--date", type=_day, default=date.today())
    summary_parser.set_defaults(func=cmd_summary)

    reconcile_parser = subparsers.add_parser("reconcile")
    reconcile_parser.add_argument("--date", type=_day, default=date.today())
    reconcile_parser.add_argument("--opening", type=_amount, default=Decimal("0"))
    reconcile_parser.add_argument("--counted", type=_amount, default=Decimal("0"))
    reconcile_parser.set_defaults(func=cmd_reconcile)

    close_parser = subparsers.add_parser("close")
    close_parser.add_argument("--date", type=_day, default=date.today())
    close_parser.add_argument("--opening", type=_amount, default=None)
    close_parser.add_argument("--counted", type=_amount, required=True)
    close_parser.add_argument("--notes", default=None)
    close_parser.set_defaults(func=cmd_close)

    history_parser = subparsers.add_parser("history")
    history_parser.add_argument("--from", dest="date_from", type=_day, default=None)
    history_parser.add_argument("--to", dest="date_to", type=_day, default=None)
    history_parser.add_argument("--at", type=_moment, default=None, help="evaluate alerts at this local time")
    history_parser.set_defaults(func=cmd_history)

    report_parser = subparsers.add_parser("report")
    report_parser.add_argument("--date", type=_day, default=date.today())
    report_parser.add_argument("--out", default=".")
    report_parser.set_defaults(func=cmd_report)

    session_parser = subparsers.add_parser("session")
    session_sub = session_parser.add_subparsers(dest="session_command", required=True)
    active_parser = session_sub.add_parser("active")
    active_parser.set_defaults(func=cmd_session_active)
    open_parser = session_sub.add_parser("open")
    open_parser.add_argument("--opening", type=_amount, required=True)
    open_parser.add_argument("--notes", default=None)
    open_parser.set_defaults(func=cmd_session_open)
    close_session_parser = session_sub.add_parser("close")
    close_session_parser.add_argument("--counted", type=_amount, required=True)
    close_session_parser.add_argument("--notes", default=None)
    close_session_parser.set_defaults(func=cmd_session_close)

    return parser


def main(argv: Sequence[str] | None = None, app: CoreApp | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    try:
        app = app or CoreApp(load_config(args.env_file))
        return args.func(app, args)
    except ConfigError as exc:
        _print({"error": "CONFIG_ERROR", "message": str(exc)})
        return 2
    except ServiceError as exc:
        _print({"error": exc.code or "SERVICE_ERROR", "message": exc.message, "trace_id": exc.trace_id})
        return 1
    except ApiError as exc:
        _print({"error": exc.code, "message": exc.message, "trace_id": exc.trace_id})
        return 1


if __name__ == "__main__":
    sys.exit(main())
