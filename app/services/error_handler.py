"""
Global error handling.
Uncaught exceptions become a JSON 500 and trigger a best-effort alert email.
"""
from datetime import datetime, timezone
from typing import Callable

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.concurrency import run_in_threadpool
import structlog

from . import email_alerts


log = structlog.get_logger(__name__)


def classify_error(error: BaseException) -> str:
    """Alert kind for ``error``: database|authentication|payroll|api."""
    if isinstance(error, SQLAlchemyError):
        return "database"
    message = str(error).lower()
    if "database" in message or "connection" in message:
        return "database"
    if "auth" in message:
        return "authentication"
    if "payroll" in message:
        return "payroll"
    return "api"


def dispatch_alert(error: BaseException, endpoint: str, user_id=None) -> bool:
    kind = classify_error(error)
    senders: dict = {
        "database": lambda: email_alerts.send_database_error(error, endpoint),
        "authentication": lambda: email_alerts.send_authentication_error(error, user_id),
        "payroll": lambda: email_alerts.send_payroll_error(error, endpoint),
        "api": lambda: email_alerts.send_api_error(error, endpoint, user_id),
    }
    send: Callable[[], bool] = senders[kind]
    return send()


def _error_body(request: Request, message: str) -> dict:
    return {
        "error": message,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "path": request.url.path,
    }


async def unhandled_exception_handler(request: Request, exc: Exception):
    endpoint = f"{request.method} {request.url.path}"
    log.error("unhandled_exception", endpoint=endpoint, error=str(exc), exc_info=exc)
    user_id = getattr(request.state, "user_id", None)
    await run_in_threadpool(dispatch_alert, exc, endpoint, user_id)
    return JSONResponse(status_code=500, content=_error_body(request, "Internal Server Error"))


async def server_http_exception_handler(request: Request, exc: HTTPException):
    """Pass HTTPException through as FastAPI would, alerting on 5xx."""
    if exc.status_code >= 500:
        endpoint = f"{request.method} {request.url.path}"
        log.error("server_error_response", endpoint=endpoint, status=exc.status_code, detail=exc.detail)
        await run_in_threadpool(email_alerts.send_system_error, exc, endpoint)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail}, headers=getattr(exc, "headers", None))


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(HTTPException, server_http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
