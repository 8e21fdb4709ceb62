import os
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_fastapi_instrumentator import Instrumentator
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from sqlalchemy import inspect
import structlog

from .config import settings
from .db import Base, engine, SessionLocal
from .logging import setup_logging, RequestContextMiddleware
from .services.error_handler import register_error_handlers
from .storage import Storage
from .auth.router import router as auth_router
from .routes.dashboard import router as dashboard_router
from .routes.employees import router as employees_router
from .routes.leave import router as leave_router
from .routes.substitutes import router as substitutes_router
from .routes.payroll import router as payroll_router
from .routes.documents import router as documents_router
from .routes.onboarding import router as onboarding_router
from .routes.time_cards import router as time_cards_router
from .routes.substitute_time_cards import router as substitute_time_cards_router
from .routes.extra_pay import router as extra_pay_router
from .routes.letters import router as letters_router
from .routes.signature_requests import router as signature_requests_router
from .routes.paf import router as paf_router
from .routes.employee_accounts import router as employee_accounts_router
from .routes.retirees import router as retirees_router
from .routes.system import router as system_router


log = structlog.get_logger(__name__)


def init_db() -> None:
    """Create missing tables and seed the default leave types."""
    # Ensure local SQLite directory exists
    if settings.database_url.startswith("sqlite:///./"):
        os.makedirs("var", exist_ok=True)
    existing = set(inspect(engine).get_table_names())
    missing = set(Base.metadata.tables.keys()) - existing
    if missing:
        log.info("creating_tables", count=len(missing))
        Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        added = Storage(db).ensure_default_leave_types()
        if added:
            log.info("leave_types_seeded", count=added)
    finally:
        db.close()


def create_app() -> FastAPI:
    setup_logging()
    app = FastAPI(title=settings.app_name)

    # Middlewares
    app.add_middleware(RequestContextMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    limiter = Limiter(key_func=get_remote_address, default_limits=[settings.rate_limit])
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)

    register_error_handlers(app)

    # Routers
    app.include_router(auth_router)
    app.include_router(dashboard_router)
    app.include_router(employees_router)
    app.include_router(leave_router)
    app.include_router(substitutes_router)
    app.include_router(payroll_router)
    app.include_router(documents_router)
    app.include_router(onboarding_router)
    app.include_router(time_cards_router)
    app.include_router(substitute_time_cards_router)
    app.include_router(extra_pay_router)
    app.include_router(letters_router)
    app.include_router(signature_requests_router)
    app.include_router(paf_router)
    app.include_router(employee_accounts_router)
    app.include_router(retirees_router)
    app.include_router(system_router)

    # Metrics
    Instrumentator().instrument(app).expose(app)

    @app.on_event("startup")
    def _startup():
        log.info("startup", environment=settings.environment)
        if settings.auto_create_db:
            init_db()

    return app


app = create_app()
