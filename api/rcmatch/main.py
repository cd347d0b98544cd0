import logging
import time
import uuid

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import OperationalError

from .config import ADMIN_BOOTSTRAP_PASSWORD, ADMIN_BOOTSTRAP_USERNAME, CORS_ALLOWED_ORIGINS, DATABASE_URL, DEV_MODE
from .database import Base, build_engine, build_session_factory
from .errors import CoreError
from .routes import include_routers
from .services.core import MatchCore
from . import models  # noqa: F401  (registers tables on Base.metadata)

logger = logging.getLogger(__name__)

app = FastAPI(title="RC Match API")
include_routers(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ALLOWED_ORIGINS,
    allow_credentials=True,  # Required for cookie-based auth
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(CoreError)
def core_error_handler(request: Request, exc: CoreError) -> JSONResponse:
    trace_id = str(uuid.uuid4())
    detail = {"message": exc.detail, "trace_id": trace_id}
    if DEV_MODE:
        detail["reason"] = exc.reason
    if exc.status_code >= 500:
        logger.warning(f"[store] {request.method} {request.url.path} -> {exc.reason} trace_id={trace_id}")
    else:
        logger.debug(f"[core] {request.method} {request.url.path} -> {exc.reason}")
    return JSONResponse(status_code=exc.status_code, content={"detail": detail})


def wait_for_db(engine, max_attempts: int = 20, delay_seconds: float = 1.5) -> None:
    last_err: Exception | None = None
    for _ in range(max_attempts):
        try:
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return
        except OperationalError as exc:
            last_err = exc
            time.sleep(delay_seconds)
    if last_err:
        raise last_err


def build_core(database_url: str = DATABASE_URL) -> MatchCore:
    engine = build_engine(database_url)
    wait_for_db(engine)
    Base.metadata.create_all(engine)
    return MatchCore(build_session_factory(engine))


@app.on_event("startup")
def on_startup() -> None:
    if getattr(app.state, "core", None) is None:
        app.state.core = build_core()
    if ADMIN_BOOTSTRAP_PASSWORD:
        admin = app.state.core.ensure_admin(ADMIN_BOOTSTRAP_USERNAME, ADMIN_BOOTSTRAP_PASSWORD)
        logger.info("[startup] admin profile ready username=%s", admin["username"])


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
