# ishanya/main.py
import logging
import uuid
from time import time as _now

from fastapi import FastAPI, Request
from starlette.middleware.sessions import SessionMiddleware
from starlette.responses import JSONResponse, RedirectResponse

from ishanya.core.config import settings
from ishanya.db.session import SessionLocal, init_db

# Routers
from ishanya.routers import health, auth, centers, records, tables, imports
from ishanya.routers import pending, tasks, reports, parent, overview

# Shared with auth.py so the two never drift
from ishanya.routers.auth import IDLE_TIMEOUT_SEC as AUTH_IDLE_TIMEOUT_SEC
from ishanya.services.audit import write_audit

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
log = logging.getLogger("app")

app = FastAPI(title="Ishanya Portal")

# ---------------- Correlation-ID ----------------
@app.middleware("http")
async def add_correlation_id(request: Request, call_next):
    cid = request.headers.get("X-Correlation-ID") or str(uuid.uuid4())
    request.state.correlation_id = cid
    resp = await call_next(request)
    resp.headers["X-Correlation-ID"] = cid
    return resp

# ---------------- Idle timeout ----------------
MAX_IDLE_SECONDS = AUTH_IDLE_TIMEOUT_SEC  # 1h, from auth.py

WHITELIST_PREFIXES = (
    "/login", "/api/login",
    "/logout", "/api/logout",
    "/health", "/api/health",
    "/api/storage/signed",
    "/docs", "/openapi.json",
)

@app.middleware("http")
async def idle_timeout_middleware(request: Request, call_next):
    path = request.url.path
    if path.startswith(WHITELIST_PREFIXES) or "session" not in request.scope:
        return await call_next(request)

    sess = request.session
    if sess.get("uid"):
        now = int(_now())
        last = int(sess.get("_last_seen") or 0)
        if last and now - last > MAX_IDLE_SECONDS:
            sess.clear()
            # header lets the client show the "session expired" notice
            return JSONResponse(
                {"detail": "Session expired, please log in again."},
                status_code=401,
                headers={"X-Session-Expired": "1"},
            )
        sess["_last_seen"] = now

    return await call_next(request)

# ---------------- Session cookie ----------------
# added last so it wraps the middlewares above
app.add_middleware(
    SessionMiddleware,
    secret_key=settings.SESSION_SECRET,
    max_age=60 * 60 * 24 * 7,  # 7 days
    same_site="lax",
)

# ---------------- Global exception handler ----------------
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    log.exception("Unhandled error on %s %s", request.method, request.url.path)
    db = SessionLocal()
    try:
        write_audit(
            db,
            action="EXCEPTION",
            target_type="System",
            target_id=None,
            status="FAILURE",
            new_values={"path": request.url.path, "error": type(exc).__name__},
            request=request,
        )
        db.commit()
    except Exception:
        db.rollback()
        log.exception("Could not write the EXCEPTION audit row")
    finally:
        db.close()
    return JSONResponse(status_code=500, content={"detail": "An unexpected error occurred. Please try again."})

# ---------------- Mount routers ----------------
app.include_router(auth.router, tags=["Auth"])

app.include_router(health.router,   prefix="/api", tags=["Health"])
app.include_router(centers.router,  prefix="/api")
app.include_router(records.router,  prefix="/api")
app.include_router(tables.router,   prefix="/api")
app.include_router(imports.router,  prefix="/api")
app.include_router(pending.router,  prefix="/api")
app.include_router(tasks.router,    prefix="/api")
app.include_router(reports.router,  prefix="/api")
app.include_router(parent.router,   prefix="/api")
app.include_router(overview.router, prefix="/api")

# plain /health for probes (hidden from docs)
app.include_router(health.router, prefix="", include_in_schema=False)

# ---------------- Startup ----------------
@app.on_event("startup")
def startup():
    init_db()

# ---------------- Redirect "/" → API docs ----------------
@app.get("/", include_in_schema=False)
async def root():
    return RedirectResponse(url="/docs", status_code=307)
