import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from starlette.middleware.sessions import SessionMiddleware
from starlette.middleware.base import BaseHTTPMiddleware
from diagtree.core import config
from diagtree.services.tree_store import TreeStore
from diagtree.services.walk_service import WalkSessionService
from diagtree.routers import diagnose

if config.LOG_LEVEL != "NONE":
    logging.basicConfig(
        level=config.LOG_LEVEL,
        format="[%(asctime)s] [%(levelname)s] %(name)s: %(message)s",
    )

logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Serving {len(app.state.tree_store.trees)} diagnostic trees from {app.state.tree_store.trees_dir}")
    yield

app = FastAPI(lifespan=lifespan)

# Session Middleware
# We enable https_only if the origin starts with https
https_only = config.ORIGIN.startswith("https")
app.add_middleware(
    SessionMiddleware,
    secret_key=config.SESSION_SECRET,
    session_cookie="diagtree_session",
    same_site="lax",
    https_only=https_only
)

# Security Headers Middleware
class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Cache-Control"] = "no-store"
        if https_only:
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        # JSON only, nothing to load
        response.headers["Content-Security-Policy"] = "default-src 'none'; frame-ancestors 'none'"
        return response

app.add_middleware(SecurityHeadersMiddleware)

# Services
tree_store = TreeStore(config.TREES_DIR, validate_on_load=config.VALIDATE_ON_LOAD)
walk_service = WalkSessionService(tree_store, max_sessions=config.MAX_SESSIONS)

# App State
app.state.tree_store = tree_store
app.state.walk_service = walk_service

# Include Routers
app.include_router(diagnose.router, prefix="/api/diagnose")

@app.get("/health", include_in_schema=False)
async def health():
    return {"status": "ok", "trees": len(app.state.tree_store.trees)}

if __name__ == "__main__":
    import uvicorn
    import argparse

    parser = argparse.ArgumentParser(description="Run the diagnostic tree service")
    parser.add_argument("--port", type=int, default=8000, help="Port to run the service on")
    parser.add_argument("--host", type=str, default="0.0.0.0", help="Host to bind to")
    args = parser.parse_args()

    uvicorn.run(app, host=args.host, port=args.port)
