import logging
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from hub.config import settings
from hub.modules.auth import routes as auth_routes
from hub.modules.users import routes as users_routes
from hub.modules.sectors import routes as sectors_routes
from hub.modules.banners import routes as banners_routes
from hub.modules.gallery import routes as gallery_routes
from hub.modules.media import routes as media_routes
from hub.modules.content import routes as content_routes
from hub.modules.general_news import routes as general_news_routes
from hub.modules.teams import routes as teams_routes
from hub.modules.collections import routes as collections_routes
from hub.modules.catalogs import routes as catalogs_routes
from hub.modules.notifications import routes as notifications_routes
from hub.modules.dashboard import routes as dashboard_routes

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)

limiter = Limiter(key_func=get_remote_address, default_limits=[settings.rate_limit])
app = FastAPI(
    title=settings.app_name,
    debug=settings.debug,
    redirect_slashes=False,
)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail}, headers=getattr(exc, "headers", None))


def _validation_message(err: dict) -> str:
    ctx_error = (err.get("ctx") or {}).get("error")
    if ctx_error is not None:
        return str(ctx_error)
    return err.get("msg", "Dados inválidos")


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = _validation_message(errors[0]) if errors else "Dados inválidos"
    details = [
        {"field": ".".join(str(part) for part in err.get("loc", ())[1:]), "message": _validation_message(err)}
        for err in errors
    ]
    return JSONResponse(status_code=400, content={"error": message, "details": details})


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled exception: %s", exc)
    if settings.is_production:
        return JSONResponse(status_code=500, content={"error": "Erro interno do servidor"})
    return JSONResponse(status_code=500, content={"error": str(exc)})


class SecurityHeadersMiddleware:
    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        async def send_with_headers(message):
            if message["type"] == "http.response.start":
                message.setdefault("headers", [])
                message["headers"].extend([
                    (b"X-Content-Type-Options", b"nosniff"),
                    (b"X-Frame-Options", b"DENY"),
                    (b"X-XSS-Protection", b"1; mode=block"),
                ])
            await send(message)

        await self.app(scope, receive, send_with_headers)


app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins_list(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

API_PREFIX = "/api"

for router in (
    auth_routes.router,
    users_routes.router,
    sectors_routes.router,
    banners_routes.router,
    gallery_routes.router,
    media_routes.sector_router,
    media_routes.subsector_router,
    media_routes.dashboard_video_router,
    *content_routes.routers,
    general_news_routes.router,
    teams_routes.sector_router,
    teams_routes.subsector_router,
    collections_routes.router,
    *catalogs_routes.routers,
    notifications_routes.router,
    dashboard_routes.router,
):
    app.include_router(router, prefix=API_PREFIX)


@app.on_event("startup")
async def startup_event():
    logger.info(f"{settings.app_name} startup ({settings.environment})")
    if not settings.s3_enabled:
        logger.info("S3 mirror disabled, uploads go to Supabase Storage only")


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Application shutdown")


@app.get("/")
async def root():
    return {"message": "Welcome to cresol-hub-backend", "status": "healthy"}


@app.get("/health")
@limiter.exempt
async def health():
    return {"status": "healthy"}


@app.get("/ready")
@limiter.exempt
async def ready():
    """Readiness check."""
    return {"status": "ready"}
