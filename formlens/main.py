import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.routing import Mount

from formlens.auth import _get_token_store, router as auth_router
from formlens.config import get_settings, setup_logging
from formlens.exceptions import (
    AuthenticationError,
    FetchError,
    FormatError,
    IntegrationError,
    NotFoundError,
    RateLimitError,
)
from formlens.mcp_server import mcp
from formlens.models.common import ErrorResponse
from formlens.routers.forms import router as forms_router


# --- Localhost-only middleware ---

class LocalhostOnlyMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        client_host = request.client.host if request.client else None
        if client_host not in ("127.0.0.1", "::1", "localhost"):
            return _error(403, "forbidden", "Localhost access only")
        return await call_next(request)


def _error(status_code: int, error_code: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error_code=error_code, message=message).model_dump(),
    )


# --- FastAPI app ---

api = FastAPI(title="Formlens", version="0.1.0")
api.include_router(auth_router)
api.include_router(forms_router)


@api.get("/api/status")
def api_status() -> dict:
    accounts = _get_token_store().list_accounts()
    return {"forms": {"authenticated_accounts": accounts, "ready": len(accounts) > 0}}


# --- Exception handlers ---

@api.exception_handler(AuthenticationError)
async def auth_error_handler(request: Request, exc: AuthenticationError):
    return _error(401, "auth_error", str(exc))


@api.exception_handler(IntegrationError)
async def integration_error_handler(request: Request, exc: IntegrationError):
    return _error(500, "integration_error", str(exc))


@api.exception_handler(RateLimitError)
async def rate_limit_error_handler(request: Request, exc: RateLimitError):
    return _error(429, "rate_limit", str(exc))


@api.exception_handler(NotFoundError)
async def not_found_error_handler(request: Request, exc: NotFoundError):
    return _error(404, "not_found", str(exc))


@api.exception_handler(FormatError)
async def format_error_handler(request: Request, exc: FormatError):
    return _error(400, "format_error", str(exc))


@api.exception_handler(FetchError)
async def fetch_error_handler(request: Request, exc: FetchError):
    if isinstance(exc.cause, AuthenticationError):
        return _error(401, "auth_error", str(exc))
    if isinstance(exc.cause, RateLimitError):
        return _error(429, "rate_limit", str(exc))
    return _error(502, "fetch_error", str(exc))


# --- Starlette root app ---

mcp_app = mcp.http_app(path="/", stateless_http=True)

app = Starlette(
    middleware=[Middleware(LocalhostOnlyMiddleware)],
    routes=[
        Mount("/mcp", app=mcp_app),
        Mount("/", app=api),
    ],
    lifespan=mcp_app.lifespan,
)


def run():
    settings = get_settings()
    setup_logging(settings.log_level)
    uvicorn.run(
        "formlens.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
