from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError

from notsoai.core import errors
from notsoai.core.config import Settings, get_settings, validate_production_config
from notsoai.core.errors import ApiError, ConfigurationError
from notsoai.core.logger import configure_logging, logger
from notsoai.core.security import build_session_codec
from notsoai.db.data_access import build_data_access
from notsoai.db.session import init_db
from notsoai.middleware.edge import EdgeRouterMiddleware
from notsoai.routers import analytics, auth, clients, conversations, users


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings

    problems = validate_production_config(settings)
    for problem in problems:
        logger.error("CONFIG | %s", problem)
    if problems and settings.is_production:
        raise ConfigurationError("; ".join(problems))

    data_access = app.state.data_access
    if getattr(data_access, "kind", None) == "sql":
        init_db(data_access.engine)

    yield


def _field_errors(exc: RequestValidationError) -> dict:
    field_errors = {}
    for error in exc.errors():
        loc = [str(part) for part in error["loc"] if part not in ("body", "query", "path")]
        field_errors[".".join(loc) or "body"] = error["msg"]
    return field_errors


def create_app(settings: Optional[Settings] = None, data_access=None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.debug_logging)

    app = FastAPI(
        title="NotSoAI Dashboard Backend",
        version="1.0.0",
        lifespan=lifespan
    )

    app.state.settings = settings
    app.state.session_codec = build_session_codec(settings)
    app.state.data_access = data_access if data_access is not None else build_data_access(settings)

    app.add_middleware(EdgeRouterMiddleware)

    @app.exception_handler(ApiError)
    async def api_error_handler(request: Request, exc: ApiError):
        return errors.error_response(exc.code, exc.message, exc.status_code, exc.errors)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return errors.validation(_field_errors(exc))

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error | %s %s", request.method, request.url.path)
        return errors.internal()

    app.include_router(auth.router)
    app.include_router(analytics.router)
    app.include_router(conversations.router)
    app.include_router(clients.router)
    app.include_router(users.router)

    return app


app = create_app()


def run() -> None:
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)


if __name__ == "__main__":
    run()
