import logging
from contextlib import asynccontextmanager
from enum import Enum
from typing import Any, Callable

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic_settings import BaseSettings, SettingsConfigDict
import structlog

from bucketapi.auth import token_auth
from bucketapi.backends.registry import build_backend
from bucketapi.config import GatewayConfig, load_config
from bucketapi.errors import BackendInitError, ConfigError
from bucketapi.gateway import dispatch
from bucketapi.model.responses import LoginError, UploadAPIResponse, failed, ok


class Settings(BaseSettings):
    env: str = "local"
    app_name: str = "Bucket API"
    config_path: str = "config.yaml"
    host: str = "0.0.0.0"
    log_level: str = "info"

    model_config = SettingsConfigDict(env_prefix="BUCKETAPI_", env_file=".env")


settings = Settings()

structlog.configure(
    processors=[
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="ISO"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.make_filtering_bound_logger(
        logging.getLevelName(settings.log_level.upper())
    ),
)

logger = structlog.get_logger()

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "*",
    "Access-Control-Allow-Methods": "GET, POST, PATCH, PUT, OPTIONS",
}


class GatewayResponse(JSONResponse):
    """JSON body written in one piece with the fixed CORS headers."""
    media_type = "application/json;charset=utf-8"

    def __init__(self, content: Any, status_code: int = 200, **kwargs):
        super().__init__(content, status_code=status_code, headers=CORS_HEADERS, **kwargs)


class BackendName(str, Enum):
    cos = "cos"
    oss = "oss"
    ups = "ups"


@asynccontextmanager
async def lifespan(app: FastAPI):
    # A broken config file stops the server here rather than at the first request
    curr_settings = get_settings()
    config = load_config(curr_settings.config_path)
    logger.info(
        "Loaded configuration",
        path=curr_settings.config_path,
        port=config.port,
        backends=[name.value for name in BackendName if getattr(config, name.value) is not None],
    )
    yield


app = FastAPI(title=settings.app_name, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST", "PATCH", "PUT", "OPTIONS"],
    allow_headers=["*"],
)


def get_settings():
    return Settings()


def get_config(curr_settings: Settings = Depends(get_settings)) -> GatewayConfig:
    return load_config(curr_settings.config_path)


def get_backend_builder() -> Callable:
    return build_backend


@app.exception_handler(ConfigError)
async def config_error_handler(request: Request, exc: ConfigError):
    logger.error("Configuration unavailable", path=request.url.path, error=str(exc))
    return GatewayResponse(failed(str(exc)), status_code=500)


async def storage_request(name: str, request: Request, config: GatewayConfig, builder: Callable):
    operate = request.query_params.get("operate", "")
    form = await request.form() if operate == "upload" else None

    envelope = await dispatch(
        lambda: builder(name, config, logger),
        operate,
        request.query_params,
        logger,
        form=form,
    )
    return GatewayResponse(envelope)


@app.get("/")
async def root():
    return {"message": "This is the Bucket API"}


@app.get("/health", response_class=PlainTextResponse)
async def health():
    return "OK"


@app.get("/api/login")
async def login(token: str = "", config: GatewayConfig = Depends(get_config)):
    if not token_auth(token, config):
        logger.info("Login rejected")
        return GatewayResponse(LoginError().model_dump())
    return GatewayResponse(ok(data=config.token))


@app.get("/api/misc")
async def get_upload_api(config: GatewayConfig = Depends(get_config)):
    """Quick-upload settings: the upload token and the default upload URL."""
    return GatewayResponse(UploadAPIResponse(utoken=config.utoken, url=config.default).model_dump())


@app.api_route("/api/storage", methods=["GET", "POST"])
async def default_storage(
        request: Request,
        config: GatewayConfig = Depends(get_config),
        builder: Callable = Depends(get_backend_builder),
):
    """Operate on the backend selected by ``Backend`` in the configuration."""
    if not config.backend:
        return GatewayResponse(failed(BackendInitError("no default backend configured").message))
    return await storage_request(config.backend, request, config, builder)


@app.api_route("/api/{backend}", methods=["GET", "POST"])
async def storage(
        backend: BackendName,
        request: Request,
        config: GatewayConfig = Depends(get_config),
        builder: Callable = Depends(get_backend_builder),
):
    return await storage_request(backend.value, request, config, builder)
