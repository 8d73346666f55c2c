import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from gluetun_fleet.api import containers
from gluetun_fleet.api import fleet
from gluetun_fleet.core.config import Settings
from gluetun_fleet.core.logging import configure_logging
from gluetun_fleet.domain.errors import FleetError
from gluetun_fleet.repositories.container_registry import JSONContainerRegistry
from gluetun_fleet.services.container_service import ContainerService
from gluetun_fleet.services.control_client import GluetunControlClient
from gluetun_fleet.services.credentials import FileCredentialProvider
from gluetun_fleet.services.docker_runtime import DockerSDKRuntime

logger = logging.getLogger(__name__)


def build_container_service(settings: Settings) -> ContainerService:
    return ContainerService(
        registry=JSONContainerRegistry(settings.REGISTRY_FILE),
        runtime=DockerSDKRuntime(),
        credentials=FileCredentialProvider(settings.auth_file_path),
        control_client=GluetunControlClient(
            host=settings.CONTROL_HOST,
            timeout=settings.CONTROL_TIMEOUT_S,
        ),
        settings=settings,
    )


def create_app(
    settings: Settings | None = None,
    container_service: ContainerService | None = None,
) -> FastAPI:
    settings = settings or Settings()
    configure_logging(settings.LOG_LEVEL)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await app.state.container_service.initialize()
        logger.info("Gluetun Fleet Manager ready")
        logger.info(f"Control ports: {settings.CONTROL_PORT_START}-{settings.CONTROL_PORT_END}")
        logger.info(f"Proxy ports: {settings.PROXY_PORT_START}-{settings.PROXY_PORT_END}")
        yield

    app = FastAPI(title="Gluetun Fleet Manager", lifespan=lifespan)
    app.state.settings = settings
    if container_service is None:
        container_service = build_container_service(settings)
    app.state.container_service = container_service

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(containers.router)
    app.include_router(fleet.router)

    @app.exception_handler(FleetError)
    async def fleet_error_handler(request: Request, exc: FleetError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        fields = sorted({str(err["loc"][-1]) for err in exc.errors() if err.get("loc")})
        message = f"Invalid or missing fields: {', '.join(fields)}" if fields else "Invalid request"
        return JSONResponse(status_code=400, content={"error": message})

    return app


def run() -> None:
    import uvicorn

    settings = Settings()
    uvicorn.run(create_app(settings), host=settings.HOST, port=settings.PORT)
