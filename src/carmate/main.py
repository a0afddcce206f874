"""FastAPI application: service-center search, reminder processing and SMS endpoints."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api.v1 import reminders, service_centers, sms
from .core.config import settings
from .core.logger import logging
from .middleware.logger_middleware import LoggerMiddleware
from .services.notification_service import build_sms_provider
from .services.places_service import GooglePlacesClient

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    api_key = settings.GOOGLE_MAPS_API_KEY.get_secret_value() if settings.GOOGLE_MAPS_API_KEY else None
    app.state.places_client = GooglePlacesClient(
        api_key=api_key,
        timeout=settings.PLACES_REQUEST_TIMEOUT,
        page_delay=settings.PLACES_PAGE_DELAY_SECONDS,
    )
    app.state.sms_provider = build_sms_provider(settings)
    logger.info("%s started in %s mode", settings.APP_NAME, settings.ENVIRONMENT.value)
    try:
        yield
    finally:
        await app.state.places_client.close()
        await app.state.sms_provider.close()


api_router = APIRouter()
api_router.include_router(service_centers.router)
api_router.include_router(reminders.router)
api_router.include_router(sms.router)


def create_application() -> FastAPI:
    application = FastAPI(
        title=settings.APP_NAME,
        description=settings.APP_DESCRIPTION,
        version=settings.APP_VERSION,
        lifespan=lifespan,
    )
    application.add_middleware(LoggerMiddleware)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=settings.CORS_METHODS,
        allow_headers=settings.CORS_HEADERS,
        expose_headers=[service_centers.PROVIDER_ERROR_HEADER],
    )
    application.include_router(api_router)

    @application.get("/health", tags=["health"])
    async def health() -> dict[str, str]:
        return {"status": "healthy"}

    return application


app = create_application()
