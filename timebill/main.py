# timebill/main.py
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from timebill.api.api import api_router
from timebill.core.config import settings
from timebill.core.logging import setup_logging
from timebill.core.error_handlers import register_exception_handlers
from timebill.core.middleware import register_middlewares
from timebill.db.session import init_db
from timebill.services import register_services

# Set up the logger at the start
logger = setup_logging()


# Context manager for startup/shutdown events
@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting {settings.PROJECT_NAME} {app.version}")

    init_db()
    logger.info("Database tables ready")

    # Register services
    register_services()
    logger.info("Services registered")

    yield

    logger.info("Shutting down application")


def create_app() -> FastAPI:
    application = FastAPI(
        title=settings.PROJECT_NAME,
        description="Time tracking, payments, billing and client balances for freelance work",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Register custom exception handlers
    register_exception_handlers(application)

    # Register middleware
    register_middlewares(application)

    # Set up CORS middleware
    if settings.BACKEND_CORS_ORIGINS:
        allowed_origins = [str(origin) for origin in settings.BACKEND_CORS_ORIGINS]
        logger.info(f"Setting up CORS with allowed origins: {allowed_origins}")

        application.add_middleware(
            CORSMiddleware,
            allow_origins=allowed_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    application.include_router(api_router, prefix=settings.API_V1_STR)

    @application.get("/")
    def root():
        return {"message": f"Welcome to the {settings.PROJECT_NAME}"}

    return application


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
