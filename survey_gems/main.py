import uvicorn
from fastapi import FastAPI

from survey_gems.api.errors import register_exception_handlers
from survey_gems.api.routes.admin import router as admin_router
from survey_gems.api.routes.auth import router as auth_router
from survey_gems.api.routes.health import router as health_router
from survey_gems.api.routes.internal_auth import router as internal_auth_router
from survey_gems.api.routes.offerwall import router as offerwall_router
from survey_gems.api.routes.surveys import router as surveys_router
from survey_gems.api.routes.transactions import router as transactions_router
from survey_gems.api.routes.withdrawals import router as withdrawals_router
from survey_gems.core.config import get_settings
from survey_gems.core.logging import configure_logging


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings.log_level, json_logs=settings.log_json)

    docs_enabled = settings.enable_openapi_docs
    app = FastAPI(
        title="Survey Gems API",
        version="0.1.0",
        docs_url="/docs" if docs_enabled else None,
        redoc_url="/redoc" if docs_enabled else None,
        openapi_url="/openapi.json" if docs_enabled else None,
    )
    register_exception_handlers(app)
    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(internal_auth_router)
    app.include_router(surveys_router)
    app.include_router(transactions_router)
    app.include_router(withdrawals_router)
    app.include_router(offerwall_router)
    app.include_router(admin_router)
    return app


app = create_app()


def run() -> None:
    settings = get_settings()
    uvicorn.run(
        "survey_gems.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=settings.app_env == "dev",
    )


if __name__ == "__main__":
    run()
