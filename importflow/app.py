import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from importflow.application import build_dossier_service, configure_dossier_service
from importflow.core.settings import WorkflowSettings
from importflow.routes import dossiers, session

logger = logging.getLogger(__name__)


def create_app(settings: WorkflowSettings | None = None) -> FastAPI:
    settings = settings or WorkflowSettings.from_env()

    if not logging.getLogger().handlers:
        logging.basicConfig(
            level=settings.log_level,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )

    app = FastAPI(title="Import Flow API", version="0.1.0")

    configure_dossier_service(build_dossier_service(settings))
    logger.info("dossier store ready (data_dir=%s)", settings.data_dir or "memory")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:5173", "http://127.0.0.1:5173"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(dossiers.router, prefix="/api")
    app.include_router(session.router, prefix="/api")

    @app.get("/", include_in_schema=False)
    async def root() -> JSONResponse:
        """Provide a lightweight landing page for container checks."""
        return JSONResponse(
            {
                "message": "Import Flow API",
                "docs": "/docs",
                "health": "/api/dossiers",
            }
        )

    return app


app = create_app()
