from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from interview_conduct.api.v1 import conduct, interviews
from interview_conduct.core.config import settings
from interview_conduct.core.database import Base, engine
from interview_conduct.core.logging import configure_logging
from interview_conduct.services.gateway import InterviewGateway
from interview_conduct.services.session_registry import SessionRegistry
from interview_conduct.services.sql_gateway import SqlInterviewGateway

# Register ORM tables on Base.metadata
from interview_conduct.models import interview, pipeline, progress, template  # noqa: F401


def create_app(gateway: Optional[InterviewGateway] = None, create_tables: bool = True) -> FastAPI:
    configure_logging(settings.LOG_LEVEL)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if create_tables:
            Base.metadata.create_all(bind=engine)
        yield

    app = FastAPI(
        title=settings.PROJECT_NAME,
        description="Structured interview conduct: responses, progress, evaluation and stage advancement",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.sessions = SessionRegistry(gateway or SqlInterviewGateway())

    # Health check
    @app.get("/health", tags=["Health"])
    async def health_check():
        return {"status": "ok"}

    # API Routers
    app.include_router(conduct.router, prefix=settings.API_V1_PREFIX, tags=["Conduct"])
    app.include_router(interviews.router, prefix=settings.API_V1_PREFIX, tags=["Interviews"])

    return app


app = create_app()
