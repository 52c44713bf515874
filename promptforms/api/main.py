"""Prompt Forms API.

Serves form and resource CRUD plus form execution:
- Forms: prompt template, input fields, provider/model, attached resources
- Resources: global reference texts injected into prompts
- Execution: compose the prompt and generate text with Gemini, OpenAI or DeepSeek
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from promptforms import __version__
from promptforms.api.routes import forms, providers, resources
from promptforms.config import Settings, get_settings
from promptforms.forms.executor import FormExecutor
from promptforms.llm.dispatcher import ProviderDispatcher
from promptforms.store import db

# Configure logging
logging.basicConfig(
    level=get_settings().log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    executor: Optional[FormExecutor] = None,
) -> FastAPI:
    """Build the API application.

    Args:
        settings: Service configuration (default: read from environment)
        executor: Form executor (default: one backed by the provider SDKs)
    """
    settings = settings or get_settings()
    executor = executor or FormExecutor(ProviderDispatcher(settings))

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan handler."""
        db.configure(settings.database_url, settings.sqlite_path)
        db.init_db()
        if not settings.gemini_api_key:
            logger.info("GEMINI_API_KEY not set: gemini forms require a caller API key")
        logger.info("Prompt Forms API ready")
        yield
        logger.info("Shutting down Prompt Forms API")

    app = FastAPI(
        title="Prompt Forms API",
        description="Reusable LLM prompt forms with reference resources.",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.executor = executor

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(forms.router, prefix="/api")
    app.include_router(resources.router, prefix="/api")
    app.include_router(providers.router, prefix="/api")

    @app.get("/")
    async def root():
        """Root endpoint with API info."""
        return {
            "service": "Prompt Forms API",
            "version": __version__,
            "docs": "/docs",
            "endpoints": {
                "forms": "/api/forms",
                "resources": "/api/resources",
                "providers": "/api/providers",
            },
        }

    @app.get("/health")
    async def health():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "database": "postgresql" if settings.database_url.startswith("postgres") else "sqlite",
            "default_gemini_credential": bool(settings.gemini_api_key),
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "promptforms.api.main:app",
        host="0.0.0.0",
        port=get_settings().port,
    )
