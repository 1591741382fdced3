"""
FastAPI application for promptapi.

Serves the prompt endpoint, a health check and, optionally, a static UI.

Usage:
    # Positional arguments: UI folder, API descriptor
    promptapi-server ./public ./apis/fire-and-ice.json

    # Development server with auto-reload
    SERVER_RELOAD=true promptapi-server --config config/config.yaml

    # Debug mode (verbose logging)
    LOG_LEVEL=DEBUG promptapi-server
"""

import argparse
import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from .. import __version__
from ..config_loader import load_api_config, load_app_config
from ..errors import ConfigError
from ..models import ApiConfig, AppConfig
from ..orchestrator import PromptOrchestrator
from ..tracing import init_tracing_client, shutdown_tracing
from .routes import health, prompt

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    """Configure logging for the server process."""
    log_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logging.getLogger("promptapi").setLevel(log_level)


def _log_configuration(orchestrator: PromptOrchestrator, public_dir: Optional[Path]) -> None:
    app_config = orchestrator.app_config
    logger.info("=" * 60)
    logger.info("TARGET API")
    logger.info(f"  Base URL: {orchestrator.api_config.base_url}")
    logger.info(f"  Documentation: {len(orchestrator.api_config.documentation):,} chars")

    logger.info("-" * 60)
    logger.info("COMPLETION SERVICE")
    logger.info(f"  Base URL: {app_config.completion.base_url or 'OpenAI default'}")
    logger.info(f"  Model: {app_config.completion.model}")
    logger.info(f"  Timeout: {app_config.completion.timeout}s")

    logger.info("-" * 60)
    logger.info("ORCHESTRATION")
    logger.info(f"  Max depth: {app_config.orchestration.max_depth}")
    logger.info(
        f"  Session timeout: {app_config.orchestration.session_timeout or 'none'}"
    )
    logger.info(f"  API call timeout: {app_config.executor.timeout}s")

    logger.info("-" * 60)
    logger.info("REGISTERED OPERATIONS")
    for name, op in orchestrator.registry.all_operations().items():
        logger.info(f"  - {name} ({op.method})")

    logger.info("-" * 60)
    logger.info(f"STATIC UI: {public_dir if public_dir else 'DISABLED'}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup and shutdown events."""
    logger.info("Starting promptapi server")
    _log_configuration(app.state.orchestrator, app.state.public_dir)

    langfuse = app.state.app_config.langfuse
    logger.info("-" * 60)
    logger.info("LANGFUSE OBSERVABILITY")
    tracing_client = init_tracing_client(
        public_key=langfuse.public_key,
        secret_key=langfuse.secret_key,
        host=langfuse.host,
        debug=langfuse.debug,
    )
    if tracing_client.enabled:
        logger.info("  Status: ENABLED")
    else:
        logger.info("  Status: DISABLED")
        if tracing_client.error:
            logger.info(f"  Reason: {tracing_client.error}")
    logger.info("=" * 60)

    yield

    logger.info("Shutting down promptapi server")
    shutdown_tracing()
    app.state.orchestrator.close()


def _resolve_public_dir(app_config: AppConfig) -> Optional[Path]:
    configured = os.environ.get("PUBLIC_DIR") or app_config.server.public_dir
    if not configured:
        return None
    public_dir = Path(configured)
    if not public_dir.is_dir():
        raise ConfigError(f"Public folder '{public_dir}' does not exist")
    return public_dir


def create_app(
    app_config: Optional[AppConfig] = None,
    api_config: Optional[ApiConfig] = None,
    orchestrator: Optional[PromptOrchestrator] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Configuration not passed in is loaded from disk: the app config from
    CONFIG_PATH (or config/config.yaml), the API descriptor from
    API_CONFIG_PATH (or ``api.config_path``).

    Raises:
        ConfigError: If the API descriptor or the public folder is invalid
    """
    if orchestrator is not None:
        app_config = orchestrator.app_config
        api_config = orchestrator.api_config
    app_config = app_config or load_app_config()
    configure_logging(os.environ.get("LOG_LEVEL") or app_config.log_level)

    if api_config is None:
        api_config = load_api_config(
            os.environ.get("API_CONFIG_PATH") or app_config.api.config_path
        )
    orchestrator = orchestrator or PromptOrchestrator(api_config, app_config)
    public_dir = _resolve_public_dir(app_config)

    app = FastAPI(
        title="promptapi",
        description=(
            "Ask questions in natural language about a REST API. "
            "POST the question as the request body to /."
        ),
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )
    app.state.app_config = app_config
    app.state.orchestrator = orchestrator
    app.state.public_dir = public_dir

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(app_config.server.cors_origins),
        allow_methods=["*"],
        allow_headers=["Content-Type"],
    )

    app.include_router(health.router, tags=["Health"])
    app.include_router(prompt.router, tags=["Prompt"])

    # Mounted last: only requests no route matched fall through to static files.
    if public_dir is not None:
        app.mount("/", StaticFiles(directory=public_dir, html=True), name="public")

    return app


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="promptapi-server",
        description="Serve a natural-language front end for a REST API.",
    )
    parser.add_argument("public_dir", nargs="?", help="folder with the static UI")
    parser.add_argument("api_config", nargs="?", help="API descriptor file (JSON or YAML)")
    parser.add_argument("--config", help="application config file (YAML)")
    parser.add_argument("--host", help="bind address")
    parser.add_argument("--port", type=int, help="bind port")
    return parser.parse_args(argv)


def run_server(argv: Optional[list[str]] = None) -> None:
    """
    Run the server using uvicorn.

    Paths from the command line are handed to the app factory through the
    environment so that reload and multi-worker modes see them too.
    """
    import uvicorn

    args = parse_args(argv)
    if args.config:
        os.environ["CONFIG_PATH"] = args.config
    if args.api_config:
        os.environ["API_CONFIG_PATH"] = args.api_config
    if args.public_dir:
        os.environ["PUBLIC_DIR"] = args.public_dir

    app_config = load_app_config()
    configure_logging(os.environ.get("LOG_LEVEL") or app_config.log_level)

    # Fail fast on bad configuration before uvicorn starts any worker.
    try:
        load_api_config(os.environ.get("API_CONFIG_PATH") or app_config.api.config_path)
        _resolve_public_dir(app_config)
    except ConfigError as e:
        logger.error(f"Error: {e}")
        raise SystemExit(1) from e

    server = app_config.server
    port = args.port or int(os.environ.get("PORT", server.port))
    reload = os.environ.get("SERVER_RELOAD", str(server.reload)).lower() == "true"
    logger.info(f"Send POST requests to http://localhost:{port} or open the UI in your browser")

    uvicorn.run(
        "promptapi.api.main:create_app",
        factory=True,
        host=args.host or server.host,
        port=port,
        reload=reload,
        workers=1 if reload else server.workers,
    )


if __name__ == "__main__":
    run_server()
