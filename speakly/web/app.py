import logging
import uuid
from contextlib import asynccontextmanager
from typing import Callable, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, RedirectResponse
from fastapi.templating import Jinja2Templates

from ..config import config, token_tracker
from ..constants import APP_NAME, NAV_LINKS
from ..logging_config import setup_logging
from ..orchestrator import LearningOrchestrator
from ..utils.progress import format_time
from ..utils.storage import FileStorage, LocalStorage
from .routes import LoginRequired, router
from .state import ClientRegistry, is_valid_client_id

logger = logging.getLogger(__name__)


def file_storage_factory(client_id: str) -> LocalStorage:
    return FileStorage(config.paths.storage_dir / f"{client_id}.json")


def build_templates() -> Jinja2Templates:
    templates = Jinja2Templates(directory=str(config.paths.templates_dir))
    templates.env.globals["app_name"] = APP_NAME
    templates.env.globals["nav_links"] = NAV_LINKS
    templates.env.filters["countdown"] = format_time
    return templates


# --- Lifecycle ---
@asynccontextmanager
async def lifespan(app: FastAPI):
    problems = [p for p in config.validate() if "OPENAI_API_KEY" not in p]
    for problem in problems:
        logger.warning(f"Configuration problem: {problem}")
    if not config.model.api_key:
        logger.warning("OPENAI_API_KEY not set: level test placement will use the score fallback")
    yield
    app.state.registry.clear()
    if token_tracker.total_calls:
        logger.info(token_tracker.summary())


# --- App Factory ---
def create_app(
    storage_factory: Optional[Callable[[str], LocalStorage]] = None,
    orchestrator_kwargs: Optional[dict] = None,
) -> FastAPI:
    """
    Build the web application.

    Args:
        storage_factory: Maps a client id to its storage (file storage by default)
        orchestrator_kwargs: Extra arguments for every LearningOrchestrator
            (analyzer, suggester, question_service, clock)
    """
    config.prepare_fs()
    setup_logging()

    storage_factory = storage_factory or file_storage_factory
    orchestrator_kwargs = orchestrator_kwargs or {}

    def orchestrator_factory(client_id: str) -> LearningOrchestrator:
        return LearningOrchestrator(storage_factory(client_id), **orchestrator_kwargs)

    app = FastAPI(title=APP_NAME, lifespan=lifespan)
    app.state.registry = ClientRegistry(orchestrator_factory)
    app.state.templates = build_templates()

    @app.middleware("http")
    async def assign_client_id(request: Request, call_next):
        client_id = request.cookies.get(config.auth.cookie_name)
        is_new = not is_valid_client_id(client_id)
        if is_new:
            client_id = str(uuid.uuid4())
        request.state.client_id = client_id

        response = await call_next(request)
        if is_new:
            response.set_cookie(
                key=config.auth.cookie_name,
                value=client_id,
                httponly=True,
                samesite="lax",
            )
        return response

    @app.exception_handler(LoginRequired)
    async def redirect_to_login(request: Request, exc: LoginRequired):
        if request.url.path.startswith("/api/"):
            return JSONResponse({"error": "Not signed in"}, status_code=401)
        return RedirectResponse(url="/login", status_code=302)

    app.include_router(router)
    return app
