"""g-wiki FastAPI application."""

import logging
from pathlib import Path
from urllib.parse import quote, unquote

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse, Response
from fastapi.staticfiles import StaticFiles
from starlette.concurrency import run_in_threadpool

from gwiki.config import Settings
from gwiki.core.revisions import GitRevisions, RevisionError
from gwiki.core.storage import FileStorage
from gwiki.core.templates import FragmentRegistry
from gwiki.core.wiki import Wiki, WikiRequest

logger = logging.getLogger(__name__)

AUTHOR_COOKIE = "author"
COOKIE_LIFETIME = 365 * 24 * 60 * 60

# Setup templates and static files
templates_path = Path(__file__).parent / "templates"
static_path = Path(__file__).parent / "static"


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the application around one settings instance.

    Raises:
        TemplateBundleError: If the template directory is missing.
    """
    settings = settings or Settings()

    fragments = FragmentRegistry(templates_path)
    fragments.check()

    revisions = GitRevisions(
        settings.data_dir,
        git_binary=settings.git_binary,
        email=settings.git_email,
    )
    try:
        revisions.init()
    except (RevisionError, OSError):
        logger.exception("Failed to initialize history in %s", settings.data_dir)
    wiki = Wiki(settings, FileStorage(settings.data_dir), revisions)

    app = FastAPI(title=settings.app_title, debug=settings.debug)
    app.state.settings = settings
    app.state.wiki = wiki
    app.state.fragments = fragments
    app.mount("/static", StaticFiles(directory=str(static_path)), name="static")

    @app.get("/favicon.ico")
    async def favicon():
        """No favicon, empty response."""
        return Response()

    @app.api_route("/{path:path}", methods=["GET", "POST"], response_class=HTMLResponse)
    async def wiki_page(request: Request, path: str):
        """Save, revert, view or edit the page at ``path``."""
        params = dict(request.query_params)
        if request.method == "POST":
            form = await request.form()
            params.update({k: v for k, v in form.items() if isinstance(v, str)})

        wiki_request = WikiRequest.from_params(
            "/" + path,
            params,
            cookie_author=unquote(request.cookies.get(AUTHOR_COOKIE, "")),
        )
        node = await run_in_threadpool(wiki.handle, wiki_request)
        body = await run_in_threadpool(fragments.compose, node)

        response = HTMLResponse(body)
        # Set-Cookie is latin-1 encoded
        response.set_cookie(AUTHOR_COOKIE, quote(node.author), expires=COOKIE_LIFETIME)
        return response

    return app
