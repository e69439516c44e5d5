"""HTML pages for the sharedrop web UI."""

from __future__ import annotations

import html
from functools import lru_cache
from importlib.resources import files

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse

from sharedrop import __version__

router = APIRouter()


@lru_cache(maxsize=None)
def load_template(name: str) -> str:
    """Read a packaged template from ``sharedrop/web/templates``."""
    template = files("sharedrop.web").joinpath("templates", name)
    return template.read_text(encoding="utf-8")


def render_page(name: str, **values: object) -> str:
    """Fill ``{{ key }}`` placeholders with HTML-escaped values."""
    page = load_template(name)
    for key, value in values.items():
        page = page.replace("{{ %s }}" % key, html.escape(str(value)))
    return page


@router.get("/", response_class=HTMLResponse)
async def index(request: Request) -> HTMLResponse:
    state = request.app.state.share
    page = render_page(
        "index.html",
        version=__version__,
        share_name=state.resolver.root.name or "/",
    )
    return HTMLResponse(content=page, headers={"Cache-Control": "no-store"})
