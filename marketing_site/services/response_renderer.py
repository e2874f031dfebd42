# marketing_site/services/response_renderer.py
from __future__ import annotations

from fastapi.responses import HTMLResponse
from jinja2 import Environment, PackageLoader, select_autoescape

from marketing_site.services.submission import Outcome, OutcomeKind

_components = Environment(
    loader=PackageLoader("marketing_site", "templates"),
    autoescape=select_autoescape(enabled_extensions=("html",)),
)


def render_fragment(outcome: Outcome) -> str:
    """Render an outcome as the HTML fragment swapped into the contact form."""
    if outcome.kind is OutcomeKind.SUCCESS:
        template = _components.get_template("components/contact_success.html")
    else:
        template = _components.get_template("components/contact_error.html")
    return template.render(message=outcome.message)


def render_outcome(outcome: Outcome) -> HTMLResponse:
    headers = {}
    if outcome.retry_after:
        headers["Retry-After"] = str(outcome.retry_after)
    return HTMLResponse(
        content=render_fragment(outcome),
        status_code=outcome.status_code,
        headers=headers,
    )
