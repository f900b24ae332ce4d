# uniportal/core/templates.py

from pathlib import Path

from fastapi import Request
from fastapi.templating import Jinja2Templates

TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"

templates = Jinja2Templates(directory=str(TEMPLATE_DIR))


def render(request: Request, name: str, context: dict | None = None, status_code: int = 200):
    """Render a page with the guard flags every layout needs."""
    ctx = {
        "principal": getattr(request.state, "principal", None),
        "read_only": getattr(request.state, "read_only", False),
        "allowed_modules": None,
    }
    modules = getattr(request.state, "allowed_modules", None)
    if modules is not None:
        ctx["allowed_modules"] = sorted(m.value for m in modules)
    ctx.update(context or {})
    return templates.TemplateResponse(request, name, ctx, status_code=status_code)
