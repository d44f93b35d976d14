"""
Placeholder pages the gateway routes to.

Rendering is not this service's job; each page is a bare document that
names the area and the signed-in role so routing can be observed.
"""

from __future__ import annotations

from html import escape

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import HTMLResponse

from pantry.core.config import settings
from pantry.models.user import Role

router = APIRouter(include_in_schema=False)

_PAGE = """<!doctype html>
<html><head><title>{title} · {project}</title></head>
<body data-area="{area}" data-role="{role}"><h1>{title}</h1></body></html>"""


def _render(title: str, area: str, role: str = "") -> HTMLResponse:
    return HTMLResponse(
        _PAGE.format(
            title=escape(title),
            project=escape(settings.PROJECT_NAME),
            area=escape(area),
            role=escape(role),
        )
    )


@router.get("/login", response_class=HTMLResponse)
async def login_page() -> HTMLResponse:
    return _render("Sign in", "login")


@router.get("/dashboard/{area}", response_class=HTMLResponse)
async def dashboard_page(area: str, request: Request) -> HTMLResponse:
    try:
        Role(area)
    except ValueError:
        raise HTTPException(status_code=404, detail="Page not found")
    claims = request.state.session
    return _render(f"{area.title()} dashboard", area, claims.role.value)


@router.get("/dashboard/employee/history", response_class=HTMLResponse)
async def employee_history_page(request: Request) -> HTMLResponse:
    return _render("Order history", "employee", request.state.session.role.value)
