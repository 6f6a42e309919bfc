"""
Dashboard Page Routes

Server-rendered single page. Form posts redirect back to the page; the QR
reader's callbacks post JSON and the page reloads itself.
"""
# ruff: noqa: B008 - FastAPI Depends in function defaults is standard pattern

from pathlib import Path

from fastapi import APIRouter, Depends, Form, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from pydantic import BaseModel

from disciplinetracker.api.deps import get_current_actor, get_repository
from disciplinetracker.config import settings
from disciplinetracker.core.models import StaffUser
from disciplinetracker.grievances.repository import GrievanceRepository
from disciplinetracker.grievances.types import GRIEVANCE_TYPES
from disciplinetracker.views.dashboard import DashboardController, DashboardRegistry

templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))

router = APIRouter()


class DecodedPayload(BaseModel):
    """Text decoded by the browser QR reader."""

    code: str


class ScanErrorPayload(BaseModel):
    """Camera failure reported by the browser QR reader."""

    reason: str = ""


def get_registry(request: Request) -> DashboardRegistry:
    return request.app.state.dashboards


def get_dashboard(
    actor: StaffUser = Depends(get_current_actor),
    registry: DashboardRegistry = Depends(get_registry),
) -> DashboardController:
    return registry.get(actor.id)


def _back_to_dashboard() -> RedirectResponse:
    return RedirectResponse("/dashboard", status_code=status.HTTP_303_SEE_OTHER)


@router.get("/dashboard", response_class=HTMLResponse)
async def show_dashboard(
    request: Request,
    actor: StaffUser = Depends(get_current_actor),
    dashboard: DashboardController = Depends(get_dashboard),
    repo: GrievanceRepository = Depends(get_repository),
) -> HTMLResponse:
    """Render scanner, form, weekly summary and recent grievances."""
    await dashboard.load(repo)
    return templates.TemplateResponse(
        request,
        "dashboard.html",
        {
            "actor": actor,
            "dashboard": dashboard,
            "notifications": dashboard.drain_notifications(),
            "grievance_types": GRIEVANCE_TYPES,
            "scanner_fps": settings.SCANNER_FPS,
            "scanner_box_size": settings.SCANNER_BOX_SIZE,
        },
    )


@router.post("/dashboard/scanner/start")
async def start_scan(dashboard: DashboardController = Depends(get_dashboard)) -> RedirectResponse:
    dashboard.start_scan()
    return _back_to_dashboard()


@router.post("/dashboard/scanner/{session_id}/cancel")
async def cancel_scan(
    session_id: str, dashboard: DashboardController = Depends(get_dashboard)
) -> RedirectResponse:
    dashboard.cancel_scan(session_id)
    return _back_to_dashboard()


@router.post("/dashboard/scanner/{session_id}/decoded")
async def scan_decoded(
    session_id: str,
    payload: DecodedPayload,
    dashboard: DashboardController = Depends(get_dashboard),
    repo: GrievanceRepository = Depends(get_repository),
) -> dict[str, bool]:
    selected = await dashboard.scan_decoded(repo, session_id, payload.code)
    return {"selected": selected}


@router.post("/dashboard/scanner/{session_id}/error")
async def scan_error(
    session_id: str,
    payload: ScanErrorPayload,
    dashboard: DashboardController = Depends(get_dashboard),
) -> dict[str, bool]:
    dashboard.scan_failed(session_id, payload.reason)
    return {"selected": False}


@router.post("/dashboard/student/clear")
async def clear_student(dashboard: DashboardController = Depends(get_dashboard)) -> RedirectResponse:
    dashboard.clear_student()
    return _back_to_dashboard()


@router.post("/dashboard/grievances")
async def submit_grievance(
    grievance_type: str = Form("", alias="type"),
    description: str = Form(""),
    dashboard: DashboardController = Depends(get_dashboard),
    repo: GrievanceRepository = Depends(get_repository),
) -> RedirectResponse:
    if dashboard.select_type(grievance_type):
        dashboard.set_description(description)
        await dashboard.submit(repo)
    return _back_to_dashboard()
