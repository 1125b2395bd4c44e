"""
SubTrack Backend — Dashboard and Account Routes
================================================

What:  GET /api/dashboard (home screen cards) and GET /api/me (settings
       screen account block).
"""

from datetime import date

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from subtrack.auth import CurrentUser, get_current_user
from subtrack.database import get_db_session
from subtrack.dependencies import get_today
from subtrack.schemas.common import AccountResponse, ErrorResponse
from subtrack.schemas.dashboard import DashboardResponse
from subtrack.services.dashboard_service import dashboard_service

router = APIRouter(prefix="/api", tags=["Dashboard"])


@router.get(
    "/dashboard",
    response_model=DashboardResponse,
    responses={
        401: {"description": "Not signed in", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Next due, spending totals and reminders",
)
async def get_dashboard(
    response: Response,
    user: CurrentUser = Depends(get_current_user),
    today: date = Depends(get_today),
    db: AsyncSession = Depends(get_db_session),
) -> DashboardResponse:
    """
    Aggregates the signed-in user's subscriptions.

    Caching:
        Cache-Control: no-store. The figures depend on the current date and
        on edits made moments ago.
    """
    result = await dashboard_service.get_dashboard(db=db, user_id=user.id, today=today)
    response.headers["Cache-Control"] = "no-store"
    return result


@router.get(
    "/me",
    response_model=AccountResponse,
    responses={401: {"description": "Not signed in", "model": ErrorResponse}},
    summary="Current account",
)
async def get_account(user: CurrentUser = Depends(get_current_user)) -> AccountResponse:
    """Who the access token belongs to."""
    return AccountResponse(id=user.id, email=user.email)
