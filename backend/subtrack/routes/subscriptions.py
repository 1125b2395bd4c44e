"""
SubTrack Backend — Subscription Route Handlers
===============================================

What:  CRUD endpoints behind the add, edit and list screens, plus the form
       helpers (options and live amount preview).
How:   Resolves the current user and today's date, delegates to
       SubscriptionService, returns JSON.

Routes:
    GET    /api/subscriptions            list (ordered by billing day)
    POST   /api/subscriptions            create            → 201
    GET    /api/subscriptions/options    form choices
    POST   /api/subscriptions/preview    share / monthly equivalent preview
    GET    /api/subscriptions/{id}       detail (edit form prefill)
    PUT    /api/subscriptions/{id}       overwrite all mutable fields
    DELETE /api/subscriptions/{id}       delete            → 204
"""

import logging
from datetime import date
from uuid import UUID

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from subtrack.auth import CurrentUser, get_current_user
from subtrack.database import get_db_session
from subtrack.dependencies import get_today
from subtrack.schemas.common import ErrorResponse
from subtrack.schemas.subscription import (
    AmountPreviewRequest,
    AmountPreviewResponse,
    SubscriptionForm,
    SubscriptionListResponse,
    SubscriptionOptionsResponse,
    SubscriptionResponse,
)
from subtrack.services.subscription_service import subscription_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/subscriptions", tags=["Subscriptions"])

_AUTH_RESPONSES = {401: {"description": "Not signed in", "model": ErrorResponse}}


@router.get(
    "",
    response_model=SubscriptionListResponse,
    responses={
        **_AUTH_RESPONSES,
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="List my subscriptions",
)
async def list_subscriptions(
    response: Response,
    user: CurrentUser = Depends(get_current_user),
    today: date = Depends(get_today),
    db: AsyncSession = Depends(get_db_session),
) -> SubscriptionListResponse:
    """
    All subscriptions of the signed-in user, ordered by billing day, each
    with its next billing date and the number of days until it.
    """
    result = await subscription_service.list_subscriptions(db=db, user_id=user.id, today=today)
    response.headers["X-Total-Count"] = str(result.total_count)
    return result


@router.post(
    "",
    status_code=201,
    response_model=SubscriptionResponse,
    responses={
        **_AUTH_RESPONSES,
        400: {"description": "Invalid form data", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Add a subscription",
)
async def create_subscription(
    form: SubscriptionForm,
    user: CurrentUser = Depends(get_current_user),
    today: date = Depends(get_today),
    db: AsyncSession = Depends(get_db_session),
) -> SubscriptionResponse:
    """
    Store a new subscription.

    The amount is normalized server-side: for a shared subscription the
    total is split by `shared_with`, and the per-period amount is spread
    over the billing frequency's months to get the monthly equivalent.
    """
    return await subscription_service.create_subscription(
        db=db, user_id=user.id, form=form, today=today
    )


@router.get(
    "/options",
    response_model=SubscriptionOptionsResponse,
    responses=_AUTH_RESPONSES,
    summary="Choices for the subscription forms",
)
async def get_options(
    user: CurrentUser = Depends(get_current_user),
) -> SubscriptionOptionsResponse:
    """Categories, billing frequencies (with months per period) and billing days."""
    return subscription_service.get_options()


@router.post(
    "/preview",
    response_model=AmountPreviewResponse,
    responses={
        **_AUTH_RESPONSES,
        400: {"description": "Invalid amount", "model": ErrorResponse},
    },
    summary="Preview your share and monthly equivalent",
)
async def preview_amount(
    request: AmountPreviewRequest,
    user: CurrentUser = Depends(get_current_user),
) -> AmountPreviewResponse:
    """Normalizes an amount exactly as a save would, without storing anything."""
    return subscription_service.preview_amount(request)


@router.get(
    "/{subscription_id}",
    response_model=SubscriptionResponse,
    responses={
        **_AUTH_RESPONSES,
        404: {"description": "Subscription not found", "model": ErrorResponse},
    },
    summary="Get one subscription",
)
async def get_subscription(
    subscription_id: UUID,
    user: CurrentUser = Depends(get_current_user),
    today: date = Depends(get_today),
    db: AsyncSession = Depends(get_db_session),
) -> SubscriptionResponse:
    """Loads a subscription for the edit form."""
    return await subscription_service.get_subscription(
        db=db, user_id=user.id, subscription_id=subscription_id, today=today
    )


@router.put(
    "/{subscription_id}",
    response_model=SubscriptionResponse,
    responses={
        **_AUTH_RESPONSES,
        400: {"description": "Invalid form data", "model": ErrorResponse},
        404: {"description": "Subscription not found", "model": ErrorResponse},
    },
    summary="Update a subscription",
)
async def update_subscription(
    subscription_id: UUID,
    form: SubscriptionForm,
    user: CurrentUser = Depends(get_current_user),
    today: date = Depends(get_today),
    db: AsyncSession = Depends(get_db_session),
) -> SubscriptionResponse:
    """Overwrites every mutable field with the submitted form."""
    return await subscription_service.update_subscription(
        db=db,
        user_id=user.id,
        subscription_id=subscription_id,
        form=form,
        today=today,
    )


@router.delete(
    "/{subscription_id}",
    status_code=204,
    responses={
        **_AUTH_RESPONSES,
        404: {"description": "Subscription not found", "model": ErrorResponse},
    },
    summary="Delete a subscription",
)
async def delete_subscription(
    subscription_id: UUID,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    """Permanently deletes the subscription (the client confirms first)."""
    await subscription_service.delete_subscription(
        db=db, user_id=user.id, subscription_id=subscription_id
    )
    return Response(status_code=204)
