"""
Explore endpoints: who liked me, who liked me that I have not answered,
how many liked me, and recording a like or pass.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from core.exceptions import MissingFieldError, SameIdentityError
from core.services import ExploreService

from ..dependencies import get_explore_service
from ..error_handlers import translate_errors
from ..schemas import (
    CountLikedYouResponse,
    ListLikedYouResponse,
    PutDecisionRequest,
    PutDecisionResponse,
)

router = APIRouter(prefix="/explore", tags=["explore"])


@router.get("/liked-you", response_model=ListLikedYouResponse)
def list_liked_you(
    recipient_user_id: str = Query(default=""),
    pagination_token: Optional[str] = Query(default=None),
    service: ExploreService = Depends(get_explore_service),
):
    """List users who liked the recipient, newest first."""
    with translate_errors("list_liked_you", "failed to get likers"):
        if not recipient_user_id:
            raise MissingFieldError("recipient_user_id")
        return service.list_likers(recipient_user_id, pagination_token)


@router.get("/liked-you/new", response_model=ListLikedYouResponse)
def list_new_liked_you(
    recipient_user_id: str = Query(default=""),
    pagination_token: Optional[str] = Query(default=None),
    service: ExploreService = Depends(get_explore_service),
):
    """List likers the recipient has not yet liked or passed on."""
    with translate_errors("list_new_liked_you", "failed to get new likers"):
        if not recipient_user_id:
            raise MissingFieldError("recipient_user_id")
        return service.list_new_likers(recipient_user_id, pagination_token)


@router.get("/liked-you/count", response_model=CountLikedYouResponse)
def count_liked_you(
    recipient_user_id: str = Query(default=""),
    service: ExploreService = Depends(get_explore_service),
):
    with translate_errors("count_liked_you", "failed to count likers"):
        if not recipient_user_id:
            raise MissingFieldError("recipient_user_id")
        return service.count_likers(recipient_user_id)


@router.put("/decisions", response_model=PutDecisionResponse)
def put_decision(
    request: PutDecisionRequest,
    service: ExploreService = Depends(get_explore_service),
):
    """
    Record a like or pass from actor to recipient.

    Re-sending a decision for the same pair replaces the earlier one. The
    response reports whether both users now like each other.
    """
    with translate_errors("put_decision", "failed to create decision"):
        if not request.actor_user_id:
            raise MissingFieldError("actor_user_id")
        if not request.recipient_user_id:
            raise MissingFieldError("recipient_user_id")
        if request.actor_user_id == request.recipient_user_id:
            raise SameIdentityError()
        return service.create_decision(
            request.actor_user_id, request.recipient_user_id, request.liked_recipient
        )
