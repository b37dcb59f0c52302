"""
Pydantic schemas for request and response validation.

Response shapes live in core.schemas because the service layer caches them.
"""

from pydantic import BaseModel, Field

from core.schemas import (
    CountLikedYouResponse,
    LikerResponse,
    ListLikedYouResponse,
    PutDecisionResponse,
)


class PutDecisionRequest(BaseModel):
    # Empty strings are rejected by the route, not here, so that every
    # missing-field case yields the same invalid-argument response
    actor_user_id: str = Field(default="", max_length=255)
    recipient_user_id: str = Field(default="", max_length=255)
    liked_recipient: bool = False


__all__ = [
    "PutDecisionRequest",
    "LikerResponse",
    "ListLikedYouResponse",
    "CountLikedYouResponse",
    "PutDecisionResponse",
]
