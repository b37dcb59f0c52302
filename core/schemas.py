"""
Pydantic response shapes shared by the service layer, the cache and the API.

Cached payloads are the JSON dumps of these models and are validated back
into them on a cache hit.
"""

from typing import Optional

from pydantic import BaseModel, Field


class LikerResponse(BaseModel):
    actor_id: str
    unix_timestamp: int = Field(ge=0)


class ListLikedYouResponse(BaseModel):
    likers: list[LikerResponse] = Field(default_factory=list)
    next_pagination_token: Optional[str] = None


class CountLikedYouResponse(BaseModel):
    count: int = Field(ge=0)


class PutDecisionResponse(BaseModel):
    mutual_likes: bool = False


__all__ = [
    "LikerResponse",
    "ListLikedYouResponse",
    "CountLikedYouResponse",
    "PutDecisionResponse",
]
