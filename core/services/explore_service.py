"""
Explore service: cache-aside reads over the decision store and decision writes.

Read path for every query:
1. Decode the pagination token (invalid tokens fail before any I/O)
2. Probe the cache; a hit that validates is returned as-is
3. On a miss or any cache fault, make exactly one store call
4. Hand the response to the background writer for repopulation
5. Return the response without waiting for the cache write

Cached lists and counts are not invalidated when a decision is recorded;
they go stale for at most their TTL.
"""

from collections.abc import Callable
from typing import Optional, TypeVar

from pydantic import BaseModel, ValidationError

from core.cache import CacheKeys, CacheProvider
from core.exceptions import CacheError, MutualCheckFailedError, StorageUnavailableError
from core.logging import get_logger
from core.pagination import decode_cursor
from core.repositories import DecisionStore, Liker
from core.schemas import (
    CountLikedYouResponse,
    LikerResponse,
    ListLikedYouResponse,
    PutDecisionResponse,
)

from .background import BackgroundWriter

logger = get_logger("explore")

M = TypeVar("M", bound=BaseModel)


class ExploreService:
    """
    Orchestrates liker queries and decision recording.

    The store, cache and background writer are injected; the service keeps no
    state of its own between calls.

    Usage:
        with db.session() as session:
            service = ExploreService(DecisionRepository(session), cache, writer)
            page = service.list_likers("user123", pagination_token="")
    """

    def __init__(
        self,
        store: DecisionStore,
        cache: CacheProvider,
        writer: BackgroundWriter,
        likers_ttl: int = CacheKeys.TTL_LIKERS,
        new_likers_ttl: int = CacheKeys.TTL_NEW_LIKERS,
        likers_count_ttl: int = CacheKeys.TTL_LIKERS_COUNT,
    ):
        self.store = store
        self.cache = cache
        self.writer = writer
        self.likers_ttl = likers_ttl
        self.new_likers_ttl = new_likers_ttl
        self.likers_count_ttl = likers_count_ttl

    # =========================================================================
    # Reads
    # =========================================================================

    def list_likers(
        self, recipient_user_id: str, pagination_token: Optional[str] = None
    ) -> ListLikedYouResponse:
        """One page of users who liked the recipient, newest first."""
        token = pagination_token or ""
        cursor = decode_cursor(token)

        def load() -> ListLikedYouResponse:
            try:
                likers, next_token = self.store.get_likers(recipient_user_id, cursor)
            except StorageUnavailableError as e:
                logger.error("get_likers_failed", recipient_user_id=recipient_user_id, error=str(e))
                raise
            return _page_response(likers, next_token)

        return self._read_through(
            CacheKeys.likers(recipient_user_id, token),
            ListLikedYouResponse,
            self.likers_ttl,
            load,
        )

    def list_new_likers(
        self, recipient_user_id: str, pagination_token: Optional[str] = None
    ) -> ListLikedYouResponse:
        """One page of likers the recipient has not decided on yet."""
        token = pagination_token or ""
        cursor = decode_cursor(token)

        def load() -> ListLikedYouResponse:
            try:
                likers, next_token = self.store.get_new_likers(recipient_user_id, cursor)
            except StorageUnavailableError as e:
                logger.error(
                    "get_new_likers_failed", recipient_user_id=recipient_user_id, error=str(e)
                )
                raise
            return _page_response(likers, next_token)

        return self._read_through(
            CacheKeys.new_likers(recipient_user_id, token),
            ListLikedYouResponse,
            self.new_likers_ttl,
            load,
        )

    def count_likers(self, recipient_user_id: str) -> CountLikedYouResponse:
        """Number of users who liked the recipient."""

        def load() -> CountLikedYouResponse:
            try:
                count = self.store.count_likes(recipient_user_id)
            except StorageUnavailableError as e:
                logger.error("count_likes_failed", recipient_user_id=recipient_user_id, error=str(e))
                raise
            return CountLikedYouResponse(count=count)

        return self._read_through(
            CacheKeys.likers_count(recipient_user_id),
            CountLikedYouResponse,
            self.likers_count_ttl,
            load,
        )

    def _read_through(self, key: str, schema: type[M], ttl: int, load: Callable[[], M]) -> M:
        cached = self._cache_get(key, schema)
        if cached is not None:
            return cached

        response = load()
        self._repopulate(key, response, ttl)
        return response

    def _cache_get(self, key: str, schema: type[M]) -> Optional[M]:
        try:
            payload = self.cache.get_json(key)
        except CacheError as e:
            logger.warning("cache_read_failed", key=key, error=str(e))
            return None

        if payload is None:
            logger.debug("cache_miss", key=key)
            return None

        try:
            response = schema.model_validate(payload)
        except ValidationError as e:
            logger.warning("cache_payload_invalid", key=key, error_count=e.error_count())
            return None

        logger.debug("cache_hit", key=key)
        return response

    def _repopulate(self, key: str, response: BaseModel, ttl: int) -> None:
        # Serialize now so the job owns its own copy of the payload
        payload = response.model_dump(mode="json")
        self.writer.submit(key, self.cache.set_json, key, payload, ttl)

    # =========================================================================
    # Writes
    # =========================================================================

    def create_decision(
        self, actor_user_id: str, recipient_user_id: str, liked_recipient: bool
    ) -> PutDecisionResponse:
        """
        Record a like or pass and report whether it completed a mutual like.

        A pass never triggers the mutual-like check.

        Raises:
            StorageUnavailableError: If the decision could not be stored
            MutualCheckFailedError: If the decision was stored but the check failed
        """
        try:
            self.store.upsert_decision(actor_user_id, recipient_user_id, liked_recipient)
        except StorageUnavailableError as e:
            logger.error(
                "decision_upsert_failed",
                actor_user_id=actor_user_id,
                recipient_user_id=recipient_user_id,
                error=str(e),
            )
            raise

        if not liked_recipient:
            return PutDecisionResponse(mutual_likes=False)

        try:
            mutual = self.store.has_mutual_like(actor_user_id, recipient_user_id)
        except StorageUnavailableError as e:
            logger.error(
                "mutual_like_check_failed",
                actor_user_id=actor_user_id,
                recipient_user_id=recipient_user_id,
                error=str(e),
            )
            if isinstance(e, MutualCheckFailedError):
                raise
            raise MutualCheckFailedError(str(e)) from e

        if mutual:
            logger.info(
                "mutual_like", actor_user_id=actor_user_id, recipient_user_id=recipient_user_id
            )
        return PutDecisionResponse(mutual_likes=bool(mutual))


def _page_response(likers: list[Liker], next_token: Optional[str]) -> ListLikedYouResponse:
    response = ListLikedYouResponse(
        likers=[
            LikerResponse(actor_id=liker.actor_id, unix_timestamp=liker.timestamp)
            for liker in likers
        ]
    )
    if next_token:
        response.next_pagination_token = next_token
    return response
