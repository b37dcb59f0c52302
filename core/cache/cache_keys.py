"""
Cache key management.

Centralized cache key definitions to:
- Prevent key collisions
- Keep read and repopulate paths on the same key
- Document cache structure
"""


class CacheKeys:
    """
    Centralized cache key definitions.

    Naming convention: {query}:{recipient}[:{pagination_token}]

    Examples:
        - likers:user123: -> first page of users who liked user123
        - newlikers:user123:eyJsYXN0... -> a later page of new likers
        - likerscount:user123 -> number of users who liked user123
    """

    # TTLs (in seconds)
    TTL_LIKERS = 30
    TTL_NEW_LIKERS = 20
    TTL_LIKERS_COUNT = 15

    @staticmethod
    def likers(recipient_user_id: str, pagination_token: str = "") -> str:
        """Cache key for one page of likers."""
        return f"likers:{recipient_user_id}:{pagination_token}"

    @staticmethod
    def new_likers(recipient_user_id: str, pagination_token: str = "") -> str:
        """Cache key for one page of new likers."""
        return f"newlikers:{recipient_user_id}:{pagination_token}"

    @staticmethod
    def likers_count(recipient_user_id: str) -> str:
        """Cache key for the liker count. Counts are not paginated."""
        return f"likerscount:{recipient_user_id}"
