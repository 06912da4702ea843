"""
Redis 보호 레이어

DB가 SSOT. Redis는 목록 페이지 캐시 용도로만 사용.
"""

from libs.redis.client import get_redis_client, reset_redis_state

__all__ = [
    "get_redis_client",
    "reset_redis_state",
]
