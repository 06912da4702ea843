"""
목록 페이지 캐시용 Redis 연결 (프로세스당 1개)

REDIS_HOST 미설정 또는 ping 실패 시 None. 한 번 실패하면 reset 전까지 재시도하지 않는다.
wiring이 None을 받으면 in-memory 페이지 캐시를 쓴다.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Optional

import redis

logger = logging.getLogger(__name__)

_redis_client: Optional[redis.Redis] = None
_redis_available: Optional[bool] = None


def _setting(name: str, default: Any = None) -> Any:
    """Django settings 우선, 없으면 os.environ (settings 미구성 환경)."""
    try:
        from django.conf import settings
        value = getattr(settings, name, None)
    except Exception:
        value = None
    if value is None:
        value = os.getenv(name, default)
    return value


def get_redis_client() -> Optional[redis.Redis]:
    """
    Redis 클라이언트 반환.
    REDIS_HOST 등이 설정되지 않았거나 연결 실패 시 None.
    """
    global _redis_client, _redis_available

    if _redis_available is False:
        return None

    if _redis_client is not None:
        return _redis_client

    host = _setting("REDIS_HOST")
    if not host:
        logger.debug("REDIS_HOST not set, Redis disabled")
        _redis_available = False
        return None

    port = int(_setting("REDIS_PORT", "6379"))
    password = _setting("REDIS_PASSWORD") or None
    db = int(_setting("REDIS_DB", "0"))

    try:
        client = redis.Redis(
            host=host,
            port=port,
            password=password,
            db=db,
            decode_responses=True,
            socket_timeout=5,
            socket_connect_timeout=5,
        )
        client.ping()
        _redis_client = client
        _redis_available = True
        logger.info("Redis connected: %s:%s db=%s", host, port, db)
        return client
    except redis.RedisError as e:
        logger.warning("Redis connection failed (will use in-memory fallback): %s", e)
        _redis_available = False
        return None


def reset_redis_state() -> None:
    """연결 캐시 초기화 (설정이 바뀐 뒤 다시 연결 시도)."""
    global _redis_client, _redis_available
    _redis_client = None
    _redis_available = None
