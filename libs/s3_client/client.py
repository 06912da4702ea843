# libs/s3_client/client.py

from __future__ import annotations

import os
from typing import Any, Optional

import boto3
from botocore.client import Config

# ---------------------------------------------------------------------
# S3 Client (Cloudflare R2)
# ---------------------------------------------------------------------

_s3: Optional[Any] = None


def _setting(name: str) -> Optional[str]:
    """Django settings 우선, 없으면 os.environ (워커/스크립트 환경)."""
    try:
        from django.conf import settings
        value = getattr(settings, name, None)
    except Exception:
        value = None
    return value or os.environ.get(name)


def build_r2_client() -> Any:
    return boto3.client(
        "s3",
        region_name="auto",
        endpoint_url=_setting("R2_ENDPOINT"),
        aws_access_key_id=_setting("R2_ACCESS_KEY"),
        aws_secret_access_key=_setting("R2_SECRET_KEY"),
        config=Config(
            signature_version="s3v4",
            s3={"addressing_style": "path"},
            retries={"max_attempts": 3, "mode": "standard"},
        ),
    )


def get_r2_client() -> Any:
    """프로세스 단위 1회 생성 후 재사용."""
    global _s3
    if _s3 is None:
        _s3 = build_r2_client()
    return _s3


# ---------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------

def get_bucket() -> str:
    bucket = _setting("R2_BUCKET")
    if not bucket:
        raise RuntimeError("R2_BUCKET is not set in Django settings")
    return bucket


def get_public_base_url() -> str:
    base = _setting("R2_PUBLIC_BASE_URL")
    if not base:
        raise RuntimeError("R2_PUBLIC_BASE_URL is not set in Django settings")
    return base.rstrip("/")
