# PATH: apps/api/common/models.py
from django.db import models


class TimestampModel(models.Model):
    """
    생성 / 수정 시간 자동 기록 추상 모델

    QuerySet.update()는 auto_now를 타지 않으므로
    상태 CAS 갱신 시에는 repository가 updated_at을 직접 넣는다.
    """
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class BaseModel(TimestampModel):
    """
    시험지 / 배포 원장 모델 공통 베이스.

    - 공통 타임스탬프 포함
    - 시험지는 hard delete 없음 (상태 전이로만 수명 관리)
    """
    class Meta:
        abstract = True
