# apps/domains/papers/models.py
from django.db import models
from apps.api.common.models import BaseModel


class ExamPaperModel(BaseModel):
    """
    시험지 1건 (QP + Scheme 쌍)

    status 변경은 papervault StatusTransitionEngine 경유 (CAS update).
    """

    class Status(models.TextChoices):
        SUBMITTED = "Submitted", "Submitted"
        SUBJECT_APPROVED = "SubjectApproved", "Subject Approved"
        BOARD_APPROVED = "BoardApproved", "Board Approved"
        LOCKED = "Locked", "Locked"
        DISTRIBUTED = "Distributed", "Distributed"
        CORRECTION_REQUESTED = "CorrectionRequested", "Correction Requested"

    id = models.CharField(max_length=36, primary_key=True)

    subject_code = models.CharField(max_length=16, db_index=True)
    subject_name = models.CharField(max_length=255)
    department_name = models.CharField(max_length=255, db_index=True)
    semester = models.PositiveSmallIntegerField()
    academic_year = models.PositiveIntegerField()

    status = models.CharField(
        max_length=32,
        choices=Status.choices,
        default=Status.SUBMITTED,
        db_index=True,
    )

    # R2 객체 공개 URL
    storage_folder_path = models.CharField(max_length=512, blank=True, default="")
    qp_file_url = models.URLField(max_length=1024, blank=True, default="")
    qp_file_type = models.CharField(max_length=128, blank=True, default="")
    scheme_file_url = models.URLField(max_length=1024, blank=True, default="")
    scheme_file_type = models.CharField(max_length=128, blank=True, default="")

    uploaded_by = models.CharField(max_length=64, db_index=True)
    approved_by = models.CharField(max_length=64, null=True, blank=True)
    locked_by = models.CharField(max_length=64, null=True, blank=True)
    acted_by = models.CharField(max_length=64, null=True, blank=True)

    exam_date = models.DateField(null=True, blank=True, db_index=True)
    is_downloaded = models.BooleanField(default=False)
    downloaded_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = "papers_exam_paper"
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["department_name", "status"], name="papers_dept_status_idx"),
        ]

    def __str__(self):
        return f"{self.subject_code} ({self.status})"


class PaperDownloadModel(BaseModel):
    """
    배포 원장 — 배포자별 (과목, 시험일) 1건
    """
    distributor_id = models.CharField(max_length=64)
    subject_code = models.CharField(max_length=16)
    exam_date = models.DateField()
    paper = models.ForeignKey(
        ExamPaperModel,
        on_delete=models.CASCADE,
        related_name="downloads",
    )
    downloaded_at = models.DateTimeField()

    class Meta:
        db_table = "papers_paper_download"
        constraints = [
            models.UniqueConstraint(
                fields=["distributor_id", "subject_code", "exam_date"],
                name="uniq_paper_download_per_distributor",
            ),
        ]
