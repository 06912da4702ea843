"""
배포 보드 — 과목 코드별로 시험지를 묶어 고정 슬롯(PAPER_SLOTS) 행으로 만든다.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterable, Optional

from papervault.domain.papers.entities import ExamPaper

# 과목당 최대 시험지 슬롯 수
PAPER_SLOTS = 5


@dataclass
class SubjectGroup:
    subject_code: str
    subject_name: str
    academic_year: int
    semester: int
    papers: list[Optional[ExamPaper]] = field(default_factory=list)
    downloaded: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "subject_code": self.subject_code,
            "subject_name": self.subject_name,
            "academic_year": self.academic_year,
            "semester": self.semester,
            "papers": [p.to_dict() if p is not None else None for p in self.papers],
            "downloaded": self.downloaded,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SubjectGroup":
        return cls(
            subject_code=data["subject_code"],
            subject_name=data["subject_name"],
            academic_year=data["academic_year"],
            semester=data["semester"],
            papers=[ExamPaper.from_dict(p) if p is not None else None for p in data["papers"]],
            downloaded=bool(data.get("downloaded")),
        )


def _created_key(paper: ExamPaper) -> tuple:
    created: Optional[datetime] = paper.created_at
    return (created is not None, created.timestamp() if created else 0.0, paper.id)


def group_papers_by_subject(
    papers: Iterable[ExamPaper],
    downloaded_subjects: Optional[set[str]] = None,
    slots: int = PAPER_SLOTS,
) -> list[SubjectGroup]:
    """
    입력 순서대로 과목 행 생성. 행 안에서는 created_at 오름차순,
    슬롯 수에 맞춰 None으로 채우거나 잘라낸다.
    """
    downloaded_subjects = downloaded_subjects or set()
    grouped: dict[str, SubjectGroup] = {}
    members: dict[str, list[ExamPaper]] = {}

    for paper in papers:
        code = paper.subject_code
        if code not in grouped:
            grouped[code] = SubjectGroup(
                subject_code=code,
                subject_name=paper.subject_name,
                academic_year=paper.academic_year,
                semester=paper.semester,
                downloaded=code in downloaded_subjects,
            )
            members[code] = []
        members[code].append(paper)

    for code, row in grouped.items():
        ordered: list[Optional[ExamPaper]] = sorted(members[code], key=_created_key)
        ordered = ordered[:slots]
        ordered.extend([None] * (slots - len(ordered)))
        row.papers = ordered

    return list(grouped.values())
