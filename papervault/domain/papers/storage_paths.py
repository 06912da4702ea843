# PATH: papervault/domain/papers/storage_paths.py
"""
시험지 객체 키 SSOT

papers/Academic Year {YYYY}/{Department}/Sem{N}/{SubjectName}/QP.{ext}
papers/Academic Year {YYYY}/{Department}/Sem{N}/{SubjectName}/Scheme.{ext}

(연도, 학과, 학기, 과목명)이 같으면 항상 같은 경로 → 재업로드는 같은 키를 덮어쓴다.
"""

from __future__ import annotations

PAPERS_PREFIX = "papers"

QP_BASENAME = "QP"
SCHEME_BASENAME = "Scheme"


def _segment(value) -> str:
    # 키 구분자와 충돌하는 "/"만 치환, 나머지는 그대로 (공백 유지)
    return " ".join(str(value).split()).replace("/", "-")


def storage_folder_path(
    *,
    academic_year: int,
    department_name: str,
    semester: int,
    subject_name: str,
) -> str:
    """DB storage_folder_path 컬럼 값 (prefix 제외)."""
    return (
        f"Academic Year {int(academic_year)}/"
        f"{_segment(department_name)}/"
        f"Sem{int(semester)}/"
        f"{_segment(subject_name)}"
    )


def folder_path_for(paper) -> str:
    return storage_folder_path(
        academic_year=paper.academic_year,
        department_name=paper.department_name,
        semester=paper.semester,
        subject_name=paper.subject_name,
    )


def qp_key(folder_path: str, ext: str) -> str:
    """QP 객체 키."""
    return f"{PAPERS_PREFIX}/{folder_path}/{QP_BASENAME}.{ext}"


def scheme_key(folder_path: str, ext: str) -> str:
    """Scheme 객체 키."""
    return f"{PAPERS_PREFIX}/{folder_path}/{SCHEME_BASENAME}.{ext}"
