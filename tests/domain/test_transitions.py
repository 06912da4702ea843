import pytest

from papervault.domain.papers import transitions
from papervault.domain.papers.entities import PaperStatus as S
from papervault.domain.papers.roles import Role


@pytest.mark.parametrize(
    "role, current, target",
    [
        (Role.AUTHOR, S.CORRECTION_REQUESTED, S.SUBMITTED),
        (Role.SUBJECT_REVIEWER, S.SUBMITTED, S.SUBJECT_APPROVED),
        (Role.SUBJECT_REVIEWER, S.SUBMITTED, S.CORRECTION_REQUESTED),
        (Role.BOARD_REVIEWER, S.SUBJECT_APPROVED, S.BOARD_APPROVED),
        (Role.BOARD_REVIEWER, S.SUBJECT_APPROVED, S.CORRECTION_REQUESTED),
        (Role.OVERSIGHT, S.BOARD_APPROVED, S.LOCKED),
        (Role.OVERSIGHT, S.BOARD_APPROVED, S.CORRECTION_REQUESTED),
        (Role.DISTRIBUTOR, S.LOCKED, S.DISTRIBUTED),
    ],
)
def test_table_allows_pipeline_edges(role, current, target):
    assert transitions.is_allowed(role, current, target)


@pytest.mark.parametrize(
    "role, current, target",
    [
        (Role.AUTHOR, S.SUBMITTED, S.SUBJECT_APPROVED),
        (Role.SUBJECT_REVIEWER, S.SUBJECT_APPROVED, S.BOARD_APPROVED),
        (Role.BOARD_REVIEWER, S.SUBMITTED, S.BOARD_APPROVED),
        (Role.DISTRIBUTOR, S.BOARD_APPROVED, S.DISTRIBUTED),
        (Role.OVERSIGHT, S.LOCKED, S.DISTRIBUTED),
        (None, S.SUBMITTED, S.SUBJECT_APPROVED),
    ],
)
def test_table_rejects_everything_else(role, current, target):
    assert not transitions.is_allowed(role, current, target)


def test_distributed_is_terminal_for_every_role():
    for role in Role:
        assert transitions.allowed_targets(role, S.DISTRIBUTED) == frozenset()


def test_rollback_targets_step_back_one_stage():
    assert transitions.ROLLBACK_TARGETS[S.BOARD_APPROVED] == S.SUBJECT_APPROVED
    assert transitions.ROLLBACK_TARGETS[S.SUBJECT_APPROVED] == S.SUBMITTED
    for current, target in transitions.ROLLBACK_TARGETS.items():
        assert transitions.is_allowed(Role.OVERSIGHT, current, target)


def test_document_transitions():
    assert transitions.carries_documents(S.CORRECTION_REQUESTED, S.SUBMITTED)
    assert transitions.carries_documents(S.SUBJECT_APPROVED, S.BOARD_APPROVED)
    assert not transitions.carries_documents(S.SUBMITTED, S.SUBJECT_APPROVED)
    assert transitions.requires_document_pair(S.SUBJECT_APPROVED, S.BOARD_APPROVED)
    assert not transitions.requires_document_pair(S.CORRECTION_REQUESTED, S.SUBMITTED)
