from papervault.domain.papers.entities import PaperStatus
from papervault.domain.papers.roles import Actor, Role
from papervault.domain.papers.scope import NO_ACCESS, resolve_scope

from conftest import make_paper


def test_author_sees_only_own_uploads_in_every_status():
    scope = resolve_scope(Actor("author-1", Role.AUTHOR))
    assert scope.allowed_statuses == frozenset(PaperStatus)
    assert scope.mandatory_filters == (("uploaded_by", "author-1"),)
    assert scope.permits(make_paper("p1", uploaded_by="author-1"))
    assert not scope.permits(make_paper("p2", uploaded_by="author-2"))


def test_subject_reviewer_is_department_scoped_and_sees_submitted():
    scope = resolve_scope(Actor("sr-1", Role.SUBJECT_REVIEWER, "Computer Science"))
    assert PaperStatus.SUBMITTED in scope.allowed_statuses
    assert scope.mandatory_filters == (("department_name", "Computer Science"),)
    assert not scope.permits(make_paper("p1", department_name="Physics"))


def test_board_reviewer_excludes_submitted():
    scope = resolve_scope(Actor("br-1", Role.BOARD_REVIEWER, "Computer Science"))
    assert PaperStatus.SUBMITTED not in scope.allowed_statuses
    assert PaperStatus.SUBJECT_APPROVED in scope.allowed_statuses
    assert not scope.permits(make_paper("p1", status=PaperStatus.SUBMITTED))


def test_department_scoped_role_without_department_gets_empty_scope():
    scope = resolve_scope(Actor("sr-1", Role.SUBJECT_REVIEWER, "  "))
    assert scope.is_empty


def test_oversight_sees_everything_without_filters():
    scope = resolve_scope(Actor("ov-1", Role.OVERSIGHT))
    assert scope.allowed_statuses == frozenset(PaperStatus)
    assert scope.mandatory_filters == ()


def test_distributor_sees_locked_and_distributed_only():
    scope = resolve_scope(Actor("d-1", Role.DISTRIBUTOR))
    assert scope.allowed_statuses == frozenset({PaperStatus.LOCKED, PaperStatus.DISTRIBUTED})


def test_unknown_role_never_raises():
    assert resolve_scope(Actor("x", "Janitor")) is NO_ACCESS
    assert resolve_scope(Actor("x", None)) is NO_ACCESS
    assert resolve_scope(None) is NO_ACCESS


def test_cache_token_differs_per_department():
    a = resolve_scope(Actor("sr-1", Role.SUBJECT_REVIEWER, "Computer Science"))
    b = resolve_scope(Actor("sr-2", Role.SUBJECT_REVIEWER, "Physics"))
    c = resolve_scope(Actor("sr-3", Role.SUBJECT_REVIEWER, "Computer Science"))
    assert a.cache_token() != b.cache_token()
    assert a.cache_token() == c.cache_token()


def test_row_scope_keeps_row_filters_and_drops_status_limit():
    scope = resolve_scope(Actor("br-1", Role.BOARD_REVIEWER, "Computer Science")).row_scope()
    assert scope.allowed_statuses == frozenset(PaperStatus)
    assert scope.mandatory_filters == (("department_name", "Computer Science"),)


def test_row_scope_of_empty_scope_stays_empty():
    assert resolve_scope(Actor("br-1", Role.BOARD_REVIEWER, None)).row_scope().is_empty
