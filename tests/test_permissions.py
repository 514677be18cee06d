import uuid
from types import SimpleNamespace

from newsroom.core.permissions import (
    REPORTER_ROW_FIELDS,
    allowed_row_statuses,
    can_edit_row,
    can_perform_action,
    editable_row_fields,
    has_role_at_least,
)
from newsroom.models.rundown_row import RowStatus
from newsroom.models.user import UserRole


def _user(role: UserRole):
    return SimpleNamespace(id=uuid.uuid4(), role=role)


def _row(**kwargs):
    return SimpleNamespace(**{"reporter_id": None, "created_by": None, "status": RowStatus.DRAFT, **kwargs})


def test_action_matrix():
    assert can_perform_action(_user(UserRole.PRODUCER), "create_bulletin")
    assert not can_perform_action(_user(UserRole.PRODUCER), "delete_bulletin")
    assert can_perform_action(_user(UserRole.EDITOR), "approve_row")
    assert not can_perform_action(_user(UserRole.REPORTER), "create_row")
    assert can_perform_action(_user(UserRole.EDITOR), "auto_generate_bulletins")
    assert not can_perform_action(_user(UserRole.REPORTER), "auto_generate_bulletins")
    assert not can_perform_action(_user(UserRole.ADMIN), "no_such_action")


def test_role_hierarchy():
    assert has_role_at_least(_user(UserRole.ADMIN), UserRole.PRODUCER)
    assert has_role_at_least(_user(UserRole.EDITOR), UserRole.EDITOR)
    assert not has_role_at_least(_user(UserRole.REPORTER), UserRole.EDITOR)


def test_staff_edit_any_row():
    assert can_edit_row(_user(UserRole.EDITOR), _row())


def test_reporter_row_ownership():
    reporter = _user(UserRole.REPORTER)
    assert can_edit_row(reporter, _row(reporter_id=reporter.id))
    assert not can_edit_row(reporter, _row())

    assert not can_edit_row(reporter, _row(created_by=reporter.id))

    blank = _row(created_by=reporter.id)
    blank.status = RowStatus.BLANK
    assert can_edit_row(reporter, blank)


def test_reporter_fields_and_statuses():
    reporter = _user(UserRole.REPORTER)
    assert editable_row_fields(reporter) == REPORTER_ROW_FIELDS
    assert "est_duration_secs" in editable_row_fields(_user(UserRole.EDITOR))
    assert allowed_row_statuses(reporter) == {RowStatus.DRAFT, RowStatus.READY}
    assert RowStatus.APPROVED in allowed_row_statuses(_user(UserRole.PRODUCER))
