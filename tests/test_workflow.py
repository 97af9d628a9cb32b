"""Status transition tables for applications, leave and tasks."""

import pytest

from hrms.middleware.error_handler import InvalidTransitionError, ValidationAPIError
from hrms.services.workflow import (
    APPLICATION_TRANSITIONS,
    ApplicationStatus,
    LeaveStatus,
    TaskStatus,
    action_for_target,
    available_actions,
    parse_status,
    resolve_action,
    validate_leave_transition,
    validate_task_transition,
)


def test_happy_path_reaches_hired():
    status = ApplicationStatus.NEW.value
    for action in ["review", "shortlist", "schedule_interview", "mark_interviewed", "approve", "hire"]:
        status = resolve_action(status, action).value
    assert status == "hired"


def test_action_rejected_from_wrong_status():
    with pytest.raises(InvalidTransitionError) as exc:
        resolve_action("new", "approve")
    assert exc.value.status_code == 409
    assert exc.value.details == {"entity": "application", "from": "new", "to": "approved"}


def test_unknown_action():
    with pytest.raises(ValidationAPIError):
        resolve_action("new", "teleport")


def test_unknown_status_value():
    with pytest.raises(ValidationAPIError):
        parse_status(ApplicationStatus, "archived")


@pytest.mark.parametrize("terminal", ["hired", "rejected"])
def test_terminal_statuses_have_no_exits(terminal):
    assert APPLICATION_TRANSITIONS[ApplicationStatus(terminal)] == frozenset()


def test_held_candidate_can_still_be_decided():
    assert APPLICATION_TRANSITIONS[ApplicationStatus.ON_HOLD] == {ApplicationStatus.APPROVED, ApplicationStatus.REJECTED}
    assert resolve_action("on_hold", "approve") == ApplicationStatus.APPROVED
    assert action_for_target("on_hold", "rejected") == "reject"
    assert available_actions("on_hold") == ["approve", "reject"]
    with pytest.raises(InvalidTransitionError):
        resolve_action("on_hold", "hold")


def test_action_for_target():
    assert action_for_target("interviewed", "on_hold") == "hold"
    assert action_for_target("new", "reviewing") == "review"
    with pytest.raises(InvalidTransitionError):
        action_for_target("new", "hired")


def test_available_actions_per_status():
    assert available_actions("new") == ["review"]
    assert available_actions("interviewed") == [
        "approve", "hold", "reject", "edit_offer", "preview_offer", "share_offer",
    ]
    assert available_actions("hired") == []
    assert available_actions("rejected") == []


def test_provisioning_unlocks_only_after_nda():
    assert "provision_employee" not in available_actions("approved", nda_signed=False)
    assert available_actions("approved", nda_signed=True)[-1] == "provision_employee"
    assert "provision_employee" not in available_actions("interviewed", nda_signed=True)


def test_leave_is_reviewed_once():
    assert validate_leave_transition("pending", "approved") == LeaveStatus.APPROVED
    assert validate_leave_transition("pending", "rejected") == LeaveStatus.REJECTED
    with pytest.raises(InvalidTransitionError):
        validate_leave_transition("approved", "rejected")
    with pytest.raises(InvalidTransitionError):
        validate_leave_transition("rejected", "approved")


def test_task_board_moves_between_any_columns():
    assert validate_task_transition("reviewed", "pending") == TaskStatus.PENDING
    assert validate_task_transition("pending", "completed") == TaskStatus.COMPLETED
    with pytest.raises(InvalidTransitionError):
        validate_task_transition("ongoing", "ongoing")
    with pytest.raises(ValidationAPIError):
        validate_task_transition("ongoing", "blocked")
