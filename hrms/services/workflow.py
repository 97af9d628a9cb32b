"""Closed status enums and the transition tables every status write goes through."""

from enum import Enum

from hrms.middleware.error_handler import InvalidTransitionError, ValidationAPIError


class ApplicationStatus(str, Enum):
    NEW = "new"
    REVIEWING = "reviewing"
    SHORTLISTED = "shortlisted"
    INTERVIEW_SCHEDULED = "interview_scheduled"
    INTERVIEWED = "interviewed"
    APPROVED = "approved"
    ON_HOLD = "on_hold"
    REJECTED = "rejected"
    HIRED = "hired"


class LeaveStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class TaskStatus(str, Enum):
    PENDING = "pending"
    ONGOING = "ongoing"
    COMPLETED = "completed"
    REVIEWED = "reviewed"


class OfferStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"


class NdaStatus(str, Enum):
    PENDING = "pending"
    SIGNED = "signed"


class LetterType(str, Enum):
    INTERNSHIP = "internship"
    PROJECT = "project"


class PeriodUnit(str, Enum):
    WEEKS = "weeks"
    MONTHS = "months"


class DocType(str, Enum):
    OFFER_LETTER = "offer_letter"
    NDA = "nda"
    CERTIFICATE = "certificate"


S = ApplicationStatus

# action -> (allowed source statuses, target status)
APPLICATION_ACTIONS: dict[str, tuple[frozenset, ApplicationStatus]] = {
    "review": (frozenset({S.NEW}), S.REVIEWING),
    "shortlist": (frozenset({S.REVIEWING}), S.SHORTLISTED),
    "schedule_interview": (frozenset({S.SHORTLISTED}), S.INTERVIEW_SCHEDULED),
    "mark_interviewed": (frozenset({S.INTERVIEW_SCHEDULED}), S.INTERVIEWED),
    "approve": (frozenset({S.INTERVIEWED, S.ON_HOLD}), S.APPROVED),
    "hold": (frozenset({S.INTERVIEWED}), S.ON_HOLD),
    "reject": (frozenset({S.INTERVIEWED, S.ON_HOLD}), S.REJECTED),
    "hire": (frozenset({S.APPROVED}), S.HIRED),
}

# Actions with no side effect besides the status write
PLAIN_ACTIONS = frozenset({"review", "shortlist", "mark_interviewed", "hold", "reject"})

APPLICATION_TRANSITIONS: dict[ApplicationStatus, frozenset] = {
    status: frozenset(
        target for sources, target in APPLICATION_ACTIONS.values() if status in sources
    )
    for status in ApplicationStatus
}

OFFER_ACTIONS = ("edit_offer", "preview_offer", "share_offer")

# Recruiter-facing actions per status. Sharing an offer from interviewed also approves.
_ACTIONS_BY_STATUS: dict[ApplicationStatus, tuple[str, ...]] = {
    S.NEW: ("review",),
    S.REVIEWING: ("shortlist",),
    S.SHORTLISTED: ("schedule_interview",),
    S.INTERVIEW_SCHEDULED: ("mark_interviewed",),
    S.INTERVIEWED: ("approve", "hold", "reject", *OFFER_ACTIONS),
    S.ON_HOLD: ("approve", "reject"),
    S.APPROVED: OFFER_ACTIONS,
}

LEAVE_TRANSITIONS: dict[LeaveStatus, frozenset] = {
    LeaveStatus.PENDING: frozenset({LeaveStatus.APPROVED, LeaveStatus.REJECTED}),
    LeaveStatus.APPROVED: frozenset(),
    LeaveStatus.REJECTED: frozenset(),
}

# The board allows any column to any other column
TASK_TRANSITIONS: dict[TaskStatus, frozenset] = {
    status: frozenset(s for s in TaskStatus if s != status) for status in TaskStatus
}

TASK_COLUMNS = {
    TaskStatus.PENDING: "To Do",
    TaskStatus.ONGOING: "In Progress",
    TaskStatus.COMPLETED: "Completed",
    TaskStatus.REVIEWED: "Reviewed",
}


def parse_status(enum_cls: type[Enum], value: str, field: str = "status") -> Enum:
    """Coerce a raw string into a closed enum, rejecting unknown values."""
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ValidationAPIError(f"Invalid {field} '{value}'. Must be one of: {allowed}", field=field)


def resolve_action(current: str, action: str) -> ApplicationStatus:
    """
    Return the target status for an action on an application.

    Raises InvalidTransitionError when the action is not allowed from the
    current status.
    """
    if action not in APPLICATION_ACTIONS:
        raise ValidationAPIError(f"Unknown action '{action}'", field="action")
    sources, target = APPLICATION_ACTIONS[action]
    status = parse_status(ApplicationStatus, current)
    if status not in sources:
        raise InvalidTransitionError("application", status.value, target.value)
    return target


def action_for_target(current: str, target: str) -> str:
    """Find the action that moves an application from ``current`` to ``target``."""
    status = parse_status(ApplicationStatus, current)
    wanted = parse_status(ApplicationStatus, target)
    for action, (sources, to_status) in APPLICATION_ACTIONS.items():
        if status in sources and to_status == wanted:
            return action
    raise InvalidTransitionError("application", status.value, wanted.value)


def validate_leave_transition(current: str, target: str) -> LeaveStatus:
    status = parse_status(LeaveStatus, current)
    wanted = parse_status(LeaveStatus, target)
    if wanted not in LEAVE_TRANSITIONS[status]:
        raise InvalidTransitionError("leave request", status.value, wanted.value)
    return wanted


def validate_task_transition(current: str, target: str) -> TaskStatus:
    status = parse_status(TaskStatus, current)
    wanted = parse_status(TaskStatus, target)
    if wanted not in TASK_TRANSITIONS[status]:
        raise InvalidTransitionError("task", status.value, wanted.value)
    return wanted


def available_actions(status: str, nda_signed: bool = False) -> list[str]:
    """Actions a recruiter can trigger for an application in ``status``."""
    current = parse_status(ApplicationStatus, status)
    actions = list(_ACTIONS_BY_STATUS.get(current, ()))
    if current == S.APPROVED and nda_signed:
        actions.append("provision_employee")
    return actions
