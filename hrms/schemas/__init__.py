"""Pydantic schemas for API request/response validation."""

from .base import CamelModel, ErrorResponse, ListResponse, MessageResponse, SignedUrlResponse
from .applications import (
    ApplicationCreate,
    ApplicationDetailResponse,
    ApplicationListResponse,
    ApplicationResponse,
    ApplicationSubmitted,
    DecisionRequest,
    InterviewScheduleRequest,
    NotesUpdate,
    StatusUpdate,
)
from .onboarding import (
    AcknowledgeRequest,
    AddressRequest,
    NdaTextResponse,
    OfferDetails,
    OfferDetailsResponse,
    OnboardingState,
    OnboardingSummary,
    ProvisionRequest,
    ProvisionResponse,
    ShareOfferRequest,
    ShareOfferResponse,
)
from .employees import DashboardStats, EmployeeCreate, EmployeeResponse, EmployeeUpdate, ProfileUpdate
from .attendance import AttendanceResponse, LeaveCreate, LeaveResponse, LeaveReview
from .tasks import (
    TaskBoardResponse,
    TaskCreate,
    TaskResponse,
    TaskStatusUpdate,
    TaskUpdate,
    WorkLogCreate,
    WorkLogResponse,
)
from .documents import DocumentResponse
from .auth import (
    EmailLinkRequest,
    LoginRequest,
    OAuthCallbackRequest,
    PasswordResetConfirm,
    SessionResponse,
    SessionUser,
    TokenRequest,
)

__all__ = [
    "CamelModel",
    "ErrorResponse",
    "ListResponse",
    "MessageResponse",
    "SignedUrlResponse",
    "ApplicationCreate",
    "ApplicationDetailResponse",
    "ApplicationListResponse",
    "ApplicationResponse",
    "ApplicationSubmitted",
    "DecisionRequest",
    "InterviewScheduleRequest",
    "NotesUpdate",
    "StatusUpdate",
    "AcknowledgeRequest",
    "AddressRequest",
    "NdaTextResponse",
    "OfferDetails",
    "OfferDetailsResponse",
    "OnboardingState",
    "OnboardingSummary",
    "ProvisionRequest",
    "ProvisionResponse",
    "ShareOfferRequest",
    "ShareOfferResponse",
    "DashboardStats",
    "EmployeeCreate",
    "EmployeeResponse",
    "EmployeeUpdate",
    "ProfileUpdate",
    "AttendanceResponse",
    "LeaveCreate",
    "LeaveResponse",
    "LeaveReview",
    "TaskBoardResponse",
    "TaskCreate",
    "TaskResponse",
    "TaskStatusUpdate",
    "TaskUpdate",
    "WorkLogCreate",
    "WorkLogResponse",
    "DocumentResponse",
    "EmailLinkRequest",
    "LoginRequest",
    "OAuthCallbackRequest",
    "PasswordResetConfirm",
    "SessionResponse",
    "SessionUser",
    "TokenRequest",
]
