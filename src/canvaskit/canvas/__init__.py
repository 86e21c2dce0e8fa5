"""Canvas LMS API client module."""

from .client import CanvasClient
from .errors import (
    CanvasAPIError,
    CanvasDecodingError,
    CanvasTransportError,
    ConfigurationError,
    HTTPStatusError,
    InvalidResponseError,
    UnsupportedItemTypeError,
)
from .models import (
    Assignment,
    Attachment,
    CompletionRequirement,
    ContentDetails,
    Course,
    EnrollmentTerm,
    Grade,
    MediaComment,
    Module,
    ModuleItem,
    ModuleItemContent,
    SubmissionComment,
    Todo,
)

__all__ = [
    "CanvasClient",
    "CanvasAPIError",
    "CanvasDecodingError",
    "CanvasTransportError",
    "ConfigurationError",
    "HTTPStatusError",
    "InvalidResponseError",
    "UnsupportedItemTypeError",
    "Assignment",
    "Attachment",
    "CompletionRequirement",
    "ContentDetails",
    "Course",
    "EnrollmentTerm",
    "Grade",
    "MediaComment",
    "Module",
    "ModuleItem",
    "ModuleItemContent",
    "SubmissionComment",
    "Todo",
]
