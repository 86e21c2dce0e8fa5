"""
Canvas LMS data models.

These models are immutable decode targets for Canvas API responses.
All IDs are positive integers from Canvas and form the primary identity.

Decoding is strict: a required key that is missing, null or of the wrong JSON
type raises FieldError. Optional scalars decode to None when absent, optional
lists to an empty tuple. Timestamps must match ``yyyy-MM-dd'T'HH:mm:ssZ``;
a present timestamp in any other format is an error even on optional fields.
"""

import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S%z"
TIMESTAMP_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(Z|[+-]\d{2}:?\d{2})\Z")

_MISSING = object()


class FieldError(ValueError):
    """Raised when a field in an API payload is missing or malformed."""

    def __init__(self, entity: str, field: str, reason: str):
        super().__init__(f"{entity}.{field}: {reason}")
        self.entity = entity
        self.field = field
        self.reason = reason


def _as_object(data: Any, entity: str) -> dict:
    if not isinstance(data, dict):
        raise FieldError(entity, "<root>", f"expected JSON object, got {type(data).__name__}")
    return data


def _lookup(data: dict, entity: str, key: str, required: bool) -> Any:
    value = data.get(key, _MISSING)
    if value is _MISSING or value is None:
        if required:
            raise FieldError(entity, key, "missing required field")
        return None
    return value


def _int(data: dict, entity: str, key: str, required: bool = True) -> Optional[int]:
    value = _lookup(data, entity, key, required)
    if value is None:
        return None
    # bool is an int subclass, but true/false is never a valid Canvas number
    if isinstance(value, bool) or not isinstance(value, int):
        raise FieldError(entity, key, f"expected integer, got {value!r}")
    return value


def _float(data: dict, entity: str, key: str, required: bool = True) -> Optional[float]:
    value = _lookup(data, entity, key, required)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise FieldError(entity, key, f"expected number, got {value!r}")
    return float(value)


def _str(data: dict, entity: str, key: str, required: bool = True) -> Optional[str]:
    value = _lookup(data, entity, key, required)
    if value is None:
        return None
    if not isinstance(value, str):
        raise FieldError(entity, key, f"expected string, got {value!r}")
    return value


def _bool(data: dict, entity: str, key: str, required: bool = True) -> Optional[bool]:
    value = _lookup(data, entity, key, required)
    if value is None:
        return None
    if not isinstance(value, bool):
        raise FieldError(entity, key, f"expected boolean, got {value!r}")
    return value


def _datetime(data: dict, entity: str, key: str, required: bool = False) -> Optional[datetime]:
    value = _str(data, entity, key, required)
    if value is None:
        return None
    try:
        return parse_timestamp(value)
    except ValueError as e:
        raise FieldError(entity, key, str(e)) from e


def _list(data: dict, entity: str, key: str, required: bool = False) -> list:
    value = _lookup(data, entity, key, required)
    if value is None:
        return []
    if not isinstance(value, list):
        raise FieldError(entity, key, f"expected array, got {type(value).__name__}")
    return value


def _first_str(data: dict, entity: str, keys: tuple[str, ...], required: bool = False) -> Optional[str]:
    """Return the first present string among ``keys``, in order."""
    for key in keys:
        value = _str(data, entity, key, required=False)
        if value is not None:
            return value
    if required:
        raise FieldError(entity, "|".join(keys), "missing required field")
    return None


def _check_id(entity: str, value: int, field: str = "id") -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValueError(f"{entity} {field} must be a positive integer, got {value!r}")


def parse_timestamp(value: str) -> datetime:
    """
    Parse a Canvas timestamp in the fixed ``yyyy-MM-dd'T'HH:mm:ssZ`` format.

    Both ``Z`` and numeric offsets (``-0700``, ``+05:30``) are accepted.
    Fractional seconds and naive timestamps are rejected.
    """
    error = f"timestamp {value!r} does not match yyyy-MM-dd'T'HH:mm:ssZ"
    # strptime alone would accept unpadded fields such as 2026-1-5T1:2:3Z
    if not TIMESTAMP_PATTERN.match(value):
        raise ValueError(error)
    try:
        return datetime.strptime(value, TIMESTAMP_FORMAT)
    except ValueError:
        raise ValueError(error) from None


@dataclass(frozen=True)
class EnrollmentTerm:
    """A Canvas enrollment term (semester, quarter, ...)."""
    id: int
    name: str
    start_at: Optional[datetime] = None
    end_at: Optional[datetime] = None

    def __post_init__(self):
        _check_id("EnrollmentTerm", self.id)

    @classmethod
    def from_api_response(cls, data: dict) -> "EnrollmentTerm":
        data = _as_object(data, "EnrollmentTerm")
        return cls(
            id=_int(data, "EnrollmentTerm", "id"),
            name=_str(data, "EnrollmentTerm", "name"),
            start_at=_datetime(data, "EnrollmentTerm", "start_at"),
            end_at=_datetime(data, "EnrollmentTerm", "end_at"),
        )


@dataclass(frozen=True)
class Course:
    """
    Represents a Canvas course.

    Attributes:
        id: Unique Canvas course ID
        name: Course display name
        code: Course code (e.g., "CS101")
        start_at: Course start, if set
        end_at: Course end, if set
        term: Enrollment term, when requested with include[]=term
        workflow_state: Course state (available, completed, ...)
    """
    id: int
    name: str
    code: str
    start_at: Optional[datetime] = None
    end_at: Optional[datetime] = None
    term: Optional[EnrollmentTerm] = None
    workflow_state: Optional[str] = None

    def __post_init__(self):
        _check_id("Course", self.id)
        if not self.name:
            raise ValueError("Course name must not be empty")

    @classmethod
    def from_api_response(cls, data: dict) -> "Course":
        """Create Course from Canvas API response."""
        data = _as_object(data, "Course")
        term_data = data.get("enrollment_term")
        return cls(
            id=_int(data, "Course", "id"),
            name=_str(data, "Course", "name"),
            code=_str(data, "Course", "course_code"),
            start_at=_datetime(data, "Course", "start_at"),
            end_at=_datetime(data, "Course", "end_at"),
            term=EnrollmentTerm.from_api_response(term_data) if term_data is not None else None,
            workflow_state=_str(data, "Course", "workflow_state", required=False),
        )


@dataclass(frozen=True)
class ContentDetails:
    """Grading and locking metadata inlined on a module item."""
    points_possible: Optional[float] = None
    due_at: Optional[datetime] = None
    unlock_at: Optional[datetime] = None
    lock_at: Optional[datetime] = None
    locked_for_user: Optional[bool] = None

    @classmethod
    def from_api_response(cls, data: dict) -> "ContentDetails":
        data = _as_object(data, "ContentDetails")
        return cls(
            points_possible=_float(data, "ContentDetails", "points_possible", required=False),
            due_at=_datetime(data, "ContentDetails", "due_at"),
            unlock_at=_datetime(data, "ContentDetails", "unlock_at"),
            lock_at=_datetime(data, "ContentDetails", "lock_at"),
            locked_for_user=_bool(data, "ContentDetails", "locked_for_user", required=False),
        )


@dataclass(frozen=True)
class CompletionRequirement:
    type: str
    min_score: Optional[float] = None
    completed: Optional[bool] = None

    @classmethod
    def from_api_response(cls, data: dict) -> "CompletionRequirement":
        data = _as_object(data, "CompletionRequirement")
        return cls(
            type=_str(data, "CompletionRequirement", "type"),
            min_score=_float(data, "CompletionRequirement", "min_score", required=False),
            completed=_bool(data, "CompletionRequirement", "completed", required=False),
        )


@dataclass(frozen=True)
class ModuleItem:
    """
    One entry of a Canvas module.

    ``type`` is an open set of tags (Assignment, Quiz, Page, File,
    ExternalUrl, SubHeader, ...). Unknown tags are kept as-is.
    ``content_id`` is absent for items that only point somewhere else,
    such as external links and sub headers. Pages are addressed by
    ``page_url`` (their slug).
    """
    id: int
    module_id: int
    title: str
    position: int
    type: str
    indent: Optional[int] = None
    content_id: Optional[int] = None
    html_url: Optional[str] = None
    url: Optional[str] = None
    page_url: Optional[str] = None
    external_url: Optional[str] = None
    new_tab: Optional[bool] = None
    completion_requirement: Optional[CompletionRequirement] = None
    content_details: Optional[ContentDetails] = None

    def __post_init__(self):
        _check_id("ModuleItem", self.id)

    @classmethod
    def from_api_response(cls, data: dict) -> "ModuleItem":
        """Create ModuleItem from Canvas API response."""
        data = _as_object(data, "ModuleItem")
        requirement = data.get("completion_requirement")
        details = data.get("content_details")
        return cls(
            id=_int(data, "ModuleItem", "id"),
            module_id=_int(data, "ModuleItem", "module_id"),
            title=_str(data, "ModuleItem", "title"),
            position=_int(data, "ModuleItem", "position"),
            type=_str(data, "ModuleItem", "type"),
            indent=_int(data, "ModuleItem", "indent", required=False),
            content_id=_int(data, "ModuleItem", "content_id", required=False),
            html_url=_str(data, "ModuleItem", "html_url", required=False),
            url=_str(data, "ModuleItem", "url", required=False),
            page_url=_str(data, "ModuleItem", "page_url", required=False),
            external_url=_str(data, "ModuleItem", "external_url", required=False),
            new_tab=_bool(data, "ModuleItem", "new_tab", required=False),
            completion_requirement=(
                CompletionRequirement.from_api_response(requirement) if requirement is not None else None
            ),
            content_details=ContentDetails.from_api_response(details) if details is not None else None,
        )


@dataclass(frozen=True)
class Module:
    """
    Represents a Canvas module and the items it owns.

    Positions order modules within a course but are not guaranteed to be
    contiguous. ``items`` is empty when Canvas did not inline them (very
    large modules are returned with ``items_count`` only).
    """
    id: int
    name: str
    position: int
    unlock_at: Optional[datetime] = None
    require_sequential_progress: Optional[bool] = None
    publish_final_grade: Optional[bool] = None
    items_count: Optional[int] = None
    items: tuple[ModuleItem, ...] = ()

    def __post_init__(self):
        _check_id("Module", self.id)

    @classmethod
    def from_api_response(cls, data: dict) -> "Module":
        """Create Module from Canvas API response."""
        data = _as_object(data, "Module")
        return cls(
            id=_int(data, "Module", "id"),
            name=_str(data, "Module", "name"),
            position=_int(data, "Module", "position"),
            unlock_at=_datetime(data, "Module", "unlock_at"),
            require_sequential_progress=_bool(data, "Module", "require_sequential_progress", required=False),
            publish_final_grade=_bool(data, "Module", "publish_final_grade", required=False),
            items_count=_int(data, "Module", "items_count", required=False),
            items=tuple(ModuleItem.from_api_response(item) for item in _list(data, "Module", "items")),
        )


@dataclass(frozen=True)
class Assignment:
    """
    Represents a Canvas assignment.

    The unique identity is (course_id, id).

    Attributes:
        id: Unique assignment ID within Canvas
        course_id: The course this assignment belongs to
        name: Assignment name/title
        description: Plain-text description (``description_text``)
        html_description: HTML description (``description``)
        due_at: Due date/time, None if no due date
        points_possible: Maximum points for assignment
        html_url: URL to view assignment in Canvas
        submission_types: Canvas submission type tags
        is_quiz: Whether the assignment is backed by a quiz
        locked: Whether the assignment is locked for the current user
        published: Whether assignment is published
    """
    id: int
    course_id: int
    name: str
    html_url: str
    submission_types: tuple[str, ...]
    is_quiz: bool
    published: bool
    description: Optional[str] = None
    html_description: Optional[str] = None
    due_at: Optional[datetime] = None
    points_possible: Optional[float] = None
    locked: Optional[bool] = None
    allowed_attempts: Optional[int] = None
    grading_type: Optional[str] = None

    def __post_init__(self):
        _check_id("Assignment", self.id)
        _check_id("Assignment", self.course_id, field="course_id")

    @property
    def unique_key(self) -> tuple[int, int]:
        """Return the unique identifier for this assignment."""
        return (self.course_id, self.id)

    @classmethod
    def from_api_response(cls, data: dict) -> "Assignment":
        """Create Assignment from Canvas API response."""
        data = _as_object(data, "Assignment")
        submission_types = _list(data, "Assignment", "submission_types", required=True)
        for tag in submission_types:
            if not isinstance(tag, str):
                raise FieldError("Assignment", "submission_types", f"expected string tag, got {tag!r}")

        return cls(
            id=_int(data, "Assignment", "id"),
            course_id=_int(data, "Assignment", "course_id"),
            name=_str(data, "Assignment", "name"),
            html_url=_str(data, "Assignment", "html_url"),
            submission_types=tuple(submission_types),
            is_quiz=_bool(data, "Assignment", "is_quiz_assignment"),
            published=_bool(data, "Assignment", "published"),
            description=_str(data, "Assignment", "description_text", required=False),
            html_description=_str(data, "Assignment", "description", required=False),
            due_at=_datetime(data, "Assignment", "due_at"),
            points_possible=_float(data, "Assignment", "points_possible", required=False),
            locked=_bool(data, "Assignment", "locked", required=False),
            allowed_attempts=_int(data, "Assignment", "allowed_attempts", required=False),
            grading_type=_str(data, "Assignment", "grading_type", required=False),
        )


@dataclass(frozen=True)
class Attachment:
    """A file attached to a submission comment."""
    id: int
    display_name: str
    filename: str
    content_type: str
    url: str
    size: int

    def __post_init__(self):
        _check_id("Attachment", self.id)

    @classmethod
    def from_api_response(cls, data: dict) -> "Attachment":
        data = _as_object(data, "Attachment")
        return cls(
            id=_int(data, "Attachment", "id"),
            display_name=_str(data, "Attachment", "display_name"),
            filename=_str(data, "Attachment", "filename"),
            content_type=_str(data, "Attachment", "content-type"),
            url=_str(data, "Attachment", "url"),
            size=_int(data, "Attachment", "size"),
        )


@dataclass(frozen=True)
class MediaComment:
    """Audio/video recording embedded in a submission comment."""
    content_type: str
    media_id: str
    media_type: str
    url: str
    display_name: Optional[str] = None

    @classmethod
    def from_api_response(cls, data: dict) -> "MediaComment":
        data = _as_object(data, "MediaComment")
        return cls(
            content_type=_str(data, "MediaComment", "content-type"),
            media_id=_str(data, "MediaComment", "media_id"),
            media_type=_str(data, "MediaComment", "media_type"),
            url=_str(data, "MediaComment", "url"),
            display_name=_str(data, "MediaComment", "display_name", required=False),
        )


@dataclass(frozen=True)
class SubmissionComment:
    """A comment left on a submission, optionally with media and attachments."""
    id: int
    author_id: int
    author_name: str
    comment: str
    created_at: datetime
    media_comment: Optional[MediaComment] = None
    attachments: tuple[Attachment, ...] = ()

    def __post_init__(self):
        _check_id("SubmissionComment", self.id)

    @classmethod
    def from_api_response(cls, data: dict) -> "SubmissionComment":
        data = _as_object(data, "SubmissionComment")
        media = data.get("media_comment")
        return cls(
            id=_int(data, "SubmissionComment", "id"),
            author_id=_int(data, "SubmissionComment", "author_id"),
            author_name=_str(data, "SubmissionComment", "author_name"),
            comment=_str(data, "SubmissionComment", "comment"),
            created_at=_datetime(data, "SubmissionComment", "created_at", required=True),
            media_comment=MediaComment.from_api_response(media) if media is not None else None,
            attachments=tuple(
                Attachment.from_api_response(a) for a in _list(data, "SubmissionComment", "attachments")
            ),
        )


@dataclass(frozen=True)
class Grade:
    """
    The current user's submission for one assignment.

    Attributes:
        id: Submission ID
        assignment_id: The assignment this submission is for
        score: Numeric score if graded
        grade: Letter/text grade if graded
        submitted_at: Timestamp when submitted, None if not submitted
        graded_at: Timestamp when graded
        workflow_state: State of submission (submitted, unsubmitted, graded, ...)
        excused, late, missing: Canvas status flags
        comments: Submission comments, oldest first as returned by Canvas
    """
    id: int
    assignment_id: int
    score: Optional[float] = None
    grade: Optional[str] = None
    submitted_at: Optional[datetime] = None
    graded_at: Optional[datetime] = None
    workflow_state: Optional[str] = None
    excused: Optional[bool] = None
    late: Optional[bool] = None
    missing: Optional[bool] = None
    comments: tuple[SubmissionComment, ...] = ()

    def __post_init__(self):
        _check_id("Grade", self.id)
        _check_id("Grade", self.assignment_id, field="assignment_id")

    @property
    def is_submitted(self) -> bool:
        """
        Check if the assignment has been submitted.

        A submission counts as submitted if submitted_at is set or the
        workflow state indicates submission (submitted, graded, pending_review).
        """
        if self.submitted_at is not None:
            return True
        return self.workflow_state in ("submitted", "graded", "pending_review")

    @classmethod
    def from_api_response(cls, data: dict) -> "Grade":
        """Create Grade from a Canvas submission object."""
        data = _as_object(data, "Grade")
        return cls(
            id=_int(data, "Grade", "id"),
            assignment_id=_int(data, "Grade", "assignment_id"),
            score=_float(data, "Grade", "score", required=False),
            grade=_str(data, "Grade", "grade", required=False),
            submitted_at=_datetime(data, "Grade", "submitted_at"),
            graded_at=_datetime(data, "Grade", "graded_at"),
            workflow_state=_str(data, "Grade", "workflow_state", required=False),
            excused=_bool(data, "Grade", "excused", required=False),
            late=_bool(data, "Grade", "late", required=False),
            missing=_bool(data, "Grade", "missing", required=False),
            comments=tuple(
                SubmissionComment.from_api_response(c)
                for c in _list(data, "Grade", "submission_comments")
            ),
        )


@dataclass(frozen=True)
class ModuleItemContent:
    """
    Resolved content behind a module item.

    Assignments, quizzes, discussions, files and pages all decode into this
    one shape. Key fallbacks, tried in order:

    - title: ``title``, ``name``, ``display_name`` (one is required)
    - content: ``body``, ``html_content``
    - url: ``html_url``, ``url``
    - mime_type: ``mime_type``, ``content-type``
    """
    id: int
    title: str
    description: Optional[str] = None
    content: Optional[str] = None
    html_content: Optional[str] = None
    url: Optional[str] = None
    file_url: Optional[str] = None
    mime_type: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        _check_id("ModuleItemContent", self.id)

    @classmethod
    def from_api_response(cls, data: dict) -> "ModuleItemContent":
        """Create ModuleItemContent from any supported content endpoint."""
        data = _as_object(data, "ModuleItemContent")
        entity = "ModuleItemContent"
        # pages are identified by page_id; every other endpoint uses id
        id_key = "page_id" if "id" not in data and "page_id" in data else "id"
        return cls(
            id=_int(data, entity, id_key),
            title=_first_str(data, entity, ("title", "name", "display_name"), required=True),
            description=_str(data, entity, "description", required=False),
            content=_first_str(data, entity, ("body", "html_content")),
            html_content=_str(data, entity, "html_content", required=False),
            url=_first_str(data, entity, ("html_url", "url")),
            file_url=_str(data, entity, "url", required=False),
            mime_type=_first_str(data, entity, ("mime_type", "content-type")),
            created_at=_datetime(data, entity, "created_at"),
            updated_at=_datetime(data, entity, "updated_at"),
        )

    @classmethod
    def from_module_item(cls, item: ModuleItem) -> "ModuleItemContent":
        """Build a minimal record for an item with no content object behind it."""
        return cls(
            id=item.id,
            title=item.title,
            url=item.external_url or item.html_url or item.url,
        )


@dataclass(frozen=True)
class Todo:
    """
    A to-do entry derived from an assignment.

    Attributes:
        id: Source object ID (the assignment ID for assignment todos)
        title: Display title
        message: Plain-text body, if any
        type: Source kind, "assignment" for assignment-derived todos
        due_at: Due date/time, None if no due date
    """
    id: int
    title: str
    type: str
    message: Optional[str] = None
    course_id: Optional[int] = None
    assignment_id: Optional[int] = None
    html_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    due_at: Optional[datetime] = None

    def __post_init__(self):
        _check_id("Todo", self.id)

    @classmethod
    def from_assignment(cls, assignment: Assignment) -> "Todo":
        return cls(
            id=assignment.id,
            title=assignment.name,
            type="assignment",
            message=assignment.description,
            course_id=assignment.course_id,
            assignment_id=assignment.id,
            html_url=assignment.html_url,
            due_at=assignment.due_at,
        )
