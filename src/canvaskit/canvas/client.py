"""
Canvas LMS API client.

Handles authentication, request execution and error mapping for the Canvas
REST API. All tokens are passed via configuration and never logged.

The client performs no automatic retries and does not follow ``Link``
pagination cursors: each list call returns at most one page of
``page_size`` items.
"""

import logging
from typing import Any, Callable, Optional, TypeVar
from urllib.parse import quote, urlsplit

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .errors import (
    CanvasAPIError,
    CanvasDecodingError,
    CanvasTransportError,
    ConfigurationError,
    HTTPStatusError,
    UnsupportedItemTypeError,
)
from .models import (
    Assignment,
    Course,
    FieldError,
    Grade,
    Module,
    ModuleItem,
    ModuleItemContent,
    Todo,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_TIMEOUT = 30.0
DEFAULT_PAGE_SIZE = 100


class CanvasClient:
    """
    Client for Canvas LMS API.

    Handles:
    - Authentication via bearer API token
    - JSON decoding into immutable typed records
    - Mapping transport, HTTP and decode failures onto CanvasAPIError

    Configuration is fixed at construction and the client keeps no other
    state, so one instance can be shared by many threads.

    Usage:
        with CanvasClient(domain="school.instructure.com", access_token="...") as client:
            for course in client.get_courses():
                for assignment in client.get_assignments(course.id):
                    print(assignment.name)
    """

    # API endpoints, relative to https://<domain>/api/v1
    COURSES_ENDPOINT = "/courses"
    MODULES_ENDPOINT = "/courses/{course_id}/modules"
    ASSIGNMENTS_ENDPOINT = "/courses/{course_id}/assignments"
    GRADES_ENDPOINT = "/courses/{course_id}/students/submissions"

    # Module item type tag -> content sub-resource
    CONTENT_ENDPOINTS = {
        "assignment": "/courses/{course_id}/assignments/{ref}",
        "quiz": "/courses/{course_id}/quizzes/{ref}",
        "discussion_topic": "/courses/{course_id}/discussion_topics/{ref}",
        "discussion": "/courses/{course_id}/discussion_topics/{ref}",
        "file": "/courses/{course_id}/files/{ref}",
        "page": "/courses/{course_id}/pages/{ref}",
    }

    def __init__(
        self,
        domain: str,
        access_token: str,
        timeout: float = DEFAULT_TIMEOUT,
        page_size: int = DEFAULT_PAGE_SIZE,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize Canvas client.

        Args:
            domain: Institution host, e.g. "school.instructure.com"
            access_token: Bearer API token (never logged)
            timeout: Per-request timeout in seconds
            page_size: per_page value sent with list requests
            session: Pre-configured session to issue requests with

        Raises:
            ConfigurationError: If the domain or token is unusable
        """
        self.domain = _validate_domain(domain)
        if not access_token or not access_token.strip():
            raise ConfigurationError("Canvas access token is required")
        if timeout <= 0:
            raise ConfigurationError(f"Timeout must be positive, got {timeout}")
        if page_size <= 0:
            raise ConfigurationError(f"Page size must be positive, got {page_size}")

        self.base_url = f"https://{self.domain}/api/v1"
        self._access_token = access_token  # Private, never logged
        self.timeout = timeout
        self.page_size = page_size

        # Sessions passed in by the caller are borrowed: not modified, not closed
        self._owns_session = session is None
        if session is None:
            session = requests.Session()
            # Retries are a caller concern; total=0 disables urllib3's own.
            adapter = HTTPAdapter(
                max_retries=Retry(total=0, raise_on_status=False),
                pool_maxsize=16,
            )
            session.mount("https://", adapter)
        self._session = session

        self._headers = {
            "Authorization": f"Bearer {self._access_token}",
            "Accept": "application/json",
            "Content-Type": "application/json",
        }

        logger.info(f"Canvas client initialized for {self.base_url}")

    def __repr__(self) -> str:
        """Never expose token in repr."""
        return f"CanvasClient(base_url='{self.base_url}')"

    def _make_request(
        self,
        endpoint: str,
        params: Optional[dict] = None,
    ) -> requests.Response:
        """
        Issue an authenticated GET against the Canvas API.

        Args:
            endpoint: API endpoint path, relative to the base URL
            params: Query parameters

        Returns:
            The response, already checked for a 2xx status

        Raises:
            CanvasTransportError: If no response was received
            HTTPStatusError: If the status is outside 200-299
        """
        url = f"{self.base_url}{endpoint}"
        logger.debug(f"GET {url} params={params}")

        try:
            response = self._session.get(
                url,
                params=params,
                headers=self._headers,
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            error_msg = f"Canvas request failed: {e}"
            logger.error(error_msg)
            raise CanvasTransportError(error_msg) from e

        if not 200 <= response.status_code < 300:
            error_msg = f"Canvas API error: HTTP {response.status_code} for {endpoint}"
            try:
                error_body = response.json()
                if isinstance(error_body, dict) and "errors" in error_body:
                    error_msg = f"{error_msg}: {error_body['errors']}"
            except ValueError:
                pass

            logger.error(error_msg)
            raise HTTPStatusError(response.status_code, error_msg)

        return response

    def _decode_body(self, response: requests.Response, target: str) -> Any:
        try:
            return response.json()
        except ValueError as e:
            logger.error(f"Response body for {target} is not valid JSON: {e}")
            raise CanvasDecodingError(e, target=target) from e

    def _fetch_one(
        self,
        endpoint: str,
        decode: Callable[[dict], T],
        target: str,
        params: Optional[dict] = None,
    ) -> T:
        """Fetch a single JSON object and decode it."""
        response = self._make_request(endpoint, params)
        data = self._decode_body(response, target)
        try:
            return decode(data)
        except (ValueError, TypeError) as e:
            logger.error(f"Failed to decode {target}: {e}")
            raise CanvasDecodingError(e, target=target) from e

    def _fetch_list(
        self,
        endpoint: str,
        decode: Callable[[dict], T],
        target: str,
        params: Optional[dict] = None,
    ) -> list[T]:
        """
        Fetch one page of a JSON array and decode every element.

        A malformed element fails the whole call rather than being skipped.
        """
        params = dict(params or {})
        params.setdefault("per_page", self.page_size)

        response = self._make_request(endpoint, params)
        data = self._decode_body(response, target)

        if not isinstance(data, list):
            e = FieldError(target, "<root>", f"expected JSON array, got {type(data).__name__}")
            logger.error(f"Failed to decode {target}: {e}")
            raise CanvasDecodingError(e, target=target) from e

        try:
            items = [decode(item) for item in data]
        except (ValueError, TypeError) as e:
            logger.error(f"Failed to decode {target}: {e}")
            raise CanvasDecodingError(e, target=target) from e

        if _has_next_page(response):
            logger.warning(
                f"{endpoint} has more than {self.page_size} results; "
                f"only the first page was returned"
            )

        return items

    def get_courses(self) -> list[Course]:
        """
        Fetch the current user's active student courses.

        Returns:
            List of Course objects, in the order Canvas returned them
        """
        logger.info("Fetching active courses...")

        courses = self._fetch_list(
            self.COURSES_ENDPOINT,
            Course.from_api_response,
            target="courses",
            params={
                "enrollment_state": "active",
                "enrollment_type": "student",
                "state[]": "available",
                "include[]": "term",
            },
        )

        for course in courses:
            logger.debug(f"Found course: {course.name} (ID: {course.id})")
        logger.info(f"Found {len(courses)} active courses")
        return courses

    def get_modules(self, course_id: int) -> list[Module]:
        """
        Fetch the modules of a course with their items inlined.

        Args:
            course_id: Course to fetch modules for

        Returns:
            List of Module objects, each carrying its ModuleItems
        """
        _check_course_id(course_id)
        logger.info(f"Fetching modules for course {course_id}")

        modules = self._fetch_list(
            self.MODULES_ENDPOINT.format(course_id=course_id),
            Module.from_api_response,
            target="modules",
            params={"include[]": ["items", "content_details"]},
        )

        logger.info(f"Found {len(modules)} modules in course {course_id}")
        return modules

    def get_assignments(self, course_id: int) -> list[Assignment]:
        """
        Fetch all assignments for a course, descriptions included.

        Args:
            course_id: Course to fetch assignments for

        Returns:
            List of Assignment objects
        """
        _check_course_id(course_id)
        logger.info(f"Fetching assignments for course {course_id}")

        assignments = self._fetch_list(
            self.ASSIGNMENTS_ENDPOINT.format(course_id=course_id),
            Assignment.from_api_response,
            target="assignments",
            params={"include[]": "description"},
        )

        logger.info(f"Found {len(assignments)} assignments in course {course_id}")
        return assignments

    def get_grades(self, course_id: int) -> list[Grade]:
        """
        Fetch the current user's own submissions for a course.

        Args:
            course_id: Course to fetch grades for

        Returns:
            List of Grade objects with submission comments inlined
        """
        _check_course_id(course_id)
        logger.info(f"Fetching grades for course {course_id}")

        grades = self._fetch_list(
            self.GRADES_ENDPOINT.format(course_id=course_id),
            Grade.from_api_response,
            target="grades",
            params={
                "student_ids[]": "self",
                "include[]": "submission_comments",
            },
        )

        logger.info(f"Found {len(grades)} grades in course {course_id}")
        return grades

    def get_module_item_content(self, course_id: int, module_item: ModuleItem) -> ModuleItemContent:
        """
        Resolve the content a module item points at.

        Items with no content reference (external links, sub headers) are
        answered locally from the item itself without a request.

        Args:
            course_id: Course the item belongs to
            module_item: A previously fetched ModuleItem

        Returns:
            The resolved ModuleItemContent

        Raises:
            UnsupportedItemTypeError: If the item type has no content endpoint
        """
        _check_course_id(course_id)
        item_type = module_item.type.lower()

        if item_type == "page":
            ref = module_item.page_url or module_item.content_id
        else:
            ref = module_item.content_id

        if ref is None:
            logger.debug(f"Module item {module_item.id} has no content reference; using item data")
            return ModuleItemContent.from_module_item(module_item)

        template = self.CONTENT_ENDPOINTS.get(item_type)
        if template is None:
            logger.error(f"Unsupported module item type: {module_item.type}")
            raise UnsupportedItemTypeError(module_item.type)

        endpoint = template.format(course_id=course_id, ref=quote(str(ref), safe=""))
        logger.debug(f"Fetching {item_type} content for module item {module_item.id}")

        return self._fetch_one(
            endpoint,
            ModuleItemContent.from_api_response,
            target=f"{item_type} content",
        )

    def get_todos(self) -> list[Todo]:
        """
        Build to-do entries from the assignments of every active course.

        Courses are fetched first, then their assignments one course at a
        time. Results are grouped by course in the order courses were
        returned. The first failing course aborts the whole call.

        Returns:
            List of Todo objects
        """
        todos = []

        courses = self.get_courses()
        for course in courses:
            try:
                assignments = self.get_assignments(course.id)
            except CanvasAPIError as e:
                logger.error(f"Aborting todo fetch at course {course.name} (ID: {course.id}): {e}")
                raise
            todos.extend(Todo.from_assignment(a) for a in assignments)

        logger.info(f"Total todos across all courses: {len(todos)}")
        return todos

    def close(self) -> None:
        """Close the HTTP session, unless it was supplied by the caller."""
        if not self._owns_session:
            return
        self._session.close()
        logger.debug("Canvas client session closed")

    def __enter__(self) -> "CanvasClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


def _validate_domain(domain: str) -> str:
    """Return the normalized host, or raise ConfigurationError."""
    if not isinstance(domain, str) or not domain.strip():
        raise ConfigurationError("Canvas domain is required")

    domain = domain.strip().rstrip("/")
    if any(ch.isspace() for ch in domain) or "://" in domain:
        raise ConfigurationError(f"Canvas domain must be a bare host name, got {domain!r}")

    try:
        parts = urlsplit(f"https://{domain}")
        # Accessing .port validates the port number
        parts.port
    except ValueError as e:
        raise ConfigurationError(f"Invalid Canvas domain {domain!r}: {e}") from e

    if not parts.hostname or parts.path or parts.query or parts.fragment or "@" in parts.netloc:
        raise ConfigurationError(f"Canvas domain must be a bare host name, got {domain!r}")

    # urlsplit accepts "host:" with an empty port
    if parts.netloc.endswith(":"):
        raise ConfigurationError(f"Canvas domain has an empty port, got {domain!r}")

    # IPv6 literals ([::1]) have no dot-separated labels to check
    if not parts.netloc.startswith("["):
        labels = parts.hostname.rstrip(".").split(".")
        if not all(labels):
            raise ConfigurationError(f"Canvas domain has an empty host label, got {domain!r}")

    return domain


def _check_course_id(course_id: int) -> None:
    if isinstance(course_id, bool) or not isinstance(course_id, int) or course_id <= 0:
        raise ValueError(f"Course ID must be a positive integer, got {course_id!r}")


def _has_next_page(response: requests.Response) -> bool:
    """Check the Link header for a rel="next" page."""
    link_header = response.headers.get("Link", "")
    return any('rel="next"' in link for link in link_header.split(","))
