"""
Pytest configuration and shared fixtures.

Provides a fake HTTP transport and Canvas API test data.
"""

import json
import threading
from typing import Optional
from urllib.parse import parse_qs, urlsplit

import pytest
import requests
from requests.adapters import BaseAdapter

from canvaskit.canvas.client import CanvasClient


TEST_DOMAIN = "school.instructure.com"
TEST_TOKEN = "test-token-abc123"


# ============================================================================
# Fake Transport
# ============================================================================

class FakeCanvasAdapter(BaseAdapter):
    """
    Transport adapter answering requests from a table of canned routes.

    Routes are keyed by URL path. Unrouted paths answer 404.
    """

    def __init__(self):
        super().__init__()
        self.routes: dict[str, tuple] = {}
        self.requests: list[requests.PreparedRequest] = []
        self.timeouts: list = []
        self.closed = False
        self._lock = threading.Lock()

    def add(
        self,
        path: str,
        body=None,
        status: int = 200,
        headers: Optional[dict] = None,
        raw: Optional[bytes] = None,
        exc: Optional[Exception] = None,
    ) -> None:
        self.routes[f"/api/v1{path}"] = (body, status, headers or {}, raw, exc)

    @property
    def paths(self) -> list[str]:
        return [urlsplit(r.url).path for r in self.requests]

    def query(self, index: int = -1) -> dict[str, list[str]]:
        return parse_qs(urlsplit(self.requests[index].url).query)

    def send(self, request, stream=False, timeout=None, verify=True, cert=None, proxies=None):
        with self._lock:
            self.requests.append(request)
            self.timeouts.append(timeout)

        path = urlsplit(request.url).path
        body, status, headers, raw, exc = self.routes.get(
            path, ({"errors": [{"message": "The specified resource does not exist."}]}, 404, {}, None, None)
        )
        if exc is not None:
            raise exc

        response = requests.Response()
        response.status_code = status
        response._content = raw if raw is not None else json.dumps(body).encode("utf-8")
        response.headers["Content-Type"] = "application/json"
        response.headers.update(headers)
        response.encoding = "utf-8"
        response.url = request.url
        response.request = request
        return response

    def close(self):
        self.closed = True


@pytest.fixture
def adapter() -> FakeCanvasAdapter:
    return FakeCanvasAdapter()


@pytest.fixture
def client(adapter: FakeCanvasAdapter) -> CanvasClient:
    """CanvasClient whose session is wired to the fake adapter."""
    session = requests.Session()
    session.mount("https://", adapter)
    with CanvasClient(domain=TEST_DOMAIN, access_token=TEST_TOKEN, session=session) as c:
        yield c


# ============================================================================
# API Response Fixtures
# ============================================================================

@pytest.fixture
def canvas_course_response() -> dict:
    """Sample Canvas API course response."""
    return {
        "id": 12345,
        "name": "Introduction to Computer Science",
        "course_code": "CS101",
        "workflow_state": "available",
        "start_at": "2026-01-12T08:00:00Z",
        "end_at": None,
        "enrollment_term": {
            "id": 7,
            "name": "Spring 2026",
            "start_at": "2026-01-05T00:00:00-0800",
            "end_at": "2026-05-20T00:00:00-0700",
        },
    }


@pytest.fixture
def canvas_second_course_response() -> dict:
    return {
        "id": 23456,
        "name": "Linear Algebra",
        "course_code": "MATH221",
    }


@pytest.fixture
def canvas_assignment_response() -> dict:
    """Sample Canvas API assignment response."""
    return {
        "id": 67890,
        "course_id": 12345,
        "name": "Homework 1: Python Basics",
        "description": "<p>Complete the exercises.</p>",
        "description_text": "Complete the exercises.",
        "due_at": "2026-01-20T23:59:00Z",
        "html_url": "https://school.instructure.com/courses/12345/assignments/67890",
        "points_possible": 100,
        "submission_types": ["online_upload", "online_text_entry"],
        "is_quiz_assignment": False,
        "locked": False,
        "allowed_attempts": -1,
        "grading_type": "points",
        "published": True,
    }


@pytest.fixture
def canvas_module_response() -> dict:
    """Sample Canvas API module response with inlined items."""
    return {
        "id": 501,
        "name": "Week 1",
        "position": 1,
        "unlock_at": None,
        "require_sequential_progress": False,
        "publish_final_grade": False,
        "items_count": 3,
        "items": [
            {
                "id": 9001,
                "module_id": 501,
                "title": "Homework 1: Python Basics",
                "position": 1,
                "indent": 0,
                "type": "Assignment",
                "content_id": 67890,
                "html_url": "https://school.instructure.com/courses/12345/modules/items/9001",
                "url": "https://school.instructure.com/api/v1/courses/12345/assignments/67890",
                "completion_requirement": {"type": "must_submit", "completed": False},
                "content_details": {
                    "points_possible": 100.0,
                    "due_at": "2026-01-20T23:59:00Z",
                    "locked_for_user": False,
                },
            },
            {
                "id": 9002,
                "module_id": 501,
                "title": "Syllabus",
                "position": 2,
                "indent": 1,
                "type": "Page",
                "page_url": "syllabus-overview",
                "html_url": "https://school.instructure.com/courses/12345/modules/items/9002",
            },
            {
                "id": 9003,
                "module_id": 501,
                "title": "Python documentation",
                "position": 5,
                "indent": 0,
                "type": "ExternalUrl",
                "external_url": "https://docs.python.org/3/",
                "new_tab": True,
            },
        ],
    }


@pytest.fixture
def canvas_grade_response() -> dict:
    """Sample Canvas API submission response with comments."""
    return {
        "id": 3301,
        "assignment_id": 67890,
        "score": 95.5,
        "grade": "A",
        "submitted_at": "2026-01-19T14:30:00Z",
        "graded_at": "2026-01-22T09:00:00Z",
        "workflow_state": "graded",
        "excused": False,
        "late": False,
        "missing": False,
        "submission_comments": [
            {
                "id": 81,
                "author_id": 4,
                "author_name": "Prof. Rivera",
                "comment": "Nice work on question 3.",
                "created_at": "2026-01-22T09:05:00Z",
                "media_comment": {
                    "content-type": "audio/mp4",
                    "display_name": "Feedback",
                    "media_id": "m-123",
                    "media_type": "audio",
                    "url": "https://school.instructure.com/media/m-123",
                },
                "attachments": [
                    {
                        "id": 44,
                        "display_name": "rubric.pdf",
                        "filename": "rubric.pdf",
                        "content-type": "application/pdf",
                        "url": "https://school.instructure.com/files/44/download",
                        "size": 20480,
                    }
                ],
            }
        ],
    }


@pytest.fixture
def canvas_page_response() -> dict:
    """Sample Canvas API page response."""
    return {
        "page_id": 77,
        "url": "syllabus-overview",
        "title": "Syllabus",
        "body": "<h1>Welcome</h1>",
        "html_url": "https://school.instructure.com/courses/12345/pages/syllabus-overview",
        "created_at": "2026-01-02T10:00:00Z",
        "updated_at": "2026-01-03T10:00:00Z",
    }


@pytest.fixture
def canvas_file_response() -> dict:
    """Sample Canvas API file response."""
    return {
        "id": 555,
        "display_name": "lecture1.pdf",
        "filename": "lecture1.pdf",
        "content-type": "application/pdf",
        "url": "https://school.instructure.com/files/555/download",
        "size": 1024,
        "created_at": "2026-01-02T10:00:00Z",
        "updated_at": "2026-01-02T10:00:00Z",
    }
