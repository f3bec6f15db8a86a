"""Pytest fixtures: an in-process fake of the Story Spoiler service."""
import json
import uuid
from typing import Any, Dict, List, Optional
import httpx
import pytest

from src.analyzer.failure_capture import pytest_runtest_makereport  # noqa: F401
from src.session.bootstrap import Credentials, StorySession

BASE_URL = "https://stories.test"
USERNAME = "tester"
PASSWORD = "secret"
TOKEN = "test-access-token"


class FakeStoryService:
    """Behaves like the real Story service for the requests the scenario makes."""

    def __init__(self, username: str = USERNAME, password: str = PASSWORD, token: str = TOKEN):
        self.username = username
        self.password = password
        self.token = token
        self.stories: Dict[str, Dict[str, Any]] = {}
        self.requests: List[httpx.Request] = []
        # Route -> canned response, checked before the normal behaviour
        self.overrides: Dict[str, httpx.Response] = {}
        self.transport = httpx.MockTransport(self.handle)

    def _json(self, status: int, body: Any) -> httpx.Response:
        return httpx.Response(status, json=body)

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        key = f"{request.method} {path}"
        if key in self.overrides:
            canned = self.overrides[key]
            return httpx.Response(canned.status_code, headers=canned.headers, content=canned.content)

        if key == "POST /api/User/Authentication":
            data = json.loads(request.content)
            if data.get("userName") == self.username and data.get("password") == self.password:
                return self._json(200, {"accessToken": self.token, "username": self.username})
            return self._json(401, {"msg": "Invalid credentials"})

        if request.headers.get("Authorization") != f"Bearer {self.token}":
            return self._json(401, {"msg": "Unauthorized"})

        if key == "POST /api/Story/Create":
            data = json.loads(request.content)
            if not data.get("Title"):
                return self._json(400, {"errors": {"Title": ["The Title field is required."]}})
            story_id = str(uuid.uuid4())
            self.stories[story_id] = {
                "storyId": story_id,
                "title": data["Title"],
                "description": data.get("Description", ""),
                "url": data.get("Url", ""),
            }
            return self._json(201, {"storyId": story_id, "msg": "Successfully created!"})

        if request.method == "PUT" and path.startswith("/api/Story/Edit/"):
            story_id = path.rsplit("/", 1)[-1]
            if story_id not in self.stories:
                return self._json(404, {"msg": "No spoilers..."})
            data = json.loads(request.content)
            self.stories[story_id].update(
                title=data["Title"], description=data.get("Description", ""), url=data.get("Url", "")
            )
            return self._json(200, {"msg": "Successfully edited"})

        if key == "GET /api/Story/All":
            return self._json(200, list(self.stories.values()))

        if request.method == "DELETE" and path.startswith("/api/Story/Delete/"):
            story_id = path.rsplit("/", 1)[-1]
            if self.stories.pop(story_id, None) is None:
                return self._json(400, {"msg": "Unable to delete this story spoiler!"})
            return self._json(200, {"msg": "Deleted successfully!"})

        return self._json(404, {"msg": "Not found"})

    def last_request(self, method: str, prefix: str) -> Optional[httpx.Request]:
        for request in reversed(self.requests):
            if request.method == method and request.url.path.startswith(prefix):
                return request
        return None


@pytest.fixture
def service():
    """Fresh fake Story service."""
    return FakeStoryService()


@pytest.fixture
def credentials():
    return Credentials(userName=USERNAME, password=PASSWORD)


@pytest.fixture
def session(service, credentials):
    """Unopened session pointed at the fake service."""
    return StorySession(BASE_URL, credentials, timeout=5.0, transport=service.transport)


@pytest.fixture
def client(session):
    """Authenticated tracking client, closed after the test."""
    with session as tracking_client:
        yield tracking_client
