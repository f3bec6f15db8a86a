"""Scenario steps against the Story resource.

Each step sends one request through the shared client and checks the status
code and JSON fields. A mismatch raises ``StepAssertionError``; transport
errors propagate as ``httpx.HTTPError``.
"""
import logging
from typing import Any, List
import httpx
from pydantic import TypeAdapter, ValidationError

from src.errors import StepAssertionError
from src.scenario.models import ApiResponseDTO, MessageResponse, StoryDTO

logger = logging.getLogger(__name__)

CREATE_PATH = "/api/Story/Create"
EDIT_PATH = "/api/Story/Edit/{story_id}"
LIST_PATH = "/api/Story/All"
DELETE_PATH = "/api/Story/Delete/{story_id}"

MSG_CREATED = "Successfully created!"
MSG_EDITED = "Successfully edited"
MSG_DELETED = "Deleted successfully!"
MSG_NOT_FOUND = "No spoilers..."
MSG_DELETE_FAILED = "Unable to delete this story spoiler!"

NON_EXISTING_EDIT_ID = "11111111"
NON_EXISTING_DELETE_ID = "2222222"

NEW_STORY = StoryDTO(Title="New story", Description="New story description", Url="")
EDITED_STORY = StoryDTO(Title="Edited the last created story", Description="Edited story description", Url="")
UNTITLED_STORY = StoryDTO(Title="", Description="Testing bad request", Url="")
MISSING_STORY = StoryDTO(Title="Non existing story", Description="Edited non exising description", Url="")

_story_list = TypeAdapter(List[ApiResponseDTO])


def expect_status(response: httpx.Response, expected: int) -> None:
    """Raise if the response status is not ``expected``."""
    if response.status_code != expected:
        raise StepAssertionError(
            f"{response.request.method} {response.request.url.path}: "
            f"expected status {expected}, got {response.status_code}",
            actual=response.status_code,
            expected=expected,
        )


def json_body(response: httpx.Response) -> Any:
    """Parse the response body as JSON or raise a step failure."""
    try:
        return response.json()
    except ValueError as e:
        raise StepAssertionError(
            f"Response body is not valid JSON: {response.text[:200]!r}",
            actual=response.text,
            expected="JSON body",
        ) from e


def expect_msg(response: httpx.Response, expected: str) -> MessageResponse:
    """Check ``msg`` in a JSON object body and return the parsed body."""
    data = json_body(response)
    if not isinstance(data, dict):
        raise StepAssertionError(
            f"Expected a JSON object, got {type(data).__name__}",
            actual=data,
            expected="object",
        )
    try:
        body = MessageResponse.model_validate(data)
    except ValidationError as e:
        raise StepAssertionError(
            f"Response body does not match the message shape: {e.error_count()} error(s)",
            actual=data,
            expected="{msg, storyId?}",
        ) from e

    if body.msg != expected:
        raise StepAssertionError(
            f"Expected msg {expected!r}, got {body.msg!r}",
            actual=body.msg,
            expected=expected,
        )
    return body


def create_story(client) -> str:
    """Create a story and return its ``storyId``."""
    response = client.post(CREATE_PATH, json=NEW_STORY.to_payload())
    expect_status(response, 201)
    if "storyId" not in response.text:
        raise StepAssertionError(
            "Response does not contain 'storyId'",
            actual=response.text,
            expected="storyId",
        )
    body = expect_msg(response, MSG_CREATED)

    story_id = body.story_id
    if not story_id:
        raise StepAssertionError(
            f"Expected a non-empty storyId, got {story_id!r}",
            actual=story_id,
            expected="non-empty string",
        )
    logger.info(f"Created story {story_id}")
    return story_id


def edit_story(client, story_id: str) -> None:
    """Edit the story created earlier in the run."""
    response = client.put(EDIT_PATH.format(story_id=story_id), json=EDITED_STORY.to_payload())
    expect_status(response, 200)
    expect_msg(response, MSG_EDITED)


def list_stories(client) -> List[ApiResponseDTO]:
    """List all stories; the list must be non-empty."""
    response = client.get(LIST_PATH)
    expect_status(response, 200)
    data = json_body(response)

    if not isinstance(data, list):
        raise StepAssertionError(
            f"Expected a JSON array, got {type(data).__name__}",
            actual=data,
            expected="array",
        )
    if not data:
        raise StepAssertionError("Expected a non-empty list of stories", actual=data, expected="non-empty")

    try:
        stories = _story_list.validate_python(data)
    except ValidationError as e:
        raise StepAssertionError(
            f"Story list items do not match the expected shape: {e.error_count()} error(s)",
            actual=data,
            expected="list of story objects",
        ) from e
    logger.info(f"Listed {len(stories)} stories")
    return stories


def delete_story(client, story_id: str) -> None:
    """Delete the story created earlier in the run."""
    response = client.delete(DELETE_PATH.format(story_id=story_id))
    expect_status(response, 200)
    expect_msg(response, MSG_DELETED)
    logger.info(f"Deleted story {story_id}")


def create_story_without_title(client) -> None:
    """Create with an empty Title must be rejected with 400."""
    response = client.post(CREATE_PATH, json=UNTITLED_STORY.to_payload())
    expect_status(response, 400)


def edit_missing_story(client) -> None:
    """Edit of an id that does not exist must return 404."""
    response = client.put(EDIT_PATH.format(story_id=NON_EXISTING_EDIT_ID), json=MISSING_STORY.to_payload())
    expect_status(response, 404)
    expect_msg(response, MSG_NOT_FOUND)


def delete_missing_story(client) -> None:
    """Delete of an id that does not exist returns 400 on this service."""
    response = client.delete(DELETE_PATH.format(story_id=NON_EXISTING_DELETE_ID))
    expect_status(response, 400)
    expect_msg(response, MSG_DELETE_FAILED)
