"""Exception hierarchy for the Story Spoiler API test suite."""
from typing import Optional


class StoryApiError(Exception):
    """Base error for everything raised by this package."""


class AuthenticationError(StoryApiError):
    """Login against the Story service failed. Fatal for the whole run."""

    def __init__(self, message: str, status_code: Optional[int] = None, body: Optional[str] = None):
        self.message = message
        self.status_code = status_code
        self.body = body
        super().__init__(message)


class TokenParseError(AuthenticationError):
    """Login succeeded but the response carried no usable access token."""


class SessionError(StoryApiError):
    """The shared client was used outside of its session scope."""


class StepAssertionError(StoryApiError, AssertionError):
    """A scenario step got a response it did not expect."""

    def __init__(self, message: str, actual=None, expected=None):
        self.actual = actual
        self.expected = expected
        super().__init__(message)
