"""Session bootstrap: one-time login and the shared authenticated client.

The Story service issues a bearer token from ``POST /api/User/Authentication``.
``StorySession`` logs in once, builds a single ``httpx.Client`` that sends
``Authorization: Bearer <token>`` on every request, and closes it when the
``with`` block exits, however it exits.
"""
import logging
from typing import Any, Optional
import httpx
from pydantic import BaseModel, ConfigDict, Field

from src.errors import AuthenticationError, SessionError, TokenParseError
from src.session.tracking import TrackingClient

logger = logging.getLogger(__name__)

AUTH_PATH = "/api/User/Authentication"


class Credentials(BaseModel):
    """Login credentials, fixed for the whole run."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    user_name: str = Field(alias="userName")
    password: str = Field(repr=False)

    def to_payload(self) -> dict:
        return self.model_dump(by_alias=True)


def fetch_access_token(client: httpx.Client, credentials: Credentials) -> str:
    """
    Log in and return the bearer token.

    Args:
        client: Unauthenticated client pointed at the service origin
        credentials: Username and password to log in with

    Returns:
        The ``accessToken`` string from the response body

    Raises:
        AuthenticationError: The service answered with a non-success status
        TokenParseError: The body is not JSON or has no ``accessToken`` string
    """
    response = client.post(AUTH_PATH, json=credentials.to_payload())

    if not response.is_success:
        raise AuthenticationError(
            f"Failed to retrieve JWT token. Status: {response.status_code}, Content: {response.text}",
            status_code=response.status_code,
            body=response.text,
        )

    try:
        data = response.json()
    except ValueError as e:
        raise TokenParseError(
            f"Authentication response is not valid JSON: {e}",
            status_code=response.status_code,
            body=response.text,
        ) from e

    token = data.get("accessToken") if isinstance(data, dict) else None
    if not isinstance(token, str) or not token:
        raise TokenParseError(
            "Authentication response has no 'accessToken' field",
            status_code=response.status_code,
            body=response.text,
        )

    return token


class StorySession:
    """Setup/teardown scope owning the shared authenticated client."""

    def __init__(
        self,
        base_url: str,
        credentials: Credentials,
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """Initialize session.

        Args:
            base_url: Service origin (e.g., https://d3s5nxhwblsjbi.cloudfront.net)
            credentials: Login credentials
            timeout: Per-request timeout in seconds
            transport: Optional httpx transport (used to point tests at a fake service)
        """
        self.base_url = base_url.rstrip("/")
        self.credentials = credentials
        self.timeout = timeout
        self._transport = transport
        self._http: Optional[httpx.Client] = None
        self._client: Optional[TrackingClient] = None
        self._opened = False

    @classmethod
    def from_settings(cls, **overrides: Any) -> "StorySession":
        """Build a session from ``config.settings``; keyword overrides win."""
        from config import settings

        credentials = overrides.pop("credentials", None)
        if credentials is None:
            credentials = Credentials(
                userName=settings.STORY_API_USERNAME,
                password=settings.STORY_API_PASSWORD,
            )
        base_url = overrides.pop("base_url", None)
        timeout = overrides.pop("timeout", None)
        return cls(
            base_url=settings.STORY_API_BASE_URL if base_url is None else base_url,
            credentials=credentials,
            timeout=settings.STORY_API_TIMEOUT if timeout is None else timeout,
            **overrides,
        )

    @property
    def client(self) -> TrackingClient:
        """The shared authenticated client."""
        if self._client is None:
            raise SessionError("Session is not open. Use 'with StorySession(...)'.")
        return self._client

    def _new_http_client(self, headers: Optional[dict] = None) -> httpx.Client:
        return httpx.Client(
            base_url=self.base_url,
            timeout=self.timeout,
            headers=headers,
            transport=self._transport,
        )

    def open(self) -> TrackingClient:
        """Log in and build the shared client. Runs once per session."""
        if self._opened:
            raise SessionError("Session was already opened; create a new StorySession.")
        self._opened = True

        logger.info(f"Authenticating as {self.credentials.user_name} against {self.base_url}")
        with self._new_http_client() as login_client:
            token = fetch_access_token(login_client, self.credentials)
        logger.info("Authentication succeeded")

        self._http = self._new_http_client(headers={"Authorization": f"Bearer {token}"})
        self._client = TrackingClient(self._http)
        return self._client

    def close(self) -> None:
        """Release the shared client. Safe to call more than once."""
        if self._http is not None:
            self._http.close()
            logger.debug("Shared client closed")
        self._http = None
        self._client = None

    def __enter__(self) -> TrackingClient:
        return self.open()

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
