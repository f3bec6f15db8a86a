"""Failure context models written when a scenario step fails."""
import json
import traceback
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional
import httpx
from pydantic import BaseModel, Field


class APIResponse(BaseModel):
    """Captured HTTP response data."""
    status_code: int
    body: Any = Field(default=None, description="Response body (parsed JSON or raw text)")
    headers: Dict[str, str] = Field(default_factory=dict)
    url: str = Field(default="", description="Request URL")

    @classmethod
    def from_response(cls, response: httpx.Response) -> "APIResponse":
        """Snapshot an httpx response while its content is still readable."""
        try:
            body = response.json()
        except ValueError:
            body = response.text
        return cls(
            status_code=response.status_code,
            body=body,
            headers=dict(response.headers),
            url=str(response.url),
        )


class StepFailure(BaseModel):
    """Scenario step failure metadata."""
    step_name: str = Field(description="Name of the scenario step")
    step_index: Optional[int] = Field(default=None, description="1-based position of the step in the scenario")
    error_type: str = Field(description="Exception type (e.g., StepAssertionError)")
    error_message: str = Field(description="Error message")
    actual: Optional[Any] = Field(default=None, description="Actual value from assertion")
    expected: Optional[Any] = Field(default=None, description="Expected value from assertion")
    traceback: Optional[str] = Field(default=None, description="Full traceback")


class FailureContext(BaseModel):
    """Complete failure context for a failed step."""
    step_failure: StepFailure
    api_response: Optional[APIResponse] = Field(default=None)
    request_method: Optional[str] = Field(default=None, description="HTTP method (GET, POST, etc.)")
    request_url: Optional[str] = Field(default=None)
    request_payload: Optional[Any] = Field(default=None, description="Request body/payload")
    timestamp: str = Field(default_factory=lambda: datetime.now().isoformat())

    @classmethod
    def capture(cls, step_name: str, error: BaseException, client=None, step_index: Optional[int] = None) -> "FailureContext":
        """Build the context for ``error`` from the client's last request and response."""
        last_request = (client.get_last_request() if client is not None else None) or {}
        return cls(
            step_failure=StepFailure(
                step_name=step_name,
                step_index=step_index,
                error_type=type(error).__name__,
                error_message=str(error),
                actual=getattr(error, "actual", None),
                expected=getattr(error, "expected", None),
                traceback="".join(traceback.format_exception(type(error), error, error.__traceback__)),
            ),
            api_response=client.get_last_response() if client is not None else None,
            request_method=last_request.get("method"),
            request_url=last_request.get("url"),
            request_payload=last_request.get("payload"),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return self.model_dump()

    def to_json(self, indent: int = 2) -> str:
        """Convert to JSON string."""
        return json.dumps(self.to_dict(), indent=indent, default=str)

    def write(self, output_dir: Path, name: Optional[str] = None) -> Path:
        """Write this context to ``<output_dir>/<name or step_name>.json`` and return the path."""
        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)
        output_file = output_dir / f"{name or self.step_failure.step_name}.json"
        output_file.write_text(self.to_json(), encoding="utf-8")
        return output_file
