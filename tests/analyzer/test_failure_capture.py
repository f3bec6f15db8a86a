"""Tests for the pytest failure-capture hook."""
import json
import pytest

from config import settings

CONFTEST = """
import httpx
import pytest

from src.analyzer.failure_capture import pytest_runtest_makereport
from src.session.tracking import TrackingClient


@pytest.fixture
def tracked():
    def handler(request):
        return httpx.Response(400, json={"msg": "Unable to delete this story spoiler!"})

    with httpx.Client(base_url="https://stories.test", transport=httpx.MockTransport(handler)) as http:
        yield TrackingClient(http)
"""


@pytest.fixture
def failures_dir(tmp_path, monkeypatch):
    """Point the hook at a temporary failures directory."""
    output = tmp_path / "failures"
    monkeypatch.setattr(settings, "STORY_API_FAILURES_DIR", str(output))
    return output


def test_failed_step_writes_failure_context(pytester, failures_dir):
    """A failing test that used a TrackingClient leaves a context file behind."""
    pytester.makeconftest(CONFTEST)
    pytester.makepyfile(test_delete="""
        from src.scenario import steps

        def test_delete_twice(tracked):
            steps.delete_story(tracked, "abc")
    """)

    result = pytester.runpytest()

    result.assert_outcomes(failed=1)
    files = list(failures_dir.glob("*.json"))
    assert len(files) == 1
    assert files[0].name == "test_delete_py__test_delete_twice.json"

    data = json.loads(files[0].read_text(encoding="utf-8"))
    assert data["step_failure"]["step_name"] == "test_delete_twice"
    assert data["step_failure"]["step_index"] is None
    assert data["step_failure"]["error_type"] == "StepAssertionError"
    assert data["step_failure"]["actual"] == 400
    assert data["step_failure"]["expected"] == 200
    assert data["request_method"] == "DELETE"
    assert data["request_url"] == "/api/Story/Delete/abc"
    assert data["api_response"]["status_code"] == 400
    assert data["api_response"]["body"] == {"msg": "Unable to delete this story spoiler!"}


def test_passing_and_untracked_tests_write_nothing(pytester, failures_dir):
    """Only failures with a TrackingClient fixture are captured."""
    pytester.makeconftest(CONFTEST)
    pytester.makepyfile(test_quiet="""
        from src.scenario import steps

        def test_negative_delete_passes(tracked):
            steps.delete_missing_story(tracked)

        def test_plain_failure():
            assert 1 == 2
    """)

    result = pytester.runpytest()

    result.assert_outcomes(passed=1, failed=1)
    assert not failures_dir.exists()
