"""Pytest hook that writes failure context for tests driving a TrackingClient."""
import logging
import re
from pathlib import Path
from typing import Optional
import pytest

from config import settings
from src.analyzer.failure_parser import FailureContext
from src.session.tracking import TrackingClient

logger = logging.getLogger(__name__)


def _tracking_client(item) -> Optional[TrackingClient]:
    """First TrackingClient among the test's fixture values, if any."""
    for value in getattr(item, "funcargs", {}).values():
        if isinstance(value, TrackingClient):
            return value
    return None


@pytest.hookimpl(tryfirst=True, hookwrapper=True)
def pytest_runtest_makereport(item, call):
    """Capture failures of tests that talk to the Story service."""
    outcome = yield
    report = outcome.get_result()

    # Only process failures
    if report.when != "call" or not report.failed or call.excinfo is None:
        return

    client = _tracking_client(item)
    if client is None:
        return

    context = FailureContext.capture(item.name, call.excinfo.value, client)

    # Sanitize node id for filename
    safe_name = re.sub(r"[^\w\-]", "_", item.nodeid)
    try:
        output_file = context.write(Path(settings.STORY_API_FAILURES_DIR), name=safe_name)
    except OSError as e:
        logger.error(f"Could not write failure context for {item.nodeid}: {e}", exc_info=True)
        return

    print(f"\n[FAILURE CAPTURED] {item.name} -> {output_file}")
