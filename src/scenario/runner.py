"""Ordered scenario runner.

The scenario is a fixed tuple of steps run one after another on the same
client. The story id produced by the create step is handed to the edit and
delete steps as an argument; a failed step is recorded and the runner moves
on to the next one.
"""
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional, Sequence
import httpx

from src.analyzer.failure_parser import FailureContext
from src.errors import StepAssertionError
from src.scenario import steps
from src.session.bootstrap import StorySession
from src.session.tracking import TrackingClient

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScenarioStep:
    """One ordered unit of the scenario."""
    name: str
    action: Callable
    description: str = ""
    needs_story_id: bool = False
    yields_story_id: bool = False


SCENARIO = (
    ScenarioStep(
        "create_story",
        steps.create_story,
        "POST /api/Story/Create -> 201 'Successfully created!'",
        yields_story_id=True,
    ),
    ScenarioStep(
        "edit_last_created_story",
        steps.edit_story,
        "PUT /api/Story/Edit/{id} -> 200 'Successfully edited'",
        needs_story_id=True,
    ),
    ScenarioStep(
        "list_all_stories",
        steps.list_stories,
        "GET /api/Story/All -> 200 non-empty list",
    ),
    ScenarioStep(
        "delete_story_by_id",
        steps.delete_story,
        "DELETE /api/Story/Delete/{id} -> 200 'Deleted successfully!'",
        needs_story_id=True,
    ),
    ScenarioStep(
        "create_story_without_title",
        steps.create_story_without_title,
        "POST /api/Story/Create (empty Title) -> 400",
    ),
    ScenarioStep(
        "edit_non_existing_story",
        steps.edit_missing_story,
        "PUT /api/Story/Edit/11111111 -> 404 'No spoilers...'",
    ),
    ScenarioStep(
        "delete_non_existing_story",
        steps.delete_missing_story,
        "DELETE /api/Story/Delete/2222222 -> 400 'Unable to delete this story spoiler!'",
    ),
)


@dataclass
class StepResult:
    """Outcome of a single step."""
    index: int
    name: str
    passed: bool
    duration: float
    error: Optional[str] = None
    failure: Optional[FailureContext] = None
    failure_file: Optional[Path] = None

    @property
    def outcome(self) -> str:
        return "passed" if self.passed else "failed"


@dataclass
class ScenarioReport:
    """Results of one scenario run, in step order."""
    results: List[StepResult] = field(default_factory=list)
    story_id: Optional[str] = None

    @property
    def passed(self) -> List[StepResult]:
        return [r for r in self.results if r.passed]

    @property
    def failed(self) -> List[StepResult]:
        return [r for r in self.results if not r.passed]

    @property
    def ok(self) -> bool:
        return bool(self.results) and not self.failed

    def get(self, name: str) -> StepResult:
        for result in self.results:
            if result.name == name:
                return result
        raise KeyError(name)


class ScenarioRunner:
    """Runs scenario steps in their fixed order on one shared client."""

    def __init__(
        self,
        scenario: Sequence[ScenarioStep] = SCENARIO,
        failures_dir: Optional[Path] = None,
        on_step: Optional[Callable[[int, int, ScenarioStep], None]] = None,
    ):
        self.scenario = tuple(scenario)
        self.failures_dir = Path(failures_dir) if failures_dir else None
        self.on_step = on_step

    def run(self, client: TrackingClient) -> ScenarioReport:
        report = ScenarioReport()
        story_id: Optional[str] = None
        total = len(self.scenario)

        for index, step in enumerate(self.scenario, 1):
            if self.on_step:
                self.on_step(index, total, step)

            args = [client]
            if step.needs_story_id:
                if not story_id:
                    logger.warning(f"{step.name}: no story was created earlier, using an empty id")
                args.append(story_id or "")

            client.reset()
            started = time.perf_counter()
            try:
                value = step.action(*args)
            except (StepAssertionError, httpx.HTTPError) as e:
                duration = time.perf_counter() - started
                report.results.append(self._record_failure(client, index, step, e, duration))
                continue

            duration = time.perf_counter() - started
            if step.yields_story_id:
                story_id = value
                report.story_id = value
            logger.info(f"[{index}/{total}] {step.name} passed ({duration:.2f}s)")
            report.results.append(StepResult(index=index, name=step.name, passed=True, duration=duration))

        logger.info(f"Scenario finished: {len(report.passed)} passed, {len(report.failed)} failed")
        return report

    def _record_failure(
        self,
        client: TrackingClient,
        index: int,
        step: ScenarioStep,
        error: Exception,
        duration: float,
    ) -> StepResult:
        """Build the failure context for a failed step and write it out."""
        logger.error(f"[{index}/{len(self.scenario)}] {step.name} failed: {error}")

        context = FailureContext.capture(step.name, error, client, step_index=index)

        failure_file = None
        if self.failures_dir is not None:
            try:
                failure_file = context.write(self.failures_dir)
                logger.info(f"Failure context written to {failure_file}")
            except OSError as e:
                logger.error(f"Could not write failure context for {step.name}: {e}", exc_info=True)

        return StepResult(
            index=index,
            name=step.name,
            passed=False,
            duration=duration,
            error=str(error),
            failure=context,
            failure_file=failure_file,
        )


def run_scenario(
    session: StorySession,
    failures_dir: Optional[Path] = None,
    on_step: Optional[Callable[[int, int, ScenarioStep], None]] = None,
) -> ScenarioReport:
    """Open the session, run the whole scenario, and always close the client."""
    with session as client:
        return ScenarioRunner(failures_dir=failures_dir, on_step=on_step).run(client)
