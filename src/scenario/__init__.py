"""Ordered Story scenario."""
from src.scenario.runner import SCENARIO, ScenarioReport, ScenarioRunner, ScenarioStep, StepResult, run_scenario

__all__ = ["SCENARIO", "ScenarioReport", "ScenarioRunner", "ScenarioStep", "StepResult", "run_scenario"]
