from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol, Sequence

from .context import InstallContext
from .errors import InstallAborted
from .result import StepResult, StepStatus
from .state_store import is_step_completed, mark_step_completed, record_step_result

logger = logging.getLogger(__name__)


class Step(Protocol):
    """A single step; re-running a completed step must be harmless."""

    step_id: str

    def run(self, ctx: InstallContext) -> StepResult:
        ...


@dataclass(frozen=True)
class PipelineResult:
    state: Dict[str, Any]
    ran_steps: List[str]
    skipped_steps: List[str]
    results: Dict[str, StepResult]


def _window(steps: Sequence[Step], start_at: Optional[str], stop_after: Optional[str]) -> List[Step]:
    """Steps between start_at and stop_after, both inclusive."""

    known = {s.step_id for s in steps}
    for name, value in (("start_at", start_at), ("stop_after", stop_after)):
        if value is not None and value not in known:
            raise ValueError(f"Unknown step for {name}: {value}")

    window: List[Step] = []
    started = start_at is None
    for step in steps:
        if not started:
            if step.step_id != start_at:
                continue
            started = True
        window.append(step)
        if step.step_id == stop_after:
            break
    return window


def _already_done(state: Dict[str, Any], step: Step, force: bool) -> bool:
    return (not force) and not getattr(step, "always_run", False) and is_step_completed(state, step.step_id)


def planned_steps(
    state: Dict[str, Any],
    steps: Sequence[Step],
    *,
    start_at: Optional[str] = None,
    stop_after: Optional[str] = None,
    force: bool = False,
) -> List[str]:
    """Ids of the steps run_pipeline would execute for this state."""

    return [s.step_id for s in _window(steps, start_at, stop_after) if not _already_done(state, s, force)]


def run_pipeline(
    *,
    state: Dict[str, Any],
    steps: Sequence[Step],
    ctx: InstallContext,
    start_at: Optional[str] = None,
    stop_after: Optional[str] = None,
    force: bool = False,
) -> PipelineResult:
    """Run steps in order with resume semantics.

    A FATAL result (or InstallAborted raised from a step) stops the run.
    SKIPPED steps are not marked completed so a later full run still does them.
    """

    ran: List[str] = []
    skipped: List[str] = []
    results: Dict[str, StepResult] = {}

    for step in _window(steps, start_at, stop_after):
        state.setdefault("execution", {})["current_step"] = step.step_id

        if _already_done(state, step, force):
            logger.info("Skipping step %s (already completed)", step.step_id)
            skipped.append(step.step_id)
        else:
            logger.info("Running step %s", step.step_id)
            try:
                result = step.run(ctx)
            except InstallAborted as e:
                if e.step_id is None:
                    e.step_id = step.step_id
                record_step_result(state, step.step_id, StepResult.fatal(str(e)).as_dict())
                raise

            results[step.step_id] = result
            record_step_result(state, step.step_id, result.as_dict())

            if result.status == StepStatus.FATAL:
                raise InstallAborted(result.message or f"{step.step_id} failed", step_id=step.step_id)

            if result.status == StepStatus.SKIPPED:
                logger.info("Step %s skipped: %s", step.step_id, result.message)
                skipped.append(step.step_id)
            else:
                for w in result.warnings:
                    logger.warning("%s: %s", step.step_id, w)
                mark_step_completed(state, step.step_id)
                ran.append(step.step_id)

    if stop_after is not None:
        logger.info("Stopped after %s", stop_after)

    state.setdefault("execution", {})["current_step"] = None
    return PipelineResult(state=state, ran_steps=ran, skipped_steps=skipped, results=results)
