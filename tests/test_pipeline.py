import pytest

from i3_installer.errors import InstallAborted
from i3_installer.pipeline import planned_steps, run_pipeline
from i3_installer.result import StepResult, StepStatus
from i3_installer.state_store import ensure_defaults


class RecordingStep:
    def __init__(self, step_id, status=StepStatus.SUCCESS, always_run=False, raises=None):
        self.step_id = step_id
        self.status = status
        self.always_run = always_run
        self.raises = raises
        self.calls = 0

    def run(self, ctx):
        self.calls += 1
        if self.raises:
            raise self.raises
        return StepResult(status=self.status, message=self.step_id)


def _steps(*ids):
    return [RecordingStep(i) for i in ids]


def test_runs_all_steps_in_order(make_ctx):
    state = ensure_defaults({})
    steps = _steps("10_a", "20_b", "30_c")
    result = run_pipeline(state=state, steps=steps, ctx=make_ctx())

    assert result.ran_steps == ["10_a", "20_b", "30_c"]
    assert state["execution"]["completed_steps"] == ["10_a", "20_b", "30_c"]
    assert state["execution"]["current_step"] is None
    assert state["execution"]["results"]["20_b"]["status"] == "success"


def test_completed_steps_are_skipped_unless_forced(make_ctx):
    state = ensure_defaults({"execution": {"completed_steps": ["10_a"]}})
    steps = _steps("10_a", "20_b")

    result = run_pipeline(state=state, steps=steps, ctx=make_ctx())
    assert result.skipped_steps == ["10_a"]
    assert steps[0].calls == 0

    run_pipeline(state=state, steps=steps, ctx=make_ctx(), force=True)
    assert steps[0].calls == 1


def test_always_run_steps_ignore_completion(make_ctx):
    summary = RecordingStep("90_summary", always_run=True)
    state = ensure_defaults({"execution": {"completed_steps": ["90_summary"]}})
    run_pipeline(state=state, steps=[summary], ctx=make_ctx())
    assert summary.calls == 1


def test_start_at_and_stop_after(make_ctx):
    state = ensure_defaults({})
    steps = _steps("10_a", "20_b", "30_c", "40_d")
    result = run_pipeline(state=state, steps=steps, ctx=make_ctx(), start_at="20_b", stop_after="30_c")

    assert result.ran_steps == ["20_b", "30_c"]
    assert steps[0].calls == 0 and steps[3].calls == 0


def test_unknown_step_name_rejected(make_ctx):
    with pytest.raises(ValueError):
        run_pipeline(state={}, steps=_steps("10_a"), ctx=make_ctx(), start_at="99_nope")


def test_skipped_steps_are_not_marked_completed(make_ctx):
    state = ensure_defaults({})
    steps = [RecordingStep("10_a", status=StepStatus.SKIPPED)]
    result = run_pipeline(state=state, steps=steps, ctx=make_ctx())

    assert result.skipped_steps == ["10_a"]
    assert state["execution"]["completed_steps"] == []


def test_partial_step_continues(make_ctx):
    state = ensure_defaults({})
    steps = [RecordingStep("10_a", status=StepStatus.PARTIAL), RecordingStep("20_b")]
    result = run_pipeline(state=state, steps=steps, ctx=make_ctx())
    assert result.ran_steps == ["10_a", "20_b"]


def test_fatal_result_stops_run(make_ctx):
    state = ensure_defaults({})
    steps = [RecordingStep("10_a", status=StepStatus.FATAL), RecordingStep("20_b")]

    with pytest.raises(InstallAborted) as exc:
        run_pipeline(state=state, steps=steps, ctx=make_ctx())

    assert exc.value.step_id == "10_a"
    assert steps[1].calls == 0
    assert "10_a" not in state["execution"]["completed_steps"]
    assert state["execution"]["results"]["10_a"]["status"] == "fatal"


def test_raised_abort_gets_step_id(make_ctx):
    state = ensure_defaults({})
    steps = [RecordingStep("30_c", raises=InstallAborted("Failed to install core packages"))]

    with pytest.raises(InstallAborted) as exc:
        run_pipeline(state=state, steps=steps, ctx=make_ctx())

    assert exc.value.step_id == "30_c"
    assert state["execution"]["current_step"] == "30_c"


def test_planned_steps_matches_what_runs(make_ctx):
    state = ensure_defaults({"execution": {"completed_steps": ["10_a", "30_c", "90_z"]}})
    steps = _steps("10_a", "20_b", "30_c") + [RecordingStep("90_z", always_run=True)]

    planned = planned_steps(state, steps)
    result = run_pipeline(state=state, steps=steps, ctx=make_ctx())

    assert planned == ["20_b", "90_z"] == result.ran_steps


def test_planned_steps_honours_window_and_force():
    state = ensure_defaults({"execution": {"completed_steps": ["20_b"]}})
    steps = _steps("10_a", "20_b", "30_c")

    assert planned_steps(state, steps, start_at="20_b") == ["30_c"]
    assert planned_steps(state, steps, start_at="20_b", stop_after="20_b", force=True) == ["20_b"]
    with pytest.raises(ValueError):
        planned_steps(state, steps, stop_after="99_nope")
