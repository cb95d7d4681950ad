import pytest

from refmatch_lib.analysis_state import DEFAULT_DURATION, AnalysisContext


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


def test_start_finish_records_duration():
    clock = FakeClock()
    ctx = AnalysisContext(clock=clock)
    ctx.start("a")
    clock.now = 4.0
    assert ctx.is_active("a")
    assert ctx.elapsed("a") == 4.0
    assert ctx.finish("a") == 4.0
    assert not ctx.is_active("a")
    assert ctx.durations == [4.0]
    assert ctx.finish("a") is None


def test_failed_runs_are_not_recorded():
    clock = FakeClock()
    ctx = AnalysisContext(clock=clock)
    ctx.start("a")
    clock.now = 10.0
    ctx.finish("a", record=False)
    assert ctx.durations == []
    assert ctx.estimated_duration() == DEFAULT_DURATION


def test_duration_bounds_and_history():
    ctx = AnalysisContext(durations=[1.0, 200.0])
    assert ctx.durations == []
    for d in range(2, 15):
        ctx.record_duration(float(d))
    assert len(ctx.durations) == 10
    assert ctx.durations[0] == 5.0
    assert ctx.estimated_duration() == pytest.approx(sum(range(5, 15)) / 10)


def test_context_manager_clears_session():
    with AnalysisContext(durations=[5.0]) as ctx:
        ctx.start("a")
    assert not ctx.is_active("a")
    assert ctx.durations == []
