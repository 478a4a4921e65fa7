from datetime import UTC, datetime, timedelta

from vitals.health.velocity import calculate_velocity, predict_completion_date
from vitals.schema import COMPLETED_SENTINEL, Task

NOW = datetime(2026, 3, 10, 12, 0, tzinfo=UTC)


def _done(days_ago: float) -> Task:
    return Task(title=f"done {days_ago}", status="completed", completed_at=NOW - timedelta(days=days_ago))


def test_single_completion_is_not_enough_data():
    tasks = [_done(3), Task(title="open", status="todo")]
    velocity = calculate_velocity(tasks)
    assert velocity == 0
    assert predict_completion_date(tasks, velocity, NOW) is None


def test_all_tasks_completed_short_circuits_prediction():
    tasks = [_done(1)]
    assert calculate_velocity(tasks) == 0
    assert predict_completion_date(tasks, 0, NOW) == COMPLETED_SENTINEL
    assert predict_completion_date([_done(1), _done(20)], 5.5, NOW) == COMPLETED_SENTINEL


def test_velocity_over_two_weeks_and_projection():
    tasks = [_done(14), _done(10), _done(5), _done(0)]
    tasks += [Task(title=f"open {i}", status="in_progress") for i in range(6)]
    velocity = calculate_velocity(tasks)
    assert velocity == 2.0
    # 6 remaining at 2 per week -> 3 weeks
    assert predict_completion_date(tasks, velocity, NOW) == "2026-03-31"


def test_short_span_uses_one_week_minimum():
    tasks = [_done(2), _done(1), _done(0)]
    assert calculate_velocity(tasks) == 3.0


def test_velocity_rounds_to_one_decimal():
    tasks = [_done(21 - i * 3.5) for i in range(7)]
    assert calculate_velocity(tasks) == 2.3


def test_completed_tasks_without_timestamp_are_ignored():
    tasks = [_done(7), Task(title="legacy", status="completed"), _done(0), Task(title="open", status="todo")]
    assert calculate_velocity(tasks) == 2.0


def test_partial_week_rounds_days_up():
    tasks = [Task(title=f"open {i}", status="todo") for i in range(3)]
    # 3 / 2.0 = 1.5 weeks -> 10.5 days -> 11
    assert predict_completion_date(tasks, 2.0, NOW) == (NOW + timedelta(days=11)).date().isoformat()


def test_no_tasks_means_no_prediction():
    assert predict_completion_date([], 0, NOW) is None
    assert predict_completion_date([], 3.0, NOW) is None
