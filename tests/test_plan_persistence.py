from datetime import datetime, timedelta
from uuid import uuid4

from utils import plan_persistence
from utils.plan_helpers import (
    get_current_week_number, get_session_for_date, get_week_sessions, get_week_summary
)
from models import RunType


def test_save_and_load_round_trip(sample_plan, tmp_path):
    path = plan_persistence.save_plan(sample_plan, tmp_path)
    assert path == tmp_path / f"plan_{sample_plan.id}.json"

    loaded = plan_persistence.load_plan(sample_plan.id, tmp_path)
    assert loaded == sample_plan


def test_list_and_active_plan(sample_plan, tmp_path):
    older = sample_plan.model_copy(deep=True, update={'id': uuid4(), 'created_at': datetime(2025, 1, 1)})
    finished = sample_plan.model_copy(
        deep=True, update={'id': uuid4(), 'created_at': datetime(2030, 1, 1), 'is_completed': True}
    )

    for plan in (older, sample_plan, finished):
        plan_persistence.save_plan(plan, tmp_path)

    assert [p.id for p in plan_persistence.list_plans(tmp_path)] == [finished.id, sample_plan.id, older.id]
    assert plan_persistence.load_active_plan(tmp_path).id == sample_plan.id


def test_corrupted_file_is_skipped(sample_plan, tmp_path):
    (tmp_path / "plan_broken.json").write_text("{oops", encoding="utf-8")
    plan_persistence.save_plan(sample_plan, tmp_path)
    assert [p.id for p in plan_persistence.list_plans(tmp_path)] == [sample_plan.id]


def test_delete_plan(sample_plan, tmp_path):
    plan_persistence.save_plan(sample_plan, tmp_path)
    assert plan_persistence.delete_plan(sample_plan.id, tmp_path)
    assert not plan_persistence.delete_plan(sample_plan.id, tmp_path)
    assert plan_persistence.load_plan(sample_plan.id, tmp_path) is None


def test_get_or_create_plan(sample_plan, tmp_path):
    calls = []

    def generator(**kwargs):
        calls.append(kwargs)
        return sample_plan

    assert plan_persistence.get_or_create_plan(generator, tmp_path, weeks=8).id == sample_plan.id
    assert plan_persistence.get_or_create_plan(generator, tmp_path).id == sample_plan.id
    assert calls == [{'weeks': 8}]

    plan_persistence.get_or_create_plan(generator, tmp_path, force_new=True)
    assert len(calls) == 2


def test_week_helpers(sample_plan, today):
    assert get_session_for_date(sample_plan, today).run_type == RunType.BASE
    assert get_current_week_number(sample_plan, today) == 3
    assert get_current_week_number(sample_plan, sample_plan.start_date - timedelta(days=1)) is None
    assert len(get_week_sessions(sample_plan, 1)) == 7


def test_week_summary(sample_plan, today):
    sample_plan.todays_session(today - timedelta(days=14)).mark_as_completed(4.5, perceived_effort=2)

    summary = get_week_summary(sample_plan, 1)
    assert summary == {
        'week_number': 1,
        'planned_miles': 26.0,
        'completed_miles': 4.5,
        'num_sessions': 7,
        'num_runs': 6,
        'completed_runs': 1,
        'long_run_miles': 8.0,
    }
    assert get_week_summary(sample_plan, 0) == {}
    assert get_week_summary(sample_plan, sample_plan.total_weeks + 1) == {}
