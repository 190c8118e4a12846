from datetime import timedelta
from uuid import uuid4

import pytest

from core.session_adapter import SessionAdjustment, TrainingAdaptationEngine
from models import RunType


@pytest.fixture
def engine():
    return TrainingAdaptationEngine()


def _session_on(plan, day):
    return plan.todays_session(day)


def test_easy_over_achievement_boosts_next_long_run(engine, sample_plan, today):
    session = _session_on(sample_plan, today)
    session.mark_as_completed(5.0, perceived_effort=2)

    adjustments = engine.adapt_plan(sample_plan, session, effort=2, today=today)

    long_run = _session_on(sample_plan, today + timedelta(days=5))
    assert len(adjustments) == 1
    assert adjustments[0].session_id == long_run.id
    assert adjustments[0].new_target_distance == pytest.approx(8.4)
    assert adjustments[0].reason == "Strong performance. Long run boosted by 5%."


def test_back_to_back_hard_days_force_recovery(engine, sample_plan, today):
    yesterday = _session_on(sample_plan, today - timedelta(days=1))
    yesterday.mark_as_completed(4.0, perceived_effort=4)
    session = _session_on(sample_plan, today)
    session.mark_as_completed(5.0, perceived_effort=3)

    adjustments = engine.adapt_plan(sample_plan, session, effort=3, today=today)
    engine.apply_adjustments(adjustments, sample_plan)

    tomorrow = _session_on(sample_plan, today + timedelta(days=1))
    assert adjustments[0].reason == "Back-to-back hard efforts. Recovery day recommended."
    assert tomorrow.run_type == RunType.RECOVERY


def test_under_achievement_spreads_volume_over_easy_runs(engine, sample_plan, today):
    session = _session_on(sample_plan, today)
    session.mark_as_completed(2.0, perceived_effort=3)

    adjustments = engine.adapt_plan(sample_plan, session, effort=3, today=today)

    assert len(adjustments) == 3
    for adjustment in adjustments:
        target = sample_plan.get_session(adjustment.session_id)
        assert target.run_type in (RunType.BASE, RunType.RECOVERY)
        assert adjustment.new_target_distance - target.target_distance == pytest.approx(2.0 * 0.8 / 3)
        assert adjustment.reason == "Volume redistribution: +0.5 mi from missed run."


def test_on_target_run_changes_nothing(engine, sample_plan, today):
    session = _session_on(sample_plan, today)
    session.mark_as_completed(4.2, perceived_effort=3)
    assert engine.adapt_plan(sample_plan, session, effort=3, today=today) == []


def test_taper_lock_blocks_adaptation(engine, sample_plan):
    late = sample_plan.race_date - timedelta(days=3)
    session = _session_on(sample_plan, late)
    session.mark_as_completed(session.target_distance * 2 + 1, perceived_effort=1)

    assert engine.adapt_plan(sample_plan, session, effort=1, today=late) == []
    assert engine.redistribute_missed_volume(sample_plan, today=late) == []


@pytest.mark.parametrize("feeling, expected, message", [
    (0.9, 4.0, "Feeling great! Stick to the plan."),
    (0.5, 3.6, "Adjusted to 3.6 mi. Volume moves to your next easy run."),
    (0.1, 2.0, "Take it easy today. Consider a light recovery run or rest."),
])
def test_pre_run_adjustment(engine, sample_plan, today, feeling, expected, message):
    distance, suggestion = engine.pre_run_adjustment(_session_on(sample_plan, today), feeling)
    assert distance == pytest.approx(expected)
    assert suggestion == message


def test_pre_run_reduction_is_redistributed(engine, sample_plan, today):
    adjustments = engine.redistribute_pre_run_reduction(4.0, 3.6, sample_plan, today)
    targets = [sample_plan.get_session(a.session_id) for a in adjustments]

    assert [t.run_type for t in targets] == [RunType.RECOVERY, RunType.LONG_RUN]
    assert all(a.new_target_distance - t.target_distance == pytest.approx(0.2)
               for a, t in zip(adjustments, targets))
    assert engine.redistribute_pre_run_reduction(4.0, 3.8, sample_plan, today) == []


def test_missed_volume_is_capped_per_session(engine, sample_plan, today):
    missed = engine.missed_sessions(sample_plan, today)
    assert len(missed) == 6
    assert all(s.run_type != RunType.REST for s in missed)

    adjustments = engine.redistribute_missed_volume(sample_plan, today)
    assert len(adjustments) == 3
    for adjustment in adjustments:
        target = sample_plan.get_session(adjustment.session_id)
        assert adjustment.new_target_distance == pytest.approx(target.target_distance * 1.15)


def test_compliance_rewards_completed_sessions(engine, sample_plan, today):
    baseline = engine.calculate_compliance_score(sample_plan, today)
    for offset in range(1, 8):
        session = _session_on(sample_plan, today - timedelta(days=offset))
        if session.run_type != RunType.REST:
            session.mark_as_completed(session.target_distance * 1.5, perceived_effort=3)

    improved = engine.calculate_compliance_score(sample_plan, today)
    assert baseline < improved <= 1.0


def test_completed_cross_training_counts_fully(engine, sample_plan, today):
    for session in sample_plan.sessions:
        if session.date < today - timedelta(days=7) or session.date > today:
            continue
        session.run_type = RunType.CROSS_TRAINING
        session.target_distance = 0.0
        session.mark_as_completed(0.0)
    assert engine.calculate_compliance_score(sample_plan, today) == pytest.approx(1.0)


def test_confidence_score_is_bounded(engine, sample_plan, today):
    low = engine.calculate_confidence_score(sample_plan, today)
    for session in sample_plan.sessions:
        if session.date <= today and session.run_type != RunType.REST:
            session.mark_as_completed(session.target_distance, perceived_effort=2)
    high = engine.calculate_confidence_score(sample_plan, today)
    assert 0.0 <= low < high <= 1.0


def test_shift_schedule_stops_at_race_day(engine, sample_plan, today):
    assert engine.can_shift_schedule(sample_plan, 1, today)
    assert not engine.can_shift_schedule(sample_plan, 2, today)

    before = _session_on(sample_plan, today)
    engine.shift_schedule(sample_plan, 1, today)
    assert before.date == today + timedelta(days=1)
    assert sample_plan.todays_session(today) is None


def test_apply_adjustments_ignores_unknown_sessions(engine, sample_plan):
    engine.apply_adjustments([SessionAdjustment(uuid4(), "noop", new_target_distance=99)], sample_plan)
    assert all(s.target_distance != 99 for s in sample_plan.sessions)
