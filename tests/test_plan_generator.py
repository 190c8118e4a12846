from datetime import date, timedelta

import pytest

from core.errors import PlanGenerationError
from core.plan_generator import (
    TrainingPlanGenerator, allocate_phases, assign_run_types, distribute_mileage,
    generate_race_plan, generate_sessions, round_to_quarter, weeks_until_race
)
from models import RaceDistance, RunType, TrainingPhase, TrainingPlan

START = date(2026, 3, 2)  # lundi


def _generate(race_distance=RaceDistance.HALF_MARATHON, weeks=12, mileage=20.0, rest_days=None):
    return generate_race_plan(
        race_distance=race_distance,
        race_date=START + timedelta(weeks=weeks),
        weekly_mileage=mileage,
        longest_recent_run=8.0,
        start_date=START,
        rest_days=rest_days if rest_days is not None else [5],
    )


def test_plan_covers_every_day_until_race():
    plan = _generate()
    dates = [s.date for s in plan.sorted_sessions]
    assert dates[0] == START
    assert dates[-1] == plan.race_date - timedelta(days=1)
    assert len(dates) == len(set(dates)) == 12 * 7


def test_rest_days_are_respected():
    plan = _generate(rest_days=[1, 5])
    for session in plan.sessions:
        if session.date.isoweekday() in (1, 5):
            assert session.run_type == RunType.REST
            assert session.target_distance == 0.0
        else:
            assert session.run_type != RunType.REST


def test_every_training_week_has_one_long_run():
    plan = _generate()
    for week in range(plan.total_weeks):
        week_start = START + timedelta(weeks=week)
        week_sessions = [s for s in plan.sessions if week_start <= s.date < week_start + timedelta(days=7)]
        assert sum(1 for s in week_sessions if s.run_type == RunType.LONG_RUN) == 1


def test_long_run_respects_cap_and_distances_are_quarters():
    plan = _generate(race_distance=RaceDistance.FIVE_K, weeks=8, mileage=40.0)
    cap = RaceDistance.FIVE_K.distance_in_miles * RaceDistance.FIVE_K.long_run_cap_fraction
    for session in plan.sessions:
        assert session.target_distance * 4 == int(session.target_distance * 4)
        if session.run_type == RunType.LONG_RUN:
            assert session.target_distance <= round_to_quarter(cap)


def test_taper_reduces_volume():
    plan = _generate(race_distance=RaceDistance.MARATHON, weeks=16, mileage=30.0)
    weekly = []
    for week in range(16):
        week_start = START + timedelta(weeks=week)
        weekly.append(sum(
            s.target_distance for s in plan.sessions
            if week_start <= s.date < week_start + timedelta(days=7)
        ))
    peak = max(weekly)
    assert weekly[-1] < weekly[-2] < weekly[-3] <= peak


def test_phase_allocation_sums_to_total():
    for race in RaceDistance:
        for weeks in (2, 4, 8, 16, 20):
            phases = allocate_phases(race, weeks)
            assert sum(phases.values()) == weeks
            assert phases[TrainingPhase.BASE] >= 1


def test_assign_run_types_fills_available_days():
    types = assign_run_types(6, TrainingPhase.PEAK)
    assert len(types) == 6
    assert types.count(RunType.LONG_RUN) == 1
    assert RunType.SPEED_WORK in types and RunType.TEMPO in types
    assert types[4] == RunType.LONG_RUN
    assert assign_run_types(0, TrainingPhase.BASE) == []


def test_distribute_mileage_moves_excess_to_easy_runs():
    assignments = [RunType.BASE, RunType.LONG_RUN, RunType.RECOVERY]
    distances = distribute_mileage(30.0, assignments, long_run_cap=5.0)
    assert distances[1] == 5.0
    assert sum(distances) == pytest.approx(30.0, abs=0.5)


def test_round_to_quarter_rounds_half_up():
    assert round_to_quarter(3.125) == 3.25
    assert round_to_quarter(3.1) == 3.0
    assert round_to_quarter(3.2) == 3.25


@pytest.mark.parametrize("kwargs", [
    {'race_date': START},
    {'weekly_mileage': -5.0},
    {'rest_days': [0]},
    {'rest_days': [1, 2, 3, 4, 5, 6, 7]},
    {'race_date': START + timedelta(days=10)},
])
def test_invalid_inputs_raise(kwargs):
    params = {
        'race_distance': RaceDistance.FIVE_K,
        'race_date': START + timedelta(weeks=8),
        'weekly_mileage': 15.0,
        'longest_recent_run': 5.0,
        'start_date': START,
    }
    params.update(kwargs)
    with pytest.raises(PlanGenerationError):
        TrainingPlanGenerator(**params)


def test_generate_sessions_needs_two_weeks():
    plan = TrainingPlan(
        race_distance=RaceDistance.FIVE_K,
        race_date=START + timedelta(days=10),
        start_date=START,
        weekly_mileage=10,
        longest_recent_run=3,
    )
    assert weeks_until_race(plan.start_date, plan.race_date) == 1
    assert generate_sessions(plan) == []


def test_short_plan_is_still_generated():
    plan = _generate(race_distance=RaceDistance.MARATHON, weeks=6)
    assert plan.total_weeks == 6
    assert plan.sessions
