import os
import tempfile
from datetime import date, datetime, timedelta

# Keep test runs away from the real data directory
os.environ.setdefault("LIFEFLOW_DATA_DIR", tempfile.mkdtemp(prefix="lifeflow-tests-"))

import pytest

from models import (
    TrainingPlan, TrainingSession, RaceDistance, RunType,
    WorkoutSession, ExerciseType
)
from utils.shared_store import SharedDefaults


class FakeClock:
    """Horloge manuelle pour les minuteurs et les intervalles"""

    def __init__(self, start=datetime(2026, 3, 2, 7, 0, 0)):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now = self.now + timedelta(seconds=seconds)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(tmp_path):
    return SharedDefaults(suite_name="group.test.LifeFlow", directory=tmp_path / "shared")


@pytest.fixture
def today():
    # Lundi
    return date(2026, 3, 2)


@pytest.fixture
def sample_plan(today):
    """Plan simple : deux semaines de séances avant aujourd'hui, quatre après"""
    start = today - timedelta(days=14)
    plan = TrainingPlan(
        race_distance=RaceDistance.HALF_MARATHON,
        race_date=start + timedelta(weeks=8),
        start_date=start,
        weekly_mileage=20,
        longest_recent_run=8,
        rest_days=[5],
    )
    pattern = [
        RunType.BASE, RunType.SPEED_WORK, RunType.RECOVERY, RunType.TEMPO,
        RunType.REST, RunType.LONG_RUN, RunType.BASE,
    ]
    distances = {
        RunType.BASE: 4.0, RunType.SPEED_WORK: 3.0, RunType.RECOVERY: 3.0,
        RunType.TEMPO: 4.0, RunType.REST: 0.0, RunType.LONG_RUN: 8.0,
    }
    day = start
    while day < plan.race_date:
        run_type = pattern[day.weekday()]
        plan.sessions.append(TrainingSession(date=day, run_type=run_type, target_distance=distances[run_type]))
        day += timedelta(days=1)
    return plan


@pytest.fixture
def strength_workout():
    workout = WorkoutSession(title="Push Day", type="Weightlifting")
    for name in ("Bench Press", "Overhead Press", "Tricep Extension"):
        exercise = workout.add_exercise(name, ExerciseType.WEIGHT)
        for _ in range(3):
            exercise.add_set()
    return workout
