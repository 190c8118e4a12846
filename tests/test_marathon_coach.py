from datetime import datetime, time, timedelta

import pytest

from core.errors import PlanGenerationError
from core.marathon_coach import MarathonCoachManager, TrainingStatus
from models import RaceDistance, RunType, WorkoutSession, WorkoutSource, ExerciseType
from utils import plan_persistence


@pytest.fixture
def coach(tmp_path, today):
    return MarathonCoachManager(plans_dir=tmp_path / "plans", today=lambda: today)


@pytest.fixture
def active_coach(coach, sample_plan):
    coach.active_plan = sample_plan
    coach.refresh_todays_session()
    return coach


def test_create_plan_persists_and_loads(coach, tmp_path, today):
    plan = coach.create_plan(RaceDistance.FIVE_K, today + timedelta(weeks=8), 15.0, 5.0, rest_days=[5])

    assert coach.active_plan is plan
    assert coach.todays_session.date == today
    assert not coach.is_generating_plan

    reloaded = MarathonCoachManager(plans_dir=tmp_path / "plans", today=lambda: today)
    assert reloaded.load_active_plan().id == plan.id
    assert len(reloaded.active_plan.sessions) == len(plan.sessions)


def test_create_plan_rejects_invalid_race(coach, today):
    with pytest.raises(PlanGenerationError):
        coach.create_plan(RaceDistance.MARATHON, today + timedelta(days=5), 20.0, 10.0)
    assert not coach.is_generating_plan
    assert coach.active_plan is None


def test_cancel_plan_deactivates(coach, tmp_path, today):
    plan = coach.create_plan(RaceDistance.FIVE_K, today + timedelta(weeks=6), 15.0, 5.0)
    coach.cancel_plan()

    assert coach.active_plan is None
    assert plan_persistence.load_plan(plan.id, tmp_path / "plans").is_active is False
    assert plan_persistence.load_active_plan(tmp_path / "plans") is None


def test_complete_session_adapts_and_scores(active_coach, today):
    session = active_coach.todays_session
    active_coach.complete_session(session, 5.0, effort=1)

    long_run = active_coach.active_plan.todays_session(today + timedelta(days=5))
    assert session.is_completed
    assert long_run.target_distance == pytest.approx(8.4)
    assert active_coach.last_adaptation_summary == "Crushing it! Your confidence score just got a boost."


def test_refine_reverts_auto_completion_first(active_coach, today):
    session = active_coach.todays_session
    long_run = active_coach.active_plan.todays_session(today + timedelta(days=5))

    active_coach.auto_complete_session(session, 5.0)
    assert long_run.target_distance == pytest.approx(8.4)

    active_coach.refine_completed_session(session, 4.0, effort=4)
    assert long_run.target_distance == pytest.approx(8.0)
    assert session.actual_distance == 4.0
    assert session.perceived_effort == 4
    assert active_coach.last_adaptation_summary is None


def test_cross_training_completion(active_coach):
    session = active_coach.todays_session
    session.run_type = RunType.CROSS_TRAINING
    active_coach.mark_cross_training_complete(session, "Cycling", 45)

    assert session.is_completed
    assert session.actual_distance == 0.0
    assert session.notes == "Cycling - 45 min"
    assert active_coach.last_adaptation_summary == "Cycling logged. Great consistency."


def test_pre_run_adjustment_moves_volume(active_coach, today):
    session = active_coach.todays_session
    message = active_coach.apply_pre_run_adjustment(session, 0.5)

    recovery = active_coach.active_plan.todays_session(today + timedelta(days=2))
    assert session.target_distance == pytest.approx(3.6)
    assert session.pre_run_feeling == 0.5
    assert recovery.target_distance == pytest.approx(3.2)
    assert message.startswith("Adjusted to 3.6 mi")


def test_life_happens_shifts_until_race(active_coach, today):
    assert active_coach.life_happens()
    assert active_coach.todays_session is None
    assert not active_coach.life_happens()


def test_distribute_missed_volume_marks_missed_skipped(active_coach, today):
    active_coach.distribute_missed_volume()
    plan = active_coach.active_plan

    assert active_coach.last_adaptation_summary.startswith("Missed volume redistribution")
    assert all(
        s.is_skipped for s in plan.sessions
        if today - timedelta(days=7) <= s.date < today and s.run_type != RunType.REST
    )
    # Pas de double comptage au second passage
    before = [s.target_distance for s in plan.sorted_sessions]
    active_coach.distribute_missed_volume()
    assert [s.target_distance for s in plan.sorted_sessions] == before


def test_match_synced_runs_waits_for_check_in(active_coach, today):
    run = WorkoutSession(
        type="Running",
        source=WorkoutSource.GARMIN,
        timestamp=datetime.combine(today, time(7, 30)),
    )
    run.add_exercise("Run", ExerciseType.CARDIO).add_set(distance=4.3, duration=2400)
    lifting = WorkoutSession(type="Weightlifting", source=WorkoutSource.GARMIN,
                             timestamp=datetime.combine(today, time(18, 0)))

    matched = active_coach.match_synced_runs([run, lifting])
    session = active_coach.todays_session

    assert matched == [session]
    assert session.actual_distance == 4.3
    assert session.synced_workout_id == run.id
    assert not session.is_completed
    assert active_coach.show_post_run_check_in
    assert active_coach.completed_session_for_check_in is session


def test_manual_runs_are_not_matched(active_coach, today):
    run = WorkoutSession(type="Running", timestamp=datetime.combine(today, time(7, 0)))
    run.add_exercise("Run", ExerciseType.CARDIO).add_set(distance=4.0)
    assert active_coach.match_synced_runs([run]) == []


def test_speed_work_gym_session(active_coach, today):
    session = active_coach.active_plan.todays_session(today + timedelta(days=1))
    workout = active_coach.build_gym_mode_session(session)
    sets = workout.exercises[0].sorted_sets

    assert workout.title == "Speed Work - 3.0 mi"
    assert workout.type == "Running"
    # 10 min d'échauffement, 6 répétitions, 5 récupérations, retour au calme
    assert len(sets) == 1 + 6 + 5 + 1
    assert sets[0].duration == 600 and sets[0].speed == 5.0
    assert sets[-1].order_index == 100 and sets[-1].speed == 4.5
    assert sum(1 for s in sets if s.speed == 8.0 and s.duration == 120) == 6


def test_tempo_and_easy_gym_sessions(active_coach, today):
    plan = active_coach.active_plan
    tempo = active_coach.build_gym_mode_session(plan.todays_session(today + timedelta(days=3)))
    assert [s.speed for s in tempo.exercises[0].sorted_sets] == [5.0, 7.0, 4.5]
    assert tempo.exercises[0].sorted_sets[1].distance == pytest.approx(2.8)

    recovery = active_coach.build_gym_mode_session(plan.todays_session(today + timedelta(days=2)))
    main_set = recovery.exercises[0].sets[0]
    assert main_set.distance == 3.0 and main_set.speed == 5.0


def test_training_status_and_confidence(active_coach):
    plan = active_coach.active_plan
    plan.compliance_score = 0.9
    assert active_coach.training_status == TrainingStatus.CRUSHING_IT
    plan.compliance_score = 0.7
    assert active_coach.training_status.label == "On Track"
    plan.compliance_score = 0.3
    assert active_coach.training_status.label == "Needs Attention"

    plan.confidence_score = 0.734
    assert active_coach.confidence_display == "73%"


def test_status_without_plan(tmp_path):
    coach = MarathonCoachManager(plans_dir=tmp_path)
    assert coach.training_status == TrainingStatus.ON_TRACK
    assert coach.confidence_display == "0%"
