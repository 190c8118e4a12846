from datetime import timedelta

from config.settings import COACH_SETTINGS_KEY, WIDGET_STATE_KEY
from models import MarathonCoachSettings, VoiceCoachStartupMode, WorkoutWidgetState
from models.widget_state import (
    add_shared_rest_time, format_elapsed_time, parse_elapsed_time,
    pause_shared_workout, resume_shared_workout, skip_shared_rest
)
from utils.deep_link import parse_deep_link


def test_store_round_trip(store):
    store.set("waterGoal", 64)
    assert store.get("waterGoal") == 64
    assert store.contains("waterGoal")
    assert store.keys() == ["waterGoal"]

    store.remove("waterGoal")
    assert store.get("waterGoal", "missing") == "missing"


def test_corrupted_store_reads_empty(store):
    store.directory.mkdir(parents=True, exist_ok=True)
    store.filepath.write_text("not json", encoding="utf-8")
    assert store.get("anything") is None


def test_widget_state_save_load_clear(store, clock):
    state = WorkoutWidgetState(
        is_active=True,
        workout_title="Leg Day",
        exercise_name="Squat",
        current_set=2,
        total_sets=5,
        rest_end_time=clock() + timedelta(seconds=60),
    )
    state.save(store)

    loaded = WorkoutWidgetState.load(store)
    assert loaded == state
    assert loaded.is_resting(clock())
    assert not loaded.is_resting(clock() + timedelta(seconds=61))

    WorkoutWidgetState.clear(store)
    assert not WorkoutWidgetState.load(store).is_active


def test_widget_state_invalid_data_is_idle(store):
    store.set(WIDGET_STATE_KEY, {'current_set': "three"})
    state = WorkoutWidgetState.load(store)
    assert not state.is_active
    assert state.current_set == 0


def test_paused_rest_counts_as_resting(clock):
    state = WorkoutWidgetState(is_active=True, is_paused=True, rest_time_remaining=30)
    assert state.is_resting(clock())


def _resting_state(clock, **fields):
    return WorkoutWidgetState(
        is_active=True,
        workout_title="Leg Day",
        exercise_name="Squat",
        workout_start_date=clock() - timedelta(seconds=45),
        rest_end_time=clock() + timedelta(seconds=50),
        rest_duration=60,
        **fields,
    )


def test_elapsed_time_formatting():
    assert format_elapsed_time(45) == "00:45"
    assert format_elapsed_time(3725) == "1:02:05"
    assert parse_elapsed_time("00:45") == 45
    assert parse_elapsed_time("1:02:05") == 3725
    assert parse_elapsed_time("soon") is None


def test_widget_pause_freezes_rest_and_resume_restores_it(store, clock):
    _resting_state(clock).save(store)

    paused = pause_shared_workout(store, now=clock())
    assert paused.is_paused and paused.pause_requested
    assert paused.paused_display_time == "00:45"
    assert paused.rest_end_time is None
    assert paused.rest_time_remaining == 50
    assert WorkoutWidgetState.load(store) == paused

    clock.advance(300)
    assert WorkoutWidgetState.load(store).is_resting(clock())

    resumed = resume_shared_workout(store, now=clock())
    assert not resumed.is_paused and not resumed.pause_requested
    assert resumed.paused_display_time is None
    assert resumed.rest_end_time == clock() + timedelta(seconds=50)
    assert resumed.rest_time_remaining is None
    assert resumed.workout_start_date == clock() - timedelta(seconds=45)
    assert WorkoutWidgetState.load(store) == resumed


def test_widget_pause_freezes_timed_cardio(clock):
    state = WorkoutWidgetState(
        is_active=True,
        is_cardio=True,
        cardio_mode_index=0,
        workout_start_date=clock() - timedelta(seconds=120),
        cardio_end_time=clock() + timedelta(seconds=480),
    )
    state.pause(clock())
    assert state.cardio_end_time is None
    assert state.cardio_time_remaining == 480

    clock.advance(60)
    state.resume(clock())
    assert state.cardio_end_time == clock() + timedelta(seconds=480)
    assert state.cardio_time_remaining is None


def test_widget_pause_records_freestyle_elapsed(clock):
    state = WorkoutWidgetState(
        is_active=True,
        is_cardio=True,
        cardio_mode_index=1,
        workout_start_date=clock() - timedelta(seconds=3725),
    )
    state.pause(clock())
    assert state.cardio_elapsed_time == 3725
    assert state.paused_display_time == "1:02:05"
    assert state.cardio_time_remaining is None


def test_widget_add_rest_time(store, clock):
    _resting_state(clock).save(store)
    state = add_shared_rest_time(store=store)
    assert state.rest_end_time == clock() + timedelta(seconds=65)
    assert state.rest_duration == 75
    assert WorkoutWidgetState.load(store).rest_duration == 75


def test_widget_add_rest_time_without_rest_does_nothing(store):
    WorkoutWidgetState(is_active=True).save(store)
    state = add_shared_rest_time(30, store=store)
    assert state.rest_end_time is None
    assert state.rest_duration is None


def test_widget_skip_rest(store, clock):
    _resting_state(clock).save(store)
    state = skip_shared_rest(store)
    assert state.rest_end_time is None
    assert state.rest_duration is None
    assert not WorkoutWidgetState.load(store).is_resting(clock())


def test_widget_pause_ignored_without_workout(store, clock):
    state = pause_shared_workout(store, now=clock())
    assert not state.is_paused
    assert not state.pause_requested


def test_coach_settings_persist(store):
    assert MarathonCoachSettings.load(store) == MarathonCoachSettings.default()

    settings = MarathonCoachSettings(
        voice_coach_startup_mode=VoiceCoachStartupMode.MUTED,
        announce_pace=False,
    )
    settings.save(store)
    loaded = MarathonCoachSettings.load(store)
    assert loaded.voice_coach_startup_mode.display_name == "Muted"
    assert not loaded.announce_pace

    store.set(COACH_SETTINGS_KEY, {'voice_coach_startup_mode': "loud"})
    assert MarathonCoachSettings.load(store) == MarathonCoachSettings.default()


def test_deep_links():
    assert parse_deep_link("lifeflow://gym") == "gym"
    assert parse_deep_link("lifeflow://GYM") == "gym"
    assert parse_deep_link("lifeflow://settings") is None
    assert parse_deep_link("https://gym") is None
