"""
Models package for the LifeFlow application
"""
from .cardio import CardioWorkoutMode, CardioPhase, CardioInterval, CardioSummary
from .session import TrainingSession, RunType
from .training_plan import TrainingPlan, TrainingPhase, RaceDistance
from .workout import (
    ExerciseType, WorkoutSource, ExerciseSet, WorkoutExercise, WorkoutSession,
    RoutineExercise, WorkoutRoutine, sort_routines,
    WEIGHT_EXERCISES, CARDIO_EXERCISES, CALISTHENICS_EXERCISES, WORKOUT_TYPES
)
from .widget_state import WorkoutWidgetState
from .coach_settings import MarathonCoachSettings, VoiceCoachStartupMode
from .goal import Goal, GoalType, GoalFrequency, GoalStatus, UnitType, DailyEntry, DailyPlan
from .day_log import DayLog

__all__ = [
    # Cardio
    'CardioWorkoutMode',
    'CardioPhase',
    'CardioInterval',
    'CardioSummary',

    # Session
    'TrainingSession',
    'RunType',

    # Training Plan
    'TrainingPlan',
    'TrainingPhase',
    'RaceDistance',

    # Workout
    'ExerciseType',
    'WorkoutSource',
    'ExerciseSet',
    'WorkoutExercise',
    'WorkoutSession',
    'RoutineExercise',
    'WorkoutRoutine',
    'sort_routines',
    'WEIGHT_EXERCISES',
    'CARDIO_EXERCISES',
    'CALISTHENICS_EXERCISES',
    'WORKOUT_TYPES',

    # Widget / settings
    'WorkoutWidgetState',
    'MarathonCoachSettings',
    'VoiceCoachStartupMode',

    # Goals
    'Goal',
    'GoalType',
    'GoalFrequency',
    'GoalStatus',
    'UnitType',
    'DailyEntry',
    'DailyPlan',
    'DayLog',
]
