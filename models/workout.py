"""
Modèle de données pour les séances de sport (saisie manuelle, Gym Mode, imports)
"""
from pydantic import BaseModel, Field
from enum import Enum
from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4


class ExerciseType(str, Enum):
    """Catégorie d'exercice"""
    WEIGHT = "weight"               # Barre, haltères, machines
    CARDIO = "cardio"               # Tapis, vélo, elliptique
    CALISTHENICS = "calisthenics"   # Poids du corps
    FLEXIBILITY = "flexibility"     # Étirements, yoga

    @property
    def title(self) -> str:
        return {
            ExerciseType.WEIGHT: "Weight Training",
            ExerciseType.CARDIO: "Cardio",
            ExerciseType.CALISTHENICS: "Calisthenics",
            ExerciseType.FLEXIBILITY: "Flexibility",
        }[self]


class WorkoutSource(str, Enum):
    """Origine des données de la séance"""
    MANUAL = "Manual"
    HEALTHKIT = "HealthKit"
    GARMIN = "Garmin"


class ExerciseSet(BaseModel):
    """Une série : musculation (poids/répétitions) ou cardio (durée/distance)"""
    id: UUID = Field(default_factory=uuid4)
    order_index: int = Field(0, ge=0)
    is_completed: bool = False

    # Musculation
    weight: Optional[float] = Field(None, ge=0, description="Charge (lbs)")
    reps: Optional[int] = Field(None, ge=0)
    rpe: Optional[int] = Field(None, ge=1, le=10, description="RPE (1-10)")

    # Cardio
    duration: Optional[float] = Field(None, ge=0, description="Durée (secondes)")
    distance: Optional[float] = Field(None, ge=0, description="Distance (miles)")
    speed: Optional[float] = Field(None, ge=0, description="Vitesse (mph)")
    incline: Optional[float] = Field(None, ge=0, description="Inclinaison (%)")

    @property
    def weight_display(self) -> Optional[str]:
        """Ex: '135 lbs × 10'"""
        if self.weight is None or self.reps is None:
            return None
        return f"{int(self.weight)} lbs × {self.reps}"

    @property
    def cardio_display(self) -> Optional[str]:
        """Ex: '2.5 mi in 25:00' ou '25:00'"""
        if self.duration is None:
            return None
        minutes = int(self.duration) // 60
        seconds = int(self.duration) % 60
        if self.distance is not None:
            return f"{self.distance:.1f} mi in {minutes}:{seconds:02d}"
        return f"{minutes}:{seconds:02d}"


class WorkoutExercise(BaseModel):
    """Exercice d'une séance (peut appartenir à un superset)"""
    id: UUID = Field(default_factory=uuid4)
    name: str = Field(..., min_length=1)
    order_index: int = Field(0, ge=0)
    is_superset: bool = False
    superset_group_id: Optional[UUID] = None
    type: ExerciseType = ExerciseType.WEIGHT
    notes: Optional[str] = None
    sets: list[ExerciseSet] = Field(default_factory=list)

    @property
    def sorted_sets(self) -> list[ExerciseSet]:
        return sorted(self.sets, key=lambda s: s.order_index)

    def add_set(self, **fields) -> ExerciseSet:
        """Ajoute une série avec le prochain order_index disponible"""
        next_index = max((s.order_index for s in self.sets), default=-1) + 1
        new_set = ExerciseSet(order_index=next_index, **fields)
        self.sets.append(new_set)
        return new_set

    @property
    def completed_sets_count(self) -> int:
        return sum(1 for s in self.sets if s.is_completed)

    @property
    def has_incomplete_sets(self) -> bool:
        return any(not s.is_completed for s in self.sets)


class WorkoutSession(BaseModel):
    """Séance saisie à la main, suivie en Gym Mode ou importée"""
    id: UUID = Field(default_factory=uuid4)
    title: str = "Workout"
    type: str = Field(..., description="Type (ex: 'Running', 'Weightlifting')")
    duration: float = Field(0.0, ge=0, description="Durée (secondes)")
    calories: float = Field(0.0, ge=0, description="Calories actives")
    source: WorkoutSource = WorkoutSource.MANUAL
    timestamp: datetime = Field(default_factory=datetime.now, description="Début de la séance")
    end_time: Optional[datetime] = None
    exercises: list[WorkoutExercise] = Field(default_factory=list)

    @property
    def start_time(self) -> datetime:
        return self.timestamp

    @property
    def sorted_exercises(self) -> list[WorkoutExercise]:
        return sorted(self.exercises, key=lambda e: e.order_index)

    def add_exercise(self, name: str, type: ExerciseType = ExerciseType.WEIGHT) -> WorkoutExercise:
        """Ajoute un exercice en fin de séance"""
        next_index = max((e.order_index for e in self.exercises), default=-1) + 1
        exercise = WorkoutExercise(name=name, type=type, order_index=next_index)
        self.exercises.append(exercise)
        return exercise

    def get_exercise(self, exercise_id: UUID) -> Optional[WorkoutExercise]:
        for exercise in self.exercises:
            if exercise.id == exercise_id:
                return exercise
        return None

    @property
    def total_distance(self) -> float:
        """Distance cumulée des séries (miles)"""
        return sum(
            s.distance or 0.0
            for exercise in self.exercises
            for s in exercise.sets
        )

    @property
    def formatted_duration(self) -> str:
        """Ex: '1h 5m' ou '45m'"""
        hours = int(self.duration) // 3600
        minutes = (int(self.duration) % 3600) // 60
        if hours > 0:
            return f"{hours}h {minutes}m"
        return f"{minutes}m"

    @property
    def is_meaningfully_completed(self) -> bool:
        """Au moins une minute d'activité ou une série effectuée"""
        if self.duration >= 60:
            return True
        return any(s.is_completed for e in self.exercises for s in e.sets)


# Bibliothèques d'exercices pour la saisie rapide
WEIGHT_EXERCISES = [
    "Bench Press", "Squat", "Deadlift", "Overhead Press",
    "Barbell Row", "Pull-ups", "Dumbbell Curl", "Tricep Extension",
    "Leg Press", "Lat Pulldown", "Cable Fly", "Lunges"
]

CARDIO_EXERCISES = [
    "Treadmill", "Stationary Bike", "Elliptical", "Rowing Machine",
    "Stair Climber", "Jump Rope"
]

CALISTHENICS_EXERCISES = [
    "Push-ups", "Pull-ups", "Dips", "Burpees",
    "Mountain Climbers", "Planks", "Sit-ups", "Leg Raises"
]

WORKOUT_TYPES = [
    "Weightlifting", "Running", "Yoga", "Cycling", "Swimming",
    "HIIT", "Walking", "Pilates", "Dance", "Other"
]


class RoutineExercise(BaseModel):
    """Exercice d'un modèle de séance"""
    id: UUID = Field(default_factory=uuid4)
    name: str
    type: ExerciseType = ExerciseType.WEIGHT
    set_count: int = Field(3, ge=1)


class WorkoutRoutine(BaseModel):
    """Modèle de séance réutilisable (Quick Start)"""
    id: UUID = Field(default_factory=uuid4)
    name: str
    is_favorite: bool = False
    created_at: datetime = Field(default_factory=datetime.now)
    last_used_at: Optional[datetime] = None
    exercises: list[RoutineExercise] = Field(default_factory=list)

    def build_session(self, workout_type: str = "Weightlifting") -> WorkoutSession:
        """Crée une séance prête pour le Gym Mode à partir du modèle"""
        session = WorkoutSession(title=self.name, type=workout_type)
        for routine_exercise in self.exercises:
            exercise = session.add_exercise(routine_exercise.name, routine_exercise.type)
            for _ in range(routine_exercise.set_count):
                exercise.add_set()
        self.last_used_at = datetime.now()
        return session


def sort_routines(routines: list[WorkoutRoutine]) -> list[WorkoutRoutine]:
    """Favoris en premier, puis les plus récemment utilisés"""
    return sorted(
        routines,
        key=lambda r: (not r.is_favorite, -(r.last_used_at or r.created_at).timestamp())
    )
