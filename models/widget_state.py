"""
État d'entraînement partagé avec le widget et l'activité en direct
"""
from pydantic import BaseModel, Field, ValidationError
from datetime import datetime, timedelta
from typing import Optional

from config.settings import WIDGET_STATE_KEY
from utils.shared_store import SharedDefaults
from utils.logger import get_logger
from .cardio import CardioWorkoutMode

logger = get_logger(__name__)

# Secondes ajoutées par le bouton "+15s" du widget
WIDGET_REST_INCREMENT = 15


def format_elapsed_time(seconds: float) -> str:
    """
    Formate un temps écoulé pour l'affichage

    Args:
        seconds: Durée en secondes

    Returns:
        "H:MM:SS" au-delà d'une heure, sinon "MM:SS"
    """
    total = max(0, int(seconds))
    hours, minutes, secs = total // 3600, (total % 3600) // 60, total % 60
    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes:02d}:{secs:02d}"


def parse_elapsed_time(text: str) -> Optional[float]:
    """Inverse de format_elapsed_time, None si le texte est illisible"""
    try:
        parts = [int(p) for p in text.split(":")]
    except ValueError:
        return None
    if len(parts) == 2:
        minutes, secs = parts
        return float(minutes * 60 + secs)
    if len(parts) == 3:
        hours, minutes, secs = parts
        return float(hours * 3600 + minutes * 60 + secs)
    return None


class WorkoutWidgetState(BaseModel):
    """Instantané de la séance en cours, lu par le widget"""
    is_active: bool = False
    workout_title: str = ""
    exercise_name: str = ""
    current_set: int = 0
    total_sets: int = 0
    workout_start_date: datetime = Field(default_factory=datetime.now)

    # Repos
    rest_end_time: Optional[datetime] = None
    rest_duration: Optional[float] = None
    rest_time_remaining: Optional[float] = None

    # Pause
    pause_requested: bool = False
    is_paused: bool = False
    paused_display_time: Optional[str] = None

    # Enchaînement des exercices (grand widget)
    previous_exercise_name: Optional[str] = None
    previous_sets_completed: int = 0
    previous_total_sets: int = 0
    previous_is_complete: bool = False
    next_exercise_name: Optional[str] = None
    next_sets_completed: int = 0
    next_total_sets: int = 0
    total_exercises: int = 0
    current_exercise_index: int = 0

    # Cardio
    is_cardio: bool = False
    cardio_elapsed_time: float = 0.0
    cardio_duration: float = 0.0
    cardio_speed: float = 0.0
    cardio_incline: float = 0.0
    cardio_end_time: Optional[datetime] = None
    cardio_mode_index: int = 0
    cardio_time_remaining: Optional[float] = None

    @classmethod
    def idle(cls) -> "WorkoutWidgetState":
        """État au repos (aucune séance)"""
        return cls()

    @property
    def is_timed_cardio(self) -> bool:
        return self.is_cardio and self.cardio_mode_index == CardioWorkoutMode.TIMED.index

    def is_resting(self, now: Optional[datetime] = None) -> bool:
        """En période de repos (minuteur en cours ou repos en pause)"""
        now = now or datetime.now()
        if self.rest_end_time is not None and self.rest_end_time > now:
            return True
        if self.is_paused and self.rest_time_remaining and self.rest_time_remaining > 0:
            return True
        return False

    def elapsed_seconds(self, now: Optional[datetime] = None) -> float:
        """Temps écoulé, figé sur l'affichage de pause le cas échéant"""
        if self.paused_display_time:
            parsed = parse_elapsed_time(self.paused_display_time)
            if parsed is not None:
                return parsed
        now = now or datetime.now()
        return max(0.0, (now - self.workout_start_date).total_seconds())

    # ------------------------------------------------------------------
    # Actions du widget
    # ------------------------------------------------------------------

    def pause(self, now: Optional[datetime] = None) -> None:
        """
        Pause demandée depuis le widget

        Les échéances (repos, cardio minuté) deviennent des temps restants
        et `pause_requested` prévient l'application.
        """
        now = now or datetime.now()
        elapsed = max(0.0, (now - self.workout_start_date).total_seconds())
        self.is_paused = True
        self.pause_requested = True
        self.paused_display_time = format_elapsed_time(elapsed)

        if self.is_timed_cardio and self.cardio_end_time is not None:
            self.cardio_time_remaining = max(0.0, (self.cardio_end_time - now).total_seconds())
            self.cardio_end_time = None
        elif self.is_cardio and self.cardio_mode_index == CardioWorkoutMode.FREESTYLE.index:
            self.cardio_elapsed_time = elapsed

        if self.rest_end_time is not None:
            self.rest_time_remaining = max(0.0, (self.rest_end_time - now).total_seconds())
            self.rest_end_time = None

    def resume(self, now: Optional[datetime] = None) -> None:
        """Reprise depuis le widget, les échéances repartent de maintenant"""
        now = now or datetime.now()
        elapsed = self.elapsed_seconds(now)
        self.is_paused = False
        self.pause_requested = False
        self.paused_display_time = None
        self.workout_start_date = now - timedelta(seconds=elapsed)

        remaining = self.cardio_time_remaining
        if self.is_timed_cardio and remaining and remaining > 0:
            self.cardio_end_time = now + timedelta(seconds=remaining)
            self.cardio_time_remaining = None

        if self.rest_time_remaining and self.rest_time_remaining > 0:
            self.rest_end_time = now + timedelta(seconds=self.rest_time_remaining)
            self.rest_time_remaining = None

    def add_rest_time(self, seconds: float = WIDGET_REST_INCREMENT) -> bool:
        """Prolonge le repos en cours, False s'il n'y en a pas"""
        if self.rest_end_time is None:
            return False
        self.rest_end_time = self.rest_end_time + timedelta(seconds=seconds)
        if self.rest_duration is not None:
            self.rest_duration += seconds
        return True

    def skip_rest(self) -> None:
        self.rest_end_time = None
        self.rest_duration = None
        self.rest_time_remaining = None

    # ------------------------------------------------------------------
    # Stockage partagé
    # ------------------------------------------------------------------

    def save(self, store: Optional[SharedDefaults] = None) -> None:
        store = store or SharedDefaults()
        store.set(WIDGET_STATE_KEY, self.model_dump(mode="json"))

    @classmethod
    def load(cls, store: Optional[SharedDefaults] = None) -> "WorkoutWidgetState":
        """Charge l'état partagé, état au repos si absent ou illisible"""
        store = store or SharedDefaults()
        data = store.get(WIDGET_STATE_KEY)
        if data is None:
            return cls.idle()
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            logger.warning("⚠️ État du widget illisible, retour à l'état au repos : %s", e)
            return cls.idle()

    @classmethod
    def clear(cls, store: Optional[SharedDefaults] = None) -> None:
        cls.idle().save(store)


# ----------------------------------------------------------------------
# Boutons du widget : lecture, modification puis écriture de l'état partagé
# ----------------------------------------------------------------------

def pause_shared_workout(store: Optional[SharedDefaults] = None,
                         now: Optional[datetime] = None) -> WorkoutWidgetState:
    state = WorkoutWidgetState.load(store)
    if state.is_active and not state.is_paused:
        state.pause(now)
        state.save(store)
        logger.info("⏸️ Pause demandée depuis le widget (%s)", state.paused_display_time)
    return state


def resume_shared_workout(store: Optional[SharedDefaults] = None,
                          now: Optional[datetime] = None) -> WorkoutWidgetState:
    state = WorkoutWidgetState.load(store)
    if state.is_active and state.is_paused:
        state.resume(now)
        state.save(store)
        logger.info("▶️ Reprise depuis le widget")
    return state


def add_shared_rest_time(seconds: float = WIDGET_REST_INCREMENT,
                         store: Optional[SharedDefaults] = None) -> WorkoutWidgetState:
    state = WorkoutWidgetState.load(store)
    if state.add_rest_time(seconds):
        state.save(store)
        logger.info("⏱️ Repos prolongé de %ss depuis le widget", seconds)
    return state


def skip_shared_rest(store: Optional[SharedDefaults] = None) -> WorkoutWidgetState:
    state = WorkoutWidgetState.load(store)
    state.skip_rest()
    state.save(store)
    logger.info("⏭️ Repos passé depuis le widget")
    return state
