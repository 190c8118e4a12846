"""
Séances cardio pilotées par un minuteur (1 Hz)

Trois modes:
- TimedCardioSession: compte à rebours sur une durée cible
- FreestyleCardioSession: séance libre, chronomètre croissant
- DistanceCardioSession: course guidée vers une distance cible

Le minuteur de la plateforme est remplacé par des appels explicites à tick().
"""
from datetime import datetime
from typing import Callable, Optional

from models.cardio import CardioWorkoutMode, CardioPhase, CardioSummary, CardioInterval
from core.interval_recorder import CardioIntervalRecorder
from core.errors import WorkoutStateError
from utils.pace_calculator import format_clock, format_pace_per_mile
from config.settings import (
    DEFAULT_CARDIO_SPEED, DEFAULT_CARDIO_INCLINE, SPEED_RANGE, INCLINE_RANGE,
    SETTING_STEP, DEFAULT_TIMED_CARDIO_MINUTES, TIMED_CARDIO_CHOICES
)


def _clamp(value: float, bounds: tuple[float, float]) -> float:
    low, high = bounds
    return max(low, min(high, value))


class CardioSession:
    """Base commune aux séances cardio (réglages, pause, intervalles)"""

    mode: CardioWorkoutMode = CardioWorkoutMode.FREESTYLE

    def __init__(
        self,
        speed: float = DEFAULT_CARDIO_SPEED,
        incline: float = DEFAULT_CARDIO_INCLINE,
        clock: Callable[[], datetime] = datetime.now
    ):
        self.speed = _clamp(speed, SPEED_RANGE)
        self.incline = _clamp(incline, INCLINE_RANGE)
        self.phase = CardioPhase.SETUP
        self.is_paused = False
        self.elapsed_time = 0.0
        self.recorder = CardioIntervalRecorder(clock=clock)
        self._summary: Optional[CardioSummary] = None

    # ------------------------------------------------------------------
    # Réglages
    # ------------------------------------------------------------------

    @property
    def is_active(self) -> bool:
        return self.phase == CardioPhase.ACTIVE

    def set_speed(self, value: float) -> float:
        """Modifie la vitesse (bornée) et enregistre le changement d'intervalle"""
        value = _clamp(value, SPEED_RANGE)
        if value != self.speed:
            self.speed = value
            if self.is_active:
                self.recorder.change_settings(speed=value)
        return self.speed

    def set_incline(self, value: float) -> float:
        """Modifie l'inclinaison (bornée) et enregistre le changement d'intervalle"""
        value = _clamp(value, INCLINE_RANGE)
        if value != self.incline:
            self.incline = value
            if self.is_active:
                self.recorder.change_settings(incline=value)
        return self.incline

    def step_speed(self, direction: int = 1) -> float:
        """Incrémente (+1) ou décrémente (-1) la vitesse d'un cran"""
        return self.set_speed(self.speed + direction * SETTING_STEP)

    def step_incline(self, direction: int = 1) -> float:
        """Incrémente (+1) ou décrémente (-1) l'inclinaison d'un cran"""
        return self.set_incline(self.incline + direction * SETTING_STEP)

    # ------------------------------------------------------------------
    # Cycle de vie
    # ------------------------------------------------------------------

    def start(self) -> None:
        if self.phase != CardioPhase.SETUP:
            raise WorkoutStateError("La séance cardio a déjà démarré")
        self.phase = CardioPhase.ACTIVE
        self.elapsed_time = 0.0
        self.is_paused = False
        self.recorder.start(self.speed, self.incline)
        self._on_start()

    def pause(self) -> None:
        self.is_paused = True

    def resume(self) -> None:
        self.is_paused = False

    def tick(self, seconds: float = 1.0) -> None:
        """Un battement du minuteur (ignoré hors phase active ou en pause)"""
        if not self.is_active or self.is_paused:
            return
        self._advance(seconds)

    def end(self, early: bool = False) -> CardioSummary:
        """
        Termine la séance et retourne le résumé

        Args:
            early: True si l'utilisateur arrête avant l'objectif
        """
        if self._summary is not None:
            return self._summary
        if self.phase == CardioPhase.SETUP:
            raise WorkoutStateError("La séance cardio n'a pas démarré")

        ended_early = early and self.phase == CardioPhase.ACTIVE
        self.phase = CardioPhase.COMPLETE
        intervals = self.recorder.finish()
        self._summary = self._build_summary(intervals, ended_early)
        return self._summary

    # ------------------------------------------------------------------
    # Affichage
    # ------------------------------------------------------------------

    @property
    def average_speed(self) -> float:
        if not self.recorder.is_recording and not self.recorder.intervals:
            return self.speed
        return self.recorder.average_speed()

    @property
    def average_incline(self) -> float:
        if not self.recorder.is_recording and not self.recorder.intervals:
            return self.incline
        return self.recorder.average_incline()

    @property
    def interval_count(self) -> int:
        """Nombre d'intervalles, en comptant celui en cours"""
        return len(self.recorder.snapshot())

    @property
    def formatted_elapsed_time(self) -> str:
        return format_clock(self.elapsed_time)

    def widget_fields(self) -> dict:
        """État cardio partagé avec le widget"""
        return {
            'mode': self.mode.index,
            'speed': self.speed,
            'incline': self.incline,
            'elapsed_time': self.elapsed_time,
        }

    # ------------------------------------------------------------------
    # Points d'extension
    # ------------------------------------------------------------------

    def _on_start(self) -> None:
        pass

    def _advance(self, seconds: float) -> None:
        self.elapsed_time += seconds

    def _build_summary(self, intervals: list[CardioInterval], ended_early: bool) -> CardioSummary:
        return CardioSummary(
            mode=self.mode,
            duration_seconds=self.elapsed_time,
            average_speed=self.average_speed,
            average_incline=self.average_incline,
            final_speed=self.speed,
            final_incline=self.incline,
            intervals=intervals,
            ended_early=ended_early
        )


class TimedCardioSession(CardioSession):
    """Séance cardio à durée fixe (compte à rebours)"""

    mode = CardioWorkoutMode.TIMED
    duration_choices = TIMED_CARDIO_CHOICES

    def __init__(self, target_minutes: int = DEFAULT_TIMED_CARDIO_MINUTES, **kwargs):
        super().__init__(**kwargs)
        if target_minutes <= 0:
            raise ValueError("La durée cible doit être positive")
        self.target_duration = target_minutes * 60.0
        self.remaining_time = self.target_duration

    def set_target_minutes(self, minutes: int) -> None:
        """Choix de la durée (uniquement avant le départ)"""
        if self.phase != CardioPhase.SETUP:
            raise WorkoutStateError("Durée modifiable uniquement avant le départ")
        if minutes <= 0:
            raise ValueError("La durée cible doit être positive")
        self.target_duration = minutes * 60.0
        self.remaining_time = self.target_duration

    @property
    def progress(self) -> float:
        if self.target_duration <= 0:
            return 0.0
        return 1 - (self.remaining_time / self.target_duration)

    @property
    def formatted_remaining_time(self) -> str:
        total = int(self.remaining_time)
        return f"{total // 60}:{total % 60:02d}"

    def widget_fields(self) -> dict:
        fields = super().widget_fields()
        fields['duration'] = self.target_duration
        fields['time_remaining'] = self.remaining_time
        return fields

    def _on_start(self) -> None:
        self.remaining_time = self.target_duration

    def _advance(self, seconds: float) -> None:
        step = min(seconds, self.remaining_time)
        self.remaining_time -= step
        self.elapsed_time += step
        if self.remaining_time <= 0:
            self.remaining_time = 0.0
            self.phase = CardioPhase.COMPLETE

    def _build_summary(self, intervals: list[CardioInterval], ended_early: bool) -> CardioSummary:
        summary = super()._build_summary(intervals, ended_early)
        summary.duration_seconds = self.target_duration - self.remaining_time
        return summary


class FreestyleCardioSession(CardioSession):
    """Séance cardio libre, avec suivi des intervalles"""

    mode = CardioWorkoutMode.FREESTYLE


class DistanceCardioSession(CardioSession):
    """
    Course guidée vers une distance cible

    La distance est simulée à partir de la vitesse (mph) à chaque seconde,
    sauf si une distance mesurée (GPS / santé) est fournie.
    """

    mode = CardioWorkoutMode.DISTANCE

    def __init__(
        self,
        target_distance: float,
        target_pace_minutes_per_mile: Optional[float] = None,
        **kwargs
    ):
        super().__init__(**kwargs)
        if target_distance <= 0:
            raise ValueError("La distance cible doit être positive")
        self.target_distance = target_distance
        self.target_pace_minutes_per_mile = target_pace_minutes_per_mile
        self.simulated_distance = 0.0
        self.live_distance = 0.0

    def update_live_distance(self, miles: float) -> None:
        """Distance mesurée par la montre / le téléphone"""
        self.live_distance = max(0.0, miles)
        self._check_target()

    @property
    def display_distance(self) -> float:
        if self.live_distance > 0:
            return self.live_distance
        return self.simulated_distance

    @property
    def progress(self) -> float:
        if self.target_distance <= 0:
            return 0.0
        return min(1.0, self.display_distance / self.target_distance)

    @property
    def remaining_distance(self) -> float:
        return max(0.0, self.target_distance - self.display_distance)

    @property
    def resolved_target_pace(self) -> Optional[float]:
        """Allure cible (min/mile), sinon déduite de la vitesse"""
        if self.target_pace_minutes_per_mile and self.target_pace_minutes_per_mile > 0:
            return self.target_pace_minutes_per_mile
        if self.speed <= 0:
            return None
        return 60 / self.speed

    @property
    def expected_distance(self) -> float:
        """Distance du « coureur fantôme » à l'allure cible"""
        pace = self.resolved_target_pace
        if not pace or pace <= 0:
            return 0.0
        return max(0.0, self.elapsed_time / (pace * 60))

    @property
    def ghost_progress(self) -> float:
        if self.target_distance <= 0:
            return 0.0
        return min(1.0, self.expected_distance / self.target_distance)

    @property
    def ghost_delta(self) -> float:
        return self.display_distance - self.expected_distance

    @property
    def ghost_delta_label(self) -> str:
        delta = self.ghost_delta
        if abs(delta) < 0.01:
            return "On target"
        if delta > 0:
            return f"Ahead by {delta:.2f} mi"
        return f"Behind by {abs(delta):.2f} mi"

    @property
    def formatted_target_pace(self) -> str:
        return format_pace_per_mile(self.resolved_target_pace)

    @property
    def formatted_pace(self) -> str:
        """Allure moyenne réalisée"""
        if self.display_distance <= 0:
            return format_pace_per_mile(None)
        return format_pace_per_mile(self.elapsed_time / self.display_distance / 60)

    def widget_fields(self) -> dict:
        fields = super().widget_fields()
        fields['duration'] = self.target_distance
        fields['current_distance'] = self.display_distance
        return fields

    def _on_start(self) -> None:
        self.simulated_distance = 0.0

    def _advance(self, seconds: float) -> None:
        self.elapsed_time += seconds
        self.simulated_distance += self.speed / 3600.0 * seconds
        self._check_target()

    def _check_target(self) -> None:
        if self.is_active and self.display_distance >= self.target_distance:
            self.phase = CardioPhase.COMPLETE

    def _build_summary(self, intervals: list[CardioInterval], ended_early: bool) -> CardioSummary:
        summary = super()._build_summary(intervals, ended_early)
        summary.distance_miles = round(self.display_distance, 3)
        return summary


def create_cardio_session(mode: CardioWorkoutMode, **kwargs) -> CardioSession:
    """Fabrique une séance cardio selon le mode choisi"""
    sessions = {
        CardioWorkoutMode.TIMED: TimedCardioSession,
        CardioWorkoutMode.FREESTYLE: FreestyleCardioSession,
        CardioWorkoutMode.DISTANCE: DistanceCardioSession,
    }
    return sessions[mode](**kwargs)
