"""
Enregistreur d'intervalles cardio

Suit les changements de vitesse / inclinaison pendant une séance cardio et
calcule les moyennes pondérées par le temps à la fin de la séance.
"""
from datetime import datetime
from typing import Callable, Iterable, Optional

from models.cardio import CardioInterval
from config.settings import INTERVAL_JITTER_SECONDS
from core.errors import WorkoutStateError


def time_weighted_average(
    intervals: Iterable[CardioInterval],
    attribute: str = "speed",
    default: float = 0.0
) -> float:
    """
    Moyenne pondérée par la durée d'un attribut des intervalles

    avg = Σ(valeur × durée) / Σ(durée)

    Args:
        intervals: Intervalles clôturés (durée renseignée)
        attribute: 'speed' ou 'incline'
        default: Valeur retournée si la durée totale est nulle

    Returns:
        Moyenne pondérée
    """
    weighted_total = 0.0
    total_duration = 0.0
    for interval in intervals:
        duration = interval.duration or 0.0
        weighted_total += getattr(interval, attribute) * duration
        total_duration += duration

    if total_duration <= 0:
        return default
    return weighted_total / total_duration


def total_duration(intervals: Iterable[CardioInterval]) -> float:
    """Durée cumulée (secondes) d'une liste d'intervalles"""
    return sum(interval.duration or 0.0 for interval in intervals)


def combine_averages(parts: Iterable[tuple[float, float]], default: float = 0.0) -> float:
    """
    Combine des moyennes partielles (moyenne, durée) en une moyenne globale

    Args:
        parts: Couples (moyenne, durée totale) de séquences disjointes
        default: Valeur si la durée cumulée est nulle
    """
    weighted_total = 0.0
    duration_total = 0.0
    for average, duration in parts:
        weighted_total += average * duration
        duration_total += duration
    if duration_total <= 0:
        return default
    return weighted_total / duration_total


class CardioIntervalRecorder:
    """
    Enregistre les intervalles {vitesse, inclinaison, durée} d'une séance

    Un intervalle ouvert est en cours à tout moment entre start() et finish().
    À chaque changement de réglage, l'intervalle ouvert est clôturé avec les
    anciennes valeurs (s'il dure plus que le seuil anti-rebond) puis un nouvel
    intervalle démarre avec les nouvelles valeurs.
    """

    def __init__(
        self,
        clock: Callable[[], datetime] = datetime.now,
        jitter_seconds: float = INTERVAL_JITTER_SECONDS
    ):
        self.clock = clock
        self.jitter_seconds = jitter_seconds

        self._intervals: list[CardioInterval] = []
        self._speed = 0.0
        self._incline = 0.0
        self._current_start: Optional[datetime] = None
        self._finished = False

    # ------------------------------------------------------------------
    # État
    # ------------------------------------------------------------------

    @property
    def intervals(self) -> list[CardioInterval]:
        """Intervalles clôturés (copie)"""
        return list(self._intervals)

    @property
    def is_recording(self) -> bool:
        return self._current_start is not None

    @property
    def current_speed(self) -> float:
        return self._speed

    @property
    def current_incline(self) -> float:
        return self._incline

    def _elapsed(self, now: datetime) -> float:
        return max(0.0, (now - self._current_start).total_seconds())

    # ------------------------------------------------------------------
    # Cycle de vie
    # ------------------------------------------------------------------

    def start(self, speed: float, incline: float) -> None:
        """Démarre l'enregistrement avec les réglages initiaux"""
        self._intervals = []
        self._speed = speed
        self._incline = incline
        self._current_start = self.clock()
        self._finished = False

    def change_settings(
        self,
        speed: Optional[float] = None,
        incline: Optional[float] = None
    ) -> Optional[CardioInterval]:
        """
        Applique un changement de vitesse et/ou d'inclinaison

        Returns:
            L'intervalle clôturé, ou None s'il a été écarté (rebond)
        """
        if not self.is_recording:
            raise WorkoutStateError("Aucun enregistrement d'intervalles en cours")

        now = self.clock()
        duration = self._elapsed(now)
        closed = None

        if duration > self.jitter_seconds:
            closed = CardioInterval(
                timestamp=self._current_start,
                speed=self._speed,
                incline=self._incline,
                duration=duration
            )
            self._intervals.append(closed)

        if speed is not None:
            self._speed = speed
        if incline is not None:
            self._incline = incline
        self._current_start = now
        return closed

    def finish(self) -> list[CardioInterval]:
        """
        Clôture l'intervalle en cours (quelle que soit sa durée)

        Returns:
            Liste complète des intervalles enregistrés
        """
        if self._finished:
            return self.intervals
        if not self.is_recording:
            raise WorkoutStateError("Aucun enregistrement d'intervalles en cours")

        now = self.clock()
        self._intervals.append(CardioInterval(
            timestamp=self._current_start,
            speed=self._speed,
            incline=self._incline,
            duration=self._elapsed(now)
        ))
        self._current_start = None
        self._finished = True
        return self.intervals

    # ------------------------------------------------------------------
    # Lecture
    # ------------------------------------------------------------------

    def snapshot(self) -> list[CardioInterval]:
        """Intervalles clôturés + intervalle en cours (sans le clôturer)"""
        intervals = self.intervals
        if self.is_recording:
            intervals.append(CardioInterval(
                timestamp=self._current_start,
                speed=self._speed,
                incline=self._incline,
                duration=self._elapsed(self.clock())
            ))
        return intervals

    def average_speed(self) -> float:
        """Vitesse moyenne pondérée (vitesse actuelle si aucune durée)"""
        return time_weighted_average(self.snapshot(), "speed", default=self._speed)

    def average_incline(self) -> float:
        """Inclinaison moyenne pondérée (inclinaison actuelle si aucune durée)"""
        return time_weighted_average(self.snapshot(), "incline", default=self._incline)

    def interval_start_offsets(self) -> list[float]:
        """Décalage (secondes depuis le début) de chaque intervalle"""
        offsets = []
        cumulative = 0.0
        for interval in self.snapshot():
            offsets.append(cumulative)
            cumulative += interval.duration or 0.0
        return offsets
