"""
Modèle de données pour le plan de course complet
"""
from pydantic import BaseModel, Field
from datetime import date, datetime, timedelta
from typing import Optional
from enum import Enum
from uuid import UUID, uuid4
from .session import TrainingSession, RunType


class RaceDistance(str, Enum):
    """Distances de course proposées par le coach"""
    ONE_MILE = "one_mile"
    FIVE_K = "five_k"
    EIGHT_K = "eight_k"
    HALF_MARATHON = "half_marathon"
    MARATHON = "marathon"

    @property
    def display_name(self) -> str:
        return _RACE_TABLE[self][0]

    @property
    def distance_in_miles(self) -> float:
        return _RACE_TABLE[self][1]

    @property
    def typical_taper_weeks(self) -> int:
        """Semaines d'affûtage recommandées"""
        return _RACE_TABLE[self][2]

    @property
    def minimum_weeks_needed(self) -> int:
        """Nombre minimal de semaines pour préparer la distance"""
        return _RACE_TABLE[self][3]

    @property
    def peak_weeks(self) -> int:
        """Semaines de volume maximal avant l'affûtage"""
        return _RACE_TABLE[self][4]

    @property
    def long_run_cap_fraction(self) -> float:
        """Plafond de la sortie longue (fraction de la distance de course)"""
        return _RACE_TABLE[self][5]


# nom, miles, affûtage, minimum, pic, plafond sortie longue
_RACE_TABLE = {
    RaceDistance.ONE_MILE: ("1 Mile", 1.0, 1, 4, 1, 2.0),
    RaceDistance.FIVE_K: ("5K", 3.1, 1, 6, 2, 1.5),
    RaceDistance.EIGHT_K: ("8K", 5.0, 1, 8, 2, 1.3),
    RaceDistance.HALF_MARATHON: ("Half Marathon", 13.1, 2, 12, 3, 0.85),
    RaceDistance.MARATHON: ("Marathon", 26.2, 3, 16, 3, 0.75),
}


class TrainingPhase(str, Enum):
    """Phases d'un plan construit à rebours depuis la course"""
    BASE = "base"
    BUILD = "build"
    PEAK = "peak"
    TAPER = "taper"

    @property
    def display_name(self) -> str:
        return self.value.capitalize()

    @property
    def description(self) -> str:
        return {
            TrainingPhase.BASE: "Building your aerobic foundation at a comfortable level.",
            TrainingPhase.BUILD: "Progressively increasing mileage by ~10% per week.",
            TrainingPhase.PEAK: "Highest training volume. Your longest runs happen here.",
            TrainingPhase.TAPER: "Reducing volume to arrive at race day fresh and ready.",
        }[self]


class TrainingPlan(BaseModel):
    """Plan de course adaptatif"""
    id: UUID = Field(default_factory=uuid4)
    race_distance: RaceDistance
    race_date: date = Field(..., description="Date de la course")
    start_date: date = Field(default_factory=date.today, description="Début du plan")
    created_at: datetime = Field(default_factory=datetime.now)

    # Forme de départ
    weekly_mileage: float = Field(..., ge=0, description="Kilométrage hebdo actuel (miles)")
    longest_recent_run: float = Field(..., ge=0, description="Plus longue sortie récente (miles)")

    # Jours de repos (1=lundi ... 7=dimanche)
    rest_days: list[int] = Field(default_factory=list)

    # État
    is_active: bool = True
    is_completed: bool = False

    # Scores mis à jour par l'adaptation
    compliance_score: float = Field(1.0, ge=0, le=1)
    confidence_score: float = Field(0.5, ge=0, le=1)

    sessions: list[TrainingSession] = Field(default_factory=list)

    # ------------------------------------------------------------------
    # Calendrier
    # ------------------------------------------------------------------

    @property
    def total_weeks(self) -> int:
        return max(1, (self.race_date - self.start_date).days // 7)

    @property
    def total_days(self) -> int:
        return max(1, (self.race_date - self.start_date).days)

    def current_week(self, today: Optional[date] = None) -> int:
        """Semaine en cours (base 1, bornée au plan)"""
        today = today or date.today()
        elapsed_weeks = (today - self.start_date).days // 7
        return min(max(1, elapsed_weeks + 1), self.total_weeks)

    def current_day(self, today: Optional[date] = None) -> int:
        """Jour en cours (base 1, borné au plan)"""
        today = today or date.today()
        elapsed_days = (today - self.start_date).days
        return min(max(1, elapsed_days + 1), self.total_days)

    def progress(self, today: Optional[date] = None) -> float:
        """Avancement du plan (0-1) basé sur le temps écoulé"""
        return self.current_day(today) / self.total_days

    def days_until_race(self, today: Optional[date] = None) -> int:
        today = today or date.today()
        return (self.race_date - today).days

    def current_phase(self, today: Optional[date] = None) -> TrainingPhase:
        """Phase d'entraînement selon la position dans le plan"""
        current_week = self.current_week(today)
        weeks_remaining = self.total_weeks - current_week + 1
        taper_weeks = self.race_distance.typical_taper_weeks
        peak_weeks = self.race_distance.peak_weeks

        if weeks_remaining <= taper_weeks:
            return TrainingPhase.TAPER
        if weeks_remaining <= taper_weeks + peak_weeks:
            return TrainingPhase.PEAK
        if current_week <= max(2, self.total_weeks // 4):
            return TrainingPhase.BASE
        return TrainingPhase.BUILD

    def is_taper_locked(self, today: Optional[date] = None, lock_days: int = 7) -> bool:
        """Dernière semaine avant la course : plus aucun ajustement"""
        return self.days_until_race(today) <= lock_days

    # ------------------------------------------------------------------
    # Séances
    # ------------------------------------------------------------------

    @property
    def sorted_sessions(self) -> list[TrainingSession]:
        return sorted(self.sessions, key=lambda s: s.date)

    @property
    def completed_sessions(self) -> list[TrainingSession]:
        return [s for s in self.sessions if s.is_completed]

    def upcoming_sessions(self, today: Optional[date] = None) -> list[TrainingSession]:
        """Séances d'aujourd'hui et à venir, non effectuées"""
        today = today or date.today()
        return sorted(
            (s for s in self.sessions if s.date >= today and not s.is_completed),
            key=lambda s: s.date
        )

    def next_running_sessions(self, count: int, today: Optional[date] = None) -> list[TrainingSession]:
        """Prochaines séances futures (hors repos), à partir de demain"""
        today = today or date.today()
        upcoming = sorted(
            (s for s in self.sessions
             if s.date > today and not s.is_completed and s.run_type != RunType.REST),
            key=lambda s: s.date
        )
        return upcoming[:count]

    def todays_session(self, today: Optional[date] = None) -> Optional[TrainingSession]:
        today = today or date.today()
        for session in self.sessions:
            if session.date == today:
                return session
        return None

    def get_session(self, session_id: UUID) -> Optional[TrainingSession]:
        for session in self.sessions:
            if session.id == session_id:
                return session
        return None

    def current_week_mileage(self, today: Optional[date] = None) -> float:
        """Distance réalisée sur la semaine calendaire en cours (lundi-dimanche)"""
        today = today or date.today()
        week_start = today - timedelta(days=today.weekday())
        week_end = week_start + timedelta(days=7)
        return sum(
            s.actual_distance or 0.0
            for s in self.sessions
            if week_start <= s.date < week_end and s.is_completed
        )

    def get_total_volume(self) -> float:
        """Kilométrage total planifié"""
        return sum(s.target_distance for s in self.sessions if s.run_type.counts_as_mileage)

    def get_statistics(self) -> dict:
        """Statistiques du plan par type de séance"""
        run_types = {}
        for session in self.sessions:
            run_types[session.run_type.value] = run_types.get(session.run_type.value, 0) + 1

        return {
            'run_types': run_types,
            'total_weeks': self.total_weeks,
            'total_sessions': len(self.sessions),
            'completed_sessions': len(self.completed_sessions),
            'total_volume_miles': round(self.get_total_volume(), 1),
            'completed_miles': round(sum(s.actual_distance or 0.0 for s in self.completed_sessions), 1),
        }
