"""
Modèle de données pour une séance du plan de course
"""
from pydantic import BaseModel, Field
from enum import Enum
from datetime import date
from typing import Optional
from uuid import UUID, uuid4


class RunType(str, Enum):
    """Types de séances d'un plan de course"""
    RECOVERY = "recovery"
    BASE = "base"
    LONG_RUN = "long_run"
    SPEED_WORK = "speed_work"
    TEMPO = "tempo"
    CROSS_TRAINING = "cross_training"
    REST = "rest"

    @property
    def display_name(self) -> str:
        return _RUN_TYPE_NAMES[self]

    @property
    def effort_description(self) -> str:
        return _RUN_TYPE_EFFORTS[self]

    @property
    def counts_as_mileage(self) -> bool:
        """La séance compte-t-elle dans le kilométrage hebdomadaire ?"""
        return self not in (RunType.REST, RunType.CROSS_TRAINING)

    @property
    def intensity_factor(self) -> float:
        """Intensité (0-1) utilisée par l'adaptation"""
        return _RUN_TYPE_INTENSITY[self]


_RUN_TYPE_NAMES = {
    RunType.RECOVERY: "Recovery",
    RunType.BASE: "Base Run",
    RunType.LONG_RUN: "Long Run",
    RunType.SPEED_WORK: "Speed Work",
    RunType.TEMPO: "Tempo Run",
    RunType.CROSS_TRAINING: "Cross Training",
    RunType.REST: "Rest Day",
}

_RUN_TYPE_EFFORTS = {
    RunType.RECOVERY: "Easy pace, conversational. Let your body rebuild.",
    RunType.BASE: "Comfortable pace. The foundation of endurance.",
    RunType.LONG_RUN: "Steady pace, building distance. Your endurance builder.",
    RunType.SPEED_WORK: "Intervals at high intensity. Builds speed and VO2 max.",
    RunType.TEMPO: "Comfortably hard. Sustained effort below race pace.",
    RunType.CROSS_TRAINING: "Strength, cycling, or swimming. Active recovery.",
    RunType.REST: "Full rest. Your body adapts and grows stronger.",
}

_RUN_TYPE_INTENSITY = {
    RunType.REST: 0.0,
    RunType.RECOVERY: 0.3,
    RunType.CROSS_TRAINING: 0.4,
    RunType.BASE: 0.5,
    RunType.LONG_RUN: 0.6,
    RunType.TEMPO: 0.75,
    RunType.SPEED_WORK: 0.85,
}


class TrainingSession(BaseModel):
    """Une journée d'entraînement d'un plan de course"""
    id: UUID = Field(default_factory=uuid4)
    date: date
    run_type: RunType
    target_distance: float = Field(..., ge=0, description="Distance cible (miles)")

    # Données post-séance
    actual_distance: Optional[float] = Field(None, ge=0, description="Distance réalisée (miles)")
    perceived_effort: Optional[int] = Field(None, ge=1, le=5, description="Effort ressenti (1-5)")
    pre_run_feeling: Optional[float] = Field(None, ge=0, le=1, description="Forme avant la sortie (0-1)")
    is_completed: bool = False
    is_skipped: bool = False
    notes: Optional[str] = None
    synced_workout_id: Optional[UUID] = Field(None, description="Séance importée associée")

    @property
    def completion_ratio(self) -> float:
        """Ratio réalisé / cible (1.0 = pile sur l'objectif)"""
        if self.actual_distance is None or self.target_distance <= 0:
            return 0.0
        return self.actual_distance / self.target_distance

    @property
    def was_over_achieved(self) -> bool:
        return self.completion_ratio > 1.2

    @property
    def was_under_achieved(self) -> bool:
        if not self.is_completed:
            return False
        return self.completion_ratio < 0.8

    def was_missed(self, today: Optional[date] = None) -> bool:
        """Séance passée, ni effectuée ni sautée"""
        today = today or date.today()
        return not self.is_completed and not self.is_skipped and self.date < today

    def mark_as_completed(
        self,
        actual_distance: float,
        perceived_effort: Optional[int] = None,
        notes: Optional[str] = None
    ):
        """Marque la séance comme effectuée"""
        self.actual_distance = actual_distance
        self.is_completed = True
        if perceived_effort is not None:
            self.perceived_effort = perceived_effort
        if notes:
            self.notes = notes
