"""
Modèle de données pour les séances cardio (tapis, vélo, elliptique...)
"""
from pydantic import BaseModel, Field, computed_field
from enum import Enum
from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4


class CardioWorkoutMode(str, Enum):
    """Mode de séance cardio"""
    TIMED = "timed"            # Compte à rebours sur une durée fixe
    FREESTYLE = "freestyle"    # Libre, avec suivi des intervalles
    DISTANCE = "distance"      # Distance cible (coach marathon)

    @property
    def index(self) -> int:
        """Index utilisé par le widget (0=timed, 1=freestyle, 2=distance)"""
        return list(CardioWorkoutMode).index(self)


class CardioPhase(str, Enum):
    """Étape d'une séance cardio"""
    SETUP = "setup"
    ACTIVE = "active"
    COMPLETE = "complete"


class CardioInterval(BaseModel):
    """Portion de séance à vitesse et inclinaison constantes"""
    id: UUID = Field(default_factory=uuid4)
    timestamp: datetime = Field(..., description="Début de l'intervalle")
    speed: float = Field(..., ge=0, description="Vitesse (mph) ou résistance")
    incline: float = Field(..., ge=0, description="Inclinaison (%) ou niveau")
    duration: Optional[float] = Field(None, ge=0, description="Durée en secondes (renseignée à la clôture)")

    def formatted_duration(self) -> str:
        """Durée au format M:SS"""
        if self.duration is None:
            return "--"
        total = int(self.duration)
        return f"{total // 60}:{total % 60:02d}"


class CardioSummary(BaseModel):
    """Résultat d'une séance cardio terminée"""
    mode: CardioWorkoutMode
    duration_seconds: float = Field(..., ge=0)
    distance_miles: Optional[float] = Field(None, ge=0)

    average_speed: float = Field(0.0, ge=0)
    average_incline: float = Field(0.0, ge=0)
    final_speed: float = Field(0.0, ge=0)
    final_incline: float = Field(0.0, ge=0)

    intervals: list[CardioInterval] = Field(default_factory=list)
    ended_early: bool = False

    @computed_field
    @property
    def interval_count(self) -> int:
        return len(self.intervals)

    def to_set_fields(self) -> dict:
        """Champs à reporter sur la série cardio (ExerciseSet)"""
        return {
            'duration': self.duration_seconds,
            'distance': self.distance_miles,
            'speed': round(self.average_speed, 2),
            'incline': round(self.average_incline, 2),
        }
