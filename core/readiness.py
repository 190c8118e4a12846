"""
Forme du jour et modèle de glycogène pendant l'effort
"""
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from utils.logger import get_logger

logger = get_logger(__name__)


class ReadinessInput(BaseModel):
    acute_load: float = Field(..., ge=0, description="Charge aiguë (7 jours)")
    chronic_load: float = Field(..., ge=0, description="Charge chronique (28 jours)")
    resting_heart_rate_delta: float = Field(0.0, description="Écart FC repos vs moyenne (bpm)")
    hrv_delta_percent: float = Field(0.0, description="Écart VFC vs moyenne (%)")


class ReadinessResult(BaseModel):
    fatigue_coefficient: float
    pace_adjustment_percent: float


class ReadinessEstimator:
    """
    Coefficient de fatigue = charge aiguë / charge chronique, majoré
    si la FC repos monte (> 5 bpm) ou si la VFC chute (< -10%)
    """

    MIN_COEFFICIENT = 0.4
    MAX_COEFFICIENT = 2.0

    def evaluate(self, readiness: ReadinessInput) -> ReadinessResult:
        """
        Args:
            readiness: Charges et écarts physiologiques du jour

        Returns:
            ReadinessResult (coefficient borné 0.4-2.0 et ajustement d'allure en %)
        """
        chronic = max(0.1, readiness.chronic_load)
        coefficient = readiness.acute_load / chronic

        if readiness.resting_heart_rate_delta > 5:
            coefficient += 0.05
        if readiness.hrv_delta_percent < -10:
            coefficient += 0.05

        coefficient = min(self.MAX_COEFFICIENT, max(self.MIN_COEFFICIENT, coefficient))

        if coefficient > 1.30:
            adjustment = -5.0
        elif coefficient >= 1.15:
            adjustment = -2.0
        elif coefficient < 0.80:
            adjustment = 1.0
        else:
            adjustment = 0.0

        return ReadinessResult(fatigue_coefficient=coefficient, pace_adjustment_percent=adjustment)


class FuelingLevel(str, Enum):
    NOMINAL = "nominal"
    WARNING = "warning"
    CRITICAL = "critical"


class FuelingStatus(BaseModel):
    remaining_glycogen_grams: float
    level: FuelingLevel


# Part des glucides dans la dépense selon la zone d'intensité
_CARB_FRACTIONS = {1: 0.40, 2: 0.50, 3: 0.60, 4: 0.75}

MAX_GLYCOGEN_GRAMS = 500.0
MIN_STARTING_GLYCOGEN_GRAMS = 300.0


class FuelingEngine:
    """Réserve de glycogène consommée minute par minute, rechargée par les gels"""

    def __init__(
        self,
        weight_kg: float,
        warning_threshold_grams: float = 35.0,
        critical_threshold_grams: float = 20.0,
        default_gel_carbs_grams: float = 25.0
    ):
        self.warning_threshold_grams = warning_threshold_grams
        self.critical_threshold_grams = critical_threshold_grams
        self.default_gel_carbs_grams = default_gel_carbs_grams
        self.remaining_glycogen_grams = min(
            MAX_GLYCOGEN_GRAMS, max(MIN_STARTING_GLYCOGEN_GRAMS, weight_kg * 6.0)
        )

    @staticmethod
    def carb_fraction(intensity_zone: int) -> float:
        if intensity_zone <= 1:
            return _CARB_FRACTIONS[1]
        return _CARB_FRACTIONS.get(intensity_zone, 0.85)

    def ingest(self, kcal_per_minute: float, intensity_zone: int) -> FuelingStatus:
        """Consomme une minute d'effort (4 kcal par gramme de glucide)"""
        grams_per_minute = max(0.0, kcal_per_minute) * self.carb_fraction(intensity_zone) / 4.0
        self.remaining_glycogen_grams = max(0.0, self.remaining_glycogen_grams - grams_per_minute)

        status = self.status()
        if status.level == FuelingLevel.CRITICAL:
            logger.warning("⚠️ Glycogène critique : %.0f g restants", self.remaining_glycogen_grams)
        return status

    def log_gel(self, carbs_grams: Optional[float] = None) -> FuelingStatus:
        refill = max(0.0, carbs_grams if carbs_grams is not None else self.default_gel_carbs_grams)
        self.remaining_glycogen_grams = min(MAX_GLYCOGEN_GRAMS, self.remaining_glycogen_grams + refill)
        return self.status()

    def status(self) -> FuelingStatus:
        if self.remaining_glycogen_grams <= self.critical_threshold_grams:
            level = FuelingLevel.CRITICAL
        elif self.remaining_glycogen_grams <= self.warning_threshold_grams:
            level = FuelingLevel.WARNING
        else:
            level = FuelingLevel.NOMINAL
        return FuelingStatus(remaining_glycogen_grams=self.remaining_glycogen_grams, level=level)
