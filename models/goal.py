"""
Modèle de données pour les objectifs (épargne, étude, poids, habitudes...)
"""
from pydantic import BaseModel, Field
from enum import Enum
import datetime as dt
from datetime import date, timedelta
from typing import Optional
from uuid import UUID, uuid4


class UnitType(str, Enum):
    """Unité de mesure d'un objectif"""
    CURRENCY = "currency"
    WEIGHT = "weight"
    COUNT = "count"
    VOLUME = "volume"
    TIME = "time"

    @property
    def symbol(self) -> str:
        return {
            UnitType.CURRENCY: "$",
            UnitType.WEIGHT: "lbs",
            UnitType.COUNT: "",
            UnitType.VOLUME: "oz",
            UnitType.TIME: "min",
        }[self]


class GoalType(str, Enum):
    TARGET_VALUE = "target_value"
    FREQUENCY = "frequency"
    DAILY_HABIT = "daily_habit"


class GoalFrequency(str, Enum):
    """Fréquence de calcul de l'objectif"""
    DAILY = "daily"
    WEEKLY = "weekly"

    @property
    def days_per_period(self) -> int:
        return 1 if self == GoalFrequency.DAILY else 7


class GoalStatus(str, Enum):
    """Avancement par rapport au rythme attendu"""
    ON_TRACK = "on_track"
    BEHIND = "behind"
    AHEAD = "ahead"
    COMPLETED = "completed"

    @property
    def title(self) -> str:
        return {
            GoalStatus.ON_TRACK: "On Track",
            GoalStatus.BEHIND: "Behind",
            GoalStatus.AHEAD: "Ahead",
            GoalStatus.COMPLETED: "Completed",
        }[self]


class DailyEntry(BaseModel):
    """Progression saisie un jour donné"""
    date: dt.date = Field(default_factory=dt.date.today)
    value_added: float
    goal_id: Optional[UUID] = None


class DailyPlan(BaseModel):
    """Besoin quotidien calculé pour un objectif"""
    amount_needed_today: float
    status: GoalStatus
    baseline_rate: float = Field(..., description="Rythme initial (objectif / durée totale)")
    adjusted_rate: float = Field(..., description="Rythme recalculé (reste / jours restants)")
    days_remaining: int
    projected_completion: Optional[date] = None
    is_unrealistic: bool = False
    warning_message: Optional[str] = None
    progress_percentage: float = 0.0
    deviation_from_expected: float = 0.0

    @property
    def formatted_amount(self) -> str:
        if self.amount_needed_today < 1:
            return f"{self.amount_needed_today:.2f}"
        if self.amount_needed_today < 10:
            return f"{self.amount_needed_today:.1f}"
        return f"{self.amount_needed_today:.0f}"

    @property
    def needs_catch_up(self) -> bool:
        return self.status == GoalStatus.BEHIND and self.adjusted_rate > self.baseline_rate * 1.25

    @property
    def severity_level(self) -> int:
        """Gravité du retard (0-3)"""
        if self.status != GoalStatus.BEHIND:
            return 0
        ratio = self.adjusted_rate / max(self.baseline_rate, 0.001)
        if ratio > 2.0:
            return 3
        if ratio > 1.5:
            return 2
        if ratio > 1.25:
            return 1
        return 0

    @classmethod
    def completed(cls) -> "DailyPlan":
        return cls(
            amount_needed_today=0.0,
            status=GoalStatus.COMPLETED,
            baseline_rate=0.0,
            adjusted_rate=0.0,
            days_remaining=0,
            progress_percentage=1.0
        )

    @classmethod
    def expired(cls, remaining: float) -> "DailyPlan":
        return cls(
            amount_needed_today=remaining,
            status=GoalStatus.BEHIND,
            baseline_rate=0.0,
            adjusted_rate=0.0,
            days_remaining=0,
            is_unrealistic=True,
            warning_message="Deadline has passed",
            deviation_from_expected=-remaining
        )


class Goal(BaseModel):
    """Objectif suivi au quotidien"""
    id: UUID = Field(default_factory=uuid4)
    title: str = Field(..., min_length=1)
    target_amount: float = Field(..., gt=0)
    current_amount: float = 0.0
    start_date: date = Field(default_factory=date.today)
    deadline: Optional[date] = Field(default_factory=lambda: date.today() + timedelta(days=30))
    unit: UnitType = UnitType.COUNT
    type: GoalType = GoalType.TARGET_VALUE
    start_value: Optional[float] = None
    is_archived: bool = False
    notes: Optional[str] = None
    entries: list[DailyEntry] = Field(default_factory=list)

    def add_entry(self, value: float, entry_date: Optional[date] = None) -> DailyEntry:
        """Enregistre une progression et met à jour le total"""
        entry = DailyEntry(date=entry_date or date.today(), value_added=value, goal_id=self.id)
        self.entries.append(entry)
        self.current_amount += value
        return entry

    def daily_target(self, today: Optional[date] = None) -> float:
        """Reste à faire par jour jusqu'à l'échéance"""
        today = today or date.today()
        if self.deadline is None or self.deadline <= today:
            return 0.0
        remaining = self.target_amount - self.current_amount
        if remaining <= 0:
            return 0.0
        return remaining / max(1, (self.deadline - today).days)

    def historical_average(self) -> Optional[float]:
        """Moyenne des totaux journaliers saisis"""
        if not self.entries:
            return None
        totals = {}
        for entry in self.entries:
            totals[entry.date] = totals.get(entry.date, 0.0) + entry.value_added
        return sum(totals.values()) / len(totals)

    def daily_plan(self, today: Optional[date] = None) -> DailyPlan:
        from core.goal_calculator import GoalCalculator

        return GoalCalculator.calculate_daily_plan(
            target_amount=self.target_amount,
            current_amount=self.current_amount,
            deadline=self.deadline or date.max,
            start_date=self.start_date,
            historical_average=self.historical_average(),
            today=today
        )

    def status(self, today: Optional[date] = None) -> GoalStatus:
        return self.daily_plan(today).status

    @property
    def progress_percentage(self) -> float:
        return min(self.current_amount / self.target_amount, 1.0)
