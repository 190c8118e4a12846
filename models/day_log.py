"""
Journal quotidien : hydratation, séances et progression des objectifs
"""
import json
from pydantic import BaseModel, Field
import datetime as dt
from typing import Optional
from uuid import UUID

from .workout import WorkoutSession
from .goal import DailyEntry


class DayLog(BaseModel):
    """Un jour de suivi (unique par date)"""
    date: dt.date = Field(default_factory=dt.date.today)
    water_intake: float = Field(0.0, ge=0, description="Eau bue (oz)")
    workouts: list[WorkoutSession] = Field(default_factory=list)
    entries: list[DailyEntry] = Field(default_factory=list)

    # Cases cochées de la checklist nutrition, par séance (JSON)
    fuel_checklist_state_json: Optional[str] = None

    def log_water(self, ounces: float) -> float:
        self.water_intake = max(0.0, self.water_intake + ounces)
        return self.water_intake

    @property
    def total_active_calories(self) -> float:
        return sum(w.calories for w in self.workouts)

    @property
    def total_workout_duration(self) -> float:
        """Durée cumulée (secondes)"""
        return sum(w.duration for w in self.workouts)

    @property
    def has_worked_out(self) -> bool:
        return any(w.is_meaningfully_completed for w in self.workouts)

    # ------------------------------------------------------------------
    # Checklist nutrition
    # ------------------------------------------------------------------

    def _decode_fuel_checklist(self) -> dict:
        if not self.fuel_checklist_state_json:
            return {}
        try:
            data = json.loads(self.fuel_checklist_state_json)
        except json.JSONDecodeError:
            return {}
        by_session = data.get('by_session_id', {}) if isinstance(data, dict) else {}
        return by_session if isinstance(by_session, dict) else {}

    def fuel_checklist(self, session_id: UUID) -> set[str]:
        """Éléments cochés pour une séance"""
        return set(self._decode_fuel_checklist().get(str(session_id), []))

    def set_fuel_checklist(self, item_ids: set[str], session_id: UUID) -> None:
        by_session = self._decode_fuel_checklist()
        key = str(session_id)
        if item_ids:
            by_session[key] = sorted(item_ids)
        else:
            by_session.pop(key, None)

        if by_session:
            self.fuel_checklist_state_json = json.dumps({'by_session_id': by_session})
        else:
            self.fuel_checklist_state_json = None
