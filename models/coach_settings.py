"""
Réglages du coach vocal (course guidée)
"""
from pydantic import BaseModel, ValidationError
from enum import Enum
from typing import Optional

from config.settings import COACH_SETTINGS_KEY
from utils.shared_store import SharedDefaults
from utils.logger import get_logger

logger = get_logger(__name__)


class VoiceCoachStartupMode(str, Enum):
    """Coach vocal actif ou muet au démarrage d'une sortie"""
    ENABLED = "enabled"
    MUTED = "muted"

    @property
    def display_name(self) -> str:
        return "On" if self == VoiceCoachStartupMode.ENABLED else "Muted"


class MarathonCoachSettings(BaseModel):
    voice_coach_startup_mode: VoiceCoachStartupMode = VoiceCoachStartupMode.ENABLED
    is_voice_coach_enabled: bool = True
    announce_distance: bool = True
    announce_pace: bool = True

    @classmethod
    def default(cls) -> "MarathonCoachSettings":
        return cls()

    def save(self, store: Optional[SharedDefaults] = None) -> None:
        store = store or SharedDefaults()
        store.set(COACH_SETTINGS_KEY, self.model_dump(mode="json"))

    @classmethod
    def load(cls, store: Optional[SharedDefaults] = None) -> "MarathonCoachSettings":
        """Réglages enregistrés, ou réglages par défaut"""
        store = store or SharedDefaults()
        data = store.get(COACH_SETTINGS_KEY)
        if data is None:
            return cls.default()
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            logger.warning("⚠️ Réglages du coach illisibles : %s", e)
            return cls.default()
