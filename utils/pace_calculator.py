"""
Conversions d'allures et de vitesses (miles, min/mi, mph)
"""
import math
from typing import Optional

from models import RunType


def pace_to_seconds(pace_str: str) -> int:
    """
    Convertit une allure "M:SS" en secondes totales

    Args:
        pace_str: Allure au format "8:30" ou "10:00"

    Returns:
        Allure en secondes par mile
    """
    parts = pace_str.split(':')
    minutes = int(parts[0])
    seconds = int(parts[1]) if len(parts) > 1 else 0
    return minutes * 60 + seconds


def seconds_to_pace(seconds: int) -> str:
    """
    Convertit des secondes en allure "M:SS"

    Args:
        seconds: Secondes par mile

    Returns:
        Allure au format "8:30"
    """
    minutes = seconds // 60
    secs = seconds % 60
    return f"{minutes}:{secs:02d}"


def format_clock(seconds: float) -> str:
    """Chronomètre "H:MM:SS" au-delà d'une heure, "M:SS" sinon"""
    total = max(0, int(seconds))
    hours = total // 3600
    minutes = (total % 3600) // 60
    secs = total % 60
    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


def format_pace_per_mile(pace_minutes: Optional[float]) -> str:
    """
    Formate une allure en minutes par mile

    Args:
        pace_minutes: Allure (min/mi), None si inconnue

    Returns:
        "8:30 /mi" ou "--:-- /mi"
    """
    if pace_minutes is None or pace_minutes <= 0 or math.isinf(pace_minutes):
        return "--:-- /mi"
    total_seconds = int(math.floor(pace_minutes * 60 + 0.5))
    return f"{seconds_to_pace(total_seconds)} /mi"


def speed_to_pace(speed_mph: float) -> Optional[float]:
    """Vitesse (mph) vers allure (min/mi)"""
    if speed_mph <= 0:
        return None
    return 60.0 / speed_mph


def pace_to_speed(pace_minutes: float) -> float:
    """Allure (min/mi) vers vitesse (mph)"""
    if pace_minutes <= 0:
        return 0.0
    return 60.0 / pace_minutes


class MarathonPaceDefaults:
    """Allures cibles par défaut selon le type de sortie"""

    TARGET_PACES = {
        RunType.RECOVERY: 11.5,
        RunType.BASE: 10.5,
        RunType.LONG_RUN: 11.0,
        RunType.TEMPO: 8.75,
        RunType.SPEED_WORK: 8.0,
    }

    @classmethod
    def target_pace_minutes_per_mile(cls, run_type: RunType) -> Optional[float]:
        return cls.TARGET_PACES.get(run_type)

    @classmethod
    def estimated_duration_minutes(cls, distance_miles: float, run_type: RunType) -> Optional[int]:
        """Durée estimée arrondie à la minute, None pour repos et cross-training"""
        pace = cls.target_pace_minutes_per_mile(run_type)
        if not pace or distance_miles <= 0:
            return None
        return int(math.floor(distance_miles * pace + 0.5))
