"""
Service Météo
Résumé des conditions avant une sortie (OpenWeatherMap)
"""
import math
from typing import Optional

from pyowm import OWM
from pyowm.commons.exceptions import PyOWMError

from config.settings import OPENWEATHER_API_KEY, WEATHER_LOCATION
from utils.logger import get_logger

logger = get_logger(__name__)


def coach_message(fahrenheit: float) -> str:
    """Conseil du coach selon la température"""
    if fahrenheit < 40:
        return "Layer up and start easy."
    if fahrenheit < 70:
        return "Perfect PR weather."
    if fahrenheit < 82:
        return "Great day to build momentum."
    return "Hydrate early and pace with control."


def format_run_summary(fahrenheit: float, condition: str) -> str:
    """Ex: '72°F and clear sky. Great day to build momentum.'"""
    rounded = int(math.copysign(math.floor(abs(fahrenheit) + 0.5), fahrenheit))
    return f"{rounded}°F and {condition.lower()}. {coach_message(fahrenheit)}"


class RunWeatherService:
    """Récupère la météo une seule fois, sauf rafraîchissement forcé"""

    FALLBACK_SUMMARY = "Conditions unavailable. Trust your rhythm and start smooth."

    def __init__(
        self,
        api_key: Optional[str] = None,
        location: Optional[str] = None,
        weather_manager=None
    ):
        """
        Initialise le service météo

        Args:
            api_key: Clé API OpenWeatherMap (si None, lit depuis .env)
            location: Ville (format: "Paris,FR")
            weather_manager: Gestionnaire pyowm déjà construit (tests)
        """
        self.location = location or WEATHER_LOCATION
        self.summary_text = self.FALLBACK_SUMMARY
        self.is_loading = False
        self.has_fetched = False
        self.mgr = weather_manager

        if self.mgr is None:
            key = api_key or OPENWEATHER_API_KEY
            if not key:
                logger.warning("⚠️ OPENWEATHER_API_KEY non défini - service météo désactivé")
            else:
                self.mgr = OWM(key).weather_manager()
                logger.info("✅ Service météo initialisé")

    def fetch_if_needed(self, force: bool = False) -> str:
        """
        Met à jour le résumé météo

        Returns:
            Résumé affiché (ou message de repli)
        """
        if self.has_fetched and not force:
            return self.summary_text

        self.is_loading = True
        if self.mgr is None:
            return self._apply_fallback()

        try:
            observation = self.mgr.weather_at_place(self.location)
            weather = observation.weather
            fahrenheit = weather.temperature('fahrenheit')['temp']
            condition = weather.detailed_status or weather.status
        except PyOWMError as e:
            logger.error("❌ Erreur récupération météo: %s", e)
            return self._apply_fallback()

        self.summary_text = format_run_summary(fahrenheit, condition)
        self.is_loading = False
        self.has_fetched = True
        return self.summary_text

    def _apply_fallback(self) -> str:
        self.summary_text = self.FALLBACK_SUMMARY
        self.is_loading = False
        self.has_fetched = True
        return self.summary_text
