"""
Service Garmin Connect
Import des activités récentes sous forme de séances LifeFlow
"""
from datetime import datetime
from typing import Optional

from garminconnect import (
    Garmin,
    GarminConnectAuthenticationError,
    GarminConnectConnectionError,
    GarminConnectTooManyRequestsError,
)

from models import WorkoutSession, WorkoutSource, ExerciseType
from core.errors import ServiceUnavailableError
from config.settings import GARMIN_EMAIL, GARMIN_PASSWORD
from utils.logger import get_logger

logger = get_logger(__name__)

METERS_PER_MILE = 1609.344

GARMIN_ERRORS = (
    GarminConnectAuthenticationError,
    GarminConnectConnectionError,
    GarminConnectTooManyRequestsError,
)

# typeKey Garmin -> type de séance LifeFlow
ACTIVITY_TYPES = {
    'running': "Running",
    'treadmill_running': "Running",
    'trail_running': "Running",
    'track_running': "Running",
    'strength_training': "Weightlifting",
    'cycling': "Cycling",
    'indoor_cycling': "Cycling",
    'walking': "Walking",
    'hiking': "Hiking",
    'lap_swimming': "Swimming",
    'yoga': "Yoga",
}


def map_activity(activity: dict) -> WorkoutSession:
    """
    Convertit une activité Garmin en WorkoutSession

    Args:
        activity: Activité brute (get_activities)

    Returns:
        WorkoutSession (source Garmin), avec une série distance pour les sorties
    """
    type_key = (activity.get('activityType') or {}).get('typeKey', 'unknown')
    workout_type = ACTIVITY_TYPES.get(type_key, type_key.replace('_', ' ').title())

    start_raw = activity.get('startTimeLocal')
    timestamp = datetime.fromisoformat(start_raw) if start_raw else datetime.now()
    duration = float(activity.get('duration') or 0.0)

    workout = WorkoutSession(
        title=activity.get('activityName') or workout_type,
        type=workout_type,
        duration=duration,
        calories=float(activity.get('calories') or 0.0),
        source=WorkoutSource.GARMIN,
        timestamp=timestamp,
    )

    distance_meters = activity.get('distance') or 0.0
    if workout_type == "Running" and distance_meters > 0:
        exercise = workout.add_exercise("Run", ExerciseType.CARDIO)
        speed = activity.get('averageSpeed')
        exercise.add_set(
            is_completed=True,
            distance=round(distance_meters / METERS_PER_MILE, 2),
            duration=duration,
            speed=round(speed * 3600 / METERS_PER_MILE, 2) if speed else None,
        )

    return workout


class GarminService:
    """Service pour interagir avec Garmin Connect"""

    def __init__(
        self,
        email: Optional[str] = None,
        password: Optional[str] = None,
        client: Optional[Garmin] = None
    ):
        """
        Args:
            email: Email Garmin (si None, lit depuis .env)
            password: Mot de passe Garmin (si None, lit depuis .env)
            client: Client déjà connecté (tests)
        """
        self.email = email or GARMIN_EMAIL
        self.password = password or GARMIN_PASSWORD
        self.client = client

    def connect(self) -> Garmin:
        """Établit la connexion avec Garmin Connect"""
        if self.client is not None:
            return self.client

        if not self.email or not self.password:
            raise ServiceUnavailableError(
                "GARMIN_EMAIL et GARMIN_PASSWORD doivent être définis dans .env"
            )

        client = Garmin(self.email, self.password)
        try:
            client.login()
        except GARMIN_ERRORS as e:
            logger.error("❌ Erreur connexion Garmin: %s", e)
            raise ServiceUnavailableError(f"Connexion Garmin impossible: {e}") from e

        logger.info("✅ Connexion Garmin réussie")
        self.client = client
        return client

    def get_recent_workouts(self, limit: int = 10) -> list[WorkoutSession]:
        """
        Récupère les N dernières activités

        Args:
            limit: Nombre d'activités à récupérer

        Returns:
            Liste de WorkoutSession (vide en cas d'erreur)
        """
        try:
            activities = self.connect().get_activities(0, limit)
        except (ServiceUnavailableError, *GARMIN_ERRORS) as e:
            logger.error("❌ Erreur récupération activités récentes: %s", e)
            return []

        return [map_activity(activity) for activity in activities or []]

    def get_recent_runs(self, limit: int = 10) -> list[WorkoutSession]:
        return [w for w in self.get_recent_workouts(limit) if w.type == "Running"]
