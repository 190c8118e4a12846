"""
Configuration settings for the LifeFlow coach application
"""
import os
from dotenv import load_dotenv
from pathlib import Path

# Load environment variables
load_dotenv()

# Base paths
BASE_DIR = Path(__file__).resolve().parent.parent
DATA_DIR = Path(os.getenv('LIFEFLOW_DATA_DIR', BASE_DIR / "data"))
PLANS_DIR = DATA_DIR / "plans"
SHARED_DIR = DATA_DIR / "shared"

# Create directories if they don't exist
for directory in [DATA_DIR, PLANS_DIR, SHARED_DIR]:
    directory.mkdir(parents=True, exist_ok=True)

# API Credentials
GARMIN_EMAIL = os.getenv('GARMIN_EMAIL')
GARMIN_PASSWORD = os.getenv('GARMIN_PASSWORD')

OPENWEATHER_API_KEY = os.getenv('OPENWEATHER_API_KEY', '')
WEATHER_LOCATION = os.getenv('WEATHER_LOCATION', 'San Francisco,US')

# Shared container (widget / live activity state)
APP_GROUP_ID = "group.com.Fez.LifeFlow"
WIDGET_STATE_KEY = "workoutWidgetState"
COACH_SETTINGS_KEY = "marathonCoachSettings"

# Deep links
DEEP_LINK_SCHEME = "lifeflow"

# Cardio defaults (mph / %)
DEFAULT_CARDIO_SPEED = 3.0
DEFAULT_CARDIO_INCLINE = 0.0
SPEED_RANGE = (0.5, 12.0)
INCLINE_RANGE = (0.0, 15.0)
SETTING_STEP = 0.5
DEFAULT_TIMED_CARDIO_MINUTES = 10
TIMED_CARDIO_CHOICES = [5, 10, 15, 20, 30, 45, 60]

# Intervals shorter than this are treated as jitter (strictly greater is kept)
INTERVAL_JITTER_SECONDS = 1.0

# Gym mode
DEFAULT_REST_SECONDS = 60

# Adaptation thresholds
OVER_ACHIEVER_RATIO = 1.2
UNDER_ACHIEVER_RATIO = 0.8
TAPER_LOCK_DAYS = 7
MISSED_VOLUME_CAP = 0.15

# Compliance -> training status
TRAINING_STATUS_THRESHOLDS = {
    'crushing_it': 0.85,
    'on_track': 0.6,
}

# Logging
LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
