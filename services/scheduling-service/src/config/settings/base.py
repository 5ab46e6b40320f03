"""Base settings for Scheduling Service."""
import os
from pathlib import Path

from celery.schedules import crontab

BASE_DIR = Path(__file__).resolve().parent.parent.parent

SECRET_KEY = os.environ.get('SECRET_KEY', 'dev-secret-key')
DEBUG = os.environ.get('DEBUG', 'True').lower() == 'true'
ALLOWED_HOSTS = os.environ.get('ALLOWED_HOSTS', '*').split(',')

INSTALLED_APPS = [
    'django.contrib.contenttypes',
    'django.contrib.auth',
    'rest_framework',
    'apps.core',
]

LANGUAGE_CODE = 'en-us'
TIME_ZONE = 'UTC'
USE_I18N = True
USE_TZ = True
DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

REDIS_URL = os.environ.get('REDIS_URL', 'redis://redis:6379/5')
CACHES = {'default': {'BACKEND': 'django_redis.cache.RedisCache', 'LOCATION': REDIS_URL}}

CELERY_BROKER_URL = os.environ.get('CELERY_BROKER_URL', REDIS_URL)
CELERY_RESULT_BACKEND = os.environ.get('CELERY_RESULT_BACKEND', REDIS_URL)
CELERY_ACCEPT_CONTENT = ['json']
CELERY_TASK_SERIALIZER = 'json'
CELERY_RESULT_SERIALIZER = 'json'
CELERY_TIMEZONE = TIME_ZONE
CELERY_TASK_TIME_LIMIT = 300  # 5 minutes

# Celery Beat Schedule for periodic tasks
CELERY_BEAT_SCHEDULE = {
    'run-weather-check': {
        'task': 'apps.core.tasks.run_weather_check',
        'schedule': crontab(minute=0),  # Hourly
    },
}

SERVICE_NAME = 'scheduling-service'
SERVICE_PORT = 8015

# Events
EVENT_PUBLISHING_ENABLED = os.environ.get('EVENT_PUBLISHING_ENABLED', 'True').lower() == 'true'
EVENT_BACKEND = os.environ.get('EVENT_BACKEND', 'log')
REDIS_HOST = os.environ.get('REDIS_HOST', 'redis')
REDIS_PORT = int(os.environ.get('REDIS_PORT', 6379))
REDIS_DB = int(os.environ.get('REDIS_DB', 0))

# Weather minima per training level
WEATHER_MINIMA = {
    'STUDENT_PILOT': {
        'min_visibility': 5,        # statute miles
        'min_ceiling': 3000,        # feet
        'max_wind_speed': 10,       # knots
        'allow_precipitation': False,
        'allow_thunderstorms': False,
        'allow_icing': False,
    },
    'PRIVATE_PILOT': {
        'min_visibility': 3,
        'min_ceiling': 1000,
        'max_wind_speed': 20,
        'allow_precipitation': True,
        'allow_thunderstorms': False,
        'allow_icing': False,
    },
    'INSTRUMENT_RATED': {
        'min_visibility': 0,
        'min_ceiling': 0,
        'max_wind_speed': 30,
        'allow_precipitation': True,
        'allow_thunderstorms': False,
        'allow_icing': False,
    },
}

# Actor recorded on automated (weather-driven) transitions
SCHEDULING_SYSTEM_ACTOR = os.environ.get('SCHEDULING_SYSTEM_ACTOR', 'system')

# Weather checks
WEATHER_CHECK_LOOKAHEAD_HOURS = int(os.environ.get('WEATHER_CHECK_LOOKAHEAD_HOURS', 48))
WEATHER_SOURCE_CLASS = os.environ.get(
    'WEATHER_SOURCE_CLASS', 'apps.core.weather.sources.ScenarioWeatherSource'
)
WEATHER_DEMO_SCENARIO = os.environ.get('WEATHER_DEMO_SCENARIO', 'clear-skies')
WEATHER_SOURCE_CERTAINTY = float(os.environ.get('WEATHER_SOURCE_CERTAINTY', 0.9))
WEATHER_CACHE_ENABLED = os.environ.get('WEATHER_CACHE_ENABLED', 'True').lower() == 'true'
WEATHER_CACHE_TTL = int(os.environ.get('WEATHER_CACHE_TTL', 3600))

# Reschedule generation
RESCHEDULE_MAX_OPTIONS = int(os.environ.get('RESCHEDULE_MAX_OPTIONS', 3))
RESCHEDULE_HORIZON_DAYS = int(os.environ.get('RESCHEDULE_HORIZON_DAYS', 10))
RESCHEDULE_SLOT_INTERVAL_HOURS = 2
RESCHEDULE_SLOT_DURATION_HOURS = 2
RESCHEDULE_DAY_START_HOUR = 8
RESCHEDULE_DAY_END_HOUR = 18
RESCHEDULE_MAX_WORKERS = int(os.environ.get('RESCHEDULE_MAX_WORKERS', 4))
RESCHEDULE_GENERATION_TIMEOUT = float(os.environ.get('RESCHEDULE_GENERATION_TIMEOUT', 30))
RESCHEDULE_SCORER_HALF_LIFE_HOURS = float(os.environ.get('RESCHEDULE_SCORER_HALF_LIFE_HOURS', 72))

# Persistence seam
BOOKING_REPOSITORY_CLASS = os.environ.get(
    'BOOKING_REPOSITORY_CLASS', 'apps.core.repositories.InMemoryBookingRepository'
)

LOGGING = {'version': 1, 'disable_existing_loggers': False, 'formatters': {'json': {'()': 'pythonjsonlogger.jsonlogger.JsonFormatter'}}, 'handlers': {'console': {'class': 'logging.StreamHandler', 'formatter': 'json'}}, 'root': {'handlers': ['console'], 'level': 'INFO'}}
