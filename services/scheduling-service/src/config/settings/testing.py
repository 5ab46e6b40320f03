"""
Testing Settings

Settings for running tests.
"""

from .base import *

DEBUG = False
TESTING = True

CACHES = {
    'default': {
        'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
    }
}

CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True

# Event backend for testing
EVENT_BACKEND = 'memory'

WEATHER_SOURCE_CLASS = 'apps.core.weather.sources.ScenarioWeatherSource'
WEATHER_DEMO_SCENARIO = 'clear-skies'
WEATHER_CACHE_ENABLED = False

# Logging - minimal output during tests
LOGGING = {
    'version': 1,
    'disable_existing_loggers': True,
    'handlers': {
        'null': {
            'class': 'logging.NullHandler',
        },
    },
    'root': {
        'handlers': ['null'],
        'level': 'CRITICAL',
    },
    'loggers': {
        'apps': {
            'handlers': ['null'],
            'level': 'CRITICAL',
            'propagate': False,
        },
    },
}
