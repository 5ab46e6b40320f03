"""
Development Settings
"""

from .base import *

DEBUG = True

CACHES = {
    'default': {
        'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
    }
}

EVENT_BACKEND = 'log'

LOGGING['root']['level'] = 'DEBUG'
