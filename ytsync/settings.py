"""
Django settings for ytsync project.

Everything deployment-specific comes from the environment so the same image
runs as a queue-triggered function or as a huey worker.
"""

import os
import sys
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent

SECRET_KEY = os.environ.get('DJANGO_SECRET_KEY', 'ytsync-insecure-dev-key')

DEBUG = os.environ.get('DJANGO_DEBUG', '').lower() in ('1', 'true', 'yes')

ALLOWED_HOSTS = []

INSTALLED_APPS = [
    'huey.contrib.djhuey',
    'media',
]

DATABASES = {
    'default': {
        'ENGINE': os.environ.get('DATABASE_ENGINE', 'django.db.backends.sqlite3'),
        'NAME': os.environ.get('DATABASE_NAME', str(BASE_DIR / 'db.sqlite3')),
        'USER': os.environ.get('DATABASE_USER', ''),
        'PASSWORD': os.environ.get('DATABASE_PASSWORD', ''),
        'HOST': os.environ.get('DATABASE_HOST', ''),
        'PORT': os.environ.get('DATABASE_PORT', ''),
    }
}

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

USE_TZ = True
TIME_ZONE = 'UTC'

# Huey task queue (background batch worker)
HUEY = {
    'huey_class': 'huey.SqliteHuey',
    'name': 'ytsync',
    'filename': os.environ.get('HUEY_DB', str(BASE_DIR / 'huey.sqlite3')),
    'immediate': False,
}

# Destination bucket for downloaded videos
YTSYNC_STORAGE_BUCKET = os.environ.get('BUCKET_NAME', '')
YTSYNC_STORAGE_PREFIX = 'videos/'

# Database alias holding completion records
YTSYNC_COMPLETION_DATABASE = os.environ.get('YTSYNC_COMPLETION_DATABASE', 'default')

# Session cookies handed to yt-dlp. Blank key disables cookies.
YTSYNC_COOKIE_KEY = os.environ.get('COOKIE_S3_KEY', 'secrets/cookies.txt')
YTSYNC_COOKIE_BUCKET = os.environ.get('COOKIE_BUCKET_NAME', '')
YTSYNC_COOKIE_MAX_AGE_HOURS = os.environ.get('COOKIE_MAX_AGE_HOURS', '168')
YTSYNC_COOKIE_PATH = os.environ.get('YTSYNC_COOKIE_PATH', '/tmp/cookies.txt')

# Local scratch space for in-flight downloads
YTSYNC_WORK_DIR = os.environ.get('YTSYNC_WORK_DIR', '/tmp/ytsync')
YTSYNC_STALE_DOWNLOAD_MINUTES = 60

# yt-dlp invocation
YTSYNC_YTDLP_COMMAND = os.environ.get('YTSYNC_YTDLP_COMMAND') or [sys.executable, '-m', 'yt_dlp']
YTSYNC_YTDLP_PROXY = os.environ.get('YTSYNC_YTDLP_PROXY', '')
YTSYNC_WATCH_URL = 'https://www.youtube.com/watch?v={video_id}'

YTSYNC_TITLE_MAX_CHARS = 100

# Time budget
YTSYNC_TIMEOUT_MARGIN_SECONDS = 10
YTSYNC_BATCH_TIMEOUT_SECONDS = 600
YTSYNC_TASK_RETRIES = 3
YTSYNC_TASK_RETRY_DELAY = 300

# Prometheus exporter port, 0 disables it
YTSYNC_METRICS_PORT = int(os.environ.get('YTSYNC_METRICS_PORT', '0'))
