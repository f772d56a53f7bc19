"""
Configuration adapter for the download pipeline.

Reads Django settings once and freezes them into a PipelineConfig that is
passed to every component, so nothing below this module touches settings.
"""

import shlex
from dataclasses import dataclass
from pathlib import Path
from typing import List

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured


@dataclass(frozen=True)
class PipelineConfig:
    """Immutable pipeline settings"""

    storage_bucket: str
    completion_database: str = 'default'
    storage_prefix: str = 'videos/'
    cookie_key: str = ''
    cookie_bucket: str = ''
    cookie_max_age_hours: float = 168.0
    cookie_path: Path = Path('/tmp/cookies.txt')
    work_dir: Path = Path('/tmp/ytsync')
    ytdlp_command: tuple = ('yt-dlp',)
    ytdlp_proxy: str = ''
    watch_url: str = 'https://www.youtube.com/watch?v={video_id}'
    title_max_chars: int = 100
    timeout_margin_seconds: float = 10.0
    batch_timeout_seconds: float = 600.0
    stale_download_minutes: int = 60

    @property
    def cookie_max_age_seconds(self):
        return self.cookie_max_age_hours * 3600

    @property
    def cookies_enabled(self):
        return bool(self.cookie_key and self.cookie_bucket)

    def video_url(self, video_id):
        return self.watch_url.format(video_id=video_id)

    @classmethod
    def from_settings(cls):
        """
        Build the configuration from Django settings.

        Raises:
            ImproperlyConfigured: If a required setting is missing or invalid
        """
        bucket = _required('YTSYNC_STORAGE_BUCKET')

        completion_database = _required('YTSYNC_COMPLETION_DATABASE')
        if completion_database not in settings.DATABASES:
            raise ImproperlyConfigured(
                f'YTSYNC_COMPLETION_DATABASE refers to unknown database {completion_database!r}'
            )

        if not hasattr(settings, 'YTSYNC_COOKIE_KEY'):
            raise ImproperlyConfigured('YTSYNC_COOKIE_KEY must be set (blank disables cookies)')

        max_age = _required('YTSYNC_COOKIE_MAX_AGE_HOURS')
        try:
            max_age = float(max_age)
        except (TypeError, ValueError):
            raise ImproperlyConfigured(f'YTSYNC_COOKIE_MAX_AGE_HOURS is not a number: {max_age!r}')
        if max_age <= 0:
            raise ImproperlyConfigured('YTSYNC_COOKIE_MAX_AGE_HOURS must be positive')

        return cls(
            storage_bucket=bucket,
            completion_database=completion_database,
            storage_prefix=getattr(settings, 'YTSYNC_STORAGE_PREFIX', 'videos/'),
            cookie_key=settings.YTSYNC_COOKIE_KEY or '',
            cookie_bucket=getattr(settings, 'YTSYNC_COOKIE_BUCKET', '') or bucket,
            cookie_max_age_hours=max_age,
            cookie_path=Path(getattr(settings, 'YTSYNC_COOKIE_PATH', '/tmp/cookies.txt')),
            work_dir=Path(getattr(settings, 'YTSYNC_WORK_DIR', '/tmp/ytsync')),
            ytdlp_command=tuple(parse_command(getattr(settings, 'YTSYNC_YTDLP_COMMAND', 'yt-dlp'))),
            ytdlp_proxy=getattr(settings, 'YTSYNC_YTDLP_PROXY', ''),
            watch_url=getattr(
                settings, 'YTSYNC_WATCH_URL', 'https://www.youtube.com/watch?v={video_id}'
            ),
            title_max_chars=int(getattr(settings, 'YTSYNC_TITLE_MAX_CHARS', 100)),
            timeout_margin_seconds=float(getattr(settings, 'YTSYNC_TIMEOUT_MARGIN_SECONDS', 10)),
            batch_timeout_seconds=float(getattr(settings, 'YTSYNC_BATCH_TIMEOUT_SECONDS', 600)),
            stale_download_minutes=int(getattr(settings, 'YTSYNC_STALE_DOWNLOAD_MINUTES', 60)),
        )


def _required(name):
    value = getattr(settings, name, None)
    if value in (None, ''):
        raise ImproperlyConfigured(f'{name} must be set')
    return value


def parse_command(command) -> List[str]:
    """
    Split a command setting into an argv list.

    Args:
        command: String (shell-quoted) or list/tuple of arguments

    Returns:
        list: argv prefix for subprocess

    Example:
        >>> parse_command('/usr/bin/python3 -m yt_dlp')
        ['/usr/bin/python3', '-m', 'yt_dlp']
    """
    if isinstance(command, (list, tuple)):
        return list(command)
    args = shlex.split(command or '')
    if not args:
        raise ImproperlyConfigured('YTSYNC_YTDLP_COMMAND is empty')
    return args
