"""
Local cache of the yt-dlp cookies file.

The authoritative copy lives in object storage. A local copy younger than
the configured max age is reused; anything older is re-downloaded. A failed
refresh never stops the pipeline, it just runs without cookies.
"""

import os
import time
from pathlib import Path

from nanoid import generate

from media.utils import NANOID_ALPHABET


class CredentialCache:
    """Keeps the cookies file at config.cookie_path fresh"""

    def __init__(self, config, store, logger=None, clock=time.time):
        self.config = config
        self.store = store
        self.logger = logger
        self.clock = clock

    def log(self, message):
        if self.logger:
            self.logger(message)

    @property
    def path(self):
        return Path(self.config.cookie_path)

    def age_seconds(self):
        """Age of the local copy, or None if there is none"""
        try:
            mtime = self.path.stat().st_mtime
        except FileNotFoundError:
            return None
        return self.clock() - mtime

    def ensure_fresh(self):
        """
        Make sure a fresh cookies file is on disk.

        Returns:
            Path to the cookies file, or None when running without cookies
            (not configured, or the refresh failed)
        """
        if not self.config.cookies_enabled:
            return None

        try:
            age = self.age_seconds()
        except OSError as e:
            self.log(f'cookies: cannot stat local copy, refreshing: {e}')
        else:
            if age is None:
                self.log('cookies: no local copy, fetching')
            elif age < self.config.cookie_max_age_seconds:
                return self.path
            else:
                self.log(f'cookies: local copy is {age / 3600:.1f}h old, refreshing')

        tmp_path = self.path.with_name(f'{self.path.name}.{generate(NANOID_ALPHABET, size=8)}.tmp')
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.store.download_file(self.config.cookie_bucket, self.config.cookie_key, tmp_path)
            os.chmod(tmp_path, 0o600)
            os.replace(tmp_path, self.path)
        except Exception as e:
            self.log(f'cookies: refresh failed, continuing without cookies: {e}')
            try:
                tmp_path.unlink(missing_ok=True)
            except OSError as cleanup_error:
                self.log(f'cookies: could not remove {tmp_path}: {cleanup_error}')
            return None

        self.log(f'cookies: refreshed {self.path}')
        return self.path
