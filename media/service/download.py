"""
Download service: fetch a video through an ordered list of client strategies.

Each strategy is one yt-dlp run. The first run that leaves a non-empty file
wins; that file is uploaded to object storage and always removed locally.
"""

import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from media import metrics
from media.service.constants import ClientStrategy, VIDEO_CONTENT_TYPE
from media.service.extractor import ExtractionError, ExtractionTimedOut
from media.utils import temp_download_name


@dataclass
class DownloadAttempt:
    """One (item, strategy) try. Kept in memory only."""

    url: str
    strategy: ClientStrategy
    outcome: str
    error: Optional[str] = None


@dataclass
class FetchResult:
    """Information about a stored download"""

    strategy: ClientStrategy
    bucket: str
    storage_key: str
    file_size: int
    attempts: List[DownloadAttempt] = field(default_factory=list)


class FetchFailed(Exception):
    """No strategy produced a payload"""

    def __init__(self, message, attempts=None):
        super().__init__(message)
        self.attempts = attempts or []


class EmptyDownload(ExtractionError):
    """yt-dlp exited cleanly but wrote nothing"""


class FetchStrategyExecutor:
    def __init__(
        self,
        config,
        store,
        credentials,
        extractor,
        strategies=None,
        logger=None,
        clock=time.monotonic,
    ):
        self.config = config
        self.store = store
        self.credentials = credentials
        self.extractor = extractor
        self.strategies = list(strategies or ClientStrategy)
        self.logger = logger
        self.clock = clock

    def log(self, message):
        if self.logger:
            self.logger(message)

    def fetch(self, url, storage_key, item_id=None, deadline=None):
        """
        Download url and store it at storage_key.

        Args:
            url: Video page URL
            storage_key: Object key for the upload
            item_id: Identifier used in temp file names and log lines
            deadline: Optional clock() value after which no new work starts

        Returns:
            FetchResult

        Raises:
            FetchFailed: If every strategy failed or time ran out
            Exception: Upload errors propagate unchanged
        """
        work_dir = Path(self.config.work_dir)
        work_dir.mkdir(parents=True, exist_ok=True)
        label = item_id or 'item'
        attempts = []

        for strategy in self.strategies:
            timeout = None
            if deadline is not None:
                timeout = deadline - self.clock()
                if timeout <= 0:
                    raise FetchFailed(f'{label}: out of time before {strategy.value}', attempts)

            cookie_path = self.credentials.ensure_fresh()
            tmp_path = work_dir / temp_download_name(label, strategy.value)

            try:
                try:
                    self.extractor.extract(
                        url, strategy, tmp_path, cookie_path=cookie_path, timeout=timeout
                    )
                    if not tmp_path.exists() or tmp_path.stat().st_size == 0:
                        raise EmptyDownload('yt-dlp produced an empty file')
                except ExtractionTimedOut as e:
                    attempts.append(DownloadAttempt(url, strategy, 'timeout', str(e)))
                    metrics.observe_attempt(strategy.value, 'timeout')
                    self.log(f'strategy timed out id={label} strategy={strategy.value} error={e}')
                    raise FetchFailed(f'{label}: {e}', attempts) from e
                except Exception as e:
                    # Any failed run moves on to the next strategy
                    attempts.append(DownloadAttempt(url, strategy, 'failed', str(e)))
                    metrics.observe_attempt(strategy.value, 'failed')
                    self.log(f'strategy failed id={label} strategy={strategy.value} error={e}')
                    continue

                file_size = tmp_path.stat().st_size
                attempts.append(DownloadAttempt(url, strategy, 'success'))
                metrics.observe_attempt(strategy.value, 'success')
                self.log(f'downloaded id={label} strategy={strategy.value} bytes={file_size}')

                self.store.upload_file(
                    tmp_path,
                    self.config.storage_bucket,
                    storage_key,
                    content_type=VIDEO_CONTENT_TYPE,
                )
                self.log(f'uploaded id={label} key={storage_key}')

                return FetchResult(
                    strategy=strategy,
                    bucket=self.config.storage_bucket,
                    storage_key=storage_key,
                    file_size=file_size,
                    attempts=attempts,
                )
            finally:
                tmp_path.unlink(missing_ok=True)

        tried = ', '.join(a.strategy.value for a in attempts)
        raise FetchFailed(f'{label}: all strategies failed ({tried})', attempts)
