"""
High-level operations used by the queue entry points and huey tasks.

Keeps component wiring in one place so the Lambda handler, the huey worker
and tests all build the pipeline the same way.
"""

import time
from dataclasses import dataclass
from pathlib import Path

from media.service.batch import BatchCoordinator
from media.service.config import PipelineConfig
from media.service.constants import DOWNLOAD_PREFIX, VIDEO_EXTENSION
from media.service.credentials import CredentialCache
from media.service.download import FetchStrategyExecutor
from media.service.extractor import YtDlpExtractor
from media.service.recorder import IdempotentRecorder
from media.service.storage import S3ObjectStore


@dataclass
class Pipeline:
    config: PipelineConfig
    coordinator: BatchCoordinator

    def process_batch(self, messages, deadline=None):
        return self.coordinator.process_batch(messages, deadline=deadline)


def build_pipeline(config=None, store=None, extractor=None, logger=None, clock=time.monotonic):
    """
    Wire up every component of the download pipeline.

    Args:
        config: PipelineConfig (default: built from Django settings)
        store: Object store (default: S3ObjectStore on a fresh boto3 client)
        extractor: External extractor (default: YtDlpExtractor)
        logger: Optional callable(message) for logging
        clock: Monotonic clock shared by the coordinator and the executor for deadlines

    Returns:
        Pipeline

    Raises:
        ImproperlyConfigured: If required settings are missing
    """
    if config is None:
        config = PipelineConfig.from_settings()
    if store is None:
        store = S3ObjectStore(logger=logger)
    if extractor is None:
        extractor = YtDlpExtractor(config, logger=logger)

    credentials = CredentialCache(config, store, logger=logger)
    fetcher = FetchStrategyExecutor(
        config, store, credentials, extractor, logger=logger, clock=clock
    )
    recorder = IdempotentRecorder(using=config.completion_database)
    coordinator = BatchCoordinator(config, recorder, fetcher, logger=logger, clock=clock)
    return Pipeline(config=config, coordinator=coordinator)


def cleanup_stale_downloads(work_dir, max_age_minutes=60, dry_run=False, logger=None, now=None):
    """
    Remove download temp files abandoned by killed workers.

    Only files named like the executor's temp payloads are touched.

    Returns:
        list: Paths removed (or that would be removed with dry_run)
    """

    def log(message):
        if logger:
            logger(message)

    work_dir = Path(work_dir)
    if not work_dir.exists():
        return []

    now = time.time() if now is None else now
    max_age = max_age_minutes * 60
    removed = []

    for path in sorted(work_dir.glob(f'{DOWNLOAD_PREFIX}*{VIDEO_EXTENSION}')):
        if not path.is_file():
            continue
        age = now - path.stat().st_mtime
        if age <= max_age:
            continue
        removed.append(path)
        if dry_run:
            log(f'would remove stale download {path.name} age={age / 60:.0f}m')
            continue
        try:
            path.unlink()
            log(f'removed stale download {path.name} age={age / 60:.0f}m')
        except FileNotFoundError:
            pass

    return removed
