import time

from django.conf import settings
from huey import crontab
from huey.contrib.djhuey import db_periodic_task, db_task

from media.operations import build_pipeline, cleanup_stale_downloads
from media.service.batch import QueueMessage
from media.service.config import PipelineConfig
from media.utils import console_log


class BatchIncomplete(Exception):
    """Some items in the batch failed and should be delivered again"""

    def __init__(self, failed_ids):
        super().__init__(f'{len(failed_ids)} item(s) failed: {", ".join(failed_ids)}')
        self.failed_ids = failed_ids


@db_task(retries=settings.YTSYNC_TASK_RETRIES, retry_delay=settings.YTSYNC_TASK_RETRY_DELAY)
def download_batch(bodies):
    """
    Download a batch of {videoId, title} messages.

    Huey retries the whole task when items fail. Items finished on an earlier
    try are skipped by the completion check, so a retry only redoes the
    failures. Once retries run out the error stays in huey's result store.
    """
    pipeline = build_pipeline(logger=console_log)
    messages = [QueueMessage(message_id=str(index), body=body) for index, body in enumerate(bodies)]
    deadline = time.monotonic() + pipeline.config.batch_timeout_seconds

    outcomes = pipeline.process_batch(messages, deadline=deadline)

    failed = [outcome.video_id or outcome.message_id for outcome in outcomes if outcome.failed]
    if failed:
        raise BatchIncomplete(failed)
    return [outcome.state for outcome in outcomes]


@db_periodic_task(crontab(minute='*/30'))
def cleanup_work_dir():
    """Remove temp payloads left behind by killed workers"""
    config = PipelineConfig.from_settings()
    removed = cleanup_stale_downloads(
        config.work_dir,
        max_age_minutes=config.stale_download_minutes,
        logger=console_log,
    )
    return len(removed)
