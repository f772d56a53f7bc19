"""
Batch coordinator.

Walks a batch of queue messages one at a time:

    pending -> checking -> skipped
                        -> fetching -> committing -> done
                                                  -> failed

A failure in one item never stops the others. Failed items are reported back
so the queue transport can redeliver or dead-letter them; nothing is retried
here beyond the strategy fallback inside the fetch.
"""

import json
import time
from dataclasses import dataclass
from typing import Any, List, Optional

from media import metrics
from media.models import CompletionRecord
from media.service.recorder import AlreadyRecorded
from media.utils import build_storage_key

STATE_SKIPPED = 'skipped'
STATE_DONE = 'done'
STATE_FAILED = 'failed'

VIDEO_ID_MAX_LENGTH = CompletionRecord._meta.get_field('video_id').max_length


class InvalidMessage(Exception):
    """Message body is not a usable {videoId, title} object"""


@dataclass
class QueueMessage:
    message_id: str
    body: Any


@dataclass
class CandidateItem:
    video_id: str
    title: Optional[str] = None


@dataclass
class ItemOutcome:
    message_id: str
    state: str
    video_id: Optional[str] = None
    reason: str = ''
    strategy: Optional[str] = None
    storage_key: Optional[str] = None
    already_recorded: bool = False
    duration: float = 0.0

    @property
    def failed(self):
        return self.state == STATE_FAILED


def parse_candidate(body):
    """
    Parse a message body into a CandidateItem.

    Args:
        body: JSON string/bytes or an already decoded dict

    Raises:
        InvalidMessage: If the body is not an object with a usable videoId
    """
    if isinstance(body, (bytes, bytearray)):
        body = body.decode('utf-8', errors='replace')
    if isinstance(body, str):
        try:
            body = json.loads(body)
        except ValueError as e:
            raise InvalidMessage(f'body is not JSON: {e}') from e
    if not isinstance(body, dict):
        raise InvalidMessage(f'body is a {type(body).__name__}, expected an object')

    video_id = body.get('videoId')
    if not isinstance(video_id, str) or not video_id.strip():
        raise InvalidMessage('message missing videoId')
    if len(video_id) > VIDEO_ID_MAX_LENGTH:
        raise InvalidMessage(f'videoId longer than {VIDEO_ID_MAX_LENGTH} characters')

    # Title is display-only; anything that is not a string is dropped
    title = body.get('title')
    if not isinstance(title, str):
        title = None

    return CandidateItem(video_id=video_id, title=title)


class BatchCoordinator:
    def __init__(self, config, recorder, fetcher, logger=None, clock=time.monotonic):
        self.config = config
        self.recorder = recorder
        self.fetcher = fetcher
        self.logger = logger
        self.clock = clock

    def log(self, message):
        if self.logger:
            self.logger(message)

    def process_batch(self, messages, deadline=None) -> List[ItemOutcome]:
        """
        Process every message and return one outcome per message, in order.

        Args:
            messages: Iterable of QueueMessage
            deadline: Optional clock() value; items are failed once it passes

        Never raises for per-item problems.
        """
        messages = list(messages)
        started = self.clock()
        self.log(f'batch started size={len(messages)}')

        outcomes = []
        for message in messages:
            outcome = self.process_item(message, deadline=deadline)
            outcomes.append(outcome)
            metrics.observe_item(outcome.state, outcome.duration)

        elapsed = self.clock() - started
        metrics.observe_batch(elapsed)
        counts = {state: 0 for state in (STATE_DONE, STATE_SKIPPED, STATE_FAILED)}
        for outcome in outcomes:
            counts[outcome.state] += 1
        self.log(
            f'batch complete size={len(outcomes)} done={counts[STATE_DONE]} '
            f'skipped={counts[STATE_SKIPPED]} failed={counts[STATE_FAILED]} '
            f'seconds={elapsed:.1f}'
        )
        return outcomes

    def process_item(self, message, deadline=None) -> ItemOutcome:
        started = self.clock()
        outcome = ItemOutcome(message_id=message.message_id, state=STATE_FAILED)

        try:
            try:
                item = parse_candidate(message.body)
            except InvalidMessage as e:
                self.log(f'skip invalid message message_id={message.message_id} reason={e}')
                outcome.state = STATE_SKIPPED
                outcome.reason = str(e)
                return outcome

            outcome.video_id = item.video_id

            if deadline is not None and self.clock() >= deadline:
                self.log(f'FAILED id={item.video_id} error=batch deadline reached')
                outcome.reason = 'batch deadline reached'
                return outcome

            if self.recorder.already_completed(item.video_id):
                self.log(f'skip already completed id={item.video_id} title={item.title!r}')
                outcome.state = STATE_SKIPPED
                outcome.reason = 'already completed'
                return outcome

            storage_key = build_storage_key(
                item.title,
                item.video_id,
                prefix=self.config.storage_prefix,
                max_chars=self.config.title_max_chars,
            )
            outcome.storage_key = storage_key
            self.log(f'processing id={item.video_id} title={item.title!r} key={storage_key}')

            result = self.fetcher.fetch(
                self.config.video_url(item.video_id),
                storage_key,
                item_id=item.video_id,
                deadline=deadline,
            )
            outcome.strategy = result.strategy.value

            record = CompletionRecord(
                video_id=item.video_id,
                title=(item.title or '')[:500],
                storage_key=result.storage_key,
                storage_bucket=result.bucket,
                strategy=result.strategy.value,
                file_size=result.file_size,
            )
            try:
                self.recorder.record_completion(record)
                self.log(f'recorded id={item.video_id} strategy={result.strategy.value}')
            except AlreadyRecorded:
                self.log(f'already recorded by another worker id={item.video_id}')
                outcome.already_recorded = True

            outcome.state = STATE_DONE
        except Exception as e:
            self.log(
                f'FAILED message_id={message.message_id} id={outcome.video_id} '
                f'error={type(e).__name__}: {e}'
            )
            outcome.state = STATE_FAILED
            outcome.reason = str(e)
        finally:
            outcome.duration = self.clock() - started

        return outcome
