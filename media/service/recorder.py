"""
Completion records with exactly-once semantics.

Two separate calls, on purpose:

- already_completed() is a plain read used to skip work early. It can race.
- record_completion() is an INSERT on the primary key. The database rejects a
  second row for the same video, which is the actual guarantee.
"""

from django.db import IntegrityError, transaction

from media.models import CompletionRecord


class AlreadyRecorded(Exception):
    """Another execution committed this video first"""

    def __init__(self, video_id):
        super().__init__(f'{video_id} is already recorded')
        self.video_id = video_id


class IdempotentRecorder:
    def __init__(self, using='default'):
        self.using = using

    def already_completed(self, video_id):
        return CompletionRecord.objects.using(self.using).filter(pk=video_id).exists()

    def record_completion(self, record):
        """
        Insert a CompletionRecord, failing if one exists for the same video.

        Args:
            record: Unsaved CompletionRecord

        Returns:
            The saved record

        Raises:
            AlreadyRecorded: If the primary key is taken
        """
        try:
            # Savepoint so a rejected insert leaves any outer transaction usable
            with transaction.atomic(using=self.using):
                record.save(using=self.using, force_insert=True)
        except IntegrityError as e:
            if not self.already_completed(record.video_id):
                raise
            raise AlreadyRecorded(record.video_id) from e
        return record
