from django.db import models
from django.utils import timezone


class CompletionRecord(models.Model):
    """A video that has been downloaded and stored. Written once, never updated."""

    # Primary key doubles as the idempotency key: a second insert for the same
    # video fails inside the database.
    video_id = models.CharField(max_length=64, primary_key=True)

    title = models.CharField(max_length=500, blank=True)

    # Where the payload was stored
    storage_key = models.CharField(max_length=1024)
    storage_bucket = models.CharField(max_length=255)

    # Which client identity produced the payload
    strategy = models.CharField(max_length=32, blank=True)
    file_size = models.BigIntegerField(null=True, blank=True)

    completed_at = models.DateTimeField(default=timezone.now, db_index=True)

    class Meta:
        ordering = ['-completed_at']

    def __str__(self):
        return f'{self.title or self.video_id} ({self.video_id})'

    @property
    def storage_uri(self):
        return f's3://{self.storage_bucket}/{self.storage_key}'
