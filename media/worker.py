"""
SQS event adapter.

Turns a Lambda SQS event into QueueMessages, runs the batch, and answers with
a partial batch response so only failed messages go back to the queue.
"""

import time

from media.service.batch import QueueMessage


def messages_from_event(event):
    return [
        QueueMessage(message_id=record.get('messageId', str(index)), body=record.get('body'))
        for index, record in enumerate(event.get('Records') or [])
    ]


def deadline_from_context(context, margin_seconds):
    """Monotonic deadline for the batch, or None without a Lambda context"""
    if context is None or not hasattr(context, 'get_remaining_time_in_millis'):
        return None
    remaining = context.get_remaining_time_in_millis() / 1000.0
    return time.monotonic() + max(remaining - margin_seconds, 0)


def handle_sqs_event(event, context, pipeline):
    """
    Process one SQS batch.

    Returns:
        dict: {'batchItemFailures': [{'itemIdentifier': <messageId>}, ...]}
    """
    messages = messages_from_event(event)
    deadline = deadline_from_context(context, pipeline.config.timeout_margin_seconds)
    outcomes = pipeline.process_batch(messages, deadline=deadline)
    return {
        'batchItemFailures': [
            {'itemIdentifier': outcome.message_id} for outcome in outcomes if outcome.failed
        ]
    }
