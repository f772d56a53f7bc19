"""
Lambda entry point for the ytsync download worker.

The function is triggered by the video queue with batches of SQS records.
Everything expensive happens at import (cold start): Django is configured and
the pipeline is built, so a missing setting fails the container before any
message is consumed.

Handler: lambda_handler.handler
"""

import os
import sys

import django

# Make the project importable regardless of the working directory
PROJECT_DIR = os.path.dirname(os.path.abspath(__file__))
sys.path.insert(0, PROJECT_DIR)

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'ytsync.settings')
django.setup()

from media.operations import build_pipeline  # noqa: E402
from media.utils import console_log  # noqa: E402
from media.worker import handle_sqs_event  # noqa: E402

PIPELINE = build_pipeline(logger=console_log)


def handler(event, context):
    return handle_sqs_event(event, context, PIPELINE)
