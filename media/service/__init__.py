"""
Service layer for the download pipeline.

Reusable pieces that know nothing about the queue transport. They are wired
together in media/operations.py and used by:
- The Lambda SQS handler (lambda_handler.py -> media/worker.py)
- The huey background tasks (media/tasks.py)
"""
