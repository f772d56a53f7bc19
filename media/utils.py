import re
import time
from datetime import datetime

from nanoid import generate

from media.service.constants import DOWNLOAD_PREFIX, VIDEO_EXTENSION

NANOID_ALPHABET = 'ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789'


def sanitize_title(title, max_chars=100):
    """
    Reduce an untrusted title to a key-safe string.

    Args:
        title: The display title (may be None)
        max_chars: Maximum number of characters

    Returns:
        A string of [A-Za-z0-9 -_] no longer than max_chars
    """
    if not title:
        return 'untitled'

    # Replace everything outside letters, digits, space and hyphen
    safe = re.sub(r'[^A-Za-z0-9 -]', '_', title)

    # Collapse whitespace runs (tabs/newlines already became underscores)
    safe = re.sub(r' {2,}', ' ', safe).strip()

    safe = safe[:max_chars].rstrip()

    return safe or 'untitled'


def build_storage_key(title, video_id, prefix='videos/', max_chars=100):
    """
    Compute the object key for a video.

    Example:
        >>> build_storage_key('Hello: World?', 'abc123')
        'videos/Hello_ World_ - abc123.mp4'
    """
    safe_title = sanitize_title(title, max_chars=max_chars)
    safe_id = sanitize_title(video_id, max_chars=64)
    return f'{prefix}{safe_title} - {safe_id}{VIDEO_EXTENSION}'


def temp_download_name(video_id, strategy_name):
    """
    Unique file name for one download attempt.

    Combines id, strategy, a nanosecond timestamp and a NanoID suffix so that
    repeated attempts for the same id never share a path.
    """
    safe_id = re.sub(r'[^A-Za-z0-9_-]', '_', video_id or 'item')[:64]
    suffix = generate(NANOID_ALPHABET, size=8)
    return f'{DOWNLOAD_PREFIX}{safe_id}-{strategy_name}-{time.time_ns()}{suffix}{VIDEO_EXTENSION}'


def console_log(message):
    """Print a timestamped log line to stdout"""
    timestamp = datetime.now().strftime('%Y-%m-%d %H:%M:%S')
    print(f'[{timestamp}] {message}', flush=True)
