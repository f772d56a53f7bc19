"""
Download constants.

Client identities tried against YouTube, and the fixed yt-dlp arguments
shared by every attempt.
"""

from enum import Enum


class ClientStrategy(Enum):
    """
    yt-dlp YouTube player clients, in the order they are tried.

    Definition order is the fallback order.
    """

    TV = 'tv'
    WEB_SAFARI = 'web_safari'
    MWEB = 'mweb'
    ANDROID = 'android'

    @property
    def extractor_args(self):
        return f'youtube:player_client={self.value}'


# Smallest progressive mp4, falling back to the smallest anything
FORMAT_SELECTOR = 'worst[ext=mp4]/worst'

MERGE_OUTPUT_FORMAT = 'mp4'

VIDEO_CONTENT_TYPE = 'video/mp4'
VIDEO_EXTENSION = '.mp4'

# Temp payloads in the work directory are named dl-<...>.mp4
DOWNLOAD_PREFIX = 'dl-'
