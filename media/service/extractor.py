"""
External extractor: runs yt-dlp as a subprocess.

One call downloads one URL with one client strategy and streams the media
to a local file. Anything that behaves like YtDlpExtractor.extract can be
handed to the download executor instead (tests use fakes).
"""

import subprocess
from pathlib import Path

from media.service.constants import FORMAT_SELECTOR, MERGE_OUTPUT_FORMAT


class ExtractionError(Exception):
    """The extractor could not produce a payload"""


class ExtractionTimedOut(ExtractionError):
    """The extractor was killed because the time budget ran out"""


class YtDlpExtractor:
    def __init__(self, config, logger=None):
        self.config = config
        self.logger = logger

    def log(self, message):
        if self.logger:
            self.logger(message)

    def build_command(self, url, strategy, cookie_path=None):
        """
        Build the yt-dlp argv for one attempt.

        Media goes to stdout ('-o -'); the caller redirects it into a file.
        """
        cmd = list(self.config.ytdlp_command) + [
            '-f', FORMAT_SELECTOR,
            '--no-playlist',
            '--force-ipv4',
            '--extractor-args', strategy.extractor_args,
            '--merge-output-format', MERGE_OUTPUT_FORMAT,
            '--no-progress',
            '--newline',
        ]
        if cookie_path:
            cmd += ['--cookies', str(cookie_path)]
        if self.config.ytdlp_proxy:
            cmd += ['--proxy', self.config.ytdlp_proxy]
        cmd += ['-o', '-', url]
        return cmd

    def extract(self, url, strategy, output_path, cookie_path=None, timeout=None):
        """
        Download url into output_path.

        Args:
            url: Video page URL
            strategy: ClientStrategy to use
            output_path: File that receives the media bytes
            cookie_path: Optional cookies file
            timeout: Seconds before the process is killed (None = no limit)

        Returns:
            Path: output_path

        Raises:
            ExtractionTimedOut: If the process outlived the timeout
            ExtractionError: If the process could not start or exited non-zero
        """
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        cmd = self.build_command(url, strategy, cookie_path=cookie_path)

        self.log(f'yt-dlp start strategy={strategy.value} url={url}')

        try:
            with open(output_path, 'wb') as out:
                # subprocess.run kills the child before raising TimeoutExpired
                result = subprocess.run(
                    cmd,
                    stdout=out,
                    stderr=subprocess.PIPE,
                    timeout=timeout,
                )
        except subprocess.TimeoutExpired as e:
            self._log_stderr(e.stderr)
            raise ExtractionTimedOut(f'yt-dlp timed out after {timeout:.0f}s') from e
        except OSError as e:
            raise ExtractionError(f'could not run yt-dlp: {e}') from e

        # stderr is progress and diagnostics, not an error signal. Raw bytes,
        # decoded leniently when logged.
        last_line = self._log_stderr(result.stderr)

        if result.returncode != 0:
            detail = f': {last_line}' if last_line else ''
            raise ExtractionError(f'yt-dlp exited with code {result.returncode}{detail}')

        return output_path

    def _log_stderr(self, stderr):
        if isinstance(stderr, bytes):
            stderr = stderr.decode('utf-8', errors='replace')
        last_line = ''
        for line in (stderr or '').splitlines():
            line = line.strip()
            if line:
                self.log(f'yt-dlp: {line}')
                last_line = line
        return last_line
