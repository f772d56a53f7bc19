"""
Tests for service/config.py
"""

from pathlib import Path

from django.core.exceptions import ImproperlyConfigured
from django.test import TestCase, override_settings

from media.service.config import PipelineConfig, parse_command


@override_settings(
    YTSYNC_STORAGE_BUCKET='videos-bucket',
    YTSYNC_COMPLETION_DATABASE='default',
    YTSYNC_COOKIE_KEY='secrets/cookies.txt',
    YTSYNC_COOKIE_BUCKET='',
    YTSYNC_COOKIE_MAX_AGE_HOURS='168',
    YTSYNC_YTDLP_COMMAND='yt-dlp',
)
class PipelineConfigTest(TestCase):
    """Tests for PipelineConfig.from_settings"""

    def test_from_settings(self):
        config = PipelineConfig.from_settings()
        self.assertEqual(config.storage_bucket, 'videos-bucket')
        self.assertEqual(config.completion_database, 'default')
        self.assertEqual(config.cookie_key, 'secrets/cookies.txt')
        self.assertEqual(config.cookie_max_age_hours, 168.0)
        self.assertEqual(config.cookie_max_age_seconds, 168 * 3600)
        self.assertEqual(config.ytdlp_command, ('yt-dlp',))

    def test_cookie_bucket_defaults_to_storage_bucket(self):
        config = PipelineConfig.from_settings()
        self.assertEqual(config.cookie_bucket, 'videos-bucket')
        self.assertTrue(config.cookies_enabled)

    @override_settings(YTSYNC_COOKIE_BUCKET='secrets-bucket')
    def test_separate_cookie_bucket(self):
        config = PipelineConfig.from_settings()
        self.assertEqual(config.cookie_bucket, 'secrets-bucket')

    @override_settings(YTSYNC_COOKIE_KEY='')
    def test_blank_cookie_key_disables_cookies(self):
        config = PipelineConfig.from_settings()
        self.assertFalse(config.cookies_enabled)

    def test_config_is_immutable(self):
        config = PipelineConfig.from_settings()
        with self.assertRaises(AttributeError):
            config.storage_bucket = 'other'

    @override_settings(YTSYNC_STORAGE_BUCKET='')
    def test_missing_bucket_fails_fast(self):
        with self.assertRaises(ImproperlyConfigured):
            PipelineConfig.from_settings()

    @override_settings(YTSYNC_COMPLETION_DATABASE='nope')
    def test_unknown_completion_database(self):
        with self.assertRaises(ImproperlyConfigured):
            PipelineConfig.from_settings()

    @override_settings(YTSYNC_COOKIE_MAX_AGE_HOURS='a week')
    def test_non_numeric_max_age(self):
        with self.assertRaises(ImproperlyConfigured):
            PipelineConfig.from_settings()

    @override_settings(YTSYNC_COOKIE_MAX_AGE_HOURS='0')
    def test_zero_max_age(self):
        with self.assertRaises(ImproperlyConfigured):
            PipelineConfig.from_settings()

    def test_video_url(self):
        config = PipelineConfig.from_settings()
        self.assertEqual(config.video_url('abc123'), 'https://www.youtube.com/watch?v=abc123')

    def test_paths_are_paths(self):
        config = PipelineConfig.from_settings()
        self.assertIsInstance(config.cookie_path, Path)
        self.assertIsInstance(config.work_dir, Path)


class ParseCommandTest(TestCase):
    """Tests for parse_command"""

    def test_split_string(self):
        self.assertEqual(
            parse_command('/usr/bin/python3 -m yt_dlp'), ['/usr/bin/python3', '-m', 'yt_dlp']
        )

    def test_quoted_path(self):
        self.assertEqual(parse_command('"/opt/my tools/yt-dlp"'), ['/opt/my tools/yt-dlp'])

    def test_list_passthrough(self):
        self.assertEqual(parse_command(['yt-dlp']), ['yt-dlp'])

    def test_empty(self):
        with self.assertRaises(ImproperlyConfigured):
            parse_command('')
