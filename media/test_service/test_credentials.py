"""
Tests for service/credentials.py
"""

import os
import stat
import tempfile
import time
from pathlib import Path
from unittest.mock import patch

from django.test import TestCase

from media.service.credentials import CredentialCache
from media.tests.fakes import FakeStore, make_config

HOUR = 3600


class CredentialCacheTest(TestCase):
    """Tests for the cookies cache freshness policy"""

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.temp_dir = Path(self._tmp.name)
        self.config = make_config(self.temp_dir)
        self.store = FakeStore(objects={('test-bucket', 'secrets/cookies.txt'): b'# cookies'})
        self.logs = []
        self.cache = CredentialCache(self.config, self.store, logger=self.logs.append)

    def tearDown(self):
        self._tmp.cleanup()

    def _write_cached(self, age_hours):
        path = self.config.cookie_path
        path.write_bytes(b'# old cookies')
        mtime = time.time() - age_hours * HOUR
        os.utime(path, (mtime, mtime))
        return path

    def test_not_configured_is_noop(self):
        """Without a key nothing is read and no credential is returned"""
        config = make_config(self.temp_dir, cookie_key='')
        cache = CredentialCache(config, self.store)

        self.assertIsNone(cache.ensure_fresh())
        self.assertEqual(self.store.downloads, [])

    def test_fresh_copy_is_reused(self):
        """A copy younger than max age causes no storage read"""
        path = self._write_cached(age_hours=1)

        result = self.cache.ensure_fresh()

        self.assertEqual(result, path)
        self.assertEqual(self.store.downloads, [])
        self.assertEqual(path.read_bytes(), b'# old cookies')

    def test_stale_copy_is_refreshed_once(self):
        """169h old against a 168h max age triggers exactly one read"""
        path = self._write_cached(age_hours=169)

        result = self.cache.ensure_fresh()

        self.assertEqual(result, path)
        self.assertEqual(self.store.downloads, [('test-bucket', 'secrets/cookies.txt')])
        self.assertEqual(path.read_bytes(), b'# cookies')

    def test_age_equal_to_max_age_is_stale(self):
        clock_now = time.time()
        path = self.config.cookie_path
        path.write_bytes(b'# old cookies')
        mtime = clock_now - 168 * HOUR
        os.utime(path, (mtime, mtime))
        cache = CredentialCache(self.config, self.store, clock=lambda: clock_now)

        cache.ensure_fresh()

        self.assertEqual(len(self.store.downloads), 1)

    def test_missing_copy_is_fetched(self):
        result = self.cache.ensure_fresh()

        self.assertEqual(result, self.config.cookie_path)
        self.assertEqual(self.config.cookie_path.read_bytes(), b'# cookies')

    def test_refreshed_file_is_owner_only(self):
        self.cache.ensure_fresh()

        mode = stat.S_IMODE(self.config.cookie_path.stat().st_mode)
        self.assertEqual(mode, 0o600)

    def test_refresh_failure_degrades(self):
        """A failed read returns None and does not raise"""
        store = FakeStore(objects={})
        cache = CredentialCache(self.config, store, logger=self.logs.append)

        result = cache.ensure_fresh()

        self.assertIsNone(result)
        self.assertTrue(any('refresh failed' in line for line in self.logs))

    def test_refresh_failure_removes_partial_file(self):
        class PartialStore(FakeStore):
            def download_file(self, bucket, key, local_path):
                Path(local_path).write_bytes(b'half a cook')
                raise ConnectionError('connection reset')

        cache = CredentialCache(self.config, PartialStore())

        self.assertIsNone(cache.ensure_fresh())
        self.assertEqual(list(self.temp_dir.glob('*.tmp')), [])
        self.assertFalse(self.config.cookie_path.exists())

    def test_refresh_failure_keeps_stale_copy_unused(self):
        """The stale copy stays on disk but is not handed out"""
        path = self._write_cached(age_hours=200)
        cache = CredentialCache(self.config, FakeStore(objects={}))

        self.assertIsNone(cache.ensure_fresh())
        self.assertTrue(path.exists())

    def test_unreadable_local_path_degrades(self):
        """A stat error other than a missing file returns None instead of raising"""
        blocker = self.temp_dir / 'not-a-dir'
        blocker.write_bytes(b'')
        config = make_config(self.temp_dir, cookie_path=blocker / 'cookies.txt')
        cache = CredentialCache(config, self.store, logger=self.logs.append)

        self.assertIsNone(cache.ensure_fresh())
        self.assertTrue(any('cannot stat local copy' in line for line in self.logs))
        self.assertTrue(any('refresh failed' in line for line in self.logs))

    @patch.object(CredentialCache, 'age_seconds', side_effect=PermissionError('denied'))
    def test_stat_permission_error_triggers_refresh(self, mock_age):
        result = self.cache.ensure_fresh()

        self.assertEqual(result, self.config.cookie_path)
        self.assertEqual(self.store.downloads, [('test-bucket', 'secrets/cookies.txt')])
