import tempfile
import unittest
from pathlib import Path

from gdrivesync.config import (
    AppConfig,
    SyncStateStore,
    auth_info_from_config,
    load_config,
    save_config,
)
from gdrivesync.errors import ConfigurationError


class TestSettings(unittest.TestCase):
    def setUp(self) -> None:
        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        self.dir = Path(tmp.name)

    def test_defaults(self) -> None:
        cfg = AppConfig()
        self.assertEqual(cfg.sync.sync_interval, 15)
        self.assertTrue(cfg.sync.auto_sync)
        self.assertEqual(cfg.sync.conflict_resolution, "overwrite")
        self.assertEqual(cfg.sync.debounce_sec, 5.0)

    def test_missing_file_is_created_with_defaults(self) -> None:
        path = self.dir / "sub" / "config.yaml"
        cfg = load_config(path)
        self.assertTrue(path.exists())
        self.assertEqual(cfg, AppConfig())

    def test_save_then_load(self) -> None:
        path = self.dir / "config.yaml"
        cfg = AppConfig()
        cfg.sync.folder_id = "FOLDER"
        cfg.sync.conflict_resolution = "keep-remote"
        cfg.auth.refresh_token = "r"
        save_config(cfg, path)

        loaded = load_config(path)
        self.assertEqual(loaded.sync.folder_id, "FOLDER")
        self.assertEqual(loaded.sync.conflict_resolution, "keep-remote")
        self.assertEqual(loaded.auth.refresh_token, "r")

    def test_invalid_policy_is_configuration_error(self) -> None:
        path = self.dir / "config.yaml"
        path.write_text("sync:\n  conflict_resolution: merge\n", encoding="utf-8")
        with self.assertRaises(ConfigurationError):
            load_config(path)

    def test_broken_yaml_is_configuration_error(self) -> None:
        path = self.dir / "config.yaml"
        path.write_text("sync: [unclosed\n", encoding="utf-8")
        with self.assertRaises(ConfigurationError):
            load_config(path)

    def test_auth_info_from_config(self) -> None:
        cfg = AppConfig()
        with self.assertRaises(ConfigurationError):
            auth_info_from_config(cfg)

        cfg.auth.client_id = " cid "
        cfg.auth.client_secret = "secret"
        info = auth_info_from_config(cfg)
        self.assertEqual(info.client_id, "cid")
        self.assertIsNone(info.refresh_token)
        self.assertFalse(info.is_authorized)


class TestSyncStateStore(unittest.TestCase):
    def setUp(self) -> None:
        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        self.path = Path(tmp.name) / "state.json"

    def test_missing_file_means_never_synced(self) -> None:
        self.assertEqual(SyncStateStore(self.path).load().last_sync_time, 0)

    def test_commit_persists_and_never_decreases(self) -> None:
        store = SyncStateStore(self.path)
        store.commit(2_000)
        store.commit(1_000)

        self.assertEqual(SyncStateStore(self.path).load().last_sync_time, 2_000)

        store.commit(3_000)
        self.assertEqual(store.load().last_sync_time, 3_000)

    def test_corrupt_state_is_configuration_error(self) -> None:
        self.path.write_text("{not json", encoding="utf-8")
        with self.assertRaises(ConfigurationError):
            SyncStateStore(self.path).load()


if __name__ == "__main__":
    unittest.main()
