import tempfile
import unittest
from pathlib import Path
from unittest.mock import Mock, patch

from typer.testing import CliRunner

from gdrivesync.cli import _ConflictQueue, app
from gdrivesync.config import AppConfig, SyncStateStore, save_config
from gdrivesync.errors import InvalidStateError
from gdrivesync.models import SyncSummary


class TestCli(unittest.TestCase):
    def setUp(self) -> None:
        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        self.dir = Path(tmp.name)
        self.config_path = self.dir / "config.yaml"

        cfg = AppConfig()
        cfg.state_file = str(self.dir / "state.json")
        cfg.logging.file = str(self.dir / "gdrivesync.log")
        save_config(cfg, self.config_path)

        self.runner = CliRunner()
        patcher = patch("gdrivesync.cli.setup_logging")
        patcher.start()
        self.addCleanup(patcher.stop)

    def test_status_before_first_sync(self) -> None:
        result = self.runner.invoke(app, ["status", "--config", str(self.config_path)])

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("never", result.output)
        self.assertIn("overwrite", result.output)

    def test_status_shows_last_sync(self) -> None:
        SyncStateStore(self.dir / "state.json").commit(1_735_689_600_000)

        result = self.runner.invoke(app, ["status", "-c", str(self.config_path)])

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("2025-01-01T00:00:00.000Z", result.output)

    def test_sync_without_settings_fails_cleanly(self) -> None:
        result = self.runner.invoke(app, ["sync", "--config", str(self.config_path)])

        self.assertEqual(result.exit_code, 1)
        self.assertIn("Sync failed", result.output)

    def test_watch_prompts_for_conflicts_raised_by_runs(self) -> None:
        scheduler = Mock(is_closed=False)
        conflict = Mock(path="notes/a.md", is_resolved=False)

        def choose_local() -> None:
            conflict.is_resolved = True
            scheduler.is_closed = True

        conflict.choose_local.side_effect = choose_local

        class FakeManager:
            def __init__(self, cfg, *, config_path=None, arbiter=None) -> None:
                self.arbiter = arbiter

            def run(self) -> SyncSummary:
                self.arbiter(conflict)
                return SyncSummary(conflicts=1, pending_conflicts=1)

        with (
            patch("gdrivesync.cli.SyncManager", FakeManager),
            patch("gdrivesync.cli.SyncScheduler.from_manager", return_value=scheduler),
        ):
            result = self.runner.invoke(app, ["watch", "--config", str(self.config_path)], input="l\n")

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("notes/a.md", result.output)
        conflict.choose_local.assert_called_once_with()
        conflict.choose_remote.assert_not_called()
        scheduler.start.assert_called_once_with()
        scheduler.shutdown.assert_called_once_with()


class TestConflictQueue(unittest.TestCase):
    def test_empty_queue_times_out(self) -> None:
        self.assertFalse(_ConflictQueue().prompt_next(timeout=0.01))

    def test_resolved_conflict_is_not_prompted(self) -> None:
        conflicts = _ConflictQueue()
        conflicts(Mock(is_resolved=True))

        with patch("gdrivesync.cli._prompt_arbiter") as prompt:
            self.assertTrue(conflicts.prompt_next(timeout=0.01))
        prompt.assert_not_called()

    def test_failed_choice_is_reported_and_loop_continues(self) -> None:
        conflicts = _ConflictQueue()
        conflicts(Mock(path="a.md", is_resolved=False))

        with patch("gdrivesync.cli._prompt_arbiter", side_effect=InvalidStateError("Sync manager is shut down")):
            self.assertTrue(conflicts.prompt_next(timeout=0.01))


if __name__ == "__main__":
    unittest.main()
