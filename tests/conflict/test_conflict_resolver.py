import unittest

from gdrivesync.conflict import ConflictOutcome, ConflictPolicy, ConflictResolver, PendingConflict
from gdrivesync.errors import InvalidArgumentError, InvalidStateError, NetworkError
from gdrivesync.models import LocalEntry, RemoteEntry
from gdrivesync.plan import ClassificationDecision, Decision


def _conflict(path: str = "a.md") -> ClassificationDecision:
    return ClassificationDecision(
        path=path,
        kind=Decision.CONFLICT,
        local=LocalEntry(path=path, size=1, mtime_ms=10),
        remote=RemoteEntry(file_id="F1", path=path, name=path, mime_type="text/markdown", mtime_ms=10),
    )


class Recorder:
    def __init__(self) -> None:
        self.uploads: list[str] = []
        self.downloads: list[str] = []

    def upload(self, decision: ClassificationDecision) -> None:
        self.uploads.append(decision.path)

    def download(self, decision: ClassificationDecision) -> None:
        self.downloads.append(decision.path)


class TestConflictResolver(unittest.TestCase):
    def setUp(self) -> None:
        self.rec = Recorder()

    def _resolver(self, policy, **kwargs) -> ConflictResolver:
        return ConflictResolver(policy, upload=self.rec.upload, download=self.rec.download, **kwargs)

    def test_replace_with_local_uploads(self) -> None:
        res = self._resolver("overwrite").resolve(_conflict())
        self.assertEqual(res.outcome, ConflictOutcome.UPLOADED)
        self.assertEqual(self.rec.uploads, ["a.md"])
        self.assertEqual(self.rec.downloads, [])

    def test_keep_remote_downloads(self) -> None:
        res = self._resolver(ConflictPolicy.KEEP_REMOTE).resolve(_conflict())
        self.assertEqual(res.outcome, ConflictOutcome.DOWNLOADED)
        self.assertEqual(self.rec.downloads, ["a.md"])

    def test_keep_local_does_nothing(self) -> None:
        res = self._resolver("keep-local").resolve(_conflict())
        self.assertEqual(res.outcome, ConflictOutcome.KEPT_BOTH)
        self.assertEqual((self.rec.uploads, self.rec.downloads), ([], []))

    def test_direction_blocks_transfer(self) -> None:
        res = self._resolver("overwrite", allow_upload=False).resolve(_conflict())
        self.assertEqual(res.outcome, ConflictOutcome.BLOCKED)

        res = self._resolver("keep-remote", allow_download=False).resolve(_conflict())
        self.assertEqual(res.outcome, ConflictOutcome.BLOCKED)
        self.assertEqual((self.rec.uploads, self.rec.downloads), ([], []))

    def test_ask_defers_to_arbiter(self) -> None:
        seen: list[PendingConflict] = []
        res = self._resolver("ask", arbiter=seen.append).resolve(_conflict())

        self.assertEqual(res.outcome, ConflictOutcome.DEFERRED)
        self.assertIs(seen[0], res.pending)
        self.assertEqual((self.rec.uploads, self.rec.downloads), ([], []))
        self.assertEqual(res.pending.path, "a.md")

    def test_ask_without_arbiter_still_returns_pending(self) -> None:
        res = self._resolver("ask").resolve(_conflict())
        self.assertEqual(res.outcome, ConflictOutcome.DEFERRED)
        self.assertFalse(res.pending.is_resolved)

    def test_unknown_policy(self) -> None:
        with self.assertRaises(InvalidArgumentError):
            self._resolver("merge")

    def test_non_conflict_decision_rejected(self) -> None:
        decision = ClassificationDecision(path="a.md", kind=Decision.SKIP)
        with self.assertRaises(InvalidArgumentError):
            self._resolver("overwrite").resolve(decision)


class TestPendingConflict(unittest.TestCase):
    def test_resolves_exactly_once(self) -> None:
        rec = Recorder()
        pending = PendingConflict(_conflict(), upload=rec.upload, download=rec.download)

        pending.choose_remote()

        self.assertEqual(pending.resolution, "remote")
        with self.assertRaises(InvalidStateError):
            pending.choose_local()
        with self.assertRaises(InvalidStateError):
            pending.choose_remote()
        self.assertEqual(rec.downloads, ["a.md"])
        self.assertEqual(rec.uploads, [])

    def test_failed_choice_can_be_retried(self) -> None:
        calls = []

        def flaky_upload(decision: ClassificationDecision) -> None:
            calls.append(decision.path)
            if len(calls) == 1:
                raise NetworkError("offline")

        pending = PendingConflict(_conflict(), upload=flaky_upload, download=Recorder().download)

        with self.assertRaises(NetworkError):
            pending.choose_local()
        self.assertFalse(pending.is_resolved)

        pending.choose_local()
        self.assertTrue(pending.is_resolved)
        self.assertEqual(calls, ["a.md", "a.md"])


if __name__ == "__main__":
    unittest.main()
