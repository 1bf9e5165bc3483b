from pathlib import Path

import orjson
import pytest

from reposync.adapter import AheadBehind, RemoteInfo, StashInfo
from reposync.cache import FileEntry, Snapshot, SnapshotCache
from reposync.enums import FileStatus
from tests.conftest import FakeClock, make_commit

DAY_MS = 24 * 60 * 60 * 1000


@pytest.fixture
def snapshot() -> Snapshot:
    return Snapshot(
        current_branch="main",
        origin_url="https://example.com/repo.git",
        unstaged_files=(FileEntry(path="a.txt", status=FileStatus.MODIFIED),),
        staged_files=(FileEntry(path="b.txt", status=FileStatus.CREATED),),
        modified_count=2,
        branches=("feature", "main"),
        remotes=(RemoteInfo(name="origin", url="https://example.com/repo.git"),),
        branch_status={"feature": AheadBehind(ahead=2, behind=1)},
        stashes=(StashInfo(index=0, ref="stash@{0}", hash="abc", message="WIP"),),
    )


class TestLoadAndSave:
    def test_round_trips_snapshot(self, cache: SnapshotCache, snapshot: Snapshot) -> None:
        assert cache.save("/src/a", snapshot) is True

        assert cache.load("/src/a") == snapshot

    def test_record_uses_camel_case_snapshot_keys(
        self, cache: SnapshotCache, snapshot: Snapshot
    ) -> None:
        _ = cache.save("/src/a", snapshot)

        raw = orjson.loads(cache.path_for("/src/a").read_bytes())
        data = raw["data"]
        assert raw["repoPath"] == "/src/a"
        assert data["currentBranch"] == "main"
        assert data["originUrl"] == "https://example.com/repo.git"
        assert data["modifiedCount"] == 2
        assert data["branchStatus"] == {"feature": {"ahead": 2, "behind": 1}}
        assert data["unstagedFiles"] == [{"path": "a.txt", "status": "modified"}]

    def test_snapshot_for_one_identity_is_not_served_for_another(
        self, cache: SnapshotCache, snapshot: Snapshot
    ) -> None:
        _ = cache.save("/src/a", snapshot)

        assert cache.load("/src/b") is None

    def test_stale_snapshot_is_a_miss(
        self, cache: SnapshotCache, snapshot: Snapshot, clock: FakeClock
    ) -> None:
        _ = cache.save("/src/a", snapshot)
        clock.advance(7 * DAY_MS + 1)

        assert cache.load("/src/a") is None

    def test_invalid_snapshot_payload_is_a_miss(
        self, cache: SnapshotCache, clock: FakeClock
    ) -> None:
        path = cache.path_for("/src/a")
        path.parent.mkdir(parents=True)
        _ = path.write_bytes(
            orjson.dumps(
                {
                    "repoPath": "/src/a",
                    "timestamp": clock.now,
                    "version": 1,
                    "data": {"modifiedCount": "many"},
                }
            )
        )

        assert cache.load("/src/a") is None

    def test_save_failure_is_reported_not_raised(
        self, tmp_path: Path, snapshot: Snapshot
    ) -> None:
        blocker = tmp_path / "not-a-dir"
        _ = blocker.write_text("")
        cache = SnapshotCache(blocker / "repo-cache")

        assert cache.save("/src/a", snapshot) is False

    def test_cached_at_returns_record_timestamp(
        self, cache: SnapshotCache, snapshot: Snapshot, clock: FakeClock
    ) -> None:
        _ = cache.save("/src/a", snapshot)

        assert cache.cached_at("/src/a") == clock.now
        assert cache.cached_at("/src/b") is None


class TestClear:
    def test_clear_one(self, cache: SnapshotCache, snapshot: Snapshot) -> None:
        _ = cache.save("/src/a", snapshot)
        _ = cache.save("/src/b", snapshot)

        assert cache.clear("/src/a") is True
        assert cache.load("/src/a") is None
        assert cache.load("/src/b") == snapshot

    def test_clear_all(self, cache: SnapshotCache, snapshot: Snapshot) -> None:
        _ = cache.save("/src/a", snapshot)
        _ = cache.save("/src/b", snapshot)

        result = cache.clear_all()

        assert len(result.removed) == 2
        assert cache.load("/src/a") is None


class TestBranchCommits:
    def test_empty_on_miss(self, cache: SnapshotCache) -> None:
        assert cache.branch_commits("/src/a") == {}

    def test_update_stores_commits_in_snapshot(
        self, cache: SnapshotCache, snapshot: Snapshot
    ) -> None:
        _ = cache.save("/src/a", snapshot)
        commits = [make_commit("c1"), make_commit("c2")]

        assert cache.update_branch_commits("/src/a", "main", commits) is True

        assert cache.branch_commits("/src/a") == {"main": tuple(commits)}
        loaded = cache.load("/src/a")
        assert loaded is not None
        assert loaded.current_branch == "main"

    def test_update_keeps_original_timestamp(
        self, cache: SnapshotCache, snapshot: Snapshot, clock: FakeClock
    ) -> None:
        _ = cache.save("/src/a", snapshot)
        written = clock.now
        clock.advance(DAY_MS)

        _ = cache.update_branch_commits("/src/a", "main", [make_commit("c1")])

        assert cache.cached_at("/src/a") == written

    def test_update_without_cached_snapshot_is_not_persisted(
        self, cache: SnapshotCache
    ) -> None:
        assert cache.update_branch_commits("/src/a", "main", [make_commit("c1")]) is False
        assert cache.load("/src/a") is None

    def test_remove_one_branch(self, cache: SnapshotCache, snapshot: Snapshot) -> None:
        _ = cache.save("/src/a", snapshot)
        _ = cache.update_branch_commits("/src/a", "main", [make_commit("c1")])
        _ = cache.update_branch_commits("/src/a", "feature", [make_commit("c2")])

        assert cache.remove_branch_commits("/src/a", "main") is True

        assert set(cache.branch_commits("/src/a")) == {"feature"}

    def test_remove_all_branches(self, cache: SnapshotCache, snapshot: Snapshot) -> None:
        _ = cache.save("/src/a", snapshot)
        _ = cache.update_branch_commits("/src/a", "main", [make_commit("c1")])

        _ = cache.remove_branch_commits("/src/a")

        assert cache.branch_commits("/src/a") == {}
