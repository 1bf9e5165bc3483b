from pathlib import Path

import orjson
import pytest

from reposync.cache import RecordStore
from reposync.exceptions import SettingsError
from reposync.settings import (
    SETTINGS_KEY,
    AppSettings,
    RecentRepositories,
    SettingsManager,
    is_valid_settings_record,
)


@pytest.fixture
def store(tmp_path: Path) -> RecordStore:
    return RecordStore(tmp_path / "settings")


@pytest.fixture
def manager(store: RecordStore) -> SettingsManager:
    return SettingsManager(store)


class TestDefaults:
    def test_default_values(self) -> None:
        settings = SettingsManager.defaults()

        assert settings.local_file_refresh_time == 5
        assert settings.block_commit_branches == ["trunk", "*/staging"]
        assert settings.diff_view_mode == "line-by-line"
        assert settings.push_all_tags is False
        assert settings.max_commits == 100
        assert settings.theme == "dark"

    def test_record_data_uses_camel_case(self) -> None:
        data = AppSettings().to_record_data()

        assert "localFileRefreshTime" in data
        assert "blockCommitBranches" in data


class TestIsValidSettingsRecord:
    def test_valid_minimal_record(self) -> None:
        assert is_valid_settings_record(
            {"localFileRefreshTime": 3, "blockCommitBranches": ["main"]}
        )

    @pytest.mark.parametrize(
        "record",
        [
            None,
            [],
            {"blockCommitBranches": []},
            {"localFileRefreshTime": "5", "blockCommitBranches": []},
            {"localFileRefreshTime": True, "blockCommitBranches": []},
            {"localFileRefreshTime": 5, "blockCommitBranches": "trunk"},
            {"localFileRefreshTime": 5, "blockCommitBranches": [1]},
            {"localFileRefreshTime": 5, "blockCommitBranches": [], "theme": "blue"},
            {"localFileRefreshTime": 5, "blockCommitBranches": [], "pushAllTags": "yes"},
        ],
    )
    def test_invalid_records(self, record: object) -> None:
        assert not is_valid_settings_record(record)


class TestLoad:
    def test_missing_record_gives_defaults_and_writes_them(
        self, manager: SettingsManager, store: RecordStore
    ) -> None:
        settings = manager.load()

        assert settings == AppSettings()
        assert store.load(SETTINGS_KEY) == AppSettings().to_record_data()

    def test_valid_record_is_merged_over_defaults(
        self, manager: SettingsManager, store: RecordStore
    ) -> None:
        _ = store.save(
            SETTINGS_KEY, {"localFileRefreshTime": 10, "blockCommitBranches": ["main"]}
        )

        settings = manager.load()

        assert settings.local_file_refresh_time == 10
        assert settings.block_commit_branches == ["main"]
        assert settings.max_commits == 100

    def test_invalid_record_is_replaced_by_defaults(
        self, manager: SettingsManager, store: RecordStore
    ) -> None:
        _ = store.save(SETTINGS_KEY, {"localFileRefreshTime": "often"})

        settings = manager.load()

        assert settings == AppSettings()
        assert store.load(SETTINGS_KEY) == AppSettings().to_record_data()

    def test_corrupt_file_is_replaced_by_defaults(
        self, manager: SettingsManager, store: RecordStore
    ) -> None:
        path = store.path_for(SETTINGS_KEY)
        path.parent.mkdir(parents=True)
        _ = path.write_bytes(b"{{{")

        assert manager.load() == AppSettings()
        assert orjson.loads(path.read_bytes())["data"] == AppSettings().to_record_data()


class TestUpdate:
    def test_update_setting_by_camel_case_name(
        self, manager: SettingsManager, store: RecordStore
    ) -> None:
        settings = manager.update_setting("maxCommits", 50)

        assert settings.max_commits == 50
        assert SettingsManager(store).get().max_commits == 50

    def test_update_setting_by_snake_case_name(self, manager: SettingsManager) -> None:
        assert manager.update_setting("theme", "light").theme == "light"

    def test_update_settings_applies_all(self, manager: SettingsManager) -> None:
        settings = manager.update_settings(
            {"pushAllTags": True, "blockCommitBranches": ["release/*"]}
        )

        assert settings.push_all_tags is True
        assert settings.block_commit_branches == ["release/*"]

    def test_unknown_key_is_rejected(self, manager: SettingsManager) -> None:
        with pytest.raises(SettingsError) as exc_info:
            _ = manager.update_setting("colour", "red")

        assert exc_info.value.key == "colour"

    def test_wrong_type_is_rejected_and_not_persisted(
        self, manager: SettingsManager, store: RecordStore
    ) -> None:
        _ = manager.load()

        with pytest.raises(SettingsError, match="max_commits"):
            _ = manager.update_setting("maxCommits", "many")

        assert manager.get().max_commits == 100
        assert SettingsManager(store).get().max_commits == 100

    def test_invalid_literal_is_rejected(self, manager: SettingsManager) -> None:
        with pytest.raises(SettingsError):
            _ = manager.update_setting("diffViewMode", "unified")

    def test_integer_refresh_time_is_accepted(self, manager: SettingsManager) -> None:
        assert manager.update_setting("localFileRefreshTime", 2).local_file_refresh_time == 2

    def test_get_setting(self, manager: SettingsManager) -> None:
        assert manager.get_setting("externalEditor") == "code"
        assert manager.get_setting("external_editor") == "code"

    def test_get_unknown_setting(self, manager: SettingsManager) -> None:
        with pytest.raises(SettingsError):
            _ = manager.get_setting("nope")

    def test_reset_restores_defaults(self, manager: SettingsManager) -> None:
        _ = manager.update_setting("theme", "light")

        assert manager.reset() == AppSettings()


class TestShouldBlockCommit:
    def test_uses_current_patterns(self, manager: SettingsManager) -> None:
        assert manager.should_block_commit("trunk")
        assert not manager.should_block_commit("main")

        _ = manager.update_setting("blockCommitBranches", ["main"])

        assert manager.should_block_commit("main")
        assert not manager.should_block_commit("trunk")


class TestRecentRepositories:
    def test_add_moves_entry_to_front(self, store: RecordStore) -> None:
        recent = RecentRepositories(store)

        _ = recent.add("/a")
        _ = recent.add("/b")
        _ = recent.add("/a")

        assert recent.entries() == ["/a", "/b"]

    def test_list_is_bounded(self, store: RecordStore) -> None:
        recent = RecentRepositories(store, max_entries=3)

        for name in ("/a", "/b", "/c", "/d"):
            _ = recent.add(name)

        assert recent.entries() == ["/d", "/c", "/b"]

    def test_clear(self, store: RecordStore) -> None:
        recent = RecentRepositories(store)
        _ = recent.add("/a")

        recent.clear()

        assert recent.entries() == []

    def test_ignores_non_list_record(self, store: RecordStore) -> None:
        _ = store.save("recent-repos", {"not": "a list"})

        assert RecentRepositories(store).entries() == []

    def test_shares_store_with_settings(self, store: RecordStore) -> None:
        recent = RecentRepositories(store)
        manager = SettingsManager(store)
        _ = recent.add("/a")

        _ = manager.update_setting("theme", "light")

        assert recent.entries() == ["/a"]
