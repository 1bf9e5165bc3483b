from pathlib import Path

import pytest

from reposync.cache import cache_key, canonical_identity, hash_identity, safe_name


class TestSafeName:
    def test_keeps_ascii_letters_and_digits(self) -> None:
        assert safe_name("Repo42") == "Repo42"

    def test_replaces_separators_and_punctuation(self) -> None:
        assert safe_name("/home/user/my-repo") == "_home_user_my_repo"

    def test_replaces_each_utf16_unit_of_astral_characters(self) -> None:
        # U+1F600 is a surrogate pair in UTF-16
        assert safe_name("a\U0001f600b") == "a__b"

    def test_replaces_non_ascii_letters(self) -> None:
        assert safe_name("café") == "caf_"


class TestHashIdentity:
    def test_empty_string_hashes_to_zero(self) -> None:
        assert hash_identity("") == "0"

    def test_single_character(self) -> None:
        assert hash_identity("a") == "61"

    def test_rolling_multiplier(self) -> None:
        # 97 * 31 + 98
        assert hash_identity("ab") == format(3105, "x")

    def test_wraps_to_signed_int32_and_takes_absolute_value(self) -> None:
        identity = "/a/very/long/repository/path/that/overflows/int32"
        h = 0
        for ch in identity:
            h = (h * 31 + ord(ch)) & 0xFFFFFFFF
        if h & 0x80000000:
            h -= 1 << 32

        assert hash_identity(identity) == format(abs(h), "x")

    def test_output_is_lowercase_hex(self) -> None:
        assert all(c in "0123456789abcdef" for c in hash_identity("/Some/Path"))


class TestCacheKey:
    def test_joins_safe_name_and_hash(self) -> None:
        assert cache_key("/r") == f"_r_{hash_identity('/r')}"

    def test_identities_with_same_safe_name_get_different_keys(self) -> None:
        assert safe_name("/repo:A") == safe_name("/repo?A")
        assert cache_key("/repo:A") != cache_key("/repo?A")

    def test_is_deterministic(self) -> None:
        assert cache_key("/src/project") == cache_key("/src/project")


class TestCanonicalIdentity:
    def test_resolves_relative_paths(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.chdir(tmp_path)

        assert canonical_identity("repo") == str(tmp_path.resolve() / "repo")

    def test_collapses_dot_segments(self, tmp_path: Path) -> None:
        assert canonical_identity(tmp_path / "a" / ".." / "b") == str(
            tmp_path.resolve() / "b"
        )

    def test_accepts_path_objects(self, tmp_path: Path) -> None:
        assert canonical_identity(tmp_path) == str(tmp_path.resolve())
