from __future__ import annotations

from matchday.utils import collapse_whitespace, env_str, expand_env, load_yaml_file, normalize_token, validate_url


class TestNormalizeToken:
    """Tests for normalize_token."""

    def test_strips_punctuation_and_case(self):
        assert normalize_token("Dallas Stars vs. Boston Bruins!") == "dallasstarsvsbostonbruins"

    def test_unicode_letters_kept(self):
        assert normalize_token("Atlético Madrid") == "atléticomadrid"

    def test_empty(self):
        assert normalize_token("--") == ""


class TestHelpers:
    def test_collapse_whitespace(self):
        assert collapse_whitespace("  a \t b\n c ") == "a b c"

    def test_expand_env(self, monkeypatch):
        monkeypatch.setenv("MATCHDAY_TEST_VALUE", "x")
        assert expand_env({"a": ["${MATCHDAY_TEST_VALUE}", 1]}) == {"a": ["x", 1]}

    def test_env_str(self, monkeypatch):
        monkeypatch.setenv("MATCHDAY_TEST_VALUE", "  value ")
        assert env_str("MATCHDAY_TEST_VALUE") == "value"
        monkeypatch.setenv("MATCHDAY_TEST_VALUE", "  ")
        assert env_str("MATCHDAY_TEST_VALUE") is None
        monkeypatch.delenv("MATCHDAY_TEST_VALUE")
        assert env_str("MATCHDAY_TEST_VALUE") is None

    def test_load_yaml_file(self, tmp_path):
        path = tmp_path / "data.yaml"
        path.write_text("key: value\n", encoding="utf-8")
        assert load_yaml_file(path) == {"key": "value"}

    def test_validate_url(self):
        assert validate_url("https://www.thesportsdb.com/api/v1/json")
        assert not validate_url("www.thesportsdb.com")
        assert not validate_url(None)
