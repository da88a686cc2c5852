"""Tests for settings persistence."""

import json

from tubepipe.core.settings import HARDCODED_CLIENT_VERSION, ExtractorSettings, Settings

# --- defaults ---


def test_client_headers_default():
    assert ExtractorSettings().client_headers == {
        "X-YouTube-Client-Name": "1",
        "X-YouTube-Client-Version": HARDCODED_CLIENT_VERSION,
    }


def test_load_missing_file(tmp_path):
    settings = Settings.load(tmp_path / "settings.json")
    assert settings == Settings()


# --- load / save ---


def test_save_and_load(tmp_path):
    path = tmp_path / "nested" / "settings.json"
    settings = Settings()
    settings.http.max_retries = 5
    settings.extractor.search_region = "DE"
    settings.save(path)

    loaded = Settings.load(path)
    assert loaded.http.max_retries == 5
    assert loaded.extractor.search_region == "DE"
    assert list(path.parent.glob("*.tmp")) == []


def test_load_partial_merges_defaults(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"extractor": {"base_url": "http://localhost:8080/"}, "x": 1}))
    settings = Settings.load(path)
    assert settings.extractor.base_url == "http://localhost:8080"
    assert settings.extractor.client_version == HARDCODED_CLIENT_VERSION
    assert settings.http.timeout == 30.0


def test_load_clamps_invalid_values(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"http": {"max_retries": 99, "timeout": "slow"}}))
    settings = Settings.load(path)
    assert settings.http.max_retries == 10
    assert settings.http.timeout == 30.0


def test_load_script_engine(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"extractor": {"script_engine": "node"}}))
    assert Settings.load(path).extractor.script_engine == "node"

    path.write_text(json.dumps({"extractor": {"script_engine": "rhino"}}))
    assert Settings.load(path).extractor.script_engine == "dukpy"


def test_load_corrupt_file(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text("{broken")
    assert Settings.load(path) == Settings()
