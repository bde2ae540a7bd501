import pytest

from tweet_index.config import get_settings
from tweet_index.services.importer.errors import ConfigurationError
from tweet_index.services.importer.types import ElasticConnectionSettings


def test_settings_defaults(monkeypatch) -> None:
    for name in (
        "ELASTIC_HOST",
        "ELASTIC_PORT",
        "ELASTIC_INDEX",
        "ELASTIC_SCHEME",
        "ARCHIVE_FILE_PATTERN",
        "SEARCH_MAX_RESULTS",
    ):
        monkeypatch.delenv(name, raising=False)

    settings = get_settings()

    assert settings.archive_file_pattern == "*.js"
    assert settings.search_max_results == 1000
    assert settings.elastic_connection() == ElasticConnectionSettings(
        host="localhost",
        port=9200,
        index_name="tweets",
        scheme="http",
    )


def test_settings_read_elastic_env(monkeypatch) -> None:
    monkeypatch.setenv("ELASTIC_HOST", "es.internal")
    monkeypatch.setenv("ELASTIC_PORT", "9243")
    monkeypatch.setenv("ELASTIC_INDEX", "archive")
    monkeypatch.setenv("ELASTIC_SCHEME", "https")
    monkeypatch.setenv("ELASTIC_TIMEOUT_SECONDS", "2.5")

    settings = get_settings()

    assert settings.elastic_connection().base_url == "https://es.internal:9243"
    assert settings.elastic_connection().index_name == "archive"
    assert settings.elastic_timeout_seconds == 2.5


def test_search_max_results_has_lower_bound(monkeypatch) -> None:
    monkeypatch.setenv("SEARCH_MAX_RESULTS", "0")

    assert get_settings().search_max_results == 1


def test_non_numeric_port_is_a_configuration_error(monkeypatch) -> None:
    monkeypatch.setenv("ELASTIC_PORT", "abc")

    with pytest.raises(ConfigurationError, match="ELASTIC_PORT must be an integer"):
        get_settings()
