from dataclasses import dataclass
from functools import lru_cache
import os

from tweet_index.services.importer.errors import ConfigurationError
from tweet_index.services.importer.types import ElasticConnectionSettings


def _to_int(value: str | None, *, default: int, minimum: int) -> int:
    if value is None:
        return default
    parsed = int(value)
    return max(minimum, parsed)


def _to_port(name: str, value: str | None, *, default: int) -> int:
    if value is None:
        return default
    try:
        # range is checked by ElasticConnectionSettings.validate()
        return int(value)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer, got {value!r}") from exc


@dataclass(frozen=True)
class Settings:
    archive_source_dir: str
    archive_file_pattern: str
    elastic_scheme: str
    elastic_host: str
    elastic_port: int
    elastic_index: str
    elastic_timeout_seconds: float
    search_max_results: int

    def elastic_connection(self) -> ElasticConnectionSettings:
        return ElasticConnectionSettings(
            host=self.elastic_host,
            port=self.elastic_port,
            index_name=self.elastic_index,
            scheme=self.elastic_scheme,
        )


@lru_cache
def get_settings() -> Settings:
    return Settings(
        archive_source_dir=os.getenv("ARCHIVE_SOURCE_DIR", "/workspace/data/tweets"),
        archive_file_pattern=os.getenv("ARCHIVE_FILE_PATTERN", "*.js"),
        elastic_scheme=os.getenv("ELASTIC_SCHEME", "http"),
        elastic_host=os.getenv("ELASTIC_HOST", "localhost"),
        elastic_port=_to_port("ELASTIC_PORT", os.getenv("ELASTIC_PORT"), default=9200),
        elastic_index=os.getenv("ELASTIC_INDEX", "tweets"),
        elastic_timeout_seconds=float(os.getenv("ELASTIC_TIMEOUT_SECONDS", "30")),
        search_max_results=_to_int(os.getenv("SEARCH_MAX_RESULTS"), default=1000, minimum=1),
    )
