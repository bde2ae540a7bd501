from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, TypeAlias

from tweet_index.services.importer.errors import ConfigurationError

# One post as found in the export; shape is owned by the source file.
Record: TypeAlias = Any


@dataclass(frozen=True)
class ElasticConnectionSettings:
    host: str
    port: int
    index_name: str
    scheme: str = "http"

    @property
    def base_url(self) -> str:
        return f"{self.scheme}://{self.host.strip()}:{self.port}"

    def validate(self) -> None:
        if not isinstance(self.host, str) or not self.host.strip():
            raise ConfigurationError("Elasticsearch host must not be empty")
        if isinstance(self.port, bool) or not isinstance(self.port, int):
            raise ConfigurationError(f"Elasticsearch port must be an integer, got {self.port!r}")
        if not 0 < self.port <= 65535:
            raise ConfigurationError(f"Elasticsearch port must be in 1..65535, got {self.port}")
        if not isinstance(self.index_name, str) or not self.index_name.strip():
            raise ConfigurationError("Elasticsearch index name must not be empty")
        if self.scheme not in {"http", "https"}:
            raise ConfigurationError(f"Unsupported Elasticsearch scheme: {self.scheme}")


@dataclass(frozen=True)
class ImportedFile:
    path: str
    record_count: int
    success: bool
    error_message: str | None = None

    def __post_init__(self) -> None:
        if self.record_count < 0:
            raise ValueError("record_count must be >= 0")
        if self.success and self.error_message is not None:
            raise ValueError("a successful file cannot carry an error message")
        if not self.success and not self.error_message:
            raise ValueError("a failed file requires an error message")

    @classmethod
    def succeeded(cls, path: str, record_count: int) -> ImportedFile:
        return cls(path=path, record_count=record_count, success=True)

    @classmethod
    def failed(cls, path: str, error_message: str, *, record_count: int = 0) -> ImportedFile:
        return cls(
            path=path,
            record_count=record_count,
            success=False,
            error_message=error_message,
        )


@dataclass
class ImportResult:
    """Outcomes of one import run, in discovery order.

    Only the orchestrator appends; once ``complete()`` has been called the
    aggregate is read-only.
    """

    cancelled: bool = False
    _files: list[ImportedFile] = field(default_factory=list, init=False, repr=False)
    _completed: bool = field(default=False, init=False, repr=False)

    def add_imported_file(self, imported_file: ImportedFile) -> None:
        if self._completed:
            raise RuntimeError("import result is already complete")
        self._files.append(imported_file)

    def complete(self, *, cancelled: bool = False) -> None:
        if self._completed:
            raise RuntimeError("import result is already complete")
        self.cancelled = cancelled
        self._completed = True

    @property
    def completed(self) -> bool:
        return self._completed

    @property
    def files(self) -> tuple[ImportedFile, ...]:
        return tuple(self._files)

    @property
    def file_count(self) -> int:
        return len(self._files)

    @property
    def record_count(self) -> int:
        return sum(item.record_count for item in self._files)

    @property
    def imported_record_count(self) -> int:
        return sum(item.record_count for item in self._files if item.success)

    @property
    def failures(self) -> tuple[ImportedFile, ...]:
        return tuple(item for item in self._files if not item.success)
