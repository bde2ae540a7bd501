from __future__ import annotations

from functools import partial
from pathlib import Path
from time import perf_counter
from typing import Callable, TypedDict

from tweet_index.services.importer.file_system import ARCHIVE_FILE_PATTERN
from tweet_index.services.importer.index_client import create_index_client
from tweet_index.services.importer.orchestrator import ClientFactory, run_import
from tweet_index.services.importer.types import ElasticConnectionSettings, ImportResult


class ImportFailure(TypedDict):
    path: str
    error: str


class ImportJobResult(TypedDict):
    files: int
    records: int
    failed_files: int
    failures: list[ImportFailure]
    cancelled: bool
    index: str
    duration_ms: int
    summary: str


def format_import_summary(result: ImportResult, duration_ms: int, *, max_failures: int = 3) -> str:
    lines = [
        f"Finished processing {result.file_count} files in {duration_ms / 1000:.3f}s.",
        f"{result.imported_record_count} tweets have been imported.",
    ]
    if result.cancelled:
        lines.append("The import was cancelled before all files were processed.")

    failures = result.failures
    if failures:
        lines.append(
            f"{len(failures)} files failed to import. Errors (max of {max_failures} will be shown):"
        )
        for failure in failures[:max_failures]:
            lines.append(f"{Path(failure.path).name} : {failure.error_message}")

    return "\n".join(lines)


def run_import_job(
    *,
    source_dir: Path,
    connection: ElasticConnectionSettings,
    file_pattern: str = ARCHIVE_FILE_PATTERN,
    timeout_seconds: float = 30.0,
    client_factory: ClientFactory | None = None,
    should_cancel: Callable[[], bool] | None = None,
) -> ImportJobResult:
    if client_factory is None:
        client_factory = partial(create_index_client, timeout_seconds=timeout_seconds)

    start = perf_counter()
    result = run_import(
        source_dir=source_dir,
        connection=connection,
        file_pattern=file_pattern,
        client_factory=client_factory,
        should_cancel=should_cancel,
    )
    duration_ms = int((perf_counter() - start) * 1000)

    print(
        "[archive-import] completed "
        f"files={result.file_count} "
        f"records={result.imported_record_count} "
        f"failed={len(result.failures)} "
        f"index={connection.index_name}",
        flush=True,
    )

    return {
        "files": result.file_count,
        "records": result.imported_record_count,
        "failed_files": len(result.failures),
        "failures": [
            {"path": failure.path, "error": failure.error_message or ""}
            for failure in result.failures
        ],
        "cancelled": result.cancelled,
        "index": connection.index_name,
        "duration_ms": duration_ms,
        "summary": format_import_summary(result, duration_ms),
    }
