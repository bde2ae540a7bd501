from __future__ import annotations

from pathlib import Path
from typing import Callable

from tweet_index.services.importer.errors import ParseError, SubmissionError
from tweet_index.services.importer.file_system import (
    ARCHIVE_FILE_PATTERN,
    ensure_source_dir,
    list_archive_files,
)
from tweet_index.services.importer.index_client import IndexClient, create_index_client
from tweet_index.services.importer.parser import parse_archive_file
from tweet_index.services.importer.types import (
    ElasticConnectionSettings,
    ImportedFile,
    ImportResult,
    Record,
)

FileLister = Callable[[Path, str], list[Path]]
FileParser = Callable[[Path], list[Record]]
ClientFactory = Callable[[ElasticConnectionSettings], IndexClient]


def _process_file(path: Path, *, parse_file: FileParser, client: IndexClient) -> ImportedFile:
    try:
        records = list(parse_file(path))
    except ParseError as exc:
        return ImportedFile.failed(str(path), exc.message)

    if not records:
        return ImportedFile.succeeded(str(path), 0)

    try:
        client.bulk_index(records)
    except SubmissionError as exc:
        return ImportedFile.failed(str(path), str(exc) or "bulk submission failed", record_count=len(records))

    return ImportedFile.succeeded(str(path), len(records))


def _unexpected_error_message(exc: Exception) -> str:
    message = str(exc)
    return f"{type(exc).__name__}: {message}" if message else type(exc).__name__


def run_import(
    *,
    source_dir: Path,
    connection: ElasticConnectionSettings,
    file_pattern: str = ARCHIVE_FILE_PATTERN,
    list_files: FileLister = list_archive_files,
    parse_file: FileParser = parse_archive_file,
    client_factory: ClientFactory = create_index_client,
    should_cancel: Callable[[], bool] | None = None,
) -> ImportResult:
    """Import every archive file under ``source_dir`` into the configured index.

    Files are handled one at a time in the order ``list_files`` returns them.
    Each file produces exactly one ``ImportedFile``; a file that fails to parse
    or to submit is recorded as failed and the run moves on to the next one.
    ``ConfigurationError`` is raised before any file is read when the source
    directory or the connection settings are invalid.

    ``should_cancel`` is checked before each file; once it returns true the run
    stops and the result is marked as cancelled.
    """
    ensure_source_dir(source_dir)
    connection.validate()

    client = client_factory(connection)
    result = ImportResult()
    cancelled = False

    try:
        for path in list_files(source_dir, file_pattern):
            if should_cancel is not None and should_cancel():
                cancelled = True
                print(
                    f"[archive-import] cancelled source_dir={source_dir} "
                    f"processed={result.file_count}",
                    flush=True,
                )
                break

            try:
                outcome = _process_file(path, parse_file=parse_file, client=client)
            except Exception as exc:
                outcome = ImportedFile.failed(str(path), _unexpected_error_message(exc))

            if not outcome.success:
                print(
                    f"[archive-import] file failed path={outcome.path} error={outcome.error_message}",
                    flush=True,
                )
            result.add_imported_file(outcome)
    finally:
        client.close()

    result.complete(cancelled=cancelled)
    return result
