"""Background archive imports owned by the API process.

Run status lives in memory only. The index is the one persistent store, so a
restarted process starts with an empty run list.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from functools import partial
from pathlib import Path
from threading import Event, Lock, Thread
from typing import Any, Callable

from tweet_index.config import get_settings
from tweet_index.services.importer import ElasticConnectionSettings, run_import_job

ImportRunner = Callable[[dict[str, Any], Callable[[], bool]], dict[str, Any]]
RunStarter = Callable[[Callable[[], None]], None]

ACTIVE_RUN_STATUSES = ("queued", "running", "cancel_requested")


class ActiveRunError(RuntimeError):
    def __init__(self, run_id: str) -> None:
        super().__init__(f"archive import already queued/running: {run_id}")
        self.run_id = run_id


class RunStateError(RuntimeError):
    pass


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _to_iso(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


@dataclass
class ImportRun:
    id: str
    overrides: dict[str, Any]
    status: str = "queued"
    created_at: datetime = field(default_factory=_now)
    started_at: datetime | None = None
    finished_at: datetime | None = None
    error: str | None = None
    result: dict[str, Any] | None = None
    cancel_event: Event = field(default_factory=Event, repr=False, compare=False)

    def summary(self) -> dict[str, Any]:
        return {"id": self.id, "status": self.status}

    def detail(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "status": self.status,
            "overrides": dict(self.overrides),
            "created_at": _to_iso(self.created_at),
            "started_at": _to_iso(self.started_at),
            "finished_at": _to_iso(self.finished_at),
            "error": self.error,
            "result": self.result,
        }


def run_archive_import(
    overrides: dict[str, Any],
    should_cancel: Callable[[], bool],
) -> dict[str, Any]:
    settings = get_settings()

    connection = ElasticConnectionSettings(
        host=str(overrides.get("host", settings.elastic_host)),
        port=overrides.get("port", settings.elastic_port),
        index_name=str(overrides.get("index_name", settings.elastic_index)),
        scheme=settings.elastic_scheme,
    )
    result = run_import_job(
        source_dir=Path(str(overrides.get("source_dir", settings.archive_source_dir))),
        connection=connection,
        file_pattern=str(overrides.get("file_pattern", settings.archive_file_pattern)),
        timeout_seconds=settings.elastic_timeout_seconds,
        should_cancel=should_cancel,
    )
    return dict(result)


def _start_daemon_thread(target: Callable[[], None]) -> None:
    Thread(target=target, name="archive-import", daemon=True).start()


class ImportRunRegistry:
    """Tracks import runs and executes each one off the request path.

    At most one run is active at a time. Cancellation sets the run's event,
    which the orchestrator checks before every file.
    """

    def __init__(
        self,
        *,
        runner: ImportRunner = run_archive_import,
        start: RunStarter = _start_daemon_thread,
    ) -> None:
        self._runner = runner
        self._start = start
        self._lock = Lock()
        self._runs: dict[str, ImportRun] = {}
        self._next_id = 1

    def _active_run(self) -> ImportRun | None:
        for run in self._runs.values():
            if run.status in ACTIVE_RUN_STATUSES:
                return run
        return None

    def submit(self, overrides: dict[str, Any] | None = None) -> dict[str, Any]:
        with self._lock:
            active = self._active_run()
            if active is not None:
                raise ActiveRunError(active.id)

            run = ImportRun(id=str(self._next_id), overrides=dict(overrides or {}))
            self._next_id += 1
            self._runs[run.id] = run
            summary = run.summary()

        print(f"[import-runs] queued run_id={run.id}", flush=True)
        self._start(partial(self._execute, run))
        return summary

    def list_runs(self, *, status: str | None = None) -> list[dict[str, Any]]:
        with self._lock:
            return [
                run.summary()
                for run in self._runs.values()
                if status is None or run.status == status
            ]

    def get(self, run_id: str) -> dict[str, Any] | None:
        with self._lock:
            run = self._runs.get(run_id)
            return run.detail() if run is not None else None

    def cancel(self, run_id: str) -> dict[str, Any] | None:
        with self._lock:
            run = self._runs.get(run_id)
            if run is None:
                return None

            if run.status == "queued":
                # the runner has not started, so nothing else will finish it
                run.status = "cancelled"
                run.finished_at = _now()
            elif run.status in {"running", "cancel_requested"}:
                run.status = "cancel_requested"
            else:
                raise RunStateError(f"import run already {run.status}")

            run.cancel_event.set()
            return run.summary()

    def _finish(
        self,
        run: ImportRun,
        *,
        status: str,
        result: dict[str, Any] | None = None,
        error: str | None = None,
    ) -> None:
        with self._lock:
            run.status = status
            run.result = result
            run.error = error
            run.finished_at = _now()

    def _execute(self, run: ImportRun) -> None:
        with self._lock:
            if run.status != "queued":
                return
            run.status = "running"
            run.started_at = _now()

        try:
            result = self._runner(run.overrides, run.cancel_event.is_set)
        except Exception as exc:
            self._finish(run, status="failed", error=str(exc))
            print(f"[import-runs] run failed run_id={run.id} error={exc}", flush=True)
            return

        status = "cancelled" if result.get("cancelled") else "succeeded"
        self._finish(run, status=status, result=result)
        print(
            f"[import-runs] run {status} run_id={run.id} "
            f"files={result.get('files')} records={result.get('records')} "
            f"failed={result.get('failed_files')}",
            flush=True,
        )
        summary = result.get("summary")
        if summary:
            print(summary, flush=True)
