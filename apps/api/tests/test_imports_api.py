from typing import Any, Callable

from fastapi.testclient import TestClient

from tweet_index.import_runs import ImportRunRegistry
from tweet_index.main import app, get_run_registry


class DeferredStarter:
    """Holds run targets until the test decides to execute them."""

    def __init__(self) -> None:
        self.pending: list[Callable[[], None]] = []

    def __call__(self, target: Callable[[], None]) -> None:
        self.pending.append(target)

    def run_all(self) -> None:
        while self.pending:
            self.pending.pop(0)()


class RecordingRunner:
    def __init__(self, result: dict[str, Any] | None = None) -> None:
        self.calls: list[dict[str, Any]] = []
        self.cancel_checks: list[bool] = []
        self._result = result or {"files": 1, "records": 3, "failed_files": 0, "cancelled": False}

    def __call__(self, overrides: dict[str, Any], should_cancel: Callable[[], bool]) -> dict[str, Any]:
        self.calls.append(overrides)
        self.cancel_checks.append(should_cancel())
        return dict(self._result)


def _use_registry(runner: RecordingRunner) -> DeferredStarter:
    starter = DeferredStarter()
    registry = ImportRunRegistry(runner=runner, start=starter)
    app.dependency_overrides[get_run_registry] = lambda: registry
    return starter


def test_enqueue_import_queues_a_background_run(client: TestClient) -> None:
    runner = RecordingRunner()
    starter = _use_registry(runner)

    response = client.post("/imports")

    assert response.status_code == 202
    assert response.json() == {"run_id": "1", "status": "queued"}
    assert runner.calls == []
    assert len(starter.pending) == 1


def test_enqueue_import_passes_overrides_to_runner(client: TestClient) -> None:
    runner = RecordingRunner()
    starter = _use_registry(runner)

    response = client.post(
        "/imports",
        json={"source_dir": "/data/tweets", "index_name": "tweets-2013", "port": 9201},
    )
    starter.run_all()

    assert response.status_code == 202
    assert runner.calls == [{"source_dir": "/data/tweets", "index_name": "tweets-2013", "port": 9201}]


def test_enqueue_import_rejects_invalid_overrides(client: TestClient) -> None:
    _use_registry(RecordingRunner())

    assert client.post("/imports", json={"port": 0}).status_code == 422
    assert client.post("/imports", json={"host": ""}).status_code == 422
    assert client.post("/imports", json={"unexpected": True}).status_code == 422


def test_enqueue_import_returns_conflict_while_a_run_is_active(client: TestClient) -> None:
    _use_registry(RecordingRunner())
    client.post("/imports")

    response = client.post("/imports")

    assert response.status_code == 409
    assert response.json() == {
        "detail": "archive import already queued/running",
        "existing_run_id": "1",
    }


def test_finished_run_exposes_result_and_allows_next_run(client: TestClient) -> None:
    starter = _use_registry(RecordingRunner())
    client.post("/imports")
    starter.run_all()

    detail = client.get("/imports/1").json()
    assert detail["status"] == "succeeded"
    assert detail["result"]["records"] == 3
    assert detail["finished_at"] is not None

    assert client.post("/imports").json() == {"run_id": "2", "status": "queued"}
    assert client.get("/imports").json() == [
        {"id": "1", "status": "succeeded"},
        {"id": "2", "status": "queued"},
    ]
    assert client.get("/imports", params={"status": "queued"}).json() == [{"id": "2", "status": "queued"}]


def test_cancel_queued_run_cancels_immediately(client: TestClient) -> None:
    runner = RecordingRunner()
    starter = _use_registry(runner)
    client.post("/imports")

    response = client.post("/imports/1/cancel")
    starter.run_all()

    assert response.status_code == 200
    assert response.json() == {"id": "1", "status": "cancelled"}
    assert runner.calls == []
    assert client.get("/imports/1").json()["finished_at"] is not None


def test_cancel_finished_run_returns_conflict(client: TestClient) -> None:
    starter = _use_registry(RecordingRunner())
    client.post("/imports")
    starter.run_all()

    assert client.post("/imports/1/cancel").status_code == 409
    assert client.post("/imports/missing/cancel").status_code == 404
    assert client.get("/imports/missing").status_code == 404
