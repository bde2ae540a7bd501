from functools import lru_cache, partial
from typing import Annotated, Any

from fastapi import Depends, FastAPI, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from tweet_index.config import Settings, get_settings
from tweet_index.import_runs import ActiveRunError, ImportRunRegistry, RunStateError
from tweet_index.services.importer import ConfigurationError, SearchError
from tweet_index.services.importer.index_client import create_index_client
from tweet_index.services.importer.orchestrator import ClientFactory
from tweet_index.services.search import QUERY_CATALOG, TweetView, find_query, search_records

app = FastAPI(title="Tweet Archive Index API", version="0.1.0")


class ImportEnqueueRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    source_dir: str | None = Field(default=None, min_length=1)
    file_pattern: str | None = Field(default=None, min_length=1)
    host: str | None = Field(default=None, min_length=1)
    port: int | None = Field(default=None, ge=1, le=65535)
    index_name: str | None = Field(default=None, min_length=1)


def _load_settings() -> Settings:
    try:
        return get_settings()
    except ConfigurationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@lru_cache
def get_run_registry() -> ImportRunRegistry:
    return ImportRunRegistry()


def get_client_factory() -> ClientFactory:
    settings = _load_settings()
    return partial(create_index_client, timeout_seconds=settings.elastic_timeout_seconds)


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.post("/imports")
def enqueue_import(
    registry: Annotated[ImportRunRegistry, Depends(get_run_registry)],
    request: ImportEnqueueRequest | None = None,
) -> JSONResponse:
    overrides = request.model_dump(exclude_none=True) if request is not None else {}

    try:
        run = registry.submit(overrides)
    except ActiveRunError as exc:
        return JSONResponse(
            status_code=409,
            content={
                "detail": "archive import already queued/running",
                "existing_run_id": exc.run_id,
            },
        )

    return JSONResponse(status_code=202, content={"run_id": run["id"], "status": run["status"]})


@app.get("/imports")
def list_imports(
    registry: Annotated[ImportRunRegistry, Depends(get_run_registry)],
    status: str | None = None,
) -> list[dict[str, Any]]:
    return registry.list_runs(status=status)


@app.get("/imports/{run_id}")
def get_import(
    run_id: str,
    registry: Annotated[ImportRunRegistry, Depends(get_run_registry)],
) -> dict[str, Any]:
    run = registry.get(run_id)
    if run is None:
        raise HTTPException(status_code=404, detail="import run not found")
    return run


@app.post("/imports/{run_id}/cancel")
def cancel_import(
    run_id: str,
    registry: Annotated[ImportRunRegistry, Depends(get_run_registry)],
) -> dict[str, Any]:
    try:
        run = registry.cancel(run_id)
    except RunStateError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc

    if run is None:
        raise HTTPException(status_code=404, detail="import run not found")
    return run


@app.get("/search/queries")
def list_queries() -> list[dict[str, Any]]:
    return [
        {
            "name": query.name,
            "description": query.description,
            "expression": query.expression,
        }
        for query in QUERY_CATALOG
    ]


@app.get("/search")
def search(
    query: str,
    client_factory: Annotated[ClientFactory, Depends(get_client_factory)],
    max_results: int | None = None,
) -> list[dict[str, object]]:
    try:
        named_query = find_query(query)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail=f"unknown query: {query}") from exc

    settings = _load_settings()
    limit = settings.search_max_results
    if max_results is not None:
        limit = max(1, min(max_results, settings.search_max_results))

    try:
        records = search_records(
            connection=settings.elastic_connection(),
            query=named_query,
            max_results=limit,
            client_factory=client_factory,
        )
    except ConfigurationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except SearchError as exc:
        raise HTTPException(status_code=502, detail=f"search request failed: {exc}") from exc

    rows: list[dict[str, object]] = []
    for record in records:
        view = TweetView.from_record(record)
        rows.append(
            {
                "created_at": view.created_at_display,
                "text": view.text,
                "urls": list(view.urls),
            }
        )
    return rows


def run() -> None:
    import uvicorn

    uvicorn.run("tweet_index.main:app", host="0.0.0.0", port=8000, reload=False)


if __name__ == "__main__":
    run()
