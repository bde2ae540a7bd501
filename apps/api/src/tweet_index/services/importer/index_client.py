from __future__ import annotations

import json
from typing import Any, Protocol, Sequence

import httpx

from tweet_index.services.importer.errors import SearchError, SubmissionError
from tweet_index.services.importer.types import ElasticConnectionSettings, Record

_MAX_REPORTED_REASONS = 3


class IndexClient(Protocol):
    def bulk_index(self, records: Sequence[Record]) -> None: ...

    def search(self, query: dict[str, Any], *, size: int) -> list[Record]: ...

    def close(self) -> None: ...


def _bulk_body(records: Sequence[Record]) -> str:
    lines: list[str] = []
    for record in records:
        lines.append('{"index":{}}')
        lines.append(json.dumps(record, separators=(",", ":")))
    # the bulk API requires a trailing newline after the last line
    return "\n".join(lines) + "\n"


def _bulk_item_reason(item: Any) -> str | None:
    if not isinstance(item, dict):
        return None
    for action in item.values():
        error = action.get("error") if isinstance(action, dict) else None
        if error is None:
            continue
        if isinstance(error, dict):
            error_type = error.get("type", "error")
            reason = error.get("reason", "")
            return f"{error_type}: {reason}" if reason else str(error_type)
        return str(error)
    return None


def _bulk_failure_message(payload: dict[str, Any], submitted: int) -> str:
    items = payload.get("items")
    reasons: list[str] = []
    rejected = 0
    if isinstance(items, list):
        for item in items:
            reason = _bulk_item_reason(item)
            if reason is None:
                continue
            rejected += 1
            if reason not in reasons:
                reasons.append(reason)

    if rejected == 0:
        return f"bulk request reported errors for a batch of {submitted} records"

    detail = "; ".join(reasons[:_MAX_REPORTED_REASONS])
    if len(reasons) > _MAX_REPORTED_REASONS:
        detail += f"; ... {len(reasons) - _MAX_REPORTED_REASONS} more"
    return f"{rejected} of {submitted} records rejected: {detail}"


class ElasticsearchIndexClient:
    def __init__(
        self,
        *,
        settings: ElasticConnectionSettings,
        timeout_seconds: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._index_name = settings.index_name.strip()
        self._client = httpx.Client(
            base_url=settings.base_url,
            timeout=timeout_seconds,
            transport=transport,
        )

    @property
    def index_name(self) -> str:
        return self._index_name

    def bulk_index(self, records: Sequence[Record]) -> None:
        if not records:
            raise ValueError("records must not be empty")

        try:
            body = _bulk_body(records)
        except (TypeError, ValueError) as exc:
            raise SubmissionError(f"records could not be serialised: {exc}") from exc

        try:
            response = self._client.post(
                f"/{self._index_name}/_bulk",
                content=body.encode("utf-8"),
                headers={"Content-Type": "application/x-ndjson"},
            )
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise SubmissionError(str(exc)) from exc

        try:
            payload = response.json()
        except ValueError as exc:
            raise SubmissionError("Invalid bulk response: body is not JSON") from exc
        if not isinstance(payload, dict):
            raise SubmissionError("Invalid bulk response: expected an object")

        if payload.get("errors"):
            raise SubmissionError(_bulk_failure_message(payload, len(records)))

    def search(self, query: dict[str, Any], *, size: int) -> list[Record]:
        try:
            response = self._client.post(
                f"/{self._index_name}/_search",
                json={"query": query, "size": size},
            )
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError as exc:
            raise SearchError(str(exc)) from exc
        except ValueError as exc:
            raise SearchError("Invalid search response: body is not JSON") from exc

        hits = payload.get("hits") if isinstance(payload, dict) else None
        hit_list = hits.get("hits") if isinstance(hits, dict) else None
        if not isinstance(hit_list, list):
            raise SearchError("Invalid search response: missing hits")

        return [hit.get("_source") for hit in hit_list if isinstance(hit, dict) and "_source" in hit]

    def close(self) -> None:
        self._client.close()


def create_index_client(
    settings: ElasticConnectionSettings,
    *,
    timeout_seconds: float = 30.0,
) -> IndexClient:
    settings.validate()
    return ElasticsearchIndexClient(settings=settings, timeout_seconds=timeout_seconds)
