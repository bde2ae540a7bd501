from __future__ import annotations

from tweet_index.services.importer.index_client import create_index_client
from tweet_index.services.importer.orchestrator import ClientFactory
from tweet_index.services.importer.types import ElasticConnectionSettings, Record
from tweet_index.services.search.queries import NamedQuery


def search_records(
    *,
    connection: ElasticConnectionSettings,
    query: NamedQuery,
    max_results: int,
    client_factory: ClientFactory = create_index_client,
) -> list[Record]:
    if max_results < 1:
        raise ValueError("max_results must be >= 1")

    connection.validate()
    client = client_factory(connection)
    try:
        records = client.search(query.expression, size=max_results)
    finally:
        client.close()

    return records[:max_results]
