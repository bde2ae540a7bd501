from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class NamedQuery:
    name: str
    description: str
    expression: dict[str, Any] = field(hash=False)


def _exists(field_name: str) -> dict[str, Any]:
    return {"exists": {"field": field_name}}


QUERY_CATALOG: tuple[NamedQuery, ...] = (
    NamedQuery(
        name="all",
        description="All tweets",
        expression={"match_all": {}},
    ),
    NamedQuery(
        name="with-links",
        description="Tweets containing links",
        expression=_exists("entities.urls.expanded_url"),
    ),
    NamedQuery(
        name="retweets",
        description="Retweets",
        expression=_exists("retweeted_status"),
    ),
    NamedQuery(
        name="replies",
        description="Replies to other tweets",
        expression=_exists("in_reply_to_status_id_str"),
    ),
    NamedQuery(
        name="mentions",
        description="Tweets mentioning other users",
        expression=_exists("entities.user_mentions.screen_name"),
    ),
    NamedQuery(
        name="hashtags",
        description="Tweets with hashtags",
        expression=_exists("entities.hashtags.text"),
    ),
)


def find_query(name: str) -> NamedQuery:
    for query in QUERY_CATALOG:
        if query.name == name:
            return query
    raise KeyError(f"Unknown query: {name}")
