from tweet_index.services.search.queries import QUERY_CATALOG, NamedQuery, find_query
from tweet_index.services.search.searcher import search_records
from tweet_index.services.search.views import TweetView

__all__ = ["NamedQuery", "QUERY_CATALOG", "TweetView", "find_query", "search_records"]
