"""Core constants: cache key prefixes and search index limits.

Single source of truth for cache key structure (DRY). Used by the
cache-aside read layer and by the indexing consumer's invalidation.
"""

# Cache key prefixes
CACHE_PREFIX_SEARCH = "search"
CACHE_PREFIX_FEATURED = "featured"

# Delimiters for composite keys
CACHE_KEY_SEP = ":"
CACHE_FILTER_SEP = "|"

# Search index
SEARCH_MAX_RESULTS = 50
FEATURED_DEFAULT_LIMIT = 10
TITLE_BOOST = 3

# DB-native change channels (pg_notify from table triggers)
CHANNEL_SHOW_CHANGES = "show_changes"
CHANNEL_EPISODE_CHANGES = "episode_changes"
