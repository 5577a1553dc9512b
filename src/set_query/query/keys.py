"""
Query argument keys shared by the input mapper, the set query hook and the
post query engine.
"""

# Raw input field carrying set query items
SET_QUERY_KEY = "setQuery"

# Inclusion-list filter: only posts with these IDs
INCLUSION_KEY = "post__in"

# Ordering directive and the value meaning "use the inclusion list's order"
ORDER_BY_KEY = "orderby"
ORDER_BY_INCLUSION = "post__in"

ORDER_KEY = "order"
AUTHOR_KEY = "author"
STATUS_KEY = "post_status"
SEARCH_KEY = "s"
PAGE_SIZE_KEY = "posts_per_page"
OFFSET_KEY = "offset"
