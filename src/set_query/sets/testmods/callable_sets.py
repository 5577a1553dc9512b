"""Test helper set resolvers for loader unit tests (callable-based)."""


def featured_posts(*args):
    return [3, 1, 2]


def posts_by_ids(*ids):
    """Posts with the given IDs."""
    return list(ids)


NOT_CALLABLE = [1, 2, 3]
