"""
Set Query
Query posts against sets defined by custom logic over GraphQL
"""

__version__ = "0.1.0"

from .config import settings

__all__ = ["settings", "__version__"]
