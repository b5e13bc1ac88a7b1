"""
Star Wars GraphQL API
Characters and starships served over a single GraphQL endpoint
"""

__version__ = "0.1.0"

from .config import settings

__all__ = ["settings", "__version__"]
