"""
Persistence adapters.

json_storage knows how the collection is laid out on disk; item_store owns the
collection and serializes every access to it. Routers, the CLI and the REPL
depend on ItemStore rather than touching the JSON file.
"""

from .item_store import ItemStore

__all__ = ["ItemStore"]
