from snipbox.db.engine import create_store
from snipbox.db.engine import get_engine as _get_engine
from snipbox.db.files import FileSnippetStore
from snipbox.db.memory import InMemorySnippetStore
from snipbox.db.sql import TABLE_NAME, SqlSnippetStore

__all__ = [
    "TABLE_NAME",
    "FileSnippetStore",
    "InMemorySnippetStore",
    "SqlSnippetStore",
    "_get_engine",
    "create_store",
]
