"""Database access: asyncpg pool, transactions and migrations."""

from .postgres import close_pool, create_pool, get_pool, get_transaction, ping

__all__ = ["create_pool", "get_pool", "close_pool", "get_transaction", "ping"]
