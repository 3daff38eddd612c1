"""Connection pool construction for the MySQL recipe store."""
from __future__ import annotations

from mysql.connector import pooling

from .config import DatabaseConfig


def create_connection_pool(config: DatabaseConfig) -> pooling.MySQLConnectionPool:
    """Create a MySQL connection pool using *config*."""

    return pooling.MySQLConnectionPool(
        pool_name=config.pool_name,
        pool_size=config.pool_size,
        host=config.host,
        port=config.port,
        user=config.user,
        password=config.password,
        database=config.database,
        connection_timeout=config.connect_timeout,
        charset="utf8mb4",
        use_unicode=True,
    )
