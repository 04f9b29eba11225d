"""Record store backends."""

import logging

from core.config import AppConfig
from core.stores.base import RecordStore
from core.stores.memory_store import MemoryRecordStore
from core.stores.postgres_store import PostgresRecordStore

logger = logging.getLogger(__name__)


def create_store(config: AppConfig) -> RecordStore:
    """Instantiate the record store selected by config."""
    if config.store_backend == "memory":
        logger.info("Using in-memory record store")
        return MemoryRecordStore()

    from clients.postgres_client import PostgresClient
    from clients.vault_client import VaultClient

    database_url = config.database_url
    if not database_url:
        vault = VaultClient(
            config.vault_addr,
            config.vault_role_id,
            config.vault_secret_id,
            namespace=config.vault_namespace,
        )
        database_url = vault.database_url()

    postgres = PostgresClient(
        database_url,
        min_connections=config.db_pool_min,
        max_connections=config.db_pool_max,
    )
    logger.info("Using PostgreSQL record store")
    return PostgresRecordStore(postgres)


__all__ = ["RecordStore", "MemoryRecordStore", "PostgresRecordStore", "create_store"]
