# Infrastructure clients
from clients.vault_client import VaultClient
from clients.postgres_client import PostgresClient, Transaction
