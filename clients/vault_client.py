"""
HashiCorp Vault client for the database credentials.

Authenticates with AppRole when constructed and reads KV v2 secrets.
Every path is scoped under the 'customer-service/' prefix.
"""

import logging

import hvac
from hvac.exceptions import Forbidden, InvalidPath, Unauthorized

logger = logging.getLogger(__name__)

SECRET_PREFIX = "customer-service"


class VaultClient:
    """AppRole-authenticated reader for this service's secrets."""

    def __init__(
        self,
        addr: str | None,
        role_id: str | None,
        secret_id: str | None,
        namespace: str | None = None,
    ):
        """
        Connect and log in. Fails fast on missing settings.

        Raises:
            ValueError: Address or AppRole credentials not configured
            PermissionError: Login rejected
        """
        if not addr:
            raise ValueError("VAULT_ADDR is required to read the database URL from Vault")
        if not role_id or not secret_id:
            raise ValueError("VAULT_ROLE_ID and VAULT_SECRET_ID are required for AppRole login")

        client_kwargs = {"url": addr}
        if namespace:
            client_kwargs["namespace"] = namespace
        self.client = hvac.Client(**client_kwargs)

        try:
            auth_response = self.client.auth.approle.login(role_id=role_id, secret_id=secret_id)
            self.client.token = auth_response["auth"]["client_token"]
        except Exception as e:
            logger.error(f"AppRole authentication failed: {e}")
            raise PermissionError(f"AppRole authentication failed: {e}")

        if not self.client.is_authenticated():
            raise PermissionError("Vault authentication failed")

        logger.info(f"Authenticated to Vault at {addr}")

    def get_secret(self, path: str, field: str) -> str:
        """
        Read one field of the secret at ``customer-service/<path>``.

        Raises:
            PermissionError: Path missing or not readable
            KeyError: Field not in the secret
        """
        full_path = f"{SECRET_PREFIX}/{path}"

        try:
            response = self.client.secrets.kv.v2.read_secret_version(
                path=full_path, raise_on_deleted_version=True
            )
        except InvalidPath:
            logger.error(f"Secret path not found: {full_path}")
            raise PermissionError(f"Secret path '{full_path}' not found in Vault")
        except (Unauthorized, Forbidden) as e:
            logger.error(f"Access denied to secret {full_path}: {e}")
            raise PermissionError(f"Access denied to secret '{full_path}': {e}")

        secret_data = response["data"]["data"]
        if field not in secret_data:
            raise KeyError(
                f"Field '{field}' not found in secret '{full_path}'. "
                f"Available: {', '.join(secret_data)}"
            )
        return secret_data[field]

    def database_url(self) -> str:
        """PostgreSQL DSN stored at customer-service/database:url."""
        return self.get_secret("database", "url")
