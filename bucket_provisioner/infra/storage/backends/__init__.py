"""Backend clients package.

Protocol-based abstraction over the object-storage and identity-admin backends.
"""

from .factory import BackendClientFactory, BackendClients, ClientFactory
from .protocol import (
    SUBUSER_SEPARATOR,
    Account,
    AccountKey,
    IdentityAdminClient,
    ObjectStorageClient,
    split_subuser_id,
    subuser_id,
)

__all__ = [
    "SUBUSER_SEPARATOR",
    "Account",
    "AccountKey",
    "BackendClientFactory",
    "BackendClients",
    "ClientFactory",
    "IdentityAdminClient",
    "ObjectStorageClient",
    "split_subuser_id",
    "subuser_id",
]
