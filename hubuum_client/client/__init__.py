from hubuum_client.client.aio import (
    AsyncClient,
    AsyncClassHandle,
    AsyncGroupHandle,
    AsyncHandle,
    AsyncNamespaceHandle,
    AsyncResource,
    AsyncUserHandle,
    AuthenticatedAsyncClient,
)
from hubuum_client.client.base import Authenticated, Unauthenticated, one_or_err
from hubuum_client.client.sync import (
    AuthenticatedSyncClient,
    ClassHandle,
    FilterBuilder,
    GroupHandle,
    Handle,
    NamespaceHandle,
    Resource,
    SyncClient,
    UserHandle,
)

__all__ = [
    "Authenticated",
    "Unauthenticated",
    "one_or_err",
    # Blocking
    "SyncClient",
    "AuthenticatedSyncClient",
    "Resource",
    "FilterBuilder",
    "Handle",
    "ClassHandle",
    "GroupHandle",
    "NamespaceHandle",
    "UserHandle",
    # asyncio
    "AsyncClient",
    "AuthenticatedAsyncClient",
    "AsyncResource",
    "AsyncHandle",
    "AsyncClassHandle",
    "AsyncGroupHandle",
    "AsyncNamespaceHandle",
    "AsyncUserHandle",
]
