"""
hubuum_client: a typed client for the hubuum REST API.
"""

from hubuum_client.client import (
    AsyncClient,
    AuthenticatedAsyncClient,
    AuthenticatedSyncClient,
    SyncClient,
)
from hubuum_client.core import BaseUrl, ClientConfig, Endpoint, Operator
from hubuum_client.core.classes import Credentials, Token
from hubuum_client.core.exceptions import HubuumError
from hubuum_client.resources import (
    Class,
    ClassRelation,
    Group,
    Namespace,
    Object,
    ObjectRelation,
    User,
)

__all__ = [
    "SyncClient",
    "AuthenticatedSyncClient",
    "AsyncClient",
    "AuthenticatedAsyncClient",
    "BaseUrl",
    "ClientConfig",
    "Credentials",
    "Endpoint",
    "HubuumError",
    "Operator",
    "Token",
    "Class",
    "ClassRelation",
    "Group",
    "Namespace",
    "Object",
    "ObjectRelation",
    "User",
]

__version__ = "0.1.0"
