"""
hubuum_client.core: resource metaprogramming, query filters, URLs and errors.
"""

from hubuum_client.core.baseurl import BaseUrl
from hubuum_client.core.config import ClientConfig
from hubuum_client.core.endpoints import Endpoint
from hubuum_client.core.fields import api
from hubuum_client.core.filters import FilterOperator, Operator, QueryFilter
from hubuum_client.core.interfaces import AbstractApiResource
from hubuum_client.core.resource import ApiResource, ResourceRecord, resource_registry
from hubuum_client.core.types import DataType, HttpMethod

__all__ = [
    # Types
    "DataType",
    "HttpMethod",
    "Endpoint",
    "BaseUrl",
    # Configuration
    "ClientConfig",
    # Resources
    "AbstractApiResource",
    "ApiResource",
    "ResourceRecord",
    "api",
    "resource_registry",
    # Filters
    "FilterOperator",
    "Operator",
    "QueryFilter",
]
