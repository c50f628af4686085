from datetime import datetime
from typing import Any

from hubuum_client.core.fields import api
from hubuum_client.core.resource import ApiResource
from hubuum_client.resources.namespace import Namespace


class ClassResource(ApiResource):
    """A hubuum class: a named, optionally schema-validated kind of object."""

    id: int = api(read_only=True)
    name: str = api(display_name="Name")
    description: str = api(display_name="Description")
    # returned nested, written as namespace_id
    namespace: Namespace = api(as_id=True, display_name="Namespace")
    json_schema: Any = api(optional=True, display_name="Schema")
    validate_schema: bool = api(optional=True, display_name="Validate")
    created_at: datetime = api(read_only=True, display_name="Created")
    updated_at: datetime = api(read_only=True, display_name="Updated")


class ClassRelationResource(ApiResource, name_field="id"):
    id: int = api(read_only=True)
    from_hubuum_class_id: int = api(display_name="From")
    to_hubuum_class_id: int = api(display_name="To")
    created_at: datetime = api(read_only=True, display_name="Created")
    updated_at: datetime = api(read_only=True, display_name="Updated")


Class, ClassGet, ClassPost, ClassPatch = ClassResource.shapes
ClassRelation, ClassRelationGet, ClassRelationPost, ClassRelationPatch = (
    ClassRelationResource.shapes
)
