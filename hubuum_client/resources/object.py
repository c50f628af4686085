from datetime import datetime
from typing import Any

from hubuum_client.core.fields import api
from hubuum_client.core.resource import ApiResource


class ObjectResource(ApiResource):
    id: int = api(read_only=True)
    name: str = api(display_name="Name")
    namespace_id: int = api(display_name="Namespace")
    hubuum_class_id: int = api(display_name="Class")
    description: str = api(display_name="Description")
    data: Any = api(optional=True, display_name="Data")
    created_at: datetime = api(read_only=True, display_name="Created")
    updated_at: datetime = api(read_only=True, display_name="Updated")


class ObjectRelationResource(ApiResource, name_field="id"):
    id: int = api(read_only=True)
    from_hubuum_object_id: int = api(display_name="From")
    to_hubuum_object_id: int = api(display_name="To")
    class_relation_id: int = api(display_name="Class relation")
    created_at: datetime = api(read_only=True, display_name="Created")
    updated_at: datetime = api(read_only=True, display_name="Updated")


Object, ObjectGet, ObjectPost, ObjectPatch = ObjectResource.shapes
ObjectRelation, ObjectRelationGet, ObjectRelationPost, ObjectRelationPatch = (
    ObjectRelationResource.shapes
)
