from datetime import datetime

from hubuum_client.core.fields import api
from hubuum_client.core.resource import ApiResource


class GroupResource(ApiResource, name_field="groupname"):
    id: int = api(read_only=True)
    groupname: str = api(display_name="Name")
    description: str = api(display_name="Description")
    created_at: datetime = api(read_only=True, display_name="Created")
    updated_at: datetime = api(read_only=True, display_name="Updated")


Group, GroupGet, GroupPost, GroupPatch = GroupResource.shapes
