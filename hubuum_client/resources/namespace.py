from datetime import datetime

from hubuum_client.core.fields import api
from hubuum_client.core.resource import ApiResource


class NamespaceResource(ApiResource):
    id: int = api(read_only=True)
    name: str = api(display_name="Name")
    description: str = api(display_name="Description")
    # the owning group, only given on creation
    group_id: int = api(post_only=True)
    created_at: datetime = api(read_only=True, display_name="Created")
    updated_at: datetime = api(read_only=True, display_name="Updated")


Namespace, NamespaceGet, NamespacePost, NamespacePatch = NamespaceResource.shapes
