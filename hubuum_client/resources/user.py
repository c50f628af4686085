from datetime import datetime

from hubuum_client.core.fields import api
from hubuum_client.core.resource import ApiResource


class UserResource(ApiResource, name_field="username"):
    id: int = api(read_only=True)
    username: str = api(display_name="Username")
    password: str = api(post_only=True)
    email: str = api(optional=True, display_name="Email")
    created_at: datetime = api(read_only=True, display_name="Created")
    updated_at: datetime = api(read_only=True, display_name="Updated")


User, UserGet, UserPost, UserPatch = UserResource.shapes
