from enum import Enum
from typing import Mapping, Optional

from hubuum_client.core.baseurl import BaseUrl


class Endpoint(Enum):
    """Endpoint keys. The value is the key a resource description resolves to."""

    LOGIN = "Login"
    LOGIN_WITH_TOKEN = "LoginWithToken"
    USERS = "Users"
    USER_GROUPS = "UserGroups"
    GROUPS = "Groups"
    GROUP_MEMBERS = "GroupMembers"
    GROUP_MEMBERS_ADD_REMOVE = "GroupMembersAddRemove"
    NAMESPACES = "Namespaces"
    NAMESPACE_PERMISSIONS = "NamespacePermissions"
    CLASSES = "Classes"
    OBJECTS = "Objects"
    CLASS_RELATIONS = "ClassRelations"
    OBJECT_RELATIONS = "ObjectRelations"

    @property
    def path(self) -> str:
        return _PATHS[self]

    def trim_start_matches(self, prefix: str = "/") -> str:
        return self.path.lstrip(prefix)

    def complete(
        self, base_url: BaseUrl, url_params: Optional[Mapping[str, object]] = None
    ) -> str:
        """Absolute URL for this endpoint, with ``{placeholders}`` substituted."""
        url = base_url.join(self.path)
        for key, value in (url_params or {}).items():
            url = url.replace(f"{{{key}}}", str(value))
        return url


_PATHS = {
    Endpoint.LOGIN: "/api/v0/auth/login",
    Endpoint.LOGIN_WITH_TOKEN: "/api/v0/auth/validate",
    Endpoint.USERS: "/api/v1/iam/users/",
    Endpoint.USER_GROUPS: "/api/v1/iam/users/{user_id}/groups",
    Endpoint.GROUPS: "/api/v1/iam/groups/",
    Endpoint.GROUP_MEMBERS: "/api/v1/iam/groups/{group_id}/members",
    Endpoint.GROUP_MEMBERS_ADD_REMOVE: "/api/v1/iam/groups/{group_id}/members/{user_id}",
    Endpoint.NAMESPACES: "/api/v1/namespaces/",
    Endpoint.NAMESPACE_PERMISSIONS: "/api/v1/namespaces/{namespace_id}/permissions",
    Endpoint.CLASSES: "/api/v1/classes/",
    Endpoint.OBJECTS: "/api/v1/classes/{class_id}/",
    Endpoint.CLASS_RELATIONS: "/api/v1/relations/classes/",
    Endpoint.OBJECT_RELATIONS: "/api/v1/relations/objects/",
}
