from datetime import datetime

from pydantic import BaseModel, Field


class Credentials(BaseModel):
    username: str
    password: str = Field(repr=False)


class Token(BaseModel):
    token: str = Field(repr=False)


class GroupResult(BaseModel):
    id: int
    groupname: str
    description: str
    created_at: datetime
    updated_at: datetime


class PermissionResult(BaseModel):
    """The permission flags a group holds on a namespace."""

    id: int
    namespace_id: int
    group_id: int
    has_read_namespace: bool
    has_update_namespace: bool
    has_delete_namespace: bool
    has_delegate_namespace: bool
    has_create_class: bool
    has_read_class: bool
    has_update_class: bool
    has_delete_class: bool
    has_create_object: bool
    has_read_object: bool
    has_update_object: bool
    has_delete_object: bool
    has_create_class_relation: bool
    has_read_class_relation: bool
    has_update_class_relation: bool
    has_delete_class_relation: bool
    has_create_object_relation: bool
    has_read_object_relation: bool
    has_update_object_relation: bool
    has_delete_object_relation: bool
    created_at: datetime
    updated_at: datetime

    def granted(self) -> list:
        """Names of the permissions that are set, without the ``has_`` prefix."""
        return [
            name[len("has_"):]
            for name, value in self.model_dump().items()
            if name.startswith("has_") and value
        ]


class GroupPermissionsResult(BaseModel):
    group: GroupResult
    permission: PermissionResult
