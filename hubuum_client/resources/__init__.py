from hubuum_client.resources.classes import (
    Class,
    ClassGet,
    ClassPatch,
    ClassPost,
    ClassRelation,
    ClassRelationGet,
    ClassRelationPatch,
    ClassRelationPost,
)
from hubuum_client.resources.group import Group, GroupGet, GroupPatch, GroupPost
from hubuum_client.resources.namespace import (
    Namespace,
    NamespaceGet,
    NamespacePatch,
    NamespacePost,
)
from hubuum_client.resources.object import (
    Object,
    ObjectGet,
    ObjectPatch,
    ObjectPost,
    ObjectRelation,
    ObjectRelationGet,
    ObjectRelationPatch,
    ObjectRelationPost,
)
from hubuum_client.resources.user import User, UserGet, UserPatch, UserPost

__all__ = [
    "Class", "ClassGet", "ClassPost", "ClassPatch",
    "ClassRelation", "ClassRelationGet", "ClassRelationPost", "ClassRelationPatch",
    "Group", "GroupGet", "GroupPost", "GroupPatch",
    "Namespace", "NamespaceGet", "NamespacePost", "NamespacePatch",
    "Object", "ObjectGet", "ObjectPost", "ObjectPatch",
    "ObjectRelation", "ObjectRelationGet", "ObjectRelationPost", "ObjectRelationPatch",
    "User", "UserGet", "UserPost", "UserPatch",
]
