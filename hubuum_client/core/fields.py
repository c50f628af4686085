"""
Field classification for resource descriptions.

A resource description declares each field once, with modifiers:

    read_only     sent by the server, never written by the client
    post_only     written on creation only, never returned
    optional      may be absent / null
    as_id         a foreign key: payloads carry ``<name>_id`` as an integer
    display_name  column title when rendering records as a table

From that list, four shapes are derived: the full record (main), the
get-filter params, the post payload and the patch payload.
"""

import datetime
import decimal
import types
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Union, get_args, get_origin

from hubuum_client.core.exceptions import ResourceDefinitionError
from hubuum_client.core.types import DataType

NoneType = type(None)


@dataclass(frozen=True)
class ApiField:
    """Modifiers attached to a field of a resource description."""

    read_only: bool = False
    post_only: bool = False
    optional: bool = False
    as_id: bool = False
    display_name: Optional[str] = None


def api(
    *,
    read_only: bool = False,
    post_only: bool = False,
    optional: bool = False,
    as_id: bool = False,
    display_name: Optional[str] = None,
) -> ApiField:
    return ApiField(
        read_only=read_only,
        post_only=post_only,
        optional=optional,
        as_id=as_id,
        display_name=display_name,
    )


@dataclass(frozen=True)
class FieldSpec:
    name: str
    annotation: Any
    modifiers: ApiField = field(default_factory=ApiField)

    @property
    def id_name(self) -> str:
        return f"{self.name}_id" if self.modifiers.as_id else self.name


@dataclass(frozen=True)
class ShapeField:
    name: str
    annotation: Any
    required: bool
    source: str  # the declared field this one came from


@dataclass
class ClassifiedFields:
    main: List[ShapeField] = field(default_factory=list)
    get: List[ShapeField] = field(default_factory=list)
    post: List[ShapeField] = field(default_factory=list)
    patch: List[ShapeField] = field(default_factory=list)
    display_names: Dict[str, str] = field(default_factory=dict)


def validate_field(spec: FieldSpec) -> None:
    mods = spec.modifiers
    if mods.read_only and mods.post_only:
        raise ResourceDefinitionError(
            f"Field '{spec.name}' cannot be both read_only and post_only"
        )
    if mods.display_name is not None and not mods.display_name:
        raise ResourceDefinitionError(f"Field '{spec.name}' has an empty display_name")


def classify_fields(specs: Sequence[FieldSpec]) -> ClassifiedFields:
    """Partition field specs into the four resource shapes, preserving declaration order."""
    result = ClassifiedFields()

    for spec in specs:
        validate_field(spec)
        mods = spec.modifiers
        ty = spec.annotation
        id_type = int if mods.as_id else ty

        if not mods.post_only:
            if mods.optional:
                result.main.append(ShapeField(spec.name, Optional[ty], False, spec.name))
            else:
                result.main.append(ShapeField(spec.name, ty, True, spec.name))
            result.display_names[spec.name] = mods.display_name or spec.name
            result.get.append(ShapeField(spec.id_name, Optional[id_type], False, spec.name))

        if mods.read_only:
            continue

        post_type = Optional[id_type] if mods.optional else id_type
        result.post.append(ShapeField(spec.id_name, post_type, not mods.optional, spec.name))
        # post_only fields never reach the patch shape
        if not mods.post_only:
            result.patch.append(ShapeField(spec.id_name, Optional[id_type], False, spec.name))

    return result


def unwrap_optional(annotation: Any) -> Any:
    if get_origin(annotation) in (Union, types.UnionType):
        args = [arg for arg in get_args(annotation) if arg is not NoneType]
        if len(args) == 1:
            return args[0]
    return annotation


def data_type_for(annotation: Any) -> Optional[DataType]:
    """Map a Python annotation to the filter data category it belongs to, if any."""
    annotation = unwrap_optional(annotation)
    origin = get_origin(annotation)
    if origin in (list, tuple, set, frozenset) or annotation in (list, tuple, set, frozenset):
        return DataType.ARRAY
    if annotation is bool:
        return DataType.BOOLEAN
    if annotation is str:
        return DataType.STRING
    if annotation in (int, float, decimal.Decimal, datetime.date, datetime.datetime, datetime.time):
        return DataType.NUMERIC_OR_DATE
    return None
