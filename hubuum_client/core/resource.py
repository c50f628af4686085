"""
Resource type generation.

A resource description is a class named ``<Name>Resource`` that subclasses
:class:`ApiResource` and lists its fields as annotations, optionally with
``api(...)`` modifiers:

    class ClassResource(ApiResource):
        id: int = api(read_only=True)
        name: str
        namespace: Namespace = api(as_id=True)
        json_schema: Any = api(optional=True)
        created_at: datetime = api(read_only=True)

    Class, ClassGet, ClassPost, ClassPatch = ClassResource.shapes

Defining the class generates the four pydantic models, implements the
capability contract on the full record (``Class.endpoint()`` resolves to
``Endpoint.CLASSES`` via the plural "Classes") and registers it in
``resource_registry``. Mistakes in a description fail when the class is
defined, not when a request is made.
"""

import logging
import typing
from typing import Any, ClassVar, Dict, List, NamedTuple, Optional, Sequence, Type

from pydantic import BaseModel, ConfigDict

from hubuum_client.core.endpoints import Endpoint
from hubuum_client.core.exceptions import ResourceDefinitionError
from hubuum_client.core.field_utils import strip_lookup_operator
from hubuum_client.core.fields import (
    ApiField,
    ClassifiedFields,
    FieldSpec,
    ShapeField,
    classify_fields,
    data_type_for,
)
from hubuum_client.core.filters import FilterOperator, Operator, QueryFilter
from hubuum_client.core.interfaces import AbstractApiResource, FilterTuple
from hubuum_client.core.types import DataType

logger = logging.getLogger(__name__)

RESOURCE_SUFFIX = "Resource"

# Fields used for str(), in order of preference
DISPLAY_FIELD_OPTIONS = ("name", "user", "username", "id")


def pluralize(name: str) -> str:
    """Two-case plural: "Class" -> "Classes", "User" -> "Users". Irregular nouns need ``endpoint=``."""
    if name.endswith("s"):
        return f"{name}es"
    return f"{name}s"


class ShapeModel(BaseModel):
    """Base for the get, post and patch shapes."""

    model_config = ConfigDict(extra="forbid")

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)


class PatchModel(ShapeModel):
    def to_payload(self) -> Dict[str, Any]:
        # only what the caller set, so an explicit None still clears a field
        return self.model_dump(mode="json", exclude_unset=True)


class ResourceRecord(BaseModel, AbstractApiResource):
    """Base for generated full records. Concrete subclasses come from :class:`ApiResource`."""

    model_config = ConfigDict(extra="ignore")

    resource_name: ClassVar[str] = ""
    DISPLAY_FIELD: ClassVar[str] = "id"
    display_names: ClassVar[Dict[str, str]] = {}
    field_data_types: ClassVar[Dict[str, Optional[DataType]]] = {}

    @classmethod
    def field_data_type(cls, field: str) -> Optional[DataType]:
        """Data category of a filterable field, or None when unknown."""
        return cls.field_data_types.get(strip_lookup_operator(field))

    def __str__(self) -> str:
        value = getattr(self, self.DISPLAY_FIELD, None)
        if value is None:
            return str(self.id)
        return str(value)


class ResourceShapes(NamedTuple):
    model: Type[ResourceRecord]
    get: Type[ShapeModel]
    post: Type[ShapeModel]
    patch: Type[PatchModel]


class ResourceRegistry:
    """Maps resource names ("Class", "User", ...) to their generated full records."""

    def __init__(self):
        self._resources: Dict[str, Type[ResourceRecord]] = {}

    def register(self, model: Type[ResourceRecord]) -> None:
        name = model.resource_name
        if name in self._resources:
            raise ResourceDefinitionError(f"Resource {name} is already registered.")
        self._resources[name] = model

    def get(self, name: str) -> Type[ResourceRecord]:
        model = self._resources.get(name)
        if model is None:
            raise ResourceDefinitionError(f"Resource {name} is not registered.")
        return model

    def __contains__(self, name: str) -> bool:
        return name in self._resources

    def __iter__(self):
        return iter(self._resources.values())

    def __len__(self) -> int:
        return len(self._resources)


resource_registry = ResourceRegistry()


class ApiResource:
    """
    Base class for resource descriptions.

    Class keywords:
        name_field: the field select_by_name matches on (default "name")
        endpoint: endpoint key, when the two-case plural is wrong
        register: set False to keep the generated record out of resource_registry
    """

    shapes: ClassVar[ResourceShapes]

    def __init_subclass__(
        cls,
        *,
        name_field: str = "name",
        endpoint: Optional[str] = None,
        register: bool = True,
        **kwargs,
    ):
        super().__init_subclass__(**kwargs)
        cls.shapes = generate_resource(
            cls, name_field=name_field, endpoint=endpoint, register=register
        )


def resource_base_name(description: type) -> str:
    class_name = description.__name__
    if not class_name.endswith(RESOURCE_SUFFIX) or class_name == RESOURCE_SUFFIX:
        raise ResourceDefinitionError(
            f"ApiResource only supports classes with names ending in '{RESOURCE_SUFFIX}', "
            f"got '{class_name}'"
        )
    return class_name[: -len(RESOURCE_SUFFIX)]


def collect_field_specs(description: type) -> List[FieldSpec]:
    try:
        hints = typing.get_type_hints(description)
    except NameError as exc:
        raise ResourceDefinitionError(
            f"{description.__name__}: unresolved annotation ({exc})"
        ) from exc

    specs = []
    for name, annotation in hints.items():
        if typing.get_origin(annotation) is ClassVar or name == "shapes":
            continue
        value = description.__dict__.get(name, ApiField())
        if not isinstance(value, ApiField):
            raise ResourceDefinitionError(
                f"{description.__name__}.{name}: defaults are not supported, use api(...)"
            )
        specs.append(FieldSpec(name, annotation, value))

    if not specs:
        raise ResourceDefinitionError(f"{description.__name__} declares no fields")
    return specs


def resolve_endpoint(base_name: str, override: Optional[str]) -> Endpoint:
    key = override or pluralize(base_name)
    try:
        return Endpoint(key)
    except ValueError:
        raise ResourceDefinitionError(
            f"No endpoint '{key}' for resource '{base_name}'"
        ) from None


def _build_model(
    name: str,
    base: type,
    fields: Sequence[ShapeField],
    module: str,
    doc: str,
    extra: Optional[Dict[str, Any]] = None,
) -> type:
    annotations: Dict[str, Any] = {}
    namespace: Dict[str, Any] = {"__module__": module, "__qualname__": name, "__doc__": doc}
    for field in fields:
        annotations[field.name] = field.annotation
        if not field.required:
            namespace[field.name] = None
    namespace["__annotations__"] = annotations
    namespace.update(extra or {})
    return type(base)(name, (base,), namespace)


def _contract_methods(endpoint: Endpoint) -> Dict[str, Any]:
    def endpoint_(cls) -> Endpoint:
        return endpoint

    def build_params(cls, filters: Sequence[FilterTuple]) -> List[QueryFilter]:
        return [QueryFilter(key, operator, value) for key, operator, value in filters]

    endpoint_.__name__ = "endpoint"
    return {"endpoint": classmethod(endpoint_), "build_params": classmethod(build_params)}


def generate_resource(
    description: type,
    *,
    name_field: str = "name",
    endpoint: Optional[str] = None,
    register: bool = True,
) -> ResourceShapes:
    base_name = resource_base_name(description)
    specs = collect_field_specs(description)
    classified: ClassifiedFields = classify_fields(specs)
    main_names = [field.name for field in classified.main]

    if "id" not in main_names:
        raise ResourceDefinitionError(f"{description.__name__} must declare an 'id' field")
    if name_field not in main_names:
        raise ResourceDefinitionError(
            f"{description.__name__}: name_field '{name_field}' is not a readable field"
        )

    resolved = resolve_endpoint(base_name, endpoint)
    module = description.__module__

    get_model = _build_model(
        f"{base_name}Get", ShapeModel, classified.get, module,
        f"Filter parameters for {base_name}.",
    )
    post_model = _build_model(
        f"{base_name}Post", ShapeModel, classified.post, module,
        f"Creation payload for {base_name}.",
    )
    patch_model = _build_model(
        f"{base_name}Patch", PatchModel, classified.patch, module,
        f"Partial update payload for {base_name}.",
    )
    model = _build_model(
        base_name, ResourceRecord, classified.main, module,
        description.__doc__ or f"A {base_name} as returned by the server.",
        extra=_contract_methods(resolved),
    )

    model.resource_name = base_name
    model.GetParams = get_model
    model.GetOutput = model
    model.PostParams = post_model
    model.PostOutput = model
    model.PatchParams = patch_model
    model.PatchOutput = model
    model.DeleteParams = None
    model.DeleteOutput = None
    model.NAME_FIELD = name_field
    model.DISPLAY_FIELD = next(
        option for option in DISPLAY_FIELD_OPTIONS if option in main_names
    )
    model.display_names = dict(classified.display_names)
    model.field_data_types = {
        field.name: data_type_for(field.annotation) for field in classified.get
    }

    if register:
        resource_registry.register(model)
    logger.debug(f"Generated resource {base_name} -> {resolved.value}")
    return ResourceShapes(model, get_model, post_model, patch_model)


def filters_from_params(params: BaseModel) -> List[QueryFilter]:
    """Equality filters for every field set on a get-params instance."""
    equals = FilterOperator(Operator.EQUALS)
    return [
        QueryFilter(key, equals, value)
        for key, value in params.model_dump(mode="json", exclude_none=True).items()
    ]

