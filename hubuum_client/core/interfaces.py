from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, ClassVar, List, Optional, Sequence, Tuple, Type

from hubuum_client.core.filters import OperatorLike, QueryFilter

if TYPE_CHECKING:
    from hubuum_client.core.endpoints import Endpoint

FilterTuple = Tuple[str, OperatorLike, Any]


class AbstractApiResource(ABC):
    """
    The capability every generated resource kind implements exactly once.

    The client layer is generic over this interface: it resolves where a
    resource lives through ``endpoint()``, turns builder tuples into query
    filters through ``build_params()``, and uses the associated shapes to
    validate what it sends and parses what it receives. A shape of None means
    the operation carries no payload (delete sends no body and expects none
    back).
    """

    GetParams: ClassVar[Optional[Type[Any]]] = None
    GetOutput: ClassVar[Optional[Type[Any]]] = None
    PostParams: ClassVar[Optional[Type[Any]]] = None
    PostOutput: ClassVar[Optional[Type[Any]]] = None
    PatchParams: ClassVar[Optional[Type[Any]]] = None
    PatchOutput: ClassVar[Optional[Type[Any]]] = None
    DeleteParams: ClassVar[Optional[Type[Any]]] = None
    DeleteOutput: ClassVar[Optional[Type[Any]]] = None

    # The field select_by_name and add_filter_name_exact match on
    NAME_FIELD: ClassVar[str] = "name"

    @classmethod
    @abstractmethod
    def endpoint(cls) -> "Endpoint":
        """The collection endpoint this resource kind lives at."""
        pass

    @classmethod
    @abstractmethod
    def build_params(cls, filters: Sequence[FilterTuple]) -> List[QueryFilter]:
        """Turn ``(field, operator, value)`` tuples into query filters, one for one."""
        pass
