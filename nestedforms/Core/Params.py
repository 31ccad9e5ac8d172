"""
Typed parameter tree.

Incoming params (``request.data``, a dict, a QueryDict) are converted once
into ``NestedParams`` / ``ScalarParam`` nodes so the router only ever has to
tell the two cases apart. Lists and any other non-mapping values are scalars.
"""
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Dict, Union


@dataclass(frozen=True)
class ScalarParam:
    value: Any

    def to_python(self) -> Any:
        return self.value


@dataclass(frozen=True)
class NestedParams:
    items: Dict[str, "ParamNode"]

    def to_python(self) -> Dict[str, Any]:
        return {key: node.to_python() for key, node in self.items.items()}

    def __len__(self) -> int:
        return len(self.items)


ParamNode = Union[ScalarParam, NestedParams]


def build_param_tree(params: Any) -> NestedParams:
    """
    Convert a decoded nested mapping into a NestedParams tree.

    Keys are coerced to ``str``. A QueryDict contributes the last value of
    each key, like ``QueryDict.dict()``.

    Raises:
        TypeError: If ``params`` is not a mapping
    """
    if isinstance(params, NestedParams):
        return params
    if not isinstance(params, Mapping):
        raise TypeError(f"Form params must be a mapping, got {type(params).__name__}.")
    return NestedParams({str(key): _build_node(value) for key, value in params.items()})


def _build_node(value: Any) -> ParamNode:
    if isinstance(value, Mapping):
        return build_param_tree(value)
    return ScalarParam(value)
