"""
Param Router

Single Responsibility: assign a nested params tree onto a composed form.

Routing walks the store by params key:
- at the root, or inside a Model slot, scalars are assigned and nested
  mappings recurse with their key as the new slot
- inside a Model slot only keys in that slot's allow-list are accepted
- a key naming a Form slot forwards its mapping into that sub-form
- anything else goes to a setter on the form itself, or is dropped

Dropped keys are never an error.
"""
import inspect
from typing import TYPE_CHECKING, Any, Optional

import structlog

from nestedforms.conf import get_setting

from .FormStore import FormEntry, ModelEntry, FORM, MODEL
from .Params import NestedParams, ParamNode

if TYPE_CHECKING:
    from .CompositeForm import CompositeForm

logger = structlog.get_logger(__name__)


class ParamRouter:

    def __init__(self, form: 'CompositeForm'):
        self._form = form
        self._store = form.get_store()

    def route(self, node: ParamNode, slot_name: Optional[str] = None) -> None:
        """
        Route ``node`` with ``slot_name`` as the current context.

        Args:
            node: Params subtree; a NestedParams except in the plain-field case
            slot_name: Current slot, None at the root
        """
        entry = self._store.get(slot_name)

        if slot_name is None or (entry is not None and entry.kind == MODEL):
            self._assign_flat(node, entry)
        elif entry is not None and entry.kind == FORM:
            self._forward_to_form(entry, node)
        else:
            self._assign_to_form(slot_name, node.to_python())

    def _assign_flat(self, node: NestedParams, entry: Optional[ModelEntry]) -> None:
        for key, child in node.items.items():
            if isinstance(child, NestedParams):
                self.route(child, key)
            elif entry is not None:
                self._assign_to_model(entry, key, child.value)
            else:
                self._assign_at_root(key, child.value)

    def _assign_to_model(self, entry: ModelEntry, key: str, value: Any) -> None:
        if key not in entry.fields:
            self._drop(key, entry.name)
            return
        # A setter defined on the form overrides the model's own attribute
        if self._has_setter(key):
            setattr(self._form, key, value)
        else:
            setattr(self._form.slot(entry.name), key, value)

    def _assign_at_root(self, key: str, value: Any) -> None:
        if self._set_on_form(key, value):
            return
        primary = self._store.get(self._form.get_form_name())
        if primary is not None and primary.kind == MODEL and key in primary.fields:
            setattr(self._form.slot(primary.name), key, value)
            return
        self._drop(key, None)

    def _forward_to_form(self, entry: FormEntry, node: NestedParams) -> None:
        sub_form = self._form.slot(entry.name)
        if sub_form is None:
            self._drop(entry.name, None)
            return
        sub_form.set_params(node, entry.model_name)

    def _assign_to_form(self, key: str, value: Any) -> None:
        if not self._set_on_form(key, value):
            self._drop(key, None)

    def _set_on_form(self, key: str, value: Any) -> bool:
        """Property setter first, then a declared root form field; False when neither exists."""
        if self._has_setter(key):
            setattr(self._form, key, value)
            return True
        if key in self._form.fields:
            self._form.data[key] = value
            return True
        return False

    def _has_setter(self, name: str) -> bool:
        attribute = inspect.getattr_static(type(self._form), name, None)
        return isinstance(attribute, property) and attribute.fset is not None

    def _drop(self, key: str, slot_name: Optional[str]) -> None:
        if get_setting("LOG_DROPPED_PARAMS"):
            logger.debug(
                "Dropped param not accepted by form",
                form=type(self._form).__name__,
                slot=slot_name,
                key=key,
            )
