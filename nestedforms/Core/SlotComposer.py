"""
Slot Composer

Single Responsibility: build one slot per store entry for a new form instance.
"""
from typing import TYPE_CHECKING, Any, Optional

import structlog
from django.core.validators import EMPTY_VALUES

from nestedforms.conf import get_setting

from .FormStore import FormEntry, ModelEntry, MODEL

if TYPE_CHECKING:
    from .CompositeForm import CompositeForm

logger = structlog.get_logger(__name__)


def is_persisted(instance: Optional[Any]) -> bool:
    """True when ``instance`` exists and carries a non-empty identity value."""
    if instance is None:
        return False
    identity = getattr(instance, get_setting("IDENTITY_ATTRIBUTE"), None)
    return identity not in EMPTY_VALUES


class SlotComposer:
    """
    Composes the slots of a form from an optional domain object.

    - Model entries reuse the domain object when its type is exactly the
      entry's model, otherwise get a fresh model instance.
    - Form entries are built recursively from the domain object's source
      attribute; when the attribute is missing the slot stays unset.
    """

    def __init__(self, form: 'CompositeForm'):
        self._form = form

    def compose(self, instance: Optional[Any] = None) -> None:
        for entry in self._form.get_store():
            if entry.kind == MODEL:
                self._compose_model(entry, instance)
            else:
                self._compose_form(entry, instance)

    def _compose_model(self, entry: ModelEntry, instance: Optional[Any]) -> None:
        model_class = entry.resolve()
        if instance is not None and type(instance) is model_class:
            target = instance
        else:
            target = model_class()
        self._form.set_slot(entry.name, target)

    def _compose_form(self, entry: FormEntry, instance: Optional[Any]) -> None:
        # Resolve up front so a bad lazy reference fails at construction, with or without data
        form_class = entry.resolve()
        if instance is None or not hasattr(instance, entry.source):
            logger.debug(
                "Leaving sub-form slot unset",
                form=type(self._form).__name__,
                slot=entry.name,
                source=entry.source,
            )
            self._form.set_slot(entry.name, None)
            return
        self._form.set_slot(entry.name, form_class(getattr(instance, entry.source)))
