"""
Validation Aggregator

Single Responsibility: validate every slot and fold its messages into the
root form's error collection.

Messages are appended under the field name the slot reported them for.
Nothing is deduplicated: two slots reporting the same field both show up.
"""
from typing import TYPE_CHECKING

import structlog

from .TargetBridge import validate_target

if TYPE_CHECKING:
    from .CompositeForm import CompositeForm

logger = structlog.get_logger(__name__)


class ValidationAggregator:

    def __init__(self, form: 'CompositeForm'):
        self._form = form

    def run(self) -> bool:
        """
        Validate all set slots.

        Sub-forms run their own aggregator as part of their validation, so
        their messages already include everything nested below them.

        Returns:
            bool: True only if every slot is valid
        """
        is_valid = True
        for entry in self._form.get_store():
            target = self._form.slot(entry.name)
            if target is None:
                continue
            slot_valid, messages = validate_target(target)
            is_valid = is_valid and slot_valid
            for field, field_messages in messages.items():
                self._form.append_errors(field, field_messages)
            if not slot_valid:
                logger.debug(
                    "Slot failed validation",
                    form=type(self._form).__name__,
                    slot=entry.name,
                    fields=sorted(messages),
                )
        return is_valid
