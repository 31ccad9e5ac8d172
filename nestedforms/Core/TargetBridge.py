"""
Target Bridge

Single Responsibility: talk to delegation targets.
Everything the engine needs from a slot object (validate it, read its
per-field messages, persist it, introspect its fields) goes through here,
so the rest of the engine never checks what kind of object a slot holds.

Supported targets:
- Django forms, including composite forms: ``full_clean()`` + ``is_valid()`` + ``errors``
- Django models and model-like objects: ``full_clean()`` raising ValidationError
- Any other object exposing ``is_valid()`` and an ``errors`` mapping
"""
from typing import Any, Dict, List, Optional, Tuple

import structlog
from django.core.exceptions import NON_FIELD_ERRORS, FieldDoesNotExist, ValidationError
from django.forms.forms import BaseForm

logger = structlog.get_logger(__name__)


def _messages_from_validation_error(error: ValidationError) -> Dict[str, List[str]]:
    if hasattr(error, "error_dict"):
        return {field: list(messages) for field, messages in error.message_dict.items()}
    return {NON_FIELD_ERRORS: list(error.messages)}


def validate_target(target: Any) -> Tuple[bool, Dict[str, List[str]]]:
    """
    Validate one slot object.

    Args:
        target: The object held by a slot

    Returns:
        tuple: (is_valid, {field: [messages]})

    Raises:
        TypeError: If the target exposes no validation interface
    """
    if isinstance(target, BaseForm):
        target.full_clean()
        is_valid = target.is_valid()
        return is_valid, {field: [str(message) for message in messages] for field, messages in target.errors.items()}

    if hasattr(target, "full_clean"):
        try:
            target.full_clean()
        except ValidationError as e:
            return False, _messages_from_validation_error(e)
        return True, {}

    if hasattr(target, "is_valid"):
        is_valid = bool(target.is_valid())
        errors = getattr(target, "errors", None) or {}
        return is_valid, {field: [str(message) for message in messages] for field, messages in errors.items()}

    raise TypeError(f"{type(target).__name__} has no full_clean() or is_valid(); it cannot be delegated to.")


def persist_target(target: Any) -> Any:
    """Persist one slot object. Failures propagate to the caller untouched."""
    logger.debug("Saving delegation target", target=type(target).__name__)
    return target.save()


def model_field(model: Any, field_name: str) -> Optional[Any]:
    """Django model field ``field_name`` of ``model`` (class or instance), or None."""
    meta = getattr(model, "_meta", None)
    if meta is None:
        return None
    try:
        return meta.get_field(field_name)
    except FieldDoesNotExist:
        return None
