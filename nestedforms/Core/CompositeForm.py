"""
Composite Form Module

This module provides the composite form class: one Django form built from a
primary model plus any number of delegated models and nested sub-forms,
validated together and saved together.

Architecture (SRP-compliant):
- CompositeForm: construction, submission state, error collection, slot access
- StoreMetaClass: turns class-body delegations into an immutable FormStore
- SlotComposer: builds the slots from an optional domain object
- ParamRouter: assigns submitted params onto the slots (allow-list aware)
- ValidationAggregator: validates slots and folds their messages upward
- SaveOrchestrator: saves sub-forms, then the primary model

Example:

    class ShippingForm(CompositeForm):
        shipping = DelegateModel(Shipping, fields=["address", "city"])

    class OrderForm(CompositeForm):
        order = DelegateModel(Order, fields=["total", "status"])
        shipping = DelegateForm(ShippingForm, source="shipping_info")

    form = OrderForm(order)
    if not form.submit(request.data):
        return form.error_messages()
"""
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

import structlog
from django import forms
from django.core.exceptions import NON_FIELD_ERRORS
from django.core.validators import EMPTY_VALUES

from nestedforms.conf import get_setting
from nestedforms.log_safe import log_safe_output

from .FormStore import FormStore, MODEL
from .Lifecycle import FormLifecycle, SubmissionState
from .ParamRouter import ParamRouter
from .Params import NestedParams, build_param_tree
from .SaveOrchestrator import SaveOrchestrator
from .SlotComposer import SlotComposer, is_persisted
from .StoreMetaClass import StoreMetaClass
from .TargetBridge import model_field
from .ValidationAggregator import ValidationAggregator

logger = structlog.get_logger(__name__)


class CompositeForm(FormLifecycle, forms.Form, metaclass=StoreMetaClass):
    """
    Base class for composite forms.

    Subclasses declare their slots with DelegateModel / DelegateForm and may
    declare ordinary Django form fields for values that live on the form
    itself. ``Meta.form_name`` names the primary model slot; it defaults to
    the snake-case class name without its ``Form`` suffix.

    A form is built once per request. ``persisted`` is fixed at construction:
    True when the domain object passed in already has an identity value.
    """

    _declared_form_name = None

    def __init__(self, instance: Optional[Any] = None, *args, **kwargs):
        kwargs.setdefault("data", {})
        super().__init__(*args, **kwargs)
        # Root fields are written into data by the router, so it must be a plain dict
        self.data = self.data.dict() if hasattr(self.data, "dict") else dict(self.data)
        self.instance = instance
        self._persisted = is_persisted(instance)
        self._slots: Dict[str, Any] = {}
        self._slots_valid = True
        self.submission_state = SubmissionState.UNSUBMITTED

        SlotComposer(self).compose(instance)
        self.run_hook("on_initialize")

    # Store / schema

    @classmethod
    def get_store(cls) -> FormStore:
        return cls._store

    @classmethod
    def get_form_name(cls) -> str:
        return cls._form_name

    # Slots

    def slot(self, name: str) -> Any:
        """Object held by slot ``name``; None for an unset sub-form slot."""
        if name not in self.get_store():
            raise KeyError(f"{type(self).__name__} has no slot named '{name}'.")
        return self._slots.get(name)

    def set_slot(self, name: str, value: Any) -> None:
        if name not in self.get_store():
            raise KeyError(f"{type(self).__name__} has no slot named '{name}'.")
        self._slots[name] = value

    def slots(self) -> Dict[str, Any]:
        return dict(self._slots)

    @property
    def persisted(self) -> bool:
        return self._persisted

    @property
    def action(self) -> str:
        """Submit action name for templates: ``edit`` or ``create``."""
        return "edit" if self._persisted else "create"

    # Params

    def set_params(self, params: Union[Mapping, NestedParams], slot_name: Optional[str] = None) -> None:
        """
        Assign params onto the composed slots.

        Args:
            params: Decoded nested mapping or an already built NestedParams
            slot_name: Routing context; None routes from the form root
        """
        ParamRouter(self).route(build_param_tree(params), slot_name)

    # Validation

    def full_clean(self):
        """Clean root fields, check presence rules, then validate every slot."""
        super().full_clean()
        if not self.is_bound:
            return
        self._check_presence_rules()
        self._slots_valid = ValidationAggregator(self).run()

    def is_valid(self) -> bool:
        return super().is_valid() and self._slots_valid

    def validate(self) -> bool:
        """Force a fresh validation pass and return the outcome."""
        self._errors = None
        return self.is_valid()

    def append_errors(self, field: str, messages: Iterable[str]) -> None:
        """Append messages for ``field`` to the error collection, keeping duplicates."""
        if field not in self._errors:
            if field == NON_FIELD_ERRORS:
                self._errors[field] = self.error_class(error_class="nonfield")
            else:
                self._errors[field] = self.error_class()
        self._errors[field].extend(str(message) for message in messages)

    def error_messages(self) -> Dict[str, List[str]]:
        """Plain ``{field: [messages]}`` copy of the last validation pass, without triggering one."""
        if self._errors is None:
            return {}
        return {field: [str(message) for message in messages] for field, messages in self._errors.items()}

    def _check_presence_rules(self) -> None:
        required_message = forms.Field.default_error_messages["required"]
        for rule in self.get_store().presence_rules():
            target = self.slot(rule.slot)
            if target is None:
                continue
            if getattr(target, rule.field, None) in EMPTY_VALUES:
                self.append_errors(rule.field, [required_message])

    # Submission

    def submit(self, params: Union[Mapping, NestedParams]) -> bool:
        """
        Route params, validate the whole tree and save it when valid.

        Args:
            params: Decoded nested mapping of submitted values

        Returns:
            bool: True when the form was valid and saved
        """
        self.params = params
        self.run_hook("before_submit")

        if get_setting("LOG_PARAM_VALUES"):
            logger.debug(
                "Submitting composite form",
                form=type(self).__name__,
                params=log_safe_output(params, max_string_len=get_setting("LOG_VALUE_MAX_LENGTH")),
            )

        self.set_params(params)

        self._transition(SubmissionState.VALIDATING)
        if not self.validate():
            self._transition(SubmissionState.INVALID)
            self._transition(SubmissionState.REJECTED)
            logger.info(
                "Composite form rejected",
                form=type(self).__name__,
                action=self.action,
                error_fields=sorted(self._errors),
            )
            return False

        self._transition(SubmissionState.VALID)
        self.save()
        self._transition(SubmissionState.SAVED)
        return True

    def _transition(self, state: SubmissionState) -> None:
        logger.debug("Submission state changed", form=type(self).__name__, state=state.value)
        self.submission_state = state

    def save(self):
        """
        Save sub-forms, then the primary model.

        Raises:
            ValueError: If the form does not validate
        """
        if not self.is_valid():
            raise ValueError(
                f"The {type(self).__name__} could not be saved because the data didn't validate."
            )
        return SaveOrchestrator(self).run()

    # Rendering helpers

    def field_for_attribute(self, name: str) -> Optional[Any]:
        """
        Django model field backing a delegated attribute.

        The primary model slot is searched first, then the other model slots
        that allow ``name``.
        """
        store = self.get_store()
        entries = sorted(
            (entry for entry in store.model_entries() if name in entry.fields),
            key=lambda entry: entry.name != self.get_form_name(),
        )
        for entry in entries:
            field = model_field(entry.resolve(), name)
            if field is not None:
                return field
        return None

    def relation_for(self, name: str) -> Optional[Any]:
        """Relational field ``name`` on the primary model, or None."""
        primary = self.get_store().get(self.get_form_name())
        if primary is None or primary.kind != MODEL:
            return None
        field = model_field(primary.resolve(), name)
        if field is not None and field.is_relation:
            return field
        return None

    def __repr__(self) -> str:
        return f"<{type(self).__name__} action={self.action} slots={list(self.get_store().entries)}>"
