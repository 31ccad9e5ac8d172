"""
Form Store Module

The store is the per-form-type schema: a read-only mapping from slot name to
a delegation entry. It is built once, when the form class is created, by
``FormStoreBuilder`` and never mutated afterwards.

Architecture (SRP-compliant):
- ModelEntry / FormEntry: immutable records describing one slot
- FormStoreBuilder: declaration-time accumulation and parent merging
- FormStore: the frozen result shared by every instance of a form type
"""
from dataclasses import dataclass, replace
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Dict, FrozenSet, Iterable, Iterator, List, Optional, Tuple, Type, Union

import structlog
from django.apps import apps
from django.core.exceptions import FieldDoesNotExist

from .exceptions import DelegationDeclarationError, TargetLookupError

if TYPE_CHECKING:
    from .CompositeForm import CompositeForm

logger = structlog.get_logger(__name__)

MODEL = "model"
FORM = "form"

# Registered composite form classes, by class name, for lazy string targets
_form_registry: Dict[str, Type["CompositeForm"]] = {}


def register_form(form_class: Type["CompositeForm"]) -> None:
    """Make a composite form class resolvable by its class name."""
    name = form_class.__name__
    existing = _form_registry.get(name)
    if existing is not None and existing is not form_class:
        logger.warning(
            "Replacing registered composite form",
            form_name=name,
            previous=f"{existing.__module__}.{existing.__qualname__}",
        )
    _form_registry[name] = form_class


def get_registered_form(name: str) -> Type["CompositeForm"]:
    try:
        return _form_registry[name]
    except KeyError:
        raise TargetLookupError(f"No composite form named '{name}' is registered.") from None


@dataclass(frozen=True)
class PresenceRule:
    """A required field mirrored from a delegated model onto the form."""
    field: str
    slot: str


@dataclass(frozen=True)
class ModelEntry:
    """A directly validated, directly persisted delegation target."""
    name: str
    target: Union[type, str]
    fields: FrozenSet[str]

    kind = MODEL

    def resolve(self) -> type:
        """Return the model class, looking lazy ``"app_label.Model"`` strings up in the app registry."""
        if not isinstance(self.target, str):
            return self.target
        try:
            return apps.get_model(self.target)
        except (LookupError, ValueError) as e:
            raise TargetLookupError(
                f"Slot '{self.name}' delegates to unknown model '{self.target}': {e}"
            ) from e

    def with_fields(self, fields: Iterable[str]) -> "ModelEntry":
        return replace(self, fields=self.fields | frozenset(fields))


@dataclass(frozen=True)
class FormEntry:
    """A recursively composed, validated and persisted sub-form."""
    name: str
    target: Union[type, str]
    source: str

    kind = FORM

    def resolve(self) -> Type["CompositeForm"]:
        if isinstance(self.target, str):
            return get_registered_form(self.target)
        return self.target

    @property
    def model_name(self) -> str:
        """The sub-form's primary model slot, used as its routing context."""
        return self.resolve().get_form_name()


StoreEntry = Union[ModelEntry, FormEntry]


def presence_rules_for(model: Any, fields: Iterable[str], slot: str) -> List[PresenceRule]:
    """
    Mirror presence requirements of a Django model onto delegated fields.

    Only fields that exist on the model and have ``blank=False`` produce a
    rule. Targets without Django ``_meta`` produce none.

    Args:
        model: The delegated model class
        fields: Delegated field names
        slot: The Model slot the fields live on

    Returns:
        list: PresenceRule for each required field, in ``fields`` order
    """
    meta = getattr(model, "_meta", None)
    if meta is None:
        return []
    rules = []
    for field_name in fields:
        try:
            model_field = meta.get_field(field_name)
        except FieldDoesNotExist:
            continue
        if getattr(model_field, "blank", True) is False and not getattr(model_field, "auto_created", False):
            rules.append(PresenceRule(field=field_name, slot=slot))
    return rules


class FormStore:
    """
    Immutable slot schema for one form type.

    Iteration yields entries in declaration order: the form's own entries
    first, then entries inherited from the parent form.
    """

    def __init__(self, entries: Dict[str, StoreEntry], presence_rules: Tuple[PresenceRule, ...] = ()):
        self._entries = MappingProxyType(dict(entries))
        self._presence_rules = tuple(presence_rules)

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __iter__(self) -> Iterator[StoreEntry]:
        return iter(self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"<FormStore {list(self._entries)}>"

    @property
    def entries(self) -> MappingProxyType:
        return self._entries

    def get(self, name: Optional[str]) -> Optional[StoreEntry]:
        if name is None:
            return None
        return self._entries.get(name)

    def model_entries(self) -> List[ModelEntry]:
        return [entry for entry in self if entry.kind == MODEL]

    def form_entries(self) -> List[FormEntry]:
        return [entry for entry in self if entry.kind == FORM]

    def presence_rules(self) -> List[PresenceRule]:
        """
        Presence rules for every Model entry.

        Rules for class targets were computed at declaration time; lazy
        string targets are resolved here, on first validation.
        """
        rules = list(self._presence_rules)
        for entry in self.model_entries():
            if isinstance(entry.target, str):
                rules.extend(presence_rules_for(entry.resolve(), sorted(entry.fields), entry.name))
        return rules


class FormStoreBuilder:
    """
    Accumulates delegation declarations for one form type.

    Used once per form class by the store metaclass; ``build()`` freezes the
    result into a ``FormStore``.
    """

    def __init__(self, form_name: str = ""):
        self._form_name = form_name
        self._entries: Dict[str, StoreEntry] = {}
        self._presence_rules: List[PresenceRule] = []

    def delegate_model(self, fields: Iterable[str], to: str, model: Union[type, str]) -> List[PresenceRule]:
        """
        Register or extend the Model entry ``to`` with ``fields``.

        Declaring the same slot again unions the field sets.

        Args:
            fields: Field names the slot accepts from params
            to: Slot name
            model: Model class or lazy ``"app_label.Model"`` reference

        Returns:
            list: Presence rules mirrored from the model for these fields
        """
        fields = list(fields)
        existing = self._entries.get(to)
        if existing is None:
            self._entries[to] = ModelEntry(name=to, target=model, fields=frozenset(fields))
        elif existing.kind != MODEL:
            raise DelegationDeclarationError(
                f"{self._form_name}.{to} is already delegated to a form; it cannot also delegate to a model."
            )
        else:
            if existing.target != model:
                raise DelegationDeclarationError(
                    f"{self._form_name}.{to} delegates to {existing.target!r}; "
                    f"redeclaring it with {model!r} is not allowed."
                )
            self._entries[to] = existing.with_fields(fields)

        if isinstance(model, str):
            return []
        rules = [
            rule for rule in presence_rules_for(model, fields, to)
            if rule not in self._presence_rules
        ]
        self._presence_rules.extend(rules)
        return rules

    def delegate_form(self, name: str, form: Union[type, str], source: Optional[str] = None) -> FormEntry:
        """
        Register a Form entry keyed by ``name``.

        The first declaration for a key wins.

        Args:
            name: Slot name (and the params key routed into the sub-form)
            form: CompositeForm subclass or its registered class name
            source: Attribute read from the parent domain object, defaults to ``name``
        """
        existing = self._entries.get(name)
        if existing is not None:
            if existing.kind != FORM:
                raise DelegationDeclarationError(
                    f"{self._form_name}.{name} is already delegated to a model; it cannot also delegate to a form."
                )
            return existing
        entry = FormEntry(name=name, target=form, source=source or name)
        self._entries[name] = entry
        return entry

    def merge_parent(self, parent_store: FormStore) -> None:
        """
        Fold a parent form type's store into this one.

        Model entries present on both sides get their field sets unioned; any
        other parent entry is copied in verbatim.
        """
        for parent_entry in parent_store:
            own = self._entries.get(parent_entry.name)
            if own is not None and own.kind != parent_entry.kind:
                raise DelegationDeclarationError(
                    f"{self._form_name}.{parent_entry.name} is a {own.kind} delegation "
                    f"but the parent form declares it as a {parent_entry.kind} delegation."
                )
            if own is not None and own.kind == MODEL:
                self._entries[own.name] = own.with_fields(parent_entry.fields)
                continue
            if own is not None and own != parent_entry:
                logger.warning(
                    "Parent form delegation replaces subclass delegation",
                    form_name=self._form_name,
                    slot=parent_entry.name,
                )
            self._entries[parent_entry.name] = parent_entry

        for rule in parent_store._presence_rules:
            if rule not in self._presence_rules:
                self._presence_rules.append(rule)

    def build(self) -> FormStore:
        return FormStore(self._entries, tuple(self._presence_rules))
