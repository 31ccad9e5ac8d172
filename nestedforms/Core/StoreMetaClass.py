import re
from typing import List, Tuple

from django.forms.forms import DeclarativeFieldsMetaclass

from .Delegations import DelegatedAttribute, Delegation, SlotAccessor
from .FormStore import FormStoreBuilder, register_form
from .exceptions import DelegationDeclarationError

# Instance attributes set by Django's BaseForm.__init__ and CompositeForm.__init__
RESERVED_NAMES = frozenset({
    "data", "files", "auto_id", "prefix", "initial", "error_class", "label_suffix",
    "empty_permitted", "fields", "is_bound", "renderer", "use_required_attribute",
    "cleaned_data", "instance", "params", "submission_state",
})


def default_form_name(class_name: str) -> str:
    """``ShippingInfoForm`` -> ``shipping_info``."""
    base = class_name[:-len("Form")] if class_name.endswith("Form") and class_name != "Form" else class_name
    return re.sub(r"(?<!^)(?=[A-Z])", "_", base).lower()


class StoreMetaClass(DeclarativeFieldsMetaclass):
    """
    Metaclass for composite forms that builds the delegation store.

    **What it does:**
    1. Pulls every DelegateModel / DelegateForm declaration out of the class body
    2. Feeds them, in declaration order, to a FormStoreBuilder
    3. Merges the store of each composite parent (the root CompositeForm excluded)
    4. Freezes the result into ``cls._store`` and resolves ``cls._form_name``
    5. Installs a SlotAccessor per slot and a DelegatedAttribute per delegated field
    6. Registers the class so lazy string references can find it
    """

    def __new__(mcls, name, bases, attrs):
        declarations: List[Tuple[str, Delegation]] = [
            (key, value) for key, value in attrs.items() if isinstance(value, Delegation)
        ]
        for key, _ in declarations:
            attrs.pop(key)
        declarations.sort(key=lambda item: item[1].creation_counter)

        cls = super().__new__(mcls, name, bases, attrs)

        parents = [base for base in bases if isinstance(base, StoreMetaClass)]
        cls._root_form = not parents

        meta = attrs.get("Meta")
        declared_form_name = getattr(meta, "form_name", None)
        if declared_form_name:
            cls._declared_form_name = declared_form_name
        cls._form_name = getattr(cls, "_declared_form_name", None) or default_form_name(name)

        builder = FormStoreBuilder(name)
        for attr_name, declaration in declarations:
            declaration.contribute_to_builder(builder, attr_name)
        for parent in parents:
            if not parent._root_form:
                builder.merge_parent(parent._store)
        cls._store = builder.build()

        mcls._install_accessors(cls)
        if not cls._root_form:
            register_form(cls)
        return cls

    @staticmethod
    def _install_accessors(cls) -> None:
        for entry in cls._store:
            if isinstance(getattr(cls, entry.name, None), SlotAccessor):
                continue
            if entry.name in RESERVED_NAMES or hasattr(cls, entry.name) or entry.name in cls.base_fields:
                raise DelegationDeclarationError(
                    f"{cls.__name__}.{entry.name} clashes with an existing form attribute; pick another slot name."
                )
            setattr(cls, entry.name, SlotAccessor(entry.name))

        for entry in cls._store.model_entries():
            for field in sorted(entry.fields):
                if field in RESERVED_NAMES or field in cls.base_fields or field in cls._store:
                    continue
                if hasattr(cls, field):
                    continue
                setattr(cls, field, DelegatedAttribute(entry.name, field))
