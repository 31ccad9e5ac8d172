"""
Class-body delegation declarations and the descriptors they turn into.

    class OrderForm(CompositeForm):
        order = DelegateModel(Order, fields=["total", "status"])
        shipping = DelegateForm(ShippingForm, source="shipping_info")

The store metaclass collects the declarations, feeds them to a
FormStoreBuilder and replaces them with SlotAccessor descriptors.
"""
from typing import Any, Iterable, Optional, Union

from .exceptions import DelegationDeclarationError


class Delegation:
    """Base class for delegation declarations; keeps declaration order."""

    creation_counter = 0

    def __init__(self, slot: Optional[str] = None):
        self.slot = slot
        self.creation_counter = Delegation.creation_counter
        Delegation.creation_counter += 1

    def contribute_to_builder(self, builder, attr_name: str) -> None:
        raise NotImplementedError


class DelegateModel(Delegation):
    """
    Delegate ``fields`` to a model slot.

    The slot name is the attribute name unless ``slot`` is given, which lets
    several declarations extend the same slot:

        order = DelegateModel(Order, fields=["total"])
        order_status = DelegateModel(Order, fields=["status"], slot="order")
    """

    def __init__(self, model: Union[type, str], fields: Iterable[str] = (), slot: Optional[str] = None):
        super().__init__(slot)
        if model is None:
            raise DelegationDeclarationError("DelegateModel requires a model class or 'app_label.Model' string.")
        if isinstance(fields, str):
            fields = (fields,)
        self.model = model
        self.fields = tuple(fields)

    def contribute_to_builder(self, builder, attr_name: str) -> None:
        builder.delegate_model(self.fields, self.slot or attr_name, self.model)


class DelegateForm(Delegation):
    """
    Delegate a nested params key to a sub-form.

    ``source`` is the attribute read from the parent domain object to build
    the sub-form; it defaults to the slot name.
    """

    def __init__(self, form: Union[type, str], source: Optional[str] = None, slot: Optional[str] = None):
        super().__init__(slot)
        if form is None:
            raise DelegationDeclarationError("DelegateForm requires a CompositeForm subclass or its class name.")
        self.form = form
        self.source = source

    def contribute_to_builder(self, builder, attr_name: str) -> None:
        builder.delegate_form(self.slot or attr_name, self.form, source=self.source)


class SlotAccessor:
    """Reads and writes one named slot of a composite form instance."""

    def __init__(self, name: str):
        self.name = name

    def __get__(self, instance, owner=None) -> Any:
        if instance is None:
            return self
        return instance.slot(self.name)

    def __set__(self, instance, value: Any) -> None:
        instance.set_slot(self.name, value)

    def __repr__(self) -> str:
        return f"<SlotAccessor {self.name}>"


class DelegatedAttribute:
    """Read-through of a delegated model field: ``form.total`` -> ``form.order.total``."""

    def __init__(self, slot: str, field: str):
        self.slot = slot
        self.field = field

    def __get__(self, instance, owner=None) -> Any:
        if instance is None:
            return self
        target = instance.slot(self.slot)
        return getattr(target, self.field, None) if target is not None else None

    def __repr__(self) -> str:
        return f"<DelegatedAttribute {self.slot}.{self.field}>"
