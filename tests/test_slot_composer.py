"""
Unit tests for composing slots from a domain object.
"""

import pytest

from nestedforms import CompositeForm, DelegateForm, DelegateModel, TargetLookupError

from tests.fakes import (
    FakeAudit,
    FakeBillingForm,
    FakeCarrierForm,
    FakeOrder,
    FakeOrderForm,
    FakeShipping,
    FakeShippingForm,
)


def test_matching_domain_object_is_attached_by_identity(fake_order):
    form = FakeOrderForm(fake_order)
    assert form.order is fake_order
    assert form.slot("order") is fake_order


def test_non_matching_model_slots_get_fresh_instances(fake_order):
    form = FakeOrderForm(fake_order)
    assert isinstance(form.audit, FakeAudit)
    assert form.audit is not fake_order


def test_no_domain_object_builds_fresh_models_and_leaves_sub_forms_unset():
    form = FakeOrderForm()
    assert isinstance(form.order, FakeOrder)
    assert form.order.pk is None
    assert form.shipping is None
    assert form.billing is None


def test_sub_forms_compose_recursively_from_source_attributes(fake_order):
    form = FakeOrderForm(fake_order)
    assert isinstance(form.shipping, FakeShippingForm)
    assert form.shipping.shipping is fake_order.shipping_info
    assert isinstance(form.shipping.carrier, FakeCarrierForm)
    assert form.shipping.carrier.carrier is fake_order.shipping_info.carrier_info


def test_lazy_sub_form_reference_is_resolved(fake_order):
    form = FakeOrderForm(fake_order)
    assert isinstance(form.billing, FakeBillingForm)
    assert form.billing.billing is fake_order.billing_info


def test_missing_source_attribute_leaves_slot_unset_without_error():
    order = FakeOrder(pk=3, shipping_info=FakeShipping(address="x"))
    form = FakeOrderForm(order)
    assert form.billing is None
    assert form.shipping is not None
    # shipping has no carrier_info attribute
    assert form.shipping.carrier is None


def test_persisted_reflects_identity_at_construction(fake_order, new_fake_order):
    assert FakeOrderForm(fake_order).persisted is True
    assert FakeOrderForm(fake_order).action == "edit"
    assert FakeOrderForm(new_fake_order).persisted is False
    assert FakeOrderForm().persisted is False
    assert FakeOrderForm().action == "create"


def test_persisted_treats_empty_identity_as_new():
    assert FakeOrderForm(FakeOrder(pk="")).persisted is False


def test_persisted_uses_configured_identity_attribute(settings):
    settings.NESTED_FORMS = {"IDENTITY_ATTRIBUTE": "uuid"}
    assert FakeOrderForm(FakeOrder(pk=1)).persisted is False
    assert FakeOrderForm(FakeOrder(uuid="abc")).persisted is True


def test_unknown_lazy_form_fails_at_construction():
    class DanglingForm(CompositeForm):
        dangling = DelegateModel(FakeOrder, fields=["total"])
        extra = DelegateForm("NoSuchCompositeForm")

    with pytest.raises(TargetLookupError):
        DanglingForm()


def test_unknown_lazy_model_fails_at_construction():
    class MissingModelForm(CompositeForm):
        missing_model = DelegateModel("testapp.DoesNotExist", fields=["x"])

    with pytest.raises(TargetLookupError):
        MissingModelForm()


def test_on_initialize_hook_runs_after_composition(fake_order):
    seen = []

    class HookedOrderForm(FakeOrderForm):
        def on_initialize(self):
            seen.append((self.order, self.shipping is not None))

    HookedOrderForm(fake_order)
    assert seen == [(fake_order, True)]


def test_slots_mapping_and_unknown_slot():
    form = FakeOrderForm()
    assert set(form.slots()) == {"shipping", "billing", "order", "audit"}
    with pytest.raises(KeyError):
        form.slot("nope")
