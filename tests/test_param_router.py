"""
Unit tests for routing submitted params onto composed slots.
"""

import pytest
from django import forms

from nestedforms import CompositeForm, DelegateModel, NestedParams, ScalarParam, build_param_tree

from tests.fakes import FakeOrder, FakeOrderForm


def test_flat_payload_routes_into_primary_model_and_sub_form(fake_order):
    form = FakeOrderForm(fake_order)
    form.set_params({
        "total": 10,
        "status": "new",
        "shipping": {"address": "X"},
        "hacked_field": "Y",
    })
    assert fake_order.total == 10
    assert fake_order.status == "new"
    assert form.shipping.shipping.address == "X"
    assert not hasattr(fake_order, "hacked_field")
    assert not hasattr(form, "hacked_field")


def test_model_slot_only_accepts_allow_listed_fields(fake_order):
    form = FakeOrderForm(fake_order)
    form.set_params({"order": {"total": 25, "pk": 99, "is_admin": True}})
    assert fake_order.total == 25
    assert fake_order.pk == 7
    assert not hasattr(fake_order, "is_admin")


def test_sub_form_allow_list_applies_inside_nested_params(fake_order):
    form = FakeOrderForm(fake_order)
    form.set_params({"shipping": {"address": "Y", "pk": 1000, "carrier": {"code": "DHL", "secret": "s"}}})
    shipping = form.shipping.shipping
    assert shipping.address == "Y"
    assert shipping.pk is None
    carrier = form.shipping.carrier.carrier
    assert carrier.code == "DHL"
    assert not hasattr(carrier, "secret")


def test_non_primary_model_slot_receives_nested_params(fake_order):
    form = FakeOrderForm(fake_order)
    form.set_params({"audit": {"reason": "manual", "total": 1}})
    assert form.audit.reason == "manual"
    assert not hasattr(form.audit, "total")
    assert fake_order.total == 10


def test_setting_params_twice_is_idempotent(fake_order):
    params = {"total": 42, "shipping": {"address": "Z", "city": "Oslo"}, "junk": 1}
    form = FakeOrderForm(fake_order)
    form.set_params(params)
    once = (fake_order.total, form.shipping.shipping.address, form.shipping.shipping.city)
    form.set_params(params)
    twice = (fake_order.total, form.shipping.shipping.address, form.shipping.shipping.city)
    assert once == twice == (42, "Z", "Oslo")


def test_params_for_unset_sub_form_are_dropped():
    form = FakeOrderForm()
    form.set_params({"shipping": {"address": "nowhere"}, "status": "new"})
    assert form.shipping is None
    assert form.order.status == "new"


def test_form_property_setter_overrides_model_assignment():
    class DiscountOrderForm(CompositeForm):
        class Meta:
            form_name = "order"

        order = DelegateModel(FakeOrder, fields=["total", "status"])

        @property
        def total(self):
            return self.order.total

        @total.setter
        def total(self, value):
            self.order.total = round(float(value) * 0.9, 2)

    form = DiscountOrderForm()
    form.set_params({"order": {"total": "100", "status": "new"}})
    assert form.order.total == 90.0
    assert form.order.status == "new"

    form.set_params({"total": "50"})
    assert form.order.total == 45.0


def test_root_scalars_go_to_declared_form_fields_and_setters():
    class SignupForm(CompositeForm):
        class Meta:
            form_name = "order"

        order = DelegateModel(FakeOrder, fields=["status"])
        accept_terms = forms.BooleanField(required=True)

        def __init__(self, *args, **kwargs):
            self.coupon = None
            super().__init__(*args, **kwargs)

        @property
        def coupon_code(self):
            return self.coupon

        @coupon_code.setter
        def coupon_code(self, value):
            self.coupon = value.upper()

    form = SignupForm()
    form.set_params({"accept_terms": "on", "coupon_code": "spring", "status": "new"})
    assert form.data == {"accept_terms": "on"}
    assert form.coupon == "SPRING"
    assert form.order.status == "new"


def test_nested_value_for_plain_field_goes_to_form_setter():
    class MetadataForm(CompositeForm):
        class Meta:
            form_name = "order"

        order = DelegateModel(FakeOrder, fields=["status"])

        def __init__(self, *args, **kwargs):
            self.metadata_value = None
            super().__init__(*args, **kwargs)

        @property
        def metadata(self):
            return self.metadata_value

        @metadata.setter
        def metadata(self, value):
            self.metadata_value = value

    form = MetadataForm()
    form.set_params({"metadata": {"source": "web", "tags": ["a"]}, "other": {"x": 1}})
    assert form.metadata == {"source": "web", "tags": ["a"]}
    assert not hasattr(form, "other")


def test_delegated_attribute_reads_through_to_model(fake_order):
    form = FakeOrderForm(fake_order)
    form.set_params({"total": 12})
    assert form.total == 12
    assert form.reason is None


def test_build_param_tree_wraps_scalars_and_mappings():
    tree = build_param_tree({"a": 1, "b": {"c": [1, 2]}, 3: "x"})
    assert tree.items["a"] == ScalarParam(1)
    assert isinstance(tree.items["b"], NestedParams)
    assert tree.items["b"].items["c"] == ScalarParam([1, 2])
    assert tree.items["3"] == ScalarParam("x")
    assert tree.to_python() == {"a": 1, "b": {"c": [1, 2]}, "3": "x"}


def test_build_param_tree_rejects_non_mappings():
    with pytest.raises(TypeError):
        build_param_tree(["total", 1])


def test_query_dict_params_use_last_value():
    from django.http import QueryDict

    form = FakeOrderForm()
    form.set_params(QueryDict("status=new&status=paid&total=3"))
    assert form.order.status == "paid"
    assert form.order.total == "3"
