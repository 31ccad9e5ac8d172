"""
Integration tests against real Django models and the test database.
"""

from decimal import Decimal

import pytest

from tests.testapp.forms import CustomerForm, CustomerOrderForm, OrderForm
from tests.testapp.models import Customer, Order, Shipping


@pytest.fixture
def order_with_shipping(db):
    shipping = Shipping.objects.create(address="1 Main St", city="Berlin")
    return Order.objects.create(total=Decimal("10.00"), status="new", shipping_info=shipping)


@pytest.mark.django_db
def test_edit_updates_order_and_nested_shipping(order_with_shipping):
    form = OrderForm(order_with_shipping)
    assert form.persisted is True

    assert form.submit({
        "total": "12.50",
        "status": "paid",
        "shipping": {"address": "2 Side St", "city": "Hamburg", "id": 999},
    }) is True

    order = Order.objects.get(pk=order_with_shipping.pk)
    assert order.total == Decimal("12.50")
    assert order.status == "paid"
    assert order.shipping_info.address == "2 Side St"
    assert order.shipping_info.city == "Hamburg"
    assert Shipping.objects.count() == 1


@pytest.mark.django_db
def test_create_saves_shipping_first_and_links_it():
    order = Order(shipping_info=Shipping())
    form = OrderForm(order)
    assert form.persisted is False

    assert form.submit({"total": "3.00", "status": "new", "shipping": {"address": "Dock 4"}}) is True

    saved = Order.objects.get()
    assert saved.shipping_info is not None
    assert saved.shipping_info.address == "Dock 4"
    assert saved.shipping_info_id == Shipping.objects.get().pk


@pytest.mark.django_db
def test_invalid_nested_data_leaves_database_untouched(order_with_shipping):
    form = OrderForm(order_with_shipping)
    assert form.submit({"status": "", "shipping": {"address": ""}}) is False
    assert form.error_messages() == {
        "address": ["This field is required.", "This field cannot be blank."],
        "status": ["This field is required.", "This field cannot be blank."],
    }
    order = Order.objects.get(pk=order_with_shipping.pk)
    assert order.status == "new"
    assert order.shipping_info.address == "1 Main St"


@pytest.mark.django_db
def test_model_field_validation_messages_are_reported():
    form = OrderForm(Order(status="new"))
    form.set_params({"total": "not-a-number"})
    assert form.validate() is False
    assert form.error_messages()["total"] == ["“not-a-number” value must be a decimal number."]


@pytest.mark.django_db
def test_subclass_form_saves_inherited_and_own_fields(order_with_shipping):
    form = CustomerOrderForm(order_with_shipping)
    assert form.submit({
        "total": "7.00",
        "notes": "leave at the door",
        "customer": {"name": "Ada"},
        "accept_terms": "on",
    }) is True

    order = Order.objects.get(pk=order_with_shipping.pk)
    assert order.total == Decimal("7.00")
    assert order.notes == "leave at the door"
    # non-primary model slots are validated but not saved
    assert form.customer.name == "Ada"
    assert Customer.objects.count() == 0


@pytest.mark.django_db
def test_lazy_model_slot_contributes_presence_rules(order_with_shipping):
    form = CustomerOrderForm(order_with_shipping)
    assert form.submit({"status": "paid"}) is False
    assert form.error_messages()["name"][0] == "This field is required."


def test_field_for_attribute_prefers_the_primary_model():
    field = CustomerOrderForm(Order()).field_for_attribute("notes")
    assert field is Order._meta.get_field("notes")
    assert CustomerOrderForm(Order()).field_for_attribute("nickname") is Customer._meta.get_field("nickname")
    assert CustomerOrderForm(Order()).field_for_attribute("missing") is None


def test_relation_for_returns_relational_fields_only():
    form = CustomerOrderForm(Order())
    assert form.relation_for("customer") is Order._meta.get_field("customer")
    assert form.relation_for("status") is None
    assert form.relation_for("missing") is None


def test_relation_for_finds_reverse_relations():
    form = CustomerForm()
    assert form.relation_for("orders").related_model is Order
