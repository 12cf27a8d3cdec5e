"""Shop: customers, invoices and orders referencing the catalog."""

from typing import TYPE_CHECKING, Optional

from tests.fixtures.base import Comparable
from tests.fixtures.catalog import Money, Product

if TYPE_CHECKING:
    from tests.fixtures.catalog import Tag


class Email(Comparable):
    def __init__(self, address: str):
        self.address = address

    def __str__(self) -> str:
        return self.address


class Address(Comparable):
    def __init__(self, street: str, city: str, postcode: Optional[str] = None):
        self.street = street
        self.city = city
        self.postcode = postcode

    def get_street(self) -> str:
        return self.street

    def get_city(self) -> str:
        return self.city

    def get_postcode(self) -> Optional[str]:
        return self.postcode


class Customer(Comparable):
    __tablename__ = "customers"

    def __init__(self, id: int, name: str, email: Email, address: Address, active: bool = True):
        self.id = id
        self.name = name
        self.email = email
        self.address = address
        self.active = active

    def get_id(self) -> int:
        return self.id

    def get_name(self) -> str:
        return self.name

    def get_email(self) -> Email:
        return self.email

    def get_address(self) -> Address:
        return self.address

    def is_active(self) -> bool:
        return self.active


class Invoice(Comparable):
    __tablename__ = "invoices"

    def __init__(self, id: int, amount: float, customer: Customer, paid: bool = False):
        self.id = id
        self.amount = amount
        self.customer = customer
        self.paid = paid

    def get_id(self) -> int:
        return self.id

    def get_amount(self) -> float:
        return self.amount

    def get_customer(self) -> Customer:
        return self.customer

    def is_paid(self) -> bool:
        return self.paid


class LineItem(Comparable):
    def __init__(self, product: Product, quantity: int, price: Money):
        self.product = product
        self.quantity = quantity
        self.price = price

    def get_product(self) -> Product:
        return self.product

    def get_quantity(self) -> int:
        return self.quantity

    def get_price(self) -> Money:
        return self.price


class Order(Comparable):
    """A customer's order.

    :param LineItem[] lines: ordered products
    :param tuple<Tag> tags: labels attached by staff
    """

    __tablename__ = "orders"

    def __init__(self, id: str, customer: Customer, lines: list, tags: tuple = (), notes: Optional[str] = None):
        self.id = id
        self.customer = customer
        self.lines = list(lines or ())
        self.tags = list(tags or ())
        self.notes = notes

    def get_id(self) -> str:
        return self.id

    def get_customer(self) -> Customer:
        return self.customer

    def get_lines(self) -> list:
        return self.lines

    def get_tags(self) -> list:
        return self.tags

    def get_notes(self) -> Optional[str]:
        return self.notes


class Wishlist(Comparable):
    def __init__(self, id: int, owner: Customer, products: list[Product]):
        self.id = id
        self.owner = owner
        self.products = list(products)

    def get_id(self) -> int:
        return self.id

    def get_owner(self) -> Customer:
        return self.owner

    def get_products(self) -> list[Product]:
        return self.products


class Basket(Comparable):
    def __init__(self, id: int, *products: Product):
        self.id = id
        self.products = list(products)

    def get_id(self) -> int:
        return self.id

    def get_products(self) -> list[Product]:
        return self.products


class Subscription(Comparable):
    def __init__(self, id: int, customer: Optional[Customer], trial: bool, *, plan: str = "basic"):
        self.id = id
        self.customer = customer
        self.trial = trial
        self.plan = plan

    def get_id(self) -> int:
        return self.id

    def get_customer(self) -> Optional[Customer]:
        return self.customer

    def has_trial(self) -> bool:
        return self.trial

    def get_plan(self) -> str:
        return self.plan


class ShippingLabel(Comparable):
    __accessors__ = {"weight": "weight_in_kg"}

    def __init__(self, id: int, weight: float):
        self.id = id
        self.weight = weight

    def get_id(self) -> int:
        return self.id

    def weight_in_kg(self) -> float:
        return self.weight

    def weight_in_grams(self) -> float:
        return self.weight * 1000


class ParcelCode(Comparable):
    def __init__(self, value: str):
        self.value = value

    def __str__(self) -> str:
        return self.value


class Parcel(Comparable):
    __tablename__ = "parcels"

    def __init__(self, id: ParcelCode, weight: float):
        self.id = id
        self.weight = weight

    def get_id(self) -> ParcelCode:
        return self.id

    def get_weight(self) -> float:
        return self.weight


class Shipment(Comparable):
    __tablename__ = "shipments"

    def __init__(self, id: int, parcel: Parcel, extras: list[Parcel]):
        self.id = id
        self.parcel = parcel
        self.extras = list(extras)

    def get_id(self) -> int:
        return self.id

    def get_parcel(self) -> Parcel:
        return self.parcel

    def get_extras(self) -> list[Parcel]:
        return self.extras
