"""Annotations naming classes imported only for type checking."""

from __future__ import annotations

from typing import TYPE_CHECKING, Union

from tests.fixtures.base import Comparable

if TYPE_CHECKING:
    from tests.fixtures.catalog import Product, Tag


class Review(Comparable):
    __tablename__ = "reviews"

    def __init__(self, id: int, product: Product, stars: int, tags: list[Tag]):
        self.id = id
        self.product = product
        self.stars = stars
        self.tags = list(tags)

    def get_id(self) -> int:
        return self.id

    def get_product(self) -> Product:
        return self.product

    def get_stars(self) -> int:
        return self.stars

    def get_tags(self) -> list[Tag]:
        return self.tags


class Featured(Comparable):
    def __init__(self, id: int, product: Union[Product, None], tags: tuple[Tag, ...]):
        self.id = id
        self.product = product
        self.tags = list(tags)

    def get_id(self) -> int:
        return self.id

    def get_product(self) -> Union[Product, None]:
        return self.product

    def get_tags(self) -> list[Tag]:
        return self.tags


class Podium(Comparable):
    def __init__(self, id: int, places: tuple[Product, Product]):
        self.id = id
        self.places = places

    def get_id(self) -> int:
        return self.id

    def get_places(self) -> tuple[Product, Product]:
        return self.places
