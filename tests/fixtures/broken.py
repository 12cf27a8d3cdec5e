"""Classes whose constructors cannot be mapped."""

from typing import Union


class Untyped:
    def __init__(self, id: int, name):
        self.id = id
        self.name = name

    def get_id(self) -> int:
        return self.id

    def get_name(self):
        return self.name


class Undocumented:
    def __init__(self, id: int, items: list):
        self.id = id
        self.items = items

    def get_id(self) -> int:
        return self.id

    def get_items(self) -> list:
        return self.items


class NotAnArrayDoc:
    """:param Tag items: should have been Tag[]"""

    def __init__(self, id: int, items: list):
        self.id = id
        self.items = items

    def get_id(self) -> int:
        return self.id

    def get_items(self) -> list:
        return self.items


class Flag:
    def __init__(self, id: int, enabled: bool):
        self.id = id
        self.enabled = enabled

    def get_id(self) -> int:
        return self.id

    def get_enabled(self) -> bool:
        return self.enabled


class Nameless:
    def __init__(self, id: int, name: str):
        self.id = id
        self.name = name

    def get_id(self) -> int:
        return self.id


class WrongAccessor:
    __accessors__ = {"name": "label"}

    def __init__(self, id: int, name: str):
        self.id = id
        self.name = name

    def get_id(self) -> int:
        return self.id

    def get_name(self) -> str:
        return self.name


class Haunted:
    """:param Ghost[] ghosts: never defined anywhere"""

    def __init__(self, id: int, ghosts: list):
        self.id = id
        self.ghosts = ghosts

    def get_id(self) -> int:
        return self.id

    def get_ghosts(self) -> list:
        return self.ghosts


class Loose:
    def __init__(self, id: int, payload: dict):
        self.id = id
        self.payload = payload

    def get_id(self) -> int:
        return self.id

    def get_payload(self) -> dict:
        return self.payload


class Either:
    def __init__(self, id: int, value: Union[int, str]):
        self.id = id
        self.value = value

    def get_id(self) -> int:
        return self.id

    def get_value(self) -> Union[int, str]:
        return self.value


class Pair:
    def __init__(self, id: int, coordinates: tuple[int, str]):
        self.id = id
        self.coordinates = coordinates

    def get_id(self) -> int:
        return self.id

    def get_coordinates(self) -> tuple[int, str]:
        return self.coordinates


class Parent:
    def __init__(self, id: int, child: "Child"):
        self.id = id
        self.child = child

    def get_id(self) -> int:
        return self.id

    def get_child(self) -> "Child":
        return self.child


class Child:
    def __init__(self, id: int, parent: Parent):
        self.id = id
        self.parent = parent

    def get_id(self) -> int:
        return self.id

    def get_parent(self) -> Parent:
        return self.parent
