"""Domain models for driver and delivery records."""

from dataclasses import dataclass, field
from typing import Any


@dataclass(slots=True, frozen=True)
class Driver:
    """A volunteer driver and the number of boxes their vehicle carries."""

    name: str
    email: str
    capacity: int
    raw: dict = field(default_factory=dict, compare=False, repr=False)


@dataclass(slots=True, frozen=True)
class Delivery:
    """A client delivery of a number of boxes to a single address."""

    client_name: str
    address: str
    phone: str
    quantity: int
    order: Any
    notes: str
    raw: dict = field(default_factory=dict, compare=False, repr=False)
