"""Routing domain models."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List

from ...models.domain import Delivery, Driver

UNASSIGNED_DELIVERY = "unassigned-delivery"
UNASSIGNED_DRIVER = "unassigned-driver"


@dataclass(slots=True)
class DriverState:
    """Working accumulator for one driver during a single allocation pass."""

    driver: Driver
    deliveries: List[Delivery] = field(default_factory=list)
    remaining_capacity: int = field(init=False)

    def __post_init__(self) -> None:
        self.remaining_capacity = self.driver.capacity

    @property
    def delivery_count(self) -> int:
        return len(self.deliveries)

    def can_take(self, delivery: Delivery, max_deliveries: int) -> bool:
        return self.remaining_capacity >= delivery.quantity and self.delivery_count < max_deliveries

    def assign(self, delivery: Delivery) -> None:
        self.deliveries.append(delivery)
        self.remaining_capacity -= delivery.quantity


@dataclass(slots=True)
class Route:
    """One output row: an assigned delivery, an unassigned delivery or an idle driver.

    ``route`` is the route number for assigned rows, otherwise one of the
    ``UNASSIGNED_DELIVERY`` / ``UNASSIGNED_DRIVER`` markers.
    """

    route: int | str
    driver_name: str | None = None
    driver_email: str | None = None
    capacity: int | None = None
    remaining_capacity: int | None = None
    client_name: str | None = None
    address: str | None = None
    phone: str | None = None
    quantity: int | None = None
    order: Any = None
    notes: str | None = None

    @property
    def is_assigned(self) -> bool:
        return isinstance(self.route, int)


@dataclass(slots=True)
class AllocationSummary:
    drivers: int
    deliveries: int
    routes: int
    assigned_deliveries: int
    unassigned_deliveries: int
    unassigned_drivers: int
    assigned_boxes: int
    unassigned_boxes: int


@dataclass(slots=True)
class AllocationResult:
    routes: List[Route]
    summary: AllocationSummary
