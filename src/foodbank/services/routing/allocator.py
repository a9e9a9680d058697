"""Greedy capacity-constrained allocation of deliveries to drivers.

Deliveries are offered to drivers largest first. Each delivery goes to the
first driver in input order that already has a route and still has room,
falling back to the first idle driver with room. Whenever an odd number of
drivers are active and some idle driver has room, active drivers are passed
over, which spreads work across the roster instead of piling it onto a few
routes.

Nothing is dropped: deliveries that fit nowhere and drivers that receive
nothing are both reported as marker rows in the result.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from ...models.domain import Delivery, Driver
from .models import (
    UNASSIGNED_DELIVERY,
    UNASSIGNED_DRIVER,
    AllocationResult,
    AllocationSummary,
    DriverState,
    Route,
)

logger = logging.getLogger(__name__)

MAX_DELIVERIES_PER_ROUTE = 3


def _is_valid_driver(driver: Driver) -> bool:
    return bool(driver.name and driver.name.strip())


def _is_valid_delivery(delivery: Delivery) -> bool:
    return bool(delivery.address and delivery.address.strip())


def select_driver(
    states: Sequence[DriverState],
    delivery: Delivery,
    max_deliveries: int = MAX_DELIVERIES_PER_ROUTE,
) -> Optional[DriverState]:
    """Pick the driver state that should receive ``delivery``, or ``None``."""
    candidates = [state for state in states if state.can_take(delivery, max_deliveries)]

    active_drivers = sum(1 for state in states if state.deliveries)
    if active_drivers % 2 == 1:
        idle = [state for state in candidates if not state.deliveries]
        if idle:
            candidates = idle

    best: Optional[DriverState] = None
    for state in candidates:
        # A driver already on the road beats an idle one; otherwise input order wins.
        if best is None or (not best.deliveries and state.deliveries):
            best = state
    return best


def _route_rows(route_number: int, state: DriverState) -> list[Route]:
    rows: list[Route] = []
    remaining = state.driver.capacity
    for delivery in state.deliveries:
        remaining -= delivery.quantity
        rows.append(
            Route(
                route=route_number,
                driver_name=state.driver.name,
                driver_email=state.driver.email,
                capacity=state.driver.capacity,
                remaining_capacity=remaining,
                client_name=delivery.client_name,
                address=delivery.address,
                phone=delivery.phone,
                quantity=delivery.quantity,
                order=delivery.order,
                notes=delivery.notes,
            )
        )
    return rows


def allocate(
    drivers: Sequence[Driver],
    deliveries: Sequence[Delivery],
    *,
    max_deliveries: int = MAX_DELIVERIES_PER_ROUTE,
) -> AllocationResult:
    """Assign deliveries to drivers and return the route rows plus a summary."""
    valid_drivers = [driver for driver in drivers if _is_valid_driver(driver)]
    valid_deliveries = [delivery for delivery in deliveries if _is_valid_delivery(delivery)]

    states = [DriverState(driver=driver) for driver in valid_drivers]

    # sorted() is stable, so equal quantities keep their input order.
    ordered = sorted(enumerate(valid_deliveries), key=lambda item: -item[1].quantity)

    unassigned: list[tuple[int, Delivery]] = []
    for index, delivery in ordered:
        target = select_driver(states, delivery, max_deliveries)
        if target is None:
            logger.warning(
                f"No driver can take delivery for '{delivery.client_name}' ({delivery.quantity} boxes)"
            )
            unassigned.append((index, delivery))
            continue
        target.assign(delivery)
        logger.debug(
            f"Assigned '{delivery.client_name}' ({delivery.quantity} boxes) to '{target.driver.name}', "
            f"{target.remaining_capacity} boxes left"
        )

    routes: list[Route] = []
    route_number = 0
    for state in states:
        if not state.deliveries:
            continue
        route_number += 1
        routes.extend(_route_rows(route_number, state))

    for _, delivery in sorted(unassigned, key=lambda item: item[0]):
        routes.append(
            Route(
                route=UNASSIGNED_DELIVERY,
                client_name=delivery.client_name,
                address=delivery.address,
                quantity=delivery.quantity,
                notes=delivery.notes,
            )
        )

    idle_states = [state for state in states if not state.deliveries]
    for state in idle_states:
        routes.append(
            Route(
                route=UNASSIGNED_DRIVER,
                driver_name=state.driver.name,
                driver_email=state.driver.email,
                capacity=state.driver.capacity,
                remaining_capacity=state.driver.capacity,
            )
        )

    assigned_boxes = sum(route.quantity or 0 for route in routes if route.is_assigned)
    unassigned_boxes = sum(delivery.quantity for _, delivery in unassigned)
    summary = AllocationSummary(
        drivers=len(states),
        deliveries=len(valid_deliveries),
        routes=route_number,
        assigned_deliveries=len(valid_deliveries) - len(unassigned),
        unassigned_deliveries=len(unassigned),
        unassigned_drivers=len(idle_states),
        assigned_boxes=assigned_boxes,
        unassigned_boxes=unassigned_boxes,
    )
    return AllocationResult(routes=routes, summary=summary)
