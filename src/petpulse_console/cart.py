"""
In-memory cart of appointments awaiting payment.

Line items are snapshots taken when an appointment is added: later changes to
the appointment (price, status, extras) are not reflected in the cart.
"""

import logging
from decimal import Decimal
from typing import Any, Iterable, Iterator, List, Optional

from pydantic import Field, field_validator

from .pricing import PriceResolver, default_resolver
from .schemas.appointment import Appointment
from .schemas.base import ConsoleRecord, Extra, Money, lenient_money

logger = logging.getLogger(__name__)


class CartLineItem(ConsoleRecord):
    """One appointment in the cart, priced at the moment it was added."""

    service: Optional[str] = Field(None, description="Service line")
    title: Optional[str] = Field(None, description="Package title")
    price: Money = Field(Decimal("0"), description="Base price")
    extras: List[Extra] = Field(default_factory=list, description="Priced add-ons")

    @field_validator("price", mode="before")
    @classmethod
    def validate_price(cls, v: Any) -> Any:
        """Missing or non-numeric prices count as zero."""
        v = lenient_money(v)
        try:
            Decimal(str(v))
        except ArithmeticError:
            return Decimal("0")
        return v

    @field_validator("extras", mode="before")
    @classmethod
    def validate_extras(cls, v: Any) -> Any:
        return v if isinstance(v, list) else []

    @property
    def extras_total(self) -> Decimal:
        return sum((extra.price for extra in self.extras), Decimal("0"))

    @property
    def line_total(self) -> Decimal:
        return self.price + self.extras_total

    def display_key(self, index: int) -> str:
        """Identifier, or ``<service>-<title>-<index>`` when there is none."""
        if self.id:
            return self.id
        return f"{self.service or 'svc'}-{self.title or 'item'}-{index}"

    @classmethod
    def from_appointment(
        cls, appointment: Appointment, resolver: Optional[PriceResolver] = None
    ) -> "CartLineItem":
        """Snapshot an appointment, pricing it from the package table."""
        resolver = resolver or default_resolver
        return cls(
            id=appointment.id,
            service=appointment.service,
            title=appointment.title or appointment.display_title,
            price=resolver.get_price(appointment),
            extras=[extra.model_copy() for extra in appointment.extras],
        )


class CartStore:
    """
    Ordered list of cart line items for the current session.

    Adding the same appointment twice creates two lines. Not thread-safe; the
    console mutates the cart from one place at a time.
    """

    def __init__(self, items: Optional[Iterable[CartLineItem]] = None):
        self._items: List[CartLineItem] = list(items or [])

    @property
    def items(self) -> List[CartLineItem]:
        """A copy of the current lines, in insertion order."""
        return list(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[CartLineItem]:
        return iter(list(self._items))

    def __bool__(self) -> bool:
        return bool(self._items)

    def add_item(self, item: CartLineItem) -> None:
        self._items.append(item)
        logger.debug(
            "Added cart item",
            extra={"item_id": item.id, "line_total": str(item.line_total)},
        )

    def add_many(self, items: Iterable[CartLineItem]) -> None:
        for item in items:
            self.add_item(item)

    def add_appointment(
        self, appointment: Appointment, resolver: Optional[PriceResolver] = None
    ) -> Optional[CartLineItem]:
        """
        Add an unpaid appointment to the cart.

        Returns:
            The new line item, or None when the appointment is already paid
        """
        if appointment.is_paid:
            logger.info(
                "Skipping paid appointment", extra={"appointment_id": appointment.id}
            )
            return None
        item = CartLineItem.from_appointment(appointment, resolver)
        self.add_item(item)
        return item

    def remove_item(self, item_id: str) -> int:
        """
        Remove every line carrying ``item_id``.

        Returns:
            Number of lines removed; zero when the id is not in the cart
        """
        before = len(self._items)
        self._items = [item for item in self._items if item.id != item_id]
        removed = before - len(self._items)
        if removed:
            logger.debug(
                "Removed cart item", extra={"item_id": item_id, "lines": removed}
            )
        return removed

    def total(self) -> Decimal:
        return sum((item.line_total for item in self._items), Decimal("0"))

    def clear(self) -> None:
        self._items = []
        logger.debug("Cart cleared")

    def ids(self) -> List[str]:
        """Appointment ids for the payment request, skipping lines without one."""
        return [item.id for item in self._items if item.id]
