"""
Static appointment price lookup.

Appointment records name their package inconsistently (``packageId``,
``packageName``, ``selectedService`` or ``title``). The resolver slugifies the
first non-empty one and looks it up in a per-service price table.

Lookups that cannot be resolved return ``UNRESOLVED`` rather than zero, so a
missing mapping is never mistaken for a free service. ``get_price`` keeps the
zero-on-failure contract for callers that need a plain number.
"""

import logging
import re
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Mapping, Optional, Union

logger = logging.getLogger(__name__)

PRICE_TABLE: Dict[str, Dict[str, int]] = {
    "grooming": {
        "basic-bath-brush": 2500,
        "full-grooming": 6500,
        "nail-trim": 1500,
        "deshedding": 4500,
        "flea-tick": 5500,
        "premium-spa": 9500,
    },
    "daycare": {
        "half-day": 3000,
        "full-day": 5500,
        "extended-day": 7000,
    },
    "vet": {
        "general-health-checkup": 7500,
        "vaccination": 4500,
        "emergency-care": 15000,
    },
}

# Fields tried in order, camelCase first, then the snake_case attribute
PACKAGE_FIELDS = (
    ("packageId", "package_id"),
    ("packageName", "package_name"),
    ("selectedService", "selected_service"),
    ("title", "title"),
)

_WHITESPACE = re.compile(r"\s+")
_NON_SLUG = re.compile(r"[^\w-]", re.ASCII)


class _Unresolved:
    """Marker for a price that could not be looked up."""

    _instance: Optional["_Unresolved"] = None

    def __new__(cls) -> "_Unresolved":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNRESOLVED"

    def __bool__(self) -> bool:
        return False


UNRESOLVED = _Unresolved()

PriceResult = Union[Decimal, _Unresolved]


def keyify(value: Any) -> str:
    """
    Turn a package name into a table key.

    Lower-cases, replaces whitespace runs with ``-`` and drops anything that is
    not a word character or ``-``. ``None`` and empty values give ``""``.
    """
    text = str(value or "").lower()
    text = _WHITESPACE.sub("-", text)
    return _NON_SLUG.sub("", text)


def _field(record: Any, *names: str) -> Any:
    for name in names:
        if isinstance(record, Mapping):
            value = record.get(name)
        else:
            value = getattr(record, name, None)
        if value:
            return value
    return None


def candidate_key(record: Any) -> str:
    """First non-empty keyified package field of ``record``."""
    for names in PACKAGE_FIELDS:
        key = keyify(_field(record, *names))
        if key:
            return key
    return ""


def _as_price(value: Any) -> Optional[Decimal]:
    if value is None or isinstance(value, bool):
        return None
    try:
        price = Decimal(str(value))
    except InvalidOperation:
        return None
    if not price.is_finite() or price < 0:
        return None
    return price


class PriceResolver:
    """Looks appointment records up in a ``service -> package -> price`` table."""

    def __init__(self, table: Optional[Mapping[str, Mapping[str, Any]]] = None):
        self.table = table if table is not None else PRICE_TABLE

    def resolve_price(self, record: Any) -> PriceResult:
        """
        Resolve the price of an appointment-like record.

        Args:
            record: Mapping or object with a ``service`` and a package field

        Returns:
            The price as a Decimal, or ``UNRESOLVED`` when the service is
            unknown, no package key matches, or the table entry is not numeric
        """
        service = str(_field(record, "service") or "").lower()
        key = candidate_key(record)
        price = _as_price(self.table.get(service, {}).get(key))
        if price is None:
            return UNRESOLVED
        return price

    def get_price(self, record: Any) -> Decimal:
        """Resolve a price, falling back to zero. Never raises."""
        price = self.resolve_price(record)
        if price is UNRESOLVED:
            logger.warning(
                "No price found for appointment package",
                extra={
                    "service": _field(record, "service"),
                    "package_key": candidate_key(record),
                },
            )
            return Decimal("0")
        return price

    def packages(self, service: str) -> Dict[str, Decimal]:
        """Known packages of a service with their prices."""
        entries = self.table.get(str(service).lower(), {})
        return {
            key: price
            for key, price in ((k, _as_price(v)) for k, v in entries.items())
            if price is not None
        }


default_resolver = PriceResolver()


def resolve_price(record: Any) -> PriceResult:
    """Resolve ``record`` against the built-in table."""
    return default_resolver.resolve_price(record)


def get_price(record: Any) -> Decimal:
    """Resolve ``record`` against the built-in table, zero when unresolved."""
    return default_resolver.get_price(record)
