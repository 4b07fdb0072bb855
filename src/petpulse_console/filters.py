"""
Client-side list filters and summary counters.

Each criterion is an independent predicate; a record is kept when every set
criterion matches. Unset criteria (``None`` or ``"all"``) match everything.
Lists and counters are recomputed from scratch on every call.
"""

from collections import Counter
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

from .models.appointment import AppointmentStatus, AppointmentView, PaymentStatus
from .models.adoption import AdoptionStatus
from .models.inventory import ExpiryStatus, StockStatus
from .schemas.adoption import Adoption
from .schemas.appointment import Appointment
from .schemas.inventory import Product
from .utils.datetime_utils import DateRange, date_range_start, days_until, month_key

ALL = "all"

DEFAULT_NEAR_EXPIRY_DAYS = 30
DASHBOARD_NEAR_EXPIRY_DAYS = 7


def _is_set(value: Optional[str]) -> bool:
    return value is not None and value != "" and value != ALL


def _value(value: Any) -> Optional[str]:
    """Plain string of an enum member or string criterion."""
    if value is None:
        return None
    return getattr(value, "value", value)


def _contains(needle: str, *haystack: Optional[str]) -> bool:
    text = " ".join(str(part) for part in haystack if part).lower()
    return needle.lower() in text


# --- Products -------------------------------------------------------------


def stock_matches(product: Product, stock_status: Union[StockStatus, str]) -> bool:
    status = StockStatus(_value(stock_status))
    if status == StockStatus.LOW:
        return product.is_low_stock
    if status == StockStatus.OUT:
        return product.is_out_of_stock
    return not product.is_low_stock


def expiry_matches(
    product: Product,
    expiry_status: Union[ExpiryStatus, str],
    today: Optional[date] = None,
    window_days: int = DEFAULT_NEAR_EXPIRY_DAYS,
) -> bool:
    days = days_until(product.expiry_date, today)
    if days is None:
        return False
    if ExpiryStatus(_value(expiry_status)) == ExpiryStatus.NEAR:
        return 0 <= days <= window_days
    return days < 0


@dataclass
class ProductFilter:
    """Criteria of the inventory screens."""

    search: Optional[str] = None
    category: Optional[str] = None
    stock_status: Optional[str] = None
    expiry_status: Optional[str] = None
    near_expiry_days: int = DEFAULT_NEAR_EXPIRY_DAYS

    def matches(self, product: Product, today: Optional[date] = None) -> bool:
        if self.search and self.search.strip():
            if not _contains(
                self.search.strip(),
                product.name,
                product.category,
                product.sub_category,
            ):
                return False
        if _is_set(self.category) and product.category != self.category:
            return False
        if _is_set(_value(self.stock_status)) and not stock_matches(
            product, self.stock_status
        ):
            return False
        if _is_set(_value(self.expiry_status)) and not expiry_matches(
            product, self.expiry_status, today, self.near_expiry_days
        ):
            return False
        return True

    def apply(
        self, products: Iterable[Product], today: Optional[date] = None
    ) -> List[Product]:
        return [product for product in products if self.matches(product, today)]

    def to_params(self) -> Dict[str, str]:
        """Query parameters understood by ``GET /inventory``."""
        params = {
            "search": self.search.strip() if self.search else None,
            "category": self.category,
            "stockStatus": _value(self.stock_status),
            "expiryStatus": _value(self.expiry_status),
        }
        return {key: value for key, value in params.items() if _is_set(value)}


@dataclass
class InventoryStats:
    total: int = 0
    low_stock: int = 0
    out_of_stock: int = 0
    near_expiry: int = 0
    total_value: Decimal = Decimal("0")

    def to_dict(self) -> Dict[str, Union[int, float]]:
        return {
            "total": self.total,
            "lowStock": self.low_stock,
            "outOfStock": self.out_of_stock,
            "nearExpiry": self.near_expiry,
            "totalValue": float(self.total_value),
        }


def inventory_stats(
    products: Sequence[Product],
    today: Optional[date] = None,
    window_days: int = DEFAULT_NEAR_EXPIRY_DAYS,
) -> InventoryStats:
    """Counters shown above the product list."""
    return InventoryStats(
        total=len(products),
        low_stock=sum(1 for p in products if p.is_low_stock),
        out_of_stock=sum(1 for p in products if p.is_out_of_stock),
        near_expiry=sum(
            1
            for p in products
            if expiry_matches(p, ExpiryStatus.NEAR, today, window_days)
        ),
        total_value=sum((p.stock_value for p in products), Decimal("0")),
    )


def low_stock_products(products: Iterable[Product]) -> List[Product]:
    """Products at or below their threshold, emptiest first."""
    return sorted(
        (p for p in products if p.is_low_stock), key=lambda p: (p.quantity, p.name)
    )


def expiry_breakdown(
    products: Iterable[Product],
    today: Optional[date] = None,
    window_days: int = DASHBOARD_NEAR_EXPIRY_DAYS,
) -> Dict[str, int]:
    """
    Fresh / Near Expiry / Expired counts for the dashboard chart.

    Products without an expiry date count as fresh.
    """
    breakdown = {"Fresh": 0, "Near Expiry": 0, "Expired": 0}
    for product in products:
        days = days_until(product.expiry_date, today)
        if days is None or days > window_days:
            breakdown["Fresh"] += 1
        elif days < 0:
            breakdown["Expired"] += 1
        else:
            breakdown["Near Expiry"] += 1
    return breakdown


def category_counts(products: Iterable[Product]) -> Dict[str, int]:
    counts = Counter(p.category or "Uncategorized" for p in products)
    return dict(counts.most_common())


def products_for_categories(
    products: Iterable[Product], categories: Iterable[str]
) -> List[str]:
    """Product names offered once the given supplier categories are picked."""
    wanted = set(categories)
    names: List[str] = []
    for product in products:
        if product.category in wanted and product.name and product.name not in names:
            names.append(product.name)
    return names


# --- Appointments ---------------------------------------------------------


def booked_at(appointment: Appointment) -> datetime:
    """
    When an appointment was booked.

    Falls back to the timestamp embedded in a Mongo object id, then to the
    epoch, so records without either sort last.
    """
    if appointment.created_at is not None:
        created = appointment.created_at
        if created.tzinfo is None:
            created = created.replace(tzinfo=timezone.utc)
        return created
    if appointment.id and len(appointment.id) >= 8:
        try:
            seconds = int(appointment.id[:8], 16)
        except ValueError:
            pass
        else:
            return datetime.fromtimestamp(seconds, tz=timezone.utc)
    return datetime.fromtimestamp(0, tz=timezone.utc)


def sort_most_recent(appointments: Iterable[Appointment]) -> List[Appointment]:
    return sorted(appointments, key=booked_at, reverse=True)


def view_matches(
    appointment: Appointment,
    view: Union[AppointmentView, str],
    today: Optional[date] = None,
) -> bool:
    view = AppointmentView(_value(view))
    if view == AppointmentView.ALL:
        return True
    if view == AppointmentView.TODAY:
        return days_until(appointment.date_iso, today) == 0
    if view == AppointmentView.NEXT_7_DAYS:
        days = days_until(appointment.date_iso, today)
        return days is not None and 0 <= days <= 7
    return appointment.status == view.value


@dataclass
class AppointmentFilter:
    """Criteria of the doctor and caretaker appointment lists."""

    status: Optional[str] = None
    service: Optional[str] = None
    payment_status: Optional[str] = None
    pet_type: Optional[str] = None
    view: Optional[str] = None
    month: Optional[str] = None
    search: Optional[str] = None
    # the doctor screen narrows this to ("selected_service",)
    search_fields: Sequence[str] = (
        "owner_name",
        "owner_email",
        "owner_phone",
        "display_title",
        "pet_type",
        "notes",
    )

    def _haystack(self, appointment: Appointment) -> List[Optional[str]]:
        return [getattr(appointment, name, None) for name in self.search_fields]

    def matches(self, appointment: Appointment, today: Optional[date] = None) -> bool:
        if _is_set(_value(self.status)) and appointment.status != _value(self.status):
            return False
        if _is_set(_value(self.service)) and appointment.service != _value(self.service):
            return False
        if _is_set(_value(self.payment_status)):
            payment = appointment.payment_status or PaymentStatus.UNPAID.value
            if payment != _value(self.payment_status):
                return False
        if _is_set(self.pet_type) and appointment.pet_type != self.pet_type:
            return False
        if _is_set(_value(self.view)) and not view_matches(
            appointment, self.view, today
        ):
            return False
        if _is_set(self.month):
            key = month_key(appointment.date_iso) or month_key(appointment.created_at)
            if key != self.month:
                return False
        if self.search and self.search.strip():
            if not _contains(self.search.strip(), *self._haystack(appointment)):
                return False
        return True

    def apply(
        self, appointments: Iterable[Appointment], today: Optional[date] = None
    ) -> List[Appointment]:
        return [a for a in appointments if self.matches(a, today)]


@dataclass
class AppointmentSummary:
    total: int = 0
    by_status: Dict[str, int] = field(default_factory=dict)
    paid: int = 0
    unpaid: int = 0

    def lines(self) -> List[str]:
        """Summary block printed under appointment reports."""
        statuses = ", ".join(f"{status} {count}" for status, count in self.by_status.items())
        return [
            f"Total appointments: {self.total}",
            f"By status: {statuses}",
            f"By payment: paid {self.paid}, unpaid {self.unpaid}",
        ]


def appointment_summary(appointments: Sequence[Appointment]) -> AppointmentSummary:
    by_status = {
        status.value: 0
        for status in (
            AppointmentStatus.ACCEPTED,
            AppointmentStatus.REJECTED,
            AppointmentStatus.PENDING,
            AppointmentStatus.CANCELLED,
        )
    }
    for appointment in appointments:
        by_status[appointment.status] = by_status.get(appointment.status, 0) + 1
    paid = sum(1 for a in appointments if a.is_paid)
    return AppointmentSummary(
        total=len(appointments),
        by_status=by_status,
        paid=paid,
        unpaid=len(appointments) - paid,
    )


# --- Adoptions ------------------------------------------------------------


@dataclass
class AdoptionFilter:
    """Criteria of the adoption management screen."""

    status: Optional[str] = None
    payment: Optional[str] = None
    species: Optional[str] = None
    date_range: Optional[str] = None

    def matches(self, adoption: Adoption, today: Optional[date] = None) -> bool:
        if _is_set(_value(self.status)) and adoption.status != _value(self.status):
            return False
        if _is_set(_value(self.payment)):
            wants_paid = _value(self.payment) == PaymentStatus.PAID.value
            if adoption.is_paid != wants_paid:
                return False
        if _is_set(self.species) and adoption.species != self.species:
            return False
        if _is_set(_value(self.date_range)):
            start = date_range_start(DateRange(_value(self.date_range)), today)
            if start is not None:
                if adoption.requested_on is None or adoption.requested_on < start:
                    return False
        return True

    def apply(
        self, adoptions: Iterable[Adoption], today: Optional[date] = None
    ) -> List[Adoption]:
        return [a for a in adoptions if self.matches(a, today)]


def adoption_summary(adoptions: Sequence[Adoption]) -> Dict[str, int]:
    summary = {"total": len(adoptions)}
    for status in AdoptionStatus:
        summary[status.value] = sum(1 for a in adoptions if a.status == status.value)
    summary["paid"] = sum(1 for a in adoptions if a.is_paid)
    return summary


def species_options(adoptions: Iterable[Adoption]) -> List[str]:
    """Distinct pet species, in first-seen order, for the species dropdown."""
    seen: List[str] = []
    for adoption in adoptions:
        if adoption.species and adoption.species not in seen:
            seen.append(adoption.species)
    return seen


def species_counts(species: Iterable[Optional[str]]) -> Dict[str, int]:
    """Case-insensitive species counts, as on the pet management cards."""
    counts = Counter((s or "").strip().lower() for s in species if s)
    return dict(counts)
