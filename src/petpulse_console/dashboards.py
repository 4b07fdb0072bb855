"""
View models of the role-gated console screens.

A dashboard loads its records through the API client, keeps the filter state
of its screen, derives the visible rows and counters, and performs the row
actions. Failed requests are logged and reported once through the notifier;
only an expired session (401) propagates, so the caller can send the user to
the login page.
"""

import asyncio
import logging
from datetime import date
from typing import Any, Awaitable, Dict, List, Optional, Tuple, TypeVar

from pydantic import ValidationError

from .api.client import PetPulseClient
from .exceptions import AuthenticationException, PetPulseException, SessionException
from .filters import (
    AdoptionFilter,
    AppointmentFilter,
    AppointmentSummary,
    InventoryStats,
    ProductFilter,
    adoption_summary,
    appointment_summary,
    category_counts,
    expiry_breakdown,
    inventory_stats,
    low_stock_products,
    sort_most_recent,
    species_counts,
    species_options,
)
from .models.adoption import AdoptionStatus
from .models.appointment import AppointmentStatus, AppointmentView, ServiceType
from .models.inventory import StockOperation
from .notifications import Notifier
from .reports import (
    TabularReport,
    adoptions_report,
    appointments_report,
    caretaker_report,
    inventory_report,
    pets_report,
)
from .schemas.adoption import Adoption, AdoptionStatusChange, Pet
from .schemas.appointment import Appointment, AppointmentStatusUpdate
from .schemas.inventory import Category, DiscountUpdate, Product, StockAdjustment
from .session import Role, Session
from .utils.datetime_utils import get_today, parse_date

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Categories offered when the category list cannot be loaded
DEFAULT_CATEGORIES = ("Food", "Medication", "Accessories", "Toys", "Grooming")


class Dashboard:
    """Shared plumbing of the console screens."""

    role: Role = Role.NONE

    def __init__(
        self,
        client: PetPulseClient,
        notifier: Optional[Notifier] = None,
        today: Optional[date] = None,
    ):
        self.client = client
        self.notifier = notifier or Notifier()
        self._today = today

    @property
    def today(self) -> date:
        return self._today or get_today()

    async def _attempt(
        self,
        awaitable: Awaitable[T],
        failure_message: str,
        success_message: Optional[str] = None,
    ) -> Tuple[bool, Optional[T]]:
        """
        Await a backend call, turning failures into one notification.

        Returns:
            ``(True, result)`` on success, ``(False, None)`` on failure

        Raises:
            AuthenticationException: The session expired; it has been cleared
        """
        try:
            result = await awaitable
        except AuthenticationException:
            self.notifier.error("Session expired. Please log in again.")
            raise
        except PetPulseException as e:
            e.log_error(logger)
            self.notifier.error(failure_message)
            return False, None

        if success_message:
            self.notifier.success(success_message)
        return True, result

    def _invalid(self, error: ValidationError) -> bool:
        """Report the first form error of a rejected request body."""
        first = error.errors()[0] if error.errors() else {}
        message = str(first.get("msg", "Invalid input"))
        self.notifier.error(message.removeprefix("Value error, "))
        return False


class InventoryDashboard(Dashboard):
    """Admin product list with stock counters."""

    role = Role.ADMIN

    def __init__(
        self,
        client: PetPulseClient,
        notifier: Optional[Notifier] = None,
        today: Optional[date] = None,
    ):
        super().__init__(client, notifier, today)
        self.filter = ProductFilter(near_expiry_days=client.config.near_expiry_days)
        self.products: List[Product] = []
        self.categories: List[Category] = []
        self.stats = InventoryStats()

    async def load(self) -> None:
        """Load categories and products concurrently; each may fail on its own."""
        await asyncio.gather(self.load_categories(), self.load_products())

    async def load_categories(self) -> List[Category]:
        try:
            self.categories = await self.client.get_categories()
        except AuthenticationException:
            raise
        except PetPulseException as e:
            e.log_error(logger)
            self.notifier.error("Failed to load categories, using defaults")
            self.categories = [
                Category(id=str(index), name=name)
                for index, name in enumerate(DEFAULT_CATEGORIES, start=1)
            ]
        return self.categories

    async def load_products(self) -> List[Product]:
        """Fetch products matching the current filter and recompute counters."""
        ok, products = await self._attempt(
            self.client.get_products(self.filter.to_params()),
            "Failed to fetch products",
        )
        if ok:
            self.products = products
            self.stats = inventory_stats(
                self.products, self.today, self.filter.near_expiry_days
            )
        return self.products

    async def set_filter(self, **criteria: Any) -> List[Product]:
        """Change filter criteria and reload; unknown criteria are rejected."""
        for name, value in criteria.items():
            if not hasattr(self.filter, name):
                raise ValueError(f"Unknown product filter: {name}")
            setattr(self.filter, name, value)
        await self.load_products()
        return self.visible_products

    async def clear_filters(self) -> List[Product]:
        return await self.set_filter(
            search=None, category=None, stock_status=None, expiry_status=None
        )

    @property
    def visible_products(self) -> List[Product]:
        # same criteria re-applied to the fetched rows
        return self.filter.apply(self.products, self.today)

    @property
    def low_stock(self) -> List[Product]:
        return low_stock_products(self.products)

    @property
    def category_names(self) -> List[str]:
        return [c.name for c in self.categories if c.name]

    def chart_data(self) -> Dict[str, Dict[str, int]]:
        """Data behind the admin overview charts."""
        return {
            "categories": category_counts(self.products),
            "expiry": expiry_breakdown(self.products, self.today),
        }

    async def adjust_stock(
        self, product_id: str, operation: StockOperation, quantity: int
    ) -> bool:
        try:
            adjustment = StockAdjustment(operation=operation, quantity=quantity)
        except ValidationError as e:
            return self._invalid(e)
        ok, _ = await self._attempt(
            self.client.update_stock(product_id, adjustment),
            "Failed to update stock",
            "Stock updated successfully",
        )
        if ok:
            await self.load_products()
        return ok

    async def set_discount(self, product_id: str, percent: Any) -> bool:
        try:
            DiscountUpdate(discount=percent)
        except ValidationError as e:
            return self._invalid(e)
        ok, _ = await self._attempt(
            self.client.set_product_discount(product_id, percent),
            "Failed to update discount",
            "Discount updated successfully",
        )
        if ok:
            await self.load_products()
        return ok

    async def delete_product(self, product_id: str) -> bool:
        ok, _ = await self._attempt(
            self.client.delete_product(product_id),
            "Failed to delete product",
            "Product deleted successfully",
        )
        if ok:
            await self.load_products()
        return ok

    def report(self) -> TabularReport:
        return inventory_report(self.visible_products, self.stats)

    def export_pdf(self) -> bytes:
        return self.report().render()


class _AppointmentDashboard(Dashboard):
    """Status actions shared by the doctor and caretaker screens."""

    default_staff_name = "Staff"

    def __init__(
        self,
        client: PetPulseClient,
        notifier: Optional[Notifier] = None,
        today: Optional[date] = None,
        staff_name: Optional[str] = None,
    ):
        super().__init__(client, notifier, today)
        self.staff_name = staff_name or self.default_staff_name
        self.appointments: List[Appointment] = []

    def _find(self, appointment_id: str) -> Appointment:
        for appointment in self.appointments:
            if appointment.id == appointment_id:
                return appointment
        raise ValueError(f"Unknown appointment: {appointment_id}")

    async def _set_status(
        self,
        appointment_id: str,
        status: AppointmentStatus,
        reason: Optional[str] = None,
    ) -> bool:
        appointment = self._find(appointment_id)
        if not self.can_transition(appointment, status):
            self.notifier.info(f"Already {AppointmentStatus(status).value}")
            return False
        service = appointment.service_type or ServiceType.VET
        try:
            update = AppointmentStatusUpdate(
                status=status, rejection_reason=reason, staff_name=self.staff_name
            )
        except ValidationError as e:
            return self._invalid(e)

        ok, _ = await self._attempt(
            self.client.update_appointment_status(service, appointment_id, update),
            "Failed to update status",
            f"Marked as {AppointmentStatus(status).value}",
        )
        if ok:
            self.appointments = [
                a.model_copy(update={"status": AppointmentStatus(status).value})
                if a.id == appointment_id and a.service == appointment.service
                else a
                for a in self.appointments
            ]
        return ok

    async def accept(self, appointment_id: str) -> bool:
        return await self._set_status(appointment_id, AppointmentStatus.ACCEPTED)

    async def reject(self, appointment_id: str, reason: str = "") -> bool:
        return await self._set_status(
            appointment_id, AppointmentStatus.REJECTED, reason
        )

    def can_transition(self, appointment: Appointment, status: AppointmentStatus) -> bool:
        """Accepting an accepted (or rejecting a rejected) row is a no-op."""
        return appointment.status != AppointmentStatus(status).value


class DoctorDashboard(_AppointmentDashboard):
    """Vet appointments, newest bookings first."""

    role = Role.DOCTOR
    default_staff_name = "Doctor"

    def __init__(self, *args: Any, **kwargs: Any):
        super().__init__(*args, **kwargs)
        self.view = AppointmentView.ALL
        self.pet_type: Optional[str] = None
        self.query = ""

    async def load(self) -> List[Appointment]:
        ok, appointments = await self._attempt(
            self.client.get_appointments(ServiceType.VET),
            "Failed to load appointments.",
        )
        if ok:
            self.appointments = [
                a for a in appointments if a.service in (None, ServiceType.VET.value)
            ]
        return self.appointments

    @property
    def filter(self) -> AppointmentFilter:
        return AppointmentFilter(
            view=self.view,
            pet_type=self.pet_type,
            search=self.query,
            search_fields=("selected_service",),
        )

    @property
    def visible_appointments(self) -> List[Appointment]:
        return sort_most_recent(self.filter.apply(self.appointments, self.today))

    @property
    def pet_types(self) -> List[str]:
        return sorted({a.pet_type for a in self.appointments if a.pet_type})

    def summary(self) -> AppointmentSummary:
        return appointment_summary(self.visible_appointments)

    def report(self) -> TabularReport:
        return appointments_report(
            self.visible_appointments,
            self.summary(),
            view=self.view,
            pet_label=self.pet_type or "All pets",
            query=self.query,
        )

    def export_pdf(self) -> bytes:
        return self.report().render()


class CaretakerDashboard(_AppointmentDashboard):
    """Grooming and daycare appointments in one list."""

    role = Role.CARETAKER
    default_staff_name = "Caretaker"
    services = (ServiceType.GROOMING, ServiceType.DAYCARE)

    def __init__(self, *args: Any, **kwargs: Any):
        super().__init__(*args, **kwargs)
        self.filter = AppointmentFilter()

    async def load(self) -> List[Appointment]:
        ok, by_service = await self._attempt(
            self.client.get_appointments_for(self.services),
            "Failed to load appointments.",
        )
        if ok:
            merged = [a for service in self.services for a in by_service[service]]
            self.appointments = sort_most_recent(merged)
        return self.appointments

    @property
    def visible_appointments(self) -> List[Appointment]:
        return self.filter.apply(self.appointments, self.today)

    def summary(self) -> AppointmentSummary:
        return appointment_summary(self.visible_appointments)

    def filter_line(self) -> str:
        """Applied filters as printed at the top of the export."""

        def label(name: str, value: Optional[str]) -> str:
            if value is None or value in ("", "all"):
                return f"{name}: All"
            return f"{name}: {getattr(value, 'value', value)}"

        parts = [
            label("Service", self.filter.service),
            label("Status", self.filter.status),
            label("Payment", self.filter.payment_status),
        ]
        if self.filter.month:
            parts.append(f"Month: {self.filter.month}")
        if self.filter.search:
            parts.append(f'Search: "{self.filter.search}"')
        return "   |   ".join(parts)

    def report(self) -> TabularReport:
        return caretaker_report(self.visible_appointments, self.filter_line())

    def export_pdf(self) -> bytes:
        return self.report().render()


class AdoptionDashboard(Dashboard):
    """Admin adoption requests."""

    role = Role.ADMIN

    def __init__(self, *args: Any, **kwargs: Any):
        super().__init__(*args, **kwargs)
        self.filter = AdoptionFilter()
        self.adoptions: List[Adoption] = []

    async def load(self) -> List[Adoption]:
        ok, adoptions = await self._attempt(
            self.client.get_adoptions(), "No adoptions found."
        )
        if ok:
            self.adoptions = adoptions
        return self.adoptions

    @property
    def visible_adoptions(self) -> List[Adoption]:
        return self.filter.apply(self.adoptions, self.today)

    @property
    def species(self) -> List[str]:
        return species_options(self.adoptions)

    def summary(self) -> Dict[str, int]:
        return adoption_summary(self.visible_adoptions)

    async def change_status(
        self, adoption_id: str, status: AdoptionStatus, visit: Any = None
    ) -> bool:
        try:
            change = AdoptionStatusChange(
                adoption_id=adoption_id, status=status, visit=parse_date(visit)
            )
        except ValidationError as e:
            return self._invalid(e)

        ok, body = await self._attempt(
            self.client.change_adoption_status(change), "Failed to update adoption"
        )
        if ok:
            message = body.get("message") if isinstance(body, dict) else None
            self.notifier.success(message or "Adoption updated")
            await self.load()
        return ok

    async def cancel(self, adoption_id: str) -> bool:
        ok, _ = await self._attempt(
            self.client.cancel_adoption(adoption_id),
            "Failed to cancel adoption",
            "Adoption cancelled",
        )
        if ok:
            self.adoptions = [a for a in self.adoptions if a.id != adoption_id]
        return ok

    def report(self) -> TabularReport:
        return adoptions_report(self.visible_adoptions)

    def export_pdf(self) -> bytes:
        return self.report().render()


class PetDashboard(Dashboard):
    """Caretaker's adoptable pets."""

    role = Role.CARETAKER

    def __init__(self, *args: Any, **kwargs: Any):
        super().__init__(*args, **kwargs)
        self.pets: List[Pet] = []

    async def load(self) -> List[Pet]:
        ok, pets = await self._attempt(self.client.get_pets(), "Failed to load pets")
        if ok:
            self.pets = pets
        return self.pets

    def species_counts(self) -> Dict[str, int]:
        return species_counts(p.species for p in self.pets)

    async def remove(self, pet_id: str) -> bool:
        ok, _ = await self._attempt(
            self.client.remove_pet(pet_id), "Failed to remove pet", "Pet removed"
        )
        if ok:
            self.pets = [p for p in self.pets if p.id != pet_id]
        return ok

    def report(self) -> TabularReport:
        return pets_report(self.pets)

    def export_pdf(self) -> bytes:
        return self.report().render()


_HOME_DASHBOARDS = {
    Role.ADMIN: InventoryDashboard,
    Role.CARETAKER: CaretakerDashboard,
    Role.DOCTOR: DoctorDashboard,
}


def dashboard_for(
    session: Session, client: PetPulseClient, notifier: Optional[Notifier] = None
) -> Dashboard:
    """
    Home dashboard of the signed-in role.

    Raises:
        SessionException: If nobody is signed in
    """
    dashboard_class = _HOME_DASHBOARDS.get(session.role)
    if dashboard_class is None:
        raise SessionException("Please log in to open a dashboard")
    return dashboard_class(client, notifier)
