"""
Tests for the role dashboards' loading, filtering and row actions.
"""

from decimal import Decimal

import pytest

from petpulse_console.dashboards import (
    DEFAULT_CATEGORIES,
    AdoptionDashboard,
    CaretakerDashboard,
    DoctorDashboard,
    InventoryDashboard,
    PetDashboard,
    dashboard_for,
)
from petpulse_console.exceptions import AuthenticationException, SessionException
from petpulse_console.models.adoption import AdoptionStatus
from petpulse_console.models.appointment import AppointmentView
from petpulse_console.models.inventory import StockOperation
from petpulse_console.notifications import NotificationLevel, Notifier
from petpulse_console.session import Role, Session

from .conftest import (
    ADOPTION_RECORDS,
    DAYCARE_RECORDS,
    GROOMING_RECORDS,
    PET_RECORDS,
    PRODUCT_RECORDS,
    TODAY,
    VET_APPOINTMENT_RECORDS,
)


def messages(notifier, level=None):
    return [
        n.message for n in notifier.drain() if level is None or n.level is level
    ]


class TestInventoryDashboard:
    """Test cases for the admin product screen."""

    @pytest.fixture
    def notifier(self):
        return Notifier()

    @pytest.fixture
    def dashboard(self, make_client, notifier):
        return InventoryDashboard(make_client(), notifier, today=TODAY)

    async def test_load(self, dashboard, backend, notifier):
        """Test loading categories and products together."""
        backend.add("GET", "/categories", [{"_id": "c1", "name": "Food"}])
        backend.add("GET", "/inventory", PRODUCT_RECORDS)

        await dashboard.load()

        assert dashboard.category_names == ["Food"]
        assert len(dashboard.products) == 5
        assert dashboard.stats.low_stock == 3
        assert dashboard.stats.near_expiry == 1
        assert messages(notifier) == []

    async def test_category_fallback(self, dashboard, backend, notifier):
        """Test that failed category loading offers the default list."""
        backend.add("GET", "/categories", {"message": "down"}, status_code=500)
        backend.add("GET", "/inventory", PRODUCT_RECORDS)

        await dashboard.load()

        assert dashboard.category_names == list(DEFAULT_CATEGORIES)
        assert len(dashboard.products) == 5
        assert messages(notifier, NotificationLevel.ERROR) == [
            "Failed to load categories, using defaults"
        ]

    async def test_failed_products_notify_once(self, dashboard, backend, notifier):
        """Test that a failed product fetch is reported once and keeps old rows."""
        backend.add("GET", "/inventory", {"message": "boom"}, status_code=500)

        products = await dashboard.load_products()

        assert products == []
        assert messages(notifier) == ["Failed to fetch products"]

    async def test_expired_session_propagates(self, dashboard, backend, notifier):
        """Test that a 401 is not swallowed by the screen."""
        backend.add("GET", "/inventory", {"message": "expired"}, status_code=401)

        with pytest.raises(AuthenticationException):
            await dashboard.load_products()

        assert not dashboard.client.session.is_authenticated
        assert messages(notifier) == ["Session expired. Please log in again."]

    async def test_set_filter_sends_params(self, dashboard, backend):
        """Test that filter changes reload with server-side parameters."""
        backend.add("GET", "/inventory", PRODUCT_RECORDS)

        visible = await dashboard.set_filter(category="Food", stock_status="low")

        request = backend.calls("GET", "/inventory")[-1]
        assert dict(request.url.params) == {"category": "Food", "stockStatus": "low"}
        # rows are re-filtered locally even if the server ignores the params
        assert [p.id for p in visible] == ["p1"]

    async def test_unknown_filter(self, dashboard):
        """Test that unknown criteria are rejected."""
        with pytest.raises(ValueError):
            await dashboard.set_filter(colour="red")

    async def test_clear_filters(self, dashboard, backend):
        """Test that clearing filters shows every product again."""
        backend.add("GET", "/inventory", PRODUCT_RECORDS)
        await dashboard.set_filter(search="kibble")

        visible = await dashboard.clear_filters()

        assert len(visible) == 5
        assert dict(backend.calls("GET", "/inventory")[-1].url.params) == {}

    async def test_low_stock_and_chart(self, dashboard, backend):
        """Test the low-stock list and chart data."""
        backend.add("GET", "/inventory", PRODUCT_RECORDS)
        await dashboard.load_products()

        assert [p.id for p in dashboard.low_stock] == ["p2", "p1", "p5"]
        chart = dashboard.chart_data()
        assert chart["categories"]["Food"] == 2
        # the chart uses the dashboard's 7-day window, not the 30-day filter
        assert chart["expiry"] == {"Fresh": 4, "Near Expiry": 0, "Expired": 1}

    async def test_adjust_stock(self, dashboard, backend, notifier):
        """Test a stock adjustment and the reload after it."""
        backend.add("PATCH", "/inventory/p1/stock", {"_id": "p1", "quantity": 15})
        backend.add("GET", "/inventory", PRODUCT_RECORDS)

        ok = await dashboard.adjust_stock("p1", StockOperation.ADD, 10)

        assert ok
        assert backend.last_json("PATCH", "/inventory/p1/stock") == {
            "operation": "add",
            "quantity": 10,
        }
        assert len(backend.calls("GET", "/inventory")) == 1
        assert messages(notifier) == ["Stock updated successfully"]

    @pytest.mark.parametrize("quantity", [0, -3])
    async def test_adjust_stock_rejects_bad_quantity(
        self, dashboard, backend, notifier, quantity
    ):
        """Test that non-positive adjustments never reach the backend."""
        ok = await dashboard.adjust_stock("p1", "deduct", quantity)

        assert not ok
        assert backend.requests == []
        assert len(messages(notifier, NotificationLevel.ERROR)) == 1

    async def test_set_discount(self, dashboard, backend, notifier):
        """Test setting a percentage discount."""
        backend.add("PATCH", "/inventory/p3/discount", {"success": True})
        backend.add("GET", "/inventory", PRODUCT_RECORDS)

        assert await dashboard.set_discount("p3", "12.5")

        assert backend.last_json("PATCH", "/inventory/p3/discount") == {"discount": 12.5}
        assert messages(notifier) == ["Discount updated successfully"]

    async def test_set_discount_out_of_range(self, dashboard, backend, notifier):
        """Test that the form message is shown for an invalid percentage."""
        assert not await dashboard.set_discount("p3", 150)

        assert backend.requests == []
        assert messages(notifier) == ["Discount must be between 0 and 100"]

    async def test_delete_product_failure(self, dashboard, backend, notifier):
        """Test that a failed delete is reported and nothing is reloaded."""
        backend.add("DELETE", "/inventory/p1", {"message": "in use"}, status_code=409)

        assert not await dashboard.delete_product("p1")

        assert backend.calls("GET", "/inventory") == []
        assert messages(notifier) == ["Failed to delete product"]

    async def test_export_pdf(self, dashboard, backend):
        """Test exporting the visible products."""
        backend.add("GET", "/inventory", PRODUCT_RECORDS)
        await dashboard.load_products()

        report = dashboard.report()

        assert len(report.rows) == 5
        assert dashboard.export_pdf().startswith(b"%PDF")


class TestDoctorDashboard:
    """Test cases for the doctor's appointment screen."""

    @pytest.fixture
    def notifier(self):
        return Notifier()

    @pytest.fixture
    async def dashboard(self, make_client, backend, notifier):
        backend.add("GET", "/vet/all", VET_APPOINTMENT_RECORDS)
        client = make_client(Session(role=Role.DOCTOR, token="d"))
        dashboard = DoctorDashboard(client, notifier, today=TODAY, staff_name="Dr. Silva")
        await dashboard.load()
        return dashboard

    async def test_load_sorts_most_recent_first(self, dashboard):
        """Test that visible rows are newest bookings first."""
        assert [a.id[-1] for a in dashboard.visible_appointments] == ["2", "1", "3"]

    async def test_views_and_pet_type(self, dashboard):
        """Test the preset views combined with pet type."""
        dashboard.view = AppointmentView.NEXT_7_DAYS
        assert [a.id[-1] for a in dashboard.visible_appointments] == ["2", "1"]

        dashboard.pet_type = "Dog"
        assert [a.id[-1] for a in dashboard.visible_appointments] == ["1"]

    async def test_search_selected_service(self, dashboard):
        """Test searching on the selected service only."""
        dashboard.query = "emergency"

        assert [a.selected_service for a in dashboard.visible_appointments] == [
            "Emergency Care"
        ]

    async def test_pet_types(self, dashboard):
        """Test the pet type dropdown options."""
        assert dashboard.pet_types == ["Cat", "Dog"]

    async def test_accept(self, dashboard, backend, notifier):
        """Test accepting updates the backend and the local row."""
        appointment_id = "665f1c000000000000000001"
        backend.add("PATCH", f"/vet/{appointment_id}/status", {"success": True})

        assert await dashboard.accept(appointment_id)

        assert backend.last_json("PATCH", f"/vet/{appointment_id}/status") == {
            "status": "accepted",
            "doctorName": "Dr. Silva",
        }
        row = next(a for a in dashboard.appointments if a.id == appointment_id)
        assert row.status == "accepted"
        assert "Marked as accepted" in messages(notifier)

    async def test_reject_with_reason(self, dashboard, backend):
        """Test rejecting sends the reason."""
        appointment_id = "665f1c000000000000000002"
        backend.add("PATCH", f"/vet/{appointment_id}/status", {"success": True})

        await dashboard.reject(appointment_id, "Clinic closed")

        assert backend.last_json("PATCH", f"/vet/{appointment_id}/status") == {
            "status": "rejected",
            "rejectionReason": "Clinic closed",
            "doctorName": "Dr. Silva",
        }

    async def test_failed_status_change_keeps_row(self, dashboard, backend, notifier):
        """Test that a failed update leaves the local status unchanged."""
        appointment_id = "665f1c000000000000000001"
        backend.add("PATCH", f"/vet/{appointment_id}/status", {}, status_code=500)

        assert not await dashboard.accept(appointment_id)

        row = next(a for a in dashboard.appointments if a.id == appointment_id)
        assert row.status == "pending"
        assert "Failed to update status" in messages(notifier)

    async def test_unknown_appointment(self, dashboard):
        """Test that acting on an unknown id is a programming error."""
        with pytest.raises(ValueError):
            await dashboard.accept("nope")

    async def test_can_transition(self, dashboard):
        """Test that repeating the current status is not offered."""
        accepted = dashboard.appointments[1]

        assert not dashboard.can_transition(accepted, "accepted")
        assert dashboard.can_transition(accepted, "rejected")

    async def test_repeated_status_sends_nothing(self, dashboard, backend, notifier):
        """Test that accepting an accepted row makes no request."""
        appointment_id = "665f1c000000000000000002"

        assert not await dashboard.accept(appointment_id)

        assert backend.calls("PATCH", f"/vet/{appointment_id}/status") == []
        assert "Already accepted" in messages(notifier)

    async def test_report(self, dashboard):
        """Test the export carries the view label and summary."""
        dashboard.view = AppointmentView.TODAY

        report = dashboard.report()

        assert len(report.rows) == 1
        assert report.subtitle_lines[0].startswith("View: Today")
        assert report.summary_lines[0] == "Total appointments: 1"


class TestCaretakerDashboard:
    """Test cases for the caretaker's grooming and daycare screen."""

    @pytest.fixture
    def notifier(self):
        return Notifier()

    @pytest.fixture
    def client(self, make_client):
        return make_client(Session(role=Role.CARETAKER, token="c"))

    async def test_load_merges_services(self, client, backend, notifier):
        """Test both services are fetched and merged newest first."""
        backend.add("GET", "/grooming/all", GROOMING_RECORDS)
        backend.add("GET", "/daycare/all", {"appointments": DAYCARE_RECORDS})
        dashboard = CaretakerDashboard(client, notifier, today=TODAY)

        await dashboard.load()

        assert [a.id for a in dashboard.appointments] == ["d1", "g1", "g2"]
        amounts = {a.id: a.amount for a in dashboard.appointments}
        assert amounts == {
            "d1": Decimal("3000"),
            "g1": Decimal("6500"),
            "g2": Decimal("1500"),
        }

    async def test_failed_load_notifies(self, client, backend, notifier):
        """Test that one failed service reports a single error."""
        backend.add("GET", "/grooming/all", GROOMING_RECORDS)
        backend.add("GET", "/daycare/all", {"message": "down"}, status_code=500)
        dashboard = CaretakerDashboard(client, notifier, today=TODAY)

        await dashboard.load()

        assert dashboard.appointments == []
        assert messages(notifier) == ["Failed to load appointments."]

    async def test_filters_and_export(self, client, backend):
        """Test caretaker filters, the filter line and the export."""
        backend.add("GET", "/grooming/all", GROOMING_RECORDS)
        backend.add("GET", "/daycare/all", DAYCARE_RECORDS)
        dashboard = CaretakerDashboard(client, today=TODAY)
        await dashboard.load()

        dashboard.filter.service = "grooming"
        dashboard.filter.payment_status = "paid"

        assert [a.id for a in dashboard.visible_appointments] == ["g2"]
        assert dashboard.filter_line() == (
            "Service: grooming   |   Status: All   |   Payment: paid"
        )
        summary = dashboard.summary()
        assert (summary.total, summary.paid) == (1, 1)
        assert dashboard.export_pdf().startswith(b"%PDF")

    async def test_accept_daycare(self, client, backend):
        """Test that daycare updates go to the daycare path with caretaker name."""
        backend.add("GET", "/grooming/all", [])
        backend.add("GET", "/daycare/all", DAYCARE_RECORDS)
        backend.add("PATCH", "/daycare/d1/status", {"success": True})
        dashboard = CaretakerDashboard(client, today=TODAY)
        await dashboard.load()

        assert await dashboard.accept("d1")

        assert backend.last_json("PATCH", "/daycare/d1/status") == {
            "status": "accepted",
            "caretakerName": "Caretaker",
        }


class TestAdoptionDashboard:
    """Test cases for the admin adoption screen."""

    async def test_load_filter_and_summary(self, make_client, backend):
        """Test loading adoptions and filtering them."""
        backend.add("GET", "/admin/getAdoption", {"success": True, "adoptions": ADOPTION_RECORDS})
        dashboard = AdoptionDashboard(make_client(), today=TODAY)

        await dashboard.load()
        dashboard.filter.date_range = "week"

        assert [a.id for a in dashboard.visible_adoptions] == ["ad1"]
        assert dashboard.species == ["Dog", "Cat"]
        assert dashboard.summary()["pending"] == 1

    async def test_change_status(self, make_client, backend):
        """Test a status change with a visit date and the reload after it."""
        backend.add("GET", "/admin/getAdoption", {"success": True, "adoptions": ADOPTION_RECORDS})
        backend.add("PUT", "/admin/change-status", {"success": True, "message": "Visit scheduled"})
        notifier = Notifier()
        dashboard = AdoptionDashboard(make_client(), notifier, today=TODAY)

        ok = await dashboard.change_status("ad1", AdoptionStatus.APPROVED, "2025-06-22")

        assert ok
        assert backend.last_json("PUT", "/admin/change-status") == {
            "adoptionId": "ad1",
            "status": "approved",
            "visit": "2025-06-22",
        }
        assert len(dashboard.adoptions) == 2
        assert "Visit scheduled" in messages(notifier)

    async def test_change_status_invalid(self, make_client, backend):
        """Test that an unknown status never reaches the backend."""
        notifier = Notifier()
        dashboard = AdoptionDashboard(make_client(), notifier)

        assert not await dashboard.change_status("ad1", "adopted")

        assert backend.requests == []
        assert len(messages(notifier, NotificationLevel.ERROR)) == 1

    async def test_cancel(self, make_client, backend):
        """Test that a cancelled adoption leaves the list."""
        backend.add("GET", "/admin/getAdoption", ADOPTION_RECORDS)
        backend.add("DELETE", "/admin/cancel-adoption/ad2", {"success": True})
        dashboard = AdoptionDashboard(make_client())
        await dashboard.load()

        assert await dashboard.cancel("ad2")

        assert [a.id for a in dashboard.adoptions] == ["ad1"]
        assert len(dashboard.report().rows) == 1


class TestPetDashboard:
    """Test cases for the caretaker's pet screen."""

    async def test_load_remove_and_counts(self, make_client, backend):
        """Test loading, removing and counting pets."""
        backend.add("GET", "/caretaker/pets", {"success": True, "pets": PET_RECORDS})
        backend.add("POST", "/caretaker/remove-pet", {"success": True})
        dashboard = PetDashboard(make_client(Session(role=Role.CARETAKER, token="c")))
        await dashboard.load()

        assert dashboard.species_counts() == {"dog": 2, "cat": 1}

        assert await dashboard.remove("pet3")

        assert dashboard.species_counts() == {"dog": 2}
        assert len(dashboard.report().rows) == 2


class TestDashboardFor:
    """Test cases for picking the home screen of a role."""

    @pytest.mark.parametrize(
        "role,expected",
        [
            (Role.ADMIN, InventoryDashboard),
            (Role.CARETAKER, CaretakerDashboard),
            (Role.DOCTOR, DoctorDashboard),
        ],
    )
    async def test_role_dashboards(self, make_client, role, expected):
        """Test each signed-in role gets its own dashboard."""
        session = Session(role=role, token="t")

        assert isinstance(dashboard_for(session, make_client(session)), expected)

    async def test_anonymous(self, make_client):
        """Test that nobody signed in has no dashboard."""
        with pytest.raises(SessionException):
            dashboard_for(Session.anonymous(), make_client())
