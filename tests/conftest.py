"""
Pytest configuration and fixtures for petpulse-console tests.

This module provides the shared fixtures for all tests: a console
configuration pointing at a fake backend, an in-process backend built on
``httpx.MockTransport``, and sample backend records shaped like the real
API's JSON.
"""

import copy
import json
from datetime import date
from typing import Any, Callable, Dict, List, Optional, Tuple

import httpx
import pytest
import pytest_asyncio

from petpulse_console.api.client import PetPulseClient
from petpulse_console.schemas.adoption import Adoption, Pet
from petpulse_console.schemas.appointment import Appointment
from petpulse_console.schemas.inventory import Product
from petpulse_console.session import MemorySessionStore, Role, Session
from petpulse_console.utils.config import ConsoleConfig

BASE_URL = "http://testserver/api"

# Fixed "today" so expiry windows and date views are deterministic
TODAY = date(2025, 6, 15)

PRODUCT_RECORDS: List[Dict[str, Any]] = [
    {
        "_id": "p1",
        "name": "Chicken Kibble",
        "category": "Food",
        "price": 2500,
        "discountPrice": 2250,
        "quantity": 5,
        "lowStockThreshold": 10,
        "expiryDate": "2025-07-01",
    },
    {
        "_id": "p2",
        "name": "Flea Drops",
        "category": "Medication",
        "price": 1800,
        "quantity": 0,
        "lowStockThreshold": 5,
        "expiryDate": "2025-06-01T00:00:00.000Z",
    },
    {
        "_id": "p3",
        "name": "Rope Toy",
        "category": "Toys",
        "price": 900,
        "quantity": 20,
        "lowStockThreshold": 10,
    },
    {
        "_id": "p4",
        "name": "Salmon Treats",
        "category": "Food",
        "price": 1200,
        "quantity": 40,
        "lowStockThreshold": 10,
        "expiryDate": "2025-12-31",
    },
    {
        "_id": "p5",
        "name": "Grooming Brush",
        "category": "Grooming",
        "subCategory": "Brushes",
        "price": "1500",
        "quantity": "8",
        "expiryDate": "",
    },
]

VET_APPOINTMENT_RECORDS: List[Dict[str, Any]] = [
    {
        "_id": "665f1c000000000000000001",
        "selectedService": "General Health Checkup",
        "petType": "Dog",
        "ownerName": "Nimal Perera",
        "ownerPhone": "0771234567",
        "dateISO": "2025-06-15",
        "timeSlotMinutes": 570,
        "durationMin": 30,
        "status": "pending",
        "paymentStatus": "unpaid",
        "createdAt": "2025-06-10T08:00:00Z",
    },
    {
        "_id": "665f1c000000000000000002",
        "selectedService": "Vaccination",
        "petType": "Cat",
        "ownerName": "Kamala Silva",
        "dateISO": "2025-06-20",
        "timeSlotMinutes": 600,
        "status": "accepted",
        "paymentStatus": "paid",
        "createdAt": "2025-06-12T09:30:00Z",
    },
    {
        # no createdAt: booked-at comes from the object id
        "_id": "665f1c000000000000000003",
        "selectedService": "Emergency Care",
        "petType": "Dog",
        "ownerName": "Ruwan Jayasuriya",
        "dateISO": "2025-07-02",
        "status": "rejected",
    },
]

GROOMING_RECORDS: List[Dict[str, Any]] = [
    {
        "_id": "g1",
        "packageName": "Full Grooming",
        "petType": "Dog",
        "ownerName": "Sahan Fernando",
        "ownerEmail": "sahan@example.com",
        "dateISO": "2025-06-16",
        "timeSlotMinutes": 600,
        "durationMin": 90,
        "price": 6500,
        "extras": [{"name": "Nail Polish", "price": 500}],
        "createdAt": "2025-06-11T10:00:00Z",
    },
    {
        "_id": "g2",
        "packageId": "nail-trim",
        "petType": "Cat",
        "ownerName": "Dilani Wijesinghe",
        "dateISO": "2025-05-28",
        "packagePrice": 1500,
        "status": "accepted",
        "paymentStatus": "paid",
        "createdAt": "2025-05-20T10:00:00Z",
    },
]

DAYCARE_RECORDS: List[Dict[str, Any]] = [
    {
        "_id": "d1",
        "packageName": "Half Day",
        "petType": "Dog",
        "ownerName": "Sahan Fernando",
        "dateISO": "2025-06-18",
        "dropOffMinutes": 480,
        "pickUpMinutes": 720,
        "selectedPrice": 3000,
        "specialNotes": "Needs afternoon walk",
        "createdAt": "2025-06-13T07:00:00Z",
    },
]

ADOPTION_RECORDS: List[Dict[str, Any]] = [
    {
        "_id": "ad1",
        "pet": {"_id": "pet1", "species": "Dog", "breed": "Labrador", "price": 15000},
        "name": "Amal Gunawardena",
        "phone": "0711111111",
        "occupation": "Engineer",
        "date": "2025-06-12",
        "status": "pending",
        "isPaid": False,
    },
    {
        "_id": "ad2",
        "pet": {"_id": "pet9", "species": "Cat", "breed": "Persian", "price": 20000},
        "name": "Bimali Rathnayake",
        "date": "2025-04-01",
        "visit": "2025-06-20",
        "status": "Approved",
        "isPaid": True,
    },
]

PET_RECORDS: List[Dict[str, Any]] = [
    {
        "_id": "pet1",
        "species": "Dog",
        "breed": "Labrador",
        "gender": "Male",
        "age": 2,
        "weight": "25",
        "price": 15000,
        "goodWithKids": True,
        "goodWithPets": False,
    },
    {"_id": "pet2", "species": "dog", "breed": "Beagle"},
    {"_id": "pet3", "species": "Cat"},
]


Handler = Callable[[httpx.Request], httpx.Response]


class FakeBackend:
    """
    In-process stand-in for the PetPulse REST API.

    Routes are registered per ``(method, path)``; every request is recorded
    so tests can assert on what the client sent. Unregistered routes answer
    404.
    """

    def __init__(self) -> None:
        self.routes: Dict[Tuple[str, str], Handler] = {}
        self.requests: List[httpx.Request] = []

    def add(
        self,
        method: str,
        path: str,
        body: Any = None,
        status_code: int = 200,
        text: Optional[str] = None,
    ) -> None:
        """Answer ``method path`` with a fixed JSON (or text) response."""

        def handler(request: httpx.Request) -> httpx.Response:
            if text is not None:
                return httpx.Response(status_code, text=text)
            if body is None:
                return httpx.Response(status_code)
            return httpx.Response(status_code, json=copy.deepcopy(body))

        self.routes[(method.upper(), "/api" + path)] = handler

    def add_handler(self, method: str, path: str, handler: Handler) -> None:
        self.routes[(method.upper(), "/api" + path)] = handler

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        handler = self.routes.get((request.method, request.url.path))
        if handler is None:
            return httpx.Response(404, json={"message": "Route not found"})
        return handler(request)

    def calls(self, method: str, path: str) -> List[httpx.Request]:
        return [
            r
            for r in self.requests
            if r.method == method.upper() and r.url.path == "/api" + path
        ]

    def last_json(self, method: str, path: str) -> Any:
        """Decoded JSON body of the last matching request."""
        matching = self.calls(method, path)
        assert matching, f"No {method} {path} request was sent"
        return json.loads(matching[-1].content)


@pytest.fixture
def config(tmp_path) -> ConsoleConfig:
    """Console configuration pointing at the fake backend."""
    return ConsoleConfig(
        api_base_url=BASE_URL, session_file=tmp_path / "session.json"
    )


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def admin_session() -> Session:
    return Session(role=Role.ADMIN, token="admin-token")


@pytest_asyncio.fixture
async def make_client(config, backend, admin_session):
    """
    Factory for clients wired to the fake backend.

    Clients default to an in-memory admin session and are closed after the
    test.
    """
    clients: List[PetPulseClient] = []

    def factory(
        session: Optional[Session] = None, store: Optional[MemorySessionStore] = None
    ) -> PetPulseClient:
        if store is None:
            store = MemorySessionStore(session or admin_session)
        client = PetPulseClient(config, store, transport=httpx.MockTransport(backend))
        clients.append(client)
        return client

    yield factory

    for client in clients:
        await client.aclose()


@pytest.fixture
def products() -> List[Product]:
    return [Product.model_validate(record) for record in PRODUCT_RECORDS]


@pytest.fixture
def vet_appointments() -> List[Appointment]:
    return [
        Appointment.model_validate({**record, "service": "vet"})
        for record in VET_APPOINTMENT_RECORDS
    ]


@pytest.fixture
def caretaker_appointments() -> List[Appointment]:
    records = [{**r, "service": "grooming"} for r in GROOMING_RECORDS] + [
        {**r, "service": "daycare"} for r in DAYCARE_RECORDS
    ]
    return [Appointment.model_validate(record) for record in records]


@pytest.fixture
def adoptions() -> List[Adoption]:
    return [Adoption.model_validate(record) for record in ADOPTION_RECORDS]


@pytest.fixture
def pets() -> List[Pet]:
    return [Pet.model_validate(record) for record in PET_RECORDS]
