"""
PetPulse Console

Client-side logic of the PetPulse administrative console: the role-gated
screens used by clinic admins, caretakers and doctors to run the pet shop
inventory, grooming and daycare bookings, vet appointments and adoptions.

This package includes:

- Pydantic schemas for the backend's products, appointments, adoptions and pets
- An async REST client with bearer-token sessions for the three console roles
- Package price resolution and a service cart with checkout
- Filtering, counters and view models for each dashboard
- Printable PDF reports of the filtered lists
- A command-line front end

Quick Start:
    >>> from petpulse_console import PetPulseClient, InventoryDashboard
    >>> from petpulse_console.session import SessionStore

    >>> async with PetPulseClient(session_store=SessionStore("~/.petpulse/session.json")) as client:
    ...     dashboard = InventoryDashboard(client)
    ...     await dashboard.load()
    ...     print(dashboard.stats.to_dict())

Requirements:
    - Python 3.11+
    - Pydantic 2.7+
    - httpx
    - ReportLab
"""

__version__ = "0.1.0"
__author__ = "PetPulse Team"
__license__ = "MIT"

# Import implemented modules
from . import api
from . import exceptions
from . import models
from . import schemas
from . import utils

# Convenience imports for common usage patterns
from .api import PetPulseClient
from .cart import CartLineItem, CartStore
from .checkout import Checkout
from .dashboards import (
    AdoptionDashboard,
    CaretakerDashboard,
    DoctorDashboard,
    InventoryDashboard,
    PetDashboard,
    dashboard_for,
)
from .exceptions import ApiException, PetPulseException, ValidationException
from .pricing import UNRESOLVED, PriceResolver, get_price, resolve_price
from .session import Role, Session, SessionStore

__all__ = [
    # Version and metadata
    "__version__",
    "__author__",
    "__license__",
    # Core modules
    "api",
    "exceptions",
    "models",
    "schemas",
    "utils",
    # Convenience imports
    "PetPulseClient",
    "CartLineItem",
    "CartStore",
    "Checkout",
    "AdoptionDashboard",
    "CaretakerDashboard",
    "DoctorDashboard",
    "InventoryDashboard",
    "PetDashboard",
    "dashboard_for",
    "ApiException",
    "PetPulseException",
    "ValidationException",
    "UNRESOLVED",
    "PriceResolver",
    "get_price",
    "resolve_price",
    "Role",
    "Session",
    "SessionStore",
]
