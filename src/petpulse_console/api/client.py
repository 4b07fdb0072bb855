"""
Async client for the PetPulse REST backend.

Every request carries the active session's bearer token. Failures are raised as
``ApiException`` subclasses; a 401 additionally clears the stored session so the
next screen is the login page. Nothing is retried.
"""

import asyncio
import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence, Type, TypeVar

import httpx
from pydantic import BaseModel

from ..exceptions import (
    ApiException,
    AuthenticationException,
    LoginFailedException,
    NotFoundException,
    SchemaValidationException,
)
from ..models.appointment import ServiceType
from ..schemas.adoption import Adoption, AdoptionStatusChange, Pet
from ..schemas.appointment import Appointment, AppointmentStatusUpdate
from ..schemas.auth import LoginRequest, LoginResponse
from ..schemas.base import ConsoleSchema, parse_record, parse_records
from ..schemas.inventory import (
    Category,
    CategoryCreate,
    DashboardStats,
    DiscountUpdate,
    Order,
    Product,
    ProductCreate,
    ProductUpdate,
    SaleRecord,
    StockAdjustment,
    Supplier,
    SupplierCreate,
)
from ..schemas.payment import PaymentIntent, PaymentIntentRequest
from ..session import MemorySessionStore, Role, Session, SessionStore
from ..utils.config import ConsoleConfig

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=BaseModel)


def _error_message(body: Any, status_code: int) -> str:
    if isinstance(body, str) and body.strip():
        return body.strip()
    if isinstance(body, dict):
        for key in ("error", "message"):
            if body.get(key):
                return str(body[key])
    return f"Request failed ({status_code})"


def _unwrap(body: Any, key: str) -> Any:
    """Pull ``key`` out of an envelope like ``{"success": true, key: ...}``."""
    if isinstance(body, dict) and key in body:
        return body[key]
    return body


class PetPulseClient:
    """
    Thin typed wrapper over the backend's REST endpoints.

    Use as an async context manager, or call ``aclose()`` when done.
    """

    def __init__(
        self,
        config: Optional[ConsoleConfig] = None,
        session_store: Optional[SessionStore] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config or ConsoleConfig.from_environment()
        self.session_store = session_store or MemorySessionStore()
        self.session: Session = self.session_store.load()
        self._http = httpx.AsyncClient(
            base_url=self.config.api_base_url,
            timeout=self.config.timeout,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    async def __aenter__(self) -> "PetPulseClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    # --- transport --------------------------------------------------------

    def _expire_session(self) -> None:
        self.session_store.clear()
        self.session = Session.anonymous()

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Mapping[str, Any]] = None,
        json: Any = None,
    ) -> Any:
        """
        Send one request and decode the response body.

        Returns:
            Decoded JSON, the response text for non-JSON bodies, or None
            when the body is empty

        Raises:
            AuthenticationException: On 401; the session has been cleared
            NotFoundException: On 404
            ApiException: On any other error status or transport failure
        """
        if isinstance(json, ConsoleSchema):
            json = json.to_payload()

        try:
            response = await self._http.request(
                method,
                path,
                params=params,
                json=json,
                headers=self.session.auth_headers(),
            )
        except httpx.HTTPError as e:
            logger.error(
                f"{method} {path} failed: {e}",
                extra={"method": method, "endpoint": path},
            )
            raise ApiException(
                "Network error", method=method, endpoint=path, original_error=e
            )

        body = self._decode(response)

        if response.status_code == 401:
            logger.warning(
                "Backend rejected credentials; clearing session",
                extra={"method": method, "endpoint": path},
            )
            self._expire_session()
            raise AuthenticationException(
                _error_message(body, 401), method=method, endpoint=path
            )
        if response.status_code == 404:
            raise NotFoundException(
                _error_message(body, 404), method=method, endpoint=path
            )
        if response.is_error:
            raise ApiException(
                _error_message(body, response.status_code),
                status_code=response.status_code,
                method=method,
                endpoint=path,
            )

        logger.debug(
            f"{method} {path} -> {response.status_code}",
            extra={"method": method, "endpoint": path},
        )
        return body

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        if not response.content:
            return None
        if "application/json" in response.headers.get("content-type", ""):
            try:
                return response.json()
            except ValueError:
                return response.text
        return response.text

    def _check_success(self, body: Any, method: str, path: str) -> Any:
        """Raise when a 2xx body still reports ``success: false``."""
        if isinstance(body, dict) and body.get("success") is False:
            raise ApiException(
                _error_message(body, 200), status_code=200, method=method, endpoint=path
            )
        return body

    async def _get_list(
        self,
        schema: Type[R],
        path: str,
        key: str,
        params: Optional[Mapping[str, Any]] = None,
    ) -> List[R]:
        body = self._check_success(
            await self.request("GET", path, params=params), "GET", path
        )
        return parse_records(schema, _unwrap(body, key) or [])

    @staticmethod
    def _as_record(schema: Type[R], body: Any, key: str) -> Optional[R]:
        """Parse a mutation response into ``schema`` when it carries a record."""
        record = _unwrap(body, key)
        if not isinstance(record, dict):
            return None
        try:
            return parse_record(schema, record)
        except SchemaValidationException as e:
            e.log_error(logger, logging.WARNING)
            return None

    # --- auth -------------------------------------------------------------

    async def login(self, role: Role, email: str, password: str) -> Session:
        """
        Sign in as ``role`` and store the session, replacing any other role's.

        Raises:
            LoginFailedException: If the backend refuses the credentials
        """
        role = Role(role)
        credentials = LoginRequest(email=email, password=password)
        try:
            body = await self.request("POST", role.login_path, json=credentials)
        except AuthenticationException as e:
            raise LoginFailedException(e.message, role=role.value)

        result = LoginResponse.model_validate(body if isinstance(body, dict) else {})
        if not result.success or not result.token:
            raise LoginFailedException(
                result.message or "Invalid credentials", role=role.value
            )

        self.session = Session(role=role, token=result.token)
        self.session_store.save(self.session)
        logger.info("Logged in", extra={"role": role.value})
        return self.session

    def logout(self) -> None:
        self._expire_session()
        logger.info("Logged out")

    # --- inventory --------------------------------------------------------

    async def get_products(
        self, params: Optional[Mapping[str, Any]] = None
    ) -> List[Product]:
        """List products; ``params`` are the server-side search filters."""
        return await self._get_list(Product, "/inventory", "products", params)

    async def get_product(self, product_id: str) -> Product:
        body = await self.request("GET", f"/inventory/{product_id}")
        return parse_record(Product, _unwrap(body, "product"))

    async def create_product(self, product: ProductCreate) -> Optional[Product]:
        body = await self.request("POST", "/inventory", json=product)
        return self._as_record(Product, body, "product")

    async def update_product(
        self, product_id: str, changes: ProductUpdate
    ) -> Optional[Product]:
        body = await self.request("PATCH", f"/inventory/{product_id}", json=changes)
        return self._as_record(Product, body, "product")

    async def delete_product(self, product_id: str) -> None:
        await self.request("DELETE", f"/inventory/{product_id}")

    async def update_stock(
        self, product_id: str, adjustment: StockAdjustment
    ) -> Optional[Product]:
        body = await self.request(
            "PATCH", f"/inventory/{product_id}/stock", json=adjustment
        )
        return self._as_record(Product, body, "product")

    async def set_product_discount(self, product_id: str, percent: Any) -> Any:
        """Set a percentage discount; the backend derives the discount price."""
        return await self.request(
            "PATCH",
            f"/inventory/{product_id}/discount",
            json=DiscountUpdate(discount=percent),
        )

    async def apply_discount_price(self, product_id: str, discount_price: Any) -> Any:
        return await self.request(
            "PATCH",
            f"/inventory/{product_id}/discount",
            json=DiscountUpdate(discount_price=discount_price),
        )

    async def get_near_expiry_products(self) -> List[Product]:
        return await self._get_list(Product, "/inventory/near-expiry", "products")

    # --- categories and suppliers ----------------------------------------

    async def get_categories(self) -> List[Category]:
        return await self._get_list(Category, "/categories", "categories")

    async def add_category(self, category: CategoryCreate) -> Optional[Category]:
        body = await self.request("POST", "/categories", json=category)
        return self._as_record(Category, body, "category")

    async def update_category(
        self, category_id: str, category: CategoryCreate
    ) -> Optional[Category]:
        body = await self.request("PATCH", f"/categories/{category_id}", json=category)
        return self._as_record(Category, body, "category")

    async def delete_category(self, category_id: str) -> None:
        await self.request("DELETE", f"/categories/{category_id}")

    async def get_suppliers(self) -> List[Supplier]:
        return await self._get_list(Supplier, "/suppliers", "suppliers")

    async def add_supplier(self, supplier: SupplierCreate) -> Optional[Supplier]:
        body = await self.request("POST", "/suppliers", json=supplier)
        return self._as_record(Supplier, body, "supplier")

    async def update_supplier(
        self, supplier_id: str, supplier: SupplierCreate
    ) -> Optional[Supplier]:
        body = await self.request("PATCH", f"/suppliers/{supplier_id}", json=supplier)
        return self._as_record(Supplier, body, "supplier")

    async def delete_supplier(self, supplier_id: str) -> None:
        await self.request("DELETE", f"/suppliers/{supplier_id}")

    # --- sales, orders and dashboard --------------------------------------

    async def get_sales(self) -> List[SaleRecord]:
        return await self._get_list(SaleRecord, "/sales", "sales")

    async def create_order(self, order: Mapping[str, Any]) -> Optional[Order]:
        body = await self.request("POST", "/orders", json=dict(order))
        return self._as_record(Order, body, "order")

    async def get_orders(self) -> List[Order]:
        return await self._get_list(Order, "/orders", "orders")

    async def get_order(self, order_id: str) -> Order:
        body = await self.request("GET", f"/orders/{order_id}")
        return parse_record(Order, _unwrap(body, "order"))

    async def update_order_status(self, order_id: str, status: str) -> Optional[Order]:
        body = await self.request("PATCH", f"/orders/{order_id}", json={"status": status})
        return self._as_record(Order, body, "order")

    async def get_dashboard_stats(self) -> DashboardStats:
        body = await self.request("GET", "/dashboard/stats")
        return parse_record(DashboardStats, body or {})

    # --- appointments -----------------------------------------------------

    async def get_appointments(self, service: ServiceType) -> List[Appointment]:
        """All appointments of one service line, tagged with that service."""
        service = ServiceType(service)
        path = f"/{service.value}/all"
        body = self._check_success(await self.request("GET", path), "GET", path)
        raw = _unwrap(body, "appointments") or []
        if isinstance(raw, list):
            raw = [
                {**item, "service": item.get("service") or service.value}
                if isinstance(item, dict)
                else item
                for item in raw
            ]
        return parse_records(Appointment, raw)

    async def get_appointments_for(
        self, services: Sequence[ServiceType]
    ) -> Dict[ServiceType, List[Appointment]]:
        """
        Fetch several service lines concurrently.

        The requests are independent: if one fails the exception propagates
        and the others' results are discarded.
        """
        services = [ServiceType(s) for s in services]
        results = await asyncio.gather(*(self.get_appointments(s) for s in services))
        return dict(zip(services, results))

    async def update_appointment_status(
        self,
        service: ServiceType,
        appointment_id: str,
        update: AppointmentStatusUpdate,
    ) -> Any:
        service = ServiceType(service)
        return await self.request(
            "PATCH",
            f"/{service.value}/{appointment_id}/status",
            json=update.to_service_payload(service),
        )

    # --- payments ---------------------------------------------------------

    async def create_payment_intent(
        self, intent_request: PaymentIntentRequest
    ) -> PaymentIntent:
        body = await self.request(
            "POST", "/payments/create-intent", json=intent_request
        )
        return parse_record(PaymentIntent, body)

    # --- adoptions and pets -----------------------------------------------

    async def get_adoptions(self) -> List[Adoption]:
        return await self._get_list(Adoption, "/admin/getAdoption", "adoptions")

    async def change_adoption_status(self, change: AdoptionStatusChange) -> Any:
        path = "/admin/change-status"
        body = await self.request("PUT", path, json=change)
        return self._check_success(body, "PUT", path)

    async def cancel_adoption(self, adoption_id: str) -> Any:
        path = f"/admin/cancel-adoption/{adoption_id}"
        body = await self.request("DELETE", path)
        return self._check_success(body, "DELETE", path)

    async def get_pets(self) -> List[Pet]:
        return await self._get_list(Pet, "/caretaker/pets", "pets")

    async def remove_pet(self, pet_id: str) -> Any:
        path = "/caretaker/remove-pet"
        body = await self.request("POST", path, json={"petId": pet_id})
        return self._check_success(body, "POST", path)
