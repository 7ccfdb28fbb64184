"""HTTP adapter for the customer service.

Responses are wrapped in ``{"data": {...}}``. A 404 means the record does
not exist; any other non-200 answer is treated as a service failure.
"""

import requests
import structlog

from billing.customers.port import ContactProfile, CustomerDirectory, CustomerProfile
from billing.shared.errors import CollaboratorError

logger = structlog.get_logger(__name__)

DEFAULT_TIMEOUT = 10.0


class HttpCustomerDirectory(CustomerDirectory):
    def __init__(self, base_url: str, timeout: float = DEFAULT_TIMEOUT, session: requests.Session | None = None) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def _fetch(self, organization_id: str, path: str) -> dict | None:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.get(
                url,
                headers={"X-Organization-ID": str(organization_id)},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.warning("Customer service unreachable", url=url, error=str(exc))
            raise CollaboratorError("customer", str(exc)) from exc

        if response.status_code == 404:
            return None
        if response.status_code != 200:
            raise CollaboratorError("customer", f"service returned status: {response.status_code}")
        return response.json().get("data") or None

    def get_customer(self, organization_id: str, customer_id: str) -> CustomerProfile | None:
        data = self._fetch(organization_id, f"/api/v1/customers/{customer_id}")
        if data is None:
            return None
        return CustomerProfile(
            id=str(data.get("id") or customer_id),
            organization_id=data.get("organization_id"),
            display_name=data.get("display_name"),
            company_name=data.get("company_name"),
            email=data.get("email"),
            phone=data.get("phone_work"),
            billing_street=data.get("street1"),
            billing_city=data.get("city"),
            billing_state=data.get("state"),
            billing_code=data.get("zip_code"),
            billing_country=data.get("country"),
            shipping_street=data.get("shipping_street1"),
            shipping_city=data.get("shipping_city"),
            shipping_state=data.get("shipping_state"),
            shipping_code=data.get("shipping_zip_code"),
            shipping_country=data.get("shipping_country"),
        )

    def get_contact(self, organization_id: str, contact_id: str) -> ContactProfile | None:
        data = self._fetch(organization_id, f"/api/v1/contacts/{contact_id}")
        if data is None:
            return None
        return ContactProfile(
            id=str(data.get("id") or contact_id),
            customer_id=data.get("customer_id"),
            first_name=data.get("first_name"),
            last_name=data.get("last_name"),
            email=data.get("email"),
            phone=data.get("phone"),
        )
