"""
HTTP client the dashboard uses to talk to the orders API
"""
import logging
from typing import Any, Dict, Optional

import requests

from config.settings import Settings

logger = logging.getLogger(__name__)


class DashboardApiError(Exception):
    """The API could not be reached or answered with an error"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class OrdersApiClient:
    """Thin wrapper around the orders endpoints"""

    def __init__(self, base_url: str, timeout: float = 10.0, session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_settings(cls, settings: Settings) -> "OrdersApiClient":
        return cls(settings.DASHBOARD_API_URL, timeout=settings.DASHBOARD_REQUEST_TIMEOUT_SECONDS)

    def _request(self, method: str, endpoint: str, **kwargs) -> Any:
        url = f"{self.base_url}{endpoint}"
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.exceptions.RequestException as e:
            logger.error(f"Connection error on {method} {endpoint}: {e}")
            raise DashboardApiError(f"Connection Error: {e}") from e

        if response.status_code >= 400:
            try:
                body = response.json()
            except ValueError:
                body = None
            detail = body.get("detail") if isinstance(body, dict) else None
            message = detail if isinstance(detail, str) else f"API Error: {response.status_code}"
            logger.error(f"{method} {endpoint} failed with {response.status_code}: {response.text}")
            raise DashboardApiError(message, response.status_code)
        return response.json()

    def health(self) -> Dict[str, Any]:
        return self._request("GET", "/health")

    def get_overview(self, limit: Optional[int] = None) -> Dict[str, Any]:
        params = {"limit": limit} if limit else None
        return self._request("GET", "/orders", params=params)

    def get_order(self, order_id: int) -> Optional[Dict[str, Any]]:
        """Order detail, or None when the order does not exist"""
        try:
            return self._request("GET", f"/orders/{order_id}")
        except DashboardApiError as e:
            if e.status_code == 404:
                return None
            raise

    def get_order_form(self, order_id: int) -> Dict[str, Any]:
        return self._request("GET", f"/orders/{order_id}/form")

    def take_in_progress(self, order_id: int) -> Dict[str, Any]:
        return self._request("POST", f"/orders/{order_id}/take-in-progress")

    def mark_processed(self, order_id: int) -> Dict[str, Any]:
        return self._request("POST", f"/orders/{order_id}/mark-processed")

    def save_order(self, order_id: int, status: Optional[str], shipment_data: Dict[str, Any]) -> Dict[str, Any]:
        return self._request(
            "PUT",
            f"/orders/{order_id}",
            json={"status": status, "shipment_data": shipment_data},
        )

    def delete_order(self, order_id: int) -> Dict[str, Any]:
        return self._request("DELETE", f"/orders/{order_id}")
