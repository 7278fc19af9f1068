from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx
from pydantic import ValidationError

from app.core.config import settings
from app.schemas.quiz import DashboardQuizzes

logger = logging.getLogger("quizboard.dashboard_client")


@dataclass(frozen=True)
class DashboardFetch:
    """Outcome of one dashboard fetch: ``ok``, ``empty`` or ``error``."""

    status: str
    data: DashboardQuizzes | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.status == "ok"

    @classmethod
    def from_data(cls, data: DashboardQuizzes) -> DashboardFetch:
        if not data.active_quizzes and not data.attempted_quizzes:
            return cls(status="empty", data=data)
        return cls(status="ok", data=data)

    @classmethod
    def failed(cls, error: str) -> DashboardFetch:
        return cls(status="error", error=error)


class DashboardClient:
    def __init__(
        self,
        *,
        token: str | None = None,
        base_url: str | None = None,
        timeout_seconds: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        self.base_url = (str(base_url or "").strip() or str(settings.dashboard_base_url)).rstrip("/")
        self.token = token
        self.timeout_seconds = float(timeout_seconds) if timeout_seconds is not None else float(settings.dashboard_timeout_seconds)
        self._transport = transport

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def fetch_dashboard_quizzes(self, user_id: str) -> DashboardFetch:
        """Single GET, no retry. Failures are logged and returned, never raised."""
        url = f"{self.base_url}/api/dashboardquizzes"
        try:
            with httpx.Client(timeout=self.timeout_seconds, transport=self._transport) as client:
                r = client.get(url, params={"userId": str(user_id)}, headers=self._headers())
                r.raise_for_status()
                payload = r.json()
            data = DashboardQuizzes.model_validate(payload)
        except httpx.HTTPStatusError as e:
            logger.error("Failed to fetch dashboard quizzes: HTTP %s", e.response.status_code)
            return DashboardFetch.failed(f"http {e.response.status_code}")
        except httpx.HTTPError as e:
            logger.error("Failed to fetch dashboard quizzes: %s", e)
            return DashboardFetch.failed(type(e).__name__)
        except (ValueError, ValidationError) as e:
            logger.error("Failed to parse dashboard quizzes: %s", e)
            return DashboardFetch.failed("invalid payload")

        return DashboardFetch.from_data(data)
