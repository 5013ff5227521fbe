"""
Recruitee ATS Client

Thin synchronous wrapper over the Recruitee REST API (httpx).

- All calls are scoped to one Recruitee account: /c/{company_id}/...
- No retries: a failing upstream call raises ATSError and the API layer
  turns it into a 502
- Responses are returned as raw dicts; ats_parsing maps them to records
"""

from typing import Any, Dict, List, Optional

import httpx

from recruitops.core.config import Settings
from recruitops.core.log import get_logger
from recruitops.services.ats_parsing import extract_items

logger = get_logger(__name__)


class ATSError(Exception):
    """Recruitee returned an error or could not be reached."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ATSConfigError(ATSError):
    """Recruitee credentials are not configured."""


class RecruiteeClient:
    """
    Client for one Recruitee account.

    Usage:
        client = RecruiteeClient.from_settings(get_settings())
        offers = client.fetch_offers()
    """

    def __init__(
        self,
        api_key: str,
        company_id: str,
        base_url: str = "https://api.recruitee.com",
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.api_key = api_key
        self.company_id = str(company_id or "")
        self.http = httpx.Client(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            transport=transport,
            headers={
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
            },
        )

    @classmethod
    def from_settings(cls, settings: Settings, transport: Optional[httpx.BaseTransport] = None):
        return cls(
            api_key=settings.recruitee_api_key,
            company_id=settings.recruitee_company_id,
            base_url=settings.recruitee_base_url,
            timeout=settings.recruitee_timeout_seconds,
            transport=transport,
        )

    @property
    def configured(self) -> bool:
        return bool(self.api_key and self.company_id)

    @property
    def account_id(self) -> int:
        """Numeric account id, used as company id for offers without one."""
        try:
            return int(self.company_id)
        except ValueError:
            return 0

    def close(self) -> None:
        self.http.close()

    # ============================================================
    # TRANSPORT
    # ============================================================

    def _get(self, path: str, params: Optional[Dict[str, Any]] = None,
             allow_404: bool = False) -> Any:
        """
        GET /c/{company_id}{path} and return the decoded JSON.

        Returns None for a 404 when allow_404 is set.
        """
        if not self.configured:
            raise ATSConfigError("Recruitee API credentials not configured")

        url = f"/c/{self.company_id}{path}"
        try:
            response = self.http.get(url, params=params)
        except httpx.HTTPError as e:
            logger.error("Recruitee request %s failed: %s", url, e)
            raise ATSError(f"Recruitee request failed: {e}") from e

        if response.status_code == 404 and allow_404:
            return None
        if response.is_error:
            body = response.text[:200]
            logger.error("Recruitee API error %s on %s: %s", response.status_code, url, body)
            raise ATSError(
                f"Recruitee API error: {response.status_code} {response.reason_phrase}. {body}",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            raise ATSError(f"Recruitee returned invalid JSON for {url}") from e

    # ============================================================
    # ENDPOINTS
    # ============================================================

    def fetch_offers(self, status: str = "published", page: int = 1, per_page: int = 100) -> List[dict]:
        """Raw offers (vacancies) with the given status."""
        payload = self._get("/offers", {"status": status, "page": page, "per_page": per_page})
        return extract_items(payload, "offers") or extract_items(payload, "jobs")

    def fetch_all_offers(self, status: str = "published", per_page: int = 100,
                         max_pages: int = 50) -> List[dict]:
        """Page through /offers until a short page or the page limit."""
        offers: List[dict] = []
        for page in range(1, max_pages + 1):
            batch = self.fetch_offers(status=status, page=page, per_page=per_page)
            offers.extend(batch)
            if len(batch) < per_page:
                break
        return offers

    def fetch_offer(self, offer_id: int) -> Optional[dict]:
        """One offer, or None when Recruitee does not know it."""
        payload = self._get(f"/offers/{offer_id}", allow_404=True)
        if payload is None:
            return None
        if isinstance(payload, dict) and isinstance(payload.get("offer"), dict):
            return payload["offer"]
        return payload

    def fetch_companies(self) -> List[dict]:
        """Companies endpoint; not every account exposes it."""
        payload = self._get("/companies", allow_404=True)
        if payload is None:
            logger.warning("Recruitee companies endpoint not available")
            return []
        return extract_items(payload, "companies")

    def fetch_candidates(
        self,
        page: int = 1,
        per_page: int = 100,
        offer_id: Optional[int] = None,
        stage: Optional[str] = None,
    ) -> List[dict]:
        params: Dict[str, Any] = {"page": page, "per_page": per_page}
        if offer_id:
            params["offer_id"] = offer_id
        if stage:
            params["stage"] = stage

        payload = self._get("/candidates", params, allow_404=True)
        if payload is None:
            logger.warning("Recruitee candidates endpoint not available")
            return []
        return extract_items(payload, "candidates")

    def fetch_all_candidates(self, per_page: int = 100, max_pages: int = 50) -> List[dict]:
        """
        Page through /candidates until a short page or the page limit.
        """
        candidates: List[dict] = []
        for page in range(1, max_pages + 1):
            batch = self.fetch_candidates(page=page, per_page=per_page)
            candidates.extend(batch)
            if len(batch) < per_page:
                break
        else:
            logger.warning("Reached candidate page limit (%s pages), stopping pagination", max_pages)

        logger.info("Fetched %s candidates from Recruitee", len(candidates))
        return candidates

    def fetch_placements(self, offer_id: int) -> List[dict]:
        """Placements of an offer. Any upstream error yields []."""
        try:
            payload = self._get(f"/offers/{offer_id}/placements", allow_404=True)
        except ATSConfigError:
            raise
        except ATSError as e:
            logger.warning("Placements for offer %s unavailable: %s", offer_id, e)
            return []
        return extract_items(payload, "placements")
