"""HubSpot CRM client for writing a company's legal name."""

import httpx

from company_extractor.errors import CRMUpdateFailed
from company_extractor.utils.config import CRMConfig
from company_extractor.utils.logger import get_logger

logger = get_logger(__name__)


class HubSpotClient:
    """Minimal client for the HubSpot companies API.

    Args:
        config: Base URL, access token and timeout.
        client: Optional preconfigured HTTP client. A client passed in is left
            open by :meth:`close`.
    """

    def __init__(self, config: CRMConfig, client: httpx.Client | None = None) -> None:
        self.config = config
        self._owns_client = client is None
        self.client = client or httpx.Client(timeout=config.timeout_seconds)

    def __enter__(self) -> "HubSpotClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_client:
            self.client.close()

    @property
    def configured(self) -> bool:
        return bool(self.config.access_token)

    def update_company_name(self, company_id: str, name: str) -> dict:
        """Set the ``name`` property of a company record.

        Args:
            company_id: HubSpot company ID.
            name: New company name.

        Returns:
            The updated company object returned by HubSpot.

        Raises:
            CRMUpdateFailed: If no token is configured, the request cannot
                be sent, or HubSpot answers with a non-2xx status.
        """
        if not self.configured:
            raise CRMUpdateFailed("HubSpot access token is not configured")
        if not company_id or not name:
            raise CRMUpdateFailed("Company ID and company name are required")

        url = f"{self.config.base_url.rstrip('/')}/crm/v3/objects/companies/{company_id}"
        headers = {
            "Authorization": f"Bearer {self.config.access_token}",
            "Content-Type": "application/json",
        }
        logger.info("Updating company %s name to %r", company_id, name)

        try:
            response = self.client.patch(
                url, json={"properties": {"name": name}}, headers=headers
            )
        except httpx.HTTPError as exc:
            logger.error("HubSpot request for company %s failed: %s", company_id, exc)
            raise CRMUpdateFailed(f"HubSpot request failed: {exc}") from exc

        if not response.is_success:
            logger.error(
                "HubSpot rejected update of company %s: HTTP %d",
                company_id,
                response.status_code,
            )
            raise CRMUpdateFailed(
                f"HubSpot API error {response.status_code}: {response.text}",
                status_code=response.status_code,
            )

        logger.info("Company %s updated", company_id)
        try:
            return response.json()
        except ValueError:
            return {}
