"""
HTTP clients for the external systems the backend talks to.

- MailClient: posts reminder emails to the mail sending API
- HRSystemClient: reads the employee export from the HR system
"""

import logging
from typing import Dict, List, Optional

import httpx

from .config import settings
from .exceptions import ConfigurationError, HRSystemError, MailDeliveryError

logger = logging.getLogger(__name__)


class MailClient:
    """Sends plain-text emails through the configured mail API."""

    def __init__(self, endpoint: Optional[str] = None, timeout: float = None):
        self.endpoint = endpoint or settings.mail_api_endpoint
        self.timeout = timeout or settings.external_timeout_seconds

    async def send(self, to: str, subject: str, text: str) -> None:
        """
        Send one email.

        Raises:
            MailDeliveryError: If the endpoint is missing or the API rejects the send
        """
        if not self.endpoint:
            raise MailDeliveryError(to, "MAIL_API_ENDPOINT is not configured")

        payload = {"to": to, "subject": subject, "text": text}

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(self.endpoint, json=payload)
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(f"Mail API returned {e.response.status_code} for {to}")
            raise MailDeliveryError(to, f"HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            logger.error(f"Mail API request failed for {to}: {e}")
            raise MailDeliveryError(to, str(e)) from e

        logger.info(f"Sent mail to {to}: {subject}")


class HRSystemClient:
    """Reads employees from the HR system API with a bearer key."""

    def __init__(self, url: Optional[str] = None, api_key: Optional[str] = None, timeout: float = None):
        self.url = url or settings.hr_system_api_url
        self.api_key = api_key or settings.hr_system_api_key
        self.timeout = timeout or settings.external_timeout_seconds

    async def fetch_employees(self) -> List[Dict]:
        """
        Fetch the employee list.

        Returns:
            List of HR employee records (camelCase keys)

        Raises:
            ConfigurationError: If HR_SYSTEM_API_URL is not set
            HRSystemError: If the request fails or the body is not a list
        """
        if not self.url:
            raise ConfigurationError("HR_SYSTEM_API_URL", "not configured")

        headers = {}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(self.url, headers=headers)
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as e:
            raise HRSystemError(f"HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise HRSystemError(str(e)) from e
        except ValueError as e:
            raise HRSystemError("response is not valid JSON") from e

        if not isinstance(data, list):
            raise HRSystemError("expected a list of employees")

        logger.info(f"Fetched {len(data)} employees from HR system")
        return data
