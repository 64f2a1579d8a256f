"""Outbound calls made when a quote is sent: persistence and email dispatch.

Each call is made once; a failure surfaces as ``SubmissionError`` and the
caller keeps the draft so the quote can be sent again.
"""
import logging
from typing import Optional

import httpx

from fleethire.core.config import settings
from fleethire.core.errors import SubmissionError
from fleethire.schemas.quote import QuoteEmail, QuoteRecord

logger = logging.getLogger(__name__)


class QuoteGateway:

    def __init__(
        self,
        quote_api_url: str,
        email_webhook_url: str,
        timeout: int = 10,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.quote_api_url = quote_api_url
        self.email_webhook_url = email_webhook_url
        self.timeout = timeout
        self.transport = transport

    async def _post(self, url: str, payload: dict) -> httpx.Response:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            response = await client.post(url, json=payload)
            response.raise_for_status()
            return response

    async def save_quote(self, record: QuoteRecord) -> dict:
        try:
            response = await self._post(self.quote_api_url, record.model_dump(mode="json"))
        except httpx.HTTPError as e:
            logger.error(f"Saving quote {record.quote_number} failed: {e}")
            raise SubmissionError(f"Quote could not be saved: {e}") from e

        try:
            saved = response.json()
        except ValueError:
            saved = None
        return saved if isinstance(saved, dict) else {}

    async def send_email(self, email: QuoteEmail) -> None:
        try:
            await self._post(self.email_webhook_url, email.model_dump())
        except httpx.TimeoutException as e:
            logger.error(f"Quote email to {email.to} timed out: {e}")
            raise SubmissionError(f"Quote email to {email.to} could not be sent: timeout") from e
        except httpx.HTTPError as e:
            logger.error(f"Quote email to {email.to} failed: {e}")
            raise SubmissionError(f"Quote email to {email.to} could not be sent: {e}") from e
        logger.info(f"Quote email delivered to {email.to}")


def get_quote_gateway() -> QuoteGateway:
    return QuoteGateway(
        settings.QUOTE_API_URL,
        settings.EMAIL_WEBHOOK_URL,
        timeout=settings.WEBHOOK_TIMEOUT,
    )
