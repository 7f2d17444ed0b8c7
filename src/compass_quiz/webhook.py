"""WebhookLeadSink — posts lead payloads to an external HTTP endpoint.

An alternative to the database sink for deployments that forward leads to
a CRM or automation tool.  Any non-2xx response or transport error is
reported as a :class:`LeadSinkError` with a generic user-facing message;
details go to the log.
"""

from __future__ import annotations

import logging

import httpx

from compass_quiz.constants import SINK_FAILURE_MESSAGE
from compass_quiz.errors import LeadSinkError
from compass_quiz.interfaces import LeadSink
from compass_quiz.models.lead import LeadPayload

logger = logging.getLogger(__name__)


class WebhookLeadSink(LeadSink):
    """POST each payload as JSON to ``endpoint``.

    Args:
        endpoint: absolute URL of the receiving webhook
        client: optional shared ``httpx.AsyncClient``; one is created per
            call when omitted
        timeout: per-request timeout in seconds
    """

    def __init__(
        self,
        endpoint: str,
        *,
        client: httpx.AsyncClient | None = None,
        timeout: float = 10.0,
    ) -> None:
        self._endpoint = endpoint
        self._client = client
        self._timeout = timeout

    async def save(self, payload: LeadPayload) -> None:
        body = payload.model_dump(mode="json")
        try:
            if self._client is not None:
                response = await self._client.post(self._endpoint, json=body, timeout=self._timeout)
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await client.post(self._endpoint, json=body)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.error("Webhook lead submission to %s failed: %s", self._endpoint, exc)
            raise LeadSinkError(SINK_FAILURE_MESSAGE) from exc
        logger.info("Webhook lead submission to %s succeeded", self._endpoint)
