from __future__ import annotations

import base64
import logging
from dataclasses import dataclass

import httpx

from crpt_api.core.config import get_settings

logger = logging.getLogger(__name__)


class TransportError(Exception):
    pass


@dataclass(frozen=True)
class SubmissionRequest:
    body: str
    signature: str


@dataclass(frozen=True)
class CrptResponse:
    status_code: int
    body: str


def encode_signature(signature: str) -> str:
    return base64.b64encode(signature.encode("utf-8")).decode("ascii")


class CrptClient:
    """
    Thin client for the CRPT document creation endpoint.

    Any network failure or non-2xx status is raised as TransportError.
    """

    def __init__(self) -> None:
        settings = get_settings()

        self._url = settings.create_document_url
        self._timeout = httpx.Timeout(
            settings.read_timeout_s,
            connect=settings.connect_timeout_s,
        )
        self._headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    @property
    def url(self) -> str:
        return self._url

    def _build_headers(self, request: SubmissionRequest) -> dict[str, str]:
        headers = dict(self._headers)
        headers["Signature"] = encode_signature(request.signature)
        return headers

    def send(self, request: SubmissionRequest) -> CrptResponse:
        logger.info("CRPT request: POST %s body_len=%d", self._url, len(request.body))

        try:
            with httpx.Client(timeout=self._timeout) as client:
                resp = client.post(self._url, content=request.body, headers=self._build_headers(request))
            logger.info("CRPT response: status=%s", resp.status_code)
            resp.raise_for_status()
        except httpx.HTTPError as exc:
            raise TransportError(f"CRPT request failed: {type(exc).__name__}") from exc

        return CrptResponse(status_code=resp.status_code, body=resp.text)

    async def send_async(self, request: SubmissionRequest) -> CrptResponse:
        logger.info("CRPT request: POST %s body_len=%d", self._url, len(request.body))

        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.post(self._url, content=request.body, headers=self._build_headers(request))
            logger.info("CRPT response: status=%s", resp.status_code)
            resp.raise_for_status()
        except httpx.HTTPError as exc:
            raise TransportError(f"CRPT request failed: {type(exc).__name__}") from exc

        return CrptResponse(status_code=resp.status_code, body=resp.text)
