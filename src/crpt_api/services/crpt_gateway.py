from __future__ import annotations

import logging
import threading

from crpt_api.core.config import get_settings
from crpt_api.services.crpt_client import CrptClient, CrptResponse, SubmissionRequest, TransportError
from crpt_api.services.documents import Document, serialize_document
from crpt_api.services.throttle import AsyncThrottle, Throttle

logger = logging.getLogger(__name__)


def build_request(document: Document, signature: str) -> SubmissionRequest:
    return SubmissionRequest(body=serialize_document(document), signature=signature)


def process_response(response: CrptResponse) -> None:
    # Status interpretation hook, nothing is done with the body yet
    logger.info("CRPT document response processed status=%s", response.status_code)


class CrptApi:
    """
    Document submission through a shared Throttle.
    """

    def __init__(self, throttle: Throttle, client: CrptClient | None = None) -> None:
        self._throttle = throttle
        self._client = client if client is not None else CrptClient()

    @property
    def throttle(self) -> Throttle:
        return self._throttle

    def create_document(
            self,
            document: Document,
            signature: str,
            *,
            timeout: float | None = None,
    ) -> CrptResponse:
        request = build_request(document, signature)

        try:
            response = self._throttle.submit(request, self._client.send, timeout=timeout)
        except TransportError:
            logger.exception("CRPT create document failed doc_id=%s", document.doc_id)
            raise

        process_response(response)
        return response


class AsyncCrptApi:
    def __init__(self, throttle: AsyncThrottle, client: CrptClient | None = None) -> None:
        self._throttle = throttle
        self._client = client if client is not None else CrptClient()

    @property
    def throttle(self) -> AsyncThrottle:
        return self._throttle

    async def create_document(
            self,
            document: Document,
            signature: str,
            *,
            timeout: float | None = None,
    ) -> CrptResponse:
        request = build_request(document, signature)

        try:
            response = await self._throttle.submit(request, self._client.send_async, timeout=timeout)
        except TransportError:
            logger.exception("CRPT create document failed doc_id=%s", document.doc_id)
            raise

        process_response(response)
        return response


_api_lock = threading.Lock()
_api: CrptApi | None = None
_api_cfg: tuple[int, float, str] | None = None


def reset_crpt_api() -> None:
    """
    Test helper. Drops the shared instance so settings are re-read.
    """
    global _api, _api_cfg
    with _api_lock:
        _api = None
        _api_cfg = None


def get_crpt_api() -> CrptApi:
    """
    Return the process-wide CrptApi.

    A changed CRPT URL only swaps the client and keeps the current permit
    pool. A changed capacity or cooldown builds a new pool; callers still on
    the old pool keep their permits there, so until they finish up to twice
    the capacity can be in flight. Settings are fixed for the life of a
    normal process, only tests change them.
    """
    settings = get_settings()
    cfg = (settings.rl_capacity, settings.rl_cooldown_s, settings.create_document_url)

    global _api, _api_cfg
    with _api_lock:
        if _api is not None and _api_cfg == cfg:
            return _api

        if _api is not None and _api_cfg is not None and _api_cfg[:2] == cfg[:2]:
            throttle = _api.throttle
        else:
            throttle = Throttle(capacity=settings.rl_capacity, cooldown_s=settings.rl_cooldown_s)
            logger.info(
                "CRPT throttle configured capacity=%s cooldown_s=%s",
                settings.rl_capacity,
                settings.rl_cooldown_s,
            )

        _api = CrptApi(throttle)
        _api_cfg = cfg
        return _api
