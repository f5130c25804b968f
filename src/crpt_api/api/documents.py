from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel, Field

from crpt_api.core.config import get_settings
from crpt_api.services.crpt_client import TransportError
from crpt_api.services.crpt_gateway import get_crpt_api
from crpt_api.services.documents import Document
from crpt_api.services.throttle import ConfigurationError, InterruptedWait

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/v1", tags=["documents"])


class SubmissionResponse(BaseModel):
    status_code: int = Field(
        ...,
        description="HTTP status returned by CRPT.",
        json_schema_extra={"example": 200},
    )
    body: str = Field(
        ...,
        description="Raw CRPT response body.",
        json_schema_extra={"example": '{"value": "a1b2c3d4-0001"}'},
    )


@router.post(
    "/documents",
    response_model=SubmissionResponse,
    summary="Create a document in CRPT",
    description=(
            "Submits the document through the shared throttle. When all permits are "
            "held the request waits for one instead of failing."
    ),
    responses={
        422: {"description": "Validation error (invalid document or missing signature)."},
        429: {"description": "No permit became available within CRPT_RL_ACQUIRE_TIMEOUT_S."},
        500: {"description": "Service misconfiguration (e.g. invalid throttle settings)."},
        502: {"description": "Upstream CRPT/network error."},
    },
)
def create_document(
        document: Document,
        signature: Annotated[
            str | None,
            Query(
                description="Document signature, sent base64-encoded. Defaults to CRPT_SIGNATURE.",
                examples=["mySign"],
            ),
        ] = None,
) -> SubmissionResponse:
    logger.info("Request /v1/documents doc_id=%s products=%d", document.doc_id, len(document.products))

    try:
        settings = get_settings()
    except ConfigurationError as exc:
        logger.exception("Service misconfiguration in /v1/documents")
        raise HTTPException(status_code=500, detail=str(exc)) from exc

    sign = signature or settings.signature
    if not sign:
        raise HTTPException(status_code=422, detail="signature is required")

    timeout = settings.rl_acquire_timeout_s if settings.rl_acquire_timeout_s > 0 else None

    try:
        response = get_crpt_api().create_document(document, sign, timeout=timeout)

    except ConfigurationError as exc:
        logger.exception("Service misconfiguration in /v1/documents")
        raise HTTPException(status_code=500, detail=str(exc)) from exc

    except InterruptedWait as exc:
        logger.warning("Throttle wait timed out in /v1/documents")
        raise HTTPException(status_code=429, detail="Too many requests") from exc

    except TransportError as exc:
        raise HTTPException(status_code=502, detail="CRPT upstream error") from exc

    except Exception:
        logger.exception("Unexpected error in /v1/documents")
        raise

    return SubmissionResponse(status_code=response.status_code, body=response.body)
