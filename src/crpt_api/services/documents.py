from __future__ import annotations

import logging
from datetime import date
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError

logger = logging.getLogger(__name__)

_BASE_DIR = Path(__file__).resolve().parents[1]
SAMPLE_DOCUMENT_PATH = _BASE_DIR / "resources" / "document.json"


class DocumentFormatError(ValueError):
    pass


class _Model(BaseModel):
    # Unknown keys are ignored, fields can be set by name or by JSON key
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class Description(_Model):
    participant_inn: str | None = Field(default=None, alias="participantInn")


class Product(_Model):
    certificate_document: str | None = None
    certificate_document_date: date | None = None
    certificate_document_number: str | None = None
    owner_inn: str | None = None
    producer_inn: str | None = None
    production_date: date | None = None
    tnved_code: str | None = None
    uit_code: str | None = None
    uitu_code: str | None = None


class Document(_Model):
    description: Description | None = None
    doc_id: str | None = None
    doc_status: str | None = None
    doc_type: str | None = Field(default=None, json_schema_extra={"example": "LP_INTRODUCE_GOODS"})
    import_request: bool = Field(default=False, alias="importRequest")
    owner_inn: str | None = None
    participant_inn: str | None = None
    producer_inn: str | None = None
    production_date: str | None = None
    production_type: str | None = None
    products: list[Product] = Field(default_factory=list)
    reg_date: str | None = None
    reg_number: str | None = None


def parse_document(raw: str | bytes) -> Document:
    """
    Decode a document (with nested description and products) in one pass.
    """
    try:
        return Document.model_validate_json(raw)
    except ValidationError as exc:
        raise DocumentFormatError(f"invalid document: {exc.error_count()} error(s)") from exc


def load_document(path: Path | str) -> Document:
    path = Path(path)
    logger.info("Loading document from %s", path)
    return parse_document(path.read_bytes())


def load_sample_document() -> Document:
    return load_document(SAMPLE_DOCUMENT_PATH)


def serialize_document(document: Document) -> str:
    # Dates are written as ISO strings
    return document.model_dump_json(by_alias=True)
