"""Wire and document models exchanged with the registry.

Request/response bodies of the three endpoints plus the "introduce goods"
document record. Optional fields default to ``None`` and are omitted from
serialized payloads; dates serialize as ISO-8601 strings. Unknown fields in
registry responses are ignored.
"""

from __future__ import annotations

from datetime import date
from enum import Enum
from typing import ClassVar, List, Optional

from pydantic import BaseModel, ConfigDict, Field

APPLICATION_JSON = "application/json;charset=UTF-8"


class DocumentType(str, Enum):
    """Document types accepted by the registry."""

    AGGREGATION_DOCUMENT = "AGGREGATION_DOCUMENT"
    DISAGGREGATION_DOCUMENT = "DISAGGREGATION_DOCUMENT"
    REAGGREGATION_DOCUMENT = "REAGGREGATION_DOCUMENT"
    LP_INTRODUCE_GOODS = "LP_INTRODUCE_GOODS"
    LP_SHIP_GOODS = "LP_SHIP_GOODS"
    LP_ACCEPT_GOODS = "LP_ACCEPT_GOODS"
    LK_REMARK = "LK_REMARK"
    LK_RECEIPT = "LK_RECEIPT"
    LP_GOODS_IMPORT = "LP_GOODS_IMPORT"
    LP_CANCEL_SHIPMENT = "LP_CANCEL_SHIPMENT"
    LK_KM_CANCELLATION = "LK_KM_CANCELLATION"
    LK_APPLIED_KM_CANCELLATION = "LK_APPLIED_KM_CANCELLATION"
    LK_CONTRACT_COMMISSIONING = "LK_CONTRACT_COMMISSIONING"
    LK_INDI_COMMISSIONING = "LK_INDI_COMMISSIONING"
    LP_SHIP_RECEIPT = "LP_SHIP_RECEIPT"
    OST_DESCRIPTION = "OST_DESCRIPTION"
    CROSSBORDER = "CROSSBORDER"
    LP_INTRODUCE_OST = "LP_INTRODUCE_OST"
    LP_RETURN = "LP_RETURN"
    LP_SHIP_GOODS_CROSSBORDER = "LP_SHIP_GOODS_CROSSBORDER"
    LP_CANCEL_SHIPMENT_CROSSBORDER = "LP_CANCEL_SHIPMENT_CROSSBORDER"


# ============================================================================
# Authentication exchange
# ============================================================================


class _WireModel(BaseModel):
    model_config: ClassVar[ConfigDict] = ConfigDict(extra="ignore", frozen=True)


class AuthChallenge(_WireModel):
    """Challenge issued by the registry: sign ``data`` and echo ``uuid`` back."""

    uuid: str
    data: str


class SignedChallenge(_WireModel):
    """Token exchange request body; ``data`` holds the encoded signature."""

    uuid: str
    data: str


class TokenResponse(_WireModel):
    token: str


# ============================================================================
# Document submission
# ============================================================================


class RegistrationRequest(_WireModel):
    """Body of the create-document call."""

    document_format: str
    product_document: str
    product_group: Optional[str] = None
    signature: str
    type: DocumentType

    def to_json(self) -> str:
        return self.model_dump_json(exclude_none=True)


class RegistrationResult(_WireModel):
    """Registry response to a document submission; ``value`` is the registry id."""

    value: str


# ============================================================================
# Introduce-goods document
# ============================================================================


class _DocumentModel(BaseModel):
    model_config: ClassVar[ConfigDict] = ConfigDict(
        extra="forbid", frozen=True, populate_by_name=True
    )


class Description(_DocumentModel):
    participant_inn: str = Field(alias="participantInn")


class Product(_DocumentModel):
    certificate_document: Optional[str] = None
    certificate_document_date: Optional[date] = None
    certificate_document_number: Optional[str] = None
    owner_inn: str
    producer_inn: str
    production_date: date
    tnved_code: str
    uit_code: Optional[str] = None
    uitu_code: Optional[str] = None


class DocumentData(_DocumentModel):
    """Document for introducing goods produced in the country into circulation."""

    description: Optional[Description] = None
    doc_id: str
    doc_status: str
    doc_type: str
    import_request: Optional[bool] = Field(default=None, alias="importRequest")
    participant_inn: str
    producer_inn: str
    production_date: date
    production_type: str
    products: Optional[List[Product]] = None
    reg_date: date
    reg_number: Optional[str] = None

    def to_json(self) -> str:
        """Canonical JSON payload: registry field names, ``None`` fields omitted."""
        return self.model_dump_json(by_alias=True, exclude_none=True)
