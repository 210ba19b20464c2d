"""Request payloads for the HTTP surface.

Field names follow the browser client (camelCase where it sends camelCase);
snake_case aliases are accepted too.
"""
from __future__ import annotations

from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from contracts.logic.contract_service import SignRequest
from signature.models.annotation_placement import PdfRect


class SignPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    page_index: int = Field(validation_alias=AliasChoices("pageIndex", "page_index"), ge=0)
    x: float = Field(allow_inf_nan=False)
    y: float = Field(allow_inf_nan=False)
    width: float = Field(allow_inf_nan=False)
    height: float = Field(allow_inf_nan=False)
    image_data_url: str = Field(validation_alias=AliasChoices("imageDataUrl", "image_data_url"), min_length=1)

    def to_request(self, notes: Optional[str] = None) -> SignRequest:
        return SignRequest(
            page_index=self.page_index,
            rect=PdfRect(x=self.x, y=self.y, width=self.width, height=self.height),
            image_data_url=self.image_data_url,
            notes=notes,
        )


class LegacySignPayload(SignPayload):
    filename: str = Field(min_length=1)


class ApprovalSignPayload(SignPayload):
    notes: Optional[str] = None


class RejectPayload(BaseModel):
    notes: Optional[str] = None


class RequestApprovalPayload(BaseModel):
    approver_id: int = Field(validation_alias=AliasChoices("approver_id", "approverId"), gt=0)


class ContractCreatePayload(BaseModel):
    title: Optional[str] = Field(default=None, validation_alias=AliasChoices("title", "contract_title"))
    vendor: Optional[str] = Field(default=None, validation_alias=AliasChoices("vendor", "vendor_name"))
    contract_code: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("contractId", "contract_id", "contract_code")
    )
    owner_id: Optional[int] = Field(default=None, validation_alias=AliasChoices("owner_id", "ownerId", "user_id"))


class ContractUpdatePayload(BaseModel):
    title: Optional[str] = Field(default=None, validation_alias=AliasChoices("title", "contract_title"))
    vendor: Optional[str] = Field(default=None, validation_alias=AliasChoices("vendor", "vendor_name"))
    contract_code: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("contractId", "contract_id", "contract_code")
    )
