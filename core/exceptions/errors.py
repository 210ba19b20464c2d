"""Error taxonomy shared by the signature and contracts features.

Every error carries a human message plus a machine ``code`` so that clients
can tell a retryable input error from a systemic failure.
"""
from __future__ import annotations

from typing import Any, Optional


class ContractSignError(Exception):
    """Base exception for the signing/approval service."""

    default_code = "error"

    def __init__(self, message: str, *, code: Optional[str] = None, detail: Optional[Any] = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.detail = detail

    def as_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"message": self.message, "code": self.code}
        if self.detail is not None:
            data["detail"] = self.detail
        return data


class ValidationError(ContractSignError):
    """Bad or missing input. Client-facing, never retried."""

    default_code = "validation_error"


class UnsupportedImageError(ValidationError):
    """Image payload is not a PNG/JPEG data URI."""

    default_code = "unsupported_image"


class ImageDecodeError(ValidationError):
    """Image bytes are empty or cannot be decoded as the declared kind."""

    default_code = "image_decode_failed"


class NotFoundError(ContractSignError):
    """Missing contract, approval, source document or stored file."""

    default_code = "not_found"


class ConflictError(ContractSignError):
    """Duplicate unique key or mutation of a terminal record."""

    default_code = "conflict"


class PayloadTooLargeError(ContractSignError):
    """Upload exceeds the configured size limit."""

    default_code = "payload_too_large"


class IntegrityError(ContractSignError):
    """Referential constraint violation or schema mismatch in the record store."""

    default_code = "integrity_error"


class SourceDocumentError(IntegrityError):
    """A stored source PDF could not be parsed."""

    default_code = "source_unreadable"


class StorageError(ContractSignError):
    """Blob storage failure. Logged by best-effort callers, never escalated by them."""

    default_code = "storage_error"
