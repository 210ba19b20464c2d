"""Health, legacy filename-addressed signing and read-only file access."""
from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, File, Request, UploadFile
from fastapi.responses import Response

from contracts.api.dependencies import AppServices, get_contract_service, get_services
from contracts.api.schemas import LegacySignPayload
from contracts.logic.contract_service import ContractService, UploadedPdf
from contracts.models.file_ref import FileRef, StorageArea

logger = logging.getLogger(__name__)

router = APIRouter()


def read_upload(pdf: UploadFile, limit: int) -> UploadedPdf:
    """Read at most limit+1 bytes so an oversized body is detected without buffering it all."""
    data = pdf.file.read(limit + 1)
    return UploadedPdf(filename=pdf.filename or "document.pdf", content_type=pdf.content_type or "", data=data)


@router.get("/api/health")
def health() -> dict:
    return {"ok": True, "time": datetime.now(timezone.utc).isoformat()}


@router.get("/api/db-test")
def db_test(services: AppServices = Depends(get_services)) -> dict:
    row = services.records.fetchone("SELECT 1 AS ok")
    return {"message": "DB connected", "rows": [row]}


@router.post("/api/upload")
def upload_pdf(
    pdf: UploadFile = File(...),
    service: ContractService = Depends(get_contract_service),
) -> dict:
    ref = service.upload_legacy(read_upload(pdf, service.max_upload_bytes))
    return {"filename": ref.name, "path": ref.path}


@router.get("/api/signing/config")
def signing_config(services: AppServices = Depends(get_services)) -> dict:
    """Stamp size and render scale the browser client uses for placement."""
    signing = services.config.signing
    return {
        "stamp_width_px": signing.stamp_width_px,
        "stamp_height_px": signing.stamp_height_px,
        "preview_scale": signing.preview_scale,
    }


@router.get("/api/pdf/list")
def list_pdfs(service: ContractService = Depends(get_contract_service)) -> dict:
    return {"files": service.list_uploads()}


@router.post("/api/pdf/sign")
def sign_pdf(payload: LegacySignPayload, service: ContractService = Depends(get_contract_service)) -> dict:
    ref = service.sign_legacy(payload.filename, payload.to_request())
    return {"ok": True, "output": ref.path}


def _serve(request: Request, services: AppServices, area: StorageArea, name: str) -> Response:
    data = services.blobs.get(FileRef(area, name))
    media_type = "application/pdf" if name.lower().endswith(".pdf") else "application/octet-stream"
    if request.method == "HEAD":
        return Response(media_type=media_type, headers={"Content-Length": str(len(data))})
    return Response(content=data, media_type=media_type)


@router.api_route("/uploads/{name}", methods=["GET", "HEAD"])
def serve_upload(request: Request, name: str, services: AppServices = Depends(get_services)) -> Response:
    return _serve(request, services, StorageArea.UPLOADS, name)


@router.api_route("/storage/{name}", methods=["GET", "HEAD"])
def serve_artifact(request: Request, name: str, services: AppServices = Depends(get_services)) -> Response:
    return _serve(request, services, StorageArea.STORAGE, name)
