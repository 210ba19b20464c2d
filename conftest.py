"""Shared pytest fixtures: PDFs built with reportlab, stamps built with Pillow,
in-memory blob storage and an in-memory SQLite record store."""
from __future__ import annotations

from io import BytesIO
from pathlib import Path

import pytest
from PIL import Image
from reportlab.lib.pagesizes import A4, letter
from reportlab.pdfgen import canvas

from contracts.adapters.memory_blob_store import InMemoryBlobStore
from contracts.adapters.sqlite_record_store import SQLiteRecordStore
from core.common.db_interface import MEMORY
from core.config.config_service import (
    AppConfig,
    DatabaseConfig,
    LoggingConfig,
    ServerConfig,
    SigningConfig,
    StorageConfig,
)
from signature.logic.image_payload import to_data_url
from signature.models.signature_enums import ImageKind

OWNER_ID = 1
APPROVER_A = 9
APPROVER_B = 10


def build_pdf(pages: int = 1, pagesize=letter) -> bytes:
    buf = BytesIO()
    c = canvas.Canvas(buf, pagesize=pagesize, invariant=1)
    for n in range(pages):
        c.drawString(72, 720, f"Page {n + 1}")
        c.showPage()
    c.save()
    return buf.getvalue()


def build_image(kind: ImageKind = ImageKind.PNG, size=(40, 20), color=(200, 20, 20)) -> bytes:
    buf = BytesIO()
    if kind is ImageKind.PNG:
        Image.new("RGBA", size, color + (255,)).save(buf, format="PNG")
    else:
        Image.new("RGB", size, color).save(buf, format="JPEG")
    return buf.getvalue()


@pytest.fixture
def pdf_bytes() -> bytes:
    return build_pdf(1)


@pytest.fixture
def two_page_pdf() -> bytes:
    return build_pdf(2, pagesize=A4)


@pytest.fixture
def png_bytes() -> bytes:
    return build_image(ImageKind.PNG)


@pytest.fixture
def jpeg_bytes() -> bytes:
    return build_image(ImageKind.JPEG)


@pytest.fixture
def png_data_url(png_bytes: bytes) -> str:
    return to_data_url(ImageKind.PNG, png_bytes)


@pytest.fixture
def blobs() -> InMemoryBlobStore:
    return InMemoryBlobStore()


@pytest.fixture
def records():
    store = SQLiteRecordStore(MEMORY)
    yield store
    store.close()


@pytest.fixture
def app_config(tmp_path: Path) -> AppConfig:
    return AppConfig(
        storage=StorageConfig(uploads_dir=tmp_path / "uploads", storage_dir=tmp_path / "storage"),
        database=DatabaseConfig(records=tmp_path / "contracts.db"),
        server=ServerConfig(max_file_size_mb=1),
        signing=SigningConfig(),
        logging=LoggingConfig(level="DEBUG"),
    )


@pytest.fixture
def services(app_config, blobs, records):
    from contracts.api.app import build_services

    built = build_services(app_config, blobs=blobs, records=records, synchronous_reclaim=True)
    built.directory.register(full_name="Olivia Owner", email="owner@example.com", user_id=OWNER_ID)
    built.directory.register(full_name="Aaron Approver", email="a@example.com", role="approver", user_id=APPROVER_A)
    built.directory.register(full_name="Bea Approver", email="b@example.com", role="approver", user_id=APPROVER_B)
    return built


@pytest.fixture
def client(app_config, blobs, records):
    from fastapi.testclient import TestClient
    from contracts.api.app import create_app

    app = create_app(app_config, blobs=blobs, records=records, synchronous_reclaim=True)
    directory = app.state.services.directory
    directory.register(full_name="Olivia Owner", email="owner@example.com", user_id=OWNER_ID)
    directory.register(full_name="Aaron Approver", email="a@example.com", role="approver", user_id=APPROVER_A)
    directory.register(full_name="Bea Approver", email="b@example.com", role="approver", user_id=APPROVER_B)
    with TestClient(app) as tc:
        yield tc


@pytest.fixture
def wiring(blobs, records):
    """Core collaborators wired by hand, with contract 7 owned by user 1."""
    from types import SimpleNamespace

    from contracts.adapters.identity_directory import RecordStoreIdentityDirectory
    from contracts.logic.approval_state_machine import ApprovalStateMachine
    from contracts.logic.audit_trail import AuditTrail
    from contracts.logic.reclaimer import ArtifactReclaimer
    from contracts.logic.version_ledger import VersionLedger
    from contracts.repository.contract_repository import ContractRepository

    repo = ContractRepository(records)
    directory = RecordStoreIdentityDirectory(records)
    directory.register(full_name="Olivia Owner", email="owner@example.com", user_id=OWNER_ID)
    directory.register(full_name="Aaron Approver", email="a@example.com", user_id=APPROVER_A)
    directory.register(full_name="Bea Approver", email="b@example.com", user_id=APPROVER_B)
    audit = AuditTrail(records)
    reclaimer = ArtifactReclaimer(blobs, synchronous=True)
    ledger = VersionLedger(repo, blobs, reclaimer)
    machine = ApprovalStateMachine(repository=repo, ledger=ledger, directory=directory, audit=audit)
    contract_id = repo.insert_contract(
        owner_id=OWNER_ID, contract_code="C-007", title="Office lease", vendor="ACME", contract_id=7
    )
    return SimpleNamespace(
        repo=repo,
        directory=directory,
        audit=audit,
        reclaimer=reclaimer,
        ledger=ledger,
        machine=machine,
        blobs=blobs,
        records=records,
        contract_id=contract_id,
    )
