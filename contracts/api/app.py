"""
FastAPI application factory.

Storage is injected: production wiring uses the filesystem blob store and the
SQLite record store from configuration; tests pass in-memory stores.
"""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from contracts import __version__
from contracts.adapters.blob_store import BlobStore
from contracts.adapters.filesystem_blob_store import FilesystemBlobStore
from contracts.adapters.identity_directory import RecordStoreIdentityDirectory
from contracts.adapters.record_store import RecordStore
from contracts.adapters.sqlite_record_store import SQLiteRecordStore
from contracts.api.dependencies import AppServices
from contracts.api.errors import install_error_handlers
from contracts.api.routes_approvals import router as approvals_router
from contracts.api.routes_contracts import router as contracts_router
from contracts.api.routes_files import router as files_router
from contracts.logic.approval_state_machine import ApprovalStateMachine
from contracts.logic.audit_trail import AuditTrail
from contracts.logic.contract_service import ContractService
from contracts.logic.reclaimer import ArtifactReclaimer
from contracts.logic.version_ledger import VersionLedger
from contracts.repository.contract_repository import ContractRepository
from core.config.config_service import AppConfig, config_service

logger = logging.getLogger(__name__)


def build_services(
    config: AppConfig,
    *,
    blobs: Optional[BlobStore] = None,
    records: Optional[RecordStore] = None,
    synchronous_reclaim: bool = False,
) -> AppServices:
    owns_records = records is None
    if blobs is None:
        blobs = FilesystemBlobStore(config.storage.uploads_dir, config.storage.storage_dir)
    if records is None:
        records = SQLiteRecordStore(config.database.records)

    repository = ContractRepository(records)
    directory = RecordStoreIdentityDirectory(records)
    audit = AuditTrail(records)
    reclaimer = ArtifactReclaimer(blobs, synchronous=synchronous_reclaim)
    ledger = VersionLedger(repository, blobs, reclaimer)
    machine = ApprovalStateMachine(repository=repository, ledger=ledger, directory=directory, audit=audit)
    contracts = ContractService(
        repository=repository,
        ledger=ledger,
        machine=machine,
        directory=directory,
        blobs=blobs,
        audit=audit,
        max_upload_bytes=config.server.max_file_size_bytes,
    )
    return AppServices(
        config=config,
        blobs=blobs,
        records=records,
        directory=directory,
        reclaimer=reclaimer,
        contracts=contracts,
        owns_records=owns_records,
    )


def create_app(
    config: Optional[AppConfig] = None,
    *,
    blobs: Optional[BlobStore] = None,
    records: Optional[RecordStore] = None,
    synchronous_reclaim: bool = False,
) -> FastAPI:
    cfg = config or config_service.app_config()
    services = build_services(cfg, blobs=blobs, records=records, synchronous_reclaim=synchronous_reclaim)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Contract signing service %s starting", __version__)
        yield
        services.reclaimer.shutdown()
        if services.owns_records:
            services.records.close()
        logger.info("Contract signing service stopped")

    app = FastAPI(
        title="Contract Signing Service",
        description="Visual PDF stamping and multi-approver contract workflow",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.services = services

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.server.cors_origin_list(),
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Render-Scale", "X-Page-Height-Pixels", "X-Page-Width-Pixels"],
    )
    install_error_handlers(app)

    app.include_router(files_router)
    app.include_router(contracts_router)
    app.include_router(approvals_router)
    return app
