from __future__ import annotations

from dataclasses import dataclass

from fastapi import Request

from contracts.adapters.blob_store import BlobStore
from contracts.adapters.identity_directory import RecordStoreIdentityDirectory
from contracts.adapters.record_store import RecordStore
from contracts.logic.contract_service import ContractService
from contracts.logic.reclaimer import ArtifactReclaimer
from core.config.config_service import AppConfig


@dataclass
class AppServices:
    """Everything a request handler may touch; built once per application."""
    config: AppConfig
    blobs: BlobStore
    records: RecordStore
    directory: RecordStoreIdentityDirectory
    reclaimer: ArtifactReclaimer
    contracts: ContractService
    owns_records: bool = True


def get_services(request: Request) -> AppServices:
    services = getattr(request.app.state, "services", None)
    if services is None:
        raise RuntimeError("services not initialized")
    return services


def get_contract_service(request: Request) -> ContractService:
    return get_services(request).contracts
