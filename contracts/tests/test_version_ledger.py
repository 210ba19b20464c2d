from __future__ import annotations

import pytest

from contracts.models.file_ref import FileRef, StorageArea
from core.exceptions.errors import NotFoundError, ValidationError


def _up(name: str) -> FileRef:
    return FileRef(StorageArea.UPLOADS, name)


def _st(name: str) -> FileRef:
    return FileRef(StorageArea.STORAGE, name)


def test_resolve_without_upload(wiring) -> None:
    with pytest.raises(NotFoundError) as info:
        wiring.ledger.resolve_source(wiring.contract_id)
    assert info.value.code == "source_not_uploaded"


def test_first_upload_supersedes_nothing(wiring) -> None:
    assert wiring.ledger.record_upload(7, _up("a.pdf")) == []
    versions = wiring.ledger.version_set(7)
    assert versions.original_ref == _up("a.pdf")
    assert versions.signed_ref is None
    assert wiring.ledger.resolve_source(7) == _up("a.pdf")


def test_signed_artifact_becomes_the_source(wiring) -> None:
    wiring.ledger.record_upload(7, _up("a.pdf"))
    assert wiring.ledger.record_signed(7, _st("s1.pdf")) == []
    assert wiring.ledger.resolve_source(7) == _st("s1.pdf")
    assert wiring.ledger.record_signed(7, _st("s2.pdf")) == [_st("s1.pdf")]
    assert wiring.ledger.version_set(7).original_ref == _up("a.pdf")


@pytest.mark.parametrize("signed_first", [False, True])
def test_reupload_always_clears_signed(wiring, signed_first: bool) -> None:
    wiring.ledger.record_upload(7, _up("a.pdf"))
    if signed_first:
        wiring.ledger.record_signed(7, _st("s1.pdf"))
    superseded = wiring.ledger.record_upload(7, _up("b.pdf"))
    versions = wiring.ledger.version_set(7)
    assert versions.signed_ref is None
    assert versions.original_ref == _up("b.pdf")
    expected = [_up("a.pdf"), _st("s1.pdf")] if signed_first else [_up("a.pdf")]
    assert superseded == expected


def test_load_source_requires_blob(wiring, pdf_bytes) -> None:
    wiring.ledger.record_upload(7, _up("gone.pdf"))
    with pytest.raises(NotFoundError) as info:
        wiring.ledger.load_source(7)
    assert info.value.code == "source_missing"

    wiring.blobs.put(_up("here.pdf"), pdf_bytes)
    wiring.ledger.record_upload(7, _up("here.pdf"))
    ref, data = wiring.ledger.load_source(7)
    assert ref == _up("here.pdf")
    assert data == pdf_bytes


def test_legacy_source_lookup(wiring, pdf_bytes) -> None:
    wiring.blobs.put(_up("x.pdf"), pdf_bytes)
    assert wiring.ledger.resolve_legacy_source("x.pdf") == _up("x.pdf")
    assert wiring.ledger.resolve_legacy_source("../../x.pdf") == _up("x.pdf")
    with pytest.raises(NotFoundError):
        wiring.ledger.resolve_legacy_source("missing.pdf")
    with pytest.raises(ValidationError):
        wiring.ledger.resolve_legacy_source("")


def test_approval_artifact_leaves_contract_pointer_alone(wiring) -> None:
    wiring.ledger.record_upload(7, _up("a.pdf"))
    approval_id = wiring.repo.insert_approval(7, 9)
    wiring.ledger.record_approval_signed(approval_id, _st("approval.pdf"))
    assert wiring.repo.get_approval(approval_id).signed_ref == _st("approval.pdf")
    assert wiring.ledger.version_set(7).signed_ref is None


def test_forget_lists_every_owned_file(wiring) -> None:
    wiring.ledger.record_upload(7, _up("a.pdf"))
    wiring.ledger.record_signed(7, _st("s.pdf"))
    approval_id = wiring.repo.insert_approval(7, 9)
    wiring.ledger.record_approval_signed(approval_id, _st("ap.pdf"))
    assert set(wiring.ledger.forget(7)) == {_up("a.pdf"), _st("s.pdf"), _st("ap.pdf")}


def test_reclaim_deletes_blobs(wiring, pdf_bytes) -> None:
    wiring.blobs.put(_st("old.pdf"), pdf_bytes)
    wiring.ledger.reclaim([_st("old.pdf"), None, _st("never-existed.pdf")])
    assert not wiring.blobs.exists(_st("old.pdf"))
