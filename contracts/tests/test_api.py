"""HTTP surface via FastAPI's TestClient."""
from __future__ import annotations

import pytest

from conftest import APPROVER_A, APPROVER_B, OWNER_ID


def _sign_body(data_url: str, **extra) -> dict:
    return {"pageIndex": 0, "x": 10, "y": 20, "width": 100, "height": 40, "imageDataUrl": data_url, **extra}


def _create(client, code: str = "C-001") -> int:
    res = client.post(
        "/api/contracts",
        json={"title": "Office lease", "vendor": "ACME", "contractId": code, "owner_id": OWNER_ID},
    )
    assert res.status_code == 201, res.text
    return res.json()["id"]


def _upload(client, contract_id: int, pdf: bytes):
    return client.post(
        f"/api/contracts/{contract_id}/upload",
        files={"pdf": ("lease.pdf", pdf, "application/pdf")},
    )


@pytest.fixture
def contract_id(client, pdf_bytes) -> int:
    cid = _create(client)
    assert _upload(client, cid, pdf_bytes).status_code == 200
    return cid


def test_health(client) -> None:
    body = client.get("/api/health").json()
    assert body["ok"] is True
    assert "time" in body


def test_db_test(client) -> None:
    res = client.get("/api/db-test")
    assert res.status_code == 200
    assert res.json()["rows"] == [{"ok": 1}]


def test_create_and_fetch(client) -> None:
    cid = _create(client)
    body = client.get(f"/api/contracts/{cid}").json()
    assert body["contractId"] == "C-001"
    assert body["status"] == "draft"
    assert body["status_label"] == "Draft"
    assert body["owner_id"] == OWNER_ID


def test_create_errors(client) -> None:
    _create(client, "DUP")
    dup = client.post(
        "/api/contracts", json={"title": "t", "vendor": "v", "contractId": "DUP", "owner_id": OWNER_ID}
    )
    assert dup.status_code == 409
    assert dup.json()["code"] == "duplicate"

    missing = client.post("/api/contracts", json={"vendor": "v", "contractId": "X", "owner_id": OWNER_ID})
    assert missing.status_code == 400
    assert missing.json()["code"] == "missing_field"

    no_owner = client.post("/api/contracts", json={"title": "t", "vendor": "v", "contractId": "Y"})
    assert no_owner.status_code == 400
    assert no_owner.json()["code"] == "owner_invalid"


def test_owner_sign_flow(client, contract_id, png_data_url) -> None:
    contract = client.get(f"/api/contracts/{contract_id}").json()
    assert contract["status"] == "in_progress"
    assert contract["upload_path"].startswith("/uploads/")

    res = client.post(f"/api/contracts/{contract_id}/sign", json=_sign_body(png_data_url))
    assert res.status_code == 200, res.text
    signed_path = res.json()["signed_path"]
    assert signed_path.startswith(f"/storage/contract-{contract_id}-signed-")

    refetched = client.get(f"/api/contracts/{contract_id}").json()
    assert refetched["status"] == "active_contract"
    assert refetched["signed_path"] == signed_path
    assert refetched["upload_path"] == contract["upload_path"]

    pdf = client.get(signed_path)
    assert pdf.status_code == 200
    assert pdf.headers["content-type"] == "application/pdf"
    assert pdf.content.startswith(b"%PDF-")


def test_sign_payload_errors(client, contract_id, png_data_url) -> None:
    bad_page = client.post(f"/api/contracts/{contract_id}/sign", json=_sign_body(png_data_url, pageIndex=-1))
    assert bad_page.status_code == 400
    assert bad_page.json()["code"] == "bad_payload"

    gif = client.post(f"/api/contracts/{contract_id}/sign", json=_sign_body("data:image/gif;base64,R0lGOD"))
    assert gif.status_code == 400
    assert gif.json()["code"] == "unsupported_image"

    zero = client.post(f"/api/contracts/{contract_id}/sign", json=_sign_body(png_data_url, width=0))
    assert zero.status_code == 400

    missing = client.post("/api/contracts/999/sign", json=_sign_body(png_data_url))
    assert missing.status_code == 404
    assert set(missing.json()) >= {"message", "code"}


def test_sign_before_upload(client, png_data_url) -> None:
    cid = _create(client)
    res = client.post(f"/api/contracts/{cid}/sign", json=_sign_body(png_data_url))
    assert res.status_code == 404
    assert res.json()["code"] == "source_not_uploaded"


def test_upload_errors(client, pdf_bytes) -> None:
    cid = _create(client)
    wrong_type = client.post(
        f"/api/contracts/{cid}/upload", files={"pdf": ("x.png", b"\x89PNG", "image/png")}
    )
    assert wrong_type.status_code == 400

    too_big = client.post(
        f"/api/contracts/{cid}/upload",
        files={"pdf": ("big.pdf", b"%PDF-" + b"0" * (1024 * 1024), "application/pdf")},
    )
    assert too_big.status_code == 413

    no_file = client.post(f"/api/contracts/{cid}/upload")
    assert no_file.status_code == 400

    unknown = _upload(client, 999, pdf_bytes)
    assert unknown.status_code == 404


def test_non_numeric_id(client) -> None:
    res = client.get("/api/contracts/abc")
    assert res.status_code == 400


def test_list_and_status_filter(client, contract_id) -> None:
    _create(client, "C-002")
    assert len(client.get("/api/contracts").json()) == 2
    in_progress = client.get("/api/contracts", params={"status": "In Progress"}).json()
    assert [c["id"] for c in in_progress] == [contract_id]
    assert client.get("/api/contracts", params={"status": "bogus"}).status_code == 400
    assert client.get("/api/contracts", params={"owner_id": APPROVER_A}).json() == []


def test_update_and_delete(client, contract_id) -> None:
    res = client.put(f"/api/contracts/{contract_id}", json={"title": "Renamed"})
    assert res.status_code == 200
    assert res.json()["title"] == "Renamed"
    assert res.json()["status"] == "in_progress"

    assert client.delete(f"/api/contracts/{contract_id}").status_code == 200
    assert client.get(f"/api/contracts/{contract_id}").status_code == 404
    assert client.delete(f"/api/contracts/{contract_id}").status_code == 404


def test_preview(client, contract_id) -> None:
    res = client.get(f"/api/contracts/{contract_id}/pages/0/preview", params={"scale": 2})
    assert res.status_code == 200
    assert res.headers["content-type"] == "image/png"
    assert res.headers["x-render-scale"] == "2.0"
    assert res.headers["x-page-height-pixels"] == "1584"

    default = client.get(f"/api/contracts/{contract_id}/pages/0/preview")
    assert default.headers["x-render-scale"] == "1.25"
    assert client.get(f"/api/contracts/{contract_id}/pages/0/preview", params={"scale": 0}).status_code == 400


def test_approval_flow(client, contract_id, png_data_url) -> None:
    first = client.post(f"/api/contracts/{contract_id}/request-approval", json={"approver_id": APPROVER_A})
    assert first.status_code == 201
    repeat = client.post(f"/api/contracts/{contract_id}/request-approval", json={"approverId": APPROVER_A})
    assert repeat.status_code == 200
    assert repeat.json()["approval_id"] == first.json()["approval_id"]
    second = client.post(f"/api/contracts/{contract_id}/request-approval", json={"approver_id": APPROVER_B})
    assert second.status_code == 201

    listed = client.get("/api/approvals", params={"approver_id": APPROVER_A}).json()
    assert len(listed) == 1
    assert listed[0]["approval_status"] == "pending"
    assert listed[0]["contract"]["status"] == "pending_approval"

    a_id = first.json()["approval_id"]
    signed = client.post(f"/api/approvals/{a_id}/sign", json=_sign_body(png_data_url, notes="ok"))
    assert signed.status_code == 200, signed.text
    assert signed.json()["approval_status"] == "approved"
    assert signed.json()["contract_status"] == "pending_approval"
    assert signed.json()["approval_signed_path"].startswith(f"/storage/approval-{a_id}-contract-{contract_id}-")

    again = client.post(f"/api/approvals/{a_id}/sign", json=_sign_body(png_data_url))
    assert again.status_code == 409
    assert client.post(f"/api/approvals/{a_id}/reject", json={"notes": "late"}).status_code == 409

    b_id = second.json()["approval_id"]
    rejected = client.post(f"/api/approvals/{b_id}/reject", json={"notes": "missing signature page"})
    assert rejected.status_code == 200
    assert rejected.json()["approval_status"] == "rejected"
    assert rejected.json()["notes"] == "missing signature page"
    assert client.get(f"/api/contracts/{contract_id}").json()["status"] == "in_progress"

    after_reject = client.post(f"/api/approvals/{b_id}/sign", json=_sign_body(png_data_url))
    assert after_reject.status_code == 400

    audit = client.get(f"/api/contracts/{contract_id}/audit").json()
    assert audit[-1]["action"] == "approval_rejected"


def test_approval_request_errors(client, contract_id) -> None:
    assert client.post(f"/api/contracts/{contract_id}/request-approval", json={}).status_code == 400
    unknown = client.post(f"/api/contracts/{contract_id}/request-approval", json={"approver_id": 777})
    assert unknown.status_code == 400
    assert client.post("/api/contracts/999/request-approval", json={"approver_id": APPROVER_A}).status_code == 404
    assert client.get("/api/approvals").status_code == 400
    assert client.post("/api/approvals/999/reject", json={}).status_code == 404


def test_reject_without_body(client, contract_id) -> None:
    a_id = client.post(
        f"/api/contracts/{contract_id}/request-approval", json={"approver_id": APPROVER_A}
    ).json()["approval_id"]
    res = client.post(f"/api/approvals/{a_id}/reject")
    assert res.status_code == 200
    assert res.json()["notes"] is None


def test_legacy_routes(client, pdf_bytes, png_data_url) -> None:
    up = client.post("/api/upload", files={"pdf": ("Lease Draft.pdf", pdf_bytes, "application/pdf")})
    assert up.status_code == 200
    filename = up.json()["filename"]
    assert up.json()["path"] == f"/uploads/{filename}"
    assert client.get("/api/pdf/list").json() == {"files": [filename]}

    res = client.post("/api/pdf/sign", json=_sign_body(png_data_url, filename=filename))
    assert res.status_code == 200
    body = res.json()
    assert body["ok"] is True
    assert body["output"].startswith("/storage/")
    assert client.get(body["output"]).status_code == 200

    assert client.post("/api/pdf/sign", json=_sign_body(png_data_url, filename="nope.pdf")).status_code == 404
    assert client.post("/api/pdf/sign", json=_sign_body(png_data_url)).status_code == 400


def test_file_routes_reject_unknown(client) -> None:
    assert client.get("/storage/missing.pdf").status_code == 404
    assert client.get("/uploads/..").status_code in (400, 404)


def test_head_on_file_routes(client, contract_id) -> None:
    upload_path = client.get(f"/api/contracts/{contract_id}").json()["upload_path"]
    res = client.head(upload_path)
    assert res.status_code == 200
    assert res.headers["content-type"] == "application/pdf"
    assert int(res.headers["content-length"]) == len(client.get(upload_path).content)
    assert client.head("/storage/missing.pdf").status_code == 404


def test_signing_config(client) -> None:
    body = client.get("/api/signing/config").json()
    assert body == {"stamp_width_px": 170.0, "stamp_height_px": 70.0, "preview_scale": 1.25}


def test_create_and_update_from_form_data(client) -> None:
    created = client.post(
        "/api/contracts",
        files={
            "contract_title": (None, "Form lease"),
            "vendor_name": (None, "ACME"),
            "contract_id": (None, "F-001"),
            "owner_id": (None, str(OWNER_ID)),
        },
    )
    assert created.status_code == 201, created.text
    body = created.json()
    assert (body["title"], body["vendor"], body["contractId"]) == ("Form lease", "ACME", "F-001")

    updated = client.put(f"/api/contracts/{body['id']}", data={"vendor": "Globex"})
    assert updated.status_code == 200
    assert updated.json()["vendor"] == "Globex"
    assert updated.json()["title"] == "Form lease"


def test_create_rejects_malformed_bodies(client) -> None:
    broken = client.post("/api/contracts", content=b"{not json", headers={"content-type": "application/json"})
    assert broken.status_code == 400
    assert broken.json()["code"] == "bad_payload"
    listed = client.post("/api/contracts", json=["title"])
    assert listed.status_code == 400
    bad_owner = client.post(
        "/api/contracts", data={"title": "t", "vendor": "v", "contractId": "Z", "owner_id": "abc"}
    )
    assert bad_owner.status_code == 400
    assert bad_owner.json()["detail"][0]["loc"] == ["owner_id"]
