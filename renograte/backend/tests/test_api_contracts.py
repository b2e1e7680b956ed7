from app.config import settings

CONTRACT = {
    "title": "Purchase + Renovation Agreement",
    "document_url": "https://example.com/doc.pdf",
    "sections": [
        {"title": "Seller signs", "page_number": 2, "role": "SELLER"},
        {"title": "Buyer signs", "page_number": 1, "role": "BUYER"},
    ],
}


async def _create(api):
    r = await api.post("/contracts", json=CONTRACT)
    assert r.status_code == 200, r.text
    return r.json()


def _section_id(contract, role):
    return next(s["id"] for s in contract["sections"] if s["role"] == role)


async def test_create_get_and_list(api):
    c = await _create(api)
    assert c["status"] == "PENDING"
    assert [s["role"] for s in c["sections"]] == ["BUYER", "SELLER"]

    got = await api.get(f"/contracts/{c['id']}")
    assert got.status_code == 200
    assert got.json()["id"] == c["id"]

    listed = await api.get("/contracts")
    assert [x["id"] for x in listed.json()] == [c["id"]]

    missing = await api.get("/contracts/does-not-exist")
    assert missing.status_code == 404
    assert missing.json() == {"detail": "Contract not found"}


async def test_create_validates_role(api):
    bad = dict(CONTRACT, sections=[{"title": "x", "role": "LANDLORD"}])
    r = await api.post("/contracts", json=bad)
    assert r.status_code == 422


async def test_signing_link_flow(api):
    c = await _create(api)

    link = await api.post(
        "/contracts/signing-links",
        json={"contract_id": c["id"], "role": "BUYER", "email": "b@example.com"},
    )
    assert link.status_code == 200
    token = link.json()["token"]
    assert link.json()["signing_url"] == f"/sign/{token}"
    assert link.json()["full_url"].endswith(f"/sign/{token}")

    view = await api.get(f"/contracts/token/{token}")
    assert view.status_code == 200
    assert view.json()["token"]["role"] == "BUYER"
    assert view.json()["token"]["is_used"] is False
    assert [s["role"] for s in view.json()["contract"]["sections"]] == ["BUYER"]

    payload = {
        "token": token,
        "section_id": _section_id(c, "BUYER"),
        "signature_data": "data:image/png;base64,AAAA",
        "signer_name": "Bea Buyer",
        "signer_email": "b@example.com",
    }
    signed = await api.post("/contracts/sign", json=payload, headers={"X-Forwarded-For": "198.51.100.7, 10.0.0.1"})
    assert signed.status_code == 200
    assert signed.json()["success"] is True
    assert signed.json()["contract_status"] == "IN_PROGRESS"
    assert signed.json()["signature"]["ip_address"] == "198.51.100.7"

    again = await api.post("/contracts/sign", json=payload)
    assert again.status_code == 400
    assert again.json()["already_signed"] is True


async def test_sign_with_wrong_role_is_forbidden(api):
    c = await _create(api)
    link = await api.post("/contracts/signing-links", json={"contract_id": c["id"], "role": "BUYER"})
    r = await api.post(
        "/contracts/sign",
        json={
            "token": link.json()["token"],
            "section_id": _section_id(c, "SELLER"),
            "signature_data": "sig",
            "signer_name": "n",
            "signer_email": "e",
        },
    )
    assert r.status_code == 403


async def test_unknown_token(api):
    r = await api.get("/contracts/token/nope")
    assert r.status_code == 400
    assert r.json() == {"detail": "Invalid token"}


async def test_direct_sign_reaches_fully_executed(api):
    c = await _create(api)
    for role in ("BUYER", "SELLER"):
        r = await api.post(
            f"/contracts/{c['id']}/sign",
            json={
                "section_id": _section_id(c, role),
                "signature_data": "sig",
                "signer_name": role.title(),
                "signer_email": f"{role.lower()}@example.com",
                "signer_role": role,
            },
        )
        assert r.status_code == 200
    assert r.json()["contract_status"] == "FULLY_EXECUTED"

    detail = (await api.get(f"/contracts/{c['id']}")).json()
    assert detail["status"] == "FULLY_EXECUTED"
    assert all(s["signature"] and s["signature"]["ip_address"] == "unknown" for s in detail["sections"])


async def test_contract_admin_routes_need_api_key(api, monkeypatch):
    monkeypatch.setattr(settings, "API_KEY", "k")
    assert (await api.post("/contracts", json=CONTRACT)).status_code == 401
    assert (await api.get("/contracts")).status_code == 401
    assert (await api.post("/contracts", json=CONTRACT, headers={"X-API-Key": "k"})).status_code == 200
    # token holders never need the key
    assert (await api.get("/contracts/token/nope")).status_code == 400
