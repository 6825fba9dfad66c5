"""API tests for the FPPA04 settlement form endpoints."""

import json

import pytest


@pytest.fixture
def insurer_headers(users, auth_headers) -> dict:
    return auth_headers(users["insurer"])


async def new_claim_with_base(client, users, auth_headers, insurer_headers) -> str:
    response = await client.post(
        "/api/claims",
        json={"categoryMain": "CAR", "categorySub": "CPM", "approverId": str(users["manager"].id)},
        headers=auth_headers(users["claimant"]),
    )
    claim_id = response.json()["claim"]["id"]
    response = await client.post(
        "/api/fppa04",
        json={"claimId": claim_id, "categoryMain": "CAR", "categorySub": "CPM"},
        headers=insurer_headers,
    )
    assert response.status_code == 200, response.text
    return claim_id


class TestBaseEndpoints:
    @pytest.mark.asyncio
    async def test_requires_authentication(self, client) -> None:
        response = await client.get("/api/fppa04")
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_ensure_get_patch_and_list(self, client, users, auth_headers, insurer_headers) -> None:
        claim_id = await new_claim_with_base(client, users, auth_headers, insurer_headers)

        again = await client.post(
            "/api/fppa04",
            json={"claimId": claim_id, "categoryMain": "HOME", "categorySub": "FIRE"},
            headers=insurer_headers,
        )
        assert again.json()["base"]["mainType"] == "CAR"

        form = await client.get(f"/api/fppa04/{claim_id}", headers=insurer_headers)
        assert form.status_code == 200
        assert form.json()["form"] is None
        assert form.json()["claim"]["id"] == claim_id

        patched = await client.patch(f"/api/fppa04/{claim_id}", json={"subType": "FLEET"}, headers=insurer_headers)
        assert patched.json()["base"]["subType"] == "FLEET"

        listed = await client.get("/api/fppa04", params={"categorySub": "FLEET"}, headers=insurer_headers)
        assert [entry["id"] for entry in listed.json()["claims"]] == [claim_id]

    @pytest.mark.asyncio
    async def test_missing_fields(self, client, insurer_headers) -> None:
        response = await client.post("/api/fppa04", json={"categoryMain": "CAR"}, headers=insurer_headers)
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_unknown_claim(self, client, insurer_headers) -> None:
        response = await client.post(
            "/api/fppa04",
            json={
                "claimId": "00000000-0000-0000-0000-000000000000",
                "categoryMain": "CAR",
                "categorySub": "CPM",
            },
            headers=insurer_headers,
        )
        assert response.status_code == 404

        form = await client.get("/api/fppa04/00000000-0000-0000-0000-000000000000", headers=insurer_headers)
        assert form.status_code == 404
        assert form.json()["detail"]["message"] == "FPPA-04 base not found"


class TestVariantEndpoints:
    @pytest.mark.asyncio
    async def test_multipart_upsert_with_signatures(self, client, users, auth_headers, insurer_headers) -> None:
        claim_id = await new_claim_with_base(client, users, auth_headers, insurer_headers)

        response = await client.post(
            f"/api/fppa04/{claim_id}/cpm",
            data={
                "company": "Acme Insurance",
                "accidentDate": "2024-05-02",
                "items": json.dumps(
                    [
                        {"category": "body", "description": "door", "total": 7000, "exception": 1000},
                        {"category": "glass", "total": 2500},
                    ]
                ),
                "adjustments": json.dumps([{"type": "หัก", "description": "excess", "amount": 500}]),
            },
            files=[("signatureFiles", ("insurer.png", b"png-bytes", "image/png"))],
            headers=insurer_headers,
        )

        assert response.status_code == 200, response.text
        variant = response.json()["variant"]
        assert [i["category"] for i in variant["items"]] == ["body", "glass"]
        assert variant["adjustments"][0]["type"] == "DEDUCT"
        assert variant["netAmount"] == 8000
        assert len(variant["signatureFiles"]) == 1
        assert variant["signatureFiles"][0].startswith("/uploads/")

    @pytest.mark.asyncio
    async def test_repeated_json_fields_and_kept_signatures(
        self, client, users, auth_headers, insurer_headers
    ) -> None:
        claim_id = await new_claim_with_base(client, users, auth_headers, insurer_headers)

        response = await client.post(
            f"/api/fppa04/{claim_id}/cpm",
            data={
                "items": [json.dumps({"category": "a", "total": 10}), json.dumps({"category": "b", "total": 20})],
                "signatureUrls": ["/uploads/one.png", "/uploads/two.png"],
                "netAmount": "",
            },
            headers=insurer_headers,
        )

        assert response.status_code == 200, response.text
        variant = response.json()["variant"]
        assert [i["category"] for i in variant["items"]] == ["a", "b"]
        assert variant["signatureFiles"] == ["/uploads/one.png", "/uploads/two.png"]
        assert variant["netAmount"] == 30

    @pytest.mark.asyncio
    async def test_blank_line_fields_from_the_form(self, client, users, auth_headers, insurer_headers) -> None:
        claim_id = await new_claim_with_base(client, users, auth_headers, insurer_headers)

        response = await client.post(
            f"/api/fppa04/{claim_id}/cpm",
            data={
                "items": json.dumps(
                    [
                        {"category": "body", "description": "", "total": 3000, "exception": ""},
                        {"category": "glass", "description": "", "total": "", "exception": ""},
                    ]
                ),
                "adjustments": json.dumps(
                    [
                        {"type": "หัก", "description": "", "amount": 200},
                        {"type": "บวก", "description": "", "amount": ""},
                    ]
                ),
            },
            headers=insurer_headers,
        )

        assert response.status_code == 200, response.text
        variant = response.json()["variant"]
        assert [(i["category"], i["description"], i["total"]) for i in variant["items"]] == [
            ("body", "", 3000),
            ("glass", "", 0),
        ]
        assert [(a["type"], a["amount"]) for a in variant["adjustments"]] == [("DEDUCT", 200), ("ADD", 0)]
        assert variant["netAmount"] == 2800

    @pytest.mark.asyncio
    async def test_bad_items_json(self, client, users, auth_headers, insurer_headers) -> None:
        claim_id = await new_claim_with_base(client, users, auth_headers, insurer_headers)

        response = await client.post(
            f"/api/fppa04/{claim_id}/cpm", data={"items": "{not json"}, headers=insurer_headers
        )

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_line_crud(self, client, users, auth_headers, insurer_headers) -> None:
        claim_id = await new_claim_with_base(client, users, auth_headers, insurer_headers)
        await client.post(
            f"/api/fppa04/{claim_id}/cpm",
            json={"items": [{"category": "body", "total": 1000}]},
            headers=insurer_headers,
        )

        item = await client.post(
            f"/api/fppa04/{claim_id}/items", json={"category": "paint", "total": 400}, headers=insurer_headers
        )
        assert item.status_code == 201
        item_id = item.json()["item"]["id"]

        patched = await client.patch(
            f"/api/fppa04/{claim_id}/items/{item_id}", json={"exception": 100}, headers=insurer_headers
        )
        assert patched.json()["item"]["exception"] == 100

        adjustment = await client.post(
            f"/api/fppa04/{claim_id}/adjustments",
            json={"type": "ADD", "description": "towing", "amount": 50},
            headers=insurer_headers,
        )
        assert adjustment.status_code == 201
        adjustment_id = adjustment.json()["adjustment"]["id"]

        form = (await client.get(f"/api/fppa04/{claim_id}", headers=insurer_headers)).json()["form"]
        assert form["netAmount"] == 1350

        deleted = await client.delete(f"/api/fppa04/{claim_id}/items/{item_id}", headers=insurer_headers)
        assert deleted.status_code == 204
        deleted = await client.delete(
            f"/api/fppa04/{claim_id}/adjustments/{adjustment_id}", headers=insurer_headers
        )
        assert deleted.status_code == 204

        form = (await client.get(f"/api/fppa04/{claim_id}", headers=insurer_headers)).json()["form"]
        assert form["netAmount"] == 1000
        assert len(form["items"]) == 1
        assert form["adjustments"] == []

        missing = await client.delete(f"/api/fppa04/{claim_id}/items/{item_id}", headers=insurer_headers)
        assert missing.status_code == 404

    @pytest.mark.asyncio
    async def test_patch_scalars(self, client, users, auth_headers, insurer_headers) -> None:
        claim_id = await new_claim_with_base(client, users, auth_headers, insurer_headers)

        before = await client.patch(
            f"/api/fppa04/{claim_id}/cpm", json={"policyNumber": "P-1"}, headers=insurer_headers
        )
        assert before.status_code == 404

        await client.post(f"/api/fppa04/{claim_id}/cpm", json={"company": "Acme"}, headers=insurer_headers)
        after = await client.patch(
            f"/api/fppa04/{claim_id}/cpm", json={"policyNumber": "P-1"}, headers=insurer_headers
        )
        assert after.json()["variant"]["policyNumber"] == "P-1"
        assert after.json()["variant"]["company"] == "Acme"
