"""Tests for robot_api/mock/server.py — wire behaviour of the mock service."""

import httpx

from robot_api.mock.database import MockAccount, fingerprint_for, seed_account
from robot_api.mock.server import create_app


class TestAuth:

    async def test_missing_credentials(self, mock_app):
        async with httpx.AsyncClient(
            transport=httpx.ASGITransport(app=mock_app), base_url="http://test",
        ) as c:
            resp = await c.get("/server")
        assert resp.status_code == 401
        assert resp.json() == {
            "error": {"status": 401, "code": "UNAUTHORIZED", "message": "Unauthorized"},
        }

    async def test_wrong_password(self, mock_app):
        async with httpx.AsyncClient(
            transport=httpx.ASGITransport(app=mock_app),
            base_url="http://test",
            auth=("test", "nope"),
        ) as c:
            resp = await c.get("/server")
        assert resp.status_code == 401

    async def test_custom_credentials(self):
        app = create_app("robot", "hunter2")
        async with httpx.AsyncClient(
            transport=httpx.ASGITransport(app=app),
            base_url="http://test",
            auth=("robot", "hunter2"),
        ) as c:
            resp = await c.get("/storagebox")
        assert resp.status_code == 200
        assert len(resp.json()) == 3


class TestErrorEnvelope:

    async def test_unknown_route(self, mock_http):
        resp = await mock_http.get("/does-not-exist")
        assert resp.status_code == 404
        assert resp.json()["error"]["code"] == "NOT_FOUND"

    async def test_wrong_method(self, mock_http):
        resp = await mock_http.patch("/server")
        assert resp.status_code == 405
        assert resp.json()["error"]["code"] == "METHOD_NOT_ALLOWED"

    async def test_non_numeric_storage_box(self, mock_http):
        resp = await mock_http.get("/storagebox/abc")
        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "INVALID_INPUT"

    async def test_missing_form_field(self, mock_http):
        resp = await mock_http.post("/server/123.123.123.123", data={})
        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "INVALID_INPUT"

    async def test_revert_requires_flag(self, mock_http):
        resp = await mock_http.post("/storagebox/123456/snapshot/2015-12-21T12-40-38", data={})
        assert resp.status_code == 400

    async def test_bad_traffic_threshold(self, mock_http):
        resp = await mock_http.post("/ip/123.123.123.123", data={
            "traffic_warnings": "true",
            "traffic_hourly": "lots",
            "traffic_daily": "1",
            "traffic_monthly": "1",
        })
        assert resp.status_code == 400


class TestData:

    async def test_seeded_snapshots(self, mock_http):
        resp = await mock_http.get("/storagebox/123456/snapshot")
        assert resp.status_code == 200
        assert len(resp.json()) == 3

    async def test_empty_account(self):
        app = create_app(accounts={"test": MockAccount()})
        async with httpx.AsyncClient(
            transport=httpx.ASGITransport(app=app),
            base_url="http://test",
            auth=("test", "test"),
        ) as c:
            resp = await c.get("/server")
        assert resp.status_code == 404
        assert resp.json()["error"]["code"] == "NOT_FOUND"

    async def test_state_is_per_app(self):
        first, second = create_app(), create_app()
        auth = ("test", "test")
        async with httpx.AsyncClient(
            transport=httpx.ASGITransport(app=first), base_url="http://test", auth=auth,
        ) as c:
            await c.post("/storagebox/123456", data={"storagebox_name": "renamed"})
        async with httpx.AsyncClient(
            transport=httpx.ASGITransport(app=second), base_url="http://test", auth=auth,
        ) as c:
            resp = await c.get("/storagebox/123456")
        assert resp.json()["storagebox"]["name"] == "test-box-1"

    async def test_bracketed_list_fields(self, mock_http):
        resp = await mock_http.post(
            "/boot/123.123.123.123/rescue",
            data={"os": "linux", "arch": "64", "authorized_key[]": ["aa:bb", "cc:dd"]},
        )
        assert resp.status_code == 200
        assert resp.json()["rescue"]["authorized_key"] == ["aa:bb", "cc:dd"]

    async def test_disable_resets_system(self, mock_http):
        await mock_http.post("/boot/123.123.123.123/linux", data={"dist": "Debian 12 base"})
        resp = await mock_http.delete("/boot/123.123.123.123/linux")
        assert resp.json()["linux"]["active"] is False
        assert isinstance(resp.json()["linux"]["dist"], list)


class TestDatabase:

    def test_fingerprint_format(self):
        fingerprint = fingerprint_for("ssh-ed25519 AAAAC3NzaC1lZDI1NTE5 user@host")
        parts = fingerprint.split(":")
        assert len(parts) == 16
        assert all(len(p) == 2 for p in parts)

    def test_seed_accounts_are_independent(self):
        first, second = seed_account(), seed_account()
        first.snapshots[123456].clear()
        assert len(second.snapshots[123456]) == 3

    def test_unique_snapshot_names(self):
        account = seed_account()
        names = {account.create_snapshot(123456)["name"] for _ in range(3)}
        assert len(names) == 3

    def test_key_in_use_only_while_active(self):
        account = seed_account()
        fingerprint = account.ssh_keys[0]["fingerprint"]
        config = account.boot_config("123.123.123.123")
        config["linux"] = {**config["linux"], "active": True, "authorized_key": [fingerprint]}
        assert account.key_in_use(fingerprint) is True

        account.reset_boot("123.123.123.123", "linux")
        assert account.key_in_use(fingerprint) is False
        account.delete_key(fingerprint)
        assert fingerprint not in [k["fingerprint"] for k in account.ssh_keys]
