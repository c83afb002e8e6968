"""
B.I Booster Backend — Order & Admin Console Tests
===================================================

The purchase flow end to end: storefront order → admin payment
verification → member login → template delivery → "my templates".
"""

import uuid
from unittest.mock import patch

import pytest
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from bibooster.config import settings
from bibooster.exceptions import DatabaseError, InvalidActionError, ValidationError
from bibooster.models.order import Order
from bibooster.models.user import User
from bibooster.schemas.admin import AdminActionRequest
from bibooster.security import verify_password
from bibooster.services.admin_service import admin_service
from bibooster.services.file_service import FileService

ORDER_FORM = {
    "package_id": "Medium",
    "template_name": "Laundry Bersih",
    "name": "Andi Wijaya",
    "email": "andi@example.com",
    "phone": "081311112222",
    "notes": "Warna biru",
}


async def place_order(client, **overrides):
    response = await client.post("/api/orders", json={**ORDER_FORM, **overrides})
    assert response.status_code == 201, response.text
    return response.json()["order"]


async def admin_action(client, headers, **body):
    return await client.post("/api/admin/verify", json=body, headers=headers)


class TestOrderForm:

    @pytest.mark.asyncio
    async def test_order_creates_pending_user_and_order(self, test_client, db_session):
        response = await test_client.post("/api/orders", json=ORDER_FORM)
        assert response.status_code == 201
        body = response.json()
        assert "1x24" in body["message"]
        order = body["order"]
        assert order["package_id"] == "medium"
        assert order["package_name"] == "Paket Medium"
        assert order["price"] == "Rp 1.000.000"
        assert order["status"] == "pending"
        assert order["template_path"] is None

        user = (await db_session.execute(select(User))).scalar_one()
        assert user.email == "andi@example.com"
        assert user.password_hash is None
        assert user.status == "pending"
        assert user.access_tier == "medium"
        assert not user.is_verified and not user.has_paid

    @pytest.mark.asyncio
    async def test_repeat_buyer_reuses_account(self, test_client, db_session):
        await place_order(test_client)
        await place_order(test_client, package_id="large", email="ANDI@example.com")

        users = (await db_session.execute(select(User))).scalars().all()
        assert len(users) == 1
        # Unpaid orders never move the tier
        assert users[0].access_tier == "medium"
        orders = (await db_session.execute(select(Order))).scalars().all()
        assert len(orders) == 2

    @pytest.mark.asyncio
    async def test_order_does_not_change_member_tier(self, test_client, create_member, db_session):
        member, _ = await create_member(tier="large", email="pelanggan@example.com")
        await place_order(test_client, package_id="small", email="pelanggan@example.com")

        user = await db_session.get(User, member.id)
        assert user.access_tier == "large"
        assert user.is_verified and user.has_paid

    @pytest.mark.asyncio
    async def test_unknown_package_rejected(self, test_client):
        response = await test_client.post("/api/orders", json={**ORDER_FORM, "package_id": "gold"})
        assert response.status_code == 400
        assert response.json()["details"]["allowed"] == ["small", "medium", "large", "enterprise"]

    @pytest.mark.asyncio
    async def test_invalid_email_rejected(self, test_client):
        response = await test_client.post("/api/orders", json={**ORDER_FORM, "email": "not-an-email"})
        assert response.status_code == 422


class TestAdminAuth:

    @pytest.mark.asyncio
    async def test_missing_admin_key(self, test_client):
        response = await test_client.post("/api/admin/verify", json={"action": "get_pending_orders"})
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_wrong_admin_key(self, test_client):
        response = await test_client.post(
            "/api/admin/verify",
            json={"action": "get_pending_orders"},
            headers={"X-Admin-Key": "definitely-wrong"},
        )
        assert response.status_code == 403


class TestVerificationHandler:

    @pytest.mark.asyncio
    async def test_invalid_action(self, test_client, admin_headers):
        response = await admin_action(test_client, admin_headers, action="delete_everything")
        assert response.status_code == 400
        assert response.json() == {"error": "Invalid action"}

    @pytest.mark.asyncio
    async def test_verify_requires_ids(self, test_client, admin_headers):
        response = await admin_action(test_client, admin_headers, action="verify_payment")
        assert response.status_code == 400
        assert "userId" in response.json()["error"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [{}, {"action": None}])
    async def test_missing_action(self, test_client, admin_headers, body):
        response = await test_client.post("/api/admin/verify", json=body, headers=admin_headers)
        assert response.status_code == 400
        assert response.json() == {"error": "Invalid action"}

    @pytest.mark.asyncio
    async def test_empty_body(self, test_client, admin_headers):
        response = await test_client.post("/api/admin/verify", headers=admin_headers)
        assert response.status_code == 400
        assert response.json() == {"error": "Invalid action"}

    @pytest.mark.asyncio
    async def test_malformed_ids(self, test_client, admin_headers):
        response = await admin_action(
            test_client, admin_headers, action="verify_payment", userId="abc", orderId="def"
        )
        assert response.status_code == 400
        body = response.json()
        assert list(body) == ["error"]
        assert body["error"].startswith("Invalid userId")

    @pytest.mark.asyncio
    async def test_non_object_body(self, test_client, admin_headers):
        response = await test_client.post(
            "/api/admin/verify", json=["get_pending_orders"], headers=admin_headers
        )
        assert response.status_code == 400
        assert "error" in response.json()

    @pytest.mark.asyncio
    async def test_pending_orders_include_user(self, test_client, admin_headers):
        first = await place_order(test_client)
        second = await place_order(test_client, email="rina@example.com", name="Rina")

        response = await admin_action(test_client, admin_headers, action="get_pending_orders")
        assert response.status_code == 200
        orders = response.json()["orders"]
        assert [o["id"] for o in orders] == [second["id"], first["id"]]
        assert orders[0]["user"]["email"] == "rina@example.com"
        assert orders[0]["user"]["has_paid"] is False

    @pytest.mark.asyncio
    async def test_verify_payment_activates_member(self, test_client, admin_headers, db_session):
        order = await place_order(test_client)
        pending = (await admin_action(test_client, admin_headers, action="get_pending_orders")).json()
        user_id = pending["orders"][0]["user_id"]

        response = await admin_action(
            test_client, admin_headers, action="verify_payment", userId=user_id, orderId=order["id"]
        )
        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Payment verified successfully"}

        pending = (await admin_action(test_client, admin_headers, action="get_pending_orders")).json()
        assert pending["orders"] == []
        verified = (await admin_action(test_client, admin_headers, action="get_verified_orders")).json()
        assert [o["id"] for o in verified["orders"]] == [order["id"]]
        assert verified["orders"][0]["status"] == "paid"
        assert verified["orders"][0]["user"]["status"] == "active"

        # Order-form members log in with the default password
        login = await test_client.post(
            "/api/auth/login",
            json={"email": ORDER_FORM["email"], "password": settings.default_member_password},
        )
        assert login.status_code == 200
        assert login.json()["user"]["package_access"] == "medium"

    @pytest.mark.asyncio
    async def test_verify_keeps_registered_password(self, test_client, admin_headers, db_session):
        await test_client.post(
            "/api/auth/register",
            json={
                "name": "Andi Wijaya",
                "email": ORDER_FORM["email"],
                "phone": ORDER_FORM["phone"],
                "password": "pilihanku1",
                "confirm_password": "pilihanku1",
            },
        )
        order = await place_order(test_client)
        user = (await db_session.execute(select(User))).scalar_one()

        await admin_action(
            test_client, admin_headers, action="verify_payment", userId=str(user.id), orderId=order["id"]
        )

        await db_session.refresh(user)
        assert verify_password("pilihanku1", user.password_hash)
        assert not verify_password(settings.default_member_password, user.password_hash)

    @pytest.mark.asyncio
    async def test_verify_applies_ordered_package(self, test_client, admin_headers, create_member, db_session):
        member, _ = await create_member(tier="small", email="naik@example.com")
        order = await place_order(test_client, package_id="enterprise", email="naik@example.com")

        response = await admin_action(
            test_client, admin_headers, action="verify_payment", userId=str(member.id), orderId=order["id"]
        )
        assert response.status_code == 200

        user = await db_session.get(User, member.id)
        assert user.access_tier == "enterprise"

    @pytest.mark.asyncio
    async def test_verify_unknown_order_keeps_tier(self, test_client, admin_headers, create_member, db_session):
        member, _ = await create_member(tier="medium")
        response = await admin_action(
            test_client,
            admin_headers,
            action="verify_payment",
            userId=str(member.id),
            orderId="00000000-0000-0000-0000-000000000000",
        )
        assert response.status_code == 200

        user = await db_session.get(User, member.id)
        assert user.access_tier == "medium"

    @pytest.mark.asyncio
    async def test_verify_twice_is_harmless(self, test_client, admin_headers):
        order = await place_order(test_client)
        pending = (await admin_action(test_client, admin_headers, action="get_pending_orders")).json()
        user_id = pending["orders"][0]["user_id"]

        for _ in range(2):
            response = await admin_action(
                test_client, admin_headers, action="verify_payment", userId=user_id, orderId=order["id"]
            )
            assert response.status_code == 200


class TestTemplateDelivery:

    async def _paid_order(self, client, admin_headers):
        order = await place_order(client)
        pending = (await admin_action(client, admin_headers, action="get_pending_orders")).json()
        user_id = pending["orders"][0]["user_id"]
        await admin_action(client, admin_headers, action="verify_payment", userId=user_id, orderId=order["id"])
        return order, user_id

    @pytest.mark.asyncio
    async def test_deliver_by_url(self, test_client, admin_headers):
        order, _ = await self._paid_order(test_client, admin_headers)
        response = await test_client.post(
            f"/api/admin/orders/{order['id']}/template",
            data={"url": "https://drive.example.com/laundry.zip"},
            headers=admin_headers,
        )
        assert response.status_code == 200
        delivered = response.json()["order"]
        assert delivered["status"] == "completed"
        assert delivered["template_path"] == "https://drive.example.com/laundry.zip"

    @pytest.mark.asyncio
    async def test_deliver_file_then_member_downloads(self, test_client, admin_headers):
        order, user_id = await self._paid_order(test_client, admin_headers)

        with patch.object(FileService, "validate_mime_type", return_value="application/zip"):
            response = await test_client.post(
                f"/api/admin/orders/{order['id']}/template",
                files={"file": ("Laundry Bersih.zip", b"PK\x03\x04template-bytes", "application/zip")},
                data={"url": "https://ignored.example.com/x.zip"},
                headers=admin_headers,
            )
        assert response.status_code == 200
        template_path = response.json()["order"]["template_path"]
        assert template_path == (
            f"http://test/api/files/templates/{user_id}/{order['id']}/Laundry_Bersih.zip"
        )

        login = await test_client.post(
            "/api/auth/login",
            json={"email": ORDER_FORM["email"], "password": settings.default_member_password},
        )
        headers = {"Authorization": f"Bearer {login.json()['access_token']}"}
        mine = await test_client.get("/api/me/orders", headers=headers)
        assert mine.status_code == 200
        assert mine.json()["orders"][0]["template_path"] == template_path

        download = await test_client.get(template_path.replace("http://test", ""))
        assert download.status_code == 200
        assert download.content == b"PK\x03\x04template-bytes"

    @pytest.mark.asyncio
    async def test_deliver_requires_file_or_url(self, test_client, admin_headers):
        order, _ = await self._paid_order(test_client, admin_headers)
        response = await test_client.post(
            f"/api/admin/orders/{order['id']}/template",
            data={"url": "  "},
            headers=admin_headers,
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_deliver_rejects_non_http_url(self, test_client, admin_headers):
        order, _ = await self._paid_order(test_client, admin_headers)
        response = await test_client.post(
            f"/api/admin/orders/{order['id']}/template",
            data={"url": "ftp://files.example.com/site.zip"},
            headers=admin_headers,
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_deliver_rejects_bad_file_type(self, test_client, admin_headers):
        order, _ = await self._paid_order(test_client, admin_headers)
        response = await test_client.post(
            f"/api/admin/orders/{order['id']}/template",
            files={"file": ("setup.exe", b"MZ\x90\x00", "application/octet-stream")},
            headers=admin_headers,
        )
        assert response.status_code == 400
        assert "not supported" in response.json()["message"]

    @pytest.mark.asyncio
    async def test_deliver_unknown_order(self, test_client, admin_headers):
        response = await test_client.post(
            "/api/admin/orders/00000000-0000-0000-0000-000000000000/template",
            data={"url": "https://drive.example.com/x.zip"},
            headers=admin_headers,
        )
        assert response.status_code == 404


class TestMemberOrders:

    @pytest.mark.asyncio
    async def test_requires_login(self, test_client):
        response = await test_client.get("/api/me/orders")
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_only_own_orders(self, test_client, create_member):
        await place_order(test_client, email="someone-else@example.com")
        _, headers = await create_member()
        response = await test_client.get("/api/me/orders", headers=headers)
        assert response.status_code == 200
        assert response.json()["orders"] == []


class TestAdminServiceUnit:
    """AdminService against a mocked session."""

    @pytest.mark.asyncio
    async def test_unknown_action_touches_nothing(self, mock_db_session):
        with pytest.raises(InvalidActionError):
            await admin_service.handle_action(mock_db_session, AdminActionRequest(action="drop"))
        mock_db_session.execute.assert_not_called()

    @pytest.mark.asyncio
    async def test_verify_failure_rolls_back(self, mock_db_session):
        mock_db_session.execute.side_effect = SQLAlchemyError("connection lost")
        request = AdminActionRequest(action="verify_payment", userId=uuid.uuid4(), orderId=uuid.uuid4())

        with pytest.raises(DatabaseError) as exc_info:
            await admin_service.handle_action(mock_db_session, request)

        mock_db_session.rollback.assert_awaited_once()
        assert "connection lost" not in exc_info.value.message

    @pytest.mark.asyncio
    async def test_delivery_without_file_or_url(self, mock_db_session):
        with pytest.raises(ValidationError):
            await admin_service.deliver_template(mock_db_session, uuid.uuid4())
        mock_db_session.get.assert_not_called()
