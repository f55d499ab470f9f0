"""
HTTP tests for /api/tickets.
"""

import pytest

import config
from enums.user_role import UserRole


async def create_ticket(client, **overrides):
    payload = {"subject": "Parcel missing", "category": "delivery", "message": "Nothing arrived"}
    payload.update(overrides)
    return await client.post("/api/tickets", json=payload)


class TestCustomerTickets:

    @pytest.mark.asyncio
    async def test_requires_login(self, client):
        response = await create_ticket(client)

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_create_and_list(self, client, authenticate, make_user, make_order):
        user = await make_user()
        order = await make_order(user)
        authenticate(user)

        created = await create_ticket(client, orderId=order.order_number, priority="high")
        listed = await client.get("/api/tickets")

        assert created.status_code == 201
        ticket = created.json()["data"]
        assert ticket["ticketId"].startswith("TKT")
        assert ticket["orderId"] == order.id
        assert ticket["priority"] == "high"
        assert ticket["messages"][0]["senderRole"] == "USER"
        assert listed.json()["pagination"] == {
            "page": 1, "limit": config.PAGE_ENTRIES, "total": 1, "pages": 1,
        }

    @pytest.mark.asyncio
    async def test_validation_messages_joined(self, client, authenticate, make_user):
        authenticate(await make_user())

        response = await create_ticket(client, subject="", category="weather")

        assert response.status_code == 400
        assert response.json()["message"] == (
            "Subject is required and must be a non-empty string; Valid category is required"
        )

    @pytest.mark.asyncio
    async def test_reply_and_close(self, client, authenticate, make_user):
        authenticate(await make_user())
        ticket_id = (await create_ticket(client)).json()["data"]["ticketId"]

        replied = await client.post(f"/api/tickets/{ticket_id}/messages", json={"message": "Any update?"})
        closed = await client.patch(f"/api/tickets/{ticket_id}/close")

        assert len(replied.json()["data"]["messages"]) == 2
        assert closed.json()["data"]["status"] == "closed"

    @pytest.mark.asyncio
    async def test_foreign_ticket(self, client, authenticate, make_user):
        authenticate(await make_user())
        ticket_id = (await create_ticket(client)).json()["data"]["ticketId"]
        authenticate(await make_user())

        response = await client.get(f"/api/tickets/{ticket_id}")

        assert response.status_code == 403
        assert response.json()["message"] == "Access denied"


class TestStaffTickets:

    @pytest.mark.asyncio
    async def test_customer_blocked_from_admin_routes(self, client, authenticate, make_user):
        authenticate(await make_user())

        assert (await client.get("/api/tickets/admin/all")).status_code == 403
        assert (await client.get("/api/tickets/admin/stats")).status_code == 403

    @pytest.mark.asyncio
    async def test_staff_workflow(self, client, authenticate, make_user):
        customer = await make_user()
        staff = await make_user(role=UserRole.ADMIN)
        authenticate(customer)
        ticket_id = (await create_ticket(client)).json()["data"]["ticketId"]
        authenticate(staff)

        reply = await client.post(f"/api/tickets/admin/{ticket_id}/messages", json={"message": "Checking"})
        waiting = await client.patch(f"/api/tickets/admin/{ticket_id}/status", json={"status": "waiting_customer"})
        priority = await client.patch(f"/api/tickets/admin/{ticket_id}/priority", json={"priority": "urgent"})
        escalated = await client.patch(f"/api/tickets/admin/{ticket_id}/escalate")
        bad_status = await client.patch(f"/api/tickets/admin/{ticket_id}/status", json={"status": "sleeping"})
        stats = await client.get("/api/tickets/admin/stats")
        search = await client.get("/api/tickets/admin/all", params={"search": "parcel"})

        assert reply.json()["data"]["messages"][-1]["senderRole"] == "ADMIN"
        assert waiting.json()["data"]["status"] == "waiting_customer"
        assert priority.json()["data"]["priority"] == "urgent"
        assert escalated.json()["data"]["isEscalated"] is True
        assert bad_status.status_code == 400
        assert stats.json()["data"]["byStatus"]["waitingCustomer"] == 1
        assert stats.json()["data"]["escalated"] == 1
        assert search.json()["pagination"]["total"] == 1

        authenticate(customer)
        reopened = await client.post(f"/api/tickets/{ticket_id}/messages", json={"message": "Still missing"})
        assert reopened.json()["data"]["status"] == "open"

    @pytest.mark.asyncio
    async def test_response_time_analytics_shape(self, client, authenticate, make_user):
        authenticate(await make_user(role=UserRole.ADMIN))

        response = await client.get("/api/tickets/admin/analytics/response-time")

        assert response.json()["data"] == {
            "averageResponseTime": 0,
            "medianResponseTime": 0,
            "minResponseTime": 0,
            "maxResponseTime": 0,
        }
