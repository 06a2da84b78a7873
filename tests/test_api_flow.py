"""HTTP surface: the full lifecycle over the API, error bodies and authentication"""

from datetime import timedelta

import pytest

from app.auth import create_access_token
from app.domain.lifecycle.states import AccountStatus

ITEMS = [
    {"description": "Design", "price": 500},
    {"description": "Development", "price": 1500},
]


def auth(factory, user):
    return factory.headers(user)


def submit_request(api_client, factory, world, details="Need a new storefront"):
    response = api_client.post(
        "/requests",
        json={"categoryId": world["category"].id, "details": details, "priority": "High"},
        headers=auth(factory, world["client_user"]),
    )
    assert response.status_code == 201, response.text
    return response.json()


def assign(api_client, factory, world, request_id):
    response = api_client.patch(
        f"/requests/{request_id}/assign",
        json={"agentId": world["agent"].id},
        headers=auth(factory, world["admin"]),
    )
    assert response.status_code == 200, response.text
    return response.json()


def draft(api_client, factory, world, request_id, items=ITEMS):
    return api_client.post(
        "/proposals",
        json={"requestId": request_id, "items": items},
        headers=auth(factory, world["agent"]),
    )


@pytest.fixture
def quoted(api_client, factory, world):
    """A request with a Sent proposal; returns (request_id, proposal_id)"""
    request = submit_request(api_client, factory, world)
    assign(api_client, factory, world, request["id"])
    proposal = draft(api_client, factory, world, request["id"]).json()
    response = api_client.post(
        f"/proposals/{proposal['id']}/send", headers=auth(factory, world["agent"])
    )
    assert response.status_code == 200, response.text
    return request["id"], proposal["id"]


def assert_error(response, status_code, kind):
    assert response.status_code == status_code, response.text
    body = response.json()
    assert body["kind"] == kind
    assert isinstance(body["message"], str) and body["message"]


# ----------------------------------------------------------------------
# Happy path
# ----------------------------------------------------------------------


def test_full_lifecycle_over_http(api_client, factory, world, notifier):
    request = submit_request(api_client, factory, world)
    assert request["status"] == "Pending"
    assert request["category"] == "Web Development"
    assert request["clientId"] == world["profile"].id

    request = assign(api_client, factory, world, request["id"])
    assert request["status"] == "Assigned"
    assert request["agentName"] == "Gary Agent"

    response = draft(api_client, factory, world, request["id"])
    assert response.status_code == 201, response.text
    proposal = response.json()
    assert proposal["status"] == "Draft"
    assert proposal["totalAmount"] == 2000
    assert proposal["documentStatus"] == "document-ready"
    assert [li["description"] for li in proposal["lineItems"]] == ["Design", "Development"]

    response = api_client.post(
        f"/proposals/{proposal['id']}/send", headers=auth(factory, world["agent"])
    )
    assert response.status_code == 200, response.text
    assert response.json()["proposal"]["status"] == "Sent"
    assert notifier.proposal_emails[0]["client_email"] == world["client_user"].email

    client_headers = auth(factory, world["client_user"])
    assert api_client.get(f"/requests/{request['id']}", headers=client_headers).json()["status"] == "Quoted"

    response = api_client.patch(f"/proposals/{proposal['id']}/accept", headers=client_headers)
    assert response.status_code == 200, response.text
    body = response.json()
    assert body["message"] == "Proposal Accepted & Project Started"

    project = api_client.get(f"/projects/{body['projectId']}", headers=client_headers).json()
    assert project["requestId"] == request["id"]
    assert project["globalStatus"] == "Pending"
    assert project["progressPercent"] == 0
    assert project["agentName"] == "Gary Agent"
    assert project["companyName"] == "Acme Corp"

    timeline = api_client.get(
        f"/requests/timeline/{world['profile'].id}", headers=auth(factory, world["admin"])
    ).json()
    assert timeline[0]["requestStatus"] == "Converted"
    assert timeline[0]["proposal"]["status"] == "Accepted"
    assert timeline[0]["project"]["id"] == body["projectId"]


def test_lists_are_scoped_to_the_caller(api_client, factory, world):
    submit_request(api_client, factory, world, details="Mine")
    rival, _ = factory.client(company_name="Rival Ltd")
    api_client.post("/requests", json={"details": "Theirs"}, headers=auth(factory, rival))

    mine = api_client.get("/requests", headers=auth(factory, world["client_user"])).json()
    assert [r["details"] for r in mine] == ["Mine"]

    assert api_client.get("/requests", headers=auth(factory, world["agent"])).json() == []

    everything = api_client.get("/requests", headers=auth(factory, world["admin"])).json()
    assert {r["details"] for r in everything} == {"Mine", "Theirs"}

    pending = api_client.get(
        "/requests", params={"status": "Pending"}, headers=auth(factory, world["admin"])
    ).json()
    assert len(pending) == 2


def test_regenerate_document_endpoint(api_client, factory, world, document_generator):
    request = submit_request(api_client, factory, world)
    assign(api_client, factory, world, request["id"])
    document_generator.fail = True
    proposal = draft(api_client, factory, world, request["id"]).json()
    assert proposal["documentStatus"] == "pending-document"

    response = api_client.post(
        f"/proposals/{proposal['id']}/document", headers=auth(factory, world["agent"])
    )
    assert_error(response, 502, "DocumentGenerationFailed")

    document_generator.fail = False
    response = api_client.post(
        f"/proposals/{proposal['id']}/document", headers=auth(factory, world["agent"])
    )
    assert response.status_code == 200, response.text
    assert response.json()["documentStatus"] == "document-ready"


# ----------------------------------------------------------------------
# Error taxonomy
# ----------------------------------------------------------------------


def test_missing_token_is_unauthorized(api_client):
    assert_error(api_client.get("/requests"), 401, "Unauthorized")


def test_garbage_token_is_unauthorized(api_client):
    response = api_client.get("/requests", headers={"Authorization": "Bearer not-a-jwt"})
    assert_error(response, 401, "Unauthorized")


def test_expired_token_is_unauthorized(api_client, world):
    token = create_access_token(
        world["client_user"].id, world["client_user"].role, expires_delta=timedelta(seconds=-5)
    )
    response = api_client.get("/requests", headers={"Authorization": f"Bearer {token}"})
    assert_error(response, 401, "Unauthorized")
    assert "expired" in response.json()["message"]


def test_token_signed_with_other_key_is_unauthorized(api_client, world):
    from jose import jwt

    token = jwt.encode({"sub": str(world["admin"].id), "role": "Admin"}, "wrong-key", algorithm="HS256")
    response = api_client.get("/requests", headers={"Authorization": f"Bearer {token}"})
    assert_error(response, 401, "Unauthorized")


@pytest.mark.parametrize("status", [AccountStatus.SUSPENDED, AccountStatus.PENDING_APPROVAL])
def test_inactive_account_is_forbidden(api_client, factory, status):
    user = factory.agent(status=status)
    response = api_client.get("/requests", headers=auth(factory, user))
    assert_error(response, 403, "Forbidden")


def test_wrong_role_is_forbidden(api_client, factory, world):
    response = api_client.post(
        "/requests", json={"details": "x"}, headers=auth(factory, world["agent"])
    )
    assert_error(response, 403, "Forbidden")

    response = api_client.patch(
        "/requests/1/assign", json={"agentId": world["agent"].id}, headers=auth(factory, world["client_user"])
    )
    assert_error(response, 403, "Forbidden")


def test_unknown_request_is_not_found(api_client, factory, world):
    response = api_client.get("/requests/9999", headers=auth(factory, world["admin"]))
    assert_error(response, 404, "NotFound")


def test_invalid_bodies_are_validation_errors(api_client, factory, world):
    request = submit_request(api_client, factory, world)
    assign(api_client, factory, world, request["id"])

    assert_error(
        draft(api_client, factory, world, request["id"], items=[{"description": "x", "price": -1}]),
        400,
        "ValidationError",
    )
    assert_error(draft(api_client, factory, world, request["id"], items=[]), 400, "ValidationError")
    assert_error(
        api_client.post("/proposals", json={"items": ITEMS}, headers=auth(factory, world["agent"])),
        400,
        "ValidationError",
    )
    assert_error(
        api_client.post(
            "/requests", json={"priority": "Someday"}, headers=auth(factory, world["client_user"])
        ),
        400,
        "ValidationError",
    )


def test_assign_non_agent_is_validation_error(api_client, factory, world):
    request = submit_request(api_client, factory, world)
    response = api_client.patch(
        f"/requests/{request['id']}/assign",
        json={"agentId": world["client_user"].id},
        headers=auth(factory, world["admin"]),
    )
    assert_error(response, 400, "ValidationError")


def test_accept_draft_is_invalid_transition(api_client, factory, world):
    request = submit_request(api_client, factory, world)
    assign(api_client, factory, world, request["id"])
    proposal = draft(api_client, factory, world, request["id"]).json()

    response = api_client.patch(
        f"/proposals/{proposal['id']}/accept", headers=auth(factory, world["client_user"])
    )
    assert_error(response, 409, "InvalidTransition")


def test_second_accept_is_already_accepted(api_client, factory, world, quoted):
    _, proposal_id = quoted
    headers = auth(factory, world["client_user"])

    assert api_client.patch(f"/proposals/{proposal_id}/accept", headers=headers).status_code == 200
    assert_error(api_client.patch(f"/proposals/{proposal_id}/accept", headers=headers), 409, "AlreadyAccepted")


def test_send_without_document_is_document_not_ready(api_client, factory, world, document_generator):
    request = submit_request(api_client, factory, world)
    assign(api_client, factory, world, request["id"])
    document_generator.fail = True
    proposal = draft(api_client, factory, world, request["id"]).json()

    response = api_client.post(
        f"/proposals/{proposal['id']}/send", headers=auth(factory, world["agent"])
    )
    assert_error(response, 409, "DocumentNotReady")


def test_mail_outage_is_notification_failed(api_client, factory, world, notifier):
    request = submit_request(api_client, factory, world)
    assign(api_client, factory, world, request["id"])
    proposal = draft(api_client, factory, world, request["id"]).json()
    notifier.fail = True

    response = api_client.post(
        f"/proposals/{proposal['id']}/send", headers=auth(factory, world["agent"])
    )
    assert_error(response, 502, "NotificationFailed")

    stored = api_client.get(f"/proposals/{proposal['id']}", headers=auth(factory, world["agent"])).json()
    assert stored["status"] == "Draft"


# ----------------------------------------------------------------------
# Tenant isolation
# ----------------------------------------------------------------------


def test_other_client_cannot_read_or_accept(api_client, factory, world, quoted):
    request_id, proposal_id = quoted
    rival, _ = factory.client(company_name="Rival Ltd")
    headers = auth(factory, rival)

    assert_error(api_client.get(f"/requests/{request_id}", headers=headers), 403, "Forbidden")
    assert_error(api_client.get(f"/proposals/{proposal_id}", headers=headers), 403, "Forbidden")
    assert_error(api_client.patch(f"/proposals/{proposal_id}/accept", headers=headers), 403, "Forbidden")
    assert api_client.get("/proposals", headers=headers).json() == []


def test_other_client_cannot_read_project(api_client, factory, world, quoted):
    _, proposal_id = quoted
    project_id = api_client.patch(
        f"/proposals/{proposal_id}/accept", headers=auth(factory, world["client_user"])
    ).json()["projectId"]
    rival, _ = factory.client(company_name="Rival Ltd")
    stranger = factory.agent()

    assert_error(api_client.get(f"/projects/{project_id}", headers=auth(factory, rival)), 403, "Forbidden")
    assert_error(api_client.get(f"/projects/{project_id}", headers=auth(factory, stranger)), 403, "Forbidden")
    assert api_client.get("/projects", headers=auth(factory, rival)).json() == []


def test_unassigned_agent_cannot_send(api_client, factory, world):
    request = submit_request(api_client, factory, world)
    assign(api_client, factory, world, request["id"])
    proposal = draft(api_client, factory, world, request["id"]).json()
    stranger = factory.agent()

    response = api_client.post(f"/proposals/{proposal['id']}/send", headers=auth(factory, stranger))
    assert_error(response, 403, "Forbidden")


# ----------------------------------------------------------------------
# Transport
# ----------------------------------------------------------------------


def test_security_headers_on_api_responses(api_client, factory, world):
    response = api_client.get("/requests", headers=auth(factory, world["admin"]))

    assert response.headers["X-Frame-Options"] == "DENY"
    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["Referrer-Policy"] == "no-referrer"
    assert "default-src 'none'" in response.headers["Content-Security-Policy"]
    assert "no-store" in response.headers["Cache-Control"]


def test_health_is_public_and_excluded_from_security_headers(api_client):
    response = api_client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}
    assert "X-Frame-Options" not in response.headers
