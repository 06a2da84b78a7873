"""Client timeline read model"""

import pytest

from app.domain.lifecycle.timeline import TimelineProjector

ITEMS = [{"description": "Audit", "price": 750}]


@pytest.mark.asyncio
async def test_timeline_joins_proposal_and_project(orchestrator, world, db_session):
    client = world["client_principal"]
    converted = orchestrator.create_request(client, world["category"].id, "Storefront", "High")
    orchestrator.assign_agent(converted.id, world["agent"].id)
    proposal = await orchestrator.create_proposal(converted.id, ITEMS, world["agent_principal"])
    await orchestrator.send_proposal(proposal.id, world["agent_principal"])
    project = orchestrator.accept_proposal(proposal.id, client)
    project_id = project.id

    fresh = orchestrator.create_request(client, None, "Second idea")
    fresh_id = fresh.id

    timeline = TimelineProjector(db_session).for_client(world["profile"].id)

    assert [entry["requestId"] for entry in timeline] == [fresh_id, converted.id]

    newest = timeline[0]
    assert newest["category"] == "General"
    assert newest["requestStatus"] == "Pending"
    assert newest["agentName"] is None
    assert newest["proposal"] is None
    assert newest["project"] is None

    done = timeline[1]
    assert done["category"] == "Web Development"
    assert done["priority"] == "High"
    assert done["requestStatus"] == "Converted"
    assert done["agentName"] == "Gary Agent"
    assert done["proposal"]["status"] == "Accepted"
    assert done["proposal"]["amount"] == 750
    assert done["proposal"]["pdf"].endswith(".pdf")
    assert done["project"] == {
        "id": project_id,
        "status": "Pending",
        "progress": 0,
        "startDate": done["project"]["startDate"],
        "completionDate": None,
    }


def test_timeline_only_contains_the_clients_requests(orchestrator, world, factory, db_session):
    orchestrator.create_request(world["client_principal"], None, "Mine")
    other_user, other_profile = factory.client(company_name="Rival Ltd")
    orchestrator.create_request(factory.principal(other_user, other_profile), None, "Theirs")

    timeline = TimelineProjector(db_session).for_client(world["profile"].id)

    assert [entry["details"] for entry in timeline] == ["Mine"]


def test_timeline_of_unknown_client_is_empty(db_session):
    assert TimelineProjector(db_session).for_client(999) == []


def test_request_without_proposal_has_null_proposal_and_project(orchestrator, world, db_session):
    orchestrator.create_request(world["client_principal"], world["category"].id, "Just an idea")

    timeline = TimelineProjector(db_session).for_client(world["profile"].id)

    assert len(timeline) == 1
    assert timeline[0]["proposal"] is None
    assert timeline[0]["project"] is None
