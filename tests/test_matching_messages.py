"""
Test matching and messaging endpoints.
"""

from datetime import datetime, timedelta

from skillsync import fallbacks
from skillsync.db_models import DBMatch, DBMessage


# =============================================================================
# MATCHING
# =============================================================================

def test_skill_match_endpoint(client, create_user, give_skill, auth_headers, db_session):
    alice = create_user("Alice")
    bob = create_user("Bob")
    give_skill(alice, "Python", 5)
    give_skill(bob, "Python", 2)

    response = client.post(
        "/matching/skill-match",
        json={"skill_keywords": "Python", "minimum_level": 3},
        headers=auth_headers(alice),
    )

    assert response.status_code == 200
    data = response.json()
    assert [(m["name"], m["match_score"]) for m in data["matches"]] == [("Alice", 90), ("Bob", 60)]
    assert data["fallback_used"] is False
    assert db_session.query(DBMatch).count() == 2


def test_skill_match_requires_auth(client):
    response = client.post("/matching/skill-match", json={"skill_keywords": "Python"})
    assert response.status_code == 401


def test_skill_match_validates_level(client, create_user, auth_headers):
    user = create_user()
    response = client.post(
        "/matching/skill-match",
        json={"skill_keywords": "Python", "minimum_level": 9},
        headers=auth_headers(user),
    )
    assert response.status_code == 422


def test_team_optimization_endpoint_falls_back(client, create_user, give_skill, auth_headers, use_llm, failing_llm):
    alice = create_user("Alice")
    bob = create_user("Bob")
    give_skill(alice, "Python", 4)
    give_skill(bob, "Python", 5)
    use_llm(failing_llm)

    response = client.post(
        "/matching/team-optimization",
        json={"project_name": "Portal", "required_skills": ["Python"], "team_size": 1, "minimum_level": 3},
        headers=auth_headers(alice),
    )

    assert response.status_code == 200
    data = response.json()
    assert [m["name"] for m in data["team"]] == ["Bob"]
    assert data["rationale"] == fallbacks.TEAM_RATIONALE
    assert data["fallback_used"] is True


def test_team_optimization_validates_team_size(client, create_user, auth_headers):
    user = create_user()
    response = client.post(
        "/matching/team-optimization",
        json={"project_name": "Portal", "required_skills": ["Python"], "team_size": 0},
        headers=auth_headers(user),
    )
    assert response.status_code == 422

# =============================================================================
# MESSAGES
# =============================================================================

def test_direct_messages(client, create_user, auth_headers):
    alice = create_user("Alice")
    bob = create_user("Bob")

    sent = client.post(
        "/messages",
        json={"receiver_id": bob.id, "content": "Can you review my PR?"},
        headers=auth_headers(alice),
    )
    assert sent.status_code == 200
    message = sent.json()
    assert message["sender_name"] == "Alice"
    assert message["receiver_name"] == "Bob"
    assert message["read_at"] is None

    inbox = client.get("/messages", headers=auth_headers(bob)).json()
    assert [m["content"] for m in inbox] == ["Can you review my PR?"]

    assert client.post(f"/messages/{message['id']}/read", headers=auth_headers(alice)).status_code == 403

    read = client.post(f"/messages/{message['id']}/read", headers=auth_headers(bob))
    assert read.status_code == 200
    assert read.json()["read_at"] is not None


def test_message_to_unknown_receiver(client, create_user, auth_headers):
    alice = create_user()
    response = client.post(
        "/messages",
        json={"receiver_id": "missing", "content": "Hello"},
        headers=auth_headers(alice),
    )
    assert response.status_code == 404


def test_list_messages_newest_first_and_search(client, create_user, auth_headers, db_session):
    alice = create_user("Alice")
    bob = create_user("Bob")
    carol = create_user("Carol")
    now = datetime.utcnow()
    db_session.add_all([
        DBMessage(sender_id=alice.id, receiver_id=bob.id, content="lunch?", sent_at=now - timedelta(hours=2)),
        DBMessage(sender_id=bob.id, receiver_id=alice.id, content="sure", sent_at=now - timedelta(hours=1)),
        DBMessage(sender_id=carol.id, receiver_id=bob.id, content="private", sent_at=now),
        DBMessage(sender_id=carol.id, group_id="team-a", content="group note", sent_at=now),
    ])
    db_session.commit()

    mine = client.get("/messages", headers=auth_headers(alice)).json()
    assert [m["content"] for m in mine] == ["sure", "lunch?"]

    by_name = client.get("/messages", params={"search": "carol"}, headers=auth_headers(bob)).json()
    assert [m["content"] for m in by_name] == ["private"]

    by_content = client.get("/messages", params={"search": "LUNCH"}, headers=auth_headers(bob)).json()
    assert [m["content"] for m in by_content] == ["lunch?"]


def test_group_messages(client, create_user, auth_headers):
    alice = create_user("Alice")
    bob = create_user("Bob")

    client.post("/messages/groups/team-a", json={"content": "first"}, headers=auth_headers(alice))
    client.post("/messages/groups/team-a", json={"content": "second"}, headers=auth_headers(bob))
    client.post("/messages/groups/team-b", json={"content": "elsewhere"}, headers=auth_headers(bob))

    history = client.get("/messages/groups/team-a", headers=auth_headers(alice)).json()
    assert [(m["sender_name"], m["content"]) for m in history] == [("Alice", "first"), ("Bob", "second")]
    assert all(m["group_id"] == "team-a" for m in history)

    # Group messages never show up as direct messages
    assert client.get("/messages", headers=auth_headers(alice)).json() == []


def test_group_named_read(client, create_user, auth_headers):
    alice = create_user("Alice")

    response = client.post("/messages/groups/read", json={"content": "hello"}, headers=auth_headers(alice))

    assert response.status_code == 200
    assert response.json()["group_id"] == "read"
