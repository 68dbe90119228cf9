import pytest


@pytest.fixture
def pair(make_profile):
	return make_profile("Alice Adams"), make_profile("Bob Brown")


@pytest.mark.asyncio
async def test_friend_request_lifecycle(api_client, as_user, pair):
	alice, bob = pair

	sent = await api_client.post("/friend-requests", json={"to_user_id": bob.id, "note": " hey "}, headers=as_user(alice.id))
	assert sent.status_code == 200
	body = sent.json()
	assert body["relationship"] == "request_sent"
	assert body["request"]["note"] == "hey"
	request_id = body["request"]["id"]

	incoming = await api_client.get("/friend-requests/incoming", headers=as_user(bob.id))
	assert [item["request"]["id"] for item in incoming.json()] == [request_id]
	assert incoming.json()[0]["counterpart"]["full_name"] == "Alice Adams"

	accepted = await api_client.post(f"/friend-requests/{request_id}/accept", headers=as_user(bob.id))
	assert accepted.status_code == 200
	assert accepted.json()["relationship"] == "friends"

	friends = await api_client.get("/friends", headers=as_user(alice.id))
	assert [p["full_name"] for p in friends.json()] == ["Bob Brown"]

	rel = await api_client.get(f"/relationships/{alice.id}", headers=as_user(bob.id))
	assert rel.json() == {"user_id": alice.id, "relationship": "friends", "request_id": None}


@pytest.mark.asyncio
async def test_second_accept_is_gone(api_client, as_user, pair):
	alice, bob = pair
	sent = await api_client.post("/friend-requests", json={"to_user_id": bob.id}, headers=as_user(alice.id))
	request_id = sent.json()["request"]["id"]
	await api_client.post(f"/friend-requests/{request_id}/accept", headers=as_user(bob.id))

	again = await api_client.post(f"/friend-requests/{request_id}/accept", headers=as_user(bob.id))

	assert again.status_code == 410
	assert again.json()["detail"] == "not_pending"
	assert "request_id" in again.json()


@pytest.mark.asyncio
async def test_error_statuses(api_client, as_user, pair, make_profile):
	alice, bob = pair
	carol = make_profile("Carol Chen")
	sent = await api_client.post("/friend-requests", json={"to_user_id": bob.id}, headers=as_user(alice.id))
	request_id = sent.json()["request"]["id"]

	dup = await api_client.post("/friend-requests", json={"to_user_id": bob.id}, headers=as_user(alice.id))
	self_req = await api_client.post("/friend-requests", json={"to_user_id": alice.id}, headers=as_user(alice.id))
	stranger = await api_client.post(f"/friend-requests/{request_id}/decline", headers=as_user(carol.id))
	wrong_side = await api_client.post(f"/friend-requests/{request_id}/cancel", headers=as_user(bob.id))
	missing = await api_client.post(
		"/friend-requests/00000000-0000-0000-0000-000000000000/accept", headers=as_user(bob.id)
	)

	assert (dup.status_code, dup.json()["detail"]) == (409, "already_sent")
	assert (self_req.status_code, self_req.json()["detail"]) == (409, "self_request")
	assert stranger.status_code == 403
	assert (wrong_side.status_code, wrong_side.json()["detail"]) == (403, "not_sender")
	assert missing.status_code == 404


@pytest.mark.asyncio
async def test_cancel_then_outgoing_is_empty(api_client, as_user, pair):
	alice, bob = pair
	sent = await api_client.post("/friend-requests", json={"to_user_id": bob.id}, headers=as_user(alice.id))
	request_id = sent.json()["request"]["id"]

	canceled = await api_client.post(f"/friend-requests/{request_id}/cancel", headers=as_user(alice.id))
	outgoing = await api_client.get("/friend-requests/outgoing", headers=as_user(alice.id))
	rel = await api_client.get(f"/relationships/{bob.id}", headers=as_user(alice.id))

	assert canceled.json()["request"]["status"] == "canceled"
	assert outgoing.json() == []
	assert rel.json()["relationship"] == "none"


@pytest.mark.asyncio
async def test_sender_without_profile_gets_precondition_required(api_client, as_user, pair):
	_, bob = pair

	resp = await api_client.post(
		"/friend-requests",
		json={"to_user_id": bob.id},
		headers=as_user("5f0a1b8e-6c1d-4e61-9d6f-1c2b3a4d5e6f"),
	)

	assert resp.status_code == 428
	assert resp.json()["detail"] == "profile_required"


@pytest.mark.asyncio
async def test_rate_limit_returns_429(api_client, as_user, make_profile, monkeypatch):
	from app.settings import settings

	monkeypatch.setattr(settings, "friend_request_per_minute", 1)
	alice = make_profile("Alice Adams")
	bob = make_profile("Bob Brown")
	carol = make_profile("Carol Chen")

	first = await api_client.post("/friend-requests", json={"to_user_id": bob.id}, headers=as_user(alice.id))
	second = await api_client.post("/friend-requests", json={"to_user_id": carol.id}, headers=as_user(alice.id))

	assert first.status_code == 200
	assert second.status_code == 429
	assert second.json()["detail"] == "per_minute"


@pytest.mark.asyncio
async def test_requires_authentication(api_client):
	resp = await api_client.get("/friends")

	assert resp.status_code == 401


@pytest.mark.asyncio
async def test_note_length_is_validated(api_client, as_user, pair):
	alice, bob = pair

	resp = await api_client.post(
		"/friend-requests", json={"to_user_id": bob.id, "note": "x" * 201}, headers=as_user(alice.id)
	)

	assert resp.status_code == 422
	assert resp.json()["detail"] == "validation_error"
