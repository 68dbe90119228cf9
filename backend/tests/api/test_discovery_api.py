import pytest


@pytest.mark.asyncio
async def test_discover_ranks_and_filters(api_client, as_user, make_profile):
	viewer = make_profile("Vera Viewer", interests=("Gaming", "Music"), year="Junior")
	make_profile("Close Match", interests=("Gaming", "Music"), year="Junior")
	make_profile("Far Match", interests=("Golf",), year="Senior")

	everyone = await api_client.get("/discover", headers=as_user(viewer.id))
	seniors = await api_client.get("/discover", params={"year": "Senior"}, headers=as_user(viewer.id))
	golfers = await api_client.get(
		"/discover", params=[("interests", "Golf"), ("interests", "Chess")], headers=as_user(viewer.id)
	)

	assert everyone.status_code == 200
	assert [c["profile"]["full_name"] for c in everyone.json()["items"]] == ["Close Match", "Far Match"]
	assert everyone.json()["items"][0]["score"] == 30
	assert [c["profile"]["full_name"] for c in seniors.json()["items"]] == ["Far Match"]
	assert [c["profile"]["full_name"] for c in golfers.json()["items"]] == ["Far Match"]
	assert golfers.json()["interests"] == ["Chess", "Golf"]


@pytest.mark.asyncio
async def test_discover_requires_profile(api_client, as_user, make_profile):
	make_profile("Someone")

	resp = await api_client.get("/discover", headers=as_user("9a1d2c3b-4e5f-4a6b-8c7d-0e1f2a3b4c5d"))

	assert resp.status_code == 428


@pytest.mark.asyncio
async def test_discover_rejects_unknown_year(api_client, as_user, make_profile):
	viewer = make_profile("Vera Viewer")

	resp = await api_client.get("/discover", params={"year": "Postdoc"}, headers=as_user(viewer.id))

	assert resp.status_code == 422
