import pytest

from app.domain.profiles.exceptions import ProfileNotFound, ProfileRequired
from app.domain.profiles.schemas import ProfileUpsertRequest
from app.domain.profiles.service import ProfileService
from app.infra.auth import AuthenticatedUser

USER_ID = "7b0c7c39-3a4f-4b7c-9f3e-0c7a1f5d2e11"


@pytest.fixture
def profiles(profile_repo, social_repo):
	return ProfileService(profile_repo, social_repo)


@pytest.mark.asyncio
async def test_me_requires_onboarding(profiles):
	with pytest.raises(ProfileRequired):
		await profiles.get_my_profile(AuthenticatedUser(id=USER_ID))


@pytest.mark.asyncio
async def test_upsert_normalizes_and_is_repeatable(profiles):
	user = AuthenticatedUser(id=USER_ID, email="sam@campus.edu")
	payload = ProfileUpsertRequest(
		full_name="  Sam Student ",
		major="   ",
		year="Sophomore",
		interests=[" Music", "Music", "Art "],
		campus_area="Off Campus",
	)

	first = await profiles.upsert_my_profile(user, payload)
	second = await profiles.upsert_my_profile(user, payload.model_copy(update={"bio": "hi"}))

	assert first.full_name == "Sam Student"
	assert first.major is None
	assert first.interests == ["Music", "Art"]
	assert first.year == "Sophomore"
	assert second.bio == "hi"
	assert second.updated_at >= first.updated_at
	assert (await profiles.get_my_profile(user)).bio == "hi"


@pytest.mark.asyncio
async def test_detail_includes_match_and_relationship(profiles, social_service, make_profile):
	viewer = make_profile("Vera Viewer", interests=("Music", "Art"), year="Junior")
	target = make_profile("Tom Target", interests=("Music",), year="Junior")
	await social_service.send_request(AuthenticatedUser(id=viewer.id), target.id)

	detail = await profiles.get_profile_detail(AuthenticatedUser(id=viewer.id), target.id)

	assert detail.is_self is False
	assert detail.match.score == 20
	assert detail.match.reasons == ["Shared interests: Music", "Same year: Junior"]
	assert detail.relationship == "request_sent"


@pytest.mark.asyncio
async def test_detail_of_self_has_no_match(profiles, make_profile):
	me = make_profile("Solo Student")

	detail = await profiles.get_profile_detail(AuthenticatedUser(id=me.id), me.id)

	assert detail.is_self is True
	assert detail.match is None


@pytest.mark.asyncio
async def test_detail_without_viewer_profile_skips_match(profiles, make_profile):
	target = make_profile("Tom Target")

	detail = await profiles.get_profile_detail(AuthenticatedUser(id=USER_ID), target.id)

	assert detail.match is None
	assert detail.relationship == "none"


@pytest.mark.asyncio
async def test_detail_of_unknown_profile(profiles):
	with pytest.raises(ProfileNotFound):
		await profiles.get_profile_detail(AuthenticatedUser(id=USER_ID), "00000000-0000-0000-0000-000000000000")


def test_options_expose_catalogs():
	options = ProfileService.options()

	assert "Junior" in options.years
	assert "Off Campus" in options.campus_areas
	assert "Gaming" in options.interests
	assert options.bio_max_length == 500
