import pytest

from app.domain.matching.scoring import MatchResult, calculate_match_score
from app.domain.profiles.models import INTEREST_CATALOG, Profile


def _profile(**fields):
	fields.setdefault("id", fields.get("full_name", "someone"))
	fields.setdefault("full_name", "Someone")
	for key in ("interests", "looking_for"):
		if key in fields:
			fields[key] = tuple(fields[key])
	return Profile(**fields)


def test_full_overlap_scores_each_factor():
	viewer = _profile(
		interests=["Gaming", "Music", "Coding"],
		major="computer science",
		year="Junior",
		looking_for=["Friends"],
		campus_area="North Neighborhood",
	)
	candidate = _profile(
		interests=["Gaming", "Music", "Hiking"],
		major="Computer Science",
		year="Junior",
		looking_for=["Friends", "Dating"],
		campus_area="North Neighborhood",
	)

	result = calculate_match_score(viewer, candidate)

	assert result.score == 60
	assert result.reasons == (
		"Shared interests: Gaming, Music",
		"Same major: Computer Science",
		"Same year: Junior",
		"Both looking for: Friends",
		"Same area: North Neighborhood",
	)


def test_no_overlap_scores_zero():
	viewer = _profile(interests=["Art"], major="History", year="Senior", looking_for=["Mentors"], campus_area="Off Campus")
	candidate = _profile(interests=["Golf"], major="Biology", year="Freshman", looking_for=["Dating"], campus_area="Brody Neighborhood")

	result = calculate_match_score(viewer, candidate)

	assert result == MatchResult(score=0, reasons=())


def test_interest_contribution_is_capped():
	shared = list(INTEREST_CATALOG[:10])
	result = calculate_match_score(_profile(interests=shared), _profile(interests=shared))

	assert result.score == 50
	assert result.reasons == (f"10 shared interests including {shared[0]}, {shared[1]}",)


def test_three_shared_interests_are_listed_in_full():
	viewer = _profile(interests=["Yoga", "Art", "Food", "Golf"])
	candidate = _profile(interests=["Food", "Art", "Yoga"])

	result = calculate_match_score(viewer, candidate)

	assert result.score == 30
	assert result.reasons == ("Shared interests: Yoga, Art, Food",)


def test_four_shared_interests_switch_to_summary_in_viewer_order():
	viewer = _profile(interests=["Tennis", "Music", "Art", "Food"])
	candidate = _profile(interests=["Food", "Art", "Music", "Tennis"])

	result = calculate_match_score(viewer, candidate)

	assert result.reasons == ("4 shared interests including Tennis, Music",)


def test_looking_for_capped_but_reason_lists_every_shared_goal():
	goals = ["Friends", "Study Partners", "Gym Buddy"]
	result = calculate_match_score(_profile(looking_for=goals), _profile(looking_for=goals))

	assert result.score == 20
	assert result.reasons == ("Both looking for: Friends, Study Partners, Gym Buddy",)


def test_missing_fields_contribute_nothing():
	viewer = _profile(major=None, year=None, campus_area=None)
	candidate = _profile(major=None, year=None, campus_area=None)

	assert calculate_match_score(viewer, candidate).score == 0
	assert calculate_match_score(_profile(major=""), _profile(major="")).score == 0


def test_major_compares_whole_string_ignoring_case_only():
	padded = calculate_match_score(_profile(major=" Physics"), _profile(major="physics"))
	blank = calculate_match_score(_profile(major="  "), _profile(major="  "))

	assert padded == MatchResult(score=0, reasons=())
	assert blank.score == 15


def test_year_and_area_compare_case_sensitively():
	result = calculate_match_score(
		_profile(year="Junior", campus_area="North Neighborhood"),
		_profile(year="junior", campus_area="north neighborhood"),
	)

	assert result.score == 0


def test_tags_compare_case_sensitively():
	assert calculate_match_score(_profile(interests=["Music"]), _profile(interests=["music"])).score == 0


def test_everything_matching_reaches_one_hundred():
	shared = list(INTEREST_CATALOG[:7])
	fields = dict(
		interests=shared,
		major="Math",
		year="Grad",
		looking_for=["Friends", "Networking", "Mentors"],
		campus_area="East Neighborhood",
	)

	result = calculate_match_score(_profile(**fields), _profile(**fields))

	assert result.score == 100
	assert len(result.reasons) == 5


@pytest.mark.parametrize(
	"left, right",
	[
		(
			dict(interests=["Gaming", "Music", "Coding", "Art"], major="Physics", looking_for=["Friends"]),
			dict(interests=["Art", "Coding"], major="PHYSICS", looking_for=["Friends", "Dating"], year="Senior"),
		),
		(
			dict(year="Sophomore", campus_area="Off Campus"),
			dict(year="Sophomore", campus_area="South Neighborhood"),
		),
	],
)
def test_score_is_symmetric(left, right):
	a, b = _profile(**left), _profile(**right)

	assert calculate_match_score(a, b).score == calculate_match_score(b, a).score


def test_identical_inputs_give_identical_results():
	viewer = _profile(interests=["Reading", "Writing", "Travel", "Food", "Art"], looking_for=["Roommate"])
	candidate = _profile(interests=["Food", "Art", "Travel", "Writing", "Reading"], looking_for=["Roommate"])

	first = calculate_match_score(viewer, candidate)
	second = calculate_match_score(viewer, candidate)

	assert first == second
	assert 0 <= first.score <= 100
