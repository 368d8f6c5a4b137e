import unittest

from tourism_mcp.config import DEFAULT_CATALOG_PATH
from tourism_mcp.services.catalog import AttractionCatalog
from tourism_mcp.services.models import Attraction, UserProfile
from tourism_mcp.services.recommendations import (
    AGE_GROUP_TAGS,
    TRAVEL_TYPE_TAGS,
    AgeGroup,
    RecommendationService,
    TravelType,
    humanize_tag,
    score_attraction,
)
from tourism_mcp.services.store import InMemoryTTLStore


def make_attraction(tags, **overrides):
    fields = dict(
        id=1,
        name="Test",
        category="Museum",
        description="",
        latitude=48.0,
        longitude=16.0,
        destination_id=1,
        tags=tags,
    )
    fields.update(overrides)
    return Attraction(**fields)


BELVEDERE_TAGS = ["history", "art", "architecture", "culture", "romantic", "photography"]


class TestScoreAttraction(unittest.TestCase):
    def test_documented_example_scores_95(self):
        attraction = make_attraction(BELVEDERE_TAGS)
        profile = UserProfile(user_id="u1", preferences=["art", "history"])
        result = score_attraction(attraction, profile)
        self.assertEqual(result.score, 95)
        self.assertEqual(result.matched_tags, ["History", "Art"])

    def test_is_deterministic(self):
        attraction = make_attraction(BELVEDERE_TAGS)
        profile = UserProfile(user_id="u1", preferences=["art", "nature"], travel_type="solo", age_group="teen")
        self.assertEqual(score_attraction(attraction, profile), score_attraction(attraction, profile))

    def test_partial_preference_overlap_truncates(self):
        attraction = make_attraction(BELVEDERE_TAGS)
        profile = UserProfile(user_id="u1", preferences=["art", "history", "nature"])
        # 50 + 40 * 2/3 + 5 = 81.67
        self.assertEqual(score_attraction(attraction, profile).score, 81)

    def test_duplicate_preferences_count_once(self):
        attraction = make_attraction(BELVEDERE_TAGS)
        profile = UserProfile(user_id="u1", preferences=["art", "art", "history"])
        self.assertEqual(score_attraction(attraction, profile).score, 95)

    def test_travel_type_term(self):
        attraction = make_attraction(BELVEDERE_TAGS)
        profile = UserProfile(user_id="u1", travel_type="cultural")
        # culture, history, art, architecture out of five expected tags
        self.assertEqual(score_attraction(attraction, profile).score, 71)

    def test_age_group_term(self):
        attraction = make_attraction(BELVEDERE_TAGS)
        profile = UserProfile(user_id="u1", age_group="senior")
        self.assertEqual(score_attraction(attraction, profile).score, 65)

    def test_unmapped_values_are_skipped(self):
        attraction = make_attraction(BELVEDERE_TAGS)
        profile = UserProfile(user_id="u1", travel_type="space", age_group="toddler")
        self.assertEqual(score_attraction(attraction, profile).score, 55)

    def test_budget_terms(self):
        cheap = make_attraction(["budget", "outdoor"])
        fancy = make_attraction(["luxury"])
        self.assertEqual(score_attraction(cheap, UserProfile(user_id="u", budget="budget")).score, 60)
        self.assertEqual(score_attraction(fancy, UserProfile(user_id="u", budget="budget")).score, 50)
        self.assertEqual(score_attraction(fancy, UserProfile(user_id="u", budget="luxury")).score, 60)
        self.assertEqual(score_attraction(cheap, UserProfile(user_id="u", budget="luxury")).score, 50)
        self.assertEqual(score_attraction(cheap, UserProfile(user_id="u", budget="moderate")).score, 55)

    def test_score_is_capped_at_100(self):
        attraction = make_attraction(BELVEDERE_TAGS)
        profile = UserProfile(
            user_id="u1",
            preferences=list(BELVEDERE_TAGS),
            travel_type="cultural",
            age_group="senior",
        )
        self.assertEqual(score_attraction(attraction, profile).score, 100)

    def test_matched_tags_follow_attraction_order(self):
        attraction = make_attraction(["family-friendly", "adventure", "photography", "budget"])
        profile = UserProfile(user_id="u1", preferences=["photography", "family-friendly"])
        self.assertEqual(score_attraction(attraction, profile).matched_tags, ["Family friendly", "Photography"])

    def test_no_preferences_no_matched_tags(self):
        result = score_attraction(make_attraction(BELVEDERE_TAGS), UserProfile(user_id="u1"))
        self.assertEqual(result.matched_tags, [])
        self.assertEqual(result.score, 55)

    def test_humanize_tag(self):
        self.assertEqual(humanize_tag("family-friendly"), "Family friendly")
        self.assertEqual(humanize_tag("art"), "Art")

    def test_tables_cover_every_non_default_member(self):
        self.assertEqual(set(TRAVEL_TYPE_TAGS), set(TravelType) - {TravelType.GENERAL})
        self.assertEqual(set(AGE_GROUP_TAGS), set(AgeGroup) - {AgeGroup.ADULT})


class TestRecommendationService(unittest.TestCase):
    def setUp(self):
        self.store = InMemoryTTLStore()
        self.catalog = AttractionCatalog.from_file(DEFAULT_CATALOG_PATH)
        self.service = RecommendationService(self.store, self.catalog)

    def test_recommend_ranks_by_score(self):
        profile = UserProfile(user_id="USR-1", preferences=["art", "history"])
        ranked = self.service.recommend(1, profile, limit=3)
        self.assertEqual(len(ranked), 3)
        scores = [item["match_score"] for item in ranked]
        self.assertEqual(scores, sorted(scores, reverse=True))
        self.assertEqual(ranked[0]["attraction"].id, 103)
        self.assertEqual(ranked[0]["match_score"], 95)

    def test_ties_keep_catalog_order(self):
        profile = UserProfile(user_id="USR-1")
        ranked = self.service.recommend(2, profile, limit=10)
        # Every attraction scores 55 without preferences
        self.assertEqual([item["attraction"].id for item in ranked],
                         [a.id for a in self.catalog.list_by_destination(2)])

    def test_recommend_saves_profile(self):
        profile = UserProfile(user_id="USR-2", preferences=["food"], budget="budget")
        self.service.recommend(4, profile)
        self.assertEqual(self.service.get_profile("USR-2"), profile)

    def test_profile_last_write_wins(self):
        self.service.save_profile(UserProfile(user_id="USR-3", preferences=["art"]))
        self.service.save_profile(UserProfile(user_id="USR-3", preferences=["nature"]))
        self.assertEqual(self.service.get_profile("USR-3").preferences, ["nature"])

    def test_unknown_profile(self):
        self.assertIsNone(self.service.get_profile("nobody"))

    def test_unknown_destination(self):
        self.assertEqual(self.service.recommend(99, UserProfile(user_id="u")), [])


if __name__ == "__main__":
    unittest.main()
