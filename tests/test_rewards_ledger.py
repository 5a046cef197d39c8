"""Tests for reward bookkeeping on the key-value stores."""
import pytest

from socratix.models.rewards import RewardEvent
from socratix.models.topic import TopicProgress
from socratix.rewards.ledger import RewardsLedger, level_info
from socratix.storage.kv_store import InMemoryKeyValueStore, JsonFileKeyValueStore


class TestRewardsLedger:
    async def test_badge_award_is_idempotent(self, ledger):
        assert await ledger.award_badge("u1", "deep_learner") is True
        assert await ledger.award_badge("u1", "deep_learner") is False
        assert [b.id for b in await ledger.get_badges("u1")] == ["deep_learner"]

    async def test_achievement_award_is_idempotent_by_id(self, ledger):
        assert await ledger.award_achievement("u1", "topic_mastery", "Algebra") is True
        assert await ledger.award_achievement("u1", "topic_mastery", "Gravity") is False
        achievements = await ledger.get_achievements("u1")
        assert len(achievements) == 1
        assert achievements[0].topic == "Algebra"
        assert achievements[0].name == "Topic Mastery"

    async def test_points_accumulate(self, ledger):
        assert await ledger.get_points("u1") == 0
        await ledger.award_points("u1", 18)
        assert await ledger.award_points("u1", 12) == 30

    async def test_apply_dispatches_events(self, ledger):
        await ledger.apply("u1", [
            RewardEvent.badge("deep_learner"),
            RewardEvent.achievement("topic_mastery", "Gravity"),
            RewardEvent.award_points(18),
            RewardEvent.badge("deep_learner"),
        ])
        assert [b.id for b in await ledger.get_badges("u1")] == ["deep_learner"]
        assert await ledger.get_points("u1") == 18

    async def test_unknown_badge_ids_are_not_listed(self, ledger):
        await ledger.award_badge("u1", "retired_badge")
        assert await ledger.get_badges("u1") == []

    async def test_rewards_are_scoped_per_user(self, ledger):
        await ledger.award_badge("u1", "first_session")
        assert await ledger.get_badges("u2") == []

    async def test_topic_progress_round_trip(self, ledger):
        assert await ledger.get_topic_progress("u1", "Gravity") is None
        saved = await ledger.save_topic_progress("u1", TopicProgress(topic="Gravity", flashcards_reviewed=4))
        assert saved.updated_at is not None

        loaded = await ledger.get_topic_progress("u1", "gravity")
        assert loaded.flashcards_reviewed == 4
        assert loaded.topic == "Gravity"


@pytest.mark.parametrize("points, level, title, progress, points_needed", [
    (0, 1, "Beginner", 0, 50),
    (25, 1, "Beginner", 50, 25),
    (50, 2, "Learner", 0, 50),
    (150, 3, "Thinker", 50, 50),
    (349, 4, "Scholar", 99, 1),
])
def test_level_info(points, level, title, progress, points_needed):
    info = level_info(points)
    assert (info.level, info.title, info.progress, info.points_needed) == (level, title, progress, points_needed)


def test_level_info_top_level():
    info = level_info(500)
    assert info.level == 5
    assert info.progress == 100
    assert info.next_level is None


class TestKeyValueStores:
    async def test_in_memory_last_write_wins(self):
        store = InMemoryKeyValueStore()
        await store.set("k", [1])
        await store.set("k", [1, 2])
        assert await store.get("k") == [1, 2]
        assert await store.get("missing") is None

    async def test_in_memory_values_are_copies(self):
        store = InMemoryKeyValueStore()
        value = ["a"]
        await store.set("k", value)
        value.append("b")
        assert await store.get("k") == ["a"]

    async def test_json_file_store_persists_across_instances(self, tmp_path):
        path = tmp_path / "rewards" / "kv.json"
        await JsonFileKeyValueStore(str(path)).set("user_points_u1", 42)

        reopened = RewardsLedger(JsonFileKeyValueStore(str(path)))
        assert await reopened.get_points("u1") == 42
        assert path.exists()
