import logging
from typing import Iterable, List, Optional

from socratix.models.conversation import utcnow
from socratix.models.rewards import (
    AVAILABLE_ACHIEVEMENTS,
    AVAILABLE_BADGES,
    Badge,
    EarnedAchievement,
    LevelInfo,
    RewardEvent,
)
from socratix.models.topic import TopicProgress
from socratix.storage.kv_store import KeyValueStore

logger = logging.getLogger(__name__)

# (minimum points, level, title)
LEVELS = [
    (0, 1, "Beginner"),
    (50, 2, "Learner"),
    (100, 3, "Thinker"),
    (200, 4, "Scholar"),
    (350, 5, "Expert"),
]


def level_info(points: int) -> LevelInfo:
    """Map a point total to the learner's progress level."""
    for i in range(len(LEVELS) - 1, -1, -1):
        minimum, level, title = LEVELS[i]
        if points >= minimum:
            if i < len(LEVELS) - 1:
                next_minimum, next_level, _ = LEVELS[i + 1]
                progress = round((points - minimum) / (next_minimum - minimum) * 100)
                return LevelInfo(
                    level=level,
                    title=title,
                    progress=progress,
                    next_level=next_level,
                    points_needed=next_minimum - points,
                )
            return LevelInfo(level=level, title=title, progress=100)
    return LevelInfo(level=1, title="Beginner", progress=0, next_level=2, points_needed=50)


class RewardsLedger:
    """Applies reward events to a learner's badges, achievements and points."""

    def __init__(self, store: KeyValueStore):
        self.store = store

    @staticmethod
    def _badges_key(user_id: str) -> str:
        return f"user_badges_{user_id}"

    @staticmethod
    def _achievements_key(user_id: str) -> str:
        return f"user_achievements_{user_id}"

    @staticmethod
    def _points_key(user_id: str) -> str:
        return f"user_points_{user_id}"

    @staticmethod
    def _progress_key(user_id: str, topic: str) -> str:
        return f"topic_progress_{user_id}_{topic.strip().lower()}"

    async def apply(self, user_id: str, events: Iterable[RewardEvent]) -> None:
        for event in events:
            if event.kind == "badge":
                await self.award_badge(user_id, event.reward_id)
            elif event.kind == "achievement":
                await self.award_achievement(user_id, event.reward_id, event.topic or "")
            elif event.kind == "points":
                await self.award_points(user_id, event.points)

    async def award_badge(self, user_id: str, badge_id: str) -> bool:
        """Returns False when the learner already holds the badge."""
        badge_ids: List[str] = await self.store.get(self._badges_key(user_id)) or []
        if badge_id in badge_ids:
            return False
        badge_ids.append(badge_id)
        await self.store.set(self._badges_key(user_id), badge_ids)
        logger.info("Badge %s awarded to user %s", badge_id, user_id)
        return True

    async def award_achievement(self, user_id: str, achievement_id: str, topic: str) -> bool:
        earned = await self.store.get(self._achievements_key(user_id)) or []
        if any(item["id"] == achievement_id for item in earned):
            return False
        earned.append({"id": achievement_id, "topic": topic})
        await self.store.set(self._achievements_key(user_id), earned)
        logger.info("Achievement %s awarded to user %s for topic %s", achievement_id, user_id, topic)
        return True

    async def award_points(self, user_id: str, points: int) -> int:
        total = await self.get_points(user_id) + points
        await self.store.set(self._points_key(user_id), total)
        return total

    async def get_badges(self, user_id: str) -> List[Badge]:
        badge_ids = await self.store.get(self._badges_key(user_id)) or []
        catalog = {badge.id: badge for badge in AVAILABLE_BADGES}
        return [catalog[badge_id] for badge_id in badge_ids if badge_id in catalog]

    async def get_achievements(self, user_id: str) -> List[EarnedAchievement]:
        earned = await self.store.get(self._achievements_key(user_id)) or []
        catalog = {a.id: a for a in AVAILABLE_ACHIEVEMENTS}
        return [
            EarnedAchievement(**catalog[item["id"]].model_dump(), topic=item["topic"])
            for item in earned
            if item["id"] in catalog
        ]

    async def get_points(self, user_id: str) -> int:
        return await self.store.get(self._points_key(user_id)) or 0

    async def get_topic_progress(self, user_id: str, topic: str) -> Optional[TopicProgress]:
        data = await self.store.get(self._progress_key(user_id, topic))
        return TopicProgress(**data) if data else None

    async def save_topic_progress(self, user_id: str, progress: TopicProgress) -> TopicProgress:
        progress = progress.model_copy(update={"updated_at": utcnow()})
        await self.store.set(self._progress_key(user_id, progress.topic), progress.model_dump(mode="json"))
        return progress
