from pydantic import BaseModel
from typing import List, Literal, Optional


class Badge(BaseModel):
    id: str
    name: str
    description: str
    image: str
    criteria: str


class Achievement(BaseModel):
    id: str
    name: str
    description: str
    image: str
    linkedin_title: str
    linkedin_description: str


class EarnedAchievement(Achievement):
    topic: str


class RewardEvent(BaseModel):
    """An instruction for the rewards collaborator to apply."""
    kind: Literal["badge", "achievement", "points"]
    reward_id: Optional[str] = None
    topic: Optional[str] = None
    points: int = 0

    @classmethod
    def badge(cls, badge_id: str) -> "RewardEvent":
        return cls(kind="badge", reward_id=badge_id)

    @classmethod
    def achievement(cls, achievement_id: str, topic: str) -> "RewardEvent":
        return cls(kind="achievement", reward_id=achievement_id, topic=topic)

    @classmethod
    def award_points(cls, points: int) -> "RewardEvent":
        return cls(kind="points", points=points)


class LevelInfo(BaseModel):
    level: int
    title: str
    progress: int
    next_level: Optional[int] = None
    points_needed: Optional[int] = None


AVAILABLE_BADGES: List[Badge] = [
    Badge(
        id="first_session",
        name="First Steps",
        description="Started your first learning session",
        image="🔰",
        criteria="Complete 1 learning session",
    ),
    Badge(
        id="deep_learner",
        name="Deep Learner",
        description="Achieved a high understanding score",
        image="🧠",
        criteria="Get 80% or higher on a learning evaluation",
    ),
    Badge(
        id="quick_study",
        name="Quick Study",
        description="Completed a session in record time",
        image="⚡",
        criteria="Complete a session in under 5 minutes",
    ),
    Badge(
        id="curious_mind",
        name="Curious Mind",
        description="Asked a lot of great questions",
        image="❓",
        criteria="Send 10+ messages in a single session",
    ),
    Badge(
        id="knowledge_seeker",
        name="Knowledge Seeker",
        description="Explored multiple topics",
        image="🔍",
        criteria="Study 3 different topics",
    ),
    Badge(
        id="quiz_master",
        name="Quiz Master",
        description="Aced a timed challenge quiz",
        image="🎯",
        criteria="Score 90% or higher on a challenge quiz",
    ),
]

AVAILABLE_ACHIEVEMENTS: List[Achievement] = [
    Achievement(
        id="topic_mastery",
        name="Topic Mastery",
        description="Achieved complete understanding of a topic",
        image="🏆",
        linkedin_title="Achieved Topic Mastery on Socratix",
        linkedin_description="Demonstrated comprehensive understanding of a complex topic through Socratic dialogue.",
    ),
    Achievement(
        id="consistent_learner",
        name="Consistent Learner",
        description="Completed learning sessions on 5 consecutive days",
        image="📚",
        linkedin_title="Consistent Learner Achievement on Socratix",
        linkedin_description="Demonstrated dedication to continuous learning through daily study sessions.",
    ),
]
