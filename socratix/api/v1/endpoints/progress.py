from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from typing import List

from socratix.api.auth import User
from socratix.api.deps import get_current_user, get_rewards_ledger
from socratix.errors import SocratixError
from socratix.models.rewards import Badge, EarnedAchievement, LevelInfo
from socratix.models.topic import TopicProgress
from socratix.rewards.ledger import RewardsLedger, level_info

router = APIRouter()


class ProgressResponse(BaseModel):
    points: int
    level: LevelInfo
    badges: List[Badge]
    achievements: List[EarnedAchievement]


class TopicProgressUpdate(BaseModel):
    flashcards_reviewed: int = Field(default=0, ge=0)


@router.get("/", response_model=ProgressResponse)
async def get_progress(
    user: User = Depends(get_current_user),
    ledger: RewardsLedger = Depends(get_rewards_ledger),
):
    """Badges, achievements, points and level of the current learner."""
    try:
        points = await ledger.get_points(user.id)
        return ProgressResponse(
            points=points,
            level=level_info(points),
            badges=await ledger.get_badges(user.id),
            achievements=await ledger.get_achievements(user.id),
        )
    except SocratixError as e:
        raise e.to_http_exception()


@router.get("/topics/{topic}", response_model=TopicProgress)
async def get_topic_progress(
    topic: str,
    user: User = Depends(get_current_user),
    ledger: RewardsLedger = Depends(get_rewards_ledger),
):
    try:
        progress = await ledger.get_topic_progress(user.id, topic)
    except SocratixError as e:
        raise e.to_http_exception()
    if progress is None:
        raise HTTPException(status_code=404, detail="No progress recorded for this topic")
    return progress


@router.put("/topics/{topic}", response_model=TopicProgress)
async def save_topic_progress(
    topic: str,
    update: TopicProgressUpdate,
    user: User = Depends(get_current_user),
    ledger: RewardsLedger = Depends(get_rewards_ledger),
):
    try:
        current = await ledger.get_topic_progress(user.id, topic) or TopicProgress(topic=topic)
        return await ledger.save_topic_progress(
            user.id,
            current.model_copy(update={"flashcards_reviewed": update.flashcards_reviewed}),
        )
    except SocratixError as e:
        raise e.to_http_exception()
