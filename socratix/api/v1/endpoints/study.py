from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from typing import List

from socratix.agents.tutor_agent import TutorAgent
from socratix.api.auth import User
from socratix.api.deps import get_current_user, get_evaluation_gate, get_rewards_ledger, get_tutor
from socratix.errors import SocratixError
from socratix.graph.evaluation_gate import EvaluationGate
from socratix.models.topic import ChallengeQuiz, Flashcard, TopicProgress
from socratix.rewards.ledger import RewardsLedger

router = APIRouter()


class ExtractTopicRequest(BaseModel):
    prompt: str = Field(min_length=1)


class ExtractTopicResponse(BaseModel):
    topic: str


class TopicRequest(BaseModel):
    topic: str = Field(min_length=1)


class SummaryResponse(BaseModel):
    topic: str
    notes: str


class FlashcardsRequest(TopicRequest):
    count: int = Field(default=8, ge=1, le=20)


class ChallengeRequest(TopicRequest):
    count: int = Field(default=5, ge=1, le=10)


class ChallengeResultRequest(TopicRequest):
    score_percent: int = Field(ge=0, le=100)


@router.post("/extract-topic", response_model=ExtractTopicResponse)
async def extract_topic(request: ExtractTopicRequest, tutor: TutorAgent = Depends(get_tutor)):
    """Normalize free-form input into a short topic label."""
    return ExtractTopicResponse(topic=await tutor.extract_topic(request.prompt))


@router.post("/summary", response_model=SummaryResponse)
async def generate_summary(request: TopicRequest, tutor: TutorAgent = Depends(get_tutor)):
    return SummaryResponse(topic=request.topic, notes=await tutor.generate_summary(request.topic))


@router.post("/flashcards", response_model=List[Flashcard])
async def generate_flashcards(request: FlashcardsRequest, tutor: TutorAgent = Depends(get_tutor)):
    return await tutor.generate_flashcards(request.topic, request.count)


@router.post("/challenge", response_model=ChallengeQuiz)
async def generate_challenge(request: ChallengeRequest, tutor: TutorAgent = Depends(get_tutor)):
    """Generate a timed multiple-choice challenge quiz."""
    return await tutor.generate_challenge_quiz(request.topic, request.count)


@router.post("/challenge/result", response_model=TopicProgress)
async def record_challenge_result(
    request: ChallengeResultRequest,
    user: User = Depends(get_current_user),
    gate: EvaluationGate = Depends(get_evaluation_gate),
    ledger: RewardsLedger = Depends(get_rewards_ledger),
):
    """Award points for a finished challenge and keep the best score per topic."""
    try:
        await gate.on_challenge_completed(user.id, request.score_percent)
        progress = await ledger.get_topic_progress(user.id, request.topic) or TopicProgress(topic=request.topic)
        best = max(progress.best_challenge_score or 0, request.score_percent)
        return await ledger.save_topic_progress(
            user.id,
            progress.model_copy(update={"best_challenge_score": best}),
        )
    except SocratixError as e:
        raise e.to_http_exception()
