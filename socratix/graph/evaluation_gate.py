import logging
from datetime import datetime, timedelta
from typing import Iterable, List, Optional

from socratix.models.conversation import Session, Turn, utcnow
from socratix.models.evaluation import Evaluation
from socratix.models.rewards import RewardEvent
from socratix.rewards.ledger import RewardsLedger
from socratix.storage.base import MessageStore

logger = logging.getLogger(__name__)

EVALUATION_THRESHOLD = 5  # user turns, inclusive of the latest answer
MASTERY_SCORE = 80
KNOWLEDGE_SEEKER_TOPICS = 3
BASE_SESSION_POINTS = 10
QUIZ_MASTER_SCORE = 90
QUICK_STUDY_WINDOW = timedelta(minutes=5)


def should_evaluate(turns: Iterable[Turn]) -> bool:
    """AI turns never count toward the threshold."""
    return sum(1 for turn in turns if turn.sender == "user") >= EVALUATION_THRESHOLD


def session_points(confidence_score: int) -> int:
    return BASE_SESSION_POINTS + confidence_score // 10


def evaluation_events(
    session: Session,
    evaluation: Evaluation,
    completed_topics: Iterable[str],
    now: Optional[datetime] = None,
) -> List[RewardEvent]:
    """Reward events earned by one evaluated session."""
    events: List[RewardEvent] = []
    if evaluation.confidence_score >= MASTERY_SCORE:
        events.append(RewardEvent.badge("deep_learner"))
        events.append(RewardEvent.achievement("topic_mastery", session.topic))
    if evaluation.completed and (now or utcnow()) - session.created_at <= QUICK_STUDY_WINDOW:
        events.append(RewardEvent.badge("quick_study"))
    if len(set(completed_topics)) >= KNOWLEDGE_SEEKER_TOPICS:
        events.append(RewardEvent.badge("knowledge_seeker"))
    events.append(RewardEvent.award_points(session_points(evaluation.confidence_score)))
    return events


def session_created_events(session_count: int) -> List[RewardEvent]:
    return [RewardEvent.badge("first_session")] if session_count == 1 else []


def challenge_events(score_percent: int) -> List[RewardEvent]:
    events = [RewardEvent.award_points(score_percent)]
    if score_percent >= QUIZ_MASTER_SCORE:
        events.append(RewardEvent.badge("quiz_master"))
    return events


class EvaluationGate:
    """Decides when a session is evaluated and what the evaluation earns."""

    def __init__(self, store: MessageStore, ledger: RewardsLedger):
        self.store = store
        self.ledger = ledger

    should_evaluate = staticmethod(should_evaluate)

    async def apply(self, session: Session, evaluation: Evaluation) -> Session:
        """Persist the evaluation, then issue rewards.

        Reward issuance failures are logged; they never undo the evaluation.
        """
        updated = await self.store.update_session_evaluation(session.id, evaluation)
        try:
            topics = await self.store.completed_topics(session.user_id)
            events = evaluation_events(updated, evaluation, topics)
            await self.ledger.apply(session.user_id, events)
        except Exception:
            logger.exception("Failed to issue rewards for session %s", session.id)
        return updated

    async def on_session_created(self, session: Session) -> None:
        try:
            count = await self.store.count_sessions(session.user_id)
            await self.ledger.apply(session.user_id, session_created_events(count))
        except Exception:
            logger.exception("Failed to issue rewards for new session %s", session.id)

    async def on_challenge_completed(self, user_id: str, score_percent: int) -> None:
        await self.ledger.apply(user_id, challenge_events(score_percent))
