import uuid
from typing import Dict, List, Optional

from socratix.errors import StorageError
from socratix.models.conversation import Sender, Session, Turn, TurnKind, utcnow
from socratix.models.evaluation import Evaluation
from socratix.storage.base import MessageStore


class InMemoryMessageStore(MessageStore):
    """Dict-backed store for development and tests."""

    def __init__(self):
        self.sessions: Dict[str, Session] = {}
        self.turns: Dict[str, List[Turn]] = {}

    async def create_session(self, user_id: str, topic: str) -> Session:
        session = Session(id=str(uuid.uuid4()), user_id=user_id, topic=topic)
        self.sessions[session.id] = session
        self.turns[session.id] = []
        return session

    async def get_session(self, session_id: str) -> Optional[Session]:
        return self.sessions.get(session_id)

    async def list_sessions(self, user_id: str) -> List[Session]:
        sessions = [s for s in self.sessions.values() if s.user_id == user_id]
        sessions.sort(key=lambda s: s.created_at, reverse=True)
        return sessions

    async def update_session_evaluation(self, session_id: str, evaluation: Evaluation) -> Session:
        session = self.sessions.get(session_id)
        if session is None:
            raise StorageError("update", KeyError(session_id))
        updated = session.model_copy(update={
            "completed": evaluation.completed,
            "confidence_score": evaluation.confidence_score,
            "summary": evaluation.summary,
            "feedback": evaluation.feedback,
            "updated_at": utcnow(),
        })
        self.sessions[session_id] = updated
        return updated

    async def delete_session(self, session_id: str) -> None:
        self.turns.pop(session_id, None)
        self.sessions.pop(session_id, None)

    async def append(
        self,
        session_id: str,
        content: str,
        sender: Sender,
        kind: TurnKind,
        sequence: int,
    ) -> Turn:
        if session_id not in self.sessions:
            raise StorageError("insert", KeyError(session_id))
        log = self.turns.setdefault(session_id, [])
        if any(t.sequence == sequence for t in log):
            raise StorageError("insert", ValueError(f"duplicate sequence {sequence}"))
        turn = Turn(
            id=str(uuid.uuid4()),
            session_id=session_id,
            content=content,
            sender=sender,
            kind=kind,
            sequence=sequence,
        )
        log.append(turn)
        return turn

    async def list(self, session_id: str) -> List[Turn]:
        return sorted(self.turns.get(session_id, []), key=lambda t: t.sequence)
