from abc import ABC, abstractmethod
from typing import List, Optional, Set

from socratix.models.conversation import Sender, Session, Turn, TurnKind
from socratix.models.evaluation import Evaluation


class MessageStore(ABC):
    """Sessions and their append-only, sequence-ordered turn log.

    Sequence numbers are supplied by the caller. The store assumes a single
    writer per session; concurrent writers may interleave sequences.
    """

    @abstractmethod
    async def create_session(self, user_id: str, topic: str) -> Session:
        ...

    @abstractmethod
    async def get_session(self, session_id: str) -> Optional[Session]:
        ...

    @abstractmethod
    async def list_sessions(self, user_id: str) -> List[Session]:
        """Sessions of a learner, newest first."""

    @abstractmethod
    async def update_session_evaluation(self, session_id: str, evaluation: Evaluation) -> Session:
        ...

    @abstractmethod
    async def delete_session(self, session_id: str) -> None:
        """Delete the session's turns, then the session."""

    @abstractmethod
    async def append(
        self,
        session_id: str,
        content: str,
        sender: Sender,
        kind: TurnKind,
        sequence: int,
    ) -> Turn:
        ...

    @abstractmethod
    async def list(self, session_id: str) -> List[Turn]:
        """Turns of a session ascending by sequence."""

    async def count_sessions(self, user_id: str) -> int:
        return len(await self.list_sessions(user_id))

    async def completed_topics(self, user_id: str) -> Set[str]:
        sessions = await self.list_sessions(user_id)
        return {s.topic for s in sessions if s.completed}
