import httpx
from typing import Any, Dict, List, Optional, Set

from socratix.api.supabase_client import SupabaseClient
from socratix.errors import StorageError
from socratix.models.conversation import Sender, Session, Turn, TurnKind, utcnow
from socratix.models.evaluation import Evaluation
from socratix.storage.base import MessageStore

SESSIONS_TABLE = "learning_sessions"
MESSAGES_TABLE = "conversation_messages"


def _session_from_row(row: Dict[str, Any]) -> Session:
    return Session(
        id=str(row["id"]),
        user_id=str(row["user_id"]),
        topic=row["topic"],
        completed=bool(row.get("completed") or False),
        confidence_score=row.get("confidence_score"),
        summary=row.get("summary"),
        feedback=row.get("feedback"),
        created_at=row["created_at"],
        updated_at=row.get("updated_at"),
    )


def _turn_from_row(row: Dict[str, Any]) -> Turn:
    return Turn(
        id=str(row["id"]),
        session_id=str(row["session_id"]),
        content=row["content"],
        sender=row["sender"],
        kind=row["message_type"],
        sequence=row["sequence_number"],
        created_at=row["created_at"],
    )


class SupabaseMessageStore(MessageStore):
    """Message store backed by the learning_sessions / conversation_messages tables."""

    def __init__(self, client: Optional[SupabaseClient] = None):
        self.client = client or SupabaseClient()

    async def create_session(self, user_id: str, topic: str) -> Session:
        try:
            row = await self.client.insert(SESSIONS_TABLE, {"topic": topic, "user_id": user_id})
        except httpx.HTTPError as e:
            raise StorageError("create session", e) from e
        return _session_from_row(row)

    async def get_session(self, session_id: str) -> Optional[Session]:
        try:
            rows = await self.client.select(SESSIONS_TABLE, {"id": f"eq.{session_id}"})
        except httpx.HTTPError as e:
            raise StorageError("select session", e) from e
        return _session_from_row(rows[0]) if rows else None

    async def list_sessions(self, user_id: str) -> List[Session]:
        try:
            rows = await self.client.select(
                SESSIONS_TABLE,
                {"user_id": f"eq.{user_id}"},
                order="created_at.desc",
            )
        except httpx.HTTPError as e:
            raise StorageError("list sessions", e) from e
        return [_session_from_row(row) for row in rows]

    async def update_session_evaluation(self, session_id: str, evaluation: Evaluation) -> Session:
        values = {
            "completed": evaluation.completed,
            "confidence_score": evaluation.confidence_score,
            "summary": evaluation.summary,
            "feedback": evaluation.feedback,
            "updated_at": utcnow().isoformat(),
        }
        try:
            rows = await self.client.update(SESSIONS_TABLE, {"id": f"eq.{session_id}"}, values)
        except httpx.HTTPError as e:
            raise StorageError("update session", e) from e
        if not rows:
            raise StorageError("update session", KeyError(session_id))
        return _session_from_row(rows[0])

    async def delete_session(self, session_id: str) -> None:
        try:
            await self.client.delete(MESSAGES_TABLE, {"session_id": f"eq.{session_id}"})
            await self.client.delete(SESSIONS_TABLE, {"id": f"eq.{session_id}"})
        except httpx.HTTPError as e:
            raise StorageError("delete session", e) from e

    async def append(
        self,
        session_id: str,
        content: str,
        sender: Sender,
        kind: TurnKind,
        sequence: int,
    ) -> Turn:
        row = {
            "session_id": session_id,
            "content": content,
            "sender": sender,
            "message_type": kind,
            "sequence_number": sequence,
        }
        try:
            stored = await self.client.insert(MESSAGES_TABLE, row)
        except httpx.HTTPError as e:
            raise StorageError("insert message", e) from e
        return _turn_from_row(stored)

    async def list(self, session_id: str) -> List[Turn]:
        try:
            rows = await self.client.select(
                MESSAGES_TABLE,
                {"session_id": f"eq.{session_id}"},
                order="sequence_number.asc",
            )
        except httpx.HTTPError as e:
            raise StorageError("list messages", e) from e
        return [_turn_from_row(row) for row in rows]

    async def count_sessions(self, user_id: str) -> int:
        try:
            rows = await self.client.select(SESSIONS_TABLE, {"user_id": f"eq.{user_id}"}, columns="id")
        except httpx.HTTPError as e:
            raise StorageError("count sessions", e) from e
        return len(rows)

    async def completed_topics(self, user_id: str) -> Set[str]:
        try:
            rows = await self.client.select(
                SESSIONS_TABLE,
                {"user_id": f"eq.{user_id}", "completed": "eq.true"},
                columns="topic",
            )
        except httpx.HTTPError as e:
            raise StorageError("select completed topics", e) from e
        return {row["topic"] for row in rows}
