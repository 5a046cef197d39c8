from pydantic import BaseModel, Field
from typing import Optional, Literal
from datetime import datetime, timezone


Sender = Literal["user", "ai"]
TurnKind = Literal["question", "answer", "evaluation", "feedback"]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Session(BaseModel):
    """One learning episode about a single topic."""
    id: str
    user_id: str
    topic: str
    completed: bool = False
    confidence_score: Optional[int] = None  # 0-100, set on evaluation
    summary: Optional[str] = None
    feedback: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: Optional[datetime] = None


class Turn(BaseModel):
    """One entry in a session's ordered dialogue log."""
    id: str
    session_id: str
    content: str
    sender: Sender
    kind: TurnKind
    sequence: int = Field(gt=0)
    created_at: datetime = Field(default_factory=utcnow)

    model_config = {"frozen": True}

    def as_history_message(self) -> dict:
        role = "assistant" if self.sender == "ai" else "user"
        return {"role": role, "content": self.content}
