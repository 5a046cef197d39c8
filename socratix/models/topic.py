from pydantic import AliasChoices, BaseModel, Field
from typing import List, Optional
from datetime import datetime


class Flashcard(BaseModel):
    question: str
    answer: str


class ChallengeQuestion(BaseModel):
    question: str
    options: List[str] = Field(min_length=4, max_length=4)
    correct_answer_index: int = Field(
        ge=0,
        le=3,
        validation_alias=AliasChoices("correct_answer_index", "correctAnswer", "correctAnswerIndex"),
    )


class ChallengeQuiz(BaseModel):
    questions: List[ChallengeQuestion] = Field(min_length=1)
    time_limit_seconds: int = Field(
        gt=0,
        validation_alias=AliasChoices("time_limit_seconds", "timeLimit", "timeLimitSeconds"),
    )


class TopicProgress(BaseModel):
    """Per-topic study side-state kept beside the rewards."""
    topic: str
    flashcards_reviewed: int = 0
    best_challenge_score: Optional[int] = None
    updated_at: Optional[datetime] = None
