"""Typed results of the tutor actions used on the dialogue path."""
from pydantic import BaseModel
from typing import Optional

from socratix.models.evaluation import Evaluation


class StartResult(BaseModel):
    question: str


class ContinueResult(BaseModel):
    raw: str
    feedback: Optional[str] = None
    question: str

    @property
    def is_structured(self) -> bool:
        return self.feedback is not None


class EvaluateResult(BaseModel):
    evaluation: Evaluation
