import operator
from dataclasses import dataclass, field
from enum import Enum
from typing import Annotated, Dict, List, Optional, TypedDict

from pydantic import BaseModel

from socratix.models.conversation import Session, Turn
from socratix.models.evaluation import Evaluation
from socratix.models.student import LearnerProfile, Level, Timing


class DialogueState(str, Enum):
    UNINITIALIZED = "uninitialized"
    AWAITING_FIRST_QUESTION = "awaiting_first_question"
    AWAITING_USER_TURN = "awaiting_user_turn"
    AWAITING_AI_TURN = "awaiting_ai_turn"
    EVALUATED = "evaluated"


@dataclass
class DialogueSession:
    """In-memory dialogue for one session; the controller is its only writer."""
    session: Session
    turns: List[Turn] = field(default_factory=list)
    state: DialogueState = DialogueState.UNINITIALIZED
    profile: LearnerProfile = field(default_factory=LearnerProfile)
    busy: bool = False  # a start or submit is in flight

    @property
    def next_sequence(self) -> int:
        return len(self.turns) + 1

    def history(self, turns: Optional[List[Turn]] = None) -> List[Dict[str, str]]:
        """Turns as role/content messages for the tutor, in turn order."""
        return [turn.as_history_message() for turn in (self.turns if turns is None else turns)]

    def last_ai_turn(self) -> Optional[Turn]:
        return next((turn for turn in reversed(self.turns) if turn.sender == "ai"), None)


class TurnState(TypedDict, total=False):
    """State flowing through one learner turn."""
    session_id: str
    text: str
    elapsed_ms: Optional[float]
    ai_sequence: int
    level: Level
    timing: Timing
    evaluation_due: bool
    new_turns: Annotated[List[Turn], operator.add]
    evaluation: Optional[Evaluation]


class TurnOutcome(BaseModel):
    """What a start or submit added to the dialogue."""
    session_id: str
    state: DialogueState
    turns: List[Turn]
    profile: LearnerProfile
    evaluation: Optional[Evaluation] = None
