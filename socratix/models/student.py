from pydantic import BaseModel
from typing import Literal


Level = Literal["beginner", "intermediate", "advanced"]
Timing = Literal["fast", "normal", "slow"]


class LearnerProfile(BaseModel):
    """Ephemeral, session-scoped view of the learner."""
    level: Level = "beginner"
    timing: Timing = "normal"
