"""
Parsing of free-form model output.

Continuations follow a two-part text protocol:

    FEEDBACK: <feedback on the learner's answer>

    QUESTION: <the next question>

Output that lacks either marker is treated as a single question. Structured
payloads (evaluations, flashcards, quizzes) are located as the first JSON
object or array embedded in the text.
"""
import json
import re
from typing import Any, Optional

from socratix.models.tutor import ContinueResult

FEEDBACK_PATTERN = re.compile(r"FEEDBACK:(.*?)(?=QUESTION:|$)", re.DOTALL)
QUESTION_PATTERN = re.compile(r"QUESTION:(.*?)$", re.DOTALL)

_OBJECT_PATTERN = re.compile(r"\{.*\}", re.DOTALL)
_ARRAY_PATTERN = re.compile(r"\[.*\]", re.DOTALL)


def parse_continuation(text: str) -> ContinueResult:
    feedback_match = FEEDBACK_PATTERN.search(text)
    question_match = QUESTION_PATTERN.search(text)
    if feedback_match and question_match:
        feedback = feedback_match.group(1).strip()
        question = question_match.group(1).strip()
        if feedback and question:
            return ContinueResult(raw=text, feedback=feedback, question=question)
    return ContinueResult(raw=text, question=text.strip())


def extract_json(text: str) -> Optional[Any]:
    """Best-effort decode of the whole text, then of the first embedded object or array."""
    try:
        return json.loads(text.strip())
    except json.JSONDecodeError:
        pass

    matches = [m for m in (_OBJECT_PATTERN.search(text), _ARRAY_PATTERN.search(text)) if m]
    # The outermost structure opens first
    for match in sorted(matches, key=lambda m: m.start()):
        try:
            return json.loads(match.group(0))
        except json.JSONDecodeError:
            continue
    return None
