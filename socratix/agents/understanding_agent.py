"""
Heuristic inference of the learner's level and pacing from a single answer.

Pure functions only: no I/O and no model calls, so the same utterance and
recorded level always produce the same result.
"""
import re
from dataclasses import dataclass
from typing import Optional

from socratix.models.student import LearnerProfile, Level, Timing


CONCEPTUAL_TERMS = (
    "therefore",
    "however",
    "consequently",
    "furthermore",
    "nevertheless",
    "hypothesis",
    "theory",
    "concept",
    "analysis",
)

COMPLEX_WORD_LENGTH = 7
FAST_RESPONSE_MS = 10_000
SLOW_RESPONSE_MS = 45_000

_SENTENCE_END = re.compile(r"[.!?]+")
_CONCEPT_PATTERN = re.compile(
    r"\b(?:" + "|".join(CONCEPTUAL_TERMS) + r")\b",
    re.IGNORECASE,
)


@dataclass(frozen=True)
class ResponseAnalysis:
    """Counts, ratios and candidate level for one utterance."""
    word_count: int
    complex_word_count: int
    sentence_count: int
    concept_term_count: int
    avg_words_per_sentence: float
    complexity_ratio: float
    concept_ratio: float
    candidate_level: Level


def analyze_response(text: str) -> ResponseAnalysis:
    """Score an answer's complexity and classify a candidate level."""
    words = text.split()
    word_count = len(words)
    if word_count == 0:
        return ResponseAnalysis(0, 0, 1, 0, 0.0, 0.0, 0.0, "beginner")

    complex_words = sum(1 for word in words if len(word) >= COMPLEX_WORD_LENGTH)
    sentences = max(1, len(_SENTENCE_END.findall(text)))
    concept_terms = len(_CONCEPT_PATTERN.findall(text))

    avg_words_per_sentence = word_count / sentences
    complexity_ratio = complex_words / word_count
    concept_ratio = concept_terms / word_count

    if (
        avg_words_per_sentence > 15 or complexity_ratio > 0.2 or concept_ratio > 0.1
    ) and word_count > 20:
        candidate: Level = "advanced"
    elif (
        avg_words_per_sentence > 10 or complexity_ratio > 0.15 or concept_ratio > 0.05
    ) and word_count > 10:
        candidate = "intermediate"
    else:
        candidate = "beginner"

    return ResponseAnalysis(
        word_count=word_count,
        complex_word_count=complex_words,
        sentence_count=sentences,
        concept_term_count=concept_terms,
        avg_words_per_sentence=avg_words_per_sentence,
        complexity_ratio=complexity_ratio,
        concept_ratio=concept_ratio,
        candidate_level=candidate,
    )


def ratchet_level(current: Level, candidate: Level) -> Level:
    """Only ever move the recorded level upward within a session."""
    if current == "beginner":
        return candidate
    if current == "intermediate" and candidate == "advanced":
        return candidate
    return current


def classify_timing(elapsed_ms: Optional[float]) -> Timing:
    if elapsed_ms is None:
        return "normal"
    if elapsed_ms < FAST_RESPONSE_MS:
        return "fast"
    if elapsed_ms > SLOW_RESPONSE_MS:
        return "slow"
    return "normal"


def infer_understanding(
    text: str,
    profile: LearnerProfile,
    elapsed_ms: Optional[float] = None,
) -> LearnerProfile:
    """Return the learner profile updated for one answer."""
    analysis = analyze_response(text)
    return LearnerProfile(
        level=ratchet_level(profile.level, analysis.candidate_level),
        timing=classify_timing(elapsed_ms),
    )
