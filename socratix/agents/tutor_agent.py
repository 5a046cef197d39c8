import logging
from typing import Any, Dict, List, Optional

import openai
from langchain_core.language_models import BaseChatModel
from langchain_core.output_parsers import StrOutputParser
from langchain_core.prompts import ChatPromptTemplate
from langchain_openai import ChatOpenAI
from pydantic import ValidationError

from socratix.config import settings
from socratix.errors import MalformedOutputError, TutorError, TutorRateLimitedError
from socratix.graph.protocol import extract_json, parse_continuation
from socratix.models.evaluation import Evaluation
from socratix.models.student import Level, Timing
from socratix.models.topic import ChallengeQuiz, Flashcard
from socratix.models.tutor import ContinueResult, EvaluateResult, StartResult
from socratix.prompts.tutoring import (
    get_challenge_prompt,
    get_continue_prompt,
    get_evaluate_prompt,
    get_extract_topic_prompt,
    get_flashcards_prompt,
    get_level_guidance,
    get_start_prompt,
    get_summary_prompt,
    get_timing_guidance,
)

logger = logging.getLogger(__name__)

TOPIC_FALLBACK_LENGTH = 50

History = List[Dict[str, str]]


def build_llm() -> ChatOpenAI:
    # The OpenAI client retries 429s with exponential backoff and honours Retry-After
    return ChatOpenAI(
        model=settings.openai_model,
        temperature=settings.openai_temperature,
        api_key=settings.openai_api_key,
        max_retries=settings.openai_max_retries,
    )


def _history_messages(history: History) -> List[tuple]:
    return [(msg["role"], msg["content"]) for msg in history]


def fallback_summary(topic: str) -> str:
    return (
        f"Here are your summarized notes on {topic}:\n\n"
        f"• {topic} is a fascinating subject with many applications\n\n"
        f"• Learning about {topic} involves understanding key concepts and principles\n\n"
        f"• The foundations of {topic} were established through rigorous research and study\n\n"
        f"• Modern applications of {topic} include technological advancements and practical implementations\n\n"
        f"• Several theories exist to explain the foundational mechanisms of {topic}\n\n"
        f"• Understanding {topic} requires both theoretical knowledge and practical application\n\n"
        f"• Recent developments in {topic} have opened new avenues for exploration and discovery"
    )


def fallback_flashcards(topic: str) -> List[Flashcard]:
    return [
        Flashcard(
            question=f"What is {topic}?",
            answer=f"{topic} is an important subject with key concepts and principles.",
        ),
        Flashcard(
            question=f"Why is {topic} important?",
            answer=f"{topic} has significant applications in many fields.",
        ),
    ]


def fallback_challenge(topic: str) -> ChallengeQuiz:
    return ChallengeQuiz(
        questions=[{
            "question": f"What is a key concept in {topic}?",
            "options": ["Option A", "Option B", "Option C", "Option D"],
            "correct_answer_index": 0,
        }],
        time_limit_seconds=60,
    )


class TutorAgent:
    """Boundary to the generative text service.

    Dialogue actions (start, continue, evaluate) raise on failure so the
    controller can leave the session retryable. Study-material actions fall
    back to generic content instead.
    """

    def __init__(self, llm: Optional[BaseChatModel] = None):
        self.llm = llm or build_llm()

    async def _run(self, action: str, prompt: ChatPromptTemplate, variables: Dict[str, Any]) -> str:
        chain = prompt | self.llm | StrOutputParser()
        try:
            return await chain.ainvoke(variables)
        except openai.RateLimitError as e:
            logger.warning("Tutor %s rate limited after retries: %s", action, e)
            raise TutorRateLimitedError(action, e) from e
        except Exception as e:
            logger.error("Tutor %s failed: %s", action, e)
            raise TutorError(action, e) from e

    async def start(self, topic: str) -> StartResult:
        """Ask the opening question for a topic."""
        text = await self._run("start", get_start_prompt(), {"topic": topic})
        question = text.strip()
        if not question:
            raise MalformedOutputError("start", text)
        return StartResult(question=question)

    async def continue_dialogue(
        self,
        user_response: str,
        history: History,
        level: Level,
        timing: Timing,
    ) -> ContinueResult:
        """Feedback and a follow-up question for the learner's latest answer."""
        text = await self._run("continue", get_continue_prompt(), {
            "conversation_history": _history_messages(history),
            "user_response": user_response,
            "level_guidance": get_level_guidance(level),
            "timing_guidance": get_timing_guidance(timing),
        })
        if not text.strip():
            raise MalformedOutputError("continue", text)
        return parse_continuation(text)

    async def evaluate(
        self,
        topic: str,
        history: History,
        level: Level,
        timing: Timing,
    ) -> EvaluateResult:
        text = await self._run("evaluate", get_evaluate_prompt(), {
            "topic": topic,
            "level": level,
            "timing": timing,
            "conversation_history": _history_messages(history),
        })
        payload = extract_json(text)
        if not isinstance(payload, dict):
            raise MalformedOutputError("evaluate", text)
        try:
            evaluation = Evaluation.model_validate(payload)
        except (ValidationError, ValueError) as e:
            logger.warning("Malformed evaluation payload: %s", e)
            raise MalformedOutputError("evaluate", text) from e
        return EvaluateResult(evaluation=evaluation)

    async def extract_topic(self, prompt: str) -> str:
        """Normalize free-form input like "I want to learn about X" to a topic label."""
        fallback = prompt.strip()[:TOPIC_FALLBACK_LENGTH]
        try:
            text = await self._run("extract_topic", get_extract_topic_prompt(), {"prompt": prompt})
        except TutorError as e:
            logger.warning("Topic extraction failed, using raw prompt: %s", e)
            return fallback
        topic = text.strip().strip('"').strip()
        return topic or fallback

    async def generate_summary(self, topic: str) -> str:
        try:
            text = await self._run("generate_summary", get_summary_prompt(), {"topic": topic})
        except TutorError as e:
            logger.warning("Summary generation failed for %s: %s", topic, e)
            return fallback_summary(topic)
        return text.strip() or fallback_summary(topic)

    async def generate_flashcards(self, topic: str, count: int = 8) -> List[Flashcard]:
        try:
            text = await self._run("generate_flashcards", get_flashcards_prompt(), {
                "topic": topic,
                "count": count,
            })
        except TutorError as e:
            logger.warning("Flashcard generation failed for %s: %s", topic, e)
            return fallback_flashcards(topic)

        payload = extract_json(text)
        if isinstance(payload, dict):
            payload = payload.get("flashcards") or payload.get("cards")
        if not isinstance(payload, list):
            logger.warning("Failed to parse flashcards for %s", topic)
            return fallback_flashcards(topic)
        try:
            cards = [Flashcard.model_validate(item) for item in payload]
        except ValidationError as e:
            logger.warning("Invalid flashcards for %s: %s", topic, e)
            return fallback_flashcards(topic)
        return cards[:count] or fallback_flashcards(topic)

    async def generate_challenge_quiz(self, topic: str, count: int = 5) -> ChallengeQuiz:
        try:
            text = await self._run("challenge", get_challenge_prompt(), {
                "topic": topic,
                "count": count,
            })
        except TutorError as e:
            logger.warning("Challenge generation failed for %s: %s", topic, e)
            return fallback_challenge(topic)

        payload = extract_json(text)
        if not isinstance(payload, dict):
            logger.warning("Failed to parse challenge quiz for %s", topic)
            return fallback_challenge(topic)
        try:
            return ChallengeQuiz.model_validate(payload)
        except ValidationError as e:
            logger.warning("Invalid challenge quiz for %s: %s", topic, e)
            return fallback_challenge(topic)
