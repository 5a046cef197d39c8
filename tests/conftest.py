"""Pytest configuration and shared fixtures."""
import asyncio
from datetime import datetime, timedelta, timezone
from typing import List, Optional

import pytest

from socratix.graph.controller import DialogueController
from socratix.graph.evaluation_gate import EvaluationGate
from socratix.graph.protocol import parse_continuation
from socratix.models.evaluation import Evaluation
from socratix.models.tutor import ContinueResult, EvaluateResult, StartResult
from socratix.rewards.ledger import RewardsLedger
from socratix.storage.kv_store import InMemoryKeyValueStore
from socratix.storage.memory import InMemoryMessageStore
from socratix.utils.logger import ConversationLogger


class ScriptedTutor:
    """Tutor double returning queued replies and recording every call."""

    def __init__(self):
        self.start_replies: List[object] = ["Why do plants need sunlight?"]
        self.continue_replies: List[object] = []
        self.evaluate_replies: List[object] = []
        self.calls: List[tuple] = []
        self.gate: Optional[asyncio.Event] = None
        self.entered = asyncio.Event()

    @staticmethod
    def _next(queue: List[object], default: object) -> object:
        reply = queue.pop(0) if queue else default
        if isinstance(reply, Exception):
            raise reply
        return reply

    async def _hold(self):
        self.entered.set()
        if self.gate is not None:
            await self.gate.wait()

    async def start(self, topic: str) -> StartResult:
        self.calls.append(("start", {"topic": topic}))
        await self._hold()
        return StartResult(question=self._next(self.start_replies, "What do you already know?"))

    async def continue_dialogue(self, user_response, history, level, timing) -> ContinueResult:
        self.calls.append(("continue", {
            "user_response": user_response,
            "history": history,
            "level": level,
            "timing": timing,
        }))
        await self._hold()
        return parse_continuation(self._next(self.continue_replies, "Tell me more about that."))

    async def evaluate(self, topic, history, level, timing) -> EvaluateResult:
        self.calls.append(("evaluate", {
            "topic": topic,
            "history": history,
            "level": level,
            "timing": timing,
        }))
        default = Evaluation(completed=True, confidence_score=85, summary="Solid grasp.", feedback="Keep going.")
        return EvaluateResult(evaluation=self._next(self.evaluate_replies, default))

    async def extract_topic(self, prompt: str) -> str:
        self.calls.append(("extract_topic", {"prompt": prompt}))
        return prompt.replace("I want to learn about", "").strip().title()

    def actions(self) -> List[str]:
        return [action for action, _ in self.calls]


class FixedClock:
    def __init__(self, start: datetime = None):
        self.now = start or datetime.now(timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now = self.now + timedelta(seconds=seconds)


@pytest.fixture
def store():
    return InMemoryMessageStore()


@pytest.fixture
def kv_store():
    return InMemoryKeyValueStore()


@pytest.fixture
def ledger(kv_store):
    return RewardsLedger(kv_store)


@pytest.fixture
def gate(store, ledger):
    return EvaluationGate(store, ledger)


@pytest.fixture
def tutor():
    return ScriptedTutor()


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def conversation_logger(tmp_path):
    return ConversationLogger(log_dir=str(tmp_path / "logs"))


@pytest.fixture
def controller(store, tutor, gate, conversation_logger, clock):
    return DialogueController(
        store=store,
        tutor=tutor,
        gate=gate,
        conversation_logger=conversation_logger,
        clock=clock,
    )
