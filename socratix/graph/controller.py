"""
Session dialogue controller.

Per session the dialogue moves through

    UNINITIALIZED -> AWAITING_FIRST_QUESTION -> AWAITING_USER_TURN
    AWAITING_USER_TURN <-> AWAITING_AI_TURN -> EVALUATED

A busy flag is set before the first await of a start or submit, so a second
request for the same session is rejected instead of producing duplicate turns.
Sequence numbers are taken from the in-memory turn count, which assumes a
single writer per session.
"""
import logging
from datetime import datetime
from typing import Callable, Dict, List, Optional

from socratix.agents.tutor_agent import TutorAgent
from socratix.agents.understanding_agent import infer_understanding
from socratix.errors import (
    DialogueStateError,
    InputError,
    NotAuthenticatedError,
    SessionBusyError,
    SessionNotFoundError,
    StorageError,
)
from socratix.graph.evaluation_gate import EvaluationGate
from socratix.graph.state import DialogueSession, DialogueState, TurnOutcome, TurnState
from socratix.graph.tutoring_graph import build_turn_graph
from socratix.models.conversation import Session, Turn, TurnKind, utcnow
from socratix.models.evaluation import Evaluation
from socratix.models.student import LearnerProfile
from socratix.storage.base import MessageStore
from socratix.utils.logger import ConversationLogger

logger = logging.getLogger(__name__)


def replay_profile(turns: List[Turn]) -> LearnerProfile:
    """Rebuild the ratcheted level from a stored session's answers."""
    profile = LearnerProfile()
    for turn in turns:
        if turn.sender == "user":
            profile = infer_understanding(turn.content, profile)
    return profile


def derive_state(session: Session, turns: List[Turn]) -> DialogueState:
    if session.confidence_score is not None or any(t.kind == "evaluation" for t in turns):
        return DialogueState.EVALUATED
    if not turns:
        return DialogueState.UNINITIALIZED
    return DialogueState.AWAITING_USER_TURN


class DialogueController:

    def __init__(
        self,
        store: MessageStore,
        tutor: TutorAgent,
        gate: EvaluationGate,
        conversation_logger: Optional[ConversationLogger] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.store = store
        self.tutor = tutor
        self.gate = gate
        self.conversation_logger = conversation_logger
        self.clock = clock
        self._dialogues: Dict[str, DialogueSession] = {}
        self._turn_graph = build_turn_graph(self)

    # Session lifecycle

    async def create_session(
        self,
        user_id: Optional[str],
        topic: Optional[str] = None,
        prompt: Optional[str] = None,
    ) -> Session:
        """Create a session from a topic, or from free-form input naming one."""
        if not user_id:
            raise NotAuthenticatedError()
        topic = (topic or "").strip()
        if not topic and prompt and prompt.strip():
            topic = await self.tutor.extract_topic(prompt)
        if not topic:
            raise InputError("Please enter a topic to start learning")

        session = await self.store.create_session(user_id, topic)
        self._dialogues[session.id] = DialogueSession(session=session)
        logger.info("Created session %s on %r for user %s", session.id, topic, user_id)
        await self.gate.on_session_created(session)
        return session

    async def list_sessions(self, user_id: Optional[str]) -> List[Session]:
        if not user_id:
            raise NotAuthenticatedError()
        return await self.store.list_sessions(user_id)

    async def open(self, session_id: str, user_id: Optional[str]) -> DialogueSession:
        """Return the live dialogue for a session, loading it from the store if needed."""
        if not user_id:
            raise NotAuthenticatedError()
        dialogue = self._dialogues.get(session_id)
        if dialogue is None:
            session = await self.store.get_session(session_id)
            if session is None:
                raise SessionNotFoundError(session_id)
            turns = await self.store.list(session_id)
            loaded = DialogueSession(
                session=session,
                turns=turns,
                state=derive_state(session, turns),
                profile=replay_profile(turns),
            )
            # Another request may have loaded it while we awaited
            dialogue = self._dialogues.setdefault(session_id, loaded)
        if dialogue.session.user_id != user_id:
            raise SessionNotFoundError(session_id)
        return dialogue

    async def delete(self, session_id: str, user_id: Optional[str]) -> None:
        dialogue = await self.open(session_id, user_id)
        if dialogue.busy:
            raise SessionBusyError(session_id)
        await self.store.delete_session(session_id)
        self._dialogues.pop(session_id, None)
        logger.info("Deleted session %s", session_id)

    # Turn taking

    async def start(self, session_id: str, user_id: Optional[str]) -> TurnOutcome:
        """Ask the first question of a session that has no turns yet."""
        dialogue = await self.open(session_id, user_id)
        if dialogue.busy:
            raise SessionBusyError(session_id)
        if dialogue.state != DialogueState.UNINITIALIZED:
            return self._outcome(dialogue, [])

        dialogue.busy = True
        dialogue.state = DialogueState.AWAITING_FIRST_QUESTION
        try:
            result = await self.tutor.start(dialogue.session.topic)
            turn = await self._append(dialogue, result.question, "question", dialogue.next_sequence)
        except Exception:
            dialogue.state = DialogueState.UNINITIALIZED
            raise
        finally:
            dialogue.busy = False

        dialogue.state = DialogueState.AWAITING_USER_TURN
        self._log(dialogue)
        return self._outcome(dialogue, [turn])

    async def submit_answer(
        self,
        session_id: str,
        user_id: Optional[str],
        text: Optional[str],
        response_time_ms: Optional[float] = None,
    ) -> TurnOutcome:
        """Record an answer, then continue the dialogue or evaluate the session."""
        text = (text or "").strip()
        if not text:
            raise InputError("Answer must not be empty")

        dialogue = await self.open(session_id, user_id)
        if dialogue.busy:
            raise SessionBusyError(session_id)
        if dialogue.state == DialogueState.EVALUATED:
            if self._evaluation_unrecorded(dialogue):
                return await self._record_stored_evaluation(dialogue)
            raise DialogueStateError("Session has already been evaluated")
        if dialogue.state == DialogueState.UNINITIALIZED:
            raise DialogueStateError("Session has not been started")

        if response_time_ms is None:
            response_time_ms = self._elapsed_since_question(dialogue)

        dialogue.busy = True
        dialogue.state = DialogueState.AWAITING_AI_TURN
        try:
            result: TurnState = await self._turn_graph.ainvoke({
                "session_id": session_id,
                "text": text,
                "elapsed_ms": response_time_ms,
                "new_turns": [],
            })
        except Exception:
            # Turns saved before the failure stay saved. A persisted evaluation
            # keeps the session evaluated; otherwise the learner may retry.
            dialogue.state = derive_state(dialogue.session, dialogue.turns)
            raise
        finally:
            dialogue.busy = False

        evaluation = result.get("evaluation")
        dialogue.state = DialogueState.EVALUATED if evaluation else DialogueState.AWAITING_USER_TURN
        self._log(dialogue)
        if evaluation:
            self._dialogues.pop(session_id, None)
        return self._outcome(dialogue, result.get("new_turns", []), evaluation)

    # Graph nodes

    async def record_answer(self, state: TurnState) -> dict:
        dialogue = self._dialogues[state["session_id"]]
        turn = await self._append(dialogue, state["text"], "answer", dialogue.next_sequence, sender="user")
        return {"new_turns": [turn], "ai_sequence": turn.sequence + 1}

    async def analyze_response(self, state: TurnState) -> dict:
        dialogue = self._dialogues[state["session_id"]]
        dialogue.profile = infer_understanding(state["text"], dialogue.profile, state.get("elapsed_ms"))
        return {
            "level": dialogue.profile.level,
            "timing": dialogue.profile.timing,
            "evaluation_due": self.gate.should_evaluate(dialogue.turns),
        }

    async def continue_dialogue(self, state: TurnState) -> dict:
        dialogue = self._dialogues[state["session_id"]]
        # The answer travels separately from the history it responds to
        history = dialogue.history(dialogue.turns[:-1])
        result = await self.tutor.continue_dialogue(state["text"], history, state["level"], state["timing"])

        sequence = state["ai_sequence"]
        saved: List[Turn] = []
        if result.is_structured:
            try:
                saved.append(await self._append(dialogue, result.feedback, "feedback", sequence))
                saved.append(await self._append(dialogue, result.question, "question", sequence + 1))
            except StorageError as e:
                logger.warning("Saving feedback/question for %s failed: %s", dialogue.session.id, e)
                if saved:
                    saved.append(await self._append(dialogue, result.question, "question", sequence + 1))
                else:
                    saved.append(await self._append(dialogue, result.raw, "question", sequence))
        else:
            saved.append(await self._append(dialogue, result.question, "question", sequence))
        return {"new_turns": saved}

    async def evaluate_session(self, state: TurnState) -> dict:
        dialogue = self._dialogues[state["session_id"]]
        result = await self.tutor.evaluate(
            dialogue.session.topic,
            dialogue.history(),
            state["level"],
            state["timing"],
        )
        evaluation = result.evaluation
        dialogue.session = await self.gate.apply(dialogue.session, evaluation)
        turn = await self._append(dialogue, evaluation.model_dump_json(), "evaluation", state["ai_sequence"])
        logger.info(
            "Session %s evaluated: completed=%s confidence=%s",
            dialogue.session.id, evaluation.completed, evaluation.confidence_score,
        )
        return {"new_turns": [turn], "evaluation": evaluation}

    # Helpers

    @staticmethod
    def _evaluation_unrecorded(dialogue: DialogueSession) -> bool:
        """The evaluation was persisted but its turn never made it into the log."""
        return (
            dialogue.session.confidence_score is not None
            and not any(turn.kind == "evaluation" for turn in dialogue.turns)
        )

    async def _record_stored_evaluation(self, dialogue: DialogueSession) -> TurnOutcome:
        """Append the evaluation turn for an already persisted evaluation.

        Neither the tutor nor the rewards are involved again.
        """
        session = dialogue.session
        evaluation = Evaluation(
            completed=session.completed,
            confidence_score=session.confidence_score,
            summary=session.summary or "",
            feedback=session.feedback,
        )
        dialogue.busy = True
        try:
            turn = await self._append(dialogue, evaluation.model_dump_json(), "evaluation", dialogue.next_sequence)
        finally:
            dialogue.busy = False

        self._log(dialogue)
        self._dialogues.pop(session.id, None)
        return self._outcome(dialogue, [turn], evaluation)

    async def _append(
        self,
        dialogue: DialogueSession,
        content: str,
        kind: TurnKind,
        sequence: int,
        sender: str = "ai",
    ) -> Turn:
        turn = await self.store.append(dialogue.session.id, content, sender, kind, sequence)
        dialogue.turns.append(turn)
        return turn

    def _elapsed_since_question(self, dialogue: DialogueSession) -> Optional[float]:
        last = dialogue.last_ai_turn()
        if last is None:
            return None
        return (self.clock() - last.created_at).total_seconds() * 1000

    def _outcome(self, dialogue: DialogueSession, turns: List[Turn], evaluation=None) -> TurnOutcome:
        return TurnOutcome(
            session_id=dialogue.session.id,
            state=dialogue.state,
            turns=turns,
            profile=dialogue.profile,
            evaluation=evaluation,
        )

    def _log(self, dialogue: DialogueSession) -> None:
        if self.conversation_logger is None:
            return
        self.conversation_logger.log_conversation(
            session_id=dialogue.session.id,
            user_id=dialogue.session.user_id,
            topic=dialogue.session.topic,
            messages=[turn.model_dump(mode="json") for turn in dialogue.turns],
            level=dialogue.profile.level,
            timing=dialogue.profile.timing,
            state=dialogue.state.value,
            metadata={"turn_count": len(dialogue.turns)},
        )
