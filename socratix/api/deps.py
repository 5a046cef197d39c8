"""FastAPI dependencies; tests replace these through app.dependency_overrides."""
from functools import lru_cache
from typing import Optional

from fastapi import Depends, Header, HTTPException

from socratix.agents.tutor_agent import TutorAgent
from socratix.api.auth import (
    AuthProvider,
    StaticAuthProvider,
    SupabaseAuthProvider,
    User,
    parse_bearer,
)
from socratix.config import settings
from socratix.graph.controller import DialogueController
from socratix.graph.evaluation_gate import EvaluationGate
from socratix.rewards.ledger import RewardsLedger
from socratix.storage.base import MessageStore
from socratix.storage.kv_store import (
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    KeyValueStore,
    SupabaseKeyValueStore,
)
from socratix.storage.memory import InMemoryMessageStore
from socratix.storage.supabase_store import SupabaseMessageStore
from socratix.utils.logger import ConversationLogger


@lru_cache
def get_message_store() -> MessageStore:
    if settings.storage_backend == "supabase":
        return SupabaseMessageStore()
    return InMemoryMessageStore()


@lru_cache
def get_kv_store() -> KeyValueStore:
    if settings.rewards_store_path:
        return JsonFileKeyValueStore(settings.rewards_store_path)
    if settings.storage_backend == "supabase":
        return SupabaseKeyValueStore()
    return InMemoryKeyValueStore()


@lru_cache
def get_rewards_ledger() -> RewardsLedger:
    return RewardsLedger(get_kv_store())


@lru_cache
def get_tutor() -> TutorAgent:
    return TutorAgent()


@lru_cache
def get_auth_provider() -> AuthProvider:
    if settings.auth_backend == "supabase":
        return SupabaseAuthProvider()
    return StaticAuthProvider()


@lru_cache
def get_evaluation_gate() -> EvaluationGate:
    return EvaluationGate(get_message_store(), get_rewards_ledger())


@lru_cache
def get_controller() -> DialogueController:
    return DialogueController(
        store=get_message_store(),
        tutor=get_tutor(),
        gate=get_evaluation_gate(),
        conversation_logger=ConversationLogger(),
    )


async def get_current_user(
    authorization: Optional[str] = Header(None),
    auth: AuthProvider = Depends(get_auth_provider),
) -> User:
    """Validate the bearer token and return the learner it belongs to."""
    token = parse_bearer(authorization)
    if token is None:
        raise HTTPException(status_code=401, detail="Authorization header required")
    user = await auth.get_user(token)
    if user is None:
        raise HTTPException(status_code=401, detail="Invalid or expired token")
    return user
