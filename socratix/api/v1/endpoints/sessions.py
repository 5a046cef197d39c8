from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel, Field
from typing import List, Optional

from socratix.api.auth import User
from socratix.api.deps import get_controller, get_current_user
from socratix.errors import SocratixError
from socratix.graph.controller import DialogueController
from socratix.graph.state import DialogueState, TurnOutcome
from socratix.models.conversation import Session, Turn
from socratix.models.student import LearnerProfile

router = APIRouter()


# Request/Response models
class CreateSessionRequest(BaseModel):
    topic: Optional[str] = None
    prompt: Optional[str] = None  # Free-form input, e.g. "I want to learn about X"


class SubmitAnswerRequest(BaseModel):
    content: str
    response_time_ms: Optional[float] = Field(default=None, ge=0)


class SessionDetailResponse(BaseModel):
    session: Session
    state: DialogueState
    profile: LearnerProfile
    turns: List[Turn]


@router.post("/", response_model=Session, status_code=201)
async def create_session(
    request: CreateSessionRequest,
    user: User = Depends(get_current_user),
    controller: DialogueController = Depends(get_controller),
):
    """Start a new learning session on a topic."""
    try:
        return await controller.create_session(user.id, topic=request.topic, prompt=request.prompt)
    except SocratixError as e:
        raise e.to_http_exception()


@router.get("/", response_model=List[Session])
async def list_sessions(
    user: User = Depends(get_current_user),
    controller: DialogueController = Depends(get_controller),
):
    """List the learner's sessions, newest first."""
    try:
        return await controller.list_sessions(user.id)
    except SocratixError as e:
        raise e.to_http_exception()


@router.get("/{session_id}", response_model=SessionDetailResponse)
async def get_session(
    session_id: str,
    user: User = Depends(get_current_user),
    controller: DialogueController = Depends(get_controller),
):
    try:
        dialogue = await controller.open(session_id, user.id)
    except SocratixError as e:
        raise e.to_http_exception()
    return SessionDetailResponse(
        session=dialogue.session,
        state=dialogue.state,
        profile=dialogue.profile,
        turns=dialogue.turns,
    )


@router.delete("/{session_id}", status_code=204)
async def delete_session(
    session_id: str,
    user: User = Depends(get_current_user),
    controller: DialogueController = Depends(get_controller),
):
    """Delete a session and all of its turns."""
    try:
        await controller.delete(session_id, user.id)
    except SocratixError as e:
        raise e.to_http_exception()
    return Response(status_code=204)


@router.post("/{session_id}/start", response_model=TurnOutcome)
async def start_session(
    session_id: str,
    user: User = Depends(get_current_user),
    controller: DialogueController = Depends(get_controller),
):
    """Ask the opening question of a session."""
    try:
        return await controller.start(session_id, user.id)
    except SocratixError as e:
        raise e.to_http_exception()


@router.get("/{session_id}/messages", response_model=List[Turn])
async def list_messages(
    session_id: str,
    user: User = Depends(get_current_user),
    controller: DialogueController = Depends(get_controller),
):
    try:
        dialogue = await controller.open(session_id, user.id)
    except SocratixError as e:
        raise e.to_http_exception()
    return dialogue.turns


@router.post("/{session_id}/messages", response_model=TurnOutcome)
async def submit_answer(
    session_id: str,
    request: SubmitAnswerRequest,
    user: User = Depends(get_current_user),
    controller: DialogueController = Depends(get_controller),
):
    """Submit the learner's answer and receive the tutor's reply or evaluation."""
    try:
        return await controller.submit_answer(
            session_id,
            user.id,
            request.content,
            response_time_ms=request.response_time_ms,
        )
    except SocratixError as e:
        raise e.to_http_exception()
