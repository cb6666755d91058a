"""REST API routes for login, scenarios, sessions, vocabulary and activity."""

from typing import Any

import structlog
from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel, Field

from fluent_tutor.conversation import scenarios as catalog
from fluent_tutor.conversation.registry import SessionNotFoundError
from fluent_tutor.models.chat import ConversationSession
from fluent_tutor.models.scenario import ChatMode, Scenario
from fluent_tutor.storage.user_context import UserContextStore
from fluent_tutor.tutor.client import TutorService, TutorServiceError
from fluent_tutor.workspace import Workspace

logger = structlog.get_logger()
router = APIRouter(prefix="/api")


class LoginRequest(BaseModel):
    name: str


class ProfileUpdate(BaseModel):
    name: str | None = None
    level: str | None = None
    avatar: str | None = None


class ScenarioRequest(BaseModel):
    topic: str


class StartSessionRequest(BaseModel):
    mode: ChatMode
    scenario_id: str | None = None
    scenario: Scenario | None = None


class SendRequest(BaseModel):
    text: str


class SaveWordRequest(BaseModel):
    word: str = Field(min_length=1)
    definition: str = ""
    context: str = ""


class SynonymRequest(BaseModel):
    synonym: str = Field(min_length=1)


class ActivityReport(BaseModel):
    seconds: int = Field(ge=0)


def get_users(request: Request) -> UserContextStore:
    return request.app.state.users


def get_tutor(request: Request) -> TutorService:
    return request.app.state.tutor


def get_workspace(request: Request) -> Workspace:
    workspace = get_users(request).current
    if workspace is None:
        raise HTTPException(status_code=401, detail="Not logged in")
    return workspace


def session_view(workspace: Workspace, session: ConversationSession) -> dict[str, Any]:
    data = session.model_dump(mode="json")
    data["state"] = workspace.dialogue.state(session.id).value
    data["current_task"] = workspace.dialogue.current_task(session.id)
    return data


def _get_session(workspace: Workspace, session_id: str) -> ConversationSession:
    try:
        return workspace.sessions.get(session_id)
    except SessionNotFoundError:
        raise HTTPException(status_code=404, detail="Session not found")


def _profile_view(workspace: Workspace) -> dict[str, Any]:
    return {
        "user_id": workspace.user_id,
        **workspace.profile.profile.model_dump(),
        "word_count": len(workspace.vocabulary.words),
        "session_count": len(workspace.sessions.sessions),
        "total_minutes": workspace.activity.total_minutes(),
    }


@router.get("/health")
async def health_check() -> dict:
    """Health check endpoint."""
    return {"status": "ok"}


@router.post("/login")
async def login(body: LoginRequest, request: Request) -> dict:
    try:
        workspace = get_users(request).login(body.name)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _profile_view(workspace)


@router.post("/logout")
async def logout(request: Request) -> dict:
    get_users(request).deactivate()
    return {"status": "ok"}


@router.get("/profile")
async def get_profile(request: Request) -> dict:
    return _profile_view(get_workspace(request))


@router.patch("/profile")
async def update_profile(body: ProfileUpdate, request: Request) -> dict:
    workspace = get_workspace(request)
    try:
        workspace.profile.update(name=body.name, level=body.level, avatar=body.avatar)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _profile_view(workspace)


@router.post("/reset")
async def reset_progress(request: Request) -> dict:
    workspace = get_workspace(request)
    get_users(request).purge(workspace.context.identity)
    return _profile_view(workspace)


@router.get("/scenarios")
async def list_scenarios(offset: int = 0, limit: int = catalog.PAGE_SIZE) -> dict:
    items = catalog.page(offset, limit)
    return {
        "recommended": [s.model_dump(mode="json") for s in catalog.recommended()],
        "items": [s.model_dump(mode="json") for s in items],
        "has_more": offset + len(items) < len(catalog.PREDEFINED_SCENARIOS),
    }


@router.post("/scenarios")
async def create_scenario(body: ScenarioRequest, request: Request) -> dict:
    get_workspace(request)
    topic = body.topic.strip()
    if not topic:
        raise HTTPException(status_code=400, detail="Topic must not be blank")
    try:
        scenario = await get_tutor(request).propose_scenario(topic)
    except TutorServiceError:
        logger.exception("scenario_generation_failed", topic=topic)
        raise HTTPException(status_code=502, detail="Failed to create scenario.")
    return scenario.model_dump(mode="json")


@router.get("/sessions")
async def list_sessions(request: Request) -> list[dict]:
    """Session history grouped by day."""
    workspace = get_workspace(request)
    return [
        {
            "label": label,
            "sessions": [
                {
                    "id": s.id,
                    "scenario": s.scenario.model_dump(mode="json"),
                    "mode": s.mode.value,
                    "message_count": len(s.messages),
                    "last_updated": s.last_updated,
                }
                for s in sessions
            ],
        }
        for label, sessions in workspace.sessions.group_by_day()
    ]


@router.post("/sessions")
async def start_session(body: StartSessionRequest, request: Request) -> dict:
    """Start or resume the (scenario, mode) session and seed its first message."""
    workspace = get_workspace(request)
    scenario = body.scenario
    if scenario is None and body.scenario_id is not None:
        scenario = catalog.get_scenario(body.scenario_id)
    if scenario is None:
        raise HTTPException(status_code=404, detail="Scenario not found")

    session = workspace.sessions.start_or_resume(scenario, body.mode)
    try:
        await workspace.dialogue.open(session.id)
    except TutorServiceError:
        logger.exception("session_start_failed", session_id=session.id)
        raise HTTPException(status_code=502, detail="Failed to start the session.")
    return session_view(workspace, _get_session(workspace, session.id))


@router.get("/sessions/{session_id}")
async def get_session(session_id: str, request: Request) -> dict:
    workspace = get_workspace(request)
    return session_view(workspace, _get_session(workspace, session_id))


@router.post("/sessions/{session_id}/resume")
async def resume_session(session_id: str, request: Request) -> dict:
    workspace = get_workspace(request)
    try:
        session = workspace.sessions.resume(session_id)
    except SessionNotFoundError:
        raise HTTPException(status_code=404, detail="Session not found")
    return session_view(workspace, session)


@router.post("/sessions/{session_id}/messages")
async def send_message(session_id: str, body: SendRequest, request: Request) -> dict:
    workspace = get_workspace(request)
    _get_session(workspace, session_id)
    reply = await workspace.dialogue.send(session_id, body.text)
    session = workspace.sessions.find(session_id)
    return {
        "reply": reply.model_dump(mode="json") if reply else None,
        "session": session_view(workspace, session) if session else None,
    }


@router.get("/vocab")
async def list_vocab(request: Request) -> list[dict]:
    workspace = get_workspace(request)
    return [
        {**w.model_dump(mode="json"), "is_loading": w.is_loading}
        for w in workspace.vocabulary.words
    ]


@router.post("/vocab")
async def save_word(body: SaveWordRequest, request: Request) -> dict:
    workspace = get_workspace(request)
    try:
        word_id = workspace.vocabulary.add(body.word, body.definition, body.context)
    except ValueError:
        raise HTTPException(status_code=400, detail="Word must not be blank")
    return {"id": word_id, "duplicate": word_id is None}


@router.delete("/vocab/{word_id}")
async def delete_word(word_id: str, request: Request) -> dict:
    get_workspace(request).vocabulary.delete(word_id)
    return {"status": "ok"}


@router.post("/vocab/{word_id}/select")
async def select_word(word_id: str, request: Request) -> dict:
    workspace = get_workspace(request)
    try:
        word = workspace.vocabulary.select(word_id)
    except KeyError:
        raise HTTPException(status_code=404, detail="Word not found")
    return word.model_dump(mode="json")


@router.post("/vocab/{word_id}/synonyms")
async def open_synonym(word_id: str, body: SynonymRequest, request: Request) -> dict:
    workspace = get_workspace(request)
    source = workspace.vocabulary.find(word_id)
    if source is None:
        raise HTTPException(status_code=404, detail="Word not found")
    try:
        word = workspace.vocabulary.create_from_synonym(source.word, body.synonym)
    except ValueError:
        raise HTTPException(status_code=400, detail="Word must not be blank")
    return word.model_dump(mode="json")


@router.get("/activity")
async def get_activity(request: Request, days: int = 7) -> list[dict]:
    if days < 1:
        raise HTTPException(status_code=400, detail="days must be positive")
    workspace = get_workspace(request)
    return [d.model_dump() for d in workspace.activity.last_n_days(days)]


@router.post("/activity")
async def report_activity(body: ActivityReport, request: Request) -> dict:
    get_workspace(request).activity.record(body.seconds)
    return {"status": "ok"}
