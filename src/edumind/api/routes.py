"""REST API routes for auth, progress and the four study modules."""

from collections.abc import Iterator
from contextlib import contextmanager

import structlog
from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from edumind.errors import (
    GatewayError,
    InputValidationError,
    InvalidTransitionError,
    RecordNotFoundError,
)
from edumind.models.chat import Attachment
from edumind.models.quiz import Difficulty
from edumind.session.workspace import get_workspace

logger = structlog.get_logger()
router = APIRouter(prefix="/api")


class LoginRequest(BaseModel):
    email: str
    password: str
    name: str | None = None


class ChatRequest(BaseModel):
    text: str = ""
    attachment: Attachment | None = None


class QuizRequest(BaseModel):
    topic: str
    difficulty: Difficulty = Difficulty.MEDIUM
    num_questions: int | str = 10


class AnswerRequest(BaseModel):
    option: int


class SummaryRequest(BaseModel):
    text: str


class PlanRequest(BaseModel):
    exam_name: str
    days: int | str = 7
    hours: int | str = 4


@contextmanager
def _translate_errors() -> Iterator[None]:
    """Map application errors to HTTP responses."""
    try:
        yield
    except InputValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except RecordNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidTransitionError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except GatewayError as e:
        logger.warning("gateway_error_returned", error=str(e))
        raise HTTPException(
            status_code=502, detail="The AI service failed. Please try again."
        )


def _dump(records) -> list[dict]:
    return [r.model_dump(mode="json", by_alias=True) for r in records]


@router.get("/health")
async def health_check() -> dict:
    """Health check endpoint."""
    return {"status": "ok"}


# Auth / profile

@router.post("/auth/login")
async def login(body: LoginRequest) -> dict:
    workspace = get_workspace()
    with _translate_errors():
        user = workspace.session.login(body.email, body.password, body.name)
    return user.model_dump(mode="json", by_alias=True)


@router.post("/auth/logout")
async def logout() -> dict:
    get_workspace().session.logout()
    return {"status": "logged_out"}


@router.get("/profile")
async def get_profile() -> dict:
    session = get_workspace().session
    if not session.is_authenticated:
        raise HTTPException(status_code=401, detail="Not logged in")
    return session.user.model_dump(mode="json", by_alias=True)


# Chat

def _chat_state() -> dict:
    chat = get_workspace().chat
    return {
        "view": chat.view.value,
        "messages": _dump(chat.messages),
        "history_count": len(chat.history),
    }


@router.get("/chat")
async def get_chat() -> dict:
    return _chat_state()


@router.post("/chat/messages")
async def send_chat_message(body: ChatRequest) -> dict:
    chat = get_workspace().chat
    with _translate_errors():
        await chat.send_message(body.text, body.attachment)
    return _chat_state()


@router.delete("/chat")
async def clear_current_chat() -> dict:
    with _translate_errors():
        get_workspace().chat.clear_current()
    return _chat_state()


@router.get("/chat/history")
async def list_chat_history() -> list[dict]:
    return _dump(get_workspace().chat.history)


@router.post("/chat/history/show")
async def show_chat_history() -> dict:
    with _translate_errors():
        get_workspace().chat.show_history()
    return _chat_state()


@router.post("/chat/history/close")
async def close_chat_history() -> dict:
    with _translate_errors():
        get_workspace().chat.close_history()
    return _chat_state()


@router.post("/chat/history/{session_id}/restore")
async def restore_chat(session_id: str) -> dict:
    with _translate_errors():
        get_workspace().chat.restore(session_id)
    return _chat_state()


@router.delete("/chat/history")
async def clear_chat_history() -> dict:
    get_workspace().chat.clear_history()
    return {"status": "cleared"}


# Quiz

@router.get("/quiz")
async def get_quiz() -> dict:
    return get_workspace().quiz.snapshot()


@router.post("/quiz/generate")
async def generate_quiz(body: QuizRequest) -> dict:
    quiz = get_workspace().quiz
    with _translate_errors():
        await quiz.generate(body.topic, body.difficulty, body.num_questions)
    return quiz.snapshot()


@router.post("/quiz/answer")
async def answer_question(body: AnswerRequest) -> dict:
    quiz = get_workspace().quiz
    with _translate_errors():
        quiz.select_answer(body.option)
    return quiz.snapshot()


@router.post("/quiz/next")
async def next_question() -> dict:
    quiz = get_workspace().quiz
    with _translate_errors():
        quiz.next()
    return quiz.snapshot()


@router.post("/quiz/previous")
async def previous_question() -> dict:
    quiz = get_workspace().quiz
    with _translate_errors():
        quiz.previous()
    return quiz.snapshot()


@router.post("/quiz/finish")
async def finish_quiz() -> dict:
    quiz = get_workspace().quiz
    with _translate_errors():
        quiz.finish()
    return quiz.snapshot()


@router.post("/quiz/reset")
async def try_another_quiz() -> dict:
    quiz = get_workspace().quiz
    with _translate_errors():
        quiz.try_another()
    return quiz.snapshot()


@router.get("/quiz/history")
async def list_quiz_history() -> list[dict]:
    return _dump(get_workspace().quiz.history)


@router.post("/quiz/history/show")
async def show_quiz_history() -> dict:
    quiz = get_workspace().quiz
    with _translate_errors():
        quiz.show_history()
    return quiz.snapshot()


@router.post("/quiz/history/close")
async def close_quiz_history() -> dict:
    quiz = get_workspace().quiz
    with _translate_errors():
        quiz.close_history()
    return quiz.snapshot()


@router.post("/quiz/history/{record_id}/reload")
async def reload_quiz(record_id: str) -> dict:
    quiz = get_workspace().quiz
    with _translate_errors():
        quiz.reload(record_id)
    return quiz.snapshot()


@router.delete("/quiz/history")
async def clear_quiz_history() -> dict:
    get_workspace().quiz.clear_history()
    return {"status": "cleared"}


# Summaries

@router.post("/summaries")
async def summarize(body: SummaryRequest) -> dict:
    summarizer = get_workspace().summarizer
    with _translate_errors():
        record = await summarizer.summarize(body.text)
    return record.model_dump(mode="json", by_alias=True)


@router.get("/summaries")
async def list_summaries() -> list[dict]:
    return _dump(get_workspace().summarizer.history)


@router.post("/summaries/history/show")
async def show_summary_history() -> dict:
    summarizer = get_workspace().summarizer
    with _translate_errors():
        summarizer.show_history()
    return {"view": summarizer.view.value}


@router.post("/summaries/history/close")
async def close_summary_history() -> dict:
    summarizer = get_workspace().summarizer
    with _translate_errors():
        summarizer.close_history()
    return {"view": summarizer.view.value}


@router.post("/summaries/{record_id}/load")
async def load_summary(record_id: str) -> dict:
    with _translate_errors():
        record = get_workspace().summarizer.load(record_id)
    return record.model_dump(mode="json", by_alias=True)


@router.delete("/summaries")
async def clear_summaries() -> dict:
    get_workspace().summarizer.clear_history()
    return {"status": "cleared"}


# Study plans

@router.post("/plans")
async def create_plan(body: PlanRequest) -> dict:
    planner = get_workspace().planner
    with _translate_errors():
        record = await planner.generate_plan(body.exam_name, body.days, body.hours)
    return record.model_dump(mode="json", by_alias=True)


@router.get("/plans")
async def list_plans() -> list[dict]:
    return _dump(get_workspace().planner.history)


@router.post("/plans/history/show")
async def show_plan_history() -> dict:
    planner = get_workspace().planner
    with _translate_errors():
        planner.show_history()
    return {"view": planner.view.value}


@router.post("/plans/history/close")
async def close_plan_history() -> dict:
    planner = get_workspace().planner
    with _translate_errors():
        planner.close_history()
    return {"view": planner.view.value}


@router.post("/plans/{record_id}/load")
async def load_plan(record_id: str) -> dict:
    with _translate_errors():
        record = get_workspace().planner.load(record_id)
    return record.model_dump(mode="json", by_alias=True)


@router.delete("/plans")
async def clear_plans() -> dict:
    get_workspace().planner.clear_history()
    return {"status": "cleared"}
