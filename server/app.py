"""FastAPI server for lexidrill."""

import logging
import os
import random
import uuid

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel
from typing import Any, Optional

logger = logging.getLogger(__name__)

from core.config import KIND_ORDER, KIND_SPELLING, MODE_COMPREHENSIVE, ROOM_QUESTION_COUNT
from core.interfaces import Storage
from core.learner import Learner
from core.mixed import (
    build_mixed_session, build_room_session, build_retry_questions,
    questions_to_items, validate_room_code
)
from core.prng import Prng
from core.scheduler import score_and_build_session, build_review_session, proficiency, difficulty_level
from core.session import SessionState, FixedInterval, RandomInterval
from core.stats import overview, error_words
from core.vocabulary import parse_vocabulary, build_options, export_error_words, import_error_words

from server.file_storage import FileStorage
from server.postgres_storage import PostgresStorage


# Pydantic models for API
class VocabularyUpload(BaseModel):
    words: list[Any]
    book_name: str = "uploaded"
    user_id: str = "default"


class StartSessionRequest(BaseModel):
    kind: str = KIND_SPELLING
    user_id: str = "default"
    requeue: str = "fixed"  # "fixed" (every 5) or "random" (every 2 or 3)


class MixedSessionRequest(BaseModel):
    count: int = ROOM_QUESTION_COUNT
    seed: Optional[str] = None
    user_id: str = "default"


class UserRequest(BaseModel):
    user_id: str = "default"


class AnswerRequest(BaseModel):
    answer: str
    user_id: str = "default"


class ImportRequest(BaseModel):
    words: list[Any]
    user_id: str = "default"


class QuestionResponse(BaseModel):
    session_id: str
    mode: str
    is_complete: bool
    position: int
    total: int
    correct_count: int
    incorrect_count: int
    word_id: Optional[Any] = None
    kind: Optional[str] = None
    prompt: Optional[str] = None
    options: Optional[list[str]] = None
    is_requeued: bool = False
    answer: Optional[dict] = None
    room_code: Optional[str] = None


class AnswerResponse(BaseModel):
    is_correct: bool
    given_answer: Optional[str]
    accepted_answer: str
    is_forgotten: bool
    correct_count: int
    incorrect_count: int


class StatusResponse(BaseModel):
    book_name: str
    total_words: int
    mastered_words: int
    need_practice_words: int
    progress_percentage: int
    has_session: bool


class ActiveSession:
    """A user's running session plus the choice options shown for each question."""

    def __init__(self, state: SessionState, room_code: str | None = None):
        self.id = str(uuid.uuid4())[:8]
        self.state = state
        self.room_code = room_code
        self.options = {}

    def options_for(self, learner: Learner, item) -> list[str] | None:
        if item.is_free_typed:
            return None
        key = (item.word_id, item.occurrence, item.kind)
        if key not in self.options:
            word = learner.find_word(item.word_id)
            if word is None:
                return None
            # Room members see identical options for identical questions
            rng = Prng(f"{self.room_code}:{item.word_id}:{item.kind}") if self.room_code else random
            self.options[key] = build_options(learner.vocabulary, word, item.kind, rng=rng)
        return self.options[key]


# Global state (in production, use proper DI)
storage: Storage = None
learners: dict[str, Learner] = {}
sessions: dict[str, ActiveSession] = {}


def log_event(event: str, user_id: str, **data) -> None:
    """Log a learner event."""
    session = sessions.get(user_id)
    session_id = session.id if session else None
    details = ' '.join(f"{key}={value}" for key, value in data.items())
    logger.info(f"event={event} user={user_id} session={session_id} {details}".rstrip())


app = FastAPI(title="Lexidrill API", description="Adaptive vocabulary drill API")


def get_learner(user_id: str = "default") -> Learner:
    """Get or create the learner state for a user."""
    if user_id not in learners:
        state = storage.load_state(user_id)
        if state:
            learners[user_id] = Learner.from_dict(state)
        else:
            learners[user_id] = Learner()
    return learners[user_id]


def save_learner(user_id: str = "default") -> None:
    """Save learner state for a user."""
    if user_id in learners:
        storage.save_state(learners[user_id].to_dict(), user_id)


def get_session(user_id: str) -> ActiveSession:
    session = sessions.get(user_id)
    if session is None:
        raise HTTPException(status_code=404, detail="No active session")
    return session


def question_payload(user_id: str) -> QuestionResponse:
    session = get_session(user_id)
    state = session.state
    response = QuestionResponse(
        session_id=session.id,
        mode=state.mode,
        is_complete=state.is_complete(),
        position=state.cursor,
        total=len(state.items),
        correct_count=state.correct_count,
        incorrect_count=state.incorrect_count,
        room_code=session.room_code
    )
    item = state.current_item()
    if item is None:
        return response
    record = state.answer_for_current()
    response.word_id = item.word_id
    response.kind = item.kind
    response.prompt = item.display_prompt
    response.options = session.options_for(get_learner(user_id), item)
    response.is_requeued = item.is_requeued
    response.answer = record.to_dict() if record else None
    return response


def start_session(user_id: str, state: SessionState, room_code: str | None = None) -> QuestionResponse:
    sessions[user_id] = ActiveSession(state, room_code)
    log_event('session_start', user_id, mode=state.mode, total=len(state.items),
              room=room_code)
    return question_payload(user_id)


@app.on_event("startup")
async def startup():
    """Initialize storage on startup."""
    global storage

    # Use PostgreSQL by default, set LEXIDRILL_STORAGE=file to use file storage
    storage_type = os.environ.get('LEXIDRILL_STORAGE', 'postgres')
    if storage_type == 'file':
        storage = FileStorage()
        logger.info("Using file storage")
    else:
        storage = PostgresStorage()
        logger.info("Using PostgreSQL storage")
    learners.clear()
    sessions.clear()


@app.get("/")
async def root():
    """Health check."""
    return {"status": "ok", "service": "lexidrill"}


@app.get("/api/vocabulary")
async def get_vocabulary(user_id: str = "default"):
    """List the active word book with per-word progress."""
    learner = get_learner(user_id)
    words = []
    for item in learner.vocabulary:
        stats = learner.stats.get(item.id)
        words.append({
            **item.to_dict(),
            'times_studied': stats.times_studied if stats else 0,
            'times_wrong': stats.times_wrong if stats else 0,
            'is_in_error_set': stats.is_in_error_set if stats else False,
            'proficiency': proficiency(stats),
            'difficulty': difficulty_level(stats)
        })
    return {"book_name": learner.book_name, "total": len(words), "words": words}


@app.post("/api/vocabulary")
async def upload_vocabulary(request: VocabularyUpload):
    """Replace the active word book."""
    vocabulary = parse_vocabulary(request.words)
    if not vocabulary:
        raise HTTPException(status_code=400, detail="No usable words in upload")
    learner = get_learner(request.user_id)
    learner.replace_vocabulary(vocabulary, request.book_name)
    sessions.pop(request.user_id, None)
    save_learner(request.user_id)
    log_event('vocabulary_upload', request.user_id, words=len(vocabulary))
    return {"book_name": learner.book_name, "total": len(vocabulary)}


@app.post("/api/session/start", response_model=QuestionResponse)
async def start_single_session(request: StartSessionRequest):
    """Start a single-kind session ordered by study priority."""
    if request.kind not in KIND_ORDER:
        raise HTTPException(status_code=400, detail=f"Unknown question kind: {request.kind}")
    if request.requeue not in ('fixed', 'random'):
        raise HTTPException(status_code=400, detail=f"Unknown requeue policy: {request.requeue}")
    learner = get_learner(request.user_id)
    items = score_and_build_session(learner.vocabulary, learner.stats, request.kind)
    policy = RandomInterval() if request.requeue == 'random' else FixedInterval()
    state = SessionState(items, learner.vocabulary, learner.stats,
                         mode=request.kind, requeue_policy=policy)
    return start_session(request.user_id, state)


@app.post("/api/session/mixed", response_model=QuestionResponse)
async def start_mixed_session(request: MixedSessionRequest):
    """Start a comprehensive session over all question kinds."""
    if request.count <= 0:
        raise HTTPException(status_code=400, detail="Question count must be positive")
    learner = get_learner(request.user_id)
    items = build_mixed_session(learner.vocabulary, request.count, seed=request.seed)
    state = SessionState(items, learner.vocabulary, learner.stats, mode=MODE_COMPREHENSIVE)
    return start_session(request.user_id, state)


@app.post("/api/room/{room_code}", response_model=QuestionResponse)
async def join_room(room_code: str, request: UserRequest):
    """Friend battle: a fixed comprehensive session seeded by the room code."""
    try:
        code = validate_room_code(room_code)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    learner = get_learner(request.user_id)
    items = build_room_session(learner.vocabulary, code)
    state = SessionState(items, learner.vocabulary, learner.stats, mode=MODE_COMPREHENSIVE)
    return start_session(request.user_id, state, room_code=code)


@app.get("/api/session/current", response_model=QuestionResponse)
async def current_question(user_id: str = "default"):
    """Get the current question and any stored answer for it."""
    return question_payload(user_id)


@app.post("/api/session/answer", response_model=AnswerResponse)
async def submit_answer(request: AnswerRequest):
    """Grade an answer to the current question."""
    session = get_session(request.user_id)
    state = session.state
    item = state.current_item()
    if item is None:
        raise HTTPException(status_code=400, detail="Session is complete")
    record = state.submit_answer(request.answer)
    save_learner(request.user_id)
    log_event('answer', request.user_id, word=item.word_id, kind=item.kind,
              correct=record.is_correct)
    return AnswerResponse(
        is_correct=record.is_correct,
        given_answer=record.given_answer,
        accepted_answer=record.accepted_answer,
        is_forgotten=record.is_forgotten,
        correct_count=state.correct_count,
        incorrect_count=state.incorrect_count
    )


@app.post("/api/session/forgot", response_model=AnswerResponse)
async def forgot_answer(request: UserRequest):
    """Reveal the answer to the current question, counted as a miss."""
    session = get_session(request.user_id)
    state = session.state
    item = state.current_item()
    if item is None:
        raise HTTPException(status_code=400, detail="Session is complete")
    record = state.mark_forgotten()
    save_learner(request.user_id)
    log_event('forgot', request.user_id, word=item.word_id, kind=item.kind)
    return AnswerResponse(
        is_correct=record.is_correct,
        given_answer=record.given_answer,
        accepted_answer=record.accepted_answer,
        is_forgotten=record.is_forgotten,
        correct_count=state.correct_count,
        incorrect_count=state.incorrect_count
    )


@app.post("/api/session/next", response_model=QuestionResponse)
async def next_question(request: UserRequest):
    """Advance to the next question."""
    state = get_session(request.user_id).state
    state.advance()
    if state.is_complete():
        log_event('session_complete', request.user_id, correct=state.correct_count,
                  incorrect=state.incorrect_count)
    return question_payload(request.user_id)


@app.post("/api/session/previous", response_model=QuestionResponse)
async def previous_question(request: UserRequest):
    """Go back to the previous question."""
    get_session(request.user_id).state.retreat()
    return question_payload(request.user_id)


@app.post("/api/session/review", response_model=QuestionResponse)
async def review_session_errors(request: UserRequest):
    """Restart the session over its words still in the error set."""
    session = get_session(request.user_id)
    state = session.state
    if state.is_comprehensive:
        learner = get_learner(request.user_id)
        questions = build_retry_questions(state.errors)
        if not questions:
            raise HTTPException(status_code=400, detail="No errors to retry")
        state.reset(questions_to_items(learner.vocabulary, questions))
    elif not state.review_errors():
        raise HTTPException(status_code=400, detail="No error words to review")
    session.options.clear()
    log_event('session_review', request.user_id, total=len(state.items))
    return question_payload(request.user_id)


@app.post("/api/error-words/review", response_model=QuestionResponse)
async def review_all_error_words(request: UserRequest):
    """Start a review pass over every word in the error set."""
    learner = get_learner(request.user_id)
    items = build_review_session(learner.vocabulary, learner.stats, KIND_SPELLING)
    if not items:
        raise HTTPException(status_code=400, detail="No error words to review")
    state = SessionState(items, learner.vocabulary, learner.stats,
                         mode=KIND_SPELLING, review_pass=True)
    return start_session(request.user_id, state)


@app.get("/api/session/summary")
async def session_summary(user_id: str = "default"):
    """Get result figures for the current session."""
    session = get_session(user_id)
    summary = session.state.summary()
    summary['errors'] = session.state.errors
    summary['room_code'] = session.room_code
    return summary


@app.get("/api/status", response_model=StatusResponse)
async def get_status(user_id: str = "default"):
    """Get overall progress for the active word book."""
    learner = get_learner(user_id)
    figures = overview(learner.vocabulary, learner.stats)
    return StatusResponse(
        book_name=learner.book_name,
        has_session=user_id in sessions,
        **figures
    )


@app.get("/api/error-words")
async def list_error_words(user_id: str = "default"):
    """Get words currently in the error set."""
    learner = get_learner(user_id)
    words = []
    for item in error_words(learner.vocabulary, learner.stats):
        stats = learner.stats.get(item.id)
        words.append({
            'id': item.id,
            'word': item.canonical,
            'prompt': item.prompt,
            'times_wrong': stats.times_wrong
        })
    return {"total": len(words), "words": words}


@app.delete("/api/error-words/{word_id}")
async def remove_error_word(word_id: str, user_id: str = "default"):
    """Remove a word from the error set (the learner has mastered it)."""
    learner = get_learner(user_id)
    item = next((w for w in learner.vocabulary if str(w.id) == word_id), None)
    if item is None:
        raise HTTPException(status_code=404, detail=f"Unknown word: {word_id}")
    removed = learner.stats.remove_from_error_set(item.id)
    if removed:
        save_learner(user_id)
    return {"removed": removed}


@app.get("/api/error-words/export")
async def export_errors(user_id: str = "default"):
    """Export the error set as JSON."""
    learner = get_learner(user_id)
    return export_error_words(learner.vocabulary, learner.stats)


@app.post("/api/error-words/import")
async def import_errors(request: ImportRequest):
    """Merge previously exported error words into the active word book."""
    learner = get_learner(request.user_id)
    try:
        vocabulary, count = import_error_words(learner.vocabulary, learner.stats,
                                               {'words': request.words})
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    learner.vocabulary = vocabulary
    save_learner(request.user_id)
    log_event('error_words_import', request.user_id, imported=count)
    return {"imported": count, "total_words": len(vocabulary)}


def create_app():
    """Factory function for creating the app (useful for testing)."""
    return app
