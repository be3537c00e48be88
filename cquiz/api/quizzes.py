"""
Quiz lifecycle API endpoints
"""

from fastapi import APIRouter, Depends, HTTPException
import logging
from typing import List
from cquiz.api.dependencies import get_quiz_session
from cquiz.constants import AVAILABLE_TOPICS
from cquiz.schemas.quiz import (
    AnswerInput,
    QuizResults,
    SessionState,
    StartQuizRequest,
)
from cquiz.services.gemini_service import QuizGenerationError
from cquiz.services.session_service import (
    AnswerRequired,
    InvalidQuizConfig,
    QuizSession,
    SessionError,
)


router = APIRouter(prefix="/api/quiz", tags=["quiz"])
logger = logging.getLogger(__name__)


@router.get("/topics", response_model=List[str])
async def list_topics():
    """Topics that can be selected for a quiz"""
    return AVAILABLE_TOPICS


@router.post("/start", response_model=SessionState, status_code=201)
async def start_quiz(
    request: StartQuizRequest, session: QuizSession = Depends(get_quiz_session)
):
    """
    Generate a quiz with Gemini and enter the quiz phase

    - Counts are clamped to the form limits
    - Weak topics from the profile are added when personalization is on
    - On failure the session returns to configuration
    """

    config = session.build_config(request)
    logger.info(
        f"Starting quiz: {config.mcq_count} mcq, {config.short_count} short, "
        f"{config.long_count} long, {config.difficulty.value}"
    )

    try:
        await session.start(config)
    except InvalidQuizConfig as e:
        raise HTTPException(status_code=400, detail=str(e))
    except QuizGenerationError:
        raise HTTPException(
            status_code=502,
            detail="Failed to generate quiz. Check API Key or try again.",
        )
    except SessionError as e:
        raise HTTPException(status_code=409, detail=str(e))

    return session.state()


@router.get("/session", response_model=SessionState)
async def get_session_state(session: QuizSession = Depends(get_quiz_session)):
    """Current phase, question and progress"""
    return session.state()


@router.put("/session/input", response_model=SessionState)
async def set_answer_input(
    payload: AnswerInput, session: QuizSession = Depends(get_quiz_session)
):
    """Select an option or type an answer for the current question"""
    try:
        session.set_input(payload.value)
    except SessionError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return session.state()


@router.post("/session/next", response_model=SessionState)
async def next_question(session: QuizSession = Depends(get_quiz_session)):
    """
    Commit the current answer and advance

    Advancing past the last question grades the quiz and moves to results.
    """
    try:
        await session.advance()
    except AnswerRequired as e:
        raise HTTPException(status_code=400, detail=str(e))
    except SessionError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return session.state()


@router.post("/session/stop", response_model=SessionState)
async def stop_quiz(session: QuizSession = Depends(get_quiz_session)):
    """Stop early; unanswered questions are marked as skipped"""
    try:
        await session.stop()
    except SessionError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return session.state()


@router.get("/session/results", response_model=QuizResults)
async def get_results(session: QuizSession = Depends(get_quiz_session)):
    """Per-question scores, feedback and model answers"""
    try:
        return session.results()
    except SessionError as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.post("/session/retry", response_model=SessionState)
async def retry_quiz(session: QuizSession = Depends(get_quiz_session)):
    """Discard the finished quiz and return to configuration"""
    try:
        session.retry()
    except SessionError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return session.state()
