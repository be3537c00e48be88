"""
Process-wide quiz session
"""
import logging
from typing import Optional
from cquiz.services.gemini_service import gemini_service
from cquiz.services.grading_service import grading_service
from cquiz.services.session_service import QuizSession
from cquiz.utils.profile_store import create_profile_store

logger = logging.getLogger(__name__)

_session: Optional[QuizSession] = None


def get_quiz_session() -> QuizSession:
    """Build the session on first use; the profile is loaded exactly once"""
    global _session
    if _session is None:
        _session = QuizSession(
            gemini=gemini_service,
            grader=grading_service,
            profiles=create_profile_store()
        )
        logger.info(f"Quiz session ready (quizzes so far: {_session.profile.total_quizzes})")
    return _session
