"""
Personalization profile API endpoints
"""
from fastapi import APIRouter, Depends
import logging

from cquiz.api.dependencies import get_quiz_session
from cquiz.schemas.profile import ProfileSummary
from cquiz.services.session_service import QuizSession

router = APIRouter(prefix="/api", tags=["profile"])
logger = logging.getLogger(__name__)


@router.get("/profile", response_model=ProfileSummary)
async def get_profile(session: QuizSession = Depends(get_quiz_session)):
    """
    Get the personalization profile
    
    Returns:
    - Weak topic counters
    - Completed quiz count and running average score
    - Focus topics for the next quiz (top 3 weak topics)
    """
    return session.profile_summary()
