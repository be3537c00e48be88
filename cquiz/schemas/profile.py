"""
Pydantic schemas for the personalization profile
"""
from pydantic import BaseModel, Field
from typing import Dict, List


class UserProfile(BaseModel):
    """Persisted personalization profile"""
    weak_topics: Dict[str, int] = Field(default_factory=dict)  # topic -> sub-70 count
    total_quizzes: int = 0
    average_score: float = 0.0


class ProfileSummary(BaseModel):
    """Profile with the topics chosen for the next quiz"""
    weak_topics: Dict[str, int]
    total_quizzes: int
    average_score: float
    focus_topics: List[str]
