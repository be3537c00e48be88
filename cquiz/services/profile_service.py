"""
Personalization profile update and weak-topic ranking
"""
import logging
from typing import Dict, List
from cquiz.schemas.profile import UserProfile
from cquiz.schemas.quiz import Question, UserAnswer

logger = logging.getLogger(__name__)


class ProfileService:
    """
    Pure profile arithmetic
    
    - Weak topics: +1 per question scored below WEAK_SCORE_THRESHOLD
      (a skipped question scores 0)
    - Average score: exact running mean of per-quiz means
    """
    
    WEAK_SCORE_THRESHOLD = 70
    MAX_FOCUS_TOPICS = 3
    
    def update_profile(
        self,
        profile: UserProfile,
        answers: List[UserAnswer],
        questions: List[Question]
    ) -> UserProfile:
        """
        Derive the next profile from a graded quiz
        
        Args:
            profile: Profile before this quiz
            answers: Graded answers (skipped questions have none)
            questions: Every question of the quiz
            
        Returns:
            A new profile; the input is not modified
        """
        scores = {answer.question_id: answer.score or 0 for answer in answers}
        weak_topics = dict(profile.weak_topics)
        
        quiz_total = 0
        for question in questions:
            score = scores.get(question.id, 0)
            quiz_total += score
            
            if score < self.WEAK_SCORE_THRESHOLD:
                weak_topics[question.topic] = weak_topics.get(question.topic, 0) + 1
        
        quiz_mean = quiz_total / len(questions) if questions else 0.0
        
        if profile.total_quizzes == 0:
            average = quiz_mean
        else:
            average = (
                (profile.average_score * profile.total_quizzes + quiz_mean)
                / (profile.total_quizzes + 1)
            )
        
        logger.info(
            f"Profile updated: quiz_mean={quiz_mean:.2f}, "
            f"average={average:.2f}, quizzes={profile.total_quizzes + 1}"
        )
        
        return UserProfile(
            weak_topics=weak_topics,
            total_quizzes=profile.total_quizzes + 1,
            average_score=average
        )
    
    def rank_weak_topics(self, weak_topics: Dict[str, int], limit: int = None) -> List[str]:
        """Most frequent weak topics first; ties keep insertion order"""
        limit = self.MAX_FOCUS_TOPICS if limit is None else limit
        ranked = sorted(weak_topics.items(), key=lambda item: item[1], reverse=True)
        return [topic for topic, _ in ranked[:limit]]


# Global instance
profile_service = ProfileService()
