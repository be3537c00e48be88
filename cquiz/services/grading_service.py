"""
Quiz grading service with hybrid approach
MCQ: Exact index match, graded locally when the answer is committed
Short/Long answer: Gemini grading, fanned out concurrently
"""
import asyncio
import logging
from typing import Dict, List, Optional
from cquiz.config import settings
from cquiz.schemas.quiz import (
    Question,
    QuestionResult,
    QuestionType,
    QuizResults,
    UserAnswer,
)
from cquiz.services.gemini_service import GeminiService, gemini_service
from cquiz.services.profile_service import ProfileService

logger = logging.getLogger(__name__)


class GradingService:
    """
    Service for grading quiz submissions
    
    Strategy:
    - MCQ: 100 for the correct index, else 0 (no AI call)
    - Free text: one Gemini call per answer; each call falls back to a
      zero score on error or timeout so the batch always completes
    """
    
    CORRECT_THRESHOLD = 80
    
    def __init__(self, gemini: GeminiService = None, timeout: Optional[float] = None):
        self.gemini = gemini or gemini_service
        self.timeout = timeout if timeout is not None else settings.GRADING_TIMEOUT_SECONDS
    
    @staticmethod
    def grade_mcq(question: Question, selected_index: int) -> UserAnswer:
        """Grade an MCQ selection locally"""
        return UserAnswer(
            question_id=question.id,
            answer=selected_index,
            score=100 if selected_index == question.correct_option_index else 0,
            ai_graded=True
        )
    
    async def grade_answers(
        self,
        questions: List[Question],
        answers: List[UserAnswer]
    ) -> List[UserAnswer]:
        """
        Resolve every committed answer to a final score
        
        Args:
            questions: Questions of the quiz
            answers: Committed answers, in commit order
            
        Returns:
            Graded answers in the same order
        """
        by_id = {question.id: question for question in questions}
        pending = sum(1 for answer in answers if not answer.ai_graded)
        logger.info(f"Grading {len(answers)} answers ({pending} via Gemini)")
        
        graded = await asyncio.gather(
            *(self._grade_one(by_id.get(answer.question_id), answer) for answer in answers)
        )
        return list(graded)
    
    async def _grade_one(self, question: Optional[Question], answer: UserAnswer) -> UserAnswer:
        if question is None:
            logger.warning(f"Answer for unknown question {answer.question_id} left as is")
            return answer
        
        if answer.ai_graded:
            return answer.model_copy(update={"model_answer": question.model_answer})
        
        try:
            result = await asyncio.wait_for(
                self.gemini.grade_answer(question, str(answer.answer)),
                timeout=self.timeout
            )
        except asyncio.TimeoutError:
            logger.warning(f"Grading timed out for {question.id} after {self.timeout}s")
            result = self.gemini.fallback_result(question)
        except Exception as e:
            logger.error(f"Grading failed for {question.id}: {str(e)}")
            result = self.gemini.fallback_result(question)
        
        return answer.model_copy(update={
            "score": result.score,
            "feedback": result.feedback,
            "model_answer": result.model_answer,
            "ai_graded": True,
        })
    
    def summarize(self, questions: List[Question], answers: List[UserAnswer]) -> QuizResults:
        """
        Build the results view
        
        Skipped questions count as 0 in the average but keep their own status.
        """
        by_id: Dict[str, UserAnswer] = {answer.question_id: answer for answer in answers}
        results = []
        total = 0
        weak_topics = []
        
        for question in questions:
            answer = by_id.get(question.id)
            score = (answer.score or 0) if answer else 0
            total += score
            
            if answer is None:
                status = "skipped"
            elif score >= self.CORRECT_THRESHOLD:
                status = "correct"
            else:
                status = "incorrect"
            
            if score < ProfileService.WEAK_SCORE_THRESHOLD and question.topic not in weak_topics:
                weak_topics.append(question.topic)
            
            is_mcq = question.type == QuestionType.MCQ
            results.append(QuestionResult(
                question_id=question.id,
                topic=question.topic,
                type=question.type,
                text=question.text,
                status=status,
                score=score,
                answer=answer.answer if answer else None,
                feedback=answer.feedback if answer else None,
                model_answer=(answer.model_answer if answer and answer.model_answer else question.model_answer),
                options=question.options if is_mcq else None,
                correct_option_index=question.correct_option_index if is_mcq else None
            ))
        
        average = round(total / len(questions)) if questions else 0
        answered = sum(1 for result in results if result.status != "skipped")
        
        return QuizResults(
            average_score=average,
            total_questions=len(questions),
            answered=answered,
            skipped=len(questions) - answered,
            results=results,
            weak_topics=weak_topics,
            feedback=self._generate_feedback(average, weak_topics)
        )
    
    def _generate_feedback(self, percentage: float, weak_topics: List[str]) -> str:
        """Generate overall feedback message"""
        
        feedback_parts = []
        
        if percentage >= 90:
            feedback_parts.append("Excellent work! Strong understanding across all topics.")
        elif percentage >= 75:
            feedback_parts.append("Good performance! You have a solid grasp of the material.")
        elif percentage >= 60:
            feedback_parts.append("Fair performance. Review the weak areas for improvement.")
        else:
            feedback_parts.append("Needs improvement. Focus on understanding core concepts.")
        
        if weak_topics:
            feedback_parts.append(f"Focus on: {', '.join(weak_topics)}.")
        
        return " ".join(feedback_parts)


# Global instance
grading_service = GradingService()
