"""
Quiz session state machine

config -> loading -> quiz -> grading -> results -> config

Generation failure returns to config. Answers are committed when the user
advances; stopping early leaves the remaining questions skipped.
"""
import asyncio
import logging
from enum import Enum
from typing import List, Optional, Union
from cquiz.config import settings
from cquiz.schemas.profile import ProfileSummary, UserProfile
from cquiz.schemas.quiz import (
    Question,
    QuestionType,
    QuestionView,
    QuizConfig,
    QuizResults,
    SessionState,
    StartQuizRequest,
    UserAnswer,
)
from cquiz.services.gemini_service import GeminiService, QuizGenerationError
from cquiz.services.grading_service import GradingService
from cquiz.services.profile_service import profile_service

logger = logging.getLogger(__name__)


class Phase(str, Enum):
    CONFIG = "config"
    LOADING = "loading"
    QUIZ = "quiz"
    GRADING = "grading"
    RESULTS = "results"


class Event(str, Enum):
    START = "start"
    GENERATION_SUCCEEDED = "generation_succeeded"
    GENERATION_FAILED = "generation_failed"
    ANSWER_COMMITTED = "answer_committed"
    QUIZ_FINISHED = "quiz_finished"
    GRADING_SETTLED = "grading_settled"
    RETRY = "retry"


TRANSITIONS = {
    (Phase.CONFIG, Event.START): Phase.LOADING,
    (Phase.LOADING, Event.GENERATION_SUCCEEDED): Phase.QUIZ,
    (Phase.LOADING, Event.GENERATION_FAILED): Phase.CONFIG,
    (Phase.QUIZ, Event.ANSWER_COMMITTED): Phase.QUIZ,
    (Phase.QUIZ, Event.QUIZ_FINISHED): Phase.GRADING,
    (Phase.GRADING, Event.GRADING_SETTLED): Phase.RESULTS,
    (Phase.RESULTS, Event.RETRY): Phase.CONFIG,
}


class SessionError(Exception):
    """Base class for invalid session operations"""


class InvalidTransition(SessionError):
    def __init__(self, phase: Phase, event: Event):
        super().__init__(f"Cannot apply '{event.value}' in phase '{phase.value}'")
        self.phase = phase
        self.event = event


class AnswerRequired(SessionError):
    """Advance attempted without a usable answer"""


class InvalidQuizConfig(SessionError):
    """Configuration that cannot produce a quiz"""


def transition(phase: Phase, event: Event) -> Phase:
    """Next phase for an event, or InvalidTransition"""
    try:
        return TRANSITIONS[(phase, event)]
    except KeyError:
        raise InvalidTransition(phase, event) from None


class QuizSession:
    """
    One active quiz at a time
    
    Owns the question set, the committed answers and the transient input of
    the current question. The profile is loaded once here and replaced
    wholesale after each completed quiz.
    """
    
    def __init__(
        self,
        gemini: GeminiService,
        grader: GradingService,
        profiles,
        generation_timeout: Optional[float] = None
    ):
        self.gemini = gemini
        self.grader = grader
        self.profiles = profiles
        self.generation_timeout = (
            generation_timeout if generation_timeout is not None
            else settings.GENERATION_TIMEOUT_SECONDS
        )
        self.profile: UserProfile = profiles.load()
        self.phase = Phase.CONFIG
        self.last_error: Optional[str] = None
        self._reset_quiz()
    
    def _reset_quiz(self):
        self.config: Optional[QuizConfig] = None
        self.questions: List[Question] = []
        self.answers: List[UserAnswer] = []
        self.current_index = 0
        self.current_input: Optional[Union[int, str]] = None
        self._settling: Optional[asyncio.Future] = None
    
    def _apply(self, event: Event):
        previous = self.phase
        self.phase = transition(self.phase, event)
        if previous != self.phase:
            logger.info(f"Session {previous.value} -> {self.phase.value} ({event.value})")
    
    def _require(self, phase: Phase, event: Event):
        if self.phase != phase:
            raise InvalidTransition(self.phase, event)
    
    @property
    def current_question(self) -> Optional[Question]:
        if self.phase != Phase.QUIZ or not self.questions:
            return None
        return self.questions[self.current_index]
    
    def focus_topics(self) -> List[str]:
        return profile_service.rank_weak_topics(self.profile.weak_topics)
    
    def profile_summary(self) -> ProfileSummary:
        return ProfileSummary(**self.profile.model_dump(), focus_topics=self.focus_topics())
    
    def build_config(self, request: StartQuizRequest) -> QuizConfig:
        """Turn form input into a QuizConfig, adding focus topics when enabled"""
        return QuizConfig(
            mcq_count=request.mcq_count,
            short_count=request.short_count,
            long_count=request.long_count,
            difficulty=request.difficulty,
            selected_topics=request.selected_topics,
            focus_topics=self.focus_topics() if request.use_personalization else []
        )
    
    async def start(self, config: QuizConfig) -> List[Question]:
        """
        Generate a quiz and enter the quiz phase
        
        Raises:
            InvalidQuizConfig: no questions requested
            QuizGenerationError: generation failed; the session is back in config
        """
        self._require(Phase.CONFIG, Event.START)
        if config.total_questions == 0:
            raise InvalidQuizConfig("Request at least one question")
        
        self._apply(Event.START)
        self.last_error = None
        
        try:
            questions = await asyncio.wait_for(
                self.gemini.generate_quiz(config, config.focus_topics),
                timeout=self.generation_timeout
            )
            if not questions:
                raise QuizGenerationError("No questions were generated")
        except asyncio.TimeoutError:
            self._fail_generation(f"Quiz generation timed out after {self.generation_timeout}s")
            raise QuizGenerationError(self.last_error)
        except QuizGenerationError as e:
            self._fail_generation(str(e))
            raise
        except asyncio.CancelledError:
            self._fail_generation("Quiz generation was cancelled")
            raise
        except Exception as e:
            self._fail_generation(str(e))
            raise QuizGenerationError(self.last_error) from e

        self.config = config
        self.questions = questions
        self.answers = []
        self.current_index = 0
        self.current_input = None
        self._apply(Event.GENERATION_SUCCEEDED)
        return questions
    
    def _fail_generation(self, message: str):
        logger.error(f"Quiz generation failed: {message}")
        self.last_error = message
        self._reset_quiz()
        self._apply(Event.GENERATION_FAILED)
    
    def set_input(self, value: Optional[Union[int, str]]):
        """Update the transient input; nothing is committed"""
        if self.phase != Phase.QUIZ:
            raise InvalidTransition(self.phase, Event.ANSWER_COMMITTED)
        self.current_input = value
    
    def _input_answer(self) -> Optional[UserAnswer]:
        question = self.current_question
        value = self.current_input
        
        if question.type == QuestionType.MCQ:
            if isinstance(value, bool) or not isinstance(value, int):
                return None
            if not 0 <= value < len(question.options):
                return None
            return self.grader.grade_mcq(question, value)
        
        if not isinstance(value, str) or not value.strip():
            return None
        return UserAnswer(question_id=question.id, answer=value)
    
    async def advance(self):
        """
        Commit the current answer and move on; the last question finishes the quiz
        
        Raises:
            AnswerRequired: no usable answer for the current question
        """
        self._require(Phase.QUIZ, Event.ANSWER_COMMITTED)
        answer = self._input_answer()
        if answer is None:
            raise AnswerRequired(f"Answer question {self.current_question.id} before moving on")
        
        self.answers.append(answer)
        self.current_input = None
        self._apply(Event.ANSWER_COMMITTED)
        
        if self.current_index < len(self.questions) - 1:
            self.current_index += 1
        else:
            await self._finish()
    
    async def stop(self):
        """Stop early; the current input is discarded and the rest are skipped"""
        self._require(Phase.QUIZ, Event.QUIZ_FINISHED)
        self.current_input = None
        await self._finish()
    
    async def _finish(self):
        self._apply(Event.QUIZ_FINISHED)
        # Settles to results even if the caller is cancelled
        self._settling = asyncio.ensure_future(self._settle())
        await asyncio.shield(self._settling)

    async def _settle(self):
        graded = await self.grader.grade_answers(self.questions, self.answers)
        new_profile = profile_service.update_profile(self.profile, graded, self.questions)
        self.profiles.save(new_profile)
        
        self.answers = graded
        self.profile = new_profile
        self._apply(Event.GRADING_SETTLED)
    
    def results(self) -> QuizResults:
        if self.phase != Phase.RESULTS:
            raise SessionError(f"No results in phase '{self.phase.value}'")
        return self.grader.summarize(self.questions, self.answers)
    
    def retry(self):
        """Discard the finished quiz and return to configuration"""
        self._apply(Event.RETRY)
        self._reset_quiz()
    
    def state(self) -> SessionState:
        question = self.current_question
        return SessionState(
            phase=self.phase.value,
            current_index=self.current_index,
            total_questions=len(self.questions),
            answered=len(self.answers),
            question=QuestionView(**question.model_dump(include={"id", "type", "topic", "text", "options"})) if question else None,
            current_input=self.current_input,
            last_error=self.last_error
        )
