"""
Pydantic schemas for quiz entities, requests and responses
"""
from enum import Enum
from pydantic import BaseModel, Field, field_validator, model_validator
from typing import List, Optional, Union


class QuestionType(str, Enum):
    MCQ = "mcq"
    SHORT_ANSWER = "short_answer"
    LONG_ANSWER = "long_answer"


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


# Upper bounds offered by the configuration form
COUNT_LIMITS = {
    "mcq_count": 20,
    "short_count": 10,
    "long_count": 5,
}


class QuizConfig(BaseModel):
    """Quiz parameters, immutable once handed to generation"""
    mcq_count: int = 3
    short_count: int = 2
    long_count: int = 1
    difficulty: Difficulty = Difficulty.MEDIUM
    selected_topics: List[str] = Field(default_factory=list)
    focus_topics: List[str] = Field(default_factory=list)
    
    class Config:
        frozen = True
    
    @field_validator("mcq_count", "short_count", "long_count", mode="before")
    @classmethod
    def clamp_count(cls, value, info):
        try:
            count = int(value or 0)
        except (TypeError, ValueError):
            count = 0
        return max(0, min(COUNT_LIMITS[info.field_name], count))
    
    @property
    def total_questions(self) -> int:
        return self.mcq_count + self.short_count + self.long_count


class Question(BaseModel):
    """Individual generated question"""
    id: str
    type: QuestionType
    topic: str
    text: str
    options: Optional[List[str]] = None  # MCQ only
    correct_option_index: Optional[int] = None  # MCQ only
    model_answer: str
    
    @model_validator(mode="after")
    def check_mcq_fields(self):
        if self.type == QuestionType.MCQ:
            if not self.options:
                raise ValueError(f"MCQ {self.id} has no options")
            if self.correct_option_index is None or not 0 <= self.correct_option_index < len(self.options):
                raise ValueError(f"MCQ {self.id} has no valid correct_option_index")
        return self


class QuestionBatch(BaseModel):
    """Decoded generation response"""
    questions: List[Question]


class UserAnswer(BaseModel):
    """A committed answer; skipped questions have none"""
    question_id: str
    answer: Union[int, str]  # option index for MCQ, text otherwise
    score: Optional[int] = Field(None, ge=0, le=100)
    feedback: Optional[str] = None
    model_answer: Optional[str] = None
    ai_graded: bool = False


class GradingResult(BaseModel):
    """Grader verdict for one free-text answer"""
    score: int
    feedback: str
    model_answer: str
    
    @field_validator("score", mode="before")
    @classmethod
    def clamp_score(cls, value):
        # Raises for non-numeric scores so the caller falls back
        return max(0, min(100, int(round(float(value)))))


class StartQuizRequest(BaseModel):
    """Request schema for starting a quiz"""
    mcq_count: int = 3
    short_count: int = 2
    long_count: int = 1
    difficulty: Difficulty = Difficulty.MEDIUM
    selected_topics: List[str] = Field(default_factory=list)
    use_personalization: bool = True


class AnswerInput(BaseModel):
    """Transient answer input for the current question"""
    value: Optional[Union[int, str]] = None


class QuestionView(BaseModel):
    """Question as shown while the quiz is running (no answer key)"""
    id: str
    type: QuestionType
    topic: str
    text: str
    options: Optional[List[str]] = None


class SessionState(BaseModel):
    """Snapshot of the quiz session"""
    phase: str
    current_index: int = 0
    total_questions: int = 0
    answered: int = 0
    question: Optional[QuestionView] = None
    current_input: Optional[Union[int, str]] = None
    last_error: Optional[str] = None


class QuestionResult(BaseModel):
    """Outcome for a single question"""
    question_id: str
    topic: str
    type: QuestionType
    text: str
    status: str  # skipped, correct, incorrect
    score: int
    answer: Optional[Union[int, str]] = None
    feedback: Optional[str] = None
    model_answer: Optional[str] = None
    options: Optional[List[str]] = None
    correct_option_index: Optional[int] = None


class QuizResults(BaseModel):
    """Results of a completed quiz"""
    average_score: int
    total_questions: int
    answered: int
    skipped: int
    results: List[QuestionResult]
    weak_topics: List[str]
    feedback: str
