import asyncio
import json
import pytest

from cquiz.schemas.quiz import Question, QuestionType
from cquiz.services.gemini_service import GeminiService
from cquiz.services.grading_service import GradingService
from cquiz.services.session_service import QuizSession
from cquiz.utils.profile_store import InMemoryProfileStore


QUESTIONS_JSON = {
    "questions": [
        {
            "id": "q1",
            "type": "mcq",
            "topic": "Pointers",
            "text": "int x=10, *p=&x; (*p)++; printf(\"%d\", x);",
            "options": ["10", "11", "12", "Address of x"],
            "correct_option_index": 1,
            "model_answer": "11, (*p)++ increments x through the pointer",
        },
        {
            "id": "q2",
            "type": "short_answer",
            "topic": "Arithmetic Expressions",
            "text": "Evaluate the following expression: 5*8/2+(4-2)%3",
            "model_answer": "22",
        },
        {
            "id": "q3",
            "type": "long_answer",
            "topic": "C Code Writing",
            "text": "Write a function that swaps two integers using pointers.",
            "model_answer": "void swap(int *a, int *b) { int t = *a; *a = *b; *b = t; }",
        },
    ]
}


class FakeResponse:
    def __init__(self, text):
        self.text = text


class FakeModel:
    def __init__(self, factory, model_name, system_instruction):
        self.factory = factory
        self.model_name = model_name
        self.system_instruction = system_instruction

    async def generate_content_async(self, contents, generation_config=None):
        self.factory.calls.append({
            "contents": contents,
            "system_instruction": self.system_instruction,
            "generation_config": generation_config,
        })
        result = self.factory.handler(contents)
        if asyncio.iscoroutine(result):
            result = await result
        if isinstance(result, Exception):
            raise result
        return FakeResponse(result)


class FakeModelFactory:
    """Stands in for genai.GenerativeModel"""

    def __init__(self, handler):
        self.handler = handler
        self.calls = []

    def __call__(self, model_name, system_instruction=None):
        return FakeModel(self, model_name, system_instruction)


def grade_by_answer(contents):
    """Grading responses keyed on the student's answer"""
    if "Student Answer: boom" in contents:
        return RuntimeError("quota exceeded")
    if "Student Answer: 22" in contents:
        return json.dumps({"score": 100, "feedback": "Exact.", "model_answer": "22"})
    return json.dumps({"score": 40, "feedback": "Logic is incomplete.", "model_answer": "void swap(...)"})


def quiz_handler(contents):
    """Generation returns the sample quiz; grading goes through grade_by_answer"""
    if "Student Answer:" in contents:
        return grade_by_answer(contents)
    return json.dumps(QUESTIONS_JSON)


@pytest.fixture
def questions():
    return [Question(**item) for item in QUESTIONS_JSON["questions"]]


@pytest.fixture
def fake_factory():
    return FakeModelFactory(quiz_handler)


@pytest.fixture
def gemini(fake_factory):
    return GeminiService(model_name="test-model", model_factory=fake_factory)


@pytest.fixture
def grader(gemini):
    return GradingService(gemini=gemini, timeout=1.0)


@pytest.fixture
def store():
    return InMemoryProfileStore()


@pytest.fixture
def session(gemini, grader, store):
    return QuizSession(gemini=gemini, grader=grader, profiles=store, generation_timeout=1.0)
