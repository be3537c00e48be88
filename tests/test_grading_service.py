import asyncio
import json

from cquiz.schemas.quiz import Question, UserAnswer
from cquiz.services.gemini_service import GRADING_FALLBACK_FEEDBACK, GeminiService
from cquiz.services.grading_service import GradingService
from tests.conftest import FakeModelFactory, grade_by_answer


def _free_text(qid, topic="Arrays"):
    return Question(id=qid, type="short_answer", topic=topic, text=f"Question {qid}", model_answer="22")


def test_grade_mcq_is_local(grader, questions, fake_factory):
    mcq = questions[0]

    right = grader.grade_mcq(mcq, 1)
    wrong = grader.grade_mcq(mcq, 3)

    assert (right.score, right.ai_graded) == (100, True)
    assert (wrong.score, wrong.ai_graded) == (0, True)
    assert fake_factory.calls == []


def test_grade_answers_enriches_mcq_and_grades_free_text(grader, questions, fake_factory):
    answers = [
        grader.grade_mcq(questions[0], 1),
        UserAnswer(question_id="q2", answer="22"),
        UserAnswer(question_id="q3", answer="void swap(int a, int b) {}"),
    ]

    graded = asyncio.run(grader.grade_answers(questions, answers))

    assert [a.question_id for a in graded] == ["q1", "q2", "q3"]
    assert graded[0].score == 100
    assert graded[0].model_answer == questions[0].model_answer
    assert graded[1].score == 100
    assert graded[1].feedback == "Exact."
    assert graded[2].score == 40
    assert all(a.ai_graded for a in graded)
    # Only the two free-text answers reach the model
    assert len(fake_factory.calls) == 2


def test_one_failing_grade_does_not_abort_batch():
    factory = FakeModelFactory(grade_by_answer)
    grader = GradingService(gemini=GeminiService(model_factory=factory), timeout=1.0)
    questions = [_free_text("a"), _free_text("b"), _free_text("c")]
    answers = [
        UserAnswer(question_id="a", answer="22"),
        UserAnswer(question_id="b", answer="boom"),
        UserAnswer(question_id="c", answer="22"),
    ]

    graded = asyncio.run(grader.grade_answers(questions, answers))

    assert [a.score for a in graded] == [100, 0, 100]
    assert graded[1].feedback == GRADING_FALLBACK_FEEDBACK
    assert graded[1].model_answer == "22"
    assert graded[1].ai_graded is True


def test_grading_timeout_resolves_to_fallback():
    async def slow(contents):
        if "Student Answer: slow" in contents:
            await asyncio.sleep(5)
        return json.dumps({"score": 90, "feedback": "Good.", "model_answer": "22"})

    grader = GradingService(gemini=GeminiService(model_factory=FakeModelFactory(slow)), timeout=0.05)
    questions = [_free_text("a"), _free_text("b")]
    answers = [
        UserAnswer(question_id="a", answer="slow"),
        UserAnswer(question_id="b", answer="22"),
    ]

    graded = asyncio.run(grader.grade_answers(questions, answers))

    assert graded[0].score == 0
    assert graded[0].feedback == GRADING_FALLBACK_FEEDBACK
    assert graded[1].score == 90


def test_grade_answers_with_no_answers(grader, questions):
    assert asyncio.run(grader.grade_answers(questions, [])) == []


def test_summarize_marks_skipped_and_averages_over_all_questions(grader, questions):
    answers = [
        UserAnswer(question_id="q1", answer=1, score=100, ai_graded=True, model_answer="11"),
        UserAnswer(question_id="q2", answer="21", score=50, feedback="Off by one.", ai_graded=True),
    ]

    results = grader.summarize(questions, answers)

    assert results.average_score == 50
    assert results.total_questions == 3
    assert (results.answered, results.skipped) == (2, 1)
    assert [r.status for r in results.results] == ["correct", "incorrect", "skipped"]
    skipped = results.results[2]
    assert skipped.score == 0
    assert skipped.answer is None
    assert skipped.model_answer == questions[2].model_answer
    assert results.results[0].options == questions[0].options
    assert results.results[1].options is None
    assert results.weak_topics == ["Arithmetic Expressions", "C Code Writing"]
    assert results.feedback.startswith("Needs improvement.")


def test_summarize_empty_quiz(grader):
    results = grader.summarize([], [])

    assert results.average_score == 0
    assert results.results == []
