"""
Gemini AI service for quiz generation and free-text grading
"""
import google.generativeai as genai
from pydantic import ValidationError
from cquiz.config import settings
from cquiz.constants import LECTURE_MATERIAL
from cquiz.schemas.quiz import GradingResult, Question, QuestionBatch, QuizConfig
import json
import logging
from typing import Any, Callable, List, Optional

logger = logging.getLogger(__name__)

# Configure Gemini API
if settings.GEMINI_API_KEY:
    genai.configure(api_key=settings.GEMINI_API_KEY)


class QuizGenerationError(Exception):
    """Raised when the model cannot produce a usable question set"""


QUESTION_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "questions": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "id": {"type": "STRING"},
                    "type": {
                        "type": "STRING",
                        "description": "One of: mcq, short_answer, long_answer",
                    },
                    "topic": {"type": "STRING"},
                    "text": {
                        "type": "STRING",
                        "description": "The question text. Put the code snippet directly in here.",
                    },
                    "options": {
                        "type": "ARRAY",
                        "items": {"type": "STRING"},
                        "description": "For MCQs only. 4 options.",
                    },
                    "correct_option_index": {"type": "INTEGER"},
                    "model_answer": {
                        "type": "STRING",
                        "description": "The exact correct output or code. For MCQs, explain WHY it is correct.",
                    },
                },
                "required": ["id", "type", "topic", "text", "model_answer"],
            },
        }
    },
    "required": ["questions"],
}

GRADING_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "score": {"type": "INTEGER"},
        "feedback": {"type": "STRING"},
        "model_answer": {"type": "STRING"},
    },
    "required": ["score", "feedback", "model_answer"],
}

GRADING_FALLBACK_FEEDBACK = "Error grading question. Please try again."


def _strip_code_fence(text: str) -> str:
    """Remove markdown code blocks around a JSON payload"""
    cleaned = (text or "").strip()
    if cleaned.startswith("```json"):
        cleaned = cleaned[7:-3].strip()
    elif cleaned.startswith("```"):
        cleaned = cleaned[3:-3].strip()
    return cleaned


class GeminiService:
    """Service for all Gemini AI operations"""
    
    def __init__(self, model_name: str = None, model_factory: Optional[Callable[..., Any]] = None):
        self.model_name = model_name or settings.GEMINI_MODEL
        self._model_factory = model_factory or genai.GenerativeModel
    
    async def generate_quiz(self, config: QuizConfig, weak_topics: List[str]) -> List[Question]:
        """
        Generate quiz questions matching the revision templates
        
        Args:
            config: Requested counts, difficulty and topics
            weak_topics: Up to three weak areas, most weak first
            
        Returns:
            List of validated questions
            
        Raises:
            QuizGenerationError: if the call fails or the response is malformed
        """
        try:
            model = self._model_factory(
                self.model_name,
                system_instruction=self._create_quiz_prompt(config, weak_topics)
            )
            response = await model.generate_content_async(
                f"Generate a revision quiz with {config.total_questions} questions "
                "strictly following the styles in the source material.",
                generation_config=genai.GenerationConfig(
                    response_mime_type="application/json",
                    response_schema=QUESTION_SCHEMA,
                    temperature=settings.GENERATION_TEMPERATURE,
                )
            )
            questions = self._parse_quiz_response(response.text, config)
        except QuizGenerationError:
            raise
        except Exception as e:
            logger.error(f"Failed to generate quiz: {str(e)}")
            raise QuizGenerationError("Failed to generate quiz. Check API Key or try again.") from e
        
        logger.info(f"Generated {len(questions)} questions ({config.difficulty.value})")
        return questions
    
    def _create_quiz_prompt(self, config: QuizConfig, weak_topics: List[str]) -> str:
        """Create the system instruction for quiz generation"""
        
        prompt = f"""
You are a C Programming Professor creating a PRACTICAL REVISION EXAM based on the provided "Review Questions" document.

SOURCE MATERIAL:
{LECTURE_MATERIAL}

YOU MUST GENERATE QUESTIONS THAT EXACTLY MATCH THE STYLES BELOW, INCLUDING POINTERS AND ARRAYS:

1. TYPE: EXPRESSION EVALUATION (Best for Short Answer/MCQ)
   - Format: "Evaluate the following expression: [expression]"
   - Content: Mixed integer arithmetic, precedence, modulus, integer division.
   - Example: "5*8/2+(4-2)%3"

2. TYPE: MANUAL CODE TRACING (Best for Short Answer/MCQ)
   - Format: "For the following statement/loop, write down the value(s) that will be printed."
   - Content: printf formatting (%3.1f, %05d), complex loops (comma operator, nested),
     pointers (*p, *p++, (*p)++), array index access arr[i].
   - Keep code snippets SHORT (3-6 lines max) for MCQs.
   - Example: "int x=10, *p=&x; (*p)++; printf(\\"%d\\", x);"

3. TYPE: DEBUGGING / ERROR ID (Best for MCQ/Short Answer)
   - Format: "Identify the error in the following code snippet."
   - Content: semicolons after loops, missing &, uninitialized variables, array out of bounds,
     dereferencing NULL/uninitialized pointers.
   - Example: "int a[5]; a[5] = 10;" (out of bounds)

4. TYPE: CODE WRITING (Best for Long Answer)
   - Format: "Write the C code that uses a [construct] to [task]."
   - Content: nested if-else, switch, loops, functions with pointers (pass-by-reference), array manipulation.
   - Example: "Write a function that swaps two integers using pointers."

DIFFICULTY ({config.difficulty.value}):
- Easy: Simple expressions, basic printf, basic array access.
- Medium: Nested loops, switch cases, pointer dereferencing.
- Hard: Pointer arithmetic (*p++ vs (*p)++), multidimensional arrays, complex precedence.

OUTPUT RULES:
- Generate exactly: {config.mcq_count} MCQs (type "mcq"), {config.short_count} Short Answer (type "short_answer"), {config.long_count} Long Answer (type "long_answer").
- Every question needs a unique id within the quiz.
- MCQs must have exactly 4 options and a correct_option_index (0-based).
- Model Answer: MUST BE EXACT. If it's code, provide valid C code. If it's a number, provide the number.
"""
        
        if config.selected_topics:
            prompt += (
                "\nCRITICAL: You MUST include questions focusing on these User Selected Topics: "
                f"{', '.join(config.selected_topics)}."
            )
        
        if weak_topics:
            prompt += f"\nAlso consider these weak areas for personalization: {', '.join(weak_topics)}."
        
        return prompt
    
    def _parse_quiz_response(self, response_text: str, config: QuizConfig) -> List[Question]:
        """Decode the response strictly into Question entities"""
        try:
            batch = QuestionBatch.model_validate(json.loads(_strip_code_fence(response_text)))
        except (json.JSONDecodeError, ValidationError) as e:
            logger.error(f"Failed to parse quiz JSON: {str(e)}")
            logger.error(f"Response text: {(response_text or '')[:500]}")
            raise QuizGenerationError("Quiz response did not match the question schema") from e
        
        # The model owns the count, only flag deviations
        if len(batch.questions) != config.total_questions:
            logger.warning(f"Expected {config.total_questions} questions, got {len(batch.questions)}")
        
        return batch.questions
    
    async def grade_answer(self, question: Question, user_answer: str) -> GradingResult:
        """
        Grade a free-text answer against the question's model answer
        
        Args:
            question: The question being answered
            user_answer: Student's raw answer
            
        Returns:
            GradingResult; a zero-score fallback if grading fails
        """
        prompt = f"""
You are a strict C Programming Grader grading a revision exam.

Question: {question.text}
Model Answer: {question.model_answer}
Student Answer: {user_answer}

GRADING RULES:
1. ARITHMETIC: Answer must be the EXACT number (e.g., "7", not "7.0" if integer math).
2. TRACING: Output formatting must match exactly (spaces, newlines, zero-padding).
3. CODE WRITING: Logic must be correct. Syntax errors that break compilation are -10 points. Missing semicolons are -5 points.
4. DEBUGGING: Student must identify the specific line or logical error.

Output JSON with score (0-100), specific feedback and the model_answer.
"""
        
        try:
            model = self._model_factory(self.model_name)
            response = await model.generate_content_async(
                prompt,
                generation_config=genai.GenerationConfig(
                    response_mime_type="application/json",
                    response_schema=GRADING_SCHEMA,
                    temperature=settings.GRADING_TEMPERATURE,
                )
            )
            return GradingResult.model_validate(json.loads(_strip_code_fence(response.text)))
            
        except Exception as e:
            logger.error(f"Failed to grade answer for {question.id}: {str(e)}")
            return self.fallback_result(question)
    
    @staticmethod
    def fallback_result(question: Question) -> GradingResult:
        """Deterministic result used when grading cannot complete"""
        return GradingResult(
            score=0,
            feedback=GRADING_FALLBACK_FEEDBACK,
            model_answer=question.model_answer or "N/A"
        )


# Global instance
gemini_service = GeminiService()
