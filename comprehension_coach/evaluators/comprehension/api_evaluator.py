"""
API-Based Comprehension Review

Uses Anthropic Claude API for the steps local keyword matching can't do:
- Deep review of an answer that scored partial/incorrect locally
- Generating a remedial follow-up question
- Marking the student's answer to that follow-up
- Writing the end-of-session summary

Local scoring (evaluator.py) always runs first. These calls are only made
when the student asks for them, and they raise on failure so the caller can
keep the local result.
"""

import json
import os
from typing import Dict, Optional

from anthropic import Anthropic

from .components import Question
from .taxonomies import (
    RESULT_CATEGORIES, FOLLOW_UP_RESULTS, FOLLOW_UP_ORIGINAL_RESULTS,
    DIFFICULTIES, DIFFICULTY_GUIDANCE
)


DEFAULT_MODEL = "claude-sonnet-4-20250514"
MAX_TOKENS = 1000


# ============================================================
# PROMPTS
# ============================================================

DEEP_EVALUATION_PROMPT = """You are a kind, encouraging reading tutor marking a comprehension answer from a student aged 7-15.

DIFFICULTY: {difficulty}
GUIDANCE: {guidance}

PASSAGE SECTION:
{chunk_text}

QUESTION: {question_text}
MODEL ANSWER: {expected_answer}
KEY CONCEPTS: {concepts}

STUDENT ANSWER:
{student_answer}

TASK:
The automatic keyword check did not give this answer full credit. Judge the MEANING of the
student's answer, not its wording. Accept synonyms, paraphrase, informal language and small
spelling mistakes. Do not reward an answer that simply copies the passage.

RESPONSE FORMAT (strict JSON):
{{
  "result": "correct" | "partial" | "incorrect",
  "feedback": "<1-2 friendly sentences addressed to the student>"
}}

Return ONLY the JSON object, no markdown or explanation."""


FOLLOW_UP_GENERATION_PROMPT = """You are a patient reading tutor helping a student aged 7-15 who struggled with a question.

DIFFICULTY: {difficulty}
GUIDANCE: {guidance}

PASSAGE SECTION:
{chunk_text}

ORIGINAL QUESTION: {question_text}
MODEL ANSWER: {expected_answer}
STUDENT ANSWER ({original_result}):
{student_answer}

TASK:
Write ONE simpler follow-up question that guides the student toward the idea they missed.
It must be answerable from the passage section alone. Include a short hint that points to
where in the passage to look without giving the answer away.

RESPONSE FORMAT (strict JSON):
{{
  "questionText": "<the follow-up question>",
  "hint": "<a short hint>",
  "expectedAnswer": "<a concise model answer, 1 sentence>"
}}

Return ONLY the JSON object, no markdown or explanation."""


FOLLOW_UP_EVALUATION_PROMPT = """You are a kind reading tutor marking a follow-up answer from a student aged 7-15.

DIFFICULTY: {difficulty}
GUIDANCE: {guidance}

PASSAGE SECTION:
{chunk_text}

FOLLOW-UP QUESTION: {follow_up_question}
MODEL ANSWER: {expected_answer}

STUDENT ANSWER:
{student_answer}

TASK:
Decide whether the student's answer shows they now understand the idea. Judge meaning,
not wording. If the answer is incorrect, give the correct answer in simple words.

RESPONSE FORMAT (strict JSON):
{{
  "result": "correct" | "incorrect",
  "feedback": "<1-2 friendly sentences addressed to the student>",
  "correctAnswer": "<the correct answer, or null if the student was correct>"
}}

Return ONLY the JSON object, no markdown or explanation."""


SESSION_SUMMARY_PROMPT = """You are a warm, upbeat reading tutor writing an end-of-session summary for a student aged 7-15.

PASSAGE TITLE: {title}
DIFFICULTY: {difficulty}
GUIDANCE: {guidance}
SCORE: {earned} out of {available} points

PASSAGE:
{content}

TASK:
Write a short learning summary for the student. Recap the main ideas of the passage in
simple words and mention how they did, without dwelling on mistakes. End with one
sentence of encouragement.

RESPONSE FORMAT (strict JSON):
{{
  "headline": "<a short celebratory title, under 8 words>",
  "summary": "<2-3 sentences recapping what the passage taught>",
  "encouragement": "<1 sentence of encouragement addressed to the student>"
}}

Return ONLY the JSON object, no markdown or explanation."""


# ============================================================
# VALIDATION
# ============================================================

def _require_text(value: Optional[str], name: str) -> None:
    if not value or not value.strip():
        raise ValueError(f"Missing or invalid field: {name}")


def _require_difficulty(difficulty: str) -> None:
    if difficulty not in DIFFICULTIES:
        raise ValueError(
            f"Invalid difficulty: '{difficulty}'. Must be one of: {', '.join(DIFFICULTIES)}"
        )


def _format_concepts(question: Question) -> str:
    if not question.key_concepts:
        return 'None listed'
    return ', '.join(c.label for c in question.key_concepts)


# ============================================================
# API CALL
# ============================================================

def _call_api(prompt: str, api_key: Optional[str] = None, model: Optional[str] = None) -> Dict:
    """
    Send one prompt and parse the JSON object in the reply

    Raises:
        ValueError: no API key, or the reply isn't a JSON object
    """

    key = api_key or os.environ.get('ANTHROPIC_API_KEY')
    if not key:
        raise ValueError("ANTHROPIC_API_KEY not set. Set environment variable or pass api_key parameter.")

    client = Anthropic(api_key=key)
    response = client.messages.create(
        model=model or DEFAULT_MODEL,
        max_tokens=MAX_TOKENS,
        messages=[{"role": "user", "content": prompt}]
    )

    response_text = response.content[0].text.strip()

    # Handle markdown wrapping (sometimes API wraps in ```json)
    if response_text.startswith('```'):
        response_text = response_text.split('```')[1]
        if response_text.startswith('json'):
            response_text = response_text[4:]
        response_text = response_text.strip()

    try:
        result = json.loads(response_text)
    except json.JSONDecodeError as e:
        raise ValueError(f"Failed to parse API response as JSON: {e}\nResponse: {response_text[:500]}")

    if not isinstance(result, dict):
        raise ValueError(f"Unexpected API response (expected a JSON object): {response_text[:500]}")

    return result


# ============================================================
# PUBLIC INTERFACE
# ============================================================

def deep_review(
    chunk_text: str,
    question: Question,
    student_answer: str,
    difficulty: str,
    api_key: Optional[str] = None,
    model: Optional[str] = None
) -> Dict:
    """
    Ask Claude to re-mark an answer on meaning rather than keywords

    Args:
        chunk_text: Passage section the question was written from
        question: The question answered
        student_answer: Student's answer
        difficulty: 'easy', 'medium' or 'hard'
        api_key: Anthropic API key (or use ANTHROPIC_API_KEY env var)
        model: Override the default model

    Returns:
        Dict with 'result' (correct/partial/incorrect) and 'feedback'
    """

    _require_text(chunk_text, 'chunkText')
    _require_text(student_answer, 'studentAnswer')
    _require_difficulty(difficulty)
    if question is None:
        raise ValueError("Missing or invalid field: question")

    prompt = DEEP_EVALUATION_PROMPT.format(
        difficulty=difficulty,
        guidance=DIFFICULTY_GUIDANCE[difficulty],
        chunk_text=chunk_text,
        question_text=question.question_text,
        expected_answer=question.expected_answer,
        concepts=_format_concepts(question),
        student_answer=student_answer
    )

    result = _call_api(prompt, api_key, model)

    if result.get('result') not in RESULT_CATEGORIES or not isinstance(result.get('feedback'), str):
        raise ValueError(f"Unexpected evaluation format from API: {result}")

    return {'result': result['result'], 'feedback': result['feedback']}


def generate_follow_up(
    chunk_text: str,
    question: Question,
    student_answer: str,
    original_result: str,
    difficulty: str,
    api_key: Optional[str] = None,
    model: Optional[str] = None
) -> Dict:
    """
    Generate a simpler remedial question for a missed answer

    Args:
        chunk_text: Passage section the question was written from
        question: The original question
        student_answer: Student's original answer
        original_result: 'partial' or 'incorrect'
        difficulty: 'easy', 'medium' or 'hard'

    Returns:
        Dict with 'questionText', 'hint' and 'expectedAnswer'
    """

    _require_text(chunk_text, 'chunkText')
    _require_text(student_answer, 'studentAnswer')
    _require_difficulty(difficulty)
    if question is None or not question.question_text:
        raise ValueError("Missing or invalid field: originalQuestion")
    if original_result not in FOLLOW_UP_ORIGINAL_RESULTS:
        raise ValueError(
            f"Invalid original result: '{original_result}'. "
            f"Must be one of: {', '.join(FOLLOW_UP_ORIGINAL_RESULTS)}"
        )

    prompt = FOLLOW_UP_GENERATION_PROMPT.format(
        difficulty=difficulty,
        guidance=DIFFICULTY_GUIDANCE[difficulty],
        chunk_text=chunk_text,
        question_text=question.question_text,
        expected_answer=question.expected_answer,
        original_result=original_result,
        student_answer=student_answer
    )

    result = _call_api(prompt, api_key, model)

    if not result.get('questionText') or not result.get('expectedAnswer'):
        raise ValueError(f"Unexpected follow-up generation format from API: {result}")

    return {
        'questionText': result['questionText'],
        'hint': result.get('hint') or '',
        'expectedAnswer': result['expectedAnswer'],
    }


def evaluate_follow_up(
    chunk_text: str,
    follow_up_question: str,
    expected_answer: str,
    student_answer: str,
    difficulty: str,
    api_key: Optional[str] = None,
    model: Optional[str] = None
) -> Dict:
    """
    Mark a student's answer to a follow-up question

    Returns:
        Dict with 'result' (correct/incorrect), 'feedback' and
        'correctAnswer' (None when the student was right)
    """

    _require_text(chunk_text, 'chunkText')
    _require_text(follow_up_question, 'followUpQuestion')
    _require_text(expected_answer, 'expectedAnswer')
    _require_text(student_answer, 'studentAnswer')
    _require_difficulty(difficulty)

    prompt = FOLLOW_UP_EVALUATION_PROMPT.format(
        difficulty=difficulty,
        guidance=DIFFICULTY_GUIDANCE[difficulty],
        chunk_text=chunk_text,
        follow_up_question=follow_up_question,
        expected_answer=expected_answer,
        student_answer=student_answer
    )

    result = _call_api(prompt, api_key, model)

    if result.get('result') not in FOLLOW_UP_RESULTS or not isinstance(result.get('feedback'), str):
        raise ValueError(f"Unexpected follow-up evaluation format from API: {result}")

    correct_answer = result.get('correctAnswer')
    if not isinstance(correct_answer, str) or not correct_answer:
        correct_answer = None

    return {
        'result': result['result'],
        'feedback': result['feedback'],
        'correctAnswer': correct_answer,
    }


def generate_summary(
    difficulty: str,
    earned: int,
    available: int,
    api_key: Optional[str] = None,
    model: Optional[str] = None
) -> Dict:
    """
    Write the end-of-session summary for the built-in passage

    Args:
        difficulty: 'easy', 'medium' or 'hard'
        earned: Points earned over the session
        available: Points available over the session

    Returns:
        Dict with 'headline', 'summary' and 'encouragement'
    """
    from ...passage import PASSAGE

    _require_difficulty(difficulty)
    for name, value in (('earned', earned), ('available', available)):
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError(f"Missing or invalid field: {name}")

    prompt = SESSION_SUMMARY_PROMPT.format(
        title=PASSAGE.title,
        difficulty=difficulty,
        guidance=DIFFICULTY_GUIDANCE[difficulty],
        earned=earned,
        available=available,
        content=PASSAGE.content
    )

    result = _call_api(prompt, api_key, model)

    if not all(isinstance(result.get(k), str) for k in ('headline', 'summary', 'encouragement')):
        raise ValueError(f"Unexpected summary format from API: {result}")

    return {
        'headline': result['headline'],
        'summary': result['summary'],
        'encouragement': result['encouragement'],
    }
