"""
Comprehension Evaluator Package v1.0

Local, offline scoring of reading-comprehension answers against a concept rubric.

Usage:
    from comprehension_coach.evaluators.comprehension import ComprehensionEvaluator

    evaluator = ComprehensionEvaluator()
    result = evaluator.evaluate(answer, question.key_concepts, chunk_text=chunk.text)

    print(result.category)         # 'correct', 'partial' or 'incorrect'
    print(result.points_earned, result.points_available)
    print(result.feedback)

Pipeline:
    normalize -> copy-paste check -> fuzzy concept match -> score
"""

from .evaluator import (
    ComprehensionEvaluator,
    EvaluationResult,
    evaluate_answer,
    format_comparative_summary
)
from .components import (
    Concept,
    Question,
    ReviewStatus,
    normalize,
    levenshtein,
    max_distance,
    fuzzy_contains,
    concept_matched,
    match_concepts,
    is_chunk_dump
)
from .scoring import score_concepts, can_request_review
from .feedback import generate_feedback

__version__ = '1.0.0'

__all__ = [
    'ComprehensionEvaluator',
    'EvaluationResult',
    'evaluate_answer',
    'format_comparative_summary',
    'Concept',
    'Question',
    'ReviewStatus',
    'normalize',
    'levenshtein',
    'max_distance',
    'fuzzy_contains',
    'concept_matched',
    'match_concepts',
    'is_chunk_dump',
    'score_concepts',
    'can_request_review',
    'generate_feedback',
]
