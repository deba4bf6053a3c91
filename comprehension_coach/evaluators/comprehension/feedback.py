"""
Comprehension Feedback Generation

Deterministic feedback strings built from matched and missed concept labels.
"""

from typing import List

from .taxonomies import (
    FEEDBACK_TEMPLATES, LABEL_SEPARATOR,
    CORRECT, PARTIAL
)


def generate_feedback(
    category: str,
    matched: List[str],
    missed: List[str],
    total: int,
    is_copy_paste: bool = False
) -> str:
    """
    Generate the student-facing feedback for one evaluated answer

    Args:
        category: 'correct', 'partial' or 'incorrect'
        matched: Matched concept labels, rubric order
        missed: Missed concept labels, rubric order
        total: Number of concepts in the rubric
        is_copy_paste: Answer was flagged as a chunk dump

    Returns:
        Feedback string shown verbatim to the student
    """

    if is_copy_paste:
        return FEEDBACK_TEMPLATES['copy_paste']

    matched_text = LABEL_SEPARATOR.join(matched)
    missed_text = LABEL_SEPARATOR.join(missed)

    if category == CORRECT:
        if len(matched) == total:
            return FEEDBACK_TEMPLATES['full_marks'].format(
                total=total,
                plural='s' if total > 1 else ''
            )
        return FEEDBACK_TEMPLATES['correct'].format(matched=matched_text)

    if category == PARTIAL:
        return FEEDBACK_TEMPLATES['partial'].format(
            matched_count=len(matched),
            total=total,
            matched=matched_text,
            missed=missed_text
        )

    return FEEDBACK_TEMPLATES['incorrect'].format(missed=missed_text)
