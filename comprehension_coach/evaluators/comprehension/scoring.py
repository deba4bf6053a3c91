"""
Comprehension Scoring - Turn matched concepts into a result and points

Generous tri-state policy:
- Nothing matched -> incorrect, no points
- At least half matched (rounded up) -> correct, full points
- Anything in between -> partial, one point per matched concept

The zero-match branch must stay ahead of the half-or-more branch: with an
empty rubric ceil(0/2) == 0, so reversing them would mark it correct.
"""

import math
from typing import Tuple

from .taxonomies import CORRECT, PARTIAL, INCORRECT


def score_concepts(matched_count: int, total: int) -> Tuple[str, int]:
    """
    Decide result category and points earned

    Returns: (category, points_earned)
    """

    if matched_count == 0:
        return INCORRECT, 0

    if matched_count >= math.ceil(total / 2):
        return CORRECT, total

    return PARTIAL, matched_count


def can_request_review(category: str, is_copy_paste: bool) -> bool:
    """AI review is offered for anything short of correct, except copy-pastes"""
    return category != CORRECT and not is_copy_paste
