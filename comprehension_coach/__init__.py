"""
Comprehension Coach - Source Package
"""

from .evaluators import get_evaluator, list_evaluators
from .passage import PASSAGE, Chunk, Passage, get_chunks
from .session import AnswerRecord, ReadingSession

__all__ = [
    'get_evaluator',
    'list_evaluators',
    'PASSAGE',
    'Chunk',
    'Passage',
    'get_chunks',
    'AnswerRecord',
    'ReadingSession',
]
