"""
Comprehension Components - Rubric models and answer text analysis

This module handles all text analysis for local answer evaluation:
- Rubric data model (Concept, Question)
- Text normalization
- Copy-paste ("chunk dump") detection
- Fuzzy keyword matching against concept keyword lists

Everything here is a pure function of its inputs.
"""

import re
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Tuple

from .taxonomies import (
    DISTANCE_THRESHOLDS, LONG_WORD_MAX_DISTANCE,
    SUBSEQUENCE_MIN_WORDS, SUBSEQUENCE_MAX_WORDS,
    CHUNK_DUMP_MIN_LENGTH_RATIO, CHUNK_DUMP_MIN_OVERLAP_RATIO
)


class ReviewStatus(Enum):
    """How far a question has gone beyond local scoring"""
    UNREVIEWED = 'unreviewed'
    AI_REVIEWED = 'ai-reviewed'
    FOLLOWUP_USED = 'followup-used'


@dataclass
class Concept:
    """One gradable idea in a question's rubric"""
    label: str
    keywords: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict) -> 'Concept':
        """Build from rubric JSON ({"concept": ..., "keywords": [...]})"""
        label = data.get('concept', data.get('label', ''))
        return cls(label=label, keywords=list(data.get('keywords', [])))

    def to_dict(self) -> Dict:
        return {'concept': self.label, 'keywords': list(self.keywords)}


@dataclass
class Question:
    """A generated question about one chunk, with its concept rubric"""
    id: str
    chunk_index: int
    question_text: str
    expected_answer: str
    key_concepts: List[Concept] = field(default_factory=list)
    review_status: ReviewStatus = ReviewStatus.UNREVIEWED

    @classmethod
    def from_dict(cls, data: Dict) -> 'Question':
        """
        Build from the question generator's camelCase JSON

        A missing id gets a fresh UUID, same as freshly generated questions.
        """
        concepts = [
            c if isinstance(c, Concept) else Concept.from_dict(c)
            for c in data.get('keyConcepts', [])
        ]
        status = data.get('reviewStatus', ReviewStatus.UNREVIEWED.value)
        return cls(
            id=data.get('id') or str(uuid.uuid4()),
            chunk_index=int(data.get('chunkIndex', 0)),
            question_text=data.get('questionText', ''),
            expected_answer=data.get('expectedAnswer', ''),
            key_concepts=concepts,
            review_status=ReviewStatus(status)
        )

    def to_dict(self) -> Dict:
        return {
            'id': self.id,
            'chunkIndex': self.chunk_index,
            'questionText': self.question_text,
            'expectedAnswer': self.expected_answer,
            'keyConcepts': [c.to_dict() for c in self.key_concepts],
            'reviewStatus': self.review_status.value,
        }


# ==================== NORMALIZATION ====================

def normalize(text: str) -> str:
    """
    Canonical comparable form of arbitrary text

    Lowercase, curly apostrophes unified, anything other than a-z, 0-9,
    apostrophe or space replaced by a space, whitespace collapsed and trimmed.
    """
    text = text.lower()
    text = re.sub(r'[\u2018\u2019]', "'", text)
    text = re.sub(r"[^a-z0-9' ]", ' ', text)
    text = re.sub(r'\s+', ' ', text)
    return text.strip()


def _words(normalized: str) -> List[str]:
    """Split normalized text on single spaces (empty text has no words)"""
    return normalized.split(' ') if normalized else []


# ==================== EDIT DISTANCE ====================

def levenshtein(a: str, b: str) -> int:
    """Single-character insert/delete/substitute distance"""
    previous = list(range(len(b) + 1))
    for i in range(1, len(a) + 1):
        current = [i] + [0] * len(b)
        for j in range(1, len(b) + 1):
            if a[i - 1] == b[j - 1]:
                current[j] = previous[j - 1]
            else:
                current[j] = 1 + min(previous[j], current[j - 1], previous[j - 1])
        previous = current
    return previous[len(b)]


def max_distance(word: str) -> int:
    """Edit distance tolerated for a keyword word of this length"""
    for max_length, distance in DISTANCE_THRESHOLDS:
        if len(word) <= max_length:
            return distance
    return LONG_WORD_MAX_DISTANCE


def _close_enough(word: str, keyword_word: str) -> bool:
    return levenshtein(word, keyword_word) <= max_distance(keyword_word)


# ==================== FUZZY MATCHING ====================

def fuzzy_contains(haystack: str, needle: str) -> bool:
    """
    Check whether a normalized keyword appears in a normalized answer

    Tried in order, first success wins:
    1. Exact substring
    2. Single-word keyword: any answer word within tolerance
    3. Multi-word keyword: contiguous window, every word within tolerance
    4. 2-4 word keyword: words appear in order, not necessarily adjacent
    """
    if needle in haystack:
        return True

    words = _words(haystack)
    needle_words = _words(needle)

    if len(needle_words) == 1:
        return any(_close_enough(w, needle) for w in words)

    # Multi-word keyword: sliding window
    span = len(needle_words)
    for i in range(len(words) - span + 1):
        window = words[i:i + span]
        if all(_close_enough(w, nw) for w, nw in zip(window, needle_words)):
            return True

    # Subsequence: keyword words in order, gaps allowed
    if SUBSEQUENCE_MIN_WORDS <= span <= SUBSEQUENCE_MAX_WORDS:
        ni = 0
        for w in words:
            if ni < span and _close_enough(w, needle_words[ni]):
                ni += 1
        if ni == span:
            return True

    return False


def concept_matched(answer_norm: str, concept: Concept) -> bool:
    """A concept matches when any one of its keywords does"""
    for keyword in concept.keywords:
        # A keyword that normalizes to "" is a substring of every answer
        if fuzzy_contains(answer_norm, normalize(keyword)):
            return True
    return False


def match_concepts(answer_norm: str, concepts: List[Concept]) -> Tuple[List[str], List[str]]:
    """
    Partition concept labels into matched and missed, keeping rubric order

    Returns: (matched_labels, missed_labels)
    """
    matched = []
    missed = []
    for concept in concepts:
        if concept_matched(answer_norm, concept):
            matched.append(concept.label)
        else:
            missed.append(concept.label)
    return matched, missed


# ==================== CHUNK DUMP DETECTION ====================

def is_chunk_dump(answer_norm: str, chunk_norm: str) -> bool:
    """
    Detect an answer that is a near-verbatim paste of the whole chunk

    Quoting a sentence is fine. Only flags answers that are both:
    - at least 90% of the chunk's word count
    - more than 95% made of words that appear in the chunk
    """
    answer_words = _words(answer_norm)
    chunk_words = _words(chunk_norm)

    if not answer_words or not chunk_words:
        return False

    length_ratio = len(answer_words) / len(chunk_words)
    if length_ratio < CHUNK_DUMP_MIN_LENGTH_RATIO:
        return False

    chunk_vocab = set(chunk_words)
    overlap = sum(1 for w in answer_words if w in chunk_vocab)
    overlap_ratio = overlap / len(answer_words)

    return overlap_ratio > CHUNK_DUMP_MIN_OVERLAP_RATIO
