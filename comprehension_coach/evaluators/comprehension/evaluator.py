"""
Comprehension Evaluator - Main evaluation class for reading-comprehension answers

This is the primary interface for local answer scoring. It coordinates:
- Normalization of the answer and the source chunk
- Copy-paste (chunk dump) detection
- Fuzzy concept matching
- Scoring
- Feedback generation

No network calls: deeper AI review lives in api_evaluator.py and is only
worth asking for when the local result is not 'correct'.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Union

from .components import (
    Concept, Question, normalize, is_chunk_dump, match_concepts
)
from .scoring import score_concepts, can_request_review
from .feedback import generate_feedback
from .taxonomies import CORRECT, PARTIAL, INCORRECT


@dataclass
class EvaluationResult:
    """Complete local evaluation output"""

    category: str  # 'correct', 'partial' or 'incorrect'
    feedback: str
    matched_concepts: List[str] = field(default_factory=list)
    missed_concepts: List[str] = field(default_factory=list)
    points_earned: int = 0
    points_available: int = 0
    is_copy_paste: bool = False

    @property
    def can_request_review(self) -> bool:
        return can_request_review(self.category, self.is_copy_paste)

    def to_dict(self) -> Dict:
        """camelCase shape consumed by the reading UI"""
        return {
            'category': self.category,
            'feedback': self.feedback,
            'matchedConcepts': list(self.matched_concepts),
            'missedConcepts': list(self.missed_concepts),
            'pointsEarned': self.points_earned,
            'pointsAvailable': self.points_available,
            'isCopyPaste': self.is_copy_paste,
        }


ConceptsInput = List[Union[Concept, Dict]]


class ComprehensionEvaluator:
    """
    Main evaluator class for comprehension answers

    Usage:
        evaluator = ComprehensionEvaluator()
        result = evaluator.evaluate(
            "the queen lays about 2000 eggs every day",
            [{'concept': 'queen lays eggs', 'keywords': ['lays eggs', '2000 eggs']}],
            chunk_text=chunk.text
        )
        print(result.category)  # 'correct'
        print(result.feedback)
    """

    def evaluate(
        self,
        student_answer: str,
        key_concepts: ConceptsInput,
        expected_answer: str = "",
        chunk_text: str = ""
    ) -> EvaluationResult:
        """
        Main evaluation pipeline

        Args:
            student_answer: Student's free-text answer
            key_concepts: Rubric concepts (Concept objects or rubric dicts)
            expected_answer: Model answer (informational, not used for scoring)
            chunk_text: Source chunk the question was written from

        Returns:
            EvaluationResult with category, feedback, concepts and points
        """

        concepts = [
            c if isinstance(c, Concept) else Concept.from_dict(c)
            for c in key_concepts
        ]
        total = len(concepts)

        answer = normalize(student_answer)
        chunk = normalize(chunk_text)

        # Copy-paste overrides everything else
        if is_chunk_dump(answer, chunk):
            return EvaluationResult(
                category=INCORRECT,
                feedback=generate_feedback(INCORRECT, [], [], total, is_copy_paste=True),
                matched_concepts=[],
                missed_concepts=[c.label for c in concepts],
                points_earned=0,
                points_available=total,
                is_copy_paste=True
            )

        matched, missed = match_concepts(answer, concepts)
        category, points_earned = score_concepts(len(matched), total)
        feedback = generate_feedback(category, matched, missed, total)

        return EvaluationResult(
            category=category,
            feedback=feedback,
            matched_concepts=matched,
            missed_concepts=missed,
            points_earned=points_earned,
            points_available=total,
            is_copy_paste=False
        )

    def evaluate_question(
        self,
        question: Question,
        student_answer: str,
        chunk_text: str = ""
    ) -> EvaluationResult:
        """Evaluate an answer against a Question's own rubric"""
        return self.evaluate(
            student_answer,
            question.key_concepts,
            question.expected_answer,
            chunk_text
        )

    def evaluate_batch(self, responses: Dict[str, Dict]) -> Dict[str, EvaluationResult]:
        """
        Evaluate multiple students

        Args:
            responses: Dict of {student_name: {'studentAnswer', 'keyConcepts',
                       'expectedAnswer', 'chunkText'}}

        Returns:
            Dict of {student_name: EvaluationResult}
        """

        results = {}
        for name, response in responses.items():
            results[name] = self.evaluate(
                response.get('studentAnswer', ''),
                response.get('keyConcepts', []),
                response.get('expectedAnswer', ''),
                response.get('chunkText', '')
            )

        return results

    def generate_report(
        self,
        result: EvaluationResult,
        question: Optional[Question] = None,
        student_name: str = "Student"
    ) -> str:
        """
        Generate a formatted report for a single evaluation

        Args:
            result: EvaluationResult from evaluate()
            question: Question that was answered (optional, adds context)
            student_name: Name to use in report

        Returns:
            Formatted markdown report string
        """

        report = f"# Comprehension Report: {student_name}\n\n"

        if question is not None:
            report += f"**Question:** {question.question_text}\n"
            if question.expected_answer:
                report += f"**Model Answer:** {question.expected_answer}\n"
            report += "\n"

        report += f"**Result:** {result.category}\n"
        report += f"**Points:** {result.points_earned}/{result.points_available}\n"
        if result.is_copy_paste:
            report += "**Copy-paste detected:** yes\n"

        report += "\n---\n\n## Feedback\n\n"
        report += f"{result.feedback}\n"

        report += "\n## Concepts\n\n"
        for label in result.matched_concepts:
            report += f"- [x] {label}\n"
        for label in result.missed_concepts:
            report += f"- [ ] {label}\n"

        if result.can_request_review:
            report += "\n*An AI review can be requested for this answer.*\n"

        return report


def evaluate_answer(
    student_answer: str,
    key_concepts: ConceptsInput,
    expected_answer: str = "",
    chunk_text: str = ""
) -> EvaluationResult:
    """Evaluate one answer with a fresh ComprehensionEvaluator"""
    return ComprehensionEvaluator().evaluate(
        student_answer, key_concepts, expected_answer, chunk_text
    )


def format_comparative_summary(results: Dict[str, EvaluationResult]) -> str:
    """
    Generate comparative summary across multiple students

    Args:
        results: Dict of {student_name: EvaluationResult}

    Returns:
        Formatted markdown summary
    """

    summary = "# Comprehension: Comparative Summary\n\n"
    summary += "| Student | Result | Points | Matched | Missed | Next Step |\n"
    summary += "|---------|--------|--------|---------|--------|-----------|\n"

    for name, result in results.items():
        if result.is_copy_paste:
            next_step = "Answer in own words"
        elif result.category == CORRECT:
            next_step = "Move on"
        elif result.category == PARTIAL:
            next_step = "Request AI review or revisit missed ideas"
        else:
            next_step = "Re-read the passage"

        matched = ', '.join(result.matched_concepts) or '-'
        missed = ', '.join(result.missed_concepts) or '-'
        summary += (
            f"| {name} | {result.category} | {result.points_earned}/{result.points_available} "
            f"| {matched} | {missed} | {next_step} |\n"
        )

    # Class-wide patterns
    summary += "\n## Class-Wide Patterns\n\n"

    counts = {CORRECT: 0, PARTIAL: 0, INCORRECT: 0}
    copy_pastes = 0
    for result in results.values():
        counts[result.category] += 1
        if result.is_copy_paste:
            copy_pastes += 1

    summary += f"- **Correct:** {counts[CORRECT]} students\n"
    summary += f"- **Partial:** {counts[PARTIAL]} students\n"
    summary += f"- **Incorrect:** {counts[INCORRECT]} students\n"
    summary += f"- **Copy-paste answers:** {copy_pastes} students\n"

    return summary
