"""
Reading Session - Answers, running score and review tracking for one student

Each Question carries its own ReviewStatus (unreviewed -> ai-reviewed ->
followup-used), so there is no separate record of which questions have
had AI help.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from .evaluators.comprehension import (
    ComprehensionEvaluator, EvaluationResult, Question, ReviewStatus
)
from .evaluators.comprehension.taxonomies import (
    CORRECT, RESULT_CATEGORIES, FOLLOW_UP_ORIGINAL_RESULTS
)
from .passage import Chunk, get_chunks


@dataclass
class AnswerRecord:
    question_id: str
    student_answer: str
    result: str
    attempts: int = 1


class ReadingSession:
    """
    One student's pass through a chunked passage

    Usage:
        session = ReadingSession('medium', questions)
        result = session.submit_answer(questions[0].id, "the queen lays eggs")
        if session.can_request_review(questions[0].id):
            session.request_ai_review(questions[0].id)
        earned, available = session.score
    """

    def __init__(
        self,
        difficulty: str,
        questions: List[Question],
        chunks: Optional[List[Chunk]] = None
    ):
        self.difficulty = difficulty
        self.chunks = chunks if chunks is not None else get_chunks(difficulty)
        self.questions: Dict[str, Question] = {q.id: q for q in questions}
        self.answers: Dict[str, AnswerRecord] = {}
        self.results: Dict[str, EvaluationResult] = {}
        self.evaluator = ComprehensionEvaluator()

    def _question(self, question_id: str) -> Question:
        if question_id not in self.questions:
            raise ValueError(f"Unknown question: '{question_id}'")
        return self.questions[question_id]

    def chunk_text(self, question: Question) -> str:
        """Source text of the chunk a question was written from"""
        for chunk in self.chunks:
            if chunk.index == question.chunk_index:
                return chunk.text
        raise ValueError(f"No chunk {question.chunk_index} for question '{question.id}'")

    def submit_answer(self, question_id: str, student_answer: str) -> EvaluationResult:
        """
        Score an answer locally and record it

        A retry replaces the previous result and points for that question.

        Raises:
            ValueError: unknown question, or empty/whitespace-only answer
        """

        question = self._question(question_id)
        if not student_answer or not student_answer.strip():
            raise ValueError("Answer is empty")

        result = self.evaluator.evaluate_question(
            question, student_answer, self.chunk_text(question)
        )

        record = self.answers.get(question_id)
        if record is None:
            self.answers[question_id] = AnswerRecord(
                question_id=question_id,
                student_answer=student_answer,
                result=result.category
            )
        else:
            record.student_answer = student_answer
            record.result = result.category
            record.attempts += 1

        self.results[question_id] = result
        return result

    def can_request_review(self, question_id: str) -> bool:
        """AI review is offered once, for a non-correct, non-copy-paste answer"""
        question = self._question(question_id)
        result = self.results.get(question_id)
        if result is None:
            return False
        return result.can_request_review and question.review_status == ReviewStatus.UNREVIEWED

    def apply_ai_review(self, question_id: str, review: Dict) -> EvaluationResult:
        """
        Record a deep review verdict

        An AI 'correct' upgrades the answer to full points; any other verdict
        leaves the local points as they are.
        """

        if not self.can_request_review(question_id):
            raise ValueError(f"AI review not available for question '{question_id}'")
        if review.get('result') not in RESULT_CATEGORIES:
            raise ValueError(f"Invalid review result: {review.get('result')!r}")

        question = self.questions[question_id]
        local = self.results[question_id]
        question.review_status = ReviewStatus.AI_REVIEWED
        self.answers[question_id].result = review['result']

        if review['result'] == CORRECT:
            reviewed = EvaluationResult(
                category=CORRECT,
                feedback=review.get('feedback', ''),
                matched_concepts=local.matched_concepts + local.missed_concepts,
                missed_concepts=[],
                points_earned=local.points_available,
                points_available=local.points_available,
                is_copy_paste=False
            )
        else:
            reviewed = EvaluationResult(
                category=review['result'],
                feedback=review.get('feedback', ''),
                matched_concepts=list(local.matched_concepts),
                missed_concepts=list(local.missed_concepts),
                points_earned=local.points_earned,
                points_available=local.points_available,
                is_copy_paste=False
            )

        self.results[question_id] = reviewed
        return reviewed

    def request_ai_review(
        self,
        question_id: str,
        api_key: Optional[str] = None,
        model: Optional[str] = None
    ) -> EvaluationResult:
        """Run a deep review through the API and record it"""
        from .evaluators.comprehension.api_evaluator import deep_review

        if not self.can_request_review(question_id):
            raise ValueError(f"AI review not available for question '{question_id}'")

        question = self.questions[question_id]
        review = deep_review(
            self.chunk_text(question),
            question,
            self.answers[question_id].student_answer,
            self.difficulty,
            api_key=api_key,
            model=model
        )
        return self.apply_ai_review(question_id, review)

    def can_use_follow_up(self, question_id: str) -> bool:
        """One follow-up per question, only after a partial/incorrect result"""
        question = self._question(question_id)
        result = self.results.get(question_id)
        if result is None:
            return False
        return (
            result.category in FOLLOW_UP_ORIGINAL_RESULTS
            and question.review_status != ReviewStatus.FOLLOWUP_USED
        )

    def mark_follow_up_used(self, question_id: str) -> None:
        if not self.can_use_follow_up(question_id):
            raise ValueError(f"Follow-up not available for question '{question_id}'")
        self.questions[question_id].review_status = ReviewStatus.FOLLOWUP_USED

    def request_follow_up(
        self,
        question_id: str,
        api_key: Optional[str] = None,
        model: Optional[str] = None
    ) -> Dict:
        """
        Generate the one follow-up question allowed for a missed answer

        The question is only marked as used once generation succeeds.
        """
        from .evaluators.comprehension.api_evaluator import generate_follow_up

        if not self.can_use_follow_up(question_id):
            raise ValueError(f"Follow-up not available for question '{question_id}'")

        question = self.questions[question_id]
        follow_up = generate_follow_up(
            self.chunk_text(question),
            question,
            self.answers[question_id].student_answer,
            self.results[question_id].category,
            self.difficulty,
            api_key=api_key,
            model=model
        )
        self.mark_follow_up_used(question_id)
        return follow_up

    @property
    def score(self) -> Tuple[int, int]:
        """Running (points_earned, points_available) over answered questions"""
        earned = sum(r.points_earned for r in self.results.values())
        available = sum(r.points_available for r in self.results.values())
        return earned, available

    @property
    def is_complete(self) -> bool:
        return all(qid in self.results for qid in self.questions)

    def to_dict(self) -> Dict:
        earned, available = self.score
        return {
            'difficulty': self.difficulty,
            'questions': [q.to_dict() for q in self.questions.values()],
            'answers': [
                {
                    'questionId': a.question_id,
                    'studentAnswer': a.student_answer,
                    'result': a.result,
                    'attempts': a.attempts,
                }
                for a in self.answers.values()
            ],
            'results': {qid: r.to_dict() for qid, r in self.results.items()},
            'score': {'earned': earned, 'available': available},
        }
