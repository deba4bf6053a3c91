#!/usr/bin/env python3
"""
Evaluate CLI - Score a student's reading-comprehension answers

Scores each answer locally (offline fuzzy concept matching). With
--deep-review, answers that are not correct (and not copy-pastes) are
sent to Claude for a second look.

Usage:
    python evaluate.py --session outputs/sessions/Ava_session.json
    python evaluate.py --session session.json --deep-review
    python evaluate.py --list-chunks --difficulty easy

Session file:
    {
      "student_name": "Ava",
      "difficulty": "medium",
      "responses": [
        {"question": {...}, "studentAnswer": "...", "chunkText": "..."}
      ]
    }
    chunkText is optional; it defaults to the built-in passage chunk for
    the question's chunkIndex.

Output:
    outputs/evaluations/{student}_comprehension_evaluation.json
    outputs/reports/{student}_comprehension_report.md
"""

import argparse
import json
import sys
from pathlib import Path

from comprehension_coach.evaluators import describe_evaluators, get_evaluator, list_evaluators
from comprehension_coach.evaluators.comprehension import Question
from comprehension_coach.evaluators.comprehension.taxonomies import DIFFICULTIES
from comprehension_coach.passage import PASSAGE, Chunk, get_chunks
from comprehension_coach.session import ReadingSession


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Score reading-comprehension answers against concept rubrics',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Available evaluators:
{describe_evaluators()}

Examples:
    # Local scoring only
    python evaluate.py --session outputs/sessions/Ava_session.json

    # Ask Claude to re-mark answers the keyword check missed
    python evaluate.py --session session.json --deep-review --api-key sk-ant-...

    # Show the passage chunks for a difficulty
    python evaluate.py --list-chunks --difficulty hard
        """
    )

    parser.add_argument(
        '--session',
        help='Path to session JSON file'
    )
    parser.add_argument(
        '--evaluator',
        default='comprehension',
        choices=list_evaluators(),
        help=f'Evaluator to use: {", ".join(list_evaluators())}'
    )
    parser.add_argument(
        '--difficulty',
        choices=DIFFICULTIES,
        help='Difficulty level (overrides the session file)'
    )
    parser.add_argument(
        '--output',
        default='./outputs',
        help='Output directory base (default: ./outputs)'
    )
    parser.add_argument(
        '--deep-review',
        action='store_true',
        help='Send non-correct answers to Claude for a deep review'
    )
    parser.add_argument(
        '--api-key',
        help='Anthropic API key (optional, can also use ANTHROPIC_API_KEY env var)'
    )
    parser.add_argument(
        '--model',
        help='Claude model to use for deep review'
    )
    parser.add_argument(
        '--list-chunks',
        action='store_true',
        help='Print the passage chunks for --difficulty and exit'
    )

    return parser


def list_chunks(difficulty: str) -> None:
    print(f"\n{PASSAGE.title} ({difficulty})")
    for chunk in get_chunks(difficulty):
        print(f"\n--- Chunk {chunk.index} ---")
        print(chunk.text)


def load_session(data: dict, difficulty: str) -> tuple:
    """
    Build a ReadingSession plus the ordered (question, answer) pairs

    Responses carrying their own chunkText override the built-in chunks.
    """

    questions = []
    answers = []
    chunks = {c.index: c for c in get_chunks(difficulty)}

    responses = data.get('responses', [])
    if not isinstance(responses, list):
        raise ValueError("Session file 'responses' must be a list")

    for position, response in enumerate(responses, 1):
        if not isinstance(response, dict) or not isinstance(response.get('question'), dict):
            raise ValueError(f"Response {position} must be an object with a 'question' object")
        question = Question.from_dict(response['question'])
        if response.get('chunkText'):
            chunks[question.chunk_index] = Chunk(question.chunk_index, response['chunkText'])
        questions.append(question)
        answers.append((question, response.get('studentAnswer', '')))

    session = ReadingSession(
        difficulty,
        questions,
        chunks=[chunks[i] for i in sorted(chunks)]
    )
    return session, answers


def build_report(student_name: str, session: ReadingSession, evaluator) -> str:
    earned, available = session.score
    percentage = (earned / available * 100) if available else 0

    report = f"""# Reading Comprehension Report Card

**Student:** {student_name}
**Passage:** {PASSAGE.title}
**Difficulty:** {session.difficulty}
**Score:** {earned}/{available} ({percentage:.0f}%)

---
"""

    for question in session.questions.values():
        result = session.results.get(question.id)
        if result is None:
            continue
        section = evaluator.generate_report(result, question, student_name)
        # Demote the per-question title under the report card
        report += "\n" + section.replace(
            f"# Comprehension Report: {student_name}",
            f"## {question.id}",
            1
        ).replace("\n## ", "\n### ")
        report += f"\n*Review status: {question.review_status.value}*\n\n---\n"

    return report


def main():
    parser = build_parser()
    args = parser.parse_args()

    if args.list_chunks:
        list_chunks(args.difficulty or 'medium')
        return

    if not args.session:
        parser.error('--session is required unless --list-chunks is given')

    # Validate session path
    session_path = Path(args.session)
    if not session_path.exists():
        print(f"ERROR: Session file not found: {session_path}")
        sys.exit(1)

    # Load session
    print(f"\n{'='*60}")
    print(f"LOADING SESSION")
    print(f"{'='*60}")

    try:
        with open(session_path, 'r') as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        print(f"ERROR: Session file is not valid JSON: {e}")
        sys.exit(1)

    if not isinstance(data, dict):
        print("ERROR: Session file must contain a JSON object")
        sys.exit(1)

    student_name = data.get('student_name', 'Unknown')
    difficulty = args.difficulty or data.get('difficulty', 'medium')

    try:
        session, answers = load_session(data, difficulty)
    except ValueError as e:
        print(f"ERROR: {e}")
        sys.exit(1)

    print(f"Student: {student_name}")
    print(f"Difficulty: {difficulty}")
    print(f"Responses: {len(answers)}")

    # Evaluate
    print(f"\n{'='*60}")
    print(f"EVALUATING with {args.evaluator.upper()}")
    if args.deep_review:
        print("  Deep review enabled (Claude)")
    else:
        print("  Local scoring only")
    print(f"{'='*60}")

    EvaluatorClass = get_evaluator(args.evaluator)
    evaluator = EvaluatorClass()
    session.evaluator = evaluator

    for question, answer in answers:
        try:
            result = session.submit_answer(question.id, answer)
        except ValueError as e:
            print(f"  ⚠ Skipping {question.id}: {e}")
            continue

        print(f"  ✓ {question.id}: {result.category} ({result.points_earned}/{result.points_available})")
        if result.is_copy_paste:
            print(f"    ⚠ Copy-paste detected")

        if args.deep_review and session.can_request_review(question.id):
            try:
                reviewed = session.request_ai_review(question.id, api_key=args.api_key, model=args.model)
                print(f"    ✓ AI review: {reviewed.category} ({reviewed.points_earned}/{reviewed.points_available})")
            except Exception as e:
                print(f"    ⚠ AI review failed ({e}), keeping local result")

    earned, available = session.score
    print(f"\n✓ Evaluation complete")
    print(f"  Score: {earned}/{available}")

    # Save evaluation
    output_base = Path(args.output)
    eval_dir = output_base / "evaluations"
    report_dir = output_base / "reports"
    eval_dir.mkdir(parents=True, exist_ok=True)
    report_dir.mkdir(parents=True, exist_ok=True)

    safe_name = student_name.replace(' ', '_')

    eval_path = eval_dir / f"{safe_name}_{args.evaluator}_evaluation.json"
    eval_data = {
        'student': student_name,
        'evaluator': args.evaluator,
        'passage': PASSAGE.title,
        'deep_review': args.deep_review,
    }
    eval_data.update(session.to_dict())

    with open(eval_path, 'w') as f:
        json.dump(eval_data, f, indent=2)

    # Save report
    report_path = report_dir / f"{safe_name}_{args.evaluator}_report.md"
    with open(report_path, 'w') as f:
        f.write(build_report(student_name, session, evaluator))

    # Summary
    print(f"\n{'='*60}")
    print("EVALUATION COMPLETE")
    print(f"{'='*60}")
    print(f"Evaluation: {eval_path}")
    print(f"Report: {report_path}")


if __name__ == "__main__":
    main()
