"""
Comprehensive tests for the Comprehension Evaluator

Tests local answer evaluation including:
- Text normalization
- Edit distance thresholds
- Fuzzy keyword matching
- Copy-paste (chunk dump) detection
- Scoring policy and tie-breaks
- Feedback generation
- Reports and summaries
"""

import pytest

from comprehension_coach.evaluators import get_evaluator, list_evaluators
from comprehension_coach.evaluators.comprehension import (
    ComprehensionEvaluator,
    EvaluationResult,
    Concept,
    Question,
    evaluate_answer,
    format_comparative_summary,
    normalize,
    levenshtein,
    max_distance,
    fuzzy_contains,
    concept_matched,
    is_chunk_dump,
    score_concepts,
    generate_feedback
)


class TestNormalize:
    """Test text normalization"""

    @pytest.mark.parametrize('text', [
        "Bee's Hive!",
        "  The QUEEN—lays 2,000 eggs.  ",
        "café au lait",
        "line one\n\tline two",
        "",
        "’’’",
    ])
    def test_idempotent(self, text):
        once = normalize(text)
        assert normalize(once) == once

    def test_case_and_punctuation_insensitive(self):
        assert normalize("Bee’s Hive!") == normalize("bee's hive") == "bee's hive"

    def test_curly_apostrophes_unified(self):
        assert normalize("doesn‘t doesn’t") == "doesn't doesn't"

    def test_punctuation_becomes_space(self):
        assert normalize("  The QUEEN—lays 2,000 eggs.  ") == "the queen lays 2 000 eggs"

    def test_whitespace_collapsed(self):
        assert normalize("line one\n\tline   two") == "line one line two"

    def test_non_ascii_letters_stripped(self):
        assert normalize("café au lait") == "caf au lait"


class TestEditDistance:
    """Test Levenshtein distance and per-length tolerance"""

    def test_levenshtein(self):
        assert levenshtein("kitten", "sitting") == 3
        assert levenshtein("", "abc") == 3
        assert levenshtein("eggs", "eggz") == 1
        assert levenshtein("hive", "hive") == 0

    @pytest.mark.parametrize('word, expected', [
        ('bee', 0),
        ('eggs', 1),
        ('queen', 1),
        ('nectar', 2),
        ('drones!', 2),
        ('foragers', 3),
        ('honeycomb', 3),
    ])
    def test_max_distance(self, word, expected):
        assert max_distance(word) == expected


class TestFuzzyMatching:
    """Test keyword matching rules"""

    def test_exact_substring(self):
        assert fuzzy_contains("the queen lays eggs", "lays eggs")

    def test_substring_inside_longer_word(self):
        assert fuzzy_contains("a big beehive", "bee")

    def test_four_letter_word_tolerates_one_edit(self):
        assert fuzzy_contains("she lays eggz", "eggs")

    def test_four_letter_word_rejects_two_edits(self):
        assert not fuzzy_contains("she lays egzz", "eggs")

    def test_three_letter_word_exact_only(self):
        assert fuzzy_contains("a bee", "bee")
        assert not fuzzy_contains("the bes are here", "bee")

    def test_contiguous_phrase_with_typo(self):
        assert fuzzy_contains("the workers pusch the drones out", "push the drones")

    def test_subsequence_with_gaps(self):
        assert fuzzy_contains("the queen lays about 2000 eggs every day", "lays eggs")

    def test_subsequence_up_to_four_words(self):
        answer = "bees do a little dance that helps show where food is"
        assert fuzzy_contains(answer, "bees dance show food")

    def test_subsequence_not_used_for_five_words(self):
        answer = "bees do a little dance that helps show where food is"
        assert not fuzzy_contains(answer, "bees dance to show food")

    def test_subsequence_keeps_order(self):
        assert not fuzzy_contains("eggs are laid by queen", "queen eggs")

    def test_concept_matches_on_any_keyword(self):
        concept = Concept('queen lays eggs', ['produces eggs', '2000 eggs'])
        assert concept_matched("she has 2000 eggs", concept)

    def test_keywords_normalized_before_matching(self):
        concept = Concept('no stingers', ["Don’t have STINGERS"])
        assert concept_matched(normalize("They don't have stingers."), concept)

    def test_punctuation_only_keyword_matches_any_answer(self):
        concept = Concept('noise', ['!!!'])
        assert fuzzy_contains("bees live in a hive", "")
        assert concept_matched("bees live in a hive", concept)

    def test_empty_keyword_scores_as_match(self):
        result = evaluate_answer("bees live in a hive", [{'concept': 'x', 'keywords': ['!!!']}])
        assert result.category == 'correct'
        assert result.points_earned == 1


class TestChunkDump:
    """Test copy-paste detection"""

    TEN = "one two three four five six seven eight nine ten"

    def test_whole_chunk_flagged(self, queen_chunk):
        chunk = normalize(queen_chunk)
        assert is_chunk_dump(chunk, chunk)

    def test_length_ratio_boundary(self):
        words = self.TEN.split()
        assert is_chunk_dump(' '.join(words[:9]), self.TEN)      # exactly 90%
        assert not is_chunk_dump(' '.join(words[:8]), self.TEN)  # 80%

    def test_overlap_ratio_boundary(self):
        chunk = ' '.join(f"w{i}" for i in range(20))
        # 19/20 = 0.95 is not more than 0.95
        answer = ' '.join(f"w{i}" for i in range(19)) + " banana"
        assert not is_chunk_dump(answer, chunk)

    def test_short_quote_never_flagged(self, queen_chunk):
        answer = normalize("She is the only bee that lays eggs")
        assert not is_chunk_dump(answer, normalize(queen_chunk))

    def test_long_original_answer_not_flagged(self):
        chunk = "the queen lays the eggs"
        answer = "mum bee makes all babies"
        assert not is_chunk_dump(answer, chunk)

    def test_empty_inputs(self):
        assert not is_chunk_dump("", "some chunk text")
        assert not is_chunk_dump("some answer", "")
        assert not is_chunk_dump("", "")


class TestScoring:
    """Test the tri-state scoring policy"""

    @pytest.mark.parametrize('matched, total, category, points', [
        (0, 0, 'incorrect', 0),
        (0, 3, 'incorrect', 0),
        (1, 1, 'correct', 1),
        (1, 2, 'correct', 2),
        (2, 3, 'correct', 3),
        (1, 3, 'partial', 1),
        (2, 4, 'correct', 4),
        (1, 4, 'partial', 1),
    ])
    def test_score_concepts(self, matched, total, category, points):
        assert score_concepts(matched, total) == (category, points)


class TestFeedback:
    """Test feedback generation"""

    def test_full_marks_singular(self):
        assert generate_feedback('correct', ['a'], [], 1) == "Full marks! You got all 1 concept."

    def test_full_marks_plural(self):
        assert generate_feedback('correct', ['a', 'b'], [], 2) == "Full marks! You got all 2 concepts."

    def test_correct_lists_matched(self):
        feedback = generate_feedback('correct', ['a', 'b'], ['c'], 3)
        assert feedback == "Great answer! You covered: a, b."

    def test_partial_lists_both(self):
        feedback = generate_feedback('partial', ['a'], ['b', 'c'], 3)
        assert feedback.startswith("You got 1/3 concepts. You covered: a. Think about: b, c.")
        assert "AI review" in feedback

    def test_incorrect_lists_missed(self):
        feedback = generate_feedback('incorrect', [], ['a', 'b'], 2)
        assert "Think about: a, b." in feedback
        assert "request an AI review" in feedback

    def test_copy_paste_message(self):
        feedback = generate_feedback('incorrect', [], ['a'], 1, is_copy_paste=True)
        assert "copied most of the passage" in feedback


class TestEvaluator:
    """Test the full evaluation pipeline"""

    def test_queen_answer_correct(self, queen_rubric, queen_chunk):
        result = evaluate_answer(
            "the queen lays about 2000 eggs every day", queen_rubric, "", queen_chunk
        )
        assert result.category == 'correct'
        assert result.points_earned == 1
        assert result.points_available == 1
        assert result.matched_concepts == ['queen lays eggs']
        assert result.feedback == "Full marks! You got all 1 concept."
        assert result.is_copy_paste is False

    def test_unrelated_answer_incorrect(self, queen_rubric, queen_chunk):
        result = evaluate_answer("bees live in a hive", queen_rubric, "", queen_chunk)
        assert result.category == 'incorrect'
        assert result.points_earned == 0
        assert result.matched_concepts == []
        assert result.missed_concepts == ['queen lays eggs']

    def test_two_of_three_is_full_credit(self, drones_rubric, drones_chunk):
        result = evaluate_answer(
            "drones are the male bees and they have no stingers", drones_rubric, "", drones_chunk
        )
        assert result.category == 'correct'
        assert result.points_earned == 3
        assert result.matched_concepts == ['drones are male', 'no stingers']
        assert result.missed_concepts == ['pushed out in autumn']
        assert result.feedback == "Great answer! You covered: drones are male, no stingers."

    def test_one_of_three_is_partial(self, drones_rubric, drones_chunk):
        result = evaluate_answer("the drones are male", drones_rubric, "", drones_chunk)
        assert result.category == 'partial'
        assert result.points_earned == 1
        assert result.points_available == 3
        assert result.missed_concepts == ['no stingers', 'pushed out in autumn']

    def test_two_of_four_is_full_credit(self, workers_rubric):
        result = evaluate_answer(
            "worker bees are all girls and they clean the hive", workers_rubric
        )
        assert result.category == 'correct'
        assert result.points_earned == 4
        assert result.matched_concepts == ['workers are female', 'clean cells']

    def test_empty_rubric_is_incorrect(self, queen_chunk):
        result = evaluate_answer("the queen lays eggs", [], "", queen_chunk)
        assert result.category == 'incorrect'
        assert result.points_earned == 0
        assert result.points_available == 0

    def test_copy_paste_overrides_matching(self, queen_rubric, queen_chunk):
        # 50 of 51 words straight from the chunk, keywords included
        answer = queen_chunk.replace("summer", "winter")
        result = evaluate_answer(answer, queen_rubric, "", queen_chunk)
        assert result.is_copy_paste is True
        assert result.category == 'incorrect'
        assert result.points_earned == 0
        assert result.points_available == 1
        assert result.matched_concepts == []
        assert result.missed_concepts == ['queen lays eggs']
        assert "own words" in result.feedback

    def test_quoting_one_sentence_still_scores(self, queen_rubric, queen_chunk):
        result = evaluate_answer(
            "She is the only bee that lays eggs.", queen_rubric, "", queen_chunk
        )
        assert result.is_copy_paste is False
        assert result.category == 'correct'

    def test_empty_answer_handled(self, queen_rubric, queen_chunk):
        result = evaluate_answer("", queen_rubric, "", queen_chunk)
        assert result.category == 'incorrect'
        assert result.is_copy_paste is False

    def test_accepts_concept_objects(self, queen_chunk):
        concepts = [Concept('queen lays eggs', ['lays eggs'])]
        result = ComprehensionEvaluator().evaluate("she lays eggs", concepts, chunk_text=queen_chunk)
        assert result.category == 'correct'

    def test_evaluate_question(self, queen_rubric, queen_chunk):
        question = Question.from_dict({
            'id': 'q1',
            'chunkIndex': 0,
            'questionText': 'What does the queen do?',
            'expectedAnswer': 'She lays eggs.',
            'keyConcepts': queen_rubric,
        })
        result = ComprehensionEvaluator().evaluate_question(question, "lays eggs", queen_chunk)
        assert result.category == 'correct'

    def test_same_input_same_result(self, drones_rubric, drones_chunk):
        evaluator = ComprehensionEvaluator()
        first = evaluator.evaluate("the drones are male", drones_rubric, "", drones_chunk)
        second = evaluator.evaluate("the drones are male", drones_rubric, "", drones_chunk)
        assert first == second


class TestEvaluationResult:
    """Test result helpers"""

    def test_review_offered_for_partial(self):
        result = EvaluationResult('partial', 'fb', ['a'], ['b', 'c'], 1, 3, False)
        assert result.can_request_review

    def test_review_not_offered_for_correct(self):
        result = EvaluationResult('correct', 'fb', ['a'], [], 1, 1, False)
        assert not result.can_request_review

    def test_review_not_offered_for_copy_paste(self):
        result = EvaluationResult('incorrect', 'fb', [], ['a'], 0, 1, True)
        assert not result.can_request_review

    def test_to_dict(self):
        result = EvaluationResult('partial', 'fb', ['a'], ['b'], 1, 3, False)
        assert result.to_dict() == {
            'category': 'partial',
            'feedback': 'fb',
            'matchedConcepts': ['a'],
            'missedConcepts': ['b'],
            'pointsEarned': 1,
            'pointsAvailable': 3,
            'isCopyPaste': False,
        }


class TestEvaluatorInterface:
    """Test batch, report and summary helpers"""

    def test_evaluate_batch(self, queen_rubric, queen_chunk):
        evaluator = ComprehensionEvaluator()
        results = evaluator.evaluate_batch({
            "Student1": {'studentAnswer': "she lays eggs", 'keyConcepts': queen_rubric, 'chunkText': queen_chunk},
            "Student2": {'studentAnswer': "bees fly", 'keyConcepts': queen_rubric, 'chunkText': queen_chunk},
        })
        assert len(results) == 2
        assert results["Student1"].category == 'correct'
        assert results["Student2"].category == 'incorrect'

    def test_generate_report(self, drones_rubric, drones_chunk):
        evaluator = ComprehensionEvaluator()
        question = Question('q1', 2, 'Tell me about drones.', 'They are male bees.',
                            [Concept.from_dict(c) for c in drones_rubric])
        result = evaluator.evaluate_question(question, "the drones are male", drones_chunk)
        report = evaluator.generate_report(result, question, "Test Student")
        assert "# Comprehension Report: Test Student" in report
        assert "**Question:** Tell me about drones." in report
        assert "**Points:** 1/3" in report
        assert "- [x] drones are male" in report
        assert "- [ ] no stingers" in report
        assert "AI review can be requested" in report

    def test_format_comparative_summary(self, queen_rubric, queen_chunk):
        results = {
            "Student1": evaluate_answer("she lays eggs", queen_rubric, "", queen_chunk),
            "Student2": evaluate_answer(queen_chunk, queen_rubric, "", queen_chunk),
        }
        summary = format_comparative_summary(results)
        assert "# Comprehension: Comparative Summary" in summary
        assert "Student1" in summary
        assert "Answer in own words" in summary
        assert "**Copy-paste answers:** 1 students" in summary


class TestRegistry:
    """Test evaluator registry"""

    def test_get_evaluator(self):
        assert get_evaluator('comprehension') is ComprehensionEvaluator

    def test_unknown_evaluator(self):
        with pytest.raises(ValueError):
            get_evaluator('tvode')

    def test_list_evaluators(self):
        assert list_evaluators() == ['comprehension']


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
