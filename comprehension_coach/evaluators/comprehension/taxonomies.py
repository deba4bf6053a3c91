"""
Comprehension Taxonomies - Static data for local answer evaluation

Contains:
- Edit-distance tolerance by word length
- Copy-paste (chunk dump) thresholds
- Result categories (main answers and follow-ups)
- Difficulty levels and reader guidance
- Feedback templates
"""

# ==================== FUZZY MATCHING ====================

# (max word length, max edit distance) - first row that fits wins
DISTANCE_THRESHOLDS = [
    (3, 0),   # short words must match exactly
    (5, 1),
    (7, 2),
]
LONG_WORD_MAX_DISTANCE = 3

# Multi-word keywords of this many words may match out of order-adjacency
SUBSEQUENCE_MIN_WORDS = 2
SUBSEQUENCE_MAX_WORDS = 4

# ==================== CHUNK DUMP DETECTION ====================

# Answer must be at least this long relative to the chunk to be considered
CHUNK_DUMP_MIN_LENGTH_RATIO = 0.9
# ...and have more than this share of its words drawn from the chunk
CHUNK_DUMP_MIN_OVERLAP_RATIO = 0.95

# ==================== RESULT CATEGORIES ====================

CORRECT = 'correct'
PARTIAL = 'partial'
INCORRECT = 'incorrect'

RESULT_CATEGORIES = (CORRECT, PARTIAL, INCORRECT)

# Follow-up questions are marked right or wrong, nothing in between
FOLLOW_UP_RESULTS = (CORRECT, INCORRECT)

# Only these local results can lead to a follow-up question
FOLLOW_UP_ORIGINAL_RESULTS = (PARTIAL, INCORRECT)

# ==================== DIFFICULTY ====================

DIFFICULTIES = ('easy', 'medium', 'hard')

DIFFICULTY_GUIDANCE = {
    'easy': (
        "Simple recall and basic understanding. Use clear, direct language suitable "
        "for younger or struggling readers (ages 7-10). Questions should be answerable "
        "in one or two sentences."
    ),
    'medium': (
        "Mix of recall and inference. Expect students to connect ideas across sentences. "
        "Suitable for intermediate readers (ages 10-13)."
    ),
    'hard': (
        "Inference, synthesis, and critical thinking. Questions may require combining "
        "ideas across the chunk or drawing conclusions. Suitable for advanced readers "
        "(ages 12-15)."
    ),
}

# ==================== FEEDBACK TEMPLATES ====================

FEEDBACK_TEMPLATES = {
    'copy_paste': (
        "It looks like you copied most of the passage. Try pulling out just the part "
        "that answers the question in your own words."
    ),
    'incorrect': (
        "No concepts matched. Have another look at the passage. Think about: {missed}. "
        "If your answer captures the idea in different words, you can request an AI review."
    ),
    'full_marks': "Full marks! You got all {total} concept{plural}.",
    'correct': "Great answer! You covered: {matched}.",
    'partial': (
        "You got {matched_count}/{total} concepts. You covered: {matched}. "
        "Think about: {missed}. If you feel your answer is right, try the AI review."
    ),
}

LABEL_SEPARATOR = ', '
