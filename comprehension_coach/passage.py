"""
Built-in reading passage and difficulty-based chunking

The passage is stored as short sections. Each difficulty groups sections
into the chunks a student reads before each question: easier levels get
more, smaller chunks.
"""

from dataclasses import dataclass
from typing import Dict, List

from .evaluators.comprehension.taxonomies import DIFFICULTIES


@dataclass
class Passage:
    id: str
    title: str
    content: str


@dataclass
class Chunk:
    index: int
    text: str


SECTIONS = [
    "Inside every beehive, there is a world more organized than most human cities. "
    "A single hive can contain up to 60,000 bees, and every single one has a job to do.",

    "At the center of the hive is the queen bee. She is the only bee that lays eggs—up to "
    "2,000 per day during summer. Despite her title, the queen doesn't actually make "
    "decisions for the hive. Her main job is simply to lay eggs and keep the colony growing.",

    "The worker bees are all female, and they do everything else. Young workers stay inside "
    "the hive, cleaning cells, feeding larvae, and building honeycomb from wax they produce "
    "from their own bodies. As they get older, they graduate to guarding the hive entrance.",

    "The oldest workers become foragers, flying up to five miles from the hive to collect "
    "nectar and pollen.",

    "Male bees are called drones. They don't collect food, don't guard the hive, and don't "
    "have stingers. Their only purpose is to mate with queens from other hives. In autumn, "
    "when food becomes scarce, the workers push the drones out of the hive to conserve resources.",

    "Bees communicate through dancing. When a forager finds a good source of flowers, she "
    "returns to the hive and performs a 'waggle dance' that tells other bees exactly where "
    "to find the food. The angle of her dance shows the direction relative to the sun, and "
    "the length of her waggle shows the distance.",

    "This tiny insect has been making honey the same way for over 100 million years. Every "
    "spoonful of honey represents the life's work of about twelve bees.",
]

PASSAGE = Passage(
    id='passage-1',
    title='The Secret Life of Honeybees',
    content=' '.join(SECTIONS)
)

# Difficulty -> groups of section indices, one group per chunk
CHUNK_GROUPINGS: Dict[str, List[List[int]]] = {
    'easy': [[0], [1], [2], [3, 4], [5], [6]],
    'medium': [[0, 1], [2, 3], [4], [5], [6]],
    'hard': [[0, 1], [2, 3, 4], [5], [6]],
}


def get_chunks(difficulty: str) -> List[Chunk]:
    """Split the passage into chunks for a difficulty level"""
    if difficulty not in DIFFICULTIES:
        raise ValueError(
            f"Invalid difficulty: '{difficulty}'. Must be one of: {', '.join(DIFFICULTIES)}"
        )

    return [
        Chunk(index=index, text=' '.join(SECTIONS[i] for i in group))
        for index, group in enumerate(CHUNK_GROUPINGS[difficulty])
    ]
