"""
Shared test fixtures for the comprehension evaluator.
Rubrics and chunks come from the built-in honeybee passage.
Zero network calls - the Anthropic client is always stubbed.
"""
from types import SimpleNamespace

import pytest

from comprehension_coach.passage import SECTIONS


@pytest.fixture
def queen_chunk():
    """Section about the queen bee (51 normalized words)"""
    return SECTIONS[1]


@pytest.fixture
def drones_chunk():
    return SECTIONS[4]


@pytest.fixture
def queen_rubric():
    return [
        {
            'concept': 'queen lays eggs',
            'keywords': [
                'lays eggs',
                'lays up to 2000 eggs',
                'produces eggs',
                '2000 eggs',
                'two thousand eggs',
            ],
        }
    ]


@pytest.fixture
def drones_rubric():
    return [
        {'concept': 'drones are male', 'keywords': ['male', 'boys']},
        {'concept': 'no stingers', 'keywords': ['no stingers', "don't have stingers", 'cannot sting']},
        {'concept': 'pushed out in autumn', 'keywords': ['pushed out', 'kicked out', 'autumn', 'fall']},
    ]


@pytest.fixture
def workers_rubric():
    return [
        {'concept': 'workers are female', 'keywords': ['female', 'girls']},
        {'concept': 'clean cells', 'keywords': ['clean', 'cleaning']},
        {'concept': 'feed larvae', 'keywords': ['feed', 'larvae', 'babies']},
        {'concept': 'guard entrance', 'keywords': ['guard', 'guarding']},
    ]


class FakeMessages:
    """Stands in for client.messages; replies with canned text"""

    def __init__(self, reply_text):
        self.reply_text = reply_text
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        return SimpleNamespace(content=[SimpleNamespace(text=self.reply_text)])


@pytest.fixture
def fake_anthropic(monkeypatch):
    """
    Patch the Anthropic client used by api_evaluator.

    Call the fixture with the reply text; returns the FakeMessages so tests
    can inspect the prompts that were sent.
    """
    from comprehension_coach.evaluators.comprehension import api_evaluator

    monkeypatch.setenv('ANTHROPIC_API_KEY', 'test-key')

    def install(reply_text):
        messages = FakeMessages(reply_text)
        monkeypatch.setattr(
            api_evaluator, 'Anthropic',
            lambda api_key: SimpleNamespace(messages=messages)
        )
        return messages

    return install
