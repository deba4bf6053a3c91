"""
Evaluators Registry

Maps evaluator names to their classes, with a one-line description each
for the CLI help text.
"""

from .comprehension import ComprehensionEvaluator

# Registry: name -> (evaluator class, description)
EVALUATORS = {
    'comprehension': (
        ComprehensionEvaluator,
        'Offline fuzzy concept matching against a question rubric',
    ),
}


def get_evaluator(name: str):
    """Get evaluator class by name"""
    if name not in EVALUATORS:
        available = ', '.join(EVALUATORS.keys())
        raise ValueError(f"Unknown evaluator: '{name}'. Available: {available}")
    return EVALUATORS[name][0]


def list_evaluators():
    """List available evaluator names"""
    return list(EVALUATORS.keys())


def describe_evaluators() -> str:
    """One 'name: description' line per evaluator"""
    return '\n'.join(
        f"    {name}: {description}"
        for name, (_, description) in EVALUATORS.items()
    )


__all__ = ['EVALUATORS', 'get_evaluator', 'list_evaluators', 'describe_evaluators']
