"""Text reports for layout evaluations and optimizer results."""

from typing import Any, Optional

from tabulate import tabulate

from evaluator import Evaluation
from hardware import Finger
from layout import KeyboardLayout
from metrics import BIGRAM_MOVEMENTS, TRIGRAM_MOVEMENTS
from objective import ObjectiveFunction
from optimizers.genetic import OptimizationResult


def format_table(
    rows: list[list[Any]],
    headers: Optional[list[str]] = None,
    tablefmt: str = "simple",
    floatfmt: str = ".2f",
    disable_numparse: bool = False,
) -> str:
    """Format data as a table using tabulate.

    Args:
        rows: List of rows, where each row is a list of values
        headers: Optional list of header strings
        tablefmt: Table format (e.g., "simple", "plain")
        floatfmt: Format string for floating point numbers
        disable_numparse: Whether to disable number parsing

    Returns:
        Formatted table string
    """
    kwargs: dict[str, Any] = {
        "tablefmt": tablefmt,
        "floatfmt": floatfmt,
        "disable_numparse": disable_numparse,
    }
    if headers is not None:
        kwargs["headers"] = headers

    return tabulate(rows, **kwargs)


def format_layout(layout: KeyboardLayout) -> str:
    # Tabulate removes leading spaces, so add a leading character to preserve formatting
    LEAD_SPACE = "| "
    rows = [[LEAD_SPACE + line] for line in str(layout).split('\n')]
    return format_table(rows, headers=[layout.name], disable_numparse=True)


def format_finger_load(evaluation: Evaluation) -> str:
    rows = [
        [finger.name.lower(), evaluation.finger_load.get(finger, 0.0)]
        for finger in Finger
    ]
    return format_table(rows, headers=["finger", "load %"])


def format_movements(evaluation: Evaluation, objective: ObjectiveFunction) -> str:
    '''
    movement counts and their contribution to the score, with subtotals for bigrams and trigrams
    '''
    rows = []
    for label, movements in (("bigrams", BIGRAM_MOVEMENTS), ("trigrams", TRIGRAM_MOVEMENTS)):
        subtotal = 0.0
        for movement in movements:
            impact = evaluation.contribution(movement, objective)
            subtotal += impact
            rows.append([movement.description, objective.weights[movement], evaluation.counts.get(movement, 0), impact])
        rows.append([f"{label} subtotal", None, None, subtotal])

    if objective.finger_load_weight:
        rows.append(["finger load distance", objective.finger_load_weight, None, objective.finger_load_penalty(evaluation.finger_load)])

    return format_table(rows, headers=["movement", "weight", "count", "impact"])


def format_evaluation(layout: KeyboardLayout, evaluation: Evaluation, objective: ObjectiveFunction) -> str:
    return '\n\n'.join([
        format_layout(layout),
        format_finger_load(evaluation),
        format_movements(evaluation, objective),
        f"score: {evaluation.score:.2f} (lower is better)",
    ])


def format_changes(initial: KeyboardLayout, optimized: KeyboardLayout) -> str:
    '''
    list the keys whose character changed, as "old -> new"
    '''
    changes = initial.diff(optimized)
    if not changes:
        return "no key changed"

    rows = [
        [key.row, key.column, key.finger.short_name, f"{old} -> {new}"]
        for key, old, new in changes
    ]
    return format_table(rows, headers=["row", "column", "finger", "change"], disable_numparse=True)


def format_result(result: OptimizationResult, initial_score: float) -> str:
    stop = "converged" if result.converged else "generation limit reached"
    return '\n'.join([
        f"generations: {result.generations} ({stop}), layouts scored: {result.evaluations}",
        f"score: {initial_score:.2f} -> {result.best_score:.2f} ({result.best_score - initial_score:+.2f})",
    ])
