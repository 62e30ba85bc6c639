import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from evaluator import LayoutEvaluator
from formatting import (
    format_changes,
    format_evaluation,
    format_finger_load,
    format_layout,
    format_movements,
    format_result,
    format_table,
)
from freqdist import FreqDist
from hardware import Finger, Key
from layout import KeyboardLayout
from objective import ObjectiveFunction
from optimizers.genetic import OptimizationResult

LAYOUT = KeyboardLayout("mini", {
    'a': Key(1, 0, Finger.LEFT_PINKY),
    's': Key(1, 1, Finger.LEFT_RING),
    'j': Key(1, 6, Finger.RIGHT_INDEX),
})
FREQDIST = FreqDist.from_counts("mini", {"a": 2, "s": 1, "j": 1, "as": 1, "sj": 2, "asj": 1})


def test_format_table():
    text = format_table([["x", 1.234]], headers=["name", "value"])
    assert "name" in text
    assert "1.23" in text


def test_format_layout_keeps_grid():
    text = format_layout(LAYOUT)
    assert "mini" in text
    assert "| a s" in text


def test_format_finger_load():
    evaluation = LayoutEvaluator(FREQDIST).evaluate(LAYOUT)
    text = format_finger_load(evaluation)
    assert "left_pinky" in text
    assert "50.00" in text
    assert len(text.splitlines()) == len(Finger) + 2


def test_format_movements():
    evaluation = LayoutEvaluator(FREQDIST).evaluate(LAYOUT)
    text = format_movements(evaluation, ObjectiveFunction())
    assert "hand alternation" in text
    assert "bigrams subtotal" in text
    assert "trigrams subtotal" in text
    assert "finger load distance" not in text

    weighted = ObjectiveFunction(finger_load_weight=0.5)
    assert "finger load distance" in format_movements(evaluation, weighted)


def test_format_evaluation():
    evaluation = LayoutEvaluator(FREQDIST).evaluate(LAYOUT)
    text = format_evaluation(LAYOUT, evaluation, ObjectiveFunction())
    assert text.endswith(f"score: {evaluation.score:.2f} (lower is better)")


def test_format_changes():
    assert format_changes(LAYOUT, LAYOUT) == "no key changed"
    text = format_changes(LAYOUT, LAYOUT.swap('a', 'j'))
    assert "a -> j" in text
    assert "j -> a" in text
    assert "RI" in text


def test_format_result():
    evaluation = LayoutEvaluator(FREQDIST).evaluate(LAYOUT)
    result = OptimizationResult(
        best_layout=LAYOUT,
        best_score=evaluation.score,
        evaluation=evaluation,
        generations=7,
        evaluations=40,
        converged=True,
        history=[evaluation.score] * 7,
    )
    text = format_result(result, evaluation.score + 1.5)
    assert "generations: 7 (converged)" in text
    assert "layouts scored: 40" in text
    assert "(-1.50)" in text
