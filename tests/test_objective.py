import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from hardware import Finger
from metrics import DEFAULT_WEIGHTS, Movement
from objective import IDEAL_FINGER_LOAD, ObjectiveFunction


def test_defaults():
    objective = ObjectiveFunction()
    assert objective.weights == DEFAULT_WEIGHTS
    assert objective.finger_load_weight == 0.0


def test_override_keeps_other_defaults():
    objective = ObjectiveFunction({Movement.SCISSORS: 3})
    assert objective.weights[Movement.SCISSORS] == 3.0
    assert objective.weights[Movement.SAME_FINGER] == 2.0


def test_invalid_movement():
    with pytest.raises(ValueError):
        ObjectiveFunction({"scissors": 1.0})


def test_from_dict():
    objective = ObjectiveFunction.from_dict({"same_finger": 2.5, "Inward Roll": -2}, finger_load_weight=0.1)
    assert objective.weights[Movement.SAME_FINGER] == 2.5
    assert objective.weights[Movement.INWARD_ROLL] == -2.0
    assert objective.finger_load_weight == 0.1


@pytest.mark.parametrize("weights", [
    {"same_hand": 1.0},
    {"scissors": "high"},
    {"scissors": True},
])
def test_from_dict_rejects(weights):
    with pytest.raises(ValueError):
        ObjectiveFunction.from_dict(weights)


def test_ideal_finger_load_sums_to_100():
    assert sum(IDEAL_FINGER_LOAD.values()) == pytest.approx(100.0)
    assert IDEAL_FINGER_LOAD[Finger.LEFT_INDEX] == IDEAL_FINGER_LOAD[Finger.RIGHT_INDEX] == 18.0


def test_finger_load_penalty_off_by_default():
    load = {finger: 0.0 for finger in Finger}
    assert ObjectiveFunction().finger_load_penalty(load) == 0.0


def test_finger_load_penalty():
    objective = ObjectiveFunction(finger_load_weight=0.5)
    assert objective.finger_load_penalty(IDEAL_FINGER_LOAD) == 0.0

    load = dict(IDEAL_FINGER_LOAD)
    load[Finger.LEFT_PINKY] += 10
    load[Finger.RIGHT_INDEX] -= 10
    assert objective.finger_load_penalty(load) == pytest.approx(0.5 * 20)


def test_equality():
    assert ObjectiveFunction() == ObjectiveFunction.from_dict({})
    assert ObjectiveFunction() != ObjectiveFunction({Movement.SCISSORS: 0.0})
    assert hash(ObjectiveFunction()) == hash(ObjectiveFunction())


def test_str():
    text = str(ObjectiveFunction())
    assert text.startswith("2 same_finger")
    assert "- 0.8 hand_alternation" in text
    assert "finger_load_distance" in str(ObjectiveFunction(finger_load_weight=1))
