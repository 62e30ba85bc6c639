from typing import Any, Mapping

from hardware import Finger, FingerType
from metrics import DEFAULT_WEIGHTS, Movement

# percent of keystrokes each finger should carry, by finger type
IDEAL_FINGER_LOAD: dict[Finger, float] = {
    finger: {
        FingerType.PINKY: 5.0,
        FingerType.RING: 12.0,
        FingerType.MIDDLE: 15.0,
        FingerType.INDEX: 18.0,
    }[finger.type]
    for finger in Finger
}


class ObjectiveFunction:
    '''
    ObjectiveFunction is a linear combination of movement counts, plus an optional
    penalty for the distance between the finger load and an ideal distribution.

    The optimizer will MINIMIZE the objective function. So think of it as cost or effort function.
    '''

    def __init__(
        self,
        weights: Mapping[Movement, float] | None = None,
        finger_load_weight: float = 0.0,
        ideal_finger_load: Mapping[Finger, float] | None = None,
    ):
        self.weights = dict(DEFAULT_WEIGHTS)
        for movement, weight in (weights or {}).items():
            if not isinstance(movement, Movement):
                raise ValueError(f"Invalid movement: {movement}")
            self.weights[movement] = float(weight)

        self.finger_load_weight = float(finger_load_weight)
        self.ideal_finger_load = dict(ideal_finger_load or IDEAL_FINGER_LOAD)

    @classmethod
    def from_dict(cls, weights: Mapping[str, Any], finger_load_weight: float = 0.0) -> 'ObjectiveFunction':
        '''
        build an objective from movement names (case insensitive), e.g. {"same_finger": 2.5}
        '''
        parsed = {}
        for name, weight in weights.items():
            key = name.strip().upper().replace(' ', '_')
            if key not in Movement.__members__:
                raise ValueError(f"Unknown movement '{name}'. Valid names are: {', '.join(m.name.lower() for m in Movement)}")
            if not isinstance(weight, (int, float)) or isinstance(weight, bool):
                raise ValueError(f"Weight for '{name}' must be a number, got {weight!r}")
            parsed[Movement[key]] = weight
        return cls(parsed, finger_load_weight=finger_load_weight)

    def finger_load_penalty(self, finger_load: Mapping[Finger, float]) -> float:
        if not self.finger_load_weight:
            return 0.0
        return self.finger_load_weight * sum(
            abs(finger_load.get(finger, 0.0) - ideal) for finger, ideal in self.ideal_finger_load.items()
        )

    def __str__(self):
        terms = []
        for movement, weight in self.weights.items():
            sign = '-' if weight < 0 else '+'
            terms.append(f"{sign} {abs(weight):g} {movement.name.lower()}")
        if self.finger_load_weight:
            terms.append(f"+ {self.finger_load_weight:g} finger_load_distance")
        return ' '.join(terms).lstrip('+ ')

    def __repr__(self):
        return f"ObjectiveFunction({self})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ObjectiveFunction):
            return NotImplemented
        return (
            self.weights == other.weights and
            self.finger_load_weight == other.finger_load_weight and
            self.ideal_finger_load == other.ideal_finger_load
        )

    def __hash__(self):
        return hash((tuple(sorted((m.name, w) for m, w in self.weights.items())), self.finger_load_weight))
