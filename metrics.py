from enum import Enum
from typing import Callable

from hardware import Finger, Hand, Key


class Movement(Enum):
    '''
    Ergonomic categories of typing movements. Bigram categories are classified
    over two consecutive keys, trigram categories over three.
    '''
    SAME_FINGER = "same finger bigram"
    LATERAL_STRETCH = "lateral stretch"
    SCISSORS = "scissors"
    HAND_ALTERNATION = "hand alternation"
    INWARD_ROLL = "inward roll"
    OUTWARD_ROLL = "outward roll"
    REDIRECTION = "redirection"
    BAD_REDIRECTION = "bad redirection"
    SAME_FINGER_SKIPGRAM = "same finger skipgram"

    @property
    def description(self) -> str:
        return self.value

    @property
    def order(self) -> int:
        return 3 if self in TRIGRAM_MOVEMENTS else 2

    @property
    def weight(self) -> float:
        return DEFAULT_WEIGHTS[self]


# positive weights penalize, negative weights reward
DEFAULT_WEIGHTS: dict[Movement, float] = {
    Movement.SAME_FINGER: 2.0,
    Movement.LATERAL_STRETCH: 1.5,
    Movement.SCISSORS: 1.8,
    Movement.BAD_REDIRECTION: 1.7,
    Movement.REDIRECTION: 1.2,
    Movement.SAME_FINGER_SKIPGRAM: 1.6,
    Movement.HAND_ALTERNATION: -0.8,
    Movement.INWARD_ROLL: -1.0,
    Movement.OUTWARD_ROLL: -0.5,
}


# Helper functions
def same_finger(a: Key, b: Key) -> bool:
    return a.finger == b.finger

def same_hand(a: Key, b: Key, c: Key | None = None) -> bool:
    if c is None:
        return a.finger.hand == b.finger.hand
    return a.finger.hand == b.finger.hand and a.finger.hand == c.finger.hand

def _sign(x: int) -> int:
    return (x > 0) - (x < 0)


# Bigram movements
def hand_alternation(a: Key, b: Key) -> bool:
    return not same_hand(a, b)

def lateral_stretch(a: Key, b: Key) -> bool:
    return same_hand(a, b) and abs(a.column - b.column) >= 3

def inward_roll(a: Key, b: Key) -> bool:
    '''
    motion toward the center of the hand, judged by column only
    '''
    if not same_hand(a, b):
        return False
    if a.finger.hand == Hand.LEFT:
        return a.column < b.column
    return a.column > b.column

def _is_outward_neighbour(a: Finger, b: Finger) -> bool:
    # index -> middle -> ring -> pinky, on either hand
    return a.hand == b.hand and b.type.value == a.type.value - 1

def outward_roll(a: Key, b: Key) -> bool:
    '''
    b is pressed by the finger next to a's, one step away from the index.
    Never true together with inward_roll, even when the columns run against the fingers.
    '''
    return same_hand(a, b) and _is_outward_neighbour(a.finger, b.finger) and not inward_roll(a, b)

def scissors(a: Key, b: Key) -> bool:
    '''
    adjacent fingers of the same hand crossing two or more rows
    '''
    return (
        same_hand(a, b) and
        abs(a.finger.value - b.finger.value) == 1 and
        abs(a.row - b.row) >= 2
    )


# Trigram movements
def redirection(a: Key, b: Key, c: Key) -> bool:
    if not same_hand(a, b, c):
        return False
    first = _sign(b.column - a.column)
    second = _sign(c.column - b.column)
    return first != 0 and second != 0 and first != second

def bad_redirection(a: Key, b: Key, c: Key) -> bool:
    return redirection(a, b, c) and (lateral_stretch(a, b) or lateral_stretch(b, c))

def same_finger_skipgram(a: Key, b: Key, c: Key) -> bool:
    return same_finger(a, c)


BIGRAM_MOVEMENTS: dict[Movement, Callable[[Key, Key], bool]] = {
    Movement.SAME_FINGER: same_finger,
    Movement.LATERAL_STRETCH: lateral_stretch,
    Movement.SCISSORS: scissors,
    Movement.HAND_ALTERNATION: hand_alternation,
    Movement.INWARD_ROLL: inward_roll,
    Movement.OUTWARD_ROLL: outward_roll,
}

TRIGRAM_MOVEMENTS: dict[Movement, Callable[[Key, Key, Key], bool]] = {
    Movement.BAD_REDIRECTION: bad_redirection,
    Movement.REDIRECTION: redirection,
    Movement.SAME_FINGER_SKIPGRAM: same_finger_skipgram,
}

assert set(BIGRAM_MOVEMENTS) | set(TRIGRAM_MOVEMENTS) == set(Movement), "Every movement needs a classifier"
