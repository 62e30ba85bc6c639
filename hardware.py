'''
These classes define the physical attributes of keyboard keys
'''

from dataclasses import dataclass
from enum import Enum, unique
from typing import Optional

ROWS = (0, 1, 2)


@unique
class Hand(Enum):
    """
    Represent the hand of a keyboard user.
    """
    LEFT = 0
    RIGHT = 1


@unique
class FingerType(Enum):
    """
    Represent the type of a finger.
    """
    PINKY = 0
    RING = 1
    MIDDLE = 2
    INDEX = 3


@unique
class Finger(Enum):
    """
    Represent the finger of a keyboard key.

    The value is the ordinal used by the movement classifier: left pinky is 0,
    right pinky is 7, and both indexes sit in the middle (3 and 4).
    """
    LEFT_PINKY = 0
    LEFT_RING = 1
    LEFT_MIDDLE = 2
    LEFT_INDEX = 3
    RIGHT_INDEX = 4
    RIGHT_MIDDLE = 5
    RIGHT_RING = 6
    RIGHT_PINKY = 7

    @property
    def hand(self) -> Hand:
        """Return the hand that owns this finger."""
        return Hand.LEFT if self.value < 4 else Hand.RIGHT

    @property
    def type(self) -> FingerType:
        """
        Return the type of the finger.
        """
        if self.value < 4:
            return FingerType(self.value)

        return FingerType(7 - self.value)

    @property
    def short_name(self) -> str:
        return f"{self.hand.name[0]}{self.type.name[0]}"


@dataclass(frozen=True)
class Key:
    """
    Represent a physical key.

    Attributes
    ----------
    row : int
        0 is the top row, 1 the home row and 2 the bottom row.
    column : int
        Logical column index, counted from the left edge.
    finger : Finger
        The finger assigned to press the key.
    shift_produces : str | None
        The character produced with shift held, if any.
    altgr_produces : str | None
        The character produced with AltGr held, if any.
    """
    row: int
    column: int
    finger: Finger
    shift_produces: Optional[str] = None
    altgr_produces: Optional[str] = None

    def __post_init__(self):
        if self.row not in ROWS:
            raise ValueError(f"Row must be one of {ROWS}, got {self.row}")
        if self.column < 0:
            raise ValueError(f"Column must be non-negative, got {self.column}")
        if not isinstance(self.finger, Finger):
            raise ValueError(f"Invalid finger: {self.finger!r}")

    @property
    def hand(self) -> Hand:
        return self.finger.hand

    @property
    def position(self) -> tuple[int, int]:
        return (self.row, self.column)
