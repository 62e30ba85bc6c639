import json
from collections import defaultdict
from functools import cached_property
from pathlib import Path
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Optional, Sequence

import accents
from hardware import Finger, Key


class ConfigParseError(ValueError):
    """A layout document is malformed or names an unknown finger."""


class KeyboardLayout:
    '''
    A named, injective assignment of characters to physical keys.

    The set of keys is the physical skeleton of the keyboard; swapping and
    recombining layouts only changes which character sits on which key.
    '''

    def __init__(self, name: str, mapping: Mapping[str, Key]):
        self.name = name
        self._mapping = dict(mapping)

        for char, key in self._mapping.items():
            if not isinstance(char, str) or len(char) != 1:
                raise ValueError(f"Layout characters must be single characters, got {char!r}")
            if not isinstance(key, Key):
                raise ValueError(f"Character {char!r} is not assigned to a Key")

        # validate that no two characters share the same physical position
        position_set = set(key.position for key in self._mapping.values())
        if len(position_set) != len(self._mapping):
            raise ValueError("Keys must point to unique positions")

    @property
    def mapping(self) -> Mapping[str, Key]:
        return MappingProxyType(self._mapping)

    @property
    def chars(self) -> tuple[str, ...]:
        return tuple(self._mapping)

    @property
    def keys(self) -> tuple[Key, ...]:
        return tuple(self._mapping.values())

    @cached_property
    def char_at_key(self) -> dict[Key, str]:
        '''reverse map, derived from the forward mapping the first time it is needed'''
        return {key: char for char, key in self._mapping.items()}

    @cached_property
    def typing_keys(self) -> dict[str, Key]:
        '''
        the key pressed to type each character: the characters of the layout,
        the capitals of its letters (on the key of the lower case letter), the
        shift and AltGr overlays of its keys, then the dead keys whose base
        character is on the layout (see accents.DEAD_KEY_BASES)
        '''
        typing_keys: dict[str, Key] = {}
        for key in self._mapping.values():
            for produced in (key.shift_produces, key.altgr_produces):
                if produced is not None:
                    typing_keys.setdefault(produced, key)
        for char, key in self._mapping.items():
            capital = char.upper()
            if len(capital) == 1 and capital != char:
                typing_keys[capital] = key
        typing_keys.update(self._mapping)

        for dead_key, base in accents.DEAD_KEY_BASES.items():
            if dead_key not in typing_keys and base in typing_keys:
                typing_keys[dead_key] = typing_keys[base]
        return typing_keys

    def lookup(self, char: str) -> Optional[Key]:
        return self._mapping.get(char)

    def resolve(self, char: str) -> Optional[Key]:
        '''like lookup, but also finds characters typed through an overlay or a dead key'''
        return self.typing_keys.get(char)

    def char_at(self, key: Key) -> Optional[str]:
        return self.char_at_key.get(key)

    def __len__(self) -> int:
        return len(self._mapping)

    def __contains__(self, char: object) -> bool:
        return char in self._mapping

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, KeyboardLayout):
            return NotImplemented
        return self._mapping == other._mapping

    def __hash__(self) -> int:
        return hash(frozenset(self._mapping.items()))

    def __repr__(self) -> str:
        return f"KeyboardLayout(name='{self.name}', keys={len(self._mapping)})"

    def __str__(self) -> str:
        '''
        Show the keyboard layout in a human-readable format. Prints a neat grid of the layout.
        '''
        COL_SEP = ' '
        HAND_SEP = ' '
        BLANK_KEY = ' '

        if not self._mapping:
            return ''

        grid: dict[int, dict[int, tuple[str, Key]]] = defaultdict(dict)
        for char, key in self._mapping.items():
            grid[key.row][key.column] = (char, key)

        min_col = min(key.column for key in self._mapping.values())
        max_col = max(key.column for key in self._mapping.values())

        text_grid_lines = []
        for row in range(min(grid), max(grid) + 1):
            row_str = []
            prev_hand = None
            for col in range(min_col, max_col + 1):
                if col in grid[row]:
                    char, key = grid[row][col]
                    if prev_hand is not None and key.hand != prev_hand:
                        row_str.append(HAND_SEP)
                    prev_hand = key.hand
                    row_str.append(char)
                else:
                    row_str.append(BLANK_KEY)
            text_grid_lines.append(COL_SEP.join(row_str).rstrip())

        return '\n'.join(text_grid_lines)

    def swap(self, char1: str, char2: str, new_name: str = '') -> 'KeyboardLayout':
        '''
        returns a new layout where char1 and char2 exchange their keys
        '''
        return self.swaps([(char1, char2)], new_name)

    def swaps(self, char_pairs: Iterable[tuple[str, str]], new_name: str = '') -> 'KeyboardLayout':
        '''
        returns a new layout that is the result of swapping the keys of the given character pairs, in order
        '''
        mapping = dict(self._mapping)
        for char1, char2 in char_pairs:
            if char1 not in mapping:
                raise ValueError(f"Character {char1} not found in layout")
            if char2 not in mapping:
                raise ValueError(f"Character {char2} not found in layout")
            mapping[char1], mapping[char2] = mapping[char2], mapping[char1]

        return KeyboardLayout(new_name or self.name, mapping)

    def keys_for(self, chars: Sequence[str]) -> tuple[Key, ...]:
        '''the keys assigned to chars, in the given order'''
        return tuple(self._mapping[char] for char in chars)

    def with_keys(self, chars: Sequence[str], keys: Sequence[Key], new_name: str = '') -> 'KeyboardLayout':
        '''
        returns a new layout that assigns keys[i] to chars[i]; characters not in chars keep their keys
        '''
        if len(chars) != len(keys):
            raise ValueError(f"Expected {len(chars)} keys, got {len(keys)}")
        mapping = dict(self._mapping)
        mapping.update(zip(chars, keys))
        return KeyboardLayout(new_name or self.name, mapping)

    def diff(self, other: 'KeyboardLayout') -> list[tuple[Key, str, str]]:
        '''
        list the keys whose character differs between this layout and other,
        as (key, char in this layout, char in other), sorted by row and column
        '''
        changes = []
        for key, char in self.char_at_key.items():
            other_char = other.char_at(key)
            if other_char is not None and other_char != char:
                changes.append((key, char, other_char))
        return sorted(changes, key=lambda change: change[0].position)

    @classmethod
    def from_file(cls, path: str | Path) -> 'KeyboardLayout':
        """
        Load a keyboard layout from a JSON layout document.

        Raises
        ------
        OSError
            If the file cannot be read.
        ConfigParseError
            If the document is not valid JSON or does not describe a layout.
        """
        path = Path(path)
        with path.open("r", encoding="utf-8") as fp:
            try:
                config = json.load(fp)
            except json.JSONDecodeError as exc:
                raise ConfigParseError(f"{path}: invalid JSON: {exc}") from exc
        return cls.from_config(config, default_name=path.stem)

    @classmethod
    def from_config(cls, config: Any, default_name: str = '') -> 'KeyboardLayout':
        """Create a keyboard layout from a parsed layout document."""

        if not isinstance(config, dict):
            raise ConfigParseError("Layout document must be an object")

        name = config.get("name", default_name)
        if not isinstance(name, str):
            raise ConfigParseError(f"Layout name must be a string, got {name!r}")

        description = config.get("description", "")
        if not isinstance(description, str):
            raise ConfigParseError(f"Layout description must be a string, got {description!r}")

        keys = config.get("keys")
        if not isinstance(keys, dict) or not keys:
            raise ConfigParseError("Layout document must have a non-empty 'keys' object")

        mapping = {}
        for char, entry in keys.items():
            if len(char) != 1:
                raise ConfigParseError(f"Layout keys must be single characters, got {char!r}")
            mapping[char] = _key_from_config(char, entry)

        try:
            return cls(name or default_name, mapping)
        except ValueError as exc:
            raise ConfigParseError(str(exc)) from exc

    def to_config(self, description: str = '') -> dict[str, Any]:
        keys = {}
        for char, key in self._mapping.items():
            entry: dict[str, Any] = {"row": key.row, "column": key.column, "finger": key.finger.name}
            if key.shift_produces is not None:
                entry["shift_produces"] = key.shift_produces
            if key.altgr_produces is not None:
                entry["altgr_produces"] = key.altgr_produces
            keys[char] = entry
        return {"name": self.name, "description": description, "keys": keys}

    def save(self, path: str | Path, description: str = '') -> None:
        path = Path(path)
        with path.open("w", encoding="utf-8") as fp:
            json.dump(self.to_config(description), fp, indent=2, ensure_ascii=False)
            fp.write("\n")


def _key_from_config(char: str, entry: Any) -> Key:
    if not isinstance(entry, dict):
        raise ConfigParseError(f"Key {char!r}: expected an object, got {entry!r}")

    for field in ("row", "column"):
        value = entry.get(field)
        if not isinstance(value, int) or isinstance(value, bool):
            raise ConfigParseError(f"Key {char!r}: '{field}' must be an integer, got {value!r}")

    finger_name = entry.get("finger")
    if not isinstance(finger_name, str) or finger_name.upper() not in Finger.__members__:
        raise ConfigParseError(f"Key {char!r}: unknown finger {finger_name!r}")

    overlays = {}
    for field in ("shift_produces", "altgr_produces"):
        value = entry.get(field)
        if value is not None and (not isinstance(value, str) or len(value) != 1):
            raise ConfigParseError(f"Key {char!r}: '{field}' must be a single character, got {value!r}")
        overlays[field] = value

    try:
        return Key(
            row=entry["row"],
            column=entry["column"],
            finger=Finger[finger_name.upper()],
            **overlays,
        )
    except ValueError as exc:
        raise ConfigParseError(f"Key {char!r}: {exc}") from exc
