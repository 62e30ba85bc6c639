"""Keystroke expansion for characters typed through dead keys or modifiers.

On a French AZERTY keyboard, accented vowels are typed as a dead key followed
by the base letter, and digits need shift. Rewriting a text into the
keystrokes that produce it makes the n-gram counts reflect the physical load
on the keys rather than the logical characters.
"""

from functools import lru_cache
from typing import Iterable

SHIFT = '⇧'

CIRCUMFLEX = '^'
ACUTE = '´'
GRAVE = '`'
DIAERESIS = '¨'

KEYSTROKES: dict[str, str] = {
    # circumflex
    'â': CIRCUMFLEX + 'a',
    'ê': CIRCUMFLEX + 'e',
    'î': CIRCUMFLEX + 'i',
    'ô': CIRCUMFLEX + 'o',
    'û': CIRCUMFLEX + 'u',

    # acute
    'é': ACUTE + 'e',
    'á': ACUTE + 'a',
    'í': ACUTE + 'i',
    'ó': ACUTE + 'o',
    'ú': ACUTE + 'u',

    # grave
    'à': GRAVE + 'a',
    'è': GRAVE + 'e',
    'ì': GRAVE + 'i',
    'ò': GRAVE + 'o',
    'ù': GRAVE + 'u',

    # diaeresis
    'ë': DIAERESIS + 'e',
    'ï': DIAERESIS + 'i',
    'ü': DIAERESIS + 'u',
    'ÿ': DIAERESIS + 'y',

    # cedilla
    'ç': 'c,',

    # AZERTY digit row: shift + the unshifted symbol on the same key
    '1': SHIFT + '&',
    '2': SHIFT + 'é',
    '3': SHIFT + '"',
    '4': SHIFT + "'",
    '5': SHIFT + '(',
    '6': SHIFT + '-',
    '7': SHIFT + 'è',
    '8': SHIFT + '_',
    '9': SHIFT + 'ç',
    '0': SHIFT + 'à',
}

# the character whose key also types each dead key on AZERTY:
# grave is AltGr on the è key, acute is read as the é key, diaeresis is shift on the ^ key
DEAD_KEY_BASES: dict[str, str] = {
    GRAVE: 'è',
    ACUTE: 'é',
    DIAERESIS: '^',
}

_TRANSLATION = str.maketrans(KEYSTROKES)


@lru_cache(maxsize=32)
def _translation(keep: frozenset[str]) -> dict[int, str]:
    if not keep:
        return _TRANSLATION
    return str.maketrans({char: strokes for char, strokes in KEYSTROKES.items() if char not in keep})


def expand(text: str, keep: Iterable[str] = ()) -> str:
    '''
    rewrite text as the keystrokes that type it. The expansion is a single pass:
    the keystrokes produced are not expanded again.

    Characters in keep have a key of their own and are left as they are.
    '''
    return text.translate(_translation(frozenset(keep)))
