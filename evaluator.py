from dataclasses import dataclass, field

from freqdist import FreqDist, NgramType
from hardware import Finger
from layout import KeyboardLayout
from metrics import (
    BIGRAM_MOVEMENTS,
    Movement,
    bad_redirection,
    redirection,
    same_finger_skipgram,
)
from objective import ObjectiveFunction


@dataclass(frozen=True)
class Evaluation:
    """
    The result of scoring one layout against one frequency table.

    Attributes
    ----------
    score : float
        Weighted sum of the movements (lower is better).
    counts : dict[Movement, float]
        Frequency-weighted number of ngrams classified in each movement.
    finger_load : dict[Finger, float]
        Percent of the single keystrokes typed by each finger.
    """
    score: float
    counts: dict[Movement, float] = field(default_factory=dict)
    finger_load: dict[Finger, float] = field(default_factory=dict)

    def contribution(self, movement: Movement, objective: ObjectiveFunction) -> float:
        return self.counts.get(movement, 0) * objective.weights[movement]


class LayoutEvaluator:
    """
    Scores keyboard layouts against a corpus frequency table.

    The evaluator keeps no state between calls: every call folds the frequency
    table into fresh accumulators, so one evaluator can score many layouts,
    from several threads or processes.
    """

    def __init__(self, freqdist: FreqDist, objective: ObjectiveFunction | None = None):
        self.freqdist = freqdist
        self.objective = objective or ObjectiveFunction()

        self._bigram_checks = tuple(
            (movement, predicate, self.objective.weights[movement])
            for movement, predicate in BIGRAM_MOVEMENTS.items()
        )

    def evaluate(self, layout: KeyboardLayout) -> Evaluation:
        '''
        Classify every ngram of the frequency table on the layout. Characters are
        resolved to keys with layout.resolve; ngrams with a character the layout
        cannot type contribute nothing.
        '''
        weights = self.objective.weights
        counts: dict[Movement, float] = {movement: 0 for movement in Movement}
        finger_load: dict[Finger, float] = {finger: 0.0 for finger in Finger}
        score = 0.0

        monograms = self.freqdist.table(NgramType.MONOGRAM)
        total = self.freqdist.total(NgramType.MONOGRAM)
        if total:
            for char, freq in monograms.items():
                key = layout.resolve(char)
                if key is not None:
                    finger_load[key.finger] += freq * 100 / total

        for bigram, freq in self.freqdist.table(NgramType.BIGRAM).items():
            a = layout.resolve(bigram[0])
            b = layout.resolve(bigram[1])
            if a is None or b is None:
                continue
            for movement, predicate, weight in self._bigram_checks:
                if predicate(a, b):
                    score += weight * freq
                    counts[movement] += freq

        for trigram, freq in self.freqdist.table(NgramType.TRIGRAM).items():
            a = layout.resolve(trigram[0])
            b = layout.resolve(trigram[1])
            c = layout.resolve(trigram[2])
            if a is None or b is None or c is None:
                continue

            # a bad redirection is charged instead of, never in addition to, a plain one
            if bad_redirection(a, b, c):
                score += weights[Movement.BAD_REDIRECTION] * freq
                counts[Movement.BAD_REDIRECTION] += freq
            elif redirection(a, b, c):
                score += weights[Movement.REDIRECTION] * freq
                counts[Movement.REDIRECTION] += freq

            if same_finger_skipgram(a, b, c):
                score += weights[Movement.SAME_FINGER_SKIPGRAM] * freq
                counts[Movement.SAME_FINGER_SKIPGRAM] += freq

        score += self.objective.finger_load_penalty(finger_load)

        return Evaluation(score=score, counts=counts, finger_load=finger_load)

    def score(self, layout: KeyboardLayout) -> float:
        return self.evaluate(layout).score
