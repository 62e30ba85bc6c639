import logging
import multiprocessing
from dataclasses import dataclass, field
from typing import Any, Optional, Sequence

import numpy as np
from tqdm import tqdm

from evaluator import Evaluation, LayoutEvaluator
from layout import KeyboardLayout
from logger import OptimizerLogger

logger = logging.getLogger(__name__)


class InvalidParameter(ValueError):
    """A genetic optimizer parameter is out of range."""


@dataclass(frozen=True)
class GeneticParams:
    '''
    Hyper parameters for the genetic optimizer.
    '''
    population_size: int = 50
    max_generations: int = 100

    # odds that a child is replaced by a random swap of two of its characters
    mutation_rate: float = 0.2

    # odds that two parents are recombined rather than copied
    crossover_rate: float = 0.9

    # number of candidates drawn, with replacement, to select one parent
    tournament_size: int = 3

    # stop after this many consecutive generations without a better layout
    stagnation_limit: int = 20

    seed: Optional[int] = None

    # processes used to score a generation; 1 scores in the calling process
    workers: int = 1

    def __post_init__(self):
        for name in ("population_size", "max_generations", "tournament_size", "stagnation_limit", "workers"):
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool) or value < 1:
                raise InvalidParameter(f"{name} must be a positive integer, got {value!r}")
        for name in ("mutation_rate", "crossover_rate"):
            value = getattr(self, name)
            if not isinstance(value, (int, float)) or isinstance(value, bool) or not 0.0 <= value <= 1.0:
                raise InvalidParameter(f"{name} must be between 0 and 1, got {value!r}")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> 'GeneticParams':
        unknown = set(data) - set(cls.__dataclass_fields__)
        if unknown:
            raise InvalidParameter(f"Unknown genetic parameters: {', '.join(sorted(unknown))}")
        return cls(**data)


@dataclass
class Candidate:
    '''a layout of the population and its score, once evaluated'''
    layout: KeyboardLayout
    score: Optional[float] = None


@dataclass
class OptimizationResult:
    """Summary of an optimizer run."""

    best_layout: KeyboardLayout
    best_score: float
    evaluation: Evaluation
    generations: int
    evaluations: int
    converged: bool
    history: list[float] = field(default_factory=list)


def pmx_crossover(parent1: Sequence[Any], parent2: Sequence[Any], cut: int) -> tuple[Any, ...]:
    '''
    Single point Partially Mapped Crossover (PMX) for permutations.
    Preserves the permutation property (no repeated elements).

    1. Copy parent1[:cut] to the child
    2. Fill positions from cut onward with parent2's values
    3. A value of parent2 that is already in the copied prefix is replaced by
       following the mapping parent1[j] -> parent2[j] until a free value is found

    Both parents must be permutations of the same values.
    '''
    if len(parent1) != len(parent2):
        raise ValueError(f"Parents must have the same length, got {len(parent1)} and {len(parent2)}")

    child = list(parent1[:cut])
    prefix = set(child)
    index_in_parent1 = {value: i for i, value in enumerate(parent1)}

    for i in range(cut, len(parent2)):
        value = parent2[i]
        while value in prefix:
            value = parent2[index_in_parent1[value]]
        child.append(value)

    return tuple(child)


# scoring state of pool worker processes, set once per worker by _init_worker
_worker_evaluator: Optional[LayoutEvaluator] = None


def _init_worker(evaluator: LayoutEvaluator) -> None:
    global _worker_evaluator
    _worker_evaluator = evaluator


def _score_worker(layout: KeyboardLayout) -> float:
    assert _worker_evaluator is not None, "worker was not initialized"
    return _worker_evaluator.score(layout)


class GeneticOptimizer:
    """
    Genetic search over the assignments of characters to keys.

    The population starts from the initial layout plus mutated copies of it.
    Each generation is scored (in parallel when params.workers > 1), parents
    are picked by tournament, recombined with a single point PMX crossover and
    mutated by swapping two characters. The best layout ever scored is
    returned, so the result never scores worse than the initial layout.

    Parameters
    ----------
    evaluator : LayoutEvaluator
        Scores layouts; lower is better.
    params : GeneticParams
        Hyper parameters; the defaults are used when omitted.
    rng : Optional[np.random.Generator]
        Custom RNG for reproducibility; defaults to one seeded with params.seed.
    progress : bool
        Show a progress bar over generations.
    run_logger : Optional[OptimizerLogger]
        Receives the scores of every generation.
    """

    name = "genetic"

    def __init__(
        self,
        evaluator: LayoutEvaluator,
        params: Optional[GeneticParams] = None,
        rng: Optional[np.random.Generator] = None,
        progress: bool = False,
        run_logger: Optional[OptimizerLogger] = None,
    ):
        self.evaluator = evaluator
        self.params = params or GeneticParams()
        self.rng = rng or np.random.default_rng(self.params.seed)
        self.progress = progress
        self.run_logger = run_logger or OptimizerLogger(self.name, "run", log_generations=False)

    def optimize(self, initial: KeyboardLayout) -> OptimizationResult:
        if self.params.workers > 1:
            with multiprocessing.Pool(
                processes=self.params.workers,
                initializer=_init_worker,
                initargs=(self.evaluator,),
            ) as pool:
                return self._run(initial, pool)
        return self._run(initial, None)

    def _run(self, initial: KeyboardLayout, pool: Any) -> OptimizationResult:
        params = self.params
        self.run_logger.run_start()

        population = self.initial_population(initial)
        best: Optional[Candidate] = None
        stagnation = 0
        evaluations = 0
        converged = False
        history: list[float] = []
        generation = 0

        for generation in tqdm(range(1, params.max_generations + 1), desc="Optimizing", unit="gen", disable=not self.progress):
            evaluations += self._evaluate(population, pool)

            scores = np.array([candidate.score for candidate in population], dtype=np.float64)
            generation_best = int(np.argmin(scores))

            if best is None or scores[generation_best] < best.score:
                best = population[generation_best]
                stagnation = 0
            else:
                stagnation += 1

            history.append(best.score)
            self.run_logger.generation(generation, best.score, float(scores.mean()), float(scores.max()), evaluations)
            logger.debug("generation %d: best %.2f, mean %.2f", generation, best.score, scores.mean())

            if stagnation >= params.stagnation_limit:
                converged = True
                logger.info("converged after %d generations without improvement (generation %d)", stagnation, generation)
                break

            population = self.next_generation(population)

        self.run_logger.run_end()
        self.run_logger.save()

        assert best is not None and best.score is not None
        return OptimizationResult(
            best_layout=best.layout,
            best_score=best.score,
            evaluation=self.evaluator.evaluate(best.layout),
            generations=generation,
            evaluations=evaluations,
            converged=converged,
            history=history,
        )

    def initial_population(self, initial: KeyboardLayout) -> list[Candidate]:
        '''the initial layout followed by population_size - 1 mutations of it'''
        return [Candidate(initial)] + [
            Candidate(self.mutate(initial)) for _ in range(self.params.population_size - 1)
        ]

    def _evaluate(self, population: list[Candidate], pool: Any) -> int:
        '''score the candidates that have no score yet, returns how many were scored'''
        pending = [candidate for candidate in population if candidate.score is None]
        if not pending:
            return 0

        layouts = [candidate.layout for candidate in pending]
        if pool is not None:
            scores = pool.map(_score_worker, layouts)
        else:
            scores = [self.evaluator.score(layout) for layout in layouts]

        for candidate, score in zip(pending, scores):
            candidate.score = score
        return len(pending)

    def next_generation(self, population: list[Candidate]) -> list[Candidate]:
        size = self.params.population_size
        children: list[Candidate] = []

        while len(children) < size:
            parent1 = self.select(population)
            parent2 = self.select(population)

            if self.rng.random() < self.params.crossover_rate:
                children.extend(self.crossover(parent1, parent2))
            else:
                children.append(Candidate(parent1.layout, parent1.score))
                children.append(Candidate(parent2.layout, parent2.score))

        children = children[:size]

        for i, child in enumerate(children):
            if self.rng.random() < self.params.mutation_rate:
                children[i] = Candidate(self.mutate(child.layout))

        return children

    def select(self, population: list[Candidate]) -> Candidate:
        '''
        tournament selection: the lowest score among tournament_size candidates drawn with replacement
        '''
        drawn = self.rng.integers(0, len(population), size=self.params.tournament_size)
        return min((population[i] for i in drawn), key=lambda candidate: candidate.score)

    def crossover(self, parent1: Candidate, parent2: Candidate) -> tuple[Candidate, Candidate]:
        '''
        two children from a cut point over the characters of parent1: each child
        takes the keys of one parent before the cut and of the other from the cut on
        '''
        chars = parent1.layout.chars
        if not chars:
            return Candidate(parent1.layout, parent1.score), Candidate(parent2.layout, parent2.score)

        cut = int(self.rng.integers(0, len(chars)))
        keys1 = parent1.layout.keys_for(chars)
        keys2 = parent2.layout.keys_for(chars)

        return (
            self._child(chars, pmx_crossover(keys1, keys2, cut), (parent1, parent2)),
            self._child(chars, pmx_crossover(keys2, keys1, cut), (parent2, parent1)),
        )

    def _child(self, chars: tuple[str, ...], keys: tuple, parents: tuple[Candidate, Candidate]) -> Candidate:
        # a child identical to a parent keeps the parent's score
        for parent in parents:
            if parent.layout.keys_for(chars) == keys:
                return Candidate(parent.layout, parent.score)
        return Candidate(parents[0].layout.with_keys(chars, keys, self._child_name(parents[0].layout)))

    def mutate(self, layout: KeyboardLayout) -> KeyboardLayout:
        '''swap the keys of two distinct characters picked at random'''
        chars = layout.chars
        if len(chars) < 2:
            return layout
        i, j = self.rng.choice(len(chars), size=2, replace=False)
        return layout.swap(chars[int(i)], chars[int(j)], self._child_name(layout))

    @staticmethod
    def _child_name(layout: KeyboardLayout) -> str:
        if layout.name.endswith(" optimized"):
            return layout.name
        return f"{layout.name} optimized"
