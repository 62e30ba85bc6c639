import os
import csv
import time
import fcntl

DEFAULT_LOGS_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "logs")


class OptimizerLogger:
    '''
    A logger for an optimizer run. Records the scores of every generation and saves them to a tab separated file.
    '''
    def __init__(self, optimizer_name: str, run_name: str, log_generations: bool = True, logs_dir: str = DEFAULT_LOGS_DIR):
        self.optimizer_name = optimizer_name
        self.run_name = run_name
        self.log_generations = log_generations
        self.logs_dir = logs_dir

        self.generations_filename = f"{self.optimizer_name}_generations.csv"

        self.generations = []
        self.start_time = None
        self.duration = 0.0

    @property
    def path(self) -> str:
        return os.path.join(self.logs_dir, self.generations_filename)

    def run_start(self):
        self.start_time = time.time()

    def run_end(self):
        if self.start_time is not None:
            self.duration = time.time() - self.start_time

    def generation(self, generation: int, best_score: float, mean_score: float, worst_score: float, evaluations: int) -> None:
        if not self.log_generations:
            return
        self.generations.append((generation, best_score, mean_score, worst_score, evaluations))

    def save(self) -> None:
        if not self.log_generations or not self.generations:
            return

        if not os.path.exists(self.logs_dir):
            os.makedirs(self.logs_dir)

        header = ["optimizer_name", "run_name", "generation", "best_score", "mean_score", "worst_score", "evaluations"]
        rows = [
            (self.optimizer_name, self.run_name, generation, best, mean, worst, evaluations)
            for generation, best, mean, worst, evaluations in self.generations
        ]

        file_exists = os.path.exists(self.path)
        with open(self.path, "a+", newline="") as f:
            # using a lock to make this code multiprocessor safe if writing to the same log file
            fcntl.flock(f, fcntl.LOCK_EX)
            writer = csv.writer(f, delimiter='\t')
            if not file_exists:
                writer.writerow(header)
            writer.writerows(rows)
            fcntl.flock(f, fcntl.LOCK_UN)
