"""Settings read from a TOML file, by default ``config.toml`` at the project root."""

import dataclasses
import logging
from pathlib import Path
from typing import Any, Optional

from objective import ObjectiveFunction
from optimizers.genetic import GeneticParams

try:
    import tomllib
except ModuleNotFoundError:  # pragma: no cover - Python < 3.11 fallback
    import tomli as tomllib  # type: ignore[no-redef]

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parent
DEFAULT_CONFIG_PATH = PROJECT_ROOT / "config.toml"


@dataclasses.dataclass(slots=True, frozen=True)
class CorpusSettings:
    extensions: tuple[str, ...] = (".txt",)
    encoding: str = "utf-8"
    expand_accents: bool = True
    lowercase: bool = False

    @classmethod
    def from_dict(cls, data: dict) -> "CorpusSettings":
        extensions = data.get("extensions", [".txt"])
        if isinstance(extensions, str):
            extensions = [extensions]
        return cls(
            extensions=tuple(str(ext) for ext in extensions),
            encoding=str(data.get("encoding", "utf-8")),
            expand_accents=bool(data.get("expand_accents", True)),
            lowercase=bool(data.get("lowercase", False)),
        )


@dataclasses.dataclass(slots=True, frozen=True)
class Settings:
    optimizer: GeneticParams = dataclasses.field(default_factory=GeneticParams)
    corpus: CorpusSettings = dataclasses.field(default_factory=CorpusSettings)
    objective: ObjectiveFunction = dataclasses.field(default_factory=ObjectiveFunction)
    log_generations: bool = False

    @classmethod
    def from_dict(cls, data: dict) -> "Settings":
        for table in ("optimizer", "corpus", "weights", "objective"):
            if not isinstance(data.get(table, {}), dict):
                raise ValueError(f"[{table}] must be a table")

        objective_table = data.get("objective", {})
        return cls(
            optimizer=GeneticParams.from_dict(data.get("optimizer", {})),
            corpus=CorpusSettings.from_dict(data.get("corpus", {})),
            objective=ObjectiveFunction.from_dict(
                data.get("weights", {}),
                finger_load_weight=float(objective_table.get("finger_load_weight", 0.0)),
            ),
            log_generations=bool(data.get("log_generations", False)),
        )

    def with_optimizer(self, **overrides: Any) -> "Settings":
        '''copy with some optimizer parameters replaced; None values are ignored'''
        overrides = {name: value for name, value in overrides.items() if value is not None}
        if not overrides:
            return self
        return dataclasses.replace(self, optimizer=dataclasses.replace(self.optimizer, **overrides))


def load_settings(config_path: Optional[Path] = None) -> Settings:
    '''
    read settings from config_path. Without an explicit path, a missing default
    config means built-in defaults; an explicit path must exist.

    Raises OSError if the file cannot be read and ValueError if it is malformed.
    '''
    explicit = config_path is not None
    config_path = Path(config_path) if explicit else DEFAULT_CONFIG_PATH

    if not config_path.exists():
        if explicit:
            raise FileNotFoundError(f"config file not found at {config_path}")
        logger.debug("no config file at %s, using defaults", config_path)
        return Settings()

    with config_path.open("rb") as fh:
        try:
            data = tomllib.load(fh)
        except tomllib.TOMLDecodeError as exc:
            raise ValueError(f"malformed config in {config_path}: {exc}") from exc

    return Settings.from_dict(data)
