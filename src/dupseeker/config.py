"""Configuration management for DupSeeker."""

from __future__ import annotations

from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Optional, Dict, Any
import yaml
from dupseeker.constants import (
    MAX_OPTICAL_DUPLICATE_SET_SIZE,
    MIN_BASE_QUALITY_FOR_SCORE,
    OPTICAL_DUPLICATE_PIXEL_DISTANCE,
    SCORING_STRATEGIES,
)
from dupseeker.exceptions import ConfigurationError


def _require_type(name: str, value: Any, expected: type) -> None:
    # bool is a subclass of int but is never a valid count
    if not isinstance(value, expected) or (expected is int and isinstance(value, bool)):
        raise ConfigurationError(
            f"{name} must be {expected.__name__}, got {type(value).__name__} ({value!r})"
        )


@dataclass
class RuntimeConfig:
    """Runtime configuration."""

    log_level: str = "WARNING"
    log_file: Optional[Path] = None
    # Enable tqdm progress while reading records
    enable_progress: bool = True


@dataclass
class PerformanceConfig:
    """Performance-related configuration."""

    # Worker threads for per-window selection and optical clustering
    threads: int = 1


@dataclass
class DuplicateConfig:
    """Duplicate marking parameters."""

    optical_pixel_distance: int = OPTICAL_DUPLICATE_PIXEL_DISTANCE
    # None selects the built-in ':'-separated tile/x/y parser
    read_name_regex: Optional[str] = None
    detect_optical: bool = True
    max_optical_set_size: int = MAX_OPTICAL_DUPLICATE_SET_SIZE
    scoring_strategy: str = "SUM_OF_BASE_QUALITIES"
    min_base_quality: int = MIN_BASE_QUALITY_FOR_SCORE
    # Mark every fragment whose 5' end coincides with an end of a mapped pair
    fragments_yield_to_pairs: bool = False
    # Drop duplicates from the output instead of flagging them
    remove_duplicates: bool = False

    def validate(self) -> None:
        for name in ("optical_pixel_distance", "max_optical_set_size", "min_base_quality"):
            _require_type(name, getattr(self, name), int)
        for name in ("detect_optical", "fragments_yield_to_pairs", "remove_duplicates"):
            _require_type(name, getattr(self, name), bool)
        _require_type("scoring_strategy", self.scoring_strategy, str)
        if self.read_name_regex is not None:
            _require_type("read_name_regex", self.read_name_regex, str)

        if self.optical_pixel_distance < 0:
            raise ConfigurationError("optical_pixel_distance must be >= 0")
        if self.max_optical_set_size < 1:
            raise ConfigurationError("max_optical_set_size must be >= 1")
        if self.min_base_quality < 0:
            raise ConfigurationError("min_base_quality must be >= 0")
        if str(self.scoring_strategy).upper() not in SCORING_STRATEGIES:
            raise ConfigurationError(
                f"Unknown scoring_strategy '{self.scoring_strategy}'. "
                f"Choose from: {', '.join(SCORING_STRATEGIES)}"
            )


@dataclass
class Config:
    """Main configuration class."""

    # Required parameters (set via CLI or config file)
    input_file: Optional[Path] = None
    output_file: Optional[Path] = None
    metrics_file: Optional[Path] = None

    # Sub-configurations
    duplicates: DuplicateConfig = field(default_factory=DuplicateConfig)
    runtime: RuntimeConfig = field(default_factory=RuntimeConfig)
    performance: PerformanceConfig = field(default_factory=PerformanceConfig)

    # Convenience properties
    @property
    def threads(self) -> int:
        return self.performance.threads

    @threads.setter
    def threads(self, value: int):
        self.performance.threads = value

    def validate_parameters(self) -> None:
        """Validate numeric/option values only (no file checks)."""
        _require_type("threads", self.performance.threads, int)
        if self.performance.threads < 1:
            raise ConfigurationError("Threads must be >= 1")
        self.duplicates.validate()

    def validate(self) -> None:
        """Validate configuration."""
        if not self.input_file:
            raise ConfigurationError("Input alignment file is required")
        if not self.output_file:
            raise ConfigurationError("Output alignment file is required")
        if not self.metrics_file:
            raise ConfigurationError("Metrics file is required")
        if not Path(self.input_file).exists():
            raise ConfigurationError(f"Input file not found: {self.input_file}")
        if Path(self.input_file).resolve() == Path(self.output_file).resolve():
            raise ConfigurationError("Output file must differ from the input file")
        self.validate_parameters()

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""

        def path_to_str(obj):
            if isinstance(obj, Path):
                return str(obj)
            elif isinstance(obj, dict):
                return {k: path_to_str(v) for k, v in obj.items()}
            elif isinstance(obj, (list, tuple)):
                return [path_to_str(item) for item in obj]
            return obj

        return path_to_str(asdict(self))


def load_config(path: Path) -> Config:
    """Load configuration from YAML file."""
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration file must contain a mapping: {path}")

    def build_config(data: Dict[str, Any]) -> Config:
        cfg = Config()

        # Direct attributes
        for key in ("input_file", "output_file", "metrics_file"):
            if data.get(key) is not None:
                setattr(cfg, key, Path(data[key]))
        if "threads" in data and data["threads"] is not None:
            cfg.performance.threads = data["threads"]

        sections = {
            "duplicates": cfg.duplicates,
            "runtime": cfg.runtime,
            "performance": cfg.performance,
        }
        unknown = [key for key in data if key not in sections and not hasattr(cfg, key)]
        if unknown:
            raise ConfigurationError("Unsupported config option(s): " + ", ".join(unknown))

        for section_name, section in sections.items():
            values = data.get(section_name) or {}
            if not isinstance(values, dict):
                raise ConfigurationError(f"Section '{section_name}' must be a mapping")
            for key, value in values.items():
                if not hasattr(section, key):
                    raise ConfigurationError(f"Unsupported option '{section_name}.{key}'")
                if key == "log_file" and value:
                    value = Path(value)
                setattr(section, key, value)

        return cfg

    return build_config(data)


def save_config(cfg: Config, path: Path) -> None:
    """Save configuration to YAML file."""
    data = cfg.to_dict()
    with open(path, "w", encoding="utf-8") as f:
        yaml.dump(data, f, default_flow_style=False, sort_keys=False)
