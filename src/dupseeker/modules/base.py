"""
Runner lifecycle shared by DupSeeker's file-level modules.

A runner checks its alignment inputs, does its work in ``execute`` and reports
through a ``ModuleResult``. ``run`` never raises: failures are folded into the
result so the CLI can decide on the exit code.
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Union

from dupseeker.exceptions import DupSeekerError, FileFormatError
from dupseeker.utils.logging import get_logger

ALIGNMENT_SUFFIXES = (".sam", ".bam", ".cram")


@dataclass
class ModuleResult:
    """Outputs, counters and warnings of one runner invocation."""

    success: bool
    module_name: str
    output_files: dict[str, Path] = field(default_factory=dict)
    metrics: dict[str, Any] = field(default_factory=dict)
    warnings: list[str] = field(default_factory=list)
    error_message: Optional[str] = None
    error_type: Optional[str] = None
    execution_time: float = 0.0

    def add_output(self, key: str, path: Union[str, Path]) -> None:
        self.output_files[key] = Path(path)

    def add_metric(self, key: str, value: Any) -> None:
        self.metrics[key] = value

    def add_warning(self, message: str) -> None:
        self.warnings.append(message)

    def summary(self) -> str:
        """One-line status used in log output."""
        if not self.success:
            kind = f"{self.error_type}: " if self.error_type else ""
            return f"{self.module_name} failed ({kind}{self.error_message})"
        outputs = ", ".join(f"{key}={path}" for key, path in self.output_files.items())
        return f"{self.module_name} finished in {self.execution_time:.2f}s [{outputs}]"


class ModuleBase(ABC):
    """Base class for runners that turn alignment files into outputs."""

    def __init__(
        self,
        name: Optional[str] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.name = name or self.__class__.__name__
        self.logger = logger or get_logger(self.name)
        self._start_time: Optional[float] = None

    def validate_input_file(self, file_path: Union[str, Path], file_type: str = "input") -> Path:
        """
        Check that ``file_path`` is an existing regular file.

        Raises:
            FileNotFoundError: If file doesn't exist
            ValueError: If the path is not a regular file
        """
        path = Path(file_path)
        if not path.exists():
            raise FileNotFoundError(f"{file_type} file not found: {path}")
        if not path.is_file():
            raise ValueError(f"{file_type} is not a file: {path}")
        if path.stat().st_size == 0:
            self.logger.warning(f"{file_type} file is empty: {path}")
        return path

    def validate_alignment_input(self, file_path: Union[str, Path]) -> Path:
        """Like ``validate_input_file`` but also require a SAM/BAM/CRAM suffix.

        Raises:
            FileFormatError: The suffix is not one pysam can open by content.
        """
        path = self.validate_input_file(file_path, "Alignment")
        if path.suffix.lower() not in ALIGNMENT_SUFFIXES:
            raise FileFormatError(
                f"Unsupported alignment file '{path.name}'; "
                f"expected one of {', '.join(ALIGNMENT_SUFFIXES)}"
            )
        return path

    def validate_output_path(self, output_path: Union[str, Path]) -> Path:
        """Create the parent directory of an output file."""
        path = Path(output_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        return path

    @abstractmethod
    def validate_inputs(self, **kwargs: Any) -> bool:
        """
        Check everything ``execute`` needs before any output is written.

        Raises:
            ValueError, FileNotFoundError or DupSeekerError on invalid input
        """

    @abstractmethod
    def execute(self, **kwargs: Any) -> ModuleResult:
        """Do the work and return a successful result."""

    def run(self, **kwargs: Any) -> ModuleResult:
        """Validate, execute and time the runner; errors end up in the result."""
        self._start_time = time.time()
        result = ModuleResult(success=False, module_name=self.name)

        try:
            self.logger.info(f"Starting {self.name}")
            self.validate_inputs(**kwargs)
            result = self.execute(**kwargs)
            result.module_name = self.name
        except DupSeekerError as e:
            result.error_message = str(e)
            result.error_type = type(e).__name__
            self.logger.error(f"{self.name} failed: {e}")
        except Exception as e:
            result.error_message = str(e)
            result.error_type = type(e).__name__
            self.logger.error(f"{self.name} failed with error: {e}", exc_info=True)

        result.execution_time = time.time() - self._start_time
        if result.success:
            self.logger.info(result.summary())
            for warning in result.warnings:
                self.logger.warning(warning)
        return result
