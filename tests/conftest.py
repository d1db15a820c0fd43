"""Pytest configuration for DupSeeker tests."""

import logging
import sys
from pathlib import Path

import pytest

# Add src directory to Python path
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from dupseeker.constants import (  # noqa: E402
    FLAG_MATE_REVERSE,
    FLAG_PAIRED,
    FLAG_READ1,
    FLAG_READ2,
    FLAG_REVERSE,
)
from dupseeker.core.records import AlignmentRecord  # noqa: E402


def make_fragment(name, start, reference_index=0, reverse=False, quals=(30,) * 10, **kwargs):
    """Unpaired mapped read covering ``len(quals)`` reference bases from ``start``."""
    flag = kwargs.pop("flag", 0) | (FLAG_REVERSE if reverse else 0)
    return AlignmentRecord(
        name=name,
        flag=flag,
        reference_index=reference_index,
        alignment_start=start,
        alignment_end=start + len(quals) - 1,
        base_qualities=tuple(quals),
        **kwargs,
    )


def make_pair(
    name,
    start1,
    start2,
    reference_index=0,
    mate_reference_index=None,
    quals=(30,) * 10,
    **kwargs,
):
    """Forward read 1 at ``start1`` and reverse read 2 at ``start2``."""
    mate_reference_index = reference_index if mate_reference_index is None else mate_reference_index
    end = len(quals) - 1
    read1 = AlignmentRecord(
        name=name,
        flag=FLAG_PAIRED | FLAG_READ1 | FLAG_MATE_REVERSE,
        reference_index=reference_index,
        alignment_start=start1,
        alignment_end=start1 + end,
        mate_reference_index=mate_reference_index,
        mate_alignment_start=start2,
        base_qualities=tuple(quals),
        **kwargs,
    )
    read2 = AlignmentRecord(
        name=name,
        flag=FLAG_PAIRED | FLAG_READ2 | FLAG_REVERSE,
        reference_index=mate_reference_index,
        alignment_start=start2,
        alignment_end=start2 + end,
        mate_reference_index=reference_index,
        mate_alignment_start=start1,
        base_qualities=tuple(quals),
        **kwargs,
    )
    return [read1, read2]


@pytest.fixture
def fragment_factory():
    return make_fragment


@pytest.fixture
def pair_factory():
    return make_pair


@pytest.fixture(autouse=True)
def reset_logging_after_test():
    """Reset dupseeker logger state after each test.

    This prevents test pollution from tests that call setup_logging(),
    which sets propagate=False and breaks caplog in subsequent tests.
    """
    yield
    app_logger = logging.getLogger("dupseeker")
    for handler in list(app_logger.handlers):
        app_logger.removeHandler(handler)
    app_logger.setLevel(logging.NOTSET)
    app_logger.propagate = True
