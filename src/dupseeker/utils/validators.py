"""Validation utilities for DupSeeker."""

from __future__ import annotations

import importlib
from typing import List

# Import name -> distribution name
REQUIRED_MODULES = {
    "pysam": "pysam",
    "pandas": "pandas",
    "numpy": "numpy",
    "networkx": "networkx",
    "yaml": "PyYAML",
    "click": "click",
    "tqdm": "tqdm",
}


def validate_installation(full_check: bool = False) -> List[str]:
    """
    Validate DupSeeker installation and dependencies.

    Args:
        full_check: If True, also run the engine on a tiny in-memory input

    Returns:
        List of validation issues (empty if all good)
    """
    issues = []

    for module, dist in REQUIRED_MODULES.items():
        try:
            importlib.import_module(module)
        except ImportError:
            issues.append(f"Missing Python module: {module} (install '{dist}')")

    if full_check and not issues:
        issues.extend(_smoke_test_engine())

    return issues


def _smoke_test_engine() -> List[str]:
    """Mark two identical fragments and check one is flagged."""
    from dupseeker.core.engine import mark_duplicates
    from dupseeker.core.records import AlignmentRecord

    records = [
        AlignmentRecord(name=f"r{i}", flag=0, reference_index=0, alignment_start=100)
        for i in range(2)
    ]
    result = mark_duplicates(records)
    flagged = result.duplicate_count
    if flagged != 1 or result.metrics.unpaired_read_duplicates != 1:
        return [f"Engine smoke test failed: expected 1 duplicate, got {flagged}"]
    return []
