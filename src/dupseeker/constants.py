"""Unified constants for DupSeeker.

Defaults shared by the configuration layer, the engine and the CLI.
"""

# ================== SAM flag bits ==================
FLAG_PAIRED: int = 0x1
FLAG_UNMAPPED: int = 0x4
FLAG_MATE_UNMAPPED: int = 0x8
FLAG_REVERSE: int = 0x10
FLAG_MATE_REVERSE: int = 0x20
FLAG_READ1: int = 0x40
FLAG_READ2: int = 0x80
FLAG_SECONDARY: int = 0x100
FLAG_QCFAIL: int = 0x200
FLAG_DUPLICATE: int = 0x400
FLAG_SUPPLEMENTARY: int = 0x800


# ================== Duplicate marking ==================
# Library assigned to reads without a read group or without an LB entry
UNKNOWN_LIBRARY: str = "Unknown Library"

# Maximum pixel distance between two clusters to call them optical duplicates
OPTICAL_DUPLICATE_PIXEL_DISTANCE: int = 100

# Duplicate sets larger than this skip optical clustering
MAX_OPTICAL_DUPLICATE_SET_SIZE: int = 300000

# Bases below this quality do not contribute to SUM_OF_BASE_QUALITIES
MIN_BASE_QUALITY_FOR_SCORE: int = 15

# Per-read ceiling for quality scores (half of a signed 16-bit max)
MAX_READ_SCORE: int = 32767 // 2

SCORING_STRATEGIES = (
    "SUM_OF_BASE_QUALITIES",
    "TOTAL_MAPPED_REFERENCE_LENGTH",
    "RANDOM",
)


# ================== Histogram labels ==================
HISTOGRAM_BIN_LABEL: str = "set_size"
ALL_SETS_LABEL: str = "all_sets"
NON_OPTICAL_SETS_LABEL: str = "non_optical_sets"
OPTICAL_SETS_LABEL: str = "optical_sets"


# ================== Library size estimation ==================
# Bisection iterations used to solve the Lander-Waterman equation
LIBRARY_SIZE_BISECTION_STEPS: int = 40
