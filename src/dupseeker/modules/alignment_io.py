"""Conversion between pysam alignments and DupSeeker records.

Reading turns each ``pysam.AlignedSegment`` into an immutable
``AlignmentRecord``. Writing streams the input file a second time and applies
the marked flags by position, so segments never have to be held in memory.
"""

from __future__ import annotations

import logging
import shlex
import sys
from itertools import takewhile
from pathlib import Path
from typing import AbstractSet, Dict, Iterator, Optional

import pysam

from dupseeker.__version__ import __version__
from dupseeker.constants import FLAG_DUPLICATE, UNKNOWN_LIBRARY
from dupseeker.core.records import AlignmentRecord
from dupseeker.exceptions import FileFormatError
from dupseeker.utils.logging import LogTemplates, get_logger

# CIGAR operations that clip bases (soft, hard)
CLIP_OPS = {4, 5}


def _open(path: Path, mode: str = "r", **kwargs) -> pysam.AlignmentFile:
    try:
        return pysam.AlignmentFile(str(path), mode, **kwargs)
    except (OSError, ValueError) as exc:
        raise FileFormatError(f"Cannot open alignment file {path}: {exc}") from exc


def output_mode(path: Path) -> str:
    """pysam write mode from the output suffix (BAM unless .sam)."""
    return "w" if Path(path).suffix.lower() == ".sam" else "wb"


def read_group_libraries(header: pysam.AlignmentHeader) -> Dict[str, str]:
    """Map read group IDs to their LB (library) values."""
    libraries: Dict[str, str] = {}
    for read_group in header.to_dict().get("RG", []):
        rg_id = read_group.get("ID")
        if rg_id is not None:
            libraries[rg_id] = read_group.get("LB") or UNKNOWN_LIBRARY
    return libraries


def _clip_lengths(segment: pysam.AlignedSegment) -> tuple[int, int]:
    cigar = segment.cigartuples or []
    leading = sum(length for _, length in takewhile(lambda op: op[0] in CLIP_OPS, cigar))
    trailing = sum(
        length for _, length in takewhile(lambda op: op[0] in CLIP_OPS, reversed(cigar))
    )
    return leading, trailing


def segment_to_record(
    segment: pysam.AlignedSegment, libraries: Optional[Dict[str, str]] = None
) -> AlignmentRecord:
    """Convert one pysam segment to an ``AlignmentRecord``."""
    libraries = libraries or {}
    read_group = segment.get_tag("RG") if segment.has_tag("RG") else None
    leading, trailing = _clip_lengths(segment)
    quals = segment.query_qualities

    reference_start = segment.reference_start
    mate_start = segment.next_reference_start
    return AlignmentRecord(
        name=segment.query_name,
        flag=segment.flag,
        reference_index=segment.reference_id,
        alignment_start=reference_start + 1 if reference_start >= 0 else 0,
        # pysam's 0-based exclusive end equals the 1-based inclusive end
        alignment_end=segment.reference_end,
        leading_clip=leading,
        trailing_clip=trailing,
        mate_reference_index=segment.next_reference_id,
        mate_alignment_start=mate_start + 1 if mate_start >= 0 else 0,
        read_group=read_group,
        library=libraries.get(read_group, UNKNOWN_LIBRARY),
        base_qualities=tuple(quals) if quals is not None else (),
    )


def read_alignments(
    path: Path, logger: Optional[logging.Logger] = None
) -> Iterator[AlignmentRecord]:
    """Lazily yield records from a SAM/BAM/CRAM file, in file order."""
    logger = logger or get_logger("alignment_io")
    count = 0
    with _open(path, "r") as infile:
        libraries = read_group_libraries(infile.header)
        for segment in infile.fetch(until_eof=True):
            count += 1
            yield segment_to_record(segment, libraries)
    logger.info(LogTemplates.RECORDS_LOADED.format(count=count, path=path))


def _program_header(header: pysam.AlignmentHeader) -> dict:
    data = header.to_dict()
    programs = data.setdefault("PG", [])
    existing = {pg.get("ID") for pg in programs}
    pg_id = "dupseeker"
    suffix = 1
    while pg_id in existing:
        pg_id = f"dupseeker.{suffix}"
        suffix += 1
    entry = {"ID": pg_id, "PN": "dupseeker", "VN": __version__, "CL": shlex.join(sys.argv)}
    if programs:
        entry["PP"] = programs[-1].get("ID")
    programs.append(entry)
    return data


def write_alignments(
    input_path: Path,
    output_path: Path,
    duplicate_ordinals: AbstractSet[int],
    expected_records: int,
    remove_duplicates: bool = False,
    logger: Optional[logging.Logger] = None,
) -> int:
    """Copy ``input_path`` to ``output_path`` with duplicate flags applied.

    ``duplicate_ordinals`` holds the 0-based file positions of duplicate
    records; every other record has its duplicate bit cleared.

    Returns:
        Number of records written.

    Raises:
        FileFormatError: The input no longer holds ``expected_records`` records.
    """
    logger = logger or get_logger("alignment_io")
    written = 0
    seen = 0
    with _open(input_path, "r") as infile:
        header = _program_header(infile.header)
        with _open(output_path, output_mode(output_path), header=header) as outfile:
            for ordinal, segment in enumerate(infile.fetch(until_eof=True)):
                seen += 1
                if seen > expected_records:
                    break
                duplicate = ordinal in duplicate_ordinals
                if remove_duplicates and duplicate:
                    continue
                if duplicate:
                    segment.flag |= FLAG_DUPLICATE
                else:
                    segment.flag &= ~FLAG_DUPLICATE
                outfile.write(segment)
                written += 1

    if seen != expected_records:
        raise FileFormatError(
            f"{input_path} changed while marking: expected {expected_records} records, "
            f"found {'more' if seen > expected_records else seen}"
        )
    logger.info(LogTemplates.RECORDS_WRITTEN.format(count=written, path=output_path))
    return written
