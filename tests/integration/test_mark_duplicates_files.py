"""End-to-end tests on real SAM/BAM files written with pysam."""

from pathlib import Path
import sys

import pysam
import pytest
from click.testing import CliRunner

ROOT = Path(__file__).resolve().parents[2]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from dupseeker.cli import cli
from dupseeker.config import Config
from dupseeker.modules.alignment_io import read_alignments, segment_to_record, write_alignments
from dupseeker.modules.mark_duplicates import MarkDuplicatesModule
from dupseeker.modules.metrics_writer import read_metrics
from dupseeker.exceptions import FileFormatError

pytestmark = pytest.mark.integration

HEADER = {
    "HD": {"VN": "1.6", "SO": "unsorted"},
    "SQ": [{"SN": "chr1", "LN": 10000}, {"SN": "chr2", "LN": 10000}],
    "RG": [{"ID": "rg1", "LB": "lib1", "SM": "sample1"}],
}

READ_LENGTH = 20


def _segment(header, name, flag, ref, start, mate_ref=-1, mate_start=-1, cigar=None, qual=30):
    segment = pysam.AlignedSegment(header)
    segment.query_name = name
    segment.flag = flag
    segment.reference_id = ref
    segment.reference_start = start
    segment.mapping_quality = 60
    segment.cigarstring = cigar or f"{READ_LENGTH}M"
    segment.query_sequence = "A" * READ_LENGTH
    segment.query_qualities = pysam.qualitystring_to_array(chr(qual + 33) * READ_LENGTH)
    segment.next_reference_id = mate_ref
    segment.next_reference_start = mate_start
    segment.set_tag("RG", "rg1")
    return segment


def _pair(header, name, start1, start2, ref=0, qual=30):
    return [
        _segment(header, name, 0x1 | 0x2 | 0x20 | 0x40, ref, start1, ref, start2, qual=qual),
        _segment(header, name, 0x1 | 0x2 | 0x10 | 0x80, ref, start2, ref, start1, qual=qual),
    ]


@pytest.fixture
def alignment_file(tmp_path):
    """Two optical duplicate pairs, one PCR duplicate pair and fragments."""
    path = tmp_path / "input.sam"
    with pysam.AlignmentFile(str(path), "w", header=HEADER) as out:
        header = out.header
        segments = [
            *_pair(header, "M:1:FC:1:1101:1000:1000", 100, 400, qual=35),
            *_pair(header, "M:1:FC:1:1101:1010:1005", 100, 400),
            *_pair(header, "M:1:FC:1:2202:1000:1000", 100, 400),
            *_pair(header, "M:1:FC:1:1101:5000:5000", 700, 900, ref=1),
            _segment(header, "frag_a", 0, 0, 2000),
            # Soft clip moves the unclipped start back to 2000
            _segment(header, "frag_b", 0, 0, 2003, cigar=f"3S{READ_LENGTH - 3}M", qual=20),
            _segment(header, "unmapped", 0x4, -1, -1),
        ]
        for segment in segments:
            out.write(segment)
    return path


class TestAlignmentIO:
    """Test conversion between pysam and records."""

    def test_read_alignments(self, alignment_file):
        records = list(read_alignments(alignment_file))
        assert len(records) == 11
        first = records[0]
        assert first.alignment_start == 101
        assert first.alignment_end == 120
        assert first.library == "lib1"
        assert first.read_group == "rg1"
        assert len(first.base_qualities) == READ_LENGTH

    def test_soft_clip_lengths(self, alignment_file):
        records = {r.name: r for r in read_alignments(alignment_file)}
        assert records["frag_b"].leading_clip == 3
        assert records["frag_b"].unclipped_start == records["frag_a"].unclipped_start

    def test_segment_without_read_group(self):
        header = pysam.AlignmentHeader.from_dict({"SQ": [{"SN": "chr1", "LN": 100}]})
        segment = pysam.AlignedSegment(header)
        segment.query_name = "r"
        segment.flag = 0
        segment.reference_id = 0
        segment.reference_start = 9
        segment.cigarstring = "5M"
        segment.query_sequence = "ACGTA"
        record = segment_to_record(segment)
        assert record.library == "Unknown Library"
        assert record.alignment_start == 10
        assert record.base_qualities == ()

    def test_write_rejects_misaligned_records(self, alignment_file, tmp_path):
        with pytest.raises(FileFormatError):
            write_alignments(alignment_file, tmp_path / "out.bam", frozenset(), expected_records=3)


class TestMarkDuplicatesModule:
    """Test the file-level runner."""

    def _run(self, alignment_file, tmp_path, **dup_overrides):
        config = Config()
        config.runtime.enable_progress = False
        for key, value in dup_overrides.items():
            setattr(config.duplicates, key, value)
        return MarkDuplicatesModule(config=config).run(
            input_file=alignment_file,
            output_file=tmp_path / "marked.bam",
            metrics_file=tmp_path / "metrics.txt",
        )

    def test_flags_are_written(self, alignment_file, tmp_path):
        result = self._run(alignment_file, tmp_path)
        assert result.success, result.error_message

        with pysam.AlignmentFile(str(tmp_path / "marked.bam"), "rb") as marked:
            segments = list(marked.fetch(until_eof=True))
            programs = marked.header.to_dict().get("PG", [])
        assert len(segments) == 11
        duplicates = {s.query_name for s in segments if s.is_duplicate}
        assert duplicates == {"M:1:FC:1:1101:1010:1005", "M:1:FC:1:2202:1000:1000", "frag_b"}
        assert sum(1 for s in segments if s.is_duplicate) == 5
        assert any(pg.get("PN") == "dupseeker" for pg in programs)

    def test_metrics_file(self, alignment_file, tmp_path):
        self._run(alignment_file, tmp_path)
        metrics_df, histogram_df = read_metrics(tmp_path / "metrics.txt")
        row = metrics_df.iloc[0]
        assert row["LIBRARY"] == "lib1"
        assert row["READ_PAIRS_EXAMINED"] == 4
        assert row["UNPAIRED_READS_EXAMINED"] == 2
        assert row["UNMAPPED_READS"] == 1
        assert row["READ_PAIR_DUPLICATES"] == 2
        assert row["READ_PAIR_OPTICAL_DUPLICATES"] == 1
        assert row["UNPAIRED_READ_DUPLICATES"] == 1
        assert row["PERCENT_DUPLICATION"] == pytest.approx(5 / 10)
        all_sets = dict(zip(histogram_df["set_size"], histogram_df["all_sets"]))
        assert all_sets == {2.0: 1.0, 3.0: 1.0}

    def test_remove_duplicates(self, alignment_file, tmp_path):
        result = self._run(alignment_file, tmp_path, remove_duplicates=True)
        assert result.metrics["records_out"] == 6
        with pysam.AlignmentFile(str(tmp_path / "marked.bam"), "rb") as marked:
            assert not any(s.is_duplicate for s in marked.fetch(until_eof=True))

    def test_missing_input_fails(self, tmp_path):
        result = MarkDuplicatesModule().run(
            input_file=tmp_path / "nope.bam",
            output_file=tmp_path / "out.bam",
            metrics_file=tmp_path / "m.txt",
        )
        assert not result.success


class TestCLIIntegration:
    """Run the CLI end to end."""

    def test_cli_run(self, alignment_file, tmp_path):
        runner = CliRunner()
        output = tmp_path / "cli_out.sam"
        metrics = tmp_path / "cli_metrics.txt"
        result = runner.invoke(
            cli,
            ["-i", str(alignment_file), "-o", str(output), "-m", str(metrics), "-t", "2"],
        )
        assert result.exit_code == 0, result.output
        with pysam.AlignmentFile(str(output), "r") as marked:
            flagged = [s.query_name for s in marked.fetch(until_eof=True) if s.is_duplicate]
        assert len(flagged) == 5
        assert metrics.exists()

    def test_cli_no_optical(self, alignment_file, tmp_path):
        runner = CliRunner()
        metrics = tmp_path / "m.txt"
        result = runner.invoke(
            cli,
            [
                "-i", str(alignment_file),
                "-o", str(tmp_path / "o.bam"),
                "-m", str(metrics),
                "--no-optical",
            ],
        )
        assert result.exit_code == 0, result.output
        metrics_df, _ = read_metrics(metrics)
        assert metrics_df.iloc[0]["READ_PAIR_OPTICAL_DUPLICATES"] == 0
