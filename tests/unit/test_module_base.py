"""Tests for the runner base classes."""

from pathlib import Path
import sys

ROOT = Path(__file__).resolve().parents[2]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

import pytest

from dupseeker.exceptions import FileFormatError
from dupseeker.modules.base import ModuleBase, ModuleResult


class _EchoModule(ModuleBase):
    def validate_inputs(self, **kwargs):
        self.validate_input_file(kwargs["input_file"])
        return True

    def execute(self, **kwargs):
        result = ModuleResult(success=True, module_name=self.name)
        result.add_output("copy", kwargs["input_file"])
        result.add_metric("size", Path(kwargs["input_file"]).stat().st_size)
        result.add_warning("just checking")
        return result


class TestModuleResult:
    """Test the result container."""

    def test_add_helpers(self):
        result = ModuleResult(success=True, module_name="m")
        result.add_output("alignments", "out.bam")
        result.add_metric("records_in", 3)
        result.add_warning("careful")
        assert result.output_files == {"alignments": Path("out.bam")}
        assert result.metrics == {"records_in": 3}
        assert result.warnings == ["careful"]

    def test_summary_lists_outputs(self):
        result = ModuleResult(success=True, module_name="mark_duplicates", execution_time=1.5)
        result.add_output("metrics", "m.txt")
        assert result.summary() == "mark_duplicates finished in 1.50s [metrics=m.txt]"


class TestModuleBase:
    """Test the validate/execute/run lifecycle."""

    def test_run_success(self, tmp_path):
        source = tmp_path / "in.txt"
        source.write_text("abc")
        result = _EchoModule().run(input_file=source)
        assert result.success
        assert result.module_name == "_EchoModule"
        assert result.metrics["size"] == 3
        assert result.execution_time >= 0

    def test_run_captures_validation_errors(self, tmp_path):
        result = _EchoModule(name="echo").run(input_file=tmp_path / "missing.txt")
        assert not result.success
        assert "not found" in result.error_message
        assert result.module_name == "echo"

    def test_validate_input_file_rejects_directories(self, tmp_path):
        with pytest.raises(ValueError):
            _EchoModule().validate_input_file(tmp_path)

    def test_validate_alignment_input_checks_suffix(self, tmp_path):
        text = tmp_path / "reads.txt"
        text.write_text("x")
        with pytest.raises(FileFormatError):
            _EchoModule().validate_alignment_input(text)

        bam = tmp_path / "reads.BAM"
        bam.write_bytes(b"x")
        assert _EchoModule().validate_alignment_input(bam) == bam

    def test_failure_records_error_type(self, tmp_path):
        result = _EchoModule().run(input_file=tmp_path / "missing.txt")
        assert result.error_type == "FileNotFoundError"
        assert "FileNotFoundError" in result.summary()

    def test_validate_output_path_creates_parent(self, tmp_path):
        target = _EchoModule().validate_output_path(tmp_path / "a" / "b" / "out.bam")
        assert target.parent.is_dir()
