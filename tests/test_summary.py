import io
import logging

from label_sync.summary import RunSummary, report_failure
from label_sync.table import FieldAssignment


def test_summary_written_to_step_summary_file(tmp_path):
    path = tmp_path / "summary.md"
    path.write_text("previous step\n")
    summary = RunSummary(str(path))
    summary.add_link("Issue #12", "https://github.com/my-org/my-repo/issues/12")
    summary.field_set(FieldAssignment("Status", "Triage"))
    summary.write()

    assert path.read_text() == (
        "previous step\n"
        "[Issue #12](https://github.com/my-org/my-repo/issues/12)\n\n"
        'Setting field "Status" to "Triage"\n'
    )


def test_summary_logged_without_step_summary_file(caplog):
    summary = RunSummary()
    summary.add_raw("No action taken.")
    with caplog.at_level(logging.INFO):
        summary.write()
    assert "No action taken." in caplog.text


def test_report_failure_emits_error_command():
    stream = io.StringIO()
    report_failure("Field Severity not found\nin project 100%", stream=stream)
    assert stream.getvalue() == "::error::Field Severity not found%0Ain project 100%25\n"
