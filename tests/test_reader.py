"""Tests for the crontab reader."""

import io
import subprocess
from pathlib import Path

import pytest

from cronkit.crontab import CrontabReader, EntryType, Reader
from cronkit.errors import ErrorKind, SourceReadError


class TestParseLine:
    """Tests for line classification."""

    @pytest.mark.parametrize(
        ("line", "expected"),
        [
            ("", EntryType.EMPTY),
            ("   \t", EntryType.EMPTY),
            ("# backups", EntryType.COMMENT),
            ("   # indented", EntryType.COMMENT),
            ("SHELL=/bin/bash", EntryType.ENV_VAR),
            ("MAILTO=", EntryType.ENV_VAR),
            ("_PATH2=/usr/bin", EntryType.ENV_VAR),
            ("0 * * *", EntryType.INVALID),
            ("0 * * * *", EntryType.INVALID),
            ("@daily", EntryType.INVALID),
            ("0 * * * * /bin/job", EntryType.JOB),
        ],
    )
    def test_classification(self, reader: CrontabReader, line: str, expected: EntryType) -> None:
        """Test each kind of line."""
        assert reader.parse_line(line, 1).type == expected

    def test_lowercase_assignment_is_not_env_var(self, reader: CrontabReader) -> None:
        """Test env var names must be uppercase."""
        assert reader.parse_line("path=/bin", 1).type == EntryType.INVALID

    def test_job_fields(self, reader: CrontabReader) -> None:
        """Test expression, command and inline comment are split out."""
        entry = reader.parse_line("*/5  9-17 * * 1-5   /usr/bin/poll --fast  # weekday poll", 4)

        job = entry.job
        assert job is not None
        assert job.line_number == 4
        assert job.expression == "*/5 9-17 * * 1-5"
        assert job.command == "/usr/bin/poll --fast"
        assert job.comment == "weekday poll"
        assert job.valid
        assert job.error == ""
        assert entry.raw.startswith("*/5")

    def test_alias_job(self, reader: CrontabReader) -> None:
        """Test an alias takes the place of the five fields."""
        job = reader.parse_line("@hourly /usr/bin/sync > /dev/null", 2).job

        assert job is not None
        assert job.expression == "@hourly"
        assert job.command == "/usr/bin/sync > /dev/null"
        assert job.valid

    def test_reboot_is_an_invalid_job(self, reader: CrontabReader) -> None:
        """Test @reboot is recognized but rejected."""
        entry = reader.parse_line("@reboot /usr/bin/start", 1)

        assert entry.type == EntryType.JOB
        assert entry.job is not None
        assert not entry.job.valid
        assert "unrecognized alias" in entry.job.error

    def test_out_of_range_job(self, reader: CrontabReader) -> None:
        """Test a job with a bad expression keeps the parser's message."""
        job = reader.parse_line("0 25 * * * /bin/job", 1).job

        assert job is not None
        assert not job.valid
        assert job.error.startswith("value out of range")

    def test_day_names(self, reader: CrontabReader) -> None:
        """Test names are accepted in job expressions."""
        job = reader.parse_line("0 8 * JAN-MAR MON-FRI /bin/report", 1).job

        assert job is not None
        assert job.valid


class TestParseSources:
    """Tests for files, text and streams."""

    CONTENT = (
        "# header\n"
        "MAILTO=ops@example.com\n"
        "\n"
        "0 2 * * * /usr/bin/backup > /var/log/backup.log 2>&1\n"
        "not a job\n"
        "@weekly /usr/bin/rotate\n"
    )

    def test_parse_file(self, reader: CrontabReader, crontab_file) -> None:
        """Test every line becomes an entry with its line number."""
        entries = reader.parse_file(crontab_file(self.CONTENT))

        assert [e.type for e in entries] == [
            EntryType.COMMENT,
            EntryType.ENV_VAR,
            EntryType.EMPTY,
            EntryType.JOB,
            EntryType.INVALID,
            EntryType.JOB,
        ]
        assert [e.line_number for e in entries] == [1, 2, 3, 4, 5, 6]

    def test_read_file_returns_jobs(self, reader: CrontabReader, crontab_file) -> None:
        """Test read_file keeps only jobs."""
        jobs = reader.read_file(crontab_file(self.CONTENT))

        assert [(j.line_number, j.expression) for j in jobs] == [(4, "0 2 * * *"), (6, "@weekly")]

    def test_windows_line_endings(self, reader: CrontabReader, tmp_path: Path) -> None:
        """Test CRLF files parse like LF files."""
        path = tmp_path / "crontab"
        path.write_bytes(b"0 * * * * /bin/a\r\n# c\r\n")

        jobs = reader.read_file(path)

        assert jobs[0].command == "/bin/a"

    def test_missing_file(self, reader: CrontabReader, tmp_path: Path) -> None:
        """Test a missing file raises SourceReadError."""
        path = tmp_path / "nope"

        with pytest.raises(SourceReadError, match="failed to open file") as exc_info:
            reader.parse_file(path)

        assert exc_info.value.kind == ErrorKind.SOURCE_READ
        assert exc_info.value.context["path"] == str(path)

    def test_parse_text(self, reader: CrontabReader) -> None:
        """Test parsing content held in a string."""
        entries = reader.parse_text(self.CONTENT)

        assert len(entries) == 6

    def test_parse_stream(self, reader: CrontabReader) -> None:
        """Test parsing an open stream."""
        entries = reader.parse_stream(io.StringIO("0 0 * * * /bin/a\n"))

        assert entries[0].type == EntryType.JOB
        assert entries[0].job.command == "/bin/a"

    def test_unreadable_stream(self, reader: CrontabReader) -> None:
        """Test stream errors become SourceReadError."""

        class BrokenStream(io.StringIO):
            def __iter__(self):
                raise OSError("device gone")

        with pytest.raises(SourceReadError, match="error reading input: device gone"):
            reader.parse_stream(BrokenStream())

    def test_satisfies_reader_protocol(self, reader: CrontabReader) -> None:
        """Test CrontabReader is a Reader."""
        assert isinstance(reader, Reader)


class TestReadUser:
    """Tests for reading the user crontab through ``crontab -l``."""

    @staticmethod
    def _fake_run(
        monkeypatch: pytest.MonkeyPatch, returncode: int, stdout: str = "", stderr: str = ""
    ):
        calls = []

        def run(args, **kwargs):
            calls.append(args)
            return subprocess.CompletedProcess(args, returncode, stdout=stdout, stderr=stderr)

        monkeypatch.setattr(subprocess, "run", run)
        return calls

    def test_reads_jobs(self, reader: CrontabReader, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test jobs are parsed from the command output."""
        calls = self._fake_run(monkeypatch, 0, stdout="# mine\n*/10 * * * * /bin/check\n")

        jobs = reader.read_user()

        assert calls == [["crontab", "-l"]]
        assert [(j.line_number, j.expression) for j in jobs] == [(2, "*/10 * * * *")]

    def test_no_crontab(self, reader: CrontabReader, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test exit status 1 means the user has no crontab."""
        self._fake_run(monkeypatch, 1, stderr="no crontab for user")

        assert reader.read_user() == []

    def test_command_failure(self, reader: CrontabReader, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test other exit statuses raise."""
        self._fake_run(monkeypatch, 2, stderr="permission denied\n")

        with pytest.raises(SourceReadError, match="status 2: permission denied"):
            reader.read_user()

    def test_command_missing(self, reader: CrontabReader, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test a missing crontab binary raises."""

        def run(args, **kwargs):
            raise FileNotFoundError("crontab")

        monkeypatch.setattr(subprocess, "run", run)

        with pytest.raises(SourceReadError, match="failed to run crontab"):
            reader.read_user()
