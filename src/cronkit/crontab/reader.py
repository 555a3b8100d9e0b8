"""Crontab reader: splits crontab text into comments, env vars and jobs."""

from __future__ import annotations

import logging
import re
import subprocess
from pathlib import Path
from typing import TYPE_CHECKING, Protocol, TextIO, runtime_checkable

from cronkit.cronx import ScheduleParser
from cronkit.errors import ExpressionParseError, SourceReadError

from .models import Entry, EntryType, Job

if TYPE_CHECKING:
    from collections.abc import Iterable

logger = logging.getLogger(__name__)

ENV_VAR_RE = re.compile(r"^[A-Z_][A-Z0-9_]*=")
ALIAS_RE = re.compile(r"^@(reboot|yearly|annually|monthly|weekly|daily|hourly)\b")


@runtime_checkable
class Reader(Protocol):
    """Source of crontab entries and jobs."""

    def parse_file(self, path: Path | str) -> list[Entry]:
        """Read every entry from a crontab file."""
        ...

    def read_file(self, path: Path | str) -> list[Job]:
        """Read only the jobs from a crontab file."""
        ...

    def read_user(self) -> list[Job]:
        """Read the jobs of the current user's crontab."""
        ...


def _split_comment(text: str) -> tuple[str, str]:
    command, sep, comment = text.partition("#")
    if not sep:
        return text.strip(), ""
    return command.strip(), comment.strip()


def _make_job(expression: str, rest: str, line_number: int, parser: ScheduleParser) -> Job:
    command, comment = _split_comment(rest)
    job = Job(
        line_number=line_number,
        expression=expression,
        command=command,
        comment=comment,
    )
    try:
        parser.parse(expression)
    except ExpressionParseError as e:
        job.valid = False
        job.error = str(e)
    return job


def _parse_job(line: str, line_number: int, parser: ScheduleParser) -> Job | None:
    if ALIAS_RE.match(line):
        parts = line.split(None, 1)
        if len(parts) < 2:
            return None
        return _make_job(parts[0], parts[1], line_number, parser)

    parts = line.split(None, 5)
    if len(parts) < 6:
        return None
    return _make_job(" ".join(parts[:5]), parts[5], line_number, parser)


def parse_line(line: str, line_number: int, parser: ScheduleParser) -> Entry:
    """Classify a single crontab line.

    Args:
        line: Raw line content.
        line_number: 1-based line number.
        parser: Parser that decides whether a job's expression is valid.

    Returns:
        Entry describing the line. Jobs that fail to parse are still JOB
        entries, with ``job.valid`` False and the parser's message in
        ``job.error``.
    """
    entry = Entry(type=EntryType.INVALID, line_number=line_number, raw=line)
    trimmed = line.strip()

    if not trimmed:
        entry.type = EntryType.EMPTY
    elif trimmed.startswith("#"):
        entry.type = EntryType.COMMENT
    elif ENV_VAR_RE.match(trimmed):
        entry.type = EntryType.ENV_VAR
    else:
        job = _parse_job(trimmed, line_number, parser)
        if job is not None:
            entry.type = EntryType.JOB
            entry.job = job

    return entry


class CrontabReader:
    """Reads crontab files, streams and the user's crontab."""

    def __init__(self, parser: ScheduleParser | None = None) -> None:
        """Initialize the reader.

        Args:
            parser: Parser used to mark each job valid or invalid.
        """
        self._parser = parser or ScheduleParser()

    def parse_line(self, line: str, line_number: int) -> Entry:
        """Classify a single line with this reader's parser."""
        return parse_line(line, line_number, self._parser)

    def parse_lines(self, lines: Iterable[str]) -> list[Entry]:
        """Classify every line; numbering starts at 1."""
        return [
            self.parse_line(line.rstrip("\r\n"), number) for number, line in enumerate(lines, 1)
        ]

    def parse_text(self, text: str) -> list[Entry]:
        """Parse crontab content held in a string."""
        return self.parse_lines(text.splitlines())

    def parse_stream(self, stream: TextIO) -> list[Entry]:
        """Parse crontab content from an open text stream (e.g. stdin).

        Raises:
            SourceReadError: If the stream cannot be read.
        """
        try:
            return self.parse_lines(stream)
        except (OSError, UnicodeDecodeError) as e:
            raise SourceReadError(f"error reading input: {e}") from e

    def parse_file(self, path: Path | str) -> list[Entry]:
        """Parse every line of a crontab file.

        Raises:
            SourceReadError: If the file cannot be opened or decoded.
        """
        path = Path(path)
        try:
            with open(path, encoding="utf-8") as f:
                entries = self.parse_lines(f)
        except (OSError, UnicodeDecodeError) as e:
            raise SourceReadError(
                f"failed to open file: {e}", context={"path": str(path)}
            ) from e

        logger.debug(f"Read {len(entries)} lines from {path}")
        return entries

    def read_file(self, path: Path | str) -> list[Job]:
        """Return only the jobs of a crontab file."""
        return [
            entry.job
            for entry in self.parse_file(path)
            if entry.type == EntryType.JOB and entry.job is not None
        ]

    def read_user(self) -> list[Job]:
        """Read the current user's crontab via ``crontab -l``.

        Returns:
            Jobs in the user's crontab; empty when the user has none.

        Raises:
            SourceReadError: If the crontab command fails.
        """
        try:
            proc = subprocess.run(
                ["crontab", "-l"],
                capture_output=True,
                text=True,
                check=False,
            )
        except OSError as e:
            raise SourceReadError(f"failed to run crontab: {e}") from e

        if proc.returncode == 1:
            # crontab exits 1 when the user has no crontab
            logger.debug("No crontab for current user")
            return []
        if proc.returncode != 0:
            stderr = proc.stderr.strip()
            raise SourceReadError(
                f"crontab -l exited with status {proc.returncode}: {stderr}",
                context={"returncode": proc.returncode},
            )

        return [
            entry.job
            for entry in self.parse_text(proc.stdout)
            if entry.type == EntryType.JOB and entry.job is not None
        ]
