"""Crontab records and reader."""

from .models import Entry, EntryType, Job
from .reader import CrontabReader, Reader, parse_line

__all__ = ["CrontabReader", "Entry", "EntryType", "Job", "Reader", "parse_line"]
