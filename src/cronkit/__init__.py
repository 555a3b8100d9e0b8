"""Cronkit: static analysis for cron expressions and crontabs."""

__version__ = "0.4.0"
