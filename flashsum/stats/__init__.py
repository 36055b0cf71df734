from .history import AttemptHistory, AttemptRecord, format_summary

__all__ = ["AttemptHistory", "AttemptRecord", "format_summary"]
