"""git operations backing the git-commit tool."""
from .runner import StepOutcome, run_command
from .commit import CommitArguments, CommitResult, FailureKind, commit_files
from .report import render_exception, render_report

__all__ = [
    "StepOutcome",
    "run_command",
    "CommitArguments",
    "CommitResult",
    "FailureKind",
    "commit_files",
    "render_exception",
    "render_report",
]
