"""Three-phase git commit: validate the repository, stage files, commit.

Each phase produces a StepOutcome that is threaded into a CommitResult, so
report assembly sees exactly which phases ran and what they captured.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass, field
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .runner import StepOutcome, run_command

logger = logging.getLogger(__name__)


class FailureKind(str, Enum):
    """Failure categories surfaced to the caller."""
    REPOSITORY_VALIDATION_FAILED = "RepositoryValidationFailed"
    STAGING_PARTIAL_FAILURE = "StagingPartialFailure"
    COMMIT_FAILED = "CommitFailed"


class CommitArguments(BaseModel):
    """Validated input for the git-commit tool."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    files: list[str] = Field(..., min_length=1, description="Files to stage and commit")
    message: str = Field(..., min_length=1, description="Commit message")
    directory: str = Field(..., min_length=1, description="Directory to execute git commands in")

    @field_validator("files")
    @classmethod
    def validate_files(cls, v: list[str]) -> list[str]:
        """Reject empty file paths."""
        for path in v:
            if not path:
                raise ValueError("file paths must be non-empty strings")
        return v


@dataclass
class CommitResult:
    """Everything captured while running one commit request."""
    arguments: CommitArguments
    validation: StepOutcome | None = None
    staging: list[tuple[str, StepOutcome]] = field(default_factory=list)
    commit: StepOutcome | None = None

    @property
    def succeeded(self) -> bool:
        return (
            self.validation is not None and self.validation.succeeded
            and self.commit is not None and self.commit.succeeded
        )

    @property
    def failure_kind(self) -> FailureKind | None:
        """The fatal failure, if any. Staging failures alone are not fatal."""
        if self.validation is None or not self.validation.succeeded:
            return FailureKind.REPOSITORY_VALIDATION_FAILED
        if self.commit is None or not self.commit.succeeded:
            return FailureKind.COMMIT_FAILED
        return None

    @property
    def failure(self) -> StepOutcome | None:
        """Outcome of the phase that failed the operation."""
        kind = self.failure_kind
        if kind is FailureKind.REPOSITORY_VALIDATION_FAILED:
            return self.validation
        if kind is FailureKind.COMMIT_FAILED:
            return self.commit
        return None

    @property
    def staging_failures(self) -> list[str]:
        return [path for path, outcome in self.staging if not outcome.succeeded]


async def validate_repository(
    directory: str,
    git_executable: str = "git",
    timeout: float | None = None
) -> StepOutcome:
    """Confirm that directory is inside a git working tree."""
    return await run_command(
        [git_executable, "rev-parse", "--git-dir"],
        cwd=directory,
        timeout=timeout
    )


async def stage_files(
    files: list[str],
    directory: str,
    git_executable: str = "git",
    timeout: float | None = None
) -> list[tuple[str, StepOutcome]]:
    """Stage each file individually.

    A failure on one file is recorded and the remaining files are still
    attempted.

    Args:
        files: Paths relative to directory
        directory: Working tree
        git_executable: git binary
        timeout: Per-invocation deadline in seconds

    Returns:
        (path, outcome) pairs in input order
    """
    results = []
    for path in files:
        outcome = await run_command(
            [git_executable, "add", "--", path],
            cwd=directory,
            timeout=timeout
        )
        if not outcome.succeeded:
            logger.info(f"Failed to stage {path}: {outcome.error}")
        results.append((path, outcome))
    return results


async def create_commit(
    message: str,
    directory: str,
    git_executable: str = "git",
    timeout: float | None = None
) -> StepOutcome:
    """Commit whatever is currently staged."""
    return await run_command(
        [git_executable, "commit", "-m", message],
        cwd=directory,
        timeout=timeout
    )


async def commit_files(
    arguments: CommitArguments,
    git_executable: str = "git",
    timeout: float | None = None
) -> CommitResult:
    """Validate, stage and commit.

    Staging is skipped when validation fails. The commit runs after staging
    even if some files failed to stage.

    Args:
        arguments: Validated tool arguments
        git_executable: git binary
        timeout: Per-invocation deadline in seconds

    Returns:
        CommitResult with every phase that ran
    """
    result = CommitResult(arguments=arguments)
    directory = arguments.directory

    result.validation = await validate_repository(directory, git_executable, timeout)
    if not result.validation.succeeded:
        logger.info(f"Repository validation failed for {directory}")
        return result

    result.staging = await stage_files(arguments.files, directory, git_executable, timeout)

    result.commit = await create_commit(arguments.message, directory, git_executable, timeout)
    if not result.commit.succeeded:
        logger.info(f"Commit failed in {directory}: {result.commit.error}")

    return result
