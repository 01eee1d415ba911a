"""Human-readable report for a git-commit run."""
from __future__ import annotations

from .commit import CommitArguments, CommitResult, FailureKind
from .runner import StepOutcome

SUCCESS_HEADER = "🎉 GIT COMMIT STATUS: SUCCESS"
FAILURE_HEADER = "❌ GIT COMMIT STATUS: FAILED"


def _validation_text(outcome: StepOutcome) -> str:
    return f"Git repository validation: SUCCESS\n{outcome.stdout}{outcome.stderr}"


def _staging_text(staging: list[tuple[str, StepOutcome]]) -> str:
    lines = []
    for path, outcome in staging:
        if outcome.succeeded:
            lines.append(
                f"✓ Added: {path}\n"
                f"  stdout: {outcome.stdout or '(no output)'}\n"
                f"  stderr: {outcome.stderr or '(no errors)'}"
            )
        else:
            lines.append(f"✗ Failed to add: {path}\n  Error: {outcome.error}")
    return "Git add operations:\n" + "\n".join(lines)


def _commit_text(outcome: StepOutcome) -> str:
    return (
        "Git commit operation: SUCCESS\n"
        f"stdout:\n{outcome.stdout}\n"
        f"stderr:\n{outcome.stderr or '(no stderr output)'}"
    )


def _summary(result: CommitResult) -> str:
    args = result.arguments
    status = "✅ Status: SUCCESSFUL" if result.succeeded else "❌ Status: FAILED"
    lines = [
        "=== SUMMARY ===",
        status,
        f"📂 Directory: {args.directory}",
        f'📝 Message: "{args.message}"',
        f"📄 Files: {', '.join(args.files)}",
    ]
    failed = result.staging_failures
    if failed:
        lines.append(
            f"⚠️ Staging: {len(failed)} of {len(result.staging)} file(s) failed to stage "
            f"({FailureKind.STAGING_PARTIAL_FAILURE.value}): {', '.join(failed)}"
        )
    return "\n".join(lines)


def render_success(result: CommitResult) -> str:
    return (
        f"{SUCCESS_HEADER}\n\n"
        f"=== REPOSITORY VALIDATION ===\n{_validation_text(result.validation)}\n\n"
        f"=== FILE STAGING ===\n{_staging_text(result.staging)}\n\n"
        f"=== COMMIT OPERATION ===\n{_commit_text(result.commit)}\n\n"
        f"{_summary(result)}"
    )


def render_failure(result: CommitResult) -> str:
    """Failure report.

    Includes whatever the phases before the failing one captured.
    """
    failure = result.failure
    kind = result.failure_kind

    if failure.exit_code is not None:
        exit_code = str(failure.exit_code)
    elif failure.timed_out:
        exit_code = "Unknown (timed out)"
    else:
        exit_code = "Unknown"

    partial = []
    if result.validation is not None and result.validation.succeeded:
        partial.append(_validation_text(result.validation))
    if result.staging:
        partial.append(_staging_text(result.staging))
    if result.commit is not None and result.commit.succeeded:
        partial.append(_commit_text(result.commit))

    partial_text = "\n".join(partial) if partial else "(no partial results)"

    return (
        f"{FAILURE_HEADER}\n\n"
        "=== ERROR DETAILS ===\n"
        f"Failure: {kind.value}\n"
        f"Error: {failure.error}\n"
        f"Command: {failure.command_line or 'Unknown command'}\n"
        f"Exit Code: {exit_code}\n\n"
        "=== FULL ERROR OUTPUT ===\n"
        f"stdout: {failure.stdout or '(no stdout)'}\n"
        f"stderr: {failure.stderr or '(no stderr)'}\n\n"
        "=== PARTIAL RESULTS ===\n"
        f"{partial_text}\n\n"
        f"{_summary(result)}"
    )


def render_report(result: CommitResult) -> str:
    if result.succeeded:
        return render_success(result)
    return render_failure(result)


def render_exception(arguments: CommitArguments, error: BaseException) -> str:
    """Failure report for an error raised outside any git step."""
    result = CommitResult(arguments=arguments)
    return (
        f"{FAILURE_HEADER}\n\n"
        "=== ERROR DETAILS ===\n"
        f"Error: {error}\n"
        f"Error Type: {type(error).__name__}\n\n"
        f"{_summary(result)}"
    )
