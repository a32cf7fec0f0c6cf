"""Remote verification of tracked TODOs."""

from tudu.verification.lookup import (
    CheckStatus,
    IssueCheck,
    VerifiedTodo,
    resolve_provider_name,
    verify_todos,
)

__all__ = ["CheckStatus", "IssueCheck", "VerifiedTodo", "resolve_provider_name", "verify_todos"]
