"""
Custom exceptions for skillsync.
"""

from typing import Optional, Dict, Any


class SkillSyncError(Exception):
    """
    Base exception for all skillsync errors.

    Every error carries a remediation hint so the CLI can tell the operator
    exactly what to do next.
    """

    default_remediation: Optional[str] = None

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
        remediation: Optional[str] = None
    ):
        """
        Initialize skillsync error.

        Args:
            message: Error message
            error_code: Optional error code for categorization
            context: Additional context information
            cause: Original exception that caused this error
            remediation: Human-readable hint on how to fix the problem
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.context = context or {}
        self.cause = cause
        self.remediation = remediation or self.default_remediation

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary representation."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code,
            "context": self.context,
            "cause": str(self.cause) if self.cause else None,
            "remediation": self.remediation
        }

    def __str__(self) -> str:
        """String representation of the error."""
        parts = [self.message]

        if self.error_code:
            parts.append(f"Code: {self.error_code}")

        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            parts.append(f"Context: {context_str}")

        if self.cause:
            parts.append(f"Caused by: {self.cause}")

        return " | ".join(parts)


class DependencyMissingError(SkillSyncError):
    """Raised when a required external tool is not on PATH."""

    def __init__(self, message: str, dependency: Optional[str] = None, **kwargs):
        context = kwargs.get('context', {})
        if dependency:
            context['dependency'] = dependency
        kwargs['context'] = context
        kwargs.setdefault('error_code', 'DEPENDENCY_MISSING')
        super().__init__(message, **kwargs)

        self.dependency = dependency


class AuthenticationError(SkillSyncError):
    """Raised when the hosting API session is missing or no longer valid."""

    default_remediation = "Run: gh auth login"

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault('error_code', 'AUTHENTICATION')
        super().__init__(message, **kwargs)


class RemoteUnavailableError(SkillSyncError):
    """
    Raised when the network or the hosting API cannot be reached.

    These failures are surfaced immediately; skillsync never retries.
    """

    default_remediation = "Check your network connection and try again."

    def __init__(self, message: str, remote: Optional[str] = None, **kwargs):
        context = kwargs.get('context', {})
        if remote:
            context['remote'] = remote
        kwargs['context'] = context
        kwargs.setdefault('error_code', 'REMOTE_UNAVAILABLE')
        super().__init__(message, **kwargs)

        self.remote = remote


class NotInstalledError(SkillSyncError):
    """Raised when update runs against a directory that is not a working copy."""

    default_remediation = "Run: skillsync install"

    def __init__(self, message: str, path: Optional[str] = None, **kwargs):
        context = kwargs.get('context', {})
        if path:
            context['path'] = path
        kwargs['context'] = context
        kwargs.setdefault('error_code', 'NOT_INSTALLED')
        super().__init__(message, **kwargs)

        self.path = path


class ConflictError(SkillSyncError):
    """
    Raised when fetched history and local edits collide.

    This is the one situation where a human has to step in; skillsync leaves
    both sides in place (the stash entry is kept) and stops.
    """

    def __init__(self, message: str, operation: Optional[str] = None, **kwargs):
        context = kwargs.get('context', {})
        if operation:
            context['operation'] = operation
        kwargs['context'] = context
        kwargs.setdefault('error_code', 'CONFLICT')
        super().__init__(message, **kwargs)

        self.operation = operation


class VersionControlError(SkillSyncError):
    """Raised for git failures that are neither network nor conflict related."""

    def __init__(self, message: str, command: Optional[str] = None, **kwargs):
        context = kwargs.get('context', {})
        if command:
            context['command'] = command
        kwargs['context'] = context
        kwargs.setdefault('error_code', 'VCS_FAILURE')
        super().__init__(message, **kwargs)

        self.command = command


class ConfigurationError(SkillSyncError):
    """Raised when configuration values are invalid."""

    def __init__(self, message: str, key: Optional[str] = None, **kwargs):
        context = kwargs.get('context', {})
        if key:
            context['key'] = key
        kwargs['context'] = context
        kwargs.setdefault('error_code', 'CONFIGURATION')
        super().__init__(message, **kwargs)

        self.key = key
