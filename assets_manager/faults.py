"""
Faults - Core types and fault taxonomy for the assets middleware.

Defines:
- Fault base class (structured fault objects)
- FaultDomain (explicit fault domains)
- Severity levels
- Concrete faults for configuration, filesystem and response failures
- Serve result types (Served / Escalate)
"""

from __future__ import annotations

from enum import Enum
from dataclasses import dataclass
from typing import Any, Optional


# ============================================================================
# Severity & Domain
# ============================================================================

class Severity(str, Enum):
    """
    Fault severity levels.

    Determines the logging level used when the fault is reported.
    """
    INFO = "info"       # Informational, no action needed
    WARN = "warn"       # Warning, should be reviewed
    ERROR = "error"     # Error, immediate attention
    FATAL = "fatal"     # Fatal, unrecoverable, abort


class FaultDomain:
    """
    Fault domains (taxonomy).

    Identifies the functional area where a fault occurred.
    """

    def __init__(self, name: str, description: str = ""):
        self.name = name
        self.value = name
        self.description = description

    def __str__(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return f"FaultDomain(name='{self.name}')"

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, FaultDomain):
            return self.name == other.name
        return str(self) == str(other)

    def __hash__(self) -> int:
        return hash(self.name)


# Standard Domains
FaultDomain.CONFIG = FaultDomain("config", "Configuration errors")
FaultDomain.IO = FaultDomain("io", "I/O operations")
FaultDomain.RESPONSE = FaultDomain("response", "HTTP response errors")
FaultDomain.SECURITY = FaultDomain("security", "Security errors")


DOMAIN_DEFAULTS = {
    FaultDomain.CONFIG: {"severity": Severity.FATAL, "retryable": False},
    FaultDomain.IO: {"severity": Severity.WARN, "retryable": True},
    FaultDomain.RESPONSE: {"severity": Severity.ERROR, "retryable": False},
    FaultDomain.SECURITY: {"severity": Severity.ERROR, "retryable": False},
}


# ============================================================================
# Fault - Base Class
# ============================================================================

class Fault(Exception):
    """
    Base fault class - structured, typed fault object.

    A fault is a first-class value: it may be raised, or returned from an
    operation that must not fail its caller (cache writes, body commits).

    Attributes:
        code: Stable machine-readable identifier (e.g., "CACHE_WRITE_FAILED")
        message: Human-readable summary
        severity: Fault severity (INFO, WARN, ERROR, FATAL)
        domain: Fault domain (CONFIG, IO, RESPONSE, SECURITY)
        retryable: Whether this fault can be retried
        public: Whether safe to expose to client
        metadata: Additional context data
    """

    def __init__(
        self,
        code: str | None = None,
        message: str | None = None,
        *,
        domain: FaultDomain | None = None,
        severity: Optional[Severity] = None,
        retryable: Optional[bool] = None,
        public: bool = False,
        metadata: Optional[dict[str, Any]] = None,
    ):
        # Fallback to class attributes if not provided
        self.code = code if code is not None else getattr(self, "code", None)
        self.message = message if message is not None else getattr(self, "message", None)
        self.domain = domain if domain is not None else getattr(self, "domain", None)

        if self.code is None or self.message is None or self.domain is None:
            raise TypeError(f"{self.__class__.__name__} missing required code, message, or domain")

        super().__init__(self.message)

        defaults = DOMAIN_DEFAULTS.get(self.domain, {"severity": Severity.ERROR, "retryable": False})
        self.severity = severity or getattr(type(self), "severity", None) or defaults["severity"]
        self.retryable = retryable if retryable is not None else defaults["retryable"]
        self.public = public
        self.metadata = metadata or {}

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"

    def __repr__(self) -> str:
        return (
            f"Fault(code={self.code!r}, domain={self.domain.value}, "
            f"severity={self.severity.value}, public={self.public})"
        )

    def to_dict(self) -> dict[str, Any]:
        """
        Serialize fault to dictionary.

        Returns:
            Dictionary representation suitable for logging/serialization
        """
        return {
            "code": self.code,
            "message": self.message,
            "domain": self.domain.value,
            "severity": self.severity.value,
            "retryable": self.retryable,
            "public": self.public,
            "metadata": self.metadata,
        }


# ============================================================================
# CONFIG Faults
# ============================================================================

class ConfigInvalidFault(Fault):
    """A configuration source could not be read or parsed."""

    def __init__(self, source: str, reason: str, **kwargs):
        super().__init__(
            code="CONFIG_INVALID",
            message=f"Configuration source '{source}' is invalid: {reason}",
            domain=FaultDomain.CONFIG,
            retryable=False,
            metadata={"source": source, "reason": reason, **kwargs.get("metadata", {})},
        )


# ============================================================================
# IO Faults
# ============================================================================

class FilesystemFault(Fault):
    """Filesystem operation failed."""

    def __init__(self, operation: str, path: str, reason: str, *, code: str = "FILESYSTEM_FAULT", **kwargs):
        super().__init__(
            code=code,
            message=f"Filesystem {operation} on '{path}' failed: {reason}",
            domain=FaultDomain.IO,
            severity=Severity.WARN,
            retryable=True,
            public=False,
            metadata={"operation": operation, "path": path, "reason": reason, **kwargs.get("metadata", {})},
        )


class CacheWriteFault(FilesystemFault):
    """Copying an asset into the web directory failed."""

    def __init__(self, path: str, reason: str, operation: str = "write", **kwargs):
        super().__init__(operation, path, reason, code="CACHE_WRITE_FAILED", **kwargs)


# ============================================================================
# RESPONSE Faults
# ============================================================================

class ResponseStreamError(Fault):
    """The response body could not be written."""
    code = "RESPONSE_STREAM_ERROR"
    domain = FaultDomain.RESPONSE
    severity = Severity.ERROR
    message = "Response body is not writable"

    def __init__(self, message: str | None = None, **kwargs):
        super().__init__(message=message or self.message, **kwargs)


class InvalidHeaderError(Fault):
    """Invalid header name or value (injection attempt)."""
    code = "INVALID_HEADER"
    domain = FaultDomain.SECURITY
    severity = Severity.WARN

    def __init__(self, message: str, **kwargs):
        super().__init__(message=message, **kwargs)


# ============================================================================
# Serve result types
# ============================================================================

@dataclass(frozen=True)
class Served:
    """
    The asset was found and committed to the response.

    Contains the response to return to the caller.
    """
    response: Any


@dataclass(frozen=True)
class Escalate:
    """
    The asset could not be served; the request continues down the chain.

    ``fault`` is None for a plain miss, or the fault that prevented
    serving a file that was found.
    """
    fault: Optional[Fault] = None


ServeResult = Served | Escalate
