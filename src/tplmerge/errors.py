from __future__ import annotations


class TplMergeError(Exception):
    """Base class for every fatal condition the driver reports (exit 1)."""

    exit_code = 1
    label = "error"


class ArgumentError(TplMergeError):
    """Bad flags, missing positional arguments or unsupported iterator format."""

    label = "argument error"


class ConfigurationError(TplMergeError):
    """Flag combination that cannot run, e.g. --combine without --pdf."""

    label = "configuration error"


class ConsistencyError(TplMergeError):
    """Raised after output was produced, when --check finds dangling elements."""

    label = "consistency error"

    def __init__(self, message: str, dangling: list | None = None):
        super().__init__(message)
        self.dangling = list(dangling or [])


class CollaboratorError(TplMergeError):
    """Failure surfaced by the merge engine, PDF backend, JSON loader or config."""

    label = "error"


class HelpRequested(Exception):
    """Not an error: usage was printed and the run stops with exit code 2."""

    exit_code = 2
