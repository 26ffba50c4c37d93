"""Run-scoped diagnostics for netdiagram.

Collects warnings and errors raised while loading the connection table and
rendering the diagram, and writes them as a JSON summary on request.
"""

from .error_collector import (
    DiagnosticEntry,
    DiagnosticSummary,
    ErrorCollector,
    ErrorContext,
    ErrorSeverity,
    create_error_collector,
)

__all__ = [
    "DiagnosticEntry",
    "DiagnosticSummary",
    "ErrorCollector",
    "ErrorContext",
    "ErrorSeverity",
    "create_error_collector",
]
