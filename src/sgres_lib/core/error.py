# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Exception types used throughout sgres.

Every failure that terminates an sgres invocation is represented by one of the
exceptions defined here. Each exception carries an associated exit code used
by the command line interface to report failures consistently.
"""

from sgres_lib.core.config import CFG


class SgresError(Exception):
    """Common exception type for all recoverable sgres errors."""

    exit_code = CFG.exit_codes.default


class UsageError(SgresError):
    """Raised when the command line arguments are invalid."""

    exit_code = CFG.exit_codes.usage


class SourceUnavailable(SgresError):
    """
    Raised when the cluster manager cannot be queried.

    This covers a missing client executable, a query that timed out,
    and a query that finished with a non-success status.
    """

    exit_code = CFG.exit_codes.source_unavailable


class ParseError(SgresError):
    """Raised when the output of the cluster manager does not match the expected schema."""

    exit_code = CFG.exit_codes.parse_error


class UnknownStyle(SgresError):
    """Raised when the requested rendering style (or one of its columns) does not exist."""

    exit_code = CFG.exit_codes.unknown_style
