# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Core infrastructure for sgres.

This module collects the foundational pieces used across the sgres codebase:
configuration, the error taxonomy with its exit codes, structured logging,
help formatting for the command line, and small shared helpers.
"""
