"""
Custom exception classes and validation utilities for Neurite.

This module provides:
1. One exception class per failure category, rooted at NeuriteError
2. Validation utilities for configuration values
3. Contract checks for programming errors (``expects``)

Exception Hierarchy:
====================
NeuriteError (base)
├── ConfigurationError - Parameter out of range or inconsistent
├── StructuralError - Morphology/record values outside their allowed range
│   └── ParseError - Malformed morphology text record (carries a line number)
└── ContractViolation - Programming error (API used out of contract)

Usage Examples:
===============
    # Reject a bad parent index
    raise StructuralError("parent index must precede compartment", value=7, index=3)

    # Check a precondition
    expects(lowered.state_synchronized(), "cells must be synchronized before advance")

Design Philosophy:
==================
- Callers catch the narrowest class they can handle
- Structural errors carry the offending value so callers can report it
- Contract violations are never silently ignored

Author: Neurite Project
Date: January 2026
"""

from __future__ import annotations

import math
from typing import Any, Optional

# =============================================================================
# Exception Hierarchy
# =============================================================================


class NeuriteError(Exception):
    """Base exception for all Neurite-specific errors.

    All custom exceptions in Neurite inherit from this class, enabling
    code to catch Neurite errors specifically:

        try:
            tree = BranchTree.from_parent_index(parent_index)
        except NeuriteError as e:
            logger.error(f"Neurite error: {e}")
    """


class ConfigurationError(NeuriteError):
    """A configuration value is out of range.

    Raised by config dataclasses and schedules when a value (time step, bin
    width, rate, dtype) is unusable or conflicts with another field.

    Example:
        raise ConfigurationError("bin_interval must be positive, got -1.0")
    """


class StructuralError(NeuriteError):
    """A structural invariant of a morphology was violated.

    Raised at construction time, before any derived structure is built.

    Args:
        message: Description of the violated constraint
        value: The offending value
        index: Compartment or record id the value belongs to, if known

    Example:
        raise StructuralError("negative radii are not allowed", value=-0.5, index=12)
    """

    def __init__(self, message: str, value: Any = None, index: Optional[int] = None):
        detail = message
        if index is not None:
            detail = f"{detail} (index {index}, value {value!r})"
        elif value is not None:
            detail = f"{detail} (value {value!r})"
        super().__init__(detail)
        self.value = value
        self.index = index


class ParseError(StructuralError):
    """A morphology text record could not be parsed.

    Args:
        message: Description of the problem
        lineno: 1-based line number of the offending record

    Example:
        raise ParseError("could not parse value", lineno=14)
    """

    def __init__(self, message: str, lineno: int, value: Any = None):
        super().__init__(f"line {lineno}: {message}", value=value)
        self.lineno = lineno
        self.reason = message


class ContractViolation(NeuriteError):
    """An API was used outside its contract.

    These are programming errors (advancing an unsynchronized solver,
    referencing a gid the group does not own, ...), not recoverable
    runtime conditions.
    """


# =============================================================================
# Validation Utilities
# =============================================================================


def expects(condition: bool, message: str) -> None:
    """Raise ``ContractViolation`` when a precondition does not hold.

    Args:
        condition: Precondition that must be true
        message: Description of the contract for the error message

    Raises:
        ContractViolation: If ``condition`` is false
    """
    if not condition:
        raise ContractViolation(message)


def validate_positive(value: float, name: str, allow_zero: bool = False) -> None:
    """Reject a step, interval, time constant or rate below its lower bound.

    Args:
        value: Quantity to check
        name: Name reported in the error message
        allow_zero: Accept exactly zero (bin widths, refractory periods)

    Raises:
        ConfigurationError: If ``value`` is below the bound

    Example:
        >>> validate_positive(dt_ms, "dt_ms")
        >>> validate_positive(bin_interval, "bin_interval", allow_zero=True)
    """
    in_range = value >= 0 if allow_zero else value > 0
    if not in_range:
        bound = "non-negative" if allow_zero else "positive"
        raise ConfigurationError(f"{name} must be {bound}, got {value}")


def validate_non_negative(value: float, name: str) -> None:
    """Shorthand for ``validate_positive(value, name, allow_zero=True)``."""
    validate_positive(value, name, allow_zero=True)


def validate_finite(value: float, name: str) -> None:
    """Validate that a value is neither NaN nor infinite.

    Raises:
        ConfigurationError: If value is NaN or Inf
    """
    if math.isnan(value) or math.isinf(value):
        raise ConfigurationError(f"{name} must be finite, got {value}")


__all__ = [
    # Exception classes
    "NeuriteError",
    "ConfigurationError",
    "StructuralError",
    "ParseError",
    "ContractViolation",
    # Validation utilities
    "expects",
    "validate_positive",
    "validate_non_negative",
    "validate_finite",
]
