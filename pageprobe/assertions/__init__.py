"""Assertion predicates and their results."""
from . import predicates
from .results import AssertionResult

__all__ = ["AssertionResult", "predicates"]
