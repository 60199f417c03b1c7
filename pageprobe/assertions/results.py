"""Assertion outcomes with human-readable explanations."""
from dataclasses import dataclass, replace


@dataclass(frozen=True)
class AssertionResult:
    """Outcome of a predicate.

    ``description`` states the positive claim ("page contains 'Logout'");
    ``found`` says what was observed instead. A negated result keeps both and
    flips ``passed``, so a negative assertion is always the exact negation of
    its positive counterpart.
    """
    passed: bool
    description: str
    found: str = ""
    negative: bool = False

    def negated(self) -> "AssertionResult":
        return replace(self, passed=not self.passed, negative=not self.negative)

    def failure_message(self) -> str:
        claim = f"not: {self.description}" if self.negative else self.description
        message = f"Failed asserting that {claim}"
        if self.found:
            message += f". {self.found}"
        return message

    def __bool__(self) -> bool:
        return self.passed
