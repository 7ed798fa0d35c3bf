"""
Failure trace for the bin reader.

When a check fails, the innermost frame records what it was doing and the
offset it started from; every frame the failure passes through on the way
out records its own step. Entries are therefore stored innermost first and
rendered in reverse, so the report reads from the document root down to the
failing byte.
"""

from dataclasses import dataclass, field
from typing import List


@dataclass(frozen=True)
class Diagnostic:
    """One failed step: what was attempted and where it started"""
    condition: str
    offset: int

    def __str__(self):
        return f"{self.condition} @ {self.offset}"


@dataclass
class DiagnosticCollector:
    """Accumulates diagnostics for a single decode"""
    entries: List[Diagnostic] = field(default_factory=list)

    def fail(self, condition: str, offset: int) -> bool:
        """Record a failure and return False so callers can `return self.fail(...)`."""
        self.entries.append(Diagnostic(condition, offset))
        return False

    def clear(self):
        self.entries.clear()

    def __bool__(self):
        return bool(self.entries)

    def __len__(self):
        return len(self.entries)

    def outermost_first(self) -> List[Diagnostic]:
        return list(reversed(self.entries))

    def render(self) -> str:
        """Multi-line report, outermost context first, one entry per line."""
        return "".join(f"{entry}\n" for entry in self.outermost_first())


class DecodeError(ValueError):
    """
    Raised when a buffer is not a valid bin document.

    Attributes:
        diagnostics: Entries in outermost-first order
    """

    def __init__(self, diagnostics: List[Diagnostic]):
        self.diagnostics = diagnostics
        super().__init__("".join(f"{entry}\n" for entry in diagnostics).rstrip("\n"))

    @property
    def innermost(self) -> Diagnostic:
        """The step that actually failed."""
        return self.diagnostics[-1]
