from dataclasses import dataclass, field
from typing import List, Optional, TextIO
import sys


class CoercionError(TypeError):
    """Raised when a value cannot be coerced to the type an operator needs."""


@dataclass
class Diagnostic:
    """A single human-readable error report from one pipeline stage."""
    stage: str
    message: str
    line: Optional[int] = None

    def __str__(self) -> str:
        if self.line is None:
            return f"{self.stage.capitalize()} error: {self.message}"
        return f"{self.stage.capitalize()} error (line {self.line}): {self.message}"


@dataclass
class Diagnostics:
    """Collects diagnostics across the tokenizer, parser and interpreter.

    Stages keep going after an error so that one run surfaces as many
    problems as possible; callers check `has_errors` between stages.
    Each report is also written to `stream` (stderr unless given).
    """
    stream: Optional[TextIO] = None
    records: List[Diagnostic] = field(default_factory=list)

    def report(self, stage: str, message: str, line: Optional[int] = None) -> Diagnostic:
        diagnostic = Diagnostic(stage, message, line)
        self.records.append(diagnostic)
        print(str(diagnostic), file=self.stream or sys.stderr)
        return diagnostic

    def has_errors(self, stage: Optional[str] = None) -> bool:
        if stage is None:
            return bool(self.records)
        return any(d.stage == stage for d in self.records)

    def messages(self) -> List[str]:
        return [str(d) for d in self.records]
