"""Diagnostic records and the per-file reporter that collects them."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from .syntax import SyntaxNode


class Severity(str, Enum):
    ERROR = 'error'
    WARNING = 'warning'
    INFO = 'info'

    @classmethod
    def parse(cls, value: 'str | Severity') -> 'Severity':
        """Severity from its name; raises ValueError for anything else."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise ValueError(f"Unknown severity: {value!r} (expected error, warning or info)")


@dataclass(frozen=True)
class Location:
    """1-based line and column span within a file."""
    file_path: str
    line: int
    column: int
    end_line: int
    end_column: int

    @classmethod
    def from_node(cls, file_path: str, node: SyntaxNode) -> 'Location':
        return cls(file_path, node.start_line, node.start_column + 1,
                   node.end_line, node.end_column + 1)

    def __str__(self) -> str:
        return f"{self.file_path}:{self.line}:{self.column}"


@dataclass
class Diagnostic:
    """A single rule violation."""
    rule_id: str
    message_id: str
    location: Location
    severity: Severity
    template: str
    data: Dict[str, Any] = field(default_factory=dict)

    @property
    def message(self) -> str:
        return self.template.format_map(self.data)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'rule': self.rule_id,
            'messageId': self.message_id,
            'severity': self.severity.value,
            'file': self.location.file_path,
            'line': self.location.line,
            'column': self.location.column,
            'endLine': self.location.end_line,
            'endColumn': self.location.end_column,
            'message': self.message,
            'data': {key: _jsonable(value) for key, value in self.data.items()},
        }


def _jsonable(value: Any) -> Any:
    if isinstance(value, (str, int, float, bool)) or value is None:
        return value
    if isinstance(value, (list, tuple)):
        return [_jsonable(item) for item in value]
    return str(value)


class DiagnosticReporter:
    """Collects diagnostics in emission order. No deduplication, no filtering."""

    def __init__(self, file_path: str = ''):
        self.file_path = file_path
        self._diagnostics: List[Diagnostic] = []

    def report(self, rule_id: str, message_id: str, node: SyntaxNode, template: str,
               data: Optional[Dict[str, Any]] = None,
               severity: Severity = Severity.WARNING) -> Diagnostic:
        diagnostic = Diagnostic(
            rule_id=rule_id,
            message_id=message_id,
            location=Location.from_node(self.file_path, node),
            severity=severity,
            template=template,
            data=dict(data or {}),
        )
        self._diagnostics.append(diagnostic)
        return diagnostic

    @property
    def diagnostics(self) -> List[Diagnostic]:
        return list(self._diagnostics)

    def __len__(self) -> int:
        return len(self._diagnostics)
