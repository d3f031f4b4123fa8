"""Detector base class and option loading shared by all rules."""
import re
from abc import ABC, abstractmethod
from dataclasses import MISSING, dataclass, fields
from typing import Any, ClassVar, Dict, Mapping, Optional, Type, TypeVar

from solidlint.analyzer.context import AnalysisContext
from solidlint.analyzer.reporter import Diagnostic, Severity
from solidlint.analyzer.syntax import SyntaxNode

_CAMEL_BOUNDARY = re.compile(r'(?<!^)(?=[A-Z])')

OptionsT = TypeVar('OptionsT', bound='RuleOptions')


def snake_case(key: str) -> str:
    """'maxUnusedMethods' -> 'max_unused_methods'; snake_case keys pass through."""
    return _CAMEL_BOUNDARY.sub('_', key).lower()


@dataclass
class RuleOptions:
    """Base for per-rule option dataclasses."""

    # camelCase keys whose mechanical snake_case form is not the field name
    KEY_ALIASES: ClassVar[Dict[str, str]] = {}

    @classmethod
    def from_dict(cls: Type[OptionsT], raw: Optional[Mapping[str, Any]]) -> OptionsT:
        """Build options from a rules-file mapping.

        Keys may be snake_case or camelCase. Values must have the same
        basic type as the field default.

        Raises:
            ValueError: On unknown keys or mistyped values
        """
        known = {f.name: f for f in fields(cls)}
        kwargs = {}
        for key, value in (raw or {}).items():
            name = cls.KEY_ALIASES.get(key) or snake_case(key)
            if name not in known:
                raise ValueError(f"Unknown option '{key}' for {cls.__name__}")
            _check_type(cls.__name__, key, known[name], value)
            kwargs[name] = value
        return cls(**kwargs)


def _check_type(owner: str, key: str, option_field, value: Any):
    if option_field.default is not MISSING:
        default = option_field.default
    elif option_field.default_factory is not MISSING:
        default = option_field.default_factory()
    else:
        return

    if isinstance(default, bool):
        valid = isinstance(value, bool)
    elif isinstance(default, int):
        valid = isinstance(value, int) and not isinstance(value, bool)
    elif isinstance(default, (list, tuple)):
        valid = isinstance(value, (list, tuple))
    elif isinstance(default, dict):
        valid = isinstance(value, dict)
    elif isinstance(default, str):
        valid = isinstance(value, str)
    else:
        valid = True

    if not valid:
        raise ValueError(
            f"Option '{key}' for {owner} expects {type(default).__name__}, "
            f"got {type(value).__name__}"
        )


class Detector(ABC):
    """One rule: a query over a populated AnalysisContext.

    Subclasses declare ``rule_id``, ``messages`` (message id -> template with
    ``{placeholders}``) and ``options_class``, and implement check().
    """

    rule_id: ClassVar[str] = ''
    description: ClassVar[str] = ''
    messages: ClassVar[Dict[str, str]] = {}
    options_class: ClassVar[Type[RuleOptions]] = RuleOptions
    enabled_by_default: ClassVar[bool] = True

    def __init__(self, options: Optional[RuleOptions] = None,
                 severity: Severity = Severity.WARNING):
        self.options = options if options is not None else self.options_class()
        self.severity = Severity.parse(severity)

    @abstractmethod
    def check(self, context: AnalysisContext) -> None:
        """Inspect context and report violations through self.report()."""

    def report(self, context: AnalysisContext, message_id: str, node: SyntaxNode,
               **data) -> Diagnostic:
        return context.reporter.report(self.rule_id, message_id, node,
                                       self.messages[message_id], data, self.severity)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.options!r})"
