"""Liskov substitution checks on overriding methods."""
from dataclasses import dataclass, field
from typing import List

from solidlint.analyzer.context import AnalysisContext
from solidlint.analyzer.registry import METHOD_KIND, ClassRecord, MethodRecord

from .base import Detector, RuleOptions


@dataclass
class LSPOptions(RuleOptions):
    # Overrides of these names are checked even when the base class is not in the file
    overridable_methods: List[str] = field(default_factory=lambda: [
        'toString', 'valueOf', 'equals', 'hashCode', 'clone',
        'validate', 'execute', 'process', 'handle', 'render',
    ])


def throws_new_exception_types(override: MethodRecord, base: MethodRecord) -> bool:
    """True if override throws where base never does, or throws a type base does not.

    A throw whose type cannot be determined never matches anything.
    """
    if override.throw_types and not base.throw_types:
        return True
    for thrown in override.throw_types:
        if not any(thrown is not None and thrown == base_type for base_type in base.throw_types):
            return True
    return False


class LSPDetector(Detector):
    rule_id = 'lsp-substitution'
    description = 'Enforce the Liskov Substitution Principle for subclass overrides'
    options_class = LSPOptions
    messages = {
        'strongerPrecondition': ("LSP Violation: Method '{name}' has stronger preconditions "
                                 "than base method in '{base}'"),
        'weakerPostcondition': ("LSP Violation: Method '{name}' has weaker postconditions "
                                "than base method in '{base}'"),
        'newExceptionType': ("LSP Violation: Method '{name}' throws exceptions not declared "
                             "in base method in '{base}'"),
        'contractViolation': ("LSP Violation: Derived class '{name}' cannot substitute base "
                              "class '{base}' due to contract violations"),
    }

    def check(self, context: AnalysisContext) -> None:
        for record in context.class_records():
            if record.origin == 'class' and record.superclass:
                self._check_class(context, record)

    def _base_method(self, context: AnalysisContext, record: ClassRecord,
                     method: MethodRecord):
        """(ancestor name, ancestor method) to compare against, or None to skip.

        The ancestor method is None for a well-known overridable name whose
        base class is unknown; it is then compared against an empty profile.
        """
        inherited = context.resolver.find_inherited(record.name, method.name)
        if inherited is not None:
            ancestor, base_method = inherited
            return ancestor.name, base_method
        if method.name in self.options.overridable_methods:
            return record.superclass, None
        return None

    def _check_class(self, context: AnalysisContext, record: ClassRecord):
        breaks_contract = False

        for method in record.methods:
            if method.kind != METHOD_KIND or method.name == 'constructor':
                continue
            resolved = self._base_method(context, record, method)
            if resolved is None:
                continue
            base_name, base = resolved

            base_validations = base.validation_count if base is not None else 0
            base_parameters = base.parameter_count if base is not None else 0
            if (method.validation_count > base_validations
                    or method.parameter_count < base_parameters):
                self.report(context, 'strongerPrecondition', method.node,
                            name=method.name, base=base_name)

            if method.can_return_null and not (base is not None and base.can_return_null):
                self.report(context, 'weakerPostcondition', method.node,
                            name=method.name, base=base_name)

            if base is not None and throws_new_exception_types(method, base):
                breaks_contract = True
                self.report(context, 'newExceptionType', method.node,
                            name=method.name, base=base_name)

        if breaks_contract:
            self.report(context, 'contractViolation', record.node,
                        name=record.name, base=record.superclass)
