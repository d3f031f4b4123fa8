"""Interface segregation checks on classes, interfaces and interface-like objects."""
from dataclasses import dataclass, field
from typing import Dict, List

from solidlint.analyzer.context import AnalysisContext
from solidlint.analyzer.registry import ClassRecord, MethodRecord

from .base import Detector, RuleOptions

# Category pairs that should not share one interface
INCOMPATIBLE_CATEGORIES = (
    ('data', 'ui'),
    ('validation', 'communication'),
    ('calculation', 'ui'),
    ('lifecycle', 'data'),
    ('security', 'ui'),
    ('navigation', 'calculation'),
    ('utility', 'data'),
    ('transformation', 'ui'),
)

MAX_CATEGORIES = 3


@dataclass
class ISPOptions(RuleOptions):
    max_methods: int = 10
    max_unused_methods: int = 3
    complexity_variance_threshold: int = 5
    exclude_patterns: List[str] = field(
        default_factory=lambda: ['constructor', 'toString', 'valueOf'])
    include_usage_count: bool = True
    ignore_inherited_methods: bool = True


def kind_label(record: ClassRecord) -> str:
    if record.origin == 'interface':
        return 'TypeScript interface'
    if record.is_interface:
        return 'Interface'
    return 'Class'


def group_by_category(methods: List[MethodRecord]) -> Dict[str, List[MethodRecord]]:
    groups: Dict[str, List[MethodRecord]] = {}
    for method in methods:
        groups.setdefault(method.category, []).append(method)
    return groups


class ISPDetector(Detector):
    rule_id = 'isp-violation'
    description = 'Enforce the Interface Segregation Principle'
    options_class = ISPOptions
    messages = {
        'fatInterface': ("ISP Violation: {kind} '{name}' has too many methods ({count}). "
                         "Consider splitting into smaller interfaces."),
        'unusedMethods': "ISP Violation: {kind} '{name}' has {count} unused methods: {methods}",
        'segregationViolation': ("ISP Violation: {kind} '{name}' mixes multiple responsibilities: "
                                 "{categories}. Consider segregating into focused interfaces."),
        'mixedResponsibilities': ("ISP Violation: {kind} '{name}' has mixed responsibilities "
                                  "({categories}). Consider creating separate interfaces for "
                                  "each responsibility."),
    }

    def check(self, context: AnalysisContext) -> None:
        records = sorted(context.registry, key=lambda record: record.node.start_byte)
        for record in records:
            methods = self._relevant_methods(context, record)
            self._check_record(context, record, methods)

    def _relevant_methods(self, context: AnalysisContext,
                          record: ClassRecord) -> List[MethodRecord]:
        methods = []
        for method in record.methods:
            if any(pattern in method.name for pattern in self.options.exclude_patterns):
                continue
            if (self.options.ignore_inherited_methods and record.origin == 'class'
                    and context.resolver.is_inherited(record.name, method.name)):
                continue
            methods.append(method)
        return methods

    def _check_record(self, context: AnalysisContext, record: ClassRecord,
                      methods: List[MethodRecord]):
        options = self.options
        label = kind_label(record)
        categories = group_by_category(methods)
        category_list = ', '.join(categories)

        if len(methods) > options.max_methods:
            self.report(context, 'fatInterface', record.node, kind=label, name=record.name,
                        count=len(methods))

        unused = [method for method in methods if not method.is_used]
        if len(unused) > options.max_unused_methods:
            if options.include_usage_count:
                details = ', '.join(f"{m.name} ({m.usage_count} uses)" for m in unused)
            else:
                details = ', '.join(m.name for m in unused)
            self.report(context, 'unusedMethods', record.node, kind=label, name=record.name,
                        count=len(unused), methods=details,
                        unused=[method.name for method in unused])

        if self._has_segregation_violation(methods, categories):
            self.report(context, 'segregationViolation', record.node, kind=label,
                        name=record.name, categories=category_list)

        if any(first in categories and second in categories
               for first, second in INCOMPATIBLE_CATEGORIES):
            self.report(context, 'mixedResponsibilities', record.node, kind=label,
                        name=record.name, categories=category_list)

    def _has_segregation_violation(self, methods: List[MethodRecord],
                                   categories: Dict[str, List[MethodRecord]]) -> bool:
        if len(categories) > MAX_CATEGORIES:
            return True
        if len(methods) < 2:
            return False
        complexities = [method.complexity for method in methods]
        average = sum(complexities) / len(complexities)
        threshold = self.options.complexity_variance_threshold
        return any(abs(complexity - average) > threshold for complexity in complexities)
