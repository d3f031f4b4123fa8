"""Open/closed checks: type switches, long if/else chains, type checks, type mutation.

The type-check and modification heuristics are regular expressions over a
node's source text. They are best-effort predicates, not type analysis.
"""
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set

from solidlint.analyzer.context import AnalysisContext
from solidlint.analyzer.syntax import FUNCTION_KINDS, NodeKind, SyntaxNode, function_name

from .base import Detector, RuleOptions

TYPE_CHECK_PATTERNS = (
    ('typeof', re.compile(
        r'typeof\s+\w+\s*===\s*[\'"`](string|number|boolean|object|function|undefined)[\'"`]')),
    ('instanceof', re.compile(r'\w+\s+instanceof\s+\w+')),
    ('constructor', re.compile(r'\w+\.constructor\s*===\s*\w+')),
    ('Array.isArray', re.compile(r'Array\.isArray\s*\(')),
    ('type-property', re.compile(r'\w+\.type\s*===\s*[\'"`]\w+[\'"`]')),
)

HARDCODED_TYPE_PATTERN = re.compile(r'([\'"`])(string|number|boolean|object|array|function)\1')
ENUM_DISCRIMINANT_PATTERN = re.compile(r'\b(type|kind|status|state|mode)\b', re.IGNORECASE)
TYPE_DISCRIMINANT_PATTERN = re.compile(r'\.(type|kind|constructor|__proto__)')
FACTORY_NAME_PARTS = ('factory', 'create', 'builder')
TYPE_PROPERTIES = frozenset({'type', 'kind', 'constructor'})

POLYMORPHIC_PATTERNS = (
    re.compile(r'\.call\s*\('),
    re.compile(r'\.apply\s*\('),
    re.compile(r'\.bind\s*\('),
    re.compile(r'\w+\.\w+\s*\('),
    re.compile(r'\w+\[\w+\]\s*\('),
)


@dataclass
class OCPOptions(RuleOptions):
    max_switch_cases: int = 5
    max_if_else_chain: int = 4
    max_type_checks: int = 3
    allowed_type_check_patterns: List[str] = field(
        default_factory=lambda: ['typeof', 'instanceof', 'Array.isArray'])
    forbidden_modification_patterns: List[str] = field(default_factory=lambda: [
        'switch.*type',
        'if.*type.*===',
        'if.*instanceof',
        'typeof.*===.*string|number|boolean',
    ])
    extension_patterns: List[str] = field(default_factory=lambda: [
        'extends', 'implements', 'mixin', 'plugin', 'decorator', 'factory', 'strategy', 'visitor',
    ])
    exclude_file_patterns: List[str] = field(default_factory=lambda: [
        r'.*\.test\.(js|ts|jsx|tsx)$',
        r'.*\.spec\.(js|ts|jsx|tsx)$',
        r'__tests__/.*\.(js|ts|jsx|tsx)$',
        r'.*\.config\.(js|ts)$',
        r'config/.*\.(js|ts)$',
    ])
    allow_factory_patterns: bool = True
    allow_enum_patterns: bool = True
    strict_mode: bool = False


@dataclass
class TypeHandling:
    """Type-discrimination profile of one function."""
    type_checks: int = 0
    type_patterns: Set[str] = field(default_factory=set)
    has_switch: bool = False
    has_long_if_else: bool = False


def detect_type_check(text: str) -> Optional[str]:
    """Name of the first type-check idiom found in text, if any."""
    for name, pattern in TYPE_CHECK_PATTERNS:
        if pattern.search(text):
            return name
    return None


def if_else_chain_length(node: SyntaxNode) -> int:
    count = 1
    current = node
    while current.child('alternate') is not None:
        count += 1
        alternate = current.child('alternate')
        if alternate.kind != NodeKind.IF:
            break
        current = alternate
    return count


def is_chain_root(node: SyntaxNode) -> bool:
    parent = node.parent
    return not (parent is not None and parent.kind == NodeKind.IF
                and parent.child('alternate') is node)


class OCPDetector(Detector):
    rule_id = 'ocp-violation'
    description = 'Enforce the Open/Closed Principle: open for extension, closed for modification'
    options_class = OCPOptions
    messages = {
        'tooManySwitchCases': ("Switch statement with {count} cases violates OCP. Consider using "
                               "polymorphism, strategy pattern, or factory pattern instead. "
                               "Max allowed: {max}"),
        'longIfElseChain': ("If-else chain with {count} conditions violates OCP. Consider using "
                            "polymorphism or strategy pattern instead. Max allowed: {max}"),
        'typeCheckViolation': ("Type checking pattern '{pattern}' violates OCP. Consider using "
                               "polymorphism or interface-based approach instead."),
        'modificationRisk': ("Code pattern '{pattern}' suggests modification instead of extension. "
                             "Consider using strategy pattern or dependency injection."),
        'missingAbstraction': ("Function '{name}' handles multiple types directly. Consider "
                               "creating an abstraction layer."),
        'hardcodedTypeHandling': ("Hardcoded type handling in '{name}' violates OCP. Consider "
                                  "using factory pattern or polymorphism."),
        'extensionViolation': ("Adding new types to this {construct} requires modification. "
                               "Consider using extensible patterns like visitor or strategy."),
        'conditionalComplexity': ("Complex conditional logic in '{name}' makes extension "
                                  "difficult. Consider extracting to separate handlers."),
        'magicTypeValues': ("Magic type values detected. Consider using enums or constants to "
                            "make extension easier."),
        'directTypeManipulation': ("Direct type manipulation violates OCP. Consider using "
                                   "abstract factories or builders."),
        'lackOfPolymorphism': ("Multiple type-specific branches suggest missing polymorphism. "
                               "Consider using inheritance or composition."),
    }

    def check(self, context: AnalysisContext) -> None:
        options = self.options
        if any(re.search(pattern, context.file_path) for pattern in options.exclude_file_patterns):
            return

        handling: Dict[int, TypeHandling] = {}

        for node in context.nodes(NodeKind.SWITCH, NodeKind.IF, NodeKind.BINARY,
                                  NodeKind.ASSIGNMENT, NodeKind.CLASS):
            if node.kind == NodeKind.SWITCH:
                self._check_switch(context, node, handling)
            elif node.kind == NodeKind.IF:
                self._check_if(context, node, handling)
            elif node.kind == NodeKind.BINARY:
                self._check_binary(context, node, handling)
            elif node.kind == NodeKind.ASSIGNMENT:
                self._check_assignment(context, node)
            else:
                self._check_class(context, node)

        for function in context.nodes(*FUNCTION_KINDS):
            profile = handling.get(id(function))
            if profile is not None:
                self._check_function(context, function, profile)

    def _handling_for(self, node: SyntaxNode,
                      handling: Dict[int, TypeHandling]) -> Optional[TypeHandling]:
        function = node.enclosing(FUNCTION_KINDS)
        if function is None:
            return None
        return handling.setdefault(id(function), TypeHandling())

    def _is_exempt_switch(self, node: SyntaxNode, discriminant_text: str) -> bool:
        options = self.options
        if options.strict_mode:
            return False
        if options.allow_enum_patterns and ENUM_DISCRIMINANT_PATTERN.search(discriminant_text):
            return True
        if options.allow_factory_patterns:
            function = node.enclosing(FUNCTION_KINDS)
            if function is not None:
                name = function_name(function).lower()
                if any(part in name for part in FACTORY_NAME_PARTS):
                    return True
        return False

    def _check_switch(self, context: AnalysisContext, node: SyntaxNode,
                      handling: Dict[int, TypeHandling]):
        discriminant = node.child('discriminant')
        discriminant_text = discriminant.text if discriminant is not None else ''
        if self._is_exempt_switch(node, discriminant_text):
            return

        body = node.child('body')
        case_count = sum(1 for child in (body.children if body is not None else ())
                         if child.kind == NodeKind.CASE)
        if case_count > self.options.max_switch_cases:
            self.report(context, 'tooManySwitchCases', node, count=case_count,
                        max=self.options.max_switch_cases)

        if TYPE_DISCRIMINANT_PATTERN.search(discriminant_text):
            self.report(context, 'extensionViolation', node, construct='switch statement')

        if HARDCODED_TYPE_PATTERN.search(node.text):
            self.report(context, 'magicTypeValues', node)

        profile = self._handling_for(node, handling)
        if profile is not None:
            profile.has_switch = True

    def _check_if(self, context: AnalysisContext, node: SyntaxNode,
                  handling: Dict[int, TypeHandling]):
        if is_chain_root(node):
            chain_length = if_else_chain_length(node)
            if chain_length > self.options.max_if_else_chain:
                self.report(context, 'longIfElseChain', node, count=chain_length,
                            max=self.options.max_if_else_chain)
            if chain_length > 2:
                profile = self._handling_for(node, handling)
                if profile is not None:
                    profile.has_long_if_else = True

        test = node.child('test')
        if test is None:
            return
        pattern = detect_type_check(test.text)
        if pattern and pattern not in self.options.allowed_type_check_patterns:
            self.report(context, 'typeCheckViolation', test, pattern=pattern)

    def _check_binary(self, context: AnalysisContext, node: SyntaxNode,
                      handling: Dict[int, TypeHandling]):
        text = node.text
        pattern = detect_type_check(text)
        if pattern:
            profile = self._handling_for(node, handling)
            if profile is not None:
                profile.type_checks += 1
                profile.type_patterns.add(pattern)

        for modification in self.options.forbidden_modification_patterns:
            if re.search(modification, text):
                self.report(context, 'modificationRisk', node, pattern=modification)

    def _check_assignment(self, context: AnalysisContext, node: SyntaxNode):
        left = node.child('left')
        if left is not None and left.kind == NodeKind.MEMBER and left.name in TYPE_PROPERTIES:
            self.report(context, 'directTypeManipulation', node)

    def _check_class(self, context: AnalysisContext, node: SyntaxNode):
        body = node.child('body')
        if body is None:
            return
        type_handling_methods = sum(
            1 for member in body.children
            if member.kind == NodeKind.METHOD and detect_type_check(member.text)
        )
        if type_handling_methods > 2:
            self.report(context, 'hardcodedTypeHandling', node,
                        name=node.name or 'AnonymousClass')

    def _has_extension_pattern(self, node: SyntaxNode) -> bool:
        text = node.text.lower()
        return any(re.search(rf'\b{pattern}\b', text)
                   for pattern in self.options.extension_patterns)

    def _check_function(self, context: AnalysisContext, node: SyntaxNode,
                        profile: TypeHandling):
        if self._has_extension_pattern(node):
            return
        name = function_name(node)

        if profile.type_checks > self.options.max_type_checks:
            self.report(context, 'missingAbstraction', node, name=name)

        if node.kind == NodeKind.ARROW:
            return

        if len(profile.type_patterns) > 2 and not any(
                pattern.search(node.text) for pattern in POLYMORPHIC_PATTERNS):
            self.report(context, 'lackOfPolymorphism', node)

        if (profile.has_switch or profile.has_long_if_else) and profile.type_checks > 1:
            self.report(context, 'conditionalComplexity', node, name=name)
