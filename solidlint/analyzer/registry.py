"""Symbol registry: classes, interfaces and their method profiles for one file."""
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .syntax import FUNCTION_KINDS, NodeKind, SyntaxNode, function_name, parameter_count
from .walker import DEFAULT_MAX_DEPTH, iter_subtree

# Ordered: on keyword overlap the first group wins
CATEGORY_KEYWORDS = (
    ('data', ('get', 'set', 'read', 'write', 'load', 'save', 'fetch', 'store', 'find',
              'select', 'insert', 'update', 'delete')),
    ('validation', ('validate', 'verify', 'check', 'confirm', 'ensure', 'assert', 'test',
                    'is', 'has', 'can')),
    ('transformation', ('transform', 'convert', 'parse', 'format', 'serialize', 'deserialize',
                        'map', 'filter', 'reduce')),
    ('communication', ('send', 'receive', 'notify', 'emit', 'broadcast', 'publish', 'subscribe',
                       'connect', 'disconnect')),
    ('calculation', ('calculate', 'compute', 'process', 'analyze', 'sum', 'count', 'average',
                     'min', 'max')),
    ('ui', ('render', 'display', 'show', 'hide', 'update', 'refresh', 'draw', 'paint', 'animate')),
    ('lifecycle', ('init', 'start', 'stop', 'destroy', 'create', 'delete', 'dispose', 'cleanup',
                   'setup', 'teardown')),
    ('utility', ('log', 'debug', 'trace', 'measure', 'monitor', 'profile', 'benchmark', 'clone',
                 'copy')),
    ('security', ('authenticate', 'authorize', 'encrypt', 'decrypt', 'hash', 'sign', 'verify',
                  'sanitize')),
    ('navigation', ('navigate', 'redirect', 'route', 'go', 'back', 'forward', 'next', 'previous')),
)
GENERAL_CATEGORY = 'general'

INTERFACE_NAME_PATTERN = re.compile(r'^I[A-Z]')
INTERFACE_NAME_SUFFIXES = ('Interface', 'Contract', 'Protocol', 'Spec')

EQUALITY_OPERATORS = frozenset({'==', '===', '!=', '!=='})

# Node kinds adding one decision point each
_BRANCH_KINDS = frozenset({NodeKind.IF, NodeKind.CONDITIONAL, NodeKind.LOOP, NodeKind.CATCH})

ANONYMOUS_CLASS = 'AnonymousClass'

METHOD_KIND = 'method'
ARROW_PROPERTY_KIND = 'arrow-property'
INTERFACE_SIGNATURE_KIND = 'interface-signature'
OBJECT_METHOD_KIND = 'object-method'


@dataclass(eq=False)
class MethodRecord:
    """A method, arrow property or interface signature and its derived metrics."""
    name: str
    node: SyntaxNode
    category: str = GENERAL_CATEGORY
    parameter_count: int = 0
    complexity: int = 1
    has_throw: bool = False
    throw_types: List[Optional[str]] = field(default_factory=list)
    can_return_null: bool = False
    validation_count: int = 0
    is_used: bool = False
    usage_count: int = 0
    kind: str = METHOD_KIND
    return_type: Optional[str] = None

    def mark_used(self) -> None:
        self.is_used = True
        self.usage_count += 1


@dataclass(eq=False)
class ClassRecord:
    """A class, TypeScript interface or interface-like object literal."""
    name: str
    node: SyntaxNode
    methods: List[MethodRecord] = field(default_factory=list)
    superclass: Optional[str] = None
    implements: List[str] = field(default_factory=list)
    is_interface: bool = False
    origin: str = 'class'  # 'class', 'interface' or 'object'
    file_path: str = ''

    def get_method(self, name: str) -> Optional[MethodRecord]:
        for method in self.methods:
            if method.name == name:
                return method
        return None

    def has_method(self, name: str) -> bool:
        return self.get_method(name) is not None


def categorize_method(name: str) -> str:
    """Map a method name to one of the capability categories.

    >>> categorize_method('fetchUser')
    'data'
    >>> categorize_method('frobnicate')
    'general'
    """
    lower_name = name.lower()
    for category, keywords in CATEGORY_KEYWORDS:
        if any(keyword in lower_name for keyword in keywords):
            return category
    return GENERAL_CATEGORY


def is_interface_like_name(name: str) -> bool:
    return bool(INTERFACE_NAME_PATTERN.match(name)) or name.endswith(INTERFACE_NAME_SUFFIXES)


def calculate_complexity(function_node: Optional[SyntaxNode],
                         max_depth: int = DEFAULT_MAX_DEPTH) -> int:
    """Cyclomatic complexity of a function body, starting from 1.

    +1 for each if, ternary, loop, non-default switch case, catch clause,
    logical && / || and nested function literal.
    """
    complexity = 1
    if function_node is None:
        return complexity
    body = function_node.child('body')
    if body is None:
        return complexity

    for node in iter_subtree(body, max_depth, include_root=True):
        kind = node.kind
        if kind in _BRANCH_KINDS or kind in FUNCTION_KINDS:
            complexity += 1
        elif kind == NodeKind.CASE and not node.attrs.get('default'):
            complexity += 1
        elif kind == NodeKind.LOGICAL and node.operator in ('&&', '||'):
            complexity += 1
    return complexity


def is_validation_guard(if_node: SyntaxNode) -> bool:
    """True for an ``if`` whose test compares for (in)equality or against null."""
    test = if_node.child('test')
    if test is None or test.kind != NodeKind.BINARY:
        return False
    if test.operator in EQUALITY_OPERATORS:
        return True
    left, right = test.child('left'), test.child('right')
    return (left is not None and left.kind == NodeKind.IDENTIFIER
            and right is not None and right.kind == NodeKind.NULL)


def thrown_type(throw_node: SyntaxNode) -> Optional[str]:
    """Exception type of ``throw new X()`` or ``throw err``; None when unknown."""
    if not throw_node.children:
        return None
    argument = throw_node.children[0]
    if argument.kind == NodeKind.NEW:
        callee = argument.child('callee')
        return callee.text if callee is not None else None
    if argument.kind == NodeKind.IDENTIFIER:
        return argument.name
    return None


class SymbolRegistry:
    """Per-file registry of declared classes and interfaces.

    Names are unique per run: registering a second declaration with the
    same name replaces the first one.
    """

    def __init__(self, file_path: str = '', max_depth: int = DEFAULT_MAX_DEPTH):
        self.file_path = file_path
        self.max_depth = max_depth
        self.records: Dict[str, ClassRecord] = {}
        self._object_counter = 0

    def __iter__(self):
        return iter(list(self.records.values()))

    def __len__(self) -> int:
        return len(self.records)

    def get(self, name: Optional[str]) -> Optional[ClassRecord]:
        if name is None:
            return None
        return self.records.get(name)

    def register_class(self, node: SyntaxNode) -> ClassRecord:
        """Register a class or TypeScript interface declaration."""
        name = node.name or ANONYMOUS_CLASS
        is_ts_interface = node.kind == NodeKind.INTERFACE
        record = ClassRecord(
            name=name,
            node=node,
            superclass=node.attrs.get('superclass'),
            implements=list(node.attrs.get('implements') or []),
            is_interface=is_ts_interface or is_interface_like_name(name),
            origin='interface' if is_ts_interface else 'class',
            file_path=self.file_path,
        )

        body = node.child('body')
        for member in (body.children if body is not None else ()):
            if member.kind == NodeKind.METHOD:
                self.register_method(record, member)
            elif member.kind == NodeKind.METHOD_SIGNATURE:
                self.register_method(record, member, INTERFACE_SIGNATURE_KIND)
            elif member.kind == NodeKind.PROPERTY:
                value = member.child('value')
                if value is not None and value.kind == NodeKind.ARROW:
                    self.register_method(record, member, ARROW_PROPERTY_KIND)

        self.records[name] = record
        return record

    def register_method(self, record: ClassRecord, node: SyntaxNode,
                        kind: str = METHOD_KIND) -> Optional[MethodRecord]:
        """Profile a class member and append it to record.

        Members without a plain name (computed keys) are skipped.
        """
        name = node.name
        if not name or name.startswith('['):
            return None

        function_node = node
        if kind == ARROW_PROPERTY_KIND or node.kind in (NodeKind.PROPERTY, NodeKind.PAIR):
            function_node = node.child('value') or node
        method = self._profile(name, node, function_node, kind)
        record.methods.append(method)
        return method

    def register_object_interface(self, node: SyntaxNode) -> Optional[ClassRecord]:
        """Register an object literal carrying three or more functions.

        Only literals bound to a variable, assignment target or property
        count; the record is named ``<context>_<n>``.
        """
        parent = node.parent
        if parent is None or parent.kind not in (NodeKind.DECLARATOR, NodeKind.ASSIGNMENT,
                                                 NodeKind.PAIR):
            return None

        function_members = []
        for member in node.children:
            if member.kind == NodeKind.PAIR:
                value = member.child('value')
                if value is not None and value.kind in (NodeKind.FUNCTION, NodeKind.ARROW):
                    function_members.append(member)
            elif member.kind == NodeKind.METHOD:
                function_members.append(member)
        if len(function_members) < 3:
            return None

        self._object_counter += 1
        context_name = 'Object'
        if parent.kind == NodeKind.DECLARATOR and parent.name:
            context_name = parent.name
        elif parent.kind == NodeKind.PAIR and parent.child('key') is not None:
            context_name = parent.child('key').text
        name = f"{context_name}_{self._object_counter}"

        record = ClassRecord(name=name, node=node, is_interface=True, origin='object',
                             file_path=self.file_path)
        for member in function_members:
            if member.kind == NodeKind.PAIR:
                key = member.child('key')
                member_name = key.text if key is not None else None
                value = member.child('value')
                if member_name:
                    record.methods.append(self._profile(member_name, member, value,
                                                        OBJECT_METHOD_KIND))
            else:
                self.register_method(record, member, OBJECT_METHOD_KIND)

        self.records[name] = record
        return record

    def _profile(self, name: str, node: SyntaxNode, function_node: SyntaxNode,
                 kind: str) -> MethodRecord:
        method = MethodRecord(
            name=name,
            node=node,
            category=categorize_method(name),
            parameter_count=parameter_count(function_node),
            kind=kind,
            return_type=function_node.attrs.get('return_type'),
        )
        if kind == INTERFACE_SIGNATURE_KIND:
            return method

        method.complexity = calculate_complexity(function_node, self.max_depth)
        body = function_node.child('body')
        if body is None:
            return method

        for inner in iter_subtree(body, self.max_depth, include_root=True):
            if inner.kind == NodeKind.THROW:
                method.has_throw = True
                method.throw_types.append(thrown_type(inner))
            elif inner.kind == NodeKind.RETURN:
                if inner.children and inner.children[0].text == 'null':
                    method.can_return_null = True
            elif inner.kind == NodeKind.IF and is_validation_guard(inner):
                method.validation_count += 1
        return method


def describe(node: SyntaxNode) -> str:
    """Human label for a function-like node, used in messages."""
    if node.kind == NodeKind.ARROW and not node.name:
        name = function_name(node)
        return name if name != 'anonymous' else '(arrow function)'
    return function_name(node)
