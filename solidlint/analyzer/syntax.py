"""Parser-neutral syntax tree consumed by the rule engine.

Detectors never touch tree-sitter nodes directly. build_syntax_tree() folds a
tree-sitter JavaScript/TypeScript tree into SyntaxNode objects whose ``kind``
comes from the small vocabulary in NodeKind, with named role links
(``fields``) such as ``test``, ``body`` or ``callee``.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple
from tree_sitter import Node, Tree


class NodeKind:
    """Node kinds understood by the engine."""
    PROGRAM = 'program'
    CLASS = 'class'
    INTERFACE = 'interface'
    METHOD = 'method'
    METHOD_SIGNATURE = 'method_signature'
    PROPERTY = 'property'
    FUNCTION = 'function'
    ARROW = 'arrow'
    IMPORT = 'import'
    CALL = 'call'
    NEW = 'new'
    MEMBER = 'member'
    BINARY = 'binary'
    LOGICAL = 'logical'
    UNARY = 'unary'
    IF = 'if'
    SWITCH = 'switch'
    CASE = 'case'
    LOOP = 'loop'
    TRY = 'try'
    CATCH = 'catch'
    THROW = 'throw'
    RETURN = 'return'
    CONDITIONAL = 'conditional'
    ASSIGNMENT = 'assignment'
    BLOCK = 'block'
    OBJECT = 'object'
    PAIR = 'pair'
    DECLARATOR = 'declarator'
    IDENTIFIER = 'identifier'
    STRING = 'string'
    NULL = 'null'
    OTHER = 'other'


# Function literals: anything that opens a new function scope
FUNCTION_KINDS = frozenset({NodeKind.FUNCTION, NodeKind.ARROW, NodeKind.METHOD})

LOGICAL_OPERATORS = frozenset({'&&', '||', '??'})

# tree-sitter node type -> engine kind
TS_KIND_MAP = {
    'program': NodeKind.PROGRAM,
    'class_declaration': NodeKind.CLASS,
    'abstract_class_declaration': NodeKind.CLASS,
    'class': NodeKind.CLASS,
    'interface_declaration': NodeKind.INTERFACE,
    'method_definition': NodeKind.METHOD,
    'method_signature': NodeKind.METHOD_SIGNATURE,
    'abstract_method_signature': NodeKind.METHOD_SIGNATURE,
    'field_definition': NodeKind.PROPERTY,
    'public_field_definition': NodeKind.PROPERTY,
    'function_declaration': NodeKind.FUNCTION,
    'function_expression': NodeKind.FUNCTION,
    'function': NodeKind.FUNCTION,
    'generator_function_declaration': NodeKind.FUNCTION,
    'generator_function': NodeKind.FUNCTION,
    'arrow_function': NodeKind.ARROW,
    'import_statement': NodeKind.IMPORT,
    'call_expression': NodeKind.CALL,
    'new_expression': NodeKind.NEW,
    'member_expression': NodeKind.MEMBER,
    'binary_expression': NodeKind.BINARY,
    'unary_expression': NodeKind.UNARY,
    'if_statement': NodeKind.IF,
    'switch_statement': NodeKind.SWITCH,
    'switch_case': NodeKind.CASE,
    'switch_default': NodeKind.CASE,
    'for_statement': NodeKind.LOOP,
    'for_in_statement': NodeKind.LOOP,
    'while_statement': NodeKind.LOOP,
    'do_statement': NodeKind.LOOP,
    'try_statement': NodeKind.TRY,
    'catch_clause': NodeKind.CATCH,
    'throw_statement': NodeKind.THROW,
    'return_statement': NodeKind.RETURN,
    'ternary_expression': NodeKind.CONDITIONAL,
    'assignment_expression': NodeKind.ASSIGNMENT,
    'augmented_assignment_expression': NodeKind.ASSIGNMENT,
    'statement_block': NodeKind.BLOCK,
    'class_body': NodeKind.BLOCK,
    'interface_body': NodeKind.BLOCK,
    'object_type': NodeKind.BLOCK,
    'switch_body': NodeKind.BLOCK,
    'object': NodeKind.OBJECT,
    'pair': NodeKind.PAIR,
    'variable_declarator': NodeKind.DECLARATOR,
    'identifier': NodeKind.IDENTIFIER,
    'type_identifier': NodeKind.IDENTIFIER,
    'property_identifier': NodeKind.IDENTIFIER,
    'private_property_identifier': NodeKind.IDENTIFIER,
    'shorthand_property_identifier': NodeKind.IDENTIFIER,
    'this': NodeKind.IDENTIFIER,
    'string': NodeKind.STRING,
    'template_string': NodeKind.STRING,
    'null': NodeKind.NULL,
    'undefined': NodeKind.NULL,
}

# Wrappers folded into their parent; fields pointing at them resolve to the inner node
TRANSPARENT_TYPES = frozenset({'parenthesized_expression', 'else_clause'})

_FUNCTION_FIELDS = (('name', 'name'), ('params', 'parameters'), ('body', 'body'),
                    ('return_type', 'return_type'))
_CLASS_FIELDS = (('name', 'name'), ('body', 'body'))
_LOOP_FIELDS = (('body', 'body'),)
_ASSIGNMENT_FIELDS = (('left', 'left'), ('right', 'right'))

# tree-sitter node type -> ((engine role, tree-sitter field name), ...)
FIELD_MAP = {
    'class_declaration': _CLASS_FIELDS,
    'abstract_class_declaration': _CLASS_FIELDS,
    'class': _CLASS_FIELDS,
    'interface_declaration': _CLASS_FIELDS,
    'method_definition': _FUNCTION_FIELDS,
    'method_signature': (('name', 'name'), ('params', 'parameters'), ('return_type', 'return_type')),
    'abstract_method_signature': (('name', 'name'), ('params', 'parameters'),
                                  ('return_type', 'return_type')),
    'field_definition': (('name', 'property'), ('value', 'value')),
    'public_field_definition': (('name', 'name'), ('value', 'value')),
    'function_declaration': _FUNCTION_FIELDS,
    'function_expression': _FUNCTION_FIELDS,
    'function': _FUNCTION_FIELDS,
    'generator_function_declaration': _FUNCTION_FIELDS,
    'generator_function': _FUNCTION_FIELDS,
    'arrow_function': (('params', 'parameters'), ('params', 'parameter'), ('body', 'body'),
                       ('return_type', 'return_type')),
    'import_statement': (('source', 'source'),),
    'call_expression': (('callee', 'function'), ('arguments', 'arguments')),
    'new_expression': (('callee', 'constructor'), ('arguments', 'arguments')),
    'member_expression': (('object', 'object'), ('property', 'property')),
    'binary_expression': _ASSIGNMENT_FIELDS,
    'unary_expression': (('argument', 'argument'),),
    'if_statement': (('test', 'condition'), ('consequent', 'consequence'),
                     ('alternate', 'alternative')),
    'switch_statement': (('discriminant', 'value'), ('body', 'body')),
    'switch_case': (('test', 'value'),),
    'for_statement': _LOOP_FIELDS,
    'for_in_statement': _LOOP_FIELDS,
    'while_statement': _LOOP_FIELDS,
    'do_statement': _LOOP_FIELDS,
    'try_statement': (('block', 'body'), ('handler', 'handler'), ('finalizer', 'finalizer')),
    'catch_clause': (('param', 'parameter'), ('body', 'body')),
    'ternary_expression': (('test', 'condition'), ('consequent', 'consequence'),
                           ('alternate', 'alternative')),
    'assignment_expression': _ASSIGNMENT_FIELDS,
    'augmented_assignment_expression': _ASSIGNMENT_FIELDS,
    'pair': (('key', 'key'), ('value', 'value')),
    'variable_declarator': (('name', 'name'), ('value', 'value')),
}

_NAMED_KINDS = frozenset({
    NodeKind.CLASS, NodeKind.INTERFACE, NodeKind.METHOD, NodeKind.METHOD_SIGNATURE,
    NodeKind.PROPERTY, NodeKind.FUNCTION, NodeKind.DECLARATOR,
})


@dataclass
class ImportSpecifier:
    """One name brought in by an import statement."""
    imported: str  # name exported by the module ('default' / '*' for default and namespace imports)
    local: str
    kind: str  # 'default', 'named' or 'namespace'
    type_only: bool = False
    node: Optional['SyntaxNode'] = None


@dataclass(eq=False)
class SyntaxNode:
    """A read-only syntax node in the engine's vocabulary."""
    kind: str
    source_type: str  # grammar node type, kept for debugging
    start_byte: int
    end_byte: int
    start_line: int  # 1-based
    start_column: int  # 0-based
    end_line: int
    end_column: int
    source: bytes = field(default=b'', repr=False)
    children: List['SyntaxNode'] = field(default_factory=list, repr=False)
    parent: Optional['SyntaxNode'] = field(default=None, repr=False)
    fields: Dict[str, 'SyntaxNode'] = field(default_factory=dict, repr=False)
    name: Optional[str] = None
    operator: Optional[str] = None
    is_statement: bool = False
    attrs: Dict[str, Any] = field(default_factory=dict, repr=False)

    @property
    def text(self) -> str:
        return self.source[self.start_byte:self.end_byte].decode('utf-8', errors='replace')

    def child(self, role: str) -> Optional['SyntaxNode']:
        """Return the node linked under a role name (e.g. 'body', 'test')."""
        return self.fields.get(role)

    def ancestors(self):
        current = self.parent
        while current is not None:
            yield current
            current = current.parent

    def enclosing(self, kinds: Iterable[str]) -> Optional['SyntaxNode']:
        """Nearest ancestor whose kind is in kinds."""
        kinds = frozenset(kinds)
        for ancestor in self.ancestors():
            if ancestor.kind in kinds:
                return ancestor
        return None


def build_syntax_tree(tree: Tree | Node, source: bytes | str) -> SyntaxNode:
    """Convert a tree-sitter tree into a SyntaxNode tree.

    Iterative so that deeply nested input cannot exhaust the Python stack.
    Comments are dropped, parenthesised expressions and else clauses are
    folded away.

    Args:
        tree: tree-sitter Tree (or its root Node)
        source: Source the tree was parsed from

    Returns:
        Root SyntaxNode (kind 'program' for a whole file)
    """
    if isinstance(source, str):
        source = source.encode('utf-8')
    root_ts = tree.root_node if isinstance(tree, Tree) else tree

    converted: Dict[int, SyntaxNode] = {}
    pending: List[Tuple[Node, SyntaxNode]] = []

    root = _convert(root_ts, source)
    converted[root_ts.id] = root
    pending.append((root_ts, root))

    stack = [(child, root) for child in reversed(root_ts.named_children)]
    while stack:
        ts_node, parent = stack.pop()
        if ts_node.type == 'comment':
            continue
        if ts_node.type in TRANSPARENT_TYPES:
            stack.extend((child, parent) for child in reversed(ts_node.named_children))
            continue

        node = _convert(ts_node, source)
        node.parent = parent
        parent.children.append(node)
        converted[ts_node.id] = node
        pending.append((ts_node, node))
        stack.extend((child, node) for child in reversed(ts_node.named_children))

    for ts_node, node in pending:
        _link_fields(ts_node, node, converted)
        _annotate(ts_node, node, source, converted)

    return root


def _convert(ts_node: Node, source: bytes) -> SyntaxNode:
    ts_type = ts_node.type
    kind = TS_KIND_MAP.get(ts_type, NodeKind.OTHER)
    operator = None

    if ts_type in ('binary_expression', 'unary_expression', 'augmented_assignment_expression'):
        operator_node = ts_node.child_by_field_name('operator')
        if operator_node is not None:
            operator = _slice(operator_node, source)
        if kind == NodeKind.BINARY and operator in LOGICAL_OPERATORS:
            kind = NodeKind.LOGICAL
    elif ts_type == 'assignment_expression':
        operator = '='
    elif ts_type == 'call_expression' and _require_source(ts_node, source) is not None:
        kind = NodeKind.IMPORT

    return SyntaxNode(
        kind=kind,
        source_type=ts_type,
        start_byte=ts_node.start_byte,
        end_byte=ts_node.end_byte,
        start_line=ts_node.start_point[0] + 1,
        start_column=ts_node.start_point[1],
        end_line=ts_node.end_point[0] + 1,
        end_column=ts_node.end_point[1],
        source=source,
        operator=operator,
        is_statement=_is_statement(ts_type),
    )


def _is_statement(ts_type: str) -> bool:
    return ts_type.endswith(('_statement', '_declaration'))


def _slice(ts_node: Node, source: bytes) -> str:
    return source[ts_node.start_byte:ts_node.end_byte].decode('utf-8', errors='replace')


def _strip_quotes(text: str) -> str:
    return text.strip('"\'`')


def _unwrap(ts_node: Optional[Node]) -> Optional[Node]:
    while ts_node is not None and ts_node.type in TRANSPARENT_TYPES:
        inner = [c for c in ts_node.named_children if c.type != 'comment']
        ts_node = inner[0] if inner else None
    return ts_node


def _require_source(ts_node: Node, source: bytes) -> Optional[str]:
    """Module path of a ``require('x')`` call, or None for any other call."""
    function_node = ts_node.child_by_field_name('function')
    if function_node is None or function_node.type != 'identifier':
        return None
    if _slice(function_node, source) != 'require':
        return None
    args_node = ts_node.child_by_field_name('arguments')
    if args_node is None:
        return None
    args = [c for c in args_node.named_children if c.type != 'comment']
    if len(args) != 1 or args[0].type != 'string':
        return None
    return _strip_quotes(_slice(args[0], source))


def _link_fields(ts_node: Node, node: SyntaxNode, converted: Dict[int, SyntaxNode]):
    for role, ts_field in FIELD_MAP.get(ts_node.type, ()):
        if role in node.fields:
            continue
        target = _unwrap(ts_node.child_by_field_name(ts_field))
        if target is not None and target.id in converted:
            node.fields[role] = converted[target.id]


def _annotate(ts_node: Node, node: SyntaxNode, source: bytes, converted: Dict[int, SyntaxNode]):
    """Fill in names and the kind-specific attributes the detectors read."""
    kind = node.kind

    if kind in _NAMED_KINDS:
        name_node = node.fields.get('name')
        if name_node is not None:
            node.name = name_node.text
    elif kind == NodeKind.MEMBER:
        property_node = node.fields.get('property')
        if property_node is not None:
            node.name = property_node.text
    elif kind == NodeKind.IDENTIFIER:
        node.name = node.text

    if kind == NodeKind.CLASS:
        superclass, implements = _class_heritage(ts_node, source)
        node.attrs['superclass'] = superclass
        node.attrs['implements'] = implements
        node.attrs['abstract'] = ts_node.type == 'abstract_class_declaration'
    elif kind in (NodeKind.METHOD, NodeKind.METHOD_SIGNATURE, NodeKind.FUNCTION, NodeKind.ARROW):
        return_type = node.fields.get('return_type')
        if return_type is not None:
            node.attrs['return_type'] = return_type.text.lstrip(':').strip()
    elif kind == NodeKind.CASE:
        node.attrs['default'] = ts_node.type == 'switch_default'
    elif kind == NodeKind.IMPORT:
        _annotate_import(ts_node, node, source, converted)


def _class_heritage(ts_node: Node, source: bytes) -> Tuple[Optional[str], List[str]]:
    superclass = None
    implements: List[str] = []
    for child in ts_node.named_children:
        if child.type != 'class_heritage':
            continue
        for part in child.named_children:
            if part.type == 'extends_clause':
                value = part.child_by_field_name('value')
                if value is None and part.named_children:
                    value = part.named_children[0]
                if value is not None:
                    superclass = _slice(value, source)
            elif part.type == 'implements_clause':
                for type_node in part.named_children:
                    implements.append(_slice(type_node, source).split('<')[0].strip())
            elif part.type != 'comment' and superclass is None:
                # javascript grammar: the heritage holds the superclass expression itself
                superclass = _slice(part, source)
    return superclass, implements


def _annotate_import(ts_node: Node, node: SyntaxNode, source: bytes,
                     converted: Dict[int, SyntaxNode]):
    if ts_node.type == 'call_expression':
        node.attrs['source'] = _require_source(ts_node, source)
        node.attrs['form'] = 'require'
        node.attrs['type_only'] = False
        node.attrs['specifiers'] = []
        args_node = ts_node.child_by_field_name('arguments')
        string_node = args_node.named_children[0] if args_node is not None else None
        if string_node is not None and string_node.id in converted:
            node.fields['source'] = converted[string_node.id]
        node.name = node.attrs['source']
        return

    source_node = node.fields.get('source')
    module = _strip_quotes(source_node.text) if source_node is not None else ''
    statement_type_only = any(
        not child.is_named and child.type == 'type' for child in ts_node.children
    )

    specifiers: List[ImportSpecifier] = []
    for clause in ts_node.named_children:
        if clause.type != 'import_clause':
            continue
        for child in clause.named_children:
            if child.type == 'identifier':
                local = _slice(child, source)
                specifiers.append(ImportSpecifier('default', local, 'default',
                                                  statement_type_only, converted.get(child.id)))
            elif child.type == 'namespace_import':
                for ns_child in child.named_children:
                    if ns_child.type == 'identifier':
                        specifiers.append(ImportSpecifier('*', _slice(ns_child, source), 'namespace',
                                                          statement_type_only,
                                                          converted.get(ns_child.id)))
            elif child.type == 'named_imports':
                for spec in child.named_children:
                    if spec.type != 'import_specifier':
                        continue
                    name_node = spec.child_by_field_name('name')
                    alias_node = spec.child_by_field_name('alias')
                    if name_node is None:
                        continue
                    imported = _strip_quotes(_slice(name_node, source))
                    local = _slice(alias_node, source) if alias_node is not None else imported
                    spec_type_only = statement_type_only or any(
                        not c.is_named and c.type == 'type' for c in spec.children
                    )
                    specifiers.append(ImportSpecifier(imported, local, 'named', spec_type_only,
                                                      converted.get(spec.id)))

    node.name = module
    node.attrs['source'] = module
    node.attrs['form'] = 'import'
    node.attrs['type_only'] = statement_type_only or any(s.type_only for s in specifiers)
    node.attrs['specifiers'] = specifiers


def function_name(node: SyntaxNode) -> str:
    """Best-effort name of a function-like node, 'anonymous' when none applies."""
    if node.name:
        return node.name
    parent = node.parent
    if parent is not None:
        if parent.kind in (NodeKind.DECLARATOR, NodeKind.PROPERTY) and parent.name:
            return parent.name
        if parent.kind == NodeKind.PAIR and parent.child('key') is not None:
            return parent.child('key').text
        if parent.kind == NodeKind.ASSIGNMENT and parent.child('left') is not None:
            left = parent.child('left')
            return left.name or left.text
    return 'anonymous'


def parameter_count(node: SyntaxNode) -> int:
    params = node.child('params')
    if params is None:
        return 0
    if params.kind == NodeKind.IDENTIFIER:
        return 1
    return len(params.children)
