"""Single-responsibility checks: function size, statement count, complexity, class width."""
from dataclasses import dataclass

from solidlint.analyzer.context import AnalysisContext
from solidlint.analyzer.registry import calculate_complexity, describe
from solidlint.analyzer.syntax import NodeKind, SyntaxNode
from solidlint.analyzer.walker import iter_subtree

from .base import Detector, RuleOptions


@dataclass
class SRPOptions(RuleOptions):
    max_lines: int = 50
    max_statements: int = 10
    max_complexity: int = 10
    max_methods: int = 5


def count_code_lines(node: SyntaxNode) -> int:
    """Non-blank lines of node's text that do not start a comment."""
    count = 0
    for line in node.text.split('\n'):
        stripped = line.strip()
        if stripped and not stripped.startswith(('//', '/*')):
            count += 1
    return count


def count_statements(node: SyntaxNode, max_depth: int) -> int:
    """Statements anywhere inside the function body, nested blocks included."""
    body = node.child('body')
    if body is None or body.kind != NodeKind.BLOCK:
        return 0
    return sum(1 for inner in iter_subtree(body, max_depth) if inner.is_statement)


class SRPDetector(Detector):
    rule_id = 'srp-violation'
    description = 'Enforce the Single Responsibility Principle in functions and classes'
    options_class = SRPOptions
    messages = {
        'tooManyLines': "Function '{name}' exceeds max line count {count}. Limit: {max}",
        'tooManyStatements': "Function '{name}' has too many statements {count}. Limit: {max}",
        'tooComplex': "Function '{name}' is too complex {complexity}. Max complexity: {max}",
        'tooManyMethods': "Class '{name}' has too many methods {count}. Maximum allowed is {max}.",
    }

    def check(self, context: AnalysisContext) -> None:
        for node in context.nodes(NodeKind.FUNCTION, NodeKind.ARROW, NodeKind.METHOD,
                                  NodeKind.CLASS):
            if node.kind == NodeKind.CLASS:
                self._check_class(context, node)
            else:
                self._check_function(context, node)

    def _check_function(self, context: AnalysisContext, node: SyntaxNode):
        options = self.options
        name = describe(node)

        lines = count_code_lines(node)
        if lines > options.max_lines:
            self.report(context, 'tooManyLines', node, name=name, count=lines,
                        max=options.max_lines)

        statements = count_statements(node, context.max_depth)
        if statements > options.max_statements:
            self.report(context, 'tooManyStatements', node, name=name, count=statements,
                        max=options.max_statements)

        complexity = calculate_complexity(node, context.max_depth)
        if complexity > options.max_complexity:
            self.report(context, 'tooComplex', node, name=name, complexity=complexity,
                        max=options.max_complexity)

    def _check_class(self, context: AnalysisContext, node: SyntaxNode):
        body = node.child('body')
        if body is None:
            return
        method_count = sum(1 for member in body.children if member.kind == NodeKind.METHOD)
        if method_count > self.options.max_methods:
            self.report(context, 'tooManyMethods', node, name=node.name or 'AnonymousClass',
                        count=method_count, max=self.options.max_methods)
