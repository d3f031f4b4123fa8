"""Opt-in naming conventions for constants, variables, classes and functions."""
import re
from dataclasses import dataclass

from solidlint.analyzer.context import AnalysisContext
from solidlint.analyzer.syntax import NodeKind, SyntaxNode

from .base import Detector, RuleOptions

UPPER_CASE = re.compile(r'^[A-Z0-9_$]+$')
CAMEL_CASE = re.compile(r'^[a-z][a-zA-Z0-9]*$')
PASCAL_CASE = re.compile(r'^[A-Z][a-zA-Z0-9]*$')


@dataclass
class NamingOptions(RuleOptions):
    check_constants: bool = True
    check_variables: bool = True
    check_classes: bool = True
    check_functions: bool = True


def declaration_keyword(declarator: SyntaxNode) -> str:
    """'const', 'let' or 'var' for a variable declarator."""
    declaration = declarator.parent
    if declaration is None:
        return ''
    return declaration.text.split(None, 1)[0] if declaration.text else ''


def is_top_level(declarator: SyntaxNode) -> bool:
    declaration = declarator.parent
    if declaration is None or declaration.parent is None:
        return False
    container = declaration.parent
    if container.source_type == 'export_statement':
        container = container.parent
    return container is not None and container.kind == NodeKind.PROGRAM


class NamingDetector(Detector):
    rule_id = 'naming-conventions'
    description = ('Enforce naming conventions: UPPER_CASE constants, camelCase variables and '
                   'functions, PascalCase classes')
    options_class = NamingOptions
    enabled_by_default = False
    messages = {
        'constantCase': "Top-level constant '{name}' should be in UPPER_CASE.",
        'variableCase': "Variable '{name}' should be in camelCase.",
        'classCase': "Class '{name}' should be in PascalCase.",
        'functionCase': "Function '{name}' should be in camelCase.",
    }

    def check(self, context: AnalysisContext) -> None:
        options = self.options
        for node in context.nodes(NodeKind.DECLARATOR, NodeKind.CLASS, NodeKind.FUNCTION):
            name_node = node.child('name')
            if name_node is None or name_node.kind != NodeKind.IDENTIFIER:
                continue
            name = name_node.name

            if node.kind == NodeKind.DECLARATOR:
                keyword = declaration_keyword(node)
                if keyword == 'const' and is_top_level(node):
                    if options.check_constants and not UPPER_CASE.match(name):
                        self.report(context, 'constantCase', name_node, name=name)
                elif keyword in ('const', 'let', 'var'):
                    if options.check_variables and not CAMEL_CASE.match(name):
                        self.report(context, 'variableCase', name_node, name=name)
            elif node.kind == NodeKind.CLASS:
                if options.check_classes and not PASCAL_CASE.match(name):
                    self.report(context, 'classCase', name_node, name=name)
            elif node.source_type == 'function_declaration':
                if options.check_functions and not CAMEL_CASE.match(name):
                    self.report(context, 'functionCase', name_node, name=name)
