"""Shared helpers: parse real JavaScript/TypeScript snippets with tree-sitter."""
from typing import List, Optional

import pytest

from solidlint.analyzer.context import AnalysisContext
from solidlint.analyzer.engine import RuleEngine
from solidlint.analyzer.parser import LanguageParser
from solidlint.analyzer.syntax import SyntaxNode, build_syntax_tree

DEFAULT_PATH = 'src/sample.js'


def parse(source: str, file_path: str = DEFAULT_PATH) -> SyntaxNode:
    """Parse source with the grammar picked by file_path's extension."""
    parser = LanguageParser.from_file_extension(file_path)
    return build_syntax_tree(parser.parse_source(source), source)


def build_context(source: str, file_path: str = DEFAULT_PATH) -> AnalysisContext:
    """AnalysisContext after the collection walk."""
    context = AnalysisContext(file_path, parse(source, file_path))
    context.collect()
    return context


def analyze(detector, source: str, file_path: str = DEFAULT_PATH):
    """Diagnostics of a single detector over source."""
    return RuleEngine([detector]).analyze_source(source, file_path)


def message_ids(diagnostics, message_id: Optional[str] = None) -> List[str]:
    ids = [d.message_id for d in diagnostics]
    if message_id is not None:
        return [i for i in ids if i == message_id]
    return ids


def first_of_kind(root: SyntaxNode, kind: str) -> SyntaxNode:
    """First node of kind in source order."""
    stack = [root]
    while stack:
        node = stack.pop()
        if node.kind == kind:
            return node
        stack.extend(reversed(node.children))
    raise AssertionError(f"No '{kind}' node in tree")


@pytest.fixture
def context_of():
    """Factory fixture: context_of(source, file_path) -> AnalysisContext."""
    return build_context
