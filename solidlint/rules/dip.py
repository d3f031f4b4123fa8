"""Dependency inversion checks on imports of concrete implementations."""
import posixpath
import re
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Dict, List, Optional

from solidlint.analyzer.context import AnalysisContext
from solidlint.analyzer.paths import PathClassifier
from solidlint.analyzer.syntax import ImportSpecifier, NodeKind, SyntaxNode

from .base import Detector, RuleOptions

# (pattern, replacement) applied in order, first occurrence only
ABSTRACT_DIRECTORY_SUBSTITUTIONS = (
    (re.compile(r'/concrete/'), '/interfaces/'),
    (re.compile(r'/impl/'), '/interfaces/'),
    (re.compile(r'/implementations/'), '/interfaces/'),
    (re.compile(r'/concrete$'), '/interfaces'),
    (re.compile(r'/impl$'), '/interfaces'),
    (re.compile(r'/implementations$'), '/interfaces'),
)

PROBE_EXTENSIONS = ('', '.js', '.ts', '.tsx')


@dataclass
class DIPOptions(RuleOptions):
    KEY_ALIASES = {'checkTypeScriptTypes': 'check_typescript_types'}

    concrete_patterns: List[str] = field(
        default_factory=lambda: ['**/concrete/**', '**/impl/**', '**/implementations/**'])
    abstract_patterns: List[str] = field(
        default_factory=lambda: ['**/interfaces/**', '**/abstractions/**', '**/contracts/**'])
    allowed_files: List[str] = field(default_factory=lambda: [
        '**/di-container.js', '**/factory.js', '**/bootstrap.js', '**/index.js'])
    exclude_external_modules: bool = True
    check_typescript_types: bool = True
    path_aliases: Dict[str, str] = field(default_factory=dict)
    concrete_class_suffixes: List[str] = field(default_factory=lambda: [
        'Impl', 'Implementation', 'Concrete', 'Service', 'Repository'])
    abstract_class_prefixes: List[str] = field(
        default_factory=lambda: ['I', 'Abstract', 'Base'])
    custom_mappings: Dict[str, str] = field(default_factory=dict)
    strict_mode: bool = False


def suggested_path_exists(importer_dir: str, suggested: str) -> bool:
    """Whether suggested (relative to importer_dir) exists, with or without a JS/TS extension.

    The joined path is normalized textually before the disk is probed.
    """
    try:
        target = posixpath.normpath(posixpath.join(importer_dir, suggested))
        return any(Path(target + extension).exists() for extension in PROBE_EXTENSIONS)
    except (OSError, ValueError):
        return False


class DIPDetector(Detector):
    rule_id = 'dip-violation'
    description = 'Enforce dependency inversion by preventing direct concrete dependency imports'
    options_class = DIPOptions
    messages = {
        'directConcreteDependency': ('Direct import of concrete implementation "{importPath}" '
                                     'violates DIP. Use dependency injection or abstract '
                                     'interfaces instead.'),
        'suggestAbstraction': 'Consider importing from "{suggestedPath}" instead of "{importPath}".',
        'noAbstractionFound': ('No matching abstraction found for "{importPath}". Consider '
                               'creating an interface or using dependency injection.'),
        'concreteClassImport': ('Direct import of concrete class "{className}" violates DIP. '
                                'Consider using an interface or abstract class.'),
        'typeScriptTypeImport': ('Import "{importPath}" appears to be a concrete type. Consider '
                                 'using an interface or abstract type.'),
    }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.classifier = PathClassifier(aliases=self.options.path_aliases)
        self.path_exists = lru_cache(maxsize=4096)(suggested_path_exists)

    def check(self, context: AnalysisContext) -> None:
        if self.classifier.matches(context.file_path, self.options.allowed_files):
            return
        for node in context.nodes(NodeKind.IMPORT):
            import_path = node.attrs.get('source')
            if import_path:
                self._check_import(context, node, import_path)

    def is_concrete(self, import_path: str) -> bool:
        resolved = self.classifier.resolve_alias(import_path)
        return self.classifier.matches(resolved, self.options.concrete_patterns)

    def is_abstract(self, import_path: str) -> bool:
        resolved = self.classifier.resolve_alias(import_path)
        return self.classifier.matches(resolved, self.options.abstract_patterns)

    def suggest_abstract_path(self, import_path: str, importer_path: str) -> Optional[str]:
        """Interface path for a concrete import, only if it exists on disk.

        Custom mappings win and are returned without checking the disk.
        """
        mapped = self.options.custom_mappings.get(import_path)
        if mapped:
            return mapped

        suggested = self.classifier.resolve_alias(import_path)
        for pattern, replacement in ABSTRACT_DIRECTORY_SUBSTITUTIONS:
            suggested = pattern.sub(replacement, suggested, count=1)
        for suffix in self.options.concrete_class_suffixes:
            suggested = re.sub(rf'{re.escape(suffix)}(\.\w+)?$', r'\1', suggested, count=1)

        importer_dir = posixpath.dirname(importer_path) or '.'
        if self.path_exists(importer_dir, suggested):
            return suggested
        return None

    def _check_import(self, context: AnalysisContext, node: SyntaxNode, import_path: str):
        options = self.options
        if options.exclude_external_modules and self.classifier.is_external_module(import_path):
            return

        target = node.child('source') or node
        is_esm = node.attrs.get('form') == 'import'
        type_only = is_esm and node.attrs.get('type_only', False)

        if type_only and context.is_typescript and options.check_typescript_types:
            if self.is_concrete(import_path) and not self.is_abstract(import_path):
                suggested = self.suggest_abstract_path(import_path, context.file_path)
                self.report(context, 'typeScriptTypeImport', target, importPath=import_path)
                if suggested:
                    self.report(context, 'suggestAbstraction', target, importPath=import_path,
                                suggestedPath=suggested)
            return

        if self.is_concrete(import_path):
            if self.is_abstract(import_path):
                return
            suggested = self.suggest_abstract_path(import_path, context.file_path)
            self.report(context, 'directConcreteDependency', target, importPath=import_path)
            if suggested:
                self.report(context, 'suggestAbstraction', target, importPath=import_path,
                            suggestedPath=suggested)
            elif options.strict_mode:
                self.report(context, 'noAbstractionFound', target, importPath=import_path)

        if is_esm and not type_only:
            for specifier in node.attrs.get('specifiers', ()):
                self._check_specifier(context, node, specifier)

    def _check_specifier(self, context: AnalysisContext, node: SyntaxNode,
                         specifier: ImportSpecifier):
        if specifier.kind == 'namespace':
            return
        class_name = specifier.local if specifier.kind == 'default' else specifier.imported
        options = self.options
        if (class_name.endswith(tuple(options.concrete_class_suffixes))
                and not class_name.startswith(tuple(options.abstract_class_prefixes))):
            self.report(context, 'concreteClassImport', specifier.node or node,
                        className=class_name)
