"""Repository-pattern conventions: placement, naming, width and leaky methods."""
import re
from dataclasses import dataclass, field
from typing import List

from solidlint.analyzer.context import AnalysisContext
from solidlint.analyzer.registry import INTERFACE_SIGNATURE_KIND, METHOD_KIND, ClassRecord
from solidlint.analyzer.syntax import NodeKind, SyntaxNode

from .base import Detector, RuleOptions

REPOSITORY_MARKER = 'Repository'
REPOSITORY_PATTERNS = ('interface', 'class')

# Conditions mixing && and || inside one if test
COMPLEX_CONDITIONAL_PATTERN = re.compile(r'if\s*\([^)]*&&[^)]*\|[^)]*\)')
DATA_OBJECT_MARKERS = ('DTO', 'Model')


def naming_regex(template: str) -> re.Pattern:
    """'I{name}Repository' -> ^I\\w+Repository$ ({type} placeholders may be empty)."""
    pattern = re.escape(template)
    pattern = pattern.replace(re.escape('{name}'), r'\w+').replace(re.escape('{type}'), r'\w*')
    return re.compile(f'^{pattern}$')


@dataclass
class RepositoryOptions(RuleOptions):
    repository_pattern: str = 'interface'
    interface_naming: str = 'I{name}Repository'
    max_methods: int = 10
    business_logic_keywords: List[str] = field(
        default_factory=lambda: ['validate', 'calculate', 'process', 'transform'])
    storage_keywords: List[str] = field(
        default_factory=lambda: ['sql', 'mongo', 'redis', 'query', 'execute'])
    interface_directories: List[str] = field(default_factory=lambda: ['/domain/', '/core/'])
    implementation_directories: List[str] = field(
        default_factory=lambda: ['/infrastructure/', '/data/'])
    infrastructure_imports: List[str] = field(default_factory=lambda: [
        '/infrastructure/', '/data/', 'mongoose', 'sequelize', 'typeorm'])

    def __post_init__(self):
        if self.repository_pattern not in REPOSITORY_PATTERNS:
            raise ValueError(
                f"repository_pattern must be one of {', '.join(REPOSITORY_PATTERNS)}, "
                f"got {self.repository_pattern!r}"
            )


def in_directory(file_path: str, directories: List[str]) -> bool:
    anchored = '/' + file_path.lstrip('/')
    return any(directory in anchored for directory in directories)


class RepositoryDetector(Detector):
    rule_id = 'repository-architecture'
    description = 'Enforce repository architecture pattern'
    options_class = RepositoryOptions
    messages = {
        'wrongDirectory': "Repository {kind} '{name}' should be in the {layer} layer",
        'interfaceNaming': ("Repository interface '{name}' should follow naming pattern: "
                            "{pattern}"),
        'tooManyMethods': ("Repository '{name}' has too many methods ({count}). Consider "
                           "splitting into smaller interfaces."),
        'businessLogicMethod': ("Repository method '{name}' appears to contain business logic. "
                                "Move to domain service."),
        'leakyAbstraction': "Repository method '{name}' exposes database implementation details",
        'returnsDataObject': ("Repository method '{name}' should return domain entities, not "
                              "DTOs or Models (returns {returnType})"),
        'missingImplements': ("Repository implementation '{name}' should implement a repository "
                              "interface"),
        'complexConditional': ("Repository implementation method '{name}' contains complex "
                               "business logic. Move to domain service."),
        'domainImportsInfrastructure': ('Domain layer should not import infrastructure '
                                        'dependencies ("{importPath}")'),
    }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.interface_name_pattern = naming_regex(self.options.interface_naming)

    def check(self, context: AnalysisContext) -> None:
        in_domain = in_directory(context.file_path, self.options.interface_directories)
        for node in context.nodes(NodeKind.CLASS, NodeKind.INTERFACE, NodeKind.IMPORT):
            if node.kind == NodeKind.IMPORT:
                if in_domain:
                    self._check_import(context, node)
                continue
            record = context.record_for(node)
            if REPOSITORY_MARKER not in record.name:
                continue
            if record.origin == 'interface':
                self._check_interface(context, record)
            else:
                self._check_implementation(context, record)

    def _check_interface(self, context: AnalysisContext, record: ClassRecord):
        options = self.options
        if not in_directory(context.file_path, options.interface_directories):
            self.report(context, 'wrongDirectory', record.node, kind='interface',
                        name=record.name, layer='domain/core')

        if not self.interface_name_pattern.match(record.name):
            self.report(context, 'interfaceNaming', record.node, name=record.name,
                        pattern=options.interface_naming)

        methods = [m for m in record.methods if m.kind == INTERFACE_SIGNATURE_KIND]
        self._check_width(context, record, len(methods))
        for method in methods:
            self._check_method_name(context, method.name, method.node)
            return_type = (method.return_type or '').split('<')[0].strip()
            if any(marker in return_type for marker in DATA_OBJECT_MARKERS):
                self.report(context, 'returnsDataObject', method.node, name=method.name,
                            returnType=method.return_type)

    def _check_implementation(self, context: AnalysisContext, record: ClassRecord):
        options = self.options
        if not in_directory(context.file_path, options.implementation_directories):
            self.report(context, 'wrongDirectory', record.node, kind='implementation',
                        name=record.name, layer='infrastructure/data')

        if options.repository_pattern == 'interface' and not record.implements:
            self.report(context, 'missingImplements', record.node, name=record.name)

        methods = [m for m in record.methods if m.kind == METHOD_KIND]
        self._check_width(context, record, len(methods))
        for method in methods:
            self._check_method_name(context, method.name, method.node)
            body = method.node.child('body')
            if body is not None and COMPLEX_CONDITIONAL_PATTERN.search(body.text):
                self.report(context, 'complexConditional', method.node, name=method.name)

    def _check_width(self, context: AnalysisContext, record: ClassRecord, count: int):
        if count > self.options.max_methods:
            self.report(context, 'tooManyMethods', record.node, name=record.name, count=count)

    def _check_method_name(self, context: AnalysisContext, name: str, node: SyntaxNode):
        lower_name = name.lower()
        if any(keyword in lower_name for keyword in self.options.business_logic_keywords):
            self.report(context, 'businessLogicMethod', node, name=name)
        if any(keyword in lower_name for keyword in self.options.storage_keywords):
            self.report(context, 'leakyAbstraction', node, name=name)

    def _check_import(self, context: AnalysisContext, node: SyntaxNode):
        import_path = node.attrs.get('source') or ''
        if any(marker in import_path for marker in self.options.infrastructure_imports):
            self.report(context, 'domainImportsInfrastructure', node.child('source') or node,
                        importPath=import_path)
