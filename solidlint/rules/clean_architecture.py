"""Clean-architecture layering checks on imports and requires."""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from solidlint.analyzer.context import AnalysisContext
from solidlint.analyzer.paths import LayerDefinition, PathClassifier
from solidlint.analyzer.syntax import NodeKind, SyntaxNode

from .base import Detector, RuleOptions

ENTITIES_LAYER = 'entities'
USE_CASE_LAYERS = frozenset({'use-cases', 'useCases'})


def default_layers() -> Dict[str, Dict[str, Any]]:
    return {
        'entities': {'patterns': ['**/entities/**', '**/domain/**'], 'level': 1},
        'use-cases': {'patterns': ['**/use-cases/**', '**/application/**', '**/services/**'],
                      'level': 2},
        'adapters': {'patterns': ['**/adapters/**', '**/controllers/**', '**/presenters/**',
                                  '**/gateways/**'], 'level': 3},
        'frameworks': {'patterns': ['**/frameworks/**', '**/infrastructure/**', '**/external/**'],
                       'level': 4},
    }


@dataclass
class CleanArchitectureOptions(RuleOptions):
    layers: Dict[str, Dict[str, Any]] = field(default_factory=default_layers)
    framework_patterns: List[str] = field(default_factory=lambda: [
        'express', 'mongoose', 'sequelize', 'typeorm', 'axios', 'fetch', 'fs', 'path'])
    interface_patterns: List[str] = field(
        default_factory=lambda: ['**/interfaces/**', '**/ports/**', '**/contracts/**'])
    allowed_cross_cuts: List[str] = field(default_factory=lambda: [
        '**/shared/**', '**/utils/**', '**/constants/**', '**/types/**'])
    business_logic_patterns: List[str] = field(default_factory=lambda: [
        '**/entities/**', '**/use-cases/**', '**/domain/**', '**/application/**'])
    test_patterns: List[str] = field(default_factory=lambda: [
        '**/*.test.js', '**/*.spec.js', '**/*.test.ts', '**/*.spec.ts',
        '**/test/**', '**/tests/**'])
    ui_patterns: List[str] = field(default_factory=lambda: [
        '**/components/**', '**/views/**', '**/pages/**', 'react', 'vue', '@angular'])
    database_patterns: List[str] = field(default_factory=lambda: [
        'mongoose', 'sequelize', 'typeorm', 'mysql', 'postgresql', 'mongodb'])
    path_aliases: Dict[str, str] = field(default_factory=dict)


def build_layers(config: Dict[str, Dict[str, Any]]) -> List[LayerDefinition]:
    """LayerDefinitions ordered by level.

    Raises:
        ValueError: If an entry lacks a pattern list or an integer level
    """
    layers = []
    for name, spec in config.items():
        patterns = spec.get('patterns') if isinstance(spec, dict) else None
        level = spec.get('level') if isinstance(spec, dict) else None
        if not isinstance(patterns, list) or not isinstance(level, int) or isinstance(level, bool):
            raise ValueError(f"Layer '{name}' needs a 'patterns' list and an integer 'level'")
        layers.append(LayerDefinition(name, level, tuple(patterns)))
    return sorted(layers, key=lambda layer: layer.level)


def matches_module(import_path: str, modules: List[str]) -> bool:
    """Bare module name match: 'express' matches 'express' and 'express/lib/router'."""
    if import_path.startswith('node:'):
        import_path = import_path[len('node:'):]
    return any(import_path == module or import_path.startswith(module + '/')
               for module in modules)


class CleanArchitectureDetector(Detector):
    rule_id = 'clean-architecture'
    description = ('Enforce clean architecture principles including dependency rule, '
                   'layer isolation and boundary contracts')
    options_class = CleanArchitectureOptions
    messages = {
        'dependencyRuleViolation': ('Clean Architecture violation: {innerLayer} (level '
                                    '{innerLevel}) cannot import from {outerLayer} (level '
                                    '{outerLevel}). Dependencies must point inward.'),
        'frameworkInBusinessLogic': ('Clean Architecture violation: Business logic "{filePath}" '
                                     'should not directly import framework "{framework}". Use '
                                     'dependency injection or adapters.'),
        'entityDependsOnUseCase': ('Clean Architecture violation: Entity "{entity}" should not '
                                   'depend on use case "{useCase}". Entities should be '
                                   'independent.'),
        'skipLayerViolation': ('Clean Architecture violation: "{currentLayer}" should not '
                               'directly import "{targetLayer}". Go through intermediate layer '
                               '"{intermediateLayer}".'),
        'missingInterface': ('Clean Architecture violation: Cross-boundary import "{importPath}" '
                             'should go through an interface or port.'),
        'uiInBusinessLogic': ('Clean Architecture violation: Business logic should not import UI '
                              'components "{importPath}".'),
        'directDatabaseInUseCase': ('Clean Architecture violation: Use case should not directly '
                                    'import database implementation "{importPath}". Use '
                                    'repository interface.'),
    }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.classifier = PathClassifier(build_layers(self.options.layers),
                                         aliases=self.options.path_aliases)

    def check(self, context: AnalysisContext) -> None:
        options = self.options
        file_path = context.file_path
        if self.classifier.matches(file_path, options.test_patterns):
            return
        if self.classifier.matches(file_path, options.allowed_cross_cuts):
            return

        current_layer = self.classifier.classify(file_path)
        is_business_logic = self.classifier.matches(file_path, options.business_logic_patterns)

        for node in context.nodes(NodeKind.IMPORT):
            import_path = node.attrs.get('source')
            if not import_path or self.classifier.matches(import_path, options.allowed_cross_cuts):
                continue
            self._check_import(context, node, import_path, current_layer, is_business_logic)

    def _check_import(self, context: AnalysisContext, node: SyntaxNode, import_path: str,
                      current_layer: Optional[LayerDefinition], is_business_logic: bool):
        options = self.options
        target = node.child('source') or node
        external = self.classifier.is_external_module(import_path)
        resolved = self.classifier.resolve_import(import_path, context.file_path)
        if not external and self.classifier.matches(resolved, options.allowed_cross_cuts):
            return
        import_layer = None if external else self.classifier.classify(resolved)

        if current_layer and import_layer and current_layer.level < import_layer.level:
            self.report(context, 'dependencyRuleViolation', target,
                        innerLayer=current_layer.name, innerLevel=current_layer.level,
                        outerLayer=import_layer.name, outerLevel=import_layer.level)

        if is_business_logic and external and matches_module(import_path,
                                                             options.framework_patterns):
            self.report(context, 'frameworkInBusinessLogic', target,
                        filePath=context.file_path, framework=import_path)

        if (current_layer and import_layer and current_layer.name == ENTITIES_LAYER
                and import_layer.name in USE_CASE_LAYERS):
            self.report(context, 'entityDependsOnUseCase', target,
                        entity=context.file_path, useCase=import_path)

        if current_layer and import_layer and import_layer.level - current_layer.level > 1:
            intermediate = self.classifier.next_layer(current_layer)
            self.report(context, 'skipLayerViolation', target,
                        currentLayer=current_layer.name, targetLayer=import_layer.name,
                        intermediateLayer=intermediate.name if intermediate else '')

        if (current_layer and import_layer
                and abs(current_layer.level - import_layer.level) > 1
                and not self.classifier.matches(resolved, options.interface_patterns)):
            self.report(context, 'missingInterface', target, importPath=import_path)

        if is_business_logic and self._is_ui_import(import_path, resolved, external):
            self.report(context, 'uiInBusinessLogic', target, importPath=import_path)

        if (current_layer and current_layer.name in USE_CASE_LAYERS and external
                and matches_module(import_path, options.database_patterns)):
            self.report(context, 'directDatabaseInUseCase', target, importPath=import_path)

    def _is_ui_import(self, import_path: str, resolved: str, external: bool) -> bool:
        globs = [pattern for pattern in self.options.ui_patterns if '*' in pattern]
        modules = [pattern for pattern in self.options.ui_patterns if '*' not in pattern]
        if external:
            return matches_module(import_path, modules)
        return self.classifier.matches(resolved, globs)
