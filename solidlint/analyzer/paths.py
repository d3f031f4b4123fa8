"""Glob-based classification of file and import paths into architecture layers."""
import posixpath
from dataclasses import dataclass, field
from fnmatch import fnmatchcase
from typing import Dict, Iterable, List, Optional, Sequence


@dataclass(frozen=True)
class LayerDefinition:
    """A named layer; lower level means closer to the core."""
    name: str
    level: int
    patterns: Sequence[str] = field(default_factory=tuple)


def normalize_path(path: str) -> str:
    """POSIX separators, leading ``./`` and ``../`` segments removed."""
    path = path.replace('\\', '/')
    while True:
        if path.startswith('./'):
            path = path[2:]
        elif path.startswith('../'):
            path = path[3:]
        else:
            return path


def match_glob(path: str, pattern: str) -> bool:
    """fnmatch-style glob where a leading ``**/`` may also match nothing."""
    if fnmatchcase(path, pattern):
        return True
    return pattern.startswith('**/') and fnmatchcase(path, pattern[3:])


class PathClassifier:
    """Classify paths against ordered layer definitions.

    Aliases map an import prefix to a project path, e.g. ``{"@domain":
    "src/domain"}``; tsconfig-style keys such as ``"@app/*"`` are accepted and
    normalized the same way.
    """

    def __init__(self, layers: Iterable[LayerDefinition] = (),
                 aliases: Optional[Dict[str, str]] = None):
        self.layers: List[LayerDefinition] = list(layers)
        levels = [layer.level for layer in self.layers]
        if len(levels) != len(set(levels)):
            raise ValueError("Layer levels must be unique")

        self.aliases: Dict[str, str] = {}
        for alias, target in (aliases or {}).items():
            clean_alias = alias.replace('/*', '').rstrip('/')
            clean_target = target.replace('/*', '').rstrip('/')
            if clean_alias:
                self.aliases[clean_alias] = clean_target

    def matches(self, path: str, patterns: Iterable[str]) -> bool:
        normalized = normalize_path(path)
        return any(match_glob(normalized, pattern) for pattern in patterns)

    def classify(self, path: Optional[str]) -> Optional[LayerDefinition]:
        """First layer, in declared order, with a pattern matching path."""
        if not path:
            return None
        normalized = normalize_path(self.resolve_alias(path))
        for layer in self.layers:
            if any(match_glob(normalized, pattern) for pattern in layer.patterns):
                return layer
        return None

    def next_layer(self, layer: LayerDefinition) -> Optional[LayerDefinition]:
        """Layer with the smallest level above layer.level."""
        outer = [candidate for candidate in self.layers if candidate.level > layer.level]
        return min(outer, key=lambda candidate: candidate.level) if outer else None

    def _alias_for(self, path: str) -> Optional[str]:
        for alias in self.aliases:
            if path == alias or path.startswith(alias + '/'):
                return alias
        return None

    def resolve_alias(self, path: str) -> str:
        alias = self._alias_for(path)
        if alias is None:
            return path
        remainder = path[len(alias):].lstrip('/')
        target = self.aliases[alias]
        if not remainder:
            return target
        return f"{target}/{remainder}" if target else remainder

    def is_external_module(self, path: str) -> bool:
        """Bare module specifiers ('express', '@nestjs/core') that are not aliases."""
        if path.startswith(('./', '../')) or path in ('.', '..'):
            return False
        if posixpath.isabs(path.replace('\\', '/')):
            return False
        return self._alias_for(path) is None

    def resolve_import(self, import_path: str, importer_path: str) -> str:
        """Project-relative target of an import, without filesystem access.

        Relative imports are joined onto the importer's directory, aliases
        are expanded, bare modules come back unchanged.
        """
        if self._alias_for(import_path) is not None:
            return self.resolve_alias(import_path)
        if self.is_external_module(import_path):
            return import_path
        if posixpath.isabs(import_path):
            return import_path
        importer_dir = posixpath.dirname(importer_path.replace('\\', '/'))
        return posixpath.normpath(posixpath.join(importer_dir, import_path))
