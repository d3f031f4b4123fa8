"""Rule engine: parses a file, collects shared state, runs every detector."""
import logging
from pathlib import Path
from typing import TYPE_CHECKING, List, Optional, Sequence

from .context import AnalysisContext
from .parser import LanguageParser
from .reporter import Diagnostic
from .syntax import SyntaxNode, build_syntax_tree
from .walker import DEFAULT_MAX_DEPTH

if TYPE_CHECKING:
    from solidlint.rules.base import Detector

logger = logging.getLogger(__name__)


class RuleEngine:
    """Runs a fixed set of detectors over one file at a time.

    Each call builds a fresh AnalysisContext, so one engine can be shared
    by threads analysing different files. A detector raising an exception
    is logged and skipped; the others still report.
    """

    def __init__(self, detectors: Sequence['Detector'], max_depth: int = DEFAULT_MAX_DEPTH):
        self.detectors = list(detectors)
        self.max_depth = max_depth

    def analyze_tree(self, root: SyntaxNode, file_path: str) -> List[Diagnostic]:
        """Analyze an already converted syntax tree.

        Args:
            root: Program node from build_syntax_tree()
            file_path: Path used for layer classification and locations

        Returns:
            Diagnostics in emission order
        """
        context = AnalysisContext(file_path, root, self.max_depth)
        visited = context.collect()
        logger.debug("%s: %d nodes, %d declarations", context.file_path, visited,
                     len(context.registry))

        for detector in self.detectors:
            try:
                detector.check(context)
            except Exception:
                logger.exception("Detector '%s' failed on %s", detector.rule_id, context.file_path)

        return context.reporter.diagnostics

    def analyze_source(self, source: bytes | str, file_path: str,
                       language: Optional[str] = None) -> List[Diagnostic]:
        """Parse source and analyze it as if it lived at file_path.

        Raises:
            ValueError: If no language is given and file_path has an
                unsupported extension
        """
        if language:
            parser = LanguageParser(language)
        else:
            parser = LanguageParser.from_file_extension(file_path)
            if parser is None:
                raise ValueError(f"Unsupported file type: {file_path}")

        if isinstance(source, str):
            source = source.encode('utf-8')
        tree = parser.parse_source(source)
        return self.analyze_tree(build_syntax_tree(tree, source), file_path)

    def analyze_file(self, file_path: str | Path) -> Optional[List[Diagnostic]]:
        """Analyze a file on disk.

        Returns:
            Diagnostics, or None if the file is unsupported or unreadable
        """
        parser = LanguageParser.from_file_extension(file_path)
        if parser is None:
            return None

        parsed = parser.parse_file(file_path)
        if parsed is None:
            logger.warning("Could not read %s", file_path)
            return None

        tree, source = parsed
        return self.analyze_tree(build_syntax_tree(tree, source), Path(file_path).as_posix())
