"""Tree-sitter parser for JavaScript and TypeScript sources."""
from pathlib import Path
from typing import Optional
from tree_sitter import Language, Parser, Tree
import tree_sitter_javascript as tsjavascript
import tree_sitter_typescript as tstypescript


class LanguageParser:
    """JavaScript/TypeScript parser using the tree-sitter v0.22+ API."""

    SUPPORTED_LANGUAGES = {
        '.js': 'javascript',
        '.jsx': 'javascript',
        '.mjs': 'javascript',
        '.cjs': 'javascript',
        '.ts': 'typescript',
        '.mts': 'typescript',
        '.cts': 'typescript',
        '.tsx': 'tsx',
    }

    def __init__(self, language: str):
        """Initialize parser for given language (javascript, typescript, tsx).

        Args:
            language: One of 'javascript', 'typescript', 'tsx'

        Raises:
            ValueError: If language is not supported
        """
        self.language = language
        self.parser = self._create_parser()

    def _create_parser(self) -> Parser:
        """Build a Parser bound to the grammar for self.language.

        Raises:
            ValueError: If language is not supported
        """
        if self.language == 'javascript':
            lang = Language(tsjavascript.language())
        elif self.language == 'typescript':
            lang = Language(tstypescript.language_typescript())
        elif self.language == 'tsx':
            # JSX inside TypeScript needs its own grammar
            lang = Language(tstypescript.language_tsx())
        else:
            raise ValueError(f"Unsupported language: {self.language}")

        return Parser(lang)

    def parse_source(self, source_code: bytes | str) -> Tree:
        """Parse in-memory source code.

        Args:
            source_code: Source as bytes or str (str is UTF-8 encoded)

        Returns:
            Parsed tree-sitter Tree (tree-sitter always produces a tree,
            marking unparseable regions with ERROR nodes)
        """
        if isinstance(source_code, str):
            source_code = source_code.encode('utf-8')
        return self.parser.parse(source_code)

    def parse_file(self, file_path: str | Path) -> Optional[tuple[Tree, bytes]]:
        """Parse file and return the tree together with the raw source.

        Args:
            file_path: Path to source file to parse

        Returns:
            (Tree, source bytes), or None if the file cannot be read
        """
        file_path = Path(file_path)

        if not file_path.is_file():
            return None

        try:
            source_code = file_path.read_bytes()
        except OSError:
            return None
        return self.parser.parse(source_code), source_code

    @classmethod
    def is_supported(cls, file_path: str | Path) -> bool:
        return Path(file_path).suffix.lower() in cls.SUPPORTED_LANGUAGES

    @classmethod
    def from_file_extension(cls, file_path: str | Path) -> Optional['LanguageParser']:
        """Create parser based on file extension.

        Args:
            file_path: Path to determine language from

        Returns:
            LanguageParser instance, or None if extension not supported
        """
        extension = Path(file_path).suffix.lower()

        language = cls.SUPPORTED_LANGUAGES.get(extension)
        if language:
            return cls(language)
        return None
