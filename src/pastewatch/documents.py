from pathlib import Path
from typing import Protocol

# Extension -> language id, as reported by common editors
LANGUAGE_IDS = {
    ".py": "python",
    ".js": "javascript",
    ".jsx": "javascriptreact",
    ".ts": "typescript",
    ".tsx": "typescriptreact",
    ".json": "json",
    ".yaml": "yaml",
    ".yml": "yaml",
    ".toml": "toml",
    ".md": "markdown",
    ".rst": "restructuredtext",
    ".txt": "plaintext",
    ".html": "html",
    ".css": "css",
    ".scss": "scss",
    ".sql": "sql",
    ".sh": "shellscript",
    ".bash": "shellscript",
    ".java": "java",
    ".go": "go",
    ".rs": "rust",
    ".c": "c",
    ".h": "c",
    ".cpp": "cpp",
    ".hpp": "cpp",
    ".cs": "csharp",
}


class Document(Protocol):
    """What the tracker needs from a saved document."""

    def get_path(self) -> str: ...

    def get_text(self) -> str: ...

    def get_line_count(self) -> int: ...

    def get_language_id(self) -> str: ...


def guess_language_id(path: Path) -> str:
    return LANGUAGE_IDS.get(Path(path).suffix.lower(), "plaintext")


class FileDocument:
    """A document backed by a file on disk, read once on construction."""

    def __init__(self, path: Path, text: str = None, language_id: str = None):
        self.path = Path(path).absolute()
        if text is None:
            text = self.path.read_text(encoding="utf-8", errors="replace")
        self.text = text
        self.language_id = language_id or guess_language_id(self.path)

    def get_path(self) -> str:
        return str(self.path)

    def get_text(self) -> str:
        return self.text

    def get_line_count(self) -> int:
        return self.text.count("\n") + 1

    def get_language_id(self) -> str:
        return self.language_id
