from __future__ import annotations

from pathlib import Path


class ConfigurationError(ValueError):
    pass


class ParseError(RuntimeError):
    def __init__(self, path: Path | str, message: str) -> None:
        super().__init__(f"{path}: {message}")
        self.path = str(path)
        self.message = message


class SubmissionError(RuntimeError):
    pass


class SearchError(RuntimeError):
    pass
