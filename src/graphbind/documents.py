"""
Document sources - resolve a document name into GraphQL document text.

FileDocumentSource looks documents up on disk, by default in a
"graphql-documents" directory with ".graphql" or ".gql" extension:

    graphql-documents/
        bookQuery.graphql
        authorQuery.gql
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Iterable, Mapping, Protocol, runtime_checkable

from .core.errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_LOCATIONS = ("graphql-documents",)
DEFAULT_EXTENSIONS = (".graphql", ".gql")


@runtime_checkable
class DocumentSource(Protocol):
    """Looks up documents by name."""

    def get_document(self, name: str) -> str:
        """
        Return the document text for a name.

        Raises:
            ConfigurationError: If no document exists for the name
        """
        ...


class FileDocumentSource:
    """
    Loads documents from files, caching their content.

    Usage:
        source = FileDocumentSource(["graphql-documents", "/etc/app/documents"])
        query = source.get_document("bookQuery")
    """

    def __init__(
        self,
        locations: Iterable[Path | str] = DEFAULT_LOCATIONS,
        extensions: Iterable[str] = DEFAULT_EXTENSIONS,
    ):
        """
        Initialize document source.

        Args:
            locations: Directories searched in order
            extensions: File extensions tried in order for each directory
        """
        self.locations = [Path(location) for location in locations]
        self.extensions = list(extensions)
        self._cache: dict[str, str] = {}
        self._lock = threading.Lock()

    def get_document(self, name: str) -> str:
        with self._lock:
            cached = self._cache.get(name)
        if cached is not None:
            return cached

        for location in self.locations:
            for extension in self.extensions:
                path = location / f"{name}{extension}"
                if path.is_file():
                    logger.debug(f"Loaded document '{name}' from {path}")
                    content = path.read_text(encoding="utf-8")
                    with self._lock:
                        self._cache[name] = content
                    return content

        searched = ", ".join(str(location) for location in self.locations)
        raise ConfigurationError(f"Failed to find document '{name}' in locations: {searched}")


class MappingDocumentSource:
    """Serves documents from an in-memory mapping of name -> text."""

    def __init__(self, documents: Mapping[str, str]):
        self.documents = dict(documents)

    def get_document(self, name: str) -> str:
        try:
            return self.documents[name]
        except KeyError:
            raise ConfigurationError(f"Document '{name}' not found") from None
