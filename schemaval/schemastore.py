"""Schema store: resolves `$ref` locators to decoded schema documents.

Locators may be http(s) URLs, file URLs, or relative paths looked up along
the store's search paths. A `#/json/pointer` fragment selects a part of the
document. Resolved schemas are cached for the lifetime of the store.
"""

import json
import logging
import os
import threading
from typing import Any, Callable, Dict, List, Optional
from urllib.parse import unquote, urlparse

import jsonpointer
from jsonpointer import JsonPointerException
import requests

from schemaval.errors import SchemaResolutionError

logger = logging.getLogger(__name__)


class SchemaStore:
    """Loads and memoizes schema documents by locator.

    Each locator is fetched and decoded at most once, also when several
    threads ask for it at the same time. There is no eviction.
    """

    def __init__(self, search_paths: Optional[List[str]] = None, timeout: float = 30,
                 decoder: Callable[[str], Any] = json.loads) -> None:
        """
        Args:
            search_paths: Directories searched, in order, for relative locators.
                Defaults to the current working directory at load time.
            timeout: Timeout in seconds for HTTP fetches.
            decoder: Turns document text into mappings and sequences.
        """
        self.search_paths = list(search_paths) if search_paths else []
        self.timeout = timeout
        self.decoder = decoder
        self._cache: Dict[str, Any] = {}
        self._locks: Dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def load(self, locator: str) -> Any:
        """Returns the schema for `locator`, loading it on first use.

        Raises:
            SchemaResolutionError: If the locator cannot be fetched, decoded or resolved.
        """
        if locator in self._cache:
            return self._cache[locator]
        with self._lock_for(locator):
            if locator in self._cache:
                return self._cache[locator]
            logger.debug("Loading schema %s", locator)
            schema = self._resolve(locator)
            self._cache[locator] = schema
            return schema

    def clear_cache(self) -> None:
        """Forgets all loaded schemas. Useful for testing."""
        with self._locks_guard:
            self._cache.clear()
            self._locks.clear()

    def _lock_for(self, locator: str) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(locator)
            if lock is None:
                lock = self._locks[locator] = threading.Lock()
            return lock

    def _resolve(self, locator: str) -> Any:
        document_locator, _, fragment = locator.partition('#')
        if not document_locator:
            raise SchemaResolutionError(
                f"Fragment-only locator '{locator}' needs a root document to resolve against")
        if fragment:
            return resolve_fragment(self.load(document_locator), fragment, locator)
        content = self.fetch_content(document_locator)
        try:
            return self.decoder(content)
        except Exception as e:
            raise SchemaResolutionError(f"Error decoding schema document {locator}",
                                        context=str(e), cause=e) from e

    def fetch_content(self, url: str) -> str:
        """
        Fetches the raw text of a schema document.

        Args:
            url: An http(s) or file URL, or a path.

        Returns:
            str: The fetched content.

        Raises:
            SchemaResolutionError: If the document cannot be found or read.
        """
        parsed_url = urlparse(url)
        scheme = parsed_url.scheme

        if scheme in ['http', 'https']:
            logger.debug("Fetching %s", url)
            try:
                response = requests.get(url, timeout=self.timeout)
                response.raise_for_status()
            except requests.RequestException as e:
                raise SchemaResolutionError(f"Error fetching schema {url}", context=str(e), cause=e) from e
            return response.text

        if scheme == 'file':
            file_path = parsed_url.netloc + parsed_url.path if parsed_url.netloc else parsed_url.path
            # On Windows, a file URL might start with a '/' but it's not part of the actual path
            if os.name == 'nt' and file_path.startswith('/'):
                file_path = file_path[1:]
            return self._read_file(unquote(file_path), url)

        # single letters are Windows drive letters, not schemes
        if not scheme or len(scheme) == 1:
            return self._read_file(self._find_file(url), url)

        raise SchemaResolutionError(f"Unsupported URL scheme: {scheme}", context=url)

    def _find_file(self, path: str) -> str:
        if os.path.isabs(path):
            return path
        search_paths = self.search_paths or [os.getcwd()]
        for directory in search_paths:
            candidate = os.path.join(directory, path)
            if os.path.isfile(candidate):
                return candidate
        raise SchemaResolutionError(f"Schema {path} not found",
                                    context=f"searched {os.pathsep.join(search_paths)}")

    @staticmethod
    def _read_file(file_path: str, locator: str) -> str:
        try:
            with open(file_path, 'r', encoding='utf-8') as file:
                return file.read()
        except OSError as e:
            raise SchemaResolutionError(f"Error reading schema {locator}", context=str(e), cause=e) from e


def resolve_fragment(document: Any, fragment: str, locator: str) -> Any:
    """Resolves a JSON pointer fragment (without the leading '#') inside a document."""
    if not fragment:
        return document
    try:
        return jsonpointer.resolve_pointer(document, unquote(fragment))
    except JsonPointerException as e:
        raise SchemaResolutionError(f"Error resolving JSON Pointer reference {locator}",
                                    context=str(e), cause=e) from e


_default_store = SchemaStore()


def default_store() -> SchemaStore:
    return _default_store


def load_schema(locator: str) -> Any:
    """Loads a schema through the process-wide store."""
    return _default_store.load(locator)


def clear_cache() -> None:
    _default_store.clear_cache()
