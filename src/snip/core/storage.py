"""
Snippet storage.

``SnippetStore`` is the interface the execution pipeline relies on;
``JsonSnippetStore`` implements it on top of a single JSON document.
"""

import json
import os
import shutil
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol

from loguru import logger

from snip.core.snippet import Snippet, utcnow
from snip.errors import SnippetNotFound

BACKUP_SUFFIX = ".bak"
MIN_PREFIX_LENGTH = 4


class SnippetStore(Protocol):
    """Key-value snippet store keyed by id or name."""

    def get(self, id_or_name: str) -> Optional[Snippet]: ...

    def list(self, tag: Optional[str] = None, language: Optional[str] = None) -> List[Snippet]: ...

    def add(
        self,
        name: str,
        content: str,
        language: str = "",
        tags: Optional[List[str]] = None,
    ) -> Snippet: ...

    def update(self, snippet_id: str, **fields: Any) -> Snippet: ...

    def delete(self, snippet_id: str) -> bool: ...

    def touch_usage(self, snippet: Snippet) -> None: ...


class JsonSnippetStore:
    """
    Snippet store persisted as ``{"snippets": {id: {...}}}``.

    Every save keeps the previous document as ``<path>.bak`` and replaces
    the file atomically. A corrupt document falls back to the backup, then
    to an empty store.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self.backup_path = self.path.with_name(self.path.name + BACKUP_SUFFIX)

    def _read(self, path: Path) -> Dict[str, Snippet]:
        raw = json.loads(path.read_text(encoding="utf-8"))
        return {
            snippet_id: Snippet.model_validate(data)
            for snippet_id, data in raw.get("snippets", {}).items()
        }

    def _load(self) -> Dict[str, Snippet]:
        if not self.path.exists():
            return {}

        try:
            return self._read(self.path)
        except (OSError, ValueError, AttributeError) as e:
            logger.warning(f"Could not read snippet database {self.path}: {e}")

        if self.backup_path.exists():
            try:
                snippets = self._read(self.backup_path)
                logger.warning(f"Recovered {len(snippets)} snippet(s) from {self.backup_path}")
                return snippets
            except (OSError, ValueError, AttributeError) as e:
                logger.warning(f"Backup database is unreadable as well: {e}")
        return {}

    def _save(self, snippets: Dict[str, Snippet]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        if self.path.exists():
            shutil.copy2(self.path, self.backup_path)

        data = {
            "snippets": {
                snippet_id: snippet.model_dump(mode="json")
                for snippet_id, snippet in snippets.items()
            }
        }
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        tmp_path.write_text(json.dumps(data, indent=2), encoding="utf-8")
        os.replace(tmp_path, self.path)

    def get(self, id_or_name: str) -> Optional[Snippet]:
        """
        Look up a snippet by exact id, exact name, then unique id prefix.
        """
        snippets = self._load()
        if id_or_name in snippets:
            return snippets[id_or_name]

        for snippet in snippets.values():
            if snippet.name == id_or_name:
                return snippet

        if len(id_or_name) >= MIN_PREFIX_LENGTH:
            matches = [s for s in snippets.values() if s.id.startswith(id_or_name)]
            if len(matches) == 1:
                return matches[0]
        return None

    def list(self, tag: Optional[str] = None, language: Optional[str] = None) -> List[Snippet]:
        snippets = self._load().values()
        if tag:
            snippets = [s for s in snippets if tag in s.tags]
        if language:
            snippets = [s for s in snippets if s.language.lower() == language.lower()]
        return sorted(snippets, key=lambda s: s.name.lower())

    def add(
        self,
        name: str,
        content: str,
        language: str = "",
        tags: Optional[List[str]] = None,
    ) -> Snippet:
        snippets = self._load()
        snippet = Snippet(name=name, content=content, language=language, tags=tags or [])

        for existing in snippets.values():
            if existing.name == name:
                logger.warning(f'A snippet named "{name}" already exists ({existing.short_id})')
            elif existing.content_hash == snippet.content_hash:
                logger.warning(f'Same content is already stored as "{existing.name}" ({existing.short_id})')

        snippets[snippet.id] = snippet
        self._save(snippets)
        logger.debug(f"Added snippet {snippet.id} ({name})")
        return snippet

    def update(self, snippet_id: str, **fields: Any) -> Snippet:
        """Update content or metadata fields of a stored snippet."""
        snippets = self._load()
        if snippet_id not in snippets:
            raise SnippetNotFound(snippet_id)

        current = snippets[snippet_id]
        updated = Snippet.model_validate({
            **current.model_dump(),
            **fields,
            "id": current.id,
            "updated_at": utcnow(),
        })
        snippets[snippet_id] = updated
        self._save(snippets)
        return updated

    def delete(self, snippet_id: str) -> bool:
        snippets = self._load()
        if snippets.pop(snippet_id, None) is None:
            return False
        self._save(snippets)
        logger.debug(f"Deleted snippet {snippet_id}")
        return True

    def touch_usage(self, snippet: Snippet) -> None:
        """Record a successful run of ``snippet``."""
        snippets = self._load()
        stored = snippets.get(snippet.id)
        if stored is None:
            logger.debug(f"touch_usage: snippet {snippet.id} no longer exists")
            return

        snippets[snippet.id] = stored.model_copy(update={
            "usage_count": stored.usage_count + 1,
            "last_used_at": utcnow(),
        })
        self._save(snippets)
