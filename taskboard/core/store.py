import asyncio
import json
import logging
import os
import re
import uuid
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional

from .exceptions import StoreError

logger = logging.getLogger(__name__)

Document = Dict[str, Any]
Predicate = Callable[[Document], bool]

_ID_PATTERN = re.compile(r"^[0-9a-f]{32}$")


class TodoStore:
    """Document store for todos backed by a single JSON file.

    The file holds one object mapping id -> document. Every public method
    reads the file, applies the change and writes it back under one lock,
    so a single call never interleaves with another call on this store.
    """

    def __init__(self, data_file: Path):
        self.data_file = Path(data_file)
        self._lock = asyncio.Lock()

    async def initialize(self):
        """Create the data directory and an empty collection if missing"""
        async with self._lock:
            try:
                self.data_file.parent.mkdir(parents=True, exist_ok=True)
                if not self.data_file.exists():
                    self._save_json({})
            except OSError as e:
                raise StoreError(f"Cannot initialize {self.data_file}: {e}") from e

    @staticmethod
    def new_id() -> str:
        return uuid.uuid4().hex

    @staticmethod
    def is_valid_id(doc_id: Any) -> bool:
        return isinstance(doc_id, str) and bool(_ID_PATTERN.match(doc_id))

    # === FILE IO ===

    def _load_json(self) -> Dict[str, Document]:
        if not self.data_file.exists():
            return {}
        try:
            with open(self.data_file, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise StoreError(f"Cannot read {self.data_file}: {e}") from e
        if not isinstance(data, dict):
            raise StoreError(f"Corrupt collection in {self.data_file}")
        return data

    def _save_json(self, data: Dict[str, Document]):
        tmp_file = self.data_file.with_suffix(self.data_file.suffix + ".tmp")
        try:
            with open(tmp_file, 'w', encoding='utf-8') as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
            os.replace(tmp_file, self.data_file)
        except (OSError, TypeError, ValueError) as e:
            raise StoreError(f"Cannot write {self.data_file}: {e}") from e

    # === READS ===

    async def find(self, predicate: Optional[Predicate] = None,
                   sort_by: Optional[str] = None, descending: bool = False) -> List[Document]:
        async with self._lock:
            documents = list(self._load_json().values())

        if predicate is not None:
            documents = [doc for doc in documents if predicate(doc)]

        if sort_by:
            # Documents missing the field sort after the rest
            present = [doc for doc in documents if doc.get(sort_by) is not None]
            missing = [doc for doc in documents if doc.get(sort_by) is None]
            present.sort(key=lambda doc: doc[sort_by], reverse=descending)
            documents = present + missing

        return documents

    async def find_one(self, doc_id: str) -> Optional[Document]:
        async with self._lock:
            return self._load_json().get(doc_id)

    async def count(self) -> int:
        async with self._lock:
            return len(self._load_json())

    # === WRITES ===

    async def insert_one(self, document: Document) -> str:
        async with self._lock:
            documents = self._load_json()
            doc_id = self.new_id()
            while doc_id in documents:
                doc_id = self.new_id()
            documents[doc_id] = {**document, "id": doc_id}
            self._save_json(documents)

        logger.debug(f"Inserted document {doc_id}")
        return doc_id

    async def update_one(self, doc_id: str, modifier: Callable[[Document], Document]) -> int:
        """Replace the document with ``modifier(existing)``; returns matched count"""
        async with self._lock:
            documents = self._load_json()
            existing = documents.get(doc_id)
            if existing is None:
                return 0
            documents[doc_id] = {**modifier(dict(existing)), "id": doc_id}
            self._save_json(documents)
        return 1

    async def update_many(self, doc_ids: Iterable[str], modifier: Callable[[Document], Document]) -> int:
        async with self._lock:
            documents = self._load_json()
            matched = 0
            for doc_id in dict.fromkeys(doc_ids):
                existing = documents.get(doc_id)
                if existing is None:
                    continue
                documents[doc_id] = {**modifier(dict(existing)), "id": doc_id}
                matched += 1
            if matched:
                self._save_json(documents)
        return matched

    async def delete_one(self, doc_id: str) -> int:
        async with self._lock:
            documents = self._load_json()
            if documents.pop(doc_id, None) is None:
                return 0
            self._save_json(documents)
        logger.debug(f"Deleted document {doc_id}")
        return 1

    async def delete_many(self, doc_ids: Iterable[str]) -> int:
        async with self._lock:
            documents = self._load_json()
            deleted = 0
            for doc_id in dict.fromkeys(doc_ids):
                if documents.pop(doc_id, None) is not None:
                    deleted += 1
            if deleted:
                self._save_json(documents)
        return deleted
