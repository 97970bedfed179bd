import logging
from typing import Any, Dict, List

from taskboard.models import ExportFormat, TodoUpdate
from taskboard.services.export import render_export
from . import mapper
from .exceptions import InvalidIdentifier, NotFound, StoreError, TodoError
from .store import TodoStore

logger = logging.getLogger(__name__)


class TodoService:
    """CRUD operations on todos; validation happens before any store call"""

    def __init__(self, store: TodoStore):
        self.store = store

    def _check_id(self, todo_id: str):
        if not self.store.is_valid_id(todo_id):
            raise InvalidIdentifier(todo_id)

    async def _call(self, action: str, coro):
        """Await a store call, turning unexpected failures into StoreError"""
        try:
            return await coro
        except StoreError:
            logger.exception(f"❌ Store failure while trying to {action}")
            raise
        except TodoError:
            raise
        except Exception as e:
            logger.exception(f"❌ Store failure while trying to {action}: {e}")
            raise StoreError(str(e)) from e

    async def list(self) -> List[Dict[str, Any]]:
        return await self._call(
            "list todos",
            self.store.find(sort_by="createdAt", descending=True),
        )

    async def create(self, request: Dict[str, Any]) -> Dict[str, Any]:
        document = mapper.to_stored_on_create(request)
        todo_id = await self._call("create todo", self.store.insert_one(document))
        created = await self._call("read created todo", self.store.find_one(todo_id))
        if created is None:
            raise NotFound(todo_id)

        logger.info(f"✅ Created todo {todo_id}: {created['title']}")
        return created

    async def get(self, todo_id: str) -> Dict[str, Any]:
        self._check_id(todo_id)
        todo = await self._call("fetch todo", self.store.find_one(todo_id))
        if todo is None:
            raise NotFound(todo_id)
        return todo

    async def update(self, todo_id: str, request: Dict[str, Any]) -> Dict[str, Any]:
        self._check_id(todo_id)
        changes = mapper.parse_update(request)

        matched = await self._call(
            "update todo",
            self.store.update_one(todo_id, lambda existing: mapper.to_stored_on_update(existing, changes)),
        )
        if matched == 0:
            raise NotFound(todo_id)

        # Read back what storage holds now, not the locally merged value
        updated = await self._call("read updated todo", self.store.find_one(todo_id))
        if updated is None:
            raise NotFound(todo_id)

        logger.info(f"✅ Updated todo {todo_id} ({', '.join(sorted(changes.model_fields_set)) or 'touch'})")
        return updated

    async def delete(self, todo_id: str) -> Dict[str, str]:
        self._check_id(todo_id)
        deleted = await self._call("delete todo", self.store.delete_one(todo_id))
        if deleted == 0:
            raise NotFound(todo_id)

        logger.info(f"🗑️ Deleted todo {todo_id}")
        return {"message": "Todo deleted successfully"}

    # === BULK ===

    async def bulk_complete(self, todo_ids: List[str], completed: bool = True) -> int:
        for todo_id in todo_ids:
            self._check_id(todo_id)
        changes = TodoUpdate(completed=completed)

        matched = await self._call(
            "bulk update todos",
            self.store.update_many(todo_ids, lambda existing: mapper.to_stored_on_update(existing, changes)),
        )
        logger.info(f"✅ Marked {matched}/{len(todo_ids)} todos as {'completed' if completed else 'pending'}")
        return matched

    async def bulk_delete(self, todo_ids: List[str]) -> int:
        for todo_id in todo_ids:
            self._check_id(todo_id)

        deleted = await self._call("bulk delete todos", self.store.delete_many(todo_ids))
        logger.info(f"🗑️ Deleted {deleted}/{len(todo_ids)} todos")
        return deleted

    # === EXPORT ===

    async def export(self, fmt: ExportFormat = ExportFormat.JSON):
        todos = await self.list()
        return render_export(todos, fmt)

    async def count(self) -> int:
        return await self._call("count todos", self.store.count())
