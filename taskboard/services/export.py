# services/export.py

import csv
import io
import json
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from taskboard.config import settings
from taskboard.models import ExportFormat
from taskboard.utils.datetime_utils import local_now

CSV_COLUMNS = [
    "id", "title", "description", "completed", "priority",
    "category", "tags", "dueDate", "createdAt", "updatedAt",
]


def export_to_json(todos: List[Dict[str, Any]]) -> str:
    return json.dumps(todos, ensure_ascii=False, indent=2)


def export_to_csv(todos: List[Dict[str, Any]]) -> str:
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, CSV_COLUMNS, extrasaction="ignore")
    writer.writeheader()
    for todo in todos:
        row = {key: todo.get(key) for key in CSV_COLUMNS}
        row["tags"] = ";".join(todo.get("tags") or [])
        row["completed"] = "true" if todo.get("completed") else "false"
        writer.writerow(row)
    return buffer.getvalue()


def render_export(todos: List[Dict[str, Any]], fmt: ExportFormat,
                  now: Optional[datetime] = None) -> Tuple[str, str, str]:
    """Returns (content, media type, file name); the name is stamped in local time"""
    stamp = (now or local_now(settings.tz)).strftime('%Y%m%d_%H%M%S')
    if fmt == ExportFormat.CSV:
        return export_to_csv(todos), "text/csv", f"todos_{stamp}.csv"
    return export_to_json(todos), "application/json", f"todos_{stamp}.json"
