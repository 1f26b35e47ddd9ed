"""Task manager CRUD."""
from typing import Any, Dict, List

from pymongo import DESCENDING, ReturnDocument

from database import create_document, parse_object_id, serialize_doc, utcnow
from errors import InvalidInputError, NotFoundError
from schemas import Task, TaskUpdate


def list_tasks(db) -> List[Dict[str, Any]]:
    cursor = db["task"].find({}).sort([("createdAt", DESCENDING), ("_id", DESCENDING)])
    return [serialize_doc(t) for t in cursor]


def create_task(db, task: Task) -> Dict[str, Any]:
    task_id = create_document("task", task, db=db)
    return get_task(db, task_id)


def get_task(db, task_id: str) -> Dict[str, Any]:
    oid = parse_object_id(task_id)
    task = db["task"].find_one({"_id": oid}) if oid else None
    if not task:
        raise NotFoundError("Task", task_id)
    return serialize_doc(task)


def update_task(db, task_id: str, changes: TaskUpdate) -> Dict[str, Any]:
    update = changes.model_dump(by_alias=True, exclude_unset=True)
    if not update:
        raise InvalidInputError("No fields to update")
    for field in ("title", "status", "priority"):
        if field in update and update[field] is None:
            raise InvalidInputError(f"{field} cannot be null")
    update["updatedAt"] = utcnow()

    oid = parse_object_id(task_id)
    task = None
    if oid:
        task = db["task"].find_one_and_update(
            {"_id": oid}, {"$set": update}, return_document=ReturnDocument.AFTER
        )
    if not task:
        raise NotFoundError("Task", task_id)
    return serialize_doc(task)


def delete_task(db, task_id: str) -> None:
    oid = parse_object_id(task_id)
    result = db["task"].delete_one({"_id": oid}) if oid else None
    if result is None or result.deleted_count == 0:
        raise NotFoundError("Task", task_id)
