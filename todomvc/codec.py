"""
TodoMVC — MessagePack Wire Codec
==================================

What:  Encodes and decodes API payloads as MessagePack.
Who:   The task routes (request bodies and responses) and the Python client.

Wire shapes:
    Entry        map {"id": bin(16), "content": str, "completed": bool, "editing": bool}
    Entry list   array of Entry
    Optional     Entry or nil
    TaskRequest  map {"content": str}

Decoding also accepts positional arrays (`[id, content, completed, editing]`
and `[content]`) and ids given as canonical UUID strings.
"""

import uuid
from typing import Any, Iterable, List, Optional

import msgpack
from pydantic import ValidationError as PydanticValidationError

from todomvc.exceptions import PayloadError
from todomvc.schemas.task import Entry, TaskRequest

MSGPACK_MEDIA_TYPE = "application/msgpack"

_ENTRY_FIELDS = ("id", "content", "completed", "editing")
_TASK_REQUEST_FIELDS = ("content",)


def encode(obj: Any) -> bytes:
    return msgpack.packb(obj, use_bin_type=True)


def decode(data: bytes) -> Any:
    """Unpack one MessagePack object; trailing bytes or garbage raise PayloadError."""
    try:
        return msgpack.unpackb(data, raw=False)
    except (msgpack.exceptions.UnpackException, ValueError, TypeError) as e:
        raise PayloadError(
            message=f"Body is not valid MessagePack: {e}",
            context={"error_type": type(e).__name__},
        ) from e


def _uuid_from_wire(value: Any) -> uuid.UUID:
    if isinstance(value, uuid.UUID):
        return value
    if isinstance(value, (bytes, bytearray)) and len(value) == 16:
        return uuid.UUID(bytes=bytes(value))
    if isinstance(value, str):
        try:
            return uuid.UUID(value)
        except ValueError:
            pass
    raise PayloadError(message=f"Invalid task id on the wire: {value!r}")


def _as_mapping(obj: Any, fields: tuple, what: str) -> dict:
    if isinstance(obj, dict):
        return obj
    if isinstance(obj, (list, tuple)) and len(obj) == len(fields):
        return dict(zip(fields, obj))
    raise PayloadError(message=f"Expected {what} as a map or a {len(fields)}-element array")


# ── Entry ─────────────────────────────────────────────────────────────────

def entry_to_wire(entry: Entry) -> dict:
    return {
        "id": entry.id.bytes,
        "content": entry.content,
        "completed": entry.completed,
        "editing": entry.editing,
    }


def entry_from_wire(obj: Any) -> Entry:
    data = _as_mapping(obj, _ENTRY_FIELDS, "entry")
    missing = [f for f in _ENTRY_FIELDS if f not in data]
    if missing:
        raise PayloadError(message=f"Entry is missing fields: {', '.join(missing)}")
    try:
        return Entry(
            id=_uuid_from_wire(data["id"]),
            content=data["content"],
            completed=data["completed"],
            editing=data["editing"],
        )
    except PydanticValidationError as e:
        raise PayloadError(message=f"Invalid entry: {e.errors()[0]['msg']}") from e


def entries_from_wire(obj: Any) -> List[Entry]:
    if not isinstance(obj, (list, tuple)):
        raise PayloadError(message="Expected an array of entries")
    return [entry_from_wire(item) for item in obj]


def task_request_from_wire(obj: Any) -> TaskRequest:
    data = _as_mapping(obj, _TASK_REQUEST_FIELDS, "task request")
    content = data.get("content")
    if not isinstance(content, str):
        raise PayloadError(message="Task request needs a string 'content'")
    return TaskRequest(content=content)


# ── Byte-level helpers ────────────────────────────────────────────────────

def pack_entry(entry: Entry) -> bytes:
    return encode(entry_to_wire(entry))


def pack_entries(entries: Iterable[Entry]) -> bytes:
    return encode([entry_to_wire(e) for e in entries])


def pack_optional_entry(entry: Optional[Entry]) -> bytes:
    return encode(None if entry is None else entry_to_wire(entry))


def pack_task_request(content: str) -> bytes:
    return encode({"content": content})


def unpack_entry(data: bytes) -> Entry:
    return entry_from_wire(decode(data))


def unpack_entries(data: bytes) -> List[Entry]:
    return entries_from_wire(decode(data))


def unpack_optional_entry(data: bytes) -> Optional[Entry]:
    obj = decode(data)
    return None if obj is None else entry_from_wire(obj)


def unpack_task_request(data: bytes) -> TaskRequest:
    return task_request_from_wire(decode(data))
