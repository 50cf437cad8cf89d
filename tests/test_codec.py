"""
TodoMVC — Wire Codec Tests
============================

What:  The MessagePack shapes the server emits and the variants it accepts.
"""

import uuid

import msgpack
import pytest

from todomvc import codec
from todomvc.exceptions import PayloadError
from todomvc.schemas.task import Entry


class TestEncoding:

    def test_entry_id_is_sixteen_raw_bytes(self):
        entry = Entry.new("bytes")
        raw = msgpack.unpackb(codec.pack_entry(entry), raw=False)

        assert raw["id"] == entry.id.bytes
        assert isinstance(raw["id"], bytes)
        assert raw == {"id": entry.id.bytes, "content": "bytes", "completed": False, "editing": False}

    def test_absent_entry_is_nil(self):
        assert codec.pack_optional_entry(None) == b"\xc0"


class TestLenientDecoding:

    def test_positional_entry(self):
        task_id = uuid.uuid4()
        data = codec.encode([task_id.bytes, "positional", True, False])

        entry = codec.unpack_entry(data)

        assert entry == Entry(id=task_id, content="positional", completed=True, editing=False)

    def test_string_id(self):
        task_id = uuid.uuid4()
        data = codec.encode({"id": str(task_id), "content": "s", "completed": False, "editing": True})

        assert codec.unpack_entry(data).id == task_id

    def test_positional_task_request(self):
        assert codec.unpack_task_request(codec.encode(["hello"])).content == "hello"


class TestRejection:

    def test_missing_field(self):
        data = codec.encode({"id": uuid.uuid4().bytes, "content": "no flags"})
        with pytest.raises(PayloadError, match="missing fields"):
            codec.unpack_entry(data)

    def test_bad_id(self):
        data = codec.encode({"id": b"short", "content": "x", "completed": False, "editing": False})
        with pytest.raises(PayloadError):
            codec.unpack_entry(data)

    def test_entries_must_be_array(self):
        with pytest.raises(PayloadError):
            codec.unpack_entries(codec.encode({"content": "x"}))

    def test_task_request_content_must_be_text(self):
        with pytest.raises(PayloadError):
            codec.unpack_task_request(codec.encode({"content": 7}))

    def test_garbage_bytes(self):
        with pytest.raises(PayloadError):
            codec.decode(b"")
