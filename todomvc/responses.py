"""MessagePack response classes for the task routes."""

from typing import Any

from starlette.responses import Response

from todomvc import codec


class MsgPackResponse(Response):
    """
    Starlette response whose body is `content` packed as MessagePack.

    `content` must already be in wire shape (see `todomvc.codec`).
    """

    media_type = codec.MSGPACK_MEDIA_TYPE

    def render(self, content: Any) -> bytes:
        return codec.encode(content)
