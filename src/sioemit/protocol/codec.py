"""Message codecs.

A parser is anything with an ``encode(record)`` method, or a bare callable,
that turns a plain record (dicts, lists, scalars, binary blobs) into the
transport payload. It must be a pure function. The emitter never decodes;
:meth:`MsgpackParser.decode` and :meth:`JsonParser.decode` exist for
receiving-side tooling and tests.
"""

from __future__ import annotations

from typing import Any, Callable, Union

import msgspec

from .. import json


Payload = Union[bytes, str]


class Parser:
    """Base class for codecs. Subclasses implement :meth:`encode`."""

    def encode(self, record: Any) -> Payload:
        raise NotImplementedError

    def __call__(self, record: Any) -> Payload:
        return self.encode(record)


class MsgpackParser(Parser):
    """MessagePack codec, the default.

    Binary values (bytes, bytearray, memoryview) are carried as msgpack
    ``bin`` and come back as bytes. Sets and tuples are carried as arrays.
    """

    def __init__(self):
        self._encoder = msgspec.msgpack.Encoder(enc_hook=json.default)
        self._decoder = msgspec.msgpack.Decoder()

    def encode(self, record: Any) -> bytes:
        return self._encoder.encode(record)

    def decode(self, payload: bytes) -> Any:
        return self._decoder.decode(payload)


class JsonParser(Parser):
    """JSON codec producing text payloads."""

    def encode(self, record: Any) -> str:
        return json.dumps_text(record)

    def decode(self, payload: Payload) -> Any:
        if isinstance(payload, str):
            payload = payload.encode()
        return json.loads(payload)


class _CallableParser(Parser):

    def __init__(self, function: Callable[[Any], Payload]):
        self.function = function

    def encode(self, record: Any) -> Payload:
        return self.function(record)


def resolve(parser: Any = None) -> Parser:
    """Return a :class:`Parser` for *parser*.

    None selects :class:`MsgpackParser`. Objects with an ``encode``
    attribute are used through it, so duck-typed codecs such as the
    ``msgpack`` module itself are accepted; a bare callable is wrapped.
    """

    if parser is None:
        return MsgpackParser()

    if isinstance(parser, Parser):
        return parser

    if isinstance(parser, (str, bytes)):
        raise TypeError(f"parser must provide encode(), got {parser!r}")

    encode = getattr(parser, "encode", None)
    if callable(encode):
        return _CallableParser(encode)

    if callable(parser):
        return _CallableParser(parser)

    raise TypeError(f"parser must provide encode(), got {type(parser).__name__}")
