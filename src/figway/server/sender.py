"""ASGI response sending — translates figway Responses to ASGI messages."""

from figway._internal.asgi import Send
from figway.http.response import Response


def _body_allowed(status: int) -> bool:
    """Whether an HTTP status code permits a response body."""
    # RFC: 1xx, 204, and 304 responses do not include a message body.
    return not (100 <= status < 200 or status in {204, 304})


def _length_allowed(status: int) -> bool:
    """Whether a response may carry Content-Length (RFC 9110 §8.6)."""
    return not (100 <= status < 200 or status == 204)


async def send_response(response: Response, send: Send, *, head: bool = False) -> None:
    """Translate a figway Response into ASGI send() calls.

    Header pairs are emitted in order with their original casing
    lowered, as ASGI requires. ``Content-Length`` is recomputed from the
    body actually sent, and omitted for 1xx and 204. For *head* requests
    and 304 answers the upstream's Content-Length is kept and no body
    is sent.
    """
    raw_headers: list[tuple[bytes, bytes]] = []
    declared_length: bytes | None = None
    has_content_type = False
    for name, value in response.headers:
        key = name.lower().encode("latin-1")
        if key == b"content-length":
            declared_length = value.encode("latin-1")
            continue
        if key == b"content-type":
            has_content_type = True
        raw_headers.append((key, value.encode("latin-1")))

    if response.content_type is not None and not has_content_type:
        raw_headers.insert(0, (b"content-type", response.content_type.encode("latin-1")))

    body = response.body_bytes if _body_allowed(response.status) else b""

    if head or response.status == 304:
        # No body follows; the declared length describes the full entity
        if declared_length is not None:
            raw_headers.append((b"content-length", declared_length))
        body = b""
    elif _length_allowed(response.status):
        raw_headers.append((b"content-length", str(len(body)).encode("latin-1")))

    await send(
        {
            "type": "http.response.start",
            "status": response.status,
            "headers": raw_headers,
        }
    )
    await send(
        {
            "type": "http.response.body",
            "body": body,
        }
    )
