"""Transparent decompression of gzip request bodies."""

import gzip
import zlib

from starlette.datastructures import Headers
from starlette.responses import PlainTextResponse
from starlette.types import ASGIApp, Message, Receive, Scope, Send


class GzipRequestMiddleware:
    """Decompress request bodies sent with ``Content-Encoding: gzip``.
    
    Response compression is handled by Starlette's GZipMiddleware.
    """
    
    def __init__(self, app: ASGIApp):
        self.app = app
    
    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return
        
        headers = Headers(scope=scope)
        if "gzip" not in headers.get("content-encoding", "").lower():
            await self.app(scope, receive, send)
            return
        
        chunks = []
        more_body = True
        while more_body:
            message = await receive()
            chunks.append(message.get("body", b""))
            more_body = message.get("more_body", False)
        
        try:
            body = gzip.decompress(b"".join(chunks))
        except (OSError, EOFError, zlib.error):
            response = PlainTextResponse("Malformed gzip request body", status_code=400)
            await response(scope, receive, send)
            return
        
        scope = dict(scope)
        scope["headers"] = [
            (name, value)
            for name, value in scope["headers"]
            if name not in (b"content-encoding", b"content-length")
        ] + [(b"content-length", str(len(body)).encode("latin-1"))]
        
        body_sent = False
        
        async def receive_decompressed() -> Message:
            nonlocal body_sent
            if not body_sent:
                body_sent = True
                return {"type": "http.request", "body": body, "more_body": False}
            return await receive()
        
        await self.app(scope, receive_decompressed, send)
