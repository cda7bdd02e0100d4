import asyncio
from typing import Any, Awaitable, Callable, Generator
from urllib.parse import parse_qsl, quote

from ..config import Config
from ..handler import Archivist
from ..http.model import HTTPRequest, HTTPResponse
from ..renderer import HTMLRenderer, Renderer
from ..utils.logging import exception, info, warning

# --
# ## ASGI Bridge
#
# Exposes an archivist through the ASGI gateway, so that it can be run by any
# ASGI server, or mounted by any ASGI router under a prefix.

# SEE: https://asgi.readthedocs.io/en/latest/specs/main.html

TScope = dict[str, Any]
TMessage = dict[str, Any]
TReceive = Callable[[], Awaitable[TMessage]]
TSend = Callable[[TMessage], Awaitable[None]]
TApplication = Callable[[TScope, TReceive, TSend], Awaitable[None]]


def requestFromScope(scope: TScope) -> HTTPRequest:
	"""Creates a request from an ASGI HTTP scope. When mounted under a
	`root_path`, the request path is made relative to it and the original
	path is kept, so that the archivist can redirect `/mount` to `/mount/`."""
	root_path: str = scope.get("root_path") or ""
	raw_path: bytes | None = scope.get("raw_path")
	# NOTE: `raw_path` is still percent-encoded, while `path` is not
	full_path: str = (
		raw_path.decode("latin1").split("?", 1)[0]
		if raw_path
		else quote(scope.get("path") or "/")
	)
	original_path: str | None = None
	path: str = full_path
	if root_path:
		prefix = quote(root_path.rstrip("/"))
		original_path = full_path
		if full_path.startswith(prefix):
			path = full_path[len(prefix) :]
		elif not raw_path:
			# Older routers strip the root path from `path` themselves
			original_path = prefix + full_path
		# The mount root is normalized with a trailing slash
		path = path or "/"
	query_string: bytes = scope.get("query_string") or b""
	return HTTPRequest(
		method=scope.get("method", "GET"),
		path=path,
		query=(
			dict(parse_qsl(query_string.decode("latin1"))) if query_string else None
		),
		headers={
			k.decode("latin1"): v.decode("latin1") for k, v in scope.get("headers", ())
		},
		originalPath=original_path,
		protocol=f"HTTP/{scope.get('http_version', '1.1')}",
	)


class ASGIBridge:
	"""Runs requests received through ASGI on the archivist. Requests are
	processed in the loop's executor, as all the filesystem access is
	blocking."""

	def __init__(self, archivist: Archivist):
		self.archivist: Archivist = archivist

	async def __call__(self, scope: TScope, receive: TReceive, send: TSend) -> None:
		protocol = scope["type"]
		if protocol == "http":
			await self.onHTTP(scope, receive, send)
		elif protocol == "lifespan":
			await self.onLifespan(scope, receive, send)
		else:
			warning("Unsupported ASGI protocol", origin="asgi", protocol=protocol)

	async def onHTTP(self, scope: TScope, receive: TReceive, send: TSend) -> None:
		loop = asyncio.get_running_loop()
		request = requestFromScope(scope)
		try:
			response = await loop.run_in_executor(
				None, self.archivist.process, request
			)
		except Exception as e:
			exception(e, f"Failed to process {request}")
			response = request.error(500)
		await self.writeResponse(response, send, withBody=request.method != "HEAD")

	async def onLifespan(self, scope: TScope, receive: TReceive, send: TSend) -> None:
		# SEE: https://asgi.readthedocs.io/en/latest/specs/lifespan.html
		while True:
			message = await receive()
			if message["type"] == "lifespan.startup":
				info(
					"Archive ready",
					origin="asgi",
					root=str(self.archivist.root),
					raw=self.archivist.raw,
				)
				await send({"type": "lifespan.startup.complete"})
			elif message["type"] == "lifespan.shutdown":
				await send({"type": "lifespan.shutdown.complete"})
				return None

	async def writeResponse(
		self, response: HTTPResponse, send: TSend, *, withBody: bool = True
	) -> None:
		await send(
			{
				"type": "http.response.start",
				"status": response.status,
				"headers": [
					(k.lower().encode("latin1"), v.encode("latin1"))
					for k, v in response.headers.items()
				],
			}
		)
		try:
			if withBody:
				loop = asyncio.get_running_loop()
				chunks: Generator[bytes, None, None] = response.read()
				try:
					while (
						chunk := await loop.run_in_executor(None, next, chunks, None)
					) is not None:
						await send(
							{"type": "http.response.body", "body": chunk, "more_body": True}
						)
				finally:
					chunks.close()
		finally:
			response.close()
			# The response is always terminated, even when streaming fails
			await send({"type": "http.response.body", "body": b"", "more_body": False})


def server(
	config: Config, renderer: Renderer | None = None, *, raw: bool = False
) -> TApplication:
	"""Creates an archivist for the given configuration, and returns the ASGI
	application that serves it."""
	archivist = (
		Archivist.SummonRaw(config, renderer or HTMLRenderer())
		if raw
		else Archivist.Summon(config, renderer or HTMLRenderer())
	)
	return ASGIBridge(archivist)


# EOF
