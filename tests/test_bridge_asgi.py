import asyncio
from typing import Any

import pytest
from conftest import RecordingRenderer

from archivist import Archivist, Config, HTTPResponse
from archivist.bridge.asgi import ASGIBridge, requestFromScope, server


def scope(path: str, *, root: str = "", method: str = "GET", query: bytes = b"", raw: bool = True) -> dict[str, Any]:
	res: dict[str, Any] = {
		"type": "http",
		"http_version": "1.1",
		"method": method,
		"path": path,
		"root_path": root,
		"query_string": query,
		"headers": [(b"host", b"localhost")],
	}
	if raw:
		res["raw_path"] = path.encode("latin1")
	return res


def call(app, scope: dict[str, Any], messages: list[dict[str, Any]] | None = None) -> list[dict[str, Any]]:
	sent: list[dict[str, Any]] = []
	inbox = list(messages or [{"type": "http.request", "body": b"", "more_body": False}])

	async def receive() -> dict[str, Any]:
		return inbox.pop(0)

	async def send(message: dict[str, Any]) -> None:
		sent.append(message)

	asyncio.run(app(scope, receive, send))
	return sent


def status(sent: list[dict[str, Any]]) -> int:
	return sent[0]["status"]


def headers(sent: list[dict[str, Any]]) -> dict[bytes, bytes]:
	return dict(sent[0]["headers"])


def body(sent: list[dict[str, Any]]) -> bytes:
	return b"".join(_.get("body", b"") for _ in sent[1:])


def test_request_from_scope():
	request = requestFromScope(scope("/sub/c%20d.txt", query=b"order=chronological"))
	assert request.path == "/sub/c%20d.txt"
	assert request.param("order") == "chronological"
	assert request.header("host") == "localhost"
	assert request.originalPath is None


def test_request_from_mounted_scope():
	request = requestFromScope(scope("/docs", root="/docs"))
	assert request.path == "/"
	assert request.originalPath == "/docs"
	request = requestFromScope(scope("/docs/a.md", root="/docs"))
	assert request.path == "/a.md"
	assert request.originalPath == "/docs/a.md"
	# Routers that strip the root path from `path`
	request = requestFromScope(scope("/a.md", root="/docs", raw=False))
	assert request.path == "/a.md"
	assert request.originalPath == "/docs/a.md"


def test_serving(archivist: Archivist):
	app = ASGIBridge(archivist)
	sent = call(app, scope("/"))
	assert status(sent) == 200
	assert body(sent) == b"directory::a.md,b.txt,invalid.txt,sub"
	assert headers(sent)[b"content-type"] == b"text/html; charset=utf-8"
	assert sent[-1] == {"type": "http.response.body", "body": b"", "more_body": False}
	assert status(call(app, scope("/sub"))) == 404
	assert body(call(app, scope("/sub/c.txt"))) == b"verbatim:sub/c.txt:c\n"


def test_serving_raw_files(archive, renderer: RecordingRenderer):
	app = server(Config(root_dir=str(archive), allow_all=True), renderer)
	sent = call(app, scope("/data.bin"))
	assert status(sent) == 200
	assert body(sent) == bytes(range(256))
	assert headers(sent)[b"content-length"] == b"256"


def test_raw_files_removed_while_serving(archive, renderer: RecordingRenderer):
	archivist = Archivist(Config(root_dir=str(archive), allow_all=True), renderer)
	process = archivist.process

	def processThenRemove(request):
		response = process(request)
		(archive / "data.bin").unlink()
		return response

	archivist.process = processThenRemove  # type: ignore[method-assign]
	sent = call(ASGIBridge(archivist), scope("/data.bin"))
	assert status(sent) == 200
	assert body(sent) == bytes(range(256))
	assert sent[-1]["more_body"] is False


class FailingFile:
	def __init__(self):
		self.closed = False

	def read(self, size: int = -1) -> bytes:
		raise OSError("device unavailable")

	def close(self) -> None:
		self.closed = True


def test_failed_streaming_ends_the_response(archivist: Archivist):
	sent: list[dict[str, Any]] = []

	async def send(message: dict[str, Any]) -> None:
		sent.append(message)

	file = FailingFile()
	response = HTTPResponse.Create(content=file, contentType="application/octet-stream")
	with pytest.raises(OSError):
		asyncio.run(ASGIBridge(archivist).writeResponse(response, send))
	assert file.closed
	assert sent[0]["status"] == 200
	assert sent[-1] == {"type": "http.response.body", "body": b"", "more_body": False}


def test_head_has_no_body(archivist: Archivist):
	sent = call(ASGIBridge(archivist), scope("/b.txt", method="HEAD"))
	assert status(sent) == 200
	assert body(sent) == b""


def test_mounted_root_is_redirected(archivist: Archivist):
	app = ASGIBridge(archivist)
	sent = call(app, scope("/docs", root="/docs"))
	assert status(sent) == 301
	assert headers(sent)[b"location"] == b"/docs/"
	assert status(call(app, scope("/docs/", root="/docs"))) == 200
	assert body(call(app, scope("/docs/b.txt", root="/docs"))) == b"verbatim:b.txt:Hello, world!\n"


def test_lifespan(archivist: Archivist):
	sent = call(
		ASGIBridge(archivist),
		{"type": "lifespan"},
		[{"type": "lifespan.startup"}, {"type": "lifespan.shutdown"}],
	)
	assert [_["type"] for _ in sent] == [
		"lifespan.startup.complete",
		"lifespan.shutdown.complete",
	]


def test_default_renderer(config: Config):
	sent = call(server(config), scope("/"))
	assert status(sent) == 200
	assert body(sent).startswith(b"<!DOCTYPE html>")


# EOF
