from typing import Any, BinaryIO, Generator, Iterator
from urllib.parse import parse_qsl, quote, urlsplit

from .api import ResponseFactory
from .status import HTTP_STATUS

DEFAULT_ENCODING: str = "utf8"
FILE_CHUNK_SIZE: int = 64_000

# -----------------------------------------------------------------------------
#
# HELPERS
#
# -----------------------------------------------------------------------------


def headername(name: str, *, headers: dict[str, str] = {}) -> str:
	"""Normalizes the header name as `Kebab-Case`."""
	key: str = name.lower()
	if key in headers:
		return headers[key]
	else:
		normalized: str = "-".join(_.capitalize() for _ in key.split("-"))
		headers[key] = normalized
		return normalized


def iterFile(file: BinaryIO, size: int = FILE_CHUNK_SIZE) -> Iterator[bytes]:
	"""Iterates on the chunks of an open file, closing it once done."""
	try:
		while chunk := file.read(size):
			yield chunk
	finally:
		file.close()


# -----------------------------------------------------------------------------
#
# REQUESTS
#
# -----------------------------------------------------------------------------


class HTTPRequest(ResponseFactory["HTTPResponse"]):
	"""Represents an HTTP request as seen by a mounted handler, which also
	acts as a factory for responses.

	The `path` is relative to the mount point and still percent-encoded. When
	the embedding router normalized the URL before handing it over (typically
	by adding a trailing slash to the mount root), it passes the URL path as
	it was received in `originalPath`."""

	__slots__ = ["method", "path", "query", "headers", "originalPath", "protocol"]

	@staticmethod
	def Create(
		url: str,
		*,
		method: str = "GET",
		headers: dict[str, str] | None = None,
		originalPath: str | None = None,
	) -> "HTTPRequest":
		"""Creates a request from a URL like `/path/to/file?order=chronological`."""
		parts = urlsplit(url)
		return HTTPRequest(
			method=method,
			path=parts.path or "/",
			query=dict(parse_qsl(parts.query)) if parts.query else None,
			headers=headers,
			originalPath=originalPath,
		)

	def __init__(
		self,
		method: str,
		path: str,
		query: dict[str, str] | None = None,
		headers: dict[str, str] | None = None,
		originalPath: str | None = None,
		protocol: str = "HTTP/1.1",
	):
		super().__init__()
		self.method: str = method
		self.path: str = path
		self.query: dict[str, str] | None = query
		self.headers: dict[str, str] = {
			headername(k): v for k, v in (headers or {}).items()
		}
		self.originalPath: str | None = originalPath
		self.protocol: str = protocol

	@property
	def segments(self) -> list[str]:
		"""The percent-encoded path segments, where a trailing slash yields a
		trailing empty segment."""
		return self.path.lstrip("/").split("/")

	@property
	def queryString(self) -> str:
		return (
			"&".join(f"{quote(k)}={quote(v)}" for k, v in self.query.items())
			if self.query
			else ""
		)

	def header(self, name: str) -> str | None:
		return self.headers.get(headername(name))

	def param(self, name: str, default: str | None = None) -> str | None:
		return self.query.get(name, default) if self.query else default

	def respond(
		self,
		content: Any = None,
		contentType: str | None = None,
		status: int = 200,
		headers: dict[str, str] | None = None,
		message: str | None = None,
	) -> "HTTPResponse":
		return HTTPResponse.Create(
			status=status,
			message=message,
			content=content,
			contentType=contentType,
			protocol=self.protocol,
			headers=headers,
		)

	def __str__(self) -> str:
		return f"Request({self.method} {self.path}{f'?{self.queryString}' if self.query else ''})"


# -----------------------------------------------------------------------------
#
# RESPONSE
#
# -----------------------------------------------------------------------------


class HTTPResponse:
	"""An HTTP response, whose body is either bytes or an open file to stream.
	The file is closed once read, or by calling `close`."""

	__slots__ = ["protocol", "status", "message", "headers", "body"]

	@staticmethod
	def Create(
		content: Any = None,
		contentType: str | None = None,
		headers: dict[str, str] | None = None,
		status: int = 200,
		message: str | None = None,
		protocol: str = "HTTP/1.1",
	) -> "HTTPResponse":
		"""Factory method to create HTTP response objects."""
		body: bytes | BinaryIO | None = None
		updated_headers: dict[str, str] = {
			headername(k): v for k, v in (headers or {}).items()
		}
		if content is None:
			pass
		elif isinstance(content, str):
			body = content.encode(DEFAULT_ENCODING)
		elif isinstance(content, bytes):
			body = content
		elif hasattr(content, "read"):
			body = content
		else:
			raise ValueError(f"Unsupported content {type(content)}:{content}")
		if isinstance(body, bytes):
			updated_headers["Content-Length"] = str(len(body))
		if contentType is not None:
			updated_headers["Content-Type"] = contentType
		return HTTPResponse(
			status=status,
			message=message or HTTP_STATUS.get(status, "Unknown status"),
			headers=updated_headers,
			body=body,
			protocol=protocol,
		)

	def __init__(
		self,
		protocol: str,
		status: int,
		message: str | None,
		headers: dict[str, str],
		body: bytes | BinaryIO | None = None,
	):
		self.protocol: str = protocol
		self.status: int = status
		self.message: str | None = message
		self.headers: dict[str, str] = headers
		self.body: bytes | BinaryIO | None = body

	@property
	def contentType(self) -> str | None:
		return self.headers.get("Content-Type")

	def getHeader(self, name: str) -> str | None:
		return self.headers.get(headername(name))

	def read(self) -> Generator[bytes, None, None]:
		"""Iterates on the chunks of the body."""
		if isinstance(self.body, bytes):
			yield self.body
		elif self.body is not None:
			yield from iterFile(self.body)

	def close(self) -> None:
		"""Releases the file body, if any, without reading it."""
		if self.body is not None and not isinstance(self.body, bytes):
			self.body.close()

	@property
	def content(self) -> bytes:
		"""The whole body as bytes. A file body can only be read once."""
		return b"".join(self.read())

	@property
	def text(self) -> str:
		return self.content.decode(DEFAULT_ENCODING)

	def __str__(self) -> str:
		return f"Response({self.protocol} {self.status} {self.message} {self.headers})"


# EOF
