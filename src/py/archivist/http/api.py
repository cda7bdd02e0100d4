from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Generic, TypeVar
import os

from ..utils.files import contentType as getContentType
from .status import HTTP_STATUS

T = TypeVar("T")

# -----------------------------------------------------------------------------
#
# API
#
# -----------------------------------------------------------------------------

# --
# == HTTP Request Response API
#
# High level functions to create responses, orthogonal to the underlying
# request model.


class ResponseFactory(ABC, Generic[T]):
	@abstractmethod
	def respond(
		self,
		content: Any = None,
		contentType: str | None = None,
		status: int = 200,
		headers: dict[str, str] | None = None,
		message: str | None = None,
	) -> T: ...

	def error(
		self,
		status: int,
		content: str | None = None,
		contentType: str = "text/plain",
		headers: dict[str, str] | None = None,
	) -> T:
		message = HTTP_STATUS.get(status, "Server Error")
		return self.respond(
			content=message if content is None else content,
			contentType=contentType,
			status=status,
			message=message,
			headers=headers,
		)

	def notFound(
		self,
		content: str = "Not Found",
		contentType: str = "text/plain",
		*,
		status: int = 404,
	) -> T:
		return self.error(status, content=content, contentType=contentType)

	def notAllowed(self, allowed: str = "GET, HEAD") -> T:
		return self.error(405, headers={"Allow": allowed})

	def redirect(self, url: str, permanent: bool = False) -> T:
		# SEE: https://developer.mozilla.org/en-US/docs/Web/HTTP/Redirections
		return self.respond(
			content=f"Redirecting to {url}",
			contentType="text/plain",
			status=301 if permanent else 302,
			headers={"Location": str(url)},
		)

	def respondHTML(self, html: str | bytes, status: int = 200) -> T:
		return self.respond(
			content=html, contentType="text/html; charset=utf-8", status=status
		)

	def respondFile(
		self,
		path: Path | str,
		status: int = 200,
		contentType: str | None = None,
	) -> T:
		"""Responds with the content of the file, which is opened right away so
		that an `OSError` is raised here rather than while streaming."""
		p: Path = path if isinstance(path, Path) else Path(path)
		f = open(p, "rb")
		try:
			size = os.fstat(f.fileno()).st_size
		except OSError:
			f.close()
			raise
		return self.respond(
			content=f,
			contentType=contentType or getContentType(p),
			status=status,
			headers={"Content-Length": str(size)},
		)


# EOF
