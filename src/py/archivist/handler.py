from pathlib import Path, PurePosixPath
from urllib.parse import unquote_to_bytes

from markdown import markdown

from .config import LOG_REQUESTS, Config
from .http.model import HTTPRequest, HTTPResponse
from .listing import listEntries
from .model import AccessMethod, EntryOrder
from .policy import methodFor
from .renderer import Renderer, RenderError
from .utils.logging import event, warning

MESSAGE_NOT_FOUND: str = "The requested archive is not found"
MESSAGE_INVALID_FORMAT: str = "The requested file is not valid UTF8"

# Markdown extensions bundled with the `markdown` distribution
MARKDOWN_EXTENSIONS: list[str] = ["fenced_code", "tables"]

ALLOWED_METHODS: tuple[str, ...] = ("GET", "HEAD")


def decodePath(segments: list[str]) -> PurePosixPath | None:
	"""Decodes the percent-encoded URL path segments into a relative path,
	returning `None` when a segment is not valid UTF-8."""
	parts: list[str] = []
	for segment in segments:
		try:
			name = unquote_to_bytes(segment).decode("utf8")
		except UnicodeDecodeError:
			return None
		if "\x00" in name:
			return None
		# An encoded `/` must not make the path absolute
		parts += [_ for _ in name.split("/") if _]
	return PurePosixPath(*parts)


class Archivist:
	"""Serves a directory tree as a browsable archive, where directories are
	listed, text files are rendered as Markdown or verbatim, and other files
	are served as-is. Any path that the configuration does not allow is
	reported as not found.

	The archivist is meant to be mounted within an HTTP application: its
	`process` method takes a request whose path is relative to the mount
	point, and is safe to call concurrently."""

	@staticmethod
	def Summon(config: Config, renderer: Renderer) -> "Archivist":
		return Archivist(config, renderer)

	@staticmethod
	def SummonRaw(config: Config, renderer: Renderer) -> "Archivist":
		"""Summons an archivist that serves all the allowed files as-is."""
		return Archivist(config, renderer, raw=True)

	def __init__(self, config: Config, renderer: Renderer, *, raw: bool = False):
		self.config: Config = config
		self.renderer: Renderer = renderer
		self.raw: bool = raw
		self.root: Path = config.root

	def process(self, request: HTTPRequest) -> HTTPResponse:
		if request.method not in ALLOWED_METHODS:
			return request.notAllowed(", ".join(ALLOWED_METHODS))
		segments = request.segments
		path = decodePath(segments)
		if path is None:
			warning("Path is not valid UTF-8", path=request.path)
			return self.notFound(request, request.path)
		display_path: str = "" if path == PurePosixPath() else str(path)
		if LOG_REQUESTS:
			event("request", request.method, path=request.path)

		# When the archivist is mounted, the router may have normalized the
		# URL by adding a trailing slash to the mount root. In that case we
		# redirect to the URL with the slash, so that relative links work.
		if request.originalPath is not None:
			original_last = request.originalPath.rsplit("/", 1)[-1]
			if original_last != segments[-1]:
				location = request.originalPath + "/"
				if request.query:
					location += f"?{request.queryString}"
				return request.redirect(location, permanent=True)

		full_path = self.root.joinpath(path)
		try:
			access = methodFor(self.config, full_path)
		except OSError:
			access = None
		if access is None:
			return self.notFound(request, display_path)

		# Directories must have the trailing slash, files must not
		has_slash: bool = segments[-1] == ""
		if has_slash != access.isDirectory:
			return self.notFound(request, display_path)

		if self.raw:
			return (
				self.serveRaw(request, full_path, display_path)
				if access.isFile
				else self.notFound(request, display_path)
			)

		match access:
			case AccessMethod.Raw:
				return self.serveRaw(request, full_path, display_path)
			case AccessMethod.Verbatim:
				return self.serveText(request, full_path, display_path, False)
			case AccessMethod.Markdown:
				return self.serveText(request, full_path, display_path, True)
			case AccessMethod.Directory:
				return self.serveDirectory(request, full_path, display_path)

	# =========================================================================
	# CONTENT
	# =========================================================================

	def serveRaw(
		self, request: HTTPRequest, path: Path, displayPath: str
	) -> HTTPResponse:
		try:
			return request.respondFile(path)
		except OSError:
			return self.notFound(request, displayPath)

	def serveText(
		self, request: HTTPRequest, path: Path, displayPath: str, isMarkdown: bool
	) -> HTTPResponse:
		try:
			content = path.read_bytes().decode("utf8")
		except OSError:
			return self.notFound(request, displayPath)
		except UnicodeDecodeError:
			return self.invalidFormat(request, displayPath)
		try:
			return request.respondHTML(
				self.renderer.renderMarkdown(
					displayPath, markdown(content, extensions=MARKDOWN_EXTENSIONS)
				)
				if isMarkdown
				else self.renderer.renderVerbatim(displayPath, content)
			)
		except RenderError as e:
			return self.renderFailed(request, displayPath, e)

	def serveDirectory(
		self, request: HTTPRequest, path: Path, displayPath: str
	) -> HTTPResponse:
		order = EntryOrder.Parse(request.param("order"))
		try:
			entries = listEntries(self.config, path, order)
		except OSError:
			# A directory that can't be read is the same as a missing one
			return self.notFound(request, displayPath)
		try:
			return request.respondHTML(
				self.renderer.renderDirectory(displayPath, entries)
			)
		except RenderError as e:
			return self.renderFailed(request, displayPath, e)

	# =========================================================================
	# ERRORS
	# =========================================================================

	def renderError(
		self, request: HTTPRequest, displayPath: str, status: int, message: str
	) -> HTTPResponse:
		try:
			return request.respondHTML(
				self.renderer.renderError(displayPath, status, message), status=status
			)
		except RenderError as e:
			warning(
				"Could not render error page",
				path=displayPath,
				status=status,
				reason=e.message,
			)
			return request.error(e.status, e.message)

	def renderFailed(
		self, request: HTTPRequest, displayPath: str, error: RenderError
	) -> HTTPResponse:
		warning("Rendering failed", path=displayPath, reason=error.message)
		return self.renderError(request, displayPath, error.status, error.message)

	def notFound(self, request: HTTPRequest, displayPath: str) -> HTTPResponse:
		return self.renderError(request, displayPath, 404, MESSAGE_NOT_FOUND)

	def invalidFormat(self, request: HTTPRequest, displayPath: str) -> HTTPResponse:
		return self.renderError(request, displayPath, 416, MESSAGE_INVALID_FORMAT)


# EOF
