from abc import ABC, abstractmethod
from urllib.parse import quote

from .model import Entry, EntryOrder
from .utils.htmpl import H, Node, html, raw

# -----------------------------------------------------------------------------
#
# RENDERER
#
# -----------------------------------------------------------------------------


class RenderError(Exception):
	"""Raised by renderers when a page cannot be rendered, the status being
	the HTTP status of the resulting error response."""

	def __init__(self, message: str, status: int = 500):
		super().__init__(message)
		self.message: str = message
		self.status: int = status


class Renderer(ABC):
	"""Renders the pages of the archive. A single renderer is shared by all
	the requests, so implementations must not keep per-request state.

	Each method returns the HTML body of the page, or raises a `RenderError`."""

	@abstractmethod
	def renderDirectory(self, path: str, entries: list[Entry]) -> str:
		"""Renders the listing of the directory at `path`. The entries do not
		include the parent directory."""
		...

	@abstractmethod
	def renderVerbatim(self, path: str, content: str) -> str:
		"""Renders the unmodified textual content of a file."""
		...

	@abstractmethod
	def renderMarkdown(self, path: str, content: str) -> str:
		"""Renders a Markdown file, whose content is already converted to HTML."""
		...

	@abstractmethod
	def renderError(self, path: str, status: int, message: str) -> str:
		"""Renders an error page with the given HTTP status."""
		...


# -----------------------------------------------------------------------------
#
# HTML RENDERER
#
# -----------------------------------------------------------------------------

PAGE_CSS: str = """
:root {
    font-family: sans-serif;
    font-size: 14px;
    line-height: 1.35em;
    padding: 20px;
    background: #F0F0F0;
}
h1 {
    margin-top: 1.75em;
    margin-bottom: 1.75em;
    line-height: 1.25em;
}
table {
    border-collapse: collapse;
}
td, th {
    padding: 0.25em 1.5em 0.25em 0em;
    text-align: left;
}
pre {
    padding: 1em;
    background: #FFFFFF;
    overflow-x: auto;
}
"""


def link(entry: Entry) -> str:
	"""Returns the relative link to the entry. Directories must be linked with
	a trailing slash."""
	return quote(entry.name) + ("/" if entry.isDirectory else "")


class HTMLRenderer(Renderer):
	"""A plain HTML renderer, used when the embedder doesn't provide one."""

	def __init__(self, title: str = "Archive", css: str = PAGE_CSS):
		self.title: str = title
		self.css: str = css

	def page(self, path: str, *content: Node) -> str:
		return html(
			H.html(
				H.head(
					H.meta(charset="utf-8"),
					H.meta(
						name="viewport",
						content="width=device-width, initial-scale=1.0",
					),
					H.title(f"{self.title}: /{path}"),
					H.style(raw(self.css)),
				),
				H.body(*content),
			)
		)

	def renderDirectory(self, path: str, entries: list[Entry]) -> str:
		rows: list[Node] = [H.tr(H.td(H.a("..", href="..")), H.td(), H.td())]
		for e in entries:
			href = link(e)
			rows.append(
				H.tr(
					H.td(H.a(e.name + ("/" if e.isDirectory else ""), href=href)),
					H.td("directory" if e.isDirectory else "file"),
					H.td(H.time(e.modified)),
				)
			)
		return self.page(
			path,
			H.h1(f"/{path}"),
			H.table(
				H.thead(
					H.tr(
						H.th(H.a("Name", href=f"?order={EntryOrder.Lexicographical.value}")),
						H.th("Type"),
						H.th(H.a("Modified", href=f"?order={EntryOrder.Chronological.value}")),
					)
				),
				H.tbody(rows),
			),
		)

	def renderVerbatim(self, path: str, content: str) -> str:
		return self.page(path, H.h1(path), H.a("Back", href="."), H.pre(content))

	def renderMarkdown(self, path: str, content: str) -> str:
		return self.page(
			path, H.h1(path), H.a("Back", href="."), H.main(raw(content))
		)

	def renderError(self, path: str, status: int, message: str) -> str:
		return self.page(path, H.h1(f"Error {status}"), H.p(message))


# EOF
