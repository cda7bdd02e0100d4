"""
Simple Archive Example

This demonstrates mounting an archivist with a custom renderer.
Features shown:
- A minimal renderer that produces bare HTML pages
- A configuration allowing the files expected in a Python project
- Serving through the ASGI bridge

Usage:
    uvicorn simple:app --port 5000

Test with:
    http://localhost:5000/              # Browse this directory
    http://localhost:5000/archive.toml  # Show a file verbatim
"""

from html import escape

from archivist import Config, Entry, Renderer
from archivist.bridge.asgi import server
from archivist.utils.logging import info


class SimpleRenderer(Renderer):
	"""A very simple renderer, that does not render really beautiful pages."""

	def renderDirectory(self, path: str, entries: list[Entry]) -> str:
		items = "".join(
			f'<li><a href="{escape(e.name)}{"/" if e.isDirectory else ""}">{escape(e.name)}</a></li>'
			for e in entries
		)
		return f'<h1>/{escape(path)}</h1><ul><li><a href="..">..</a></li>{items}</ul>'

	def renderVerbatim(self, path: str, content: str) -> str:
		return f'<h1>{escape(path)}</h1><a href=".">Back</a><pre>{escape(content)}</pre>'

	def renderMarkdown(self, path: str, content: str) -> str:
		return f'<h1>{escape(path)}</h1><a href=".">Back</a>{content}'

	def renderError(self, path: str, status: int, message: str) -> str:
		return f"<h1>Error {status}</h1><p>{escape(message)}</p>"


config = Config.Default().allowing(
	extensions=("py", "md", "toml", "css", "html"),
	names=(".gitignore", "setup.py"),
	blocked=("__pycache__",),
)
info("Serving files from current working directory")
app = server(config, SimpleRenderer())

# EOF
