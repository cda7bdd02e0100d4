import os
from pathlib import Path

import pytest

from archivist import Archivist, Config, Entry, HTTPRequest, HTTPResponse, Renderer
from archivist.renderer import RenderError

# Modification times used for the chronological order
MTIMES: dict[str, int] = {
	"a.md": 3_000_000,
	"b.txt": 1_000_000,
	"sub": 2_000_000,
}


class RecordingRenderer(Renderer):
	"""Renders pages as short strings that are easy to assert on."""

	def __init__(self, failing: set[str] | None = None):
		self.failing: set[str] = failing or set()

	def check(self, name: str) -> None:
		if name in self.failing:
			raise RenderError(f"{name} failed", status=503)

	def renderDirectory(self, path: str, entries: list[Entry]) -> str:
		self.check("directory")
		return f"directory:{path}:{','.join(_.name for _ in entries)}"

	def renderVerbatim(self, path: str, content: str) -> str:
		self.check("verbatim")
		return f"verbatim:{path}:{content}"

	def renderMarkdown(self, path: str, content: str) -> str:
		self.check("markdown")
		return f"markdown:{path}:{content}"

	def renderError(self, path: str, status: int, message: str) -> str:
		self.check("error")
		return f"error:{path}:{status}:{message}"


@pytest.fixture
def archive(tmp_path: Path) -> Path:
	"""Creates an archive tree:

	```
	a.md  b.txt  image.png  readme  notes  invalid.txt  data.bin
	.secret  .hidden/x.txt  private/key.txt  sub/c.txt  sub/d.md
	```
	"""
	root = tmp_path / "archive"
	root.mkdir()
	(root / "a.md").write_text("# Title\n\nSome *text*.\n", encoding="utf8")
	(root / "b.txt").write_text("Hello, world!\n", encoding="utf8")
	(root / "image.png").write_bytes(b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR")
	(root / "readme").write_text("Read me first.\n", encoding="utf8")
	(root / "notes").write_text("Some notes.\n", encoding="utf8")
	(root / "invalid.txt").write_bytes(b"caf\xe9\n")
	(root / "data.bin").write_bytes(bytes(range(256)))
	(root / ".secret").write_text("password\n", encoding="utf8")
	(root / ".hidden").mkdir()
	(root / ".hidden" / "x.txt").write_text("hidden\n", encoding="utf8")
	(root / "private").mkdir()
	(root / "private" / "key.txt").write_text("key\n", encoding="utf8")
	(root / "sub").mkdir()
	(root / "sub" / "c.txt").write_text("c\n", encoding="utf8")
	(root / "sub" / "d.md").write_text("d\n", encoding="utf8")
	for name, mtime in MTIMES.items():
		os.utime(root / name, (mtime, mtime))
	return root


@pytest.fixture
def config(archive: Path) -> Config:
	return Config(
		root_dir=str(archive),
		allowed_extensions=frozenset(("md", "txt")),
		blocked_file_names=frozenset(("private",)),
	)


@pytest.fixture
def renderer() -> RecordingRenderer:
	return RecordingRenderer()


@pytest.fixture
def archivist(config: Config, renderer: RecordingRenderer) -> Archivist:
	return Archivist.Summon(config, renderer)


def get(archivist: Archivist, url: str, **kwargs) -> HTTPResponse:
	return archivist.process(HTTPRequest.Create(url, **kwargs))


# EOF
