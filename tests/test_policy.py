from pathlib import Path

import pytest

from archivist import AccessMethod, Config, methodFor
from archivist.policy import isSafe, isVisible


def test_parent_components_are_denied(archive: Path):
	for config in (
		Config(root_dir=str(archive), allowed_extensions=frozenset(("md",))),
		Config(root_dir=str(archive), allow_all=True),
	):
		assert methodFor(config, archive / "sub" / ".." / "a.md") is None
		assert methodFor(config, archive / "sub" / "..") is None


def test_dot_files_are_denied_even_when_allowing_all(archive: Path):
	config = Config(root_dir=str(archive), allow_all=True)
	assert methodFor(config, archive / ".secret") is None
	assert methodFor(config, archive / ".hidden") is None
	assert methodFor(config, archive / ".hidden" / "x.txt") is None


def test_dot_files_can_be_allowed_by_name(archive: Path):
	config = Config(root_dir=str(archive), allowed_file_names=frozenset((".secret",)))
	assert methodFor(config, archive / ".secret") == AccessMethod.Verbatim


def test_blocked_names_take_precedence(archive: Path):
	config = Config(
		root_dir=str(archive),
		allow_all=True,
		allowed_file_names=frozenset(("b.txt", "private")),
		blocked_file_names=frozenset(("b.txt", "private")),
	)
	assert methodFor(config, archive / "b.txt") is None
	assert methodFor(config, archive / "private") is None
	assert methodFor(config, archive / "private" / "key.txt") is None
	assert methodFor(config, archive / "a.md") == AccessMethod.Markdown


def test_directories(archive: Path):
	config = Config(root_dir=str(archive))
	assert methodFor(config, archive) == AccessMethod.Directory
	assert methodFor(config, archive / "sub") == AccessMethod.Directory
	assert AccessMethod.Directory.isDirectory
	assert not AccessMethod.Directory.isFile


def test_files_without_extension(archive: Path):
	config = Config(root_dir=str(archive))
	assert methodFor(config, archive / "notes") is None
	assert (
		methodFor(config._replace(allowed_file_names=frozenset(("notes",))), archive / "notes")
		== AccessMethod.Verbatim
	)
	assert methodFor(config._replace(allow_all=True), archive / "readme") == AccessMethod.Verbatim


def test_files_with_extension(archive: Path):
	config = Config(
		root_dir=str(archive), allowed_extensions=frozenset(("md", "txt", "png"))
	)
	assert methodFor(config, archive / "a.md") == AccessMethod.Markdown
	assert methodFor(config, archive / "b.txt") == AccessMethod.Verbatim
	assert methodFor(config, archive / "image.png") == AccessMethod.Raw
	assert methodFor(config, archive / "data.bin") is None
	for method in (AccessMethod.Markdown, AccessMethod.Verbatim, AccessMethod.Raw):
		assert method.isFile and not method.isDirectory


def test_markdown_extensions_must_be_allowed(archive: Path):
	config = Config(root_dir=str(archive), allowed_extensions=frozenset(("txt",)))
	assert methodFor(config, archive / "a.md") is None


def test_allowed_name_with_extension(archive: Path):
	config = Config(root_dir=str(archive), allowed_file_names=frozenset(("data.bin",)))
	assert methodFor(config, archive / "data.bin") == AccessMethod.Raw
	assert methodFor(config, archive / "b.txt") is None


def test_unknown_and_textual_types(tmp_path: Path):
	(tmp_path / "page.html").write_text("<p>hi</p>", encoding="utf8")
	(tmp_path / "blob.qqqzz").write_bytes(b"\x00")
	config = Config(root_dir=str(tmp_path), allow_all=True)
	assert methodFor(config, tmp_path / "page.html") == AccessMethod.Verbatim
	assert methodFor(config, tmp_path / "blob.qqqzz") == AccessMethod.Raw


def test_missing_paths_raise(archive: Path):
	config = Config(root_dir=str(archive), allow_all=True)
	with pytest.raises(FileNotFoundError):
		methodFor(config, archive / "missing.txt")
	assert not isVisible(config, archive / "missing.txt")
	assert isVisible(config, archive / "b.txt")


def test_root_location_is_not_checked(tmp_path: Path):
	root = tmp_path / ".site"
	root.mkdir()
	(root / "index.txt").write_text("index", encoding="utf8")
	config = Config(root_dir=str(root), allowed_extensions=frozenset(("txt",)))
	assert methodFor(config, root) == AccessMethod.Directory
	assert methodFor(config, root / "index.txt") == AccessMethod.Verbatim


def test_is_safe(archive: Path):
	config = Config(root_dir=str(archive), blocked_file_names=frozenset(("sub",)))
	assert isSafe(config, archive / "a.md")
	assert not isSafe(config, archive / "sub" / "c.txt")
	assert not isSafe(config, archive / ".." / "a.md")


# EOF
