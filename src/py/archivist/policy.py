from pathlib import Path, PurePath
import os
import stat

from .config import Config
from .model import AccessMethod
from .utils.files import extension, guessType, isTextType

__doc__ = """
The access policy decides whether, and how, a path of the archive is served.

The rules are applied in a strict order, each returning as soon as it
matches: blocked names, then dot files, then the extension/name allow-lists
and finally the content type guessed from the extension.
"""


def components(config: Config, path: PurePath) -> tuple[str, ...]:
	"""Returns the components of `path` that are subject to the safety rules,
	which are the ones below the archive root when the path is inside it."""
	try:
		return path.relative_to(config.root).parts
	except ValueError:
		return tuple(_ for _ in path.parts if _ != path.anchor)


def isSafe(config: Config, path: PurePath) -> bool:
	"""Tells if none of the path components is a parent reference, a hidden
	file that is not explicitly allowed, or a blocked name."""
	for name in components(config, path):
		if name == "..":
			return False
		elif name in config.blocked_file_names:
			return False
		elif name.startswith(".") and name not in config.allowed_file_names:
			return False
	return True


def methodFor(config: Config, path: Path | str) -> AccessMethod | None:
	"""Returns the access method for the file at the given path, or `None`
	when access is denied.

	Raises an `OSError` when the metadata of the path cannot be read, which
	includes the path not existing."""
	p = Path(path)
	if not isSafe(config, p):
		return None
	# NOTE: This follows symlinks, the same way serving the content would
	if stat.S_ISDIR(os.stat(p).st_mode):
		return AccessMethod.Directory

	name = p.name
	ext = extension(name)
	if ext is None:
		# Files without an extension are only ever served as text
		if config.allow_all or name in config.allowed_file_names:
			return AccessMethod.Verbatim
		else:
			return None
	elif not (
		config.allow_all
		or ext in config.allowed_extensions
		or name in config.allowed_file_names
	):
		return None
	elif ext in config.markdown:
		return AccessMethod.Markdown
	elif isTextType(guessType(ext)):
		return AccessMethod.Verbatim
	else:
		return AccessMethod.Raw


def isVisible(config: Config, path: Path | str) -> bool:
	"""Tells if the path has any access method, treating unreadable metadata
	as not visible."""
	try:
		return methodFor(config, path) is not None
	except OSError:
		return False


# EOF
