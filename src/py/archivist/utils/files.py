import mimetypes
from pathlib import Path

mimetypes.init()

# Extensions that the platform's MIME database tends to get wrong or to miss
MIME_TYPES: dict[str, str] = dict(
	bz2="application/x-bzip",
	gz="application/x-gzip",
	md="text/markdown",
	toml="text/x-toml",
	yaml="text/yaml",
	yml="text/yaml",
)

DEFAULT_CONTENT_TYPE: str = "application/octet-stream"


def extension(name: str) -> str | None:
	"""Returns the extension of the given file name, without the dot. Dot
	files like `.gitignore` have no extension."""
	i = name.rfind(".")
	return None if i <= 0 else name[i + 1 :]


def guessType(ext: str) -> str | None:
	"""Guesses the MIME type for the given extension, returning `None`
	when it is unknown."""
	if not ext:
		return None
	elif res := MIME_TYPES.get(ext.lower()):
		return res
	else:
		return mimetypes.guess_type(f"file.{ext}", strict=False)[0]


def isTextType(contentType: str | None) -> bool:
	return contentType is not None and contentType.split("/", 1)[0] == "text"


def contentType(path: Path | str) -> str:
	"""Guesses the content type from the given path"""
	ext = extension(Path(path).name)
	return (guessType(ext) if ext else None) or DEFAULT_CONTENT_TYPE


# EOF
