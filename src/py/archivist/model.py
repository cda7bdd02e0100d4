from datetime import datetime, timezone
from enum import Enum
from os import DirEntry
from typing import NamedTuple

ENTRY_TIME_FORMAT: str = "%Y-%m-%d %H:%M"

# -----------------------------------------------------------------------------
#
# ACCESS METHOD
#
# -----------------------------------------------------------------------------


class AccessMethod(Enum):
	"""How a path is served. A denied path has no access method at all."""

	# Renders the file as Markdown
	Markdown = "markdown"
	# Returns the textual content without modification
	Verbatim = "verbatim"
	# Returns the raw bytes of the file
	Raw = "raw"
	# Lists the directory
	Directory = "directory"

	@property
	def isFile(self) -> bool:
		return self is not AccessMethod.Directory

	@property
	def isDirectory(self) -> bool:
		return self is AccessMethod.Directory


class EntryOrder(Enum):
	"""Order in which directory entries are listed"""

	Lexicographical = "lexicographical"
	Chronological = "chronological"

	@staticmethod
	def Parse(value: str | None) -> "EntryOrder":
		"""Parses the `order` query parameter, falling back to the
		lexicographical order for anything unknown."""
		for order in EntryOrder:
			if order.value == value:
				return order
		return EntryOrder.Lexicographical


# -----------------------------------------------------------------------------
#
# ENTRY
#
# -----------------------------------------------------------------------------


class Entry(NamedTuple):
	"""A directory entry, reduced to what's needed to render a listing."""

	name: str
	isDirectory: bool
	modified: str

	@staticmethod
	def FromDirEntry(entry: DirEntry[str]) -> "Entry":
		"""Projects a directory entry, raising an `OSError` if its
		metadata cannot be read, or a `UnicodeError` if its name is not
		valid UTF-8."""
		# Undecodable names come with surrogate escapes from `os.scandir`
		entry.name.encode("utf8")
		stat = entry.stat()
		return Entry(
			name=entry.name,
			isDirectory=entry.is_dir(),
			modified=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc).strftime(
				ENTRY_TIME_FORMAT
			),
		)


# EOF
