from functools import cmp_to_key
from os import DirEntry
from pathlib import Path
import os

from .config import Config
from .model import Entry, EntryOrder
from .policy import isVisible
from .utils.logging import debug


def compareByName(a: DirEntry[str], b: DirEntry[str]) -> int:
	# TODO: Natural ordering, so that `file10` comes after `file9`
	return (a.name > b.name) - (a.name < b.name)


def compareByModified(a: DirEntry[str], b: DirEntry[str]) -> int:
	"""Compares entries by modification time. Entries whose modification
	time cannot be read compare equal to anything."""
	try:
		ta = a.stat().st_mtime
		tb = b.stat().st_mtime
	except OSError:
		return 0
	return (ta > tb) - (ta < tb)


COMPARATORS = {
	EntryOrder.Lexicographical: compareByName,
	EntryOrder.Chronological: compareByModified,
}


def listEntries(
	config: Config,
	path: Path | str,
	order: EntryOrder = EntryOrder.Lexicographical,
) -> list[Entry]:
	"""Lists the visible children of the directory at `path` in the given
	order. Raises an `OSError` when the directory cannot be enumerated, while
	children that cannot be accessed are left out."""
	with os.scandir(path) as it:
		children: list[DirEntry[str]] = [_ for _ in it if isVisible(config, _.path)]
	children.sort(key=cmp_to_key(COMPARATORS[order]))
	entries: list[Entry] = []
	for child in children:
		try:
			entries.append(Entry.FromDirEntry(child))
		except (OSError, UnicodeError) as e:
			debug("Skipping unreadable entry", origin="listing", path=child.path, error=str(e))
	return entries


# EOF
