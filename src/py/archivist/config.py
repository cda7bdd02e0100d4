from os import getenv
from pathlib import Path
from typing import Any, Iterable, NamedTuple
import json
import tomllib

# The configuration file loaded by `python -m archivist` when none is given
CONFIG_PATH: str | None = getenv("ARCHIVIST_CONFIG")

LOG_REQUESTS: bool = getenv("ARCHIVIST_LOG_REQUESTS", "0") == "1"

DEFAULT_ROOT: str = "."
DEFAULT_LISTEN: str = "localhost:5000"
DEFAULT_MARKDOWN: frozenset[str] = frozenset(("md",))

# Keys that hold sets of names, along with their accepted aliases
SET_KEYS: dict[str, tuple[str, ...]] = {
	"allowed_extensions": ("allowed_extensions", "allow"),
	"allowed_file_names": ("allowed_file_names",),
	"blocked_file_names": ("blocked_file_names",),
	"markdown": ("markdown",),
}


class ConfigurationError(ValueError):
	"""Raised when a configuration cannot be read or is malformed."""


def normalized(names: Iterable[str], key: str) -> frozenset[str]:
	"""Normalizes a list of names or extensions, stripping any leading `.`
	from extensions and rejecting anything that looks like a path."""
	res: set[str] = set()
	for name in names:
		if not isinstance(name, str):
			raise ConfigurationError(f"Expected a string in '{key}', got: {name!r}")
		if key.endswith("extensions") or key == "markdown":
			name = name.lstrip(".")
		if not name or "/" in name or "\\" in name:
			raise ConfigurationError(f"Invalid name in '{key}': {name!r}")
		res.add(name)
	return frozenset(res)


class Config(NamedTuple):
	"""The archive configuration, which is immutable once created and
	can be shared across concurrent requests.

	A TOML configuration file looks like:

	```toml
	root_dir = "src"
	listen = "localhost:5000"
	allow_all = false
	allowed_extensions = [ "py", "txt", "md", "html", "css", "jpg", "png" ]
	allowed_file_names = [ ".gitignore", "Makefile" ]
	blocked_file_names = [ "__pycache__" ]
	markdown = [ "md" ]
	```
	"""

	root_dir: str = DEFAULT_ROOT
	listen: str = DEFAULT_LISTEN
	allow_all: bool = False
	allowed_extensions: frozenset[str] = frozenset()
	allowed_file_names: frozenset[str] = frozenset()
	blocked_file_names: frozenset[str] = frozenset()
	markdown: frozenset[str] = DEFAULT_MARKDOWN

	@staticmethod
	def Default() -> "Config":
		return Config()

	@staticmethod
	def FromDict(data: dict[str, Any]) -> "Config":
		"""Creates a configuration from a parsed TOML/JSON document."""
		if not isinstance(data, dict):
			raise ConfigurationError(f"Configuration must be a table, got: {data!r}")
		root_dir = data.get("root_dir", DEFAULT_ROOT)
		listen = data.get("listen", DEFAULT_LISTEN)
		allow_all = data.get("allow_all", False)
		if not isinstance(root_dir, str):
			raise ConfigurationError(f"'root_dir' must be a string, got: {root_dir!r}")
		if not isinstance(listen, str):
			raise ConfigurationError(f"'listen' must be a string, got: {listen!r}")
		if not isinstance(allow_all, bool):
			raise ConfigurationError(
				f"'allow_all' must be a boolean, got: {allow_all!r}"
			)
		sets: dict[str, frozenset[str]] = {}
		for key, aliases in SET_KEYS.items():
			values: list[str] | None = None
			for alias in aliases:
				if (v := data.get(alias)) is not None:
					if not isinstance(v, (list, tuple, set, frozenset)):
						raise ConfigurationError(
							f"'{alias}' must be a list of strings, got: {v!r}"
						)
					values = (values or []) + list(v)
			if values is not None:
				sets[key] = normalized(values, key)
		return Config(
			root_dir=root_dir,
			listen=listen,
			allow_all=allow_all,
			allowed_extensions=sets.get("allowed_extensions", frozenset()),
			allowed_file_names=sets.get("allowed_file_names", frozenset()),
			blocked_file_names=sets.get("blocked_file_names", frozenset()),
			markdown=sets.get("markdown", DEFAULT_MARKDOWN),
		)

	@staticmethod
	def Load(path: Path | str) -> "Config":
		"""Loads the configuration from a TOML file, or from a JSON file
		when the path has a `.json` suffix."""
		p = Path(path)
		try:
			if p.suffix.lower() == ".json":
				with open(p, "rt", encoding="utf8") as f:
					data = json.load(f)
			else:
				with open(p, "rb") as f:
					data = tomllib.load(f)
		except OSError as e:
			raise ConfigurationError(f"Cannot read configuration {p}: {e}") from e
		except (tomllib.TOMLDecodeError, json.JSONDecodeError) as e:
			raise ConfigurationError(f"Malformed configuration {p}: {e}") from e
		return Config.FromDict(data)

	@property
	def root(self) -> Path:
		return Path(self.root_dir)

	@property
	def host(self) -> str:
		return self.listen.rsplit(":", 1)[0] if ":" in self.listen else self.listen

	@property
	def port(self) -> int:
		try:
			return int(self.listen.rsplit(":", 1)[1]) if ":" in self.listen else 80
		except ValueError as e:
			raise ConfigurationError(f"Invalid port in 'listen': {self.listen}") from e

	def allowing(
		self,
		*,
		extensions: Iterable[str] = (),
		names: Iterable[str] = (),
		blocked: Iterable[str] = (),
	) -> "Config":
		"""Returns a copy of this configuration with the given extensions and
		names added to the allow and block lists."""
		return self._replace(
			allowed_extensions=self.allowed_extensions
			| normalized(extensions, "allowed_extensions"),
			allowed_file_names=self.allowed_file_names
			| normalized(names, "allowed_file_names"),
			blocked_file_names=self.blocked_file_names
			| normalized(blocked, "blocked_file_names"),
		)


# EOF
