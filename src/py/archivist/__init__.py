from .config import Config, ConfigurationError  # NOQA: F401
from .model import AccessMethod, Entry, EntryOrder  # NOQA: F401
from .policy import methodFor  # NOQA: F401
from .listing import listEntries  # NOQA: F401
from .renderer import Renderer, RenderError, HTMLRenderer  # NOQA: F401
from .http.model import HTTPRequest, HTTPResponse  # NOQA: F401
from .handler import Archivist  # NOQA: F401

# EOF
