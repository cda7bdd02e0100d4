from .model import HTTPRequest, HTTPResponse, headername  # NOQA: F401
from .status import HTTP_STATUS  # NOQA: F401

# EOF
