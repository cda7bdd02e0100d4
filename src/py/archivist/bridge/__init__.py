from .asgi import ASGIBridge, server  # NOQA: F401

# EOF
