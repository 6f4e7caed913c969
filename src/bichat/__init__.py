"""bichat - speech and BI query gateways for a chat analytics dashboard."""

__version__ = "0.1.0"
__all__ = ["create_app"]


def __getattr__(name: str):  # type: ignore[no-untyped-def]
    if name == "create_app":
        from .server import create_app

        return create_app
    raise AttributeError(f"module 'bichat' has no attribute {name!r}")
