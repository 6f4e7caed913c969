"""Entry point for running bichat as a module."""

from .cli import app


def main() -> None:
    """Main entry point for the bichat CLI application."""
    app()


if __name__ == "__main__":
    main()
