"""Allow ``python -m annodeck``."""

from annodeck.cli import main

if __name__ == "__main__":  # pragma: no cover - import guard
    raise SystemExit(main())
