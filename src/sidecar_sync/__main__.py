"""Entry point for ``python -m sidecar_sync``."""

from sidecar_sync.cli import run

if __name__ == "__main__":
    run()
