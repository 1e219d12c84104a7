"""Bundled sidecar CLI management for the desktop application.

Locates the ``opencode-cli`` binary shipped inside the application bundle,
runs it through the user's login shell, reads its configuration, and keeps
an independently installed copy in ``~/.opencode/bin`` in step with the
application's own version.
"""

__version__ = "1.0.0"
