"""Centralized constants for sidecar management."""

# Standalone install location, relative to the user's home directory
CLI_INSTALL_DIR = ".opencode/bin"
CLI_BINARY_NAME = "opencode"

# Bundled sidecar, adjacent to the application executable
SIDECAR_BINARY_NAME = "opencode-cli"

# Shell used when SHELL is unset or empty
DEFAULT_SHELL = "/bin/sh"

# Sidecar protocol
CONFIG_COMMAND = ("debug", "config")
VERSION_FLAG = "--version"

# Installer script written to the temp directory
INSTALL_SCRIPT_NAME = "opencode-install.sh"
INSTALL_SCRIPT_MODE = 0o755
INSTALL_BINARY_FLAG = "--binary"

# Length of stderr excerpts kept on errors and in log events
STDERR_EXCERPT_LENGTH = 500

# sys.platform values that get native Windows handling
WINDOWS_PLATFORMS = frozenset({"win32", "cygwin"})
