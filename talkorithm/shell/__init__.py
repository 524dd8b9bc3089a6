"""Application shell — UI state, auth, and the terminal front end."""

from talkorithm.shell.app import MentorShell
from talkorithm.shell.auth import Account, AuthProvider, LocalAuth

__all__ = ["Account", "AuthProvider", "LocalAuth", "MentorShell"]
