import getpass
import socket
from pathlib import Path


def current_user() -> str:
    try:
        return getpass.getuser()
    except (KeyError, OSError):
        return "unknown"


def current_hostname() -> str:
    return socket.gethostname()


def current_directory() -> Path:
    return Path.cwd()
