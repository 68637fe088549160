from .server import register_server_commands
from .settings import register_settings_commands
from .split import register_split_commands

__all__ = [
    "register_server_commands",
    "register_settings_commands",
    "register_split_commands",
]
