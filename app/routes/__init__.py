from .auth_routes import auth_bp
from .user_routes import user
from .core_routes import core
from .function_routes import functions_bp
from .donation_routes import donations_bp
from .server_routes import servers_bp
from .streamer_routes import streamers_bp
from .catalog_routes import catalog_bp
from .public_routes import public
from .admin_routes import admin_bp

__all__ = [
    "auth_bp",
    "user",
    "core",
    "functions_bp",
    "donations_bp",
    "servers_bp",
    "streamers_bp",
    "catalog_bp",
    "public",
    "admin_bp",
]
