"""
ZeroFinanx Web Blueprints Package.

This package contains Flask Blueprints for modular route organization.
"""

from web.blueprints.admin import admin_bp
from web.blueprints.auth import auth_bp
from web.blueprints.backup import backup_bp
from web.blueprints.signup import signup_bp

__all__ = ["admin_bp", "auth_bp", "backup_bp", "signup_bp"]
