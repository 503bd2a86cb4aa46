"""
Core module for application configuration and domain logic.

Note: only settings is imported at package level. app.core.config imports
app.core.auth.magic_link, so importing more here would create cycles.
Import submodules directly: from app.core.percentile import ...
"""
from .config import settings

__all__ = ["settings"]
