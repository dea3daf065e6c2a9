"""
wpprovisioner - Single-server WordPress installer (Caddy, PHP-FPM, MariaDB, UFW)
"""

__version__ = "0.3.0"

from .core import WordPressProvisioner
from .errors import ProvisionerError

__all__ = ["WordPressProvisioner", "ProvisionerError"]
