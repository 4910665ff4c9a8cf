"""
Status web interface for container monitor.
"""

from containermon.web.app import create_app

__all__ = ["create_app"]
