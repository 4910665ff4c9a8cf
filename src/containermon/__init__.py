"""
Container Monitor (containermon).

Polls the Docker daemon for container health and sends notifications
when a container stays unhealthy, and optionally when it recovers.
"""

__version__ = "0.1.0"
