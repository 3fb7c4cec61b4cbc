"""Media processing pipelines built on a chain-of-responsibility executor."""

from mediaflow.containers import Container, container
from mediaflow.settings import MediaflowSettings

__all__ = [
    "Container",
    "container",
    "MediaflowSettings",
]
