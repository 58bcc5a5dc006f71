"""Model package for pyprocesses."""

from pyprocesses.models.launch_spec import LaunchSpec

__all__ = [
    "LaunchSpec",
]
