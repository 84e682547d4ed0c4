"""Build, install or test every sub-project of a workspace with one toolchain."""

__version__ = "0.1.0"
