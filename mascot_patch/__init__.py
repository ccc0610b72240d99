"""Inject the VS Code mascot overlay into the workbench bundle, safely."""

__version__ = "1.2.0"
