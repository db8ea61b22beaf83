"""Shared type aliases for the core, domain and language layers."""
from typing import Literal, Union

Severity = Literal["info", "warning", "error"]
Value = Union[bool, int, float, str]
EngineStatus = Literal["idle", "running", "suspended_dialogue", "suspended_menu", "halted"]
MediaKind = Literal["play", "stop"]

__all__ = ["EngineStatus", "MediaKind", "Severity", "Value"]
