"""Resource Service: static self-help suggestions."""

from .catalog import suggest_resources, RESOURCE_CATALOG, CRISIS_HOTLINES

__all__ = ["suggest_resources", "RESOURCE_CATALOG", "CRISIS_HOTLINES"]
