"""Core type definitions for entityprovider."""

from typing import Any, TypeAlias

EntityKey: TypeAlias = int | str
"""Identifier as a caller or the store hands it over.

Canonical keys are the store's native ids. Anything else a caller uses to address an
entity is an alternate key and must be resolved before the entity is loaded.
"""

Account: TypeAlias = Any
"""Opaque identity object. Only ever forwarded to access callbacks."""
