"""Packaged JSON schemas for agentfeed documents."""

from __future__ import annotations

import json
from functools import lru_cache
from importlib import resources
from typing import Any, Dict


@lru_cache(maxsize=None)
def load_schema(name: str) -> Dict[str, Any]:
    resource = resources.files(__name__) / name
    return json.loads(resource.read_text(encoding="utf-8"))


__all__ = ["load_schema"]
