from typing import Any
import json as basejson
from .primitives import asPrimitive


def json(value: Any) -> bytes:
	"""Serializes the given value as UTF-8 encoded JSON."""
	return basejson.dumps(asPrimitive(value), ensure_ascii=False).encode("utf8")


# EOF
