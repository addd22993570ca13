from collections.abc import Mapping
from typing import TypeAlias

Tags: TypeAlias = Mapping[str, str]
"""
Plain key/value pairs used to seed a group of tags.
"""
