"""Projects grouped by transaction tag."""

from __future__ import annotations

import re

from sqlmodel import Field, SQLModel

_SEPARATORS = re.compile(r"[\s_]+")
_INVALID = re.compile(r"[^a-z0-9\-]")


def slugify_tag(raw: str) -> str:
    """Lowercase-hyphen form used for project tags, e.g. ``"Project Alpha"`` -> ``"project-alpha"``."""

    lowered = _SEPARATORS.sub("-", raw.strip().lower())
    return re.sub(r"-{2,}", "-", _INVALID.sub("", lowered)).strip("-")


class Project(SQLModel):
    """A named tag; any transaction carrying the tag belongs to the project."""

    id: str = Field(default="")
    name: str = Field(max_length=80)
    tag: str = Field(max_length=64)
