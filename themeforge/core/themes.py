"""Theme discovery: the themes directory is the source of tenant ids."""

from __future__ import annotations

import logging
import re
from pathlib import Path

from pydantic import BaseModel, ConfigDict

from themeforge.errors import PreconditionError

logger = logging.getLogger(__name__)

KEBAB_CASE = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")


class Theme(BaseModel):
    """A tenant theme found under the themes directory."""

    model_config = ConfigDict(frozen=True)

    id: str
    path: Path
    is_principal: bool = False


def list_theme_directories(themes_path: Path) -> list[str]:
    """Names of the visible sub-directories of *themes_path*, sorted."""
    if not themes_path.is_dir():
        raise PreconditionError(f"Themes directory not found: {themes_path}")
    return sorted(
        entry.name
        for entry in themes_path.iterdir()
        if entry.is_dir() and not entry.name.startswith(".")
    )


def discover_themes(themes_path: Path, principal: str) -> list[Theme]:
    """Return every theme, principal first, the rest sorted by id.

    Raises ``PreconditionError`` if the directory is missing, the principal
    theme is absent, or a theme directory is not named in kebab-case.
    """
    names = list_theme_directories(themes_path)

    invalid = [name for name in names if not KEBAB_CASE.match(name)]
    if invalid:
        raise PreconditionError(
            "Theme directory names must be kebab-case: " + ", ".join(invalid)
        )
    if principal not in names:
        raise PreconditionError(
            f"The principal theme {principal!r} is required in {themes_path}"
        )

    themes = [Theme(id=principal, path=themes_path / principal, is_principal=True)]
    themes.extend(
        Theme(id=name, path=themes_path / name)
        for name in names
        if name != principal
    )
    logger.info(
        "Found %d theme(s): %s", len(themes), ", ".join(t.id for t in themes)
    )
    return themes


def tenant_ids(themes: list[Theme]) -> list[str]:
    return [theme.id for theme in themes]


def customer_ids(themes: list[Theme]) -> list[str]:
    """Ids of the non-principal themes."""
    return [theme.id for theme in themes if not theme.is_principal]
