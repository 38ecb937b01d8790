"""HTML entry document models and package default build settings."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict


class HeadTag(BaseModel):
    """A single ``<head>`` declaration.

    Tags with an ``order`` are emitted ascending; tags without one follow,
    in declaration order. An empty ``tag`` drops the declaration.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    tag: str = ""
    order: float | None = None


DEFAULT_BODY_TEMPLATE = "<app-root></app-root>\n{{ scripts }}"

DEFAULT_BODY_SCRIPTS = ["runtime", "polyfills", "vendor", "main"]


class BodySettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    template: str = DEFAULT_BODY_TEMPLATE
    scripts: list[str] = list(DEFAULT_BODY_SCRIPTS)


class HtmlSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    lang: str = "en"
    head: list[HeadTag] = []
    body: BodySettings = BodySettings()


# Package defaults; themes override them through build-settings.json.
DEFAULT_BUILD_SETTINGS: dict[str, Any] = {
    "html": {
        "lang": "en",
        "head": [
            {"id": "charset", "tag": '<meta charset="utf-8" />', "order": 1},
            {"id": "base", "tag": '<base href="/" />', "order": 2},
            {"id": "title", "tag": "<title>Forgerock App</title>", "order": 3},
            {
                "id": "viewport",
                "tag": (
                    '<meta name="viewport" content="width=device-width, '
                    "initial-scale=1.0, minimum-scale=1.0, maximum-scale=1.0, "
                    'user-scalable=no, viewport-fit=cover" />'
                ),
            },
            {"id": "styles", "tag": '<link rel="stylesheet" href="{{ styles }}" />'},
        ],
        "body": {
            "template": DEFAULT_BODY_TEMPLATE,
            "scripts": list(DEFAULT_BODY_SCRIPTS),
        },
    },
}
