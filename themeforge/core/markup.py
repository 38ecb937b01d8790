"""HTML entry document generation.

``MarkupGenerator.generate()`` is a pure function of the build settings it
was constructed with and its arguments: no filesystem or network access.
Build settings are read beforehand with ``load_build_settings()``.

Head declarations are merged by ``id`` across layers (package defaults,
tenant ``defaultSettings.html``, tenant ``appsSettings.<project>.html``):
an overriding layer updates the fields of an existing declaration in
place, new ids are appended. Emission order is ascending ``order``, then
declarations without an order in the sequence they were declared.

Head tags and the body template are Jinja2 templates. They may reference
chunk placeholders (``{{ main }}``, ``{{ styles }}``, ``{{ polyfills_es5 }}``
or ``{{ chunks["polyfills-es5"] }}``), plus ``{{ scripts }}``,
``{{ project }}`` and ``{{ theme }}``. Substituted values are autoescaped;
the rest of a tag is emitted as written.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

from jinja2 import Environment, StrictUndefined, TemplateSyntaxError, UndefinedError, select_autoescape
from markupsafe import Markup

from themeforge.core.merge import deep_merge, load_json_document, merge_two, tenant_layers
from themeforge.errors import MissingArtifactError, PreconditionError
from themeforge.models.build import AssetManifest
from themeforge.models.config import PipelineConfig
from themeforge.models.markup import DEFAULT_BUILD_SETTINGS, HeadTag, HtmlSettings

logger = logging.getLogger(__name__)

_DOCUMENT_TEMPLATE = """\
<!doctype html>
<html lang="{{ lang }}">
  <head>
{% for tag in head %}
    {{ tag }}
{% endfor %}
  </head>
  <body>
{% for line in body %}
    {{ line }}
{% endfor %}
  </body>
</html>
"""

_SCRIPT_TAG = Markup('<script src="{}" defer></script>')


def create_environment() -> Environment:
    """Jinja2 environment for entry documents: autoescaped, strict undefined."""
    return Environment(
        autoescape=select_autoescape(default_for_string=True, default=True),
        undefined=StrictUndefined,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )


def merge_declarations(*layers: Iterable[Mapping[str, Any]] | None) -> list[dict[str, Any]]:
    """Merge head declaration lists by ``id``; later layers win per field."""
    merged: dict[str, dict[str, Any]] = {}
    for layer in layers:
        for declaration in layer or []:
            declaration_id = declaration.get("id")
            if not declaration_id:
                raise PreconditionError(f"Head declaration without an id: {declaration!r}")
            if declaration_id in merged:
                merged[declaration_id] = merge_two(merged[declaration_id], declaration)
            else:
                merged[declaration_id] = dict(declaration)
    return list(merged.values())


def order_head_tags(tags: Iterable[HeadTag]) -> list[HeadTag]:
    """Ordered tags ascending, then unordered tags in declared sequence."""
    tags = list(tags)
    ordered = sorted((t for t in tags if t.order is not None), key=lambda t: t.order)
    unordered = [t for t in tags if t.order is None]
    return ordered + unordered


class MarkupGenerator:
    """Renders ``index.html`` for a tenant.

    Parameters
    ----------
    tenant_settings:
        Tenant id -> that tenant's ``build-settings.json`` document.
    defaults:
        Package-level build settings; ``DEFAULT_BUILD_SETTINGS`` if omitted.
    """

    def __init__(
        self,
        tenant_settings: Mapping[str, Mapping[str, Any]] | None = None,
        defaults: Mapping[str, Any] | None = None,
    ) -> None:
        self.tenant_settings = dict(tenant_settings or {})
        self.defaults = dict(defaults if defaults is not None else DEFAULT_BUILD_SETTINGS)
        self.env = create_environment()
        self._document = self.env.from_string(_DOCUMENT_TEMPLATE)

    def resolve_settings(self, project_name: str, tenant: str) -> HtmlSettings:
        tenant_defaults, per_app = tenant_layers(
            self.tenant_settings.get(tenant, {}), project_name
        )
        layers = [
            self.defaults.get("html") or {},
            tenant_defaults.get("html") or {},
            per_app.get("html") or {},
        ]
        head = merge_declarations(*(layer.get("head") for layer in layers))
        rest = deep_merge(*({k: v for k, v in layer.items() if k != "head"} for layer in layers))
        return HtmlSettings.model_validate({**rest, "head": head})

    def generate(
        self,
        project_name: str,
        tenant: str,
        chunk_map: Mapping[str, str | list[str]],
    ) -> str:
        """Return the complete HTML document for *tenant*."""
        settings = self.resolve_settings(project_name, tenant)
        context = self._context(project_name, tenant, chunk_map, settings.body.scripts)

        head = [
            self._render(tag.tag, context, f"head tag {tag.id!r}")
            for tag in order_head_tags(settings.head)
            if tag.tag
        ]
        body = self._render(settings.body.template, context, "body template")

        return self._document.render(
            lang=settings.lang,
            head=head,
            body=[Markup(line) for line in body.splitlines() if line.strip()],
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _context(
        project_name: str,
        tenant: str,
        chunk_map: Mapping[str, str | list[str]],
        scripts: list[str],
    ) -> dict[str, Any]:
        resolved = AssetManifest(assets_by_chunk_name=dict(chunk_map)).chunk_map()
        context: dict[str, Any] = {}
        for chunk, file_name in resolved.items():
            context[chunk.replace("-", "_")] = file_name
        context["chunks"] = resolved
        context["scripts"] = Markup("\n").join(
            _SCRIPT_TAG.format(resolved[chunk])
            for chunk in scripts
            if chunk in resolved and resolved[chunk].endswith(".js")
        )
        context["project"] = project_name
        context["theme"] = tenant
        return context

    def _render(self, source: str, context: Mapping[str, Any], where: str) -> Markup:
        try:
            return Markup(self.env.from_string(source).render(context))
        except UndefinedError as exc:
            raise MissingArtifactError(
                f"Unknown placeholder in {where}: {exc.message}; "
                f"available: {', '.join(sorted(context))}"
            ) from None
        except TemplateSyntaxError as exc:
            raise PreconditionError(f"Malformed {where}: {exc.message}") from exc


def load_build_settings(config: PipelineConfig, tenants: Iterable[str]) -> dict[str, dict[str, Any]]:
    """Read ``themes/<t>/build-settings.json`` for every tenant that has one."""
    documents: dict[str, dict[str, Any]] = {}
    for tenant in tenants:
        path: Path = config.build_settings_path(tenant)
        if path.is_file():
            documents[tenant] = load_json_document(path)
            logger.debug("Loaded build settings for %s", tenant)
    return documents
