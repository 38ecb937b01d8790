"""Tests for the HTML entry document generator."""

from __future__ import annotations

import json
from collections.abc import Callable

import pytest

from themeforge.core.markup import (
    MarkupGenerator,
    load_build_settings,
    merge_declarations,
    order_head_tags,
)
from themeforge.errors import MissingArtifactError, PreconditionError
from themeforge.models.config import PipelineConfig
from themeforge.models.markup import HeadTag

CHUNKS = {
    "runtime": "runtime.js",
    "polyfills": "polyfills.js",
    "main": ["main.js", "main.js.map"],
    "styles": "styles.abc123.css",
}


# ---------------------------------------------------------------------------
# Head declarations
# ---------------------------------------------------------------------------


class TestHeadDeclarations:
    def test_ordering_ascending_then_declared_sequence(self):
        tags = [
            HeadTag(id="b", tag="<b>"),
            HeadTag(id="a", tag="<a>", order=2),
            HeadTag(id="first", tag="<first>", order=1),
            HeadTag(id="c", tag="<c>"),
        ]
        assert [t.id for t in order_head_tags(tags)] == ["first", "a", "b", "c"]

    def test_rendered_head_order(self):
        generator = MarkupGenerator(
            defaults={
                "html": {
                    "head": [
                        {"id": "a", "tag": "<meta name='a' />", "order": 2},
                        {"id": "b", "tag": "<meta name='b' />", "order": 1},
                        {"id": "c", "tag": "<meta name='c' />"},
                    ]
                }
            }
        )
        document = generator.generate("app", "forgerock", CHUNKS)
        head = document.split("<head>\n")[1].split("  </head>")[0].split()
        names = [part for part in head if part.startswith("name=")]
        assert names == ["name='b'", "name='a'", "name='c'"]

    def test_merge_by_id_updates_in_place(self):
        merged = merge_declarations(
            [{"id": "title", "tag": "<title>Default</title>", "order": 3}, {"id": "viewport", "tag": "<v>"}],
            [{"id": "title", "tag": "<title>Acme</title>"}, {"id": "icon", "tag": "<link>"}],
        )
        assert merged == [
            {"id": "title", "tag": "<title>Acme</title>", "order": 3},
            {"id": "viewport", "tag": "<v>"},
            {"id": "icon", "tag": "<link>"},
        ]

    def test_declaration_without_id(self):
        with pytest.raises(PreconditionError, match="without an id"):
            merge_declarations([{"tag": "<meta>"}])


# ---------------------------------------------------------------------------
# Document generation
# ---------------------------------------------------------------------------


class TestGenerate:
    def test_default_document(self):
        document = MarkupGenerator().generate("app", "forgerock", CHUNKS)
        assert document == (
            "<!doctype html>\n"
            '<html lang="en">\n'
            "  <head>\n"
            '    <meta charset="utf-8" />\n'
            '    <base href="/" />\n'
            "    <title>Forgerock App</title>\n"
            '    <meta name="viewport" content="width=device-width, initial-scale=1.0, '
            'minimum-scale=1.0, maximum-scale=1.0, user-scalable=no, viewport-fit=cover" />\n'
            '    <link rel="stylesheet" href="styles.abc123.css" />\n'
            "  </head>\n"
            "  <body>\n"
            "    <app-root></app-root>\n"
            '    <script src="runtime.js" defer></script>\n'
            '    <script src="polyfills.js" defer></script>\n'
            '    <script src="main.js" defer></script>\n'
            "  </body>\n"
            "</html>\n"
        )

    def test_is_deterministic(self):
        generator = MarkupGenerator({"acme": {"defaultSettings": {"html": {"lang": "fr"}}}})
        assert generator.generate("app", "acme", CHUNKS) == generator.generate("app", "acme", CHUNKS)

    def test_tenant_and_app_layers_override(self):
        generator = MarkupGenerator(
            {
                "acme": {
                    "defaultSettings": {
                        "html": {
                            "lang": "fr",
                            "head": [
                                {"id": "title", "tag": "<title>Acme</title>"},
                                {"id": "favicon", "tag": '<link rel="icon" href="assets/{{ theme }}.ico" />', "order": 0},
                            ],
                        }
                    },
                    "appsSettings": {
                        "app": {"html": {"head": [{"id": "title", "tag": "<title>Acme {{ project }}</title>"}]}}
                    },
                }
            }
        )
        document = generator.generate("app", "acme", CHUNKS)
        head = document.split("<head>\n")[1].split("  </head>")[0].splitlines()

        assert '<html lang="fr">' in document
        assert head[0].strip() == '<link rel="icon" href="assets/acme.ico" />'
        assert "<title>Acme app</title>" in document
        assert "Forgerock App" not in document

    def test_custom_body_template_and_hyphenated_chunks(self):
        chunks = {**CHUNKS, "polyfills-es5": "polyfills-es5.js"}
        generator = MarkupGenerator(
            {
                "acme": {
                    "defaultSettings": {
                        "html": {
                            "body": {
                                "template": '<acme-root></acme-root>\n<script nomodule src="{{ polyfills_es5 }}"></script>\n<script type="module" src="{{ chunks["polyfills-es5"] }}"></script>\n{{ scripts }}',
                                "scripts": ["main"],
                            }
                        }
                    }
                }
            }
        )
        document = generator.generate("app", "acme", chunks)
        assert "<acme-root></acme-root>" in document
        assert '<script nomodule src="polyfills-es5.js"></script>' in document
        assert '<script type="module" src="polyfills-es5.js"></script>' in document
        assert '<script src="main.js" defer></script>' in document
        assert "runtime.js" not in document

    def test_scripts_skip_chunks_the_build_did_not_emit(self):
        document = MarkupGenerator().generate("app", "forgerock", {"main": "main.js"})
        assert '<script src="main.js" defer></script>' in document
        assert "vendor" not in document

    def test_unknown_placeholder(self):
        generator = MarkupGenerator(
            {"acme": {"defaultSettings": {"html": {"head": [{"id": "x", "tag": "<script src='{{ vendor }}'>"}]}}}}
        )
        with pytest.raises(MissingArtifactError, match="vendor"):
            generator.generate("app", "acme", CHUNKS)

    def test_dollar_signs_are_emitted_as_written(self):
        config_tag = "<script>window.$config = {price: '$5'}; $(document).ready(init);</script>"
        generator = MarkupGenerator(
            {
                "acme": {
                    "defaultSettings": {
                        "html": {
                            "head": [
                                {"id": "cfg", "tag": config_tag},
                                {"id": "title", "tag": "<title>Acme $5 plan</title>"},
                            ]
                        }
                    }
                }
            }
        )
        document = generator.generate("app", "acme", CHUNKS)
        assert f"    {config_tag}\n" in document
        assert "<title>Acme $5 plan</title>" in document

    def test_malformed_template(self):
        generator = MarkupGenerator(
            {"acme": {"defaultSettings": {"html": {"head": [{"id": "x", "tag": "<title>{{ project </title>"}]}}}}
        )
        with pytest.raises(PreconditionError, match="head tag 'x'"):
            generator.generate("app", "acme", CHUNKS)

    def test_file_names_are_escaped(self):
        document = MarkupGenerator().generate("app", "forgerock", {**CHUNKS, "main": 'ma"in.js'})
        assert 'src="ma&#34;in.js"' in document


def test_load_build_settings(make_workspace: Callable[..., PipelineConfig]):
    config = make_workspace(
        {"acme": {"build_settings": {"defaultSettings": {"html": {"lang": "de"}}}}, "globex": {}}
    )
    documents = load_build_settings(config, ["forgerock", "acme", "globex"])
    assert list(documents) == ["acme"]
    assert documents["acme"] == json.loads(config.build_settings_path("acme").read_text())
