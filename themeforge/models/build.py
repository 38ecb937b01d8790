"""Build configuration and build manifest models."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from themeforge.errors import MissingArtifactError


class StylePreprocessorOptions(BaseModel):
    """Style include paths handed to the stylesheet compiler."""

    model_config = ConfigDict(
        frozen=True, alias_generator=to_camel, populate_by_name=True
    )

    include_paths: list[str] = []


class BuildConfigEntry(BaseModel):
    """One build configuration, stored under
    ``projects.<project>.architect.build.configurations.<theme>``.

    Serialize with ``to_document()`` to get the camelCase keys the build
    tool reads.
    """

    model_config = ConfigDict(
        frozen=True, alias_generator=to_camel, populate_by_name=True
    )

    main: str
    polyfills: str
    style_preprocessor_options: StylePreprocessorOptions
    optimization: bool = True
    output_hashing: str = "none"
    source_map: bool = False
    extract_css: bool = True
    named_chunks: bool = False
    aot: bool = False
    extract_licenses: bool = False
    vendor_chunk: bool = False
    build_optimizer: bool = False

    @classmethod
    def for_theme(cls, theme: str, project_name: str) -> BuildConfigEntry:
        """Derive the entry for *theme* deterministically.

        Include paths are ordered theme-app, theme root, shared utilities,
        project sources.
        """
        entrypoint = f"projects/{project_name}/src/index.build.ts"
        return cls(
            main=entrypoint,
            polyfills=entrypoint,
            style_preprocessor_options=StylePreprocessorOptions(
                include_paths=[
                    f"themes/{theme}/apps/{project_name}/scss",
                    f"themes/{theme}/scss",
                    "utils/scss",
                    f"projects/{project_name}/src/scss",
                ]
            ),
        )

    def to_document(self) -> dict:
        return self.model_dump(by_alias=True)


class BuildAsset(BaseModel):
    """A file emitted by the build tool."""

    model_config = ConfigDict(frozen=True)

    name: str
    size: int = 0


class AssetManifest(BaseModel):
    """The principal build's stats manifest, reduced to what the pipeline reads.

    ``assets_by_chunk_name`` maps a logical chunk (``"main"``, ``"styles"``)
    to the emitted file name, or to a list of names when the chunk emitted
    several files (source maps, for instance).
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    assets: list[BuildAsset] = []
    assets_by_chunk_name: dict[str, str | list[str]] = Field(
        default_factory=dict, alias="assetsByChunkName"
    )

    @classmethod
    def from_file(cls, path: Path) -> AssetManifest:
        if not path.is_file():
            raise MissingArtifactError(f"Build manifest not found: {path}")
        return cls.model_validate_json(path.read_text(encoding="utf-8"))

    def chunk_file(self, chunk: str, extension: str | None = None) -> str | None:
        """Return the file emitted for *chunk*, preferring *extension*."""
        value = self.assets_by_chunk_name.get(chunk)
        if value is None:
            return None
        files = [value] if isinstance(value, str) else list(value)
        if extension:
            for name in files:
                if name.endswith(extension):
                    return name
        return files[0] if files else None

    @property
    def stylesheet(self) -> str:
        """File name of the compiled ``styles`` chunk."""
        name = self.chunk_file("styles", ".css")
        if not name:
            raise MissingArtifactError(
                "Build manifest has no 'styles' chunk; cannot locate the stylesheet"
            )
        return name

    def chunk_map(self) -> dict[str, str]:
        """Resolve every chunk to a single file name.

        ``styles`` resolves to its ``.css`` file, every other chunk to its
        ``.js`` file, falling back to the first emitted file.
        """
        resolved: dict[str, str] = {}
        for chunk in self.assets_by_chunk_name:
            extension = ".css" if chunk == "styles" else ".js"
            name = self.chunk_file(chunk, extension)
            if name:
                resolved[chunk] = name
        return resolved

    def javascript_assets(self) -> list[BuildAsset]:
        return [asset for asset in self.assets if asset.name.endswith(".js")]
