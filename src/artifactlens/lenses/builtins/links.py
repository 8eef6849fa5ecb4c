"""Lens listing artifacts with links to their storage."""

import html
from pathlib import Path

from artifactlens.artifact import Artifact
from artifactlens.lenses.base import Lens, LensConfig


class LinksLens(Lens):
    """Lists each artifact's job path, linked to its canonical location."""

    def config(self) -> LensConfig:
        return LensConfig(name="links", title="Artifacts", priority=0, hide_title=True)

    def header(self, artifacts: list[Artifact], resource_dir: Path) -> str:
        return ""

    def body(self, artifacts: list[Artifact], resource_dir: Path, data: str) -> str:
        items = [
            '<li><a href="{}">{}</a></li>'.format(
                html.escape(a.canonical_link(), quote=True),
                html.escape(a.job_path()),
            )
            for a in artifacts
        ]
        return '<ul class="artifact-links">' + "".join(items) + "</ul>"

    def callback(
        self, artifacts: list[Artifact], resource_dir: Path, data: str
    ) -> str:
        return ""
