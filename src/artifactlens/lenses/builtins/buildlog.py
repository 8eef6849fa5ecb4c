"""Build log lens: shows the tail of each log artifact."""

import html
import json
import logging
from pathlib import Path

from artifactlens.artifact import Artifact
from artifactlens.errors import LensError
from artifactlens.lenses.base import Lens, LensConfig
from artifactlens.tail import last_n_lines

logger = logging.getLogger(__name__)

DEFAULT_LINES = 100


def _requested_lines(data: str) -> int:
    """Parse ``{"lines": N}`` from front-end data, falling back to the default."""
    if not data:
        return DEFAULT_LINES
    try:
        lines = json.loads(data).get("lines", DEFAULT_LINES)
    except (ValueError, AttributeError):
        lines = None
    # bool is an int subclass; floats include inf and nan
    if not isinstance(lines, int) or isinstance(lines, bool):
        logger.warning("Ignoring malformed buildlog request: %r", data)
        return DEFAULT_LINES
    return max(lines, 0)


class BuildLogLens(Lens):
    """Renders the last lines of each artifact as preformatted text.

    The front-end asks for more lines by sending ``{"lines": N}`` to
    body(), or ``{"artifact": "<job path>", "lines": N}`` to callback()
    for a single artifact. callback() answers with JSON.
    """

    def config(self) -> LensConfig:
        return LensConfig(name="buildlog", title="Build Log", priority=10)

    def header(self, artifacts: list[Artifact], resource_dir: Path) -> str:
        href = html.escape(str(Path(resource_dir) / "buildlog.css"), quote=True)
        return f'<link rel="stylesheet" type="text/css" href="{href}">'

    def body(self, artifacts: list[Artifact], resource_dir: Path, data: str) -> str:
        n = _requested_lines(data)
        sections = []
        for artifact in artifacts:
            name = html.escape(artifact.job_path())
            try:
                lines = last_n_lines(artifact, n)
            except LensError as e:
                logger.warning("Cannot read %s: %s", artifact.job_path(), e)
                sections.append(
                    f'<div class="buildlog"><h4>{name}</h4>'
                    f'<p class="buildlog-error">{html.escape(str(e))}</p></div>'
                )
                continue
            text = html.escape("\n".join(lines))
            sections.append(
                f'<div class="buildlog"><h4>{name}</h4><pre>{text}</pre></div>'
            )
        return "\n".join(sections)

    def callback(
        self, artifacts: list[Artifact], resource_dir: Path, data: str
    ) -> str:
        try:
            request = json.loads(data)
        except ValueError:
            return json.dumps({"error": "request must be JSON"})
        if not isinstance(request, dict):
            return json.dumps({"error": "request must be a JSON object"})

        job_path = request.get("artifact")
        artifact = next((a for a in artifacts if a.job_path() == job_path), None)
        if artifact is None:
            return json.dumps({"error": f"no artifact {job_path!r}"})

        try:
            lines = last_n_lines(artifact, _requested_lines(data))
        except LensError as e:
            return json.dumps({"error": str(e)})
        return json.dumps({"artifact": job_path, "lines": lines})
