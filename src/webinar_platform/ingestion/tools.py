"""External command-line tools: pdftoppm page rendering and LibreOffice conversion.

Tools run as argv lists (never through a shell) with a hard timeout. Failures
are raised as ToolError subclasses by ``run_tool``; the higher-level helpers
catch them and degrade instead of failing the analysis.
"""

import asyncio
import re
from dataclasses import dataclass
from html import escape
from pathlib import Path

import structlog

from webinar_platform.errors import (
    ToolError,
    ToolExitError,
    ToolNotFoundError,
    ToolTimeoutError,
)
from webinar_platform.ingestion.models import ImageRef

logger = structlog.get_logger(__name__)

PAGE_IMAGE_PREFIX = "page"
PLACEHOLDER_HTML = "slides.html"

_PAGE_NUMBER = re.compile(rf"^{PAGE_IMAGE_PREFIX}-?(\d+)\.png$")


@dataclass
class ToolResult:
    """Captured output of a finished tool run."""

    stdout: str
    stderr: str
    returncode: int = 0


async def run_tool(command: str, args: list[str], timeout: float) -> ToolResult:
    """Run an external tool and wait for it.

    Args:
        command: Executable name or path.
        args: Arguments passed verbatim.
        timeout: Seconds before the process is killed.

    Returns:
        ToolResult with decoded output.

    Raises:
        ToolNotFoundError: The executable does not exist.
        ToolTimeoutError: The timeout expired; the process was killed.
        ToolExitError: The process exited non-zero.
    """
    try:
        process = await asyncio.create_subprocess_exec(
            command,
            *args,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except FileNotFoundError as e:
        raise ToolNotFoundError(f"{command} is not installed", command=command) from e

    try:
        stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=timeout)
    except asyncio.TimeoutError as e:
        process.kill()
        await process.wait()
        raise ToolTimeoutError(f"{command} timed out after {timeout}s", command=command) from e

    out = stdout.decode("utf-8", errors="replace")
    err = stderr.decode("utf-8", errors="replace")

    if process.returncode != 0:
        raise ToolExitError(
            f"{command} failed with exit code {process.returncode}",
            returncode=process.returncode,
            command=command,
            stdout=out,
            stderr=err,
        )

    return ToolResult(stdout=out, stderr=err, returncode=0)


def page_number_of(filename: str) -> int | None:
    """Page number encoded in a pdftoppm output name (``page-3.png``, ``page-03.png``)."""
    match = _PAGE_NUMBER.match(filename)
    return int(match.group(1)) if match else None


async def rasterize_pdf(
    pdf_path: Path,
    output_dir: Path,
    public_prefix: str,
    timeout: float = 120.0,
    binary: str = "pdftoppm",
) -> list[ImageRef]:
    """Render every PDF page to ``output_dir/page-N.png``.

    Args:
        pdf_path: Source PDF.
        output_dir: Per-webinar image directory.
        public_prefix: URL prefix for ``output_dir`` (e.g. ``/uploads/<webinar_id>``).
        timeout: Seconds before pdftoppm is killed.
        binary: pdftoppm executable.

    Returns:
        Page images ordered by page number, or an empty list if rendering failed.
    """
    output_dir.mkdir(parents=True, exist_ok=True)

    try:
        await run_tool(
            binary,
            [str(pdf_path), str(output_dir / PAGE_IMAGE_PREFIX), "-png"],
            timeout=timeout,
        )
    except ToolError as e:
        logger.warning(
            "PDF page rendering failed",
            pdf_path=str(pdf_path),
            error=str(e),
            stderr=e.stderr[:500],
        )
        return []

    pages = sorted(
        (number, path.name)
        for path in output_dir.iterdir()
        if (number := page_number_of(path.name)) is not None
    )

    prefix = public_prefix.rstrip("/")
    return [
        ImageRef(
            filename=name,
            original_path=str(output_dir / name),
            public_path=f"{prefix}/{name}",
            page_number=number,
        )
        for number, name in pages
    ]


async def convert_to_html(
    source_path: Path,
    output_dir: Path,
    timeout: float = 60.0,
    binary: str = "libreoffice",
) -> str:
    """Convert an office document or PDF to HTML with LibreOffice.

    Falls back to a placeholder page when LibreOffice is unavailable or fails.

    Returns:
        Name of the HTML file written into ``output_dir``.
    """
    output_dir.mkdir(parents=True, exist_ok=True)

    try:
        result = await run_tool(
            binary,
            ["--headless", "--convert-to", "html", "--outdir", str(output_dir), str(source_path)],
            timeout=timeout,
        )
        logger.info("LibreOffice conversion finished", source=source_path.name, stdout=result.stdout.strip())

        html_files = sorted(p.name for p in output_dir.glob("*.html") if p.name != PLACEHOLDER_HTML)
        if not html_files:
            raise ToolError("LibreOffice produced no HTML file", command=binary)
        return html_files[0]

    except ToolError as e:
        logger.warning(
            "LibreOffice unavailable, writing placeholder slides",
            source=source_path.name,
            error=str(e),
        )
        write_placeholder_html(source_path.name, output_dir)
        return PLACEHOLDER_HTML


def write_placeholder_html(filename: str, output_dir: Path) -> Path:
    file_type = "PDF" if filename.lower().endswith(".pdf") else "PPTX"
    html = f"""<!DOCTYPE html>
<html lang="de">
<head>
  <meta charset="UTF-8">
  <title>Slides</title>
</head>
<body>
  <div>
    <h1>Platzhalter-Präsentation</h1>
    <p>Die {file_type}-Datei "{escape(filename)}" wurde hochgeladen, aber noch nicht konvertiert.</p>
    <p>Bitte konfigurieren Sie LibreOffice für die automatische Konvertierung.</p>
  </div>
</body>
</html>
"""
    path = output_dir / PLACEHOLDER_HTML
    path.write_text(html, encoding="utf-8")
    return path
