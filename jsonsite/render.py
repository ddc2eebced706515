from __future__ import annotations

import logging
import re
import shutil
from pathlib import Path

from .errors import TemplateNotFound

logger = logging.getLogger(__name__)

BASE_TEMPLATE = "base"
PLACEHOLDER_RE = re.compile(r"\{\{(\w+)\}\}")


def render_template(template: str, **context: str) -> str:
    # Single pass: substituted values are never scanned for placeholders again.
    def repl(match: re.Match) -> str:
        return context.get(match.group(1), match.group(0))

    return PLACEHOLDER_RE.sub(repl, template)


def template_path(templates_dir: Path, name: str) -> Path:
    return templates_dir / f"{name}.html"


def read_template(path: Path) -> str:
    if not path.exists():
        raise TemplateNotFound(path)
    return path.read_text(encoding="utf-8")


class PageRenderer:
    """Renders a named content template and wraps it in the base layout."""

    def __init__(self, templates_dir: Path, **site_context: str) -> None:
        self.templates_dir = Path(templates_dir)
        self.site_context = site_context
        self._cache: dict[str, str] = {}

    def template(self, name: str) -> str:
        if name not in self._cache:
            self._cache[name] = read_template(template_path(self.templates_dir, name))
        return self._cache[name]

    def render(self, name: str, title: str, root: str, nav: str = "", **data: str) -> str:
        body = render_template(self.template(name), **{**self.site_context, "root": root, **data})
        return render_template(
            self.template(BASE_TEMPLATE),
            **self.site_context,
            title=title,
            root=root,
            nav=nav,
            content=body,
        )

    def render_to(self, name: str, output_path: Path, title: str, root: str, nav: str = "", **data: str) -> None:
        logger.info("Rendering %s to %s", name, output_path)
        write_text(output_path, self.render(name, title, root, nav=nav, **data))


def write_text(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


def copy_static(static_dir: Path, output_dir: Path) -> None:
    for item in static_dir.iterdir():
        dest = output_dir / item.name
        if item.is_dir():
            if dest.exists():
                shutil.rmtree(dest)
            shutil.copytree(item, dest)
        else:
            shutil.copy2(item, dest)
