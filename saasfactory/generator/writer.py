"""Writes rendered templates and JSON files under a project root."""

import json
from datetime import date
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from saasfactory.core.context import Feature, ProjectContext

TEMPLATES_DIR = Path(__file__).parent / "templates"


def _js(value: Any) -> str:
    """Render a value as a JavaScript literal."""
    return json.dumps(value, ensure_ascii=False)


def build_environment(templates_dir: Path = TEMPLATES_DIR) -> Environment:
    env = Environment(
        loader=FileSystemLoader(str(templates_dir)),
        undefined=StrictUndefined,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
        autoescape=False,
    )
    env.filters["js"] = _js
    return env


def _fallback_features(project: ProjectContext) -> list[Feature]:
    return [
        Feature(title="Fast setup", description=f"Get started with {project.display_name} in minutes."),
        Feature(title="Secure by default", description="Authentication and data protection built in."),
        Feature(title="Simple pricing", description="Plans that grow with you."),
        Feature(title="Great support", description="We're here when you need help."),
    ]


class ProjectWriter:
    """Renders files for one project. Paths are relative to ``root``."""

    def __init__(self, project: ProjectContext, root: Path, env: Environment | None = None) -> None:
        self.project = project
        self.root = root
        self.env = env or build_environment()
        self.written: list[Path] = []
        content = project.content
        self.globals = {
            "project": project,
            "tagline": content.tagline,
            "headline": content.hero_headline or content.tagline or project.display_name,
            "subheadline": content.hero_subheadline or project.description,
            "description": content.meta_description or project.description,
            "features": content.features or _fallback_features(project),
            "site_url": f"https://{project.domain}" if project.domain else "http://localhost:3000",
            "today": date.today().isoformat(),
        }

    def path(self, relative: str) -> Path:
        return self.root / relative

    def mkdirs(self, *relatives: str) -> None:
        for relative in relatives:
            self.path(relative).mkdir(parents=True, exist_ok=True)

    def write_text(self, relative: str, text: str) -> Path:
        target = self.path(relative)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(text, encoding="utf-8")
        self.written.append(target)
        return target

    def render(self, relative: str, template: str, **extra: Any) -> Path:
        text = self.env.get_template(template).render(**self.globals, **extra)
        return self.write_text(relative, text)

    def write_json(self, relative: str, data: Any) -> Path:
        return self.write_text(relative, json.dumps(data, indent=2, ensure_ascii=False) + "\n")
