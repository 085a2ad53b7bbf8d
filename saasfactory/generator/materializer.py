"""Writes a project to disk by running the enabled generator modules in order."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from saasfactory.core.context import ProjectContext
from saasfactory.core.errors import GenerationError
from saasfactory.generator import modules
from saasfactory.generator.writer import ProjectWriter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GeneratorModule:
    name: str
    run: Callable[[ProjectWriter], None]
    enabled: Callable[[ProjectContext], bool] = lambda _p: True


MODULES: tuple[GeneratorModule, ...] = (
    GeneratorModule("Base project", modules.generate_base),
    GeneratorModule("Authentication", modules.generate_auth, lambda p: p.features.auth),
    GeneratorModule("Database", modules.generate_database, lambda p: p.features.database),
    GeneratorModule("Payments", modules.generate_payments, lambda p: p.features.payments),
    GeneratorModule("SEO", modules.generate_seo, lambda p: p.features.seo),
    GeneratorModule("Analytics", modules.generate_analytics, lambda p: p.features.analytics != "none"),
    GeneratorModule("Email templates", modules.generate_email, lambda p: p.features.email),
    GeneratorModule("Legal documents", modules.generate_legal, lambda p: p.features.legal),
    GeneratorModule("Assets", modules.generate_assets, lambda p: p.features.assets),
)


@dataclass
class GenerateResult:
    success: bool
    project_path: Path
    errors: list[str] = field(default_factory=list)
    files: list[Path] = field(default_factory=list)


def materialize(
    project: ProjectContext,
    target: Path,
    *,
    on_step: Callable[[str, bool], None] | None = None,
    generator_modules: tuple[GeneratorModule, ...] = MODULES,
) -> GenerateResult:
    """Generate ``project`` into ``target``.

    The target must not exist. Failing to create it raises GenerationError.
    A failing module is recorded as ``"<Module>: <error>"`` and the rest still
    run, so ``errors`` non-empty means partial success.
    """
    target = Path(target)
    if target.exists():
        raise GenerationError(
            f"Directory already exists: {target}",
            "Choose a different project name or remove the existing directory",
        )
    try:
        target.mkdir(parents=True)
    except OSError as e:
        raise GenerationError(f"Cannot create project directory {target}: {e}") from e

    writer = ProjectWriter(project, target)
    errors: list[str] = []

    def step(name: str, fn: Callable[[], object]) -> None:
        try:
            fn()
        except Exception as e:
            logger.warning("Generator module %s failed", name, exc_info=True)
            errors.append(f"{name}: {e}")
            ok = False
        else:
            ok = True
        if on_step is not None:
            on_step(name, ok)

    for module in generator_modules:
        if not module.enabled(project):
            logger.debug("Skipping disabled module %s", module.name)
            continue
        step(module.name, lambda m=module: m.run(writer))

    step(
        "Config",
        lambda: writer.write_json(
            "saasfactory.json",
            {
                "version": project.version,
                "createdAt": project.created_at,
                "context": project.model_dump(mode="json", by_alias=True),
            },
        ),
    )
    step("README", lambda: writer.render("README.md", "README.md.j2"))

    logger.info("Generated %s with %d file(s), %d error(s)", target, len(writer.written), len(errors))
    return GenerateResult(success=not errors, project_path=target, errors=errors, files=list(writer.written))
