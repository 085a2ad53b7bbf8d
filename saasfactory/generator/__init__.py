"""Project materializer: renders a Next.js SaaS skeleton from a ProjectContext."""

from saasfactory.generator.materializer import MODULES, GenerateResult, GeneratorModule, materialize

__all__ = ["MODULES", "GenerateResult", "GeneratorModule", "materialize"]
