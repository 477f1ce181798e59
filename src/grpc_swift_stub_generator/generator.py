"""Generate Swift source files from code generation requests."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace

from grpc_swift_stub_generator.config import Configuration
from grpc_swift_stub_generator.renderer import TextBasedRenderer
from grpc_swift_stub_generator.request import CodeGenerationRequest, Dependency
from grpc_swift_stub_generator.translator import StructuredSwiftTranslator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SourceFile:
    """A generated file.

    Attributes:
        name: The schema file name without its extension, e.g. `foo/helloworld`.
        contents: The Swift source code.
    """

    name: str
    contents: str


class SourceGenerator:
    """Runs the translate and render pipeline for a configuration."""

    def __init__(self, configuration: Configuration | None = None):
        self.configuration = configuration or Configuration()

    def generate(self, request: CodeGenerationRequest) -> SourceFile:
        """Generate the Swift code for a request.

        Args:
            request (CodeGenerationRequest): The request.

        Raises:
            CodeGenError: If the request violates a naming constraint. No file is generated in that case.

        Returns:
            SourceFile: The generated file.
        """
        if self.configuration.extra_module_imports:
            extra = tuple(Dependency(module) for module in sorted(self.configuration.extra_module_imports))
            request = replace(request, dependencies=request.dependencies + extra)

        representation = StructuredSwiftTranslator(self.configuration).translate(request)
        contents = TextBasedRenderer(self.configuration.indentation).render(representation)

        logger.info("Generated %s for %d service(s).", representation.file.name, len(request.services))
        return SourceFile(representation.file.name, contents)
