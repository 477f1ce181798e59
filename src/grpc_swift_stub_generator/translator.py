"""Translate a code generation request into the structured Swift representation."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from grpc_swift_stub_generator import ir
from grpc_swift_stub_generator.client_translator import ClientCodeTranslator
from grpc_swift_stub_generator.config import Configuration
from grpc_swift_stub_generator.errors import CodeGenError, CodeGenErrorCode
from grpc_swift_stub_generator.helper import strip_extension
from grpc_swift_stub_generator.request import CodeGenerationRequest, Dependency, ImportKind, ServiceDescriptor
from grpc_swift_stub_generator.server_translator import ServerCodeTranslator
from grpc_swift_stub_generator.typealias_translator import TypealiasTranslator

logger = logging.getLogger(__name__)

GRPC_CORE = "GRPCCore"


class StructuredSwiftTranslator:
    """Validates a request and translates it with the enabled translators."""

    def __init__(self, configuration: Configuration):
        """Create a translator.

        Args:
            configuration (Configuration): The generator configuration.
        """
        self.configuration = configuration
        self.access_modifier = ir.AccessModifier(configuration.access_level.value)
        self.availability = (
            ir.Availability(tuple(str(platform) for platform in configuration.availability))
            if configuration.availability
            else None
        )

    def translate(self, request: CodeGenerationRequest) -> ir.StructuredSwiftRepresentation:
        """Translate a request.

        Code blocks are ordered: type aliases, then server code, then client code.

        Args:
            request (CodeGenerationRequest): The request.

        Raises:
            CodeGenError: If the request violates a naming constraint.

        Returns:
            ir.StructuredSwiftRepresentation: The file to render.
        """
        self.validate_input(request)

        code_blocks: list[ir.CodeBlock] = []

        typealias_translator = TypealiasTranslator(
            self.configuration.client, self.configuration.server, self.access_modifier, self.availability
        )
        code_blocks += typealias_translator.translate(request)

        if self.configuration.server:
            code_blocks += ServerCodeTranslator(self.access_modifier, self.availability).translate(request)

        if self.configuration.client:
            code_blocks += ClientCodeTranslator(self.access_modifier, self.availability).translate(request)

        logger.debug("Translated %s into %d code blocks.", request.file_name, len(code_blocks))

        top_comment = ir.Comment.preformatted(request.leading_trivia) if request.leading_trivia else None
        file_description = ir.FileDescription(top_comment, tuple(self.make_imports(request)), tuple(code_blocks))

        return ir.StructuredSwiftRepresentation(
            ir.NamedFileDescription(strip_extension(request.file_name), file_description)
        )

    def make_imports(self, request: CodeGenerationRequest) -> list[ir.ImportDescription]:
        """`GRPCCore` followed by the request dependencies, without duplicates."""
        imports = [ir.ImportDescription(GRPC_CORE)]
        seen: set[tuple[str, ir.ImportItem | None]] = {(GRPC_CORE, None)}

        for dependency in request.dependencies:
            description = translate_dependency(dependency)
            key = (description.module_name, description.item)
            if key in seen:
                continue

            seen.add(key)
            imports.append(description)

        return imports

    def validate_input(self, request: CodeGenerationRequest) -> None:
        """Check the naming constraints of a request.

        Args:
            request (CodeGenerationRequest): The request.

        Raises:
            CodeGenError: If a constraint is violated.
        """
        for dependency in request.dependencies:
            translate_dependency(dependency)

        check_service_descriptors_are_unique(request.services)
        check_service_names_are_unique(request.services)
        for service in request.services:
            check_method_names_are_unique(service)


def translate_dependency(dependency: Dependency) -> ir.ImportDescription:
    """Convert a dependency into an import.

    Args:
        dependency (Dependency): The dependency.

    Raises:
        CodeGenError: If the kind of an imported item is not a valid Swift import kind.

    Returns:
        ir.ImportDescription: The import.
    """
    item = None
    if dependency.item is not None:
        try:
            kind = ImportKind(dependency.item.kind)
        except ValueError as e:
            raise CodeGenError(
                CodeGenErrorCode.INVALID_KIND, f"Invalid kind name for import: {dependency.item.kind}"
            ) from e
        item = ir.ImportItem(kind, dependency.item.name)

    return ir.ImportDescription(
        dependency.module,
        item=item,
        spi=dependency.spi,
        preconcurrency=dependency.preconcurrency,
    )


def _first_duplicate(values: Iterable[str]) -> str | None:
    seen: set[str] = set()
    for value in values:
        if value in seen:
            return value
        seen.add(value)
    return None


def check_service_descriptors_are_unique(services: Iterable[ServiceDescriptor]) -> None:
    duplicate = _first_duplicate(service.fully_qualified_name for service in services)
    if duplicate is not None:
        raise CodeGenError(
            CodeGenErrorCode.NON_UNIQUE_SERVICE_NAME,
            f"Services must have unique descriptors. {duplicate} is the descriptor of at least two different services.",
        )


def check_service_names_are_unique(services: Iterable[ServiceDescriptor]) -> None:
    """Check generated service names within each namespace, and against the namespace names."""
    by_namespace: dict[str, list[ServiceDescriptor]] = {}
    for service in services:
        by_namespace.setdefault(service.namespace.generated_upper_case, []).append(service)

    namespaces = {namespace for namespace in by_namespace if namespace}
    for service in by_namespace.get("", []):
        if service.name.generated_upper_case in namespaces:
            raise CodeGenError(
                CodeGenErrorCode.NON_UNIQUE_SERVICE_NAME,
                "Services with no namespace must not have the same generated upper case names as the namespaces. "
                f"{service.name.generated_upper_case} is used as a generated upper case name for a service with "
                "no namespace and a namespace.",
            )

    for namespace, group in by_namespace.items():
        duplicate = _first_duplicate(service.name.generated_upper_case for service in group)
        if duplicate is None:
            continue

        if not namespace:
            raise CodeGenError(
                CodeGenErrorCode.NON_UNIQUE_SERVICE_NAME,
                "Services in an empty namespace must have unique generated upper case names. "
                f"{duplicate} is used as a generated upper case name for multiple services without namespaces.",
            )
        raise CodeGenError(
            CodeGenErrorCode.NON_UNIQUE_SERVICE_NAME,
            "Services within the same namespace must have unique generated upper case names. "
            f"{duplicate} is used as a generated upper case name for multiple services in the "
            f"{group[0].namespace.base} namespace.",
        )


def check_method_names_are_unique(service: ServiceDescriptor) -> None:
    checks = (
        ("base names", "a base name", lambda method: method.name.base),
        ("generated upper case names", "a generated upper case name", lambda method: method.name.generated_upper_case),
        ("lower case names", "a signature name", lambda method: method.name.generated_lower_case),
    )

    for plural, singular, get_name in checks:
        duplicate = _first_duplicate(get_name(method) for method in service.methods)
        if duplicate is not None:
            raise CodeGenError(
                CodeGenErrorCode.NON_UNIQUE_METHOD_NAME,
                f"Methods of a service must have unique {plural}. {duplicate} is used as {singular} for multiple "
                f"methods of the {service.name.base} service.",
            )
