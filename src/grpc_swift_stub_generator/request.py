"""The request describing what code to generate.

A `CodeGenerationRequest` is built once by an upstream collaborator (e.g. the protobuf adapter)
and is not modified while code is generated from it.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from enum import Enum


@dataclass(frozen=True)
class Name:
    """An identifier together with the casings used in generated code.

    Attributes:
        base: The name as it appears in the schema, e.g. `say_hello`.
        generated_upper_case: Upper camel case name, used for types (e.g. `SayHello`).
        generated_lower_case: Lower camel case name, used for functions (e.g. `sayHello`).
    """

    base: str
    generated_upper_case: str
    generated_lower_case: str

    @classmethod
    def empty(cls) -> Name:
        """The name of the empty ("no") namespace."""
        return cls("", "", "")


class StreamingShape(Enum):
    """The four call shapes an RPC can have."""

    UNARY = "unary"
    CLIENT_STREAMING = "clientStreaming"
    SERVER_STREAMING = "serverStreaming"
    BIDIRECTIONAL_STREAMING = "bidirectionalStreaming"


@dataclass(frozen=True)
class MethodDescriptor:
    """A single RPC of a service."""

    documentation: str
    name: Name
    is_input_streaming: bool
    is_output_streaming: bool
    input_type: str
    output_type: str

    @property
    def shape(self) -> StreamingShape:
        """The call shape implied by the two streaming flags."""
        if self.is_input_streaming and self.is_output_streaming:
            return StreamingShape.BIDIRECTIONAL_STREAMING
        if self.is_input_streaming:
            return StreamingShape.CLIENT_STREAMING
        if self.is_output_streaming:
            return StreamingShape.SERVER_STREAMING
        return StreamingShape.UNARY


@dataclass(frozen=True)
class ServiceDescriptor:
    """A service and its methods, optionally placed in a namespace."""

    documentation: str
    name: Name
    namespace: Name
    methods: tuple[MethodDescriptor, ...] = ()

    def __post_init__(self):
        # Accept any sequence, but store it immutably.
        object.__setattr__(self, "methods", tuple(self.methods))

    @property
    def fully_qualified_name(self) -> str:
        """The name used on the wire, e.g. `hello.world.Greeter`."""
        if not self.namespace.base:
            return self.name.base
        return f"{self.namespace.base}.{self.name.base}"

    @property
    def namespaced_generated_name(self) -> str:
        """Prefix of the generated protocol and struct names, e.g. `Hello_World_Greeter`."""
        if not self.namespace.generated_upper_case:
            return self.name.generated_upper_case
        return f"{self.namespace.generated_upper_case}_{self.name.generated_upper_case}"

    @property
    def namespaced_typealias_generated_name(self) -> str:
        """Path to the generated service enum, e.g. `Hello_World.Greeter`."""
        if not self.namespace.generated_upper_case:
            return self.name.generated_upper_case
        return f"{self.namespace.generated_upper_case}.{self.name.generated_upper_case}"


class ImportKind(Enum):
    """Kinds of symbols that can be imported individually."""

    TYPEALIAS = "typealias"
    STRUCT = "struct"
    CLASS = "class"
    ENUM = "enum"
    PROTOCOL = "protocol"
    LET = "let"
    VAR = "var"
    FUNC = "func"


@dataclass(frozen=True)
class DependencyItem:
    """A single symbol imported from a module, e.g. `struct Foundation.Date`.

    The kind is kept as a raw string, it is validated when the request is translated.
    """

    kind: str
    name: str


class PreconcurrencyKind(Enum):
    """Whether a dependency is imported with `@preconcurrency`."""

    REQUIRED = "required"
    NOT_REQUIRED = "notRequired"
    REQUIRED_ON_OS = "requiredOnOS"


@dataclass(frozen=True)
class PreconcurrencyRequirement:
    """The `@preconcurrency` requirement of a dependency.

    Attributes:
        kind: Always, never, or only on the listed operating systems.
        operating_systems: The operating systems for `REQUIRED_ON_OS`.
    """

    kind: PreconcurrencyKind = PreconcurrencyKind.NOT_REQUIRED
    operating_systems: tuple[str, ...] = ()

    @classmethod
    def required(cls) -> PreconcurrencyRequirement:
        return cls(PreconcurrencyKind.REQUIRED)

    @classmethod
    def not_required(cls) -> PreconcurrencyRequirement:
        return cls(PreconcurrencyKind.NOT_REQUIRED)

    @classmethod
    def required_on_os(cls, *operating_systems: str) -> PreconcurrencyRequirement:
        return cls(PreconcurrencyKind.REQUIRED_ON_OS, tuple(operating_systems))


@dataclass(frozen=True)
class Dependency:
    """A module the generated code imports."""

    module: str
    item: DependencyItem | None = None
    spi: str | None = None
    preconcurrency: PreconcurrencyRequirement = field(default_factory=PreconcurrencyRequirement.not_required)


def protobuf_serializer(message_type: str) -> str:
    """The expression creating the protobuf serializer for a message type."""
    return f"ProtobufSerializer<{message_type}>()"


def protobuf_deserializer(message_type: str) -> str:
    """The expression creating the protobuf deserializer for a message type."""
    return f"ProtobufDeserializer<{message_type}>()"


@dataclass(frozen=True)
class CodeGenerationRequest:
    """Everything needed to generate one source file.

    Attributes:
        file_name: Name of the schema file, e.g. `helloworld.proto`.
        leading_trivia: Comment text placed at the top of the generated file.
        dependencies: Modules to import, in order.
        services: Services to generate code for, in schema order.
        lookup_serializer: Maps a message type to the expression creating its serializer.
        lookup_deserializer: Maps a message type to the expression creating its deserializer.
    """

    file_name: str
    leading_trivia: str
    dependencies: tuple[Dependency, ...] = ()
    services: tuple[ServiceDescriptor, ...] = ()
    lookup_serializer: Callable[[str], str] = protobuf_serializer
    lookup_deserializer: Callable[[str], str] = protobuf_deserializer

    def __post_init__(self):
        object.__setattr__(self, "dependencies", tuple(self.dependencies))
        object.__setattr__(self, "services", tuple(self.services))


def make_request(
    services: Sequence[ServiceDescriptor],
    file_name: str = "test.grpc",
    leading_trivia: str = "",
    dependencies: Sequence[Dependency] = (),
) -> CodeGenerationRequest:
    """Convenience constructor for a request with protobuf serialization.

    Args:
        services (Sequence[ServiceDescriptor]): The services to generate.
        file_name (str, optional): The schema file name. Defaults to "test.grpc".
        leading_trivia (str, optional): The top comment. Defaults to "".
        dependencies (Sequence[Dependency], optional): Extra dependencies. Defaults to ().

    Returns:
        CodeGenerationRequest: The request.
    """
    return CodeGenerationRequest(
        file_name=file_name,
        leading_trivia=leading_trivia,
        dependencies=tuple(dependencies),
        services=tuple(services),
    )
