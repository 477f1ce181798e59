"""Build code generation requests from parsed protobuf file descriptors."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from pathlib import Path

from google.protobuf import descriptor_pb2, descriptor_pool, message_factory, text_format

from grpc_swift_stub_generator.config import Configuration
from grpc_swift_stub_generator.errors import OptionsError
from grpc_swift_stub_generator.helper import to_lower_camel_case, to_upper_camel_case
from grpc_swift_stub_generator.request import (
    CodeGenerationRequest,
    Dependency,
    MethodDescriptor,
    Name,
    ServiceDescriptor,
)

logger = logging.getLogger(__name__)

GRPC_PROTOBUF = "GRPCProtobuf"

# Field numbers used in `SourceCodeInfo.Location.path`.
_FILE_PACKAGE = 2
_FILE_SERVICE = 6
_FILE_SYNTAX = 12
_SERVICE_METHOD = 2

BANNER = """\
// DO NOT EDIT.
// swift-format-ignore-file
//
// Generated by the gRPC Swift generator plugin for the protocol buffer compiler.
// Source: {source}
//
// For information on using the generated types, please see the documentation:
//   https://github.com/grpc/grpc-swift"""

_MODULE_MAPPINGS_PACKAGE = "swift_protobuf.gen_swift"


def _module_mappings_class() -> type:
    """Create the message class of the swift-protobuf `ModuleMappings` text format.

    The message is declared in swift-protobuf as

        message ModuleMappings {
          message Entry {
            string module_name = 1;
            repeated string proto_file_path = 2;
          }
          repeated Entry mapping = 1;
        }
    """
    file_proto = descriptor_pb2.FileDescriptorProto(
        name="swift_protobuf_module_mappings.proto",
        package=_MODULE_MAPPINGS_PACKAGE,
        syntax="proto3",
    )
    mappings = file_proto.message_type.add(name="ModuleMappings")

    entry = mappings.nested_type.add(name="Entry")
    entry.field.add(
        name="module_name",
        number=1,
        type=descriptor_pb2.FieldDescriptorProto.TYPE_STRING,
        label=descriptor_pb2.FieldDescriptorProto.LABEL_OPTIONAL,
    )
    entry.field.add(
        name="proto_file_path",
        number=2,
        type=descriptor_pb2.FieldDescriptorProto.TYPE_STRING,
        label=descriptor_pb2.FieldDescriptorProto.LABEL_REPEATED,
    )

    mappings.field.add(
        name="mapping",
        number=1,
        type=descriptor_pb2.FieldDescriptorProto.TYPE_MESSAGE,
        label=descriptor_pb2.FieldDescriptorProto.LABEL_REPEATED,
        type_name=f".{_MODULE_MAPPINGS_PACKAGE}.ModuleMappings.Entry",
    )

    pool = descriptor_pool.DescriptorPool()
    pool.AddSerializedFile(file_proto.SerializeToString())
    descriptor = pool.FindMessageTypeByName(f"{_MODULE_MAPPINGS_PACKAGE}.ModuleMappings")
    return message_factory.GetMessageClass(descriptor)


def parse_module_mappings(text: str) -> dict[str, str]:
    """Parse the text format of a `ModuleMappings` message.

    Example:
        mapping {
          module_name: "DifferentModule"
          proto_file_path: "different-module.proto"
        }

    Args:
        text (str): The text format message.

    Raises:
        OptionsError: If the text is malformed, a module name is empty, or a proto file is mapped to
            more than one module.

    Returns:
        dict[str, str]: Proto file path to module name.
    """
    message = _module_mappings_class()()
    try:
        text_format.Parse(text, message)
    except text_format.ParseError as e:
        raise OptionsError(f"Could not parse module mappings: {e}") from e

    result: dict[str, str] = {}
    for index, entry in enumerate(message.mapping):
        if not entry.module_name:
            raise OptionsError(f"Module mapping entry {index} has no module name.")

        for proto_file_path in entry.proto_file_path:
            existing = result.get(proto_file_path)
            if existing is not None and existing != entry.module_name:
                raise OptionsError(
                    f"'{proto_file_path}' is mapped to more than one module: '{existing}' and '{entry.module_name}'."
                )
            result[proto_file_path] = entry.module_name

    return result


def load_module_mappings(path: str | Path) -> dict[str, str]:
    """Read a `ModuleMappings` text format file.

    Args:
        path (str | Path): The mapping file.

    Raises:
        OptionsError: If the file cannot be read or parsed.

    Returns:
        dict[str, str]: Proto file path to module name.
    """
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise OptionsError(f"Could not read module mappings from '{path}': {e}") from e

    mappings = parse_module_mappings(text)
    logger.debug("Loaded %d module mapping(s) from %s.", len(mappings), path)
    return mappings


class ProtoFileToModuleMappings:
    """Knows which Swift module the types of each proto file live in."""

    def __init__(self, mappings: Mapping[str, str] | None = None):
        self.mappings = dict(mappings or {})

    def module_name(self, proto_file: str) -> str | None:
        return self.mappings.get(proto_file)

    def needed_modules(
        self,
        file: descriptor_pb2.FileDescriptorProto,
        files: Mapping[str, descriptor_pb2.FileDescriptorProto],
    ) -> list[str]:
        """The modules a file has to import to use the types of its dependencies.

        Publicly imported files of a dependency are followed as well. The module of the file itself is never
        returned.

        Args:
            file (descriptor_pb2.FileDescriptorProto): The file code is generated for.
            files (Mapping[str, descriptor_pb2.FileDescriptorProto]): All known files by name.

        Returns:
            list[str]: The sorted module names.
        """
        own_module = self.module_name(file.name)
        modules: set[str] = set()
        visited: set[str] = set()

        def visit(proto_file: str) -> None:
            if proto_file in visited:
                return
            visited.add(proto_file)

            module = self.module_name(proto_file)
            if module is not None and module != own_module:
                modules.add(module)

            dependency = files.get(proto_file)
            if dependency is not None:
                for index in dependency.public_dependency:
                    visit(dependency.dependency[index])

        for proto_file in file.dependency:
            visit(proto_file)

        return sorted(modules)


def package_prefix(file: descriptor_pb2.FileDescriptorProto) -> str:
    """The prefix of the Swift names of a file's messages, e.g. `Hello_World_` for `hello.world`.

    A `swift_prefix` file option replaces the package derived prefix.
    """
    if file.options.HasField("swift_prefix"):
        return file.options.swift_prefix
    if not file.package:
        return ""
    return "_".join(to_upper_camel_case(component) for component in file.package.split(".")) + "_"


class SwiftProtobufNamer:
    """Resolves protobuf message names to the names swift-protobuf generates for them."""

    def __init__(self, files: Iterable[descriptor_pb2.FileDescriptorProto]):
        self.symbols: dict[str, str] = {}
        for file in files:
            self._add_file(file)

    def _add_file(self, file: descriptor_pb2.FileDescriptorProto) -> None:
        scope = f".{file.package}" if file.package else ""
        prefix = package_prefix(file)

        def add_messages(messages: Sequence[descriptor_pb2.DescriptorProto], proto_scope: str, swift_scope: str):
            for message in messages:
                proto_name = f"{proto_scope}.{message.name}"
                swift_name = f"{swift_scope}.{message.name}" if swift_scope else f"{prefix}{message.name}"
                self.symbols[proto_name] = swift_name
                add_messages(message.nested_type, proto_name, swift_name)

        add_messages(file.message_type, scope, "")

    def full_name(self, proto_name: str) -> str:
        """The Swift name of a message.

        Args:
            proto_name (str): The fully qualified proto name, e.g. `.hello.world.HelloRequest`.

        Raises:
            OptionsError: If the message is unknown.

        Returns:
            str: The Swift name, e.g. `Hello_World_HelloRequest`.
        """
        if not proto_name.startswith("."):
            proto_name = f".{proto_name}"
        if proto_name not in self.symbols:
            raise OptionsError(f"Unknown message type '{proto_name}'.")
        return self.symbols[proto_name]


class ProtobufCodeGenParser:
    """Maps a file descriptor to a code generation request."""

    def __init__(
        self,
        file: descriptor_pb2.FileDescriptorProto,
        files: Iterable[descriptor_pb2.FileDescriptorProto],
        configuration: Configuration | None = None,
    ):
        """Create a parser.

        Args:
            file (descriptor_pb2.FileDescriptorProto): The file to generate code for.
            files (Iterable[descriptor_pb2.FileDescriptorProto]): All files known to the compiler, dependencies
                included.
            configuration (Configuration | None, optional): Provides the module mappings. Defaults to None.
        """
        self.file = file
        self.files = {f.name: f for f in files}
        self.files.setdefault(file.name, file)
        self.configuration = configuration or Configuration()
        self.namer = SwiftProtobufNamer(self.files.values())
        self.module_mappings = ProtoFileToModuleMappings(self.configuration.module_mappings)
        self.comments = {
            tuple(location.path): location for location in file.source_code_info.location
        }

    def parse(self) -> CodeGenerationRequest:
        """Build the request.

        Returns:
            CodeGenerationRequest: The request for `self.file`.
        """
        dependencies = [Dependency(GRPC_PROTOBUF)]
        dependencies += [
            Dependency(module) for module in self.module_mappings.needed_modules(self.file, self.files)
        ]

        namespace = self.namespace()
        services = [
            self.make_service(index, service, namespace) for index, service in enumerate(self.file.service)
        ]

        logger.debug("Parsed %d service(s) from %s.", len(services), self.file.name)
        return CodeGenerationRequest(
            file_name=self.file.name,
            leading_trivia=self.leading_trivia(),
            dependencies=tuple(dependencies),
            services=tuple(services),
        )

    def leading_trivia(self) -> str:
        """The license header of the proto file followed by the generated code banner."""
        banner = BANNER.format(source=self.file.name)
        header = self.header()
        if not header:
            return banner
        return f"{header}\n\n{banner}"

    def header(self) -> str:
        """Comments detached from the `syntax` (or `package`) statement, each line prefixed by `//`."""
        location = self.comments.get((_FILE_SYNTAX,)) or self.comments.get((_FILE_PACKAGE,))
        if location is None:
            return ""

        blocks = []
        for comment in location.leading_detached_comments:
            lines = comment.rstrip("\n").split("\n")
            blocks.append("\n".join(f"//{line}" for line in lines))

        return "\n\n".join(blocks)

    def namespace(self) -> Name:
        if self.file.options.HasField("swift_prefix"):
            upper = self.file.options.swift_prefix.rstrip("_")
        else:
            upper = package_prefix(self.file).rstrip("_")

        lower = upper[:1].lower() + upper[1:]
        return Name(self.file.package, upper, lower)

    def documentation(self, path: tuple[int, ...]) -> str:
        location = self.comments.get(path)
        if location is None or not location.leading_comments:
            return ""

        lines = location.leading_comments.rstrip("\n").split("\n")
        return "\n".join(line[1:] if line.startswith(" ") else line for line in lines)

    def make_service(
        self,
        index: int,
        service: descriptor_pb2.ServiceDescriptorProto,
        namespace: Name,
    ) -> ServiceDescriptor:
        methods = [
            MethodDescriptor(
                documentation=self.documentation((_FILE_SERVICE, index, _SERVICE_METHOD, method_index)),
                name=Name(method.name, to_upper_camel_case(method.name), to_lower_camel_case(method.name)),
                is_input_streaming=method.client_streaming,
                is_output_streaming=method.server_streaming,
                input_type=self.namer.full_name(method.input_type),
                output_type=self.namer.full_name(method.output_type),
            )
            for method_index, method in enumerate(service.method)
        ]

        return ServiceDescriptor(
            documentation=self.documentation((_FILE_SERVICE, index)),
            name=Name(service.name, to_upper_camel_case(service.name), to_lower_camel_case(service.name)),
            namespace=namespace,
            methods=tuple(methods),
        )
