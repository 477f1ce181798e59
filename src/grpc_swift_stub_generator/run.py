"""Top-level module for generating gRPC Swift code from protobuf descriptors."""

from __future__ import annotations

import logging
import os.path
from collections.abc import Iterable, Sequence
from pathlib import Path

from google.protobuf import descriptor_pb2, message
from google.protobuf.compiler import plugin_pb2

from grpc_swift_stub_generator.config import Configuration, FileNaming
from grpc_swift_stub_generator.errors import CodeGenError, OptionsError
from grpc_swift_stub_generator.generator import SourceGenerator
from grpc_swift_stub_generator.protobuf import ProtobufCodeGenParser

logger = logging.getLogger(__name__)

GRPC_SWIFT_SUFFIX = ".grpc.swift"


def output_file_name(name: str, file_naming: FileNaming) -> str:
    """The name of the generated file for a proto file name without extension.

    Examples:
        >>> output_file_name("foo/bar/baz", FileNaming.PATH_TO_UNDERSCORES)
        'foo_bar_baz.grpc.swift'

    Args:
        name (str): The proto file name without `.proto`, e.g. `foo/bar/baz`.
        file_naming (FileNaming): The naming strategy.

    Returns:
        str: The output file name.
    """
    match file_naming:
        case FileNaming.FULL_PATH:
            base = name
        case FileNaming.PATH_TO_UNDERSCORES:
            base = name.replace("/", "_")
        case FileNaming.DROP_PATH:
            base = os.path.basename(name)

    return base + GRPC_SWIFT_SUFFIX


def generate_files(
    files: Iterable[descriptor_pb2.FileDescriptorProto],
    files_to_generate: Sequence[str],
    configuration: Configuration,
) -> dict[str, str]:
    """Generate Swift code for the named files.

    Files without services are skipped.

    Args:
        files (Iterable[descriptor_pb2.FileDescriptorProto]): All known files, dependencies included.
        files_to_generate (Sequence[str]): Names of the files to generate code for.
        configuration (Configuration): The generator configuration.

    Raises:
        CodeGenError: If a file violates a naming constraint.
        OptionsError: If a file to generate is unknown, or two outputs share a name.

    Returns:
        dict[str, str]: Output file name to contents.
    """
    all_files = list(files)
    by_name = {file.name: file for file in all_files}
    generator = SourceGenerator(configuration)
    outputs: dict[str, str] = {}

    for file_name in files_to_generate:
        file = by_name.get(file_name)
        if file is None:
            raise OptionsError(f"No descriptor was given for '{file_name}'.")

        if not file.service:
            logger.info("Skipping %s, it declares no services.", file_name)
            continue

        request = ProtobufCodeGenParser(file, all_files, configuration).parse()
        source_file = generator.generate(request)

        output_name = output_file_name(source_file.name, configuration.file_naming)
        if output_name in outputs:
            raise OptionsError(f"More than one file would be generated as '{output_name}'.")

        outputs[output_name] = source_file.contents

    return outputs


def process_request(
    request: plugin_pb2.CodeGeneratorRequest,
    base: Configuration | None = None,
) -> plugin_pb2.CodeGeneratorResponse:
    """Handle a protoc plugin request.

    Errors are reported through the `error` field of the response, as protoc expects.

    Args:
        request (plugin_pb2.CodeGeneratorRequest): The request read from protoc.
        base (Configuration | None, optional): Defaults the plugin parameter is applied to. Defaults to None.

    Returns:
        plugin_pb2.CodeGeneratorResponse: The response to send back to protoc.
    """
    response = plugin_pb2.CodeGeneratorResponse()
    response.supported_features = plugin_pb2.CodeGeneratorResponse.FEATURE_PROTO3_OPTIONAL

    try:
        configuration = Configuration.from_parameter(request.parameter, base)
        outputs = generate_files(request.proto_file, request.file_to_generate, configuration)
    except (CodeGenError, OptionsError) as e:
        logger.error("Code generation failed: %s", e)
        response.error = str(e)
        return response

    for name, contents in outputs.items():
        response.file.add(name=name, content=contents)

    return response


def run_descriptor_set(
    descriptor_set_path: str | Path,
    files_to_generate: Sequence[str],
    output_dir: str | Path,
    configuration: Configuration,
) -> list[Path]:
    """Generate Swift code from a serialized `FileDescriptorSet`.

    Args:
        descriptor_set_path (str | Path): The file written by `protoc --descriptor_set_out`.
        files_to_generate (Sequence[str]): Names of the files to generate code for. All files of the set
            if empty.
        output_dir (str | Path): Directory the generated files are written to.
        configuration (Configuration): The generator configuration.

    Raises:
        CodeGenError: If a file violates a naming constraint.
        OptionsError: If the descriptor set cannot be read.

    Returns:
        list[Path]: The written files.
    """
    try:
        data = Path(descriptor_set_path).read_bytes()
    except OSError as e:
        raise OptionsError(f"Could not read descriptor set '{descriptor_set_path}': {e}") from e

    try:
        descriptor_set = descriptor_pb2.FileDescriptorSet.FromString(data)
    except message.DecodeError as e:
        raise OptionsError(f"'{descriptor_set_path}' is not a serialized FileDescriptorSet: {e}") from e
    names = list(files_to_generate) or [file.name for file in descriptor_set.file]

    outputs = generate_files(descriptor_set.file, names, configuration)

    written: list[Path] = []
    for name, contents in outputs.items():
        path = Path(output_dir) / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(contents, encoding="utf-8")
        logger.info("Wrote %s", path)
        written.append(path)

    return written
