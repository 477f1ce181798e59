"""Command-line interface for generating gRPC Swift code from protobuf schemas.

Notes:
    - Without `--descriptor-set`, the tool runs as a protoc plugin: it reads a `CodeGeneratorRequest`
      from stdin and writes the `CodeGeneratorResponse` to stdout.
    - Logging always goes to stderr.
"""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence

from google.protobuf.compiler import plugin_pb2

from grpc_swift_stub_generator.config import AccessLevel, Configuration, FileNaming
from grpc_swift_stub_generator.errors import CodeGenError, OptionsError
from grpc_swift_stub_generator.protobuf import load_module_mappings
from grpc_swift_stub_generator.run import process_request, run_descriptor_set

logger = logging.getLogger(__name__)


def _add_generation_arguments(parser: argparse.ArgumentParser):
    """Add the arguments that select what code is generated.

    Args:
        parser (argparse.ArgumentParser): The parser to add the arguments to.
    """
    parser.add_argument(
        "--visibility",
        type=AccessLevel.from_option,
        default=AccessLevel.INTERNAL,
        help="access level of the generated declarations: fileprivate, internal, package or public.",
    )

    parser.add_argument(
        "--no-server",
        dest="server",
        default=True,
        action="store_false",
        help="do not generate server code.",
    )

    parser.add_argument(
        "--no-client",
        dest="client",
        default=True,
        action="store_false",
        help="do not generate client code.",
    )

    parser.add_argument(
        "--indentation",
        type=int,
        default=4,
        help="number of spaces per indentation level.",
    )

    parser.add_argument(
        "--no-availability",
        dest="availability",
        default=True,
        action="store_false",
        help="do not annotate declarations with @available.",
    )


def setup_parser() -> argparse.ArgumentParser:
    """Setup for the parser.

    Returns:
        argparse.ArgumentParser: The parser after setup.
    """
    parser = argparse.ArgumentParser(description="Generate gRPC Swift code for protobuf services.")

    parser.add_argument(
        "-d",
        "--descriptor-set",
        type=str,
        default="",
        help="serialized FileDescriptorSet (protoc --include_imports --descriptor_set_out); "
        "runs as a protoc plugin on stdin/stdout if omitted.",
    )

    parser.add_argument(
        "-f",
        "--files",
        type=str,
        nargs="+",
        default=[],
        help="names of the proto files in the descriptor set to generate code for; defaults to all.",
    )

    parser.add_argument(
        "-o",
        "--output-dir",
        type=str,
        default=".",
        help="directory to write the generated files to.",
    )

    parser.add_argument(
        "-m",
        "--module-mappings",
        type=str,
        default="",
        help="text format ModuleMappings file, mapping proto files to the Swift modules defining their types.",
    )

    parser.add_argument(
        "-e",
        "--extra-module-imports",
        type=str,
        nargs="+",
        default=[],
        help="additional modules to import in every generated file.",
    )

    parser.add_argument(
        "--file-naming",
        type=FileNaming.from_option,
        default=FileNaming.FULL_PATH,
        help="how output paths are derived from proto paths: FullPath, PathToUnderscores or DropPath.",
    )

    _add_generation_arguments(parser)

    return parser


def configuration_from_args(args: argparse.Namespace) -> Configuration:
    """Build the generator configuration from parsed arguments.

    Args:
        args (argparse.Namespace): The parsed arguments.

    Raises:
        OptionsError: If an option value is invalid.

    Returns:
        Configuration: The configuration.
    """
    kwargs = {}
    if not args.availability:
        kwargs["availability"] = ()
    if args.module_mappings:
        kwargs["module_mappings"] = load_module_mappings(args.module_mappings)

    return Configuration(
        access_level=args.visibility,
        indentation=args.indentation,
        client=args.client,
        server=args.server,
        extra_module_imports=tuple(args.extra_module_imports),
        file_naming=args.file_naming,
        **kwargs,
    )


def run_plugin(configuration: Configuration | None = None) -> int:
    """Answer a single protoc plugin request on stdin/stdout.

    Args:
        configuration (Configuration | None, optional): Defaults the plugin parameter is applied to.
            Defaults to None.

    Returns:
        int: Error code. Generation errors are reported to protoc in the response, not as error code.
    """
    request = plugin_pb2.CodeGeneratorRequest.FromString(sys.stdin.buffer.read())
    logger.info("Generating code for %s", ", ".join(request.file_to_generate))

    response = process_request(request, configuration)

    sys.stdout.buffer.write(response.SerializeToString())
    sys.stdout.buffer.flush()
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point of the generator.

    Args:
        argv (Sequence[str] | None, optional): Run arguments. Defaults to None.

    Returns:
        int: Error code.
    """
    logging.basicConfig(level=logging.INFO, stream=sys.stderr)

    parser = setup_parser()
    args = parser.parse_args(argv)

    try:
        configuration = configuration_from_args(args)

        if not args.descriptor_set:
            return run_plugin(configuration)

        written = run_descriptor_set(args.descriptor_set, args.files, args.output_dir, configuration)
    except (CodeGenError, OptionsError) as e:
        logger.error("%s", e)
        return 1

    logger.info("Generated %d file(s) into %s", len(written), args.output_dir)
    return 0


def plugin_main() -> int:
    """Entry point of `protoc-gen-grpc-swift`. All options come from the plugin parameter."""
    logging.basicConfig(level=logging.WARNING, stream=sys.stderr)
    return run_plugin()


if __name__ == "__main__":
    sys.exit(main())
