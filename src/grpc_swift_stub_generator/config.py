"""Configuration of the gRPC Swift source generator."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from enum import Enum

from grpc_swift_stub_generator.errors import OptionsError

logger = logging.getLogger(__name__)


class AccessLevel(Enum):
    """Access levels the generated declarations can be given, from most to least restrictive."""

    FILEPRIVATE = "fileprivate"
    INTERNAL = "internal"
    PACKAGE = "package"
    PUBLIC = "public"

    @classmethod
    def from_option(cls, value: str) -> AccessLevel:
        """Parse an access level from a plugin option value such as `Public`.

        Args:
            value (str): The option value, case insensitive.

        Raises:
            OptionsError: If the value names no access level.

        Returns:
            AccessLevel: The matching access level.
        """
        normalized = value.strip().lower()
        for level in cls:
            if level.value == normalized:
                return level

        raise OptionsError(f"Unknown access level '{value}'.")


class FileNaming(Enum):
    """How output file paths are derived from the proto file path."""

    FULL_PATH = "FullPath"
    PATH_TO_UNDERSCORES = "PathToUnderscores"
    DROP_PATH = "DropPath"

    @classmethod
    def from_option(cls, value: str) -> FileNaming:
        """Parse a file naming option value.

        Args:
            value (str): The option value, e.g. `DropPath`.

        Raises:
            OptionsError: If the value names no file naming strategy.

        Returns:
            FileNaming: The matching strategy.
        """
        for naming in cls:
            if naming.value.lower() == value.strip().lower():
                return naming

        raise OptionsError(f"Unknown file naming option '{value}'.")


@dataclass(frozen=True)
class PlatformVersion:
    """A minimum platform version used in `@available` annotations, e.g. `macOS 13.0`."""

    platform: str
    version: str

    def __str__(self) -> str:
        return f"{self.platform} {self.version}"


DEFAULT_AVAILABILITY = (
    PlatformVersion("macOS", "13.0"),
    PlatformVersion("iOS", "16.0"),
    PlatformVersion("watchOS", "9.0"),
    PlatformVersion("tvOS", "16.0"),
)


@dataclass(frozen=True)
class Configuration:
    """Knobs consumed by the generation pipeline.

    Attributes:
        access_level: Access level applied to every generated declaration.
        indentation: Number of spaces per indentation level.
        client: Whether client code (and client type aliases) is generated.
        server: Whether server code (and server type aliases) is generated.
        extra_module_imports: Modules imported in addition to the schema-derived dependencies.
        module_mappings: Proto file path to Swift module name, for types defined in other modules.
        availability: Minimum platform versions for `@available` annotations. Empty disables them.
        file_naming: How output file paths are derived (plugin only).
    """

    access_level: AccessLevel = AccessLevel.INTERNAL
    indentation: int = 4
    client: bool = True
    server: bool = True
    extra_module_imports: tuple[str, ...] = ()
    module_mappings: dict[str, str] = field(default_factory=dict, hash=False)
    availability: tuple[PlatformVersion, ...] = DEFAULT_AVAILABILITY
    file_naming: FileNaming = FileNaming.FULL_PATH

    def __post_init__(self):
        """Sanity check for the indentation width."""
        if self.indentation < 1:
            raise OptionsError(f"Indentation must be a positive number of spaces, got {self.indentation}.")

    @classmethod
    def from_parameter(cls, parameter: str, base: Configuration | None = None) -> Configuration:
        """Build a configuration from a protoc plugin parameter string.

        The parameter is a comma separated list of `Key=Value` pairs, e.g.
        `Visibility=Public,Server=false,ExtraModuleImports=Foo`.
        `ExtraModuleImports` may be given multiple times.

        Args:
            parameter (str): The raw `CodeGeneratorRequest.parameter`.
            base (Configuration | None, optional): Defaults to start from. Defaults to None.

        Raises:
            OptionsError: On unknown keys or malformed values.

        Returns:
            Configuration: The resulting configuration.
        """
        configuration = base or cls()
        extra_imports = list(configuration.extra_module_imports)
        mapping_path: str | None = None
        changes: dict[str, object] = {}

        for key, value in parse_parameter(parameter):
            match key.lower():
                case "visibility":
                    changes["access_level"] = AccessLevel.from_option(value)
                case "server":
                    changes["server"] = _parse_bool(key, value)
                case "client":
                    changes["client"] = _parse_bool(key, value)
                case "indentation":
                    changes["indentation"] = _parse_int(key, value)
                case "extramoduleimports":
                    extra_imports.append(value)
                case "protopathmodulemappings":
                    mapping_path = value
                case "filenaming":
                    changes["file_naming"] = FileNaming.from_option(value)
                case _:
                    raise OptionsError(f"Unknown generator option '{key}'.")

        changes["extra_module_imports"] = tuple(extra_imports)

        if mapping_path:
            # Imported here, the protobuf module imports this one.
            from grpc_swift_stub_generator.protobuf import load_module_mappings

            changes["module_mappings"] = load_module_mappings(mapping_path)

        logger.debug("Generator options: %s", changes)
        return replace(configuration, **changes)


def parse_parameter(parameter: str) -> list[tuple[str, str]]:
    """Split a plugin parameter string into `(key, value)` pairs.

    Args:
        parameter (str): The raw parameter, e.g. `a=1,b=2,c`.

    Returns:
        list[tuple[str, str]]: The pairs in order of appearance. Keys without `=` get an empty value.
    """
    pairs: list[tuple[str, str]] = []
    if not parameter:
        return pairs

    for part in parameter.split(","):
        if not part.strip():
            continue
        if "=" in part:
            key, value = part.split("=", 1)
            pairs.append((key.strip(), value.strip()))
        else:
            pairs.append((part.strip(), ""))

    return pairs


def _parse_bool(key: str, value: str) -> bool:
    normalized = value.strip().lower()
    if normalized in ("true", "yes", "1", ""):
        return True
    if normalized in ("false", "no", "0"):
        return False
    raise OptionsError(f"Option '{key}' expects a boolean, got '{value}'.")


def _parse_int(key: str, value: str) -> int:
    try:
        return int(value)
    except ValueError as e:
        raise OptionsError(f"Option '{key}' expects an integer, got '{value}'.") from e
