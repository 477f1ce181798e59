"""Helper functionality that is used in other modules of this package."""

from __future__ import annotations

import os.path
import re
from collections.abc import Sequence

from grpc_swift_stub_generator.request import MethodDescriptor, ServiceDescriptor

INPUT_NAME = "Input"
OUTPUT_NAME = "Output"

_WORD_SEPARATOR = re.compile(r"[^0-9A-Za-z]+")


def _split_words(name: str) -> list[str]:
    return [word for word in _WORD_SEPARATOR.split(name) if word]


def to_upper_camel_case(name: str) -> str:
    """Converts a schema name to upper camel case.

    Words are separated by underscores or other non-alphanumeric characters. The first letter of each
    word is upper cased, the rest is kept.

    Examples:
        >>> to_upper_camel_case("say_hello")
        'SayHello'
        >>> to_upper_camel_case("SayHello")
        'SayHello'

    Args:
        name (str): The original name.

    Returns:
        str: The upper camel cased name.
    """
    return "".join(word[0].upper() + word[1:] for word in _split_words(name))


def to_lower_camel_case(name: str) -> str:
    """Converts a schema name to lower camel case.

    A leading run of capitals is lower cased as a whole, keeping the last capital of the run if
    it starts the next word (`URLFetch` becomes `urlFetch`).

    Examples:
        >>> to_lower_camel_case("SayHello")
        'sayHello'
        >>> to_lower_camel_case("get_URL")
        'getURL'

    Args:
        name (str): The original name.

    Returns:
        str: The lower camel cased name.
    """
    upper = to_upper_camel_case(name)
    if not upper:
        return upper

    run = 0
    while run < len(upper) and upper[run].isupper():
        run += 1

    if run == len(upper):
        return upper.lower()
    if run > 1:
        # The last capital of the run belongs to the next word.
        run -= 1

    return upper[:run].lower() + upper[run:]


def join_parameters(parameters: Sequence[str] | None) -> str:
    """Joins parameters by means of ', '.

    Args:
        parameters (Sequence[str] | None): The parameters to join.

    Returns:
        str: The joined parameters.
    """
    if parameters:
        return ", ".join(str(p) for p in parameters if p)

    else:
        return ""


def new_generic(name: str, members: Sequence[str]) -> str:
    """Create a string for a generic type.

    For example, for the name 'ServerRequest.Single' and the member 'Foo', the output
    is 'ServerRequest.Single<Foo>'.

    Args:
        name (str): The generic type.
        members (Sequence[str]): The type arguments.

    Returns:
        str: The resulting type string.
    """
    return f"{name}<{join_parameters(members)}>"


def method_type(service: ServiceDescriptor, method: MethodDescriptor, affix: str) -> str:
    """The path of a method's `Input` or `Output` type alias.

    E.g. `Hello_World.Greeter.Method.SayHello.Input`.

    Args:
        service (ServiceDescriptor): The service of the method.
        method (MethodDescriptor): The method.
        affix (str): Either `Input` or `Output`.

    Returns:
        str: The type alias path.
    """
    return f"{method_path(service, method)}.{affix}"


def method_path(service: ServiceDescriptor, method: MethodDescriptor) -> str:
    """The path of the enum holding a method's type aliases, e.g. `Greeter.Method.SayHello`."""
    return f"{service.namespaced_typealias_generated_name}.Method.{method.name.generated_upper_case}"


def strip_extension(file_name: str) -> str:
    """Strips the extension of a schema file name.

    E.g. `foo/helloworld.proto` becomes `foo/helloworld`.

    Args:
        file_name (str): The schema file name.

    Returns:
        str: The file name without extension.
    """
    root, _ = os.path.splitext(file_name)
    return root
