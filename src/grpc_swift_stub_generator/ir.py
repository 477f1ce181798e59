"""Structured representation of the generated Swift code.

Translators build a tree of the declarations and expressions below; the renderer walks it to
produce text. The tree models only the Swift constructs the translators need.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from grpc_swift_stub_generator.request import ImportKind, PreconcurrencyRequirement


class AccessModifier(Enum):
    """Swift access modifiers, from most to least restrictive."""

    PRIVATE = "private"
    FILEPRIVATE = "fileprivate"
    INTERNAL = "internal"
    PACKAGE = "package"
    PUBLIC = "public"


class CommentKind(Enum):
    """How a comment is rendered."""

    DOC = "doc"  # `/// text`
    PREFORMATTED = "preformatted"  # text as is


@dataclass(frozen=True)
class Comment:
    kind: CommentKind
    text: str

    @classmethod
    def doc(cls, text: str) -> Comment:
        return cls(CommentKind.DOC, text)

    @classmethod
    def preformatted(cls, text: str) -> Comment:
        return cls(CommentKind.PREFORMATTED, text)


@dataclass(frozen=True)
class ImportItem:
    kind: ImportKind
    name: str


@dataclass(frozen=True)
class ImportDescription:
    """An `import` statement."""

    module_name: str
    item: ImportItem | None = None
    spi: str | None = None
    preconcurrency: PreconcurrencyRequirement = field(default_factory=PreconcurrencyRequirement.not_required)


@dataclass(frozen=True)
class Availability:
    """An `@available(...)` attribute listing minimum platform versions."""

    platforms: tuple[str, ...]


# ===== Expressions =====


class Expression:
    """Base class of all expressions."""

    pass


@dataclass(frozen=True)
class IdentifierExpression(Expression):
    """A name or dotted member path used verbatim, e.g. `self.client` or `MethodA.descriptor`."""

    name: str


@dataclass(frozen=True)
class StringLiteralExpression(Expression):
    value: str


@dataclass(frozen=True)
class ArrayLiteralExpression(Expression):
    elements: tuple[Expression, ...] = ()


@dataclass(frozen=True)
class FunctionArgument:
    """An argument of a call, with an optional label."""

    label: str | None
    expression: Expression


@dataclass(frozen=True)
class FunctionCallExpression(Expression):
    """A call. Calls with more than one argument are laid out one argument per line."""

    callee: Expression
    arguments: tuple[FunctionArgument, ...] = ()


@dataclass(frozen=True)
class ClosureExpression(Expression):
    """A closure `{ a, b in ... }`."""

    argument_names: tuple[str, ...]
    body: tuple[CodeBlock, ...]


class KeywordKind(Enum):
    TRY = "try"
    AWAIT = "await"
    RETURN = "return"


@dataclass(frozen=True)
class KeywordExpression(Expression):
    """An expression prefixed with a keyword, e.g. `await x` or `return x`."""

    keyword: KeywordKind
    expression: Expression | None = None


@dataclass(frozen=True)
class AssignmentExpression(Expression):
    left: Expression
    right: Expression


# ===== Declarations =====


class Declaration:
    """Base class of all declarations."""

    pass


@dataclass(frozen=True)
class CommentableDeclaration(Declaration):
    """A declaration preceded by a comment."""

    comment: Comment | None
    declaration: Declaration


@dataclass(frozen=True)
class GuardedDeclaration(Declaration):
    """A declaration preceded by an `@available` attribute."""

    availability: Availability
    declaration: Declaration


@dataclass(frozen=True)
class EnumDescription(Declaration):
    """An enum without cases, used as a namespace."""

    access_modifier: AccessModifier | None
    name: str
    members: tuple[Declaration, ...] = ()


@dataclass(frozen=True)
class StructDescription(Declaration):
    access_modifier: AccessModifier | None
    name: str
    conformances: tuple[str, ...] = ()
    members: tuple[Declaration, ...] = ()


@dataclass(frozen=True)
class ProtocolDescription(Declaration):
    access_modifier: AccessModifier | None
    name: str
    conformances: tuple[str, ...] = ()
    members: tuple[Declaration, ...] = ()


@dataclass(frozen=True)
class ExtensionDescription(Declaration):
    """An extension of an existing type, used for default implementations."""

    access_modifier: AccessModifier | None
    on_type: str
    conformances: tuple[str, ...] = ()
    members: tuple[Declaration, ...] = ()


@dataclass(frozen=True)
class TypealiasDescription(Declaration):
    access_modifier: AccessModifier | None
    name: str
    existing_type: str


class BindingKind(Enum):
    LET = "let"


@dataclass(frozen=True)
class VariableDescription(Declaration):
    access_modifier: AccessModifier | None
    kind: BindingKind
    left: str
    is_static: bool = False
    type: str | None = None
    right: Expression | None = None


@dataclass(frozen=True)
class ParameterDescription:
    """A function parameter, e.g. `with router: inout RPCRouter` or `_ body: Body`.

    Attributes:
        label: The argument label.
        name: The parameter name, if different from the label.
        type: The parameter type.
    """

    label: str
    type: str
    name: str | None = None


@dataclass(frozen=True)
class FunctionSignatureDescription:
    """The signature of a function or initializer.

    Attributes:
        access_modifier: The access modifier, if any.
        name: The function name. `init` renders an initializer.
        generic_parameters: Names of generic parameters, e.g. `R`.
        parameters: The parameters. More than one renders one parameter per line.
        is_async: Whether the function is `async`.
        is_throwing: Whether the function `throws`.
        return_type: The return type, if any.
        where_clause: The requirements of a `where` clause, e.g. `R: Sendable`.
    """

    access_modifier: AccessModifier | None
    name: str
    generic_parameters: tuple[str, ...] = ()
    parameters: tuple[ParameterDescription, ...] = ()
    is_async: bool = False
    is_throwing: bool = False
    return_type: str | None = None
    where_clause: tuple[str, ...] = ()


@dataclass(frozen=True)
class FunctionDescription(Declaration):
    """A function. A body of `None` declares a protocol requirement."""

    signature: FunctionSignatureDescription
    body: tuple[CodeBlock, ...] | None = None


# ===== Code blocks =====


@dataclass(frozen=True)
class CodeBlock:
    """A declaration or an expression, optionally preceded by a comment."""

    item: Declaration | Expression
    comment: Comment | None = None


@dataclass(frozen=True)
class FileDescription:
    """The contents of a generated file."""

    top_comment: Comment | None
    imports: tuple[ImportDescription, ...]
    code_blocks: tuple[CodeBlock, ...]


@dataclass(frozen=True)
class NamedFileDescription:
    name: str
    contents: FileDescription


@dataclass(frozen=True)
class StructuredSwiftRepresentation:
    """The result of translating a request, ready to be rendered."""

    file: NamedFileDescription


def commented(comment: str, declaration: Declaration) -> Declaration:
    """Attach a doc comment to a declaration, unless the comment is empty.

    Args:
        comment (str): The documentation text.
        declaration (Declaration): The declaration.

    Returns:
        Declaration: The declaration, wrapped if a comment was given.
    """
    if not comment:
        return declaration
    return CommentableDeclaration(Comment.doc(comment), declaration)


def guarded(availability: Availability | None, declaration: Declaration) -> Declaration:
    """Attach an `@available` attribute to a declaration, if availability is configured.

    Args:
        availability (Availability | None): The availability, or None to leave it out.
        declaration (Declaration): The declaration.

    Returns:
        Declaration: The declaration, wrapped if an availability was given.
    """
    if availability is None:
        return declaration
    return GuardedDeclaration(availability, declaration)
