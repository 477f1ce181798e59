"""Render the structured Swift representation into text."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from contextlib import contextmanager

from grpc_swift_stub_generator import ir
from grpc_swift_stub_generator.request import PreconcurrencyKind


class Scope:
    """Accumulates rendered lines at the current nesting level.

    A scope is used for a single rendering pass; create a new one (or call `reset`) to render again.
    """

    def __init__(self, indentation: int = 4):
        """Create an empty scope.

        Args:
            indentation (int, optional): Spaces per nesting level. Defaults to 4.
        """
        self.indentation = indentation
        self.lines: list[str] = []
        self.level = 0
        self._append_next = False

    def reset(self) -> None:
        """Discard all rendered lines."""
        self.lines = []
        self.level = 0
        self._append_next = False

    def add(self, line: str) -> None:
        """Add a line, or append to the last line if requested by `append_next`.

        Args:
            line (str): The text to write, without indentation.
        """
        if self._append_next and self.lines:
            self.lines[-1] += line
        else:
            self.lines.append(" " * (self.indentation * self.level) + line)

        self._append_next = False

    def append_next(self) -> None:
        """Make the next `add` continue the last line instead of starting a new one."""
        self._append_next = True

    @contextmanager
    def nested(self) -> Iterator[None]:
        """Increase the nesting level for the duration of the context."""
        self.level += 1
        try:
            yield
        finally:
            self.level -= 1

    @property
    def contents(self) -> str:
        """The rendered text. Lines are joined without a trailing newline."""
        return "\n".join(self.lines)


class TextBasedRenderer:
    """A renderer that writes Swift source code by walking the structured representation."""

    def __init__(self, indentation: int = 4):
        """Create a renderer.

        Args:
            indentation (int, optional): Spaces per nesting level. Defaults to 4.
        """
        self.scope = Scope(indentation)

    def render(self, representation: ir.StructuredSwiftRepresentation) -> str:
        """Render a translated file from scratch.

        Args:
            representation (ir.StructuredSwiftRepresentation): The translated file.

        Returns:
            str: The file contents.
        """
        self.scope.reset()
        self.render_file(representation.file.contents)
        return self.rendered_contents()

    def rendered_contents(self) -> str:
        """The text rendered so far."""
        return self.scope.contents

    # ===== Files =====

    def render_file(self, description: ir.FileDescription) -> None:
        """Render a file: top comment, imports and code blocks, separated by blank lines."""
        if description.top_comment is not None:
            self.render_comment(description.top_comment)
            self.scope.add("")

        if description.imports:
            self.render_imports(description.imports)
            self.scope.add("")

        for index, block in enumerate(description.code_blocks):
            self.render_code_block(block)
            if index < len(description.code_blocks) - 1:
                self.scope.add("")

    def render_imports(self, imports: Sequence[ir.ImportDescription]) -> None:
        for description in imports:
            self.render_import(description)

    def render_import(self, description: ir.ImportDescription) -> None:
        """Render an import, wrapping it in `#if os(...)` when `@preconcurrency` depends on the platform."""
        match description.preconcurrency.kind:
            case PreconcurrencyKind.REQUIRED:
                self._render_import_line(description, preconcurrency=True)
            case PreconcurrencyKind.NOT_REQUIRED:
                self._render_import_line(description, preconcurrency=False)
            case PreconcurrencyKind.REQUIRED_ON_OS:
                conditions = " || ".join(f"os({os_name})" for os_name in description.preconcurrency.operating_systems)
                self.scope.add(f"#if {conditions}")
                self._render_import_line(description, preconcurrency=True)
                self.scope.add("#else")
                self._render_import_line(description, preconcurrency=False)
                self.scope.add("#endif")

    def _render_import_line(self, description: ir.ImportDescription, preconcurrency: bool) -> None:
        prefix = "@preconcurrency " if preconcurrency else ""
        if description.spi:
            prefix += f"@_spi({description.spi}) "

        if description.item is not None:
            item = description.item
            self.scope.add(f"{prefix}import {item.kind.value} {description.module_name}.{item.name}")
        else:
            self.scope.add(f"{prefix}import {description.module_name}")

    # ===== Code blocks and comments =====

    def render_code_blocks(self, blocks: Sequence[ir.CodeBlock]) -> None:
        """Render code blocks back to back, without blank lines in between."""
        for block in blocks:
            self.render_code_block(block)

    def render_code_block(self, block: ir.CodeBlock) -> None:
        if block.comment is not None:
            self.render_comment(block.comment)

        if isinstance(block.item, ir.Declaration):
            self.render_declaration(block.item)
        else:
            self.render_expression(block.item)

    def render_comment(self, comment: ir.Comment) -> None:
        match comment.kind:
            case ir.CommentKind.PREFORMATTED:
                for line in comment.text.splitlines():
                    self.scope.add(line)
            case ir.CommentKind.DOC:
                self._render_prefixed_lines("///", comment.text)

    def _render_prefixed_lines(self, prefix: str, text: str) -> None:
        for line in text.splitlines():
            self.scope.add(f"{prefix} {line}" if line else prefix)

    # ===== Declarations =====

    def render_declaration(self, declaration: ir.Declaration) -> None:  # noqa: C901
        """Render a declaration by dispatching on its kind."""
        if isinstance(declaration, ir.CommentableDeclaration):
            if declaration.comment is not None:
                self.render_comment(declaration.comment)
            self.render_declaration(declaration.declaration)

        elif isinstance(declaration, ir.GuardedDeclaration):
            self.scope.add(render_availability(declaration.availability))
            self.render_declaration(declaration.declaration)

        elif isinstance(declaration, ir.EnumDescription):
            heading = f"{_access(declaration.access_modifier)}enum {declaration.name}"
            self._render_members(heading, declaration.members)

        elif isinstance(declaration, ir.ProtocolDescription):
            heading = f"{_access(declaration.access_modifier)}protocol {declaration.name}"
            heading += _conformances(declaration.conformances)
            self._render_members(heading, declaration.members)

        elif isinstance(declaration, ir.StructDescription):
            heading = f"{_access(declaration.access_modifier)}struct {declaration.name}"
            heading += _conformances(declaration.conformances)
            self._render_members(heading, declaration.members, separate=True)

        elif isinstance(declaration, ir.ExtensionDescription):
            heading = f"{_access(declaration.access_modifier)}extension {declaration.on_type}"
            heading += _conformances(declaration.conformances)
            # Empty extensions keep their braces on separate lines.
            self.scope.add(f"{heading} {{")
            with self.scope.nested():
                for member in declaration.members:
                    self.render_declaration(member)
            self.scope.add("}")

        elif isinstance(declaration, ir.TypealiasDescription):
            self.scope.add(
                f"{_access(declaration.access_modifier)}typealias {declaration.name} = {declaration.existing_type}"
            )

        elif isinstance(declaration, ir.VariableDescription):
            self.render_variable(declaration)

        elif isinstance(declaration, ir.FunctionDescription):
            self.render_function(declaration)

        else:
            raise TypeError(f"Cannot render declaration of type {type(declaration).__name__}.")

    def _render_members(self, heading: str, members: Sequence[ir.Declaration], separate: bool = False) -> None:
        if not members:
            self.scope.add(f"{heading} {{}}")
            return

        self.scope.add(f"{heading} {{")
        with self.scope.nested():
            for index, member in enumerate(members):
                if separate and index > 0:
                    # Blank separator lines keep the indentation of the members.
                    self.scope.add("")
                self.render_declaration(member)
        self.scope.add("}")

    def render_variable(self, variable: ir.VariableDescription) -> None:
        words = _access(variable.access_modifier)
        if variable.is_static:
            words += "static "
        line = f"{words}{variable.kind.value} {variable.left}"
        if variable.type is not None:
            line += f": {variable.type}"

        if variable.right is None:
            self.scope.add(line)
            return

        self.scope.add(f"{line} = ")
        self.scope.append_next()
        self.render_expression(variable.right)

    def render_function(self, function: ir.FunctionDescription) -> None:
        self.render_function_signature(function.signature)

        if function.body is None:
            return

        if not function.body:
            self.scope.append_next()
            self.scope.add(" {}")
            return

        self.scope.append_next()
        self.scope.add(" {")
        with self.scope.nested():
            self.render_code_blocks(function.body)
        self.scope.add("}")

    def render_function_signature(self, signature: ir.FunctionSignatureDescription) -> None:
        """Render a signature. More than one parameter renders one parameter per line."""
        if signature.name == "init":
            head = f"{_access(signature.access_modifier)}init"
        else:
            head = f"{_access(signature.access_modifier)}func {signature.name}"

        if signature.generic_parameters:
            head += f"<{', '.join(signature.generic_parameters)}>"

        parameters = [_render_parameter(parameter) for parameter in signature.parameters]
        if len(parameters) > 1:
            self.scope.add(f"{head}(")
            with self.scope.nested():
                for index, parameter in enumerate(parameters):
                    self.scope.add(parameter + ("," if index < len(parameters) - 1 else ""))
            self.scope.add(")")
        else:
            self.scope.add(f"{head}({''.join(parameters)})")

        tail = ""
        if signature.is_async:
            tail += " async"
        if signature.is_throwing:
            tail += " throws"
        if signature.return_type is not None:
            tail += f" -> {signature.return_type}"
        if signature.where_clause:
            tail += f" where {', '.join(signature.where_clause)}"

        if tail:
            self.scope.append_next()
            self.scope.add(tail)

    # ===== Expressions =====

    def render_expression(self, expression: ir.Expression) -> None:  # noqa: C901
        """Render an expression, starting on a new line unless `append_next` was requested."""
        if isinstance(expression, ir.IdentifierExpression):
            self.scope.add(expression.name)

        elif isinstance(expression, ir.StringLiteralExpression):
            self.scope.add(f'"{expression.value}"')

        elif isinstance(expression, ir.KeywordExpression):
            if expression.expression is None:
                self.scope.add(expression.keyword.value)
            else:
                self.scope.add(f"{expression.keyword.value} ")
                self.scope.append_next()
                self.render_expression(expression.expression)

        elif isinstance(expression, ir.AssignmentExpression):
            self.render_expression(expression.left)
            self.scope.append_next()
            self.scope.add(" = ")
            self.scope.append_next()
            self.render_expression(expression.right)

        elif isinstance(expression, ir.FunctionCallExpression):
            self.render_function_call(expression)

        elif isinstance(expression, ir.ArrayLiteralExpression):
            self.render_array_literal(expression)

        elif isinstance(expression, ir.ClosureExpression):
            self.render_closure(expression)

        else:
            raise TypeError(f"Cannot render expression of type {type(expression).__name__}.")

    def render_function_call(self, call: ir.FunctionCallExpression) -> None:
        self.render_expression(call.callee)
        self.scope.append_next()

        if len(call.arguments) <= 1:
            self.scope.add("(")
            for argument in call.arguments:
                self._render_argument(argument, append=True)
            self.scope.append_next()
            self.scope.add(")")
            return

        self.scope.add("(")
        with self.scope.nested():
            for index, argument in enumerate(call.arguments):
                self._render_argument(argument, append=False)
                if index < len(call.arguments) - 1:
                    self.scope.append_next()
                    self.scope.add(",")
        self.scope.add(")")

    def _render_argument(self, argument: ir.FunctionArgument, append: bool) -> None:
        if append:
            self.scope.append_next()

        if argument.label is not None:
            self.scope.add(f"{argument.label}: ")
            self.scope.append_next()

        self.render_expression(argument.expression)

    def render_array_literal(self, array: ir.ArrayLiteralExpression) -> None:
        if not array.elements:
            self.scope.add("[]")
            return

        self.scope.add("[")
        with self.scope.nested():
            for index, element in enumerate(array.elements):
                self.render_expression(element)
                if index < len(array.elements) - 1:
                    self.scope.append_next()
                    self.scope.add(",")
        self.scope.add("]")

    def render_closure(self, closure: ir.ClosureExpression) -> None:
        header = "{"
        if closure.argument_names:
            header += f" {', '.join(closure.argument_names)} in"
        self.scope.add(header)
        with self.scope.nested():
            self.render_code_blocks(closure.body)
        self.scope.add("}")


def render_availability(availability: ir.Availability) -> str:
    """Render an `@available` attribute, e.g. `@available(macOS 13.0, *)`."""
    return f"@available({', '.join([*availability.platforms, '*'])})"


def _access(access_modifier: ir.AccessModifier | None) -> str:
    if access_modifier is None:
        return ""
    return f"{access_modifier.value} "


def _conformances(conformances: Sequence[str]) -> str:
    if not conformances:
        return ""
    return f": {', '.join(conformances)}"


def _render_parameter(parameter: ir.ParameterDescription) -> str:
    if parameter.name is not None:
        return f"{parameter.label} {parameter.name}: {parameter.type}"
    return f"{parameter.label}: {parameter.type}"
