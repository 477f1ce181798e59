"""Translate services into the enums that namespace their method metadata and aliases."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from itertools import groupby

from grpc_swift_stub_generator import ir
from grpc_swift_stub_generator.helper import INPUT_NAME, OUTPUT_NAME
from grpc_swift_stub_generator.request import CodeGenerationRequest, MethodDescriptor, ServiceDescriptor

logger = logging.getLogger(__name__)


class TypealiasTranslator:
    """Creates the enum skeleton the server and client code refers to.

    For a service `Greeter` in the package `hello.world`, the output is

        enum Hello_World {
            enum Greeter {
                enum Method {
                    enum SayHello {
                        typealias Input = Hello_World_HelloRequest
                        typealias Output = Hello_World_HelloReply
                        static let descriptor = MethodDescriptor(...)
                    }
                    static let descriptors: [MethodDescriptor] = [...]
                }
                typealias StreamingServiceProtocol = Hello_World_GreeterStreamingServiceProtocol
                ...
            }
        }
    """

    def __init__(
        self,
        client: bool,
        server: bool,
        access_modifier: ir.AccessModifier,
        availability: ir.Availability | None = None,
    ):
        """Create a translator.

        Args:
            client (bool): Whether aliases for the client types are generated.
            server (bool): Whether aliases for the server types are generated.
            access_modifier (ir.AccessModifier): The access modifier of all declarations.
            availability (ir.Availability | None, optional): Availability of the aliases. Defaults to None.
        """
        self.client = client
        self.server = server
        self.access_modifier = access_modifier
        self.availability = availability

    def translate(self, request: CodeGenerationRequest) -> list[ir.CodeBlock]:
        """Translate all services of a request.

        Services are grouped by namespace. Groups are ordered by their namespace name, services without
        a namespace come first and are emitted as top-level enums. Within a group, services are ordered
        by name.

        Args:
            request (CodeGenerationRequest): The request to translate.

        Returns:
            list[ir.CodeBlock]: One block per namespace, and one per service without namespace.
        """
        code_blocks: list[ir.CodeBlock] = []

        def namespace_key(service: ServiceDescriptor) -> str:
            return service.namespace.generated_upper_case

        ordered = sorted(request.services, key=lambda s: (namespace_key(s), s.name.generated_upper_case))

        for namespace, group in groupby(ordered, key=namespace_key):
            service_enums = [self.make_service_enum(service) for service in group]

            if not namespace:
                code_blocks.extend(ir.CodeBlock(service_enum) for service_enum in service_enums)
            else:
                logger.debug("Namespace '%s' holds %d service(s).", namespace, len(service_enums))
                namespace_enum = ir.EnumDescription(self.access_modifier, namespace, tuple(service_enums))
                code_blocks.append(ir.CodeBlock(namespace_enum))

        return code_blocks

    def make_service_enum(self, service: ServiceDescriptor) -> ir.EnumDescription:
        members: list[ir.Declaration] = [self.make_method_enum(service)]
        members.extend(self.make_service_aliases(service))
        return ir.EnumDescription(self.access_modifier, service.name.generated_upper_case, tuple(members))

    def make_method_enum(self, service: ServiceDescriptor) -> ir.EnumDescription:
        """The `Method` enum: one enum per method plus the list of all method descriptors."""
        members: list[ir.Declaration] = [self.make_method(service, method) for method in service.methods]

        descriptors = ir.ArrayLiteralExpression(
            tuple(
                ir.IdentifierExpression(f"{method.name.generated_upper_case}.descriptor") for method in service.methods
            )
        )
        members.append(
            ir.VariableDescription(
                self.access_modifier,
                ir.BindingKind.LET,
                "descriptors",
                is_static=True,
                type="[MethodDescriptor]",
                right=descriptors,
            )
        )

        return ir.EnumDescription(self.access_modifier, "Method", tuple(members))

    def make_method(self, service: ServiceDescriptor, method: MethodDescriptor) -> ir.EnumDescription:
        descriptor = ir.FunctionCallExpression(
            ir.IdentifierExpression("MethodDescriptor"),
            (
                ir.FunctionArgument("service", ir.StringLiteralExpression(service.fully_qualified_name)),
                ir.FunctionArgument("method", ir.StringLiteralExpression(method.name.base)),
            ),
        )

        members = (
            ir.TypealiasDescription(self.access_modifier, INPUT_NAME, method.input_type),
            ir.TypealiasDescription(self.access_modifier, OUTPUT_NAME, method.output_type),
            ir.VariableDescription(
                self.access_modifier, ir.BindingKind.LET, "descriptor", is_static=True, right=descriptor
            ),
        )
        return ir.EnumDescription(self.access_modifier, method.name.generated_upper_case, members)

    def make_service_aliases(self, service: ServiceDescriptor) -> Sequence[ir.Declaration]:
        """Aliases from the service enum to the top-level protocols and structs."""
        prefix = service.namespaced_generated_name
        names: list[str] = []

        if self.server:
            names += ["StreamingServiceProtocol", "ServiceProtocol"]
        if self.client:
            names += ["ClientProtocol", "Client"]

        return [
            ir.guarded(self.availability, ir.TypealiasDescription(self.access_modifier, name, f"{prefix}{name}"))
            for name in names
        ]
