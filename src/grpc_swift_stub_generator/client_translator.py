"""Translate services into client protocols and concrete clients."""

from __future__ import annotations

from grpc_swift_stub_generator import ir
from grpc_swift_stub_generator.helper import INPUT_NAME, OUTPUT_NAME, method_path, method_type, new_generic
from grpc_swift_stub_generator.request import CodeGenerationRequest, MethodDescriptor, ServiceDescriptor

GRPC_CLIENT = "GRPCCore.GRPCClient"


class ClientCodeTranslator:
    """Creates the client side code of every service.

    Per service, three blocks are generated: the `<Service>ClientProtocol`, an extension with
    overloads that use the default serializers, and the `<Service>Client` struct that implements the
    protocol on top of a `GRPCCore.GRPCClient`.
    """

    def __init__(self, access_modifier: ir.AccessModifier, availability: ir.Availability | None = None):
        self.access_modifier = access_modifier
        self.availability = availability

    def translate(self, request: CodeGenerationRequest) -> list[ir.CodeBlock]:
        code_blocks: list[ir.CodeBlock] = []

        for service in request.services:
            code_blocks.append(ir.CodeBlock(self.make_client_protocol(service)))
            code_blocks.append(ir.CodeBlock(self.make_default_serializers_extension(service, request)))
            code_blocks.append(ir.CodeBlock(self.make_client_struct(service)))

        return code_blocks

    def make_client_protocol(self, service: ServiceDescriptor) -> ir.Declaration:
        members = tuple(
            ir.commented(method.documentation, ir.FunctionDescription(self.method_signature(service, method, None)))
            for method in service.methods
        )
        protocol = ir.ProtocolDescription(
            self.access_modifier,
            f"{service.namespaced_generated_name}ClientProtocol",
            ("Sendable",),
            members,
        )
        return ir.commented(service.documentation, ir.guarded(self.availability, protocol))

    def make_default_serializers_extension(
        self, service: ServiceDescriptor, request: CodeGenerationRequest
    ) -> ir.Declaration:
        """Overloads of the protocol methods that pass the default serializer and deserializer."""
        members = tuple(self.make_default_serializers_method(service, method, request) for method in service.methods)
        extension = ir.ExtensionDescription(
            None,
            f"{service.namespaced_typealias_generated_name}.ClientProtocol",
            members=members,
        )
        return ir.guarded(self.availability, extension)

    def make_default_serializers_method(
        self,
        service: ServiceDescriptor,
        method: MethodDescriptor,
        request: CodeGenerationRequest,
    ) -> ir.FunctionDescription:
        call = ir.KeywordExpression(
            ir.KeywordKind.TRY,
            ir.KeywordExpression(
                ir.KeywordKind.AWAIT,
                ir.FunctionCallExpression(
                    ir.IdentifierExpression(f"self.{method.name.generated_lower_case}"),
                    (
                        ir.FunctionArgument("request", ir.IdentifierExpression("request")),
                        ir.FunctionArgument(
                            "serializer",
                            ir.IdentifierExpression(
                                request.lookup_serializer(method_type(service, method, INPUT_NAME))
                            ),
                        ),
                        ir.FunctionArgument(
                            "deserializer",
                            ir.IdentifierExpression(
                                request.lookup_deserializer(method_type(service, method, OUTPUT_NAME))
                            ),
                        ),
                        ir.FunctionArgument(None, ir.IdentifierExpression("body")),
                    ),
                ),
            ),
        )

        signature = self.method_signature(service, method, self.access_modifier, include_serializers=False)
        return ir.FunctionDescription(signature, (ir.CodeBlock(call),))

    def make_client_struct(self, service: ServiceDescriptor) -> ir.Declaration:
        initializer = ir.FunctionDescription(
            ir.FunctionSignatureDescription(
                self.access_modifier,
                "init",
                parameters=(ir.ParameterDescription("client", GRPC_CLIENT),),
            ),
            (
                ir.CodeBlock(
                    ir.AssignmentExpression(ir.IdentifierExpression("self.client"), ir.IdentifierExpression("client"))
                ),
            ),
        )

        members: list[ir.Declaration] = [
            ir.VariableDescription(ir.AccessModifier.PRIVATE, ir.BindingKind.LET, "client", type=GRPC_CLIENT),
            initializer,
        ]
        members.extend(
            ir.commented(method.documentation, self.make_client_method(service, method)) for method in service.methods
        )

        struct = ir.StructDescription(
            self.access_modifier,
            f"{service.namespaced_generated_name}Client",
            (f"{service.namespaced_typealias_generated_name}.ClientProtocol",),
            tuple(members),
        )
        return ir.commented(service.documentation, ir.guarded(self.availability, struct))

    def make_client_method(self, service: ServiceDescriptor, method: MethodDescriptor) -> ir.FunctionDescription:
        """Forward a call to the `GRPCClient` call matching the streaming shape of the method."""
        call = ir.KeywordExpression(
            ir.KeywordKind.TRY,
            ir.KeywordExpression(
                ir.KeywordKind.AWAIT,
                ir.FunctionCallExpression(
                    ir.IdentifierExpression(f"self.client.{method.shape.value}"),
                    (
                        ir.FunctionArgument("request", ir.IdentifierExpression("request")),
                        ir.FunctionArgument(
                            "descriptor", ir.IdentifierExpression(f"{method_path(service, method)}.descriptor")
                        ),
                        ir.FunctionArgument("serializer", ir.IdentifierExpression("serializer")),
                        ir.FunctionArgument("deserializer", ir.IdentifierExpression("deserializer")),
                        ir.FunctionArgument("handler", ir.IdentifierExpression("body")),
                    ),
                ),
            ),
        )
        signature = self.method_signature(service, method, self.access_modifier)
        return ir.FunctionDescription(signature, (ir.CodeBlock(call),))

    def method_signature(
        self,
        service: ServiceDescriptor,
        method: MethodDescriptor,
        access_modifier: ir.AccessModifier | None,
        include_serializers: bool = True,
    ) -> ir.FunctionSignatureDescription:
        """The signature shared by the protocol requirement and its implementations.

        Args:
            service (ServiceDescriptor): The service of the method.
            method (MethodDescriptor): The method.
            access_modifier (ir.AccessModifier | None): None for protocol requirements.
            include_serializers (bool, optional): Whether the serializer parameters are declared. Defaults to True.

        Returns:
            ir.FunctionSignatureDescription: The signature.
        """
        input_type = method_type(service, method, INPUT_NAME)
        output_type = method_type(service, method, OUTPUT_NAME)

        request_type = new_generic(
            "ClientRequest.Stream" if method.is_input_streaming else "ClientRequest.Single", [input_type]
        )
        response_type = new_generic(
            "ClientResponse.Stream" if method.is_output_streaming else "ClientResponse.Single", [output_type]
        )

        parameters = [ir.ParameterDescription("request", request_type)]
        if include_serializers:
            parameters.append(ir.ParameterDescription("serializer", f"some MessageSerializer<{input_type}>"))
            parameters.append(ir.ParameterDescription("deserializer", f"some MessageDeserializer<{output_type}>"))
        parameters.append(
            ir.ParameterDescription("_", f"@Sendable @escaping ({response_type}) async throws -> R", name="body")
        )

        return ir.FunctionSignatureDescription(
            access_modifier,
            method.name.generated_lower_case,
            generic_parameters=("R",),
            parameters=tuple(parameters),
            is_async=True,
            is_throwing=True,
            return_type="R",
            where_clause=("R: Sendable",),
        )
