"""Tests for the naming constraints checked before code is generated."""

from __future__ import annotations

import pytest

from grpc_swift_stub_generator.config import Configuration
from grpc_swift_stub_generator.errors import CodeGenError, CodeGenErrorCode
from grpc_swift_stub_generator.request import Dependency, DependencyItem, make_request
from grpc_swift_stub_generator.translator import StructuredSwiftTranslator


@pytest.fixture
def translator():
    return StructuredSwiftTranslator(Configuration())


class TestServiceValidation:
    """Test uniqueness of service descriptors and generated service names."""

    def test_same_descriptor_twice(self, translator, make_service):
        """Two services with the same namespace and name are rejected."""
        service = make_service("AService", namespace="namespaceA")
        request = make_request([service, service])

        with pytest.raises(CodeGenError) as excinfo:
            translator.translate(request)

        assert excinfo.value.code is CodeGenErrorCode.NON_UNIQUE_SERVICE_NAME
        assert excinfo.value.message == (
            "Services must have unique descriptors. namespaceA.AService is the descriptor of at least two "
            "different services."
        )

    def test_same_descriptor_without_namespace(self, translator, make_service):
        request = make_request([make_service("AService"), make_service("AService")])

        with pytest.raises(CodeGenError) as excinfo:
            translator.validate_input(request)

        assert "AService is the descriptor of at least two different services." in excinfo.value.message

    def test_service_without_namespace_collides_with_namespace(self, translator, make_service):
        """A service without namespace must not be named like a namespace."""
        request = make_request(
            [
                make_service("ServiceB", namespace="foo", namespace_upper="NamespaceA"),
                make_service("namespaceA", upper="NamespaceA"),
            ]
        )

        with pytest.raises(CodeGenError) as excinfo:
            translator.translate(request)

        assert excinfo.value.code is CodeGenErrorCode.NON_UNIQUE_SERVICE_NAME
        assert excinfo.value.message == (
            "Services with no namespace must not have the same generated upper case names as the namespaces. "
            "NamespaceA is used as a generated upper case name for a service with no namespace and a namespace."
        )

    def test_same_generated_name_in_namespace(self, translator, make_service):
        request = make_request(
            [
                make_service("AService", namespace="namespacea", upper="AService"),
                make_service("Aservice", namespace="namespacea", upper="AService"),
            ]
        )

        with pytest.raises(CodeGenError) as excinfo:
            translator.translate(request)

        assert excinfo.value.message == (
            "Services within the same namespace must have unique generated upper case names. "
            "AService is used as a generated upper case name for multiple services in the namespacea namespace."
        )

    def test_same_generated_name_without_namespace(self, translator, make_service):
        request = make_request(
            [
                make_service("AService", upper="AService"),
                make_service("Aservice", upper="AService"),
            ]
        )

        with pytest.raises(CodeGenError) as excinfo:
            translator.translate(request)

        assert excinfo.value.message == (
            "Services in an empty namespace must have unique generated upper case names. "
            "AService is used as a generated upper case name for multiple services without namespaces."
        )

    def test_same_service_name_in_different_namespaces(self, translator, make_service):
        """Equal service names are fine when the namespaces differ."""
        request = make_request(
            [
                make_service("AService", namespace="namespaceA"),
                make_service("AService", namespace="namespaceB"),
            ]
        )

        translator.validate_input(request)


class TestMethodValidation:
    """Test uniqueness of method names within a service."""

    def test_same_base_name(self, translator, make_service, make_method):
        service = make_service(
            "AService",
            namespace="namespacea",
            methods=[make_method("MethodA", upper="MethodA"), make_method("MethodA", upper="MethodB", lower="b")],
        )

        with pytest.raises(CodeGenError) as excinfo:
            translator.translate(make_request([service]))

        assert excinfo.value.code is CodeGenErrorCode.NON_UNIQUE_METHOD_NAME
        assert excinfo.value.message == (
            "Methods of a service must have unique base names. MethodA is used as a base name for multiple "
            "methods of the AService service."
        )

    def test_same_generated_upper_case_name(self, translator, make_service, make_method):
        service = make_service(
            "AService",
            methods=[make_method("MethodA", upper="MethodA"), make_method("methodA", upper="MethodA", lower="b")],
        )

        with pytest.raises(CodeGenError) as excinfo:
            translator.translate(make_request([service]))

        assert excinfo.value.message == (
            "Methods of a service must have unique generated upper case names. MethodA is used as a generated "
            "upper case name for multiple methods of the AService service."
        )

    def test_same_lower_case_name(self, translator, make_service, make_method):
        service = make_service(
            "AService",
            methods=[
                make_method("MethodA", upper="MethodA", lower="methodA"),
                make_method("MethodB", upper="MethodB", lower="methodA"),
            ],
        )

        with pytest.raises(CodeGenError) as excinfo:
            translator.translate(make_request([service]))

        assert excinfo.value.message == (
            "Methods of a service must have unique lower case names. methodA is used as a signature name for "
            "multiple methods of the AService service."
        )

    def test_same_method_name_in_different_services(self, translator, make_service, make_method):
        request = make_request(
            [
                make_service("AService", methods=[make_method("MethodA")]),
                make_service("BService", methods=[make_method("MethodA")]),
            ]
        )

        translator.validate_input(request)


class TestDependencyValidation:
    """Test validation of imported item kinds."""

    def test_invalid_kind(self, translator, make_service):
        request = make_request(
            [make_service("AService")],
            dependencies=[Dependency("Foo", item=DependencyItem(kind="invalid", name="Bar"))],
        )

        with pytest.raises(CodeGenError) as excinfo:
            translator.translate(request)

        assert excinfo.value.code is CodeGenErrorCode.INVALID_KIND
        assert excinfo.value.message == "Invalid kind name for import: invalid"
        assert str(excinfo.value) == "invalidKind: Invalid kind name for import: invalid"

    def test_valid_kind(self, translator, make_service):
        request = make_request(
            [make_service("AService")],
            dependencies=[Dependency("Foo", item=DependencyItem(kind="struct", name="Bar"))],
        )

        translator.validate_input(request)

    def test_error_repr(self):
        error = CodeGenError(CodeGenErrorCode.INVALID_KIND, "bad")
        assert repr(error) == "CodeGenError(code=<CodeGenErrorCode.INVALID_KIND: 'invalidKind'>, message='bad')"
