"""Tests for ParameterClassifier and parameter role declarations."""

from __future__ import annotations

import inspect
from typing import Annotated, Any

import pytest

from graphbind import DOCUMENT_NAME, Document, Header, ParameterDef, ParameterRole, Variable
from graphbind.client import describe_function, parameter_role
from graphbind.core.defs import RequestDef
from graphbind.core.descriptors import MethodDescriptor
from graphbind.runtime.classifier import ParameterClassifier


def _descriptor(func) -> MethodDescriptor:
    spec = describe_function(func.__name__, func, RequestDef())
    return MethodDescriptor(
        name=spec.name,
        method_key=f"tests.Client#{spec.name}",
        parameters=spec.parameters,
        signature=spec.signature,
    )


def search(
    self,
    query: Annotated[str, Document()],
    book_id: Annotated[str, Variable("bookId")],
    tenant: Annotated[str, Header("X-Tenant")],
    lang: str = "en",
):
    ...


def test_parameter_role_from_annotation():
    assert parameter_role(Annotated[str, Header("X-Tenant")]) == (ParameterRole.HEADER, "X-Tenant", False, str)
    assert parameter_role(Annotated[str, Document(is_document_name=True)]) == (
        ParameterRole.DOCUMENT, "", True, str,
    )
    assert parameter_role(Annotated[int, Variable("first")]) == (ParameterRole.VARIABLE, "first", False, int)
    assert parameter_role(int) == (ParameterRole.VARIABLE, "", False, int)


def test_unmarked_annotated_parameter_is_variable():
    assert parameter_role(Annotated[str, "docs"]) == (ParameterRole.VARIABLE, "", False, str)


def test_groups_bindings_by_role():
    method = _descriptor(search)

    groups = ParameterClassifier().classify(method, ("{ books }", "book-1"), {"tenant": "acme"})

    document, = groups[ParameterRole.DOCUMENT]
    assert (document.name, document.value) == ("query", "{ books }")

    header, = groups[ParameterRole.HEADER]
    assert (header.name, header.value, header.declared_type) == ("X-Tenant", "acme", str)

    assert [(b.name, b.value) for b in groups[ParameterRole.VARIABLE]] == [("bookId", "book-1"), ("lang", "en")]


def test_document_name_parameter_uses_reserved_name():
    def by_name(self, name: Annotated[str, Document(is_document_name=True)]):
        ...

    groups = ParameterClassifier().classify(_descriptor(by_name), ("bookQuery",), {})

    assert groups[ParameterRole.DOCUMENT][0].name == DOCUMENT_NAME


def test_keyword_arguments_keep_declaration_order():
    def method(self, first: int, second: int, third: int = 3):
        ...

    groups = ParameterClassifier().classify(_descriptor(method), (), {"second": 2, "first": 1})

    assert [b.name for b in groups[ParameterRole.VARIABLE]] == ["first", "second", "third"]


def test_var_keyword_parameter_is_a_mapping_variable():
    def method(self, **variables: Any):
        ...

    descriptor = _descriptor(method)
    groups = ParameterClassifier().classify(descriptor, (), {"id": "1", "lang": "en"})

    binding, = groups[ParameterRole.VARIABLE]
    assert binding.value == {"id": "1", "lang": "en"}
    assert descriptor.parameters[0].annotation == dict[str, Any]


def test_every_role_is_present():
    def method(self):
        ...

    groups = ParameterClassifier().classify(_descriptor(method), (), {})

    assert groups == {role: [] for role in ParameterRole}


def test_wrong_arguments_raise_type_error():
    def method(self, book_id: str):
        ...

    with pytest.raises(TypeError):
        ParameterClassifier().classify(_descriptor(method), ("a", "b"), {})


def test_registered_parameters_bind_positionally():
    method = MethodDescriptor(
        name="get",
        method_key="tests.Client#get",
        parameters=(ParameterDef("bookId"), ParameterDef("X-Tenant", role=ParameterRole.HEADER)),
    )

    groups = ParameterClassifier().classify(method, ("book-1",), {"X-Tenant": "acme"})

    assert groups[ParameterRole.VARIABLE][0].value == "book-1"
    assert groups[ParameterRole.HEADER][0].value == "acme"


def test_signature_includes_self():
    method = _descriptor(search)

    assert list(method.signature.parameters)[0] == "self"
    assert [param.name for param in method.parameters] == ["query", "book_id", "tenant", "lang"]
    assert isinstance(method.signature, inspect.Signature)


@pytest.mark.parametrize("args,kwargs,message", [
    (("book-1",), {"bookid": "x"}, "unexpected keyword argument 'bookid'"),
    ((), {}, "missing required arguments: bookId"),
    (("book-1",), {"bookId": "book-2"}, "multiple values for argument 'bookId'"),
])
def test_registered_parameters_reject_mismatched_arguments(args, kwargs, message):
    method = MethodDescriptor(name="get", method_key="tests.Client#get", parameters=(ParameterDef("bookId"),))

    with pytest.raises(TypeError, match=message):
        ParameterClassifier().classify(method, args, kwargs)
