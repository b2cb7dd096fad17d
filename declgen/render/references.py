"""Collect the namespaces a rendered type refers to."""

from __future__ import annotations

from typing import Iterable, Iterator, List, Set

from ..models import CustomAttributeData, GenericParameter, MethodInfo, TypeInfo


def _expand(type_info: TypeInfo) -> Iterator[TypeInfo]:
    """Yield a reference and the types it is constructed from."""
    stack: List[TypeInfo] = [type_info]
    while stack:
        current = stack.pop()
        if current.element_type is not None:
            stack.append(current.element_type)
            continue
        if current.is_generic_parameter:
            continue
        yield current
        stack.extend(current.generic_type_arguments)


def _attribute_types(attributes: Iterable[CustomAttributeData]) -> Iterator[TypeInfo]:
    for attribute in attributes:
        yield attribute.attribute_type


def _constraint_types(parameters: Iterable[GenericParameter]) -> Iterator[TypeInfo]:
    for parameter in parameters:
        yield from parameter.constraints


def _method_types(method: MethodInfo) -> Iterator[TypeInfo]:
    yield method.return_type
    yield from _attribute_types(method.custom_attributes)
    yield from _constraint_types(method.generic_parameters)
    for parameter in method.parameters:
        yield parameter.parameter_type
        yield from _attribute_types(parameter.custom_attributes)


def referenced_types(type_info: TypeInfo) -> Iterator[TypeInfo]:
    """Yield every type referenced by a declaration and its nested types."""
    if type_info.base_type is not None:
        yield type_info.base_type
    if type_info.enum_underlying_type is not None:
        yield type_info.enum_underlying_type
    yield from type_info.implemented_interfaces
    yield from _attribute_types(type_info.custom_attributes)
    yield from _constraint_types(type_info.generic_parameters)
    for item in type_info.fields:
        yield item.field_type
        yield from _attribute_types(item.custom_attributes)
    for prop in type_info.properties:
        yield prop.property_type
        yield from _attribute_types(prop.custom_attributes)
    for event in type_info.events:
        yield event.event_handler_type
        yield from _attribute_types(event.custom_attributes)
    for method in list(type_info.constructors) + list(type_info.methods):
        yield from _method_types(method)
    for nested in type_info.nested_types:
        yield from referenced_types(nested)


def referenced_namespaces(type_info: TypeInfo) -> Set[str]:
    """Namespaces referenced by ``type_info``, excluding its own."""
    namespaces: Set[str] = set()
    for reference in referenced_types(type_info):
        for part in _expand(reference):
            if part.namespace and part.namespace != type_info.namespace:
                namespaces.add(part.namespace)
    return namespaces


__all__ = ["referenced_namespaces", "referenced_types"]
