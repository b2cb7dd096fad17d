"""Build the metadata graph from a JSON or YAML document.

The document lists assemblies, each with its types and their members. Type
references are strings (see :mod:`declgen.graph.typeref`). Loading runs in
two passes: every type definition is declared first so that members can
refer to any type regardless of document order.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

import yaml

from ..errors import DeclgenError
from ..logging import get_logger
from ..models import (
    Assembly,
    CustomAttributeData,
    EventInfo,
    FieldInfo,
    GenericParameter,
    ImageDefinition,
    MemberAccess,
    MethodInfo,
    ParameterInfo,
    PropertyInfo,
    TypeInfo,
)
from .typeref import TypeRefSpec, TypeRefSyntaxError, parse_type_ref, split_full_name

_LOGGER = get_logger("graph.loader")

_TYPE_KINDS = {"class", "struct", "interface", "enum", "delegate"}
_VARIANCES = {None, "in", "out"}
_ACCESS_NAMES: Dict[str, MemberAccess] = {
    "public": MemberAccess.PUBLIC,
    "private": MemberAccess.PRIVATE,
    "protected": MemberAccess.FAMILY,
    "internal": MemberAccess.ASSEMBLY,
    "protected internal": MemberAccess.FAMILY_OR_ASSEMBLY,
    "private protected": MemberAccess.FAMILY_AND_ASSEMBLY,
    "compiler-controlled": MemberAccess.COMPILER_CONTROLLED,
}
# Property-level keys copied onto accessors that do not set them.
_INHERITED_ACCESSOR_KEYS = ("access", "static", "abstract", "virtual", "override", "sealed")


class GraphLoadError(DeclgenError):
    """Raised when a graph document cannot be mapped onto the model."""


def load_graph(path: Path) -> List[Assembly]:
    """Read a graph document from ``path`` (``.json``, ``.yml`` or ``.yaml``)."""
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise GraphLoadError(f"Cannot read graph document {path}: {exc}") from exc
    try:
        if path.suffix.lower() == ".json":
            document = json.loads(text)
        else:
            document = yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise GraphLoadError(f"Failed to parse {path.name}: {exc}") from exc
    assemblies = build_graph(document)
    _LOGGER.info("Loaded %d assemblies from %s", len(assemblies), path)
    return assemblies


def build_graph(document: Any) -> List[Assembly]:
    """Build assemblies from an already-parsed document."""
    return GraphBuilder().build(document)


class GraphBuilder:
    """Two-pass builder from document mappings to model entities."""

    def __init__(self) -> None:
        self._definitions: Dict[str, TypeInfo] = {}
        self._external: Dict[str, TypeInfo] = {}
        self._parameter_types: Dict[GenericParameter, TypeInfo] = {}
        self._parameter_data: Dict[GenericParameter, Mapping[str, Any]] = {}
        self._pending: List[Tuple[TypeInfo, Mapping[str, Any]]] = []
        self._next_index = 0

    def build(self, document: Any) -> List[Assembly]:
        if not isinstance(document, Mapping):
            raise GraphLoadError("Graph document must contain a mapping at the root")
        assembly_entries = _as_list(document.get("assemblies"), "assemblies")

        assemblies: List[Assembly] = []
        for position, entry in enumerate(assembly_entries):
            assemblies.append(self._declare_assembly(position, _require_mapping(entry, "assembly")))

        for type_info, data in self._pending:
            self._populate_type(type_info, data)

        for assembly, entry in zip(assemblies, assembly_entries):
            assembly.custom_attributes = self._attributes(entry.get("attributes"), ())
        return assemblies

    # -- declaration pass -------------------------------------------------

    def _declare_assembly(self, position: int, data: Mapping[str, Any]) -> Assembly:
        image_data = data.get("image")
        image = ImageDefinition()
        if isinstance(image_data, Mapping):
            image = ImageDefinition(
                name=str(image_data.get("name", "")),
                type_start=_as_int(image_data.get("type_start"), 0),
                type_count=_as_int(image_data.get("type_count"), 0),
            )
        assembly = Assembly(
            index=_as_int(data.get("index"), position),
            full_name=_require_str(data, "name", "assembly"),
            image=image,
        )
        for entry in _as_list(data.get("types"), "types"):
            assembly.types.append(self._declare_type(_require_mapping(entry, "type"), assembly, None))
        if not image.type_count:
            image.type_count = sum(1 for _ in assembly.defined_types)
        return assembly

    def _declare_type(
        self, data: Mapping[str, Any], assembly: Assembly, declaring: Optional[TypeInfo]
    ) -> TypeInfo:
        name = _require_str(data, "name", "type")
        kind = str(data.get("kind", "class")).lower()
        if kind not in _TYPE_KINDS:
            raise GraphLoadError(f"Type {name} has unknown kind '{kind}'")

        index = data.get("index")
        if index is None:
            index = self._next_index
        index = _as_int(index, 0)
        self._next_index = max(self._next_index, index + 1)

        namespace = data.get("namespace")
        if namespace is None:
            namespace = declaring.namespace if declaring is not None else ""
        default_access = MemberAccess.PRIVATE if declaring is not None else MemberAccess.ASSEMBLY

        type_info = TypeInfo(
            name=name,
            namespace=str(namespace),
            index=index,
            access=_access(data.get("access"), default_access),
            is_class=kind in {"class", "delegate"},
            is_interface=kind == "interface",
            is_enum=kind == "enum",
            is_value_type=kind in {"struct", "enum"},
            is_abstract=bool(data.get("abstract")) or kind == "interface",
            is_sealed=bool(data.get("sealed")) or kind in {"struct", "enum", "delegate"},
            is_import=bool(data.get("import")),
            is_serializable=bool(data.get("serializable")),
            assembly=assembly,
            declaring_type=declaring,
        )
        if kind == "class" and data.get("static"):
            type_info.is_abstract = type_info.is_sealed = True
        type_info.generic_parameters = [
            self._declare_generic_parameter(item, position, declaring_type=type_info)
            for position, item in enumerate(_as_list(data.get("generic_parameters"), "generic_parameters"))
        ]

        full_name = type_info.full_name
        if full_name in self._definitions:
            raise GraphLoadError(f"Duplicate type definition {full_name}")
        self._definitions[full_name] = type_info

        for entry in _as_list(data.get("nested_types"), "nested_types"):
            type_info.nested_types.append(self._declare_type(_require_mapping(entry, "type"), assembly, type_info))
        self._pending.append((type_info, data))
        return type_info

    def _declare_generic_parameter(
        self,
        item: Any,
        position: int,
        *,
        declaring_type: Optional[TypeInfo] = None,
        declaring_method: Optional[MethodInfo] = None,
    ) -> GenericParameter:
        data: Mapping[str, Any] = {"name": item} if isinstance(item, str) else _require_mapping(item, "generic parameter")
        variance = data.get("variance")
        if variance not in _VARIANCES:
            raise GraphLoadError(f"Generic parameter variance must be 'in' or 'out', not {variance!r}")
        parameter = GenericParameter(
            name=_require_str(data, "name", "generic parameter"),
            position=position,
            variance=variance,
            reference_type_constraint=bool(data.get("class")),
            value_type_constraint=bool(data.get("struct")),
            default_constructor_constraint=bool(data.get("new")),
            declaring_type=declaring_type,
            declaring_method=declaring_method,
        )
        self._parameter_types[parameter] = TypeInfo(name=parameter.name, is_class=False, generic_parameter=parameter)
        self._parameter_data[parameter] = data
        return parameter

    # -- population pass --------------------------------------------------

    def _populate_type(self, type_info: TypeInfo, data: Mapping[str, Any]) -> None:
        scope = self._type_scope(type_info)
        kind = str(data.get("kind", "class")).lower()

        base = data.get("base")
        if base is None and kind == "delegate":
            base = "System.MulticastDelegate"
        if base is not None:
            type_info.base_type = self._resolve(base, scope)
        if kind == "enum":
            type_info.enum_underlying_type = self._resolve(data.get("underlying_type", "System.Int32"), scope)
        type_info.implemented_interfaces = [
            self._resolve(item, scope) for item in _as_list(data.get("interfaces"), "interfaces")
        ]
        self._resolve_constraints(type_info.generic_parameters, scope)
        type_info.custom_attributes = self._attributes(data.get("attributes"), scope)

        for entry in _as_list(data.get("fields"), "fields"):
            type_info.fields.append(self._field(_require_mapping(entry, "field"), type_info, scope))
        if kind == "enum":
            self._enum_values(type_info, data.get("values"))
        for entry in _as_list(data.get("properties"), "properties"):
            type_info.properties.append(self._property(_require_mapping(entry, "property"), type_info, scope))
        for entry in _as_list(data.get("events"), "events"):
            type_info.events.append(self._event(_require_mapping(entry, "event"), type_info, scope))
        for entry in _as_list(data.get("constructors"), "constructors"):
            ctor_data = dict(_require_mapping(entry, "constructor"))
            ctor_data.setdefault("name", ".cctor" if ctor_data.get("static") else ".ctor")
            type_info.constructors.append(self._method(ctor_data, type_info, scope))
        if kind == "delegate" and isinstance(data.get("invoke"), Mapping):
            invoke = dict(data["invoke"])
            invoke.setdefault("name", "Invoke")
            invoke.setdefault("access", "public")
            invoke.setdefault("virtual", True)
            type_info.methods.append(self._method(invoke, type_info, scope))
        for entry in _as_list(data.get("methods"), "methods"):
            type_info.methods.append(self._method(_require_mapping(entry, "method"), type_info, scope))

    def _type_scope(self, type_info: TypeInfo) -> List[GenericParameter]:
        scope: List[GenericParameter] = []
        current: Optional[TypeInfo] = type_info
        while current is not None:
            scope.extend(current.generic_parameters)
            current = current.declaring_type
        return scope

    def _resolve_constraints(self, parameters: Sequence[GenericParameter], scope: Sequence[GenericParameter]) -> None:
        for parameter in parameters:
            data = self._parameter_data.get(parameter, {})
            parameter.constraints = [
                self._resolve(item, scope) for item in _as_list(data.get("constraints"), "constraints")
            ]

    def _field(self, data: Mapping[str, Any], owner: TypeInfo, scope: Sequence[GenericParameter]) -> FieldInfo:
        is_literal = bool(data.get("const"))
        return FieldInfo(
            name=_require_str(data, "name", "field"),
            field_type=self._resolve(_require_str(data, "type", "field"), scope),
            offset=_as_int(data.get("offset"), 0),
            access=_access(data.get("access"), MemberAccess.PRIVATE),
            is_static=bool(data.get("static")) or is_literal,
            is_literal=is_literal,
            is_init_only=bool(data.get("readonly")),
            is_not_serialized=bool(data.get("not_serialized")),
            has_default_value="value" in data,
            default_value=self._attribute_value(data.get("value"), scope),
            custom_attributes=self._attributes(data.get("attributes"), scope),
            declaring_type=owner,
        )

    def _enum_values(self, owner: TypeInfo, values: Any) -> None:
        if values is None:
            return
        if not isinstance(values, Mapping):
            raise GraphLoadError(f"Enum {owner.name} values must be a mapping of name to value")
        for name, value in values.items():
            owner.fields.append(
                FieldInfo(
                    name=str(name),
                    field_type=owner,
                    access=MemberAccess.PUBLIC,
                    is_static=True,
                    is_literal=True,
                    has_default_value=True,
                    default_value=_as_int(value, 0),
                    declaring_type=owner,
                )
            )

    def _method(
        self,
        data: Mapping[str, Any],
        owner: TypeInfo,
        scope: Sequence[GenericParameter],
    ) -> MethodInfo:
        name = _require_str(data, "name", "method")
        generic = [
            self._declare_generic_parameter(item, position)
            for position, item in enumerate(_as_list(data.get("generic_parameters"), "generic_parameters"))
        ]
        method_scope = list(generic) + list(scope)

        is_abstract = bool(data.get("abstract"))
        is_override = bool(data.get("override"))
        is_virtual_decl = bool(data.get("virtual"))
        is_final = bool(data.get("final")) or bool(data.get("sealed"))
        method = MethodInfo(
            name=name,
            return_type=self._resolve(data.get("return_type", "System.Void"), method_scope),
            access=_access(data.get("access"), MemberAccess.PRIVATE),
            is_static=bool(data.get("static")) or name == ".cctor",
            is_abstract=is_abstract,
            is_virtual=is_abstract or is_override or is_virtual_decl or is_final,
            is_final=is_final,
            is_new_slot=bool(data.get("new_slot", (is_virtual_decl or is_abstract) and not is_override)),
            is_pinvoke=bool(data.get("extern")),
            returns_by_ref=bool(data.get("ref_return")),
            requires_unsafe_context=bool(data.get("unsafe")),
            virtual_address=_as_int(data.get("address"), 0),
            generic_parameters=generic,
            declaring_type=owner,
        )
        for parameter in generic:
            parameter.declaring_method = method
        self._resolve_constraints(generic, method_scope)
        method.parameters = [
            self._parameter(_require_mapping(entry, "parameter"), position, method, method_scope)
            for position, entry in enumerate(_as_list(data.get("parameters"), "parameters"))
        ]
        method.custom_attributes = self._attributes(data.get("attributes"), method_scope)
        return method

    def _parameter(
        self,
        data: Mapping[str, Any],
        position: int,
        method: MethodInfo,
        scope: Sequence[GenericParameter],
    ) -> ParameterInfo:
        type_name = _require_str(data, "type", "parameter")
        is_out = bool(data.get("out"))
        is_in = bool(data.get("in"))
        if (is_out or is_in or data.get("ref")) and not type_name.rstrip().endswith("&"):
            type_name += "&"
        return ParameterInfo(
            name=_require_str(data, "name", "parameter"),
            parameter_type=self._resolve(type_name, scope),
            position=position,
            is_out=is_out,
            is_in=is_in,
            is_params=bool(data.get("params")),
            has_default_value="default" in data,
            default_value=self._attribute_value(data.get("default"), scope),
            custom_attributes=self._attributes(data.get("attributes"), scope),
            member=method,
        )

    def _accessor(
        self,
        value: Any,
        owner_data: Mapping[str, Any],
        owner: TypeInfo,
        scope: Sequence[GenericParameter],
        *,
        name: str,
        return_type: str,
        parameters: List[Dict[str, Any]],
    ) -> Optional[MethodInfo]:
        if value is None or value is False:
            return None
        data: Dict[str, Any] = dict(value) if isinstance(value, Mapping) else {}
        data.setdefault("name", name)
        data.setdefault("return_type", return_type)
        data.setdefault("parameters", parameters)
        for key in _INHERITED_ACCESSOR_KEYS:
            if key in owner_data:
                data.setdefault(key, owner_data[key])
        method = self._method(data, owner, scope)
        owner.methods.append(method)
        return method

    def _property(self, data: Mapping[str, Any], owner: TypeInfo, scope: Sequence[GenericParameter]) -> PropertyInfo:
        name = _require_str(data, "name", "property")
        type_name = _require_str(data, "type", "property")
        index_parameters = [dict(_require_mapping(item, "parameter")) for item in _as_list(data.get("parameters"), "parameters")]
        getter = self._accessor(
            data.get("get"), data, owner, scope,
            name=f"get_{name}", return_type=type_name, parameters=index_parameters,
        )
        setter = self._accessor(
            data.get("set"), data, owner, scope,
            name=f"set_{name}", return_type="System.Void",
            parameters=index_parameters + [{"name": "value", "type": type_name}],
        )
        return PropertyInfo(
            name=name,
            property_type=self._resolve(type_name, scope),
            get_method=getter,
            set_method=setter,
            custom_attributes=self._attributes(data.get("attributes"), scope),
            declaring_type=owner,
        )

    def _event(self, data: Mapping[str, Any], owner: TypeInfo, scope: Sequence[GenericParameter]) -> EventInfo:
        name = _require_str(data, "name", "event")
        type_name = _require_str(data, "type", "event")
        value_parameter = [{"name": "value", "type": type_name}]
        accessors = {
            keyword: self._accessor(
                data.get(keyword), data, owner, scope,
                name=f"{keyword}_{name}", return_type="System.Void", parameters=list(value_parameter),
            )
            for keyword in ("add", "remove", "raise")
        }
        return EventInfo(
            name=name,
            event_handler_type=self._resolve(type_name, scope),
            add_method=accessors["add"],
            remove_method=accessors["remove"],
            raise_method=accessors["raise"],
            custom_attributes=self._attributes(data.get("attributes"), scope),
            declaring_type=owner,
        )

    def _attributes(self, entries: Any, scope: Sequence[GenericParameter]) -> List[CustomAttributeData]:
        attributes: List[CustomAttributeData] = []
        for entry in _as_list(entries, "attributes"):
            if isinstance(entry, str):
                attributes.append(CustomAttributeData(attribute_type=self._resolve(entry, scope)))
                continue
            data = _require_mapping(entry, "attribute")
            named = data.get("named") or {}
            if not isinstance(named, Mapping):
                raise GraphLoadError("Attribute named arguments must be a mapping")
            attributes.append(
                CustomAttributeData(
                    attribute_type=self._resolve(_require_str(data, "type", "attribute"), scope),
                    arguments=[self._attribute_value(item, scope) for item in _as_list(data.get("args"), "args")],
                    named_arguments={str(key): self._attribute_value(value, scope) for key, value in named.items()},
                    virtual_address=_as_int(data.get("address"), 0),
                )
            )
        return attributes

    def _attribute_value(self, value: Any, scope: Sequence[GenericParameter]) -> Any:
        if isinstance(value, Mapping) and set(value) == {"typeof"}:
            return self._resolve(value["typeof"], scope)
        return value

    # -- type references ----------------------------------------------------

    def _resolve(self, text: Any, scope: Sequence[GenericParameter]) -> TypeInfo:
        if not isinstance(text, str):
            raise GraphLoadError(f"Type reference must be a string, not {text!r}")
        try:
            spec = parse_type_ref(text)
        except TypeRefSyntaxError as exc:
            raise GraphLoadError(str(exc)) from exc
        return self._from_spec(spec, scope)

    def _from_spec(self, spec: TypeRefSpec, scope: Sequence[GenericParameter]) -> TypeInfo:
        resolved = self._named(spec.name, scope)
        if spec.arguments:
            resolved = TypeInfo(
                name=resolved.name,
                namespace=resolved.namespace,
                is_class=resolved.is_class,
                is_interface=resolved.is_interface,
                is_value_type=resolved.is_value_type,
                generic_type_definition=resolved,
                generic_type_arguments=[self._from_spec(argument, scope) for argument in spec.arguments],
            )
        for suffix in spec.suffixes:
            resolved = _construct(resolved, suffix)
        return resolved

    def _named(self, name: str, scope: Sequence[GenericParameter]) -> TypeInfo:
        if not any(marker in name for marker in ".+`"):
            for parameter in scope:
                if parameter.name == name:
                    return self._parameter_types[parameter]
        definition = self._definitions.get(name)
        if definition is not None:
            return definition
        external = self._external.get(name)
        if external is None:
            namespace, simple = split_full_name(name)
            external = TypeInfo(name=simple.rsplit("+", 1)[-1], namespace=namespace)
            self._external[name] = external
        return external


def _construct(element: TypeInfo, suffix: str) -> TypeInfo:
    if suffix == "*":
        return TypeInfo(
            name=element.name + "*", namespace=element.namespace, is_class=False,
            element_type=element, is_pointer=True,
        )
    if suffix == "&":
        return TypeInfo(name=element.name + "&", namespace=element.namespace, element_type=element, is_by_ref=True)
    return TypeInfo(
        name=element.name + suffix, namespace=element.namespace, element_type=element,
        array_rank=suffix.count(",") + 1,
    )


def _access(value: Any, default: MemberAccess) -> MemberAccess:
    if value is None:
        return default
    key = " ".join(str(value).lower().split())
    try:
        return _ACCESS_NAMES[key]
    except KeyError:
        raise GraphLoadError(f"Unknown access level '{value}'") from None


def _require_mapping(value: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise GraphLoadError(f"Each {what} entry must be a mapping")
    return value


def _require_str(data: Mapping[str, Any], key: str, what: str) -> str:
    value = data.get(key)
    if not isinstance(value, str) or not value.strip():
        raise GraphLoadError(f"{what.capitalize()} entry is missing '{key}'")
    return value


def _as_list(value: Any, what: str) -> List[Any]:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    raise GraphLoadError(f"'{what}' must be a list")


def _as_int(value: Any, default: int) -> int:
    if value is None:
        return default
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip(), 0)
        except ValueError:
            raise GraphLoadError(f"Expected an integer, not {value!r}") from None
    raise GraphLoadError(f"Expected an integer, not {value!r}")


__all__ = ["GraphBuilder", "GraphLoadError", "build_graph", "load_graph"]
