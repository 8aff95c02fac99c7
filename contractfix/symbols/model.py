"""
Symbol model for the typed program representation.

These objects are owned by the host (see ``ProjectIndex``) and are read-only
for the analysis core. Types and methods compare by identity of their
declaration plus type arguments, so a constructed generic type equals its
definition exactly when the arguments are the definition's own parameters.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

import libcst as cst


class TypeKind(Enum):
    """Kinds of declared types."""

    CLASS = "class"
    INTERFACE = "interface"


class ParameterKind(Enum):
    """How a parameter receives its argument."""

    POSITIONAL = "positional"
    VAR_POSITIONAL = "var_positional"
    KEYWORD_ONLY = "keyword_only"
    VAR_KEYWORD = "var_keyword"


class TypeRef:
    """A type as written in source: a dotted name plus optional type arguments."""

    __slots__ = ("name", "arguments")

    def __init__(self, name: str, arguments: Sequence["TypeRef"] = ()) -> None:
        self.name = name
        self.arguments: Tuple[TypeRef, ...] = tuple(arguments)

    @property
    def simple_name(self) -> str:
        return self.name.rsplit(".", 1)[-1]

    def substitute(self, mapping: Mapping[str, "TypeRef"]) -> "TypeRef":
        """Replace type parameter names by the types bound to them."""
        if not self.arguments and self.name in mapping:
            return mapping[self.name]
        if not self.arguments:
            return self
        return TypeRef(self.name, [arg.substitute(mapping) for arg in self.arguments])

    @classmethod
    def from_expression(cls, expr: cst.BaseExpression) -> Optional["TypeRef"]:
        """Read a type reference from an annotation or decorator argument."""
        if isinstance(expr, (cst.Name, cst.Attribute)):
            dotted = dotted_name(expr)
            return cls(dotted) if dotted else None

        if isinstance(expr, cst.Subscript):
            base = dotted_name(expr.value)
            if base is None:
                return None
            arguments = []
            for element in expr.slice:
                if not isinstance(element.slice, cst.Index):
                    return None
                arg = cls.from_expression(element.slice.value)
                if arg is None:
                    return None
                arguments.append(arg)
            return cls(base, arguments)

        if isinstance(expr, cst.BinaryOperation) and isinstance(expr.operator, cst.BitOr):
            left = cls.from_expression(expr.left)
            right = cls.from_expression(expr.right)
            if left is None or right is None:
                return None
            members: List[TypeRef] = []
            for part in (left, right):
                members.extend(part.arguments if part.name == "Union" else [part])
            return cls("Union", members)

        if isinstance(expr, cst.SimpleString):
            # Forward reference such as "Node" or "List[Node]"
            text = expr.evaluated_value
            if not isinstance(text, str):
                return None
            try:
                return cls.from_expression(cst.parse_expression(text))
            except cst.ParserSyntaxError:
                return None

        if isinstance(expr, cst.Ellipsis):
            return cls("...")

        if isinstance(expr, cst.List):
            elements = [cls.from_expression(e.value) for e in expr.elements]
            if any(e is None for e in elements):
                return None
            return cls("[]", elements)

        return None

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TypeRef):
            return NotImplemented
        return self.name == other.name and self.arguments == other.arguments

    def __hash__(self) -> int:
        return hash((self.name, self.arguments))

    def __str__(self) -> str:
        if not self.arguments:
            return self.name
        return f"{self.name}[{', '.join(str(a) for a in self.arguments)}]"

    def __repr__(self) -> str:
        return f"TypeRef({str(self)!r})"


def dotted_name(expr: cst.BaseExpression) -> Optional[str]:
    """Return ``a.b.c`` for a chain of Name/Attribute nodes, else None."""
    if isinstance(expr, cst.Name):
        return expr.value
    if isinstance(expr, cst.Attribute):
        head = dotted_name(expr.value)
        if head is None:
            return None
        return f"{head}.{expr.attr.value}"
    return None


class ParameterSymbol:
    """A single declared parameter."""

    __slots__ = ("name", "annotation", "kind", "has_default")

    def __init__(
        self,
        name: str,
        annotation: Optional[TypeRef] = None,
        kind: ParameterKind = ParameterKind.POSITIONAL,
        has_default: bool = False,
    ) -> None:
        self.name = name
        self.annotation = annotation
        self.kind = kind
        self.has_default = has_default

    @property
    def is_variadic(self) -> bool:
        return self.kind in (ParameterKind.VAR_POSITIONAL, ParameterKind.VAR_KEYWORD)

    def substitute(self, mapping: Mapping[str, TypeRef]) -> "ParameterSymbol":
        if self.annotation is None:
            return self
        return ParameterSymbol(
            self.name, self.annotation.substitute(mapping), self.kind, self.has_default
        )

    def __repr__(self) -> str:
        if self.annotation is None:
            return f"ParameterSymbol({self.name})"
        return f"ParameterSymbol({self.name}: {self.annotation})"


class AttributeData:
    """A decorator applied to a class or a method."""

    __slots__ = ("name", "arguments", "node")

    def __init__(
        self,
        name: str,
        arguments: Sequence[Optional[TypeRef]] = (),
        node: Optional[cst.Decorator] = None,
    ) -> None:
        self.name = name
        self.arguments: Tuple[Optional[TypeRef], ...] = tuple(arguments)
        self.node = node

    @classmethod
    def from_decorator(cls, decorator: cst.Decorator) -> Optional["AttributeData"]:
        expr = decorator.decorator
        arguments: List[Optional[TypeRef]] = []
        if isinstance(expr, cst.Call):
            arguments = [TypeRef.from_expression(arg.value) for arg in expr.args]
            expr = expr.func
        name = dotted_name(expr)
        if name is None:
            return None
        return cls(name.rsplit(".", 1)[-1], arguments, decorator)

    def __repr__(self) -> str:
        return f"AttributeData({self.name}, {list(self.arguments)})"


class TypeSymbol:
    """A class or interface, either as declared or constructed with type arguments."""

    def __init__(
        self,
        name: str,
        qualified_name: str,
        kind: TypeKind,
        module_name: str,
        type_parameters: Sequence[str] = (),
        bases: Sequence[TypeRef] = (),
        attributes: Sequence[AttributeData] = (),
        syntax: Optional[cst.ClassDef] = None,
        definition: Optional["TypeSymbol"] = None,
        type_arguments: Optional[Sequence[TypeRef]] = None,
    ) -> None:
        self.name = name
        self.qualified_name = qualified_name
        self.kind = kind
        self.module_name = module_name
        self.type_parameters: Tuple[str, ...] = tuple(type_parameters)
        self.bases: Tuple[TypeRef, ...] = tuple(bases)
        self.attributes: Tuple[AttributeData, ...] = tuple(attributes)
        self.syntax = syntax
        self.definition = definition
        self._type_arguments = tuple(type_arguments) if type_arguments is not None else None
        self.methods: List[MethodSymbol] = []

    @property
    def original_definition(self) -> "TypeSymbol":
        return self.definition if self.definition is not None else self

    @property
    def is_interface(self) -> bool:
        return self.kind is TypeKind.INTERFACE

    @property
    def is_generic(self) -> bool:
        return bool(self.type_parameters)

    @property
    def type_arguments(self) -> Tuple[TypeRef, ...]:
        if self._type_arguments is not None:
            return self._type_arguments
        return tuple(TypeRef(p) for p in self.type_parameters)

    def get_members(self, name: Optional[str] = None) -> List["MethodSymbol"]:
        if name is None:
            return list(self.methods)
        return [m for m in self.methods if m.name == name]

    def get_attributes(self, name: str) -> List[AttributeData]:
        return [a for a in self.attributes if a.name == name]

    def construct(self, type_arguments: Sequence[TypeRef]) -> "TypeSymbol":
        """Bind the definition's type parameters to ``type_arguments``."""
        definition = self.original_definition
        arguments = tuple(type_arguments)
        if len(arguments) != len(definition.type_parameters):
            raise ValueError(
                f"{definition.qualified_name} takes {len(definition.type_parameters)} "
                f"type arguments, got {len(arguments)}"
            )
        mapping: Dict[str, TypeRef] = dict(zip(definition.type_parameters, arguments))
        constructed = TypeSymbol(
            name=definition.name,
            qualified_name=definition.qualified_name,
            kind=definition.kind,
            module_name=definition.module_name,
            type_parameters=definition.type_parameters,
            bases=[b.substitute(mapping) for b in definition.bases],
            attributes=definition.attributes,
            syntax=definition.syntax,
            definition=definition,
            type_arguments=arguments,
        )
        constructed.methods = [m.substitute(constructed, mapping) for m in definition.methods]
        return constructed

    def _key(self) -> Tuple[str, Tuple[TypeRef, ...]]:
        return (self.qualified_name, self.type_arguments)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TypeSymbol):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __str__(self) -> str:
        # Unbound definitions print bare.
        if not self._type_arguments:
            return self.qualified_name
        return f"{self.qualified_name}[{', '.join(str(a) for a in self.type_arguments)}]"

    def __repr__(self) -> str:
        return f"TypeSymbol({str(self)}, {self.kind.value})"


class MethodSymbol:
    """A method declared on a type."""

    def __init__(
        self,
        name: str,
        containing_type: TypeSymbol,
        parameters: Sequence[ParameterSymbol] = (),
        attributes: Sequence[AttributeData] = (),
        declarations: Sequence[cst.FunctionDef] = (),
        is_abstract: bool = False,
        has_body: bool = True,
        definition: Optional["MethodSymbol"] = None,
    ) -> None:
        self.name = name
        self.containing_type = containing_type
        self.parameters: Tuple[ParameterSymbol, ...] = tuple(parameters)
        self.attributes: Tuple[AttributeData, ...] = tuple(attributes)
        self.declarations: Tuple[cst.FunctionDef, ...] = tuple(declarations)
        self.is_abstract = is_abstract
        self.has_body = has_body
        self.definition = definition

    @property
    def original_definition(self) -> "MethodSymbol":
        return self.definition if self.definition is not None else self

    def has_attribute(self, name: str) -> bool:
        return any(a.name == name for a in self.attributes)

    @property
    def is_static(self) -> bool:
        return self.has_attribute("staticmethod")

    @property
    def is_final(self) -> bool:
        return self.has_attribute("final")

    @property
    def is_constructor(self) -> bool:
        return self.name in ("__init__", "__new__")

    @property
    def is_virtual(self) -> bool:
        """True when subclasses may override this method and it has its own body."""
        return (
            not self.containing_type.is_interface
            and self.has_body
            and not self.is_abstract
            and not self.is_static
            and not self.is_final
            and not self.is_constructor
        )

    @property
    def value_parameters(self) -> Tuple[ParameterSymbol, ...]:
        """Parameters without the implicit receiver (``self``/``cls``)."""
        if self.is_static or not self.parameters:
            return self.parameters
        return self.parameters[1:]

    def substitute(
        self, containing_type: TypeSymbol, mapping: Mapping[str, TypeRef]
    ) -> "MethodSymbol":
        return MethodSymbol(
            name=self.name,
            containing_type=containing_type,
            parameters=[p.substitute(mapping) for p in self.parameters],
            attributes=self.attributes,
            declarations=self.declarations,
            is_abstract=self.is_abstract,
            has_body=self.has_body,
            definition=self.original_definition,
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MethodSymbol):
            return NotImplemented
        return self.name == other.name and self.containing_type == other.containing_type

    def __hash__(self) -> int:
        return hash((self.name, self.containing_type))

    def __str__(self) -> str:
        return f"{self.containing_type}.{self.name}"

    def __repr__(self) -> str:
        return f"MethodSymbol({str(self)})"


class ConstructorSignature:
    """One callable signature of an exception type's constructor."""

    __slots__ = ("type_name", "parameters")

    def __init__(self, type_name: str, parameters: Sequence[ParameterSymbol] = ()) -> None:
        self.type_name = type_name
        self.parameters: Tuple[ParameterSymbol, ...] = tuple(parameters)

    @property
    def named_parameters(self) -> Tuple[ParameterSymbol, ...]:
        return tuple(p for p in self.parameters if not p.is_variadic)

    def __repr__(self) -> str:
        return f"ConstructorSignature({self.type_name}({', '.join(p.name for p in self.parameters)}))"
