"""
symbols/project_index.py

LibCST-based host: indexes Python source into the symbol model and answers
the ``SymbolFacts`` queries the analysis core needs.

Notes:
- Only module-level classes are indexed; nested classes are ignored.
- Names resolve within the referencing module first, then project-wide by
  simple name. Ambiguous names resolve to nothing.
- Overriding follows the C3 linearization of resolved bases.
"""

from __future__ import annotations

import fnmatch
import logging
from collections import OrderedDict
from pathlib import Path
from typing import Dict, Iterator, List, Mapping, Optional, Sequence, Set, Tuple

import libcst as cst
from libcst.metadata import MetadataWrapper, PositionProvider

from ..config import ContractFixConfig
from ..errors import SourceParseError
from .model import (
    AttributeData,
    ConstructorSignature,
    MethodSymbol,
    ParameterKind,
    ParameterSymbol,
    TypeKind,
    TypeRef,
    TypeSymbol,
    dotted_name,
)

logger = logging.getLogger(__name__)

_NON_TYPE_BASES = {"Generic", "Protocol", "object"}
_TYPEVAR_FACTORIES = {"TypeVar", "ParamSpec", "TypeVarTuple"}


class SourceModule:
    """A parsed source file and its position metadata."""

    def __init__(self, path: str, module_name: str, source: str, module: cst.Module) -> None:
        self.path = path
        self.module_name = module_name
        self.source = source
        self.module = module
        # Keep node identity: findings refer to nodes of ``module`` itself.
        self.wrapper = MetadataWrapper(module, unsafe_skip_copy=True)
        self._positions = None

    def position(self, node: cst.CSTNode) -> Tuple[int, int]:
        """1-based line and 0-based column of ``node``."""
        if self._positions is None:
            self._positions = self.wrapper.resolve(PositionProvider)
        code_range = self._positions.get(node)
        if code_range is None:
            return (0, 0)
        return (code_range.start.line, code_range.start.column)

    def __repr__(self) -> str:
        return f"SourceModule({self.path})"


def module_name_for_path(path: str) -> str:
    parts = list(Path(path).with_suffix("").parts)
    if parts and parts[-1] == "__init__":
        parts = parts[:-1]
    return ".".join(p for p in parts if p not in ("", "."))


def parse_source(path: str, source: str) -> SourceModule:
    """Parse ``source``; raises SourceParseError on invalid syntax."""
    try:
        module = cst.parse_module(source)
    except cst.ParserSyntaxError as e:
        raise SourceParseError(path, e.message, e.raw_line) from e
    return SourceModule(path, module_name_for_path(path), source, module)


def is_stub_body(body: cst.BaseSuite) -> bool:
    """True when a body holds only a docstring, ``...`` or ``pass``."""
    if isinstance(body, cst.SimpleStatementSuite):
        statements = list(body.body)
    else:
        statements = []
        for stmt in body.body:
            if not isinstance(stmt, cst.SimpleStatementLine):
                return False
            statements.extend(stmt.body)

    for small in statements:
        if isinstance(small, cst.Pass):
            continue
        if isinstance(small, cst.Expr) and isinstance(
            small.value, (cst.Ellipsis, cst.SimpleString, cst.ConcatenatedString)
        ):
            continue
        return False
    return True


def read_parameters(params: cst.Parameters) -> List[ParameterSymbol]:
    """Convert LibCST parameters into ParameterSymbols in declaration order."""

    def _symbol(param: cst.Param, kind: ParameterKind) -> ParameterSymbol:
        annotation = None
        if param.annotation is not None:
            annotation = TypeRef.from_expression(param.annotation.annotation)
        return ParameterSymbol(param.name.value, annotation, kind, param.default is not None)

    result = [_symbol(p, ParameterKind.POSITIONAL) for p in params.posonly_params]
    result.extend(_symbol(p, ParameterKind.POSITIONAL) for p in params.params)
    if isinstance(params.star_arg, cst.Param):
        result.append(_symbol(params.star_arg, ParameterKind.VAR_POSITIONAL))
    result.extend(_symbol(p, ParameterKind.KEYWORD_ONLY) for p in params.kwonly_params)
    if params.star_kwarg is not None:
        result.append(_symbol(params.star_kwarg, ParameterKind.VAR_KEYWORD))
    return result


def callable_arities(parameters: Sequence[ParameterSymbol]) -> List[Tuple[ParameterSymbol, ...]]:
    """
    Parameter lists a positional call can bind, shortest first.

    ``(param_name, message=None)`` yields ``(param_name,)`` and
    ``(param_name, message)``. Defaulted keyword-only parameters are never bound.
    """
    skipped = {
        id(p) for p in parameters if p.has_default and p.kind is ParameterKind.KEYWORD_ONLY
    }
    defaulted = [p for p in parameters if p.has_default and p.kind is ParameterKind.POSITIONAL]
    arities = []
    for count in range(len(defaulted) + 1):
        omitted = skipped | {id(p) for p in defaulted[count:]}
        arities.append(tuple(p for p in parameters if id(p) not in omitted))
    return arities


def _read_attributes(decorators: Sequence[cst.Decorator]) -> List[AttributeData]:
    attributes = []
    for decorator in decorators:
        data = AttributeData.from_decorator(decorator)
        if data is not None:
            attributes.append(data)
    return attributes


def _c3_merge(sequences: List[List[TypeSymbol]]) -> Optional[List[TypeSymbol]]:
    result: List[TypeSymbol] = []
    pending = [list(s) for s in sequences if s]
    while pending:
        for seq in pending:
            head = seq[0]
            if not any(head in other[1:] for other in pending):
                break
        else:
            return None
        result.append(head)
        pending = [[t for t in seq if t != head] for seq in pending]
        pending = [seq for seq in pending if seq]
    return result


class ProjectIndex:
    """Symbol index of a Python project, implementing ``SymbolFacts``."""

    def __init__(self, config: Optional[ContractFixConfig] = None) -> None:
        self.config = config or ContractFixConfig.default()
        self.modules: "OrderedDict[str, SourceModule]" = OrderedDict()
        self.skipped: Dict[str, str] = {}
        self._types: Dict[str, TypeSymbol] = {}
        self._types_by_simple_name: Dict[str, List[TypeSymbol]] = {}
        self._methods_by_node: Dict[int, MethodSymbol] = {}

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def from_sources(
        cls, sources: Mapping[str, str], config: Optional[ContractFixConfig] = None
    ) -> "ProjectIndex":
        index = cls(config)
        for path, source in sources.items():
            index.add_source(path, source)
        return index

    @classmethod
    def from_path(cls, root: Path, config: Optional[ContractFixConfig] = None) -> "ProjectIndex":
        index = cls(config)
        root = Path(root)
        for file_path in index._iter_python_files(root):
            try:
                source = file_path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as e:
                logger.warning(f"Skipping unreadable file {file_path}: {e}")
                index.skipped[str(file_path)] = str(e)
                continue
            rel = file_path.relative_to(root) if root.is_dir() else Path(file_path.name)
            index.add_source(str(rel), source, file_path=str(file_path))
        logger.info(
            f"Indexed {len(index.modules)} modules, {len(index._types)} types "
            f"({len(index.skipped)} skipped)"
        )
        return index

    def _iter_python_files(self, root: Path) -> Iterator[Path]:
        if root.is_file():
            yield root
            return

        settings = self.config.analysis_settings
        for file_path in sorted(root.rglob("*.py")):
            rel = file_path.relative_to(root).as_posix()
            if not any(fnmatch.fnmatch(rel, p) or fnmatch.fnmatch(f"/{rel}", p)
                       for p in settings.include_patterns):
                continue
            if any(fnmatch.fnmatch(rel, p) or fnmatch.fnmatch(f"/{rel}", p)
                   for p in settings.exclude_patterns):
                logger.debug(f"Excluded by pattern: {rel}")
                continue
            yield file_path

    def add_source(
        self, path: str, source: str, file_path: Optional[str] = None
    ) -> Optional[SourceModule]:
        """Parse and index one module. Unparsable sources are skipped."""
        try:
            source_module = parse_source(path, source)
        except SourceParseError as e:
            logger.warning(str(e))
            self.skipped[file_path or path] = e.reason
            return None

        if file_path is not None:
            source_module.path = file_path
        self.modules[source_module.path] = source_module
        self._index_module(source_module)
        return source_module

    def _index_module(self, source_module: SourceModule) -> None:
        type_vars = self._collect_type_vars(source_module.module)
        for stmt in source_module.module.body:
            if isinstance(stmt, cst.ClassDef):
                type_symbol = self._build_type(stmt, source_module.module_name, type_vars)
                self._types[type_symbol.qualified_name] = type_symbol
                self._types_by_simple_name.setdefault(type_symbol.name, []).append(type_symbol)

    @staticmethod
    def _collect_type_vars(module: cst.Module) -> Set[str]:
        names: Set[str] = set()
        for stmt in module.body:
            if not isinstance(stmt, cst.SimpleStatementLine):
                continue
            for small in stmt.body:
                if not isinstance(small, cst.Assign) or len(small.targets) != 1:
                    continue
                target = small.targets[0].target
                if not isinstance(target, cst.Name) or not isinstance(small.value, cst.Call):
                    continue
                factory = dotted_name(small.value.func)
                if factory and factory.rsplit(".", 1)[-1] in _TYPEVAR_FACTORIES:
                    names.add(target.value)
        return names

    def _build_type(self, node: cst.ClassDef, module_name: str, type_vars: Set[str]) -> TypeSymbol:
        kind = TypeKind.CLASS
        explicit_parameters: Optional[List[str]] = None
        bases: List[TypeRef] = []

        for arg in node.bases:
            if arg.keyword is not None or arg.star:
                continue
            ref = TypeRef.from_expression(arg.value)
            if ref is None:
                continue
            if ref.simple_name == "Protocol":
                kind = TypeKind.INTERFACE
            if ref.simple_name in ("Generic", "Protocol") and ref.arguments:
                explicit_parameters = [a.name for a in ref.arguments]
            if ref.simple_name in _NON_TYPE_BASES:
                continue
            bases.append(ref)

        type_parameters: List[str] = []
        pep695 = getattr(node, "type_parameters", None)
        if pep695 is not None:
            type_parameters = [tp.param.name.value for tp in pep695.params]
        elif explicit_parameters is not None:
            type_parameters = explicit_parameters
        else:
            for base in bases:
                self._collect_parameters(base, type_vars, type_parameters)

        name = node.name.value
        type_symbol = TypeSymbol(
            name=name,
            qualified_name=f"{module_name}.{name}" if module_name else name,
            kind=kind,
            module_name=module_name,
            type_parameters=type_parameters,
            bases=bases,
            attributes=_read_attributes(node.decorators),
            syntax=node,
        )
        type_symbol.methods = self._build_methods(node, type_symbol)
        return type_symbol

    def _collect_parameters(self, ref: TypeRef, type_vars: Set[str], out: List[str]) -> None:
        for arg in ref.arguments:
            if not arg.arguments and arg.name in type_vars and arg.name not in out:
                out.append(arg.name)
            self._collect_parameters(arg, type_vars, out)

    def _build_methods(self, node: cst.ClassDef, owner: TypeSymbol) -> List[MethodSymbol]:
        if not isinstance(node.body, cst.IndentedBlock):
            return []

        groups: "OrderedDict[str, List[cst.FunctionDef]]" = OrderedDict()
        for stmt in node.body.body:
            if isinstance(stmt, cst.FunctionDef):
                groups.setdefault(stmt.name.value, []).append(stmt)

        methods = []
        for name, declarations in groups.items():
            implementations = [
                d for d in declarations
                if not any(a.name == "overload" for a in _read_attributes(d.decorators))
            ]
            primary = implementations[-1] if implementations else declarations[-1]
            attributes = _read_attributes(primary.decorators)
            method = MethodSymbol(
                name=name,
                containing_type=owner,
                parameters=read_parameters(primary.params),
                attributes=attributes,
                declarations=declarations,
                is_abstract=owner.is_interface or any(a.name == "abstractmethod" for a in attributes),
                has_body=not is_stub_body(primary.body),
            )
            for declaration in declarations:
                self._methods_by_node[id(declaration)] = method
            methods.append(method)
        return methods

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def module_named(self, module_name: str) -> Optional[SourceModule]:
        for source_module in self.modules.values():
            if source_module.module_name == module_name:
                return source_module
        return None

    def get_type(self, qualified_name: str) -> Optional[TypeSymbol]:
        return self._types.get(qualified_name)

    def resolve_type(self, ref: TypeRef, module_name: Optional[str] = None) -> Optional[TypeSymbol]:
        candidates = self._types_by_simple_name.get(ref.simple_name, [])
        if "." in ref.name:
            candidates = [
                c for c in candidates
                if c.qualified_name == ref.name or c.qualified_name.endswith("." + ref.name)
            ]

        definition = None
        if module_name is not None:
            local = [c for c in candidates if c.module_name == module_name]
            if len(local) == 1:
                definition = local[0]
        if definition is None:
            if len(candidates) == 1:
                definition = candidates[0]
            elif candidates:
                logger.debug(f"Ambiguous type reference {ref} from {module_name}")
                return None
            else:
                return None

        if not ref.arguments:
            return definition
        if len(ref.arguments) != len(definition.type_parameters):
            logger.debug(f"Type argument count mismatch for {ref}")
            return None
        return definition.construct(ref.arguments)

    def construct(self, definition: TypeSymbol, type_arguments: Sequence[TypeRef]) -> TypeSymbol:
        return definition.construct(type_arguments)

    def direct_bases(self, type_symbol: TypeSymbol) -> List[TypeSymbol]:
        bases = []
        for ref in type_symbol.bases:
            resolved = self.resolve_type(ref, type_symbol.module_name)
            if resolved is not None and resolved not in bases:
                bases.append(resolved)
        return bases

    def mro(self, type_symbol: TypeSymbol) -> List[TypeSymbol]:
        """Method resolution order, starting with ``type_symbol`` itself."""
        return self._linearize(type_symbol, ())

    def _linearize(self, type_symbol: TypeSymbol, visiting: Tuple[str, ...]) -> List[TypeSymbol]:
        if type_symbol.qualified_name in visiting:
            logger.debug(f"Inheritance cycle through {type_symbol.qualified_name}")
            return [type_symbol]
        visiting = visiting + (type_symbol.qualified_name,)

        bases = self.direct_bases(type_symbol)
        linearized = [self._linearize(b, visiting) for b in bases]
        merged = _c3_merge(linearized + [bases])
        if merged is None:
            logger.debug(f"Inconsistent MRO for {type_symbol}; using depth-first order")
            merged = []
            for seq in linearized:
                for t in seq:
                    if t not in merged:
                        merged.append(t)
        return [type_symbol] + merged

    def all_interfaces(self, type_symbol: TypeSymbol) -> List[TypeSymbol]:
        return [t for t in self.mro(type_symbol)[1:] if t.is_interface]

    def overridden_method(self, method: MethodSymbol) -> Optional[MethodSymbol]:
        owner = method.containing_type
        if owner.is_interface or method.is_constructor or method.is_static:
            return None
        for base in self.mro(owner)[1:]:
            if base.is_interface:
                continue
            found = base.get_members(method.name)
            if found:
                return found[0]
        return None

    def find_implementation_for_interface_member(
        self, type_symbol: TypeSymbol, interface_method: MethodSymbol
    ) -> Optional[MethodSymbol]:
        if type_symbol.is_interface:
            return None
        if interface_method.containing_type not in self.all_interfaces(type_symbol):
            return None
        for candidate in self.mro(type_symbol):
            if candidate.is_interface:
                continue
            found = candidate.get_members(interface_method.name)
            if found:
                return found[0]
        return None

    def method_for_declaration(self, node: cst.FunctionDef) -> Optional[MethodSymbol]:
        return self._methods_by_node.get(id(node))

    def constructors(
        self, ref: TypeRef, module_name: Optional[str] = None
    ) -> List[ConstructorSignature]:
        type_symbol = self.resolve_type(ref, module_name)
        if type_symbol is not None:
            for candidate in self.mro(type_symbol):
                if candidate.is_interface:
                    continue
                found = candidate.get_members("__init__")
                if found:
                    return self._signatures(type_symbol.name, found[0])
        name = type_symbol.name if type_symbol is not None else ref.simple_name
        # Builtin exceptions accept no argument or a single message.
        return [
            ConstructorSignature(name, ()),
            ConstructorSignature(name, (ParameterSymbol("message", TypeRef("str")),)),
        ]

    @staticmethod
    def _signatures(type_name: str, init: MethodSymbol) -> List[ConstructorSignature]:
        overloads = [
            d for d in init.declarations
            if any(a.name == "overload" for a in _read_attributes(d.decorators))
        ]
        if overloads:
            declared = [read_parameters(d.params)[1:] for d in overloads]
        else:
            declared = [list(init.value_parameters)]

        signatures: List[ConstructorSignature] = []
        seen: Set[Tuple[str, ...]] = set()
        for parameters in declared:
            for arity in callable_arities(parameters):
                key = tuple(p.name for p in arity)
                if key in seen:
                    continue
                seen.add(key)
                signatures.append(ConstructorSignature(type_name, arity))
        return signatures

    def is_subtype(self, ref: TypeRef, base_name: str, module_name: Optional[str] = None) -> bool:
        if ref.simple_name == base_name:
            return True
        type_symbol = self.resolve_type(ref, module_name)
        if type_symbol is None:
            return False
        for candidate in self.mro(type_symbol):
            if candidate.name == base_name:
                return True
            if any(b.simple_name == base_name for b in candidate.bases):
                return True
        return False
