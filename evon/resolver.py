# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Type resolution: follow a type reference to the literal type it stands for.

Handler types are often not literal `func(...)` / `interface{...}` types but
names for them, possibly several hops away and in another package:

    type LoginHandler = auth.Callback   // auth: type Callback hooks.Func

Resolution chases such chains. The rules, by expression kind:

* IDENT: a type declared in the package being looked at (any file, exported or
  not) resolves to its declared type in that package. A type from another
  package is looked up among that package's exported top-level declarations
  and resolves in that package's context.
* QUALIFIED (`pkg.T`): resolve `T` as above.
* PAREN: unwrap.
* anything else is terminal and is returned with the package it was found in.

`None` means the chain could not be followed (unbound identifier, missing
package, unexported foreign name, alias cycle); the binder reports it as a
type that cannot be resolved due to compilation errors.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Set, Tuple

from evon.parser.ast import (
	Binding,
	BindingKind,
	Field,
	FuncType,
	Ident,
	InterfaceType,
	TypeExpr,
	TypeExprKind,
)
from evon.packages.program import Program

UNIVERSE = ""


def _universe_error() -> InterfaceType:
	string = Ident("string", binding=Binding(BindingKind.BUILTIN, UNIVERSE, "string"))
	method = FuncType(params=[], results=[Field(names=[], type=string)])
	return InterfaceType(elems=[Field(names=[Ident("Error")], type=method)])


# The predeclared interfaces, as if declared in a package with path "".
UNIVERSE_INTERFACES = {
	"error": _universe_error(),
	"any": InterfaceType(elems=[]),
}


@dataclass(frozen=True)
class Resolution:
	"""A terminal type and the import path of the package it belongs to."""

	module: str
	shape: TypeExpr

	@property
	def kind(self) -> TypeExprKind:
		return self.shape.kind


class TypeResolver:
	def __init__(self, program: Program) -> None:
		self.program = program

	def resolve(self, module: str, expr: TypeExpr) -> Optional[Resolution]:
		"""Resolve `expr`, written in package `module`, to its terminal type."""
		return self._resolve(module, expr, set())

	def _resolve(self, module: str, expr: TypeExpr, visiting: Set[Tuple[str, str]]) -> Optional[Resolution]:
		kind = expr.kind
		if kind is TypeExprKind.IDENT:
			return self._resolve_ident(module, expr, visiting)  # type: ignore[arg-type]
		if kind is TypeExprKind.QUALIFIED:
			return self._resolve_ident(module, expr.sel, visiting)  # type: ignore[attr-defined]
		if kind is TypeExprKind.PAREN:
			return self._resolve(module, expr.x, visiting)  # type: ignore[attr-defined]
		return Resolution(module, expr)

	def _resolve_ident(self, module: str, ident: Ident, visiting: Set[Tuple[str, str]]) -> Optional[Resolution]:
		b = ident.binding
		if b is None:
			return None
		if b.kind is BindingKind.BUILTIN:
			iface = UNIVERSE_INTERFACES.get(b.name)
			if iface is not None:
				return Resolution(UNIVERSE, iface)
			return Resolution(UNIVERSE, ident)
		if b.kind is BindingKind.TYPE_PARAM:
			return Resolution(module, ident)
		if b.kind is not BindingKind.TYPE:
			return None

		key = (b.module, b.name)
		if key in visiting:
			return None
		visiting.add(key)

		spec = self.lookup(module, b)
		if spec is None:
			return None
		return self._resolve(b.module, spec.type, visiting)

	def lookup(self, module: str, binding: Binding):
		"""The type spec a TYPE binding refers to, seen from package `module`."""
		target = self.program.module(binding.module)
		if target is None:
			return None
		if binding.module == module:
			return target.types.get(binding.name)
		return target.exported_types().get(binding.name)


__all__ = ["Resolution", "TypeResolver", "UNIVERSE", "UNIVERSE_INTERFACES"]
