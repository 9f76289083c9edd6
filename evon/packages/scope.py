# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Identifier binding for type declarations.

This is the sliver of Go type checking the generator relies on: every
identifier inside a type expression is bound to what it names (a type of this
package, a type of an imported package, an imported package, a type parameter
or a predeclared type). Identifiers that name nothing get a load-phase
`undefined: X` diagnostic and stay unbound, which the resolver later reports as
an unresolvable type.

Lookup order follows Go's scopes: type parameters, then package scope, then
file scope (imports, dot imports), then the universe.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from evon.core.diagnostics import DiagnosticCollector, DiagnosticKind
from evon.parser.ast import (
	Binding,
	BindingKind,
	File,
	Ident,
	SelectorExpr,
	TypeExpr,
)
from .program import Module

UNIVERSE_TYPES = frozenset(
	{
		"any",
		"bool",
		"byte",
		"comparable",
		"complex64",
		"complex128",
		"error",
		"float32",
		"float64",
		"int",
		"int8",
		"int16",
		"int32",
		"int64",
		"rune",
		"string",
		"uint",
		"uint8",
		"uint16",
		"uint32",
		"uint64",
		"uintptr",
	}
)


@dataclass
class FileScope:
	"""Names a single file brings into scope through its imports."""

	imports: Dict[str, str] = field(default_factory=dict)  # local name -> import path
	dot_imports: List[str] = field(default_factory=list)


class ScopeBinder:
	"""
	Binds the type expressions of one package.

	`package_name` maps an import path to its package clause (the default local
	name of an import); `load` returns a loaded package, used only for dot
	imports whose exported names must be known.
	"""

	def __init__(
		self,
		module: Module,
		*,
		package_name: Callable[[str], str],
		load: Callable[[str], Optional[Module]],
		diagnostics: DiagnosticCollector,
	) -> None:
		self.module = module
		self._package_name = package_name
		self._load = load
		self._diagnostics = diagnostics

	def bind(self) -> None:
		for f in self.module.files:
			scope = self.file_scope(f)
			for decl in f.type_decls():
				for spec in decl.specs:
					tparams = {n.name for tp in spec.type_params for n in tp.names}
					for tp in spec.type_params:
						for n in tp.names:
							n.binding = Binding(BindingKind.TYPE_PARAM, self.module.path, n.name)
						self._bind_expr(tp.constraint, scope, tparams)
					self._bind_expr(spec.type, scope, tparams)

	def file_scope(self, f: File) -> FileScope:
		scope = FileScope()
		for spec in f.imports:
			if spec.name == "_":
				continue
			if spec.name == ".":
				scope.dot_imports.append(spec.path)
				continue
			local = spec.name or self._package_name(spec.path)
			scope.imports[local] = spec.path
		return scope

	def _bind_expr(self, expr: TypeExpr, scope: FileScope, tparams: set) -> None:
		if isinstance(expr, Ident):
			self._bind_ident(expr, scope, tparams)
			return
		if isinstance(expr, SelectorExpr):
			self._bind_selector(expr, scope)
			return
		for child in expr.children():
			self._bind_expr(child, scope, tparams)

	def _bind_ident(self, ident: Ident, scope: FileScope, tparams: set) -> None:
		name = ident.name
		if name in tparams:
			ident.binding = Binding(BindingKind.TYPE_PARAM, self.module.path, name)
			return
		if name in self.module.types:
			ident.binding = Binding(BindingKind.TYPE, self.module.path, name)
			return
		if name in scope.imports:
			self._undefined(ident, f"use of package {name} without selector")
			return
		for path in scope.dot_imports:
			dep = self._load(path)
			if dep is not None and name in dep.exported_types():
				ident.binding = Binding(BindingKind.TYPE, path, name)
				return
		if name in self.module.values:
			self._undefined(ident, f"{name} is not a type")
			return
		if name in UNIVERSE_TYPES:
			ident.binding = Binding(BindingKind.BUILTIN, "", name)
			return
		self._undefined(ident, f"undefined: {name}")

	def _bind_selector(self, sel: SelectorExpr, scope: FileScope) -> None:
		path = scope.imports.get(sel.x.name)
		if path is None:
			self._undefined(sel.x, f"undefined: {sel.x.name}")
			return
		sel.x.binding = Binding(BindingKind.PACKAGE, path, sel.x.name)
		sel.sel.binding = Binding(BindingKind.TYPE, path, sel.sel.name)

	def _undefined(self, ident: Ident, message: str) -> None:
		self._diagnostics.add(DiagnosticKind.UNDEFINED_NAME, ident.span, message)


__all__ = ["FileScope", "ScopeBinder", "UNIVERSE_TYPES"]
