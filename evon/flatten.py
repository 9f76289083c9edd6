# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Interface flattening: embedded interfaces expanded into one method list.

Methods are taken depth-first in declaration order. A method name seen before
is skipped (the first occurrence wins), which is what makes diamond embedding
yield each method once. Unexported methods are only usable from the package
being generated, so they are kept only when the interface literal belongs to
it.

An embedding that cannot be resolved, or that resolves to something other than
an interface, fails the whole flatten: a partial method set would generate a
dispatcher that does not implement the handler interface.
"""

from __future__ import annotations

from typing import Callable, List, Optional, Set

from evon.core.diagnostics import DiagnosticKind
from evon.core.span import Span
from evon.model import Signature
from evon.parser.ast import FuncType, InterfaceType, TypeExprKind, is_exported
from evon.printer import print_type
from evon.resolver import TypeResolver

ExtractFunc = Callable[[str, str, FuncType], Signature]


class EmbeddingError(ValueError):
	"""
	An embedded element of an interface that cannot be flattened.

	`kind` is UNRESOLVED_TYPE when the embedding could not be resolved (or
	embeds itself), UNRESOLVABLE_EMBEDDING when it resolved to a non-interface.
	"""

	def __init__(self, message: str, *, kind: DiagnosticKind, loc: Optional[Span]) -> None:
		super().__init__(message)
		self.kind = kind
		self.loc = loc


class InterfaceFlattener:
	"""
	Flattens interfaces for the package `local_module`.

	`extract` turns one method into a `Signature`; it is called once per kept
	method, in output order, with the package the method was declared in.
	"""

	def __init__(self, resolver: TypeResolver, local_module: str, extract: ExtractFunc) -> None:
		self.resolver = resolver
		self.local_module = local_module
		self._extract = extract

	def flatten(self, module: str, iface: InterfaceType, seen: Optional[Set[str]] = None) -> List[Signature]:
		"""Ordered, deduplicated methods of `iface` (declared in `module`)."""
		return self._flatten(module, iface, set() if seen is None else seen, set())

	def _flatten(self, module: str, iface: InterfaceType, seen: Set[str], in_progress: Set[int]) -> List[Signature]:
		if id(iface) in in_progress:
			raise EmbeddingError(
				"Interface embeds itself",
				kind=DiagnosticKind.UNRESOLVED_TYPE,
				loc=iface.span,
			)
		in_progress.add(id(iface))

		out: List[Signature] = []
		for elem in iface.elems:
			if elem.names:
				name = elem.names[0].name
				if not (is_exported(name) or module == self.local_module):
					continue
				if name in seen:
					continue
				seen.add(name)
				out.append(self._extract(module, name, elem.type))  # type: ignore[arg-type]
				continue

			res = self.resolver.resolve(module, elem.type)
			if res is None:
				raise EmbeddingError(
					f'Cannot resolve embedded type "{print_type(elem.type)}"',
					kind=DiagnosticKind.UNRESOLVED_TYPE,
					loc=elem.span,
				)
			if res.kind is not TypeExprKind.INTERFACE:
				raise EmbeddingError(
					f'Embedded type "{print_type(elem.type)}" is not an interface',
					kind=DiagnosticKind.UNRESOLVABLE_EMBEDDING,
					loc=elem.span,
				)
			out.extend(self._flatten(res.module, res.shape, seen, in_progress))  # type: ignore[arg-type]

		in_progress.discard(id(iface))
		return out


__all__ = ["EmbeddingError", "ExtractFunc", "InterfaceFlattener"]
