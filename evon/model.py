# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Analysis results: what the binder hands to the render layer.

Type expressions inside signatures are the loader's own nodes (not copies).
Import finalization rewrites their identifiers in place, so after a
successful pass they print as they must appear in the generated file.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List, Optional, Tuple

from evon.annotation import Annotation
from evon.core.span import Span
from evon.parser.ast import EllipsisType, Field, TypeExpr

if TYPE_CHECKING:
	from evon.imports import ImportRecord


@dataclass(eq=False)
class ParamGroup:
	"""`a, b int`; `names` is empty for an unnamed parameter."""

	names: Tuple[str, ...]
	type_expr: TypeExpr
	variadic: bool = False

	@classmethod
	def from_field(cls, f: Field) -> "ParamGroup":
		if isinstance(f.type, EllipsisType):
			return cls(tuple(n.name for n in f.names), f.type.elt, variadic=True)
		return cls(tuple(n.name for n in f.names), f.type)


@dataclass(eq=False)
class ResultGroup:
	names: Tuple[str, ...]
	type_expr: TypeExpr

	@classmethod
	def from_field(cls, f: Field) -> "ResultGroup":
		return cls(tuple(n.name for n in f.names), f.type)


@dataclass(eq=False)
class Signature:
	"""One callable: `name` is the method name, "" for a func type itself."""

	name: str
	params: Tuple[ParamGroup, ...] = ()
	results: Tuple[ResultGroup, ...] = ()

	@property
	def variadic(self) -> bool:
		return bool(self.params) and self.params[-1].variadic


@dataclass(eq=False)
class EventShape:
	"""
	A handler type and its resolved signatures.

	`module` is the import path of the package whose literal func/interface
	type the signatures were taken from (not necessarily the package declaring
	the handler type, when it is an alias of a foreign type).
	"""

	name: str
	span: Span
	module: str
	signatures: List[Signature] = field(default_factory=list)

	@property
	def is_callable(self) -> bool:
		return len(self.signatures) == 1 and self.signatures[0].name == ""


@dataclass(eq=False)
class DeclarationRecord:
	"""An annotation and the events it produced (several for a group annotation)."""

	annotation: Annotation
	events: List[EventShape] = field(default_factory=list)


@dataclass(eq=False)
class AnalysisResult:
	package: str
	package_path: str
	declarations: List[DeclarationRecord] = field(default_factory=list)
	imports: List["ImportRecord"] = field(default_factory=list)
	need_sync: bool = False
	sync_alias: Optional[str] = None

	def events(self) -> List[Tuple[DeclarationRecord, EventShape]]:
		return [(d, e) for d in self.declarations for e in d.events]


__all__ = [
	"AnalysisResult",
	"DeclarationRecord",
	"EventShape",
	"ParamGroup",
	"ResultGroup",
	"Signature",
]
