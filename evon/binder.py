# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Declaration binding: the analysis pass over the main package.

For every file, type declarations are visited in source order while a
`CommentCursor` follows along the file's comment groups. A declaration's
effective annotation is the one on its own doc comment, or else the one on
the enclosing `type ( ... )` group:

    // @evon(lock)
    type (
        OpenHandler  func(path string)
        // @evon(spawn)
        CloseHandler func(path string)   // (spawn), not (lock)
    )

Each annotated declaration must be named with the handler suffix, and must
resolve to a func or interface type; its signatures are extracted and the
foreign identifiers they mention are recorded for import rewriting. Problems
are collected per declaration and never stop the pass.
"""

from __future__ import annotations

from typing import Dict, Optional, Set

from evon.annotation import MISPLACED_MESSAGE, Annotation, CommentCursor
from evon.config import GeneratorConfig
from evon.core.diagnostics import DiagnosticCollector, DiagnosticKind
from evon.flatten import EmbeddingError, InterfaceFlattener
from evon.imports import ImportRegistry, ImportTier
from evon.model import (
	AnalysisResult,
	DeclarationRecord,
	EventShape,
	ParamGroup,
	ResultGroup,
	Signature,
)
from evon.packages.program import Program
from evon.parser.ast import (
	BindingKind,
	File,
	FuncType,
	Ident,
	InterfaceType,
	SelectorExpr,
	TypeExpr,
	TypeExprKind,
	TypeSpec,
	walk,
)
from evon.render.model import generated_names
from evon.resolver import TypeResolver

SYNC_PATH = "sync"


class HandlerBinder:
	def __init__(
		self,
		program: Program,
		*,
		config: Optional[GeneratorConfig] = None,
		diagnostics: Optional[DiagnosticCollector] = None,
	) -> None:
		self.program = program
		self.config = config or GeneratorConfig()
		self.diagnostics = diagnostics if diagnostics is not None else DiagnosticCollector()
		self.resolver = TypeResolver(program)
		self.imports = ImportRegistry(program.package_name)
		self.flattener = InterfaceFlattener(self.resolver, program.main.path, self.extract_func)
		self.result = AnalysisResult(package=program.main.name, package_path=program.main.path)

	@property
	def main_path(self) -> str:
		return self.program.main.path

	def bind_package(self) -> AnalysisResult:
		"""Bind every file of the main package, then finalize imports if nothing failed."""
		for f in self.program.main.files:
			self.bind_file(f)
		if self.diagnostics:
			return self.result

		if self.result.need_sync:
			self.imports.require(SYNC_PATH, SYNC_PATH, tier=ImportTier.INTERNAL)
		reserved: Set[str] = self.program.main.top_level_names()
		reserved |= generated_names((ev for _, ev in self.result.events()), self.config)
		self.result.imports = self.imports.finalize(reserved)
		sync = self.imports.get(SYNC_PATH)
		if sync is not None:
			self.result.sync_alias = sync.alias
		return self.result

	def bind_file(self, f: File) -> None:
		cursor = CommentCursor(f.comments, self.diagnostics)
		for decl in f.type_decls():
			group_ann, _ = cursor.advance_to(decl.doc)
			group_record: Optional[DeclarationRecord] = None
			for spec in decl.specs:
				own_ann, own_failed = cursor.advance_to(spec.doc)
				if own_failed:
					# Already reported; the group annotation does not stand in for it.
					continue
				ann = own_ann if own_ann is not None else group_ann
				if ann is None:
					continue

				self.check_name(spec)
				event = self.extract_event(ann, spec)
				if event is None:
					continue

				if own_ann is not None:
					record = DeclarationRecord(annotation=ann)
					self.result.declarations.append(record)
				else:
					if group_record is None:
						group_record = DeclarationRecord(annotation=ann)
						self.result.declarations.append(group_record)
					record = group_record
				record.events.append(event)
				if ann.policy.needs_sync:
					self.result.need_sync = True
		cursor.drain()

	def check_name(self, spec: TypeSpec) -> bool:
		name = spec.name.name
		suffix = self.config.handler_suffix
		if name.endswith(suffix) and len(name) > len(suffix):
			return True
		self.diagnostics.add(
			DiagnosticKind.NAMING_VIOLATION,
			spec.name.span,
			f'Handler type "{name}" name must have suffix "{suffix}" (and be longer than that)',
		)
		return False

	def extract_event(self, ann: Annotation, spec: TypeSpec) -> Optional[EventShape]:
		name = spec.name.name
		if spec.type_params:
			self.diagnostics.add(
				DiagnosticKind.UNSUPPORTED_SHAPE,
				spec.name.span,
				f'Handler type "{name}" must not have type parameters',
			)
			return None

		res = self.resolver.resolve(self.main_path, spec.type)
		if res is None:
			self._unresolved(spec)
			return None

		event = EventShape(name=name, span=spec.name.span, module=res.module)
		if res.kind is TypeExprKind.FUNC:
			event.signatures.append(self.extract_func(res.module, "", res.shape))  # type: ignore[arg-type]
			return event
		if res.kind is TypeExprKind.INTERFACE:
			iface: InterfaceType = res.shape  # type: ignore[assignment]
			try:
				event.signatures = self.flattener.flatten(res.module, iface)
			except EmbeddingError as err:
				if err.kind is DiagnosticKind.UNRESOLVED_TYPE:
					self._unresolved(spec, notes=[f"{(err.loc or spec.name.span).format()}: {err}"])
				else:
					self.diagnostics.add(
						err.kind,
						err.loc or spec.name.span,
						f'Interface type "{name}": {err}',
					)
				return None
			if not event.signatures:
				self.diagnostics.add(
					DiagnosticKind.EMPTY_INTERFACE,
					spec.name.span,
					f'Interface type "{name}" has no usable methods',
				)
				return None
			return event

		self.diagnostics.add(DiagnosticKind.UNSUPPORTED_SHAPE, ann.span, MISPLACED_MESSAGE)
		return None

	def _unresolved(self, spec: TypeSpec, *, notes=()) -> None:
		# Load problems of the imported packages ride along as notes.
		self.diagnostics.add(
			DiagnosticKind.UNRESOLVED_TYPE,
			spec.name.span,
			f'Cannot resolve type "{spec.name.name}" due to compilation errors',
			notes=[*notes, *self.program.foreign_error_notes()],
		)

	def extract_func(self, module: str, name: str, ft: FuncType) -> Signature:
		"""Signature of `ft` (declared in `module`), recording its foreign references."""
		for f in ft.params:
			self._record_refs(module, f.type)
		for f in ft.results:
			self._record_refs(module, f.type)
		return Signature(
			name=name,
			params=tuple(ParamGroup.from_field(f) for f in ft.params),
			results=tuple(ResultGroup.from_field(f) for f in ft.results),
		)

	def _record_refs(self, module: str, expr: TypeExpr) -> None:
		selected: Dict[int, Ident] = {}
		for node in walk(expr):
			if isinstance(node, SelectorExpr):
				selected[id(node.sel)] = node.sel
				continue
			if not isinstance(node, Ident) or node.binding is None:
				continue
			b = node.binding
			if b.kind is BindingKind.PACKAGE:
				self.imports.record_package_ident(b.module, node)
			elif b.kind is BindingKind.TYPE and b.module != self.main_path and id(node) not in selected:
				self.imports.record_type_ident(b.module, node)


__all__ = ["HandlerBinder", "SYNC_PATH"]
