# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Render model: the analysis result flattened into strings the emitter pastes.

Everything that needs a naming decision is decided here, so the emitter is a
pure layout step:

* parameter lists get a name for every parameter (blank and unnamed ones
  become `_1`, `_2`, ...) so the dispatcher can forward them;
* the local identifiers the emitter introduces inside generated methods are
  deduplicated against all parameter names of the event;
* generated top-level names are derived from the handler name.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Set, Tuple

from evon.config import GeneratorConfig
from evon.core.dedup import DedupSet
from evon.core.span import Span
from evon.model import AnalysisResult, EventShape, ParamGroup, ResultGroup
from evon.parser.ast import is_exported
from evon.policy import DispatchPolicy
from evon.printer import print_type

# Identifiers the emitter declares inside generated method bodies.
LOCAL_IDENTS = ("ev", "sub", "wg", "fn")

# File-level aliases for the sync types, used when a parameter named like the
# sync import would shadow it inside generated methods.
SYNC_TYPE_ALIASES = {"Mutex": "evonMutex", "WaitGroup": "evonWaitGroup"}


def title(s: str) -> str:
	return s[:1].upper() + s[1:]


def prefix_ident(p: str, s: str) -> str:
	"""
	Join `p` and `s` into one identifier that is exported exactly when `s` is.

	prefix_ident("new", "LoginEvent") == "NewLoginEvent"
	prefix_ident("new", "loginEvent") == "newLoginEvent"
	"""
	if is_exported(s):
		return title(p) + title(s)
	return p.lower() + title(s)


@dataclass(frozen=True)
class EventNames:
	"""Generated top-level names for one handler type."""

	handler: str
	base: str
	type: str
	ctor: str
	sub: str
	nop: Optional[str] = None

	def top_level(self) -> List[str]:
		out = [self.type, self.ctor, self.sub]
		if self.nop is not None:
			out.append(self.nop)
		return out


def event_names(handler: str, *, is_callable: bool, config: GeneratorConfig) -> EventNames:
	suffix = config.handler_suffix
	base = handler[: len(handler) - len(suffix)] if suffix else handler
	type_name = base + config.event_suffix
	return EventNames(
		handler=handler,
		base=base,
		type=type_name,
		ctor=prefix_ident("new", type_name),
		sub=type_name[:1].lower() + type_name[1:] + "Sub",
		nop=None if is_callable else prefix_ident("nop", handler),
	)


def generated_names(events: Iterable[EventShape], config: GeneratorConfig) -> Set[str]:
	"""Every top-level name the generated file may declare."""
	names: Set[str] = set(SYNC_TYPE_ALIASES.values())
	for ev in events:
		names.update(event_names(ev.name, is_callable=ev.is_callable, config=config).top_level())
	return names


def method_name(sig_name: str) -> str:
	"""Dispatcher method for a handler method: `Emit` for a func type, `EmitX` for method `X`."""
	if not sig_name:
		return "Emit"
	return prefix_ident("emit", sig_name)


def extract_params_args(params: Tuple[ParamGroup, ...], dedup_all: DedupSet) -> Tuple[str, str]:
	"""
	Parameter declaration list and the matching argument list.

	`func(a, _ int, _ string)` becomes `a, _1 int, _2 string` and `a, _1, _2`.
	Every final name is reserved in `dedup_all`.
	"""
	dedup = DedupSet(["_"])
	for g in params:
		for n in g.names:
			if n != "_":
				dedup.reserve(n)

	decls: List[str] = []
	args: List[str] = []
	for g in params:
		names = [n if n != "_" else dedup.resolve("_") for n in g.names] or [dedup.resolve("_")]
		for n in names:
			dedup_all.reserve(n)
		args.extend(names)
		type_text = print_type(g.type_expr)
		if g.variadic:
			type_text = "..." + type_text
		decls.append(", ".join(names) + " " + type_text)

	args_text = ", ".join(args)
	if params and params[-1].variadic:
		args_text += "..."
	return ", ".join(decls), args_text


def extract_returns(results: Tuple[ResultGroup, ...]) -> str:
	"""Result list with every result blank-named, e.g. `_ int, _, _ error`."""
	parts = []
	for g in results:
		blanks = ", ".join(["_"] * max(1, len(g.names)))
		parts.append(f"{blanks} {print_type(g.type_expr)}")
	return ", ".join(parts)


@dataclass(frozen=True)
class GenImport:
	path: str
	alias: Optional[str] = None  # None when the package name is used as is


@dataclass
class GenFunc:
	name: str
	method: str
	params: str
	args: str
	returns: str
	results: int = 0


@dataclass
class GenEvent:
	names: EventNames
	span: Span
	flags: Tuple[str, ...]
	flags_lit: str
	policy: DispatchPolicy
	is_callable: bool
	funcs: List[GenFunc] = field(default_factory=list)
	dedups: Dict[str, str] = field(default_factory=dict)


@dataclass
class GenFile:
	package: str
	imports: List[GenImport] = field(default_factory=list)
	events: List[GenEvent] = field(default_factory=list)
	handler_suffix: str = ""
	event_suffix: str = ""
	sync_alias: Optional[str] = None
	rename_sync_types: bool = False

	def sync_type(self, name: str) -> str:
		"""How generated code spells `sync.<name>`."""
		if self.rename_sync_types:
			return SYNC_TYPE_ALIASES[name]
		return f"{self.sync_alias}.{name}"


def build_gen_file(result: AnalysisResult, config: GeneratorConfig) -> GenFile:
	out = GenFile(
		package=result.package,
		handler_suffix=config.handler_suffix,
		event_suffix=config.event_suffix,
		sync_alias=result.sync_alias,
	)
	# gofmt sorts the import block by path.
	for rec in sorted(result.imports, key=lambda r: r.path):
		out.imports.append(GenImport(path=rec.path, alias=rec.explicit_alias))

	for decl, ev in result.events():
		dedup_all = DedupSet()
		funcs = []
		for sig in ev.signatures:
			params, args = extract_params_args(sig.params, dedup_all)
			funcs.append(
				GenFunc(
					name=sig.name,
					method=method_name(sig.name),
					params=params,
					args=args,
					returns=extract_returns(sig.results),
					results=sum(max(1, len(g.names)) for g in sig.results),
				)
			)
		if result.sync_alias is not None and result.sync_alias in dedup_all:
			out.rename_sync_types = True
		policy = decl.annotation.policy
		out.events.append(
			GenEvent(
				names=event_names(ev.name, is_callable=ev.is_callable, config=config),
				span=ev.span,
				flags=tuple(sorted(decl.annotation.flags)),
				flags_lit=decl.annotation.format_flags(),
				policy=policy,
				is_callable=ev.is_callable,
				funcs=funcs,
				dedups={n: dedup_all.resolve(n) for n in LOCAL_IDENTS},
			)
		)
	return out


__all__ = [
	"EventNames",
	"GenEvent",
	"GenFile",
	"GenFunc",
	"GenImport",
	"LOCAL_IDENTS",
	"SYNC_TYPE_ALIASES",
	"build_gen_file",
	"event_names",
	"extract_params_args",
	"extract_returns",
	"generated_names",
	"method_name",
	"prefix_ident",
	"title",
]
