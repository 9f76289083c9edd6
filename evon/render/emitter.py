# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Go source emission for the render model.

For each event the generated file declares:

* the event type (`LoginEvent`) holding the subscriber list;
* a subscriber record (`loginEventSub`) and a constructor (`NewLoginEvent`);
* `Sub`, returning a cancel func when the event is revocable (`unsub`);
* one emit method per handler signature (`Emit`, or `EmitX` per method `X`
  of an interface handler);
* `Pause`/`Resume` (`pause`) and an `OnPanic` hook (`catch`);
* for interface handlers, a no-op implementation (`NopLoginHandler`).

Delivery follows the dispatch policy: inline calls (sync), one goroutine per
call (spawn), or one queue drained by one goroutine per subscriber (queue).
With `wait`, emit methods block until every call has returned; with `lock`, a
mutex guards the subscriber list and serializes emits.
"""

from __future__ import annotations

from typing import List, Protocol, Sequence, Tuple

from evon.policy import DeliveryMode
from .model import GenEvent, GenFile, GenFunc

GENERATED_HEADER = "// Code generated by evon. DO NOT EDIT."

# Buffered calls per subscriber before emit blocks (queue delivery).
QUEUE_CAPACITY = 64


class Emitter(Protocol):
	"""Turns a render model into the text of the generated file."""

	def render(self, gen: GenFile) -> str:
		...


def _aligned(rows: Sequence[Tuple[str, str]], indent: str = "\t") -> List[str]:
	"""gofmt-style two-column alignment (struct fields, alias blocks)."""
	width = max(len(a) for a, _ in rows)
	return [f"{indent}{a.ljust(width)} {b}" for a, b in rows]


class GoEmitter:
	def render(self, gen: GenFile) -> str:
		out: List[str] = [GENERATED_HEADER, "", f"package {gen.package}", ""]
		out.extend(self._imports(gen))
		out.extend(self._sync_aliases(gen))
		for ev in gen.events:
			out.extend(self._event(gen, ev))
		while out and out[-1] == "":
			out.pop()
		return "\n".join(out) + "\n"

	def _imports(self, gen: GenFile) -> List[str]:
		specs = [f'{imp.alias} "{imp.path}"' if imp.alias else f'"{imp.path}"' for imp in gen.imports]
		if not specs:
			return []
		if len(specs) == 1:
			return [f"import {specs[0]}", ""]
		return ["import ("] + [f"\t{s}" for s in specs] + [")", ""]

	def _sync_aliases(self, gen: GenFile) -> List[str]:
		if not gen.rename_sync_types:
			return []
		rows = []
		if any(ev.policy.lock for ev in gen.events):
			rows.append((gen.sync_type("Mutex"), f"= {gen.sync_alias}.Mutex"))
		if any(ev.policy.wait for ev in gen.events):
			rows.append((gen.sync_type("WaitGroup"), f"= {gen.sync_alias}.WaitGroup"))
		if not rows:
			return []
		return ["type ("] + _aligned(rows) + [")", ""]

	# ---- per event ------------------------------------------------------

	def _event(self, gen: GenFile, ev: GenEvent) -> List[str]:
		n = ev.names
		p = ev.policy
		recv = ev.dedups["ev"]
		sub = ev.dedups["sub"]
		out: List[str] = []

		out.append(f"// {n.type} dispatches {n.handler} calls to its subscribers.")
		out.append(f"// Flags: {ev.flags_lit}")
		fields = []
		if p.lock:
			fields.append(("mu", gen.sync_type("Mutex")))
		fields.append(("subs", f"[]*{n.sub}"))
		if p.pause:
			fields.append(("paused", "bool"))
		out.append(f"type {n.type} struct {{")
		out.extend(_aligned(fields))
		if p.catch:
			out.append("")
			out.append("\t// OnPanic, if set, receives the value of every recovered handler panic.")
			out.append("\tOnPanic func(interface{})")
		out.append("}")
		out.append("")

		sub_fields = [("h", n.handler)]
		if p.delivery is DeliveryMode.QUEUE:
			sub_fields.append(("queue", "chan func()"))
		out.append(f"type {n.sub} struct {{")
		out.extend(_aligned(sub_fields))
		out.append("}")
		out.append("")

		out.append(f"// {n.ctor} returns a {n.type} with no subscribers.")
		out.append(f"func {n.ctor}() *{n.type} {{")
		out.append(f"\treturn &{n.type}{{}}")
		out.append("}")
		out.append("")

		out.extend(self._sub(ev, recv, sub))
		for fn in ev.funcs:
			out.extend(self._emit(gen, ev, fn, recv, sub))
		if p.pause:
			out.extend(self._pause(ev, recv, "Pause", "true", "makes emits return without calling any handler"))
			out.extend(self._pause(ev, recv, "Resume", "false", "undoes Pause"))
		if p.catch:
			out.append(f"func ({recv} *{n.type}) recoverPanic() {{")
			out.append(f"\tif r := recover(); r != nil && {recv}.OnPanic != nil {{")
			out.append(f"\t\t{recv}.OnPanic(r)")
			out.append("\t}")
			out.append("}")
			out.append("")
		if not ev.is_callable:
			out.extend(self._nop(ev))
		return out

	def _lock(self, ev: GenEvent, recv: str, indent: str = "\t") -> List[str]:
		if not ev.policy.lock:
			return []
		return [f"{indent}{recv}.mu.Lock()", f"{indent}defer {recv}.mu.Unlock()"]

	def _sub(self, ev: GenEvent, recv: str, sub: str) -> List[str]:
		n = ev.names
		p = ev.policy
		fn = ev.dedups["fn"]
		out: List[str] = []
		if p.unsub:
			out.append("// Sub subscribes h and returns a func that cancels the subscription.")
			out.append(f"func ({recv} *{n.type}) Sub(h {n.handler}) func() {{")
		else:
			out.append("// Sub subscribes h.")
			out.append(f"func ({recv} *{n.type}) Sub(h {n.handler}) {{")
		out.extend(self._lock(ev, recv))
		out.append(f"\t{sub} := &{n.sub}{{h: h}}")
		if p.delivery is DeliveryMode.QUEUE:
			out.append(f"\t{sub}.queue = make(chan func(), {QUEUE_CAPACITY})")
			out.append("\tgo func() {")
			out.append(f"\t\tfor {fn} := range {sub}.queue {{")
			out.append(f"\t\t\t{fn}()")
			out.append("\t\t}")
			out.append("\t}()")
		out.append(f"\t{recv}.subs = append({recv}.subs, {sub})")
		if p.unsub:
			out.append("\treturn func() {")
			out.extend(self._lock(ev, recv, "\t\t"))
			out.append(f"\t\tfor i, s := range {recv}.subs {{")
			out.append(f"\t\t\tif s == {sub} {{")
			out.append(f"\t\t\t\t{recv}.subs = append({recv}.subs[:i:i], {recv}.subs[i+1:]...)")
			if p.delivery is DeliveryMode.QUEUE:
				out.append(f"\t\t\t\tclose({sub}.queue)")
			out.append("\t\t\t\tbreak")
			out.append("\t\t\t}")
			out.append("\t\t}")
			out.append("\t}")
		out.append("}")
		out.append("")
		return out

	def _emit(self, gen: GenFile, ev: GenEvent, fn: GenFunc, recv: str, sub: str) -> List[str]:
		n = ev.names
		p = ev.policy
		wg = ev.dedups["wg"]
		target = f"{sub}.h" if ev.is_callable else f"{sub}.h.{fn.name}"
		call = f"{target}({fn.args})"
		# A call with results is a blank assignment (go vet unusedresult).
		stmt = call if not fn.results else ", ".join(["_"] * fn.results) + " = " + call
		out: List[str] = []

		if ev.is_callable:
			out.append(f"// {fn.method} calls every subscribed handler.")
		else:
			out.append(f"// {fn.method} calls {fn.name} on every subscribed handler.")
		out.append(f"func ({recv} *{n.type}) {fn.method}({fn.params}) {{")
		out.extend(self._lock(ev, recv))
		if p.pause:
			out.append(f"\tif {recv}.paused {{")
			out.append("\t\treturn")
			out.append("\t}")
		if p.wait:
			out.append(f"\tvar {wg} {gen.sync_type('WaitGroup')}")
		out.append(f"\tfor _, {sub} := range {recv}.subs {{")

		deferred = []
		if p.wait:
			deferred.append(f"defer {wg}.Done()")
		if p.catch:
			deferred.append(f"defer {recv}.recoverPanic()")

		if p.delivery is DeliveryMode.SYNC:
			if deferred:
				out.append("\t\tfunc() {")
				out.extend(f"\t\t\t{d}" for d in deferred)
				out.append(f"\t\t\t{stmt}")
				out.append("\t\t}()")
			else:
				out.append(f"\t\t{stmt}")
		elif p.delivery is DeliveryMode.SPAWN:
			if deferred:
				if p.wait:
					out.append(f"\t\t{wg}.Add(1)")
				out.append(f"\t\t{sub} := {sub}")
				out.append("\t\tgo func() {")
				out.extend(f"\t\t\t{d}" for d in deferred)
				out.append(f"\t\t\t{stmt}")
				out.append("\t\t}()")
			else:
				out.append(f"\t\tgo {call}")
		else:
			if p.wait:
				out.append(f"\t\t{wg}.Add(1)")
			out.append(f"\t\t{sub} := {sub}")
			out.append(f"\t\t{sub}.queue <- func() {{")
			out.extend(f"\t\t\t{d}" for d in deferred)
			out.append(f"\t\t\t{stmt}")
			out.append("\t\t}")

		out.append("\t}")
		if p.wait:
			out.append(f"\t{wg}.Wait()")
		out.append("}")
		out.append("")
		return out

	def _pause(self, ev: GenEvent, recv: str, name: str, value: str, doc: str) -> List[str]:
		out = [f"// {name} {doc}.", f"func ({recv} *{ev.names.type}) {name}() {{"]
		out.extend(self._lock(ev, recv))
		out.append(f"\t{recv}.paused = {value}")
		out.append("}")
		out.append("")
		return out

	def _nop(self, ev: GenEvent) -> List[str]:
		n = ev.names
		out = [
			f"// {n.nop} implements {n.handler} with methods that do nothing.",
			f"type {n.nop} struct{{}}",
			"",
		]
		for fn in ev.funcs:
			head = f"func ({n.nop}) {fn.name}({fn.params})"
			if fn.returns:
				out.append(f"{head} ({fn.returns}) {{")
				out.append("\treturn")
				out.append("}")
			else:
				out.append(f"{head} {{}}")
			out.append("")
		return out


__all__ = ["Emitter", "GENERATED_HEADER", "GoEmitter", "QUEUE_CAPACITY"]
