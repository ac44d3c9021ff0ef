from __future__ import annotations
import json
import re
import textwrap
from dataclasses import dataclass, replace
from typing import Iterator, Optional

from polycode.core.config import DEFAULT_CONFIG, EngineConfig
from polycode.core.logging import get_logger
from polycode.languages.registry import get_rules
from polycode.languages.rules import LanguageRules
from polycode.parsing.ir import IRNode, NodeKind
from polycode.parsing.lexical import split_top_level
from polycode.rendering.expressions import infer_type, translate, type_name

log = get_logger("polycode.render")

_IDENT = re.compile(r"^[A-Za-z_]\w*$")


@dataclass(frozen=True)
class _Context:
    cls: Optional[IRNode] = None
    member: bool = False
    source_self: Optional[str] = None
    target_self: Optional[str] = None


def _own_nodes(node: IRNode) -> Iterator[IRNode]:
    """Descendants of a function body, not entering nested functions or classes."""
    for child in node.children:
        yield child
        if child.kind not in (NodeKind.FUNCTION_DECL, NodeKind.CLASS_DECL):
            yield from _own_nodes(child)


def _param_list(node: IRNode) -> tuple[list[str], list[str], list[str]]:
    names = [p.strip() for p in node.attr("params").split(",") if p.strip()]
    types = [t.strip() for t in node.attr("param_types").split(",")] if node.attr("param_types") else []
    defaults = json.loads(node.attr("param_defaults") or "[]")
    types += [""] * (len(names) - len(types))
    defaults += [""] * (len(names) - len(defaults))
    return names, types, defaults


class _Renderer:
    def __init__(self, source: LanguageRules, target: LanguageRules, config: EngineConfig):
        self.s = source
        self.t = target
        self.tpl = target.templates
        self.config = config
        self.lines: list[str] = []
        self.needs: list[str] = []

    # ---------- output helpers ----------

    def indent(self, depth: int) -> str:
        return self.t.indent_unit * depth

    def emit(self, depth: int, text: str) -> None:
        self.lines.append(self.indent(depth) + text if text else "")

    def need(self, lines: tuple[str, ...]) -> None:
        self.needs += [line for line in lines if line not in self.needs]

    def marker(self) -> str:
        return self.t.line_comment

    def with_comment(self, text: str, node: IRNode) -> str:
        comment = node.attr("comment")
        return f"{text}  {self.marker()} {comment}" if comment else text

    def expr(self, text: str, ctx: _Context) -> str:
        out = translate(text, self.s, self.t, ctx.source_self, ctx.target_self)
        if self.t.power and self.t.power.split("{", 1)[0] in out:
            self.need(self.tpl.math_preamble)
        return out

    def field_type(self, canonical: str) -> str:
        if canonical == "any" and self.tpl.field_any:
            self.need(self.tpl.field_preamble)
            return self.tpl.field_any
        return type_name(canonical, self.t)

    def close(self, depth: int, closer: str = "}") -> None:
        if self.t.uses_braces and closer:
            self.emit(depth, closer)

    def body(self, nodes: list[IRNode], depth: int, ctx: _Context,
             prologue: tuple[str, ...] = (), epilogue: tuple[str, ...] = ()) -> None:
        start = len(self.lines)
        for line in prologue:
            self.emit(depth, line)
        self.block(nodes, depth, ctx)
        for line in epilogue:
            self.emit(depth, line)
        if self.tpl.empty_body:
            code = [ln for ln in self.lines[start:] if ln.strip() and not ln.strip().startswith(self.marker())]
            if not code:
                self.emit(depth, self.tpl.empty_body)

    # ---------- walk ----------

    def block(self, nodes: list[IRNode], depth: int, ctx: _Context) -> None:
        prev: Optional[IRNode] = None
        spaced = False
        for node in nodes:
            top_block = depth == 0 and node.kind in (NodeKind.FUNCTION_DECL, NodeKind.CLASS_DECL)
            if (top_block or spaced) and self.lines and self.lines[-1]:
                self.lines.append("")
            spaced = top_block
            mark = len(self.lines)
            try:
                handler = getattr(self, "_" + node.kind.name.lower())
                handler(node, depth, ctx, prev)
            except Exception as exc:
                log.debug("render.node_failed", kind=node.kind.value, error=repr(exc))
                del self.lines[mark:]
                self.untranslated(f"{node.kind.value} {json.dumps(node.attributes, sort_keys=True)}", depth)
            prev = node

    def untranslated(self, raw: str, depth: int) -> None:
        """Emit source text as written, re-indented to ``depth``."""
        lines = textwrap.dedent(raw).split("\n")
        lines[0] = lines[0].lstrip()
        for line in lines:
            if self.config.mark_untranslated:
                self.emit(depth, f"{self.marker()} untranslated: {line}".rstrip())
            else:
                self.emit(depth, line.rstrip())

    # ---------- node kinds ----------

    def _unknown(self, node: IRNode, depth: int, ctx: _Context, prev: Optional[IRNode]) -> None:
        raw = node.attr("raw")
        self.untranslated(raw, depth)
        if not node.is_block:
            return
        # unmarked output keeps the source's block shape
        inner = depth if self.config.mark_untranslated else depth + 1
        self.block(node.children, inner, ctx)
        if self.s.uses_braces:
            self.untranslated("}", depth)

    def _comment(self, node: IRNode, depth: int, ctx: _Context, prev: Optional[IRNode]) -> None:
        lines = node.attr("text").split("\n")
        if node.attr("doc") and not self.t.uses_braces:
            if len(lines) == 1:
                self.emit(depth, f'"""{lines[0]}"""')
                return
            self.emit(depth, '"""')
            for line in lines:
                self.emit(depth, line)
            self.emit(depth, '"""')
            return
        for line in lines:
            self.emit(depth, f"{self.marker()} {line}".rstrip())

    def _params(self, node: IRNode, ctx: _Context, method: bool) -> str:
        names, types, defaults = _param_list(node)
        parts = ["self"] if method and self.t.name == "Python" else []
        for name, canonical, default in zip(names, types, defaults):
            text = self.tpl.param.format(name=name, type=type_name(canonical, self.t))
            if default and "{default}" in self.tpl.param_default:
                text = self.tpl.param_default.format(param=text, default=self.expr(default, ctx))
            parts.append(text)
        return ", ".join(parts)

    def _return_type(self, node: IRNode) -> str:
        if node.attr("return_type"):
            return node.attr("return_type")
        names, types, _ = _param_list(node)
        known = dict(zip(names, types))
        values = [n.attr("value") for n in _own_nodes(node) if n.kind is NodeKind.RETURN and n.attr("value")]
        if not values:
            return "void"
        inferred = {infer_type(v) or known.get(v) or "any" for v in values}
        return inferred.pop() if len(inferred) == 1 else "any"

    def _ret_text(self, canonical: str) -> str:
        spelled = type_name(canonical, self.t)
        if self.t.name == "Go":
            return f" {spelled}" if canonical != "void" and spelled else ""
        return spelled

    def _function_decl(self, node: IRNode, depth: int, ctx: _Context, prev: Optional[IRNode]) -> None:
        cls = ctx.cls
        role = node.attr("role") if cls is not None else ""
        fctx = replace(ctx, member=False)
        if node.attr("receiver"):
            fctx = replace(fctx, source_self=node.attr("receiver"))
        static = role == "method" and bool(node.attr("static"))
        if static:
            template = self.tpl.static_method or self.tpl.function
        else:
            template = {"constructor": self.tpl.constructor, "method": self.tpl.method}.get(role, self.tpl.function)
        header = template.format(
            name=node.attr("name"),
            params=self._params(node, fctx, bool(role) and not static),
            cls=cls.attr("name") if cls is not None else "",
            recv=ctx.target_self or "",
            ret=self._ret_text(self._return_type(node)),
        )
        *decorators, header = header.split("\n")
        for line in decorators:
            self.emit(depth, line)
        self.emit(depth, self.with_comment(header, node))
        prologue: tuple[str, ...] = ()
        epilogue: tuple[str, ...] = ()
        if role == "constructor":
            fmt = dict(cls=cls.attr("name"), recv=ctx.target_self or "")
            prologue = tuple(p.format(**fmt) for p in self.tpl.ctor_prologue)
            epilogue = tuple(e.format(**fmt) for e in self.tpl.ctor_epilogue)
        self.body(node.children, depth + 1, fctx, prologue, epilogue)
        self.close(depth)

    def _derived_fields(self, node: IRNode) -> list[tuple[str, str]]:
        ctor = next((c for c in node.children
                     if c.kind is NodeKind.FUNCTION_DECL and c.attr("role") == "constructor"), None)
        if ctor is None:
            return []
        names, types, _ = _param_list(ctor)
        known = dict(zip(names, types))
        prefix = self.s.self_ref + self.s.member
        fields: dict[str, str] = {}
        for stmt in _own_nodes(ctor):
            target = stmt.attr("target")
            if stmt.kind is not NodeKind.ASSIGNMENT or stmt.attr("op") != "=" or not target.startswith(prefix):
                continue
            name = target[len(prefix):]
            if _IDENT.match(name) and name not in fields:
                value = stmt.attr("value")
                fields[name] = known.get(value) or infer_type(value) or "any"
        return list(fields.items())

    def _class_decl(self, node: IRNode, depth: int, ctx: _Context, prev: Optional[IRNode]) -> None:
        name, base = node.attr("name"), node.attr("base")
        recv = name[:1].lower() if self.t.name == "Go" else None
        cctx = _Context(cls=node, member=True, target_self=recv)
        header = (self.tpl.klass_base if base else self.tpl.klass).format(name=name, base=base)
        self.emit(depth, self.with_comment(header, node))
        for line in self.tpl.class_preamble:
            self.emit(depth, line)
        if self.t.typed and not any(c.kind is NodeKind.VAR_DECL for c in node.children):
            for field_name, canonical in self._derived_fields(node):
                self.emit(depth + 1, self.tpl.field_decl.format(
                    name=field_name, type=self.field_type(canonical), init=""))
        inner, outer = node.children, []
        if self.tpl.methods_outside:
            inner = [c for c in node.children if c.kind is not NodeKind.FUNCTION_DECL]
            outer = [c for c in node.children if c.kind is NodeKind.FUNCTION_DECL]
        self.body(inner, depth + 1, cctx)
        self.close(depth, self.tpl.class_closer)
        for method in outer:
            self.lines.append("")
            self._function_decl(method, depth, replace(cctx, member=False), None)

    def _if(self, node: IRNode, depth: int, ctx: _Context, prev: Optional[IRNode]) -> None:
        variant = node.attr("variant", "if")
        template = {"elif": self.tpl.elif_, "else": self.tpl.else_}.get(variant, self.tpl.if_)
        header = self.with_comment(template.format(condition=self.expr(node.attr("condition"), ctx)), node)
        closer = self.indent(depth) + "}"
        if variant != "if" and self.t.uses_braces and prev is not None and prev.kind is NodeKind.IF \
                and self.lines and self.lines[-1] == closer:
            self.lines[-1] = f"{closer} {header}"
        else:
            self.emit(depth, header)
        self.body(node.children, depth + 1, ctx)
        self.close(depth)

    def _for(self, node: IRNode, depth: int, ctx: _Context, prev: Optional[IRNode]) -> None:
        var = node.attr("var")
        if node.attr("style") == "range":
            start = self.expr(node.attr("start", "0"), ctx)
            end = self.expr(node.attr("end"), ctx)
            step = self.expr(node.attr("step"), ctx)
            bounds = end if start == "0" and not step else f"{start}, {end}"
            if step:
                bounds += f", {step}"
            header = self.tpl.for_range.format(var=var, start=start, end=end, range=bounds)
            if step and self.t.uses_braces:
                header = header.replace(f"{var}++", f"{var} += {step}")
        else:
            header = self.tpl.for_each.format(var=var, iterable=self.expr(node.attr("iterable"), ctx))
        self.emit(depth, self.with_comment(header, node))
        self.body(node.children, depth + 1, ctx)
        self.close(depth)

    def _while(self, node: IRNode, depth: int, ctx: _Context, prev: Optional[IRNode]) -> None:
        header = self.tpl.while_.format(condition=self.expr(node.attr("condition"), ctx))
        self.emit(depth, self.with_comment(header, node))
        self.body(node.children, depth + 1, ctx)
        self.close(depth)

    def _print(self, node: IRNode, depth: int, ctx: _Context, prev: Optional[IRNode]) -> None:
        self.need(self.tpl.print_preamble)
        args = [self.expr(a, ctx) for a in split_top_level(node.attr("args"))]
        template = self.tpl.print_
        if not args:
            template = template.replace("{args} << ", "")
        line = template.format(args=self.tpl.print_joiner.join(args))
        self.emit(depth, self.with_comment(line, node))

    def _return(self, node: IRNode, depth: int, ctx: _Context, prev: Optional[IRNode]) -> None:
        value = node.attr("value")
        line = self.tpl.return_value.format(value=self.expr(value, ctx)) if value else self.tpl.return_bare
        self.emit(depth, self.with_comment(line, node))

    def _var_decl(self, node: IRNode, depth: int, ctx: _Context, prev: Optional[IRNode]) -> None:
        name, value = node.attr("name"), node.attr("value")
        canonical = node.attr("type") or infer_type(value) or "any"
        spelled = type_name(canonical, self.t)
        rendered = self.expr(value, ctx)
        if ctx.member and (value or self.t.uses_braces):
            init = self.tpl.field_init.format(value=rendered) if value else ""
            line = self.tpl.field_decl.format(name=name, type=self.field_type(canonical), init=init)
        elif value:
            line = self.tpl.var_decl.format(name=name, value=rendered, type=spelled)
        else:
            line = self.tpl.var_decl_typed.format(name=name, type=spelled)
        self.emit(depth, self.with_comment(line, node))

    def _assignment(self, node: IRNode, depth: int, ctx: _Context, prev: Optional[IRNode]) -> None:
        op = node.attr("op", "=")
        if self.t.uses_braces and op == "//=":
            op = "/="
        target, value = node.attr("target"), node.attr("value")
        if op == "**=" and self.t.power:
            op, value = "=", f"{target} ** " + (value if _IDENT.match(value) or infer_type(value) else f"({value})")
        line = self.tpl.assignment.format(target=self.expr(target, ctx), op=op, value=self.expr(value, ctx))
        self.emit(depth, self.with_comment(line, node))

    def _expression(self, node: IRNode, depth: int, ctx: _Context, prev: Optional[IRNode]) -> None:
        expr = node.attr("expr")
        if expr == "pass":
            if not self.t.uses_braces:
                self.emit(depth, self.with_comment("pass", node))
            return
        self.emit(depth, self.with_comment(self.tpl.expression.format(expr=self.expr(expr, ctx)), node))

    def _program(self, node: IRNode, depth: int, ctx: _Context, prev: Optional[IRNode]) -> None:
        self.block(node.children, depth, ctx)


def render(program: IRNode, target_lang: str, config: EngineConfig | None = None,
           source_lang: str | None = None) -> str:
    """Render an IR program as ``target_lang`` source text.

    Pure: the same program and target always give the same text.
    """
    target = get_rules(target_lang)
    source = get_rules(source_lang or program.attr("language") or target.name)
    renderer = _Renderer(source, target, config or DEFAULT_CONFIG)
    renderer.block(program.children, 0, _Context())
    preamble = list(target.templates.preamble)
    preamble += [line for line in renderer.needs if line not in preamble]
    lines = renderer.lines
    if preamble and lines:
        lines = preamble + [""] + lines
    elif preamble:
        lines = preamble
    text = "\n".join(lines).strip("\n")
    return text + "\n" if text else ""
