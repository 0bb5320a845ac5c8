"""Component model to instance/module script lowering."""

from __future__ import annotations

import posixpath
from typing import Callable, List, Optional, Set, Tuple

from react2svelte.analyzer.model import (
    ComponentModel,
    ContextDirection,
    ContextUse,
    DependencyKind,
    DerivedBinding,
    DerivedForm,
    EffectBinding,
    EffectTiming,
    LocalDeclaration,
    LocalKind,
    ModuleItem,
    ModuleItemKind,
    PropsPattern,
    RefBinding,
    StateBinding,
    StateKind,
)
from react2svelte.ast import SyntaxNode
from react2svelte.diagnostics import DiagnosticCollector, IMPORT_REWRITTEN, Stage
from react2svelte.errors import UnsupportedPatternError
from react2svelte.ir import (
    ContextGet,
    ContextSet,
    DerivedDeclaration,
    EffectDeclaration,
    EffectRune,
    PropEntry,
    PropsDeclaration,
    RawStatement,
    RefDeclaration,
    ScriptNode,
    StateDeclaration,
)

from .expressions import ExpressionRewriter, reindent
from .placeholders import PlaceholderFactory

_COMPONENT_EXTENSIONS = (".jsx", ".tsx", ".js", ".ts")

Ordered = Tuple[int, List[ScriptNode]]


class ScriptLowerer:
    """Build script declarations; records which ``svelte`` exports are used."""

    def __init__(
        self,
        model: ComponentModel,
        rewriter: ExpressionRewriter,
        placeholders: PlaceholderFactory,
        diagnostics: DiagnosticCollector,
        indent: str = "  ",
    ):
        self.model = model
        self.rewriter = rewriter
        self.placeholders = placeholders
        self.diagnostics = diagnostics
        self.indent = indent
        self.svelte_imports: Set[str] = set()

    def _guard(
        self,
        node: SyntaxNode,
        build: Callable[[], List[ScriptNode]],
        *,
        prefix: str = "",
    ) -> List[ScriptNode]:
        try:
            return build()
        except UnsupportedPatternError as exc:
            return [self.placeholders.script(node, exc.message, exc.construct, prefix=prefix)]

    def _text(self, node: SyntaxNode, *, statement: bool = False) -> str:
        return "\n".join(self.rewriter.lines(node, statement=statement))

    # ------------------------------------------------------------------
    # Props
    # ------------------------------------------------------------------

    def props(self) -> Optional[PropsDeclaration]:
        model = self.model
        type_annotation = model.props_type if model.typescript else None
        bindable = [
            PropEntry(name="ref", local_name=p.local_name, bindable=True)
            for p in model.props
            if p.is_bindable
        ]
        if model.props_pattern is PropsPattern.IDENTIFIER:
            if bindable:
                return PropsDeclaration(
                    entries=tuple(bindable) + (PropEntry(name=model.props_identifier, rest=True),),
                    type_annotation=type_annotation,
                )
            return PropsDeclaration(identifier=model.props_identifier, type_annotation=type_annotation)
        if model.props_pattern is PropsPattern.NONE:
            if bindable:
                return PropsDeclaration(entries=tuple(bindable), type_annotation=type_annotation)
            return None

        entries: List[PropEntry] = []
        rest: List[PropEntry] = []
        for prop in model.props:
            if prop.is_bindable:
                continue
            if prop.is_rest:
                rest.append(PropEntry(name=prop.name, rest=True))
            elif prop.node.type == "pair_pattern":
                entries.append(PropEntry(name=self.rewriter.rewrite(prop.node)))
            else:
                default = self.rewriter.rewrite(prop.default_value) if prop.default_value is not None else None
                entries.append(PropEntry(name=prop.name, default=default))
        return PropsDeclaration(entries=tuple(entries + bindable + rest), type_annotation=type_annotation)

    # ------------------------------------------------------------------
    # Declarations in source order
    # ------------------------------------------------------------------

    def declarations(self) -> List[Ordered]:
        model = self.model
        ordered: List[Ordered] = []
        for binding in model.state_bindings.values():
            ordered.append((binding.node.start, self._guard(binding.node, lambda b=binding: self._state(b), prefix="const ")))
        for derived in model.derived_bindings.values():
            ordered.append((derived.node.start, self._guard(derived.node, lambda d=derived: self._derived(d), prefix="const ")))
        for effect in model.effects:
            ordered.append((effect.node.start, self._guard(effect.node, lambda e=effect: self._effect(e))))
        for use in model.context_uses:
            if use.direction is ContextDirection.CONSUME:
                ordered.append((use.node.start, self._guard(use.node, lambda u=use: self._consume(u), prefix="const ")))
        for ref in model.ref_bindings.values():
            if not ref.forwarded:
                ordered.append((ref.node.start, self._guard(ref.node, lambda r=ref: self._ref(r), prefix="const ")))
        for local in model.locals:
            prefix = f"{local.keyword} " if local.keyword else ""
            ordered.append((local.node.start, self._guard(local.node, lambda decl=local: self._local(decl), prefix=prefix)))
        ordered.sort(key=lambda item: item[0])
        return ordered

    def _state(self, binding: StateBinding) -> List[ScriptNode]:
        if binding.kind is StateKind.PLAIN:
            return [
                StateDeclaration(
                    name=binding.name,
                    initial=self._state_initial(binding),
                    type_arguments=binding.type_arguments,
                )
            ]
        initial = self._text(binding.initial_expression) if binding.initial_expression is not None else None
        if binding.reducer_initializer is not None:
            initial = f"{self._text(binding.reducer_initializer)}({initial or ''})"
        nodes: List[ScriptNode] = [
            StateDeclaration(name=binding.name, initial=initial, type_arguments=binding.type_arguments)
        ]
        if binding.dispatch:
            reducer = binding.reducer.unwrap()
            call = self._text(binding.reducer) if reducer.type == "identifier" else f"({self._text(binding.reducer)})"
            nodes.append(
                RawStatement(
                    text=(
                        f"function {binding.dispatch}(action) {{\n"
                        f"{self.indent}{binding.name} = {call}({binding.name}, action);\n"
                        "}"
                    )
                )
            )
        return nodes

    def _state_initial(self, binding: StateBinding) -> Optional[str]:
        initial = binding.initial_expression
        if initial is None:
            return None
        if binding.lazy_initializer:
            function = initial.unwrap()
            body = function.field("body")
            if body is not None and body.type != "statement_block" and not function.has_token("async"):
                return self._text(body)
            return f"({self._text(initial)})()"
        return self._text(initial)

    def _derived(self, derived: DerivedBinding) -> List[ScriptNode]:
        name_node = derived.node.field("name")
        target = name_node.text if name_node is not None else derived.name
        return [
            DerivedDeclaration(
                target=target,
                expression=self._text(derived.expression),
                by=derived.form is DerivedForm.FUNCTION,
                type_annotation=derived.type_annotation if self.model.typescript else None,
            )
        ]

    def _effect(self, effect: EffectBinding) -> List[ScriptNode]:
        on_mount = effect.dependency_kind is DependencyKind.ON_MOUNT
        if effect.timing is EffectTiming.PRE_PAINT:
            rune = EffectRune.EFFECT_PRE
        elif on_mount:
            rune = EffectRune.ON_MOUNT
        else:
            rune = EffectRune.EFFECT
        untrack = on_mount and effect.timing is EffectTiming.PRE_PAINT
        if rune is EffectRune.ON_MOUNT:
            self.svelte_imports.add("onMount")
        if untrack:
            self.svelte_imports.add("untrack")

        if effect.is_function_reference:
            return [
                EffectDeclaration(
                    rune=rune,
                    function_reference=self._text(effect.body_expression),
                    untrack=untrack,
                )
            ]

        callback = effect.body_expression.unwrap()
        body: List[str] = []
        for statement in effect.body_statements:
            if effect.expression_body:
                body.append(self._expression_body(statement))
            else:
                body.append(self._text(statement))
        cleanup = self._text(effect.cleanup_expression) if effect.cleanup_expression is not None else None
        return [
            EffectDeclaration(
                rune=rune,
                body=tuple(body),
                cleanup=cleanup,
                untrack=untrack,
                is_async=callback.has_token("async"),
            )
        ]

    def _expression_body(self, expression: SyntaxNode) -> str:
        """An arrow effect body's value is React's cleanup, so calls keep ``return``."""
        inner = expression.unwrap()
        text = "\n".join(self.rewriter.lines(expression, statement=True))
        if inner.type == "call_expression" and not self._is_setter_call(inner):
            return f"return {text};"
        return f"{text};"

    def _is_setter_call(self, node: SyntaxNode) -> bool:
        return any(node.span in b.setter_call_sites for b in self.model.state_bindings.values())

    def _consume(self, use: ContextUse) -> List[ScriptNode]:
        self.svelte_imports.add("getContext")
        default = self._text(use.default_expression) if use.default_expression is not None else None
        return [ContextGet(target=use.binding.text, key=use.key, default=default)]

    def _ref(self, ref: RefBinding) -> List[ScriptNode]:
        reactive = ref.target_node_id is not None
        initial = self._text(ref.initial_expression) if ref.initial_expression is not None else None
        if reactive and initial is None:
            initial = "null"
        return [
            RefDeclaration(
                name=ref.name,
                initial=initial,
                reactive=reactive,
                type_arguments=ref.type_arguments if self.model.typescript else None,
            )
        ]

    def _local(self, local: LocalDeclaration) -> List[ScriptNode]:
        node = local.node
        if local.kind is LocalKind.UNSUPPORTED:
            prefix = f"{local.keyword} " if local.keyword else ""
            return [
                self.placeholders.script(
                    node, local.reason or "construct cannot be converted", local.construct, prefix=prefix
                )
            ]
        if local.kind is LocalKind.PROPS_ID:
            name = node.field("name")
            return [RawStatement(text=f"{local.keyword or 'const'} {name.text} = $props.id();")]
        if local.kind is LocalKind.CALLBACK:
            return [RawStatement(text=self._callback(local))]
        if local.kind in (LocalKind.CONSTANT, LocalKind.VARIABLE) and node.type == "variable_declarator":
            return [RawStatement(text=f"{local.keyword or 'const'} {self._text(node)};")]
        return [RawStatement(text=self._text(node, statement=True))]

    def _callback(self, local: LocalDeclaration) -> str:
        """``const f = useCallback((a) => ..., deps)`` -> ``function f(a) { ... }``."""
        name = local.names[0]
        function = local.function.unwrap()
        if not function.is_function:
            return f"{local.keyword or 'const'} {name} = {self._text(local.function)};"
        params_node = function.field("parameters")
        single = function.field("parameter")
        if params_node is not None:
            params = self.rewriter.rewrite(params_node)
        elif single is not None:
            params = f"({single.text})"
        else:
            params = "()"
        type_parameters = function.field("type_parameters")
        return_type = function.field("return_type")
        header = "async " if function.has_token("async") else ""
        header += "function"
        if function.has_token("*"):
            header += "*"
        header += f" {name}"
        if type_parameters is not None:
            header += type_parameters.text
        header += params
        if return_type is not None:
            header += return_type.text
        body = function.field("body")
        if body.type == "statement_block":
            lines = reindent(self.rewriter.rewrite(body), local.node)
            return f"{header} " + "\n".join(lines)
        lines = reindent(self.rewriter.rewrite(body), local.node)
        lines[0] = f"return {lines[0]}"
        lines[-1] = f"{lines[-1]};"
        indented = "\n".join(self.indent + line if line else line for line in lines)
        return f"{header} {{\n{indented}\n}}"

    # ------------------------------------------------------------------
    # Context provision and module-level items
    # ------------------------------------------------------------------

    def provisions(self) -> List[ScriptNode]:
        nodes: List[ScriptNode] = []
        for use in self.model.context_uses:
            if use.direction is not ContextDirection.PROVIDE:
                continue
            self.svelte_imports.add("setContext")

            def build(u=use) -> List[ScriptNode]:
                value = self._text(u.value_expression) if u.value_expression is not None else "undefined"
                return [ContextSet(key=u.key, value=value)]

            nodes.extend(self._guard(use.node, build))
        return nodes

    def module_items(
        self, component_tags: Set[str]
    ) -> Tuple[List[str], List[ScriptNode], List[ScriptNode], List[Ordered]]:
        """Split module items into imports, types, module script and declarations."""
        imports: List[str] = []
        types: List[ScriptNode] = []
        module_script: List[ScriptNode] = []
        declarations: List[Ordered] = []
        context_keys = {use.key for use in self.model.context_uses}
        for item in self.model.module_items:
            if item.kind is ModuleItemKind.IMPORT:
                text = self._import(item, component_tags, context_keys)
                if text is not None:
                    imports.append(text)
                continue
            nodes = self._guard(item.node, lambda i=item: [RawStatement(text=self._text(i.node, statement=True))])
            if item.kind is ModuleItemKind.TYPE:
                types.extend(nodes)
            elif item.kind is ModuleItemKind.EXPORTED:
                module_script.extend(nodes)
            else:
                declarations.append((item.node.start, nodes))
        return imports, types, module_script, declarations

    def _import(self, item: ModuleItem, component_tags: Set[str], context_keys: Set[str]) -> Optional[str]:
        statement = item.node
        if item.names and set(item.names) <= context_keys:
            self.diagnostics.info(
                Stage.LOWER,
                IMPORT_REWRITTEN,
                f"import of {', '.join(item.names)} removed; Svelte contexts are looked up by key",
                line=statement.line,
                column=statement.column,
                construct="import",
            )
            return None
        source = statement.field("source")
        clause = statement.child_of_type("import_clause")
        default = None
        if clause is not None:
            default = next((c for c in clause.named_children if c.type == "identifier"), None)
        text = "\n".join(reindent(statement.text, statement))
        if source is None or default is None or default.text not in component_tags:
            return text
        quote = source.text[0]
        path = source.text[1:-1]
        if not path.startswith("."):
            return text
        stem, extension = posixpath.splitext(path)
        if extension == "":
            new_path = path + ".svelte"
        elif extension in _COMPONENT_EXTENSIONS:
            new_path = stem + ".svelte"
        else:
            return text
        self.diagnostics.info(
            Stage.LOWER,
            IMPORT_REWRITTEN,
            f"component import '{path}' now points at '{new_path}'",
            line=statement.line,
            column=statement.column,
            construct=default.text,
        )
        data = statement.source
        head = data.slice(statement.start, source.start)
        tail = data.slice(source.end, statement.end)
        return "\n".join(reindent(f"{head}{quote}{new_path}{quote}{tail}", statement))


__all__ = ["ScriptLowerer"]
