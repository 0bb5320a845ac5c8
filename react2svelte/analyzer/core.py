"""
React semantic analyzer.

Turns a parsed module into a frozen :class:`ComponentModel`:

1. discover the component and read its props
2. classify module-level statements (imports, contexts, declarations)
3. walk the component body, dispatching hook calls by :class:`HookKind`
4. build the render tree from the returned JSX and early returns
5. resolve identifiers and report what could not be classified
"""

from __future__ import annotations

import re
from typing import Dict, Iterable, Iterator, List, Optional, Set, Tuple

from react2svelte.ast import SyntaxNode, SyntaxTree
from react2svelte.config import ConversionOptions, DEFAULT_OPTIONS
from react2svelte.diagnostics import (
    ANALYSIS_AMBIGUITY,
    CONTEXT_VALUE_SNAPSHOT,
    DUPLICATE_BINDING,
    DYNAMIC_HOOK_ARGUMENT,
    DiagnosticCollector,
    EFFECT_EVERY_UPDATE,
    EXTRA_COMPONENT,
    HOOK_ERASED,
    MEMO_ERASED,
    STALE_DEPENDENCY,
    Stage,
    UNRESOLVED_REFERENCE,
)
from react2svelte.errors import NoComponentError
from react2svelte.observability import log_stage_event

from .components import (
    ComponentCandidate,
    consumed_statements,
    extract_props,
    find_components,
    select_component,
)
from .hooks import HookCall, HookKind, dependency_names, is_empty_array, match_hook
from .model import (
    ComponentInstance,
    ComponentModel,
    ConditionalBlock,
    ContextDefinition,
    ContextDirection,
    ContextUse,
    DependencyKind,
    DerivedBinding,
    DerivedForm,
    EffectBinding,
    EffectTiming,
    Element,
    Fragment,
    ListBlock,
    LocalDeclaration,
    LocalKind,
    ModuleItem,
    ModuleItemKind,
    RawHtml,
    RefBinding,
    RenderNode,
    SlotContent,
    SlotInvocation,
    SnippetDefinition,
    StateBinding,
    StateKind,
    TextExpression,
)
from .render import RenderContext, RenderTreeBuilder, function_return
from .scope import ScopeResolver, local_bindings, pattern_names, referenced_names, references

REACT_MODULES = frozenset({"react", "react-dom"})
DIRECTIVES = frozenset({"use client", "use server", "use strict"})
TYPE_STATEMENTS = frozenset({"type_alias_declaration", "interface_declaration"})
_ROOT_IDENTIFIER_RE = re.compile(r"^[A-Za-z_$][\w$]*")


def is_react_import(statement: SyntaxNode) -> bool:
    source = statement.field("source")
    if source is None:
        return False
    module = source.text.strip("'\"`")
    return module in REACT_MODULES or module.split("/")[0] in REACT_MODULES


def root_identifier(expression: str) -> Optional[str]:
    """``user.profile.id`` -> ``user``."""
    match = _ROOT_IDENTIFIER_RE.match(expression.strip())
    return match.group(0) if match else None


def declared_names(statement: SyntaxNode) -> Tuple[str, ...]:
    """Names a top-level statement introduces into module scope."""
    kind = statement.type
    if kind == "import_statement":
        clause = statement.child_of_type("import_clause")
        if clause is None:
            return ()
        names = []
        for child in clause.named_children:
            if child.type == "identifier":
                names.append(child.text)
            elif child.type == "namespace_import":
                names.extend(n.text for n in child.named_children if n.type == "identifier")
            elif child.type == "named_imports":
                for spec in child.named_children:
                    bound = spec.field("alias") or spec.field("name")
                    if bound is not None:
                        names.append(bound.text)
        return tuple(names)
    if kind == "export_statement":
        declaration = statement.field("declaration")
        return declared_names(declaration) if declaration is not None else ()
    if kind in ("lexical_declaration", "variable_declaration"):
        names: List[str] = []
        for declarator in statement.named_children:
            if declarator.type == "variable_declarator":
                names.extend(pattern_names(declarator.field("name")))
        return tuple(names)
    name = statement.field("name")
    if name is not None and kind.endswith("declaration"):
        return (name.text,)
    return ()


def _returned(statement: Optional[SyntaxNode]) -> Tuple[bool, Optional[SyntaxNode]]:
    if statement is None:
        return False, None
    if statement.type == "return_statement":
        values = statement.named_children
        return True, values[0] if values else None
    if statement.type == "statement_block":
        inner = statement.named_children
        if len(inner) == 1:
            return _returned(inner[0])
    return False, None


def _return_branches(statement: SyntaxNode):
    """Split ``if (c) return X; [else ...]`` chains into branches.

    Returns ``(branches, terminal, else_value)`` or None when some branch does
    more than return a value.
    """
    branches: List[Tuple[SyntaxNode, Optional[SyntaxNode]]] = []
    current = statement
    while current.type == "if_statement":
        ok, value = _returned(current.field("consequence"))
        if not ok:
            return None
        branches.append((current.field("condition"), value))
        alternative = current.field("alternative")
        if alternative is None:
            return branches, False, None
        inner = alternative.named_children[0] if alternative.named_children else None
        if inner is None:
            return None
        if inner.type == "if_statement":
            current = inner
            continue
        ok, value = _returned(inner)
        if not ok:
            return None
        return branches, True, value
    return None


def _declaration_keyword(statement: SyntaxNode) -> str:
    for child in statement.children:
        if not child.is_named and child.type in ("const", "let", "var"):
            return child.type
    return "const"


def _type_text(declarator: SyntaxNode) -> Optional[str]:
    annotation = declarator.field("type")
    if annotation is None:
        return None
    return annotation.text.lstrip(":").strip()


class _PendingSnippet:
    __slots__ = ("name", "node", "body", "params")

    def __init__(self, name: str, node: SyntaxNode, body: SyntaxNode, params: Optional[SyntaxNode]):
        self.name = name
        self.node = node
        self.body = body
        self.params = params


class ReactAnalyzer:
    """Build a :class:`ComponentModel` from a parsed module."""

    def __init__(
        self,
        diagnostics: DiagnosticCollector,
        options: Optional[ConversionOptions] = None,
    ):
        self.diagnostics = diagnostics
        self.options = options or DEFAULT_OPTIONS

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    def analyze(self, tree: SyntaxTree) -> ComponentModel:
        candidates = find_components(tree)
        chosen = select_component(candidates)
        if chosen is None:
            raise NoComponentError(
                "no function component found",
                path=self.options.source_name,
                line=1,
                column=1,
                hint="Export a function whose name starts with an uppercase letter and returns JSX.",
            )
        log_stage_event(
            stage="analyze",
            event="component",
            source_name=self.options.source_name,
            extras={"name": chosen.name, "candidates": len(candidates)},
        )
        return _ComponentWalk(self, tree, chosen, candidates).run()


class _ComponentWalk:
    """State for analyzing one chosen component."""

    def __init__(
        self,
        analyzer: ReactAnalyzer,
        tree: SyntaxTree,
        chosen: ComponentCandidate,
        candidates: List[ComponentCandidate],
    ):
        self.diagnostics = analyzer.diagnostics
        self.options = analyzer.options
        self.tree = tree
        self.chosen = chosen
        self.candidates = candidates

        self.state: Dict[str, StateBinding] = {}
        self.derived: Dict[str, DerivedBinding] = {}
        self.effects: List[EffectBinding] = []
        self.consumers: List[ContextUse] = []
        self.definitions: Dict[str, ContextDefinition] = {}
        self.refs: Dict[str, RefBinding] = {}
        self.locals: List[LocalDeclaration] = []
        self.module_items: List[ModuleItem] = []
        self.pending_snippets: List[_PendingSnippet] = []
        self.declared: Set[str] = set()
        self.reactive: Set[str] = set()
        self.module_names: Set[str] = set()

    # ------------------------------------------------------------------

    def run(self) -> ComponentModel:
        chosen = self.chosen
        if chosen.is_memo:
            self._info(
                MEMO_ERASED,
                "memo() wrapper removed; Svelte components update from fine-grained"
                " reactivity, so prop-equality skipping is not preserved",
                chosen.statement,
                construct="memo",
            )
        for other in self.candidates:
            if other is chosen or other.statement is chosen.statement:
                continue
            self.diagnostics.warning(
                Stage.ANALYZE,
                EXTRA_COMPONENT,
                f"only one component per file is converted; '{other.name}' was skipped"
                " and needs its own .svelte file",
                line=other.statement.line,
                column=other.statement.column,
                construct=other.name,
            )

        self._module_level()
        props = extract_props(chosen)
        for binding in props.bindings:
            self.declared.add(binding.binding_name)
            self.reactive.add(binding.binding_name)
            if binding.is_bindable:
                self.refs[binding.binding_name] = RefBinding(
                    name=binding.binding_name, node=binding.node, forwarded=True
                )
        if props.identifier:
            self.declared.add(props.identifier)
            self.reactive.add(props.identifier)

        body = chosen.function.field("body")
        returns: List[Tuple[List[Tuple[SyntaxNode, Optional[SyntaxNode]]], bool, Optional[SyntaxNode]]] = []
        final: Optional[SyntaxNode] = None
        if body is not None and body.type == "statement_block":
            final = self._walk_body(body, returns)
        elif body is not None:
            final = body

        context = RenderContext(
            prop_names={b.binding_name for b in props.bindings},
            props_identifier=props.identifier,
            snippet_names={s.name for s in self.pending_snippets},
            context_keys=set(self.definitions),
            ref_names=set(self.refs),
        )
        builder = RenderTreeBuilder(context, self.diagnostics)
        snippets = tuple(
            SnippetDefinition(
                name=pending.name,
                node=pending.node,
                body=builder.build_value(pending.body) or Fragment(),
                params=pending.params,
            )
            for pending in self.pending_snippets
        )
        render_tree = self._assemble_render(builder, returns, final)

        self._link_refs(context)
        self._record_setter_sites(chosen.function)
        self._check_provider_values(context.providers)

        model = ComponentModel(
            name=self.options.component_name or chosen.name,
            node=chosen.function,
            props=props.bindings,
            props_pattern=props.pattern,
            props_identifier=props.identifier,
            props_type=props.type_annotation,
            state_bindings=dict(self.state),
            derived_bindings=dict(self.derived),
            effects=tuple(self.effects),
            context_uses=tuple(self.consumers) + tuple(context.providers),
            context_definitions=dict(self.definitions),
            ref_bindings=dict(self.refs),
            render_tree=render_tree,
            children_slots=dict(context.slots),
            snippets=snippets,
            locals=tuple(self.locals),
            module_items=tuple(self.module_items),
            styles=tuple(context.styles),
            typescript=self.options.typescript,
        )
        self._resolve(model)
        log_stage_event(
            stage="analyze",
            event="model",
            source_name=self.options.source_name,
            extras={
                "state": len(model.state_bindings),
                "derived": len(model.derived_bindings),
                "effects": len(model.effects),
                "snippets": len(model.snippets),
            },
        )
        return model

    # ------------------------------------------------------------------
    # Module level
    # ------------------------------------------------------------------

    def _module_level(self) -> None:
        skipped = set(consumed_statements(self.tree, self.chosen))
        skipped.update(candidate.statement for candidate in self.candidates)
        for candidate in self.candidates:
            self.module_names.add(candidate.name)

        for statement in self.tree.statements:
            if statement in skipped:
                continue
            kind = statement.type
            if kind == "import_statement":
                if is_react_import(statement):
                    continue
                names = declared_names(statement)
                self.module_names.update(names)
                self.module_items.append(
                    ModuleItem(kind=ModuleItemKind.IMPORT, node=statement, names=names)
                )
                continue
            if kind == "expression_statement":
                inner = statement.named_children[0] if statement.named_children else None
                if inner is not None and inner.type == "string" and inner.text.strip("'\"") in DIRECTIVES:
                    continue
            if kind == "export_statement" and statement.has_token("default"):
                continue

            declaration = statement
            exported = kind == "export_statement"
            if exported:
                declaration = statement.field("declaration")
                if declaration is None:
                    self.module_items.append(ModuleItem(kind=ModuleItemKind.EXPORTED, node=statement))
                    continue
            if declaration.type in ("lexical_declaration", "variable_declaration"):
                if self._context_definitions(declaration):
                    continue

            names = declared_names(statement)
            self.module_names.update(names)
            if exported:
                item_kind = ModuleItemKind.EXPORTED
            elif declaration.type in TYPE_STATEMENTS:
                item_kind = ModuleItemKind.TYPE
            else:
                item_kind = ModuleItemKind.DECLARATION
            self.module_items.append(ModuleItem(kind=item_kind, node=statement, names=names))

    def _context_definitions(self, declaration: SyntaxNode) -> bool:
        """Record ``createContext`` declarators; True when all of them were."""
        declarators = [d for d in declaration.named_children if d.type == "variable_declarator"]
        found = 0
        for declarator in declarators:
            hook = match_hook(declarator.field("value"))
            name = declarator.field("name")
            if hook is None or hook.kind is not HookKind.CREATE_CONTEXT:
                continue
            if name is None or name.type != "identifier":
                continue
            self.definitions[name.text] = ContextDefinition(
                key=name.text, node=declarator, default_expression=hook.argument(0)
            )
            self.module_names.add(name.text)
            found += 1
        return bool(declarators) and found == len(declarators)

    # ------------------------------------------------------------------
    # Component body
    # ------------------------------------------------------------------

    def _walk_body(self, body: SyntaxNode, returns: List) -> Optional[SyntaxNode]:
        for statement in body.named_children:
            kind = statement.type
            if kind == "return_statement":
                values = statement.named_children
                return values[0] if values else None
            if kind in ("lexical_declaration", "variable_declaration"):
                keyword = _declaration_keyword(statement)
                for declarator in statement.named_children:
                    if declarator.type == "variable_declarator":
                        self._declarator(declarator, keyword)
                continue
            if kind == "function_declaration":
                self._function_declaration(statement)
                continue
            if kind == "expression_statement":
                self._expression_statement(statement)
                continue
            if kind == "if_statement":
                branches = _return_branches(statement)
                if branches is not None:
                    returns.append(branches)
                    if branches[1]:
                        return None
                    continue
            if kind in TYPE_STATEMENTS:
                self._local(LocalKind.STATEMENT, statement)
                continue
            if statement.contains_jsx():
                self._local(
                    LocalKind.UNSUPPORTED,
                    statement,
                    reason="statement builds JSX imperatively",
                )
                continue
            self._local(LocalKind.STATEMENT, statement)
        return None

    def _expression_statement(self, statement: SyntaxNode) -> None:
        expression = statement.named_children[0] if statement.named_children else None
        hook = match_hook(expression)
        if hook is None:
            if statement.contains_jsx():
                self._local(LocalKind.UNSUPPORTED, statement, reason="statement builds JSX imperatively")
            else:
                self._local(LocalKind.STATEMENT, statement)
            return
        if hook.kind in (HookKind.USE_EFFECT, HookKind.USE_LAYOUT_EFFECT):
            self._effect(hook, statement)
        elif hook.kind is HookKind.USE_DEBUG_VALUE:
            self._info(HOOK_ERASED, "useDebugValue has no Svelte equivalent and was removed", statement, construct=hook.name)
        elif hook.kind is HookKind.CUSTOM:
            self._custom_hook(hook)
            self._local(LocalKind.STATEMENT, statement)
        elif hook.kind is HookKind.UNSUPPORTED:
            self._unsupported_hook(hook, statement)
        else:
            self._local(
                LocalKind.UNSUPPORTED,
                statement,
                reason=f"{hook.name} result is not bound to a name",
                construct=hook.name,
            )

    def _declarator(self, declarator: SyntaxNode, keyword: str) -> None:
        name_node = declarator.field("name")
        value = declarator.field("value")
        if name_node is None:
            return
        names = tuple(pattern_names(name_node))
        hook = match_hook(value)

        if hook is not None:
            handler = {
                HookKind.USE_STATE: self._use_state,
                HookKind.USE_REDUCER: self._use_reducer,
                HookKind.USE_MEMO: self._use_memo,
                HookKind.USE_CALLBACK: self._use_callback,
                HookKind.USE_CONTEXT: self._use_context,
                HookKind.USE_REF: self._use_ref,
                HookKind.USE_ID: self._use_id,
            }.get(hook.kind)
            if handler is not None:
                handler(hook, declarator, name_node, keyword)
                return
            if hook.kind is HookKind.CUSTOM:
                self._custom_hook(hook)
                self._bind_local(LocalKind.CONSTANT if keyword == "const" else LocalKind.VARIABLE, declarator, names, keyword)
                return
            if hook.kind is HookKind.UNSUPPORTED:
                self._unsupported_hook(hook, declarator, names=names, keyword=keyword)
                return
            self._local(
                LocalKind.UNSUPPORTED,
                declarator,
                names=names,
                keyword=keyword,
                reason=f"{hook.name} cannot be used inside a component body",
                construct=hook.name,
            )
            return

        if value is not None:
            inner = value.unwrap()
            if inner.is_jsx and name_node.type == "identifier":
                if self._claim(names, declarator):
                    self.pending_snippets.append(_PendingSnippet(name_node.text, declarator, inner, None))
                return
            if inner.is_function and inner.contains_jsx():
                returned = function_return(inner)
                if returned is not None and name_node.type == "identifier":
                    if self._claim(names, declarator):
                        params = inner.field("parameters") or inner.field("parameter")
                        self.pending_snippets.append(
                            _PendingSnippet(name_node.text, declarator, returned, params)
                        )
                    return
                self._local(
                    LocalKind.UNSUPPORTED,
                    declarator,
                    names=names,
                    keyword=keyword,
                    reason="function builds JSX imperatively",
                )
                return
            if inner.contains_jsx():
                self._local(
                    LocalKind.UNSUPPORTED,
                    declarator,
                    names=names,
                    keyword=keyword,
                    reason="JSX inside this expression cannot be converted",
                )
                return
            if (
                keyword == "const"
                and not inner.is_function
                and referenced_names(inner) & self.reactive
            ):
                if self._claim(names, declarator, reactive=True):
                    key = name_node.text
                    self.derived[key] = DerivedBinding(
                        name=key,
                        node=declarator,
                        expression=value,
                        dependency_expressions_implicit=True,
                        names=names,
                        type_annotation=_type_text(declarator),
                    )
                return

        kind = LocalKind.CONSTANT if keyword == "const" else LocalKind.VARIABLE
        self._bind_local(kind, declarator, names, keyword)

    def _function_declaration(self, statement: SyntaxNode) -> None:
        name_node = statement.field("name")
        names = (name_node.text,) if name_node is not None else ()
        if statement.contains_jsx():
            returned = function_return(statement)
            if returned is not None and name_node is not None:
                if self._claim(names, statement):
                    self.pending_snippets.append(
                        _PendingSnippet(name_node.text, statement, returned, statement.field("parameters"))
                    )
                return
            self._local(LocalKind.UNSUPPORTED, statement, names=names, reason="function builds JSX imperatively")
            return
        self._bind_local(LocalKind.FUNCTION, statement, names, None, function=statement)

    # ------------------------------------------------------------------
    # Hooks
    # ------------------------------------------------------------------

    def _use_state(self, hook: HookCall, declarator: SyntaxNode, name_node: SyntaxNode, keyword: str) -> None:
        elements = name_node.named_children if name_node.type == "array_pattern" else ()
        if not elements or elements[0].type != "identifier" or len(elements) > 2:
            self._local(
                LocalKind.UNSUPPORTED,
                declarator,
                names=tuple(pattern_names(name_node)),
                keyword=keyword,
                reason="useState result must be destructured as [value, setValue]",
                construct=hook.name,
            )
            return
        name = elements[0].text
        setter = elements[1].text if len(elements) > 1 and elements[1].type == "identifier" else None
        if not self._claim((name,) + ((setter,) if setter else ()), declarator, reactive=True, reactive_names=(name,)):
            return
        initial = hook.argument(0)
        lazy = False
        if initial is not None and initial.unwrap().is_function:
            lazy = True
        self.state[name] = StateBinding(
            name=name,
            node=declarator,
            kind=StateKind.PLAIN,
            initial_expression=initial,
            setter=setter,
            type_arguments=hook.type_arguments,
            lazy_initializer=lazy,
        )

    def _use_reducer(self, hook: HookCall, declarator: SyntaxNode, name_node: SyntaxNode, keyword: str) -> None:
        elements = name_node.named_children if name_node.type == "array_pattern" else ()
        reducer = hook.argument(0)
        if not elements or elements[0].type != "identifier" or reducer is None:
            self._local(
                LocalKind.UNSUPPORTED,
                declarator,
                names=tuple(pattern_names(name_node)),
                keyword=keyword,
                reason="useReducer result must be destructured as [state, dispatch]",
                construct=hook.name,
            )
            return
        name = elements[0].text
        dispatch = elements[1].text if len(elements) > 1 and elements[1].type == "identifier" else None
        unwrapped = reducer.unwrap()
        if unwrapped.type != "identifier" and not unwrapped.is_function:
            self.diagnostics.warning(
                Stage.ANALYZE,
                DYNAMIC_HOOK_ARGUMENT,
                "useReducer with a dynamic reducer could not be fully analyzed; the"
                " reducer expression is called as-is",
                line=reducer.line,
                column=reducer.column,
                construct=hook.name,
            )
        if not self._claim((name,) + ((dispatch,) if dispatch else ()), declarator, reactive=True, reactive_names=(name,)):
            return
        self.state[name] = StateBinding(
            name=name,
            node=declarator,
            kind=StateKind.REDUCER,
            initial_expression=hook.argument(1),
            reducer=reducer,
            reducer_initializer=hook.argument(2),
            dispatch=dispatch,
            type_arguments=hook.type_arguments,
        )

    def _use_memo(self, hook: HookCall, declarator: SyntaxNode, name_node: SyntaxNode, keyword: str) -> None:
        factory = hook.argument(0)
        names = tuple(pattern_names(name_node))
        if factory is None:
            self._local(
                LocalKind.UNSUPPORTED, declarator, names=names, keyword=keyword,
                reason="useMemo requires a factory function", construct=hook.name,
            )
            return
        deps = hook.argument(1)
        declared = dependency_names(deps)
        inner = factory.unwrap()
        form = DerivedForm.FUNCTION
        expression = factory
        if inner.is_function:
            body = inner.field("body")
            if body is not None and body.type != "statement_block" and not inner.has_token("async"):
                form = DerivedForm.EXPRESSION
                expression = body
            self._check_stale(hook, inner, declared, deps)
        elif inner.type != "identifier":
            self.diagnostics.warning(
                Stage.ANALYZE,
                DYNAMIC_HOOK_ARGUMENT,
                "useMemo factory is not a function literal; it is evaluated with $derived.by",
                line=factory.line,
                column=factory.column,
                construct=hook.name,
            )
        if not self._claim(names, declarator, reactive=True):
            return
        key = name_node.text
        self.derived[key] = DerivedBinding(
            name=key,
            node=declarator,
            expression=expression,
            dependency_expressions_implicit=False,
            names=names,
            declared_dependencies=declared,
            form=form,
            type_annotation=_type_text(declarator) or hook.type_arguments,
        )

    def _use_callback(self, hook: HookCall, declarator: SyntaxNode, name_node: SyntaxNode, keyword: str) -> None:
        function = hook.argument(0)
        names = tuple(pattern_names(name_node))
        if function is None or name_node.type != "identifier":
            self._local(
                LocalKind.UNSUPPORTED, declarator, names=names, keyword=keyword,
                reason="useCallback requires a function bound to a name", construct=hook.name,
            )
            return
        inner = function.unwrap()
        if inner.is_function:
            self._check_stale(hook, inner, dependency_names(hook.argument(1)), hook.argument(1))
        self._bind_local(LocalKind.CALLBACK, declarator, names, keyword, function=function)

    def _use_context(self, hook: HookCall, declarator: SyntaxNode, name_node: SyntaxNode, keyword: str) -> None:
        target = hook.argument(0)
        names = tuple(pattern_names(name_node))
        if target is None:
            self._local(
                LocalKind.UNSUPPORTED, declarator, names=names, keyword=keyword,
                reason="useContext requires a context argument", construct=hook.name,
            )
            return
        inner = target.unwrap()
        if inner.type not in ("identifier", "member_expression"):
            self.diagnostics.warning(
                Stage.ANALYZE,
                DYNAMIC_HOOK_ARGUMENT,
                "useContext argument is computed; its source text is used as the context key",
                line=target.line,
                column=target.column,
                construct=hook.name,
            )
        key = re.sub(r"\s+", "", inner.text)
        if not self._claim(names, declarator):
            return
        definition = self.definitions.get(key)
        self.consumers.append(
            ContextUse(
                key=key,
                direction=ContextDirection.CONSUME,
                node=declarator,
                binding=name_node,
                default_expression=definition.default_expression if definition else None,
            )
        )

    def _use_ref(self, hook: HookCall, declarator: SyntaxNode, name_node: SyntaxNode, keyword: str) -> None:
        names = tuple(pattern_names(name_node))
        if name_node.type != "identifier":
            self._local(
                LocalKind.UNSUPPORTED, declarator, names=names, keyword=keyword,
                reason="useRef result must be bound to a single name", construct=hook.name,
            )
            return
        if not self._claim(names, declarator):
            return
        self.refs[name_node.text] = RefBinding(
            name=name_node.text,
            node=declarator,
            initial_expression=hook.argument(0),
            type_arguments=hook.type_arguments,
        )

    def _use_id(self, hook: HookCall, declarator: SyntaxNode, name_node: SyntaxNode, keyword: str) -> None:
        self._bind_local(LocalKind.PROPS_ID, declarator, tuple(pattern_names(name_node)), keyword)

    def _effect(self, hook: HookCall, statement: SyntaxNode) -> None:
        callback = hook.argument(0)
        if callback is None:
            self._local(
                LocalKind.UNSUPPORTED, statement,
                reason=f"{hook.name} requires a callback", construct=hook.name,
            )
            return
        deps = hook.argument(1)
        if deps is None:
            dependency_kind = DependencyKind.ON_EVERY_UPDATE
        elif is_empty_array(deps):
            dependency_kind = DependencyKind.ON_MOUNT
        else:
            dependency_kind = DependencyKind.ON_DEPS
            if deps.type != "array":
                self.diagnostics.warning(
                    Stage.ANALYZE,
                    DYNAMIC_HOOK_ARGUMENT,
                    f"{hook.name} dependency list is not an array literal; Svelte tracks"
                    " the values the effect reads instead",
                    line=deps.line,
                    column=deps.column,
                    construct=hook.name,
                )
        timing = EffectTiming.PRE_PAINT if hook.kind is HookKind.USE_LAYOUT_EFFECT else EffectTiming.POST_PAINT

        inner = callback.unwrap()
        body_statements: Tuple[SyntaxNode, ...] = ()
        cleanup: Optional[SyntaxNode] = None
        expression_body = False
        is_reference = not inner.is_function
        if inner.is_function:
            body = inner.field("body")
            if body is not None and body.type == "statement_block":
                statements = list(body.named_children)
                if statements and statements[-1].type == "return_statement":
                    values = statements[-1].named_children
                    if values and not (values[0].type == "identifier" and values[0].text == "undefined"):
                        cleanup = values[0]
                    statements = statements[:-1]
                body_statements = tuple(statements)
            elif body is not None:
                body_statements = (body,)
                expression_body = True
            self._check_stale(hook, inner, dependency_names(deps), deps)
        elif inner.type == "identifier":
            self._info(
                ANALYSIS_AMBIGUITY,
                f"{hook.name} callback is a function reference; its tracked reads cannot be checked",
                callback,
                construct=hook.name,
            )
        else:
            self.diagnostics.warning(
                Stage.ANALYZE,
                DYNAMIC_HOOK_ARGUMENT,
                f"{hook.name} callback is computed at runtime and is called as-is",
                line=callback.line,
                column=callback.column,
                construct=hook.name,
            )

        if dependency_kind is DependencyKind.ON_EVERY_UPDATE:
            self._info(
                EFFECT_EVERY_UPDATE,
                f"{hook.name} without a dependency list runs after every render in React;"
                " the Svelte effect re-runs only when a value it reads changes",
                statement,
                construct=hook.name,
            )

        self.effects.append(
            EffectBinding(
                node=statement,
                hook=hook.name,
                body_expression=callback,
                timing=timing,
                dependency_kind=dependency_kind,
                body_statements=body_statements,
                cleanup_expression=cleanup,
                declared_dependencies=dependency_names(deps),
                is_function_reference=is_reference,
                expression_body=expression_body,
            )
        )

    def _check_stale(
        self,
        hook: HookCall,
        function: SyntaxNode,
        declared: Tuple[str, ...],
        deps: Optional[SyntaxNode],
    ) -> None:
        if not declared:
            return
        used = referenced_names(function)
        stale = []
        for dependency in declared:
            root = root_identifier(dependency)
            if root is not None and root not in used:
                stale.append(dependency)
        if not stale:
            return
        anchor = deps if deps is not None else hook.node
        self.diagnostics.warning(
            Stage.ANALYZE,
            STALE_DEPENDENCY,
            f"{hook.name} lists dependencies its body never reads: {', '.join(stale)}",
            line=anchor.line,
            column=anchor.column,
            construct=hook.name,
        )

    def _custom_hook(self, hook: HookCall) -> None:
        self._info(
            ANALYSIS_AMBIGUITY,
            f"{hook.name} is not a known React hook; the call is kept as-is and must be"
            " ported separately",
            hook.node,
            construct=hook.name,
        )

    def _unsupported_hook(
        self,
        hook: HookCall,
        node: SyntaxNode,
        *,
        names: Tuple[str, ...] = (),
        keyword: Optional[str] = None,
    ) -> None:
        self._local(
            LocalKind.UNSUPPORTED,
            node,
            names=names,
            keyword=keyword,
            reason=f"{hook.name} has no Svelte 5 equivalent",
            construct=hook.name,
        )

    # ------------------------------------------------------------------
    # Bookkeeping
    # ------------------------------------------------------------------

    def _claim(
        self,
        names: Iterable[str],
        node: SyntaxNode,
        *,
        reactive: bool = False,
        reactive_names: Optional[Iterable[str]] = None,
    ) -> bool:
        """Declare ``names``; a redeclaration becomes a placeholder."""
        names = tuple(names)
        duplicates = [name for name in names if name in self.declared]
        if duplicates:
            self.diagnostics.error(
                Stage.ANALYZE,
                DUPLICATE_BINDING,
                f"'{duplicates[0]}' is already declared in this component",
                line=node.line,
                column=node.column,
                construct=duplicates[0],
            )
            self.locals.append(
                LocalDeclaration(
                    kind=LocalKind.UNSUPPORTED,
                    node=node,
                    reason=f"duplicate declaration of '{duplicates[0]}'",
                    construct=duplicates[0],
                )
            )
            return False
        self.declared.update(names)
        if reactive:
            self.reactive.update(reactive_names if reactive_names is not None else names)
        return True

    def _bind_local(
        self,
        kind: LocalKind,
        node: SyntaxNode,
        names: Tuple[str, ...],
        keyword: Optional[str],
        *,
        function: Optional[SyntaxNode] = None,
    ) -> None:
        if self._claim(names, node):
            self.locals.append(
                LocalDeclaration(kind=kind, node=node, names=names, function=function, keyword=keyword)
            )

    def _local(
        self,
        kind: LocalKind,
        node: SyntaxNode,
        *,
        names: Tuple[str, ...] = (),
        keyword: Optional[str] = None,
        reason: Optional[str] = None,
        construct: Optional[str] = None,
    ) -> None:
        self.declared.update(names)
        self.locals.append(
            LocalDeclaration(
                kind=kind, node=node, names=names, keyword=keyword, reason=reason, construct=construct
            )
        )

    def _info(self, code: str, message: str, node: SyntaxNode, *, construct: Optional[str] = None) -> None:
        self.diagnostics.info(
            Stage.ANALYZE, code, message, line=node.line, column=node.column, construct=construct
        )

    # ------------------------------------------------------------------
    # Render tree and linking
    # ------------------------------------------------------------------

    def _assemble_render(
        self,
        builder: RenderTreeBuilder,
        returns: List,
        final: Optional[SyntaxNode],
    ) -> Optional[RenderNode]:
        # build in source order so node ids follow the file
        built_groups = []
        for branches, terminal, else_value in returns:
            built = [(condition, builder.build_value(value)) for condition, value in branches]
            built_else = builder.build_value(else_value) if terminal else None
            built_groups.append((built, terminal, built_else))
        result = builder.build_value(final)
        for built, terminal, built_else in reversed(built_groups):
            alternate = built_else if terminal else result
            for condition, consequent in reversed(built):
                alternate = ConditionalBlock(
                    condition=condition,
                    consequent=consequent if consequent is not None else Fragment(),
                    alternate=alternate,
                )
            result = alternate
        return result

    def _link_refs(self, context: RenderContext) -> None:
        for name, ref in list(self.refs.items()):
            target = context.ref_targets.get(name)
            if target is not None:
                self.refs[name] = RefBinding(
                    name=ref.name,
                    node=ref.node,
                    target_node_id=target,
                    initial_expression=ref.initial_expression,
                    type_arguments=ref.type_arguments,
                    forwarded=ref.forwarded,
                )

    def _record_setter_sites(self, function: SyntaxNode) -> None:
        owners = {}
        for binding in self.state.values():
            if binding.setter:
                owners[binding.setter] = binding.name
        if not owners:
            return
        calls: Dict[str, List[Tuple[int, int]]] = {name: [] for name in owners}
        bare: Dict[str, List[Tuple[int, int]]] = {name: [] for name in owners}
        callee_spans = set()
        for node in function.walk():
            if node.type != "call_expression":
                continue
            callee = node.field("function")
            if callee is not None and callee.type == "identifier" and callee.text in owners:
                calls[callee.text].append(node.span)
                callee_spans.add(callee.span)
        for ref in references(function):
            if ref.text in owners and ref.span not in callee_spans:
                bare[ref.text].append(ref.span)
        for setter, state_name in owners.items():
            binding = self.state[state_name]
            self.state[state_name] = StateBinding(
                name=binding.name,
                node=binding.node,
                kind=binding.kind,
                initial_expression=binding.initial_expression,
                setter=binding.setter,
                setter_call_sites=tuple(calls[setter]),
                setter_references=tuple(bare[setter]),
                reducer=binding.reducer,
                reducer_initializer=binding.reducer_initializer,
                dispatch=binding.dispatch,
                type_arguments=binding.type_arguments,
                lazy_initializer=binding.lazy_initializer,
            )

    def _check_provider_values(self, providers: List[ContextUse]) -> None:
        for provider in providers:
            value = provider.value_expression
            if value is None:
                continue
            reads = sorted(referenced_names(value) & set(self.state))
            if reads:
                self.diagnostics.warning(
                    Stage.ANALYZE,
                    CONTEXT_VALUE_SNAPSHOT,
                    f"{provider.key} value reads state ({', '.join(reads)}); setContext"
                    " captures it once, so consumers see later updates only through"
                    " reactive objects",
                    line=provider.node.line,
                    column=provider.node.column,
                    construct=f"{provider.key}.Provider",
                )

    # ------------------------------------------------------------------
    # Identifier resolution
    # ------------------------------------------------------------------

    def _known_names(self, model: ComponentModel) -> Set[str]:
        known: Set[str] = set(self.module_names) | set(self.declared)
        known.add(model.name)
        known.add(self.chosen.name)
        for binding in model.state_bindings.values():
            known.add(binding.name)
            if binding.setter:
                known.add(binding.setter)
            if binding.dispatch:
                known.add(binding.dispatch)
        for derived in model.derived_bindings.values():
            known.update(derived.names)
        known.update(model.ref_bindings)
        for use in model.context_uses:
            known.update(pattern_names(use.binding))
        for local in model.locals:
            known.update(local.names)
        known.update(snippet.name for snippet in model.snippets)
        return known

    def _resolve(self, model: ComponentModel) -> None:
        resolver = ScopeResolver(self._known_names(model))
        reported: Set[str] = set()

        def check(node: Optional[SyntaxNode], extra: Iterable[str] = ()) -> None:
            if node is None:
                return
            for ref in resolver.unresolved(node, extra):
                if ref.text in reported:
                    continue
                reported.add(ref.text)
                self.diagnostics.warning(
                    Stage.ANALYZE,
                    UNRESOLVED_REFERENCE,
                    f"'{ref.text}' is not declared in this file",
                    line=ref.line,
                    column=ref.column,
                    construct=ref.text,
                )

        for derived in model.derived_bindings.values():
            check(derived.expression)
        for effect in model.effects:
            check(effect.body_expression)
        for snippet in model.snippets:
            params = pattern_names(snippet.params) if snippet.params is not None else ()
            for node, extra in _render_expressions(snippet.body, frozenset(params)):
                check(node, extra)
        if model.render_tree is not None:
            for node, extra in _render_expressions(model.render_tree, frozenset()):
                check(node, extra)


def _render_expressions(
    node: Optional[RenderNode], extra: frozenset
) -> Iterator[Tuple[SyntaxNode, frozenset]]:
    """Yield every source expression of a render tree with names bound around it."""
    if node is None:
        return
    if isinstance(node, TextExpression):
        yield node.expression, extra
    elif isinstance(node, RawHtml):
        yield node.expression, extra
    elif isinstance(node, Element):
        for attr in node.attributes:
            if attr.value is not None:
                yield attr.value, extra
        for event in node.event_bindings:
            yield event.handler, extra
        if node.ref_expression is not None:
            yield node.ref_expression, extra
        for child in node.children:
            yield from _render_expressions(child, extra)
    elif isinstance(node, ConditionalBlock):
        yield node.condition, extra
        yield from _render_expressions(node.consequent, extra)
        yield from _render_expressions(node.alternate, extra)
    elif isinstance(node, ListBlock):
        yield node.iterable_expression, extra
        bound = set(extra)
        bound.update(pattern_names(node.item_binding))
        if node.index_binding:
            bound.add(node.index_binding)
        for declaration in node.local_declarations:
            bound.update(local_bindings(declaration))
        inner = frozenset(bound)
        for declaration in node.local_declarations:
            yield declaration, inner
        if node.key_expression is not None:
            yield node.key_expression, inner
        yield from _render_expressions(node.body, inner)
    elif isinstance(node, ComponentInstance):
        for attr in node.props_expressions:
            if attr.value is not None:
                yield attr.value, extra
        for slot in node.slot_contents:
            yield from _slot_expressions(slot, extra)
    elif isinstance(node, SlotInvocation):
        for arg in node.args:
            yield arg, extra
    elif isinstance(node, Fragment):
        for child in node.children:
            yield from _render_expressions(child, extra)


def _slot_expressions(slot: SlotContent, extra: frozenset) -> Iterator[Tuple[SyntaxNode, frozenset]]:
    bound = set(extra)
    if slot.params is not None:
        bound.update(pattern_names(slot.params))
    yield from _render_expressions(slot.body, frozenset(bound))


def analyze(
    tree: SyntaxTree,
    diagnostics: DiagnosticCollector,
    options: Optional[ConversionOptions] = None,
) -> ComponentModel:
    """Convenience wrapper around :class:`ReactAnalyzer`."""
    return ReactAnalyzer(diagnostics, options).analyze(tree)


__all__ = [
    "ReactAnalyzer",
    "analyze",
    "declared_names",
    "is_react_import",
    "root_identifier",
]
