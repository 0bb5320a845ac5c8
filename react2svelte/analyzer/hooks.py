"""
Hook call recognition.

React hooks are plain function calls resolved by name. They are matched here
into a closed :class:`HookKind` enumeration; anything shaped like a hook but
not known becomes :attr:`HookKind.CUSTOM` (an analysis ambiguity) rather than
an error.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from react2svelte.ast import SyntaxNode


class HookKind(str, Enum):
    USE_STATE = "useState"
    USE_REDUCER = "useReducer"
    USE_MEMO = "useMemo"
    USE_CALLBACK = "useCallback"
    USE_EFFECT = "useEffect"
    USE_LAYOUT_EFFECT = "useLayoutEffect"
    USE_CONTEXT = "useContext"
    USE_REF = "useRef"
    CREATE_CONTEXT = "createContext"
    USE_ID = "useId"
    USE_DEBUG_VALUE = "useDebugValue"
    UNSUPPORTED = "unsupported"
    CUSTOM = "custom"


_KNOWN = {kind.value: kind for kind in HookKind if kind not in (HookKind.UNSUPPORTED, HookKind.CUSTOM)}

# React hooks with no Svelte 5 counterpart.
UNSUPPORTED_HOOKS = frozenset(
    {
        "useTransition",
        "useDeferredValue",
        "useImperativeHandle",
        "useSyncExternalStore",
        "useInsertionEffect",
        "useOptimistic",
        "useActionState",
        "useFormStatus",
        "use",
    }
)

_HOOK_NAME_RE = re.compile(r"^use[A-Z0-9]")

REACT_NAMESPACES = frozenset({"React"})


@dataclass(frozen=True)
class HookCall:
    kind: HookKind
    name: str
    node: SyntaxNode
    arguments: Tuple[SyntaxNode, ...] = ()
    type_arguments: Optional[str] = None

    def argument(self, index: int) -> Optional[SyntaxNode]:
        if index < len(self.arguments):
            return self.arguments[index]
        return None


def callee_name(call: SyntaxNode) -> Optional[str]:
    """Return ``name`` for ``name(...)`` and ``React.name(...)`` calls."""
    if call.type != "call_expression":
        return None
    function = call.field("function")
    if function is None:
        return None
    if function.type == "identifier":
        return function.text
    if function.type == "member_expression":
        obj = function.field("object")
        prop = function.field("property")
        if obj is not None and prop is not None and obj.text in REACT_NAMESPACES:
            return prop.text
    return None


def call_arguments(call: SyntaxNode) -> Tuple[SyntaxNode, ...]:
    arguments = call.field("arguments")
    if arguments is None:
        return ()
    return arguments.named_children


def match_hook(node: Optional[SyntaxNode]) -> Optional[HookCall]:
    """Classify ``node`` as a hook call, or return None."""
    if node is None:
        return None
    node = node.unwrap()
    name = callee_name(node)
    if name is None:
        return None
    if name in _KNOWN:
        kind = _KNOWN[name]
    elif name in UNSUPPORTED_HOOKS:
        kind = HookKind.UNSUPPORTED
    elif _HOOK_NAME_RE.match(name):
        kind = HookKind.CUSTOM
    else:
        return None
    type_args = node.field("type_arguments")
    return HookCall(
        kind=kind,
        name=name,
        node=node,
        arguments=call_arguments(node),
        type_arguments=type_args.text[1:-1].strip() if type_args is not None else None,
    )


def is_hook_call(node: SyntaxNode) -> bool:
    hook = match_hook(node)
    return hook is not None and hook.kind is not HookKind.CUSTOM


def dependency_names(deps: Optional[SyntaxNode]) -> Tuple[str, ...]:
    """Return the dependency array entries as source strings."""
    if deps is None or deps.type != "array":
        return ()
    return tuple(child.text for child in deps.named_children)


def is_empty_array(node: Optional[SyntaxNode]) -> bool:
    return node is not None and node.type == "array" and not node.named_children


__all__ = [
    "HookKind",
    "HookCall",
    "UNSUPPORTED_HOOKS",
    "callee_name",
    "call_arguments",
    "match_hook",
    "is_hook_call",
    "dependency_names",
    "is_empty_array",
]
