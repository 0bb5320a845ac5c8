"""Code generation backends for react2svelte."""

from .svelte import SvelteEmitter, emit

__all__ = ["SvelteEmitter", "emit"]
