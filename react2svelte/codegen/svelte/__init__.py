"""Svelte 5 ``.svelte`` file emitter."""

from .emitter import INLINE_LIMIT, SvelteEmitter, emit

__all__ = ["SvelteEmitter", "emit", "INLINE_LIMIT"]
