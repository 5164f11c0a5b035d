"""
Builder lifecycle hooks.

Classes using ``HasBuilderEvents`` accept class-level ``resolving`` hooks,
fired when an instance is constructed, and ``composing`` hooks, fired right
before it renders. Hooks registered on a base class fire for subclasses too.

    Content.composing(lambda content: content.simple(), once=True)
"""

from collections import defaultdict

_hooks = defaultdict(list)


class HasBuilderEvents:
    @classmethod
    def resolving(cls, callback, once=False):
        _hooks[(cls, "resolving")].append([callback, once])

    @classmethod
    def composing(cls, callback, once=False):
        _hooks[(cls, "composing")].append([callback, once])

    @classmethod
    def clear_builder_events(cls):
        for event in ("resolving", "composing"):
            _hooks.pop((cls, event), None)

    def call_resolving(self, *args):
        self._fire_builder_event("resolving", *args)

    def call_composing(self, *args):
        self._fire_builder_event("composing", *args)

    def _fire_builder_event(self, event, *args):
        for klass in type(self).__mro__:
            hooks = _hooks.get((klass, event))
            if not hooks:
                continue
            for hook in list(hooks):
                callback, once = hook
                if once:
                    hooks.remove(hook)
                callback(self, *args)
