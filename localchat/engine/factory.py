import importlib
from typing import Callable

from localchat.kernel.errors import BindingUnavailable

KNOWN_BINDINGS = {
    "gpt4all": "gpt4all:GPT4All",
    "llama_cpp": "localchat.engine.llama_cpp:LlamaCppModel",
}


class BindingFactory:
    @staticmethod
    def resolve(binding: str) -> Callable:
        """
        Resolve a binding name (`gpt4all`, `llama_cpp`) or a `module:attribute`
        import path to the callable that constructs model instances.

        Raises BindingUnavailable when the module is not installed or does not
        export the attribute.
        """
        target = KNOWN_BINDINGS.get(binding, binding)
        module_name, _, attribute = target.partition(":")
        if not module_name or not attribute:
            raise BindingUnavailable(f"Unknown binding: {binding!r} (expected a known name or 'module:attribute')")

        try:
            module = importlib.import_module(module_name)
        except ImportError as e:
            raise BindingUnavailable(f"Binding module '{module_name}' is not importable: {e}") from e

        constructor = getattr(module, attribute, None)
        if not callable(constructor):
            raise BindingUnavailable(f"Binding '{target}' does not export a callable '{attribute}'")
        return constructor
