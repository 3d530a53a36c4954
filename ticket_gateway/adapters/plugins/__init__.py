from .registry import InMemoryPluginRegistry, StaticPlugin

__all__ = ["InMemoryPluginRegistry", "StaticPlugin"]
