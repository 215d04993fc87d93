import importlib
from typing import Optional, Type, TypeVar

from brainvault.config import AdapterConfig

T = TypeVar("T")


def load_class(path: str) -> type:
    if not path or "." not in path:
        raise ValueError(f"Invalid class path: {path}")
    module_path, class_name = path.rsplit(".", 1)
    module = importlib.import_module(module_path)
    return getattr(module, class_name)


def build_adapter(adapter: AdapterConfig, expected: Optional[Type[T]] = None) -> T:
    klass = load_class(adapter.class_path)
    if expected is not None and not issubclass(klass, expected):
        raise TypeError(f"{adapter.class_path} is not a {expected.__name__}")
    return klass(**adapter.settings)
