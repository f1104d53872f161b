"""
基础服务类 - 单例装饰器与服务公共功能
"""
from typing import Dict, Type, TypeVar

from revision_compare.core.config import Settings, get_settings
from revision_compare.core.logging import get_logger

T = TypeVar('T')


def singleton(cls: Type[T]) -> Type[T]:
    """
    单例装饰器 - 进程内每个服务类只保留一个实例

    The wrapper subclasses ``cls`` so isinstance checks and the class name
    still work; ``__init__`` of the wrapped class runs only for the first
    construction.
    """
    instances: Dict[type, object] = {}

    class SingletonWrapper(cls):  # type: ignore
        def __new__(cls, *args, **kwargs):
            if cls not in instances:
                instances[cls] = object.__new__(cls)
            return instances[cls]

        def __init__(self, *args, **kwargs):
            if not hasattr(self, '_singleton_initialized'):
                super().__init__(*args, **kwargs)
                self._singleton_initialized = True

    SingletonWrapper.__name__ = cls.__name__
    SingletonWrapper.__qualname__ = cls.__qualname__
    SingletonWrapper.__module__ = cls.__module__
    SingletonWrapper.__doc__ = cls.__doc__

    return SingletonWrapper  # type: ignore


class BaseService:
    """
    基础服务类

    Subclasses get a structlog logger bound to the service name, the cached
    settings, and a lazy ``_initialize`` hook for clients that should not be
    built at import time.
    """

    def __init__(self):
        self.logger = get_logger(self.__class__.__module__, service=self.__class__.__name__)
        self.settings: Settings = get_settings()
        self._initialized = False

    def _ensure_initialized(self):
        """首次使用时调用 _initialize"""
        if not self._initialized:
            self._initialize()
            self._initialized = True

    def _initialize(self):
        pass

    def __repr__(self):
        return f"<{self.__class__.__name__} initialized={self._initialized}>"
