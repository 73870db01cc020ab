"""
基础服务类 - 所有服务的公共功能
Services get a logger bound to their own name, live settings, and a
one-time ``_initialize`` hook that runs on first real use.
"""
from typing import Any, Dict, Type, TypeVar

from draftmerge.core.config import Settings, get_settings
from draftmerge.core.logging import get_logger

ServiceT = TypeVar("ServiceT")


def singleton(cls: Type[ServiceT]) -> Type[ServiceT]:
    """
    单例装饰器 - 每个服务类在进程内只有一个实例
    Constructor arguments of the first call win; later calls get the same object.
    """
    registry: Dict[type, Any] = {}

    class Shared(cls):  # type: ignore
        def __new__(klass, *args, **kwargs):
            if klass not in registry:
                registry[klass] = object.__new__(klass)
            return registry[klass]

        def __init__(self, *args, **kwargs):
            if getattr(self, "_constructed", False):
                return
            super().__init__(*args, **kwargs)
            self._constructed = True

    for attr in ("__name__", "__qualname__", "__module__", "__doc__"):
        setattr(Shared, attr, getattr(cls, attr))
    return Shared  # type: ignore


class BaseService:
    """基础服务类"""

    def __init__(self):
        self.logger = get_logger(type(self).__module__, service=type(self).__name__)
        self._initialized = False

    @property
    def settings(self) -> Settings:
        # Re-read each time so a cleared settings cache takes effect
        return get_settings()

    def _ensure_initialized(self) -> None:
        if not self._initialized:
            self._initialize()
            self._initialized = True

    def _initialize(self) -> None:
        """子类覆盖此方法，创建依赖的子服务"""

    def __repr__(self):
        return f"<{type(self).__name__} initialized={self._initialized}>"
