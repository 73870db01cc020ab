"""
服务模块 - 提供统一的服务访问接口
"""

from draftmerge.services.base_service import BaseService, singleton
from draftmerge.services.service_factory import ServiceFactory

__all__ = [
    'BaseService',
    'singleton',
    'ServiceFactory',
]
