"""
服务工厂 - 统一的服务创建和管理
"""
from typing import TYPE_CHECKING

# 避免循环导入，使用TYPE_CHECKING
if TYPE_CHECKING:
    from draftmerge.services.compare_service import CompareService


class ServiceFactory:
    """
    服务工厂 - 提供统一的服务访问接口
    """

    @staticmethod
    def get_compare_service() -> 'CompareService':
        """获取对比与合并服务单例"""
        from draftmerge.services.compare_service import CompareService
        return CompareService()
