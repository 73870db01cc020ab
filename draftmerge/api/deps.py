from fastapi import Header

from draftmerge.services import ServiceFactory
from draftmerge.services.compare_service import CompareService


def get_compare_service() -> CompareService:
    """获取对比与合并服务单例"""
    return ServiceFactory.get_compare_service()


def get_actor_id(x_user_id: str = Header(default="system", max_length=64)) -> str:
    """Acting user, as forwarded by the authenticating proxy."""
    return x_user_id
