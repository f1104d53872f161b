"""
服务工厂 - 统一的服务创建和管理
Following Linus principle: Simple and practical service management
"""
from typing import TYPE_CHECKING

# 避免循环导入，使用TYPE_CHECKING
if TYPE_CHECKING:
    from revision_compare.services.session_registry import SessionRegistry
    from revision_compare.services.similarity_service import SimilarityService


class ServiceFactory:
    """
    服务工厂 - 提供统一的服务访问接口

    所有服务都使用单例模式
    """

    @staticmethod
    def get_similarity_service() -> 'SimilarityService':
        """获取语义匹配服务"""
        from revision_compare.services.similarity_service import SimilarityService
        return SimilarityService()

    @staticmethod
    def get_session_registry() -> 'SessionRegistry':
        """获取会话注册表"""
        from revision_compare.services.session_registry import SessionRegistry
        return SessionRegistry()
