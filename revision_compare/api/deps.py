from revision_compare.services import ServiceFactory
from revision_compare.services.compare_session import SimilarityMatcher
from revision_compare.services.session_registry import SessionRegistry


def get_matcher() -> SimilarityMatcher:
    """获取语义匹配服务单例"""
    return ServiceFactory.get_similarity_service()


def get_session_registry() -> SessionRegistry:
    """获取会话注册表单例"""
    return ServiceFactory.get_session_registry()
