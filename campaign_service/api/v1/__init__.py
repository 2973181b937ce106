from fastapi import APIRouter, Depends
from campaign_service.api.v1.endpoints import campaigns
from campaign_service.api.deps import get_current_user
from campaign_service.core.config import settings

router = APIRouter()


@router.get("/health")
def health_check():
    return {"status": "ok", "message": "Backend is running"}


# 根据安全模式配置认证依赖
def get_auth_dependencies():
    if settings.SECURITY_ENABLED:
        return [Depends(get_current_user)]
    return []


router.include_router(
    campaigns.router,
    prefix="/campaigns",
    tags=["campaigns"],
    dependencies=get_auth_dependencies()
)
