"""
战役管理 API
"""
import logging
from contextlib import contextmanager
from typing import Type

from fastapi import APIRouter, Depends, status

from campaign_service.api.deps import get_campaign_service
from campaign_service.core.exceptions import (
    NotFoundException,
    OperationFailedException,
    PreviewFailedException,
    ValidationException,
)
from campaign_service.models.campaign import (
    CampaignCreate,
    CampaignListResponse,
    CampaignMutationResponse,
    CampaignRead,
    CampaignResponse,
    CampaignUpdate,
    MessageResponse,
    PreviewRequest,
    PreviewResponse,
)
from campaign_service.models.customer import CustomerRead
from campaign_service.services.campaign_service import CampaignService

logger = logging.getLogger(__name__)

router = APIRouter()


@contextmanager
def reported_as(message: str, exc_class: Type[OperationFailedException] = OperationFailedException):
    """Pass client errors through; log anything else and report ``message`` only."""
    try:
        yield
    except (ValidationException, NotFoundException):
        raise
    except Exception as e:
        logger.exception(f"{message}: {e}")
        raise exc_class(message=message) from e


@router.post("/preview", response_model=PreviewResponse)
def preview_campaign(
    body: PreviewRequest,
    service: CampaignService = Depends(get_campaign_service)
):
    """预览匹配客户"""
    with reported_as("Error previewing campaign audience", PreviewFailedException):
        customers = service.preview(body.rules)
    return PreviewResponse(
        matched_count=len(customers),
        customers=[CustomerRead.model_validate(c) for c in customers],
    )


@router.post("/create", response_model=CampaignMutationResponse, status_code=status.HTTP_201_CREATED)
def create_campaign(
    body: CampaignCreate,
    service: CampaignService = Depends(get_campaign_service)
):
    """创建战役"""
    with reported_as("Failed to create campaign"):
        campaign = service.create(body)
    return CampaignMutationResponse(
        message="Campaign created successfully",
        campaign=CampaignRead.model_validate(campaign),
    )


@router.get("/", response_model=CampaignListResponse)
def get_campaigns(service: CampaignService = Depends(get_campaign_service)):
    """获取战役列表 (newest first)"""
    with reported_as("Error fetching campaigns"):
        campaigns = service.list_all()
    return CampaignListResponse(campaigns=[CampaignRead.model_validate(c) for c in campaigns])


@router.get("/{campaign_id}", response_model=CampaignResponse)
def get_campaign(
    campaign_id: str,
    service: CampaignService = Depends(get_campaign_service)
):
    """获取战役详情"""
    with reported_as("Error fetching campaign"):
        campaign = service.get(campaign_id)
    return CampaignResponse(campaign=CampaignRead.model_validate(campaign))


@router.put("/{campaign_id}", response_model=CampaignMutationResponse)
def update_campaign(
    campaign_id: str,
    updates: CampaignUpdate,
    service: CampaignService = Depends(get_campaign_service)
):
    """更新战役"""
    with reported_as("Error updating campaign"):
        campaign = service.update(campaign_id, updates)
    return CampaignMutationResponse(
        message="Campaign updated successfully",
        campaign=CampaignRead.model_validate(campaign),
    )


@router.delete("/{campaign_id}", response_model=MessageResponse)
def delete_campaign(
    campaign_id: str,
    service: CampaignService = Depends(get_campaign_service)
):
    """删除战役"""
    with reported_as("Error deleting campaign"):
        service.delete(campaign_id)
    return MessageResponse(message="Campaign deleted")
