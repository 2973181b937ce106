from fastapi import Depends, Request
from sqlmodel import Session

from campaign_service.core.config import settings
from campaign_service.core.db import get_session
from campaign_service.core.exceptions import MissingTokenException
from campaign_service.core.security import GoogleIdentityVerifier, extract_bearer_token
from campaign_service.models.identity import Identity
from campaign_service.services.campaign_service import CampaignService
from campaign_service.services.sequence import RedisSequence, SequenceGenerator, SqlSequence


def get_sequence_generator(
    request: Request,
    session: Session = Depends(get_session),
) -> SequenceGenerator:
    if settings.SEQUENCE_BACKEND == "redis":
        return RedisSequence(request.app.state.redis)
    return SqlSequence(session)


def get_campaign_service(
    session: Session = Depends(get_session),
    sequence: SequenceGenerator = Depends(get_sequence_generator),
) -> CampaignService:
    return CampaignService(session, sequence)


def get_identity_verifier(request: Request) -> GoogleIdentityVerifier:
    return request.app.state.identity_verifier


def get_current_user(
    request: Request,
    verifier: GoogleIdentityVerifier = Depends(get_identity_verifier),
) -> Identity:
    """Require a valid Google ID token and attach the caller to ``request.state.user``."""
    token = extract_bearer_token(request.headers.get("Authorization"))
    if token is None:
        raise MissingTokenException()

    identity = verifier.verify(token)
    request.state.user = identity
    return identity
