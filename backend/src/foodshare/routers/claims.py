from fastapi import APIRouter, Depends
from sqlmodel import Session

from foodshare.core.database import get_session
from foodshare.models.claims import ClaimRead
from foodshare.services import claims as claim_service

router = APIRouter(prefix="/claims", tags=["claims"])


@router.post("/{claim_id}/complete", response_model=ClaimRead, summary="Mark pickup as completed")
def complete_pickup(claim_id: str, session: Session = Depends(get_session)):
    return claim_service.mark_pickup_completed(session, claim_id)
