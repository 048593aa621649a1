import logging

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from ...models.invitable import Invitable, UnknownInvitableError
from ...models.user import User
from ...platform.database import get_db
from .schemas import InviteBatchCreate, InviteBatchResponse, InviteClaimRequest, InviteResponse
from .service import InviteBatchProcessor, InviteClaimError, build_invites, claim_invite

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/invites", tags=["Invites"])


@router.post("", response_model=InviteBatchResponse, status_code=status.HTTP_201_CREATED)
def create_invites(data: InviteBatchCreate, db: Session = Depends(get_db)):
    """Invite a list of emails into an invitable resource.

    Responds 201 when every invite was saved and 422 with the failed emails
    otherwise. The invites that did save are kept either way.
    """
    try:
        model = Invitable.resolve_type(data.invitable_type)
    except UnknownInvitableError:
        raise HTTPException(status_code=404, detail="Invitable not found")
    invitable = db.get(model, data.invitable_id)
    if invitable is None:
        raise HTTPException(status_code=404, detail="Invitable not found")

    sender = None
    if data.sender_id is not None:
        sender = db.get(User, data.sender_id)
        if sender is None:
            raise HTTPException(status_code=404, detail="Sender not found")

    invites = build_invites(db, invitable, data.emails, sender=sender)
    failures = InviteBatchProcessor(db, invites).send_invites()
    body = InviteBatchResponse(invited=len(invites) - len(failures), failures=failures)
    if failures:
        logger.info("Invite batch for %s:%s had %d failures", data.invitable_type, data.invitable_id, len(failures))
        return JSONResponse(status_code=422, content=body.model_dump())
    return body


@router.post("/claim", response_model=InviteResponse)
def claim(data: InviteClaimRequest, db: Session = Depends(get_db)):
    """Redeem an invite token for a newly registered user."""
    user = db.get(User, data.user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    try:
        return claim_invite(db, data.token, user)
    except InviteClaimError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
