import logging
from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from examcore.core.clock import Clock
from examcore.schemas.exam_attempt import AttemptReport
from examcore.schemas.response import APIResponse
from examcore.schemas.user import UserContext
from examcore.services.attempt_scheduler import attempt_scheduler
from examcore.utils import deps
from examcore.utils.permission import PermissionHelper as permission_helper

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/sweep", response_model=APIResponse[List[AttemptReport]])
async def run_sweep(
    *,
    db: Session = Depends(deps.get_transactional_db),
    context: UserContext = Depends(deps.get_current_user_with_context),
    clock: Clock = Depends(deps.get_clock)
):
    """Run the expiry sweep now instead of waiting for the next scheduled tick."""
    permission_helper.require_instructor(context)
    logger.info(f"Manual sweep requested by user {context.user_id}")
    reports = attempt_scheduler.sweep_expired_attempts(db, now=clock.now())
    return APIResponse(message=f"{len(reports)} expired attempt(s) finalized", data=reports)
