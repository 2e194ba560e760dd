"""
Slot grid API endpoints.
"""

from fastapi import APIRouter, HTTPException, Query, status

from timebox.api.deps import Slots
from timebox.models.plan import MAX_BLOCK_MINUTES, MIN_BLOCK_MINUTES, PlanModel
from timebox.services.slot_grid import block_end_time

router = APIRouter()


class BlockEnd(PlanModel):
    start_time: str
    duration: int
    end_time: str


@router.get("/slots", response_model=list[str])
async def list_slots(slots: Slots):
    """Ordered half-hour labels of the daily grid."""
    return list(slots)


@router.get("/slots/end-time", response_model=BlockEnd)
async def get_block_end_time(
    slots: Slots,
    start: str = Query(..., description="Start slot label, e.g. 09:00"),
    duration: int = Query(60, ge=MIN_BLOCK_MINUTES, le=MAX_BLOCK_MINUTES, multiple_of=30),
):
    """End label shown while editing a block ("Ends: HH:MM")."""
    if start not in slots:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"{start} is not a slot of the grid",
        )
    return BlockEnd(start_time=start, duration=duration, end_time=block_end_time(start, duration))
