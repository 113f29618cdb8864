from fastapi import HTTPException, status
from pydantic import BaseModel


def collect_patch_values(
    patch: BaseModel,
    fields: tuple[str, ...],
    nullable: frozenset[str] = frozenset(),
) -> dict:
    """Return the columns a sparse patch actually sets, in ``fields`` order.

    A field the client omitted is skipped; an explicit null is kept only for
    nullable columns. An empty patch is rejected before any statement runs.
    """
    values = {}
    for field in fields:
        if field not in patch.model_fields_set:
            continue
        value = getattr(patch, field)
        if value is None and field not in nullable:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"{field} cannot be empty",
            )
        values[field] = value

    if not values:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No fields to update",
        )
    return values
