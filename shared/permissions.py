"""
Ownership checks: the only authorization mechanism in this service.

A check reads the target row with service credentials and compares its owning
column(s) with the caller's subject id.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from .auth import CallerIdentity
from .errors import ForbiddenError, NotFoundError
from .gateway import DataGateway, eq
from .validation import require_uuid

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OwnershipCheck:
    """
    Describes one row the caller must own.

    `owner_columns` are dotted paths into the selected row; matching any one of
    them grants access (e.g. either participant of a care session).
    """

    table: str
    row_id: str
    owner_columns: Tuple[str, ...]
    select: Optional[str] = None
    id_column: str = "id"
    resource: str = "Resource"
    forbidden_message: Optional[str] = None

    def select_clause(self) -> str:
        if self.select:
            return self.select
        return ",".join((self.id_column,) + self.owner_columns)


def owned_by(table: str, row_id: str, owner_column: str, resource: str, **kwargs) -> OwnershipCheck:
    """Shorthand for the common single-owner-column check."""
    return OwnershipCheck(
        table=table,
        row_id=row_id,
        owner_columns=(owner_column,),
        resource=resource,
        **kwargs
    )


def _lookup(row: Dict, path: str) -> Any:
    value: Any = row
    for part in path.split("."):
        if not isinstance(value, dict):
            return None
        value = value.get(part)
    return value


async def check_ownership(
    gateway: DataGateway,
    identity: CallerIdentity,
    check: OwnershipCheck
) -> Dict:
    """
    Check that the caller owns the row described by `check`.

    Args:
        gateway: The data gateway
        identity: The verified caller
        check: The row and owning column(s) to verify

    Returns:
        The selected row

    Raises:
        InvalidInputError: If the row id is not a UUID
        NotFoundError: If the row doesn't exist
        ForbiddenError: If no owning column matches the caller
    """
    row_id = require_uuid(check.row_id, check.id_column)
    row = await gateway.select_one(
        check.table,
        credentials=gateway.as_service(),
        select=check.select_clause(),
        filters={check.id_column: eq(row_id)},
    )

    if not row:
        raise NotFoundError(f"{check.resource} not found")

    for column in check.owner_columns:
        if _lookup(row, column) == identity.subject_id:
            return row

    logger.warning(
        f"User {identity.subject_id} denied access to {check.table} {check.row_id}"
    )
    raise ForbiddenError(
        check.forbidden_message
        or f"You don't have access to this {check.resource.lower()}"
    )
