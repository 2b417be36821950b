"""API Key Authorizer — Authorizer backed by a configured key → actions table.

Invariants:
    - Missing or unknown key → not authorized
    - "*" grants every TransferAction
"""

import logging

from transfer_service.core.commands import CallerContext
from transfer_service.core.domain_types import TransferAction

logger = logging.getLogger(__name__)

WILDCARD = "*"


class ApiKeyAuthorizer:

    def __init__(self, grants: dict[str, list[str]]):
        self._grants = {key: frozenset(actions) for key, actions in grants.items()}

    async def is_authorized(
        self, caller: CallerContext, action: TransferAction,
    ) -> bool:
        if not caller.api_key:
            return False
        allowed = self._grants.get(caller.api_key)
        if allowed is None:
            logger.info(
                "Unknown API key presented",
                extra={"request_id": caller.request_id, "action": action.value},
            )
            return False
        return WILDCARD in allowed or action.value in allowed
