"""Startup reconciliation of the login state with a stored credential."""

import logging

from auth import AUTH_TOKEN_COOKIE_NAME, StorageUnavailableError, describe_error

from .attempt_state import AttemptState, NoUser, Succeeded
from .ports import CredentialStorage, IdentityService

log = logging.getLogger(__name__)


async def reconcile_session(
    storage: CredentialStorage,
    identity_service: IdentityService,
    key: str = AUTH_TOKEN_COOKIE_NAME,
) -> AttemptState:
    """
    Resolve the initial state from persisted session evidence.

    Failures never surface as ``Failed``: a background check that cannot
    complete is treated as "no session" so first render is never blocked.
    """
    try:
        credential = storage.get(key)
    except StorageUnavailableError as e:
        log.warning(f"Error reading stored credential: {describe_error(e)}")
        credential = None
    except Exception:
        log.exception("Unexpected error reading stored credential")
        credential = None

    if not credential:
        log.info("No user from previous session")
        return NoUser()

    log.info("Found stored credential, resolving identity")
    try:
        identity = await identity_service.fetch_current_identity()
    except Exception as e:
        log.warning(f"Error resolving user from stored credential: {describe_error(e)}")
        return NoUser()

    if identity is None:
        log.info("Stored credential is stale, no user from previous session")
        return NoUser()

    log.info(f"Setting user from previous session: {identity.username}")
    return Succeeded(identity)
