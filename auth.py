import os
import logging
import streamlit as st

log = logging.getLogger(__name__)

class StorageUnavailableError(Exception):
    pass

class IdentityServiceError(Exception):
    pass

class InvalidCredentialsError(IdentityServiceError):
    pass

class SlotWriterError(RuntimeError):
    pass

AUTH_TOKEN_COOKIE_NAME = "AUTH_TOKEN"
INVALID_TOKEN_VALUE = "invalid"
DEMO_USERNAME = "bananas"

DEFAULT_IDENTITY_BACKEND = "demo"
DEFAULT_IDENTITY_API_URL = "http://localhost:8000"
DEFAULT_IDENTITY_TIMEOUT = 10.0
DEFAULT_DEMO_LATENCY = 0.25
CREDENTIAL_DB = "credentials.db"

def get_secret(key, default=None):
    try:
        value = st.secrets.get(key)
    except FileNotFoundError:
        value = None
    except Exception as e:
        # Malformed secrets.toml: fall back to the environment
        log.warning(f"Could not read Streamlit secrets: {e}")
        value = None
    if value is None:
        value = os.getenv(key)
    return default if value is None else value

def _get_float(key, default):
    raw = get_secret(key)
    if raw is None:
        return default
    try:
        return float(raw)
    except (TypeError, ValueError):
        log.warning(f"Ignoring non-numeric {key}={raw!r}, using {default}")
        return default

def get_identity_backend():
    return str(get_secret("IDENTITY_BACKEND", DEFAULT_IDENTITY_BACKEND)).strip().lower()

def get_credential_db():
    return get_secret("CREDENTIAL_DB", CREDENTIAL_DB)

def get_identity_service(storage, backend=None):
    backend = backend or get_identity_backend()
    if backend == "http":
        from infrastructure.identity.http_identity_service import HttpIdentityService
        return HttpIdentityService(
            storage,
            base_url=get_secret("IDENTITY_API_URL", DEFAULT_IDENTITY_API_URL),
            timeout=_get_float("IDENTITY_TIMEOUT", DEFAULT_IDENTITY_TIMEOUT),
        )
    if backend != "demo":
        log.warning(f"Unknown IDENTITY_BACKEND={backend!r}, falling back to demo")
    from infrastructure.identity.demo_identity_service import DemoIdentityService
    return DemoIdentityService(
        storage,
        latency=_get_float("DEMO_LATENCY_SECONDS", DEFAULT_DEMO_LATENCY),
    )

def describe_error(exc):
    message = str(exc).strip()
    return message or type(exc).__name__
