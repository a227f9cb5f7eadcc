import os
import logging
import requests
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# Ensure environment variables from .env are loaded when this module is imported.
load_dotenv()


def _base_url() -> str:
    fqdn = os.environ.get("BLOCKCHAIN_BASE_FQDN")
    if not fqdn:
        raise RuntimeError("Environment variable 'BLOCKCHAIN_BASE_FQDN' is not set")
    return "https://" + fqdn


def open_session():
    """Open a requests session to the blockchain gateway and fetch CSRF.

    Returns
    -------
    tuple[requests.Session, str]
        The initialized session and CSRF token string.

    Raises
    ------
    RuntimeError
        If ``BLOCKCHAIN_BASE_FQDN`` is not set, the gateway returns no
        CSRF cookie, or the session cannot be established. Any underlying
        exception is re-raised as a ``RuntimeError`` with context.
    """
    url = _base_url()

    session = requests.Session()
    try:
        response = session.get(url)
        response.raise_for_status()

        csrf_token = response.cookies.get("csrftoken")
        if not csrf_token:
            raise RuntimeError("Gateway did not return a CSRF token")
        # Do not log the CSRF token value
        logger.debug(f"CSRF token acquired from {len(session.cookies)} cookies")
        return session, csrf_token

    except Exception as e:
        logger.critical(f"Error occurred while starting gateway session: {e}")
        raise RuntimeError(f"Failed to establish session: {e}") from e


def get_jwt_token(session: requests.Session) -> str:
    """Obtain a JWT access token for the raffle's operator account.

    Parameters
    ----------
    session : requests.Session
        A live session for the blockchain gateway.

    Returns
    -------
    str
        The JWT access token string.

    Raises
    ------
    RuntimeError
        If the operator credentials or the gateway FQDN are not set.
    requests.HTTPError
        If the login request fails.
    KeyError
        If the response payload does not include an ``"access"`` field.
    """
    username = os.environ.get("BLOCKCHAIN_ADMIN_USERNAME")
    password = os.environ.get("BLOCKCHAIN_ADMIN_PASSWORD")
    if not username or not password:
        raise RuntimeError("Blockchain operator credentials are not configured")

    # Never log raw credentials
    logger.debug("Attempting JWT login with configured operator username")
    response = session.post(
        _base_url() + "/api/v1/auth/jwt-token",
        json={"username": username, "password": password},
    )
    response.raise_for_status()

    logger.debug("JWT token response received (content redacted)")
    return response.json()["access"]
