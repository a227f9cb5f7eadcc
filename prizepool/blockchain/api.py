import os
from urllib.parse import urljoin
from dotenv import load_dotenv
from .utils import open_session, get_jwt_token
from typing import Any, Optional, Mapping


class ChainClient:
    """Thin client for the blockchain gateway used by the raffle operator."""

    def __init__(self, base_fqdn: Optional[str] = None, timeout: int = 45):
        load_dotenv()
        fqdn = base_fqdn or os.getenv("BLOCKCHAIN_BASE_FQDN")
        if not fqdn:
            raise ValueError("Environment variable 'BLOCKCHAIN_BASE_FQDN' is not set")

        self.base_url = f"https://{fqdn}".rstrip("/")
        session_info = open_session()
        if not session_info or len(session_info) != 2:
            raise ValueError("open_session() must return (session, csrf_token)")
        self.session, self.csrf = session_info
        self.jwt = get_jwt_token(self.session)
        self.timeout = timeout

    # -------- headers --------
    @property
    def auth_headers(self) -> Mapping[str, str]:
        return {"Accept": "application/json", "Authorization": f"Bearer {self.jwt}"}

    @property
    def auth_csrf_headers(self) -> Mapping[str, str]:
        return {**self.auth_headers, "X-CSRFTOKEN": self.csrf}

    # -------- core request --------
    def _request(
        self,
        method: str,
        path: str,
        *,
        headers: Optional[Mapping[str, str]] = None,
        params: Optional[dict] = None,
        json: Optional[dict] = None,
    ) -> Any:
        url = urljoin(self.base_url + "/", path.lstrip("/"))
        r = self.session.request(
            method=method.upper(),
            url=url,
            headers=headers or self.auth_headers,
            params=params,
            json=json,
            timeout=self.timeout,
        )
        r.raise_for_status()
        return r.json() if r.content else None

    # -------- API callers --------
    def request_random_words(
        self,
        *,
        key_hash: str,
        subscription_id: int,
        request_confirmations: int,
        callback_gas_limit: int,
        num_words: int,
        consumer: str,
    ) -> str:
        """Submit a verifiable-randomness request and return its identifier.

        The gateway answers later by invoking the consumer's fulfilment hook;
        this call never waits for the random words.
        """
        response = self._request(
            "POST",
            "/api/v1/vrf/requests",
            headers=self.auth_csrf_headers,
            json={
                "key_hash": key_hash,
                "subscription_id": subscription_id,
                "request_confirmations": request_confirmations,
                "callback_gas_limit": callback_gas_limit,
                "num_words": num_words,
                "consumer": consumer,
            },
        )
        if not isinstance(response, dict) or not response.get("request_id"):
            raise RuntimeError(f"Unexpected randomness request response: {response!r}")
        return str(response["request_id"])

    def transfer(self, recipient: str, amount: int) -> dict:
        """Send ``amount`` from the operator wallet to ``recipient``."""
        return self._request(
            "POST",
            "/api/v1/user/wallet/transfer",
            headers=self.auth_csrf_headers,
            json={"recipient": recipient, "amount": amount},
        )
