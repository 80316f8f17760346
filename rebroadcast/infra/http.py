from __future__ import annotations

import asyncio
from typing import Any, Dict, List, Optional

import httpx

from rebroadcast.core.errors import RebroadcastError


class TwitterApiError(RebroadcastError):
    def __init__(self, status_code: int, codes: List[int], message: str):
        super().__init__(f"Twitter API error {status_code} {codes}: {message}")
        self.status_code = status_code
        self.codes = codes


class TwitterClient:
    """
    Cliente mínimo de la API REST v1.1 (bearer token):
      GET  friendships/show.json
      GET  mutes/users/list.json
      POST statuses/retweet/{id}.json

    Reintenta cualquier httpx.RequestError y 5xx; un 4xx se devuelve
    enseguida como TwitterApiError con los códigos de error decodificados.
    """

    def __init__(
        self,
        base_url: str,
        bearer_token: str,
        timeout_sec: int = 15,
        retries: int = 2,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.retries = retries
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout_sec,
            transport=transport,
            headers={"Authorization": f"Bearer {bearer_token}"},
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def friendship(self, source: str, target: str) -> Dict[str, Any]:
        return await self._request(
            "GET",
            "/friendships/show.json",
            params={"source_screen_name": source, "target_screen_name": target},
        )

    async def muted_users(self, cursor: str = "-1") -> Dict[str, Any]:
        return await self._request(
            "GET",
            "/mutes/users/list.json",
            params={"cursor": cursor, "skip_status": "true"},
        )

    async def retweet(self, post_id: int) -> Dict[str, Any]:
        return await self._request("POST", f"/statuses/retweet/{post_id}.json", params={"trim_user": "true"})

    async def _request(self, method: str, path: str, params: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
        last_err: Optional[Exception] = None

        for attempt in range(self.retries + 1):
            try:
                resp = await self._client.request(method, path, params=params)
            except httpx.RequestError as e:
                # también RemoteProtocolError y demás errores de transporte
                last_err = e
                if attempt < self.retries:
                    # backoff simple
                    await asyncio.sleep(0.5 * (attempt + 1))
                    continue
                break

            if resp.status_code >= 500 and attempt < self.retries:
                last_err = _api_error(resp)
                await asyncio.sleep(0.5 * (attempt + 1))
                continue

            if resp.status_code >= 400:
                raise _api_error(resp)

            try:
                data = resp.json()
            except ValueError as e:
                raise TwitterApiError(resp.status_code, [], f"Invalid JSON: {resp.text[:300]}") from e

            if not isinstance(data, dict):
                raise TwitterApiError(resp.status_code, [], f"Unexpected response shape: {resp.text[:300]}")
            return data

        if isinstance(last_err, TwitterApiError):
            raise last_err
        raise TwitterApiError(0, [], f"Failed calling {path} after retries: {last_err}")


def _api_error(resp: httpx.Response) -> TwitterApiError:
    # {"errors": [{"code": 327, "message": "You have already retweeted this Tweet."}]}
    codes: List[int] = []
    message = resp.text[:300]
    try:
        body = resp.json()
    except ValueError:
        body = None

    if isinstance(body, dict) and isinstance(body.get("errors"), list):
        for err in body["errors"]:
            if isinstance(err, dict) and isinstance(err.get("code"), int):
                codes.append(err["code"])
        messages = [str(e.get("message", "")) for e in body["errors"] if isinstance(e, dict)]
        if messages:
            message = "; ".join(messages)

    return TwitterApiError(resp.status_code, codes, message)
