from __future__ import annotations

from typing import Any, Dict, Optional

import httpx
import typer

from cli.config import CLIConfig


class ApiClient:
    """Minimal HTTP client for the vitals service."""

    def __init__(self, config: CLIConfig) -> None:
        self._config = config
        self._client = httpx.Client(base_url=config.base_url, timeout=config.timeout)

    def close(self) -> None:
        self._client.close()

    def register(self, user_id: str, name: Optional[str] = None, email: Optional[str] = None) -> Dict[str, Any]:
        return self._request("PUT", f"/users/{user_id}", json={"name": name, "email": email})

    def dashboard(self, user_id: str) -> Dict[str, Any]:
        return self._request("GET", f"/users/{user_id}/dashboard")

    def analytics(self, user_id: str, metric: str, window: Optional[str] = None) -> Dict[str, Any]:
        params = {"window": window} if window else None
        return self._request("GET", f"/users/{user_id}/analytics/{metric}", params=params)

    def record(self, user_id: str, metric: str, value: float) -> Dict[str, Any]:
        return self._request("POST", f"/users/{user_id}/readings/{metric}", json={"value": value})

    def measure(self, user_id: str, metric: str) -> Dict[str, Any]:
        return self._request("POST", f"/users/{user_id}/measure/{metric}")

    def chat(self, user_id: str, message: str) -> str:
        payload = self._request("POST", f"/users/{user_id}/chat", json={"message": message})
        reply = payload.get("reply")
        if not isinstance(reply, str):
            raise typer.BadParameter("Unexpected response payload from the assistant.")
        return reply

    def _request(self, method: str, path: str, **kwargs: Any) -> Dict[str, Any]:
        try:
            response = self._client.request(method, path, **kwargs)
            if response.status_code == 404:
                raise typer.BadParameter(self._detail(response) or f"{path} was not found.")
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            self._handle_http_error(exc)
        except httpx.TransportError as exc:
            typer.secho(
                f"Could not reach {self._config.base_url}: {exc.__class__.__name__}",
                fg=typer.colors.RED,
                err=True,
            )
            raise typer.Exit(code=1)
        return response.json()

    @staticmethod
    def _detail(response: httpx.Response) -> str | None:
        try:
            data = response.json()
        except ValueError:
            return response.text.strip() or None
        if isinstance(data, dict):
            detail = data.get("detail")
            return detail if isinstance(detail, str) else None
        return None

    @classmethod
    def _handle_http_error(cls, exc: httpx.HTTPStatusError) -> None:
        detail = cls._detail(exc.response)
        message = (
            f"Request failed with status {exc.response.status_code}: {detail or 'no detail provided.'}"
        )
        typer.secho(message, fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
