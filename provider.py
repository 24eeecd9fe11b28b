"""Ollama inference client.

A provider is live-checked at construction: either you get one that answered
the heartbeat, or the constructor raises. After that it only issues single,
non-streaming /api/generate calls.
"""

import httpx

from protocol import (
    GENERATE_PATH, HEALTH_PATH, TEMPERATURE, DEFAULT_TIMEOUT, HEARTBEAT_TIMEOUT, HTML_PREFIX,
    GenerateResult, ConfigurationError, ProviderConnectionError, ProviderError,
    ProxyInterferenceError,
)


_PROXY_MSG = (
    "received an HTML response instead of JSON. "
    "Check for captive portals or network proxy issues"
)


def looks_like_html(text: str) -> bool:
    return text.lstrip()[:len(HTML_PREFIX)].lower() == HTML_PREFIX


def _parse_base_url(base_url: str) -> httpx.URL:
    try:
        url = httpx.URL(base_url)
    except (httpx.InvalidURL, TypeError) as e:
        raise ProviderConnectionError(f"failed to parse Ollama base URL {base_url!r}: {e}") from e
    if url.scheme not in ("http", "https") or not url.host:
        raise ProviderConnectionError(
            f"failed to parse Ollama base URL {base_url!r}: expected http(s)://host[:port]"
        )
    return url


class OllamaProvider:
    """Live connection to a local Ollama server."""

    def __init__(
        self,
        base_url: str,
        model: str,
        timeout: float = DEFAULT_TIMEOUT,
        heartbeat_timeout: float = HEARTBEAT_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
    ):
        if not base_url:
            raise ConfigurationError("Ollama base URL is not set")
        if not model:
            raise ConfigurationError("Ollama model is not set")

        url = _parse_base_url(base_url)
        self.base_url = str(url).rstrip("/")
        self.model = model
        self.timeout = timeout
        self._client = httpx.Client(base_url=url, timeout=timeout, transport=transport)

        try:
            self._heartbeat(heartbeat_timeout)
        except ProviderConnectionError:
            self._client.close()
            raise

    @classmethod
    def from_config(cls, cfg: dict, transport: httpx.BaseTransport | None = None) -> "OllamaProvider":
        """Build from a config dict (see config.load_config)."""
        base_url = cfg.get("ollama_url")
        if not base_url:
            raise ConfigurationError("OLLAMA_BASE_URL is not set")
        model = cfg.get("ollama_model")
        if not model:
            raise ConfigurationError("OLLAMA_MODEL is not set")
        return cls(base_url, model, timeout=cfg.get("timeout") or DEFAULT_TIMEOUT, transport=transport)

    @property
    def model_name(self) -> str:
        return self.model

    def _heartbeat(self, timeout):
        try:
            resp = self._client.head(HEALTH_PATH, timeout=timeout)
        except httpx.HTTPError as e:
            raise ProviderConnectionError(f"Ollama server is not running at {self.base_url}: {e}") from e
        if resp.status_code >= 400:
            raise ProviderConnectionError(
                f"Ollama server is not running at {self.base_url}: HTTP {resp.status_code}"
            )

    def generate(self, prompt: str) -> GenerateResult:
        """One non-streaming generation call. Raises ProviderError on any transport failure."""
        payload = {
            "model": self.model,
            "prompt": prompt,
            "stream": False,
            "options": {"temperature": TEMPERATURE},
        }
        try:
            resp = self._client.post(GENERATE_PATH, json=payload)
        except httpx.HTTPError as e:
            raise ProviderError(f"Ollama API error: {e}") from e

        # A proxy or captive portal answers with a web page, whatever the status.
        if looks_like_html(resp.text):
            raise ProxyInterferenceError(_PROXY_MSG)

        if resp.status_code != 200:
            raise ProviderError(f"Ollama error {resp.status_code}: {_error_message(resp)}")

        try:
            data = resp.json()
        except ValueError as e:
            raise ProviderError(f"Ollama returned a non-JSON body: {resp.text[:200]}") from e
        if not isinstance(data, dict):
            raise ProviderError(f"Ollama returned unexpected JSON: {resp.text[:200]}")

        text = data.get("response") or ""
        if not isinstance(text, str):
            raise ProviderError("Ollama response field is not a string")
        if looks_like_html(text):
            raise ProxyInterferenceError(_PROXY_MSG)

        return GenerateResult(
            text=text,
            eval_count=_as_int(data.get("eval_count")),
            eval_duration=_as_int(data.get("eval_duration")),
            done=bool(data.get("done", False)),
        )

    def close(self):
        self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()


def _as_int(value) -> int:
    # usage metadata is diagnostic only; never fail an attempt over it
    try:
        return int(value or 0)
    except (TypeError, ValueError):
        return 0


def _error_message(resp: httpx.Response) -> str:
    """Ollama reports failures as {"error": "..."}; fall back to the raw body."""
    try:
        data = resp.json()
    except ValueError:
        return resp.text[:200]
    if isinstance(data, dict) and data.get("error"):
        return str(data["error"])[:200]
    return resp.text[:200]
