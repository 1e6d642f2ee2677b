from __future__ import annotations

import hashlib
import json
import logging
import time
from pathlib import Path
from typing import Any

import requests

from propcast.core.errors import UpstreamUnavailableError


logger = logging.getLogger(__name__)

RETRYABLE_STATUS = (429, 500, 502, 503, 504)


class SimpleHttpClient:
    def __init__(
        self,
        timeout_seconds: int = 20,
        max_retries: int = 3,
        cache_ttl_seconds: int = 300,
        cache_dir: str = ".cache/propcast_http",
        backoff_seconds: float = 1.0,
    ) -> None:
        self.timeout_seconds = timeout_seconds
        self.max_retries = max(1, max_retries)
        self.cache_ttl_seconds = cache_ttl_seconds
        self.backoff_seconds = backoff_seconds
        self.cache_path = Path(cache_dir)
        self.cache_path.mkdir(parents=True, exist_ok=True)

    def _cache_file(self, url: str, params: dict[str, Any] | None) -> Path:
        raw = url + "|" + json.dumps(params or {}, sort_keys=True)
        cache_key = hashlib.sha256(raw.encode("utf-8")).hexdigest()
        return self.cache_path / f"{cache_key}.json"

    def get_json(
        self,
        url: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> dict[str, Any] | list[Any]:
        cache_file = self._cache_file(url, params)
        if cache_file.exists():
            age_seconds = time.time() - cache_file.stat().st_mtime
            if age_seconds <= self.cache_ttl_seconds:
                return json.loads(cache_file.read_text(encoding="utf-8"))

        delay = self.backoff_seconds
        last_error: Exception | None = None
        for attempt in range(1, self.max_retries + 1):
            try:
                response = requests.get(
                    url,
                    params=params,
                    headers={"Accept": "application/json", **(headers or {})},
                    timeout=self.timeout_seconds,
                )
                if response.status_code in RETRYABLE_STATUS:
                    raise requests.HTTPError(
                        f"retryable status={response.status_code}", response=response
                    )
                response.raise_for_status()
                payload = response.json()
                cache_file.write_text(json.dumps(payload), encoding="utf-8")
                return payload
            except (requests.RequestException, ValueError) as exc:
                last_error = exc
                logger.warning(f"GET {url} failed (attempt {attempt}/{self.max_retries}): {exc}")
                if attempt < self.max_retries:
                    time.sleep(delay)
                    delay *= 2
        raise UpstreamUnavailableError(url, str(last_error))
