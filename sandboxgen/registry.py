"""Version resolution against a package CDN."""

from __future__ import annotations

import asyncio
import json
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Dict, List, Mapping, Optional, Protocol, Tuple
from urllib.error import HTTPError, URLError
from urllib.parse import quote
from urllib.request import Request, urlopen

from .config import RegistryConfig
from .errors import DependencyResolutionFailed
from .logging import get_logger

Fetcher = Callable[[str, float], bytes]


class VersionResolver(Protocol):
    """Maps declared version specifiers to concrete installable versions."""

    async def resolve_versions(self, dependencies: Mapping[str, str]) -> Dict[str, str]:
        """Return `name -> version` for every requested name or raise."""


def _http_fetch(url: str, timeout: float) -> bytes:
    request = Request(url, headers={"Accept": "application/json"})
    with urlopen(request, timeout=timeout) as response:  # type: ignore[arg-type]
        return response.read()


class RegistryVersionResolver:
    """Resolves specifiers by reading `<name>@<specifier>/package.json` from unpkg."""

    def __init__(
        self,
        config: RegistryConfig | None = None,
        *,
        fetcher: Fetcher | None = None,
    ) -> None:
        self.config = config or RegistryConfig()
        self._fetch = fetcher or _http_fetch
        self.logger = get_logger("registry")

    def package_url(self, name: str, specifier: str) -> str:
        # Scoped names keep their slash; everything else is escaped.
        target = quote(f"{name}@{specifier}", safe="@/")
        return f"{self.config.base_url.rstrip('/')}/{target}/package.json"

    async def resolve_versions(self, dependencies: Mapping[str, str]) -> Dict[str, str]:
        if not dependencies:
            return {}

        loop = asyncio.get_running_loop()
        workers = max(1, min(self.config.max_workers, len(dependencies)))
        executor = ThreadPoolExecutor(max_workers=workers)
        try:
            tasks = [
                loop.run_in_executor(executor, self._resolve_one, name, specifier)
                for name, specifier in dependencies.items()
            ]
            outcomes: List[Tuple[str, Optional[str], Optional[str]]] = await asyncio.gather(*tasks)
        finally:
            # Do not block the loop on in-flight requests after a timeout.
            executor.shutdown(wait=False)

        resolved: Dict[str, str] = {}
        failures: Dict[str, str] = {}
        for name, version, error in outcomes:
            if version is None:
                failures[name] = error or "unknown error"
            else:
                resolved[name] = version

        if failures:
            reason = "; ".join(f"{name}: {error}" for name, error in sorted(failures.items()))
            raise DependencyResolutionFailed(failures, reason)
        return resolved

    def _resolve_one(self, name: str, specifier: str) -> Tuple[str, Optional[str], Optional[str]]:
        url = self.package_url(name, specifier or "latest")
        self.logger.debug("Resolving %s@%s via %s", name, specifier, url)
        try:
            raw = self._fetch(url, self.config.timeout)
        except HTTPError as exc:
            return name, None, f"registry returned status {exc.code}"
        except URLError as exc:
            return name, None, f"registry request failed: {exc.reason}"
        except OSError as exc:
            return name, None, f"registry request failed: {exc}"

        try:
            payload = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError):
            return name, None, "registry returned invalid JSON"

        version = payload.get("version") if isinstance(payload, dict) else None
        if not isinstance(version, str) or not version:
            return name, None, "registry response has no version"
        return name, version, None


__all__ = ["Fetcher", "RegistryVersionResolver", "VersionResolver"]
