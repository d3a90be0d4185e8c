"""
Configuration.

PuppetDBConfig carries everything needed to build a PuppetDBInventoryPlugin.
It can be built directly, or read from the environment with from_env.

Environment variables
PUPPETDB_URL           PuppetDB root url
PUPPETDB_USERNAME      login applied to every node
PUPPETDB_CUSTOM_FACTS  comma separated extra fact names
PUPPETDB_TOKEN         optional X-Authentication token
PUPPETDB_TIMEOUT       http timeout in seconds
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

from puppetdb_inventory.inventory.plugins.puppetdb import PuppetDBInventoryPlugin
from puppetdb_inventory.puppetdb.client import HttpPuppetDBClient, UrllibHttpClient

DEFAULT_URL = "http://localhost:8080"
DEFAULT_USERNAME = "root"
DEFAULT_TIMEOUT_SECONDS = 10


def parse_fact_names(text: str | None) -> frozenset[str]:
    """Split a comma separated list of fact names. Blank entries are dropped."""
    if not text:
        return frozenset()
    return frozenset(part.strip() for part in text.split(",") if part.strip())


@dataclass(frozen=True)
class PuppetDBConfig:
    """
    PuppetDB inventory configuration.

    base_url
    PuppetDB root url, without the /pdb suffix.

    username
    Login applied to every node.

    custom_fact_names
    Extra fact names to request on top of the mandatory ones.

    token
    Optional authentication token.

    timeout_seconds
    Timeout for each http request.
    """

    base_url: str = DEFAULT_URL
    username: str = DEFAULT_USERNAME
    custom_fact_names: frozenset[str] = frozenset()
    token: str | None = None
    timeout_seconds: int = DEFAULT_TIMEOUT_SECONDS

    @classmethod
    def from_env(cls, environ: Mapping[str, str]) -> PuppetDBConfig:
        timeout_raw = environ.get("PUPPETDB_TIMEOUT", "")
        try:
            timeout = int(timeout_raw) if timeout_raw else DEFAULT_TIMEOUT_SECONDS
        except ValueError as exc:
            raise ValueError(f"PUPPETDB_TIMEOUT must be an integer, got {timeout_raw!r}") from exc

        return cls(
            base_url=environ.get("PUPPETDB_URL") or DEFAULT_URL,
            username=environ.get("PUPPETDB_USERNAME") or DEFAULT_USERNAME,
            custom_fact_names=parse_fact_names(environ.get("PUPPETDB_CUSTOM_FACTS")),
            token=environ.get("PUPPETDB_TOKEN") or None,
            timeout_seconds=timeout,
        )


def build_plugin(config: PuppetDBConfig) -> PuppetDBInventoryPlugin:
    """Wire the http client and the cached plugin from config."""
    client = HttpPuppetDBClient(
        base_url=config.base_url,
        token=config.token,
        http=UrllibHttpClient(timeout_seconds=config.timeout_seconds),
    )
    return PuppetDBInventoryPlugin(
        client=client,
        username=config.username,
        custom_fact_names=config.custom_fact_names,
    )
