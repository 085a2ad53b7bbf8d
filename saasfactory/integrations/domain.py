"""Domain availability and pricing through the Vercel registrar API."""

import logging
import re
from dataclasses import dataclass
from urllib.parse import quote

from saasfactory.core.errors import ConfigurationError, SaasFactoryError
from saasfactory.core.secrets import get_secret
from saasfactory.integrations.http import request_json
from saasfactory.integrations.vercel import API_BASE

logger = logging.getLogger(__name__)

SERVICE = "Vercel registrar"
SUGGESTION_TLDS = ("com", "io", "app", "dev", "co")
SUGGESTION_PREFIXES = ("get", "try", "use")
SUGGESTION_SUFFIXES = ("app", "hq")
BULK_LIMIT = 50


@dataclass
class DomainPrice:
    registration: float
    renewal: float
    currency: str = "USD"


@dataclass
class DomainCheck:
    domain: str
    available: bool
    price: DomainPrice | None = None


def normalize_domain(name: str) -> str:
    """'Acme App' -> 'acmeapp.com'; names with a TLD keep it."""
    cleaned = re.sub(r"[^a-z0-9.-]", "", name.strip().lower())
    return cleaned if "." in cleaned else f"{cleaned}.com"


def domain_candidates(base: str) -> list[str]:
    """Alternatives for a taken name across TLDs, prefixes and suffixes."""
    stem = re.sub(r"[^a-z0-9-]", "", base.lower().split(".")[0])
    names = [stem]
    names += [f"{prefix}{stem}" for prefix in SUGGESTION_PREFIXES]
    names += [f"{stem}{suffix}" for suffix in SUGGESTION_SUFFIXES]
    seen: list[str] = []
    for name in names:
        for tld in SUGGESTION_TLDS:
            candidate = f"{name}.{tld}"
            if candidate not in seen:
                seen.append(candidate)
    return seen


def _price(value: object) -> float:
    return float(value) if value is not None else 0.0


class DomainClient:
    def __init__(self, token: str, *, base_url: str = API_BASE) -> None:
        self.token = token
        self.base_url = base_url.rstrip("/")

    @classmethod
    def from_credentials(cls) -> "DomainClient":
        token = get_secret("VERCEL_TOKEN")
        if not token:
            raise ConfigurationError(
                "No Vercel token found", "Run `saasfactory config` to set your Vercel token"
            )
        return cls(token)

    @property
    def headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token}", "Content-Type": "application/json"}

    async def price(self, domain: str) -> DomainPrice | None:
        try:
            _, data = await request_json(
                SERVICE,
                "GET",
                f"{self.base_url}/v1/registrar/domains/{quote(domain)}/price",
                headers=self.headers,
            )
        except SaasFactoryError as e:
            logger.debug("Price lookup failed for %s: %s", domain, e)
            return None
        if not data:
            return None
        return DomainPrice(registration=_price(data.get("purchasePrice")), renewal=_price(data.get("renewalPrice")))

    async def check(self, domain: str) -> DomainCheck:
        """Availability of one domain, with pricing when it is available. Raises on API errors."""
        _, data = await request_json(
            SERVICE,
            "GET",
            f"{self.base_url}/v1/registrar/domains/{quote(domain)}/availability",
            headers=self.headers,
        )
        result = DomainCheck(domain=domain, available=bool((data or {}).get("available")))
        if result.available:
            result.price = await self.price(domain)
        return result

    async def check_bulk(self, domains: list[str]) -> list[DomainCheck]:
        _, data = await request_json(
            SERVICE,
            "POST",
            f"{self.base_url}/v1/registrar/domains/availability",
            headers=self.headers,
            json={"domains": domains[:BULK_LIMIT]},
        )
        return [
            DomainCheck(domain=item["domain"], available=bool(item.get("available")))
            for item in (data or {}).get("results", [])
        ]

    async def suggest(self, base: str, limit: int = 6) -> list[DomainCheck]:
        """Available alternatives for ``base``, in candidate order."""
        checks = await self.check_bulk(domain_candidates(base))
        return [c for c in checks if c.available][:limit]
