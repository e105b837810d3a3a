from __future__ import annotations

"""Built-in security investigation tools.

Each tool delegates to a provider function supplied in ``SecurityProviders``
(threat-intelligence lookups, log search, user analytics, investigation
memory). Vendor clients live outside this package; the tools only know their
call shape.

Tools that reach a quota-limited vendor API consume a token from that
vendor's bucket before calling the provider.
"""

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional

from action_orchestrator.core.errors import ToolExecutionError

from ..ratelimit import RateLimiter
from .base import Capability, ParameterSchema, ParameterSpec

ProviderFn = Callable[..., Awaitable[Any]]

# Rate limiter key of each vendor-backed tool
TOOL_SERVICE_KEYS: Dict[str, str] = {
    "check_ip_reputation": "abuseipdb",
    "analyze_file_hash": "virustotal",
    "enrich_domain": "alienvault",
}


@dataclass(frozen=True)
class SecurityProviders:
    """Async provider functions backing the built-in tools.

    Any provider left as ``None`` makes its tool fail with
    ``"<provider> not configured"`` when invoked.
    """

    check_ip: Optional[ProviderFn] = None
    query_logs: Optional[ProviderFn] = None
    check_hash: Optional[ProviderFn] = None
    check_user: Optional[ProviderFn] = None
    recall_patterns: Optional[ProviderFn] = None
    lookup_domain: Optional[ProviderFn] = None


def tenant_id_of(context: Any) -> Optional[str]:
    """Extract ``tenant_id`` from a mapping or attribute-style context."""
    if context is None:
        return None
    if isinstance(context, Mapping):
        return context.get("tenant_id")
    return getattr(context, "tenant_id", None)


def _require(tool: str, params: Mapping[str, Any], name: str) -> Any:
    value = params.get(name)
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ToolExecutionError(tool, f"missing {name}")
    return value


def _provider(tool: str, providers: SecurityProviders, attr: str) -> ProviderFn:
    fn = getattr(providers, attr)
    if fn is None:
        raise ToolExecutionError(tool, f"{attr} not configured")
    return fn


def _schema(required: List[str], **properties: ParameterSpec) -> ParameterSchema:
    return ParameterSchema(properties=properties, required=required)


def build_security_capabilities(providers: SecurityProviders, limiter: RateLimiter) -> List[Capability]:
    """
    Build the default security tool set.

    Args:
        providers: Provider functions the tools delegate to.
        limiter: Shared rate limiter; vendor-backed tools consume from their service bucket.

    Returns:
        Capabilities ready to be registered.
    """

    async def check_ip_reputation(params: Mapping[str, Any], context: Any) -> Any:
        ip = str(_require("check_ip_reputation", params, "ip")).strip()
        fn = _provider("check_ip_reputation", providers, "check_ip")
        await limiter.consume(TOOL_SERVICE_KEYS["check_ip_reputation"])
        return await fn(ip)

    async def query_security_logs(params: Mapping[str, Any], context: Any) -> Any:
        ip = str(_require("query_security_logs", params, "ip")).strip()
        hours = params.get("hours") or 24
        fn = _provider("query_security_logs", providers, "query_logs")
        return await fn(ip, hours=int(hours))

    async def analyze_file_hash(params: Mapping[str, Any], context: Any) -> Any:
        file_hash = str(_require("analyze_file_hash", params, "hash")).strip()
        fn = _provider("analyze_file_hash", providers, "check_hash")
        await limiter.consume(TOOL_SERVICE_KEYS["analyze_file_hash"])
        return await fn(file_hash)

    async def analyze_user_behavior(params: Mapping[str, Any], context: Any) -> Any:
        username = str(_require("analyze_user_behavior", params, "username")).strip()
        fn = _provider("analyze_user_behavior", providers, "check_user")
        return await fn(username, tenant_id=tenant_id_of(context))

    async def recall_similar_investigations(params: Mapping[str, Any], context: Any) -> Any:
        query = str(_require("recall_similar_investigations", params, "query")).strip()
        fn = _provider("recall_similar_investigations", providers, "recall_patterns")
        return await fn(tenant_id_of(context), query, limit=3)

    async def enrich_domain(params: Mapping[str, Any], context: Any) -> Any:
        domain = str(_require("enrich_domain", params, "domain")).strip()
        fn = _provider("enrich_domain", providers, "lookup_domain")
        await limiter.consume(TOOL_SERVICE_KEYS["enrich_domain"])
        return await fn(domain)

    specs: List[Dict[str, Any]] = [
        dict(
            name="check_ip_reputation",
            description="Check the reputation of an IP address using threat intelligence providers",
            handler=check_ip_reputation,
            parameters=_schema(["ip"], ip=ParameterSpec(type="string", description="IP address to check")),
        ),
        dict(
            name="query_security_logs",
            description="Query security logs for a specific IP, user, or time range",
            handler=query_security_logs,
            parameters=_schema(
                ["ip"],
                ip=ParameterSpec(type="string", description="IP address to search for"),
                hours=ParameterSpec(type="number", description="Number of hours to look back"),
            ),
        ),
        dict(
            name="analyze_file_hash",
            description="Check a file hash against malware databases like VirusTotal",
            handler=analyze_file_hash,
            parameters=_schema(
                ["hash"], hash=ParameterSpec(type="string", description="File hash (MD5, SHA1, or SHA256)")
            ),
        ),
        dict(
            name="analyze_user_behavior",
            description="Analyze user behavior and risk score based on login history and sessions",
            handler=analyze_user_behavior,
            parameters=_schema(
                ["username"], username=ParameterSpec(type="string", description="Username or email to analyze")
            ),
        ),
        dict(
            name="recall_similar_investigations",
            description="Search memory for similar past investigations and patterns",
            handler=recall_similar_investigations,
            parameters=_schema(
                ["query"], query=ParameterSpec(type="string", description="Description of what to search for")
            ),
        ),
        dict(
            name="enrich_domain",
            description="Get threat intelligence about a domain name",
            handler=enrich_domain,
            parameters=_schema(["domain"], domain=ParameterSpec(type="string", description="Domain name to enrich")),
        ),
    ]

    return [Capability(service_key=TOOL_SERVICE_KEYS.get(spec["name"]), **spec) for spec in specs]
