"""Adapter configuration via environment variables.

The variable names follow the Knative source contract (PORT, NAME,
NAMESPACE, K_SINK, K_CE_OVERRIDES) so the adapter can run unchanged
under a SinkBinding or ContainerSource. Adapter-specific knobs use the
CEPHSOURCE_ prefix.
"""

import json
import os
import re
import logging

logger = logging.getLogger("cephsource.config")

# CloudEvents extension names: lowercase letters and digits only
_EXTENSION_NAME = re.compile(r"^[a-z0-9]{1,20}$")
_RESERVED_ATTRIBUTES = frozenset({
    "id", "source", "specversion", "type", "datacontenttype",
    "dataschema", "subject", "time", "data",
})


def parse_ce_overrides(raw: str) -> dict[str, str]:
    """Parse K_CE_OVERRIDES into extension attributes.

    Expects a JSON object of the form {"extensions": {"name": "value"}}.
    An empty string means no overrides.

    Raises:
        ValueError: the value is not valid JSON of that shape, or an
            extension name is not a legal CloudEvents attribute name.
    """
    if not raw.strip():
        return {}
    try:
        parsed = json.loads(raw)
    except ValueError as e:
        raise ValueError(f"K_CE_OVERRIDES is not valid JSON: {e}") from e
    if not isinstance(parsed, dict):
        raise ValueError("K_CE_OVERRIDES must be a JSON object")

    extensions = parsed.get("extensions")
    if extensions is None:
        extensions = {}
    if not isinstance(extensions, dict):
        raise ValueError("K_CE_OVERRIDES extensions must be a JSON object")

    result: dict[str, str] = {}
    for name, value in extensions.items():
        if not _EXTENSION_NAME.match(name) or name in _RESERVED_ATTRIBUTES:
            raise ValueError(f"invalid CloudEvents extension name: {name!r}")
        result[name] = str(value)
    return result


class Settings:
    """All configuration sourced from environment."""

    def __init__(self):
        # Core
        self.version = "0.1.0"
        self.log_level = os.environ.get("CEPHSOURCE_LOG_LEVEL", "info")
        self.port = int(os.environ.get("PORT", "8080"))

        # Identity, used to tag deliveries
        self.name = os.environ.get("NAME", "")
        self.namespace = os.environ.get("NAMESPACE", "")

        # Sink
        self.sink_uri = os.environ.get("K_SINK", "")
        self.sink_timeout = float(
            os.environ.get("CEPHSOURCE_SINK_TIMEOUT", "30")
        )
        self.ce_overrides = parse_ce_overrides(
            os.environ.get("K_CE_OVERRIDES", "")
        )
        if self.ce_overrides:
            logger.info(
                "CloudEvent overrides: %s", sorted(self.ce_overrides)
            )
