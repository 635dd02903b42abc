"""C2PA manifest reader (wraps the c2pa-python SDK)."""

import io
import json
import logging
from typing import Any, Dict, Optional

import c2pa

logger = logging.getLogger(__name__)


def get_c2pa_manifest(image_bytes: bytes, mime_type: str = "image/jpeg") -> Optional[Dict[str, Any]]:
    """
    Reads C2PA manifest data from in-memory media.
    Returns the active manifest dict, or None if not present / unreadable.
    """
    try:
        with c2pa.Reader(mime_type, io.BytesIO(image_bytes)) as reader:
            manifest_store = json.loads(reader.json())
            active_label = manifest_store.get("active_manifest")

            if active_label:
                return manifest_store["manifests"][active_label]
    except Exception as e:
        logger.debug(f"[C2PA] No readable manifest: {e}")
    return None


def flatten_manifest(manifest: Dict[str, Any]) -> Dict[str, Any]:
    """
    Project an active manifest onto the flat field names the analyzers read.

    The manifest itself is kept under `c2pa`; action names, software agents
    and the first digital source type are lifted out of every
    `c2pa.actions*` assertion.
    """
    fields: Dict[str, Any] = {"c2pa": manifest}

    if manifest.get("claim_generator"):
        fields["claim_generator"] = manifest["claim_generator"]

    gen_info = manifest.get("claim_generator_info") or []
    if gen_info and isinstance(gen_info[0], dict) and gen_info[0].get("name"):
        fields["claim__generator__info_name"] = gen_info[0]["name"]

    actions, agents, source_types = [], [], []
    for assertion in manifest.get("assertions", []):
        if not str(assertion.get("label", "")).startswith("c2pa.actions"):
            continue
        for action in assertion.get("data", {}).get("actions", []):
            if action.get("action"):
                actions.append(action["action"])
            agent = action.get("softwareAgent")
            if isinstance(agent, dict):
                agent = agent.get("name")
            if agent:
                agents.append(agent)
            if action.get("digitalSourceType"):
                source_types.append(action["digitalSourceType"])

    if actions:
        fields["ActionsAction"] = actions
    if agents:
        fields["ActionsSoftwareAgentName"] = agents
    if source_types:
        fields["actions_digital_source_type"] = source_types[0]

    return fields
