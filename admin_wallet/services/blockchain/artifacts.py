"""
Contract artifacts and deployment manifest loading.

Artifacts are Truffle build files:
    {"contractName": ..., "abi": [...], "networks": {"<id>": {"address": ...}}}

The deployment manifest maps network name to contract name to address:
    {"kovan": {"Identity": "0x...", "Token": "0x..."}}
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from loguru import logger

from admin_wallet.utils.exceptions import InitializationError


@dataclass(frozen=True)
class ContractArtifact:
    """ABI plus the per-network-id address table embedded in a build file."""

    name: str
    abi: list[dict[str, Any]]
    networks: dict[str, str] = field(default_factory=dict)

    def address_for(self, network_id: int) -> str | None:
        """Get the embedded address for a numeric network id."""
        return self.networks.get(str(network_id))


def _read_json(path: Path) -> Any:
    try:
        with path.open(encoding="utf-8") as fh:
            return json.load(fh)
    except json.JSONDecodeError as e:
        raise InitializationError(f"Malformed JSON in {path}: {e}") from e
    except OSError as e:
        raise InitializationError(f"Cannot read {path}: {e}") from e


def parse_artifact(name: str, data: dict[str, Any]) -> ContractArtifact:
    """
    Build a ContractArtifact from decoded build-file JSON.

    Args:
        name: Contract name (used in error messages)
        data: Decoded artifact

    Returns:
        ContractArtifact

    Raises:
        InitializationError: If the ABI is missing
    """
    abi = data.get("abi") if isinstance(data, dict) else None
    if not isinstance(abi, list):
        raise InitializationError(f"Artifact for {name} has no ABI")

    networks: dict[str, str] = {}
    for network_id, entry in (data.get("networks") or {}).items():
        address = entry.get("address") if isinstance(entry, dict) else None
        if address:
            networks[str(network_id)] = address

    return ContractArtifact(name=name, abi=abi, networks=networks)


def load_artifact(contracts_dir: Path, name: str) -> ContractArtifact:
    """
    Load `<contracts_dir>/<name>.json`.

    Raises:
        InitializationError: If the file is missing or malformed
    """
    path = Path(contracts_dir) / f"{name}.json"
    artifact = parse_artifact(name, _read_json(path))
    logger.debug(
        f"Loaded artifact {name} from {path} "
        f"(networks: {sorted(artifact.networks) or 'none'})"
    )
    return artifact


def load_deployment_manifest(path: Path | None) -> dict[str, dict[str, str]]:
    """
    Load the deployment manifest.

    A missing file is an empty manifest: every address then comes from
    the artifacts' network tables.

    Raises:
        InitializationError: If the file exists but is malformed
    """
    if path is None or not Path(path).exists():
        logger.debug(f"No deployment manifest at {path}, using artifact networks")
        return {}

    data = _read_json(Path(path))
    if not isinstance(data, dict):
        raise InitializationError(
            f"Deployment manifest {path} must map network name to contracts"
        )

    manifest: dict[str, dict[str, str]] = {}
    for network, contracts in data.items():
        if isinstance(contracts, dict):
            manifest[network] = {
                str(name): str(address)
                for name, address in contracts.items()
                if isinstance(address, str)
            }
    return manifest
