"""Loads mapping specifications from JSON files and builds engines."""

import json
import logging
from pathlib import Path

from vorto.application.mapping import MappingEngine
from vorto.application.ports import ScriptEvalProvider
from vorto.domain.exceptions import SpecificationError
from vorto.domain.mapping import MappingSpecification

logger = logging.getLogger(__name__)


def load_specifications(directory: str | Path) -> list[MappingSpecification]:
    """Read every *.json file of directory as a mapping specification."""
    root = Path(directory)
    if not root.is_dir():
        raise SpecificationError(f"Mapping specification directory [{root}] does not exist")
    specifications = []
    for path in sorted(root.glob("*.json")):
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise SpecificationError(f"Cannot read mapping specification [{path.name}]: {e}") from e
        specifications.append(MappingSpecification.from_dict(data))
        logger.info("Loaded mapping specification [%s] from %s", data.get("name"), path.name)
    return specifications


def build_engines(
    specifications: list[MappingSpecification],
    provider: ScriptEvalProvider,
    script_timeout: float,
) -> dict[str, MappingEngine]:
    """Build one engine per specification, keyed by specification name."""
    engines: dict[str, MappingEngine] = {}
    for spec in specifications:
        if spec.name in engines:
            raise SpecificationError(f"Duplicate mapping specification [{spec.name}]")
        engines[spec.name] = (
            MappingEngine.new_builder()
            .with_specification(spec)
            .register_script_eval_provider(provider)
            .with_script_timeout(script_timeout)
            .build()
        )
    return engines
