from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import jsonschema

from .resources import schemas_dir as default_schemas_dir


@dataclass(frozen=True)
class SchemaRef:
    name: str
    path: Path
    schema: Dict[str, Any]


class ContractStore:
    """
    Loads `walletgate/contracts/schemas/*.json` and provides validation helpers.

    Schemas are self-contained (internal `$defs` only), so no cross-file
    resolver is needed.
    """

    def __init__(self, schemas_dir: Optional[Path] = None):
        self._schemas_dir = schemas_dir or default_schemas_dir()
        self._schemas: Dict[str, SchemaRef] = {}

    @property
    def schemas_dir(self) -> Path:
        return self._schemas_dir

    def load(self) -> None:
        if not self._schemas_dir.exists():
            raise FileNotFoundError(str(self._schemas_dir))

        for p in sorted(self._schemas_dir.glob("*.json")):
            schema = json.loads(p.read_text(encoding="utf-8"))
            self._schemas[p.name] = SchemaRef(name=p.name, path=p, schema=schema)

    def list_schema_names(self) -> List[str]:
        return sorted(self._schemas.keys())

    def _get(self, schema_name: str) -> SchemaRef:
        ref = self._schemas.get(schema_name)
        if ref is None:
            raise KeyError(schema_name)
        return ref

    def check_schemas(self) -> List[Tuple[str, str]]:
        """
        Returns a list of (schema_name, error_message) for invalid schemas.
        """
        errors: List[Tuple[str, str]] = []
        for name in self.list_schema_names():
            ref = self._get(name)
            try:
                jsonschema.Draft202012Validator.check_schema(ref.schema)
            except jsonschema.SchemaError as e:
                errors.append((name, e.message))
        return errors

    def validate(self, schema_name: str, instance: Any) -> List[str]:
        """
        Validates an instance and returns a list of error strings (empty means valid).
        """
        ref = self._get(schema_name)
        validator = jsonschema.Draft202012Validator(ref.schema)
        out: List[str] = []
        for e in sorted(validator.iter_errors(instance), key=lambda e: [str(p) for p in e.path]):
            where = "/".join(str(p) for p in e.path)
            out.append(f"{where}: {e.message}" if where else e.message)
        return out
