"""JSON-Schema validation of the token, vault and validator lists."""

from __future__ import annotations

import json
import logging
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping

from jsonschema import Draft7Validator
from jsonschema.exceptions import ValidationError

from chainmeta.models import Category, ProtocolEntry, TokenRecord, ValidatorRecord

LOGGER = logging.getLogger("chainmeta.validation.schema")

LIST_KINDS: tuple[str, ...] = ("validators", "tokens", "vaults")


@dataclass
class ValidationReport:
    """Errors collected per metadata file, in visit order."""

    errors: Dict[Path, List[str]] = field(default_factory=dict)
    checked: List[Path] = field(default_factory=list)

    def add(self, path: Path, messages: Iterable[str]) -> None:
        bucket = list(messages)
        if bucket:
            self.errors.setdefault(path, []).extend(bucket)

    @property
    def ok(self) -> bool:
        return not self.errors

    @property
    def error_count(self) -> int:
        return sum(len(messages) for messages in self.errors.values())

    def format(self) -> str:
        """Render errors grouped by file for terminal output."""

        lines = [f"{self.error_count} errors found in the JSON files:", ""]
        for path, messages in self.errors.items():
            lines.append(f"Error in file {path}")
            lines.extend(f"  - {message}" for message in messages)
            lines.append("")
        return "\n".join(lines)


def load_schema(schema_dir: Path, kind: str) -> Dict[str, Any]:
    """Read the ``<kind>.schema.json`` document from ``schema_dir``."""

    path = schema_dir / f"{kind}.schema.json"
    return json.loads(path.read_text(encoding="utf-8"))


def compile_validators(schema_dir: Path) -> Dict[str, Draft7Validator]:
    """Compile one Draft-07 validator per list kind."""

    validators: Dict[str, Draft7Validator] = {}
    for kind in LIST_KINDS:
        schema = load_schema(schema_dir, kind)
        Draft7Validator.check_schema(schema)
        validators[kind] = Draft7Validator(schema, format_checker=Draft7Validator.FORMAT_CHECKER)
    return validators


def _format_error(error: ValidationError) -> str:
    location = "/".join(str(part) for part in error.absolute_path)
    return f"{location or '<root>'}: {error.message}"


def validate_document(document: Any, validator: Draft7Validator) -> List[str]:
    """Return every structural error for an already parsed document."""

    errors = sorted(validator.iter_errors(document), key=lambda err: list(map(str, err.absolute_path)))
    return [_format_error(error) for error in errors]


def _duplicate_messages(keys: Iterable[Any], label: str) -> List[str]:
    counts = Counter(keys)
    return [f"duplicate {label}: {key}" for key, count in counts.items() if count > 1]


def check_references(kind: str, document: Mapping[str, Any]) -> List[str]:
    """Cross-record checks that JSON-Schema cannot express.

    Expects a document that already passed schema validation.
    """

    if kind == "tokens":
        keys = []
        for token in document.get("tokens", []):
            chain_id, address = TokenRecord.model_validate(token).identity
            keys.append(f"{chain_id}:{address}")
        return _duplicate_messages(keys, "token (chainId:address)")

    if kind == "validators":
        return _duplicate_messages(
            (ValidatorRecord.model_validate(item).id.lower() for item in document.get("validators", [])),
            "validator id",
        )

    if kind == "vaults":
        vaults = document.get("vaults", [])
        messages = _duplicate_messages(
            (str(vault.get("vaultAddress", "")).lower() for vault in vaults),
            "vaultAddress",
        )
        messages.extend(
            _duplicate_messages(
                (ProtocolEntry.model_validate(entry).name for entry in document.get("protocols", [])),
                "protocol name",
            )
        )
        taxonomy = document.get("categories")
        if taxonomy:
            known = {slug for node in taxonomy for slug in Category.model_validate(node).slugs()}
            for index, vault in enumerate(vaults):
                for slug in vault.get("categories", []):
                    if slug not in known:
                        messages.append(f"vaults/{index}/categories: unknown category '{slug}'")
        return messages

    return []


def validate_file(path: Path, kind: str, validator: Draft7Validator) -> List[str]:
    """Validate one list file; an unreadable file yields a single error."""

    try:
        document = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        return [f"could not parse JSON: {exc}"]

    errors = validate_document(document, validator)
    if errors:
        return errors
    return check_references(kind, document)


def validate_metadata(metadata_dir: Path, schema_dir: Path) -> ValidationReport:
    """Validate every ``<kind>/*.json`` file under ``metadata_dir``."""

    validators = compile_validators(schema_dir)
    report = ValidationReport()
    for kind in LIST_KINDS:
        for path in sorted((metadata_dir / kind).glob("*.json")):
            LOGGER.info("Validating %s", path)
            report.checked.append(path)
            errors = validate_file(path, kind, validators[kind])
            LOGGER.debug("%s: %d error(s)", path, len(errors))
            report.add(path, errors)
    return report


__all__ = [
    "LIST_KINDS",
    "ValidationReport",
    "check_references",
    "compile_validators",
    "load_schema",
    "validate_document",
    "validate_file",
    "validate_metadata",
]
