"""
Schema validation utilities for SpeaklyAI.

Provides JSON Schema validation with clear error messages and
automatic repair of common failures in LLM and local-storage payloads.

Features:
- Format validation
- Deep copy to prevent mutations
- Type coercion (strings to numbers) driven by the schema
- Removal of unknown keys
- Transparent repair tracking
"""

import json
import threading
from copy import deepcopy
from pathlib import Path
from typing import Any, Optional

from jsonschema import Draft7Validator, FormatChecker, ValidationError

from ..config import config


class ValidationResult:
    """
    Result of a validation attempt.

    Attributes:
        valid: Whether data passed validation
        errors: List of error messages
        data: The validated data (may be modified if repair was attempted)
        repairs: List of repairs applied (for transparency)
    """

    def __init__(
        self,
        valid: bool,
        errors: list[str],
        data: Any = None,
        repairs: Optional[list[str]] = None,
    ):
        self.valid = valid
        self.errors = errors
        self.data = data
        self.repairs = repairs or []

    def __bool__(self) -> bool:
        return self.valid

    def __str__(self) -> str:
        if self.valid:
            msg = "Validation passed"
            if self.repairs:
                msg += f" (with {len(self.repairs)} repair(s))"
            return msg
        return f"Validation failed with {len(self.errors)} error(s):\n" + "\n".join(
            f"  - {error}" for error in self.errors
        )


class SchemaValidator:
    """
    JSON Schema validator with auto-repair capabilities.

    Usage:
        validator = SchemaValidator("path/to/schema.json")
        result = validator.validate(data, auto_repair=True)
        if result:
            print("Repairs applied:", result.repairs)
        else:
            print(result.errors)
    """

    def __init__(self, schema_path: Path | str):
        self.schema_path = Path(schema_path)
        with open(self.schema_path, "r", encoding="utf-8") as f:
            self.schema = json.load(f)
        self.validator = Draft7Validator(self.schema, format_checker=FormatChecker())

    def validate(self, data: Any, auto_repair: bool = False) -> ValidationResult:
        """
        Validate data against schema.

        Args:
            data: Data to validate
            auto_repair: If True, attempt to fix common validation errors

        Returns:
            ValidationResult with validation status and any errors
        """
        errors = [self._format_error(error) for error in self.validator.iter_errors(data)]

        if errors:
            if auto_repair:
                repaired_data, repairs = self._attempt_repair(data)
                result = self.validate(repaired_data, auto_repair=False)
                result.repairs = repairs
                return result
            return ValidationResult(valid=False, errors=errors, data=data)

        return ValidationResult(valid=True, errors=[], data=data)

    def _format_error(self, error: ValidationError) -> str:
        """Convert ValidationError to a message with validator and schema path."""
        path = " -> ".join(str(p) for p in error.path) if error.path else "root"
        validator_name = getattr(error, "validator", "unknown")
        schema_path = "/".join(str(p) for p in error.schema_path)
        return (
            f"At '{path}': {error.message} "
            f"[validator={validator_name}, schema_path=/{schema_path}]"
        )

    def _attempt_repair(self, data: Any) -> tuple[Any, list[str]]:
        repaired = deepcopy(data)
        repairs: list[str] = []
        self._strip_additional_props(repaired, self.schema, repairs)
        repaired = self._coerce_types(repaired, self.schema, repairs)
        return repaired, repairs

    def _strip_additional_props(
        self, obj: Any, schema: dict, repairs: list[str], path: str = "root"
    ):
        """
        Recursively remove keys not allowed by schema (additionalProperties: false).
        Handles both objects and arrays.
        """
        if not isinstance(schema, dict):
            return

        if isinstance(obj, dict) and "properties" in schema:
            allowed = set(schema.get("properties", {}).keys())
            if schema.get("additionalProperties") is False:
                extra_keys = [k for k in list(obj.keys()) if k not in allowed]
                for k in extra_keys:
                    obj.pop(k, None)
                    repairs.append(f"Removed unknown key '{k}' at {path}")

            for k, subschema in schema.get("properties", {}).items():
                if k in obj:
                    self._strip_additional_props(obj[k], subschema, repairs, f"{path}.{k}")

        if isinstance(obj, list) and "items" in schema:
            for i, item in enumerate(obj):
                self._strip_additional_props(item, schema["items"], repairs, f"{path}[{i}]")

    def _coerce_types(
        self, value: Any, schema: dict, repairs: list[str], path: str = "root"
    ) -> Any:
        """Coerce numeric strings (e.g. "5" -> 5) where the schema expects numbers."""
        if not isinstance(schema, dict):
            return value

        expected = schema.get("type")
        if isinstance(value, str) and expected in ("integer", "number"):
            try:
                number = float(value.strip())
            except ValueError:
                return value
            coerced = int(number) if expected == "integer" and number.is_integer() else number
            repairs.append(f"Coerced {path}: '{value}' -> {coerced}")
            return coerced

        if isinstance(value, dict):
            for k, subschema in schema.get("properties", {}).items():
                if k in value:
                    value[k] = self._coerce_types(value[k], subschema, repairs, f"{path}.{k}")
        elif isinstance(value, list) and "items" in schema:
            for i, item in enumerate(value):
                value[i] = self._coerce_types(item, schema["items"], repairs, f"{path}[{i}]")

        return value


_validators: dict[str, SchemaValidator] = {}
_validators_lock = threading.Lock()


def load_validator(name: str) -> SchemaValidator:
    """Return a cached validator for ``schemas/<name>.schema.json``."""
    with _validators_lock:
        validator = _validators.get(name)
        if validator is None:
            validator = SchemaValidator(config.paths.schemas_dir / f"{name}.schema.json")
            _validators[name] = validator
        return validator


def parse_llm_json(response: str) -> Any:
    """
    Extract and parse a JSON document from an LLM reply.

    Handles replies wrapped in Markdown code fences.

    Raises:
        json.JSONDecodeError: If no valid JSON can be parsed
    """
    text = response.strip()
    if "```json" in text:
        text = text.split("```json")[1].split("```")[0].strip()
    elif "```" in text:
        text = text.split("```")[1].split("```")[0].strip()
    return json.loads(text)
