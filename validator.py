import json
import math
from collections import defaultdict

import jsonschema

from models import MANAGED_KEYS

# Both field families in use: user/timeIn/hubstaffTime timesheets and
# taskName/duration/date task logs.
DEFAULT_SCHEMA = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "properties": {
        "user": {"type": "string", "minLength": 1},
        "timeIn": {"type": "string", "minLength": 1},
        "timeOut": {"type": "string"},
        "hubstaffTime": {"type": "number", "minimum": 0},
        "remarks": {"type": "string"},
        "taskName": {"type": "string", "minLength": 1},
        "duration": {"type": "number", "minimum": 0},
        "date": {"type": "string", "minLength": 1},
    },
}

NUMERIC_TYPES = ("number", "integer")


def _to_number(value):
    """Parse a numeric string, returning *value* unchanged when it is not one."""
    text = value.strip()
    try:
        return int(text)
    except ValueError:
        pass
    try:
        number = float(text)
    except ValueError:
        return value
    return number if math.isfinite(number) else value


def _is_finite_number(checker, instance):
    # json.loads accepts NaN and Infinity, which cannot be written back out as JSON
    if not jsonschema.Draft202012Validator.TYPE_CHECKER.is_type(instance, "number"):
        return False
    return not isinstance(instance, float) or math.isfinite(instance)


FieldValidator = jsonschema.validators.extend(
    jsonschema.Draft202012Validator,
    type_checker=jsonschema.Draft202012Validator.TYPE_CHECKER.redefine(
        "number", _is_finite_number
    ),
)


class LogValidator:
    """Validates log fields against a JSON schema.

    The schema declares which fields a record may carry; ``required_fields``
    names the subset a new record must supply.
    """

    def __init__(self, required_fields, schema_path=None):
        if schema_path is not None:
            with open(schema_path, "r") as f:
                schema = json.load(f)
        else:
            schema = DEFAULT_SCHEMA

        properties = schema.get("properties", {})
        required_fields = list(required_fields or [])
        if not required_fields:
            raise ValueError("at least one required field must be configured")
        undeclared = [name for name in required_fields if name not in properties]
        if undeclared:
            raise ValueError(
                f"required fields not declared in schema: {', '.join(undeclared)}"
            )

        self._properties = {
            name: spec for name, spec in properties.items() if name not in MANAGED_KEYS
        }
        self._required = required_fields
        self._update_validator = FieldValidator(schema)
        self._create_validator = FieldValidator(
            dict(schema, required=required_fields)
        )
        self._stats = {
            "total": 0,
            "valid": 0,
            "invalid": 0,
            "error_types": defaultdict(int),
        }

    @property
    def required_fields(self):
        return list(self._required)

    @property
    def known_fields(self):
        return list(self._properties)

    def coerce(self, data):
        """Keep only known fields, converting numeric strings for numeric fields."""
        result = {}
        for key, value in data.items():
            spec = self._properties.get(key)
            if spec is None:
                continue
            if spec.get("type") in NUMERIC_TYPES and isinstance(value, str):
                value = _to_number(value)
            result[key] = value
        return result

    def validate_create(self, data):
        """Validate a new record's fields, required ones included.

        Returns:
            tuple: (is_valid: bool, errors: list[str])
        """
        return self._run(self._create_validator, data)

    def validate_update(self, data):
        """Validate a partial update; only the supplied fields are checked."""
        return self._run(self._update_validator, data)

    def _run(self, validator, data):
        self._stats["total"] += 1
        errors = sorted(validator.iter_errors(data), key=lambda e: [str(p) for p in e.path])

        if not errors:
            self._stats["valid"] += 1
            return True, []

        self._stats["invalid"] += 1
        error_messages = []
        for error in errors:
            self._stats["error_types"][error.validator] += 1
            if error.path:
                error_messages.append(f"{error.path[0]}: {error.message}")
            else:
                error_messages.append(error.message)

        return False, error_messages

    def get_stats(self):
        """Return a copy of the stats dict."""
        stats = dict(self._stats)
        stats["error_types"] = dict(stats["error_types"])
        return stats
