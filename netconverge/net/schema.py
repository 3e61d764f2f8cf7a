# This file is part of netconverge. See LICENSE file for license information.
"""jsonschema validation of the network settings document."""

import logging
from typing import List, NamedTuple, Optional

LOG = logging.getLogger(__name__)

_ROUTE = {
    "type": "object",
    "properties": {
        "destination": {"type": "string"},
        "netmask": {"type": ["string", "integer"]},
        "gateway": {"type": "string"},
    },
    "required": ["destination", "netmask", "gateway"],
    "additionalProperties": False,
}

_NETWORK = {
    "type": "object",
    "properties": {
        "type": {"enum": ["dynamic", "manual", "vip"]},
        "ip": {"type": "string"},
        "netmask": {"type": ["string", "integer"]},
        "gateway": {"type": "string"},
        "routes": {"type": "array", "items": _ROUTE},
        "dns": {"type": "array", "items": {"type": "string"}},
        "default": {
            "type": "array",
            "items": {"enum": ["dns", "gateway"]},
            "uniqueItems": True,
        },
        "mac": {"type": "string"},
        "alias": {"type": "string"},
        "preconfigured": {"type": "boolean"},
        "use_dhcp": {"type": "boolean"},
    },
    "additionalProperties": False,
}

SETTINGS_SCHEMA = {
    "$schema": "http://json-schema.org/draft-04/schema#",
    "type": "object",
    "properties": {
        "networks": {
            "type": "object",
            "additionalProperties": _NETWORK,
        },
        "ipv6": {
            "type": "object",
            "properties": {"enable": {"type": "boolean"}},
            "additionalProperties": False,
        },
    },
    "required": ["networks"],
}


class SchemaProblem(NamedTuple):
    path: str
    message: str

    def format(self) -> str:
        return f"{self.path}: {self.message}"


SchemaProblems = List[SchemaProblem]


class SchemaValidationError(ValueError):
    """Raised when validating a settings document against the schema."""

    def __init__(self, schema_errors: Optional[SchemaProblems] = None):
        self.schema_errors = sorted(set(schema_errors or []))
        super().__init__(
            "Network settings schema errors: "
            + ", ".join(p.format() for p in self.schema_errors)
        )


def validate_settings(
    settings: dict, schema: Optional[dict] = None, strict: bool = True
) -> bool:
    """Validate settings against the settings schema.

    @param settings: the loaded settings document.
    @param schema: jsonschema dict to validate against, SETTINGS_SCHEMA
        when None.
    @param strict: raise SchemaValidationError instead of logging a
        warning.

    @returns: True when valid, False when invalid and not strict.
    @raises: SchemaValidationError when invalid and strict.
    """
    from jsonschema import Draft4Validator, FormatChecker

    if schema is None:
        schema = SETTINGS_SCHEMA
    validator = Draft4Validator(schema, format_checker=FormatChecker())

    errors: SchemaProblems = []
    for schema_error in sorted(
        validator.iter_errors(settings), key=lambda e: [str(p) for p in e.path]
    ):
        path = ".".join([str(p) for p in schema_error.path]) or "<root>"
        errors.append(SchemaProblem(path, schema_error.message))

    if not errors:
        return True
    if strict:
        raise SchemaValidationError(errors)
    LOG.warning(
        "Invalid network settings: %s",
        ", ".join(p.format() for p in errors),
    )
    return False
