"""JSON Schemas for package set, resolve request and workspace documents."""

from __future__ import annotations

from typing import Any, Dict

_DEP_SPEC: Dict[str, Any] = {
    "oneOf": [
        {"type": "string"},
        {
            "type": "object",
            "properties": {
                "optional": {"type": "boolean"},
                "features": {"type": "array", "items": {"type": "string"}},
                "default-features": {"type": "boolean"},
                "default_features": {"type": "boolean"},
            },
        },
    ]
}

_DEP_SPEC_MAP: Dict[str, Any] = {
    "type": "object",
    "additionalProperties": _DEP_SPEC,
}

_TARGET_DEPS: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "dependencies": _DEP_SPEC_MAP,
        "build-dependencies": _DEP_SPEC_MAP,
        "dev-dependencies": _DEP_SPEC_MAP,
    },
}

MANIFEST_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "lib": {
            "type": "object",
            "properties": {
                "proc-macro": {"type": "boolean"},
                "proc_macro": {"type": "boolean"},
            },
        },
        "dependencies": _DEP_SPEC_MAP,
        "build-dependencies": _DEP_SPEC_MAP,
        "dev-dependencies": _DEP_SPEC_MAP,
        "target": {"type": "object", "additionalProperties": _TARGET_DEPS},
        "features": {
            "type": "object",
            "additionalProperties": {"type": "array", "items": {"type": "string"}},
        },
    },
}

PACKAGE_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "required": ["cargo-manifest"],
    "properties": {
        "name": {"type": "string"},
        "version": {"type": "string"},
        "checksum": {"type": ["string", "null"]},
        "source": {
            "type": ["object", "null"],
            "properties": {"git": {"type": "string"}, "rev": {"type": "string"}},
        },
        "dependencies": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["package-id", "toml-names"],
                "properties": {
                    "package-id": {"type": "string"},
                    "toml-names": {"type": "array", "items": {"type": "string"}},
                },
            },
        },
        "cargo-manifest": MANIFEST_SCHEMA,
    },
}

PACKAGE_SET_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "additionalProperties": PACKAGE_SCHEMA,
}

_PLATFORM_REF: Dict[str, Any] = {
    # Raw descriptors are validated separately by cfg.target; a plain
    # string is a target triple.
    "type": ["object", "string"],
}

RESOLVE_REQUEST_SCHEMA: Dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "type": "object",
    "required": ["buildPlatform", "hostPlatform", "packages", "initial"],
    "properties": {
        "buildPlatform": _PLATFORM_REF,
        "hostPlatform": _PLATFORM_REF,
        "packages": PACKAGE_SET_SCHEMA,
        "initial": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["package-id"],
                "properties": {
                    "package-id": {"type": "string"},
                    "features": {"type": "array", "items": {"type": "string"}},
                    "use-dev-dependencies": {"type": "boolean"},
                },
            },
        },
    },
}

WORKSPACE_SCHEMA: Dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "type": "object",
    "required": ["roots", "packages"],
    "properties": {
        "roots": {"type": "array", "items": {"type": "string"}, "minItems": 1, "uniqueItems": True},
        "packages": PACKAGE_SET_SCHEMA,
        "buildPlatform": _PLATFORM_REF,
        "hostPlatform": _PLATFORM_REF,
    },
}
