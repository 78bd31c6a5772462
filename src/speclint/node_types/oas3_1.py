"""Node type catalog for OpenAPI 3.1.x.

OpenAPI 3.1 keeps most of the 3.0 grammar, so :data:`OAS3_1_TYPES` starts from
:data:`~speclint.node_types.oas3.OAS3_TYPES` and replaces the types whose shape
changed:

* ``Root`` -- ``webhooks`` and ``jsonSchemaDialect``; ``paths`` is no longer
  required, but one of ``paths``, ``components``, ``webhooks`` is.
* ``Info`` gains ``summary``; ``License`` gains ``identifier``.
* ``Operation`` -- ``responses`` is optional.
* ``Components`` gains ``pathItems``.
* ``Schema`` follows JSON Schema 2020-12: ``type`` accepts ``null`` and lists
  of literals, boolean schemas are allowed in subschema positions, numeric
  ``exclusiveMinimum``/``exclusiveMaximum``, and ``nullable`` is gone.
* ``SecurityScheme`` accepts the ``mutualTLS`` type.

Reference: https://spec.openapis.org/oas/v3.1.0
"""

from __future__ import annotations

from typing import Any, Optional

from speclint.node_types.base import PropType, ScalarSchema, TypeDefinition, list_of, map_of
from speclint.node_types.oas3 import (
    ANY_LIST,
    BOOLEAN,
    NON_NEGATIVE_INTEGER,
    NON_NEGATIVE_NUMBER,
    NUMBER,
    OAS3_TYPES,
    OPERATION,
    SECURITY_SCHEME,
    STRING,
    STRING_LIST,
    boolean_or_schema,
    security_scheme_allowed,
    security_scheme_required,
)

SCHEMA_TYPES = ("object", "array", "string", "number", "integer", "boolean", "null")


def schema_type(value: Any, _key: str) -> PropType:
    if isinstance(value, list):
        return ScalarSchema(type="array", items=ScalarSchema(enum=SCHEMA_TYPES))
    return ScalarSchema(enum=SCHEMA_TYPES)


def security_scheme_31_required(node: Any, key: Optional[str]) -> list[str]:
    if isinstance(node, dict) and node.get("type") == "mutualTLS":
        return ["type"]
    return security_scheme_required(node, key)


def security_scheme_31_allowed(node: Any) -> Optional[list[str]]:
    if isinstance(node, dict) and node.get("type") == "mutualTLS":
        return ["type", "description"]
    return security_scheme_allowed(node)


ROOT = TypeDefinition(
    "Root",
    properties={
        "openapi": None,
        "info": "Info",
        "jsonSchemaDialect": STRING,
        "servers": list_of("Server"),
        "security": list_of("SecurityRequirement"),
        "tags": list_of("Tag"),
        "externalDocs": "ExternalDocs",
        "paths": "PathMap",
        "webhooks": "WebhooksMap",
        "components": "Components",
    },
    required=("openapi", "info"),
    required_one_of=("paths", "components", "webhooks"),
)

INFO = TypeDefinition(
    "Info",
    properties={
        "title": STRING,
        "version": STRING,
        "summary": STRING,
        "description": STRING,
        "termsOfService": STRING,
        "contact": "Contact",
        "license": "License",
    },
    required=("title", "version"),
)

LICENSE = TypeDefinition(
    "License",
    properties={"name": STRING, "url": STRING, "identifier": STRING},
    required=("name",),
)

OPERATION_31 = TypeDefinition(
    "Operation",
    properties=dict(OPERATION.properties),
)

COMPONENTS = TypeDefinition(
    "Components",
    properties={
        "schemas": "NamedSchemas",
        "responses": map_of("Response", name="NamedResponses"),
        "parameters": map_of("Parameter", name="NamedParameters"),
        "examples": map_of("Example", name="NamedExamples"),
        "requestBodies": map_of("RequestBody", name="NamedRequestBodies"),
        "headers": map_of("Header", name="NamedHeaders"),
        "securitySchemes": map_of("SecurityScheme", name="NamedSecuritySchemes"),
        "links": map_of("Link", name="NamedLinks"),
        "callbacks": map_of("Callback", name="NamedCallbacks"),
        "pathItems": map_of("PathItem", name="NamedPathItems"),
    },
)

SCHEMA = TypeDefinition(
    "Schema",
    properties={
        "$id": STRING,
        "$anchor": STRING,
        "$schema": STRING,
        "$comment": STRING,
        "$vocabulary": None,
        "$dynamicAnchor": STRING,
        "$dynamicRef": STRING,
        "$defs": "NamedSchemas",
        "externalDocs": "ExternalDocs",
        "discriminator": "Discriminator",
        "title": STRING,
        "summary": STRING,
        "multipleOf": NON_NEGATIVE_NUMBER,
        "maximum": NUMBER,
        "minimum": NUMBER,
        "exclusiveMaximum": NUMBER,
        "exclusiveMinimum": NUMBER,
        "maxLength": NON_NEGATIVE_INTEGER,
        "minLength": NON_NEGATIVE_INTEGER,
        "pattern": STRING,
        "maxItems": NON_NEGATIVE_INTEGER,
        "minItems": NON_NEGATIVE_INTEGER,
        "uniqueItems": BOOLEAN,
        "maxProperties": NON_NEGATIVE_INTEGER,
        "minProperties": NON_NEGATIVE_INTEGER,
        "minContains": NON_NEGATIVE_INTEGER,
        "maxContains": NON_NEGATIVE_INTEGER,
        "required": STRING_LIST,
        "dependentRequired": "DependentRequired",
        "enum": ANY_LIST,
        "const": None,
        "type": schema_type,
        "allOf": list_of("Schema"),
        "anyOf": list_of("Schema"),
        "oneOf": list_of("Schema"),
        "not": boolean_or_schema,
        "if": boolean_or_schema,
        "then": boolean_or_schema,
        "else": boolean_or_schema,
        "dependentSchemas": "NamedSchemas",
        "prefixItems": list_of("Schema"),
        "items": boolean_or_schema,
        "contains": boolean_or_schema,
        "properties": "SchemaProperties",
        "patternProperties": "SchemaProperties",
        "additionalProperties": boolean_or_schema,
        "propertyNames": boolean_or_schema,
        "unevaluatedItems": boolean_or_schema,
        "unevaluatedProperties": boolean_or_schema,
        "description": STRING,
        "format": STRING,
        "contentEncoding": STRING,
        "contentMediaType": STRING,
        "contentSchema": boolean_or_schema,
        "default": None,
        "readOnly": BOOLEAN,
        "writeOnly": BOOLEAN,
        "xml": "Xml",
        "examples": ANY_LIST,
        "example": None,
        "deprecated": BOOLEAN,
    },
    ref_siblings=True,
)

SCHEMA_PROPERTIES = TypeDefinition(
    "SchemaProperties",
    additional_properties=boolean_or_schema,
)

DEPENDENT_REQUIRED = TypeDefinition(
    "DependentRequired",
    additional_properties=STRING_LIST,
)

SECURITY_SCHEME_31 = TypeDefinition(
    "SecurityScheme",
    properties={
        **SECURITY_SCHEME.properties,
        "type": ScalarSchema(
            enum=("apiKey", "http", "oauth2", "openIdConnect", "mutualTLS")
        ),
    },
    required=security_scheme_31_required,
    allowed=security_scheme_31_allowed,
)


OAS3_1_TYPES: dict[str, TypeDefinition] = {
    **OAS3_TYPES,
    **{
        t.name: t
        for t in (
            ROOT,
            INFO,
            LICENSE,
            OPERATION_31,
            COMPONENTS,
            SCHEMA,
            SCHEMA_PROPERTIES,
            DEPENDENT_REQUIRED,
            SECURITY_SCHEME_31,
        )
    },
}
"""OpenAPI 3.1 node types keyed by name. Treat as read-only."""
