"""Node type catalog for OpenAPI 3.0.x.

Each module-level constant is one :class:`~speclint.node_types.base.TypeDefinition`
of the OpenAPI 3.0 grammar; :data:`OAS3_TYPES` collects them by name. The
OpenAPI 3.1 catalog in :mod:`speclint.node_types.oas3_1` starts from this one
and replaces the types whose shape changed.

Reference: https://spec.openapis.org/oas/v3.0.3
"""

from __future__ import annotations

import re
from typing import Any, Optional

from speclint.node_types.base import (
    UNDECLARED,
    PropType,
    ScalarSchema,
    TypeDefinition,
    list_of,
    map_of,
)

_RESPONSE_CODE = re.compile(r"^[0-9][0-9Xx]{2}$")

STRING = ScalarSchema(type="string")
BOOLEAN = ScalarSchema(type="boolean")
NUMBER = ScalarSchema(type="number")
NON_NEGATIVE_NUMBER = ScalarSchema(type="number", minimum=0)
NON_NEGATIVE_INTEGER = ScalarSchema(type="integer", minimum=0)
STRING_LIST = ScalarSchema(type="array", items=STRING)
ANY_LIST = ScalarSchema(type="array")
OBJECT = ScalarSchema(type="object")

PARAMETER_STYLES = (
    "form",
    "simple",
    "label",
    "matrix",
    "spaceDelimited",
    "pipeDelimited",
    "deepObject",
)

SCHEMA_TYPES = ("object", "array", "string", "number", "integer", "boolean")


# --- Selectors ---


def path_item_for_path(_value: Any, key: str) -> PropType:
    return "PathItem" if key.startswith("/") else UNDECLARED


def response_for_code(_value: Any, key: str) -> PropType:
    return "Response" if _RESPONSE_CODE.match(key) else UNDECLARED


def boolean_or_schema(value: Any, _key: str) -> PropType:
    return BOOLEAN if isinstance(value, bool) else "Schema"


def is_mapping_ref(mapping: str) -> bool:
    """Return True if a discriminator mapping value is a reference, not a schema name."""
    return (
        mapping.startswith("#")
        or mapping.endswith((".json", ".yaml", ".yml"))
        or "/" in mapping
    )


def discriminator_mapping_value(value: Any, _key: str) -> PropType:
    if isinstance(value, str) and is_mapping_ref(value):
        return ScalarSchema(type="string", direct_resolve_as="Schema")
    return STRING


def security_scheme_required(node: Any, _key: Optional[str]) -> list[str]:
    scheme_type = node.get("type") if isinstance(node, dict) else None
    if scheme_type == "apiKey":
        return ["type", "name", "in"]
    if scheme_type == "http":
        return ["type", "scheme"]
    if scheme_type == "oauth2":
        return ["type", "flows"]
    if scheme_type == "openIdConnect":
        return ["type", "openIdConnectUrl"]
    return ["type"]


def security_scheme_allowed(node: Any) -> Optional[list[str]]:
    scheme_type = node.get("type") if isinstance(node, dict) else None
    if scheme_type == "apiKey":
        return ["type", "name", "in", "description"]
    if scheme_type == "http":
        return ["type", "scheme", "bearerFormat", "description"]
    if scheme_type == "oauth2":
        return ["type", "flows", "description"]
    if scheme_type == "openIdConnect":
        return ["type", "openIdConnectUrl", "description"]
    return ["type", "description"]


# --- Document structure ---


ROOT = TypeDefinition(
    "Root",
    properties={
        "openapi": None,
        "info": "Info",
        "servers": list_of("Server"),
        "security": list_of("SecurityRequirement"),
        "tags": list_of("Tag"),
        "externalDocs": "ExternalDocs",
        "paths": "PathMap",
        "components": "Components",
        "x-webhooks": "WebhooksMap",
    },
    required=("openapi", "paths", "info"),
)

INFO = TypeDefinition(
    "Info",
    properties={
        "title": STRING,
        "version": STRING,
        "description": STRING,
        "termsOfService": STRING,
        "contact": "Contact",
        "license": "License",
    },
    required=("title", "version"),
)

CONTACT = TypeDefinition(
    "Contact",
    properties={"name": STRING, "url": STRING, "email": STRING},
)

LICENSE = TypeDefinition(
    "License",
    properties={"name": STRING, "url": STRING},
    required=("name",),
)

TAG = TypeDefinition(
    "Tag",
    properties={"name": STRING, "description": STRING, "externalDocs": "ExternalDocs"},
    required=("name",),
)

EXTERNAL_DOCS = TypeDefinition(
    "ExternalDocs",
    properties={"description": STRING, "url": STRING},
    required=("url",),
)

SERVER = TypeDefinition(
    "Server",
    properties={
        "url": STRING,
        "description": STRING,
        "variables": map_of("ServerVariable", name="ServerVariablesMap"),
    },
    required=("url",),
)

SERVER_VARIABLE = TypeDefinition(
    "ServerVariable",
    properties={"enum": STRING_LIST, "default": STRING, "description": None},
    required=("default",),
)

SECURITY_REQUIREMENT = TypeDefinition(
    "SecurityRequirement",
    additional_properties=STRING_LIST,
)

PATH_MAP = TypeDefinition("PathMap", additional_properties=path_item_for_path)

WEBHOOKS_MAP = TypeDefinition("WebhooksMap", additional_properties="PathItem")

PATH_ITEM = TypeDefinition(
    "PathItem",
    properties={
        "$ref": STRING,
        "summary": STRING,
        "description": STRING,
        "servers": list_of("Server"),
        "parameters": list_of("Parameter"),
        "get": "Operation",
        "put": "Operation",
        "post": "Operation",
        "delete": "Operation",
        "options": "Operation",
        "head": "Operation",
        "patch": "Operation",
        "trace": "Operation",
    },
)

OPERATION = TypeDefinition(
    "Operation",
    properties={
        "tags": STRING_LIST,
        "summary": STRING,
        "description": STRING,
        "externalDocs": "ExternalDocs",
        "operationId": STRING,
        "parameters": list_of("Parameter"),
        "requestBody": "RequestBody",
        "responses": "ResponsesMap",
        "callbacks": map_of("Callback", name="CallbacksMap"),
        "deprecated": BOOLEAN,
        "security": list_of("SecurityRequirement"),
        "servers": list_of("Server"),
    },
    required=("responses",),
)

PARAMETER = TypeDefinition(
    "Parameter",
    properties={
        "name": STRING,
        "in": ScalarSchema(enum=("query", "header", "path", "cookie")),
        "description": STRING,
        "required": BOOLEAN,
        "deprecated": BOOLEAN,
        "allowEmptyValue": BOOLEAN,
        "style": ScalarSchema(enum=PARAMETER_STYLES),
        "explode": BOOLEAN,
        "allowReserved": BOOLEAN,
        "schema": "Schema",
        "example": None,
        "examples": map_of("Example", name="ExamplesMap"),
        "content": "MediaTypeMap",
    },
    required=("name", "in"),
    required_one_of=("schema", "content"),
)

CALLBACK = TypeDefinition("Callback", additional_properties="PathItem")

REQUEST_BODY = TypeDefinition(
    "RequestBody",
    properties={"description": STRING, "required": BOOLEAN, "content": "MediaTypeMap"},
    required=("content",),
)

MEDIA_TYPE_MAP = TypeDefinition("MediaTypeMap", additional_properties="MediaType")

MEDIA_TYPE = TypeDefinition(
    "MediaType",
    properties={
        "schema": "Schema",
        "example": None,
        "examples": map_of("Example", name="ExamplesMap"),
        "encoding": map_of("Encoding", name="EncodingMap"),
    },
)

EXAMPLE = TypeDefinition(
    "Example",
    properties={
        "value": None,
        "summary": STRING,
        "description": STRING,
        "externalValue": STRING,
    },
)

ENCODING = TypeDefinition(
    "Encoding",
    properties={
        "contentType": STRING,
        "headers": map_of("Header", name="HeadersMap"),
        "style": ScalarSchema(enum=PARAMETER_STYLES),
        "explode": BOOLEAN,
        "allowReserved": BOOLEAN,
    },
)

HEADER = TypeDefinition(
    "Header",
    properties={
        "description": STRING,
        "required": BOOLEAN,
        "deprecated": BOOLEAN,
        "allowEmptyValue": BOOLEAN,
        "style": ScalarSchema(enum=PARAMETER_STYLES),
        "explode": BOOLEAN,
        "allowReserved": BOOLEAN,
        "schema": "Schema",
        "example": None,
        "examples": map_of("Example", name="ExamplesMap"),
        "content": "MediaTypeMap",
    },
)

RESPONSES_MAP = TypeDefinition(
    "ResponsesMap",
    properties={"default": "Response"},
    additional_properties=response_for_code,
)

RESPONSE = TypeDefinition(
    "Response",
    properties={
        "description": STRING,
        "headers": map_of("Header", name="HeadersMap"),
        "content": "MediaTypeMap",
        "links": map_of("Link", name="LinksMap"),
    },
    required=("description",),
)

LINK = TypeDefinition(
    "Link",
    properties={
        "operationRef": STRING,
        "operationId": STRING,
        "parameters": None,
        "requestBody": None,
        "description": STRING,
        "server": "Server",
    },
)


# --- Schemas ---


SCHEMA = TypeDefinition(
    "Schema",
    properties={
        "externalDocs": "ExternalDocs",
        "discriminator": "Discriminator",
        "title": STRING,
        "multipleOf": NON_NEGATIVE_NUMBER,
        "maximum": NUMBER,
        "minimum": NUMBER,
        "exclusiveMaximum": BOOLEAN,
        "exclusiveMinimum": BOOLEAN,
        "maxLength": NON_NEGATIVE_INTEGER,
        "minLength": NON_NEGATIVE_INTEGER,
        "pattern": STRING,
        "maxItems": NON_NEGATIVE_INTEGER,
        "minItems": NON_NEGATIVE_INTEGER,
        "uniqueItems": BOOLEAN,
        "maxProperties": NON_NEGATIVE_INTEGER,
        "minProperties": NON_NEGATIVE_INTEGER,
        "required": STRING_LIST,
        "enum": ANY_LIST,
        "type": ScalarSchema(enum=SCHEMA_TYPES),
        "allOf": list_of("Schema"),
        "anyOf": list_of("Schema"),
        "oneOf": list_of("Schema"),
        "not": "Schema",
        "properties": "SchemaProperties",
        "items": "Schema",
        "additionalProperties": boolean_or_schema,
        "description": STRING,
        "format": STRING,
        "default": None,
        "nullable": BOOLEAN,
        "readOnly": BOOLEAN,
        "writeOnly": BOOLEAN,
        "xml": "Xml",
        "example": None,
        "deprecated": BOOLEAN,
    },
)

SCHEMA_PROPERTIES = TypeDefinition("SchemaProperties", additional_properties="Schema")

XML = TypeDefinition(
    "Xml",
    properties={
        "name": STRING,
        "namespace": STRING,
        "prefix": STRING,
        "attribute": BOOLEAN,
        "wrapped": BOOLEAN,
    },
)

DISCRIMINATOR = TypeDefinition(
    "Discriminator",
    properties={"propertyName": STRING, "mapping": "DiscriminatorMapping"},
    required=("propertyName",),
)

DISCRIMINATOR_MAPPING = TypeDefinition(
    "DiscriminatorMapping",
    additional_properties=discriminator_mapping_value,
)


# --- Components ---


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
    },
)

NAMED_SCHEMAS = map_of("Schema", name="NamedSchemas")


# --- Security ---


SECURITY_SCHEME = TypeDefinition(
    "SecurityScheme",
    properties={
        "type": ScalarSchema(enum=("apiKey", "http", "oauth2", "openIdConnect")),
        "description": STRING,
        "name": STRING,
        "in": ScalarSchema(type="string", enum=("query", "header", "cookie")),
        "scheme": STRING,
        "bearerFormat": STRING,
        "flows": "SecuritySchemeFlows",
        "openIdConnectUrl": STRING,
    },
    required=security_scheme_required,
    allowed=security_scheme_allowed,
)

SECURITY_SCHEME_FLOWS = TypeDefinition(
    "SecuritySchemeFlows",
    properties={
        "implicit": "ImplicitFlow",
        "password": "PasswordFlow",
        "clientCredentials": "ClientCredentials",
        "authorizationCode": "AuthorizationCode",
    },
)

SECURITY_SCHEME_SCOPES = TypeDefinition(
    "SecuritySchemeScopes",
    additional_properties=STRING,
)

IMPLICIT_FLOW = TypeDefinition(
    "ImplicitFlow",
    properties={
        "refreshUrl": STRING,
        "scopes": "SecuritySchemeScopes",
        "authorizationUrl": STRING,
    },
    required=("authorizationUrl", "scopes"),
)

PASSWORD_FLOW = TypeDefinition(
    "PasswordFlow",
    properties={
        "refreshUrl": STRING,
        "tokenUrl": STRING,
        "scopes": "SecuritySchemeScopes",
    },
    required=("tokenUrl", "scopes"),
)

CLIENT_CREDENTIALS = TypeDefinition(
    "ClientCredentials",
    properties={
        "refreshUrl": STRING,
        "tokenUrl": STRING,
        "scopes": "SecuritySchemeScopes",
    },
    required=("tokenUrl", "scopes"),
)

AUTHORIZATION_CODE = TypeDefinition(
    "AuthorizationCode",
    properties={
        "refreshUrl": STRING,
        "authorizationUrl": STRING,
        "tokenUrl": STRING,
        "scopes": "SecuritySchemeScopes",
    },
    required=("authorizationUrl", "tokenUrl", "scopes"),
)


OAS3_TYPES: dict[str, TypeDefinition] = {
    t.name: t
    for t in (
        ROOT,
        INFO,
        CONTACT,
        LICENSE,
        TAG,
        EXTERNAL_DOCS,
        SERVER,
        SERVER_VARIABLE,
        SECURITY_REQUIREMENT,
        PATH_MAP,
        WEBHOOKS_MAP,
        PATH_ITEM,
        OPERATION,
        PARAMETER,
        CALLBACK,
        REQUEST_BODY,
        MEDIA_TYPE_MAP,
        MEDIA_TYPE,
        EXAMPLE,
        ENCODING,
        HEADER,
        RESPONSES_MAP,
        RESPONSE,
        LINK,
        SCHEMA,
        SCHEMA_PROPERTIES,
        XML,
        DISCRIMINATOR,
        DISCRIMINATOR_MAPPING,
        COMPONENTS,
        NAMED_SCHEMAS,
        SECURITY_SCHEME,
        SECURITY_SCHEME_FLOWS,
        SECURITY_SCHEME_SCOPES,
        IMPLICIT_FLOW,
        PASSWORD_FLOW,
        CLIENT_CREDENTIALS,
        AUTHORIZATION_CODE,
    )
}
"""OpenAPI 3.0 node types keyed by name. Treat as read-only."""
