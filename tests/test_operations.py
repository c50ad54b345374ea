"""Tests for OpenAPI operation listing and normalization."""

import copy
import json

from hookgen.feature import HttpMethod, OperationDescriptor
from hookgen.operations import (
    enrich_schema_titles,
    get_operations,
    normalize_operation,
    operation_feature_name,
    success_schema,
)


def _by_label(document):
    return {op.label: op for op in get_operations(document)}


class TestGetOperations:
    """Test operation listing."""

    def test_labels_in_document_order(self, users_document):
        labels = [op.label for op in get_operations(users_document)]
        assert labels == ["GET /api/users", "POST /api/users", "DELETE /api/users/{id}"]

    def test_description(self, users_document):
        ops = _by_label(users_document)
        assert ops["GET /api/users"].description == "List users"
        assert ops["POST /api/users"].description == ""

    def test_path_level_parameters_merged(self, users_document):
        params = _by_label(users_document)["GET /api/users"].parameters
        assert [p["name"] for p in params] == ["tenant", "pageNo"]

    def test_operation_parameter_wins(self, users_document):
        users_document["paths"]["/api/users"]["get"]["parameters"].append(
            {"name": "tenant", "in": "query", "required": True, "schema": {"type": "integer"}},
        )
        params = _by_label(users_document)["GET /api/users"].parameters
        tenant = [p for p in params if p["name"] == "tenant"]
        assert len(tenant) == 1
        assert tenant[0]["required"] is True

    def test_request_body(self, users_document):
        op = _by_label(users_document)["POST /api/users"]
        assert op.request_body == {"$ref": "#/components/schemas/NewUser"}

    def test_response_without_body(self, users_document):
        op = _by_label(users_document)["DELETE /api/users/{id}"]
        assert op.responses == {"204": None}

    def test_non_http_keys_skipped(self, users_document):
        users_document["paths"]["/api/users"]["x-internal"] = {"note": "ignored"}
        users_document["paths"]["/api/users"]["options"] = {"responses": {}}
        assert len(get_operations(users_document)) == 3

    def test_swagger2_body_and_response(self):
        document = {
            "swagger": "2.0",
            "paths": {
                "/pets": {
                    "post": {
                        "parameters": [
                            {"name": "body", "in": "body", "schema": {"type": "object", "properties": {"name": {"type": "string"}}}},
                        ],
                        "responses": {"200": {"description": "ok", "schema": {"type": "array", "items": {"type": "string"}}}},
                    },
                },
            },
        }
        op = get_operations(document)[0]
        assert op.request_body["properties"] == {"name": {"type": "string"}}
        assert op.parameters == []
        assert op.responses["200"] == {"type": "array", "items": {"type": "string"}}

    def test_json_content_preferred(self):
        document = {
            "paths": {
                "/file": {
                    "get": {
                        "responses": {
                            "200": {
                                "content": {
                                    "text/plain": {"schema": {"type": "string"}},
                                    "application/json": {"schema": {"type": "integer"}},
                                },
                            },
                        },
                    },
                },
            },
        }
        assert get_operations(document)[0].responses["200"] == {"type": "integer"}


class TestHelpers:
    """Test naming and response selection."""

    def test_feature_name_from_operation_id(self):
        op = OperationDescriptor(path="/x", method="get", operation_id="get-user.byId")
        assert operation_feature_name(op) == "getuserbyId"

    def test_feature_name_from_path(self):
        op = OperationDescriptor(path="/api/users/{id}/orders", method="get")
        assert operation_feature_name(op) == "getOrders"

    def test_lowest_success_code(self):
        op = OperationDescriptor(
            path="/x", method="get",
            responses={"default": {"type": "null"}, "201": {"type": "string"}, "200": {"type": "integer"}},
        )
        assert success_schema(op) == {"type": "integer"}

    def test_no_success_code(self):
        op = OperationDescriptor(path="/x", method="get", responses={"404": {"type": "string"}})
        assert success_schema(op) is None

    def test_enrich_titles(self):
        schema = {
            "type": "object",
            "properties": {
                "address": {"type": "object", "properties": {"city": {"type": "string"}}},
                "tags": {"type": "array", "items": {"type": "object", "properties": {"x": {}}}},
                "name": {"type": "string"},
            },
        }
        enrich_schema_titles(schema, "Foo")
        assert schema["title"] == "Foo"
        assert schema["properties"]["address"]["title"] == "FooAddress"
        assert schema["properties"]["tags"]["items"]["title"] == "FooTagsItem"
        assert "title" not in schema["properties"]["name"]


class TestNormalizeOperation:
    """Test reduction of operations to feature inputs."""

    def test_paginated_envelope(self, users_document):
        """Round trip: the inner data schema comes back as the response schema."""
        op = _by_label(users_document)["GET /api/users"]
        normalized = normalize_operation(op, users_document)
        assert normalized.feature_name == "listUsers"
        assert normalized.method is HttpMethod.GET
        assert normalized.wrapper_args == "WithRecordResponse"

        response = json.loads(normalized.response_schema)
        inner = users_document["components"]["schemas"]["UserPage"]["properties"]["data"]
        assert response["title"] == "ListUsersData"
        assert response["components"] == users_document["components"]
        assert set(response["properties"]) == set(inner["properties"])
        assert response["properties"]["totalRecords"] == inner["properties"]["totalRecords"]

    def test_plain_envelope(self, users_document):
        op = _by_label(users_document)["POST /api/users"]
        normalized = normalize_operation(op, users_document)
        assert normalized.feature_name == "postUsers"
        assert normalized.wrapper_args == "WithResponse"
        response = json.loads(normalized.response_schema)
        assert response["$ref"] == "#/components/schemas/User"
        assert response["title"] == "PostUsersData"

    def test_marker_on_envelope(self, users_document):
        page = users_document["components"]["schemas"]["UserEnvelope"]
        page["properties"]["totalRecords"] = {"type": "integer"}
        op = _by_label(users_document)["POST /api/users"]
        assert normalize_operation(op, users_document).wrapper_args == "WithRecordResponse"

    def test_unwrapped_response(self):
        document = {
            "paths": {
                "/health": {
                    "get": {
                        "responses": {
                            "200": {"content": {"application/json": {"schema": {
                                "type": "object",
                                "properties": {"status": {"type": "string"}},
                            }}}},
                        },
                    },
                },
            },
        }
        normalized = normalize_operation(get_operations(document)[0], document)
        assert normalized.feature_name == "getHealth"
        assert normalized.wrapper_args is None
        assert json.loads(normalized.response_schema)["title"] == "GetHealthResponse"

    def test_no_response_schema(self, users_document):
        op = _by_label(users_document)["DELETE /api/users/{id}"]
        normalized = normalize_operation(op, users_document)
        assert normalized.response_schema is None
        assert normalized.wrapper_args is None

    def test_params_from_query_and_path(self, users_document):
        op = _by_label(users_document)["GET /api/users"]
        params = json.loads(normalize_operation(op, users_document).params_schema)
        assert params["type"] == "object"
        assert params["title"] == "ListUsersVariables"
        assert list(params["properties"]) == ["tenant", "pageNo"]
        assert params["required"] == ["pageNo"]

    def test_params_from_object_body(self, users_document):
        op = _by_label(users_document)["POST /api/users"]
        params = json.loads(normalize_operation(op, users_document).params_schema)
        assert list(params["properties"]) == ["tenant", "name"]
        assert params["required"] == ["name"]

    def test_params_from_array_body(self):
        document = {
            "paths": {
                "/tags": {
                    "put": {
                        "operationId": "replaceTags",
                        "requestBody": {"content": {"application/json": {"schema": {
                            "type": "array", "items": {"type": "string"},
                        }}}},
                        "responses": {"204": {"description": "ok"}},
                    },
                },
            },
        }
        params = json.loads(normalize_operation(get_operations(document)[0], document).params_schema)
        assert params["properties"]["body"]["type"] == "array"
        assert params["properties"]["body"]["items"]["type"] == "string"
        assert params["required"] == ["body"]

    def test_undeclared_path_variable(self):
        document = {"paths": {"/items/{id}": {"get": {"responses": {"200": {"description": "ok"}}}}}}
        params = json.loads(normalize_operation(get_operations(document)[0], document).params_schema)
        assert params["properties"]["id"] == {"type": "string"}
        assert params["required"] == ["id"]

    def test_no_params(self):
        document = {"paths": {"/ping": {"get": {"responses": {"200": {"description": "ok"}}}}}}
        assert normalize_operation(get_operations(document)[0], document).params_schema is None

    def test_document_not_mutated(self, users_document):
        before = copy.deepcopy(users_document)
        for op in get_operations(users_document):
            normalize_operation(op, users_document)
        assert users_document == before
