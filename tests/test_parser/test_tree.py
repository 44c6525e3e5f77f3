"""Tests for openapi_import.parser.tree."""

from __future__ import annotations

from openapi_import.generator.content import response_example
from openapi_import.models import HTTPMethod
from openapi_import.parser import build_tree, filter_tree, flatten_endpoints, parse_openapi
from openapi_import.parser.resolver import RefResolver
from openapi_import.parser.tree import UNTAGGED, collation_key, count_endpoints


def _doc(paths: dict, **extra):
    import json

    return parse_openapi(json.dumps({"openapi": "3.0.0", "paths": paths, **extra}))


class TestBuildTree:
    def test_minimal_pets_document(self) -> None:
        doc = _doc({
            "/pets": {
                "get": {
                    "tags": ["Pets"],
                    "responses": {
                        "200": {
                            "content": {
                                "application/json": {
                                    "schema": {
                                        "type": "object",
                                        "properties": {"id": {"type": "integer"}},
                                    }
                                }
                            }
                        }
                    },
                }
            }
        })
        tree = build_tree(doc)

        assert [t.label for t in tree] == ["Pets"]
        assert [p.label for p in tree[0].children] == ["/pets"]
        endpoints = tree[0].children[0].children
        assert len(endpoints) == 1
        endpoint = endpoints[0]
        assert endpoint.method is HTTPMethod.GET
        assert endpoint.path == "/pets"
        assert response_example(endpoint.responses["200"]) == {"id": 0}

    def test_node_ids(self, petstore_doc) -> None:
        tree = build_tree(petstore_doc)
        pets = tree[0]
        assert pets.id == "tag:pets"
        assert pets.children[0].id == "path:/pets:pets"
        assert pets.children[0].children[0].id == "ep:get:/pets"

    def test_same_path_under_two_tags(self, multi_tag_doc) -> None:
        tree = build_tree(multi_tag_doc)
        by_label = {t.label: t for t in tree}

        alpha_items = by_label["Alpha"].children
        zebra_items = by_label["Zebra"].children
        assert [p.label for p in alpha_items] == ["/items"]
        assert [p.label for p in zebra_items] == ["/items"]
        assert alpha_items[0] is not zebra_items[0]
        assert [e.method for e in alpha_items[0].children] == [HTTPMethod.POST]
        assert [e.method for e in zebra_items[0].children] == [HTTPMethod.GET]

    def test_first_tag_groups_all_tags_kept(self, multi_tag_doc) -> None:
        post = next(e for e in flatten_endpoints(build_tree(multi_tag_doc)) if e.method is HTTPMethod.POST)
        assert post.tag == "Alpha"
        assert post.tags == ["Alpha", "Zebra"]

    def test_missing_tags_go_to_untagged(self, multi_tag_doc) -> None:
        tree = build_tree(multi_tag_doc)
        untagged = [t for t in tree if t.label == UNTAGGED]
        assert len(untagged) == 1
        assert [p.label for p in untagged[0].children] == ["/status"]

    def test_empty_tag_list_is_untagged(self) -> None:
        tree = build_tree(_doc({"/x": {"get": {"tags": [], "responses": {}}}}))
        assert tree[0].label == UNTAGGED
        assert tree[0].children[0].children[0].tag == UNTAGGED

    def test_tags_sorted_by_label(self) -> None:
        doc = _doc({
            "/z": {"get": {"tags": ["Zebra"]}},
            "/a": {"get": {"tags": ["Alpha"]}},
        })
        assert [t.label for t in build_tree(doc)] == ["Alpha", "Zebra"]

    def test_tag_sort_is_case_insensitive(self) -> None:
        doc = _doc({
            "/1": {"get": {"tags": ["beta"]}},
            "/2": {"get": {"tags": ["Alpha"]}},
            "/3": {"get": {"tags": ["Gamma"]}},
        })
        assert [t.label for t in build_tree(doc)] == ["Alpha", "beta", "Gamma"]

    def test_paths_keep_first_seen_order(self) -> None:
        doc = _doc({
            "/b": {"get": {"tags": ["t"]}},
            "/a": {"get": {"tags": ["t"]}},
            "/c": {"get": {"tags": ["t"]}},
        })
        assert [p.label for p in build_tree(doc)[0].children] == ["/b", "/a", "/c"]

    def test_endpoints_keep_verb_order(self) -> None:
        doc = _doc({"/x": {"delete": {}, "get": {}, "post": {}}})
        methods = [e.method.value for e in build_tree(doc)[0].children[0].children]
        assert methods == ["delete", "get", "post"]

    def test_non_verb_keys_ignored(self) -> None:
        doc = _doc({
            "/x": {
                "summary": "shared",
                "parameters": [],
                "x-internal": {"get": {}},
                "get": {"summary": "only this"},
            }
        })
        assert [e.summary for e in flatten_endpoints(build_tree(doc))] == ["only this"]

    def test_uppercase_verbs_accepted(self) -> None:
        doc = _doc({"/x": {"GET": {}}})
        assert flatten_endpoints(build_tree(doc))[0].method is HTTPMethod.GET

    def test_malformed_entries_skipped(self) -> None:
        doc = _doc({"/x": None, "/y": {"get": "nope"}, "/z": {"get": {}}})
        assert [e.path for e in flatten_endpoints(build_tree(doc))] == ["/z"]

    def test_non_mapping_paths_yield_empty_tree(self) -> None:
        assert build_tree(_doc([])) == []

    def test_tag_descriptions_from_declarations(self, petstore_doc) -> None:
        tree = {t.label: t for t in build_tree(petstore_doc)}
        assert tree["pets"].description == "Everything about your pets"
        assert tree["store"].description == ""
        assert tree[UNTAGGED].description == ""

    def test_endpoint_fields(self, petstore_doc) -> None:
        endpoint = flatten_endpoints(build_tree(petstore_doc))[0]
        assert endpoint.operation_id == "listPets"
        assert endpoint.summary == "List all pets"
        assert endpoint.title == "List all pets"
        assert endpoint.raw is petstore_doc.paths["/pets"]["get"]

    def test_request_body_and_responses_resolved(self, petstore_doc) -> None:
        endpoints = {e.id: e for e in flatten_endpoints(build_tree(petstore_doc))}
        create = endpoints["ep:post:/pets"]
        schema = create.request_body["content"]["application/json"]["schema"]
        assert schema["properties"]["name"] == {"type": "string"}
        listing = endpoints["ep:get:/pets"]
        assert listing.responses["default"]["description"] == "unexpected error"

    def test_path_level_parameters_inherited(self, petstore_doc) -> None:
        endpoints = {e.id: e for e in flatten_endpoints(build_tree(petstore_doc))}
        params = endpoints["ep:get:/pets/{petId}"].parameters
        assert [(p["name"], p["in"]) for p in params] == [("petId", "path")]

    def test_operation_parameter_overrides_path_level(self) -> None:
        doc = _doc({
            "/x/{id}": {
                "parameters": [
                    {"name": "id", "in": "path", "schema": {"type": "string"}},
                    {"name": "trace", "in": "header"},
                ],
                "get": {
                    "parameters": [{"name": "id", "in": "path", "schema": {"type": "integer"}}]
                },
            }
        })
        params = flatten_endpoints(build_tree(doc))[0].parameters
        assert [(p["name"], p["in"]) for p in params] == [("trace", "header"), ("id", "path")]
        assert params[1]["schema"] == {"type": "integer"}

    def test_parameter_refs_resolved(self) -> None:
        doc = _doc(
            {"/x": {"get": {"parameters": [{"$ref": "#/components/parameters/Limit"}]}}},
            components={"parameters": {"Limit": {"name": "limit", "in": "query"}}},
        )
        assert flatten_endpoints(build_tree(doc))[0].parameters == [{"name": "limit", "in": "query"}]

    def test_shared_resolver_collects_problems(self, cyclic_doc) -> None:
        resolver = RefResolver(cyclic_doc)
        build_tree(cyclic_doc, resolver)
        assert "#/components/schemas/Missing" in resolver.unresolved
        assert "#/components/schemas/Node" in resolver.circular


class TestCollationKey:
    def test_lowercase_before_uppercase_on_tie(self) -> None:
        assert sorted(["B", "b", "a"], key=collation_key) == ["a", "b", "B"]


class TestFilterTree:
    def test_blank_query_returns_input(self, petstore_doc) -> None:
        tree = build_tree(petstore_doc)
        assert filter_tree(tree, "  ") is tree

    def test_matches_summary(self, petstore_doc) -> None:
        result = filter_tree(build_tree(petstore_doc), "specific pet")
        assert [e.id for e in flatten_endpoints(result)] == ["ep:get:/pets/{petId}"]

    def test_matches_operation_id_case_insensitively(self, petstore_doc) -> None:
        result = filter_tree(build_tree(petstore_doc), "GETINVENTORY")
        assert [t.label for t in result] == ["store"]

    def test_tag_match_keeps_all_endpoints(self, petstore_doc) -> None:
        result = filter_tree(build_tree(petstore_doc), "pets")
        assert count_endpoints(result) == 3

    def test_no_match(self, petstore_doc) -> None:
        assert filter_tree(build_tree(petstore_doc), "zzz") == []

    def test_query_does_not_span_fields(self, petstore_doc) -> None:
        assert filter_tree(build_tree(petstore_doc), "/health get") == []
        assert filter_tree(build_tree(petstore_doc), "pets /pets") == []

    def test_does_not_modify_input(self, petstore_doc) -> None:
        tree = build_tree(petstore_doc)
        before = count_endpoints(tree)
        filter_tree(tree, "health")
        assert count_endpoints(tree) == before


class TestFlatten:
    def test_display_order(self, petstore_doc) -> None:
        ids = [e.id for e in flatten_endpoints(build_tree(petstore_doc))]
        assert ids == [
            "ep:get:/pets",
            "ep:post:/pets",
            "ep:get:/pets/{petId}",
            "ep:get:/store/inventory",
            "ep:get:/health",
        ]

    def test_count(self, petstore_doc) -> None:
        assert count_endpoints(build_tree(petstore_doc)) == 5
