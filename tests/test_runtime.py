"""
Tests for the node runner: execution context, credentials, poll watermarks.
"""

from unittest.mock import patch

import pytest

from node_sdk.basenode import NodeApiError, NodeOperationError

from node_registry import NodeRegistry

from appstruct.manifest import register_nodes
from workflow_runtime import LAST_POLL_KEY, NodeRunner, StaticDataStore, parse_node

from conftest import CREDENTIALS, LOGIN_OK


TRIGGER = {
    "name": "New users",
    "type": "appStructTrigger",
    "typeVersion": 1,
    "parameters": {"triggerOn": "newRow", "projectId": "3", "tableName": "users"},
    "credentials": {"appStructApi": "appstruct-main"},
}

ACTION = {
    "name": "List tables",
    "type": "appStruct",
    "parameters": {"resource": "table", "operation": "getMany", "projectId": "3"},
    "credentials": {"appStructApi": "appstruct-main"},
}


@pytest.fixture
def registry():
    registry = NodeRegistry()
    registry.register_pack(*register_nodes())
    return registry


@pytest.fixture
def runner(registry):
    runner = NodeRunner(registry=registry, workflow_id="wf-1")
    runner.set_credentials("appstruct-main", dict(CREDENTIALS))
    return runner


class TestWorkflowNode:

    def test_parse_n8n_node_json(self):
        node = parse_node({**ACTION, "continueOnFail": True, "position": {"x": 10, "y": 20}})

        assert node.id == "List tables"
        assert node.continue_on_fail is True
        assert node.type_version == 1
        assert node.position.x == 10

    def test_static_data_is_copied(self):
        store = StaticDataStore()
        state = {LAST_POLL_KEY: "a"}
        store.set("wf", "node", state)
        state[LAST_POLL_KEY] = "b"

        loaded = store.get("wf", "node")
        loaded["other"] = 1

        assert store.get("wf", "node") == {LAST_POLL_KEY: "a"}
        assert store.get("wf", "missing") == {}


class TestExecuteNode:

    def test_runs_action_with_resolved_credentials(self, runner, graphql):
        graphql.queue(LOGIN_OK, {"data": {"getBackendTables": ["users"]}})

        result = runner.execute_node(ACTION)

        assert result.node_name == "List tables"
        assert result.output == [[{"json": {"tableName": "users"}, "pairedItem": {"item": 0}}]]
        assert graphql.variables(0)["loginInput"]["email"] == "ada@example.com"

    def test_inline_credentials(self, graphql, registry):
        runner = NodeRunner(registry=registry)
        graphql.queue(LOGIN_OK, {"data": {"getBackendTables": []}})

        runner.execute_node({**ACTION, "credentials": {"appStructApi": {"email": "x@y.z", "password": "p"}}})

        assert graphql.variables(0)["loginInput"] == {"email": "x@y.z", "password": "p"}

    def test_continue_on_fail_from_node_config(self, runner, graphql):
        graphql.queue(LOGIN_OK, {"errors": [{"message": "Project not found"}]})

        result = runner.execute_node({**ACTION, "continueOnFail": True})

        assert result.output == [[{"json": {"error": "Project not found"}, "pairedItem": {"item": 0}}]]

    def test_errors_propagate_by_default(self, runner, graphql):
        graphql.queue(LOGIN_OK, {"errors": [{"message": "Project not found"}]})

        with pytest.raises(NodeApiError):
            runner.execute_node(ACTION)

    def test_unknown_node_type(self, runner):
        with pytest.raises(ValueError, match="Unknown node type: airtable"):
            runner.execute_node({"name": "x", "type": "airtable"})

    def test_disabled_node_passes_input_through(self, runner, graphql):
        items = [{"json": {"n": 1}}, {"json": {"n": 2}}]

        result = runner.execute_node({**ACTION, "disabled": True}, input_data=items)

        assert result.output == [items]
        assert result.metadata == {"disabled": True}
        assert graphql.calls == []

    def test_default_registry_is_process_wide(self, registry):
        with patch("workflow_runtime.executor.get_global_registry", return_value=registry) as mock_global:
            runner = NodeRunner()

        mock_global.assert_called_once_with()
        assert runner.registry is registry


class TestPollNode:

    def test_first_poll_stores_watermark(self, runner, graphql):
        graphql.queue(LOGIN_OK, {"data": {"getTableData": [
            {"id": "1", "data": {"created_at": "2020-01-01T00:00:00Z"}},
        ]}})

        result = runner.poll_node(TRIGGER)

        assert result.has_data
        assert result.output[0][0]["json"]["id"] == "1"
        stored = runner.static_data.get("wf-1", "New users")
        assert stored[LAST_POLL_KEY] == result.metadata[LAST_POLL_KEY]

    def test_second_poll_uses_stored_watermark(self, runner, graphql):
        runner.static_data.set("wf-1", "New users", {LAST_POLL_KEY: "2024-01-01T00:00:00.000Z"})
        graphql.queue(LOGIN_OK, {"data": {"getTableData": [
            {"id": "1", "data": {"created_at": "2023-12-31T23:59:59Z"}},
            {"id": "2", "data": {"created_at": "2024-01-01T00:00:00Z"}},
        ]}})

        result = runner.poll_node(TRIGGER)

        assert not result.has_data
        assert result.output is None
        assert runner.static_data.get("wf-1", "New users")[LAST_POLL_KEY] > "2024-01-01T00:00:00.000Z"

    def test_repeated_polls_do_not_refire(self, runner, graphql):
        records = {"data": {"getTableData": [{"id": "1", "data": {"created_at": "2020-01-01T00:00:00Z"}}]}}
        graphql.queue(LOGIN_OK, records, LOGIN_OK, records)

        first = runner.poll_node(TRIGGER)
        second = runner.poll_node(TRIGGER)

        assert first.has_data
        assert not second.has_data

    def test_failed_poll_keeps_watermark(self, runner, graphql):
        runner.static_data.set("wf-1", "New users", {LAST_POLL_KEY: "2024-01-01T00:00:00.000Z"})
        graphql.queue(LOGIN_OK, {"errors": [{"message": "boom"}]})

        with pytest.raises(NodeOperationError, match="Polling failed"):
            runner.poll_node(TRIGGER)

        assert runner.static_data.get("wf-1", "New users") == {LAST_POLL_KEY: "2024-01-01T00:00:00.000Z"}

    def test_watermarks_are_per_node(self, runner, graphql):
        graphql.queue(LOGIN_OK, {"data": {"getBackendTables": []}})

        runner.poll_node({**TRIGGER, "name": "Tables", "parameters": {"triggerOn": "newTable", "projectId": "3"}})

        assert runner.static_data.get("wf-1", "New users") == {}
        assert LAST_POLL_KEY in runner.static_data.get("wf-1", "Tables")

    def test_action_node_cannot_poll(self, runner):
        with pytest.raises(NodeOperationError, match="does not poll"):
            runner.poll_node(ACTION)

    def test_disabled_trigger_skips_poll_and_keeps_watermark(self, runner, graphql):
        runner.static_data.set("wf-1", "New users", {LAST_POLL_KEY: "2024-01-01T00:00:00.000Z"})

        result = runner.poll_node({**TRIGGER, "disabled": True})

        assert not result.has_data
        assert result.metadata[LAST_POLL_KEY] == "2024-01-01T00:00:00.000Z"
        assert runner.static_data.get("wf-1", "New users") == {LAST_POLL_KEY: "2024-01-01T00:00:00.000Z"}
        assert graphql.calls == []


class TestCredentialTest:

    def test_stored_credentials(self, runner, graphql):
        graphql.queue(LOGIN_OK)

        assert runner.test_credentials("appStructApi", "appstruct-main") == {
            "success": True,
            "message": "Login successful",
        }
        assert graphql.variables(0)["loginInput"]["email"] == "ada@example.com"

    def test_inline_credentials_missing_fields(self, runner, graphql):
        result = runner.test_credentials("appStructApi", {"email": "ada@example.com"})

        assert result == {"success": False, "message": "Missing required fields: password"}
        assert graphql.calls == []

    def test_unknown_credential_type(self, runner):
        with pytest.raises(ValueError, match="Unknown credential type: githubApi"):
            runner.test_credentials("githubApi", {})
