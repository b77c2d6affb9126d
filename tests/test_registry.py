"""
Tests for node pack registration and discovery.
"""

from unittest.mock import Mock, patch

import pytest

from node_registry import NodeRegistry, get_global_registry, reset_global_registry

from appstruct.credentials import AppStructApiCredential
from appstruct.manifest import MANIFEST, NODE_CLASSES, register_nodes
from appstruct.node import AppStructNode
from appstruct.trigger import AppStructTriggerNode


@pytest.fixture
def appstruct_entry_point():
    ep = Mock()
    ep.name = "appstruct"
    ep.load.return_value = register_nodes
    return ep


def test_register_pack_registers_nodes_and_credentials():
    registry = NodeRegistry()

    registry.register_pack(*register_nodes())

    assert registry.get_node_class("appStruct") is AppStructNode
    assert registry.get_node_class("appStructTrigger") is AppStructTriggerNode
    assert registry.get_node("appStruct").node_pack == "appstruct"
    assert registry.get_pack("appstruct") is MANIFEST
    assert registry.get_credential_class("appStructApi") is AppStructApiCredential
    assert registry.get_credential("appStructApi").display_name == "AppStruct API"
    assert [p["name"] for p in registry.get_credential("appStructApi").properties] == ["email", "password"]


def test_node_definitions():
    registry = NodeRegistry()
    registry.register_pack(MANIFEST, NODE_CLASSES)

    action = registry.get_node("appStruct")
    trigger = registry.get_node("appStructTrigger")

    assert action.display_name == "AppStruct"
    assert not action.polling
    assert trigger.polling
    assert trigger.inputs == []
    assert trigger.credentials == [{"name": "appStructApi", "required": True}]
    assert action.node_class == "appstruct.node.AppStructNode"


def test_register_node_defaults_to_class_type():
    registry = NodeRegistry()

    definition = registry.register_node(AppStructTriggerNode)

    assert definition.node_type == "appStructTrigger"
    assert definition.node_pack is None
    assert registry.get_node_class("missing") is None


def test_discover_entry_points(appstruct_entry_point):
    broken = Mock()
    broken.name = "broken"
    broken.load.side_effect = ImportError("no module named broken")

    registry = NodeRegistry()
    with patch("node_registry.registry.entry_points", return_value=[appstruct_entry_point, broken]) as mock_eps:
        assert registry.discover_entry_points() == 1
        # Cached after the first scan
        assert registry.discover_entry_points() == 1

    mock_eps.assert_called_once_with(group="appstruct_nodes.nodepacks")
    assert registry.get_pack("broken") is None
    assert registry.get_node_class("appStruct") is AppStructNode


def test_discover_entry_points_dict_result():
    ep = Mock()
    ep.name = "bare"
    ep.load.return_value = lambda: {"appStruct": AppStructNode}

    registry = NodeRegistry()
    with patch("node_registry.registry.entry_points", return_value=[ep]):
        registry.discover_entry_points()

    assert registry.get_node("appStruct").node_pack == "bare"
    assert registry.get_pack("bare").nodes == ["appStruct"]


def test_global_registry_discovers_once(appstruct_entry_point):
    reset_global_registry()
    try:
        with patch("node_registry.registry.entry_points", return_value=[appstruct_entry_point]) as mock_eps:
            registry = get_global_registry()
            assert get_global_registry() is registry

        mock_eps.assert_called_once()
        assert registry.get_node_class("appStructTrigger") is AppStructTriggerNode
    finally:
        reset_global_registry()
