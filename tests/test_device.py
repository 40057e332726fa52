"""Tests for User-Agent device classification."""

import pytest

from shopchat.schemas.device import DeviceClass
from shopchat.utils.device import classify_device
from tests.mocks.websocket_mocks import USER_AGENTS


@pytest.mark.parametrize(
    "agent, expected",
    [
        ("iphone", DeviceClass.MOBILE),
        ("android_phone", DeviceClass.MOBILE),
        ("ipad", DeviceClass.TABLET),
        ("windows_chrome", DeviceClass.DESKTOP),
        ("mac_safari", DeviceClass.DESKTOP),
    ],
)
def test_classify_known_agents(agent, expected):
    """Test real browser agents map to their device class."""
    assert classify_device(USER_AGENTS[agent]) == expected


@pytest.mark.parametrize("user_agent", [None, "", "testclient", "curl/8.4.0"])
def test_unrecognised_agents_default_to_desktop(user_agent):
    """Test missing or unknown agents never fail and count as desktop."""
    assert classify_device(user_agent) == DeviceClass.DESKTOP


def test_device_class_values():
    assert [d.value for d in DeviceClass] == ["mobile", "tablet", "desktop"]
