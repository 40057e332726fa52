from enum import StrEnum


class DeviceClass(StrEnum):
    """
    Device category a WebSocket connection is bound to.

    A user may hold at most one live connection per device class.

    Attributes:
        MOBILE: Phones and other handheld devices
        TABLET: Tablets
        DESKTOP: Everything else, unrecognised agents included
    """

    MOBILE = "mobile"
    TABLET = "tablet"
    DESKTOP = "desktop"
