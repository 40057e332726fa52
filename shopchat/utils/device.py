"""Device classification from the client's User-Agent header."""

from user_agents import parse

from shopchat.schemas.device import DeviceClass


def classify_device(user_agent: str | None) -> DeviceClass:
    """
    Map a raw User-Agent string to a device class.

    Anything not recognised as a tablet or a mobile phone is a desktop,
    including an empty or missing header.

    Args:
        user_agent: The ``user-agent`` handshake header, if any.

    Returns:
        DeviceClass: ``tablet``, ``mobile`` or ``desktop``.

    Example:
        >>> classify_device("Mozilla/5.0 (iPad; CPU OS 13_2 like Mac OS X)")
        <DeviceClass.TABLET: 'tablet'>
    """
    if not user_agent:
        return DeviceClass.DESKTOP

    agent = parse(user_agent)

    # Tablets are checked first: some tablet agents also advertise "Mobile"
    if agent.is_tablet:
        return DeviceClass.TABLET
    if agent.is_mobile:
        return DeviceClass.MOBILE
    return DeviceClass.DESKTOP
