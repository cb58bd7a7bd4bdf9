"""
Player identity resolution.

The trace channel names players by their short name, while combat messages use
the display name, which may carry a clan tag in front (``[TAG] Alice`` for
``Alice``). The registry collects short names as they are seen and links each
one to its tagged name the first time a combat message ends with it.

Both functions are pure: the registry passed in is never modified.
"""

import logging
from typing import Tuple

from .errors import UnknownPlayerError
from .models import NameEntry

logger = logging.getLogger(__name__)

Registry = Tuple[NameEntry, ...]


def observe(short_name: str, registry: Registry) -> Registry:
    """
    Record that ``short_name`` was seen on the trace channel.

    Names already linked to a tagged name are left alone. Unlinked names are
    appended again, so the registry may hold several unresolved entries for
    the same short name.

    Args:
        short_name: Name from a ChangeState message.
        registry: Current name registry.

    Returns:
        The updated registry.
    """
    for short, tagged in registry:
        if short == short_name and tagged is not None:
            return registry
    return registry + ((short_name, None),)


def resolve(full_name: str, registry: Registry) -> Tuple[str, Registry]:
    """
    Map a combat-channel name to the short name used as the player key.

    A name already linked is returned directly. Otherwise the first registry
    entry whose short name is a suffix of ``full_name`` gets linked to it.

    Args:
        full_name: Display name from a damage or wound message.
        registry: Current name registry.

    Returns:
        Tuple of (short name, updated registry).

    Raises:
        UnknownPlayerError: If no registered short name matches.
    """
    for short, tagged in registry:
        if tagged == full_name:
            return short, registry

    for idx, (short, _) in enumerate(registry):
        if len(short) <= len(full_name) and full_name[len(full_name) - len(short):] == short:
            logger.debug(f"Resolved '{full_name}' to player '{short}'")
            updated = registry[:idx] + ((short, full_name),) + registry[idx + 1:]
            return short, updated

    raise UnknownPlayerError(full_name, "does not match any registered player name")
