"""Fast-path check for restoring a scope's variables with a single clear().

When a closing scope is the only contributor of every key left in the
ambient context, clearing the whole context gives exactly the same result
as removing its keys one by one, and is cheaper (one snapshot install
instead of one per key in logical mode).
"""

from typing import Any, Mapping

from logscope.context.base import VariablesContext


class _Absent:
    """Marker recorded for keys that did not exist before a scope set them."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "ABSENT"

    def __reduce__(self):
        return (_Absent, ())


ABSENT = _Absent()


def can_clear_context(saved_entries: Mapping[str, Any], context: VariablesContext) -> bool:
    """Decide whether clear() is equivalent to per-key restoration.

    The rule: the context holds exactly as many keys as there are ABSENT
    entries in saved_entries, and every saved key is present in the
    context. Saved keys are pairwise distinct because they are mapping
    keys. Together this means the context holds precisely the keys this
    scope introduced and nothing else, so removing them all empties it.

    Any pre-existing key (a non-ABSENT entry) makes the rule fail, since
    the saved keys would then outnumber the ABSENT count while all being
    present in a context of that size.

    Args:
        saved_entries: Key -> prior value (or ABSENT) recorded by a scope
        context: Ambient context the scope writes through

    Returns:
        True if the caller may clear the context instead of restoring keys
    """
    if not saved_entries:
        return False

    absent_count = sum(1 for prior in saved_entries.values() if prior is ABSENT)
    if absent_count != len(context):
        return False

    return all(context.contains(key) for key in saved_entries)
