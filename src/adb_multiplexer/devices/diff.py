"""
Pure diff logic for device snapshots.

Event types:
- added: id appears in the current snapshot but not in the previous one
- removed: id appears in the previous snapshot but not in the current one
- changed: id appears in both, with a different state or model

Devices present in both snapshots with identical values are not reported.
"""

from typing import Dict, List, Sequence, Tuple

from .models import ChangeSet, Device


def build_id_dict(devices: Sequence[Device]) -> Dict[str, Device]:
    """Index a snapshot by device id."""
    return {device.id: device for device in devices}


def has_changed(previous: Device, current: Device) -> bool:
    """Compare the observable values of two records of the same device."""
    return (
        previous.state != current.state
        or previous.model != current.model
        or previous.raw_state != current.raw_state
    )


def diff_snapshots(
    previous: Sequence[Device], current: Sequence[Device]
) -> ChangeSet:
    """
    Compute the diff between two device snapshots.

    This is a pure function with no side effects.

    Args:
        previous: Snapshot from the last sample
        current: Snapshot from the newest sample

    Returns:
        ChangeSet with added, removed and changed devices
    """
    prev_by_id = build_id_dict(previous)
    curr_by_id = build_id_dict(current)

    added: List[Device] = []
    changed: List[Device] = []

    for device in current:
        old = prev_by_id.get(device.id)
        if old is None:
            added.append(device)
        elif has_changed(old, device):
            changed.append(device)

    removed = [device for device in previous if device.id not in curr_by_id]

    return ChangeSet(
        added=tuple(added),
        removed=tuple(removed),
        changed=tuple(changed),
    )


def partition_devices(
    devices: Sequence[Device],
) -> Tuple[List[Device], List[Device]]:
    """
    Split devices into (online, offline), keeping their order.

    Unauthorized devices end up in the offline list.
    """
    online = [device for device in devices if device.is_online()]
    offline = [device for device in devices if not device.is_online()]
    return online, offline
