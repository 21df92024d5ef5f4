"""
KSUID - K-Sortable Unique Identifier.

Used for snapshot and error IDs so they sort by creation time.
Layout: 4 bytes seconds since the KSUID epoch + 16 random bytes, base62 encoded
into a fixed 27-char string.
"""

import os
import struct
import time

# KSUID epoch: 2014-05-13
KSUID_EPOCH = 1400000000
KSUID_LENGTH = 27
BASE62 = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz"


def generate_ksuid(epoch_s=None):
    """Generate a sortable unique ID, stamped with epoch_s (default: now)."""
    seconds = int(time.time() if epoch_s is None else epoch_s) - KSUID_EPOCH
    n = int.from_bytes(struct.pack(">I", seconds) + os.urandom(16), byteorder="big")

    chars = []
    while n > 0:
        n, remainder = divmod(n, 62)
        chars.append(BASE62[remainder])
    return "".join(reversed(chars)).rjust(KSUID_LENGTH, "0")


def ksuid_time(ksuid):
    """Unix seconds encoded in a KSUID."""
    if len(ksuid) != KSUID_LENGTH:
        raise ValueError(f"KSUID must be {KSUID_LENGTH} chars, got {len(ksuid)}")
    n = 0
    for char in ksuid:
        n = n * 62 + BASE62.index(char)
    return struct.unpack(">I", n.to_bytes(20, byteorder="big")[:4])[0] + KSUID_EPOCH
