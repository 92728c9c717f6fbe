"""Run-scoped duplicate detection by content fingerprint."""

import logging

logger = logging.getLogger(__name__)

HASH_SEED = 5381
HASH_MULTIPLIER = 33
HASH_MODULUS = 2**32

BASE36_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"


def _to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(BASE36_DIGITS[remainder])
    return "".join(reversed(digits))


def fingerprint(text: str) -> str:
    """Rolling multiply-by-33 hash of `text`, 32-bit, rendered in base 36."""
    h = HASH_SEED
    for ch in text:
        h = (h * HASH_MULTIPLIER + ord(ch)) % HASH_MODULUS
    return _to_base36(h)


class DedupSet:
    """Fingerprints seen during one pipeline run.

    Create one per run; nothing is persisted, so separate runs never
    suppress each other's records.
    """

    def __init__(self):
        self._seen: set[str] = set()

    def __len__(self) -> int:
        return len(self._seen)

    def __contains__(self, fp: str) -> bool:
        return self.seen(fp)

    def seen(self, fp: str) -> bool:
        return fp in self._seen

    def add(self, fp: str) -> None:
        self._seen.add(fp)

    def check_and_add(self, text: str) -> bool:
        """Record the fingerprint of `text`.

        Returns:
            True if the content is new in this run, False if it is a duplicate
        """
        fp = fingerprint(text)
        if self.seen(fp):
            logger.debug(f"Duplicate content fingerprint {fp}")
            return False
        self.add(fp)
        return True
