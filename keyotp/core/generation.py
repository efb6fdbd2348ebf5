"""
generation.py — current codes for every secret in a store.

The store and the clock are both injected:

    generator = GenerationOrchestrator(store)
    for result in generator.generate_all(clock=time.time):
        ...

A corrupt entry (bad Base32, unsupported digits/period) is reported on its
own result and does not stop the others. Backend failures while listing
abort the whole call.
"""

import logging
import time
from typing import Callable, List, NamedTuple, Optional

from . import otp_core
from .errors import InvalidSecret, OtpError, UnsupportedParameters
from .models import SecretEntry

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


class GenerationResult(NamedTuple):
    name: str
    code: Optional[str]
    seconds_remaining: Optional[int]
    error: Optional[OtpError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class GenerationOrchestrator:

    def __init__(self, store) -> None:
        self.store = store

    def generate_all(self, clock: Clock = time.time) -> List[GenerationResult]:
        """
        One result per stored entry, in `store.list()` order.

        The clock is read once so every code of a call shares the same instant.

        Raises:
            BackendUnavailable: the store could not be listed
        """
        entries = self.store.list()
        now = int(clock())
        results = [self._generate_entry(entry, now) for entry in entries]
        failed = sum(1 for r in results if not r.ok)
        logger.debug("Generated %d codes at %d (%d failed)", len(results), now, failed)
        return results

    def generate_one(self, name: str, clock: Clock = time.time) -> GenerationResult:
        """
        Result for the single entry `name`.

        Raises:
            NotFound: no such entry
            BackendUnavailable: the store could not be read
        """
        entry = self.store.get(name)
        return self._generate_entry(entry, int(clock()))

    @staticmethod
    def _generate_entry(entry: SecretEntry, now: int) -> GenerationResult:
        try:
            otp_core.check_parameters(entry.digits, entry.period, entry.algorithm)
            code = otp_core.generate(entry.key(), now, entry.period, entry.digits)
        except (InvalidSecret, UnsupportedParameters) as e:
            if e.name is None:
                e.name = entry.name
            logger.warning("Cannot generate a code for %r: %s", entry.name, e)
            return GenerationResult(entry.name, None, None, e)
        return GenerationResult(entry.name, code, otp_core.seconds_remaining(now, entry.period))
