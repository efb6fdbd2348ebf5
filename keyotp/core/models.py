"""
models.py — the SecretEntry record and its stored form.

A stored payload is JSON:

    {"secret": "JBSWY3DPEHPK3PXP", "algorithm": "SHA1", "digits": 6, "period": 30}

Older payloads that hold only the Base32 text are read with the default
parameters.
"""

import json
from dataclasses import dataclass, asdict
from typing import Any, Dict

from .. import config
from . import base32


@dataclass(frozen=True)
class SecretEntry:
    name: str
    encoded_secret: str
    algorithm: str = config.DEFAULT_ALGORITHM
    digits: int = config.DEFAULT_DIGITS
    period: int = config.DEFAULT_TIME_STEP

    def key(self) -> bytes:
        """Decoded key bytes. Raises InvalidSecret for a corrupt secret."""
        return base32.decode(self.encoded_secret)

    def metadata(self) -> Dict[str, Any]:
        """Everything but the secret, for listings and API responses."""
        return {
            "name": self.name,
            "algorithm": self.algorithm,
            "digits": self.digits,
            "period": self.period,
        }

    def to_payload(self) -> str:
        data = asdict(self)
        del data["name"]
        data["secret"] = data.pop("encoded_secret")
        return json.dumps(data, sort_keys=True)

    @classmethod
    def from_payload(cls, name: str, payload: str) -> "SecretEntry":
        """
        Rebuild an entry from its stored payload. No decoding or validation
        happens here; a corrupt secret only fails when a code is generated.
        """
        try:
            data = json.loads(payload)
        except ValueError:
            data = None
        if not isinstance(data, dict):
            # bare Base32 text
            return cls(name=name, encoded_secret=str(payload).strip())
        return cls(
            name=name,
            encoded_secret=data.get("secret", ""),
            algorithm=data.get("algorithm", config.DEFAULT_ALGORITHM),
            digits=data.get("digits", config.DEFAULT_DIGITS),
            period=data.get("period", config.DEFAULT_TIME_STEP),
        )
