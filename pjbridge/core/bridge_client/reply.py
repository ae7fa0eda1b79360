"""
Reply value type for bridge exchanges.

Author: Vasiliy Zdanovskiy
email: vasilyvz@gmail.com
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Sequence, Tuple

from ..constants import STATUS_OK

# Column name -> column value, in the order the columns were received
Row = Dict[str, str]


@dataclass(frozen=True)
class Reply:
    """Decoded reply line.

    Token 0 is the status marker ("ok" on success); the remaining tokens
    are the operation-specific payload.

    Attributes:
        tokens: All decoded tokens of the line
    """

    tokens: Tuple[str, ...]

    @classmethod
    def from_tokens(cls, tokens: Sequence[str]) -> Reply:
        """Create reply from decoded tokens."""
        return cls(tokens=tuple(tokens))

    @property
    def status(self) -> str:
        """Status token (empty string for an empty line)."""
        return self.tokens[0] if self.tokens else ""

    @property
    def payload(self) -> Tuple[str, ...]:
        """Tokens after the status marker."""
        return self.tokens[1:]

    def is_ok(self) -> bool:
        """Check if the server accepted the command.

        Returns:
            True if status is "ok", False otherwise
        """
        return self.status == STATUS_OK

    def payload_at(self, index: int) -> Optional[str]:
        """Return payload token at index, or None if the reply is too short."""
        if 0 <= index < len(self.payload):
            return self.payload[index]
        return None

    def __len__(self) -> int:
        return len(self.tokens)
