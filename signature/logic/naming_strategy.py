from __future__ import annotations
import os
import re
import secrets
import time
from dataclasses import dataclass
from typing import Callable, Optional, Protocol

_UNSAFE = re.compile(r"[^\w\-.]+")


def _now_ms() -> int:
    return int(time.time() * 1000)


def sanitize_filename(name: str) -> str:
    """Keep word chars, dash and dot; everything else becomes '_'."""
    base = os.path.basename(str(name or "").replace("\\", "/"))
    cleaned = _UNSAFE.sub("_", base).strip("._")
    return cleaned or "document.pdf"


@dataclass(frozen=True)
class NamingContext:
    contract_id: Optional[int] = None
    approval_id: Optional[int] = None
    source_name: Optional[str] = None


class NamingStrategy(Protocol):
    def upload_name(self, original_name: str) -> str: ...
    def signed_name(self, ctx: NamingContext) -> str: ...


class TimestampSuffixStrategy:
    """
    Default naming:
      upload:   <epoch-ms>-<token>-<sanitized name>
      legacy:   <stem>-signed-<epoch-ms>-<token>.pdf
      owner:    contract-<cid>-signed-<epoch-ms>-<token>.pdf
      approval: approval-<aid>-contract-<cid>-signed-<epoch-ms>-<token>.pdf
    The random token keeps two names created in the same millisecond apart.
    """

    def __init__(self, clock: Callable[[], int] = _now_ms, token: Callable[[], str] = lambda: secrets.token_hex(3)) -> None:
        self._clock = clock
        self._token = token

    def upload_name(self, original_name: str) -> str:
        name = sanitize_filename(original_name)
        if not name.lower().endswith(".pdf"):
            name += ".pdf"
        return f"{self._clock()}-{self._token()}-{name}"

    def signed_name(self, ctx: NamingContext) -> str:
        suffix = f"signed-{self._clock()}-{self._token()}.pdf"
        if ctx.approval_id is not None:
            return f"approval-{ctx.approval_id}-contract-{ctx.contract_id}-{suffix}"
        if ctx.contract_id is not None:
            return f"contract-{ctx.contract_id}-{suffix}"
        root, _ = os.path.splitext(sanitize_filename(ctx.source_name or "document.pdf"))
        return f"{root}-{suffix}"
