# NFT OAuth - NFT-backed OAuth2 Token Service
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Central logging utilities for the NFT OAuth service.

Every module obtains its logger through :func:`get_logger`, which makes sure
the root logger has been configured exactly once.

Nothing that carries key material (the signing secret, client secrets,
bearer tokens) is ever passed to a logger in full; call sites log
identifiers or a :func:`redact`-ed prefix.
"""

from __future__ import annotations

import logging
from typing import Final

from beartype import beartype

__all__: Final = [
    "configure_logging",
    "get_logger",
    "redact",
]

_DEFAULT_LOG_FORMAT: Final = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
_is_configured: bool = False


@beartype
def configure_logging(
    *, level: int | str = logging.INFO, fmt: str = _DEFAULT_LOG_FORMAT
) -> None:
    """Configure the root logger exactly once.

    Calling this function multiple times is safe; configuration will only
    be applied on the first invocation.
    """
    global _is_configured
    if _is_configured:
        return

    logging.basicConfig(level=level, format=fmt)
    _is_configured = True


@beartype
def get_logger(name: str | None = None, *, level: int | None = None) -> logging.Logger:
    """Return a module-scoped logger that is guaranteed to be configured."""
    configure_logging()
    logger = logging.getLogger(name or "nft_oauth")
    if level is not None:
        logger.setLevel(level)
    return logger


@beartype
def redact(value: str, *, keep: int = 8) -> str:
    """Shorten an opaque credential for log lines."""
    if len(value) <= keep:
        return "***"
    return f"{value[:keep]}..."
