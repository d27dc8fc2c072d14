# NFT OAuth - NFT-backed OAuth2 Token Service
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.


"""Outcome of an engine step.

The exchange and verification engines return ``Ok``/``Err`` instead of
raising, so the HTTP layer can pick a status per error type in one place.
"""

from typing import Generic, NoReturn, TypeVar, Union

from attrs import frozen
from beartype import beartype

T = TypeVar("T")
E = TypeVar("E")


@frozen
class Ok(Generic[T]):
    """Step completed with ``value``."""

    value: T

    @beartype
    def is_ok(self) -> bool:
        return True

    @beartype
    def is_err(self) -> bool:
        return False

    @beartype
    def unwrap(self) -> T:
        return self.value

    @beartype
    def unwrap_err(self) -> NoReturn:
        """Raises ValueError: an Ok step carries no error."""
        raise ValueError(f"Step succeeded with {self.value!r}, no error to unwrap")


@frozen
class Err(Generic[E]):
    """Step failed with ``error``, typically an ``OAuthNFTError``."""

    error: E

    @beartype
    def is_ok(self) -> bool:
        return False

    @beartype
    def is_err(self) -> bool:
        return True

    @beartype
    def unwrap(self) -> NoReturn:
        """Raises ValueError: a failed step carries no value."""
        raise ValueError(f"Step failed: {self.error}")

    @beartype
    def unwrap_err(self) -> E:
        return self.error


Result = Union[Ok[T], Err[E]]
