"""Masking processors for sensitive string fields.

A processor either returns the masked string or ``None`` to decline.
Declining is part of the contract: the caller then emits the original
value unmasked (the default processor declines blank input).
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from pydantic import BaseModel, Field


@runtime_checkable
class MaskingProcessor(Protocol):
    """Contract for string masking."""

    def try_mask(self, value: str | None) -> str | None:
        """Return the masked form of *value*, or None to decline."""
        ...


class MaskingOptions(BaseModel):
    """Options for :class:`DefaultMaskingProcessor`.

    Attributes:
        preserve_length: Emit one mask character per input character.
            When True, ``mask_length`` is ignored.
        mask_char: The single character used for masking.
        mask_length: Fixed mask width, independent of the input length.
    """

    model_config = {"frozen": True}

    preserve_length: bool = False
    mask_char: str = Field(default="*", min_length=1, max_length=1)
    mask_length: int = Field(default=10, ge=0)


class DefaultMaskingProcessor:
    """Replace the whole value with a run of ``mask_char``."""

    def __init__(self, options: MaskingOptions | None = None) -> None:
        self._options = options or MaskingOptions()

    @property
    def options(self) -> MaskingOptions:
        return self._options

    def try_mask(self, value: str | None) -> str | None:
        if value is None or not value.strip():
            return None

        opts = self._options
        length = len(value) if opts.preserve_length else opts.mask_length
        return opts.mask_char * length

    def __repr__(self) -> str:
        return f"DefaultMaskingProcessor({self._options!r})"
