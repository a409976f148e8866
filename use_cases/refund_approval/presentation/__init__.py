"""Refund approval presentation layer."""

from .composer import RefundViewComposer

__all__ = ["RefundViewComposer"]
