from __future__ import annotations

from decimal import Decimal
from fractions import Fraction
from typing import Any

import numpy as np
import torch

from debug_plotter.errors import CoercionError


def to_sample(value: Any, *, label: str = "value") -> float:
    """Convert one numeric-like value to the float64 sample type.

    Values that cannot be represented raise ``CoercionError`` instead of being
    saturated: an integer beyond float range is a bug at the call site. NaN and
    infinities are returned unchanged.
    """
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if isinstance(value, float):
        return value
    if isinstance(value, (int, Decimal, Fraction)):
        return _float_or_raise(value, label=label)

    if isinstance(value, torch.Tensor):
        tensor = value.detach()
        if tensor.numel() != 1:
            raise CoercionError(f"{label} must be a single-element tensor, got shape {tuple(tensor.shape)}")
        if tensor.is_cuda:
            tensor = tensor.cpu()
        return float(tensor.to(torch.float64).item())

    if isinstance(value, np.ndarray):
        if value.size != 1:
            raise CoercionError(f"{label} must be a scalar array, got shape {value.shape}")
        value = value.reshape(()).item()
        return to_sample(value, label=label)

    if isinstance(value, np.generic):
        if value.dtype.kind not in {"i", "u", "f", "b"}:
            raise CoercionError(f"{label} has non-numeric dtype {value.dtype}")
        return _float_or_raise(value.item(), label=label)

    if isinstance(value, (str, bytes, bytearray)) or value is None:
        raise CoercionError(f"{label} is not numeric: {value!r}")

    if hasattr(value, "__float__"):
        return _float_or_raise(value, label=label)

    raise CoercionError(f"unsupported {label} type: {type(value)!r}")


def _float_or_raise(value: Any, *, label: str) -> float:
    try:
        return float(value)
    except OverflowError as exc:
        raise CoercionError(f"{label} is out of float range: {value!r}") from exc
    except (TypeError, ValueError) as exc:
        raise CoercionError(f"{label} is not numeric: {value!r}") from exc
