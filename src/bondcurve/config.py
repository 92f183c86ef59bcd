"""
Declarative curve presets.

A preset is a YAML mapping:

    name: standard-market-cap
    kind: market_cap            # percentage | market_cap | two_segment | mid_price
                                # | liquidity_weights | custom_sqrt_prices
    base:
      total_token_supply: 1_000_000_000
      token_base_decimal: 6
      token_quote_decimal: 9
      migration_option: MET_DAMM_V2
      base_fee:
        mode: FEE_SCHEDULER_LINEAR
        fee_scheduler: {starting_fee_bps: 100, ending_fee_bps: 100}
    params:
      initial_market_cap: "30"
      migration_market_cap: "540"

Fractional quantities must be written as strings ("0.5") or ints. YAML
floats are rejected rather than rounded.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from importlib import resources
from pathlib import Path
from typing import Any, Callable, Mapping

import yaml

from .core.build_params import BaseFeeParams, FeeSchedulerParams, RateLimiterParams
from .core.curve_builder import (
    BuildCurveBaseParams,
    BuildCurveResult,
    LockedVestingInput,
    build_curve,
    build_curve_with_custom_sqrt_prices,
    build_curve_with_liquidity_weights,
    build_curve_with_market_cap,
    build_curve_with_mid_price,
    build_curve_with_two_segments,
)
from .core.price import create_sqrt_prices
from .errors import InvalidParameterError
from .state.enums import ActivationType, BaseFeeMode, CollectFeeMode, MigrationOption

logger = logging.getLogger(__name__)

_PRESET_PACKAGE = "bondcurve.presets"
_PRESET_SUFFIX = ".yaml"


@dataclass(frozen=True)
class CurvePreset:
    name: str
    kind: str
    base: BuildCurveBaseParams
    params: dict[str, Any] = field(default_factory=dict)


# ---------------------------------------------------------------------------
# Field coercion
# ---------------------------------------------------------------------------


def _reject_floats(path: str, value: Any) -> None:
    if isinstance(value, float):
        raise InvalidParameterError(f"{path} is a YAML float ({value!r}); write it as a string or int")
    if isinstance(value, Mapping):
        for k, v in value.items():
            _reject_floats(f"{path}.{k}", v)
    elif isinstance(value, list):
        for i, v in enumerate(value):
            _reject_floats(f"{path}[{i}]", v)


def _mapping(obj: Any, path: str) -> Mapping[str, Any]:
    if not isinstance(obj, Mapping):
        raise InvalidParameterError(f"{path} must be a mapping")
    return obj


def _enum(enum_cls, raw: Any, path: str):
    if isinstance(raw, enum_cls):
        return raw
    if not isinstance(raw, str):
        raise InvalidParameterError(f"{path} must be a {enum_cls.__name__} name")
    try:
        return enum_cls[raw.strip().upper()]
    except KeyError as exc:
        names = ", ".join(m.name for m in enum_cls)
        raise InvalidParameterError(f"{path}: unknown {enum_cls.__name__} {raw!r} (expected one of {names})") from exc


def _base_fee(obj: Any) -> BaseFeeParams:
    raw = _mapping(obj, "base.base_fee")
    mode = _enum(BaseFeeMode, raw.get("mode", "FEE_SCHEDULER_LINEAR"), "base.base_fee.mode")
    if mode is BaseFeeMode.RATE_LIMITER:
        r = _mapping(raw.get("rate_limiter"), "base.base_fee.rate_limiter")
        return BaseFeeParams(mode=mode, rate_limiter=RateLimiterParams(**r))
    f = _mapping(raw.get("fee_scheduler"), "base.base_fee.fee_scheduler")
    return BaseFeeParams(mode=mode, fee_scheduler=FeeSchedulerParams(**f))


def _base_params(obj: Any) -> BuildCurveBaseParams:
    raw = dict(_mapping(obj, "base"))
    try:
        raw["base_fee"] = _base_fee(raw.get("base_fee", {}))
        if "locked_vesting" in raw:
            raw["locked_vesting"] = LockedVestingInput(**_mapping(raw["locked_vesting"], "base.locked_vesting"))
        for key, enum_cls in (
            ("migration_option", MigrationOption),
            ("activation_type", ActivationType),
            ("collect_fee_mode", CollectFeeMode),
        ):
            if key in raw:
                raw[key] = _enum(enum_cls, raw[key], f"base.{key}")
        return BuildCurveBaseParams(**raw)
    except TypeError as exc:
        # Unknown or missing keys surface as TypeError from the dataclass constructors.
        raise InvalidParameterError(f"invalid preset base section: {exc}") from exc


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


def parse_preset(obj: Any, *, default_name: str = "preset") -> CurvePreset:
    """Validate a decoded YAML document and turn it into a `CurvePreset`."""
    raw = _mapping(obj, "preset")
    _reject_floats("preset", raw)
    kind = raw.get("kind")
    if kind not in _BUILDERS:
        raise InvalidParameterError(f"unknown preset kind {kind!r}; expected one of {sorted(_BUILDERS)}")
    params = dict(_mapping(raw.get("params", {}), "params"))
    base = _base_params(raw.get("base"))
    if kind == "custom_sqrt_prices" and "prices" in params:
        # Human prices are converted to Q64.64 bin edges here.
        params["sqrt_prices"] = create_sqrt_prices(
            params.pop("prices"), base.token_base_decimal, base.token_quote_decimal
        )
    return CurvePreset(
        name=str(raw.get("name", default_name)),
        kind=kind,
        base=base,
        params=params,
    )


def load_preset(path: str | Path) -> CurvePreset:
    path = Path(path)
    obj = yaml.safe_load(path.read_text(encoding="utf-8"))
    preset = parse_preset(obj, default_name=path.stem)
    logger.debug("loaded preset %s (%s) from %s", preset.name, preset.kind, path)
    return preset


def list_bundled_presets() -> list[str]:
    root = resources.files(_PRESET_PACKAGE)
    return sorted(
        entry.name[: -len(_PRESET_SUFFIX)]
        for entry in root.iterdir()
        if entry.name.endswith(_PRESET_SUFFIX)
    )


def load_bundled_preset(name: str) -> CurvePreset:
    entry = resources.files(_PRESET_PACKAGE) / f"{name}{_PRESET_SUFFIX}"
    if not entry.is_file():
        raise InvalidParameterError(
            f"no bundled preset named {name!r}; available: {', '.join(list_bundled_presets())}"
        )
    obj = yaml.safe_load(entry.read_text(encoding="utf-8"))
    return parse_preset(obj, default_name=name)


# ---------------------------------------------------------------------------
# Building
# ---------------------------------------------------------------------------


_BUILDERS: dict[str, Callable[..., BuildCurveResult]] = {
    "percentage": build_curve,
    "market_cap": build_curve_with_market_cap,
    "two_segment": build_curve_with_two_segments,
    "mid_price": build_curve_with_mid_price,
    "liquidity_weights": build_curve_with_liquidity_weights,
    "custom_sqrt_prices": build_curve_with_custom_sqrt_prices,
}


def build_from_preset(preset: CurvePreset) -> BuildCurveResult:
    builder = _BUILDERS[preset.kind]
    try:
        return builder(preset.base, **preset.params)
    except TypeError as exc:
        raise InvalidParameterError(f"preset {preset.name!r}: bad params for {preset.kind}: {exc}") from exc
