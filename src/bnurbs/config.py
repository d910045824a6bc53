"""
Configuration of the curve evaluation.

Settings may be given directly or loaded from a YAML file, e.g.:

    evaluation:
        domain_policy: clamp
        tangent_tol: 1e-10
"""
from typing import *

import attrs
import yaml

from .errors import ParamError


def load_config(path):
    """
    Load configuration dictionary from given YAML file, empty file gives empty dict.
    """
    with open(path) as f:
        cfg = yaml.safe_load(f)
    if cfg is None:
        cfg = {}
    return cfg


DOMAIN_POLICIES = ('extrapolate', 'clamp', 'strict')


def _check_policy(instance, attribute, value):
    if value not in DOMAIN_POLICIES:
        raise ParamError("Unknown domain policy '{}', expected one of {}.".format(value, DOMAIN_POLICIES))


def _check_tol(instance, attribute, value):
    if not value >= 0.0:
        raise ParamError("Tolerance '{}' must be non-negative, got {}.".format(attribute.name, value))


def _to_bool(value):
    try:
        return attrs.converters.to_bool(value)
    except ValueError:
        raise ParamError("Expected boolean value, got {!r}.".format(value))


@attrs.define(frozen=True)
class EvalSettings:
    """
    Policies and tolerances used by NurbsCurve.
    """
    domain_policy: str = attrs.field(default='extrapolate', validator=_check_policy)
    # What to do with parameters out of [knots[p], knots[n]]: 'extrapolate', 'clamp' or 'strict'.
    tangent_tol: float = attrs.field(default=1e-12, converter=float, validator=_check_tol)
    # Derivative norms under this value are treated as zero by the tangent query.
    periodic_tol: float = attrs.field(default=1e-12, converter=float, validator=_check_tol)
    # Tolerance of the knot spacing periodicity check when closing a curve.
    warn_out_of_domain: bool = attrs.field(default=True, converter=_to_bool)

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> 'EvalSettings':
        """
        Make settings from a dict. Settings are taken from the 'evaluation' key
        if present, otherwise from the top level.
        """
        cfg = cfg.get('evaluation', cfg)
        if cfg is None:
            cfg = {}
        fields = {a.name for a in attrs.fields(cls)}
        unknown = [k for k in cfg.keys() if not k.startswith('_') and k not in fields]
        if unknown:
            raise ParamError("Unknown evaluation settings: {}".format(unknown))
        return cls(**{k: v for k, v in cfg.items() if k in fields})

    @classmethod
    def load(cls, path) -> 'EvalSettings':
        return cls.from_config(load_config(path))

    def serialize(self):
        return attrs.asdict(self)
