# spacetime/utils/config.py
import os
import yaml

DEFAULTS_PATH = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "data", "defaults.yaml")


class AttrDict(dict):
    """Dict that also supports attribute access: cfg.time and cfg['time'] both work."""
    def __getattr__(self, item):
        try:
            return self[item]
        except KeyError as e:
            raise AttributeError(item) from e
    def __setattr__(self, key, value):
        self[key] = value


def _to_attr(obj):
    if isinstance(obj, dict):
        return AttrDict({k: _to_attr(v) for k, v in obj.items()})
    if isinstance(obj, list):
        return [_to_attr(x) for x in obj]
    return obj


def load_config(path: str = None):
    """
    Load YAML config from `path`, else $STF_CONFIG, else the packaged defaults.
    Optional overrides:
      - STF_JPL_KERNEL  (enables the JPL provider with this kernel file)
      - LOG_LEVEL       (overrides config['logging']['level'])
    Returns an AttrDict for convenient access.
    """
    path = path or os.getenv("STF_CONFIG") or DEFAULTS_PATH
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"config root must be a mapping: {path}")

    kernel = os.getenv("STF_JPL_KERNEL")
    if kernel:
        providers = data.get("providers") or {}
        jpl = providers.get("jpl") or {}
        jpl.update({"enabled": True, "kernel_path": kernel})
        providers["jpl"] = jpl
        data["providers"] = providers

    level = os.getenv("LOG_LEVEL")
    if level:
        logging_cfg = data.get("logging") or {}
        logging_cfg["level"] = level
        data["logging"] = logging_cfg

    return _to_attr(data)
