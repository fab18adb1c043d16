from .schema import HarnessConfig, load_harness_config
from .layout import HarnessLayout, build_layout

__all__ = [
    "HarnessConfig",
    "HarnessLayout",
    "load_harness_config",
    "build_layout",
]
