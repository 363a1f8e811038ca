"""Default tunables for the annotation canvas."""

import os
from typing import Dict, Optional

from easydict import EasyDict as edict

from point_marker.utils.env import load_cfg_from_env


def get_default_config() -> edict:
    cfg = edict()

    cfg.viewport = edict()
    cfg.viewport.zoom_step = 1.25
    cfg.viewport.min_scale = 1.0
    cfg.viewport.max_scale = 5.0
    cfg.viewport.pan_step = 50

    cfg.hit_test = edict()
    cfg.hit_test.vertex_radius = 10
    cfg.hit_test.point_radius = 8

    cfg.drag = edict()
    cfg.drag.threshold = 3

    cfg.labels = edict()
    cfg.labels.max_length = 4

    cfg.sync = edict()
    cfg.sync.delete_tolerance = 1.0

    cfg.resize = edict()
    cfg.resize.debounce_seconds = 0.1

    return cfg


def get_config(env: Optional[Dict[str, str]] = None) -> edict:
    """Defaults with ``POINT_MARKER_*`` environment overrides applied."""
    if env is None:
        env = dict(os.environ)
    return load_cfg_from_env(get_default_config(), env)
