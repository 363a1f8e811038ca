import point_marker.utils.i18n  # noqa: F401
