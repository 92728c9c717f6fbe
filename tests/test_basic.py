"""Basic smoke tests to verify setup."""


def test_imports():
    """Test that basic imports work."""
    import artifact_lanes  # noqa: F401
    import artifact_lanes.cli  # noqa: F401


def test_version():
    """Test that version is defined."""
    import artifact_lanes

    assert artifact_lanes.__version__
