"""Tests for the geocache exception hierarchy."""

import pytest

import geocache
from geocache.errors import (
    CacheError,
    ConfigurationError,
    GeocacheError,
    InvalidCoordinate,
    PreconditionViolation,
    SpaceError,
)


def test_version_prefix():
    """Test messages carry the geocache version."""
    error = GeocacheError("boom")
    assert str(error) == f"[geocache {geocache.__version__}] boom"
    assert error.original_message == "boom"


def test_hierarchy():
    """Test every error is a GeocacheError."""
    assert issubclass(InvalidCoordinate, SpaceError)
    assert issubclass(PreconditionViolation, CacheError)
    for klass in (ConfigurationError, SpaceError, CacheError):
        assert issubclass(klass, GeocacheError)


def test_configuration_error_messages():
    """Test both ways of raising ConfigurationError."""
    error = ConfigurationError("neighborhood_radius", "must be an integer >= 0")
    assert error.param_name == "neighborhood_radius"
    assert "Invalid configuration for 'neighborhood_radius'" in str(error)

    error = ConfigurationError("something else")
    assert error.param_name is None
    assert error.original_message == "something else"

    assert ConfigurationError().original_message == "Invalid configuration"


def test_invalid_coordinate_attributes():
    """Test InvalidCoordinate keeps the offending value."""
    error = InvalidCoordinate(float("nan"))
    assert "is not a finite number" in str(error)
    assert error.reason == "is not a finite number"


def test_precondition_violation_attributes():
    """Test PreconditionViolation keeps the coordinate."""
    with pytest.raises(GeocacheError, match=r"Cache at cell \(1, 2\): not visible"):
        raise PreconditionViolation((1, 2), "not visible")
