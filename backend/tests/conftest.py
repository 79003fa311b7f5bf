"""Shared fixtures: straight test routes, restaurant factories and raw places."""

import pytest

from fakes import meridian_route, raw_place, restaurant


@pytest.fixture
def make_route():
    return meridian_route


@pytest.fixture
def make_restaurant():
    return restaurant


@pytest.fixture
def make_raw_place():
    return raw_place
