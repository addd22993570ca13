from __future__ import annotations

import pytest

from tagline import Propagation, Tagline


@pytest.fixture(name="shared")
def shared_fixture() -> Tagline:
    return Tagline(propagation=Propagation.SHARED)


@pytest.fixture(name="copied")
def copied_fixture() -> Tagline:
    return Tagline(propagation=Propagation.COPY)
