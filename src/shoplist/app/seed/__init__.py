"""Development seeding of dummy data."""

from .data import DummyData, build_dummy_data
from .seed_routes import configure_seed_router, seed_dummy_data

__all__ = [
    "DummyData",
    "build_dummy_data",
    "configure_seed_router",
    "seed_dummy_data",
]
