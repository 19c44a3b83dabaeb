import sys
from pathlib import Path
from typing import List

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from app.core.criteria import FraudStatus, Platform, Region  # noqa: E402
from app.core.repository import CreatorRecord, InMemoryCreatorRepository  # noqa: E402
from app.core.taxonomy import BrandTaxonomyResolver  # noqa: E402


def make_creator(index: int = 0, **overrides) -> CreatorRecord:
    values = {
        "id": f"creator-{index}",
        "platform": Platform.TWITCH,
        "username": f"creator{index:03d}",
        "display_name": f"Creator {index}",
        "followers": 1000,
        "current_viewers": None,
        "is_live": False,
        "tags": [],
        "region": Region.MEXICO,
        "language": "es",
        "fraud_check": FraudStatus.CLEAN,
    }
    values.update(overrides)
    return CreatorRecord(**values)


def mexican_casino_pool(count: int = 30) -> List[CreatorRecord]:
    platforms = (Platform.TWITCH, Platform.KICK, Platform.YOUTUBE)
    return [
        make_creator(
            i,
            platform=platforms[i % 3],
            followers=100_000 + i * 1_000,
            tags=["casino", "slots"] if i % 2 else ["Casino"],
            region=Region.MEXICO,
        )
        for i in range(count)
    ]


def noise_pool() -> List[CreatorRecord]:
    return [
        make_creator(100, region=Region.COLOMBIA, followers=500_000, tags=["casino"]),
        make_creator(101, region=Region.MEXICO, followers=900_000, tags=["minecraft"]),
        make_creator(102, region=Region.MEXICO, followers=50_000, tags=["casino"]),
        make_creator(103, region=Region.MEXICO, followers=800_000, tags=["casino"], fraud_check=FraudStatus.FLAGGED),
    ]


@pytest.fixture()
def creator_factory():
    return make_creator


@pytest.fixture()
def casino_repository():
    return InMemoryCreatorRepository(mexican_casino_pool() + noise_pool())


@pytest.fixture()
def taxonomy():
    return BrandTaxonomyResolver()
