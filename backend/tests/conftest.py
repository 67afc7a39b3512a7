# backend/tests/conftest.py
"""共用測試設定"""

import pytest

from sizhu.config import DATA_DIR
from sizhu.services.astronomy import ApproximateSolarTerms
from sizhu.services.solar_term import PrecomputedSolarTerms
from sizhu.services.term_source import SolarTermSource


@pytest.fixture(scope="session")
def precomputed():
    """套件內附的節氣表"""
    return PrecomputedSolarTerms.load(DATA_DIR / "solar_terms.json")


@pytest.fixture
def source(precomputed):
    """節氣表 + 天文近似計算"""
    return SolarTermSource(precomputed, ApproximateSolarTerms(1800, 2200))


@pytest.fixture
def table_only_source(precomputed):
    """只有節氣表，停用近似計算"""
    return SolarTermSource(precomputed)
