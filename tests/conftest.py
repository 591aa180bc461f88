"""
Shared fixtures for the pz_core / pz_editor tests.

Run with: pytest tests/ -v
"""

import copy
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from pz_core.config.settings import PipelineConfig, reset_config
from pz_core.mapping.form_schema import clear_form_cache
from pz_core.mapping.loader import reset_loader
from pz_core.validation.xsd_validator import reset_validator


SAMPLE_FORM_DATA = {
    "generalInfo": {
        "documentNumber": "ПЗ-2025-001",
        "documentDate": "2025-03-01",
        "year": 2025,
        "projectName": "Жилой дом с подземным паркингом",
    },
    "objectInfo": {
        "objectType": "nonIndustrial",
        "address": "г. Москва, ул. Тверская, д. 1",
        "cadastralNumber": "77:01:0001001:1234",
        "totalArea": 1250,
        "buildingVolume": "5400,5",
        "floors": 5,
        "description": "<p>Жилой дом &amp; паркинг</p><p>Монолитный каркас</p>",
    },
    "contractor": {
        "name": "ООО \"Заказчик\"",
        "inn": "7707083893",
        "ogrn": "1027700132195",
        "phone": "89991234567",
        "email": "info@example.ru",
    },
    "designer": {
        "name": "ООО \"СтройПроект\"",
        "inn": "500100732259",
        "phone": "+7 (495) 123-45-67",
    },
    "documentation": {
        "usedNorms": [
            "СП 42.13330.2016 Градостроительство",
            "СП 54.13330.2022 Здания жилые многоквартирные",
        ],
        "signers": [
            {"FamilyName": "Иванов", "FirstName": "Иван", "Position": "ГИП", "SNILS": "112-233-445 95"},
            {"FamilyName": "Петров", "FirstName": "Петр"},
        ],
    },
    "conclusions": {
        "designerAssurance": "<p>Проектная документация разработана в соответствии с заданием.</p>",
    },
}


@pytest.fixture
def form_data():
    """A complete form that generates valid 01.05 XML."""
    return copy.deepcopy(SAMPLE_FORM_DATA)


@pytest.fixture
def config():
    """Default configuration (bundled schemas), independent of environment."""
    return PipelineConfig()


@pytest.fixture(autouse=True)
def reset_globals():
    """Drop global config and caches between tests."""
    yield
    reset_config()
    reset_loader()
    reset_validator()
    clear_form_cache()
