"""Unit tests for name matching between documents and stored records."""

from dataclasses import dataclass

import pytest

from promotor.modules.documents.matching import auto_associate, find_best_match
from promotor.modules.documents.schemas import DocumentAnalysis


@dataclass
class Record:
    name: str


OLIVOS = Record("Residencial Los Olivos")
MARINA = Record("Torre Marina")
NORTE = Record("Construcciones Norte SL")


class TestFindBestMatch:
    """Tests for find_best_match."""

    @pytest.mark.parametrize(
        "name",
        ["Torre Marina", "torre marina", "MARINA", "Proyecto Torre Marina Fase 2"],
    )
    def test_matches_either_direction(self, name):
        assert find_best_match(name, [OLIVOS, MARINA]) is MARINA

    @pytest.mark.parametrize("name", [None, "", "   "])
    def test_blank_name_never_matches(self, name):
        assert find_best_match(name, [OLIVOS, MARINA]) is None

    def test_blank_candidates_are_skipped(self):
        blank = Record("  ")

        assert find_best_match("Torre", [blank, MARINA]) is MARINA

    def test_first_hit_wins(self):
        second = Record("Torre Marina II")

        assert find_best_match("torre", [MARINA, second]) is MARINA

    def test_no_match(self):
        assert find_best_match("Villas del Bosque", [OLIVOS, MARINA]) is None

    def test_accented_names(self):
        record = Record("Arquitectura & Diseño")

        assert find_best_match("ARQUITECTURA & DISEÑO S.L.", [record]) is record

    def test_plain_lowercase_comparison(self):
        record = Record("Straße Bau")

        assert find_best_match("STRASSE BAU", [record]) is None
        assert find_best_match("straße", [record]) is record


class TestAutoAssociate:
    """Tests for auto_associate."""

    def test_matches_project_and_provider(self):
        analysis = DocumentAnalysis.model_validate(
            {"projectName": "Los Olivos", "providerName": "construcciones norte"}
        )

        match = auto_associate(analysis, [OLIVOS, MARINA], [NORTE])

        assert match.project is OLIVOS
        assert match.stakeholder is NORTE

    def test_nothing_detected(self):
        match = auto_associate(DocumentAnalysis(), [OLIVOS], [NORTE])

        assert match.project is None
        assert match.stakeholder is None
