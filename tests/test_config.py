"""Tests for settings, name suggestions and error messages."""

import pytest

from neofermi.config import DEFAULT_CONFIDENCE, DEFAULT_SAMPLE_COUNT, Settings, resolve_sample_count
from neofermi.errors import UndefinedVariableError, UnknownUnitError, format_suggestions
from neofermi.suggestions import find_similar, levenshtein


def test_settings_defaults_and_overrides():
    settings = Settings()
    assert settings.sample_count == DEFAULT_SAMPLE_COUNT == 20000
    assert settings.confidence == DEFAULT_CONFIDENCE == 0.9
    changed = settings.with_overrides(sample_count=100, seed=None)
    assert changed.sample_count == 100
    assert changed.seed is None
    assert settings.sample_count == 20000


@pytest.mark.parametrize("kwargs", [{"confidence": 1.0}, {"confidence": 0}, {"sample_count": 0}, {"sample_count": 2.5}])
def test_settings_validation(kwargs):
    with pytest.raises(ValueError):
        Settings(**kwargs)


def test_resolve_sample_count():
    assert resolve_sample_count(None) == DEFAULT_SAMPLE_COUNT
    assert resolve_sample_count(10) == 10
    with pytest.raises(ValueError):
        resolve_sample_count(True)


def test_levenshtein():
    assert levenshtein("kitten", "sitting") == 3
    assert levenshtein("", "abc") == 3
    assert levenshtein("same", "same") == 0


def test_find_similar_ranks_and_limits():
    candidates = ["meter", "meters", "metre", "liter", "mile", "second"]
    assert find_similar("metr", candidates) == ["meter", "metre", "meters"]
    assert find_similar("meter", ["meter"]) == []
    assert find_similar("xyz", candidates) == []


def test_error_messages_include_suggestions():
    assert format_suggestions([]) == ""
    assert format_suggestions(["a"]) == ". Did you mean 'a'?"
    assert format_suggestions(["a", "b", "c"]) == ". Did you mean 'a', 'b' or 'c'?"
    err = UndefinedVariableError("sped", ["speed"])
    assert str(err) == "Undefined variable: sped. Did you mean 'speed'?"
    assert isinstance(err, NameError)
    unit_err = UnknownUnitError("blorp")
    assert "custom units" in str(unit_err)
    assert isinstance(unit_err, ValueError)
