"""Tests for GCE label sanitization."""

from __future__ import annotations

import pytest

from pvclabeler.config import MAX_LABEL_LENGTH, MAX_LABELS_PER_DISK
from pvclabeler.sanitize import sanitize_key, sanitize_keys, sanitize_labels, sanitize_value

# Inputs exercising every step of the pipeline
TRICKY_INPUTS = [
    "",
    "app",
    "APP",
    "123-app",
    "kubernetes.io/app=name:v1",
    "app--name___test",
    "app-name---_",
    "-_-_-",
    "___leading",
    "--leading",
    "a b,c;d+e",
    "café-app",
    "日本語/ラベル",
    "١٢٣",
    "x²",
    "İstanbul",
    "!@#$%^&*()",
    "a" * 70,
    "a" * 62 + "-b",
    "é" * 40,
    "k8s.io/" + "x" * 80,
    "9" * 100,
    "_" * 100 + "a",
]


class TestSanitizeKey:
    """Tests for sanitize_key."""

    @pytest.mark.parametrize(
        ("key", "expected"),
        [
            ("app", "app"),
            ("APP", "app"),
            ("123-app", "k123-app"),
            ("kubernetes.io/app=name:v1", "kubernetes-io_app-name-v1"),
            ("café-app", "café-app"),
            ("a" * 70, "a" * 63),
            ("app--name___test", "app-name_test"),
            ("app-name---_", "app-name"),
            ("", ""),
            ("!@#$%^&*()", ""),
            ("app_name_test", "app_name_test"),
            ("k8s.io/persistent-volume/mount-path", "k8s-io_persistent-volume_mount-path"),
        ],
    )
    def test_known_keys(self, key: str, expected: str) -> None:
        """Test sanitizing representative Kubernetes label keys."""
        assert sanitize_key(key) == expected

    def test_leading_separator_gets_prefix(self) -> None:
        """Test that keys starting with a separator are prefixed with k."""
        assert sanitize_key("_private") == "k_private"
        assert sanitize_key("-x") == "k-x"

    def test_only_separators_collapse_to_prefix(self) -> None:
        """Test that a key of separators keeps only the prefix."""
        assert sanitize_key("__") == "k"

    def test_rarer_punctuation_becomes_dash(self) -> None:
        """Test that space, comma, semicolon and plus become dashes."""
        assert sanitize_key("a b,c;d+e") == "a-b-c-d-e"

    def test_international_letters_kept(self) -> None:
        """Test that non-ASCII letters survive sanitization."""
        assert sanitize_key("日本語/ラベル") == "日本語_ラベル"

    def test_international_digit_gets_prefix(self) -> None:
        """Test that a key starting with a non-ASCII digit is prefixed."""
        assert sanitize_key("١٢٣") == "k١٢٣"

    def test_truncation_trims_dangling_separator(self) -> None:
        """Test that a separator left at the cut point is removed."""
        assert sanitize_key("a" * 62 + "-b") == "a" * 62

    def test_truncation_drops_partial_character(self) -> None:
        """Test that multi-byte characters are not split at the cut point."""
        result = sanitize_key("é" * 40)

        assert result == "é" * 31
        assert len(result.encode("utf-8")) <= MAX_LABEL_LENGTH


class TestSanitizeValue:
    """Tests for sanitize_value."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("value-123", "value-123"),
            ("VALUE_123", "value_123"),
            ("value.with:special/chars", "value-with-special_chars"),
            ("", ""),
            ("v" * 70, "v" * 63),
            ("value--with___separators", "value-with_separators"),
            ("value-123---_", "value-123"),
            ("café-123", "café-123"),
        ],
    )
    def test_known_values(self, value: str, expected: str) -> None:
        """Test sanitizing representative Kubernetes label values."""
        assert sanitize_value(value) == expected

    def test_value_may_start_with_digit(self) -> None:
        """Test that values are not prefixed."""
        assert sanitize_value("123") == "123"

    def test_leading_separator_kept_for_values(self) -> None:
        """Test that leading separators are collapsed but not stripped."""
        assert sanitize_value("--lead") == "-lead"

    def test_non_decimal_digits_dropped(self) -> None:
        """Test that superscripts and other non-decimal numerals are removed."""
        assert sanitize_value("x²") == "x"


class TestSanitizeProperties:
    """Invariants that hold for every input."""

    @pytest.mark.parametrize("text", TRICKY_INPUTS)
    def test_idempotent(self, text: str) -> None:
        """Test that sanitizing twice equals sanitizing once."""
        assert sanitize_key(sanitize_key(text)) == sanitize_key(text)
        assert sanitize_value(sanitize_value(text)) == sanitize_value(text)

    @pytest.mark.parametrize("text", TRICKY_INPUTS)
    def test_length_bound(self, text: str) -> None:
        """Test that output never exceeds 63 characters or bytes."""
        for result in (sanitize_key(text), sanitize_value(text)):
            assert len(result) <= MAX_LABEL_LENGTH
            assert len(result.encode("utf-8")) <= MAX_LABEL_LENGTH

    @pytest.mark.parametrize("text", TRICKY_INPUTS)
    def test_key_starts_with_letter(self, text: str) -> None:
        """Test that non-empty keys start with a letter."""
        result = sanitize_key(text)
        if result:
            assert result[0].isalpha()

    @pytest.mark.parametrize("text", TRICKY_INPUTS)
    def test_no_doubled_or_trailing_separators(self, text: str) -> None:
        """Test that separators are never doubled or trailing."""
        for result in (sanitize_key(text), sanitize_value(text)):
            assert "--" not in result
            assert "__" not in result
            if result:
                assert result[-1] not in "-_"


class TestSanitizeLabels:
    """Tests for sanitize_labels."""

    def test_valid_labels_unchanged(self) -> None:
        """Test that already valid labels pass through."""
        labels = {"app": "nginx", "env": "prod", "region": "us-east1"}

        assert sanitize_labels(labels) == labels

    def test_keys_and_values_sanitized(self) -> None:
        """Test that keys and values are both sanitized."""
        labels = {"Kubernetes.io/app": "NGINX-1.0", "123-region": "US-EAST1"}

        assert sanitize_labels(labels) == {
            "kubernetes-io_app": "nginx-1-0",
            "k123-region": "us-east1",
        }

    def test_empty_keys_dropped_empty_values_kept(self) -> None:
        """Test that invalid keys are dropped while empty values are allowed."""
        labels = {"app": "", "env": "prod", "": "invalid", "!!!": "also-invalid"}

        assert sanitize_labels(labels) == {"app": "", "env": "prod"}

    def test_cardinality_capped(self) -> None:
        """Test that at most 64 labels are produced."""
        labels = {f"label-{i}": str(i) for i in range(100)}

        result = sanitize_labels(labels)

        assert len(result) == MAX_LABELS_PER_DISK

    def test_cardinality_never_exceeds_input(self) -> None:
        """Test that sanitizing never adds labels."""
        labels = {"a": "1", "b": "2", "": "3"}

        assert len(sanitize_labels(labels)) <= min(MAX_LABELS_PER_DISK, len(labels))

    def test_colliding_keys_merge(self) -> None:
        """Test that keys sanitizing to the same key produce one label."""
        result = sanitize_labels({"a.b": "first", "a-b": "second"})

        assert list(result) == ["a-b"]
        assert result["a-b"] in ("first", "second")

    def test_empty_map(self) -> None:
        """Test sanitizing an empty label map."""
        assert sanitize_labels({}) == {}


class TestSanitizeKeys:
    """Tests for sanitize_keys."""

    def test_valid_keys_unchanged(self) -> None:
        """Test that valid keys pass through in order."""
        assert sanitize_keys(["app", "env", "region"]) == ["app", "env", "region"]

    def test_invalid_keys_sanitized_or_dropped(self) -> None:
        """Test sanitizing a mix of keys."""
        keys = ["Kubernetes.io/app", "123-region", "", "!@#"]

        assert sanitize_keys(keys) == ["kubernetes-io_app", "k123-region"]

    def test_empty_list(self) -> None:
        """Test sanitizing no keys."""
        assert sanitize_keys([]) == []

    def test_all_invalid_keys(self) -> None:
        """Test that only keys with usable characters survive."""
        assert sanitize_keys(["", "!@#", "123"]) == ["k123"]

    def test_accepts_any_iterable(self) -> None:
        """Test that generators are accepted."""
        assert sanitize_keys(key for key in ("A", "B")) == ["a", "b"]
