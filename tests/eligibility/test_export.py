"""
Export Column Tests.
"""

import pytest

from eligibility.export import collect_keys, eligibility_columns, format_value


class TestEligibilityColumns:
    """Tests for eligibility_columns."""

    def test_headers_in_first_seen_order(self):
        records = [
            {"categoria": "Master"},
            None,
            {"pelotao": "A", "categoria": "Elite"},
        ]

        headers, rows = eligibility_columns(records)

        assert headers == ["Elegibilidade: categoria", "Elegibilidade: pelotao"]
        assert rows == [
            ["Master", ""],
            ["", ""],
            ["Elite", "A"],
        ]

    def test_no_extracted_data(self):
        headers, rows = eligibility_columns([None, {}])

        assert headers == []
        assert rows == [[], []]

    def test_accepts_generator(self):
        headers, rows = eligibility_columns(r for r in [{"apto": True}])

        assert headers == ["Elegibilidade: apto"]
        assert rows == [["true"]]

    def test_collect_keys_skips_non_mappings(self):
        assert collect_keys([{"a": 1}, "corrupted", {"b": 2, "a": 3}]) == ["a", "b"]

    @pytest.mark.parametrize("value,expected", [
        (None, ""),
        (True, "true"),
        (False, "false"),
        (42, "42"),
        (9.5, "9.5"),
        ("Elite", "Elite"),
    ])
    def test_format_value(self, value, expected):
        assert format_value(value) == expected


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
