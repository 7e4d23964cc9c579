"""Tests for placeholder scanning and numbering."""

from boldsql.engine.placeholders import scan_placeholders


class TestPositional:
    """Bare and numbered ? placeholders."""

    def test_no_placeholders(self):
        plan = scan_placeholders("SELECT 1")
        assert plan.sql == "SELECT 1"
        assert plan.parameter_count == 0
        assert plan.names == {}

    def test_bare_placeholders_number_left_to_right(self):
        plan = scan_placeholders("INSERT INTO t (a, b, c) VALUES (?, ?, ?)")
        assert plan.sql == "INSERT INTO t (a, b, c) VALUES (?1, ?2, ?3)"
        assert plan.parameter_count == 3

    def test_numbered_placeholder_keeps_its_number(self):
        plan = scan_placeholders("SELECT ?3, ?")
        assert plan.sql == "SELECT ?3, ?4"
        assert plan.parameter_count == 4
        assert plan.index_of("?3") == 3

    def test_out_of_range_number_left_alone(self):
        plan = scan_placeholders("SELECT ?0")
        assert plan.sql == "SELECT ?0"
        assert plan.parameter_count == 0


class TestNamed:
    """:name, @name and $name placeholders."""

    def test_named_parameters(self):
        plan = scan_placeholders("INSERT INTO p (a, b) VALUES (:firstName, :lastName)")
        assert plan.sql == "INSERT INTO p (a, b) VALUES (?1, ?2)"
        assert plan.index_of(":firstName") == 1
        assert plan.index_of(":lastName") == 2

    def test_repeated_name_reuses_index(self):
        plan = scan_placeholders("SELECT :a, :b, :a")
        assert plan.sql == "SELECT ?1, ?2, ?1"
        assert plan.parameter_count == 2

    def test_names_are_case_sensitive_and_keep_sigil(self):
        plan = scan_placeholders("SELECT :age, @age, $age")
        assert plan.index_of(":age") == 1
        assert plan.index_of("@age") == 2
        assert plan.index_of("$age") == 3
        assert plan.index_of(":AGE") == 0
        assert plan.index_of("age") == 0

    def test_mixed_named_and_bare(self):
        plan = scan_placeholders("SELECT :a, ?, :b")
        assert plan.sql == "SELECT ?1, ?2, ?3"
        assert plan.index_of(":b") == 3

    def test_dollar_inside_identifier_is_not_a_parameter(self):
        plan = scan_placeholders("SELECT col$1 FROM t")
        assert plan.parameter_count == 0


class TestSkippedText:
    """Placeholders inside literals and comments are not parameters."""

    def test_string_literal(self):
        plan = scan_placeholders("SELECT '?', ':x' FROM t WHERE a = ?")
        assert plan.sql == "SELECT '?', ':x' FROM t WHERE a = ?1"
        assert plan.parameter_count == 1

    def test_escaped_quote_in_literal(self):
        plan = scan_placeholders("SELECT 'it''s ?' , ?")
        assert plan.sql == "SELECT 'it''s ?' , ?1"

    def test_quoted_identifiers(self):
        plan = scan_placeholders('SELECT "a?b", [c:d], `e@f` FROM t')
        assert plan.parameter_count == 0

    def test_comments(self):
        sql = "SELECT ? -- what about :this?\n, /* or ? */ :that"
        plan = scan_placeholders(sql)
        assert plan.parameter_count == 2
        assert plan.index_of(":that") == 2
        assert plan.index_of(":this") == 0

    def test_alias_with_period(self):
        plan = scan_placeholders("SELECT firstName as 't.fn' FROM Person")
        assert plan.sql == "SELECT firstName as 't.fn' FROM Person"
