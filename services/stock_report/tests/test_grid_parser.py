import math

from stock_report.grid_parser import find_reference, parse_rows, row_variations

BLOCK_ROWS = [
    ["Relatorio de Estoque", None, None],
    ["Referencia", "100.01", None],
    ["Grade", "P", "M", "G"],
    ["A PRODUZIR", 30, 10, 10, 10],
    [],
    ["Referencia", "100.02", None],
    ["Grade", "P", "M", "G"],
    ["A PRODUZIR", 3, 1, 1, 1],
]

INLINE_ROWS = [
    ["REFTAM", "P", "M", "G", "TOTAL"],
    ["200.AZ", "1", "2", "3", "6"],
    ["200.VM", 4.0, 5.0, 6.0, 15.0],
]


def test_block_layout_reads_grade_and_quantity_rows():
    snapshots = parse_rows(BLOCK_ROWS)
    assert len(snapshots) == 1
    snapshot = snapshots[0]
    assert snapshot.product_code == "100"
    assert snapshot.grade == ["P", "M", "G"]
    first = snapshot.variation("100.01")
    assert first.tamanhos == {"P": 10, "M": 10, "G": 10}
    assert first.total == 30
    assert snapshot.variation("100.02").total == 3


def test_inline_layout_drops_the_trailing_total_column():
    snapshot = parse_rows(INLINE_ROWS)[0]
    assert [v.ref for v in snapshot.variations] == ["200.AZ", "200.VM"]
    assert snapshot.variation("200.AZ").tamanhos == {"P": 1, "M": 2, "G": 3}
    assert snapshot.variation("200.VM").tamanhos == {"P": 4, "M": 5, "G": 6}
    assert snapshot.warnings == []


def test_quantity_line_in_a_single_cell():
    rows = [["300.10"], ["Grade: P M"], ["A PRODUZIR: -4 -1 -3"]]
    variation = parse_rows(rows)[0].variations[0]
    assert variation.tamanhos == {"P": -1, "M": -3}
    assert variation.total == -4


def test_unique_size_word_collapses_the_grade():
    rows = [["300.10"], ["Grade: 2 - UNICA"], ["A PRODUZIR:", "-456"]]
    variation = parse_rows(rows)[0].variations[0]
    assert variation.grade == ["UNICA"]
    assert variation.tamanhos == {"UNICA": -456}


def test_single_value_without_grade_uses_the_unique_size():
    variation = parse_rows([["400.AB", "12"]])[0].variations[0]
    assert variation.grade == ["UN"]
    assert variation.tamanhos == {"UN": 12}


def test_several_values_without_grade_are_skipped():
    assert parse_rows([["400.AB", "12", "13"]]) == []


def test_total_like_and_padded_references_are_rejected():
    for word in ("100.TOT", "100.TOTA", "100.0", "100.00", "10.AB", "100.ABCDE"):
        assert find_reference([(0, word)]) is None
    assert find_reference([(0, "Ref:"), (1, "100.01")]) == (1, "100.01")
    assert find_reference([(0, "100.a1")]) == (0, "100.A1")


def test_grade_below_reference_stops_at_the_next_reference():
    rows = [["500.AA"], ["500.BB"], ["Grade", "P", "M"], ["A PRODUZIR", "1", "2"]]
    variations = row_variations(rows)
    assert [v.ref for v in variations] == ["500.BB"]
    assert variations[0].tamanhos == {"P": 1, "M": 2}


def test_empty_and_nan_cells_are_ignored():
    rows = [[math.nan, "600.AZ", None], [None, "Grade", "PP", "P"], ["A PRODUZIR", None, 2, 3]]
    variation = parse_rows(rows)[0].variations[0]
    assert variation.tamanhos == {"PP": 2, "P": 3}


def test_product_order_applies_to_grid_mode():
    rows = INLINE_ROWS + [["100.AZ", "1", "1", "1", "3"]]
    codes = [s.product_code for s in parse_rows(rows, product_order=["100"])]
    assert codes == ["100", "200"]


def test_grid_mode_never_raises_on_odd_content():
    assert parse_rows([]) == []
    assert parse_rows([[None], ["TOTAL GERAL", 10]]) == []
