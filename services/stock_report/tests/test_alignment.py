from stock_report.alignment import align_by_count, align_by_position, build_variation
from stock_report.models import HeaderLayout, Token
from stock_report.numeral import parse_quantity
from stock_report.tokenizer import tokenize_line


def _layout(header):
    tokens = tokenize_line(header)
    return HeaderLayout(marker=tokens[0], sizes=tuple(tokens[1:]))


def _numbers(line):
    return [(token, parse_quantity(token.text)) for token in tokenize_line(line)[2:]]


def test_equal_counts_map_one_to_one():
    alignment = align_by_position(_layout("Qtde 04 06 08"), _numbers("A PRODUZIR: 10 20 30"))
    assert alignment.tamanhos == {"04": 10, "06": 20, "08": 30}
    assert alignment.discarded_total is None
    assert alignment.total == 60


def test_leading_value_under_the_marker_is_the_grand_total():
    header = " " * 12 + "Qtde  PP  P   M   G"
    alignment = align_by_position(_layout(header), _numbers("A PRODUZIR:  12    3   4"))
    assert alignment.discarded_total == 12
    assert alignment.tamanhos == {"PP": 3, "P": 4, "M": 0, "G": 0}
    assert alignment.total == 7


def test_sparse_values_go_to_the_nearest_column():
    alignment = align_by_position(_layout("Qtde  PP  P   M   G"), _numbers("A PRODUZIR:   5   7"))
    assert alignment.tamanhos == {"PP": 0, "P": 0, "M": 5, "G": 7}


def test_equidistant_value_goes_to_the_leftmost_label():
    layout = _layout("Qtde  P   M")
    alignment = align_by_position(layout, [(Token("5", 8, 9), 5)])
    assert alignment.tamanhos == {"P": 5, "M": 0}


def test_extra_values_beyond_the_grade_are_never_assigned():
    alignment = align_by_position(_layout("Qtde 04 06 08"), _numbers("A PRODUZIR: 60 10 20 30 999"))
    assert alignment.discarded_total == 60
    assert alignment.tamanhos == {"04": 10, "06": 20, "08": 30}


def test_sole_value_is_never_discarded():
    alignment = align_by_position(_layout("Qtde UN"), _numbers("A PRODUZIR: -456"))
    assert alignment.tamanhos == {"UN": -456}
    assert alignment.discarded_total is None


def test_header_without_sizes_uses_the_unique_size():
    layout = HeaderLayout(marker=Token("Qtde", 0, 4))
    alignment = align_by_position(layout, _numbers("A PRODUZIR: -456 12"))
    assert alignment.grade == ("UN",)
    assert alignment.tamanhos == {"UN": -456}


def test_no_numbers_means_no_alignment():
    assert align_by_position(_layout("Qtde P M"), []) is None


def test_count_alignment_drops_leading_total_by_default():
    alignment = align_by_count(["P", "M", "G"], [30, 10, 10, 10])
    assert alignment.tamanhos == {"P": 10, "M": 10, "G": 10}
    assert alignment.discarded_total == 30


def test_count_alignment_drops_trailing_total_when_declared():
    alignment = align_by_count(["P", "M", "G"], [1, 2, 3, 6], trailing_total=True)
    assert alignment.tamanhos == {"P": 1, "M": 2, "G": 3}
    assert alignment.discarded_total == 6


def test_count_alignment_pads_and_truncates():
    assert align_by_count(["P", "M", "G"], [1]).tamanhos == {"P": 1, "M": 0, "G": 0}
    assert align_by_count(["P"], [1, 2, 3]).tamanhos == {"P": 1}


def test_count_alignment_without_grade():
    assert align_by_count([], [9]).tamanhos == {"UN": 9}
    assert align_by_count([], [9, 8]) is None
    assert align_by_count(["P"], []) is None


def test_build_variation_fills_every_grade_label():
    alignment = align_by_count(["6", "8"], [4])
    variation = build_variation("100.AZ", alignment)
    assert variation.grade == ["06", "08"]
    assert variation.tamanhos == {"06": 4, "08": 0}
    assert variation.total == 4
    assert variation.product_code == "100"
