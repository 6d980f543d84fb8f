from minnow.helpers import concat, pretty_print


def test_printable_passes_through():
    data = b"hello world"
    assert pretty_print(data) == data.decode()


def test_quote_is_escaped():
    assert pretty_print(b'"') == "\\x22"


def test_unprintable_bytes_escaped():
    assert pretty_print(b"\x00\xff") == "\\x00\\xff"


def test_long_input_truncated_to_default_length():
    result = pretty_print(b"a" * 100)
    assert len(result) == 32
    assert result.endswith("...")


def test_tiny_max_length_appends_ellipsis():
    result = pretty_print(b"abcdef", 2)
    assert result.startswith("ab")
    assert result.endswith("...")


def test_exact_length_not_truncated():
    data = b"x" * 32
    assert pretty_print(data) == data.decode()


def test_str_and_bytes_agree():
    assert pretty_print("hi there") == pretty_print(b"hi there")


def test_concat_joins_in_order():
    assert concat([b"ab", b"", b"cd"]) == b"abcd"


def test_concat_length_is_sum():
    parts = [b"x" * n for n in range(10)]
    result = concat(parts)
    assert len(result) == sum(len(p) for p in parts)
    assert result.startswith(parts[1])


def test_concat_of_nothing_is_empty():
    assert concat([]) == b""