import pytest

from roifusion.labels import (
    MersenneTwister,
    generate_colors,
    load_class_names,
)


def test_mt19937_default_seed_10000th_output():
    rng = MersenneTwister()
    value = None
    for _ in range(10000):
        value = rng.next_uint32()
    assert value == 4123659995


def test_mt19937_seed_42_first_output():
    assert MersenneTwister(42).next_uint32() == 1608637542


def test_same_seed_gives_same_sequence():
    a = MersenneTwister(7)
    b = MersenneTwister(7)
    assert [a.next_uint32() for _ in range(700)] == [b.next_uint32() for _ in range(700)]


def test_outputs_are_32_bit():
    rng = MersenneTwister(123)
    assert all(0 <= rng.next_uint32() <= 0xFFFFFFFF for _ in range(1000))


def test_uniform_int_within_bounds():
    rng = MersenneTwister(1)
    values = [rng.uniform_int(0, 255) for _ in range(2000)]
    assert min(values) >= 0 and max(values) <= 255
    assert len(set(values)) > 200


def test_uniform_int_single_value_range():
    rng = MersenneTwister(3)
    assert {rng.uniform_int(9, 9) for _ in range(20)} == {9}


def test_uniform_int_full_range_matches_raw_output():
    a = MersenneTwister(11)
    b = MersenneTwister(11)
    assert a.uniform_int(0, 0xFFFFFFFF) == b.next_uint32()


def test_uniform_int_empty_range_raises():
    with pytest.raises(ValueError):
        MersenneTwister().uniform_int(5, 4)


def test_generate_colors_one_per_class_in_range():
    colors = generate_colors(["person", "car", "bicycle"], 42)
    assert len(colors) == 3
    assert all(len(c) == 3 and all(0 <= v <= 255 for v in c) for c in colors)


def test_generate_colors_is_reproducible():
    names = ["a", "b", "c", "d"]
    assert generate_colors(names, 42) == generate_colors(list(names), 42)


def test_generate_colors_prefix_is_stable():
    assert generate_colors(["x", "y", "z"], 42)[:2] == generate_colors(["p", "q"], 42)


def test_generate_colors_empty():
    assert generate_colors([], 42) == []


def test_generate_colors_returns_fresh_list():
    first = generate_colors(["a"], 42)
    first.append((0, 0, 0))
    assert len(generate_colors(["a"], 42)) == 1


def test_load_class_names_strips_carriage_returns(tmp_path):
    path = tmp_path / "names.txt"
    path.write_bytes(b"person\r\ncar\r\nbus\r\n")
    assert load_class_names(path) == ["person", "car", "bus"]


def test_load_class_names_without_final_newline(tmp_path):
    path = tmp_path / "names.txt"
    path.write_text("person\ncar", encoding="utf-8")
    assert load_class_names(path) == ["person", "car"]


def test_load_class_names_keeps_blank_lines(tmp_path):
    path = tmp_path / "names.txt"
    path.write_text("a\n\nb\n", encoding="utf-8")
    assert load_class_names(path) == ["a", "", "b"]


def test_load_class_names_empty_file(tmp_path):
    path = tmp_path / "names.txt"
    path.write_text("", encoding="utf-8")
    assert load_class_names(path) == []


def test_load_class_names_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_class_names(tmp_path / "absent.txt")