from minnow.rng import get_random_engine


def test_engines_are_independently_seeded():
    first = [get_random_engine().getrandbits(64) for _ in range(4)]
    assert len(set(first)) == len(first)


def test_engine_state_round_trip():
    engine = get_random_engine()
    state = engine.getstate()
    values = [engine.randrange(1000) for _ in range(10)]
    engine.setstate(state)
    assert [engine.randrange(1000) for _ in range(10)] == values


def test_engine_values_in_range():
    engine = get_random_engine()
    values = [engine.randint(10, 199) for _ in range(500)]
    assert all(10 <= v <= 199 for v in values)


def test_engine_shuffle_preserves_elements():
    engine = get_random_engine()
    items = list(range(128))
    shuffled = items[:]
    engine.shuffle(shuffled)
    assert sorted(shuffled) == items