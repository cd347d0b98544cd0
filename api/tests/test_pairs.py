from rcmatch.services.pairs import canonical_pair, pair_key


def test_pair_key_is_order_independent():
    assert pair_key("b", "a") == pair_key("a", "b") == "a:b"


def test_canonical_pair_sorts_ids():
    assert canonical_pair("zed", "amy") == ("amy", "zed")
